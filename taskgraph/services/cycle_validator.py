"""
Cycle detection for candidate dependency edges.

A new edge predecessor -> successor closes a cycle exactly when the
predecessor is already reachable from the successor. One reachability search
therefore covers both the direct case (successor already points back at the
predecessor) and chains of any length.
"""

import logging

from ..domain.errors import UnknownTaskError

logger = logging.getLogger(__name__)


def find_cycle_path(graph, predecessor_id, successor_id):
    """
    Return the existing path successor -> ... -> predecessor, or None.

    Depth-first search from `successor_id` along successor edges, with a
    visited set so every task and edge is examined at most once. The graph is
    only read. A self-loop candidate yields the one-element path.

    Args:
        graph: A DependencyGraph (anything with `successor_ids`)
        predecessor_id: Proposed predecessor of the new edge
        successor_id: Proposed successor of the new edge

    Returns:
        list of task ids, or None if no cycle would be created
    """
    if predecessor_id == successor_id:
        return [successor_id]
    if successor_id not in graph or predecessor_id not in graph:
        return None

    parents = {successor_id: None}
    stack = [successor_id]
    while stack:
        current = stack.pop()
        for next_id in graph.successor_ids(current):
            if next_id in parents:
                continue
            parents[next_id] = current
            if next_id == predecessor_id:
                path = [next_id]
                while parents[path[-1]] is not None:
                    path.append(parents[path[-1]])
                path.reverse()
                logger.debug(
                    "Edge %s -> %s would close cycle via %s",
                    predecessor_id,
                    successor_id,
                    path,
                )
                return path
            stack.append(next_id)
    return None


def would_create_cycle(graph, predecessor_id, successor_id) -> bool:
    """True if adding predecessor -> successor would make the graph cyclic."""
    return find_cycle_path(graph, predecessor_id, successor_id) is not None


def check_circular_dependency(graph, predecessor_id, successor_id):
    """
    Query form used by API callers.

    Raises:
        UnknownTaskError: If either task is not in the graph

    Returns:
        dict with a single `wouldCreateCircularDependency` flag
    """
    for task_id in (predecessor_id, successor_id):
        if task_id not in graph:
            raise UnknownTaskError(task_id)
    return {
        "wouldCreateCircularDependency": would_create_cycle(
            graph, predecessor_id, successor_id
        )
    }
