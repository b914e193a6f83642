import heapq
import logging
from typing import List

from ..domain.errors import CyclePresentError

logger = logging.getLogger(__name__)


def topological_order(graph) -> List:
    """
    Deterministic topological order of the task ids in `graph`.

    Kahn's algorithm: a ready queue seeded with every task that has no
    predecessors; popping a task releases its successors once all of their
    incoming edges are consumed. When several tasks are ready at once the
    one with the lowest (priority rank, due date, task id) goes first, so
    the result doubles as a suggested execution sequence.

    Raises:
        CyclePresentError: If some tasks never become ready
    """
    in_degree = {}
    ready = []
    for index, task in enumerate(graph.tasks()):
        degree = graph.in_degree(task.id)
        in_degree[task.id] = degree
        if degree == 0:
            heapq.heappush(ready, (task.sort_key(), index, task.id))

    positions = {task_id: i for i, task_id in enumerate(in_degree)}
    order = []
    while ready:
        _, _, task_id = heapq.heappop(ready)
        order.append(task_id)
        # One decrement per edge, so parallel edges between a pair count fully
        for edge in graph.successors_of(task_id):
            successor_id = edge.successor_id
            in_degree[successor_id] -= 1
            if in_degree[successor_id] == 0:
                successor = graph.task(successor_id)
                heapq.heappush(
                    ready,
                    (successor.sort_key(), positions[successor_id], successor_id),
                )

    if len(order) != len(in_degree):
        remaining = [t for t, degree in in_degree.items() if degree > 0]
        logger.error(
            "Topological sort stalled with %d unresolved tasks", len(remaining)
        )
        raise CyclePresentError(remaining)

    return order


def suggest_sequence(graph) -> list:
    """Tasks in the order they should be worked on."""
    return [graph.task(task_id) for task_id in topological_order(graph)]


def is_valid_order(graph, order) -> bool:
    """Check that `order` lists every task once and respects every edge."""
    if len(order) != len(graph) or set(order) != set(graph.task_ids()):
        return False
    position = {task_id: i for i, task_id in enumerate(order)}
    return all(
        position[edge.predecessor_id] < position[edge.successor_id]
        for edge in graph.edges()
    )
