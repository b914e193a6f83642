import itertools
import logging
from typing import Dict, Iterable, List, Optional

import networkx as nx

from .dependency import DependencyEdge, DependencyType
from .errors import (
    CircularDependencyError,
    DuplicateEdgeError,
    EdgeNotFoundError,
    SelfDependencyError,
    UnknownTaskError,
)
from .task import Task
from ..services.cycle_validator import find_cycle_path

logger = logging.getLogger(__name__)


class DependencyGraph:
    """
    The tasks of one project and the typed dependency edges between them.

    Nodes are task ids carrying their Task; edges are keyed by edge id so
    several relationships between the same pair of tasks can coexist. Every
    insertion is validated before the graph is touched, so the edge set is
    acyclic at all times.
    """

    def __init__(self, tasks: Optional[Iterable[Task]] = None):
        self._graph = nx.MultiDiGraph()
        self._edges: Dict[object, DependencyEdge] = {}
        self._keys = set()
        self._sequence = itertools.count()
        self.generation = 0

        for task in tasks or []:
            self.add_task(task)

    @classmethod
    def build(
        cls, tasks: Iterable[Task], edges: Iterable[DependencyEdge]
    ) -> "DependencyGraph":
        """
        Construct a graph from a persisted snapshot.

        Each edge goes through add_edge, so an inconsistent edge set is
        rejected at load time rather than during analysis.
        """
        graph = cls(tasks)
        for edge in edges:
            graph.add_edge(edge)
        return graph

    # Nodes

    def add_task(self, task: Task) -> "DependencyGraph":
        """Add a task, or replace the attributes of an existing one."""
        if not isinstance(task, Task):
            raise TypeError("Expected a Task instance")
        self._graph.add_node(task.id, task=task)
        return self

    def remove_task(self, task_id) -> List[DependencyEdge]:
        """Remove a task and every edge touching it. Returns the dropped edges."""
        if task_id not in self._graph:
            raise UnknownTaskError(task_id)
        dropped = self.predecessors_of(task_id) + self.successors_of(task_id)
        for edge in dropped:
            self._forget(edge)
        self._graph.remove_node(task_id)
        if dropped:
            self.generation += 1
        return dropped

    def task(self, task_id) -> Task:
        if task_id not in self._graph:
            raise UnknownTaskError(task_id)
        return self._graph.nodes[task_id]["task"]

    def tasks(self) -> List[Task]:
        return [data["task"] for _, data in self._graph.nodes(data=True)]

    def task_ids(self) -> List:
        return list(self._graph.nodes())

    def __contains__(self, task_id):
        return task_id in self._graph

    def __len__(self):
        return self._graph.number_of_nodes()

    # Edges

    def add_edge(self, edge: DependencyEdge) -> DependencyEdge:
        """
        Insert an edge after validating it.

        Raises:
            UnknownTaskError: If either endpoint is not in the task set
            SelfDependencyError: If predecessor and successor are the same task
            DuplicateEdgeError: If an identical relationship already exists
            CircularDependencyError: If the edge would close a cycle; the
                graph is left unchanged
        """
        self.validate_edge(edge)

        self._graph.add_edge(
            edge.predecessor_id,
            edge.successor_id,
            key=edge.id,
            edge=edge,
            seq=next(self._sequence),
        )
        self._edges[edge.id] = edge
        self._keys.add(edge.key)
        self.generation += 1
        logger.debug(
            "Added dependency %s: %s -> %s (%s)",
            edge.id,
            edge.predecessor_id,
            edge.successor_id,
            edge.type.code,
        )
        return edge

    def validate_edge(self, edge: DependencyEdge) -> None:
        """Run every insertion check for `edge` without mutating the graph."""
        predecessor_id, successor_id = edge.predecessor_id, edge.successor_id

        if predecessor_id not in self._graph:
            raise UnknownTaskError(predecessor_id)
        if successor_id not in self._graph:
            raise UnknownTaskError(successor_id)
        if predecessor_id == successor_id:
            raise SelfDependencyError(predecessor_id)
        if edge.key in self._keys or edge.id in self._edges:
            raise DuplicateEdgeError(predecessor_id, successor_id, edge.type)

        cycle = find_cycle_path(self, predecessor_id, successor_id)
        if cycle is not None:
            raise CircularDependencyError(predecessor_id, successor_id, cycle)

    def connect(
        self, predecessor_id, successor_id, type=DependencyType.FINISH_TO_START
    ) -> DependencyEdge:
        """Shorthand for add_edge with a generated edge id."""
        return self.add_edge(DependencyEdge.create(predecessor_id, successor_id, type))

    def remove_edge(self, edge_id) -> DependencyEdge:
        edge = self._edges.get(edge_id)
        if edge is None:
            raise EdgeNotFoundError(edge_id)
        self._forget(edge)
        self._graph.remove_edge(edge.predecessor_id, edge.successor_id, key=edge_id)
        self.generation += 1
        logger.debug("Removed dependency %s", edge_id)
        return edge

    def _forget(self, edge):
        del self._edges[edge.id]
        self._keys.discard(edge.key)

    def edge(self, edge_id) -> DependencyEdge:
        try:
            return self._edges[edge_id]
        except KeyError:
            raise EdgeNotFoundError(edge_id)

    def has_edge_id(self, edge_id) -> bool:
        return edge_id in self._edges

    def edges(self) -> List[DependencyEdge]:
        return list(self._edges.values())

    def has_edge_between(self, predecessor_id, successor_id, type=None) -> bool:
        if type is None:
            return self._graph.has_edge(predecessor_id, successor_id)
        return (predecessor_id, successor_id, DependencyType.parse(type)) in self._keys

    def successors_of(self, task_id) -> List[DependencyEdge]:
        """Outgoing edges of `task_id`, in insertion order."""
        if task_id not in self._graph:
            raise UnknownTaskError(task_id)
        return self._ordered(self._graph.out_edges(task_id, data=True))

    def predecessors_of(self, task_id) -> List[DependencyEdge]:
        """Incoming edges of `task_id`, in insertion order."""
        if task_id not in self._graph:
            raise UnknownTaskError(task_id)
        return self._ordered(self._graph.in_edges(task_id, data=True))

    @staticmethod
    def _ordered(edge_view):
        records = sorted(edge_view, key=lambda item: item[2]["seq"])
        return [data["edge"] for _, _, data in records]

    def successor_ids(self, task_id) -> List:
        """Distinct successor task ids, in first-edge order."""
        return list(dict.fromkeys(e.successor_id for e in self.successors_of(task_id)))

    def predecessor_ids(self, task_id) -> List:
        return list(
            dict.fromkeys(e.predecessor_id for e in self.predecessors_of(task_id))
        )

    def descendants(self, task_id) -> set:
        """Every task reachable from `task_id` along successor edges."""
        if task_id not in self._graph:
            raise UnknownTaskError(task_id)
        return nx.descendants(self._graph, task_id)

    def in_degree(self, task_id) -> int:
        return self._graph.in_degree(task_id)

    def sources(self) -> List:
        """Tasks with no predecessors."""
        return [n for n in self._graph.nodes() if self._graph.in_degree(n) == 0]

    def sinks(self) -> List:
        """Tasks with no successors."""
        return [n for n in self._graph.nodes() if self._graph.out_degree(n) == 0]

    def adjacency(self) -> Dict:
        """Successor edge ids per task; a structural fingerprint of the graph."""
        return {
            task_id: [edge.id for edge in self.successors_of(task_id)]
            for task_id in self._graph.nodes()
        }

    def copy(self) -> "DependencyGraph":
        return DependencyGraph.build(self.tasks(), self.edges())

    def to_networkx(self) -> nx.MultiDiGraph:
        """A detached networkx view, edges annotated with their type."""
        graph = nx.MultiDiGraph()
        for task in self.tasks():
            graph.add_node(task.id, **task.to_dict())
        for edge in self.edges():
            graph.add_edge(
                edge.predecessor_id,
                edge.successor_id,
                key=edge.id,
                type=edge.type.value,
            )
        return graph

    def __repr__(self):
        return f"DependencyGraph(tasks={len(self)}, edges={len(self._edges)})"
