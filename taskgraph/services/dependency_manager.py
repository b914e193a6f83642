import logging
import threading
from abc import ABC, abstractmethod
from collections import defaultdict
from typing import Dict, Iterable, List, Optional

from ..domain.dependency import DependencyEdge, DependencyType
from ..domain.errors import DependencyValidationError, UnknownTaskError
from ..domain.graph import DependencyGraph
from ..domain.task import Task
from .critical_path import (
    DEFAULT_TOLERANCE,
    CriticalPathAnalysis,
    CriticalPathAnalyzer,
)
from .sequencer import suggest_sequence

logger = logging.getLogger(__name__)


class ValidationResult:
    """Outcome of a non-mutating dependency check."""

    def __init__(self, valid: bool, message: Optional[str] = None, error=None):
        self.valid = valid
        self.message = message
        self.error = error

    def __bool__(self):
        return self.valid

    def to_dict(self):
        result = {"valid": self.valid}
        if self.message:
            result["message"] = self.message
        return result

    def __repr__(self):
        return f"ValidationResult(valid={self.valid}, message={self.message!r})"


def validate_dependency(
    graph: DependencyGraph,
    predecessor_id,
    successor_id,
    type=DependencyType.FINISH_TO_START,
) -> ValidationResult:
    """
    Check whether predecessor -> successor may be added, without raising.

    The verdict is the one add_edge would reach; the graph is not modified.
    """
    try:
        edge = DependencyEdge(object(), predecessor_id, successor_id, type)
        graph.validate_edge(edge)
    except DependencyValidationError as e:
        return ValidationResult(False, str(e), e)
    return ValidationResult(True)


def available_predecessors(graph: DependencyGraph, task_id) -> List[Task]:
    """
    Tasks that can become a predecessor of `task_id`.

    Excludes the task itself, its current direct predecessors and anything
    reachable from it, since those would duplicate an edge or close a cycle.
    """
    if task_id not in graph:
        raise UnknownTaskError(task_id)
    excluded = graph.descendants(task_id)
    excluded.add(task_id)
    excluded.update(graph.predecessor_ids(task_id))
    return [task for task in graph.tasks() if task.id not in excluded]


class DependencyRepository(ABC):
    """
    System of record for tasks and dependency edges, one set per project.

    Implementations must only be written through DependencyManager so every
    edge is validated before it is saved.
    """

    @abstractmethod
    def load_tasks(self, project_id) -> List[Task]:
        pass

    @abstractmethod
    def load_edges(self, project_id) -> List[DependencyEdge]:
        pass

    @abstractmethod
    def save_edge(self, project_id, edge: DependencyEdge) -> None:
        pass

    @abstractmethod
    def delete_edge(self, project_id, edge_id) -> None:
        pass


class InMemoryRepository(DependencyRepository):
    def __init__(self):
        self._tasks: Dict[object, Dict[object, Task]] = defaultdict(dict)
        self._edges: Dict[object, Dict[object, DependencyEdge]] = defaultdict(dict)

    def add_tasks(self, project_id, tasks: Iterable[Task]) -> "InMemoryRepository":
        for task in tasks:
            self._tasks[project_id][task.id] = task
        return self

    def load_tasks(self, project_id):
        return list(self._tasks.get(project_id, {}).values())

    def load_edges(self, project_id):
        return list(self._edges.get(project_id, {}).values())

    def save_edge(self, project_id, edge):
        self._edges[project_id][edge.id] = edge

    def delete_edge(self, project_id, edge_id):
        self._edges.get(project_id, {}).pop(edge_id, None)


class DependencyManager:
    """
    Project-level entry point for dependency changes and schedule analysis.

    Every call loads a fresh graph snapshot from the repository. Mutations run
    validate-then-commit inside a per-project lock so two concurrent writers
    cannot each pass validation against a stale snapshot; reads never take
    the lock.
    """

    def __init__(
        self,
        repository: DependencyRepository,
        tolerance: float = DEFAULT_TOLERANCE,
    ):
        self.repository = repository
        self.analyzer = CriticalPathAnalyzer(tolerance=tolerance)
        self._locks: Dict[object, threading.Lock] = {}
        self._locks_guard = threading.Lock()
        self._generations: Dict[object, int] = defaultdict(int)

    def _lock_for(self, project_id) -> threading.Lock:
        with self._locks_guard:
            lock = self._locks.get(project_id)
            if lock is None:
                lock = self._locks[project_id] = threading.Lock()
            return lock

    def generation(self, project_id) -> int:
        """Counter bumped on every committed edge mutation of the project."""
        return self._generations.get(project_id, 0)

    def load_graph(self, project_id) -> DependencyGraph:
        return DependencyGraph.build(
            self.repository.load_tasks(project_id),
            self.repository.load_edges(project_id),
        )

    def add_dependency(
        self,
        project_id,
        predecessor_id,
        successor_id,
        type=DependencyType.FINISH_TO_START,
        edge_id=None,
    ) -> DependencyEdge:
        """
        Validate and persist a new edge.

        Raises:
            DependencyValidationError: If the edge is rejected; nothing is saved
        """
        if edge_id is not None:
            edge = DependencyEdge(edge_id, predecessor_id, successor_id, type)

        with self._lock_for(project_id):
            graph = self.load_graph(project_id)
            if edge_id is None:
                # Generated ids must not shadow a stored edge
                edge = DependencyEdge.create(predecessor_id, successor_id, type)
                while graph.has_edge_id(edge.id):
                    edge = DependencyEdge.create(predecessor_id, successor_id, type)
            try:
                graph.add_edge(edge)
            except DependencyValidationError as e:
                logger.warning(
                    "Rejected dependency %s -> %s in project %s: %s",
                    predecessor_id,
                    successor_id,
                    project_id,
                    e,
                )
                raise
            self.repository.save_edge(project_id, edge)
            self._generations[project_id] += 1

        logger.info(
            "Project %s: added dependency %s -> %s (%s)",
            project_id,
            predecessor_id,
            successor_id,
            edge.type.value,
        )
        return edge

    def remove_dependency(self, project_id, edge_id) -> DependencyEdge:
        """
        Raises:
            EdgeNotFoundError: If the project has no edge with this id
        """
        with self._lock_for(project_id):
            graph = self.load_graph(project_id)
            edge = graph.remove_edge(edge_id)
            self.repository.delete_edge(project_id, edge_id)
            self._generations[project_id] += 1
        logger.info("Project %s: removed dependency %s", project_id, edge_id)
        return edge

    def validate_dependency(
        self, project_id, predecessor_id, successor_id, type=DependencyType.FINISH_TO_START
    ) -> ValidationResult:
        return validate_dependency(
            self.load_graph(project_id), predecessor_id, successor_id, type
        )

    def find_dependencies(self, project_id, task_id) -> List[DependencyEdge]:
        """Edges whose successor is `task_id` (what the task waits on)."""
        return self.load_graph(project_id).predecessors_of(task_id)

    def find_dependents(self, project_id, task_id) -> List[DependencyEdge]:
        """Edges whose predecessor is `task_id` (what waits on the task)."""
        return self.load_graph(project_id).successors_of(task_id)

    def available_dependencies(self, project_id, task_id) -> List[Task]:
        return available_predecessors(self.load_graph(project_id), task_id)

    def analyze(self, project_id) -> CriticalPathAnalysis:
        return self.analyzer.analyze(self.load_graph(project_id))

    def suggest_sequence(self, project_id) -> List[Task]:
        return suggest_sequence(self.load_graph(project_id))
