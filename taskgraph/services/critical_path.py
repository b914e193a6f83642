import logging
from typing import Dict, List, Optional

from ..domain.dependency import DependencyType
from ..domain.errors import InconsistentTimingError
from ..domain.task import id_sort_key
from .sequencer import topological_order

logger = logging.getLogger(__name__)

DEFAULT_TOLERANCE = 1e-9


class TaskTiming:
    """Computed schedule window of one task. Read-only for consumers."""

    __slots__ = (
        "task_id",
        "duration",
        "earliest_start",
        "earliest_finish",
        "latest_start",
        "latest_finish",
        "slack",
    )

    def __init__(
        self,
        task_id,
        duration,
        earliest_start,
        earliest_finish,
        latest_start,
        latest_finish,
        slack,
    ):
        self.task_id = task_id
        self.duration = duration
        self.earliest_start = earliest_start
        self.earliest_finish = earliest_finish
        self.latest_start = latest_start
        self.latest_finish = latest_finish
        self.slack = slack

    @property
    def is_critical(self) -> bool:
        return self.slack == 0

    def to_dict(self):
        return {
            "taskId": self.task_id,
            "earliestStart": self.earliest_start,
            "earliestFinish": self.earliest_finish,
            "latestStart": self.latest_start,
            "latestFinish": self.latest_finish,
            "slack": self.slack,
            "isCritical": self.is_critical,
        }

    def __repr__(self):
        return (
            f"TaskTiming({self.task_id!r}, ES={self.earliest_start}, "
            f"EF={self.earliest_finish}, LS={self.latest_start}, "
            f"LF={self.latest_finish}, slack={self.slack})"
        )


class CriticalPathAnalysis:
    """
    Result of one analysis run.

    `critical_tasks` follows the topological order used for the passes;
    `slack_tasks` is sorted by (slack, task id).
    """

    def __init__(
        self,
        project_duration_days: float,
        timings: Dict[object, TaskTiming],
        order: List,
    ):
        self.project_duration_days = project_duration_days
        self.timings = timings
        self.order = list(order)
        self.critical_tasks = [
            timings[task_id] for task_id in self.order if timings[task_id].is_critical
        ]
        self.slack_tasks = sorted(
            (t for t in timings.values() if not t.is_critical),
            key=lambda t: (t.slack, id_sort_key(t.task_id)),
        )

    @property
    def critical_path_duration(self) -> float:
        return self.project_duration_days

    @property
    def critical_task_ids(self) -> List:
        return [t.task_id for t in self.critical_tasks]

    def timing(self, task_id) -> TaskTiming:
        return self.timings[task_id]

    def to_dict(self):
        return {
            "projectDurationDays": self.project_duration_days,
            "criticalPathDuration": self.critical_path_duration,
            "criticalTasks": [t.to_dict() for t in self.critical_tasks],
            "slackTasks": [t.to_dict() for t in self.slack_tasks],
            "order": list(self.order),
        }


class CriticalPathAnalyzer:
    """
    Critical Path Method over a DependencyGraph snapshot.

    The analysis is recomputed in full on every call; nothing is cached on the
    graph or on the analyzer.
    """

    def __init__(self, tolerance: float = DEFAULT_TOLERANCE):
        if tolerance < 0:
            raise ValueError("Tolerance must be non-negative")
        self.tolerance = tolerance

    def analyze(self, graph) -> CriticalPathAnalysis:
        """
        Run the forward and backward passes.

        Raises:
            CyclePresentError: If the graph is not acyclic
            InconsistentTimingError: If a task ends up with negative slack
        """
        order = topological_order(graph)
        if not order:
            logger.warning("No tasks to analyze")
            return CriticalPathAnalysis(0.0, {}, [])

        early = self._forward_pass(graph, order)
        project_duration = max(finish for _, finish in early.values())
        late = self._backward_pass(graph, order, early, project_duration)

        timings = {}
        for task_id in order:
            earliest_start, earliest_finish = early[task_id]
            latest_start, latest_finish = late[task_id]
            slack = latest_start - earliest_start
            if slack < -self.tolerance:
                logger.error(
                    "Negative slack %s for task %s; graph state is inconsistent",
                    slack,
                    task_id,
                )
                raise InconsistentTimingError(task_id, slack)
            if abs(slack) <= self.tolerance:
                slack = 0.0
            timings[task_id] = TaskTiming(
                task_id,
                graph.task(task_id).duration_days,
                earliest_start,
                earliest_finish,
                latest_start,
                latest_finish,
                slack,
            )

        analysis = CriticalPathAnalysis(project_duration, timings, order)
        logger.info(
            "Critical path analysis: %d tasks, %d critical, project duration %s days",
            len(timings),
            len(analysis.critical_tasks),
            project_duration,
        )
        logger.debug("Critical tasks: %s", analysis.critical_task_ids)
        return analysis

    def _forward_pass(self, graph, order):
        """Earliest (start, finish) per task, visiting tasks in topological order."""
        early = {}
        for task_id in order:
            task = graph.task(task_id)
            duration = task.duration_days
            start = task.earliest_possible_start
            for edge in graph.predecessors_of(task_id):
                pred_start, pred_finish = early[edge.predecessor_id]
                start = max(
                    start, _start_bound(edge.type, pred_start, pred_finish, duration)
                )
            early[task_id] = (start, start + duration)
        return early

    def _backward_pass(self, graph, order, early, project_duration):
        """Latest (start, finish) per task, visiting tasks in reverse order."""
        late = {}
        for task_id in reversed(order):
            duration = graph.task(task_id).duration_days
            earliest_finish = early[task_id][1]
            finish = project_duration
            for edge in graph.successors_of(task_id):
                succ_start, succ_finish = late[edge.successor_id]
                finish = min(
                    finish, _finish_bound(edge.type, succ_start, succ_finish, duration)
                )
            if finish < earliest_finish - self.tolerance:
                slack = finish - earliest_finish
                logger.error(
                    "Latest finish %s precedes earliest finish %s for task %s",
                    finish,
                    earliest_finish,
                    task_id,
                )
                raise InconsistentTimingError(task_id, slack)
            finish = max(finish, earliest_finish)
            late[task_id] = (finish - duration, finish)
        return late


def _start_bound(dependency_type, pred_start, pred_finish, duration):
    """Lower bound on a successor's start imposed by one incoming edge."""
    if dependency_type is DependencyType.FINISH_TO_START:
        return pred_finish
    if dependency_type is DependencyType.START_TO_START:
        return pred_start
    if dependency_type is DependencyType.FINISH_TO_FINISH:
        return pred_finish - duration
    if dependency_type is DependencyType.START_TO_FINISH:
        return pred_start - duration
    raise ValueError(f"Unhandled dependency type: {dependency_type}")


def _finish_bound(dependency_type, succ_start, succ_finish, duration):
    """Upper bound on a predecessor's finish imposed by one outgoing edge."""
    if dependency_type is DependencyType.FINISH_TO_START:
        return succ_start
    if dependency_type is DependencyType.START_TO_START:
        return succ_start + duration
    if dependency_type is DependencyType.FINISH_TO_FINISH:
        return succ_finish
    if dependency_type is DependencyType.START_TO_FINISH:
        return succ_finish + duration
    raise ValueError(f"Unhandled dependency type: {dependency_type}")


def analyze(graph, tolerance: float = DEFAULT_TOLERANCE) -> CriticalPathAnalysis:
    return CriticalPathAnalyzer(tolerance=tolerance).analyze(graph)


def find_critical_path(graph, analysis: Optional[CriticalPathAnalysis] = None):
    """Critical task ids in topological order."""
    if analysis is None:
        analysis = analyze(graph)
    return analysis.critical_task_ids
