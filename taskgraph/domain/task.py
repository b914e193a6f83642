import math
from datetime import date, datetime
from enum import Enum
from typing import Any, Dict, Optional, Union


def id_sort_key(task_id):
    """
    Ordering key for task ids of mixed types.

    Numeric ids sort numerically and ahead of every other id, so 2 comes
    before 10. Anything else sorts by its string form.
    """
    if isinstance(task_id, (int, float)) and not isinstance(task_id, bool):
        return (0, task_id)
    return (1, str(task_id))


class TaskError(Exception):
    """Exception raised for errors in the Task class."""

    pass


class TaskPriority(Enum):
    """
    Ordinal task priority. Lower rank is scheduled first when several tasks
    are ready at the same time.
    """

    CRITICAL = "critical"
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"

    @property
    def rank(self) -> int:
        return _PRIORITY_RANKS[self]

    @classmethod
    def parse(cls, value) -> "TaskPriority":
        if isinstance(value, cls):
            return value
        if isinstance(value, int) and not isinstance(value, bool):
            for priority, rank in _PRIORITY_RANKS.items():
                if rank == value:
                    return priority
            raise TaskError(f"Invalid priority rank: {value}")
        if isinstance(value, str):
            key = value.strip().lower()
            key = _PRIORITY_ALIASES.get(key, key)
            try:
                return cls(key)
            except ValueError:
                pass
        valid = [p.value for p in cls]
        raise TaskError(f"Invalid priority: {value}. Must be one of {valid}")


_PRIORITY_RANKS = {
    TaskPriority.CRITICAL: 0,
    TaskPriority.HIGH: 1,
    TaskPriority.MEDIUM: 2,
    TaskPriority.LOW: 3,
}

_PRIORITY_ALIASES = {"urgent": "critical", "normal": "medium"}

DEFAULT_DURATION_DAYS = 1.0
DEFAULT_HOURS_PER_DAY = 8.0


def _parse_date(value, field):
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    if isinstance(value, str):
        try:
            return datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError:
            raise TaskError(f"{field} must be an ISO-8601 date, got {value!r}")
    raise TaskError(f"{field} must be a date, datetime or ISO string")


class Task:
    """
    A task as seen by the scheduling engine.

    Only the attributes that influence scheduling are kept: the duration in
    days, an optional earliest start anchor (days from the project epoch),
    and the priority and due date used to break ties when sequencing.
    """

    def __init__(
        self,
        id,
        name: Optional[str] = None,
        duration_days: Optional[float] = None,
        earliest_possible_start: float = 0,
        priority: Union[str, int, TaskPriority] = TaskPriority.MEDIUM,
        due_date=None,
        start_date=None,
        estimated_hours: Optional[float] = None,
        hours_per_day: float = DEFAULT_HOURS_PER_DAY,
    ):
        """
        Initialize a new Task.

        Args:
            id: Unique, hashable identifier for the task
            name: Display name, defaults to the string form of the id
            duration_days: Explicit duration in days (0 for milestones). When
                omitted it is derived from the start/due dates, then from
                estimated_hours, falling back to one day.
            earliest_possible_start: Days from project start before which the
                task cannot begin
            priority: TaskPriority, its value, or its rank
            due_date: Optional due date (date, datetime or ISO string)
            start_date: Optional planned start date
            estimated_hours: Optional effort estimate in hours
            hours_per_day: Working hours per day for effort conversion

        Raises:
            TaskError: If any input validation fails
        """
        if id is None or (isinstance(id, str) and id.strip() == ""):
            raise TaskError("Task ID cannot be None or empty")
        try:
            hash(id)
        except TypeError:
            raise TaskError("Task ID must be hashable")
        self.id = id

        if name is not None and not isinstance(name, str):
            raise TaskError("Task name must be a string")
        self.name = name or str(id)

        if (
            not isinstance(earliest_possible_start, (int, float))
            or earliest_possible_start < 0
        ):
            raise TaskError("Earliest possible start must be a non-negative number")
        self.earliest_possible_start = float(earliest_possible_start)

        self._priority = TaskPriority.parse(priority)
        self.due_date = _parse_date(due_date, "Due date")
        self.start_date = _parse_date(start_date, "Start date")

        if estimated_hours is not None and (
            not isinstance(estimated_hours, (int, float)) or estimated_hours < 0
        ):
            raise TaskError("Estimated hours must be a non-negative number")
        self.estimated_hours = estimated_hours

        if not isinstance(hours_per_day, (int, float)) or hours_per_day <= 0:
            raise TaskError("Hours per day must be a positive number")
        self.hours_per_day = float(hours_per_day)

        if duration_days is None:
            self.duration_days = self._derive_duration()
        elif not isinstance(duration_days, (int, float)) or duration_days < 0:
            raise TaskError("Duration must be a non-negative number")
        else:
            self.duration_days = float(duration_days)

    def _derive_duration(self) -> float:
        if self.start_date and self.due_date:
            try:
                delta = self.due_date - self.start_date
            except TypeError:
                raise TaskError("Start and due dates must both be naive or both be aware")
            days = delta.total_seconds() / 86400
            return float(max(1, math.ceil(days)))
        if self.estimated_hours:
            return float(max(1, math.ceil(self.estimated_hours / self.hours_per_day)))
        return DEFAULT_DURATION_DAYS

    @property
    def priority(self) -> str:
        """Get the priority value of the task."""
        return self._priority.value

    @priority.setter
    def priority(self, value):
        self._priority = TaskPriority.parse(value)

    @property
    def priority_rank(self) -> int:
        return self._priority.rank

    def sort_key(self):
        """Tie-break key used by the sequencer: (priority rank, due date, id)."""
        due = self.due_date.timestamp() if self.due_date else math.inf
        return (self.priority_rank, due, id_sort_key(self.id))

    @classmethod
    def from_dict(cls, data: Dict[str, Any], **kwargs) -> "Task":
        """Build a Task from a mapping using camelCase or snake_case keys."""

        def pick(*keys, default=None):
            for key in keys:
                if key in data and data[key] is not None:
                    return data[key]
            return default

        if "id" not in data:
            raise TaskError("Task data must include an id")

        return cls(
            id=data["id"],
            name=pick("name", "title"),
            duration_days=pick("duration_days", "durationDays"),
            earliest_possible_start=pick(
                "earliest_possible_start", "earliestPossibleStart", default=0
            ),
            priority=pick("priority", default=TaskPriority.MEDIUM),
            due_date=pick("due_date", "dueDate"),
            start_date=pick("start_date", "startDate"),
            estimated_hours=pick("estimated_hours", "estimatedHours"),
            **kwargs,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "durationDays": self.duration_days,
            "earliestPossibleStart": self.earliest_possible_start,
            "priority": self.priority,
            "dueDate": self.due_date.isoformat() if self.due_date else None,
            "startDate": self.start_date.isoformat() if self.start_date else None,
            "estimatedHours": self.estimated_hours,
        }

    def __repr__(self):
        return (
            f"Task(id={self.id!r}, name={self.name!r}, "
            f"duration_days={self.duration_days}, priority={self.priority!r})"
        )
