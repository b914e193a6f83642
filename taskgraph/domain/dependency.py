import uuid
from enum import Enum
from typing import Any, Dict


class DependencyType(Enum):
    """
    The four precedence relationships between a predecessor and a successor.
    """

    FINISH_TO_START = "finish-to-start"
    START_TO_START = "start-to-start"
    FINISH_TO_FINISH = "finish-to-finish"
    START_TO_FINISH = "start-to-finish"

    @property
    def code(self) -> str:
        return _CODES[self]

    @classmethod
    def parse(cls, value) -> "DependencyType":
        """Accept an enum member, its value, its name or a short code (FS/SS/FF/SF)."""
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            key = value.strip()
            for member in cls:
                if key.lower() == member.value or key.upper() in (
                    member.name,
                    member.code,
                ):
                    return member
            normalized = key.replace("_", "-").lower()
            for member in cls:
                if normalized == member.value:
                    return member
        valid = [t.value for t in cls]
        raise ValueError(f"Invalid dependency type: {value!r}. Must be one of {valid}")


_CODES = {
    DependencyType.FINISH_TO_START: "FS",
    DependencyType.START_TO_START: "SS",
    DependencyType.FINISH_TO_FINISH: "FF",
    DependencyType.START_TO_FINISH: "SF",
}


class DependencyEdge:
    """
    A typed precedence link: `successor_id` is constrained by `predecessor_id`.

    Edges are immutable value objects; the graph store owns the collection.
    """

    __slots__ = ("_id", "_predecessor_id", "_successor_id", "_type")

    def __init__(
        self,
        id,
        predecessor_id,
        successor_id,
        type=DependencyType.FINISH_TO_START,
    ):
        if id is None or (isinstance(id, str) and id.strip() == ""):
            raise ValueError("Dependency ID cannot be None or empty")
        if predecessor_id is None or successor_id is None:
            raise ValueError("Dependency endpoints cannot be None")
        self._id = id
        self._predecessor_id = predecessor_id
        self._successor_id = successor_id
        self._type = DependencyType.parse(type)

    @property
    def id(self):
        return self._id

    @property
    def predecessor_id(self):
        return self._predecessor_id

    @property
    def successor_id(self):
        return self._successor_id

    @property
    def type(self) -> DependencyType:
        return self._type

    @property
    def key(self):
        """Identity used for duplicate detection."""
        return (self._predecessor_id, self._successor_id, self._type)

    @classmethod
    def create(
        cls, predecessor_id, successor_id, type=DependencyType.FINISH_TO_START
    ) -> "DependencyEdge":
        """Create an edge with a generated id."""
        edge_id = f"dep-{predecessor_id}-{successor_id}-{uuid.uuid4().hex}"
        return cls(edge_id, predecessor_id, successor_id, type)

    @classmethod
    def from_task_depends_on(
        cls, task_id, depends_on_task_id, id=None, type=DependencyType.FINISH_TO_START
    ) -> "DependencyEdge":
        """
        Translate the `(taskId, dependsOnTaskId)` convention, where the first
        task is the successor, into a predecessor -> successor edge.
        """
        if id is None:
            return cls.create(depends_on_task_id, task_id, type)
        return cls(id, depends_on_task_id, task_id, type)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "DependencyEdge":
        """
        Build an edge from a mapping. Accepts `predecessorId`/`successorId`,
        `fromTaskId`/`toTaskId`, or `taskId`/`dependsOnTaskId`.
        """
        type = data.get("type", DependencyType.FINISH_TO_START)
        edge_id = data.get("id")
        if "taskId" in data and "dependsOnTaskId" in data:
            return cls.from_task_depends_on(
                data["taskId"], data["dependsOnTaskId"], id=edge_id, type=type
            )

        predecessor_id = data.get("predecessorId", data.get("fromTaskId"))
        successor_id = data.get("successorId", data.get("toTaskId"))
        if predecessor_id is None or successor_id is None:
            raise ValueError(f"Dependency data is missing an endpoint: {data!r}")
        if edge_id is None:
            return cls.create(predecessor_id, successor_id, type)
        return cls(edge_id, predecessor_id, successor_id, type)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self._id,
            "predecessorId": self._predecessor_id,
            "successorId": self._successor_id,
            "type": self._type.value,
        }

    def __eq__(self, other):
        if not isinstance(other, DependencyEdge):
            return NotImplemented
        return self._id == other._id and self.key == other.key

    def __hash__(self):
        return hash((self._id,) + self.key)

    def __repr__(self):
        return (
            f"DependencyEdge({self._id!r}, {self._predecessor_id!r} -> "
            f"{self._successor_id!r}, {self._type.code})"
        )
