from .task import id_sort_key


class GraphError(Exception):
    """Base class for all errors raised by the dependency graph engine."""

    pass


class DependencyValidationError(GraphError):
    """
    A requested mutation was rejected.

    These are caller-recoverable: the edge is simply not applied and the
    message may be shown to the end user.
    """

    pass


class UnknownTaskError(DependencyValidationError):
    def __init__(self, task_id):
        self.task_id = task_id
        super().__init__(f"Task with ID {task_id} not found")


class SelfDependencyError(DependencyValidationError):
    def __init__(self, task_id):
        self.task_id = task_id
        super().__init__(f"Task {task_id} cannot depend on itself")


class DuplicateEdgeError(DependencyValidationError):
    def __init__(self, predecessor_id, successor_id, dependency_type):
        self.predecessor_id = predecessor_id
        self.successor_id = successor_id
        self.dependency_type = dependency_type
        super().__init__("Dependency already exists")


class CircularDependencyError(DependencyValidationError):
    """
    Adding predecessor -> successor would close a cycle.

    `cycle` holds the existing path successor -> ... -> predecessor that the
    candidate edge would complete.
    """

    def __init__(self, predecessor_id, successor_id, cycle=None):
        self.predecessor_id = predecessor_id
        self.successor_id = successor_id
        self.cycle = list(cycle) if cycle else []
        message = "This would create a circular dependency"
        if self.cycle:
            path = " -> ".join(str(t) for t in [predecessor_id] + self.cycle)
            message = f"{message}: {path}"
        super().__init__(message)


class EdgeNotFoundError(DependencyValidationError):
    def __init__(self, edge_id):
        self.edge_id = edge_id
        super().__init__(f"Dependency with ID {edge_id} not found")


class GraphConsistencyError(GraphError):
    """
    An internal invariant was found broken.

    Never a user-facing validation failure; indicates the store allowed a
    bad mutation upstream.
    """

    pass


class CyclePresentError(GraphConsistencyError):
    def __init__(self, remaining=None):
        self.remaining = sorted(remaining or [], key=id_sort_key)
        message = "Dependency graph contains a cycle"
        if self.remaining:
            message += f" (unresolved tasks: {', '.join(map(str, self.remaining))})"
        super().__init__(message)


class InconsistentTimingError(GraphConsistencyError):
    def __init__(self, task_id, slack):
        self.task_id = task_id
        self.slack = slack
        super().__init__(f"Negative slack {slack} computed for task {task_id}")
