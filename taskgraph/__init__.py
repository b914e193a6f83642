"""
Task Dependency Graph Package
=============================

Dependency graph store and critical path scheduling for project tasks.

Available modules:
- domain.graph: DependencyGraph store with cycle-safe edge insertion
- services.cycle_validator: reachability-based cycle checks
- services.sequencer: deterministic topological ordering
- services.critical_path: forward/backward pass analysis
- services.dependency_manager: per-project validate-then-commit facade
"""

from .domain.dependency import DependencyEdge, DependencyType
from .domain.errors import (
    CircularDependencyError,
    CyclePresentError,
    DependencyValidationError,
    DuplicateEdgeError,
    EdgeNotFoundError,
    GraphConsistencyError,
    GraphError,
    InconsistentTimingError,
    SelfDependencyError,
    UnknownTaskError,
)
from .domain.graph import DependencyGraph
from .domain.task import Task, TaskError, TaskPriority
from .services.critical_path import (
    CriticalPathAnalysis,
    CriticalPathAnalyzer,
    TaskTiming,
    analyze,
)
from .services.cycle_validator import would_create_cycle
from .services.dependency_manager import (
    DependencyManager,
    InMemoryRepository,
    validate_dependency,
)
from .services.sequencer import suggest_sequence, topological_order

__all__ = [
    "DependencyEdge",
    "DependencyType",
    "DependencyGraph",
    "Task",
    "TaskError",
    "TaskPriority",
    "GraphError",
    "DependencyValidationError",
    "UnknownTaskError",
    "SelfDependencyError",
    "DuplicateEdgeError",
    "CircularDependencyError",
    "EdgeNotFoundError",
    "GraphConsistencyError",
    "CyclePresentError",
    "InconsistentTimingError",
    "CriticalPathAnalysis",
    "CriticalPathAnalyzer",
    "TaskTiming",
    "analyze",
    "would_create_cycle",
    "DependencyManager",
    "InMemoryRepository",
    "validate_dependency",
    "suggest_sequence",
    "topological_order",
]
