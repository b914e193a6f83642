import json
import logging

from networkx.readwrite import json_graph

from ..domain.dependency import DependencyEdge
from ..domain.graph import DependencyGraph
from ..domain.task import Task

logger = logging.getLogger(__name__)


def export_graph(graph: DependencyGraph):
    """
    Node/edge list of the graph, in the shape expected by graph widgets.

    Nodes keep insertion order and edges keep their per-task order, so
    import_graph rebuilds the same adjacency.
    """
    nodes = [
        {"id": task.id, "label": task.name, "data": task.to_dict()}
        for task in graph.tasks()
    ]
    edges = [
        {
            "id": edge.id,
            "source": edge.predecessor_id,
            "target": edge.successor_id,
            "label": edge.type.value,
            "data": edge.to_dict(),
        }
        for edge in graph.edges()
    ]
    return {"nodes": nodes, "edges": edges}


def import_graph(data) -> DependencyGraph:
    """Rebuild a graph from export_graph output. Edges are re-validated."""
    tasks = []
    for node in data.get("nodes", []):
        task_data = dict(node.get("data") or {})
        task_data.setdefault("id", node["id"])
        task_data.setdefault("name", node.get("label"))
        tasks.append(Task.from_dict(task_data))

    edges = [
        DependencyEdge(
            edge["id"],
            edge["source"],
            edge["target"],
            edge.get("label") or (edge.get("data") or {}).get("type", "finish-to-start"),
        )
        for edge in data.get("edges", [])
    ]
    return DependencyGraph.build(tasks, edges)


def to_node_link(graph: DependencyGraph):
    """networkx node-link representation, for tools that consume it directly."""
    return json_graph.node_link_data(graph.to_networkx())


def parse_project(data) -> DependencyGraph:
    """
    Build a graph from a project document:
    {"tasks": [...], "dependencies": [...]}.
    """
    tasks = [Task.from_dict(item) for item in data.get("tasks", [])]
    edges = [DependencyEdge.from_dict(item) for item in data.get("dependencies", [])]
    logger.debug("Parsed project with %d tasks and %d dependencies", len(tasks), len(edges))
    return DependencyGraph.build(tasks, edges)


def load_project(path) -> DependencyGraph:
    with open(path, encoding="utf-8") as f:
        data = json.load(f)
    return parse_project(data)


def dump_project(graph: DependencyGraph, path) -> None:
    data = {
        "tasks": [task.to_dict() for task in graph.tasks()],
        "dependencies": [edge.to_dict() for edge in graph.edges()],
    }
    with open(path, "w", encoding="utf-8") as f:
        json.dump(data, f, indent=2)
