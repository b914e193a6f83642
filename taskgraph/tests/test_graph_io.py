import json
import os
import tempfile
import unittest

from taskgraph.domain.dependency import DependencyType
from taskgraph.domain.errors import CircularDependencyError
from taskgraph.domain.graph import DependencyGraph
from taskgraph.domain.task import Task
from taskgraph.services.critical_path import analyze
from taskgraph.utils.graph_io import (
    dump_project,
    export_graph,
    import_graph,
    load_project,
    parse_project,
    to_node_link,
)


class GraphIOTestCase(unittest.TestCase):
    def setUp(self):
        self.graph = DependencyGraph(
            [
                Task("A", "Design", duration_days=2, priority="high"),
                Task("B", "Build", duration_days=3, due_date="2024-05-01"),
                Task("C", "Test", duration_days=1, earliest_possible_start=1),
            ]
        )
        self.graph.connect("A", "B")
        self.graph.connect("A", "C", DependencyType.START_TO_START)
        self.graph.connect("B", "C", DependencyType.FINISH_TO_FINISH)

    def test_export_shape(self):
        data = export_graph(self.graph)
        self.assertEqual([n["id"] for n in data["nodes"]], ["A", "B", "C"])
        self.assertEqual(data["nodes"][0]["label"], "Design")
        edge = data["edges"][1]
        self.assertEqual(edge["source"], "A")
        self.assertEqual(edge["target"], "C")
        self.assertEqual(edge["label"], "start-to-start")
        self.assertEqual(edge["data"]["type"], "start-to-start")

    def test_round_trip_preserves_adjacency(self):
        rebuilt = import_graph(export_graph(self.graph))
        self.assertEqual(rebuilt.adjacency(), self.graph.adjacency())
        self.assertEqual(
            [e.key for e in rebuilt.edges()], [e.key for e in self.graph.edges()]
        )
        self.assertEqual(
            [t.to_dict() for t in rebuilt.tasks()],
            [t.to_dict() for t in self.graph.tasks()],
        )
        self.assertEqual(
            analyze(rebuilt).to_dict(), analyze(self.graph).to_dict()
        )

    def test_round_trip_through_json(self):
        text = json.dumps(export_graph(self.graph))
        rebuilt = import_graph(json.loads(text))
        self.assertEqual(rebuilt.adjacency(), self.graph.adjacency())

    def test_node_link(self):
        data = to_node_link(self.graph)
        self.assertEqual({n["id"] for n in data["nodes"]}, {"A", "B", "C"})
        self.assertTrue(data["directed"])
        self.assertTrue(data["multigraph"])

    def test_parse_project_accepts_both_conventions(self):
        graph = parse_project(
            {
                "tasks": [
                    {"id": "t1", "durationDays": 2},
                    {"id": "t2", "durationDays": 3},
                    {"id": "t3", "durationDays": 1},
                ],
                "dependencies": [
                    {"id": "d1", "fromTaskId": "t1", "toTaskId": "t2", "type": "FS"},
                    {"id": "d2", "taskId": "t3", "dependsOnTaskId": "t2"},
                ],
            }
        )
        self.assertEqual(graph.successor_ids("t2"), ["t3"])
        self.assertEqual(analyze(graph).project_duration_days, 6)

    def test_parse_project_rejects_cycles(self):
        with self.assertRaises(CircularDependencyError):
            parse_project(
                {
                    "tasks": [{"id": "x"}, {"id": "y"}],
                    "dependencies": [
                        {"predecessorId": "x", "successorId": "y"},
                        {"predecessorId": "y", "successorId": "x"},
                    ],
                }
            )

    def test_dump_and_load(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = os.path.join(tmp, "project.json")
            dump_project(self.graph, path)
            loaded = load_project(path)
        self.assertEqual(loaded.adjacency(), self.graph.adjacency())
        self.assertEqual(
            analyze(loaded).project_duration_days,
            analyze(self.graph).project_duration_days,
        )


if __name__ == "__main__":
    unittest.main()
