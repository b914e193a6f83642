import random
import unittest

from taskgraph.domain.dependency import DependencyEdge, DependencyType
from taskgraph.domain.errors import CircularDependencyError, CyclePresentError
from taskgraph.domain.graph import DependencyGraph
from taskgraph.domain.task import Task
from taskgraph.services.sequencer import (
    is_valid_order,
    suggest_sequence,
    topological_order,
)


def force_edge(graph, edge):
    """Insert an edge without validation, simulating a corrupted store."""
    graph._graph.add_edge(
        edge.predecessor_id, edge.successor_id, key=edge.id, edge=edge, seq=10**6
    )
    graph._edges[edge.id] = edge


class SequencerTestCase(unittest.TestCase):
    def test_linear_chain(self):
        graph = DependencyGraph([Task(n, duration_days=1) for n in ("task3", "task1", "task2")])
        graph.connect("task1", "task2")
        graph.connect("task2", "task3")
        self.assertEqual(topological_order(graph), ["task1", "task2", "task3"])

    def test_ties_broken_by_id(self):
        graph = DependencyGraph([Task(n, duration_days=1) for n in "DCBA"])
        self.assertEqual(topological_order(graph), ["A", "B", "C", "D"])

    def test_ties_broken_by_priority_then_due_date(self):
        graph = DependencyGraph(
            [
                Task("a", duration_days=1, priority="low"),
                Task("b", duration_days=1, due_date="2024-03-01"),
                Task("c", duration_days=1, due_date="2024-01-01"),
                Task("d", duration_days=1),
                Task("e", duration_days=1, priority="critical"),
            ]
        )
        self.assertEqual(topological_order(graph), ["e", "c", "b", "d", "a"])

    def test_priority_applies_only_among_ready_tasks(self):
        graph = DependencyGraph(
            [
                Task("setup", duration_days=1, priority="low"),
                Task("urgent", duration_days=1, priority="critical"),
                Task("other", duration_days=1),
            ]
        )
        graph.connect("setup", "urgent")
        self.assertEqual(topological_order(graph), ["other", "setup", "urgent"])

    def test_parallel_edges_release_successor_once(self):
        graph = DependencyGraph([Task("a", duration_days=1), Task("b", duration_days=1)])
        graph.connect("a", "b", DependencyType.FINISH_TO_START)
        graph.connect("a", "b", DependencyType.START_TO_START)
        self.assertEqual(topological_order(graph), ["a", "b"])

    def test_empty_graph(self):
        self.assertEqual(topological_order(DependencyGraph()), [])

    def test_mixed_id_types(self):
        graph = DependencyGraph([Task(2, duration_days=1), Task("10", duration_days=1), Task(1, duration_days=1)])
        graph.connect(2, 1)
        self.assertEqual(topological_order(graph), [2, 1, "10"])

    def test_numeric_ids_sort_numerically(self):
        graph = DependencyGraph([Task(n, duration_days=1) for n in (10, 2, 1)])
        self.assertEqual(topological_order(graph), [1, 2, 10])

    def test_cycle_present(self):
        graph = DependencyGraph([Task(n, duration_days=1) for n in "ABCD"])
        graph.connect("A", "B")
        graph.connect("B", "C")
        force_edge(graph, DependencyEdge("bad", "C", "B"))

        with self.assertRaises(CyclePresentError) as ctx:
            topological_order(graph)
        self.assertEqual(ctx.exception.remaining, ["B", "C"])

    def test_rejected_cycle_keeps_order_available(self):
        graph = DependencyGraph([Task(f"task{i}", duration_days=1) for i in (1, 2, 3)])
        graph.connect("task1", "task2")
        graph.connect("task2", "task3")
        with self.assertRaises(CircularDependencyError):
            graph.connect("task3", "task1")
        self.assertEqual(topological_order(graph), ["task1", "task2", "task3"])

    def test_random_dags_produce_valid_orders(self):
        rng = random.Random(1234)
        for _ in range(25):
            size = rng.randint(1, 30)
            graph = DependencyGraph([Task(i, duration_days=1) for i in range(size)])
            for _ in range(size * 2):
                a, b = rng.sample(range(size), 2) if size > 1 else (0, 0)
                dependency_type = rng.choice(list(DependencyType))
                if a < b and not graph.has_edge_between(a, b, dependency_type):
                    graph.connect(a, b, dependency_type)
            order = topological_order(graph)
            self.assertEqual(len(order), size)
            self.assertTrue(is_valid_order(graph, order))

    def test_is_valid_order(self):
        graph = DependencyGraph([Task(n, duration_days=1) for n in "AB"])
        graph.connect("A", "B")
        self.assertTrue(is_valid_order(graph, ["A", "B"]))
        self.assertFalse(is_valid_order(graph, ["B", "A"]))
        self.assertFalse(is_valid_order(graph, ["A"]))

    def test_suggest_sequence_returns_tasks(self):
        graph = DependencyGraph([Task("x", "Design", duration_days=1), Task("y", "Build", duration_days=1)])
        graph.connect("x", "y")
        self.assertEqual([t.name for t in suggest_sequence(graph)], ["Design", "Build"])


if __name__ == "__main__":
    unittest.main()
