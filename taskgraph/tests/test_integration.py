import io
import json
import os
import tempfile
import unittest
from contextlib import redirect_stderr, redirect_stdout

from taskgraph.__main__ import main
from taskgraph.examples.simple_project import create_sample_project, run_example
from taskgraph.services.critical_path import CriticalPathAnalyzer
from taskgraph.services.sequencer import topological_order


class SampleProjectTestCase(unittest.TestCase):
    def setUp(self):
        self.graph = create_sample_project()
        self.analysis = CriticalPathAnalyzer().analyze(self.graph)

    def test_schedule(self):
        self.assertEqual(self.analysis.project_duration_days, 36)
        self.assertEqual(
            self.analysis.critical_task_ids, ["T1", "T2", "T3", "T6", "T7", "T8"]
        )
        self.assertEqual(
            [(t.task_id, t.slack) for t in self.analysis.slack_tasks],
            [("T4", 3), ("T5", 3)],
        )
        # T5 feeds T4 start-to-start, so it may slip as long as T4 can
        self.assertEqual(self.analysis.timing("T5").latest_finish, 26)
        # T7 must finish with T6
        self.assertEqual(self.analysis.timing("T7").earliest_start, 32)

    def test_sequence(self):
        self.assertEqual(
            topological_order(self.graph),
            ["T1", "T2", "T3", "T5", "T4", "T6", "T7", "T8"],
        )

    def test_run_example_prints_report(self):
        out = io.StringIO()
        with redirect_stdout(out):
            analysis = run_example()
        self.assertEqual(analysis.project_duration_days, 36)
        self.assertIn("Project Duration: 36 days", out.getvalue())
        self.assertIn("T4: Backend Development - slack 3 days", out.getvalue())


class CommandLineTestCase(unittest.TestCase):
    def setUp(self):
        self.tmp = tempfile.TemporaryDirectory()
        self.path = os.path.join(self.tmp.name, "project.json")

    def tearDown(self):
        self.tmp.cleanup()

    def write(self, data):
        with open(self.path, "w", encoding="utf-8") as f:
            json.dump(data, f)

    def run_main(self, *argv):
        out, err = io.StringIO(), io.StringIO()
        with redirect_stdout(out), redirect_stderr(err):
            code = main(list(argv))
        return code, out.getvalue(), err.getvalue()

    def test_no_arguments_prints_help(self):
        code, out, _ = self.run_main()
        self.assertEqual(code, 1)
        self.assertIn("--input", out)

    def test_example(self):
        code, out, _ = self.run_main("--example")
        self.assertEqual(code, 0)
        self.assertIn("Critical Path Report", out)

    def test_json_output(self):
        self.write(
            {
                "tasks": [
                    {"id": "A", "durationDays": 2},
                    {"id": "B", "durationDays": 3},
                    {"id": "C", "durationDays": 1},
                ],
                "dependencies": [
                    {"predecessorId": "A", "successorId": "B"},
                    {"predecessorId": "B", "successorId": "C"},
                ],
            }
        )
        code, out, _ = self.run_main("--input", self.path, "--json")
        self.assertEqual(code, 0)
        result = json.loads(out)
        self.assertEqual(result["projectDurationDays"], 6)
        self.assertEqual(
            [t["taskId"] for t in result["criticalTasks"]], ["A", "B", "C"]
        )

    def test_sequence_output(self):
        self.write(
            {
                "tasks": [{"id": "second"}, {"id": "first"}],
                "dependencies": [{"fromTaskId": "first", "toTaskId": "second"}],
            }
        )
        code, out, _ = self.run_main("--input", self.path, "--sequence")
        self.assertEqual(code, 0)
        self.assertEqual(out.split(), ["first", "second"])

    def test_cyclic_project_file(self):
        self.write(
            {
                "tasks": [{"id": "x"}, {"id": "y"}],
                "dependencies": [
                    {"predecessorId": "x", "successorId": "y"},
                    {"predecessorId": "y", "successorId": "x"},
                ],
            }
        )
        code, _, err = self.run_main("--input", self.path)
        self.assertEqual(code, 2)
        self.assertIn("circular dependency", err)

    def test_missing_file(self):
        code, _, err = self.run_main("--input", os.path.join(self.tmp.name, "nope.json"))
        self.assertEqual(code, 2)
        self.assertIn("Could not read project file", err)


if __name__ == "__main__":
    unittest.main()
