from ..domain.dependency import DependencyType
from ..domain.graph import DependencyGraph
from ..domain.task import Task
from ..services.critical_path import CriticalPathAnalyzer
from ..services.sequencer import suggest_sequence


def create_sample_project():
    # Create tasks
    tasks = [
        Task("T1", "Requirements Analysis", duration_days=5, priority="high"),
        Task("T2", "System Design", duration_days=10, priority="high"),
        Task("T3", "Frontend Development", duration_days=15),
        Task("T4", "Backend Development", duration_days=12),
        Task("T5", "Database Setup", duration_days=8, priority="low"),
        Task("T6", "Integration", duration_days=6),
        Task("T7", "Documentation", duration_days=4, priority="low"),
        Task("T8", "Release", duration_days=0, priority="critical"),
    ]
    graph = DependencyGraph(tasks)

    graph.connect("T1", "T2")
    graph.connect("T2", "T3")
    graph.connect("T2", "T4")
    graph.connect("T2", "T5")
    graph.connect("T5", "T4", DependencyType.START_TO_START)
    graph.connect("T3", "T6")
    graph.connect("T4", "T6")
    graph.connect("T6", "T7", DependencyType.FINISH_TO_FINISH)
    graph.connect("T6", "T8")
    graph.connect("T7", "T8")

    return graph


def print_report(graph, analysis):
    print("Critical Path Report")
    print("====================")
    print(f"Tasks: {len(graph)}")
    print(f"Project Duration: {analysis.project_duration_days:g} days")

    print("\nCritical Tasks:")
    for timing in analysis.critical_tasks:
        task = graph.task(timing.task_id)
        print(
            f"  {task.id}: {task.name} - "
            f"{timing.earliest_start:g} -> {timing.earliest_finish:g}"
        )

    print("\nTasks with Slack:")
    for timing in analysis.slack_tasks:
        task = graph.task(timing.task_id)
        print(f"  {task.id}: {task.name} - slack {timing.slack:g} days")

    print("\nSuggested Sequence:")
    print("  " + " -> ".join(str(task.id) for task in suggest_sequence(graph)))


def run_example():
    graph = create_sample_project()
    analysis = CriticalPathAnalyzer().analyze(graph)
    print_report(graph, analysis)
    return analysis


if __name__ == "__main__":
    run_example()
