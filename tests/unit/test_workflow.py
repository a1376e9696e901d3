"""Unit tests for the project workflow."""

from unittest.mock import patch

import pytest

from taskmaster.catalog import PriorityRule
from taskmaster.classifiers import PriorityClassifier
from taskmaster.models import ParsedStatus, Priority, TaskEntry
from taskmaster.task_file import TaskFile
from taskmaster.taskmaster_logging import observability_hooks, performance_monitor
from taskmaster.workflow import (
    DEFAULT_NEXT_STEPS,
    ProjectManager,
    complete_task,
    get_project_status,
    initialize_project,
    resume_project,
)


@pytest.fixture
def manager(tmp_path):
    return ProjectManager(tmp_path)


@pytest.fixture
def initialized(manager, sample_requirements):
    result = manager.initialize(sample_requirements)
    assert result["success"] is True
    return manager


def _status(*entries):
    return ParsedStatus(
        project_name="Demo",
        status="IN PROGRESS",
        last_updated="now",
        tasks=[TaskEntry(title=title, completed=done) for title, done in entries],
    )


class TestInitialize:
    """Test cases for project initialization."""

    def test_initialize_creates_plan(self, manager, sample_requirements):
        """Initialization analyzes requirements and writes the plan."""
        result = manager.initialize(sample_requirements)

        path = manager.task_file.path
        assert result["success"] is True
        assert result["message"] == f"Project initialized with Task-Master. TASK.mdc created at {path}"
        assert result["task_file_path"] == str(path)
        assert result["project_info"]["project_name"] == "Inventory Tracker"
        assert len(result["project_info"]["tasks"]) == 4
        assert path.exists()

    def test_default_next_steps_written(self, initialized):
        """The plan lists the standard next steps."""
        content = initialized.task_file.read_text()
        for step in DEFAULT_NEXT_STEPS:
            assert f"- {step}\n" in content

    def test_initialize_write_failure(self, tmp_path, sample_requirements):
        """A root that cannot be written yields a failure result."""
        result = ProjectManager(tmp_path / "missing").initialize(sample_requirements)

        assert result["success"] is False
        assert result["message"].startswith("Failed to initialize project: Could not write task file")

    def test_initialize_analyzer_error(self, manager):
        """Unexpected errors are reported, not raised."""
        with patch.object(manager.analyzer, "analyze", side_effect=RuntimeError("boom")):
            result = manager.initialize("Tasks:\n- A\n")

        assert result == {"success": False, "message": "Failed to initialize project: boom"}

    def test_initialize_records_one_duration(self, manager):
        """Initialization records a single duration metric."""
        manager.initialize("Tasks:\n- A\n")

        metrics = performance_monitor.get_metrics("initialize_project_duration")
        assert len(metrics["initialize_project_duration"]) == 1


class TestCompleteTask:
    """Test cases for task completion."""

    def test_complete(self, initialized):
        """Completing a listed task succeeds."""
        result = initialized.complete_task("Add CSV export")

        assert result["success"] is True
        assert result["message"] == "Task 'Add CSV export' marked as completed"
        assert result["reason"] == "updated"

    def test_description_lookalikes_survive(self, manager):
        """Status-like lines in the overview are kept and not read as status."""
        manager.initialize(
            "Project Name: Demo\nProject Description:\n- Status: draft\n- Last Updated: March 2024\n\n"
            "Tasks:\n- Build login\n"
        )

        assert manager.complete_task("Build login")["success"] is True

        assert "- Status: draft\n- Last Updated: March 2024\n" in manager.task_file.read_text()
        status = manager.get_status()["status"]
        assert status["status"] == "IN PROGRESS"
        assert status["last_updated"] != "March 2024"

    def test_mark_pending(self, initialized):
        """A completed task can be reopened."""
        initialized.complete_task("Add CSV export")
        result = initialized.complete_task("Add CSV export", completed=False)

        assert result["message"] == "Task 'Add CSV export' marked as pending"

    def test_already_completed(self, initialized):
        """Completing twice is reported as unchanged."""
        initialized.complete_task("Add CSV export")
        result = initialized.complete_task("Add CSV export")

        assert result["success"] is False
        assert result["reason"] == "unchanged"
        assert result["message"] == (
            "Failed to update task 'Add CSV export'. Task is already marked as completed."
        )

    def test_unknown_task(self, initialized):
        """Unknown titles fail with a not-found reason."""
        result = initialized.complete_task("Nope")

        assert result["success"] is False
        assert result["reason"] == "task_not_found"
        assert result["message"] == "Failed to update task 'Nope'. Task not found in TASK.mdc."

    def test_missing_file(self, manager):
        """Without a plan the failure names the missing file."""
        result = manager.complete_task("A")

        assert result["reason"] == "missing_file"
        assert result["message"] == "Failed to update task 'A'. TASK.mdc file does not exist."
        assert not manager.task_file.exists()

    def test_unexpected_error(self, manager):
        """Exceptions from the store become failure results."""
        with patch.object(manager.task_file, "apply_status", side_effect=RuntimeError("disk gone")):
            result = manager.complete_task("A")

        assert result["success"] is False
        assert result["message"] == "Error updating task: disk gone"

    def test_update_event(self, initialized):
        """Each completion attempt fires the task_updated hook."""
        received = []
        observability_hooks.register_hook("task_updated", lambda **data: received.append(data))

        initialized.complete_task("Nope")

        assert received[0]["task_title"] == "Nope"
        assert received[0]["outcome"] == "task_not_found"


class TestStatus:
    """Test cases for status reads."""

    def test_status(self, initialized):
        """Status reports every task and its flag."""
        initialized.complete_task("Design database schema")
        result = initialized.get_status()

        status = result["status"]
        assert result["success"] is True
        assert status["project_name"] == "Inventory Tracker"
        assert status["status"] == "IN PROGRESS"
        assert status["completed_tasks"] == 1
        assert status["total_tasks"] == 4
        assert {"title": "Design database schema", "completed": True} in status["tasks"]

    def test_status_missing_file(self, manager):
        """A missing plan is a failure with the store's message."""
        assert manager.get_status() == {"success": False, "message": "TASK.mdc file not found"}


class TestResume:
    """Test cases for resuming a project."""

    def test_resume_fresh_project(self, initialized):
        """HIGH tasks are suggested first."""
        result = initialized.resume()

        assert result["success"] is True
        assert result["project_name"] == "Inventory Tracker"
        assert result["progress"] == "0/4 tasks completed"
        assert result["next_tasks"] == ["Design database schema"]
        assert result["message"] == "Project resumed successfully"

    def test_resume_after_high_done(self, initialized):
        """Once HIGH work is done the MEDIUM tier is next."""
        initialized.complete_task("Design database schema")
        result = initialized.resume()

        assert result["progress"] == "1/4 tasks completed"
        assert result["next_tasks"] == ["Build stock update form", "Add CSV export"]

    def test_resume_missing_file(self, manager):
        """Resuming without a plan fails."""
        assert manager.resume() == {"success": False, "message": "TASK.mdc file not found"}

    def test_next_tasks_limit(self, manager):
        """At most three titles are suggested."""
        status = _status(("core a", False), ("core b", False), ("core c", False), ("core d", False))
        assert manager.next_tasks(status) == ["core a", "core b", "core c"]

    def test_next_tasks_all_done(self, manager):
        """Nothing is suggested when everything is done."""
        assert manager.next_tasks(_status(("A", True))) == []

    def test_next_tasks_low_only(self, manager):
        """LOW tasks are suggested when nothing else is open."""
        status = _status(("Setup database", True), ("Dark mode (optional)", False))
        assert manager.next_tasks(status) == ["Dark mode (optional)"]

    def test_resume_rules_differ_from_extraction(self, manager):
        """Resume ranks "high" words up and ignores "urgent"."""
        status = _status(("Urgent: fix crash", False), ("Highlight search results", False))
        assert manager.next_tasks(status) == ["Highlight search results"]

    def test_resume_rules_have_no_medium_keywords(self, manager):
        """UI words rank as MEDIUM alongside unmatched titles."""
        status = _status(("Polish UI", False), ("Add export", False), ("Optional tour", False))
        assert manager.next_tasks(status) == ["Polish UI", "Add export"]

    def test_injected_classifier(self, tmp_path):
        """Resume ranks with the classifier it was given."""
        classifier = PriorityClassifier(rules=[PriorityRule(Priority.HIGH, ("docs",))], default=Priority.LOW)
        manager = ProjectManager(tmp_path, priority_classifier=classifier)

        status = _status(("Write code", False), ("Write docs", False))
        assert manager.next_tasks(status) == ["Write docs"]


class TestFunctionalEntryPoints:
    """Test cases for the module-level operations."""

    def test_lifecycle(self, tmp_path):
        """The module functions drive the same workflow."""
        assert initialize_project(tmp_path, "Project Name: Demo\n\nTasks:\n- Build login\n- urgent: fix crash\n")["success"]
        assert complete_task(str(tmp_path), "Build login")["success"]

        status = get_project_status(tmp_path)["status"]
        assert [(t["title"], t["completed"]) for t in status["tasks"]] == [
            ("urgent: fix crash", False),
            ("Build login", True),
        ]

        resumed = resume_project(tmp_path)
        assert resumed["next_tasks"] == ["urgent: fix crash"]

    def test_custom_task_file(self, tmp_path):
        """A ProjectManager can be given its own task file."""
        manager = ProjectManager(tmp_path, task_file=TaskFile(tmp_path, filename="PLAN.md"))
        result = manager.initialize("Tasks:\n- A\n")

        assert result["message"].startswith("Project initialized with Task-Master. PLAN.md created at")
        assert (tmp_path / "PLAN.md").exists()
