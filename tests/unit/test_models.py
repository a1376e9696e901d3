"""Unit tests for Task-Master data models.

This module tests the data structures, their serialization,
and validation logic.
"""

import pytest

from taskmaster.models import (
    ParsedStatus,
    Priority,
    ProjectInfo,
    Task,
    TaskEntry,
    coerce_task,
    group_by_priority,
)


class TestPriority:
    """Test cases for the Priority enum."""

    def test_priority_is_string_valued(self):
        """Priorities compare equal to their names."""
        assert Priority.HIGH == "HIGH"
        assert Priority.MEDIUM.value == "MEDIUM"

    @pytest.mark.parametrize(
        "value,expected",
        [
            ("high", Priority.HIGH),
            (" LOW ", Priority.LOW),
            (Priority.MEDIUM, Priority.MEDIUM),
            ("urgent", Priority.MEDIUM),
            (None, Priority.MEDIUM),
            (3, Priority.MEDIUM),
        ],
    )
    def test_coerce(self, value, expected):
        """Unknown values fall back to MEDIUM."""
        assert Priority.coerce(value) is expected


class TestTask:
    """Test cases for Task."""

    def test_task_defaults(self):
        """A task needs only a title."""
        task = Task(title="Build login")

        assert task.priority is Priority.MEDIUM
        assert task.description == ""
        assert task.subtasks == []

    def test_string_priority_is_coerced(self):
        """String priorities become enum members."""
        task = Task(title="Fix crash", priority="high")
        assert task.priority is Priority.HIGH

    def test_to_dict_omits_empty_subtasks(self):
        """Subtasks only appear when present."""
        task = Task(title="Build login", priority=Priority.HIGH, description="OAuth")

        assert task.to_dict() == {
            "title": "Build login",
            "priority": "HIGH",
            "description": "OAuth",
        }

    def test_from_dict_with_subtasks(self):
        """Dictionary form round-trips subtasks."""
        task = Task.from_dict({
            "title": "Ship release",
            "priority": "LOW",
            "subtasks": ["Tag", "Publish"],
        })

        assert task.priority is Priority.LOW
        assert task.subtasks == ["Tag", "Publish"]
        assert task.to_dict()["subtasks"] == ["Tag", "Publish"]

    def test_validate_valid_task(self):
        """A normal task has no issues."""
        assert Task(title="Build login").validate() == []

    def test_validate_empty_title(self):
        """Empty or blank titles are rejected."""
        assert "Task title is required" in Task(title="  ").validate()

    def test_validate_multiline_title(self):
        """Titles must fit on one checkbox line."""
        issues = Task(title="Line one\nLine two").validate()
        assert len(issues) == 1
        assert "single line" in issues[0]

    def test_coerce_task_accepts_dict(self):
        """coerce_task builds a Task from a dictionary."""
        task = coerce_task({"title": "Write tests", "priority": "MEDIUM"})
        assert isinstance(task, Task)
        assert task.title == "Write tests"


class TestProjectInfo:
    """Test cases for ProjectInfo."""

    def test_to_dict(self):
        """ProjectInfo serializes its tasks."""
        info = ProjectInfo(
            project_name="Demo",
            project_description="Desc",
            environment_setup="make",
            tasks=[Task(title="A", priority=Priority.HIGH)],
        )

        data = info.to_dict()

        assert data["project_name"] == "Demo"
        assert data["environment_setup"] == "make"
        assert data["tasks"] == [{"title": "A", "priority": "HIGH", "description": ""}]
        assert ProjectInfo.from_dict(data).tasks[0].priority is Priority.HIGH

    def test_validate_reports_duplicates(self):
        """Duplicate titles are flagged because titles identify tasks."""
        info = ProjectInfo(project_name="Demo", tasks=[Task(title="A"), Task(title="A")])
        assert "Duplicate task title: A" in info.validate()

    def test_validate_requires_tasks(self):
        """An empty plan is reported."""
        assert "At least one task is required" in ProjectInfo(project_name="Demo").validate()

    def test_group_by_priority_keeps_order(self):
        """Tiers come out HIGH, MEDIUM, LOW with extraction order inside each."""
        tasks = [
            Task(title="m1"),
            Task(title="l1", priority=Priority.LOW),
            Task(title="h1", priority=Priority.HIGH),
            Task(title="m2"),
        ]

        groups = group_by_priority(tasks)

        assert list(groups) == [Priority.HIGH, Priority.MEDIUM, Priority.LOW]
        assert [t.title for t in groups[Priority.MEDIUM]] == ["m1", "m2"]


class TestParsedStatus:
    """Test cases for ParsedStatus."""

    def test_counts_are_derived(self):
        """Completed and total counts come from the task list."""
        status = ParsedStatus(
            project_name="Demo",
            status="IN PROGRESS",
            last_updated="2024-01-01 00:00:00",
            tasks=[
                TaskEntry(title="A", completed=True),
                TaskEntry(title="B", completed=False),
                TaskEntry(title="C", completed=False),
            ],
        )

        assert status.completed_tasks == 1
        assert status.total_tasks == 3
        assert [t.title for t in status.incomplete] == ["B", "C"]
        assert status.progress() == "1/3 tasks completed"
        assert status.get_completion_rate() == pytest.approx(100 / 3)

    def test_to_dict(self):
        """Task entries serialize to title and completed only."""
        status = ParsedStatus(
            project_name="Demo",
            status="IN PROGRESS",
            last_updated="now",
            tasks=[TaskEntry(title="A", completed=True, line_index=7, indent="  ")],
        )

        assert status.to_dict() == {
            "project_name": "Demo",
            "status": "IN PROGRESS",
            "last_updated": "now",
            "tasks": [{"title": "A", "completed": True}],
            "completed_tasks": 1,
            "total_tasks": 1,
        }

    def test_empty_completion_rate(self):
        """No tasks means zero percent, not a division error."""
        status = ParsedStatus(project_name="Demo", status="IN PROGRESS", last_updated="now")
        assert status.get_completion_rate() == 0.0

    def test_from_dict(self):
        """Dictionary form restores entries."""
        status = ParsedStatus.from_dict({
            "project_name": "Demo",
            "tasks": [{"title": "A", "completed": True}],
        })

        assert status.status == "Unknown"
        assert status.tasks[0].completed is True
