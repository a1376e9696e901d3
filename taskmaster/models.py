"""Data models for Task-Master project planning.

This module contains the core data structures used throughout the Task-Master
system, representing extracted tasks, project information, and the status
parsed back from a project's task file.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Union


class Priority(str, Enum):
    """Priority tiers, in the order tasks are grouped and ranked."""

    HIGH = "HIGH"
    MEDIUM = "MEDIUM"
    LOW = "LOW"

    @classmethod
    def coerce(cls, value: Union["Priority", str, None]) -> "Priority":
        """Return a Priority for ``value``, falling back to MEDIUM."""
        if isinstance(value, Priority):
            return value
        if isinstance(value, str):
            try:
                return cls(value.strip().upper())
            except ValueError:
                return cls.MEDIUM
        return cls.MEDIUM


PRIORITY_ORDER = (Priority.HIGH, Priority.MEDIUM, Priority.LOW)


class ProjectType(str, Enum):
    """Project archetypes used to select a fallback task set."""

    WEB = "web"
    MOBILE = "mobile"
    API = "api"
    DATA = "data"
    GENERIC = "generic"


class UpdateOutcome(str, Enum):
    """Result of a checkbox update against the task file."""

    UPDATED = "updated"
    MISSING_FILE = "missing_file"
    TASK_NOT_FOUND = "task_not_found"
    UNCHANGED = "unchanged"
    IO_ERROR = "io_error"


@dataclass(slots=True)
class Task:
    """A single planned task. The title is its identity in the task file."""

    title: str
    priority: Priority = Priority.MEDIUM
    description: str = ""
    subtasks: List[str] = field(default_factory=list)

    def __post_init__(self) -> None:
        self.priority = Priority.coerce(self.priority)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary representation."""
        data: Dict[str, Any] = {
            "title": self.title,
            "priority": self.priority.value,
            "description": self.description,
        }
        if self.subtasks:
            data["subtasks"] = list(self.subtasks)
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Task":
        """Create from dictionary representation."""
        return cls(
            title=data["title"],
            priority=Priority.coerce(data.get("priority")),
            description=data.get("description") or "",
            subtasks=list(data.get("subtasks") or []),
        )

    def validate(self) -> List[str]:
        """Validate the task and return any issues."""
        issues = []

        if not self.title or not self.title.strip():
            issues.append("Task title is required")
        elif "\n" in self.title or "\r" in self.title:
            issues.append(f"Task title must be a single line: {self.title!r}")
        for subtask in self.subtasks:
            if "\n" in subtask or "\r" in subtask:
                issues.append(f"Subtask must be a single line: {subtask!r}")

        return issues


@dataclass(slots=True)
class ProjectInfo:
    """Structured interpretation of a requirements document."""

    project_name: str
    project_description: str = ""
    environment_setup: str = ""
    tasks: List[Task] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary representation."""
        return {
            "project_name": self.project_name,
            "project_description": self.project_description,
            "environment_setup": self.environment_setup,
            "tasks": [task.to_dict() for task in self.tasks],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ProjectInfo":
        """Create from dictionary representation."""
        return cls(
            project_name=data["project_name"],
            project_description=data.get("project_description", ""),
            environment_setup=data.get("environment_setup", ""),
            tasks=[Task.from_dict(item) for item in data.get("tasks", [])],
        )

    def validate(self) -> List[str]:
        """Validate the project info and return any issues."""
        issues = []

        if not self.project_name:
            issues.append("Project name is required")
        if not self.tasks:
            issues.append("At least one task is required")
        for task in self.tasks:
            issues.extend(task.validate())

        seen = set()
        for task in self.tasks:
            if task.title in seen:
                issues.append(f"Duplicate task title: {task.title}")
            seen.add(task.title)

        return issues


@dataclass(slots=True)
class TaskEntry:
    """Representation of a single checkbox line read back from the task file."""

    title: str
    completed: bool
    line_index: int = -1
    indent: str = ""

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary representation."""
        return {
            "title": self.title,
            "completed": self.completed,
        }


@dataclass(slots=True)
class ParsedStatus:
    """Project status derived from the task file; never stored."""

    project_name: str
    status: str
    last_updated: str
    tasks: List[TaskEntry] = field(default_factory=list)

    @property
    def completed_tasks(self) -> int:
        return sum(1 for task in self.tasks if task.completed)

    @property
    def total_tasks(self) -> int:
        return len(self.tasks)

    @property
    def incomplete(self) -> List[TaskEntry]:
        return [task for task in self.tasks if not task.completed]

    def progress(self) -> str:
        """Human readable progress summary."""
        return f"{self.completed_tasks}/{self.total_tasks} tasks completed"

    def get_completion_rate(self) -> float:
        """Get task completion rate as percentage."""
        if self.total_tasks == 0:
            return 0.0
        return (self.completed_tasks / self.total_tasks) * 100

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary representation."""
        return {
            "project_name": self.project_name,
            "status": self.status,
            "last_updated": self.last_updated,
            "tasks": [task.to_dict() for task in self.tasks],
            "completed_tasks": self.completed_tasks,
            "total_tasks": self.total_tasks,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ParsedStatus":
        """Create from dictionary representation."""
        return cls(
            project_name=data.get("project_name", "Unknown"),
            status=data.get("status", "Unknown"),
            last_updated=data.get("last_updated", "Unknown"),
            tasks=[
                TaskEntry(title=item["title"], completed=bool(item.get("completed")))
                for item in data.get("tasks", [])
            ],
        )


def group_by_priority(tasks: List[Task]) -> Dict[Priority, List[Task]]:
    """Group tasks by tier, HIGH first, keeping input order within each tier."""
    groups: Dict[Priority, List[Task]] = {}
    for task in tasks:
        groups.setdefault(Priority.coerce(task.priority), []).append(task)
    return {priority: groups[priority] for priority in PRIORITY_ORDER if priority in groups}


def coerce_task(task: Union[Task, Dict[str, Any]]) -> Task:
    """Accept either a Task or its dictionary form."""
    if isinstance(task, Task):
        return task
    return Task.from_dict(task)


def coerce_tasks(tasks: Optional[List[Union[Task, Dict[str, Any]]]]) -> List[Task]:
    return [coerce_task(task) for task in tasks or []]
