"""Project workflow for Task-Master.

This module composes the requirements analyzer and the task file into the
four operations exposed to callers: initialize a project, complete a task,
read the project status, and resume work with a short list of next tasks.
Every operation returns a result dictionary; none of them raise.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from .analyzer import RequirementsAnalyzer
from .catalog import RESUME_PRIORITY_RULES
from .classifiers import PriorityClassifier
from .models import PRIORITY_ORDER, ParsedStatus, Priority, UpdateOutcome
from .task_file import TaskFile
from .taskmaster_logging import (
    log_error_with_context,
    log_performance,
    log_project_resumed,
    log_status_read,
    log_task_update,
)

logger = logging.getLogger("taskmaster.workflow")

DEFAULT_NEXT_STEPS = (
    "Review and refine tasks",
    "Set up development environment",
    "Begin implementation of high priority tasks",
)

MAX_NEXT_TASKS = 3


class ProjectManager:
    """Run Task-Master operations against one project root."""

    def __init__(
        self,
        root: Union[Path, str],
        *,
        analyzer: Optional[RequirementsAnalyzer] = None,
        priority_classifier: Optional[PriorityClassifier] = None,
        task_file: Optional[TaskFile] = None,
    ):
        self.root = Path(root).expanduser()
        self.analyzer = analyzer or RequirementsAnalyzer()
        self.priority_classifier = priority_classifier or PriorityClassifier(RESUME_PRIORITY_RULES)
        self.task_file = task_file or TaskFile(self.root)

    # ------------------------------------------------------------------
    # Initialization
    # ------------------------------------------------------------------

    @log_performance("initialize_project")
    def initialize(self, requirements: str) -> Dict[str, Any]:
        """Analyze requirements and write a fresh task file."""
        try:
            project_info = self.analyzer.analyze(requirements)

            issues = project_info.validate()
            if issues:
                logger.warning(f"Project plan issues: {issues}")

            task_file_path = self.task_file.create(
                project_info.project_name,
                project_info.project_description,
                project_info.tasks,
                environment_setup=project_info.environment_setup,
                next_steps=list(DEFAULT_NEXT_STEPS),
                notes="",
            )

            logger.info(f"Initialized project '{project_info.project_name}' at {self.root}")
            return {
                "success": True,
                "message": (
                    f"Project initialized with Task-Master. "
                    f"{self.task_file.filename} created at {task_file_path}"
                ),
                "project_info": project_info.to_dict(),
                "task_file_path": str(task_file_path),
            }

        except Exception as e:
            log_error_with_context(e, {"operation": "initialize_project", "root": str(self.root)})
            return {
                "success": False,
                "message": f"Failed to initialize project: {e}",
            }

    # ------------------------------------------------------------------
    # Task completion
    # ------------------------------------------------------------------

    def complete_task(self, task_title: str, completed: bool = True) -> Dict[str, Any]:
        """Mark a task completed (or pending again)."""
        state = "completed" if completed else "pending"
        try:
            outcome = self.task_file.apply_status(task_title, completed)
            log_task_update(str(self.root), task_title, completed, outcome.value)

            if outcome is UpdateOutcome.UPDATED:
                return {
                    "success": True,
                    "message": f"Task '{task_title}' marked as {state}",
                    "reason": outcome.value,
                }

            return {
                "success": False,
                "message": f"Failed to update task '{task_title}'. {self._failure_detail(outcome, state)}",
                "reason": outcome.value,
            }

        except Exception as e:
            log_error_with_context(e, {
                "operation": "complete_task",
                "root": str(self.root),
                "task_title": task_title,
                "completed": completed,
            })
            return {
                "success": False,
                "message": f"Error updating task: {e}",
                "reason": UpdateOutcome.IO_ERROR.value,
            }

    def _failure_detail(self, outcome: UpdateOutcome, state: str) -> str:
        filename = self.task_file.filename
        if outcome is UpdateOutcome.MISSING_FILE:
            return f"{filename} file does not exist."
        if outcome is UpdateOutcome.TASK_NOT_FOUND:
            return f"Task not found in {filename}."
        if outcome is UpdateOutcome.UNCHANGED:
            return f"Task is already marked as {state}."
        return f"Could not read or write {filename}."

    # ------------------------------------------------------------------
    # Status
    # ------------------------------------------------------------------

    def get_status(self) -> Dict[str, Any]:
        """Read the task file back into a status summary."""
        try:
            status = self.task_file.read_status()
            if not isinstance(status, ParsedStatus):
                return {"success": False, "message": status["error"]}

            log_status_read(str(self.root), status.completed_tasks, status.total_tasks)
            return {"success": True, "status": status.to_dict()}

        except Exception as e:
            log_error_with_context(e, {"operation": "get_status", "root": str(self.root)})
            return {
                "success": False,
                "message": f"Error getting project status: {e}",
            }

    def resume(self) -> Dict[str, Any]:
        """Summarize progress and suggest up to three tasks to pick up next."""
        try:
            status = self.task_file.read_status()
            if not isinstance(status, ParsedStatus):
                return {"success": False, "message": status["error"]}

            next_tasks = self.next_tasks(status)
            log_project_resumed(str(self.root), next_tasks)

            return {
                "success": True,
                "project_name": status.project_name,
                "status": status.status,
                "progress": status.progress(),
                "next_tasks": next_tasks,
                "message": "Project resumed successfully",
            }

        except Exception as e:
            log_error_with_context(e, {"operation": "resume_project", "root": str(self.root)})
            return {
                "success": False,
                "message": f"Error resuming project: {e}",
            }

    def next_tasks(self, status: ParsedStatus, limit: int = MAX_NEXT_TASKS) -> List[str]:
        """Titles from the highest non-empty tier of incomplete tasks.

        The task file does not keep priorities, so each title is ranked again
        from its text with the resume rules.
        """
        buckets: Dict[Priority, List[str]] = {priority: [] for priority in PRIORITY_ORDER}
        for entry in status.incomplete:
            buckets[self.priority_classifier.classify(entry.title)].append(entry.title)

        for priority in PRIORITY_ORDER:
            if buckets[priority]:
                return buckets[priority][:limit]
        return []


# ----------------------------------------------------------------------
# Functional entry points
# ----------------------------------------------------------------------

def _run(project_root: Union[Path, str], operation: str, call) -> Dict[str, Any]:
    try:
        manager = ProjectManager(project_root)
    except Exception as e:
        log_error_with_context(e, {"operation": operation, "root": str(project_root)})
        return {"success": False, "message": f"Invalid project root {project_root!r}: {e}"}
    return call(manager)


def initialize_project(project_root: Union[Path, str], requirements: str) -> Dict[str, Any]:
    return _run(project_root, "initialize_project", lambda manager: manager.initialize(requirements))


def complete_task(project_root: Union[Path, str], task_title: str, completed: bool = True) -> Dict[str, Any]:
    return _run(project_root, "complete_task", lambda manager: manager.complete_task(task_title, completed))


def get_project_status(project_root: Union[Path, str]) -> Dict[str, Any]:
    return _run(project_root, "get_status", lambda manager: manager.get_status())


def resume_project(project_root: Union[Path, str]) -> Dict[str, Any]:
    return _run(project_root, "resume_project", lambda manager: manager.resume())
