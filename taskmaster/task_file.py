"""Task file management for Task-Master.

A project's plan lives in a single markdown document (``TASK.mdc`` by
default) at the project root. This module renders that document, flips
individual task checkboxes in place, and parses the document back into a
:class:`ParsedStatus`.

Updates are strictly textual: only the matched checkbox line and the
``Last Updated`` line change, every other byte of the file is preserved.
"""

from __future__ import annotations

import logging
import os
import re
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Tuple, Union

from .models import (
    ParsedStatus,
    Task,
    TaskEntry,
    UpdateOutcome,
    coerce_tasks,
    group_by_priority,
)
from .taskmaster_logging import (
    log_error_with_context,
    log_operation,
    log_performance,
    log_task_file_created,
)

logger = logging.getLogger("taskmaster.task_file")

TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"
DEFAULT_STATUS = "IN PROGRESS"
UNKNOWN = "Unknown"


class TaskFileError(RuntimeError):
    """Raised when the task file cannot be written."""

    def __init__(self, message: str, *, path: Path, operation: str):
        super().__init__(message)
        self.path = path
        self.operation = operation

    def to_dict(self) -> Dict[str, str]:
        return {"error": str(self), "path": str(self.path), "operation": self.operation}


def current_timestamp() -> str:
    return datetime.now(timezone.utc).strftime(TIMESTAMP_FORMAT)


class TaskFile:
    """Own the task file of one project root."""

    TASK_FILE_ENV = "TASKMASTER_TASK_FILE"
    DEFAULT_FILENAME = "TASK.mdc"

    _TITLE_PATTERN = re.compile(r"^# (?P<name>[^\r\n]*) - Project Plan[ \t]*(?=\r?$)", re.MULTILINE)
    _CHECKBOX_PATTERN = re.compile(r"^(?P<indent>[ \t]*)- \[(?P<mark>[ xX])\] (?P<title>.*?)[ \t]*$")
    _STATUS_PATTERN = re.compile(r"^[ \t]*- Status:[ \t]*(?P<value>[^\r\n]*?)[ \t]*(?=\r?$)", re.MULTILINE)
    _LAST_UPDATED_PATTERN = re.compile(r"^(?P<prefix>[ \t]*- Last Updated:)[ \t]*(?P<value>[^\r\n]*?)[ \t]*(?=\r?$)", re.MULTILINE)
    _PROGRESS_HEADING = re.compile(r"^## Progress Tracking[ \t]*(?=\r?$)", re.MULTILINE)
    _SECTION_HEADING = re.compile(r"^## ", re.MULTILINE)

    def __init__(self, root: Union[Path, str], filename: Optional[str] = None):
        """Bind to ``root``; nothing is read or created until an operation runs."""
        self.root = Path(root).expanduser().resolve()
        self.filename = filename or os.getenv(self.TASK_FILE_ENV) or self.DEFAULT_FILENAME

    @property
    def path(self) -> Path:
        """Get path to the task file."""
        return self.root / self.filename

    def exists(self) -> bool:
        try:
            return self.path.is_file()
        except OSError:
            return False

    # ------------------------------------------------------------------
    # Creation
    # ------------------------------------------------------------------

    @log_performance("create_task_file")
    def create(
        self,
        project_name: str,
        project_description: str,
        tasks: Iterable[Union[Task, Dict[str, Any]]],
        environment_setup: str = "",
        next_steps: Optional[List[str]] = None,
        notes: str = "",
    ) -> Path:
        """Render the project plan and write it, replacing any existing file."""
        task_list = coerce_tasks(list(tasks))
        issues = [issue for task in task_list for issue in task.validate()]
        if issues:
            raise ValueError("; ".join(issues))

        timestamp = current_timestamp()
        content = self.render(
            project_name,
            project_description,
            task_list,
            environment_setup=environment_setup,
            next_steps=next_steps or [],
            notes=notes,
            started=timestamp,
            last_updated=timestamp,
        )

        try:
            self._write(content)
        except OSError as e:
            log_error_with_context(e, {"operation": "create_task_file", "path": str(self.path)})
            raise TaskFileError(
                f"Could not write task file {self.path}: {e}",
                path=self.path,
                operation="create",
            ) from e

        logger.info(f"Task file written to {self.path} with {len(task_list)} tasks")
        log_task_file_created(str(self.root), str(self.path), len(task_list))
        return self.path

    def render(
        self,
        project_name: str,
        project_description: str,
        tasks: List[Task],
        *,
        environment_setup: str = "",
        next_steps: Optional[List[str]] = None,
        notes: str = "",
        started: Optional[str] = None,
        last_updated: Optional[str] = None,
    ) -> str:
        """Render the full plan document."""
        started = started or current_timestamp()
        last_updated = last_updated or started
        steps_block = "\n".join(f"- {step}" for step in next_steps or [])

        sections = [
            f"# {project_name} - Project Plan",
            f"## Project Overview\n{project_description}",
            f"## Environment Setup\n```bash\n{environment_setup}\n```",
            f"## Implementation Tasks\n\n{self.format_tasks(tasks)}",
            "## Progress Tracking\n"
            f"- Started: {started}\n"
            f"- Last Updated: {last_updated}\n"
            f"- Status: {DEFAULT_STATUS}",
            f"## Next Steps\n{steps_block}",
            f"## Notes\n{notes}",
        ]
        return "\n\n".join(sections) + "\n"

    def format_tasks(self, tasks: List[Task]) -> str:
        """Group tasks under per-tier headings; empty tiers are left out."""
        blocks = []
        for priority, tier in group_by_priority(tasks).items():
            lines = [f"### {priority.value} Priority Tasks"]
            for task in tier:
                lines.append(f"- [ ] {task.title}")
                if task.description:
                    lines.append(f"  - {task.description}")
                for subtask in task.subtasks:
                    lines.append(f"  - [ ] {subtask}")
            blocks.append("\n".join(lines))
        return "\n\n".join(blocks)

    # ------------------------------------------------------------------
    # Status updates
    # ------------------------------------------------------------------

    def update_status(self, task_title: str, completed: bool = True) -> bool:
        """Flip one task's checkbox. Returns False when nothing was written."""
        return self.apply_status(task_title, completed) is UpdateOutcome.UPDATED

    @log_performance("update_task_status")
    def apply_status(self, task_title: str, completed: bool = True) -> UpdateOutcome:
        """Flip one task's checkbox and report exactly what happened."""
        if not self.exists():
            logger.info(f"No task file at {self.path}; cannot update '{task_title}'")
            return UpdateOutcome.MISSING_FILE

        try:
            content = self._read()
        except (OSError, UnicodeDecodeError) as e:
            log_error_with_context(e, {"operation": "update_task_status", "path": str(self.path)})
            return UpdateOutcome.IO_ERROR

        match = self._task_line_pattern(task_title).search(content) if task_title else None
        if not match:
            logger.info(f"Task '{task_title}' not found in {self.path}")
            return UpdateOutcome.TASK_NOT_FOUND

        if (match.group("mark").lower() == "x") == bool(completed):
            logger.info(f"Task '{task_title}' is already {'completed' if completed else 'pending'}")
            return UpdateOutcome.UNCHANGED

        mark = "x" if completed else " "
        updated = content[: match.start("mark")] + mark + content[match.end("mark"):]
        start, end = self._progress_bounds(updated)
        progress = self._LAST_UPDATED_PATTERN.sub(
            lambda m: f"{m.group('prefix')} {current_timestamp()}", updated[start:end], count=1
        )
        updated = updated[:start] + progress + updated[end:]

        try:
            with log_operation("write_task_status", path=str(self.path), task_title=task_title):
                self._write(updated)
        except OSError as e:
            log_error_with_context(e, {
                "operation": "update_task_status",
                "path": str(self.path),
                "task_title": task_title,
                "completed": completed,
            })
            return UpdateOutcome.IO_ERROR

        logger.info(f"Marked '{task_title}' as {'completed' if completed else 'pending'}")
        return UpdateOutcome.UPDATED

    def _progress_bounds(self, content: str) -> Tuple[int, int]:
        """Span of the Progress Tracking section, or the whole text when it has none.

        Status and Last Updated are only read and rewritten inside this span,
        so look-alike lines in the overview or task notes are left alone.
        """
        heading = self._PROGRESS_HEADING.search(content)
        if not heading:
            return 0, len(content)
        following = self._SECTION_HEADING.search(content, heading.end())
        return heading.end(), following.start() if following else len(content)

    def _task_line_pattern(self, task_title: str) -> re.Pattern:
        # The title is literal text, never a pattern
        return re.compile(
            r"^[ \t]*- \[(?P<mark>[ xX])\] " + re.escape(task_title) + r"[ \t]*(?=\r?$)",
            re.MULTILINE,
        )

    # ------------------------------------------------------------------
    # Status reads
    # ------------------------------------------------------------------

    def read_status(self) -> Union[ParsedStatus, Dict[str, str]]:
        """Parse the task file, or return ``{"error": ...}`` when it cannot be read."""
        if not self.exists():
            return {"error": f"{self.filename} file not found"}

        try:
            content = self._read()
        except (OSError, UnicodeDecodeError) as e:
            log_error_with_context(e, {"operation": "read_status", "path": str(self.path)})
            return {"error": f"Error getting project status: {e}"}

        return self.parse(content)

    def parse(self, content: str) -> ParsedStatus:
        """Parse plan text into a ParsedStatus."""
        title_match = self._TITLE_PATTERN.search(content)
        start, end = self._progress_bounds(content)
        status_match = self._STATUS_PATTERN.search(content, start, end)
        updated_match = self._LAST_UPDATED_PATTERN.search(content, start, end)

        return ParsedStatus(
            project_name=title_match.group("name") if title_match else UNKNOWN,
            status=status_match.group("value") if status_match else UNKNOWN,
            last_updated=updated_match.group("value") if updated_match else UNKNOWN,
            tasks=self._read_entries(content),
        )

    def _read_entries(self, content: str) -> List[TaskEntry]:
        """Collect every checkbox line, subtasks included."""
        entries: List[TaskEntry] = []
        for idx, line in enumerate(content.splitlines()):
            match = self._CHECKBOX_PATTERN.match(line)
            if not match or not match.group("title"):
                continue
            entries.append(
                TaskEntry(
                    title=match.group("title"),
                    completed=match.group("mark").lower() == "x",
                    line_index=idx,
                    indent=match.group("indent"),
                )
            )
        return entries

    def read_text(self) -> Optional[str]:
        """Return the raw plan text, if the file exists."""
        if not self.exists():
            return None
        return self._read()

    # ------------------------------------------------------------------
    # File access
    # ------------------------------------------------------------------

    def _read(self) -> str:
        # newline="" keeps line endings exactly as stored
        with self.path.open("r", encoding="utf-8", newline="") as handle:
            return handle.read()

    def _write(self, content: str) -> None:
        with self.path.open("w", encoding="utf-8", newline="") as handle:
            handle.write(content)
