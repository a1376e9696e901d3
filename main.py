"""MCP server exposing Task-Master project planning tools."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any, Dict, List, Optional

from mcp.server.fastmcp import FastMCP

from taskmaster import __version__
from taskmaster.task_file import TaskFile
from taskmaster.taskmaster_logging import setup_logging_from_env
from taskmaster.workflow import (
    complete_task as _complete_task,
    get_project_status as _get_project_status,
    initialize_project as _initialize_project,
    resume_project as _resume_project,
)

mcp = FastMCP("task-master")

PROJECT_ROOT_ENV = "TASKMASTER_PROJECT_ROOT"
SERVER_DESCRIPTION = "Project Planning and Task Management System for coding assistants"

logger = logging.getLogger("taskmaster.server")


def _candidate_bases() -> List[Path]:
    cwd = Path.cwd().resolve()
    return [cwd, *cwd.parents]


def _locate_project_root() -> Optional[Path]:
    """Nearest directory, from the working directory upwards, holding a task file."""
    for base in _candidate_bases():
        if TaskFile(base).exists():
            return base
    return None


def _resolve_root(root: Optional[str], *, search_parents: bool = True) -> Path:
    if root:
        resolved = Path(root).expanduser().resolve()
        if not resolved.is_dir():
            raise ValueError(f"Provided root '{root}' does not exist.")
        return resolved

    env_root = os.getenv(PROJECT_ROOT_ENV)
    if env_root:
        env_path = Path(env_root).expanduser().resolve()
        if not env_path.is_dir():
            raise ValueError(
                f"Environment variable {PROJECT_ROOT_ENV} points to '{env_root}', which does not exist."
            )
        return env_path

    if search_parents:
        detected_root = _locate_project_root()
        if detected_root:
            return detected_root

    return Path.cwd().resolve()


def _failure(message: str) -> Dict[str, Any]:
    return {"success": False, "message": message}


@mcp.tool()
def initialize_project(requirements: str, root: Optional[str] = None) -> Dict[str, Any]:
    """STEP 1: Analyze free-form project requirements and create the TASK.mdc plan.
    Recognizes 'Project Name:', 'Project Description:', 'Environment Setup:' and a
    'Tasks:' bullet list; falls back to section headings, then to a default task
    set for the inferred project type. Overwrites an existing plan in the root."""

    if not requirements or not requirements.strip():
        return _failure("Project root and requirements are required")
    try:
        project_root = _resolve_root(root, search_parents=False)
    except ValueError as e:
        return _failure(str(e))
    return _initialize_project(project_root, requirements)


@mcp.tool()
def complete_task(task_title: str, completed: bool = True, root: Optional[str] = None) -> Dict[str, Any]:
    """Mark a task in TASK.mdc as completed (or pending with completed=false).
    The title must match the task line exactly, as listed by get_project_status."""

    if not task_title:
        return _failure("Project root and task title are required")
    try:
        project_root = _resolve_root(root)
    except ValueError as e:
        return _failure(str(e))
    return _complete_task(project_root, task_title, completed)


@mcp.tool()
def get_project_status(root: Optional[str] = None) -> Dict[str, Any]:
    """Report the project name, status, last update time and every task with its completion flag."""

    try:
        project_root = _resolve_root(root)
    except ValueError as e:
        return _failure(str(e))
    return _get_project_status(project_root)


@mcp.tool()
def resume_project(root: Optional[str] = None) -> Dict[str, Any]:
    """Summarize progress and suggest up to three next tasks from the highest open priority tier."""

    try:
        project_root = _resolve_root(root)
    except ValueError as e:
        return _failure(str(e))
    return _resume_project(project_root)


@mcp.resource("task-master://info")
def resource_info() -> str:
    """Server name, version and description."""

    return "\n".join([
        "Task-Master MCP",
        f"Version: {__version__}",
        f"Description: {SERVER_DESCRIPTION}",
    ])


@mcp.resource("task-master://plan")
def resource_plan() -> str:
    """Raw TASK.mdc text for the detected project."""

    try:
        project_root = _resolve_root(None)
    except ValueError as e:
        return str(e)

    task_file = TaskFile(project_root)
    try:
        content = task_file.read_text()
    except (OSError, UnicodeDecodeError) as e:
        logger.error(f"Could not read {task_file.path}: {e}")
        return f"Could not read {task_file.path}: {e}"
    if content is None:
        return f"No {task_file.filename} found in {project_root}. Use initialize_project to create one."
    return content


def main() -> None:
    setup_logging_from_env()
    logger.info(f"Starting Task-Master MCP server {__version__}")
    mcp.run(transport="stdio")


if __name__ == "__main__":
    main()
