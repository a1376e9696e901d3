"""Command-line interface for Task-Master."""

from __future__ import annotations

import argparse
import logging
import os
import sys
from pathlib import Path
from typing import List, Optional

from . import __version__
from .taskmaster_logging import setup_logging_from_env
from .workflow import complete_task, get_project_status, initialize_project, resume_project

PROJECT_ROOT_ENV = "TASKMASTER_PROJECT_ROOT"

logger = logging.getLogger("taskmaster.cli")


def _project_root(explicit: Optional[str]) -> Path:
    root = explicit or os.getenv(PROJECT_ROOT_ENV)
    resolved = Path(root).expanduser().resolve() if root else Path.cwd()
    logger.debug(f"Using project root {resolved}")
    return resolved


def build_requirements(
    name: Optional[str] = None,
    description: Optional[str] = None,
    requirements_file: Optional[Path] = None,
) -> str:
    """Compose requirements text from CLI options.

    Raises FileNotFoundError when ``requirements_file`` does not exist.
    """
    requirements = ""
    if name:
        requirements += f"Project Name: {name}\n\n"
    if description:
        requirements += f"Project Description:\n{description}\n\n"
    if requirements_file:
        path = requirements_file.expanduser().resolve()
        if not path.is_file():
            raise FileNotFoundError(f"Requirements file not found: {path}")
        requirements += path.read_text(encoding="utf-8")
    return requirements


def _cmd_init(args: argparse.Namespace) -> int:
    try:
        requirements = build_requirements(args.name, args.description, args.requirements)
    except FileNotFoundError as e:
        print(str(e), file=sys.stderr)
        return 1

    if not requirements:
        print(
            "No project requirements provided. Use --name, --description, or --requirements options.",
            file=sys.stderr,
        )
        return 1

    result = initialize_project(_project_root(args.root), requirements)
    if not result["success"]:
        print(result["message"], file=sys.stderr)
        return 1
    print(f"Project initialized: {result['message']}")
    return 0


def _cmd_complete(args: argparse.Namespace) -> int:
    result = complete_task(_project_root(args.root), args.task, completed=not args.pending)
    if not result["success"]:
        print(result["message"], file=sys.stderr)
        return 1
    print(result["message"])
    return 0


def _cmd_status(args: argparse.Namespace) -> int:
    result = get_project_status(_project_root(args.root))
    if not result["success"]:
        print(result["message"], file=sys.stderr)
        return 1

    status = result["status"]
    print(f"Project: {status['project_name']}")
    print(f"Status: {status['status']}")
    print(f"Progress: {status['completed_tasks']}/{status['total_tasks']} tasks completed")
    print("\nTasks:")
    for task in status["tasks"]:
        mark = "✓" if task["completed"] else "☐"
        print(f"{mark} {task['title']}")
    return 0


def _cmd_resume(args: argparse.Namespace) -> int:
    result = resume_project(_project_root(args.root))
    if not result["success"]:
        print(result["message"], file=sys.stderr)
        return 1

    print(f"Project: {result['project_name']}")
    print(f"Status: {result['status']}")
    print(f"Progress: {result['progress']}")
    if result["next_tasks"]:
        print("\nNext tasks:")
        for title in result["next_tasks"]:
            print(f"- {title}")
    else:
        print("\nAll tasks are complete.")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="task-master",
        description="Task-Master - project planning and task tracking in a markdown task file",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")

    root_option = argparse.ArgumentParser(add_help=False)
    root_option.add_argument(
        "--root",
        help=f"Project root (defaults to ${PROJECT_ROOT_ENV} or the current directory)",
    )

    subparsers = parser.add_subparsers(dest="command")

    init_parser = subparsers.add_parser(
        "init", parents=[root_option], help="Initialize a new project with Task-Master"
    )
    init_parser.add_argument("-n", "--name", help="Project name")
    init_parser.add_argument("-d", "--description", help="Project description")
    init_parser.add_argument("-r", "--requirements", type=Path, help="Path to requirements file")
    init_parser.set_defaults(handler=_cmd_init)

    complete_parser = subparsers.add_parser(
        "complete", parents=[root_option], help="Mark a task as completed"
    )
    complete_parser.add_argument("task", help="Exact task title")
    complete_parser.add_argument(
        "--pending", action="store_true", help="Mark the task as pending instead"
    )
    complete_parser.set_defaults(handler=_cmd_complete)

    status_parser = subparsers.add_parser(
        "status", parents=[root_option], help="Get the current status of the project"
    )
    status_parser.set_defaults(handler=_cmd_status)

    resume_parser = subparsers.add_parser(
        "resume", parents=[root_option], help="Show progress and suggest the next tasks"
    )
    resume_parser.set_defaults(handler=_cmd_resume)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if not getattr(args, "handler", None):
        parser.print_help()
        return 1

    setup_logging_from_env(default_level="WARNING")
    return args.handler(args)


if __name__ == "__main__":
    sys.exit(main())
