"""Task-Master - requirements-to-task planning with a markdown task file."""

from .analyzer import RequirementsAnalyzer, analyze_requirements
from .classifiers import (
    PriorityClassifier,
    ProjectTypeClassifier,
    classify_priority,
    classify_project_type,
)
from .models import ParsedStatus, Priority, ProjectInfo, ProjectType, Task, UpdateOutcome
from .task_file import TaskFile, TaskFileError
from .workflow import (
    ProjectManager,
    complete_task,
    get_project_status,
    initialize_project,
    resume_project,
)

__version__ = "1.0.0"

__all__ = [
    "ParsedStatus",
    "Priority",
    "PriorityClassifier",
    "ProjectInfo",
    "ProjectManager",
    "ProjectType",
    "ProjectTypeClassifier",
    "RequirementsAnalyzer",
    "Task",
    "TaskFile",
    "TaskFileError",
    "UpdateOutcome",
    "analyze_requirements",
    "classify_priority",
    "classify_project_type",
    "complete_task",
    "get_project_status",
    "initialize_project",
    "resume_project",
]
