"""Requirements analysis for Task-Master.

Turns a free-form requirements document into a :class:`ProjectInfo`: the
project name, description, environment setup, and an ordered task list.

Tasks are taken from the first strategy that yields any:

1. bullet or numbered lines inside a ``Tasks:`` block,
2. markdown headings, turned into ``Implement <heading>`` tasks,
3. the default catalog entry for the inferred project type.
"""

from __future__ import annotations

import logging
import re
from typing import List, Mapping, Optional, Tuple

from .catalog import DEFAULT_TASK_CATALOG, default_tasks
from .classifiers import PriorityClassifier, ProjectTypeClassifier
from .models import Priority, ProjectInfo, ProjectType, Task
from .taskmaster_logging import log_performance, log_requirements_analyzed

logger = logging.getLogger("taskmaster.analyzer")

DEFAULT_PROJECT_NAME = "New Project"

# Heading texts that describe the document itself rather than work to do.
RESERVED_HEADINGS = frozenset({"project name", "project description", "environment setup", "tasks"})

# A block ends at the first blank line, heading line or bold line.
_BLOCK_TERMINATOR = re.compile(r"\n(?:[ \t]*(?:\n|$)|#|\*\*)")
_LIST_ITEM = re.compile(r"^[ \t]*(?:[-*]|\d+\.)(?:[ \t]+(?P<text>.*))?$")
_HEADING = re.compile(r"^[ \t]*#+[ \t]*(?P<text>.*)$")
_FENCE = re.compile(r"^[ \t]*(```|~~~)")


def _label_pattern(label: str) -> re.Pattern:
    """Match ``label`` at the start of a line, as ``Label:``, ``**Label:**`` or ``## Label``."""
    words = r"[ \t]+".join(re.escape(word) for word in label.split())
    return re.compile(
        r"^[ \t]*(?:#+[ \t]*)?(?:\*\*)?" + words
        + r"(?:[ \t]*(?:\*\*)?[ \t]*:(?:\*\*)?|(?:\*\*)?[ \t]*$)",
        re.IGNORECASE | re.MULTILINE,
    )


_PROJECT_NAME_LABEL = _label_pattern("Project Name")
_DESCRIPTION_LABEL = _label_pattern("Project Description")
_ENVIRONMENT_LABEL = _label_pattern("Environment Setup")
_TASKS_LABEL = _label_pattern("Tasks")


class RequirementsAnalyzer:
    """Extract structured project information from requirements text."""

    STRATEGY_EXPLICIT = "explicit"
    STRATEGY_HEADINGS = "headings"
    STRATEGY_CATALOG = "catalog"

    def __init__(
        self,
        priority_classifier: Optional[PriorityClassifier] = None,
        project_type_classifier: Optional[ProjectTypeClassifier] = None,
        catalog: Mapping[ProjectType, Tuple[Tuple[str, Priority, str], ...]] = DEFAULT_TASK_CATALOG,
    ):
        self.priority_classifier = priority_classifier or PriorityClassifier()
        self.project_type_classifier = project_type_classifier or ProjectTypeClassifier()
        self.catalog = catalog

    @log_performance("analyze_requirements")
    def analyze(self, requirements: str) -> ProjectInfo:
        """Parse ``requirements`` into a ProjectInfo. Never raises for text input."""
        text = self._normalize(requirements)

        project_name = self.extract_project_name(text)
        description = self.extract_block(text, _DESCRIPTION_LABEL)
        environment = self.extract_block(text, _ENVIRONMENT_LABEL)
        tasks, strategy = self.extract_tasks(text)

        self._warn_duplicates(tasks)

        info = ProjectInfo(
            project_name=project_name,
            project_description=description,
            environment_setup=environment,
            tasks=tasks,
        )

        logger.info(
            f"Extracted {len(tasks)} tasks for '{project_name}' using the {strategy} strategy"
        )
        log_requirements_analyzed(project_name, len(tasks), strategy)
        return info

    # ------------------------------------------------------------------
    # Field extraction
    # ------------------------------------------------------------------

    def extract_project_name(self, text: str) -> str:
        """Return the text following ``Project Name:`` or the default name."""
        match = _PROJECT_NAME_LABEL.search(text)
        if not match:
            return DEFAULT_PROJECT_NAME
        remainder = text[match.end():].lstrip()
        value = remainder.split("\n", 1)[0].strip()
        if not value or value.startswith("#"):
            return DEFAULT_PROJECT_NAME
        return value

    def extract_block(self, text: str, label: re.Pattern) -> str:
        """Return the block introduced by ``label``, or an empty string."""
        body = self._block_after(text, label)
        return body.strip() if body is not None else ""

    def _block_after(self, text: str, label: re.Pattern) -> Optional[str]:
        match = label.search(text)
        if not match:
            return None
        remainder = text[match.end():].lstrip()
        end = _BLOCK_TERMINATOR.search(remainder)
        return remainder[: end.start()] if end else remainder

    # ------------------------------------------------------------------
    # Task extraction
    # ------------------------------------------------------------------

    def extract_tasks(self, text: str) -> Tuple[List[Task], str]:
        """Return the task list and the name of the strategy that produced it."""
        tasks = self.tasks_from_list(text)
        if tasks:
            return tasks, self.STRATEGY_EXPLICIT

        tasks = self.tasks_from_headings(text)
        if tasks:
            return tasks, self.STRATEGY_HEADINGS

        project_type = self.project_type_classifier.classify(text)
        logger.debug(f"No tasks found in requirements; using {project_type.value} defaults")
        return default_tasks(project_type, self.catalog), self.STRATEGY_CATALOG

    def tasks_from_list(self, text: str) -> List[Task]:
        block = self._block_after(text, _TASKS_LABEL)
        if block is None:
            return []

        tasks: List[Task] = []
        for line in block.split("\n"):
            match = _LIST_ITEM.match(line)
            if not match:
                continue
            title = (match.group("text") or "").strip()
            if title:
                tasks.append(Task(title=title, priority=self.priority_classifier.classify(title)))
        return tasks

    def tasks_from_headings(self, text: str) -> List[Task]:
        tasks: List[Task] = []
        in_fence = False
        for line in text.split("\n"):
            # "# comment" lines inside fenced code are not headings
            if _FENCE.match(line):
                in_fence = not in_fence
                continue
            if in_fence:
                continue
            match = _HEADING.match(line)
            if not match:
                continue
            heading = match.group("text").strip()
            if not heading or heading.rstrip(":").strip().lower() in RESERVED_HEADINGS:
                continue
            tasks.append(
                Task(
                    title=f"Implement {heading}",
                    priority=self.priority_classifier.classify(heading),
                    description=f"Based on the {heading} section in requirements",
                )
            )
        return tasks

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _normalize(requirements: Optional[str]) -> str:
        if requirements is None:
            return ""
        if not isinstance(requirements, str):
            requirements = str(requirements)
        return requirements.replace("\r\n", "\n").replace("\r", "\n")

    @staticmethod
    def _warn_duplicates(tasks: List[Task]) -> None:
        seen = set()
        for task in tasks:
            if task.title in seen:
                logger.warning(
                    f"Duplicate task title '{task.title}'; status updates will only reach the first one"
                )
            seen.add(task.title)


_default_analyzer: Optional[RequirementsAnalyzer] = None


def analyze_requirements(requirements: str) -> ProjectInfo:
    """Analyze ``requirements`` with a shared default analyzer."""
    global _default_analyzer
    if _default_analyzer is None:
        _default_analyzer = RequirementsAnalyzer()
    return _default_analyzer.analyze(requirements)
