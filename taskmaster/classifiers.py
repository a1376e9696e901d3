"""Keyword classifiers for task priority and project type.

Both classifiers lowercase the whole input and look for keyword substrings,
walking their rule tables in order. The first rule with a hit decides.
"""

from __future__ import annotations

from typing import Sequence

from .catalog import (
    DEFAULT_PRIORITY,
    DEFAULT_PRIORITY_RULES,
    DEFAULT_PROJECT_TYPE,
    DEFAULT_PROJECT_TYPE_RULES,
    PriorityRule,
    ProjectTypeRule,
)
from .models import Priority, ProjectType


class PriorityClassifier:
    """Map a short text fragment to a priority tier."""

    def __init__(
        self,
        rules: Sequence[PriorityRule] = DEFAULT_PRIORITY_RULES,
        default: Priority = DEFAULT_PRIORITY,
    ):
        self.rules = tuple(rules)
        self.default = default

    def classify(self, text: str) -> Priority:
        lowered = (text or "").lower()
        for rule in self.rules:
            if any(keyword in lowered for keyword in rule.keywords):
                return rule.priority
        return self.default

    __call__ = classify


class ProjectTypeClassifier:
    """Map a full requirements document to a project archetype."""

    def __init__(
        self,
        rules: Sequence[ProjectTypeRule] = DEFAULT_PROJECT_TYPE_RULES,
        default: ProjectType = DEFAULT_PROJECT_TYPE,
    ):
        self.rules = tuple(rules)
        self.default = default

    def classify(self, text: str) -> ProjectType:
        lowered = (text or "").lower()
        for rule in self.rules:
            if any(keyword in lowered for keyword in rule.keywords):
                return rule.project_type
        return self.default

    __call__ = classify


_default_priority_classifier = PriorityClassifier()
_default_project_type_classifier = ProjectTypeClassifier()


def classify_priority(text: str) -> Priority:
    """Classify ``text`` with the default priority rules."""
    return _default_priority_classifier.classify(text)


def classify_project_type(text: str) -> ProjectType:
    """Classify ``text`` with the default project-type rules."""
    return _default_project_type_classifier.classify(text)
