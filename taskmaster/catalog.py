"""Keyword tables and the default task catalog.

Everything here is immutable and built once at import time. The classifiers
and the requirements analyzer receive these tables through their
constructors, so alternative tables can be injected in tests or by callers.
"""

from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType
from typing import List, Mapping, Tuple

from .models import Priority, ProjectType, Task


@dataclass(frozen=True)
class PriorityRule:
    """Keywords that, when any is present, assign ``priority``."""

    priority: Priority
    keywords: Tuple[str, ...]


@dataclass(frozen=True)
class ProjectTypeRule:
    """Keywords that, when any is present, select ``project_type``."""

    project_type: ProjectType
    keywords: Tuple[str, ...]


# Checked in order; the first rule with a matching keyword wins.
DEFAULT_PRIORITY_RULES: Tuple[PriorityRule, ...] = (
    PriorityRule(Priority.HIGH, ("urgent", "critical", "important", "high priority")),
    PriorityRule(Priority.LOW, ("low priority", "optional", "if time permits")),
    PriorityRule(
        Priority.HIGH,
        ("database", "authentication", "core", "foundation", "architecture", "security"),
    ),
    PriorityRule(Priority.MEDIUM, ("ui", "ux", "design", "style", "appearance", "documentation")),
)

# Resume ranks plan titles with its own, shorter table; anything unmatched is MEDIUM.
RESUME_PRIORITY_RULES: Tuple[PriorityRule, ...] = (
    PriorityRule(
        Priority.HIGH,
        (
            "high", "critical", "important", "database", "authentication",
            "core", "foundation", "architecture", "security",
        ),
    ),
    PriorityRule(Priority.LOW, ("low", "optional", "if time permits")),
)

DEFAULT_PRIORITY = Priority.MEDIUM

DEFAULT_PROJECT_TYPE_RULES: Tuple[ProjectTypeRule, ...] = (
    ProjectTypeRule(
        ProjectType.WEB,
        ("web", "website", "frontend", "backend", "fullstack", "html", "css", "javascript"),
    ),
    ProjectTypeRule(
        ProjectType.MOBILE,
        ("mobile", "app", "ios", "android", "flutter", "react native"),
    ),
    ProjectTypeRule(ProjectType.API, ("api", "rest", "graphql", "microservice")),
    ProjectTypeRule(
        ProjectType.DATA,
        ("data", "analysis", "analytics", "machine learning", "ml", "ai"),
    ),
)

DEFAULT_PROJECT_TYPE = ProjectType.GENERIC


def _entry(title: str, priority: Priority, description: str) -> Tuple[str, Priority, str]:
    return (title, priority, description)


_H, _M, _L = Priority.HIGH, Priority.MEDIUM, Priority.LOW

_CATALOG_ENTRIES = {
    ProjectType.WEB: (
        _entry("Setup project structure", _H, "Initialize the web project structure and configuration files"),
        _entry("Implement database models", _H, "Design and implement database schema and models"),
        _entry("Create authentication system", _H, "Implement user authentication and authorization"),
        _entry("Develop API endpoints", _M, "Create backend API endpoints for data access"),
        _entry("Build frontend UI", _M, "Develop the user interface components"),
        _entry("Implement business logic", _M, "Develop core business logic and functionality"),
        _entry("Write tests", _M, "Create unit and integration tests"),
        _entry("Setup deployment pipeline", _L, "Configure CI/CD and deployment process"),
    ),
    ProjectType.MOBILE: (
        _entry("Setup project structure", _H, "Initialize the mobile app project structure"),
        _entry("Design app architecture", _H, "Define the app architecture and navigation flow"),
        _entry("Implement authentication", _H, "Create user authentication and session management"),
        _entry("Develop core screens", _M, "Build the main screens and functionality"),
        _entry("Implement API integration", _M, "Connect to backend services and APIs"),
        _entry("Add offline support", _L, "Implement data caching and offline functionality"),
        _entry("Write tests", _M, "Create unit and UI tests"),
        _entry("Prepare for app store submission", _L, "Configure app for distribution"),
    ),
    ProjectType.API: (
        _entry("Define API specifications", _H, "Create OpenAPI/Swagger specifications"),
        _entry("Setup project structure", _H, "Initialize the API project structure"),
        _entry("Implement database models", _H, "Design and implement data models"),
        _entry("Create authentication middleware", _H, "Implement API authentication and authorization"),
        _entry("Develop API endpoints", _M, "Implement the API endpoints and controllers"),
        _entry("Add validation and error handling", _M, "Implement input validation and error responses"),
        _entry("Write tests", _M, "Create unit and integration tests"),
        _entry("Setup monitoring and logging", _L, "Configure API monitoring and logging"),
    ),
    ProjectType.DATA: (
        _entry("Setup data processing environment", _H, "Configure data processing tools and libraries"),
        _entry("Implement data collection", _H, "Create data collection and ingestion processes"),
        _entry("Develop data cleaning pipeline", _H, "Implement data cleaning and preprocessing"),
        _entry("Create data models", _M, "Develop analytical or machine learning models"),
        _entry("Implement data visualization", _M, "Create visualizations and dashboards"),
        _entry("Setup data storage", _M, "Configure databases or data warehouses"),
        _entry("Write tests", _M, "Create unit tests for data processing"),
        _entry("Document data dictionary", _L, "Create documentation for data schemas and models"),
    ),
    ProjectType.GENERIC: (
        _entry("Setup project structure", _H, "Initialize the project structure and configuration"),
        _entry("Define core requirements", _H, "Clarify and document detailed requirements"),
        _entry("Implement core functionality", _H, "Develop the main functionality of the project"),
        _entry("Create documentation", _M, "Write user and developer documentation"),
        _entry("Implement testing", _M, "Create tests for the project"),
        _entry("Setup deployment process", _L, "Configure deployment and distribution"),
    ),
}

DEFAULT_TASK_CATALOG: Mapping[ProjectType, Tuple[Tuple[str, Priority, str], ...]] = MappingProxyType(
    _CATALOG_ENTRIES
)


def default_tasks(
    project_type: ProjectType,
    catalog: Mapping[ProjectType, Tuple[Tuple[str, Priority, str], ...]] = DEFAULT_TASK_CATALOG,
) -> List[Task]:
    """Return fresh Task objects for ``project_type`` in catalog order.

    Unknown types fall back to the generic entry.
    """
    try:
        key = ProjectType(project_type)
    except ValueError:
        key = ProjectType.GENERIC
    entries = catalog.get(key, catalog[ProjectType.GENERIC])
    return [
        Task(title=title, priority=priority, description=description)
        for title, priority, description in entries
    ]
