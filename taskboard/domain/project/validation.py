"""
Local validation of project payloads.

Runs before any network call so that invalid input never reaches
the retry loop.
"""

from __future__ import annotations

import re
from datetime import date
from typing import Any, Optional

from taskboard.domain.project.models import ProjectStatus

MAX_NAME_LENGTH = 100
MAX_DESCRIPTION_LENGTH = 500
MAX_ASSIGNED_USERS = 7

_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")
_STATUSES = {s.value for s in ProjectStatus}


def parse_iso_date(value: Any) -> Optional[date]:
    """Parse a strict ``YYYY-MM-DD`` calendar date.

    Returns:
        The date, or None when the format is wrong or the day does not
        exist (e.g. 2025-02-30).
    """
    if not isinstance(value, str) or not _DATE_RE.match(value):
        return None
    try:
        return date.fromisoformat(value)
    except ValueError:
        return None


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def validate_project_data(project_data: Any, is_creation: bool = False) -> list[str]:
    """Validate a project create/update body.

    Args:
        project_data: Request body as sent to the API (camelCase keys)
        is_creation: Require name, startDate and endDate

    Returns:
        List of violations, empty when the body is valid

    Example:
        >>> validate_project_data({"name": ""}, is_creation=True)[0]
        'Project name is required'
    """
    if not isinstance(project_data, dict):
        return ["Project data must be an object"]

    errors: list[str] = []

    start_missing = is_creation and _is_blank(project_data.get("startDate"))
    end_missing = is_creation and _is_blank(project_data.get("endDate"))

    if is_creation:
        if not isinstance(project_data.get("name"), str) or _is_blank(project_data.get("name")):
            errors.append("Project name is required")
        if start_missing:
            errors.append("Start date is required")
        if end_missing:
            errors.append("End date is required")

    if "name" in project_data:
        name = project_data["name"]
        if not isinstance(name, str) or not name.strip():
            if not is_creation:
                errors.append("Project name must be non-empty text")
        elif len(name.strip()) > MAX_NAME_LENGTH:
            errors.append(f"Project name cannot exceed {MAX_NAME_LENGTH} characters")

    start: Optional[date] = None
    end: Optional[date] = None

    # a present but empty date would clear it on the server
    if "startDate" in project_data and not start_missing:
        start = parse_iso_date(project_data["startDate"])
        if start is None:
            errors.append("Start date must be a valid date (YYYY-MM-DD)")

    if "endDate" in project_data and not end_missing:
        end = parse_iso_date(project_data["endDate"])
        if end is None:
            errors.append("End date must be a valid date (YYYY-MM-DD)")

    if start is not None and end is not None and end <= start:
        errors.append("End date must be later than start date")

    if "status" in project_data and not is_valid_status(project_data["status"]):
        errors.append('Status must be "en_proceso" or "terminado"')

    if "description" in project_data:
        description = project_data["description"]
        if not isinstance(description, str):
            errors.append("Description must be text")
        elif len(description) > MAX_DESCRIPTION_LENGTH:
            errors.append(f"Description cannot exceed {MAX_DESCRIPTION_LENGTH} characters")

    if "users" in project_data:
        users = project_data["users"]
        if not isinstance(users, list):
            errors.append("Users must be a list")
        elif len(users) > MAX_ASSIGNED_USERS:
            errors.append(f"A project cannot have more than {MAX_ASSIGNED_USERS} users")

    return errors


def is_valid_status(status: Any) -> bool:
    """True for the two statuses the API accepts."""
    return isinstance(status, str) and status in _STATUSES
