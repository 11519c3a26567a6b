"""
Schedule progress for projects.

Pure date arithmetic over project start/end dates; the caller passes
``today`` so results are deterministic.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Optional

from taskboard.domain.project.models import Project, ProjectStatus

NEAR_COMPLETION_PERCENT = 75
WARNING_DAYS = 7
URGENT_DAYS = 3


@dataclass(frozen=True)
class ProjectProgress:
    """Elapsed share of a project's schedule."""

    percentage: int
    status: str  # unknown | active | near_completion | overdue | completed


@dataclass(frozen=True)
class DaysRemaining:
    """Countdown to a project's end date."""

    days: Optional[int]
    status: str  # unknown | overdue | today | warning | active
    percentage: int = 0

    @property
    def is_overdue(self) -> bool:
        return self.days is not None and self.days < 0

    @property
    def is_today(self) -> bool:
        return self.days == 0

    @property
    def is_urgent(self) -> bool:
        return self.days is not None and 0 < self.days <= URGENT_DAYS


def _elapsed_percent(start: date, end: date, today: date) -> float:
    total = (end - start).days
    if total <= 0:
        return 100.0 if today >= end else 0.0
    elapsed = (today - start).days
    return max(0.0, min(100.0, elapsed / total * 100))


def calculate_project_progress(project: Project, today: date) -> ProjectProgress:
    """Progress of a project at ``today``.

    Finished projects are always 100% / completed.
    """
    if project.start_date is None or project.end_date is None:
        return ProjectProgress(percentage=0, status="unknown")

    percentage = _elapsed_percent(project.start_date, project.end_date, today)

    if project.status == ProjectStatus.FINISHED:
        return ProjectProgress(percentage=100, status="completed")
    if today > project.end_date:
        status = "overdue"
    elif percentage > NEAR_COMPLETION_PERCENT:
        status = "near_completion"
    else:
        status = "active"

    return ProjectProgress(percentage=round(percentage), status=status)


def calculate_days_remaining(
    end_date: Optional[date],
    today: date,
    start_date: Optional[date] = None,
) -> DaysRemaining:
    """Days left until ``end_date`` (inclusive of the end day)."""
    if end_date is None:
        return DaysRemaining(days=None, status="unknown")

    days = (end_date - today).days
    percentage = 0
    if start_date is not None:
        percentage = round(_elapsed_percent(start_date, end_date, today))

    if days < 0:
        status = "overdue"
    elif days == 0:
        status = "today"
    elif days <= WARNING_DAYS:
        status = "warning"
    else:
        status = "active"

    return DaysRemaining(days=days, status=status, percentage=percentage)
