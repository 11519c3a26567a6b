"""
Project domain models.

These models represent the taskboard API project payloads
mapped to our domain.
"""

from datetime import date
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field


class ProjectStatus(str, Enum):
    """Project lifecycle states used by the API."""

    IN_PROGRESS = "en_proceso"
    FINISHED = "terminado"


class ProjectUser(BaseModel):
    """User assigned to a project.

    Example:
        >>> user = ProjectUser(id="1", name="Maria", role="admin")
        >>> assert user.profile_image is None
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str = Field(..., description="User ID")
    name: str = Field("", description="Display name")
    role: str = Field("", description="Role in the project")
    profile_image: Optional[str] = Field(None, alias="profileImage", description="Avatar URL")


class Project(BaseModel):
    """Project as returned by the API.

    Example:
        >>> project = Project.from_api(
        ...     {
        ...         "id": 1,
        ...         "name": "Inventory",
        ...         "startDate": "2025-01-15",
        ...         "endDate": "2025-03-15",
        ...         "status": "en_proceso",
        ...         "users": [],
        ...     }
        ... )
        >>> assert project.id == "1"
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str = Field(..., description="Project ID")
    name: str = Field(..., description="Project name")
    description: str = Field("", description="Free text description")
    start_date: Optional[date] = Field(None, alias="startDate", description="Start date")
    end_date: Optional[date] = Field(None, alias="endDate", description="Due date")
    status: ProjectStatus = Field(ProjectStatus.IN_PROGRESS, description="Lifecycle state")
    users: list[ProjectUser] = Field(default_factory=list, description="Assigned users")

    @classmethod
    def from_api(cls, payload: dict[str, Any]) -> "Project":
        """Parse an API project object.

        The API returns numeric IDs from SQL; they are normalized to str.
        """
        data = dict(payload)
        data["id"] = str(data.get("id", ""))
        data["description"] = data.get("description") or ""
        data["users"] = [
            {**user, "id": str(user.get("id", ""))} for user in data.get("users") or []
        ]
        return cls.model_validate(data)
