"""
Static descriptors for every API operation the client performs.

Each descriptor records the endpoint template, HTTP method, whether
successful reads are cached, and which endpoints a successful mutation
must evict from the cache.
"""

from __future__ import annotations

from dataclasses import dataclass
from urllib.parse import quote

PROJECTS = "/projects"
PROJECT_SEARCH = "/projects/search"
PROJECT_DETAIL = "/projects/{project_id}"


@dataclass(frozen=True)
class OperationDescriptor:
    """One domain action against the API.

    Example:
        >>> GET_PROJECT.render(project_id="7")
        '/projects/7'
        >>> DELETE_PROJECT.scope(project_id="7")
        ('/projects', '/projects/search', '/projects/7')
    """

    name: str
    method: str
    endpoint: str
    cacheable: bool = False
    invalidates: tuple[str, ...] = ()
    retry: bool = True

    def render(self, **params: str) -> str:
        """Fill the endpoint template, URL-encoding every parameter."""
        return _render(self.endpoint, params)

    def scope(self, **params: str) -> tuple[str, ...]:
        """Concrete endpoints whose cached reads this operation evicts."""
        return tuple(_render(template, params) for template in self.invalidates)


def _render(template: str, params: dict[str, str]) -> str:
    return template.format(**{k: quote(str(v), safe="") for k, v in params.items()})


HEALTH = OperationDescriptor(
    name="check_health",
    method="GET",
    endpoint="/health",
    retry=False,
)

LIST_PROJECTS = OperationDescriptor(
    name="get_all_projects",
    method="GET",
    endpoint=PROJECTS,
    cacheable=True,
)

SEARCH_PROJECTS = OperationDescriptor(
    name="search_projects",
    method="GET",
    endpoint=PROJECT_SEARCH,
    cacheable=True,
)

GET_PROJECT = OperationDescriptor(
    name="get_project_by_id",
    method="GET",
    endpoint=PROJECT_DETAIL,
    cacheable=True,
)

CREATE_PROJECT = OperationDescriptor(
    name="create_project",
    method="POST",
    endpoint=PROJECTS,
    invalidates=(PROJECTS, PROJECT_SEARCH),
)

UPDATE_PROJECT = OperationDescriptor(
    name="update_project",
    method="PUT",
    endpoint=PROJECT_DETAIL,
    invalidates=(PROJECTS, PROJECT_SEARCH, PROJECT_DETAIL),
)

DELETE_PROJECT = OperationDescriptor(
    name="delete_project",
    method="DELETE",
    endpoint=PROJECT_DETAIL,
    invalidates=(PROJECTS, PROJECT_SEARCH, PROJECT_DETAIL),
)
