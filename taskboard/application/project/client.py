"""
Project API client.

Public request facade used by the dashboard. Every operation returns a
ResultEnvelope; no exception escapes to the caller.
"""

import time
from typing import Any, Optional
from urllib.parse import quote

import structlog

from taskboard.application.context import ClientContext
from taskboard.application.errors.classifier import classify
from taskboard.domain.project.operations import (
    CREATE_PROJECT,
    DELETE_PROJECT,
    GET_PROJECT,
    HEALTH,
    LIST_PROJECTS,
    PROJECT_SEARCH,
    PROJECTS,
    SEARCH_PROJECTS,
    UPDATE_PROJECT,
    OperationDescriptor,
)
from taskboard.domain.project.validation import is_valid_status, validate_project_data
from taskboard.domain.shared.envelope import ErrorCode, ResultEnvelope
from taskboard.domain.shared.errors import (
    InvalidResponseError,
    OfflineError,
    ValidationError,
)
from taskboard.infrastructure.cache.response_cache import (
    CacheStats,
    endpoint_scope,
    make_cache_key,
)
from taskboard.infrastructure.http.transport import RawResponse

logger = structlog.get_logger(__name__)


class ProjectApiClient:
    """Resilient client for the taskboard project API.

    Flow per call:
    1. Validate inputs locally
    2. Fail fast when offline
    3. Serve cacheable reads from cache
    4. Run the request through the retry controller
    5. Cache successful reads, evict the scope of successful writes
    """

    def __init__(self, context: ClientContext) -> None:
        """Initialize client.

        Args:
            context: Shared cache, connectivity, transport and retry state
        """
        self.context = context

    # ─────────────────────────────────────────────────────────
    # Reads
    # ─────────────────────────────────────────────────────────

    async def check_health(self) -> ResultEnvelope:
        """Check server status. Single attempt, short timeout, never cached."""
        logger.info("Checking server health")
        return await self._execute(
            HEALTH,
            HEALTH.render(),
            timeout=self.context.settings.health_timeout,
        )

    async def get_all_projects(self) -> ResultEnvelope:
        """List every project, with nested users."""
        return await self._execute(LIST_PROJECTS, LIST_PROJECTS.render())

    async def get_projects_by_status(self, status: str) -> ResultEnvelope:
        """List projects in one status, filtered locally from the full list.

        Args:
            status: ``en_proceso`` or ``terminado``
        """
        if not is_valid_status(status):
            return self._invalid(['Status must be "en_proceso" or "terminado"'])

        result = await self.get_all_projects()
        if not result.success:
            return result

        projects = result.data if isinstance(result.data, list) else []
        filtered = [p for p in projects if isinstance(p, dict) and p.get("status") == status]
        return ResultEnvelope.ok(filtered, status=200)

    async def search_projects(self, term: Optional[str]) -> ResultEnvelope:
        """Search projects by name or id.

        A blank term returns an empty list without a network call.
        """
        if term is None or not str(term).strip():
            return ResultEnvelope.ok([], status=200)

        endpoint = f"{SEARCH_PROJECTS.render()}?q={quote(str(term).strip(), safe='')}"
        return await self._execute(SEARCH_PROJECTS, endpoint)

    async def get_project_by_id(self, project_id: Any) -> ResultEnvelope:
        """Fetch one project."""
        errors = self._check_id(project_id)
        if errors:
            return self._invalid(errors)

        return await self._execute(GET_PROJECT, GET_PROJECT.render(project_id=str(project_id)))

    # ─────────────────────────────────────────────────────────
    # Writes
    # ─────────────────────────────────────────────────────────

    async def create_project(self, project_data: Any) -> ResultEnvelope:
        """Create a project.

        Args:
            project_data: ``{name, description, startDate, endDate, status}``
        """
        errors = validate_project_data(project_data, is_creation=True)
        if errors:
            return self._invalid(errors)

        logger.info("Creating project", name=project_data.get("name"))
        return await self._execute(
            CREATE_PROJECT,
            CREATE_PROJECT.render(),
            body=project_data,
            scope=CREATE_PROJECT.scope(),
        )

    async def update_project(self, project_id: Any, project_data: Any) -> ResultEnvelope:
        """Update a project with a partial body."""
        errors = self._check_id(project_id)
        if errors:
            return self._invalid(errors)

        errors = validate_project_data(project_data, is_creation=False)
        if errors:
            return self._invalid(errors)

        pid = str(project_id)
        logger.info("Updating project", project_id=pid, fields=sorted(project_data))
        return await self._execute(
            UPDATE_PROJECT,
            UPDATE_PROJECT.render(project_id=pid),
            body=project_data,
            scope=UPDATE_PROJECT.scope(project_id=pid),
        )

    async def delete_project(self, project_id: Any) -> ResultEnvelope:
        """Delete a project."""
        errors = self._check_id(project_id)
        if errors:
            return self._invalid(errors)

        pid = str(project_id)
        logger.info("Deleting project", project_id=pid)
        return await self._execute(
            DELETE_PROJECT,
            DELETE_PROJECT.render(project_id=pid),
            scope=DELETE_PROJECT.scope(project_id=pid),
        )

    # ─────────────────────────────────────────────────────────
    # Cache hooks
    # ─────────────────────────────────────────────────────────

    def clear_projects_cache(self, project_id: Optional[Any] = None) -> int:
        """Evict list and search entries, plus one project's detail if given.

        Returns:
            Number of entries removed
        """
        endpoints: tuple[str, ...] = (PROJECTS, PROJECT_SEARCH)
        if project_id is not None:
            endpoints += (GET_PROJECT.render(project_id=str(project_id)),)
        return self.context.cache.invalidate(endpoint_scope(endpoints))

    def clear_cache(self) -> None:
        """Drop every cached response."""
        self.context.cache.clear()

    def cache_stats(self) -> CacheStats:
        """Cache contents for debugging."""
        return self.context.cache.stats()

    # ─────────────────────────────────────────────────────────
    # Internals
    # ─────────────────────────────────────────────────────────

    @staticmethod
    def _check_id(project_id: Any) -> list[str]:
        if project_id is None or not str(project_id).strip():
            return ["Project ID is required"]
        return []

    @staticmethod
    def _invalid(errors: list[str]) -> ResultEnvelope:
        logger.info("Validation failed", errors=errors)
        return classify(ValidationError("; ".join(errors), errors)).to_envelope()

    async def _execute(
        self,
        descriptor: OperationDescriptor,
        endpoint: str,
        body: Any = None,
        scope: tuple[str, ...] = (),
        timeout: Optional[float] = None,
    ) -> ResultEnvelope:
        ctx = self.context

        if not ctx.connectivity.is_online:
            logger.warning("Offline, request skipped", operation=descriptor.name, endpoint=endpoint)
            return classify(OfflineError("No internet connection"), online=False).to_envelope()

        key = make_cache_key(descriptor.method, endpoint, body)
        if descriptor.cacheable:
            cached = ctx.cache.get(key)
            if cached is not None:
                logger.info("Served from cache", operation=descriptor.name, endpoint=endpoint)
                return cached

        request_timeout = timeout or ctx.settings.timeout
        start_time = time.time()

        async def attempt() -> RawResponse:
            return await ctx.transport.send(endpoint, descriptor.method, body, request_timeout)

        try:
            raw = await ctx.retry.execute(
                attempt,
                max_attempts=None if descriptor.retry else 1,
                operation=descriptor.name,
            )
            result = self._to_envelope(raw)
        except Exception as e:
            classified = classify(e, online=ctx.connectivity.is_online)
            logger.error(
                "Request failed",
                operation=descriptor.name,
                endpoint=endpoint,
                code=classified.code.value,
                error=str(e),
            )
            return classified.to_envelope()

        if not result.success:
            return result

        if descriptor.cacheable:
            ctx.cache.set(key, result)
        if scope:
            ctx.cache.invalidate(endpoint_scope(scope))

        logger.info(
            "Request succeeded",
            operation=descriptor.name,
            endpoint=endpoint,
            status=result.status,
            time_ms=round((time.time() - start_time) * 1000, 2),
        )
        return result

    @staticmethod
    def _to_envelope(raw: RawResponse) -> ResultEnvelope:
        """Unwrap the API envelope when the body carries one."""
        body = raw.data
        if not isinstance(body, dict) or "success" not in body:
            return ResultEnvelope.ok(body, status=raw.status)

        if body["success"]:
            # /health and DELETE answer without a "data" key
            if "data" in body:
                return ResultEnvelope.ok(body["data"], status=raw.status)
            rest = {k: v for k, v in body.items() if k != "success"}
            return ResultEnvelope.ok(rest, status=raw.status)

        if not body.get("error"):
            raise InvalidResponseError("Error response without message")

        try:
            code = ErrorCode(body.get("code"))
        except ValueError:
            code = ErrorCode.UNKNOWN_ERROR
        return ResultEnvelope.fail(code, str(body["error"]))
