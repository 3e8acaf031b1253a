import asyncio
from base64 import b64encode
from typing import Any, BinaryIO, Self

import httpx
from loguru import logger

from youtrack_hub.core.config import Settings, get_settings
from youtrack_hub.core.constants import (
    DEFAULT_RESOLVED_STATE,
    DEFAULT_STATE_FIELD,
    ActivityCategory,
    FieldQueries,
)
from youtrack_hub.core.exceptions.base import AppException
from youtrack_hub.core.exceptions.domain import (
    ResourceNotFoundError,
    YouTrackAuthenticationError,
    YouTrackConnectionError,
    YouTrackRateLimitError,
)
from youtrack_hub.core.logger import sanitize_dict
from youtrack_hub.schemas.youtrack.activity import HistoryEvent
from youtrack_hub.schemas.youtrack.custom_field import FormattedFields
from youtrack_hub.schemas.youtrack.issue import (
    IDResult,
    Issue,
    IssueAttachment,
    IssueCreate,
    IssueResult,
    ProjectRef,
)
from youtrack_hub.services.history import get_resolved_timestamp


def build_issue_url(base_url: str, short_project_name: str, number_in_project: int) -> str:
    """Return the user facing (rather than REST API) URL of an issue.

    The link uses the short project name, so it breaks if the project is renamed.
    """
    path = f"../issue/{short_project_name}-{number_in_project}"
    return str(httpx.URL(base_url).join(path))


class YouTrackClient:
    """Async YouTrack REST API client using httpx."""

    def __init__(
        self,
        base_url: str,
        token: str,
        proxy_url: str | None = None,
        *,
        timeout: float = 30.0,
        max_retries: int = 3,
        page_size: int = 100,
        state_field_name: str = DEFAULT_STATE_FIELD,
        resolved_state_name: str = DEFAULT_RESOLVED_STATE,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        # Trailing slash keeps relative paths under the API prefix (".../api/issues")
        self.base_url = base_url.rstrip("/") + "/"
        self._auth_header = f"Bearer {token}"
        self._proxy_url = proxy_url
        self._timeout = timeout
        self._max_retries = max_retries
        self._page_size = page_size
        self.state_field_name = state_field_name
        self.resolved_state_name = resolved_state_name
        self._transport = transport
        self._client: httpx.AsyncClient | None = None
        logger.debug(
            f"YouTrackClient initialized: base_url={self.base_url}, proxy={proxy_url or 'None'}"
        )

    @classmethod
    def from_settings(cls, settings: Settings | None = None) -> "YouTrackClient":
        settings = settings or get_settings()
        return cls(
            settings.youtrack_base_url,
            settings.youtrack_token.get_secret_value(),
            settings.proxy_url,
            timeout=settings.request_timeout,
            max_retries=settings.max_retries,
            page_size=settings.page_size,
            state_field_name=settings.state_field_name,
            resolved_state_name=settings.resolved_state_name,
        )

    @property
    def _headers(self) -> dict[str, str]:
        return {
            "Authorization": self._auth_header,
            "Content-Type": "application/json",
            "Accept": "application/json",
        }

    async def _get_client(self) -> httpx.AsyncClient:
        if self._client is None or self._client.is_closed:
            client_kwargs: dict[str, Any] = {
                "base_url": self.base_url,
                "headers": self._headers,
                "timeout": httpx.Timeout(self._timeout),
            }

            if self._proxy_url:
                client_kwargs["proxy"] = self._proxy_url
                logger.debug(f"Using proxy: {self._proxy_url}")
            if self._transport is not None:
                client_kwargs["transport"] = self._transport

            self._client = httpx.AsyncClient(**client_kwargs)
        return self._client

    async def close(self) -> None:
        if self._client and not self._client.is_closed:
            await self._client.aclose()

    async def __aenter__(self) -> Self:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()

    async def _request(
        self,
        method: str,
        path: str,
        *,
        params: dict | None = None,
        json_data: dict | None = None,
    ) -> Any:
        """Make an authenticated request with rate limit handling and retries."""
        client = await self._get_client()
        logger.debug(f"{method} {path} params={sanitize_dict(params or {})}")

        for attempt in range(self._max_retries):
            try:
                response = await client.request(
                    method,
                    path,
                    params=params,
                    json=json_data,
                )

                if response.status_code == 200:
                    return response.json()

                if response.status_code == 401:
                    logger.warning("YouTrack authentication failed - check permanent token")
                    logger.error(f"YouTrack auth error response: {response.text}")
                    raise YouTrackAuthenticationError()

                if response.status_code == 403:
                    raise YouTrackAuthenticationError(
                        "Insufficient permissions for this YouTrack resource"
                    )

                if response.status_code == 404:
                    raise ResourceNotFoundError("YouTrack resource", path)

                if response.status_code == 429:
                    retry_after = int(response.headers.get("Retry-After", "10"))
                    if attempt < self._max_retries - 1:
                        wait = retry_after * (2**attempt)
                        logger.warning(
                            f"YouTrack rate limit hit, retrying in {wait}s (attempt {attempt + 1})"
                        )
                        await asyncio.sleep(wait)
                        continue
                    raise YouTrackRateLimitError(retry_after=retry_after)

                # Other errors
                error_msg = f"YouTrack API error: {response.status_code}"
                try:
                    error_body = response.json()
                    if isinstance(error_body, dict) and "error" in error_body:
                        error_msg += f" - {error_body['error']}"
                        if error_body.get("error_description"):
                            error_msg += f": {error_body['error_description']}"
                except ValueError:
                    error_msg += f" - {response.text[:200]}"

                raise YouTrackConnectionError(error_msg)

            except httpx.ConnectError as e:
                raise YouTrackConnectionError(
                    f"Cannot connect to YouTrack at {self.base_url}: {e}"
                ) from e
            except httpx.TimeoutException as e:
                if attempt < self._max_retries - 1:
                    wait = 2 ** (attempt + 1)
                    logger.warning(
                        f"YouTrack request timeout, retrying in {wait}s (attempt {attempt + 1})"
                    )
                    await asyncio.sleep(wait)
                    continue
                raise YouTrackConnectionError(
                    f"YouTrack request timed out after {self._max_retries} attempts"
                ) from e

        raise YouTrackConnectionError("Max retries exceeded")

    async def _get_paged(
        self,
        path: str,
        params: dict,
        *,
        max_results: int | None = None,
    ) -> list[dict]:
        """Collect a list endpoint page by page using `$skip`/`$top`."""
        if max_results is not None and max_results <= 0:
            return []

        items: list[dict] = []
        skip = 0

        while True:
            top = self._page_size
            if max_results is not None:
                top = min(top, max_results - len(items))
            page = await self._request("GET", path, params={**params, "$skip": skip, "$top": top})
            items.extend(page)

            if len(page) < top or (max_results is not None and len(items) >= max_results):
                break
            skip += len(page)

        return items

    # ─── Issues ───────────────────────────────────────────────────────

    async def list_issues(self, query: str, *, max_results: int | None = None) -> list[Issue]:
        """Search issues with a YouTrack query. Handles pagination automatically."""
        params = {"fields": FieldQueries.ISSUE, "query": query}
        data = await self._get_paged("issues", params, max_results=max_results)
        return [Issue.model_validate(i) for i in data]

    async def get_issue(self, id_readable: str) -> Issue:
        """Fetch a single issue by its readable id (e.g. 'PROJ-42')."""
        data = await self._request(
            "GET", f"issues/{id_readable}", params={"fields": FieldQueries.ISSUE}
        )
        return Issue.model_validate(data)

    async def get_custom_fields(self, id_readable: str) -> FormattedFields:
        issue = await self.get_issue(id_readable)
        return issue.parse_custom_fields()

    async def create_issue(self, project_id: str, summary: str, description: str) -> IssueResult:
        """Create an issue and return its id and number in project."""
        payload = IssueCreate(
            summary=summary,
            description=description,
            project=ProjectRef(id=project_id),
        )
        data = await self._request(
            "POST",
            "issues",
            params={"fields": FieldQueries.ISSUE_RESULT},
            json_data=payload.model_dump(exclude_none=True),
        )
        return IssueResult.model_validate(data)

    async def create_issue_attachment(
        self,
        issue_id: str,
        content: bytes | BinaryIO,
        name: str,
        media_type: str,
    ) -> str:
        """Attach a file to the given issue. Returns the attachment id."""
        data = content if isinstance(content, bytes) else content.read()
        attachment = IssueAttachment(
            name=name,
            base64Content=f"data:{media_type};base64,{b64encode(data).decode()}",
        )
        try:
            result = await self._request(
                "POST",
                f"issues/{issue_id}/attachments",
                params={"fields": FieldQueries.ID},
                json_data=attachment.model_dump(),
            )
        except AppException:
            logger.error(f"Failed to post attachment {name!r} to issue {issue_id}")
            raise
        return IDResult.model_validate(result).id

    def issue_url(self, short_project_name: str, number_in_project: int) -> str:
        return build_issue_url(self.base_url, short_project_name, number_in_project)

    # ─── History ──────────────────────────────────────────────────────

    async def get_issue_history(self, id_readable: str) -> list[HistoryEvent]:
        """Get custom-field activity of an issue, oldest-first.

        History of text fields is not supported: their `added` is a bare string
        rather than a list of entities and is read as empty.
        """
        params = {
            "categories": ActivityCategory.CUSTOM_FIELD.value,
            "fields": FieldQueries.ACTIVITY,
        }
        data = await self._get_paged(f"issues/{id_readable}/activities", params)
        return [HistoryEvent.model_validate(item) for item in data]

    async def get_resolved_timestamp(self, id_readable: str) -> int:
        """Fetch the history of an issue and return its resolved timestamp, or -1."""
        history = await self.get_issue_history(id_readable)
        return get_resolved_timestamp(
            history,
            field_name=self.state_field_name,
            resolved_state=self.resolved_state_name,
        )
