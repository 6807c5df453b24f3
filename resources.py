from __future__ import annotations

import asyncio
import json
import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, List, Optional, Tuple

from catalog import ACTIVE_ISSUES_URI, ISSUE_URI_PREFIX, JSON_MIME_TYPE, TEAMS_URI
from errors import BackendError, UnknownResource
from linear_client import LinearClient

logger = logging.getLogger(__name__)

# A matcher returns the handler argument (``()`` for static URIs) or None when it does not apply.
Matcher = Callable[[str], Optional[Tuple[Any, ...]]]


@dataclass(frozen=True)
class ReadResult:
    uri: str
    text: str
    mime_type: str = JSON_MIME_TYPE

    def as_dict(self) -> Dict[str, str]:
        return {"uri": self.uri, "mimeType": self.mime_type, "text": self.text}


def _exact(expected: str) -> Matcher:
    def match(uri: str) -> Optional[Tuple[Any, ...]]:
        return () if uri == expected else None

    return match


def _issue_id(uri: str) -> Optional[Tuple[Any, ...]]:
    if not uri.startswith(ISSUE_URI_PREFIX):
        return None
    issue_id = uri[len(ISSUE_URI_PREFIX):]
    if issue_id == "active":
        return None
    return (issue_id,)


class ResourceReader:
    """Resolve resource URIs to Linear read operations.

    Routes are tried in declaration order and the first match wins, so the static
    ``linear://issues/active`` route shadows the single-issue template.
    """

    def __init__(self, client: LinearClient) -> None:
        self._client = client
        self._routes: List[Tuple[Matcher, Callable[..., Awaitable[Any]]]] = [
            (_exact(ACTIVE_ISSUES_URI), self._active_issues),
            (_exact(TEAMS_URI), self._teams),
            (_issue_id, self._issue),
        ]

    async def read(self, uri: str) -> ReadResult:
        for matcher, handler in self._routes:
            args = matcher(uri)
            if args is None:
                continue
            logger.debug("reading resource %s", uri)
            try:
                content = await handler(*args)
            except Exception as exc:
                logger.warning("Linear read failed for %s: %s", uri, exc)
                raise BackendError(str(exc)) from exc
            return ReadResult(uri=uri, text=json.dumps(content, indent=2))
        raise UnknownResource(uri)

    async def _active_issues(self) -> Any:
        return await asyncio.to_thread(self._client.list_active_issues)

    async def _teams(self) -> Any:
        return await asyncio.to_thread(self._client.list_teams)

    async def _issue(self, issue_id: str) -> Any:
        assert issue_id != "active", "active issues are served by the static route"
        return await asyncio.to_thread(self._client.get_issue, issue_id)
