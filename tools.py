from __future__ import annotations

import asyncio
import json
import logging
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Dict, Mapping, Optional, Tuple, Type

from pydantic import BaseModel, ConfigDict, Field, StrictStr, ValidationError, field_validator

from catalog import TOOL_CATALOG
from errors import InvalidArguments, UnknownTool, linear_error_text
from linear_client import LinearClient

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TextItem:
    text: str
    type: str = "text"

    def as_dict(self) -> Dict[str, str]:
        return {"type": self.type, "text": self.text}


@dataclass(frozen=True)
class ToolCallResult:
    content: Tuple[TextItem, ...] = field(default_factory=tuple)
    is_error: bool = False

    @classmethod
    def text(cls, text: str, *, is_error: bool = False) -> "ToolCallResult":
        return cls(content=(TextItem(text=text),), is_error=is_error)

    def as_dict(self) -> Dict[str, Any]:
        return {"content": [item.as_dict() for item in self.content], "isError": self.is_error}


class _Arguments(BaseModel):
    model_config = ConfigDict(extra="ignore", frozen=True)


class CreateIssueArguments(_Arguments):
    title: StrictStr
    teamId: StrictStr
    description: Optional[StrictStr] = None
    priority: Optional[int] = Field(default=None, ge=0, le=4)

    @field_validator("priority", mode="before")
    @classmethod
    def _numeric_priority(cls, value: Any) -> Any:
        if isinstance(value, (bool, str)):
            raise ValueError("priority must be a number")
        return value


class ReadTeamIdsArguments(_Arguments):
    pass


class UpdateIssueArguments(_Arguments):
    issueId: StrictStr
    title: Optional[StrictStr] = None
    description: Optional[StrictStr] = None


Handler = Callable[[Any], Awaitable[ToolCallResult]]


class ToolDispatcher:
    """Route tool calls by name to a single Linear API call each.

    Backend failures never escape ``call``: they come back as ``is_error`` results so the
    calling agent can react to them. Unknown tools and malformed arguments are raised.
    """

    def __init__(self, client: LinearClient) -> None:
        self._client = client
        self._handlers: Dict[str, Tuple[Type[_Arguments], Handler]] = {
            "create_issue": (CreateIssueArguments, self._create_issue),
            "read_team_ids": (ReadTeamIdsArguments, self._read_team_ids),
            "update_issue": (UpdateIssueArguments, self._update_issue),
        }
        declared = {descriptor.name for descriptor in TOOL_CATALOG}
        if declared != set(self._handlers):
            raise RuntimeError(f"tool handlers {sorted(self._handlers)} do not match catalog {sorted(declared)}")

    def parse_arguments(self, name: str, arguments: Optional[Mapping[str, Any]] = None) -> Any:
        """Resolve the tool and validate its arguments without touching the backend."""
        entry = self._handlers.get(name)
        if entry is None:
            raise UnknownTool(name)
        model, _ = entry
        return self._parse(name, model, arguments)

    async def call(self, name: str, arguments: Optional[Mapping[str, Any]] = None) -> ToolCallResult:
        args = self.parse_arguments(name, arguments)
        _, handler = self._handlers[name]

        logger.debug("calling tool %s", name)
        try:
            return await handler(args)
        except Exception as exc:
            logger.warning("tool %s failed: %s", name, exc)
            return ToolCallResult.text(linear_error_text(exc), is_error=True)

    @staticmethod
    def _parse(name: str, model: Type[_Arguments], arguments: Optional[Mapping[str, Any]]) -> Any:
        if arguments is None:
            arguments = {}
        if not isinstance(arguments, Mapping):
            raise InvalidArguments(name, "arguments must be an object")
        try:
            return model.model_validate(dict(arguments))
        except ValidationError as exc:
            problems = "; ".join(
                f"{'.'.join(str(part) for part in err['loc']) or '<root>'}: {err['msg']}"
                for err in exc.errors()
            )
            raise InvalidArguments(name, problems) from exc

    async def _create_issue(self, args: CreateIssueArguments) -> ToolCallResult:
        issue = await asyncio.to_thread(
            self._client.create_issue,
            {
                "title": args.title,
                "description": args.description,
                "teamId": args.teamId,
                "priority": args.priority,
            },
        )
        return ToolCallResult.text(f"Created issue: {issue.get('url')}")

    async def _read_team_ids(self, args: ReadTeamIdsArguments) -> ToolCallResult:
        teams = await asyncio.to_thread(self._client.list_teams)
        return ToolCallResult.text(json.dumps(teams, separators=(",", ":")))

    async def _update_issue(self, args: UpdateIssueArguments) -> ToolCallResult:
        issue = await asyncio.to_thread(
            self._client.update_issue,
            args.issueId,
            {"title": args.title, "description": args.description},
        )
        return ToolCallResult.text(f"Updated issue: {issue.get('url')}")
