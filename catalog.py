from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Dict, Mapping, Tuple

JSON_MIME_TYPE = "application/json"

ACTIVE_ISSUES_URI = "linear://issues/active"
TEAMS_URI = "linear://teams"
ISSUE_URI_PREFIX = "linear://issues/"
ISSUE_URI_TEMPLATE = ISSUE_URI_PREFIX + "{issueId}"


@dataclass(frozen=True)
class ResourceDescriptor:
    uri: str
    name: str
    description: str
    mime_type: str = JSON_MIME_TYPE

    def as_metadata(self) -> Dict[str, str]:
        return {
            "uri": self.uri,
            "name": self.name,
            "mimeType": self.mime_type,
            "description": self.description,
        }


@dataclass(frozen=True)
class ResourceTemplateDescriptor:
    uri_template: str
    name: str
    description: str
    mime_type: str = JSON_MIME_TYPE

    def as_metadata(self) -> Dict[str, str]:
        return {
            "uriTemplate": self.uri_template,
            "name": self.name,
            "mimeType": self.mime_type,
            "description": self.description,
        }


@dataclass(frozen=True)
class ToolDescriptor:
    name: str
    description: str
    input_schema: Mapping[str, Any]

    def as_metadata(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "description": self.description,
            "inputSchema": _thaw(self.input_schema),
        }


def _freeze(value: Any) -> Any:
    if isinstance(value, dict):
        return MappingProxyType({key: _freeze(item) for key, item in value.items()})
    if isinstance(value, list):
        return tuple(_freeze(item) for item in value)
    return value


def _thaw(value: Any) -> Any:
    """Return a plain, caller-owned copy of a frozen schema."""
    if isinstance(value, Mapping):
        return {key: _thaw(item) for key, item in value.items()}
    if isinstance(value, tuple):
        return [_thaw(item) for item in value]
    return value


def _object_schema(properties: Dict[str, Dict[str, Any]], required: Tuple[str, ...] = ()) -> Mapping[str, Any]:
    return _freeze({"type": "object", "properties": properties, "required": list(required)})


RESOURCE_CATALOG: Tuple[ResourceDescriptor, ...] = (
    ResourceDescriptor(
        uri=ACTIVE_ISSUES_URI,
        name="Active Issues",
        description="Currently active issues in Linear",
    ),
    ResourceDescriptor(
        uri=TEAMS_URI,
        name="Teams",
        description="List of teams in the workspace",
    ),
)

RESOURCE_TEMPLATE_CATALOG: Tuple[ResourceTemplateDescriptor, ...] = (
    ResourceTemplateDescriptor(
        uri_template=ISSUE_URI_TEMPLATE,
        name="Single Issue",
        description="Get a specific issue by ID",
    ),
)

TOOL_CATALOG: Tuple[ToolDescriptor, ...] = (
    ToolDescriptor(
        name="create_issue",
        description="Create a new issue in Linear",
        input_schema=_object_schema(
            {
                "title": {"type": "string", "description": "Title of the issue"},
                "description": {"type": "string", "description": "Description of the issue"},
                "teamId": {"type": "string", "description": "ID of the team to assign the issue to"},
                "priority": {
                    "type": "number",
                    "description": "Priority of the issue (0-4)",
                    "minimum": 0,
                    "maximum": 4,
                },
            },
            required=("title", "teamId"),
        ),
    ),
    ToolDescriptor(
        name="read_team_ids",
        description="Read team ids",
        input_schema=_object_schema({}),
    ),
    ToolDescriptor(
        name="update_issue",
        description="Update an existing issue in Linear",
        input_schema=_object_schema(
            {
                "issueId": {"type": "string", "description": "ID of the issue to update"},
                "title": {"type": "string", "description": "New title for the issue"},
                "description": {"type": "string", "description": "New description for the issue"},
            },
            required=("issueId",),
        ),
    ),
)


def list_resources() -> Tuple[ResourceDescriptor, ...]:
    return RESOURCE_CATALOG


def list_resource_templates() -> Tuple[ResourceTemplateDescriptor, ...]:
    return RESOURCE_TEMPLATE_CATALOG


def list_tools() -> Tuple[ToolDescriptor, ...]:
    return TOOL_CATALOG


__all__ = [
    "ResourceDescriptor",
    "ResourceTemplateDescriptor",
    "ToolDescriptor",
    "RESOURCE_CATALOG",
    "RESOURCE_TEMPLATE_CATALOG",
    "TOOL_CATALOG",
    "list_resources",
    "list_resource_templates",
    "list_tools",
]
