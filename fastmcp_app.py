from __future__ import annotations

from typing import Any, Awaitable, Callable, Optional

from fastmcp import FastMCP
from fastmcp.exceptions import ToolError
from fastmcp.tools import Tool
from fastmcp.tools.tool import ToolResult
from mcp import types
from mcp.types import TextContent
from pydantic import Field

from catalog import (
    ISSUE_URI_PREFIX,
    ResourceDescriptor,
    ToolDescriptor,
    list_resource_templates,
    list_resources,
    list_tools,
)
from config import Settings
from errors import LinearMCPError, to_mcp_error
from linear_client import LinearClient
from resources import ResourceReader
from tools import ToolDispatcher

SERVER_NAME = "linear-server"
SERVER_VERSION = "0.1.0"


class CatalogTool(Tool):
    """A tool whose schema comes from the static catalog and whose calls go to the dispatcher."""

    dispatcher: Any = Field(exclude=True)

    @classmethod
    def from_descriptor(cls, descriptor: ToolDescriptor, dispatcher: ToolDispatcher) -> "CatalogTool":
        metadata = descriptor.as_metadata()
        return cls(
            name=metadata["name"],
            description=metadata["description"],
            parameters=metadata["inputSchema"],
            dispatcher=dispatcher,
        )

    async def run(self, arguments: dict[str, Any]) -> ToolResult:
        try:
            result = await self.dispatcher.call(self.name, arguments)
        except LinearMCPError as exc:
            raise to_mcp_error(exc) from exc
        if result.is_error:
            # FastMCP reports ToolError as an isError result carrying this text
            raise ToolError("\n".join(item.text for item in result.content))
        return ToolResult(content=[TextContent(type="text", text=item.text) for item in result.content])


def _reader_for(reader: ResourceReader, uri: str) -> Callable[[], Awaitable[str]]:
    async def read_static() -> str:
        try:
            result = await reader.read(uri)
        except LinearMCPError as exc:
            raise to_mcp_error(exc) from exc
        return result.text

    return read_static


def _register_resource(mcp: FastMCP, reader: ResourceReader, descriptor: ResourceDescriptor) -> None:
    mcp.resource(
        descriptor.uri,
        name=descriptor.name,
        description=descriptor.description,
        mime_type=descriptor.mime_type,
    )(_reader_for(reader, descriptor.uri))


def _install_protocol_handlers(mcp: FastMCP, reader: ResourceReader, dispatcher: ToolDispatcher) -> None:
    """Route reads and tool-call faults through the low-level server.

    The low-level server answers an ``McpError`` raised by a request handler with a JSON-RPC
    error, but turns anything raised inside a tool into an ``isError`` result and FastMCP wraps
    resource failures in a generic error. Reads and argument checks therefore run here, ahead
    of both, so unknown tools, bad arguments and failed reads keep their own error codes.
    """
    server = mcp._mcp_server
    call_tool = server.request_handlers[types.CallToolRequest]

    async def read_resource(req: types.ReadResourceRequest) -> types.ServerResult:
        try:
            result = await reader.read(str(req.params.uri))
        except LinearMCPError as exc:
            raise to_mcp_error(exc) from exc
        return types.ServerResult(
            types.ReadResourceResult(
                contents=[
                    types.TextResourceContents(uri=req.params.uri, mimeType=result.mime_type, text=result.text)
                ]
            )
        )

    async def checked_call_tool(req: types.CallToolRequest) -> types.ServerResult:
        try:
            dispatcher.parse_arguments(req.params.name, req.params.arguments)
        except LinearMCPError as exc:
            raise to_mcp_error(exc) from exc
        return await call_tool(req)

    server.request_handlers[types.ReadResourceRequest] = read_resource
    server.request_handlers[types.CallToolRequest] = checked_call_tool


def create_mcp(settings: Optional[Settings] = None, linear_client: Optional[LinearClient] = None) -> FastMCP:
    """Create and configure a FastMCP server exposing Linear issues and teams.

    Resources and tools are registered from the static catalog for listing. On the wire,
    reads go through ``ResourceReader`` and tool calls through ``ToolDispatcher`` via the
    low-level handlers installed by ``_install_protocol_handlers``.
    """
    if linear_client is None:
        cfg = settings or Settings.from_env()
        linear_client = LinearClient(
            api_key=cfg.api_key,
            access_token=cfg.access_token,
            api_url=cfg.api_url,
            timeout=cfg.timeout,
        )

    reader = ResourceReader(linear_client)
    dispatcher = ToolDispatcher(linear_client)

    mcp = FastMCP(name=SERVER_NAME, version=SERVER_VERSION)

    # Debug route to inspect tool registration via HTTP
    @mcp.custom_route("/debug/tools", methods=["GET"])
    async def debug_tools(request):  # type: ignore[no-redef]
        from starlette.responses import JSONResponse

        return JSONResponse({"tools": [descriptor.name for descriptor in list_tools()]})

    # ------------------------- Resources -------------------------------
    for descriptor in list_resources():
        _register_resource(mcp, reader, descriptor)

    (issue_template,) = list_resource_templates()

    @mcp.resource(
        issue_template.uri_template,
        name=issue_template.name,
        description=issue_template.description,
        mime_type=issue_template.mime_type,
    )
    async def read_issue(issueId: str) -> str:
        try:
            result = await reader.read(ISSUE_URI_PREFIX + issueId)
        except LinearMCPError as exc:
            raise to_mcp_error(exc) from exc
        return result.text

    # ---------------------------- Tools ---------------------------------
    for tool_descriptor in list_tools():
        mcp.add_tool(CatalogTool.from_descriptor(tool_descriptor, dispatcher))

    _install_protocol_handlers(mcp, reader, dispatcher)

    return mcp
