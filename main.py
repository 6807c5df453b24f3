from __future__ import annotations

import logging

import typer

from config import Settings, init_runtime
from errors import ConfigurationError
from fastmcp_app import create_mcp

logger = logging.getLogger("linear_mcp")

cli = typer.Typer(add_completion=False)


@cli.command()
def run(
    host: str = typer.Option(None, help="Host interface to bind (HTTP transport)."),
    port: int = typer.Option(None, help="Port to bind (HTTP transport)."),
    transport: str = typer.Option(None, help="Transport: 'stdio' or 'http' (default from MCP_TRANSPORT, else stdio)."),
) -> None:
    """Start the Linear MCP server (defaults to stdio transport)."""

    init_runtime()
    try:
        settings = Settings.from_env()
    except ConfigurationError as exc:
        typer.echo(f"error: {exc}", err=True)
        raise typer.Exit(code=1)
    if host is not None:
        settings.host = host
    if port is not None:
        settings.port = port
    if transport is not None:
        settings.transport = transport
    if settings.transport not in ("stdio", "http"):
        typer.echo(f"error: unknown transport {settings.transport!r}", err=True)
        raise typer.Exit(code=2)

    mcp = create_mcp(settings)
    logger.info("Linear MCP server running on %s", settings.transport)
    if settings.transport == "stdio":
        mcp.run()
    else:
        # Force JSON-style HTTP on /mcp (non-streaming)
        app = mcp.http_app(path="/mcp", transport="http", json_response=True, stateless_http=True)
        import uvicorn
        uvicorn.run(app, host=settings.host, port=settings.port, log_level="info")


@cli.callback(invoke_without_command=True)
def _default(ctx: typer.Context) -> None:
    if ctx.invoked_subcommand is None:
        run(host=None, port=None, transport=None)


if __name__ == "__main__":
    cli()
