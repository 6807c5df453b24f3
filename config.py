from __future__ import annotations

from dataclasses import dataclass, field
from functools import lru_cache
import logging
import os
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

from errors import ConfigurationError

DEFAULT_API_URL = "https://api.linear.app/graphql"


@dataclass
class Settings:
    """Runtime configuration for the MCP server."""

    api_key: str = field(default="", repr=False)
    access_token: Optional[str] = field(default=None, repr=False)
    api_url: str = DEFAULT_API_URL
    timeout: float = 30.0
    host: str = "127.0.0.1"
    port: int = 8085
    transport: str = "stdio"

    @classmethod
    def from_env(cls) -> "Settings":
        api_key = os.getenv("LINEAR_API_KEY")
        if not api_key:
            raise ConfigurationError("LINEAR_API_KEY environment variable is required")
        access_token = os.getenv("LINEAR_ACCESS_TOKEN") or None
        api_url = os.getenv("LINEAR_API_URL", cls.api_url)
        try:
            timeout = float(os.getenv("LINEAR_TIMEOUT", str(cls.timeout)))
            port = int(os.getenv("MCP_PORT", str(cls.port)))
        except ValueError as exc:
            raise ConfigurationError(f"invalid numeric setting: {exc}") from exc
        host = os.getenv("MCP_HOST", cls.host)
        transport = os.getenv("MCP_TRANSPORT", cls.transport)
        return cls(
            api_key=api_key,
            access_token=access_token,
            api_url=api_url,
            timeout=timeout,
            host=host,
            port=port,
            transport=transport,
        )


@lru_cache(maxsize=1)
def load_env_once() -> Optional[Path]:
    """Load a dotenv file exactly once.

    Precedence:
      1) LINEAR_MCP_ENV_FILE (explicit path)
      2) ./.env in the current working directory

    Variables already present in the environment are never overridden.
    """
    candidates = []
    explicit = os.getenv("LINEAR_MCP_ENV_FILE")
    if explicit:
        candidates.append(Path(explicit).expanduser())
    candidates.append(Path.cwd() / ".env")

    for path in candidates:
        if path.is_file():
            load_dotenv(dotenv_path=str(path), override=False)
            return path
    return None


def configure_logging() -> None:
    """Set up root logging once; a no-op when handlers are already installed."""
    root = logging.getLogger()
    if root.handlers:
        return

    level_name = os.getenv("LINEAR_MCP_LOG_LEVEL", "INFO").upper()
    level = getattr(logging, level_name, logging.INFO)
    fmt = os.getenv(
        "LINEAR_MCP_LOG_FORMAT",
        "%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    # stdout belongs to the stdio transport
    logging.basicConfig(level=level, format=fmt)


def init_runtime(*, configure_logs: bool = True, load_env: bool = True) -> None:
    """Call this from entrypoints only."""
    if load_env:
        load_env_once()
    if configure_logs:
        configure_logging()
