# =============================================================================
# core/config.py  —  Environment-driven settings
# =============================================================================
#
# Entry points call load_dotenv() first, then Settings.from_env().  Core
# modules never read os.environ themselves; they receive values from here.
#
#   GAP_API_TOKEN     →  token for the TomorrowNow GAP API (required for data)
#   GAP_API_BASE_URL  →  defaults to the public v1 endpoint
#   GAP_API_TIMEOUT   →  seconds before a fetch is abandoned (default 30)
#   MCP_TRANSPORT     →  stdio | http | streamable-http | sse
#   HOST / PORT       →  bind address for the HTTP transports
#   LOG_LEVEL         →  logging level name (default INFO)
#   FARM_AGENT_MODEL  →  LiteLlm model string for the console agent
# =============================================================================

import os
from dataclasses import dataclass
from typing import Mapping, Optional

DEFAULT_GAP_BASE_URL = "https://gap.tomorrownow.org/api/v1"
DEFAULT_AGENT_MODEL = "openrouter/openai/gpt-4o"

_TRANSPORTS = {"stdio", "http", "streamable-http", "sse"}


@dataclass(frozen=True)
class Settings:
    gap_api_token: Optional[str] = None
    gap_api_base_url: str = DEFAULT_GAP_BASE_URL
    gap_api_timeout: float = 30.0
    mcp_transport: str = "stdio"
    host: str = "0.0.0.0"
    port: int = 3000
    log_level: str = "INFO"
    agent_model: str = DEFAULT_AGENT_MODEL

    @property
    def gap_configured(self) -> bool:
        return bool(self.gap_api_token)

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "Settings":
        """Read settings from ``environ`` (``os.environ`` by default).

        Raises:
            ValueError: for a non-numeric timeout/port or an unknown transport.
        """
        env = os.environ if environ is None else environ

        timeout = float(env.get("GAP_API_TIMEOUT", "30"))
        if timeout <= 0:
            raise ValueError(f"GAP_API_TIMEOUT must be positive, got {timeout}")

        transport = env.get("MCP_TRANSPORT", "stdio").strip().lower()
        if transport not in _TRANSPORTS:
            raise ValueError(
                f"MCP_TRANSPORT must be one of {sorted(_TRANSPORTS)}, got {transport!r}"
            )

        return cls(
            gap_api_token=env.get("GAP_API_TOKEN", "").strip() or None,
            gap_api_base_url=env.get("GAP_API_BASE_URL", DEFAULT_GAP_BASE_URL).rstrip("/"),
            gap_api_timeout=timeout,
            mcp_transport=transport,
            host=env.get("HOST", "0.0.0.0"),
            port=int(env.get("PORT", "3000")),
            log_level=env.get("LOG_LEVEL", "INFO").upper(),
            agent_model=env.get("FARM_AGENT_MODEL", DEFAULT_AGENT_MODEL),
        )
