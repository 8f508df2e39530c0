# =============================================================================
# agent/farm_agent.py  —  Google ADK Agent Configuration (with LiteLlm)
# =============================================================================
#
# WHAT THIS FILE DOES:
#   Creates the farm advisor agent: a Google ADK Agent whose reasoning runs
#   on any LiteLlm-supported model and whose only capabilities are the MCP
#   tools in tools/mcp_server.py.
#
#   ┌───────────────────────────┐      stdio       ┌──────────────────────┐
#   │  Google ADK Agent         │ ───────────────▶ │  FastMCP server      │
#   │  prompt + LiteLlm model   │                  │  (tools/mcp_server)  │
#   └───────────────────────────┘                  └──────────┬───────────┘
#                                                             ▼
#                                                  core/ → GAP API
#
#   The agent holds no weather logic.  It decides WHICH tool to call and
#   explains the tool's text to the farmer.
# =============================================================================

import os
from typing import Optional

from google.adk.agents import Agent
from google.adk.models.lite_llm import LiteLlm
from google.adk.tools.mcp_tool import MCPToolset
from mcp import StdioServerParameters

from agent.prompt import get_farm_advisor_prompt
from core.config import Settings


def create_agent(settings: Optional[Settings] = None) -> Agent:
    """Create the farm advisor agent wired to the MCP tool server.

    The MCP server is launched as a subprocess with ``uv run`` so it uses
    the project's virtual environment; it inherits this process's
    environment, including GAP_API_TOKEN.

    Args:
        settings: Loaded settings; read from the environment when omitted.

    Returns:
        A configured Google ADK Agent instance.
    """
    settings = settings or Settings.from_env()
    project_root = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))

    mcp_tools = MCPToolset(
        connection_params=StdioServerParameters(
            command="uv",
            args=["run", "python", "-m", "tools.mcp_server"],
            cwd=project_root,
            env={**os.environ, "MCP_TRANSPORT": "stdio"},
        ),
    )

    return Agent(
        name="farm_advisor",
        model=LiteLlm(model=settings.agent_model),
        instruction=get_farm_advisor_prompt(),
        tools=[mcp_tools],
    )
