# =============================================================================
# main.py  —  Smoke client for the farm advisory tools (+ one-shot agent)
# =============================================================================
#
# HOW TO RUN:
#   uv run python main.py                              # in-process server
#   uv run python main.py --url http://localhost:3000/mcp
#   uv run python main.py --ask "Should I plant beans this week?"
#
# WHAT HAPPENS (default):
#   1. Loads .env (GAP_API_TOKEN ...)
#   2. Connects a fastmcp.Client to the server, either in-process or over
#      HTTP when --url is given
#   3. Lists the tools, then calls each one once for a demo farm in Kenya
#   4. Prints every answer and exits non-zero if any call came back isError
#
# WITH --ask:
#   Sends one question to the Google ADK agent (agent/farm_agent.py), which
#   starts the MCP server as a stdio subprocess, and prints its answer.
# =============================================================================

import argparse
import asyncio
import sys
from typing import Any, Optional, TextIO

from dotenv import load_dotenv

# The in-process server reads GAP_API_TOKEN at import; the agent's MCP
# subprocess inherits it from this environment.
load_dotenv()

from fastmcp import Client
from google.adk.runners import InMemoryRunner
from google.genai import types

from agent.farm_agent import create_agent

APP_NAME = "farm_advisor"
USER_ID = "farmer"

# Bomet County, Kenya
DEMO_FARM = {"latitude": -1.404244, "longitude": 35.008688}

SMOKE_CALLS: list[tuple[str, dict[str, Any]]] = [
    ("get_weather_forecast", {**DEMO_FARM, "days": 3}),
    ("get_planting_recommendation", {**DEMO_FARM, "crop": "maize"}),
    ("get_irrigation_advisory", {**DEMO_FARM, "crop": "maize"}),
    ("get_farming_advisory", {**DEMO_FARM, "crop": "maize", "forecast_days": 7}),
    ("get_historical_weather", {**DEMO_FARM, "days_back": 14}),
]

_RULE = "=" * 78


def _result_text(result) -> str:
    return "\n".join(block.text for block in result.content if getattr(block, "text", None))


async def run_smoke(target: Any, out: Optional[TextIO] = None) -> int:
    """List the server's tools and call each of SMOKE_CALLS once.

    Args:
        target: Anything fastmcp.Client accepts: a FastMCP instance for an
            in-process server, or the URL of a running HTTP endpoint.
        out: Where the report is written (stdout by default).

    Returns:
        The number of calls that failed (tool missing or isError).
    """
    out = out or sys.stdout
    failures = 0
    async with Client(target) as client:
        tools = await client.list_tools()
        listed = {tool.name for tool in tools}
        print(f"📋 {len(tools)} tools available:", file=out)
        for tool in tools:
            print(f"  • {tool.name}", file=out)

        for name, arguments in SMOKE_CALLS:
            print(f"\n{_RULE}\n🧪 {name}  {arguments}\n", file=out)
            if name not in listed:
                print("❌ Tool is not registered", file=out)
                failures += 1
                continue

            result = await client.call_tool(name, arguments, raise_on_error=False)
            if result.is_error:
                failures += 1
                print(f"❌ {_result_text(result)}", file=out)
            else:
                print(_result_text(result), file=out)

    print(f"\n{_RULE}", file=out)
    if failures:
        print(f"⚠️  {failures} of {len(SMOKE_CALLS)} tool calls failed", file=out)
    else:
        print(f"🎉 All {len(SMOKE_CALLS)} tool calls succeeded", file=out)
    return failures


async def ask_agent(question: str) -> str:
    """Put one question to the farm advisor agent and return its final answer."""
    runner = InMemoryRunner(agent=create_agent(), app_name=APP_NAME)
    session = await runner.session_service.create_session(app_name=APP_NAME, user_id=USER_ID)
    message = types.Content(role="user", parts=[types.Part(text=question)])

    answer = ""
    async for event in runner.run_async(user_id=USER_ID, session_id=session.id, new_message=message):
        for call in event.get_function_calls():
            print(f"  🔧 {call.name}({dict(call.args or {})})")
        if event.is_final_response() and event.content and event.content.parts:
            answer = "".join(part.text or "" for part in event.content.parts)
    return answer


def main(argv: Optional[list[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Exercise the GAP farm advisory MCP tools.")
    parser.add_argument("--url", help="HTTP endpoint of a running server (default: in-process)")
    parser.add_argument("--ask", metavar="QUESTION", help="ask the ADK agent one question instead")
    args = parser.parse_args(argv)

    if args.ask:
        answer = asyncio.run(ask_agent(args.ask))
        print(f"\n🤖 {answer}" if answer else "\n⚠️  The agent returned no answer.")
        return 0 if answer else 1

    if args.url:
        target = args.url
    else:
        from tools.mcp_server import mcp as target

    return 1 if asyncio.run(run_smoke(target)) else 0


if __name__ == "__main__":
    sys.exit(main())
