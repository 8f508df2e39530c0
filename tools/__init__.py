# =============================================================================
# tools/__init__.py
# =============================================================================
# This package contains the FastMCP tool wrappers.
#
# ARCHITECTURAL ROLE:
#   tools/ is the translation layer between MCP and core/.  Each tool:
#     1. Reads the request-scoped default farm location (HTTP headers)
#     2. Calls one AdvisoryDispatcher method from core/
#     3. Logs the call and its outcome
#     4. Returns text, or raises ToolError so the client sees isError
#
# WHAT TOOLS DO NOT DO:
#   - They do NOT validate ranges or evaluate rules (that's core/)
#   - They do NOT know about Google ADK
#
# Each tool's docstring is what the LLM reads to decide WHEN to call it, so
# it names the question the tool answers and every parameter's range.
# =============================================================================
