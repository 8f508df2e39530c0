# =============================================================================
# agent/__init__.py
# =============================================================================
# This package contains the Google ADK agent configuration.
#
# ARCHITECTURAL ROLE:
#   The agent/ layer is the conversational front end.  It:
#     1. Receives the farmer's question ("Should I plant beans this week?")
#     2. Works out which tool answers it and what location/crop to pass
#     3. Calls the tool over MCP
#     4. Explains the result in plain language
#
# WHAT THE AGENT IS NOT:
#   - It is NOT the rule engine (that's core/advisory.py)
#   - It is NOT the tool implementations (that's tools/)
#   - It never invents weather numbers; they all come from tools
# =============================================================================
