# =============================================================================
# core/__init__.py
# =============================================================================
# This package contains ALL business logic for the farm advisory tools:
#
#   gap_client.py   →  fetches the GAP forecast (the only network I/O)
#   aggregation.py  →  raw ensemble samples → one record per day
#   advisory.py     →  rule engine: forecast, farming, planting, irrigation
#   crops.py        →  per-crop threshold table
#   dispatcher.py   →  validation + pipeline + farmer-facing text per tool
#
# CRITICAL ARCHITECTURAL RULE:
#   Nothing in this package imports Google ADK, FastMCP, or any orchestration
#   framework.  Everything except gap_client.py runs with zero internet access.
# =============================================================================
