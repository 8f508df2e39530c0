# =============================================================================
# core/errors.py  —  Failure taxonomy for the advisory pipeline
# =============================================================================
#
# Every exception here is caught at the tool boundary (core/dispatcher.py)
# and turned into farmer-facing text.  The message of an UpstreamError or
# AuthError is for the server log only; it never reaches the caller.
#
# An empty forecast is NOT an error: it is a ForecastSeries with count == 0.
# =============================================================================

from typing import Optional


class AdvisoryError(Exception):
    """Base class for all advisory pipeline failures."""


class MissingLocationError(AdvisoryError):
    """No coordinates in the call and no fallback location available."""

    def __init__(self, message: str = "No farm location was provided."):
        super().__init__(message)


class ValidationError(AdvisoryError):
    """A caller-supplied value is out of range or unknown."""


class AuthError(AdvisoryError):
    """The GAP API token is not configured, so no client exists."""

    def __init__(self, message: str = "GAP API token is not configured."):
        super().__init__(message)


class UpstreamError(AdvisoryError):
    """The GAP API failed: non-2xx, timeout, network error, or bad JSON."""

    def __init__(self, message: str, status: Optional[int] = None, body: str = ""):
        super().__init__(message)
        self.status = status
        self.body = body

    def __str__(self) -> str:
        base = super().__str__()
        if self.status is not None:
            return f"{base} (status={self.status})"
        return base
