"""
=============================================================================
ERROR TAXONOMY
=============================================================================

Two families of failure exist, and they travel differently:

    PER-REQUEST FAILURES (HTTPError and subclasses, see http/errors.py)
    ────────────────────────────────────────────────────────────────────
    Contained inside the connection that raised them and answered with
    an HTTP status code. Re-exported here so callers have one import.

    LIFECYCLE FAILURES (LifecycleError)
    ───────────────────────────────────
    Raised inside FileServer.start()/stop() and converted into a
    structured `success=False` result before returning to the caller.
    They never cross the controller boundary as exceptions.

=============================================================================
"""

from .http.errors import (
    HTTPError,
    ClientProtocolError,
    UnsupportedMethod,
    SecurityViolation,
    NotFound,
    InternalError,
)


class LifecycleError(Exception):
    """start()/stop() could not complete; reported as a failed result."""


class PoolClosedError(RuntimeError):
    """Work was submitted to a thread pool that is not accepting tasks."""


__all__ = [
    "HTTPError",
    "ClientProtocolError",
    "UnsupportedMethod",
    "SecurityViolation",
    "NotFound",
    "InternalError",
    "LifecycleError",
    "PoolClosedError",
]
