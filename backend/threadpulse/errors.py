"""Exception taxonomy for the discovery and retrieval stages.

None of these escape the pipeline entry points; they are caught at the
stage boundary and degraded to empty results or placeholder posts.
"""

from __future__ import annotations


class ThreadPulseError(Exception):
    """Base class for pipeline errors."""


class ConfigurationError(ThreadPulseError):
    """Raised when required credentials are missing from the environment."""


class TransportError(ThreadPulseError):
    """Raised on timeout, connection failure, or a non-success HTTP status."""

    def __init__(self, url: str, reason: str, status_code: int | None = None):
        self.url = url
        self.reason = reason
        self.status_code = status_code
        super().__init__(f"{reason} for {url}")


class DecodeError(ThreadPulseError):
    """Raised when a response body cannot be parsed as JSON."""

    def __init__(self, url: str):
        self.url = url
        super().__init__(f"Response from {url} is not valid JSON")


class RetrievalError(ThreadPulseError):
    """Raised when every URL variation of a thread failed."""

    def __init__(self, url: str, attempts: int):
        self.url = url
        self.attempts = attempts
        super().__init__(
            f"Failed to fetch Reddit data after trying {attempts} different URLs"
        )
