"""Custom exception hierarchy for Autopilot."""

from __future__ import annotations


class AutopilotError(Exception):
    """Base exception for all Autopilot errors."""


class ConfigurationError(AutopilotError):
    """Raised when a required key or secret is missing."""


class MalformedAnalysisError(AutopilotError):
    """Raised when the model output cannot be turned into an action request."""


class AuthRequiredError(AutopilotError):
    """Raised when the user must connect a toolkit before the request can run."""

    code = "AUTH_REQUIRED"

    def __init__(self, message: str, toolkit: str = "unknown") -> None:
        super().__init__(message)
        self.toolkit = toolkit


class HubError(AutopilotError):
    """Raised when an integration-hub proxy call fails."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class ConnectionFailedError(HubError):
    """Raised when a pending connection ends FAILED or EXPIRED."""

    def __init__(self, connection_id: str, status: str) -> None:
        super().__init__(f"Connection {status.lower()}")
        self.connection_id = connection_id
        self.status = status


class ConnectionTimeoutError(HubError):
    """Raised when a connection does not become active in time."""

    def __init__(self, connection_id: str, timeout: float) -> None:
        super().__init__("Connection timeout")
        self.connection_id = connection_id
        self.timeout = timeout


class DecryptionError(AutopilotError):
    """Raised when a stored token cannot be decrypted."""


class StorageError(AutopilotError):
    """Raised when the database does not hold a row it was just asked to write."""
