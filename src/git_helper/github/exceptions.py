"""
GitHub-specific exceptions.

This module defines exceptions raised by the device-flow authenticator
and the profile resolver.
"""

from typing import Optional


class GitHubError(Exception):
    """Base exception for all GitHub-related errors."""

    def __init__(self, message: str, *, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code

    def __str__(self) -> str:
        if self.status_code is not None:
            return f"{self.message} status_code={self.status_code}"
        return self.message


class AuthInitiationError(GitHubError):
    """Raised when a device code cannot be obtained."""

    pass


class DeviceFlowError(GitHubError):
    """Raised when a device-flow attempt ends without a token."""

    pass


class TokenExpired(DeviceFlowError):
    """Raised when the device code expired before the user authorized it."""

    def __init__(self, message: str = "Token expired", **kwargs):
        super().__init__(message, **kwargs)


class AccessDenied(DeviceFlowError):
    """Raised when the user declined the authorization request."""

    def __init__(self, message: str = "Access denied", **kwargs):
        super().__init__(message, **kwargs)


class UnknownAuthError(DeviceFlowError):
    """Raised for any other error reported while polling for a token."""

    def __init__(self, description: Optional[str] = None, **kwargs):
        super().__init__(description or "Unknown error", **kwargs)
        self.description = description


class DeviceFlowCancelled(DeviceFlowError):
    """Raised to a caller awaiting a flow that was cancelled or superseded."""

    def __init__(self, message: str = "Device flow cancelled", **kwargs):
        super().__init__(message, **kwargs)


class ProfileFetchError(GitHubError):
    """Raised when the user profile query fails."""

    pass
