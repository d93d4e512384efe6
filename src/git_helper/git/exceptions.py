"""
Git-specific exceptions.

This module defines exceptions that can occur while validating and
executing Git actions.
"""

from typing import Optional


class GitError(Exception):
    """Base exception for all Git-related errors."""

    def __init__(
        self,
        message: str,
        *,
        command: Optional[str] = None,
        return_code: Optional[int] = None,
        stderr: Optional[str] = None,
        repo_path: Optional[str] = None,
    ):
        super().__init__(message)
        self.message = message
        self.command = command
        self.return_code = return_code
        self.stderr = stderr
        self.repo_path = repo_path

    def __str__(self) -> str:
        parts = [self.message]
        if self.command:
            parts.append(f"command='{self.command}'")
        if self.return_code is not None:
            parts.append(f"return_code={self.return_code}")
        return " ".join(parts)


class ExecutionError(GitError):
    """Raised when an underlying command exits non-zero or cannot be spawned."""

    pass


class NoRepositoryError(GitError):
    """Raised when an operation needs a working directory and none is open."""

    def __init__(self, message: str = "No workspace folder open", **kwargs):
        super().__init__(message, **kwargs)


class ValidationError(GitError):
    """Raised when an action or its payload is rejected before execution."""

    def __init__(self, message: str, *, action: Optional[str] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.action = action
