"""
Git data models.

This module defines Pydantic models for Git actions, their payloads and
their results.
"""

from enum import Enum
from pathlib import Path
from typing import Any, Optional, Union

import pydantic
from pydantic import BaseModel, Field, field_validator

from git_helper.git.exceptions import ValidationError


class GitAction(str, Enum):
    """The closed set of actions the dispatcher accepts."""

    STATUS = "status"
    PUSH = "push"
    PULL = "pull"
    FETCH = "fetch"
    COMMIT = "commit"
    FAST_PUSH = "fast-push"
    STASH = "stash"
    SET_REMOTE = "set-remote"
    CREATE_BRANCH = "create-branch"
    DELETE_BRANCH = "delete-branch"
    SWITCH_BRANCH = "switch-branch"
    MERGE_BRANCH = "merge-branch"


class RemoteTokenUpdate(str, Enum):
    """Outcome of rewriting the origin URL with an access token."""

    UPDATED = "updated"
    SKIPPED = "skipped"
    FAILED = "failed"


class RepositoryContext(BaseModel):
    """Where the repository lives, if anywhere."""

    working_directory: Optional[Path] = Field(
        default=None, description="Repository root, or None when no repository is open"
    )

    @classmethod
    def from_workspace(cls, path: Optional[Union[str, Path]]) -> "RepositoryContext":
        """Resolve a workspace path; missing or non-directory paths mean no repository."""
        if path is None:
            return cls()
        resolved = Path(path).expanduser().resolve()
        if not resolved.is_dir():
            return cls()
        return cls(working_directory=resolved)


class EmptyPayload(BaseModel):
    """Payload for actions that take no arguments."""

    model_config = {"extra": "forbid"}


class CommitPayload(BaseModel):
    """Payload for the commit action."""

    model_config = {"extra": "forbid"}

    message: str = Field(description="Commit message")

    @field_validator("message")
    @classmethod
    def require_text(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("must not be blank")
        return v


class RemotePayload(BaseModel):
    """Payload for the set-remote action."""

    model_config = {"extra": "forbid"}

    url: str = Field(description="Remote URL for origin")

    @field_validator("url")
    @classmethod
    def validate_url(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("must not be blank")
        if v.startswith("-"):
            raise ValueError("must not start with '-'")
        return v


class BranchPayload(BaseModel):
    """Payload for the branch actions."""

    model_config = {"extra": "forbid"}

    name: str = Field(description="Branch name")

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("must not be blank")
        if v.startswith("-"):
            raise ValueError("must not start with '-'")
        if any(c.isspace() for c in v):
            raise ValueError("must not contain whitespace")
        return v


Payload = Union[EmptyPayload, CommitPayload, RemotePayload, BranchPayload]

PAYLOAD_MODELS: dict[GitAction, type[BaseModel]] = {
    GitAction.STATUS: EmptyPayload,
    GitAction.PUSH: EmptyPayload,
    GitAction.PULL: EmptyPayload,
    GitAction.FETCH: EmptyPayload,
    GitAction.COMMIT: CommitPayload,
    GitAction.FAST_PUSH: EmptyPayload,
    GitAction.STASH: EmptyPayload,
    GitAction.SET_REMOTE: RemotePayload,
    GitAction.CREATE_BRANCH: BranchPayload,
    GitAction.DELETE_BRANCH: BranchPayload,
    GitAction.SWITCH_BRANCH: BranchPayload,
    GitAction.MERGE_BRANCH: BranchPayload,
}

_REQUIRED_MESSAGES = {
    CommitPayload: "Commit message required",
    RemotePayload: "Remote URL required",
    BranchPayload: "Branch name required",
}


def parse_action(action: Union[str, GitAction]) -> GitAction:
    """
    Resolve an action name.

    Raises:
        ValidationError: If the action is not one of GitAction
    """
    try:
        return GitAction(action)
    except ValueError:
        raise ValidationError(f"Unknown action: {action}", action=str(action))


def parse_payload(action: GitAction, payload: Any = None) -> Payload:
    """
    Validate a raw payload against the model required by an action.

    Args:
        action: The action being dispatched
        payload: None, a dict of fields, or an already-built payload model

    Returns:
        The payload model for the action

    Raises:
        ValidationError: If a required field is missing or blank, or the
            payload carries fields the action does not accept
    """
    model = PAYLOAD_MODELS[action]

    if isinstance(payload, BaseModel):
        if isinstance(payload, model):
            return payload
        payload = payload.model_dump()

    if payload is None:
        payload = {}
    if not isinstance(payload, dict):
        raise ValidationError(
            f"Payload for {action.value} must be an object", action=action.value
        )

    try:
        return model.model_validate(payload)
    except pydantic.ValidationError as e:
        errors = e.errors()
        required = _REQUIRED_MESSAGES.get(model)
        if required and any(_is_missing(error) for error in errors):
            raise ValidationError(required, action=action.value)
        first = errors[0]
        field = ".".join(str(p) for p in first["loc"]) or "payload"
        raise ValidationError(
            f"Invalid payload for {action.value}: {field} {first['msg']}",
            action=action.value,
        )


def _is_missing(error: dict[str, Any]) -> bool:
    """Whether a pydantic error means the required field was absent or blank."""
    if error["type"] == "missing":
        return True
    if error["type"] == "string_type" and error.get("input") is None:
        return True
    return error["type"] == "value_error" and "blank" in error["msg"]


class ActionResult(BaseModel):
    """Uniform outcome of a dispatched Git action."""

    succeeded: bool = Field(description="Whether the action completed")
    output: str = Field(default="", description="Output of the final step")
    error_message: Optional[str] = Field(
        default=None, description="User-facing failure message"
    )

    @classmethod
    def success(cls, output: str = "") -> "ActionResult":
        return cls(succeeded=True, output=output)

    @classmethod
    def failure(cls, error_message: str) -> "ActionResult":
        return cls(succeeded=False, error_message=error_message)
