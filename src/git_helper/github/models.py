"""
GitHub data models.

Device-flow responses and state, and the normalized user profile.
"""

import asyncio
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, Field


class DeviceFlowStatus(str, Enum):
    """Lifecycle of one device-flow attempt."""

    PENDING = "pending"
    SUCCEEDED = "succeeded"
    EXPIRED = "expired"
    DENIED = "denied"
    CANCELLED = "cancelled"
    ERROR = "error"


class DeviceCodeResponse(BaseModel):
    """Response from the device code endpoint."""

    device_code: str = Field(description="Code the client polls with")
    user_code: str = Field(description="Code the user types on the verification page")
    verification_uri: str = Field(description="Page where the user enters the code")
    expires_in: int = Field(default=900, description="Seconds until the device code expires")
    interval: int = Field(default=5, description="Minimum seconds between polls")


@dataclass
class DeviceFlowState:
    """Mutable state of the live device-flow attempt."""

    device_code: str
    interval_seconds: int
    expires_at: float
    user_code: str = ""
    verification_uri: str = ""
    status: DeviceFlowStatus = DeviceFlowStatus.PENDING
    task: Optional[asyncio.Task] = field(default=None, repr=False)

    @property
    def is_active(self) -> bool:
        return self.status == DeviceFlowStatus.PENDING


class Organization(BaseModel):
    """An organization the user belongs to."""

    login: str
    avatar_url: Optional[str] = None


class ProfileSummary(BaseModel):
    """
    Normalized view of a GitHub user.

    Every field is optional or defaulted because the upstream query may
    omit any of them.
    """

    display_name: Optional[str] = Field(default=None, description="Name, or login if unnamed")
    login: Optional[str] = Field(default=None, description="Account login")
    email: Optional[str] = Field(default=None, description="Public or primary email")
    avatar_url: Optional[str] = Field(default=None, description="Avatar image URL")
    followers: int = Field(default=0)
    following: int = Field(default=0)
    repository_count: int = Field(default=0, description="Repositories owned")
    contribution_count: int = Field(default=0, description="Contributions in the last year")
    organizations: list[Organization] = Field(default_factory=list)
    created_at: Optional[str] = Field(default=None, description="Account creation timestamp")

    @classmethod
    def guest(cls) -> "ProfileSummary":
        """Identity shown when nobody is logged in."""
        return cls(display_name="Guest", email="Not logged in")

    @classmethod
    def from_viewer(cls, viewer: dict[str, Any]) -> "ProfileSummary":
        """Build a summary from a GraphQL `viewer` object."""

        def total(key: str) -> int:
            return _dig(viewer, key, "totalCount") or 0

        contributions = (
            _dig(viewer, "contributionsCollection", "contributionCalendar", "totalContributions")
            or 0
        )

        nodes = _dig(viewer, "organizations", "nodes")
        organizations = [
            Organization(login=node["login"], avatar_url=node.get("avatarUrl"))
            for node in (nodes if isinstance(nodes, list) else [])
            if isinstance(node, dict) and node.get("login")
        ]

        return cls(
            display_name=viewer.get("name") or viewer.get("login"),
            login=viewer.get("login"),
            email=viewer.get("email") or "No public email",
            avatar_url=viewer.get("avatarUrl"),
            followers=total("followers"),
            following=total("following"),
            repository_count=total("repositories"),
            contribution_count=contributions,
            organizations=organizations,
            created_at=viewer.get("createdAt"),
        )


def _dig(data: Any, *keys: str) -> Any:
    """Follow nested object keys, returning None where the shape does not match."""
    for key in keys:
        if not isinstance(data, dict):
            return None
        data = data.get(key)
    return data
