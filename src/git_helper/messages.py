"""
Messages exchanged with the presentation layer.

The session sends one-way notifications to a `NotificationSink` and accepts
one-way commands. Both are pydantic models tagged by a `type` field so they
can cross a JSON message boundary unchanged.
"""

from enum import Enum
from typing import Annotated, Any, Literal, Optional, Protocol, Union

from pydantic import BaseModel, Field, TypeAdapter

from git_helper.github.models import ProfileSummary


# =============================================================================
# Notifications (session -> presentation)
# =============================================================================


class NoticeLevel(str, Enum):
    """Severity of a toast-style notice."""

    INFO = "info"
    ERROR = "error"


class ChatRole(str, Enum):
    """Author of a chat transcript entry."""

    USER = "user"
    ASSISTANT = "assistant"
    SYSTEM = "system"


class RepositoryStats(BaseModel):
    """Snapshot of the open repository and the logged-in user."""

    branch: str = Field(description="Current branch")
    remote: str = Field(description="Origin fetch URL, credentials masked")
    status: str = Field(description="Short status, or a sentinel")
    repo_name: str = Field(description="Repository name")
    repo_path: str = Field(description="Working directory")
    user: ProfileSummary = Field(default_factory=ProfileSummary.guest)


class ShowSetup(BaseModel):
    """Ask for credentials (API key and GitHub token)."""

    type: Literal["showSetup"] = "showSetup"


class ShowDeviceCode(BaseModel):
    """Show the code the user must enter on the verification page."""

    type: Literal["showDeviceCode"] = "showDeviceCode"
    user_code: str
    verification_uri: str


class ShowDashboard(BaseModel):
    """Credentials are present; show the main view."""

    type: Literal["showDashboard"] = "showDashboard"


class UpdateStats(RepositoryStats):
    """Refreshed repository statistics."""

    type: Literal["updateStats"] = "updateStats"


class ChatMessage(BaseModel):
    """One entry of the chat transcript."""

    type: Literal["chatMessage"] = "chatMessage"
    role: ChatRole
    content: str


class Notice(BaseModel):
    """Short informational or error message."""

    type: Literal["notice"] = "notice"
    level: NoticeLevel = NoticeLevel.INFO
    message: str

    @classmethod
    def info(cls, message: str) -> "Notice":
        return cls(level=NoticeLevel.INFO, message=message)

    @classmethod
    def error(cls, message: str) -> "Notice":
        return cls(level=NoticeLevel.ERROR, message=message)


class PopulateSettings(BaseModel):
    """Current non-secret settings, for pre-filling the settings form."""

    model_config = {"protected_namespaces": ()}

    type: Literal["populateSettings"] = "populateSettings"
    provider: str
    base_url: str
    model_name: str


Notification = Union[
    ShowSetup,
    ShowDeviceCode,
    ShowDashboard,
    UpdateStats,
    ChatMessage,
    Notice,
    PopulateSettings,
]


class NotificationSink(Protocol):
    """Receiver of session notifications."""

    def send(self, notification: Notification) -> None:
        """Deliver one notification. Must not raise."""
        ...


class NullSink:
    """Sink that discards everything."""

    def send(self, notification: Notification) -> None:
        pass


class CollectingSink:
    """Sink that records notifications in order."""

    def __init__(self) -> None:
        self.notifications: list[Notification] = []

    def send(self, notification: Notification) -> None:
        self.notifications.append(notification)

    def of_type(self, kind: type) -> list:
        """Recorded notifications of one class."""
        return [n for n in self.notifications if isinstance(n, kind)]

    @property
    def types(self) -> list[str]:
        """Wire `type` tags of recorded notifications, in order."""
        return [n.type for n in self.notifications]

    def clear(self) -> None:
        self.notifications.clear()


# =============================================================================
# Commands (presentation -> session)
# =============================================================================


class RunGitAction(BaseModel):
    """Run one Git action."""

    model_config = {"extra": "forbid"}

    type: Literal["runGitAction"] = "runGitAction"
    action: str = Field(description="Action name, e.g. 'commit'")
    payload: Optional[dict[str, Any]] = Field(default=None, description="Action arguments")


class SubmitChatQuery(BaseModel):
    """Ask the chat model a question."""

    model_config = {"extra": "forbid"}

    type: Literal["submitChatQuery"] = "submitChatQuery"
    text: str = ""


class RequestStatsRefresh(BaseModel):
    model_config = {"extra": "forbid"}

    type: Literal["requestStatsRefresh"] = "requestStatsRefresh"


class SaveSettings(BaseModel):
    """Store credentials and settings. Empty fields are left unchanged."""

    model_config = {"extra": "forbid", "protected_namespaces": ()}

    type: Literal["saveSettings"] = "saveSettings"
    api_key: Optional[str] = None
    token: Optional[str] = None
    provider: Optional[str] = None
    base_url: Optional[str] = None
    model_name: Optional[str] = None


class RequestSettings(BaseModel):
    model_config = {"extra": "forbid"}

    type: Literal["requestSettings"] = "requestSettings"


class LoginWithDeviceFlow(BaseModel):
    model_config = {"extra": "forbid"}

    type: Literal["loginWithDeviceFlow"] = "loginWithDeviceFlow"


class Logout(BaseModel):
    model_config = {"extra": "forbid"}

    type: Literal["logout"] = "logout"


Command = Annotated[
    Union[
        RunGitAction,
        SubmitChatQuery,
        RequestStatsRefresh,
        SaveSettings,
        RequestSettings,
        LoginWithDeviceFlow,
        Logout,
    ],
    Field(discriminator="type"),
]

_COMMAND_ADAPTER = TypeAdapter(Command)


def parse_command(data: Any) -> Command:
    """
    Parse a raw command dictionary.

    Raises:
        pydantic.ValidationError: If the type tag is unknown or fields are invalid
    """
    return _COMMAND_ADAPTER.validate_python(data)
