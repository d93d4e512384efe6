"""
Git Helper - run common Git actions and link a GitHub account.

This package provides a dispatcher for a fixed set of Git actions, a GitHub
OAuth device-flow login, and a session that reports their outcomes to a
presentation layer.
"""

__version__ = "0.1.0"

from git_helper.git import (
    ActionResult,
    GitAction,
    GitActionDispatcher,
    GitError,
    GitRepository,
)

from git_helper.github import (
    DeviceFlowAuthenticator,
    GitHubError,
    ProfileResolver,
    ProfileSummary,
)

from git_helper.llm import ChatClient, ChatConfig, LLMError

from git_helper.settings import (
    HelperSettings,
    MemorySecretStore,
    SecretStore,
    YamlSecretStore,
)

from git_helper.context import HelperContext
from git_helper.session import HelperSession

__all__ = [
    # Version
    "__version__",
    # Git
    "GitAction",
    "GitActionDispatcher",
    "GitRepository",
    "ActionResult",
    "GitError",
    # GitHub
    "DeviceFlowAuthenticator",
    "ProfileResolver",
    "ProfileSummary",
    "GitHubError",
    # Chat
    "ChatClient",
    "ChatConfig",
    "LLMError",
    # Settings
    "HelperSettings",
    "SecretStore",
    "YamlSecretStore",
    "MemorySecretStore",
    # Session
    "HelperContext",
    "HelperSession",
]
