"""
Git actions for the helper.

This module validates, executes and reports on a fixed set of Git
operations against a working directory.

Example:
    ```python
    from git_helper.git import GitActionDispatcher, GitRepository

    repo = GitRepository.open("/path/to/repo")
    print(repo.repository_name(), repo.current_branch(), repo.status())

    dispatcher = GitActionDispatcher(repo)
    result = await dispatcher.dispatch("create-branch", {"name": "feature"})
    print(result.succeeded, result.output)
    ```
"""

from git_helper.git.auth import (
    embed_token,
    is_https_url,
    mask_credentials,
    strip_credentials,
)
from git_helper.git.dispatcher import GitActionDispatcher
from git_helper.git.exceptions import (
    ExecutionError,
    GitError,
    NoRepositoryError,
    ValidationError,
)
from git_helper.git.models import (
    ActionResult,
    BranchPayload,
    CommitPayload,
    EmptyPayload,
    GitAction,
    Payload,
    RemotePayload,
    RemoteTokenUpdate,
    RepositoryContext,
    parse_action,
    parse_payload,
)
from git_helper.git.repository import GitRepository
from git_helper.git.runner import CommandRunner

__all__ = [
    # Main classes
    "CommandRunner",
    "GitRepository",
    "GitActionDispatcher",
    # Authentication
    "embed_token",
    "is_https_url",
    "mask_credentials",
    "strip_credentials",
    # Models
    "ActionResult",
    "BranchPayload",
    "CommitPayload",
    "EmptyPayload",
    "GitAction",
    "Payload",
    "RemotePayload",
    "RemoteTokenUpdate",
    "RepositoryContext",
    "parse_action",
    "parse_payload",
    # Exceptions
    "GitError",
    "ExecutionError",
    "NoRepositoryError",
    "ValidationError",
]
