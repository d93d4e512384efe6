"""
Git repository interface.

This module provides the catalog of Git operations the dispatcher can
perform. Every operation is a thin wrapper over the command runner; the
facade owns nothing but the resolved working directory.
"""

import logging
import re
from pathlib import Path
from typing import Optional, Union

from git_helper.git.auth import embed_token, is_https_url, mask_credentials
from git_helper.git.exceptions import ExecutionError, GitError, NoRepositoryError
from git_helper.git.models import RemoteTokenUpdate, RepositoryContext
from git_helper.git.runner import CommandRunner

logger = logging.getLogger(__name__)

NO_REPOSITORY = "No Repo"
NO_WORKSPACE = "No workspace open"
CLEAN_STATUS = "Clean"
STATUS_ERROR = "Error getting status"
UNKNOWN = "Unknown"
NO_ORIGIN = "No origin"

FAST_PUSH_MESSAGE = "Fast Push: Auto-commit"

_REPO_NAME_PATTERN = re.compile(r"/([^/]+?)(\.git)?$")
_ORIGIN_FETCH_PATTERN = re.compile(r"origin\s+(.*?)\s+\(fetch\)")


class GitRepository:
    """
    High-level interface for the supported Git operations.

    Query methods (name, status, branch, remote) never raise: they degrade
    to fixed sentinel strings. Mutating methods raise ExecutionError when
    the command fails and NoRepositoryError when no repository is open.

    Example:
        ```python
        repo = GitRepository.open("/path/to/repo")

        print(repo.repository_name())
        print(repo.status())

        repo.add_all()
        repo.commit('Fix "quoted" typo')
        repo.push()
        ```
    """

    def __init__(
        self,
        context: Optional[RepositoryContext] = None,
        *,
        runner: Optional[CommandRunner] = None,
    ):
        """
        Args:
            context: Resolved repository location (default: no repository)
            runner: Command runner (default: a new CommandRunner)
        """
        self.context = context or RepositoryContext()
        self.runner = runner or CommandRunner()

    @classmethod
    def open(
        cls,
        path: Optional[Union[str, Path]],
        *,
        runner: Optional[CommandRunner] = None,
    ) -> "GitRepository":
        """Create a facade for a workspace path (None or a missing path means no repository)."""
        return cls(RepositoryContext.from_workspace(path), runner=runner)

    @property
    def path(self) -> Optional[Path]:
        return self.context.working_directory

    def _git(self, *args: str) -> str:
        if self.path is None:
            raise NoRepositoryError()
        return self.runner.run(["git", *args], self.path)

    # =========================================================================
    # Status and Info
    # =========================================================================

    def repository_name(self) -> str:
        """
        Human-readable repository name.

        Taken from the origin URL when possible, otherwise from the last
        segment of the working directory.
        """
        if self.path is None:
            return NO_REPOSITORY

        try:
            remote_url = self._git("remote", "get-url", "origin")
            match = _REPO_NAME_PATTERN.search(remote_url)
            if match:
                return match.group(1)
        except GitError:
            pass

        return self.path.name or UNKNOWN

    def repository_path(self) -> str:
        """The working directory as a string, or a placeholder."""
        return str(self.path) if self.path is not None else NO_WORKSPACE

    def status(self) -> str:
        """
        Short status of the working tree.

        Returns:
            The `git status --short` output, "Clean" when there is none,
            "Error getting status" when the command fails
        """
        if self.path is None:
            return NO_REPOSITORY
        try:
            output = self._git("status", "--short")
        except GitError as e:
            logger.debug(f"Status failed: {e}")
            return STATUS_ERROR
        return output or CLEAN_STATUS

    def current_branch(self) -> str:
        """Name of the checked out branch."""
        if self.path is None:
            return NO_REPOSITORY
        try:
            return self._git("rev-parse", "--abbrev-ref", "HEAD")
        except GitError:
            return UNKNOWN

    def remote(self) -> str:
        """Fetch URL of origin with any credentials masked."""
        if self.path is None:
            return NO_REPOSITORY
        try:
            remotes = self._git("remote", "-v")
        except GitError:
            return UNKNOWN
        match = _ORIGIN_FETCH_PATTERN.search(remotes)
        return mask_credentials(match.group(1)) if match else NO_ORIGIN

    def branches(self) -> list[str]:
        """Local branch names."""
        try:
            output = self._git("branch", "--format=%(refname:short)")
        except GitError:
            return []
        return [b.strip() for b in output.split("\n") if b.strip()]

    # =========================================================================
    # Commits and Sync
    # =========================================================================

    def add_all(self) -> str:
        """Stage all changes, including untracked files."""
        return self._git("add", ".")

    def commit(self, message: str) -> str:
        """Commit staged changes; the message is passed verbatim."""
        return self._git("commit", "-m", message)

    def push(self) -> str:
        return self._git("push")

    def pull(self) -> str:
        return self._git("pull")

    def fetch(self) -> str:
        return self._git("fetch")

    def stash(self) -> str:
        return self._git("stash")

    # =========================================================================
    # Remotes
    # =========================================================================

    def set_remote(self, url: str) -> str:
        """
        Point origin at a URL, adding the remote if it does not exist yet.

        Raises:
            ExecutionError: If neither updating nor adding the remote works
        """
        try:
            self._git("remote", "get-url", "origin")
            exists = True
        except ExecutionError:
            exists = False

        try:
            if exists:
                self._git("remote", "set-url", "origin", url)
            else:
                self._git("remote", "add", "origin", url)
        except ExecutionError as e:
            raise ExecutionError(
                f"Failed to set remote: {e.message}",
                command=e.command,
                return_code=e.return_code,
                stderr=e.stderr,
                repo_path=e.repo_path,
            )

        logger.info(f"Origin set to {mask_credentials(url)}")
        return "Remote URL updated"

    def update_remote_with_token(self, token: str) -> RemoteTokenUpdate:
        """
        Embed an access token into the HTTPS origin URL.

        Non-HTTPS remotes are left alone.
        """
        try:
            remote_url = self._git("remote", "get-url", "origin")
        except GitError as e:
            logger.warning(f"Failed to read origin URL: {e.message}")
            return RemoteTokenUpdate.FAILED

        if not is_https_url(remote_url):
            logger.info("Remote URL is not HTTPS, skipping token update")
            return RemoteTokenUpdate.SKIPPED

        try:
            self._git("remote", "set-url", "origin", embed_token(remote_url, token))
        except ExecutionError as e:
            logger.warning(f"Failed to update remote URL: {e.message}")
            return RemoteTokenUpdate.FAILED

        logger.info("Remote URL updated with token")
        return RemoteTokenUpdate.UPDATED

    # =========================================================================
    # Branches
    # =========================================================================

    def create_branch(self, name: str) -> str:
        """Create a branch and switch to it."""
        return self._git("checkout", "-b", name)

    def delete_branch(self, name: str) -> str:
        """Delete a branch, merged or not."""
        return self._git("branch", "-D", name)

    def switch_branch(self, name: str) -> str:
        # "--" keeps a name that matches a tracked file from discarding its changes.
        return self._git("checkout", name, "--")

    def merge_branch(self, name: str) -> str:
        """Merge a branch into the current one."""
        return self._git("merge", name)

    # =========================================================================
    # Utility
    # =========================================================================

    def __repr__(self) -> str:
        return f"GitRepository(path={self.path!r})"
