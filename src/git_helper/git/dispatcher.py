"""
Git action dispatcher.

Turns an (action, payload) request into exactly one ActionResult. Payloads
are validated before any command runs, facade calls run in a worker thread
so the event loop stays responsive, and a completion hook fires after
every action so observers can re-read repository state.
"""

import asyncio
import logging
from typing import Any, Awaitable, Callable, Optional, Union

from git_helper.git.exceptions import GitError
from git_helper.git.models import (
    ActionResult,
    BranchPayload,
    CommitPayload,
    GitAction,
    Payload,
    RemotePayload,
    parse_action,
    parse_payload,
)
from git_helper.git.repository import FAST_PUSH_MESSAGE, GitRepository

logger = logging.getLogger(__name__)

CompletionHook = Callable[[], Awaitable[None]]


class GitActionDispatcher:
    """
    Stateless dispatch table from GitAction to repository operations.

    Example:
        ```python
        dispatcher = GitActionDispatcher(GitRepository.open("."))

        result = await dispatcher.dispatch("commit", {"message": "Update docs"})
        if not result.succeeded:
            print(result.error_message)
        ```
    """

    def __init__(
        self,
        repository: GitRepository,
        *,
        on_complete: Optional[CompletionHook] = None,
    ):
        """
        Args:
            repository: Facade the actions run against
            on_complete: Awaited after every action, whatever its outcome
        """
        self.repository = repository
        self.on_complete = on_complete
        self._handlers: dict[GitAction, Callable[[Any], str]] = {
            GitAction.STATUS: lambda _: self.repository.status(),
            GitAction.PUSH: lambda _: self.repository.push(),
            GitAction.PULL: lambda _: self.repository.pull(),
            GitAction.FETCH: lambda _: self.repository.fetch(),
            GitAction.COMMIT: self._commit,
            GitAction.FAST_PUSH: self._fast_push,
            GitAction.STASH: lambda _: self.repository.stash(),
            GitAction.SET_REMOTE: self._set_remote,
            GitAction.CREATE_BRANCH: self._branch(self.repository.create_branch),
            GitAction.DELETE_BRANCH: self._branch(self.repository.delete_branch),
            GitAction.SWITCH_BRANCH: self._branch(self.repository.switch_branch),
            GitAction.MERGE_BRANCH: self._branch(self.repository.merge_branch),
        }

    async def dispatch(
        self,
        action: Union[str, GitAction],
        payload: Any = None,
    ) -> ActionResult:
        """
        Validate and run one action.

        Args:
            action: Action name or GitAction
            payload: Raw payload dict, payload model, or None

        Returns:
            ActionResult; failures are reported in it, never raised
        """
        name = action.value if isinstance(action, GitAction) else str(action)

        try:
            git_action = parse_action(action)
            parsed = parse_payload(git_action, payload)
            output = await asyncio.to_thread(self._handlers[git_action], parsed)
            logger.info(f"Git {name} succeeded")
            result = ActionResult.success(output)
        except GitError as e:
            logger.warning(f"Git {name} failed: {e.message}")
            result = ActionResult.failure(f"Git {name} failed: {e.message}")
        except Exception as e:
            logger.exception(f"Unexpected error during git {name}")
            result = ActionResult.failure(f"Git {name} failed: {e}")

        await self._notify_complete()
        return result

    async def _notify_complete(self) -> None:
        if self.on_complete is None:
            return
        try:
            await self.on_complete()
        except Exception:
            logger.exception("Completion hook failed")

    # =========================================================================
    # Handlers
    # =========================================================================

    def _commit(self, payload: CommitPayload) -> str:
        return self.repository.commit(payload.message)

    def _fast_push(self, payload: Payload) -> str:
        self.repository.add_all()
        self.repository.commit(FAST_PUSH_MESSAGE)
        return self.repository.push()

    def _set_remote(self, payload: RemotePayload) -> str:
        return self.repository.set_remote(payload.url)

    @staticmethod
    def _branch(operation: Callable[[str], str]) -> Callable[[BranchPayload], str]:
        return lambda payload: operation(payload.name)
