"""
Helper session.

`HelperSession` owns one dispatcher, one device-flow authenticator and one
profile resolver for a workspace, turns presentation commands into calls on
them, and reports every outcome as a notification. No command handler
raises; failures become notices.
"""

import asyncio
import logging
from typing import Any, Callable, Optional, Union

import pydantic

from git_helper.context import HelperContext
from git_helper.git import ActionResult, GitAction, GitActionDispatcher, GitRepository
from git_helper.github import (
    DeviceFlowAuthenticator,
    DeviceFlowCancelled,
    GitHubError,
    ProfileFetchError,
    ProfileResolver,
    ProfileSummary,
)
from git_helper.llm import ChatClient, ChatConfig, LLMError
from git_helper.messages import (
    ChatMessage,
    ChatRole,
    Command,
    LoginWithDeviceFlow,
    Logout,
    Notice,
    Notification,
    NotificationSink,
    NullSink,
    PopulateSettings,
    RepositoryStats,
    RequestSettings,
    RequestStatsRefresh,
    RunGitAction,
    SaveSettings,
    ShowDashboard,
    ShowDeviceCode,
    ShowSetup,
    SubmitChatQuery,
    UpdateStats,
    parse_command,
)
from git_helper.settings import API_KEY, GITHUB_TOKEN, SecretStoreError

logger = logging.getLogger(__name__)

ChatClientFactory = Callable[[ChatConfig], ChatClient]


class HelperSession:
    """
    Command handlers for one workspace.

    Example:
        ```python
        context = HelperContext.create("/path/to/repo")
        session = HelperSession(context, sink)

        await session.check_auth()
        await session.handle_message({"type": "runGitAction", "action": "status"})
        await session.close()
        ```
    """

    def __init__(
        self,
        context: HelperContext,
        sink: Optional[NotificationSink] = None,
        *,
        repository: Optional[GitRepository] = None,
        authenticator: Optional[DeviceFlowAuthenticator] = None,
        profiles: Optional[ProfileResolver] = None,
        chat_client_factory: Optional[ChatClientFactory] = None,
    ):
        """
        Args:
            context: Settings, secrets and workspace
            sink: Notification receiver (default: discard)
            repository: Facade to use instead of one opened on the workspace
            authenticator: Device-flow authenticator to use instead of one
                built from the settings
            profiles: Profile resolver to use instead of one built from the
                settings
            chat_client_factory: Builds a chat client for a configuration
        """
        self.context = context
        self.sink = sink or NullSink()
        settings = context.settings

        self.repository = repository or GitRepository.open(context.working_directory)
        self.dispatcher = GitActionDispatcher(self.repository, on_complete=self.refresh_stats)
        self.authenticator = authenticator or DeviceFlowAuthenticator(
            settings.github_client_id,
            scopes=settings.github_scopes,
            github_url=settings.github_url,
            timeout=settings.request_timeout,
        )
        self.profiles = profiles or ProfileResolver(
            api_url=settings.github_api_url,
            timeout=settings.request_timeout,
        )
        self._chat_client_factory = chat_client_factory or ChatClient

        # Written by both the login and the refresh path; last writer wins.
        self.profile: Optional[ProfileSummary] = None

        self._handlers = {
            RunGitAction: lambda c: self.run_git_action(c.action, c.payload),
            SubmitChatQuery: lambda c: self.submit_chat_query(c.text),
            RequestStatsRefresh: lambda c: self.refresh_stats(),
            SaveSettings: self.save_settings,
            RequestSettings: lambda c: self.request_settings(),
            LoginWithDeviceFlow: lambda c: self.login_with_device_flow(),
            Logout: lambda c: self.logout(),
        }

    def _notify(self, notification: Notification) -> None:
        try:
            self.sink.send(notification)
        except Exception:
            logger.exception(f"Notification sink failed on {notification.type}")

    async def _get_secret(self, key: str) -> Optional[str]:
        try:
            return await self.context.secrets.get(key)
        except SecretStoreError as e:
            logger.warning(f"Could not read secret '{key}': {e.message}")
            return None

    # =========================================================================
    # Message routing
    # =========================================================================

    async def handle_message(self, data: Any) -> None:
        """Parse a raw command dictionary and run it."""
        try:
            command = parse_command(data)
        except pydantic.ValidationError as e:
            first = e.errors()[0]
            location = ".".join(str(part) for part in first["loc"])
            detail = f"{location} {first['msg']}".strip()
            logger.warning(f"Rejected malformed message: {e}")
            self._notify(Notice.error(f"Invalid message: {detail}"))
            return

        await self.handle_command(command)

    async def handle_command(self, command: Command) -> None:
        """Run a parsed command."""
        try:
            await self._handlers[type(command)](command)
        except Exception as e:
            logger.exception(f"Command {command.type} failed")
            self._notify(Notice.error(f"{command.type} failed: {e}"))

    # =========================================================================
    # Git
    # =========================================================================

    async def run_git_action(
        self,
        action: Union[str, GitAction],
        payload: Any = None,
    ) -> ActionResult:
        """Run one Git action and report the outcome as a notice."""
        name = action.value if isinstance(action, GitAction) else str(action)
        result = await self.dispatcher.dispatch(action, payload)

        if result.succeeded:
            self._notify(Notice.info(f"Git {name} success: {result.output}"))
        else:
            self._notify(Notice.error(result.error_message or f"Git {name} failed"))
        return result

    async def refresh_stats(self) -> RepositoryStats:
        """Read repository state and the current user, and emit updateStats."""

        def read_repository() -> dict[str, str]:
            return {
                "branch": self.repository.current_branch(),
                "remote": self.repository.remote(),
                "status": self.repository.status(),
                "repo_name": self.repository.repository_name(),
                "repo_path": self.repository.repository_path(),
            }

        fields = await asyncio.to_thread(read_repository)
        user = await self._resolve_user()

        stats = UpdateStats(**fields, user=user)
        self._notify(stats)
        return stats

    async def _resolve_user(self) -> ProfileSummary:
        if self.profile is not None:
            return self.profile

        token = await self._get_secret(GITHUB_TOKEN)
        if not token:
            return ProfileSummary.guest()

        try:
            self.profile = await self.profiles.fetch_profile(token)
        except ProfileFetchError as e:
            logger.warning(f"Failed to fetch profile with stored token: {e.message}")
            return ProfileSummary.guest()
        return self.profile

    # =========================================================================
    # Chat
    # =========================================================================

    async def submit_chat_query(self, text: str) -> Optional[str]:
        """
        Ask the chat model a question.

        Blank queries are ignored. The user's message is echoed first, then
        either the reply or a system message describing the error.
        """
        if not text or not text.strip():
            return None

        self._notify(ChatMessage(role=ChatRole.USER, content=text))

        api_key = await self._get_secret(API_KEY)
        client = self._chat_client_factory(self.context.settings.chat_config(api_key))
        try:
            reply = await client.complete(text)
        except LLMError as e:
            logger.warning(f"Chat query failed: {e.message}")
            self._notify(ChatMessage(role=ChatRole.SYSTEM, content=f"Error: {e.message}"))
            return None
        finally:
            await client.close()

        self._notify(ChatMessage(role=ChatRole.ASSISTANT, content=reply))
        return reply

    # =========================================================================
    # Settings
    # =========================================================================

    async def save_settings(self, command: SaveSettings) -> bool:
        """Store the provided secrets and settings, then re-check auth."""
        try:
            if command.api_key:
                await self.context.secrets.set(API_KEY, command.api_key)
            if command.token:
                await self.context.secrets.set(GITHUB_TOKEN, command.token)
                self.profile = None

            settings = self.context.settings.updated(
                provider=command.provider,
                base_url=command.base_url,
                model_name=command.model_name,
            )
            await asyncio.to_thread(self.context.save_settings, settings)
        except SecretStoreError as e:
            self._notify(Notice.error(f"Failed to save settings: {e.message}"))
            return False
        except (OSError, pydantic.ValidationError) as e:
            self._notify(Notice.error(f"Failed to save settings: {e}"))
            return False

        self._notify(Notice.info("Settings saved successfully!"))
        await self.check_auth()
        return True

    async def request_settings(self) -> None:
        """Send the non-secret settings to the presentation layer."""
        settings = self.context.settings
        self._notify(
            PopulateSettings(
                provider=settings.provider,
                base_url=settings.base_url,
                model_name=settings.model_name,
            )
        )

    # =========================================================================
    # Authentication
    # =========================================================================

    async def check_auth(self) -> bool:
        """Show the dashboard if both credentials are stored, setup otherwise."""
        api_key = await self._get_secret(API_KEY)
        token = await self._get_secret(GITHUB_TOKEN)

        if not api_key or not token:
            self._notify(ShowSetup())
            return False

        self._notify(ShowDashboard())
        await self.refresh_stats()
        return True

    async def login_with_device_flow(self) -> bool:
        """
        Link a GitHub account through the device flow.

        On success the token is stored, embedded into an HTTPS origin URL
        and used to load the profile. Authentication errors send the user
        back to manual setup. A cancelled or superseded attempt ends quietly.

        Returns:
            True if a token was obtained and stored
        """
        try:
            code = await self.authenticator.initiate()
            self._notify(
                ShowDeviceCode(user_code=code.user_code, verification_uri=code.verification_uri)
            )
            token = await self.authenticator.poll_for_token(
                code.device_code, code.interval, code.expires_in
            )
            await self.context.secrets.set(GITHUB_TOKEN, token)
        except DeviceFlowCancelled:
            logger.info("Device flow login ended by cancellation")
            return False
        except (GitHubError, SecretStoreError) as e:
            logger.warning(f"Device flow login failed: {e.message}")
            self._notify(Notice.error(f"Device Flow Login failed: {e.message}"))
            self._notify(ShowSetup())
            return False

        self._notify(Notice.info("Successfully logged in with GitHub!"))

        outcome = await asyncio.to_thread(self.repository.update_remote_with_token, token)
        logger.info(f"Origin token update: {outcome.value}")

        try:
            self.profile = await self.profiles.fetch_profile(token)
        except ProfileFetchError as e:
            logger.warning(f"Failed to fetch profile: {e.message}")

        await self.check_auth()
        return True

    async def logout(self) -> None:
        """Cancel any pending login and forget the GitHub token."""
        self.authenticator.cancel()
        try:
            await self.context.secrets.delete(GITHUB_TOKEN)
        except SecretStoreError as e:
            logger.warning(f"Failed to delete GitHub token: {e.message}")
        self.profile = None

        self._notify(Notice.info("Logged out from GitHub."))
        await self.check_auth()

    async def close(self) -> None:
        """Cancel any pending login and release HTTP clients."""
        await self.authenticator.close()
        await self.profiles.close()
