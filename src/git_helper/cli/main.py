"""
Command-line interface for git-helper.

One verb per Git action, plus commands for GitHub login, repository
statistics, chat and settings.
"""

import asyncio
import logging
import sys
from pathlib import Path
from typing import Awaitable, Callable, Optional, TypeVar

import click
from dotenv import load_dotenv
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.table import Table

from git_helper import __version__
from git_helper.cli.sink import ConsoleSink, stats_table
from git_helper.context import HelperContext
from git_helper.git import GitAction, GitActionDispatcher, GitRepository
from git_helper.git.repository import CLEAN_STATUS, STATUS_ERROR
from git_helper.messages import NullSink
from git_helper.session import HelperSession
from git_helper.settings import API_KEY, GITHUB_TOKEN, SecretStoreError

# Load environment variables
load_dotenv()

console = Console()
err_console = Console(stderr=True)

T = TypeVar("T")


def setup_logging(verbose: bool = False) -> None:
    """Setup rich logging."""
    level = logging.DEBUG if verbose else logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=err_console, rich_tracebacks=True)],
    )
    # Reduce noise from httpx and GitPython
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("git").setLevel(logging.WARNING)


def _fail(message: str) -> None:
    err_console.print(f"[red]{escape(message)}[/red]", highlight=False, soft_wrap=True)
    sys.exit(1)


def _run_session(
    context: HelperContext,
    action: Callable[[HelperSession], Awaitable[T]],
    *,
    quiet: bool = False,
) -> T:
    """Run one session coroutine and close the session afterwards."""

    async def runner() -> T:
        sink = NullSink() if quiet else ConsoleSink(console, err_console)
        session = HelperSession(context, sink)
        try:
            return await action(session)
        finally:
            await session.close()

    return asyncio.run(runner())


@click.group()
@click.version_option(version=__version__)
@click.option(
    "--repo",
    "-C",
    type=click.Path(file_okay=False, path_type=Path),
    default=".",
    show_default=True,
    help="Repository working directory",
)
@click.option(
    "--config-dir",
    type=click.Path(file_okay=False, path_type=Path),
    envvar="GIT_HELPER_CONFIG_DIR",
    default=None,
    help="Directory holding config.yaml and secrets.yaml (default ~/.git-helper)",
)
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
@click.pass_context
def cli(ctx: click.Context, repo: Path, config_dir: Optional[Path], verbose: bool):
    """Git Helper - run common Git actions and link your GitHub account."""
    setup_logging(verbose)
    ctx.obj = HelperContext.create(repo, config_dir=config_dir)


# =============================================================================
# Git actions
# =============================================================================

_ACTION_HELP = {
    GitAction.STATUS: "Show short working tree status.",
    GitAction.PUSH: "Push the current branch.",
    GitAction.PULL: "Pull the current branch.",
    GitAction.FETCH: "Fetch from the remote.",
    GitAction.COMMIT: "Commit staged changes.",
    GitAction.FAST_PUSH: "Stage everything, auto-commit and push.",
    GitAction.STASH: "Stash local changes.",
    GitAction.SET_REMOTE: "Set (or add) the origin URL.",
    GitAction.CREATE_BRANCH: "Create a branch and switch to it.",
    GitAction.DELETE_BRANCH: "Delete a branch (forced).",
    GitAction.SWITCH_BRANCH: "Switch to a branch.",
    GitAction.MERGE_BRANCH: "Merge a branch into the current one.",
}

_BRANCH_OPTION = click.option("--name", "-n", default=None, help="Branch name")

_ACTION_OPTIONS = {
    GitAction.COMMIT: [click.option("--message", "-m", default=None, help="Commit message")],
    GitAction.SET_REMOTE: [click.option("--url", "-u", default=None, help="Remote URL")],
    GitAction.CREATE_BRANCH: [_BRANCH_OPTION],
    GitAction.DELETE_BRANCH: [_BRANCH_OPTION],
    GitAction.SWITCH_BRANCH: [_BRANCH_OPTION],
    GitAction.MERGE_BRANCH: [_BRANCH_OPTION],
}


def _summary_line(repository: GitRepository) -> str:
    """One line of repository state, printed after every Git verb."""
    branch = repository.current_branch()
    status = repository.status()
    if status not in (CLEAN_STATUS, STATUS_ERROR):
        status = f"{len(status.splitlines())} changed"
    return f"{branch} | {status}"


def _git_command(action: GitAction) -> click.Command:
    @click.pass_obj
    def command(context: HelperContext, **options: Optional[str]):
        payload = {key: value for key, value in options.items() if value is not None}
        repository = GitRepository.open(context.working_directory)
        summary: list[str] = []

        async def refresh() -> None:
            if repository.path is not None:
                summary.append(await asyncio.to_thread(_summary_line, repository))

        dispatcher = GitActionDispatcher(repository, on_complete=refresh)
        result = asyncio.run(dispatcher.dispatch(action, payload))

        if not result.succeeded:
            for line in summary:
                err_console.print(f"[dim]{escape(line)}[/dim]", highlight=False)
            _fail(result.error_message or f"Git {action.value} failed")

        if result.output:
            console.print(result.output, markup=False, highlight=False, soft_wrap=True)
        else:
            console.print(f"[green]Git {action.value} succeeded[/green]")
        for line in summary:
            console.print(f"[dim]{escape(line)}[/dim]", highlight=False)

    for option in reversed(_ACTION_OPTIONS.get(action, [])):
        command = option(command)

    return click.command(name=action.value, help=_ACTION_HELP[action])(command)


for _action in GitAction:
    cli.add_command(_git_command(_action))


@cli.command()
@click.pass_obj
def branches(context: HelperContext):
    """List local branches, marking the current one."""
    repository = GitRepository.open(context.working_directory)
    if repository.path is None:
        _fail("No workspace folder open")

    current = repository.current_branch()
    for name in repository.branches():
        marker = "*" if name == current else " "
        console.print(f"{marker} {name}", markup=False, highlight=False)


# =============================================================================
# Session commands
# =============================================================================


@cli.command()
@click.pass_obj
def stats(context: HelperContext):
    """Show repository and account statistics."""
    result = _run_session(context, lambda session: session.refresh_stats(), quiet=True)
    console.print(stats_table(result))


@cli.command()
@click.pass_obj
def login(context: HelperContext):
    """
    Link a GitHub account using the device flow.

    Prints a code to enter on GitHub, then waits until the login is
    authorized, denied or expired.
    """
    if not _run_session(context, lambda session: session.login_with_device_flow()):
        sys.exit(1)


@cli.command()
@click.pass_obj
def logout(context: HelperContext):
    """Forget the stored GitHub token."""
    _run_session(context, lambda session: session.logout())


@cli.command()
@click.argument("query", nargs=-1, required=True)
@click.pass_obj
def chat(context: HelperContext, query: tuple[str, ...]):
    """
    Ask the Git assistant a question.

    Examples:

        git-helper chat how do I undo my last commit
    """
    text = " ".join(query)
    if not text.strip():
        _fail("Query is empty")
    if _run_session(context, lambda session: session.submit_chat_query(text)) is None:
        sys.exit(1)


@cli.command("set-api-key")
@click.option("--api-key", prompt=True, hide_input=True, help="Chat API key")
@click.pass_obj
def set_api_key(context: HelperContext, api_key: str):
    """Store the chat API key."""
    _store_secret(context, API_KEY, api_key)
    console.print("[green]API key saved.[/green]")


@cli.command("set-token")
@click.option("--token", prompt="GitHub token", hide_input=True, help="GitHub access token")
@click.pass_obj
def set_token(context: HelperContext, token: str):
    """Store a GitHub personal access token (manual alternative to login)."""
    _store_secret(context, GITHUB_TOKEN, token)
    console.print("[green]GitHub token saved.[/green]")


def _store_secret(context: HelperContext, key: str, value: str) -> None:
    if not value.strip():
        _fail("Value must not be empty")
    try:
        asyncio.run(context.secrets.set(key, value.strip()))
    except SecretStoreError as e:
        _fail(e.message)


# =============================================================================
# Settings
# =============================================================================


@cli.group()
def settings():
    """Show or change chat and GitHub settings."""
    pass


@settings.command("show")
@click.pass_obj
def settings_show(context: HelperContext):
    """Show current settings (secrets are never shown)."""
    table = Table(show_header=False, box=None)
    table.add_column(style="bold cyan")
    table.add_column()
    for key, value in context.settings.to_dict().items():
        if isinstance(value, list):
            value = " ".join(value)
        table.add_row(key, str(value))
    table.add_row("settings file", str(context.settings_path))
    console.print(table)


@settings.command("set")
@click.option("--provider", "-p", default=None, help="Chat provider label")
@click.option("--base-url", "-u", default=None, help="OpenAI-compatible API base URL")
@click.option("--model", "-m", "model_name", default=None, help="Model name")
@click.option("--client-id", "github_client_id", default=None, help="GitHub OAuth app client ID")
@click.pass_obj
def settings_set(context: HelperContext, **changes: Optional[str]):
    """Update settings and save them."""
    if not any(changes.values()):
        _fail("Nothing to change")
    try:
        context.save_settings(context.settings.updated(**changes))
    except OSError as e:
        _fail(f"Failed to save settings: {e}")
    console.print(f"[green]Settings saved to {context.settings_path}[/green]")


if __name__ == "__main__":
    cli()
