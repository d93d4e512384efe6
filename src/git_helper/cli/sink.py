"""
Terminal rendering of session notifications.
"""

from rich.console import Console
from rich.markdown import Markdown
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from git_helper.messages import (
    ChatMessage,
    ChatRole,
    Notice,
    NoticeLevel,
    Notification,
    PopulateSettings,
    RepositoryStats,
    ShowDeviceCode,
    ShowSetup,
)


def stats_table(stats: RepositoryStats) -> Table:
    """Two-column table of repository statistics."""
    table = Table(show_header=False, box=None)
    table.add_column(style="bold cyan")
    table.add_column()

    user = stats.user
    table.add_row("Repository", stats.repo_name)
    table.add_row("Path", stats.repo_path)
    table.add_row("Branch", stats.branch)
    table.add_row("Remote", stats.remote)
    table.add_row("Status", stats.status)
    table.add_row("User", f"{user.display_name or '-'} <{user.email or '-'}>")
    if user.login:
        table.add_row(
            "GitHub",
            f"{user.repository_count} repos, {user.followers} followers, "
            f"{user.contribution_count} contributions",
        )
    return table


class ConsoleSink:
    """Print notifications with rich; errors go to stderr."""

    def __init__(self, console: Console, err_console: Console):
        self.console = console
        self.err_console = err_console

    def send(self, notification: Notification) -> None:
        if isinstance(notification, Notice):
            if notification.level == NoticeLevel.ERROR:
                self.err_console.print(
                    f"[red]{escape(notification.message)}[/red]", highlight=False, soft_wrap=True
                )
            else:
                self.console.print(
                    f"[green]{escape(notification.message)}[/green]", highlight=False, soft_wrap=True
                )
        elif isinstance(notification, ShowDeviceCode):
            self.console.print(
                Panel(
                    f"Open [link={notification.verification_uri}]"
                    f"{notification.verification_uri}[/link] and enter the code\n\n"
                    f"[bold yellow]{notification.user_code}[/bold yellow]",
                    title="GitHub Login",
                )
            )
        elif isinstance(notification, ChatMessage):
            if notification.role == ChatRole.ASSISTANT:
                self.console.print(Markdown(notification.content))
            elif notification.role == ChatRole.SYSTEM:
                self.err_console.print(
                    f"[red]{escape(notification.content)}[/red]", highlight=False, soft_wrap=True
                )
        elif isinstance(notification, RepositoryStats):
            self.console.print(stats_table(notification))
        elif isinstance(notification, PopulateSettings):
            self.console.print(f"Provider: [green]{notification.provider}[/green]")
            self.console.print(f"Base URL: [green]{notification.base_url}[/green]")
            self.console.print(f"Model: [green]{notification.model_name}[/green]")
        elif isinstance(notification, ShowSetup):
            self.console.print(
                "[yellow]Setup incomplete: run 'git-helper set-api-key' and "
                "'git-helper login' (or 'set-token').[/yellow]",
                soft_wrap=True,
            )
