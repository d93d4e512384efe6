"""
Command runner.

Executes a single external command as an argument vector inside a working
directory. Built on GitPython's process wrapper so that no shell is ever
involved: branch names, URLs and commit messages travel as plain argv
elements.
"""

import logging
from pathlib import Path
from typing import Sequence, Union

from git.cmd import Git
from git.exc import GitCommandNotFound

from git_helper.git.auth import mask_credentials
from git_helper.git.exceptions import ExecutionError

logger = logging.getLogger(__name__)


def format_command(command: Sequence[str]) -> str:
    """Render an argument vector for messages and logs, masking credentials."""
    return " ".join(mask_credentials(arg) for arg in command)


class CommandRunner:
    """
    Run external commands and return their trimmed standard output.

    Example:
        ```python
        runner = CommandRunner()
        branch = runner.run(["git", "rev-parse", "--abbrev-ref", "HEAD"], "/path/to/repo")
        ```
    """

    def run(self, command: Sequence[str], working_directory: Union[str, Path]) -> str:
        """
        Execute a command with the given directory as its cwd.

        Args:
            command: Argument vector, program first
            working_directory: Existing directory to run in

        Returns:
            Standard output with surrounding whitespace removed

        Raises:
            ExecutionError: If the command exits non-zero or cannot be started
        """
        argv = list(command)
        display = format_command(argv)
        cwd = Path(working_directory)

        if not cwd.is_dir():
            raise ExecutionError(
                f"Working directory does not exist: {cwd}",
                command=display,
                repo_path=str(cwd),
            )

        logger.debug(f"Running '{display}' in {cwd}")

        try:
            status, stdout, stderr = Git(str(cwd)).execute(
                argv,
                with_extended_output=True,
                with_exceptions=False,
            )
        except (GitCommandNotFound, OSError) as e:
            raise ExecutionError(
                f"Failed to start '{argv[0]}': {e}",
                command=display,
                repo_path=str(cwd),
            )

        if status != 0:
            stderr = (stderr or "").strip()
            raise ExecutionError(
                stderr or f"Command exited with status {status}",
                command=display,
                return_code=status,
                stderr=stderr,
                repo_path=str(cwd),
            )

        return (stdout or "").strip()
