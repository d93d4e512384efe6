"""
CLI module for git-helper.

Provides the command-line interface for running Git actions, logging in
to GitHub and asking the Git assistant.
"""

from git_helper.cli.main import cli

__all__ = ["cli"]
