"""Syntax checks applied to a line before it is parsed."""

from __future__ import annotations

from collections.abc import Sequence

from .textutils import only_spaces

SYNTAX_ERROR_STATUS = 258


class ShellSyntaxError(Exception):
    """Raised when a command line is syntactically invalid."""

    def __init__(self, message: str = "minishell: syntax error") -> None:
        super().__init__(message)
        self.status = SYNTAX_ERROR_STATUS


def count_unescaped(commands: Sequence[str], quote: str) -> int:
    """Count occurrences of ``quote`` not preceded by a backslash in all commands."""
    return sum(
        1
        for command in commands
        for pos, ch in enumerate(command)
        if ch == quote and (pos == 0 or command[pos - 1] != "\\")
    )


def check_empty(commands: Sequence[str] | None) -> bool:
    """Return True if a pipeline holds an empty or blank segment."""
    if commands is None:
        return True
    if len(commands) < 2:
        return False
    return any(not command or only_spaces(command) for command in commands)


def validate_commands(commands: Sequence[str], line: str) -> None:
    """Raise ShellSyntaxError if the line or its pipeline segments are malformed."""
    if line.startswith("|") or line.endswith("|"):
        raise ShellSyntaxError()
    if count_unescaped(commands, '"') % 2 or count_unescaped(commands, "'") % 2:
        raise ShellSyntaxError()
    if check_empty(commands):
        raise ShellSyntaxError()