"""Small text helpers shared across the shell."""

from __future__ import annotations

import sys

_WHITESPACE = frozenset(" \t\n\v\f\r")


def report_error(msg: str | None, cmd: str | None = None) -> None:
    """Write an error message to stderr, prefixed with the command name if given."""
    if msg is None:
        return
    prefix = f"minishell: {cmd}: " if cmd is not None else ""
    sys.stderr.write(prefix + msg)
    sys.stderr.flush()


def is_name_char(c: str) -> bool:
    """Return True if ``c`` may appear in a variable name (ASCII letter, digit or '_')."""
    return len(c) == 1 and (c == "_" or (c.isascii() and c.isalnum()))


def only_spaces(text: str | None) -> bool:
    """Return True if ``text`` is non-empty and consists only of whitespace."""
    if not text:
        return False
    return all(ch in _WHITESPACE for ch in text)