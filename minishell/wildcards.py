"""Expansion of ``*`` patterns against the names in a directory."""

from __future__ import annotations

import enum
import os

from .textutils import report_error

_QUOTES = ('"', "'")


class MatchPosition(enum.IntEnum):
    """Where a literal pattern must sit inside a directory entry's name."""

    SUFFIX = 1
    PREFIX = 2
    CONTAINS = 3


def contains_wildcard(text: str | None) -> bool:
    """Return True if ``text`` holds a ``*``."""
    return bool(text) and "*" in text


def is_quoted(token: str | None) -> bool:
    """Return True if a quote in ``token`` follows a character other than a backslash."""
    if not token:
        return False
    return any(
        prev != "\\" and nxt in _QUOTES for prev, nxt in zip(token, token[1:])
    )


def _token_end(text: str, index: int, delims: str) -> tuple[int, int | None]:
    """Return where the token at ``index`` stops and where scanning resumes."""
    end = len(text)
    while index < end:
        if text[index] in _QUOTES:
            index += 1
            while index < end and text[index] not in _QUOTES:
                index += 1
            if index >= end:
                return end, None
        if text[index] in delims:
            return index, index + 1
        index += 1
    return end, None


def tokenize(text: str, delims: str) -> list[str]:
    """Split ``text`` at any character of ``delims``, keeping quoted runs intact.

    Runs of delimiters produce no empty tokens; an unclosed quote makes the
    rest of the text one token.
    """
    tokens: list[str] = []
    end = len(text)
    pos: int | None = 0
    while pos is not None:
        while pos < end and text[pos] in delims:
            pos += 1
        if pos >= end:
            break
        start = pos
        stop, pos = _token_end(text, pos, delims)
        tokens.append(text[start:stop])
    return tokens


def has_pattern(name: str, prefix: str, suffix: str) -> bool:
    """Return True if ``name`` starts with ``prefix`` and ends with ``suffix`` without overlap."""
    return (
        len(name) >= len(prefix) + len(suffix)
        and name.startswith(prefix)
        and name.endswith(suffix)
    )


def _list_directory(directory: str | os.PathLike[str]) -> list[str]:
    return sorted(os.listdir(directory))


def _matches(position: MatchPosition, pattern: str, name: str) -> bool:
    if position is MatchPosition.SUFFIX:
        return name.endswith(pattern)
    if position is MatchPosition.PREFIX:
        return name.startswith(pattern)
    return pattern in name


def match_names(
    pattern: str,
    position: MatchPosition,
    directory: str | os.PathLike[str] = ".",
) -> list[str]:
    """Return the sorted names in ``directory`` that hold ``pattern`` at ``position``.

    The entries ``.`` and ``..`` are only considered when the pattern starts
    with a dot. Raises OSError if the directory cannot be read.
    """
    position = MatchPosition(position)
    names = _list_directory(directory)
    if pattern.startswith("."):
        names = [".", ".."] + names
    return [name for name in names if _matches(position, pattern, name)]


def _visible_names(directory: str | os.PathLike[str]) -> list[str]:
    return [name for name in _list_directory(directory) if not name.startswith(".")]


def _expand_middle(token: str, directory: str | os.PathLike[str]) -> str:
    body = token[1:] if token.startswith("*") else token
    parts = tokenize(body, "*")
    if len(parts) < 2:
        return token
    prefix, suffix = parts[0], parts[1]
    matched = [
        name
        for name in _list_directory(directory)
        if has_pattern(name, prefix, suffix)
    ]
    return " ".join(matched) or token


def expand_wildcards(token: str, directory: str | os.PathLike[str] = ".") -> str:
    """Replace a ``*`` pattern by the space-separated names it matches.

    A token without ``*``, or one that matches nothing, is returned unchanged.
    Raises OSError if the directory cannot be read.
    """
    if not contains_wildcard(token):
        return token
    if token == "*":
        names = _visible_names(directory)
    elif token.startswith("*") and token.endswith("*"):
        pattern = token[1:token.index("*", 1)]
        names = match_names(pattern, MatchPosition.CONTAINS, directory)
    elif token.startswith("*") and not contains_wildcard(token[1:]):
        names = match_names(token[1:], MatchPosition.SUFFIX, directory)
    elif token.endswith("*"):
        names = match_names(token[:-1], MatchPosition.PREFIX, directory)
    else:
        return _expand_middle(token, directory)
    return " ".join(names) or token


def expand_command(command: str, directory: str | os.PathLike[str] = ".") -> str:
    """Expand every unquoted wildcard word of ``command``.

    Words are re-joined with single spaces. A command made only of spaces is
    returned unchanged. A word whose directory cannot be read is dropped after
    an error is reported.
    """
    if all(ch == " " for ch in command):
        return command
    parts: list[str] = []
    for token in tokenize(command, " "):
        if contains_wildcard(token) and not is_quoted(token):
            try:
                parts.append(expand_wildcards(token, directory))
            except OSError as exc:
                report_error(f"opendir: {exc.strerror}\n")
                parts.append("")
        else:
            parts.append(token)
    return " ".join(parts)