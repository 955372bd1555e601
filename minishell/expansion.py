"""Expansion of ``$NAME`` and ``$?`` references in command text."""

from __future__ import annotations

from collections.abc import Iterable

from .textutils import is_name_char


def _at(text: str, index: int) -> str:
    """Return the character at ``index``, or '' when it lies outside ``text``."""
    return text[index] if 0 <= index < len(text) else ""


def _is_digit(ch: str) -> bool:
    return "0" <= ch <= "9" and len(ch) == 1


def lookup_variable(name: str, env: Iterable[str]) -> str | None:
    """Return the value of ``name`` in ``env`` entries, or None if it is not set.

    The bare references ``$`` and ``$ `` stand for themselves.
    """
    if name in ("$", "$ "):
        return name
    prefix = name + "="
    for entry in env:
        if entry.startswith(prefix):
            return entry[len(prefix):]
    return None


def extract_var_name(command: str, index: int) -> tuple[str, int]:
    """Read the variable name starting at ``index``; return it and the next index.

    A name starting with a digit yields '' without advancing. When no name
    character follows the ``$``, one character is consumed and ``$`` plus
    that character (or ``$`` alone at the end of the text) is returned.
    """
    start = index
    end = len(command)
    while index < end and (is_name_char(command[index]) or command[index] == "?"):
        if _is_digit(command[start]):
            return "", index
        index += 1
    if index == start:
        index += 1
        if _at(command, start + 1):
            return "$" + command[start], index
        return "$", index
    return command[start:index], index


def _substitute(result: str, name: str, env: list[str], status: int) -> str:
    if name.startswith("?"):
        value: str | None = f"{status}{name[1:]}"
    else:
        value = lookup_variable(name, env)
    return result + (value or "")


def _skip_to_dollar(command: str, index: int) -> int:
    """Advance to the next ``$`` that is not hidden by single quotes."""
    end = len(command)
    in_double = False
    while index < end and command[index] != "$":
        if command[index] == '"':
            in_double = True
        if command[index] == "'" and not in_double:
            index += 1
            while index < end and command[index] != "'":
                index += 1
        index += 1
        if index < end and command[index] == '"' and in_double:
            index += 1
            while index < end and command[index] != '"':
                index += 1
    return min(index, end)


def _append_literal(command: str, index: int, result: str) -> tuple[str, int]:
    start = index
    ch = command[index]
    if (_is_digit(ch) or ch == "@") and index > 0 and command[index - 1] == "$":
        start += 1
    index = _skip_to_dollar(command, index)
    if index < len(command) and command[index] == "$" and index + 1 == len(command):
        index += 1
    return result + command[start:index], index


def expand_variables(command: str, env: Iterable[str], status: int = 0) -> str:
    """Replace variable references in ``command`` using ``env`` entries.

    ``$?`` expands to ``status``; unset variables expand to nothing; text in
    single quotes is left as it is.
    """
    entries = list(env)
    result = ""
    index = 0
    end = len(command)
    while index < end:
        if command[index] == "$" and index > 0 and command[index - 1] != "\\":
            name, index = extract_var_name(command, index + 1)
            result = _substitute(result, name, entries, status)
        elif command[0] == "$":
            name, index = extract_var_name(command, index + 1)
            result = _substitute(result, name, entries, status)
        else:
            before = index
            result, index = _append_literal(command, index, result)
            if index == before:
                # An escaped '$' inside the text is kept as it is.
                result += command[index]
                index += 1
    return result