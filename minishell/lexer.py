"""Splitting command lines into pipeline segments and words."""

from __future__ import annotations

_QUOTES = ('"', "'")
_REDIRECT_CHARS = ("<", ">")
_DOUBLE_REDIRECTS = (">>", "<<")


def _at(text: str, index: int) -> str:
    """Return the character at ``index``, or '' when it lies outside ``text``."""
    return text[index] if 0 <= index < len(text) else ""


def _skip_quote(text: str, index: int, quote: str) -> int:
    """Return the index just past the quote that closes the one at ``index``."""
    index += 1
    end = len(text)
    while index < end and (text[index] != quote or text[index - 1] == "\\"):
        index += 1
    if index < end and text[index] == quote:
        index += 1
    return index


def _skip_word(text: str, index: int, sep: str) -> int:
    """Return the index where the unquoted word starting at ``index`` ends."""
    end = len(text)
    while index < end and text[index] != sep and text[index] not in _REDIRECT_CHARS:
        if text[index] in _QUOTES:
            index = _skip_quote(text, index, text[index])
        else:
            index += 1
    return index


def _skip_segment(text: str, index: int, sep: str) -> int:
    """Return the index of the next separator that is not inside quotes."""
    end = len(text)
    while index < end and text[index] != sep:
        if text[index] in _QUOTES:
            index = _skip_quote(text, index, text[index])
        else:
            index += 1
    return index


def _copy_unquoted(text: str, start: int, end: int) -> str:
    """Copy ``text[start:end]`` dropping quotes and escaping backslashes."""
    out: list[str] = []
    index = start
    while index < end:
        ch = text[index]
        if ch in _QUOTES and (index == start or text[index - 1] != "\\"):
            quote = ch
            index += 1
            while index < end and (text[index] != quote or text[index - 1] == "\\"):
                if text[index] == "\\" and _at(text, index + 1) in (quote, "\\"):
                    index += 1
                out.append(_at(text, index))
                index += 1
            if index < end and text[index] == quote:
                index += 1
        else:
            if ch == "\\" and _at(text, index + 1) in ('"', "'", "\\"):
                index += 1
            out.append(_at(text, index))
            index += 1
    return "".join(out)


def unquote(text: str) -> str:
    """Remove quoting from ``text`` and resolve backslash escapes of quotes."""
    return _copy_unquoted(text, 0, len(text))


def split_words(text: str, sep: str = " ") -> list[str]:
    """Split ``text`` into unquoted words, with redirection operators as words.

    A text made only of separators (or empty) comes back unchanged as the
    single element of the list.
    """
    if all(ch == sep for ch in text):
        return [text]
    words: list[str] = []
    index = 0
    end = len(text)
    while index < end:
        while index < end and text[index] == sep:
            index += 1
        if index >= end:
            break
        start = index
        if text[index] in _REDIRECT_CHARS:
            index += 2 if text[index:index + 2] in _DOUBLE_REDIRECTS else 1
        else:
            index = _skip_word(text, index, sep)
        words.append(_copy_unquoted(text, start, index))
    return words


def split_commands(text: str, sep: str = "|") -> list[str]:
    """Split a line at separators outside quotes, keeping each segment's raw text."""
    segments: list[str] = []
    index = 0
    end = len(text)
    while index < end:
        while index < end and text[index] == sep:
            index += 1
        if index >= end:
            break
        start = index
        while index < end and text[index] != sep and text[index] in _QUOTES:
            index += 1
        if index < end and text[index] in _QUOTES:
            index = _skip_quote(text, index, text[index])
        else:
            index = _skip_segment(text, index, sep)
        segments.append(text[start:index])
    return segments