"""Turning pipeline segments into structured commands."""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field

from .expansion import expand_variables
from .lexer import split_words
from .wildcards import expand_command

_REDIRECTIONS = frozenset({"<", ">", ">>"})
_HEREDOC = "<<"
MISSING_FILE = "\n"


def is_redirection(item: str | None) -> bool:
    """Return True if ``item`` is one of the file redirections ``<``, ``>`` or ``>>``."""
    return item in _REDIRECTIONS


def is_heredoc(item: str | None) -> bool:
    """Return True if ``item`` is the here-document operator ``<<``."""
    return item == _HEREDOC


def heredoc_count(items: Iterable[str] | None) -> int:
    """Count the ``<<`` operators in ``items``."""
    return sum(1 for item in items or () if is_heredoc(item))


def token_count(items: Iterable[str] | None) -> int:
    """Count the redirection and here-document operators in ``items``."""
    return sum(1 for item in items or () if is_redirection(item) or is_heredoc(item))


def word_count(items: Iterable[str] | None) -> int:
    """Count the items that are not redirection or here-document operators."""
    return sum(
        1 for item in items or () if not (is_redirection(item) or is_heredoc(item))
    )


@dataclass
class Command:
    """One segment of a pipeline, split into arguments and redirections.

    ``files[i]`` is the target of the i-th file redirection in ``tokens``
    (``"\\n"`` when the operator had no target); ``limiters`` hold the
    unexpanded delimiters of the here-documents, in order.
    """

    raw: str
    unexpanded: list[str]
    expanded: list[str]
    words: list[str] = field(default_factory=list)
    tokens: list[str] = field(default_factory=list)
    files: list[str] = field(default_factory=list)
    limiters: list[str] = field(default_factory=list)
    status: int = 0

    @property
    def name(self) -> str | None:
        """The command name, or None when the segment holds only redirections."""
        return self.words[0] if self.words else None

    @property
    def has_heredoc(self) -> bool:
        """Whether the command reads a here-document."""
        return any(is_heredoc(token) for token in self.tokens)


def _classify(command: Command) -> None:
    items = command.expanded
    raw = command.unexpanded
    index = 0
    while index < len(items):
        item = items[index]
        if is_redirection(item):
            command.tokens.append(item)
            index += 1
            if index < len(items):
                command.files.append(items[index])
                index += 1
            else:
                command.files.append(MISSING_FILE)
        elif is_heredoc(item):
            command.tokens.append(item)
            index += 1
            if index < len(raw):
                command.limiters.append(raw[index])
                index += 1
        else:
            command.words.append(item)
            index += 1
        if index >= len(raw):
            break


def parse_command(segment: str, env: Iterable[str], status: int = 0) -> Command:
    """Expand variables and wildcards in ``segment`` and sort its parts.

    Here-document delimiters are taken from the text before expansion.
    """
    entries = list(env)
    unexpanded = split_words(segment, " ")
    processed = expand_command(expand_variables(segment, entries, status))
    command = Command(
        raw=segment,
        unexpanded=unexpanded,
        expanded=split_words(processed, " "),
        status=status,
    )
    _classify(command)
    return command


def parse_pipeline(
    segments: Sequence[str], env: Iterable[str], status: int = 0
) -> list[Command]:
    """Parse every segment of a pipeline with the same environment and status."""
    entries = list(env)
    return [parse_command(segment, entries, status) for segment in segments]