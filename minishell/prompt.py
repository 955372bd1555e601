"""Prompt construction, line reading and signal dispositions."""

from __future__ import annotations

import enum
import signal
from collections.abc import Iterable


class SignalMode(enum.IntEnum):
    """How the shell reacts to interrupt and quit signals."""

    INTERACTIVE = 0
    IGNORE = 1
    HEREDOC = 2
    DEFAULT = 3


def install_signals(mode: SignalMode) -> None:
    """Set the SIGINT and SIGQUIT handlers for ``mode``.

    In the interactive and here-document modes an interrupt raises
    KeyboardInterrupt, which the reader of the line handles; SIGQUIT is
    ignored in every mode but DEFAULT, which restores the system defaults.
    """
    mode = SignalMode(mode)
    quit_signal = getattr(signal, "SIGQUIT", None)
    if mode is SignalMode.DEFAULT:
        signal.signal(signal.SIGINT, signal.SIG_DFL)
        if quit_signal is not None:
            signal.signal(quit_signal, signal.SIG_DFL)
        return
    if mode is SignalMode.IGNORE:
        signal.signal(signal.SIGINT, signal.SIG_IGN)
    else:
        signal.signal(signal.SIGINT, signal.default_int_handler)
    if quit_signal is not None:
        signal.signal(quit_signal, signal.SIG_IGN)


def make_prompt(env: Iterable[str]) -> str:
    """Return ``"<user> $ "`` from the first ``USER=`` entry, else ``"$ "``."""
    for entry in env:
        if entry.startswith("USER="):
            return entry[len("USER="):] + " $ "
    return "$ "


def read_input(env: Iterable[str]) -> str | None:
    """Read one line with the prompt built from ``env``; None at end of input.

    A KeyboardInterrupt raised while waiting is left to the caller.
    """
    try:
        import readline  # noqa: F401  (enables line editing and history)
    except ImportError:
        pass
    try:
        return input(make_prompt(env))
    except EOFError:
        return None