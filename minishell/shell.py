"""The interactive read-parse-run loop and the command-line entry point."""

from __future__ import annotations

import os
import sys
from collections.abc import Mapping, Sequence

from .builtins import ShellExit
from .environment import Environment
from .executor import execute
from .lexer import split_commands
from .parser import parse_pipeline
from .prompt import SignalMode, install_signals, read_input
from .textutils import report_error
from .validation import ShellSyntaxError, validate_commands


class Shell:
    """A shell session holding the environment and the last exit status."""

    def __init__(self, environ: Mapping[str, str] | None = None) -> None:
        source = os.environ if environ is None else environ
        self.environment = Environment.from_mapping(source)
        self.status = 0
        self.heredoc_reader = self._read_heredoc_line
        self._interactive = False

    def _read_heredoc_line(self, prompt: str) -> str | None:
        if self._interactive:
            install_signals(SignalMode.HEREDOC)
        try:
            return input(prompt)
        except EOFError:
            return None
        finally:
            if self._interactive:
                install_signals(SignalMode.IGNORE)

    def run_line(self, line: str) -> int:
        """Check, parse and run one command line; return the new exit status.

        ShellExit propagates when the line asks the shell to terminate.
        """
        commands = split_commands(line, "|")
        try:
            validate_commands(commands, line)
        except ShellSyntaxError as exc:
            report_error(f"{exc}\n")
            self.status = exc.status
            return self.status
        if not commands:
            return self.status
        pipeline = parse_pipeline(commands, self.environment.snapshot(), self.status)
        self.status = execute(pipeline, self.environment, self.heredoc_reader)
        return self.status

    def loop(self) -> int:
        """Prompt for and run lines until end of input or ``exit``; return the exit status."""
        self._interactive = True
        try:
            while True:
                install_signals(SignalMode.INTERACTIVE)
                try:
                    line = read_input(self.environment.snapshot())
                except KeyboardInterrupt:
                    sys.stdout.write("\n")
                    sys.stdout.flush()
                    self.status = 1
                    continue
                if line is None:
                    self.status = 0
                    return 0
                install_signals(SignalMode.IGNORE)
                try:
                    self.run_line(line)
                except ShellExit as exc:
                    return exc.status
        finally:
            self._interactive = False


def main(argv: Sequence[str] | None = None) -> int:
    """Start an interactive shell; arguments are refused."""
    args = sys.argv[1:] if argv is None else list(argv)
    if args:
        report_error("you must not enter an argument\n")
        return 1
    return Shell().loop()


if __name__ == "__main__":
    sys.exit(main())