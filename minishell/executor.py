"""Running parsed pipelines: redirections, here-documents and programs."""

from __future__ import annotations

import contextlib
import io
import os
import subprocess
import sys
import threading
from collections.abc import Callable, Iterable, Sequence
from typing import Optional, TextIO, Union

from .builtins import ShellExit, is_builtin_name, run_builtin
from .environment import Environment
from .expansion import expand_variables
from .lexer import split_words
from .parser import Command, heredoc_count, is_heredoc, is_redirection
from .prompt import SignalMode, install_signals
from .textutils import only_spaces, report_error
from .validation import SYNTAX_ERROR_STATUS, ShellSyntaxError

Reader = Callable[[str], Optional[str]]
_Stage = Union[subprocess.Popen, int]


class ExecutionError(Exception):
    """A failure that ends one command with ``status`` after reporting ``message``."""

    def __init__(self, message: str, status: int, command: str | None = None) -> None:
        super().__init__(message.rstrip("\n"))
        self.message = message
        self.status = status
        self.command = command

    def report(self) -> None:
        """Write the message to stderr."""
        report_error(self.message, self.command)


def path_directories(env: Iterable[str]) -> list[str] | None:
    """Return the directories of the first ``PATH`` entry, or None if there is none."""
    for entry in env:
        if entry.startswith("PATH"):
            return split_words(entry[5:], ":")
    return None


def find_executable(command: str | None, env: Iterable[str]) -> str | None:
    """Locate ``command`` directly or through the ``PATH`` directories.

    A name starting with ``/`` or ``./`` that does not exist raises
    ExecutionError with status 127. Returns None when nothing is found.
    """
    if not command:
        return None
    if command.startswith("/") or command.startswith("./"):
        if os.path.exists(command):
            return command
        raise ExecutionError("No such file or directory\n", 127, command)
    directories = path_directories(env)
    if directories is None:
        return None
    for directory in directories:
        candidate = f"{directory}/{command}"
        if os.path.exists(candidate):
            return candidate
    return None


def count_redirect_tokens(tokens: Sequence[str] | None) -> int:
    """Count the operators that need a file target (all but ``<<``)."""
    return sum(1 for token in tokens or () if not is_heredoc(token))


def count_files(files: Sequence[str] | None) -> int:
    """Count the file targets that are present (not the missing-target marker)."""
    return sum(1 for name in files or () if name != "\n")


def check_files(commands: Iterable[Command]) -> None:
    """Raise ShellSyntaxError if a redirection target is itself an operator."""
    for command in commands:
        if any(is_redirection(name) or is_heredoc(name) for name in command.files):
            raise ShellSyntaxError()


def read_heredoc(limiter: str | None, env: Iterable[str], reader: Reader) -> str:
    """Read lines until ``limiter`` or end of input, expanding variables in each.

    Raises ExecutionError with status 1 when the delimiter is missing.
    """
    if limiter is None:
        raise ExecutionError("syntax error\n", 1)
    entries = list(env)
    lines: list[str] = []
    while True:
        line = reader("> ")
        if line is None or line == limiter:
            break
        lines.append(expand_variables(line, entries) + "\n")
    return "".join(lines)


def collect_heredocs(
    commands: Sequence[Command], env: Iterable[str], reader: Reader
) -> list[list[str]]:
    """Read every here-document of the pipeline, in order, before anything runs.

    An interrupt while reading raises ExecutionError with status 1.
    """
    entries = list(env)
    documents: list[list[str]] = []
    for command in commands:
        texts: list[str] = []
        if command.has_heredoc:
            for pos in range(heredoc_count(command.tokens)):
                limiter = command.limiters[pos] if pos < len(command.limiters) else None
                try:
                    texts.append(read_heredoc(limiter, entries, reader))
                except KeyboardInterrupt:
                    sys.stdout.write("\n")
                    sys.stdout.flush()
                    raise ExecutionError("", 1) from None
        documents.append(texts)
    return documents


def _default_reader(prompt: str) -> str | None:
    try:
        return input(prompt)
    except EOFError:
        return None


def _default_signals() -> None:
    install_signals(SignalMode.DEFAULT)


def _write_in_background(fd: int, data: bytes) -> threading.Thread:
    def pump() -> None:
        try:
            view = memoryview(data)
            while view:
                view = view[os.write(fd, view):]
        except OSError:
            pass
        finally:
            os.close(fd)

    thread = threading.Thread(target=pump, daemon=True)
    thread.start()
    return thread


def _open_redirections(
    command: Command, documents: Sequence[str], stack: contextlib.ExitStack
) -> tuple[int | bytes | None, TextIO | None]:
    """Open the command's redirections in order; return its stdin and stdout."""
    if not command.tokens:
        return None, None
    if count_redirect_tokens(command.tokens) != count_files(command.files):
        raise ExecutionError("Error with the file\n", 1)
    stdin: int | bytes | None = None
    stdout: TextIO | None = None
    files = iter(command.files)
    texts = iter(documents)
    for token in command.tokens:
        if is_heredoc(token):
            stdin = next(texts, "").encode()
            continue
        target = next(files)
        try:
            if token == "<":
                stdin = stack.enter_context(open(target, "rb")).fileno()
            elif token == ">":
                stdout = stack.enter_context(open(target, "w", encoding="utf-8"))
            else:
                stdout = stack.enter_context(open(target, "a", encoding="utf-8"))
        except OSError as exc:
            raise ExecutionError(f"open: {exc.strerror}\n", 1) from None
    return stdin, stdout


def _resolve(name: str, env: Sequence[str]) -> str:
    """Return the program to run for ``name`` or raise ExecutionError."""
    if name.endswith("/") or name.startswith("/"):
        try:
            is_dir = os.path.isdir(name) if os.stat(name) else False
        except OSError:
            raise ExecutionError("No such file or directory\n", 127, name) from None
        if is_dir:
            raise ExecutionError("is a directory\n", 126, name)
    path = find_executable(name, env)
    if path is None and os.path.exists(name):
        path = name
    if path is None:
        raise ExecutionError("Command not found\n", 127, name)
    return path


def _exit_status(stage: _Stage) -> int:
    if isinstance(stage, int):
        return stage
    code = stage.wait()
    return 128 - code if code < 0 else code


class _PipelineRun:
    """Starts the stages of one pipeline, connected by pipes."""

    def __init__(self, environment: Environment) -> None:
        self.environment = environment
        self.entries = environment.snapshot()
        self.child_env = environment.to_mapping()
        self.threads: list[threading.Thread] = []

    def _run_builtin(
        self, command: Command, stdout_fd: int | None, out_file: TextIO | None
    ) -> int:
        buffer = io.StringIO()
        cwd = os.getcwd()
        try:
            run_builtin(
                command.words, Environment(self.entries), command.status, buffer
            )
            status = 0
        except ShellExit as exc:
            status = exc.status
        finally:
            os.chdir(cwd)
        text = buffer.getvalue()
        if out_file is not None:
            out_file.write(text)
        elif stdout_fd is not None:
            self.threads.append(_write_in_background(os.dup(stdout_fd), text.encode()))
        else:
            sys.stdout.write(text)
            sys.stdout.flush()
        return status

    def launch(
        self,
        command: Command,
        documents: Sequence[str],
        stdin_fd: int | None,
        stdout_fd: int | None,
    ) -> _Stage:
        name = command.name
        if name is not None and only_spaces(name):
            return command.status
        with contextlib.ExitStack() as stack:
            try:
                redirected_in, redirected_out = _open_redirections(
                    command, documents, stack
                )
            except ExecutionError as exc:
                exc.report()
                return exc.status
            if is_builtin_name(name):
                return self._run_builtin(command, stdout_fd, redirected_out)
            if name is None:
                return 0
            try:
                path = _resolve(name, self.entries)
            except ExecutionError as exc:
                exc.report()
                return exc.status
            stdin = stdin_fd if redirected_in is None else redirected_in
            if isinstance(stdin, bytes):
                read_fd, write_fd = os.pipe()
                self.threads.append(_write_in_background(write_fd, stdin))
                stack.callback(os.close, read_fd)
                stdin = read_fd
            stdout = stdout_fd if redirected_out is None else redirected_out.fileno()
            sys.stdout.flush()
            try:
                return subprocess.Popen(
                    command.words,
                    executable=path,
                    env=self.child_env,
                    stdin=stdin,
                    stdout=stdout,
                    preexec_fn=_default_signals if os.name == "posix" else None,
                )
            except OSError as exc:
                report_error(f"execve: {exc.strerror}\n")
                return 127

    def run(self, commands: Sequence[Command], documents: Sequence[list[str]]) -> int:
        stages: list[_Stage] = []
        previous: int | None = None
        for pos, command in enumerate(commands):
            last = pos == len(commands) - 1
            read_fd, write_fd = (None, None) if last else os.pipe()
            try:
                stages.append(self.launch(command, documents[pos], previous, write_fd))
            finally:
                if previous is not None:
                    os.close(previous)
                if write_fd is not None:
                    os.close(write_fd)
            previous = read_fd
        status = 0
        for stage in stages:
            status = _exit_status(stage)
        for thread in self.threads:
            thread.join()
        return status


def _run_single_builtin(
    command: Command, documents: Sequence[str], environment: Environment
) -> int:
    with contextlib.ExitStack() as stack:
        try:
            _, stdout = _open_redirections(command, documents, stack)
        except ExecutionError as exc:
            exc.report()
            return exc.status
        status = run_builtin(command.words, environment, command.status, stdout)
        return status if status is not None else 0


def execute(
    commands: Sequence[Command],
    environment: Environment,
    reader: Reader | None = None,
) -> int:
    """Run a parsed pipeline and return its exit status.

    A lone builtin runs in the shell itself and may change ``environment``
    or raise ShellExit; in a longer pipeline every stage is isolated.
    """
    commands = list(commands)
    if not commands:
        return 0
    bad_target = False
    try:
        check_files(commands)
    except ShellSyntaxError as exc:
        report_error(f"{exc}\n")
        bad_target = True
    try:
        documents = collect_heredocs(
            commands, environment.snapshot(), reader or _default_reader
        )
    except ExecutionError as exc:
        exc.report()
        return exc.status
    if bad_target:
        return SYNTAX_ERROR_STATUS
    if len(commands) == 1 and is_builtin_name(commands[0].name):
        return _run_single_builtin(commands[0], documents[0], environment)
    return _PipelineRun(environment).run(commands, documents)