"""Commands the shell runs itself instead of starting a program."""

from __future__ import annotations

import os
import re
import sys
from collections.abc import Sequence
from typing import TextIO

from .environment import Environment
from .textutils import is_name_char, report_error

BUILTIN_NAMES = frozenset({"echo", "pwd", "env", "cd", "export", "unset", "exit"})

_N_OPTION = re.compile(r"-n+")
_LONG_MAX = 2**63 - 1
_ULONG_WRAP = 2**64


class ShellExit(Exception):
    """Raised when the shell has been asked to terminate with ``status``."""

    def __init__(self, status: int) -> None:
        super().__init__(f"exit {status}")
        self.status = status


def _stream(out: TextIO | None) -> TextIO:
    return sys.stdout if out is None else out


def is_builtin_name(name: str | None) -> bool:
    """Return True if ``name`` names a command the shell runs itself."""
    return name in BUILTIN_NAMES


def check_var_name(arg: str | None, name: str, out: TextIO | None = None) -> bool:
    """Return True if ``arg`` starts with a valid identifier (up to any ``=``).

    An invalid identifier is reported on ``out`` on behalf of command ``name``.
    """
    if arg is None:
        return False
    ident = arg.partition("=")[0]
    invalid = arg[:1].isdigit() and arg[:1].isascii() or arg.startswith("=")
    if invalid or not all(is_name_char(ch) for ch in ident):
        _stream(out).write(f"minishell: {name}: `{arg}': not a valid identifier\n")
        return False
    return True


def is_numeric(text: str | None) -> bool:
    """Return True if ``text`` is an optional sign followed only by digits."""
    if text is None:
        return False
    body = text[1:] if text[:1] in ("-", "+") else text
    return all("0" <= ch <= "9" for ch in body)


def parse_exit_code(text: str) -> int:
    """Turn a numeric ``exit`` argument into the process exit status (0-255).

    Values past the 64-bit signed range saturate: 255 when positive, 0 when
    negative.
    """
    index = 0
    while index < len(text) and (text[index] == " " or "\t" <= text[index] <= "\r"):
        index += 1
    sign = 1
    if index < len(text) and text[index] in ("-", "+"):
        if text[index] == "-":
            sign = -1
        index += 1
    number = 0
    for ch in text[index:]:
        if not "0" <= ch <= "9":
            break
        number = (number * 10 + ord(ch) - ord("0")) % _ULONG_WRAP
        if number > _LONG_MAX:
            return 255 if sign == 1 else 0
    return (number * sign) % 256


def echo(args: Sequence[str], out: TextIO | None = None) -> int:
    """Print the arguments separated by spaces; leading ``-n`` options drop the newline."""
    rest = list(args[1:])
    newline = True
    while rest and _N_OPTION.fullmatch(rest[0]):
        newline = False
        rest.pop(0)
    _stream(out).write(" ".join(rest) + ("\n" if newline else ""))
    return 0


def pwd(env: Environment | None = None, out: TextIO | None = None) -> int:
    """Print the current working directory."""
    try:
        cwd = os.getcwd()
    except OSError:
        report_error("pwd: error retrieving current directory: getcwd: failed \n")
        return 1
    _stream(out).write(cwd + "\n")
    return 0


def env_command(env: Environment, out: TextIO | None = None) -> int:
    """Print every entry that holds a value; fail on an empty environment."""
    if len(env) == 0:
        return 1
    stream = _stream(out)
    for entry in env:
        if "=" in entry:
            stream.write(entry + "\n")
    return 0


def _record_oldpwd(env: Environment) -> None:
    try:
        cwd = os.getcwd()
    except OSError:
        return
    entry = f"OLDPWD={cwd}"
    if not env.replace("OLDPWD", entry):
        env.append(entry)


def _record_pwd(env: Environment) -> None:
    try:
        cwd = os.getcwd()
    except OSError:
        return
    env.replace("PWD", f"PWD={cwd}")


def cd(words: Sequence[str], env: Environment, out: TextIO | None = None) -> int:
    """Change directory to the argument, or to HOME when it is absent or starts with ``~``."""
    stream = _stream(out)
    _record_oldpwd(env)
    target = words[1] if len(words) > 1 else None
    if target is None or target.startswith("~"):
        home = env.find("HOME")
        if home is None:
            stream.write("no home variable is set\n")
            return 1
        path = home[5:]
    else:
        path = target
    try:
        os.chdir(path)
    except OSError:
        stream.write(f"cd: {path}: NO such file or directory\n")
        return 1
    _record_pwd(env)
    return 0


def _print_declarations(env: Environment, stream: TextIO) -> None:
    for entry in env:
        name, sep, value = entry.partition("=")
        if sep:
            stream.write(f'declare -x {name}="{value}"\n')
        else:
            stream.write(f"declare -x {name}\n")


def export(args: Sequence[str], env: Environment, out: TextIO | None = None) -> int:
    """Set or declare variables; with no arguments, list them all."""
    stream = _stream(out)
    if len(args) < 2:
        _print_declarations(env, stream)
        return 0
    for arg in args[1:]:
        if not check_var_name(arg, "export", stream):
            return 1
        name, sep, _ = arg.partition("=")
        if sep:
            if not env.replace(name, arg):
                env.append(arg)
        elif env.find(arg) is None:
            env.append(arg)
    return 0


def unset(words: Sequence[str], env: Environment, out: TextIO | None = None) -> int:
    """Remove every entry whose name each argument begins with."""
    stream = _stream(out)
    if len(env) == 0:
        stream.write("Error\n")
        return 1
    first = words[1] if len(words) > 1 else None
    if not check_var_name(first, "unset", stream):
        return 1
    for word in words[1:]:
        env.remove_where(lambda entry, word=word: word.startswith(entry.partition("=")[0]))
    return 0


def exit_command(
    args: Sequence[str], last_status: int = 0, out: TextIO | None = None
) -> int:
    """Raise ShellExit with the requested status; too many arguments return 1."""
    if len(args) < 2:
        raise ShellExit(last_status)
    code = args[1]
    if not is_numeric(code):
        _stream(out).write("Error: Non-numeric argument\n")
        raise ShellExit(255)
    if len(args) == 2:
        raise ShellExit(parse_exit_code(code))
    _stream(out).write("Error: Too many arguments\n")
    return 1


def run_builtin(
    words: Sequence[str],
    env: Environment,
    last_status: int = 0,
    out: TextIO | None = None,
) -> int | None:
    """Run ``words`` as a builtin and return its status, or None if it is not one."""
    if not words:
        return None
    name = words[0]
    if name == "echo":
        return echo(words, out)
    if name == "pwd":
        return pwd(env, out)
    if name == "env":
        return env_command(env, out)
    if name == "cd":
        return cd(words, env, out)
    if name == "export":
        return export(words, env, out)
    if name == "unset":
        return unset(words, env, out)
    if name == "exit":
        return exit_command(words, last_status, out)
    return None