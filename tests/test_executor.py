import os

import pytest

from minishell.builtins import ShellExit
from minishell.environment import Environment
from minishell.executor import (
    ExecutionError,
    check_files,
    collect_heredocs,
    count_files,
    count_redirect_tokens,
    execute,
    find_executable,
    path_directories,
    read_heredoc,
)
from minishell.parser import Command, parse_command, parse_pipeline
from minishell.validation import ShellSyntaxError


def _reader(lines):
    it = iter(lines)
    return lambda prompt: next(it, None)


def _interrupting(prompt):
    raise KeyboardInterrupt


@pytest.fixture
def env(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    return Environment([f"PATH={os.environ.get('PATH', '/usr/bin:/bin')}"])


def _run(line, env, reader=None):
    return execute(parse_pipeline(line.split("|"), env.snapshot()), env, reader)


def test_path_directories_reads_path_entry():
    assert path_directories(["HOME=/h", "PATH=/usr/bin:/bin"]) == ["/usr/bin", "/bin"]


def test_path_directories_without_path():
    assert path_directories(["HOME=/h"]) is None


def test_find_executable_searches_path(tmp_path):
    (tmp_path / "tool").write_text("")
    found = find_executable("tool", [f"PATH=/nonexistent:{tmp_path}"])
    assert found == f"{tmp_path}/tool"


def test_find_executable_not_found(tmp_path):
    assert find_executable("tool", [f"PATH={tmp_path}"]) is None


def test_find_executable_empty_name():
    assert find_executable("", ["PATH=/bin"]) is None


def test_find_executable_absolute_existing(tmp_path):
    target = tmp_path / "prog"
    target.write_text("")
    assert find_executable(str(target), []) == str(target)


def test_find_executable_missing_relative_raises(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    with pytest.raises(ExecutionError) as info:
        find_executable("./missing_tool", [])
    assert info.value.status == 127


def test_count_redirect_tokens_skips_heredoc():
    assert count_redirect_tokens(["<", "<<", ">"]) == count_redirect_tokens(["<", ">"])
    assert count_redirect_tokens(["<", ">"]) == len(["<", ">"])


def test_count_files_skips_missing_marker():
    assert count_files(["a", "\n", "b"]) == len(["a", "b"])


def test_check_files_rejects_operator_target():
    command = Command(raw="x", unexpanded=[], expanded=[], tokens=[">"], files=[">"])
    with pytest.raises(ShellSyntaxError):
        check_files([command])


def test_read_heredoc_expands_and_stops_at_limiter():
    text = read_heredoc("EOF", ["USER=bob"], _reader(["hello $USER", "EOF", "after"]))
    assert text == "hello bob\n"


def test_read_heredoc_stops_at_end_of_input():
    assert read_heredoc("EOF", [], _reader(["a", "b"])) == "a\nb\n"


def test_read_heredoc_missing_limiter():
    with pytest.raises(ExecutionError) as info:
        read_heredoc(None, [], _reader([]))
    assert info.value.status == 1


def test_collect_heredocs_per_command():
    commands = [parse_command("cat << EOF", []), parse_command("cat", [])]
    assert collect_heredocs(commands, [], _reader(["a", "EOF"])) == [["a\n"], []]


def test_collect_heredocs_interrupted():
    with pytest.raises(ExecutionError) as info:
        collect_heredocs([parse_command("cat << EOF", [])], [], _interrupting)
    assert info.value.status == 1


def test_builtin_output_redirected(env, tmp_path):
    assert _run("echo hi > out.txt", env) == 0
    assert (tmp_path / "out.txt").read_text() == "hi\n"


def test_append_redirection(env, tmp_path):
    assert _run("echo one > out.txt", env) == 0
    assert _run("echo two >> out.txt", env) == 0
    assert (tmp_path / "out.txt").read_text() == "one\ntwo\n"


def test_pipeline_through_external_program(env, tmp_path):
    assert _run("echo abc | cat > out.txt", env) == 0
    assert (tmp_path / "out.txt").read_text() == "abc\n"


def test_heredoc_feeds_program(env, tmp_path):
    assert _run("cat << END > out.txt", env, _reader(["x", "END"])) == 0
    assert (tmp_path / "out.txt").read_text() == "x\n"


def test_input_redirection(env, tmp_path):
    (tmp_path / "in.txt").write_text("data\n")
    assert _run("cat < in.txt > out.txt", env) == 0
    assert (tmp_path / "out.txt").read_text() == "data\n"


def test_missing_input_file(env):
    assert _run("cat < missing.txt", env) == 1


def test_external_exit_status(env):
    assert execute([parse_command("sh -c 'exit 3'", env.snapshot())], env) == 3


def test_command_not_found(env):
    assert _run("nosuchcmd_xyz", env) == 127


def test_directory_as_command(env):
    assert _run("/", env) == 126


def test_operator_as_target_is_syntax_error(env):
    assert _run("echo hi > >", env) == 258


def test_single_builtin_changes_environment(env):
    _run("export A=1", env)
    assert env.find("A=") == "A=1"


def test_builtin_in_pipeline_is_isolated(env):
    cwd = os.getcwd()
    _run("export B=2 | cd / | cat", env)
    assert env.find("B=") is None
    assert os.getcwd() == cwd


def test_single_exit_raises(env):
    with pytest.raises(ShellExit) as info:
        _run("exit 7", env)
    assert info.value.status == 7


def test_exit_in_last_stage_sets_status(env):
    assert _run("cat < /dev/null | exit 5", env) == 5