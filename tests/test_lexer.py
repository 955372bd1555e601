import pytest

from minishell.lexer import split_commands, split_words, unquote


def test_split_words_plain():
    text = "echo hello world"
    assert split_words(text, " ") == text.split()


def test_split_words_collapses_repeated_separators():
    assert split_words("  ls   -l  ", " ") == ["ls", "-l"]


def test_split_words_redirections_become_words():
    assert split_words("cat<in>>out", " ") == ["cat", "<", "in", ">>", "out"]


def test_split_words_heredoc_operator():
    assert split_words("cat << EOF", " ") == ["cat", "<<", "EOF"]


def test_split_words_keeps_quoted_spaces():
    assert split_words('echo "a b"', " ") == ["echo", "a b"]


def test_split_words_single_quotes_removed():
    assert split_words("echo 'x y' z", " ") == ["echo", "x y", "z"]


@pytest.mark.parametrize("text", ["", "   ", " "])
def test_split_words_only_separators_returns_input(text):
    assert split_words(text, " ") == [text]


def test_split_words_other_separator():
    assert split_words("/bin:/usr/bin", ":") == ["/bin", "/usr/bin"]


@pytest.mark.parametrize("text", ["abc", "a-b_c", "x.y/z"])
def test_unquote_leaves_plain_text(text):
    assert unquote(text) == text


def test_unquote_double_quotes():
    assert unquote('"a b"') == "a b"


def test_unquote_escaped_quote_inside_quotes():
    assert unquote('"a\\"b"') == 'a"b'


def test_unquote_escaped_backslash_outside_quotes():
    assert unquote("a\\\\b") == "a\\b"


def test_split_commands_basic():
    assert split_commands("ls | wc", "|") == ["ls ", " wc"]


@pytest.mark.parametrize("line", ["ls -l | grep x | wc -l", "a|b|c", "echo 'x|y' | cat"])
def test_split_commands_rejoins_to_line(line):
    assert "|".join(split_commands(line, "|")) == line


def test_split_commands_ignores_quoted_separator():
    assert split_commands('echo "a|b" | wc', "|") == ['echo "a|b" ', " wc"]


def test_split_commands_segment_starting_with_quote():
    assert split_commands('"a|b"', "|") == ['"a', 'b"']


def test_split_commands_empty():
    assert split_commands("", "|") == []


def test_split_commands_skips_repeated_separators():
    assert split_commands("a||b", "|") == ["a", "b"]