"""Tests for the tokenizer and redirection extraction."""

import pytest  # type: ignore

from errors import RedirectionSyntaxError
from tokens import (
    ParsedCommand,
    RedirectionPlan,
    extract_redirections,
    format_plan,
    parse_line,
    tokenize,
)


class TestTokenize:
    """Quote and escape handling."""

    @pytest.mark.parametrize(
        "line",
        [
            "echo hello world",
            "  ls   -la  /tmp ",
            "single",
            "a b c d e f",
        ],
    )
    def test_plain_text_is_whitespace_split(self, line):
        assert tokenize(line) == line.split()

    def test_empty_and_blank(self):
        assert tokenize("") == []
        assert tokenize("     ") == []

    def test_single_quotes_group_words(self):
        assert tokenize("'a b' c") == ["a b", "c"]

    def test_escaped_quote_inside_double_quotes(self):
        assert tokenize('"a\\"b"') == ['a"b']

    def test_escaped_space_outside_quotes(self):
        assert tokenize("a\\ b") == ["a b"]

    def test_backslash_literal_in_single_quotes(self):
        assert tokenize("'a\\nb'") == ["a\\nb"]
        assert tokenize("'shell\\\\script'") == ["shell\\\\script"]

    def test_double_quote_keeps_unlisted_escapes(self):
        assert tokenize('"a\\nb"') == ["a\\nb"]
        assert tokenize('"x\\qy"') == ["x\\qy"]

    @pytest.mark.parametrize(
        "escaped,expected",
        [
            ('"\\$"', "$"),
            ('"\\`"', "`"),
            ('"\\""', '"'),
            ('"\\\\"', "\\"),
            ('"a\\\nb"', "a\nb"),
        ],
    )
    def test_double_quote_escape_allow_list(self, escaped, expected):
        assert tokenize(escaped) == [expected]

    def test_unquoted_backslash_keeps_next_char(self):
        assert tokenize("\\'hello\\'") == ["'hello'"]
        assert tokenize("a\\nb") == ["anb"]

    def test_quotes_nested_in_other_quotes_are_literal(self):
        assert tokenize("\"it's\"") == ["it's"]
        assert tokenize("'say \"hi\"'") == ['say "hi"']

    def test_adjacent_quoted_parts_join(self):
        assert tokenize("'hello''world'") == ["helloworld"]
        assert tokenize("\"a\"'b'c") == ["abc"]

    def test_spaces_inside_double_quotes_preserved(self):
        assert tokenize('echo "hello    world"') == ["echo", "hello    world"]

    def test_empty_quotes_produce_no_token(self):
        assert tokenize("echo '' x") == ["echo", "x"]

    def test_unterminated_quote_runs_to_end(self):
        assert tokenize("echo 'abc def") == ["echo", "abc def"]
        assert tokenize('echo "x y') == ["echo", "x y"]

    def test_trailing_backslash_dropped(self):
        assert tokenize("abc\\") == ["abc"]

    def test_tabs_are_not_separators(self):
        assert tokenize("a\tb") == ["a\tb"]

    def test_rejoin_reproduces_tokens(self):
        tokens = ["ls", "-l", "/usr/bin", "file.txt"]
        assert tokenize(" ".join(tokens)) == tokens


class TestExtractRedirections:
    """Redirection operator extraction."""

    def test_stdout_truncate(self):
        cmd = extract_redirections(["echo", "hi", ">", "out.txt"])
        assert cmd.argv == ["echo", "hi"]
        assert cmd.plan == RedirectionPlan(stdout_target="out.txt", stdout_append=False)

    @pytest.mark.parametrize(
        "op,stream,append",
        [
            (">", "stdout", False),
            ("1>", "stdout", False),
            (">>", "stdout", True),
            ("1>>", "stdout", True),
            ("2>", "stderr", False),
            ("2>>", "stderr", True),
        ],
    )
    def test_all_operators(self, op, stream, append):
        cmd = extract_redirections(["cmd", "a", op, "f", "b"])
        assert cmd.argv == ["cmd", "a", "b"]
        assert getattr(cmd.plan, f"{stream}_target") == "f"
        assert getattr(cmd.plan, f"{stream}_append") is append
        other = "stderr" if stream == "stdout" else "stdout"
        assert getattr(cmd.plan, f"{other}_target") is None

    def test_dangling_operator_is_syntax_error(self):
        with pytest.raises(RedirectionSyntaxError, match="no file specified for redirection"):
            extract_redirections(["ls", ">"])

    def test_dangling_after_valid_redirect(self):
        with pytest.raises(RedirectionSyntaxError):
            extract_redirections(["ls", "2>", "err", ">>"])

    def test_last_redirect_wins(self):
        cmd = extract_redirections(["echo", "x", ">>", "a", ">", "b"])
        assert cmd.plan.stdout_target == "b"
        assert cmd.plan.stdout_append is False
        cmd = extract_redirections(["echo", "x", "2>", "e1", "2>>", "e2"])
        assert cmd.plan.stderr_target == "e2"
        assert cmd.plan.stderr_append is True

    def test_both_streams(self):
        cmd = extract_redirections(["ls", "x", "1>", "o", "2>>", "e"])
        assert cmd.argv == ["ls", "x"]
        assert cmd.plan == RedirectionPlan("o", False, "e", True)

    def test_command_name_never_an_operator(self):
        cmd = extract_redirections([">", "file"])
        assert cmd.argv == [">", "file"]
        assert cmd.plan.is_empty()

    def test_empty_tokens(self):
        assert extract_redirections([]) == ParsedCommand(argv=[])

    def test_no_redirects_keeps_order(self):
        cmd = extract_redirections(["a", "b", "c"])
        assert cmd.argv == ["a", "b", "c"]
        assert cmd.plan.is_empty()


def test_parse_line_combines_both_steps():
    cmd = parse_line("echo 'a b' 2>> 'err log.txt'")
    assert cmd.argv == ["echo", "a b"]
    assert cmd.plan.stderr_target == "err log.txt"
    assert cmd.plan.stderr_append


def test_format_plan():
    assert format_plan(RedirectionPlan()) == "<inherit>"
    assert format_plan(RedirectionPlan("o", True, "e", False)) == "1>> o, 2> e"
