"""Tests for I/O redirection (>, >>, <, 2>).

Redirection routes a command's stdout or stderr to files and reads a
command's stdin from a file, just like a real Unix shell.
"""

from pathlib import Path

import pytest

from py_stdio.env import Environment
from py_stdio.shell import Shell, _Redirections, _tokenize


@pytest.fixture
def shell(tmp_path: Path) -> Shell:
    """Create a shell working in a temp directory."""
    return Shell(env=Environment(), cwd=tmp_path)


class TestRedirectionParsing:
    """Verify _parse_redirections() separates operators from words."""

    def _parse(self, line: str) -> tuple[list[str], _Redirections]:
        return Shell._parse_redirections(_tokenize(line))

    def test_no_redirections(self) -> None:
        """A plain command returns its words with empty redirections."""
        words, redir = self._parse("echo hello world")
        assert words == ["echo", "hello", "world"]
        assert redir == _Redirections()

    def test_stdout_redirect(self) -> None:
        """``>`` extracts the stdout target file."""
        words, redir = self._parse("echo hello > out.txt")
        assert words == ["echo", "hello"]
        assert redir.stdout == "out.txt"
        assert redir.append is False

    def test_append_redirect(self) -> None:
        """``>>`` extracts the stdout target with append=True."""
        words, redir = self._parse("echo hello >> out.txt")
        assert words == ["echo", "hello"]
        assert redir.stdout == "out.txt"
        assert redir.append is True

    def test_stdin_redirect(self) -> None:
        """``<`` extracts the stdin source file."""
        words, redir = self._parse("grep pattern < input.txt")
        assert words == ["grep", "pattern"]
        assert redir.stdin == "input.txt"

    def test_stderr_redirect(self) -> None:
        """``2>`` extracts the stderr target without leaving a stray 2."""
        words, redir = self._parse("cat nope 2> err.txt")
        assert words == ["cat", "nope"]
        assert redir.stderr == "err.txt"
        assert redir.stdout is None

    def test_no_spaces_needed(self) -> None:
        """Operators split words even when written without spaces."""
        words, redir = self._parse("echo hi>out.txt")
        assert words == ["echo", "hi"]
        assert redir.stdout == "out.txt"

    def test_two_inside_a_word_is_not_stderr(self) -> None:
        """``x2>f`` redirects the stdout of a command ending in 2."""
        words, redir = self._parse("echo x2>f")
        assert words == ["echo", "x2"]
        assert redir.stdout == "f"
        assert redir.stderr is None

    def test_quoted_operators_are_words(self) -> None:
        """Quoted ``>`` and ``<`` are plain text, not redirections."""
        words, redir = self._parse("""echo "1 > 0" '<' \\>""")
        assert words == ["echo", "1 > 0", "<", ">"]
        assert redir == _Redirections()

    def test_quoted_file_name(self) -> None:
        """A redirection target can be quoted to hold spaces."""
        words, redir = self._parse('echo hi > "my file.txt"')
        assert words == ["echo", "hi"]
        assert redir.stdout == "my file.txt"

    @pytest.mark.parametrize("line", ["echo hi >", "cat <", "echo hi > > f"])
    def test_missing_target_raises(self, line: str) -> None:
        """An operator with no file name after it is a syntax error."""
        with pytest.raises(ValueError, match="missing file name"):
            self._parse(line)


class TestRedirectionExecution:
    """Verify redirections against real files."""

    def test_stdout_to_file(self, shell: Shell, tmp_path: Path) -> None:
        """> should write stdout to the file and return nothing."""
        result = shell.execute("echo saved > out.txt")
        assert result.stdout == ""
        assert (tmp_path / "out.txt").read_text() == "saved\n"

    def test_overwrite(self, shell: Shell, tmp_path: Path) -> None:
        """> should replace existing contents."""
        shell.execute("echo first > out.txt")
        shell.execute("echo second > out.txt")
        assert (tmp_path / "out.txt").read_text() == "second\n"

    def test_append(self, shell: Shell, tmp_path: Path) -> None:
        """>> should add to existing contents."""
        shell.execute("echo first > out.txt")
        shell.execute("echo second >> out.txt")
        assert (tmp_path / "out.txt").read_text() == "first\nsecond\n"

    def test_stdin_from_file(self, shell: Shell, tmp_path: Path) -> None:
        """< should feed the file to stdin."""
        (tmp_path / "in.txt").write_text("apple\nbanana\n")
        result = shell.execute("grep ban < in.txt")
        assert result.stdout == "banana\n"

    def test_stdin_from_missing_file(self, shell: Shell) -> None:
        """< with a missing file should fail before running the command."""
        result = shell.execute("wc < nope.txt")
        assert not result.ok
        assert "nope.txt" in result.stderr

    def test_stderr_to_file(self, shell: Shell, tmp_path: Path) -> None:
        """2> should move diagnostics into the file."""
        result = shell.execute("cat missing 2> err.txt")
        assert result.stderr == ""
        assert "missing" in (tmp_path / "err.txt").read_text()

    def test_stdout_and_stderr_apart(self, shell: Shell, tmp_path: Path) -> None:
        """Data and diagnostics should land in different files."""
        (tmp_path / "ok.txt").write_text("data\n")
        shell.execute("cat ok.txt missing > out.txt 2> err.txt")
        assert (tmp_path / "out.txt").read_text() == "data\n"
        assert "missing" in (tmp_path / "err.txt").read_text()
        assert "data" not in (tmp_path / "err.txt").read_text()
