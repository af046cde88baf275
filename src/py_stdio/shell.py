"""The shell — where streams, arguments, and environment meet.

The shell reads a command line, expands ``$VARIABLES`` from its own
environment, splits the line into words, wires up the three standard
streams of every program it starts, and collects the exit status.

Everything a learner reads about in the lessons happens here for real:

- **Pipes** — ``printenv | grep HOME`` connects the stdout of one
  program to the stdin of the next.
- **Redirection** — ``<`` feeds a file to stdin, ``>`` / ``>>`` send
  stdout to a file, ``2>`` sends stderr to a file.
- **Environment** — ``export`` and ``unset`` change the shell's *own*
  copy of the environment; every program started afterwards gets a
  copy of that copy.  The Python process's ``os.environ`` is never
  touched.

Design choices:
    - **Returns results, not prints.**  ``execute`` returns a
      ``CommandResult`` holding stdout, stderr, and the status, so the
      caller (REPL, web page, lesson, test) decides how to display it.
    - **Command dispatch via a dict.**  Built-ins are methods in a
      dispatch table; anything else is looked up in the program
      registry.
    - **Files are real files**, resolved against the shell's working
      directory.
"""

from __future__ import annotations

import shlex
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path
from typing import TypeAlias

from py_stdio.args import Invocation
from py_stdio.env import Environment
from py_stdio.logging import Logger, level_from_env
from py_stdio.programs import (
    EXIT_FAILURE,
    EXIT_OK,
    EXIT_USAGE,
    REGISTRY,
    ProgramContext,
    describe,
    run_program,
)
from py_stdio.streams import Streams

EXIT_NOT_FOUND = 127

_Builtin: TypeAlias = Callable[[Invocation, Streams], int]


@dataclass
class _Redirections:
    """Parsed I/O redirection operators from a command string."""

    stdin: str | None = None  # < file
    stdout: str | None = None  # > file or >> file
    stderr: str | None = None  # 2> file
    append: bool = False  # >> vs >


# (is_operator, text); words arrive with their quotes already removed.
_Token: TypeAlias = tuple[bool, str]

_PIPE = "|"
# Longest first, so ">>" wins over ">".
_OPERATORS = ("2>", ">>", _PIPE, ">", "<")


def _tokenize(line: str) -> list[_Token]:
    """Split a command line into words and unquoted operators.

    Quotes and backslashes are honoured the way ``sh`` honours them, so
    ``echo "a|b"`` is one command with one argument and ``grep ">"``
    searches for a literal ``>``.  ``2>`` is only an operator when the
    ``2`` starts a word (``x2>f`` sends stdout of ``x2`` to ``f``).

    Raises:
        ValueError: On an unterminated quote or a trailing backslash.

    """
    tokens: list[_Token] = []
    word: list[str] = []

    def flush() -> None:
        if word:
            tokens.append((False, "".join(shlex.split("".join(word)))))
            word.clear()

    quote: str | None = None
    i = 0
    while i < len(line):
        ch = line[i]
        if quote is None and ch.isspace():
            flush()
            i += 1
            continue
        if ch == "\\" and quote != "'":
            word.append(line[i : i + 2])
            i += 2
            continue
        if quote is not None:
            if ch == quote:
                quote = None
        elif ch in "'\"":
            quote = ch
        else:
            op = next((o for o in _OPERATORS if line.startswith(o, i)), None)
            if op is not None and not (op == "2>" and word):
                flush()
                tokens.append((True, op))
                i += len(op)
                continue
        word.append(ch)
        i += 1

    # shlex reports any unterminated quote here.
    flush()
    return tokens


def _split_pipeline(tokens: list[_Token]) -> list[list[_Token]]:
    """Cut a token list into pipeline stages, dropping empty ones."""
    stages: list[list[_Token]] = [[]]
    for token in tokens:
        if token == (True, _PIPE):
            stages.append([])
        else:
            stages[-1].append(token)
    return [stage for stage in stages if stage]


@dataclass(frozen=True)
class CommandResult:
    """What a command line produced.

    Attributes:
        stdout: Text the last stage wrote to stdout (unless redirected).
        stderr: Diagnostics from every stage (unless redirected).
        status: Exit status of the last stage that ran.

    """

    stdout: str
    stderr: str
    status: int

    @property
    def ok(self) -> bool:
        """Return whether the command succeeded."""
        return self.status == EXIT_OK


class Shell:
    """Command interpreter with its own environment and working directory."""

    EXIT_SENTINEL = "__EXIT__"

    def __init__(self, env: Environment | None = None, cwd: Path | None = None) -> None:
        """Create a shell.

        Args:
            env: Starting environment (copied).  Defaults to a snapshot
                of the real process environment.
            cwd: Working directory for relative paths.  Defaults to the
                process's current directory.

        """
        self._env = env.copy() if env is not None else Environment.from_os()
        self._cwd = (cwd or Path.cwd()).resolve()
        self._history: list[str] = []
        self._logger = Logger()

        self._builtins: dict[str, _Builtin] = {
            "help": self._cmd_help,
            "export": self._cmd_export,
            "unset": self._cmd_unset,
            "cd": self._cmd_cd,
            "pwd": self._cmd_pwd,
            "history": self._cmd_history,
            "learn": self._cmd_learn,
            "exit": self._cmd_exit,
        }

    @property
    def env(self) -> Environment:
        """Return the shell's environment."""
        return self._env

    @property
    def cwd(self) -> Path:
        """Return the working directory."""
        return self._cwd

    @property
    def logger(self) -> Logger:
        """Return the log of every program the shell has run."""
        return self._logger

    def command_names(self) -> list[str]:
        """Return all built-in and program names, sorted."""
        return sorted({*self._builtins, *REGISTRY})

    def execute(self, line: str, stdin: str = "") -> CommandResult:
        """Parse and run a command line, with pipe and redirection support.

        Args:
            line: The raw command line (e.g. ``"printenv | grep HOME"``).
            stdin: Text for the first stage's stdin.

        Returns:
            The collected output and the final exit status.

        """
        stripped = line.strip()
        if stripped:
            self._history.append(stripped)

        try:
            stages = _split_pipeline(_tokenize(self._env.expand(stripped)))
        except ValueError as e:
            return CommandResult(stdout="", stderr=f"Error: {e}\n", status=EXIT_USAGE)

        piped = stdin
        errors: list[str] = []
        status = EXIT_OK
        for stage in stages:
            streams, status = self._run_stage(stage, piped)
            errors.append(streams.stderr_text())
            piped = streams.stdout_text()
            if status != EXIT_OK:
                break
        return CommandResult(stdout=piped, stderr="".join(errors), status=status)

    def _run_stage(self, stage: list[_Token], piped: str) -> tuple[Streams, int]:
        try:
            words, redirects = self._parse_redirections(stage)
        except ValueError as e:
            streams = Streams.capture()
            streams.err(f"Error: {e}")
            return streams, EXIT_USAGE

        if redirects.stdin is not None:
            streams = Streams.capture()
            try:
                piped = self._resolve(redirects.stdin).read_text(encoding="utf-8")
            except OSError as e:
                streams.err(f"Error: {redirects.stdin}: {e.strerror or e}")
                return streams, EXIT_FAILURE
            except UnicodeDecodeError:
                streams.err(f"Error: {redirects.stdin}: not UTF-8 text")
                return streams, EXIT_FAILURE

        streams = Streams.capture(piped)
        status = self._execute_single(words, streams) if words else EXIT_OK
        return self._apply_output_redirect(streams, redirects), status

    def _execute_single(self, words: list[str], streams: Streams) -> int:
        invocation = Invocation.from_argv(words)
        builtin = self._builtins.get(invocation.program)
        if builtin is not None:
            return builtin(invocation, streams)

        if invocation.program not in REGISTRY:
            streams.err(f"Unknown command: {invocation.program}")
            return EXIT_NOT_FOUND

        env = self._env.copy()
        ctx = ProgramContext(
            invocation=invocation,
            streams=streams,
            env=env,
            logger=Logger(streams.stderr, level_from_env(env), parent=self._logger),
            cwd=self._cwd,
        )
        return run_program(invocation.program, ctx)

    @staticmethod
    def _parse_redirections(stage: list[_Token]) -> tuple[list[str], _Redirections]:
        """Separate one stage's words from its redirection operators.

        Each operator takes the word after it as its file; a later
        operator of the same kind replaces an earlier one.

        Raises:
            ValueError: If an operator has no file name after it.

        """
        redirects = _Redirections()
        words: list[str] = []
        tokens = iter(stage)
        for is_operator, text in tokens:
            if not is_operator:
                words.append(text)
                continue
            target = next(tokens, None)
            if target is None or target[0]:
                msg = f"syntax error near '{text}': missing file name"
                raise ValueError(msg)
            if text == "<":
                redirects.stdin = target[1]
            elif text == "2>":
                redirects.stderr = target[1]
            else:
                redirects.stdout = target[1]
                redirects.append = text == ">>"
        return words, redirects

    def _apply_output_redirect(self, streams: Streams, redirects: _Redirections) -> Streams:
        """Move captured output into files as the redirections ask."""
        out, err = streams.stdout_text(), streams.stderr_text()
        try:
            if redirects.stdout is not None:
                self._write_redirect(redirects.stdout, out, append=redirects.append)
                out = ""
            if redirects.stderr is not None:
                self._write_redirect(redirects.stderr, err, append=False)
                err = ""
        except OSError as e:
            err += f"Error: cannot redirect: {e.strerror or e}\n"
        result = Streams.capture()
        result.stdout.write(out)
        result.stderr.write(err)
        return result

    def _write_redirect(self, path: str, content: str, *, append: bool) -> None:
        with self._resolve(path).open("a" if append else "w", encoding="utf-8") as f:
            f.write(content)

    def _resolve(self, path: str) -> Path:
        return self._cwd / Path(path).expanduser()

    # -- Built-ins --------------------------------------------------------

    def _cmd_help(self, _inv: Invocation, streams: Streams) -> int:
        """List built-ins and programs."""
        streams.out("Built-ins: " + ", ".join(sorted(self._builtins)))
        streams.out("Programs:")
        for name in sorted(REGISTRY):
            streams.out(f"  {name:<11} {describe(name)}")
        return EXIT_OK

    def _cmd_export(self, inv: Invocation, streams: Streams) -> int:
        """Set an environment variable (KEY=VALUE)."""
        if not inv.args or "=" not in inv.args[0]:
            streams.err("Usage: export KEY=VALUE")
            return EXIT_USAGE
        key, value = inv.args[0].split("=", 1)
        self._env.set(key, value)
        return EXIT_OK

    def _cmd_unset(self, inv: Invocation, streams: Streams) -> int:
        """Remove an environment variable."""
        if not inv.args:
            streams.err("Usage: unset KEY")
            return EXIT_USAGE
        try:
            self._env.delete(inv.args[0])
        except KeyError:
            streams.err(f"Error: {inv.args[0]} is not set")
            return EXIT_FAILURE
        return EXIT_OK

    def _cmd_cd(self, inv: Invocation, streams: Streams) -> int:
        """Change the working directory (default: $HOME)."""
        target = inv.args[0] if inv.args else self._env.get("HOME", str(self._cwd))
        path = self._resolve(target or ".").resolve()
        if not path.is_dir():
            streams.err(f"Error: {target}: not a directory")
            return EXIT_FAILURE
        self._cwd = path
        self._env.set("PWD", str(path))
        return EXIT_OK

    def _cmd_pwd(self, _inv: Invocation, streams: Streams) -> int:
        """Print the working directory."""
        streams.out(str(self._cwd))
        return EXIT_OK

    def _cmd_history(self, _inv: Invocation, streams: Streams) -> int:
        """Show command history."""
        for i, cmd in enumerate(self._history, start=1):
            streams.out(f"  {i}  {cmd}")
        return EXIT_OK

    def _cmd_learn(self, inv: Invocation, streams: Streams) -> int:
        """Run a lesson, or list them."""
        from py_stdio.lessons import TutorialRunner  # noqa: PLC0415

        runner = TutorialRunner()
        if not inv.args:
            streams.out("Lessons: " + ", ".join(runner.list_lessons()))
            streams.out("Usage: learn <lesson> | learn all")
            return EXIT_OK
        name = inv.args[0]
        try:
            streams.out(runner.run_all() if name == "all" else runner.run(name))
        except KeyError:
            streams.err(f"Unknown lesson: {name}")
            return EXIT_FAILURE
        return EXIT_OK

    def _cmd_exit(self, _inv: Invocation, streams: Streams) -> int:
        """Signal the REPL to stop."""
        streams.stdout.write(self.EXIT_SENTINEL)
        return EXIT_OK


