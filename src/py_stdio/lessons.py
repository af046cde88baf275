"""Interactive lessons on how a program talks to the outside world.

Each lesson is a guided walkthrough that runs **real commands** through
the shell and shows exactly what came out of stdout, what came out of
stderr, and the exit status.  The goal is to make the conventions feel
tangible rather than abstract.

Lessons are written for someone who knows basic Python but is new to
command-line conventions.  Each one:

1. Opens with a **real-world analogy** (a shop counter, a letter, ...).
2. Walks through **numbered steps**, each running actual commands.
3. Ends with a **summary** and a pointer to the next lesson.

Every lesson runs in a fresh shell inside a throwaway directory, so the
files it creates disappear afterwards and nothing leaks between lessons.
"""

from __future__ import annotations

import tempfile
from pathlib import Path

from py_stdio.env import Environment
from py_stdio.shell import Shell

_LESSON_ORDER: list[str] = [
    "streams",
    "arguments",
    "environment",
    "config",
]

_DEMO_ENV: dict[str, str] = {
    "HOME": "/home/learner",
    "USER": "learner",
    "LANG": "C.UTF-8",
    "PATH": "/usr/local/bin:/usr/bin:/bin",
}

_SAMPLE_TOML = """\
# Settings for a small web service.
name = "demo"
debug = false

[server]
host = "127.0.0.1"
port = 8080
"""

_SAMPLE_INI = """\
[DEFAULT]
name = demo

[server]
host = 127.0.0.1
port = 8080
"""

_SAMPLE_JSON = """\
{"name": "demo", "debug": false, "server": {"host": "127.0.0.1", "port": 8080}}
"""

_BROKEN_TOML = 'name = "demo\n'


class TutorialRunner:
    """Run lessons that teach streams, arguments, environment, and config."""

    def __init__(self, env: Environment | None = None) -> None:
        """Create a tutorial runner.

        Args:
            env: Environment each lesson's shell starts from.  Defaults
                to a small, predictable demo environment.

        """
        self._env = env.copy() if env is not None else Environment(_DEMO_ENV)
        self._lessons: dict[str, str] = {
            "streams": "Streams — stdin, stdout, and stderr",
            "arguments": "Arguments — argv, options, and the program name",
            "environment": "Environment — inherited KEY=VALUE settings",
            "config": "Config files — TOML, INI, JSON, and layering",
        }

    def list_lessons(self) -> list[str]:
        """Return sorted list of available lesson names."""
        return sorted(self._lessons)

    def title(self, name: str) -> str:
        """Return the one-line title of a lesson."""
        return self._lessons[name]

    def run(self, name: str) -> str:
        """Run a lesson by name and return its formatted output.

        Args:
            name: The lesson name (e.g. ``"streams"``).

        Returns:
            Multi-line string with the lesson content.

        Raises:
            KeyError: If the lesson name is not recognised.

        """
        runners = {
            "streams": self._lesson_streams,
            "arguments": self._lesson_arguments,
            "environment": self._lesson_environment,
            "config": self._lesson_config,
        }
        runner = runners.get(name)
        if runner is None:
            msg = f"Unknown lesson: {name}"
            raise KeyError(msg)
        with tempfile.TemporaryDirectory(prefix="py-stdio-") as workdir:
            shell = Shell(env=self._env, cwd=Path(workdir))
            return runner(shell)

    def run_all(self) -> str:
        """Run all lessons in order and return combined output."""
        parts: list[str] = []
        for name in _LESSON_ORDER:
            parts.append(self.run(name))
            parts.append("")
        return "\n".join(parts)

    # -- Individual lessons ---------------------------------------------------

    def _lesson_streams(self, shell: Shell) -> str:
        """Teach the three standard streams and how they are redirected."""
        lines: list[str] = [
            "=== Lesson: Streams ===",
            "",
            "Think of a program as a clerk at a shop counter. Work arrives in",
            "the in-tray (stdin), finished work goes in the out-tray (stdout),",
            "and complaints go in a separate box (stderr) so they never end up",
            "mixed in with the finished work.",
            "",
        ]

        lines.append("Step 1: Write to stdout")
        _step(lines, shell, "echo hello")

        lines.append("Step 2: Read from stdin")
        lines.append("  A '-' in place of a file name means stdin (or stdout).")
        _step(lines, shell, "cp - -", stdin="text that arrived on stdin\n")

        lines.append("Step 3: Connect two programs with a pipe")
        lines.append("  The stdout of 'echo' becomes the stdin of 'wc'.")
        _step(lines, shell, "echo one two three | wc")

        lines.append("Step 4: Errors go to stderr")
        _step(lines, shell, "cat missing.txt")
        lines.append("  stdout stayed empty; the complaint went to stderr and")
        lines.append("  the exit status is non-zero.")
        lines.append("")

        lines.append("Step 5: Redirect each stream to its own file")
        _step(lines, shell, "echo saved > out.txt")
        _step(lines, shell, "cat missing.txt 2> errors.txt")
        _step(lines, shell, "cat out.txt errors.txt")

        lines.extend(
            [
                "Summary: You learned that every program starts with stdin,",
                "stdout, and stderr already open, that pipes join stdout to",
                "stdin, and that keeping errors on stderr keeps pipelines clean.",
                "",
                "Next up: 'arguments' — how a program learns what to do.",
            ]
        )
        return "\n".join(lines)

    def _lesson_arguments(self, shell: Shell) -> str:
        """Teach argv, the program name, and option conventions."""
        lines: list[str] = [
            "=== Lesson: Arguments ===",
            "",
            "Arguments are like the address on an envelope. The envelope",
            "(the program) is the same every time; the words written on it",
            "tell it where to go on this particular trip.",
            "",
        ]

        lines.append("Step 1: See how a command line is split")
        lines.append("  argv[0] is the program's own name; it is not counted.")
        _step(lines, shell, 'args one "two words" three')

        lines.append("Step 2: Options are just a naming convention")
        lines.append("  '--flag' and '--name=value' are plain strings too; a")
        lines.append("  lone '--' means 'no more options after this'.")
        _step(lines, shell, "args --verbose --name=py input.txt -- --literal")

        lines.append("Step 3: Wrong arguments are a usage error")
        _step(lines, shell, "cp only-one")
        lines.append("  Exit status 2 is the convention for 'you called me wrong'.")
        lines.append("")

        lines.extend(
            [
                "Summary: You learned that arguments arrive as a list of strings,",
                "that the program name is kept apart from them, and that options",
                "are a convention the program itself interprets.",
                "",
                "Next up: 'environment' — settings inherited from the parent.",
            ]
        )
        return "\n".join(lines)

    def _lesson_environment(self, shell: Shell) -> str:
        """Teach environment variables and copy-on-spawn."""
        lines: list[str] = [
            "=== Lesson: Environment ===",
            "",
            "The environment is like a note a parent packs in a child's",
            "lunchbox. The child can read it, even scribble on it, but the",
            "parent's own copy at home stays exactly as it was.",
            "",
        ]

        lines.append("Step 1: Loop over every variable")
        _step(lines, shell, "printenv")

        lines.append("Step 2: Look one variable up")
        _step(lines, shell, "printenv HOME")

        lines.append("Step 3: Set a variable in the shell and use it")
        _step(lines, shell, "export GREETING=hello")
        _step(lines, shell, "echo $GREETING, ${USER}!")

        lines.append("Step 4: Remove it again")
        _step(lines, shell, "unset GREETING")
        _step(lines, shell, "printenv GREETING")
        lines.append("  An unset variable is simply missing, so printenv exits 1.")
        lines.append("")

        lines.append("Step 5: Changes flow down, never up")
        lines.append("  Every program gets a *copy* of the shell's environment.")
        lines.append("  In Python, os.environ is this process's copy: changing it")
        lines.append("  affects programs it starts, never the shell that started it.")
        lines.append("")

        lines.extend(
            [
                "Summary: You learned that environment variables are inherited",
                "KEY=VALUE strings, read like a dictionary, and copied (not",
                "shared) from parent to child.",
                "",
                "Next up: 'config' — settings that live in files.",
            ]
        )
        return "\n".join(lines)

    def _lesson_config(self, shell: Shell) -> str:
        """Teach config file formats and layered precedence."""
        lines: list[str] = [
            "=== Lesson: Config files ===",
            "",
            "A config file is like the recipe card taped inside a cupboard:",
            "it stays put between cooking sessions. Arguments and environment",
            "variables are the cook's notes for today, and today's notes win.",
            "",
        ]

        samples = {
            "app.toml": _SAMPLE_TOML,
            "app.ini": _SAMPLE_INI,
            "app.json": _SAMPLE_JSON,
            "broken.toml": _BROKEN_TOML,
        }
        for filename, text in samples.items():
            (shell.cwd / filename).write_text(text, encoding="utf-8")

        lines.append("Step 1: Read a TOML file (typed values, comments allowed)")
        _step(lines, shell, "showconfig app.toml")

        lines.append("Step 2: The same settings as INI and JSON")
        lines.append("  INI values are always strings; JSON has no comments.")
        _step(lines, shell, "showconfig app.ini server.port")
        _step(lines, shell, "showconfig app.json server.port")

        lines.append("Step 3: Let the environment override the file")
        _step(lines, shell, "export APP_SERVER__PORT=9000")
        _step(lines, shell, "showconfig app.toml --prefix=APP_ server.port")

        lines.append("Step 4: Let the command line override everything")
        _step(
            lines,
            shell,
            "showconfig app.toml --prefix=APP_ --set=server.port=7000 server.port",
        )

        lines.append("Step 5: Malformed text is reported, not guessed at")
        _step(lines, shell, "showconfig broken.toml")

        lines.extend(
            [
                "Summary: You learned the three common config formats and the",
                "usual precedence: defaults < file < environment < arguments.",
                "",
                "Congratulations — you've completed all the lessons!",
            ]
        )
        return "\n".join(lines)


# -- Helpers ------------------------------------------------------------------


def _step(lines: list[str], shell: Shell, command: str, stdin: str = "") -> None:
    """Run *command* and append its transcript to *lines*."""
    result = shell.execute(command, stdin=stdin)
    lines.append(f"  $ {command}")
    if stdin:
        lines.extend(f"  (stdin)  {line}" for line in stdin.splitlines())
    lines.extend(f"  {line}" for line in result.stdout.splitlines())
    lines.extend(f"  (stderr) {line}" for line in result.stderr.splitlines())
    lines.append(f"  [exit status: {result.status}]")
    lines.append("")
