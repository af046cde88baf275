"""Context-aware tab completer for the py-stdio shell.

The completer separates **what to complete** (pure logic, fully
testable) from **how to wire it** (readline integration in the REPL).

The ``complete(text, state)`` method is the readline callback.  It
delegates to ``completions(text, line)`` which analyses the input
context and returns a list of candidate strings.
"""

from __future__ import annotations

import readline
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from py_stdio.shell import Shell

# Commands whose arguments are file paths.
_PATH_COMMANDS: frozenset[str] = frozenset(["cat", "cp", "cd", "showconfig"])

# Commands that accept a fixed word as their first argument.
_SUBCOMMANDS: dict[str, list[str]] = {
    "learn": ["streams", "arguments", "environment", "config", "all"],
}


class Completer:
    """Context-aware tab completer for the py-stdio shell."""

    def __init__(self, shell: Shell) -> None:
        """Create a completer attached to a shell instance.

        Args:
            shell: The shell whose commands, environment, and working
                   directory are used to generate completion candidates.

        """
        self._shell = shell

    def complete(self, text: str, state: int) -> str | None:
        """Readline callback — return the *state*-th candidate for *text*.

        Args:
            text: The partial word being completed.
            state: Index into the candidate list (0, 1, 2, …).

        Returns:
            The candidate at *state*, or ``None`` when exhausted.

        """
        line = readline.get_line_buffer()
        candidates = self.completions(text, line)
        if state < len(candidates):
            return candidates[state]
        return None

    def completions(self, text: str, line: str) -> list[str]:
        """Return completion candidates based on context.

        Args:
            text: The partial word under the cursor.
            line: The full input line so far.

        Returns:
            Sorted list of matching candidates.

        """
        # Only the current pipeline stage matters.
        stage = line.rsplit("|", 1)[-1]
        words = stage.lstrip().split()

        if not words or (len(words) == 1 and not stage.endswith(" ")):
            return [cmd for cmd in self._shell.command_names() if cmd.startswith(text)]

        cmd = words[0]
        if cmd in _SUBCOMMANDS:
            return sorted(sub for sub in _SUBCOMMANDS[cmd] if sub.startswith(text))

        if text.startswith("$"):
            prefix = text[1:]
            return sorted(f"${key}" for key, _ in self._shell.env.items() if key.startswith(prefix))

        if cmd in ("unset", "printenv"):
            return sorted(key for key, _ in self._shell.env.items() if key.startswith(text))

        if cmd in _PATH_COMMANDS or "/" in text:
            return self._complete_paths(text)

        return []

    def _complete_paths(self, text: str) -> list[str]:
        """Complete file names relative to the shell's working directory.

        Directories get a trailing ``/`` suffix.
        """
        head, _, prefix = text.rpartition("/")
        directory = self._shell.cwd / (head + "/" if head or text.startswith("/") else ".")
        try:
            entries = list(directory.iterdir())
        except OSError:
            return []

        candidates: list[str] = []
        for entry in entries:
            if not entry.name.startswith(prefix):
                continue
            full = f"{head}/{entry.name}" if head or text.startswith("/") else entry.name
            if entry.is_dir():
                full += "/"
            candidates.append(full)
        return sorted(candidates)
