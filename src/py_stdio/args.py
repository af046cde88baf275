"""Command-line arguments — what a program was asked to do.

Every process is started with a list of strings, ``argv``.  By
convention ``argv[0]`` is the program's own name (often a path such as
``/usr/bin/cp``) and ``argv[1:]`` are the arguments proper.  Python
exposes the list as ``sys.argv``; most tutorials immediately slice off
the first element, and so do we: an ``Invocation`` keeps the program
name *apart* from the argument tuple.

Options are only a convention layered on top of plain strings:

- ``--name=value`` sets an option to a value.
- ``--flag`` sets an option to ``"true"``.
- A bare ``--`` ends option parsing; everything after it is positional,
  even if it starts with a dash.
"""

from __future__ import annotations

import shlex
from dataclasses import dataclass
from pathlib import PurePath

_END_OF_OPTIONS = "--"
_OPTION_PREFIX = "--"


def program_name(path: str) -> str:
    """Return the basename of ``argv[0]`` (``/usr/bin/cp`` becomes ``cp``)."""
    return PurePath(path).name or path


@dataclass(frozen=True)
class Invocation:
    """A program name plus the arguments it was invoked with.

    Attributes:
        program: The program name (``argv[0]``).
        args: The arguments (``argv[1:]``), program name excluded.

    """

    program: str
    args: tuple[str, ...] = ()

    @classmethod
    def from_argv(cls, argv: list[str] | tuple[str, ...]) -> Invocation:
        """Split a raw ``argv`` into program name and arguments.

        Raises:
            ValueError: If *argv* is empty (there is no program name).

        """
        if not argv:
            msg = "argv is empty: no program name"
            raise ValueError(msg)
        return cls(program=argv[0], args=tuple(argv[1:]))

    @classmethod
    def parse(cls, command_line: str) -> Invocation:
        """Tokenise a command line the way ``sh`` would, then split it.

        Quotes group words: ``echo "hello world"`` has one argument.
        """
        return cls.from_argv(shlex.split(command_line))

    @property
    def argc(self) -> int:
        """Return the number of arguments, program name excluded."""
        return len(self.args)

    def options(self) -> dict[str, str]:
        """Return ``--name=value`` and ``--flag`` tokens as a dict."""
        opts, _ = self._split()
        return opts

    def option_values(self, name: str) -> list[str]:
        """Return every value given for a repeatable ``--name=value`` option."""
        values: list[str] = []
        for token in self.args:
            if token == _END_OF_OPTIONS:
                break
            key, sep, value = token.removeprefix(_OPTION_PREFIX).partition("=")
            if token.startswith(_OPTION_PREFIX) and key == name:
                values.append(value if sep else "true")
        return values

    def positionals(self) -> list[str]:
        """Return the arguments that are not options."""
        _, positional = self._split()
        return positional

    def _split(self) -> tuple[dict[str, str], list[str]]:
        opts: dict[str, str] = {}
        positional: list[str] = []
        tokens = iter(self.args)
        for token in tokens:
            if token == _END_OF_OPTIONS:
                positional.extend(tokens)
                break
            if token.startswith(_OPTION_PREFIX) and len(token) > len(_OPTION_PREFIX):
                name, sep, value = token[len(_OPTION_PREFIX) :].partition("=")
                opts[name] = value if sep else "true"
            else:
                positional.append(token)
        return opts, positional
