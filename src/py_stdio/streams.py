"""Standard streams — the three channels every process starts with.

When a program starts, the operating system hands it three already-open
streams:

- **stdin** (fd 0) — where input comes from (keyboard, pipe, or file).
- **stdout** (fd 1) — where normal output goes.
- **stderr** (fd 2) — where diagnostics and error messages go.

The program never opens or closes them; they are simply there.  The
convention that matters most is the split between stdout and stderr:
stdout carries the data a pipeline consumes, stderr carries the messages
a human reads.  ``cp src dst 2> errors.txt`` keeps the two apart.

Our ``Streams`` bundle makes the three channels an explicit value, so a
program can be run against the real ``sys`` streams or against in-memory
``StringIO`` buffers (lessons, tests, the web notebook) without changing
a line of the program.
"""

from __future__ import annotations

import io
import sys
from collections.abc import Iterator
from dataclasses import dataclass
from typing import TextIO

DEFAULT_CHUNK_SIZE = 8192


class StreamError(Exception):
    """Raise when a stream bundle is used in a way it does not support."""


@dataclass(frozen=True)
class Streams:
    """The stdin/stdout/stderr triple handed to a program.

    Attributes:
        stdin: The input stream.
        stdout: The output stream for pipeline-consumable data.
        stderr: The output stream for diagnostics.

    """

    stdin: TextIO
    stdout: TextIO
    stderr: TextIO

    @classmethod
    def from_sys(cls) -> Streams:
        """Return a bundle over the process's real standard streams."""
        return cls(stdin=sys.stdin, stdout=sys.stdout, stderr=sys.stderr)

    @classmethod
    def capture(cls, stdin_text: str = "") -> Streams:
        """Return a bundle over in-memory buffers.

        Args:
            stdin_text: Text the program will see on its stdin.

        """
        return cls(stdin=io.StringIO(stdin_text), stdout=io.StringIO(), stderr=io.StringIO())

    def out(self, text: str = "") -> None:
        """Write *text* plus a newline to stdout."""
        self.stdout.write(text + "\n")

    def err(self, text: str) -> None:
        """Write *text* plus a newline to stderr."""
        self.stderr.write(text + "\n")

    def stdout_text(self) -> str:
        """Return everything written to a captured stdout."""
        return _captured(self.stdout, "stdout")

    def stderr_text(self) -> str:
        """Return everything written to a captured stderr."""
        return _captured(self.stderr, "stderr")


def _captured(stream: TextIO, name: str) -> str:
    if not isinstance(stream, io.StringIO):
        msg = f"{name} is not a captured stream"
        raise StreamError(msg)
    return stream.getvalue()


def copy_stream(source: TextIO, dest: TextIO, *, chunk_size: int = DEFAULT_CHUNK_SIZE) -> int:
    """Copy everything from *source* to *dest*.

    Reading in fixed-size chunks keeps memory flat no matter how large
    the input is, which is exactly what ``cat big.log | ...`` relies on.

    Args:
        source: Stream to read until end-of-file.
        dest: Stream to write to.
        chunk_size: Characters per read.

    Returns:
        The number of characters copied.

    Raises:
        ValueError: If *chunk_size* is not positive.

    """
    if chunk_size <= 0:
        msg = f"chunk_size must be positive, got {chunk_size}"
        raise ValueError(msg)
    copied = 0
    while chunk := source.read(chunk_size):
        dest.write(chunk)
        copied += len(chunk)
    return copied


def read_lines(source: TextIO) -> Iterator[str]:
    """Yield lines from *source* without their trailing newline."""
    for line in source:
        yield line.rstrip("\n")
