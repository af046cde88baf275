"""Interactive REPL (Read-Eval-Print Loop) for the py-stdio shell.

The REPL is the terminal interface.  It creates a shell and enters the
classic loop:

    1. **Read** — display a prompt and read a line from stdin.
    2. **Eval** — pass the line to ``shell.execute()``.
    3. **Print** — write the command's stdout to our stdout and its
       stderr to our stderr, so the two stay apart even here.
    4. **Loop** — repeat until ``exit``, Ctrl+D, or Ctrl+C.

This module keeps the I/O loop separate from the shell logic.  The
shell is fully testable (returns results, no I/O); the REPL is the thin
I/O wrapper that connects it to the real standard streams.

The helper functions (``build_prompt``, ``format_banner``,
``print_result``) are pure or stream-parameterised and testable.
The ``run()`` function is the I/O entrypoint.
"""

from __future__ import annotations

import readline

from py_stdio.completer import Completer
from py_stdio.shell import CommandResult, Shell
from py_stdio.streams import Streams

_BANNER_WIDTH = 44


def format_banner() -> str:
    """Return the welcome banner shown when the REPL starts."""
    border = "=" * _BANNER_WIDTH
    return (
        f"\n  {border}\n"
        "                  py-stdio\n"
        "   streams, arguments, environment, config\n"
        f"  {border}\n\n"
        "Type 'help' for commands, 'learn' for lessons, 'exit' to quit.\n"
    )


def build_prompt(shell: Shell) -> str:
    """Build the prompt string showing the working directory's name.

    Returns:
        A prompt string like ``py-stdio:project $ ``.

    """
    name = shell.cwd.name or str(shell.cwd)
    return f"py-stdio:{name} $ "


def print_result(result: CommandResult, streams: Streams) -> None:
    """Write a command's output to the matching streams."""
    if result.stdout:
        streams.stdout.write(result.stdout)
        if not result.stdout.endswith("\n"):
            streams.stdout.write("\n")
    if result.stderr:
        streams.stderr.write(result.stderr)
    streams.stdout.flush()
    streams.stderr.flush()


def run(shell: Shell | None = None) -> None:
    """Run the interactive REPL on the process's real streams.

    This is the main interactive entrypoint.  It handles:
    - Shell creation (a snapshot of the real environment).
    - The read-eval-print loop.
    - Graceful handling of Ctrl+C and Ctrl+D.
    """
    shell = shell or Shell()
    streams = Streams.from_sys()

    # Wire up tab completion via readline.
    completer = Completer(shell)
    readline.set_completer(completer.complete)
    readline.set_completer_delims(" \t|")
    readline.parse_and_bind("tab: complete")

    streams.out(format_banner())

    try:
        while True:
            try:
                line = input(build_prompt(shell))
            except EOFError:
                # Ctrl+D: graceful exit
                streams.out()
                break

            result = shell.execute(line)
            if result.stdout == Shell.EXIT_SENTINEL:
                break
            print_result(result, streams)

    except KeyboardInterrupt:
        # Ctrl+C: graceful exit
        streams.out("\nInterrupted.")

    streams.out("Bye.")
