"""Demo programs — small classics built from streams, args, and env.

Each program is a plain function that receives a ``ProgramContext``
(its invocation, its three streams, its own copy of the environment,
a logger, and a working directory) and returns an exit status:

- ``0`` — success.
- ``1`` — the program ran but something failed (missing file, no match).
- ``2`` — usage error (wrong arguments).

Because programs only ever touch the streams they are handed, the same
``cp`` runs against the terminal from ``py-stdio run cp a b``, against
``StringIO`` buffers in a lesson, and inside a shell pipeline.

Programs:
    - ``cp`` — the few-lines copy utility; ``-`` means stdin/stdout.
    - ``cat`` — concatenate files (or stdin) to stdout.
    - ``echo`` — print the arguments.
    - ``args`` — show how argv was split.
    - ``printenv`` — the classic loop over environment variables.
    - ``showconfig`` — layered configuration from file, env, and flags.
    - ``wc`` — count lines, words, and characters on stdin.
    - ``grep`` — keep stdin lines containing a pattern.
"""

from __future__ import annotations

import contextlib
import json
from collections.abc import Callable, Iterator
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, TextIO, TypeAlias

from py_stdio.args import Invocation, program_name
from py_stdio.config import ConfigError, LayeredConfig
from py_stdio.env import Environment
from py_stdio.logging import Logger, level_from_env
from py_stdio.streams import Streams, copy_stream, read_lines

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_USAGE = 2

_STDIO_NAME = "-"
_CP_ARITY = 2
_SHOWCONFIG_MAX_ARGS = 2


@dataclass
class ProgramContext:
    """Everything a running program can see of the outside world.

    Attributes:
        invocation: Program name and arguments.
        streams: The program's stdin, stdout, and stderr.
        env: The program's own copy of the environment.
        logger: Diagnostics sink, echoing to stderr.
        cwd: Directory that relative paths are resolved against.

    """

    invocation: Invocation
    streams: Streams
    env: Environment = field(default_factory=Environment)
    logger: Logger | None = None
    cwd: Path = field(default_factory=Path.cwd)

    def __post_init__(self) -> None:
        """Give the program a stderr logger if none was supplied."""
        if self.logger is None:
            self.logger = Logger(stream=self.streams.stderr, min_level=level_from_env(self.env))

    @property
    def log(self) -> Logger:
        """Return the logger (always set after construction)."""
        assert self.logger is not None  # noqa: S101
        return self.logger

    @property
    def name(self) -> str:
        """Return the program's short name."""
        return program_name(self.invocation.program)

    def resolve(self, path: str) -> Path:
        """Resolve *path* against the working directory."""
        return self.cwd / Path(path).expanduser()

    def fail(self, message: str, status: int = EXIT_FAILURE) -> int:
        """Log *message* as an error and return *status*."""
        self.log.error(message, source=self.name)
        return status

    def usage(self, text: str) -> int:
        """Print a usage line on stderr and return the usage status."""
        self.streams.err(f"usage: {self.name} {text}")
        return EXIT_USAGE


Program: TypeAlias = Callable[[ProgramContext], int]


def _text_mode(*, raw: bool) -> dict[str, Any]:
    """Return ``open()`` keywords; *raw* passes undecodable bytes and line ends through."""
    if raw:
        return {"encoding": "utf-8", "errors": "surrogateescape", "newline": ""}
    return {"encoding": "utf-8"}


def _same_file(first: Path, second: Path) -> bool:
    try:
        return first.samefile(second)
    except OSError:
        return False


@contextlib.contextmanager
def _open_input(ctx: ProgramContext, name: str, *, raw: bool = False) -> Iterator[TextIO]:
    if name == _STDIO_NAME:
        yield ctx.streams.stdin
        return
    with ctx.resolve(name).open(**_text_mode(raw=raw)) as f:
        yield f


@contextlib.contextmanager
def _open_output(ctx: ProgramContext, name: str, *, raw: bool = False) -> Iterator[TextIO]:
    if name == _STDIO_NAME:
        yield ctx.streams.stdout
        return
    with ctx.resolve(name).open("w", **_text_mode(raw=raw)) as f:
        yield f


def cp(ctx: ProgramContext) -> int:
    """Copy SRC to DST ('-' means stdin or stdout)."""
    paths = ctx.invocation.positionals()
    if len(paths) != _CP_ARITY:
        return ctx.usage("SRC DST")
    source, dest = paths

    if dest != _STDIO_NAME and ctx.resolve(dest).is_dir():
        if source == _STDIO_NAME:
            return ctx.fail(f"cannot copy stdin into directory '{dest}'")
        dest = str(Path(dest) / Path(source).name)

    # Opening DST for writing would truncate SRC before it is read.
    # samefile() also catches symlinks and hard links.
    file_to_file = _STDIO_NAME not in (source, dest)
    if file_to_file and _same_file(ctx.resolve(source), ctx.resolve(dest)):
        return ctx.fail(f"'{source}' and '{dest}' are the same file")

    try:
        with (
            _open_input(ctx, source, raw=file_to_file) as src,
            _open_output(ctx, dest, raw=file_to_file) as dst,
        ):
            copied = copy_stream(src, dst)
    except FileNotFoundError as e:
        return ctx.fail(f"cannot open '{e.filename}': No such file or directory")
    except OSError as e:
        return ctx.fail(f"cannot copy '{source}' to '{dest}': {e.strerror or e}")
    except UnicodeDecodeError:
        return ctx.fail(f"cannot copy '{source}' to '{dest}': not UTF-8 text")
    ctx.log.info(f"copied {copied} characters from {source} to {dest}", source=ctx.name)
    return EXIT_OK


def cat(ctx: ProgramContext) -> int:
    """Concatenate files (or stdin) to stdout; -n numbers lines."""
    args = ctx.invocation.args
    flags = args[: args.index("--")] if "--" in args else args
    number = "-n" in flags
    names = ctx.invocation.positionals()
    # After "--", "-n" is a file name.
    for _ in range(flags.count("-n")):
        names.remove("-n")
    names = names or [_STDIO_NAME]

    status = EXIT_OK
    line_no = 0
    for name in names:
        try:
            with _open_input(ctx, name) as src:
                if not number:
                    copy_stream(src, ctx.streams.stdout)
                    continue
                for line in read_lines(src):
                    line_no += 1
                    ctx.streams.out(f"{line_no:>6}\t{line}")
        except OSError as e:
            status = ctx.fail(f"{name}: {e.strerror or e}")
        except UnicodeDecodeError:
            status = ctx.fail(f"{name}: not UTF-8 text")
    return status


def echo(ctx: ProgramContext) -> int:
    """Print the arguments separated by spaces; -n drops the newline."""
    args = list(ctx.invocation.args)
    newline = True
    if args and args[0] == "-n":
        newline = False
        args = args[1:]
    ctx.streams.stdout.write(" ".join(args) + ("\n" if newline else ""))
    return EXIT_OK


def show_args(ctx: ProgramContext) -> int:
    """Show the program name, argc, each argument, and parsed options."""
    inv = ctx.invocation
    ctx.streams.out(f"argv[0] = {inv.program!r}  (program name, not counted)")
    ctx.streams.out(f"argc = {inv.argc}")
    for index, arg in enumerate(inv.args, start=1):
        ctx.streams.out(f"argv[{index}] = {arg!r}")
    for name, value in sorted(inv.options().items()):
        ctx.streams.out(f"option --{name} = {value!r}")
    for index, arg in enumerate(inv.positionals()):
        ctx.streams.out(f"positional {index} = {arg!r}")
    return EXIT_OK


def printenv(ctx: ProgramContext) -> int:
    """Print every NAME=value, or the values of the named variables."""
    names = ctx.invocation.positionals()
    if not names:
        for key, value in ctx.env.items():
            ctx.streams.out(f"{key}={value}")
        return EXIT_OK

    status = EXIT_OK
    for name in names:
        value = ctx.env.get(name)
        if value is None:
            ctx.log.debug(f"{name} is not set", source=ctx.name)
            status = EXIT_FAILURE
            continue
        ctx.streams.out(value)
    return status


def _render(value: Any) -> str:
    if isinstance(value, str):
        return value
    return json.dumps(value, default=str)


def showconfig(ctx: ProgramContext) -> int:
    """Show layered config: FILE [--prefix=P] [--set=a.b=v ...] [KEY]."""
    inv = ctx.invocation
    positional = inv.positionals()
    if not positional or len(positional) > _SHOWCONFIG_MAX_ARGS:
        return ctx.usage("FILE [--prefix=PREFIX] [--set=section.key=value ...] [KEY]")

    config = LayeredConfig()
    try:
        config.add_file(ctx.resolve(positional[0]))
        prefix = inv.options().get("prefix")
        if prefix:
            config.add_env(ctx.env, prefix)
        for override in inv.option_values("set"):
            config.set_override(override)
    except ConfigError as e:
        return ctx.fail(str(e))
    ctx.log.debug(f"layers: {', '.join(config.sources)}", source=ctx.name)

    if len(positional) == _SHOWCONFIG_MAX_ARGS:
        key = positional[1]
        value = config.get(key)
        if value is None:
            return ctx.fail(f"no such key '{key}'")
        ctx.streams.out(_render(value))
        return EXIT_OK

    for key, value in config.flatten():
        ctx.streams.out(f"{key} = {_render(value)}")
    return EXIT_OK


def wc(ctx: ProgramContext) -> int:
    """Count lines, words, and characters on stdin."""
    text = ctx.streams.stdin.read()
    lines = text.count("\n")
    ctx.streams.out(f"{lines} {len(text.split())} {len(text)}")
    return EXIT_OK


def grep(ctx: ProgramContext) -> int:
    """Copy stdin lines containing PATTERN; exit 1 if none match."""
    positional = ctx.invocation.positionals()
    if len(positional) != 1:
        return ctx.usage("PATTERN")
    pattern = positional[0]
    matched = False
    for line in read_lines(ctx.streams.stdin):
        if pattern in line:
            ctx.streams.out(line)
            matched = True
    return EXIT_OK if matched else EXIT_FAILURE


REGISTRY: dict[str, Program] = {
    "args": show_args,
    "cat": cat,
    "cp": cp,
    "echo": echo,
    "grep": grep,
    "printenv": printenv,
    "showconfig": showconfig,
    "wc": wc,
}


def describe(name: str) -> str:
    """Return the one-line description of a registered program."""
    doc = REGISTRY[name].__doc__ or ""
    return doc.strip().splitlines()[0] if doc.strip() else ""


def run_program(name: str, ctx: ProgramContext) -> int:
    """Run the registered program *name* in *ctx*.

    Raises:
        KeyError: If no program has that name.

    """
    program = REGISTRY.get(name)
    if program is None:
        msg = f"Unknown program: {name}"
        raise KeyError(msg)
    return program(ctx)
