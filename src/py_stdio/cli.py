"""Command-line entry point: ``py-stdio``.

Usage::

    py-stdio [--log-level LEVEL] [--env-file PATH] [COMMAND]

Commands:
    - ``learn [LESSON]`` — print a lesson (or list them).
    - ``run PROGRAM [ARGS...]`` — run a demo program on the real streams;
      its exit status becomes ours.
    - ``shell`` — start the interactive REPL (the default).
    - ``web [--port N]`` — start the browser notebook (needs the
      ``web`` extra).

Global options only ever change *our copy* of the environment: the
parent shell that started ``py-stdio`` never sees them.
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from py_stdio import repl
from py_stdio.args import Invocation
from py_stdio.env import Environment
from py_stdio.lessons import TutorialRunner
from py_stdio.logging import LOG_LEVEL_VAR, LogLevel
from py_stdio.programs import EXIT_FAILURE, EXIT_OK, EXIT_USAGE, REGISTRY, ProgramContext
from py_stdio.shell import EXIT_NOT_FOUND, Shell
from py_stdio.streams import Streams

_DEFAULT_PORT = 8080


def build_parser() -> argparse.ArgumentParser:
    """Return the argument parser for ``py-stdio``."""
    parser = argparse.ArgumentParser(
        prog="py-stdio",
        description="Learn standard streams, arguments, environment variables, and config files.",
    )
    parser.add_argument(
        "--log-level",
        choices=[level.name.lower() for level in LogLevel],
        help=f"diagnostics shown on stderr (sets {LOG_LEVEL_VAR})",
    )
    parser.add_argument("--env-file", type=Path, help="load extra variables from a .env file")

    sub = parser.add_subparsers(dest="command")

    learn = sub.add_parser("learn", help="print a lesson, or list lessons")
    learn.add_argument("lesson", nargs="?", help="lesson name, or 'all'")

    run = sub.add_parser("run", help="run a demo program")
    run.add_argument("program", help=f"one of: {', '.join(sorted(REGISTRY))}")
    run.add_argument("args", nargs=argparse.REMAINDER, help="arguments for the program")

    sub.add_parser("shell", help="start the interactive shell")

    web = sub.add_parser("web", help="start the browser notebook")
    web.add_argument("--port", type=int, default=_DEFAULT_PORT)

    return parser


def build_env(ns: argparse.Namespace) -> Environment:
    """Return our environment: the real one plus the global options.

    Raises:
        FileNotFoundError: If ``--env-file`` names a missing file.

    """
    env = Environment.from_os()
    if ns.env_file is not None:
        env.update_from_dotenv(ns.env_file)
    if ns.log_level is not None:
        env.set(LOG_LEVEL_VAR, ns.log_level)
    return env


def _learn(lesson: str | None, streams: Streams) -> int:
    runner = TutorialRunner()
    if lesson is None:
        for name in runner.list_lessons():
            streams.out(f"{name:<12} {runner.title(name)}")
        return EXIT_OK
    try:
        streams.out(runner.run_all() if lesson == "all" else runner.run(lesson))
    except KeyError:
        streams.err(f"py-stdio: unknown lesson '{lesson}'")
        return EXIT_USAGE
    return EXIT_OK


def _run(program: str, args: list[str], env: Environment, streams: Streams) -> int:
    if program not in REGISTRY:
        streams.err(f"py-stdio: unknown program '{program}'")
        return EXIT_NOT_FOUND
    ctx = ProgramContext(
        invocation=Invocation.from_argv([program, *args]),
        streams=streams,
        env=env,
    )
    return REGISTRY[program](ctx)


def _web(port: int, env: Environment, streams: Streams) -> int:
    try:
        from py_stdio.web.app import create_app  # noqa: PLC0415
    except ImportError:
        streams.err("py-stdio: the web notebook needs Flask: pip install py-stdio[web]")
        return EXIT_FAILURE
    create_app(env=env).run(port=port)
    return EXIT_OK


def main(argv: list[str] | None = None) -> int:
    """Parse *argv* (default ``sys.argv[1:]``) and dispatch.

    Returns:
        The process exit status.

    """
    parser = build_parser()
    ns = parser.parse_args(argv)
    try:
        env = build_env(ns)
    except FileNotFoundError as e:
        parser.error(f"--env-file: {e.strerror}: '{e.filename}'")
    streams = Streams.from_sys()

    if ns.command == "learn":
        return _learn(ns.lesson, streams)
    if ns.command == "run":
        return _run(ns.program, ns.args, env, streams)
    if ns.command == "web":
        return _web(ns.port, env, streams)
    repl.run(Shell(env=env))
    return EXIT_OK


def entrypoint() -> None:
    """Console-script wrapper: exit with ``main()``'s status."""
    sys.exit(main())
