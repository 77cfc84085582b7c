"""
Command line interface of the time-series store.

Provides:
    fanfare write -d PATH            records from stdin
    fanfare read  -d PATH [--filter PATTERN]
    fanfare infos -d PATH

Exit status is 0 on success, 1 when the store reports an error (printed
to stderr as ``error: <message>``) and 2 for invalid arguments.
"""
from __future__ import annotations

import argparse
import os
import sys
from typing import Optional, TextIO

from fanfare import __version__
from fanfare.application import SeriesDatabase
from fanfare.domain.exceptions import FanfareError
from fanfare.infrastructure.config import Config, get_config
from fanfare.infrastructure.container import Container
from fanfare.infrastructure.tracing import shutdown_tracing
from fanfare.ports.outbound.kv_store import OpenMode


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="fanfare",
        description="Append-only time-series store for named numeric series",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Override the configured log level",
    )
    parser.add_argument(
        "--log-format",
        choices=["console", "json"],
        help="Override the configured log format",
    )

    commands = parser.add_subparsers(dest="command", required=True, metavar="COMMAND")

    write = commands.add_parser("write", help="Append records read from stdin")
    write.add_argument("-d", "--database", required=True, help="Database directory")

    read = commands.add_parser("read", help="Print stored records")
    read.add_argument("-d", "--database", required=True, help="Database directory")
    read.add_argument(
        "--filter",
        help="Series name, or a glob (*, ?, [...]) over series names",
    )

    infos = commands.add_parser("infos", help="Print the schema and number of entries")
    infos.add_argument("-d", "--database", required=True, help="Database directory")

    return parser


def _effective_config(args: argparse.Namespace) -> Config:
    config = get_config()
    overrides = {}
    if args.log_level:
        overrides["log_level"] = args.log_level
    if args.log_format:
        overrides["log_format"] = args.log_format
    if not overrides:
        return config
    return config.model_copy(
        update={"observability": config.observability.model_copy(update=overrides)}
    )


def _write(db: SeriesDatabase, args: argparse.Namespace, stdin: TextIO, stdout: TextIO) -> None:
    db.write(stdin)


def _read(db: SeriesDatabase, args: argparse.Namespace, stdin: TextIO, stdout: TextIO) -> None:
    for line in db.read_lines(args.filter):
        stdout.write(line)
        stdout.write("\n")


def _infos(db: SeriesDatabase, args: argparse.Namespace, stdin: TextIO, stdout: TextIO) -> None:
    for line in db.infos().lines():
        stdout.write(line)
        stdout.write("\n")


_COMMANDS = {
    "write": (_write, OpenMode.READ_WRITE_EXCLUSIVE),
    "read": (_read, OpenMode.READ_ONLY_SHARED),
    "infos": (_infos, OpenMode.READ_ONLY_SHARED),
}


def main(
    argv: Optional[list[str]] = None,
    stdin: Optional[TextIO] = None,
    stdout: Optional[TextIO] = None,
    stderr: Optional[TextIO] = None,
) -> int:
    args = build_parser().parse_args(argv)
    stdin = stdin or sys.stdin
    stdout = stdout or sys.stdout
    stderr = stderr or sys.stderr

    Container.reset()
    container = Container.create(_effective_config(args))
    logger = container.logger.bind(command=args.command, database=args.database)
    handler, mode = _COMMANDS[args.command]

    status = 0
    try:
        timer = container.metrics.command_duration_seconds.labels(command=args.command)
        with container.tracer.start_as_current_span(f"fanfare.{args.command}"):
            with timer.time():
                with SeriesDatabase(
                    args.database, mode, container.config, container.metrics
                ) as db:
                    handler(db, args, stdin, stdout)
                stdout.flush()
    except FanfareError as e:
        logger.error("command_failed", error=str(e), error_type=type(e).__name__)
        print(f"error: {e}", file=stderr)
        status = 1
    except BrokenPipeError:
        logger.warning("output_closed")
        print("error: output stream closed", file=stderr)
        if stdout is sys.stdout:
            # Keep the interpreter's final flush from failing again.
            devnull = os.open(os.devnull, os.O_WRONLY)
            os.dup2(devnull, sys.stdout.fileno())
        status = 1
    finally:
        textfile = container.config.observability.metrics_textfile
        if textfile is not None:
            container.metrics.export(textfile)
        shutdown_tracing()

    return status


if __name__ == "__main__":
    sys.exit(main())
