"""Command-line interface for termengine.

Provides the main entry point for serving a session over HTTP, running a
single line, or a local read-eval-print loop on stdin.
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path

logger = logging.getLogger(__name__)


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        prog="termengine",
        description="Pluggable terminal command engine",
    )
    parser.add_argument(
        "-c", "--config",
        type=Path,
        default=None,
        help="Path to YAML configuration file (default: config/termengine.yaml)",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable debug logging",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    subparsers.add_parser("serve", help="Serve a session over the HTTP endpoint")

    run_parser = subparsers.add_parser("run", help="Execute one line and print the screen")
    run_parser.add_argument("line", type=str, help="Input line, quoted as one argument")

    subparsers.add_parser("repl", help="Read lines from stdin and execute them")

    return parser.parse_args(argv)


async def _run_line(settings, line: str) -> int:
    """Execute ``line`` in a fresh session and print its output."""
    from termengine.engine.session import EngineSession

    session = EngineSession(settings)
    await session.start()
    result = await session.handle_line(line)
    print(session.sink.get_screen_content())
    return result.exit_code


async def _repl(settings) -> None:
    """Execute stdin lines until EOF; lines answer pending prompts too."""
    from termengine.engine.session import EngineSession

    session = EngineSession(settings)
    await session.start()
    printed = 0
    running: asyncio.Task | None = None

    while True:
        line = await asyncio.to_thread(sys.stdin.readline)
        if not line:
            break
        line = line.rstrip("\n")
        if running is not None and not running.done():
            await session.handle_line(line)
        else:
            running = asyncio.create_task(session.handle_line(line))
        # Let the command run until it finishes or waits for input
        while not running.done() and not session.reader.is_active:
            await asyncio.sleep(0.01)

        lines = session.sink.lines
        for text in lines[printed:]:
            print(text)
        printed = len(lines)
        if session.reader.active_request is not None:
            print(session.reader.active_request.prompt, end="", flush=True)

    if running is not None and not running.done():
        session.abort()
        await running


def main(argv: list[str] | None = None) -> None:
    """Main entry point for the termengine CLI."""
    args = parse_args(argv)

    if args.command is None:
        parse_args(["--help"])
        return

    from termengine.config.settings import load_settings
    from termengine.utils.logging import setup_logging

    settings = load_settings(args.config)

    if args.verbose:
        settings.logging.level = "DEBUG"

    setup_logging(settings.logging)

    if args.command == "serve":
        logger.info("Starting endpoint server")
        from termengine.endpoint.server import main as serve

        serve(settings)

    elif args.command == "run":
        sys.exit(asyncio.run(_run_line(settings, args.line)))

    elif args.command == "repl":
        asyncio.run(_repl(settings))


if __name__ == "__main__":
    main()
