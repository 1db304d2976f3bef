"""Relay agent entrypoint."""

from __future__ import annotations

import argparse
import asyncio
import logging
import signal
import sys
from pathlib import Path
from typing import Optional, Sequence

import structlog

from relay_agent.config import Settings, get_settings
from relay_agent.pipeline.decision_log import DecisionLog, close_decision_log
from relay_agent.service import DecisionService, LoggingDispatcher, TerminalMonitor


def setup_logging(level: str) -> None:
    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.format_exc_info,
            (
                structlog.dev.ConsoleRenderer()
                if sys.stdout.isatty()
                else structlog.processors.JSONRenderer()
            ),
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stderr,
        level=getattr(logging, level.upper(), logging.INFO),
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="relay-agent",
        description="Classify assistant CLI prompts and route instructions",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    classify = sub.add_parser("classify", help="Classify a captured prompt line")
    classify.add_argument("text")

    route = sub.add_parser("route", help="Route a free-text instruction")
    route.add_argument("text")

    watch = sub.add_parser("watch", help="Poll a file as the terminal capture")
    watch.add_argument("path", type=Path)
    watch.add_argument("--interval", type=float, default=None)
    return parser


async def _classify(settings: Settings, text: str) -> int:
    service = DecisionService(settings, LoggingDispatcher(), decision_log=DecisionLog())
    decision = await service.handle_terminal_output(text)
    print(decision if decision is not None else "not-a-prompt")
    return 0


async def _route(settings: Settings, text: str) -> int:
    service = DecisionService(settings, LoggingDispatcher(), decision_log=DecisionLog())
    target = await service.handle_instruction(text)
    print(target.value)
    return 0


async def _watch(settings: Settings, path: Path, interval: Optional[float]) -> int:
    logger = structlog.get_logger()
    service = DecisionService(settings, LoggingDispatcher())

    def capture() -> str:
        return path.read_text(encoding="utf-8", errors="replace")

    monitor = TerminalMonitor(
        service, capture, interval=interval or settings.poll_interval_seconds
    )

    loop = asyncio.get_running_loop()
    for sig in (signal.SIGTERM, signal.SIGINT):
        loop.add_signal_handler(sig, monitor.stop)

    logger.info("Watching terminal capture", path=str(path), version=settings.service_version)
    try:
        await monitor.run()
    finally:
        close_decision_log(service.decision_log)
    return 0


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    settings = get_settings()
    setup_logging(settings.log_level)

    if args.command == "classify":
        return asyncio.run(_classify(settings, args.text))
    if args.command == "route":
        return asyncio.run(_route(settings, args.text))
    return asyncio.run(_watch(settings, args.path, args.interval))


if __name__ == "__main__":
    sys.exit(main())
