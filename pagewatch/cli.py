from __future__ import annotations

import argparse
import sqlite3
import sys
import time
from typing import List, Optional

import structlog
from pydantic import ValidationError

from .cache import SqliteCache
from .config import Settings
from .factory import FETCHERS, FetcherFactory
from .logger import setup_logging
from .metrics import MetricsSink
from .scraper import Scraper
from .senders import PrintSender, Sender, TelegramSender
from .targets import load_targets

logger = structlog.get_logger(__name__)


def build_sender(settings: Settings) -> Sender:
    if settings.sender == "telegram":
        if not settings.telegram_chat_id:
            raise ValueError("PAGEWATCH_TELEGRAM_CHAT_ID is required for the telegram sender")
        return TelegramSender(
            token=settings.telegram_bot_token or "",
            chat_id=settings.telegram_chat_id,
            timeout=settings.request_timeout,
        )
    return PrintSender()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="pagewatch",
        description="Watch web pages for new text containing a substring.",
    )
    parser.add_argument("--targets", help="Path to the YAML target list")
    parser.add_argument("--cache", help="Path to the sqlite target cache")
    parser.add_argument("--metrics", help="Path to the metrics CSV file")
    parser.add_argument("--sender", choices=["print", "telegram"], help="Where notifications go")
    parser.add_argument("--fetcher", choices=list(FETCHERS), help="HTTP client used for fetching")
    parser.add_argument("--timeout", type=float, help="Per request timeout in seconds")
    parser.add_argument("--interval", type=float, default=0.0, help="Seconds between runs; 0 runs once")
    parser.add_argument("--log-level", help="DEBUG, INFO, WARNING, ERROR or CRITICAL")
    parser.add_argument("--log-format", choices=["json", "console"], help="Log renderer")
    return parser


def _settings_from_args(args: argparse.Namespace) -> Settings:
    overrides = {
        "targets_file": args.targets,
        "cache_path": args.cache,
        "metrics_path": args.metrics,
        "sender": args.sender,
        "fetcher": args.fetcher,
        "request_timeout": args.timeout,
        "log_level": args.log_level,
        "log_format": args.log_format,
    }
    return Settings(**{k: v for k, v in overrides.items() if v is not None})


def run(settings: Settings, interval: float = 0.0) -> int:
    try:
        targets = load_targets(settings.targets_file)
    except (OSError, ValueError) as exc:
        logger.error("failed to load targets", path=settings.targets_file, error=str(exc))
        return 1

    sender = build_sender(settings)
    fetcher = FetcherFactory(
        timeout=settings.request_timeout,
        user_agent=settings.user_agent,
    ).create_fetcher(settings.fetcher)

    try:
        cache = SqliteCache(settings.cache_path)
    except sqlite3.Error as exc:
        logger.error("failed to open target cache", path=settings.cache_path, error=str(exc))
        return 1

    try:
        with MetricsSink(settings.metrics_path, flush_bytes=settings.metrics_flush_bytes) as metrics:
            scraper = Scraper(
                targets,
                sender=sender,
                cache=cache,
                metrics=metrics,
                fetcher=fetcher,
                address=settings.notify_address,
            )
            while True:
                scraper.run()
                if interval <= 0:
                    break
                time.sleep(interval)
    except KeyboardInterrupt:
        logger.info("interrupted")
    finally:
        cache.close()
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    try:
        settings = _settings_from_args(args)
    except ValidationError as exc:
        print(f"invalid configuration:\n{exc}", file=sys.stderr)
        return 2

    setup_logging(settings.log_level, settings.log_format, settings.log_file)
    try:
        return run(settings, interval=args.interval)
    except ValueError as exc:
        logger.error("pagewatch failed", error=str(exc))
        return 1
