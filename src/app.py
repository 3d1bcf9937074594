"""Application entry point for the forgewatch catalog checker."""

from __future__ import annotations

import argparse
import asyncio
import logging
import os
from logging.handlers import RotatingFileHandler
from typing import Optional

from art import tprint
from dotenv import load_dotenv

import settings
from adapters.catalog_client import IgnitionCatalogClient
from adapters.library_inventory import load_inventory
from adapters.log_notifier import LogSinkNotifier
from adapters.sqlite_storage import SQLiteClassificationStore
from client import build_http_client
from core.config import SyncConfig, build_sync_config
from core.orchestrator import PassReport, SyncOrchestrator
from core.reconcile import Reconciler

NAME = "FORGEWATCH"
FONT = "tarty-1"


def _print_banner() -> None:
    tprint(NAME, FONT, space=1)


class _RedactingFormatter(logging.Formatter):
    def __init__(self, secrets: list[str], fmt: str, datefmt: Optional[str] = None) -> None:
        super().__init__(fmt=fmt, datefmt=datefmt)
        self._secrets = [secret for secret in secrets if secret]

    def format(self, record: logging.LogRecord) -> str:
        message = super().format(record)
        for secret in self._secrets:
            message = message.replace(secret, "***")
        return message


def _collect_redaction_values(config: dict) -> list[str]:
    redact_cfg = config.get("redact", {}) if config else {}
    if not redact_cfg.get("enabled", True):
        return []
    values = []
    for name in redact_cfg.get("patterns", ["CF_COOKIE"]):
        value = os.getenv(name)
        if value:
            values.append(value)
    return sorted(set(values), key=len, reverse=True)


def _configure_logging() -> None:
    config = settings.LOGGING or {}
    if not config.get("enabled", True):
        return

    load_dotenv()
    level_name = str(config.get("level", "INFO")).upper()
    level = getattr(logging, level_name, logging.INFO)

    fmt = "%(asctime)s %(levelname)s %(name)s: %(message)s"
    datefmt = "%Y-%m-%d %H:%M:%S"
    secrets = _collect_redaction_values(config)
    formatter = _RedactingFormatter(secrets, fmt=fmt, datefmt=datefmt)

    handlers: list[logging.Handler] = []

    if config.get("console", True):
        console_handler = logging.StreamHandler()
        console_handler.setLevel(level)
        console_handler.setFormatter(formatter)
        handlers.append(console_handler)

    file_cfg = config.get("file", {})
    if file_cfg.get("enabled", False):
        path = file_cfg.get("path", "logs/forgewatch.log")
        if not os.path.isabs(path):
            path = os.path.join(settings.PROJECT_ROOT, path)
        directory = os.path.dirname(path)
        if directory:
            os.makedirs(directory, exist_ok=True)

        max_bytes = int(file_cfg.get("max_bytes", 5 * 1024 * 1024))
        backup_count = int(file_cfg.get("backup_count", 5))
        file_handler = RotatingFileHandler(
            path,
            maxBytes=max_bytes,
            backupCount=backup_count,
            encoding="utf-8",
        )
        file_handler.setLevel(level)
        file_handler.setFormatter(formatter)
        handlers.append(file_handler)

    if not handlers:
        return

    logging.basicConfig(level=level, handlers=handlers)


def _open_store() -> SQLiteClassificationStore:
    store = SQLiteClassificationStore(settings.DB_PATH)
    store.init_db()
    return store


def _load_sync_config() -> SyncConfig:
    return build_sync_config(settings.CATALOG)


async def _sync(store: SQLiteClassificationStore, sync_config: SyncConfig) -> PassReport:
    items = load_inventory(settings.LIBRARY_CSV)
    async with build_http_client(settings.CATALOG_BASE_URL, settings.REQUEST_TIMEOUT) as http:
        catalog = IgnitionCatalogClient(http, page_size=settings.PAGE_SIZE)
        notifier = LogSinkNotifier(sync_config.template)
        reconciler = Reconciler(store, notifier, sync_config)
        orchestrator = SyncOrchestrator(
            catalog,
            reconciler,
            sync_config,
            job_delay=settings.JOB_DELAY_SECONDS,
        )
        return await orchestrator.run_pass(items)


def _run() -> None:
    _print_banner()
    _configure_logging()
    logger = logging.getLogger(__name__)

    sync_config = _load_sync_config()
    logger.info("Checking for new songs...")
    store = _open_store()
    report = asyncio.run(_sync(store, sync_config))
    if report.failed:
        logger.warning("%s candidates could not be checked: %s", len(report.failed), ", ".join(report.failed))


def _show(entry_id: int) -> None:
    record = _open_store().get_record(entry_id)
    if record is None:
        print(f"No record for entry {entry_id}.")
        return
    print(f"{record.id} | {record.artist} - {record.title} ({record.album})")
    print(f"created {record.created_at:%Y-%m-%d} | modified {record.modified_at:%Y-%m-%d}")
    print(record.url)


def _flag_url(url: str) -> None:
    _open_store().mark_problematic(url)
    print(f"Flagged {url}")


def _check_url(url: str) -> None:
    if _open_store().is_problematic(url):
        print(f"{url} is flagged as problematic.")
    else:
        print(f"{url} is not flagged.")


def main(argv: Optional[list[str]] = None) -> None:
    parser = argparse.ArgumentParser(prog="forgewatch")
    subparsers = parser.add_subparsers(dest="command")

    subparsers.add_parser("run", help="Check the catalog for new songs")
    show_parser = subparsers.add_parser("show", help="Show the stored record for an entry id")
    show_parser.add_argument("entry_id", type=int)
    flag_parser = subparsers.add_parser("flag-url", help="Mark a download URL as problematic")
    flag_parser.add_argument("url")
    check_parser = subparsers.add_parser("check-url", help="Check whether a URL is flagged")
    check_parser.add_argument("url")

    args = parser.parse_args(argv)
    if args.command == "show":
        _show(args.entry_id)
        return
    if args.command == "flag-url":
        _flag_url(args.url)
        return
    if args.command == "check-url":
        _check_url(args.url)
        return
    _run()


if __name__ == "__main__":
    main()
