"""Standalone ingestion worker process (``folio-worker``).

Runs the same worker the API can embed, against the same database, until
SIGINT or SIGTERM is received.
"""

from __future__ import annotations

import asyncio
import signal

import structlog

from infrastructure.database.dependencies import (
    close_database_connections,
    get_session_factory,
)
from infrastructure.logging import configure_logging
from infrastructure.settings import get_settings
from ingestion.dependencies.worker import build_ingestion_worker

logger = structlog.get_logger()


async def serve(stop_event: asyncio.Event | None = None) -> None:
    """Run the worker until ``stop_event`` is set.

    Args:
        stop_event: Event that ends the run; when omitted one is created and
            set by SIGINT/SIGTERM
    """
    if stop_event is None:
        stop_event = asyncio.Event()
        loop = asyncio.get_running_loop()
        for sig in (signal.SIGINT, signal.SIGTERM):
            loop.add_signal_handler(sig, stop_event.set)

    worker = build_ingestion_worker(get_session_factory())
    await worker.start()
    try:
        await stop_event.wait()
    finally:
        await worker.stop()
        await close_database_connections()


def run() -> None:
    """Console script entry point."""
    configure_logging(get_settings().log_level)
    logger.info("ingestion_worker_process_starting")
    asyncio.run(serve())
    logger.info("ingestion_worker_process_stopped")
