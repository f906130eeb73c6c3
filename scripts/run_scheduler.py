"""
Long-running ingestion service: runs ETL at startup and every
ETL_INTERVAL_MINUTES until interrupted
"""

import asyncio
import signal
import sys
import os
import logging

# Add current directory to path to allow imports from core, models, etc.
sys.path.append(os.getcwd())

from core.config import settings
from core.database import create_session_factory
from core.logging import setup_logging
from ingestion.runner import ETLOrchestrator
from ingestion.scheduler import ETLScheduler

logger = logging.getLogger(__name__)


async def serve():
    logger.info("Starting Phoenix environmental ETL service")
    logger.info(f"Environment: {settings.ENVIRONMENT}")
    logger.info(f"Database: {settings.DATABASE_URL.split('@')[1] if '@' in settings.DATABASE_URL else 'configured'}")

    engine, session_factory = create_session_factory()
    orchestrator = ETLOrchestrator.from_settings(session_factory)
    scheduler = ETLScheduler(orchestrator)

    stop_event = asyncio.Event()
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, stop_event.set)
        except NotImplementedError:
            # Windows event loops have no signal handlers
            pass

    scheduler.start()
    try:
        await stop_event.wait()
    finally:
        logger.info("Shutting down Phoenix environmental ETL service")
        scheduler.stop()
        await engine.dispose()


if __name__ == "__main__":
    setup_logging()
    try:
        asyncio.run(serve())
    except KeyboardInterrupt:
        pass
