"""
Script to run the ETL pipeline once over all catalog stations
"""

import asyncio
import sys
import os
import logging

# Add current directory to path to allow imports from core, models, etc.
sys.path.append(os.getcwd())

from core.database import create_session_factory
from core.exceptions import CatalogUnavailable
from core.logging import setup_logging
from ingestion.runner import ETLOrchestrator

logger = logging.getLogger(__name__)


async def run_etl() -> int:
    """Run ETL once. Returns the process exit code."""
    engine, session_factory = create_session_factory()

    try:
        orchestrator = ETLOrchestrator.from_settings(session_factory)
        summary = await orchestrator.run_once()

        for outcome in summary.failures:
            reasons = "; ".join(f"{e.stage}: {e.reason}" for e in outcome.errors)
            logger.warning(f"Station {outcome.station_name} failed ({reasons})")

        logger.info("ETL run completed")
        return 0

    except CatalogUnavailable as e:
        logger.error(f"ETL pipeline error: {e}")
        return 1
    finally:
        await engine.dispose()


if __name__ == "__main__":
    setup_logging()
    sys.exit(asyncio.run(run_etl()))
