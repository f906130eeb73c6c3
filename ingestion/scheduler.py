import logging
from datetime import datetime
from typing import Optional
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger
from core.config import settings
from core.exceptions import CatalogUnavailable, RunInProgressError
from ingestion.runner import ETLOrchestrator
from schemas.run import RunSummary

logger = logging.getLogger(__name__)

JOB_ID = "etl_job"


class ETLScheduler:
    """
    Triggers orchestrator runs at a fixed cadence, and once at startup.

    The orchestrator is built by the caller and handed in; the scheduler
    holds no pipeline state of its own.
    """

    def __init__(
        self,
        orchestrator: ETLOrchestrator,
        interval_minutes: Optional[int] = None,
        run_on_startup: Optional[bool] = None
    ):
        self.scheduler = AsyncIOScheduler()
        self.orchestrator = orchestrator
        self.interval_minutes = interval_minutes or settings.ETL_INTERVAL_MINUTES
        self.run_on_startup = settings.ETL_RUN_ON_STARTUP if run_on_startup is None else run_on_startup

    async def run_etl_job(self) -> Optional[RunSummary]:
        """Job to run the ETL pipeline. Never raises."""
        logger.info("Scheduler: Starting ETL job")
        try:
            summary = await self.orchestrator.run_once()
            logger.info(f"Scheduler: ETL job completed ({summary.status.value})")
            return summary
        except RunInProgressError:
            logger.warning("Scheduler: previous ETL run still in progress, skipping")
        except CatalogUnavailable as e:
            logger.error(f"Scheduler: ETL job failed - {e}")
        except Exception:
            logger.exception("Scheduler: ETL job failed unexpectedly")
        return None

    def start(self):
        """Start the scheduler. Must be called from a running event loop."""
        job_options = {}
        if self.run_on_startup:
            job_options["next_run_time"] = datetime.now()

        self.scheduler.add_job(
            self.run_etl_job,
            trigger=IntervalTrigger(minutes=self.interval_minutes),
            id=JOB_ID,
            replace_existing=True,
            max_instances=1,
            coalesce=True,
            **job_options
        )
        self.scheduler.start()
        logger.info(f"ETL Scheduler started (every {self.interval_minutes} minutes)")

    def stop(self):
        if self.scheduler.running:
            self.scheduler.shutdown(wait=False)
        logger.info("ETL Scheduler stopped")
