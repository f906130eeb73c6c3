# ============================================================================
# File: ingestion/runner.py
# Description: ETL orchestrator with per-station failure isolation
# ============================================================================
"""
ETL Orchestrator - walks the station catalog and ingests each station.

This module provides:
- One catalog load per run (the only fatal failure)
- Provider routing per station (weather always, air quality for ZIP stations)
- Per-station, per-stage failure isolation
- Idempotent writes through the reading store
- A run summary with failures attributed to stations
- A guard against overlapping runs
"""

from typing import Awaitable, Callable, Dict, List, Optional, Tuple
from datetime import datetime, timezone
from sqlalchemy.ext.asyncio import async_sessionmaker
import asyncio
import logging
import time
import uuid

from ingestion.catalog import StationCatalog
from ingestion.extractors.airnow_client import AirNowClient
from ingestion.extractors.nws_client import NWSClient
from ingestion.loaders.reading_store import ReadingStore
from ingestion.transformers.normalizer import is_area_code
from models.base import ETLStatus, VariableCode
from schemas.normalized import StationRecord
from schemas.run import RunSummary, StationOutcome
from core.exceptions import (
    CatalogUnavailable,
    ETLException,
    RunInProgressError,
    ValidationError,
)

logger = logging.getLogger(__name__)

WEATHER_STAGE = "weather"
AIR_QUALITY_STAGE = "air_quality"

StageHandler = Callable[[StationRecord, Dict[str, int], ReadingStore, StationOutcome], Awaitable[None]]


class ETLOrchestrator:
    """
    ETL Orchestrator

    Responsibilities:
    - Load the station list and variable map once per run
    - Dispatch each station to the provider clients that apply to it
    - Keep one station's failure from affecting any other station
    - Write every value obtained through the upsert contract
    - Report an aggregate run summary

    Stations are processed sequentially in catalog order. Nothing is retried
    within a run; the next scheduled run picks up whatever failed.
    """

    def __init__(
        self,
        session_factory: async_sessionmaker,
        weather_client: NWSClient,
        air_quality_client: AirNowClient
    ):
        self.session_factory = session_factory
        self.weather_client = weather_client
        self.air_quality_client = air_quality_client
        self._run_lock = asyncio.Lock()

    @classmethod
    def from_settings(cls, session_factory: async_sessionmaker) -> "ETLOrchestrator":
        """Build the orchestrator with provider clients configured from settings"""
        return cls(
            session_factory=session_factory,
            weather_client=NWSClient(),
            air_quality_client=AirNowClient()
        )

    @property
    def is_running(self) -> bool:
        return self._run_lock.locked()

    def providers_for(self, station: StationRecord) -> List[str]:
        """
        Stages that apply to a station.

        Weather applies to every station (it only needs coordinates); air
        quality only when the external id is a 5-digit ZIP code.
        """
        stages = [WEATHER_STAGE]
        if is_area_code(station.external_id):
            stages.append(AIR_QUALITY_STAGE)
        return stages

    async def run_once(self) -> RunSummary:
        """
        Run the pipeline once over every catalog station.

        Returns:
            RunSummary with per-station outcomes

        Raises:
            CatalogUnavailable: Stations or variables could not be loaded
            RunInProgressError: Another run has not finished yet
        """
        if self._run_lock.locked():
            raise RunInProgressError("An ETL run is already in progress")

        async with self._run_lock:
            return await self._run()

    async def _run(self) -> RunSummary:
        run_id = uuid.uuid4().hex[:12]
        started_at = datetime.now(timezone.utc)
        start_time = time.perf_counter()

        logger.info(f"Starting ETL run {run_id}")

        async with self.session_factory() as session:
            # --------------------------------------------------
            # PHASE 1: LOAD CATALOG
            # --------------------------------------------------
            catalog = StationCatalog(session)
            try:
                stations = await catalog.list_stations()
                variable_map = await catalog.variable_map()
            except CatalogUnavailable as e:
                logger.error(
                    f"ETL run {run_id} failed: {e.message}",
                    extra={"error_context": e.to_dict()}
                )
                raise

            logger.info(f"Found {len(stations)} stations to process")

            # --------------------------------------------------
            # PHASE 2: PER-STATION DISPATCH
            # --------------------------------------------------
            store = ReadingStore(session)
            outcomes = []
            for station in stations:
                outcomes.append(await self.process_station(station, variable_map, store))

        # --------------------------------------------------
        # PHASE 3: SUMMARIZE
        # --------------------------------------------------
        completed_at = datetime.now(timezone.utc)
        failed = sum(1 for outcome in outcomes if outcome.failed)

        summary = RunSummary(
            run_id=run_id,
            status=ETLStatus.SUCCESS if failed == 0 else ETLStatus.PARTIAL,
            started_at=started_at,
            completed_at=completed_at,
            duration_seconds=time.perf_counter() - start_time,
            stations_total=len(stations),
            stations_processed=len(outcomes),
            readings_written=sum(outcome.readings_written for outcome in outcomes),
            outcomes=outcomes
        )

        logger.info(summary.log_line())
        for outcome in summary.failures:
            for error in outcome.errors:
                logger.warning(
                    f"  failed: {outcome.station_name} (id={outcome.station_id}) "
                    f"{error.stage}: {error.reason}: {error.message}"
                )

        return summary

    async def process_station(
        self,
        station: StationRecord,
        variable_map: Dict[str, int],
        store: ReadingStore
    ) -> StationOutcome:
        """
        Ingest one station. Never raises: every failure lands on the outcome.
        """
        outcome = StationOutcome(
            station_id=station.id,
            station_name=station.name,
            external_id=station.external_id
        )
        logger.info(f"Processing {station.name} (id={station.id})...")

        if not station.has_valid_coordinates():
            error = ValidationError(
                "Station coordinates out of range",
                context={
                    "station_id": station.id,
                    "latitude": station.latitude,
                    "longitude": station.longitude
                }
            )
            logger.error(f"  ✗ {station.name}: {error.message}")
            outcome.add_error("station", error)
            return outcome

        for stage, handler in self._stages_for(station):
            outcome.stages.append(stage)
            try:
                await handler(station, variable_map, store, outcome)
            except ETLException as e:
                logger.error(
                    f"  ✗ {station.name} {stage} failed: {e.message}",
                    extra={"error_context": e.to_dict()}
                )
                outcome.add_error(stage, e)
            except Exception as e:
                logger.exception(f"  ✗ {station.name} {stage} failed unexpectedly")
                outcome.add_error(stage, e)

        return outcome

    def _stages_for(self, station: StationRecord) -> List[Tuple[str, StageHandler]]:
        handlers = {
            WEATHER_STAGE: self._ingest_weather,
            AIR_QUALITY_STAGE: self._ingest_air_quality,
        }
        return [(stage, handlers[stage]) for stage in self.providers_for(station)]

    async def _ingest_weather(
        self,
        station: StationRecord,
        variable_map: Dict[str, int],
        store: ReadingStore,
        outcome: StationOutcome
    ):
        result = await self.weather_client.fetch_latest_by_coordinate(station.latitude, station.longitude)

        if result.is_failed:
            raise result.error
        if result.is_no_data:
            logger.info(f"  No temperature data available: {result.reason}")
            outcome.no_data.append(WEATHER_STAGE)
            return

        observation = result.value
        if not observation.has_values:
            logger.info("  No temperature data available: observation has no values")
            outcome.no_data.append(WEATHER_STAGE)
            return

        # A failed TEMP write must not cost the station its heat index
        values = [
            (VariableCode.TEMP, "Temperature", observation.temperature),
            (VariableCode.HEAT_INDEX, "Heat Index", observation.heat_index),
        ]
        for code, label, value in values:
            try:
                if await self._write(store, station, variable_map, code,
                                     observation.observed_at, value, outcome=outcome):
                    logger.info(f"  ✓ {label}: {value:.1f}°F")
            except ETLException as e:
                logger.error(
                    f"  ✗ {station.name} {code.value} write failed: {e.message}",
                    extra={"error_context": e.to_dict()}
                )
                outcome.add_error(WEATHER_STAGE, e)

    async def _ingest_air_quality(
        self,
        station: StationRecord,
        variable_map: Dict[str, int],
        store: ReadingStore,
        outcome: StationOutcome
    ):
        result = await self.air_quality_client.fetch_current_by_area_code(station.external_id)

        if result.is_failed:
            raise result.error
        if result.is_no_data:
            logger.info(f"  No AQI data available: {result.reason}")
            outcome.no_data.append(AIR_QUALITY_STAGE)
            return

        reading = result.value
        if await self._write(store, station, variable_map, VariableCode.AQI,
                             reading.observed_at, reading.aqi, reading.category, outcome=outcome):
            logger.info(f"  ✓ AQI: {reading.aqi} ({reading.category})")

    async def _write(
        self,
        store: ReadingStore,
        station: StationRecord,
        variable_map: Dict[str, int],
        code: VariableCode,
        observed_at: datetime,
        value_num: Optional[float],
        value_text: Optional[str] = None,
        outcome: Optional[StationOutcome] = None
    ) -> bool:
        """Upsert one value. Returns False when there was nothing to write."""
        if value_num is None and value_text is None:
            return False

        variable_id = variable_map.get(code.value)
        if variable_id is None:
            logger.warning(f"  Variable {code.value} is not in the catalog, skipping")
            return False

        await store.upsert_reading(station.id, variable_id, observed_at, value_num, value_text)
        if outcome is not None:
            outcome.readings_written += 1
        return True
