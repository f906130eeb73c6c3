"""
ETL pipeline components for environmental observation ingestion.

Modules:
    base: Provider client base class (bounded HTTP, error mapping)
    result: FetchResult, the ok / no data / failed result of a provider call
    catalog: Station catalog (station list, variable map, seeding)
    runner: ETL orchestrator (routing, isolation, run summary)
    scheduler: APScheduler integration for recurring runs

Subpackages:
    extractors: Provider clients (NWS weather, AirNow air quality)
    transformers: Unit and geo normalization
    loaders: Reading store with idempotent upserts

Architecture:
    Each run follows the same path:

    1. Load catalog - stations and variables, once per run
    2. Dispatch - per station, weather always and air quality for ZIP stations
    3. Normalize - °F temperatures, worst-pollutant AQI, UTC timestamps
    4. Load - upsert keyed by (station, variable, observed_at)

    A failing station is recorded and skipped; only a catalog failure
    aborts the run.

Example:
    engine, session_factory = create_session_factory()
    orchestrator = ETLOrchestrator.from_settings(session_factory)

    summary = await orchestrator.run_once()
    print(summary.log_line())
"""

__all__ = [
    "ProviderClient",
    "FetchResult",
    "FetchStatus",
    "StationCatalog",
    "ETLOrchestrator",
    "ETLScheduler",
    "NWSClient",
    "AirNowClient",
    "ReadingStore",
]
