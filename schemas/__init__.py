"""
Pydantic schemas for validation and serialization.

Schemas:
    normalized: Catalog records (StationRecord, VariableRecord) and the
        ReadingCreate upsert payload
    provider: Normalized provider payloads (Observation, AQIReading)
    run: Ephemeral run results (StationOutcome, RunSummary)

Usage:
    from schemas.normalized import ReadingCreate
    from schemas.run import RunSummary

Example:
    reading = ReadingCreate(
        station_id=1,
        variable_id=2,
        observed_at="2024-06-01T15:00:00Z",
        value_num=104.0
    )
"""

__all__ = [
    "StationRecord",
    "VariableRecord",
    "ReadingCreate",
    "Observation",
    "AQIReading",
    "OutcomeError",
    "StationOutcome",
    "RunSummary",
]
