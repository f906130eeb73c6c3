"""
Run outcome and summary schemas. Never persisted: they live for one run and
are logged / returned to the caller.
"""

from pydantic import BaseModel, Field
from typing import List, Optional
from datetime import datetime
from models.base import ETLStatus


class OutcomeError(BaseModel):
    """One failed stage of a station"""

    stage: str
    reason: str
    message: str


class StationOutcome(BaseModel):
    """Per-station result of a run"""

    station_id: int
    station_name: str
    external_id: Optional[str] = None
    stages: List[str] = Field(default_factory=list)
    no_data: List[str] = Field(default_factory=list)
    readings_written: int = 0
    errors: List[OutcomeError] = Field(default_factory=list)

    @property
    def failed(self) -> bool:
        return bool(self.errors)

    @property
    def status(self) -> ETLStatus:
        return ETLStatus.FAILED if self.errors else ETLStatus.SUCCESS

    def add_error(self, stage: str, error: Exception):
        self.errors.append(
            OutcomeError(
                stage=stage,
                reason=type(error).__name__,
                message=getattr(error, "message", None) or str(error)
            )
        )


class RunSummary(BaseModel):
    """Aggregate result of one orchestrator run"""

    run_id: str
    status: ETLStatus
    started_at: datetime
    completed_at: datetime
    duration_seconds: float
    stations_total: int
    stations_processed: int
    readings_written: int
    outcomes: List[StationOutcome] = Field(default_factory=list)

    @property
    def failures(self) -> List[StationOutcome]:
        return [outcome for outcome in self.outcomes if outcome.failed]

    def log_line(self) -> str:
        return (
            f"ETL run {self.run_id} {self.status.value}: "
            f"{self.stations_processed}/{self.stations_total} stations, "
            f"{self.readings_written} readings written, "
            f"{len(self.failures)} failures in {self.duration_seconds:.2f}s"
        )
