"""
Write readings with upsert logic (idempotency)
"""

from typing import List, Optional
from datetime import datetime
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.sql import func
from pydantic import ValidationError as PydanticValidationError
from models.reading import Reading
from schemas.normalized import ReadingCreate
from core.exceptions import UpsertError, ValidationError
import logging

logger = logging.getLogger(__name__)

CONFLICT_KEY = ["station_id", "variable_id", "observed_at"]


class ReadingStore:
    """
    Write readings with idempotent upsert operations.

    Ensures:
    - One row per (station, variable, observed_at), however often a run repeats
    - A repeated key overwrites the value fields and refreshes created_at
    - Each write is its own transaction: a failed write leaves earlier
      readings of the run committed
    """

    def __init__(self, db_session: AsyncSession):
        self.db = db_session

    def _insert(self):
        """INSERT construct for the bound dialect (PostgreSQL, or SQLite in tests)"""
        dialect = self.db.get_bind().dialect.name
        if dialect == "sqlite":
            return sqlite.insert(Reading)
        return postgresql.insert(Reading)

    async def upsert_reading(
        self,
        station_id: int,
        variable_id: int,
        observed_at: datetime,
        value_num: Optional[float] = None,
        value_text: Optional[str] = None
    ) -> int:
        """
        INSERT ... ON CONFLICT (station_id, variable_id, observed_at) DO UPDATE.

        Returns:
            The reading id (same id for a repeated key)

        Raises:
            ValidationError: Incomplete key or no value at all
            UpsertError: The database rejected the write
        """
        try:
            reading = ReadingCreate(
                station_id=station_id,
                variable_id=variable_id,
                observed_at=observed_at,
                value_num=value_num,
                value_text=value_text
            )
        except PydanticValidationError as e:
            raise ValidationError(
                "Invalid reading",
                context={
                    "station_id": station_id,
                    "variable_id": variable_id,
                    "observed_at": observed_at
                },
                original_exception=e
            )

        return await self.upsert(reading)

    async def upsert(self, reading: ReadingCreate) -> int:
        stmt = self._insert().values(**reading.model_dump())
        stmt = stmt.on_conflict_do_update(
            index_elements=CONFLICT_KEY,
            set_={
                "value_num": stmt.excluded.value_num,
                "value_text": stmt.excluded.value_text,
                "created_at": func.now(),
            }
        ).returning(Reading.id)

        try:
            result = await self.db.execute(stmt)
            reading_id = result.scalar_one()
            await self.db.commit()
        except Exception as e:
            await self.db.rollback()
            raise UpsertError(
                "Failed to upsert reading",
                context={
                    "station_id": reading.station_id,
                    "variable_id": reading.variable_id,
                    "observed_at": reading.observed_at.isoformat(),
                    "operation": "UPSERT",
                    "table_name": "reading"
                },
                original_exception=e
            )

        logger.debug(
            f"Upserted reading {reading_id} "
            f"(station={reading.station_id}, variable={reading.variable_id}, "
            f"observed_at={reading.observed_at.isoformat()})"
        )
        return reading_id

    async def load(self, readings: List[ReadingCreate]) -> int:
        """
        Upsert a list of readings one by one.

        Returns:
            Number of readings written
        """
        if not readings:
            return 0

        loaded_count = 0
        for reading in readings:
            await self.upsert(reading)
            loaded_count += 1

        logger.info(f"Loaded {loaded_count} readings")
        return loaded_count
