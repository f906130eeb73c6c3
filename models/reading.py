from sqlalchemy import Column, BigInteger, Integer, Float, Text, DateTime, ForeignKey, Index, UniqueConstraint
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from models.base import Base


class Reading(Base):
    """
    One timestamped observation of a variable at a station.

    Consistency model:
    - (station_id, variable_id, observed_at) is unique
    - a repeated write for the same key overwrites value_num / value_text and
      refreshes created_at (see ReadingStore.upsert_reading)
    - the query layer reads the most recent observed_at per
      (station_id, variable_id), served by idx_reading_latest
    """
    __tablename__ = "reading"

    id = Column(BigInteger().with_variant(Integer, "sqlite"), primary_key=True, autoincrement=True)

    station_id = Column(Integer, ForeignKey("station.id"), nullable=False)
    variable_id = Column(Integer, ForeignKey("variable.id"), nullable=False)
    observed_at = Column(DateTime(timezone=True), nullable=False)

    value_num = Column(Float, nullable=True)
    value_text = Column(Text, nullable=True)

    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    station = relationship("Station", back_populates="readings")
    variable = relationship("Variable", back_populates="readings")

    __table_args__ = (
        UniqueConstraint("station_id", "variable_id", "observed_at", name="uq_reading_station_variable_time"),
        Index("idx_reading_latest", "station_id", "variable_id", "observed_at"),
    )
