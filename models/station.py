from sqlalchemy import Column, Integer, String, Float, ForeignKey, Index
from sqlalchemy.orm import relationship
from models.base import Base


class Source(Base):
    """Owner/provider of a group of stations (e.g. "NWS", "AirNow")."""
    __tablename__ = "source"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(100), nullable=False, unique=True)

    stations = relationship("Station", back_populates="source")


class Station(Base):
    """
    A monitoring point.

    external_id is the provider-facing identifier. For stations that can be
    looked up on AirNow it is a 5-digit ZIP code; anything else only gets
    weather data.
    """
    __tablename__ = "station"

    id = Column(Integer, primary_key=True, autoincrement=True)
    external_id = Column(String(100), nullable=True, index=True)
    name = Column(String(200), nullable=False)

    # Signed decimal degrees
    latitude = Column(Float, nullable=False)
    longitude = Column(Float, nullable=False)

    source_id = Column(Integer, ForeignKey("source.id"), nullable=True)

    source = relationship("Source", back_populates="stations")
    readings = relationship("Reading", back_populates="station")

    __table_args__ = (
        Index("idx_station_name", "name"),
    )
