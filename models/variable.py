from sqlalchemy import Column, Integer, String
from sqlalchemy.orm import relationship
from models.base import Base


class Variable(Base):
    """
    A typed measurement kind. code is unique and stable across runs; it is
    what normalized readings are joined on.
    """
    __tablename__ = "variable"

    id = Column(Integer, primary_key=True, autoincrement=True)
    code = Column(String(50), nullable=False, unique=True)
    unit = Column(String(50), nullable=False)
    name = Column(String(200), nullable=True)

    readings = relationship("Reading", back_populates="variable")
