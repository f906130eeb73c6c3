"""
Explicit result type returned by provider clients.

A provider call ends in exactly one of three states:
- OK: a normalized value
- NO_DATA: nothing to report (no nearby station, no pollutant entries,
  missing credential); not an error
- FAILED: the call failed; `error` holds the typed exception
"""

from dataclasses import dataclass
from typing import Generic, Optional, TypeVar
import enum

from core.exceptions import ETLException

T = TypeVar("T")


class FetchStatus(str, enum.Enum):
    OK = "ok"
    NO_DATA = "no_data"
    FAILED = "failed"


@dataclass(frozen=True)
class FetchResult(Generic[T]):
    status: FetchStatus
    value: Optional[T] = None
    reason: Optional[str] = None
    error: Optional[ETLException] = None

    @classmethod
    def ok(cls, value: T) -> "FetchResult[T]":
        return cls(status=FetchStatus.OK, value=value)

    @classmethod
    def no_data(cls, reason: str) -> "FetchResult[T]":
        return cls(status=FetchStatus.NO_DATA, reason=reason)

    @classmethod
    def failed(cls, error: ETLException) -> "FetchResult[T]":
        return cls(status=FetchStatus.FAILED, reason=error.message, error=error)

    @property
    def is_ok(self) -> bool:
        return self.status == FetchStatus.OK

    @property
    def is_no_data(self) -> bool:
        return self.status == FetchStatus.NO_DATA

    @property
    def is_failed(self) -> bool:
        return self.status == FetchStatus.FAILED
