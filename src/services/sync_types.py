"""Typed contracts for sync cycle results."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Sequence

from api.host import Host


class SyncOutcome(str, Enum):
    """Terminal classification of one sync cycle."""

    SUCCESS = "success"
    PARTIAL_FAILURE = "partial_failure"
    TOTAL_FAILURE = "total_failure"
    FATAL_ERROR = "fatal_error"

    @property
    def exit_code(self) -> int:
        return 0 if self is SyncOutcome.SUCCESS else 1


@dataclass(frozen=True)
class OutcomeRecord:
    """Result of the upload pipeline for one secondary host."""

    host: Host
    success: bool
    error: Optional[BaseException] = None


@dataclass(frozen=True)
class SyncReport:
    """Aggregate of every secondary host's result, in fan-out order."""

    records: tuple[OutcomeRecord, ...] = field(default_factory=tuple)

    @classmethod
    def from_records(cls, records: Sequence[OutcomeRecord]) -> "SyncReport":
        return cls(records=tuple(records))

    @property
    def total(self) -> int:
        return len(self.records)

    @property
    def success_count(self) -> int:
        return sum(1 for record in self.records if record.success)

    @property
    def errors(self) -> list[BaseException]:
        return [record.error for record in self.records if record.error is not None]

    @property
    def message(self) -> str:
        return f"{self.success_count}/{self.total} hosts synced."

    def classify(self) -> SyncOutcome:
        if self.success_count == self.total:
            return SyncOutcome.SUCCESS
        if self.success_count > 0:
            return SyncOutcome.PARTIAL_FAILURE
        return SyncOutcome.TOTAL_FAILURE
