"""Data models used across the pipeline."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from pathlib import Path
from typing import Any

RawRecord = dict[str, Any]


@dataclass(frozen=True)
class Period:
    start: date
    end: date
    label: str | None = None

    def __post_init__(self) -> None:
        if self.start > self.end:
            raise ValueError(f"Period start {self.start} is after end {self.end}")

    def to_params(self) -> dict[str, str]:
        return {"StartDate": self.start.isoformat(), "EndDate": self.end.isoformat()}

    def describe(self) -> str:
        span = f"{self.start.isoformat()}..{self.end.isoformat()}"
        return f"{self.label} {span}" if self.label else span

    def to_dict(self) -> dict[str, Any]:
        return {"start": self.start.isoformat(), "end": self.end.isoformat(), "label": self.label}


@dataclass(frozen=True)
class ParsedIdentity:
    original_id: str
    agency_code: str
    filing_year_local: str
    resolved_year: int
    sequence_code: str
    county: str | None = None
    document_no: str | None = None


@dataclass
class SaveResult:
    saved_paths: list[Path] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)
    total_processed: int = 0
    skipped: int = 0


@dataclass(frozen=True)
class PeriodResult:
    period: Period
    total_records: int
    saved_count: int
    error_count: int

    @property
    def has_data(self) -> bool:
        return self.saved_count > 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "period": self.period.to_dict(),
            "has_data": self.has_data,
            "total_records": self.total_records,
            "saved_count": self.saved_count,
            "error_count": self.error_count,
        }


@dataclass
class RunSummary:
    mode: str
    success: bool = True
    results: list[PeriodResult] = field(default_factory=list)
    total_periods_checked: int | None = None
    window: Period | None = None

    @property
    def periods_processed(self) -> int:
        return len(self.results)

    @property
    def total_records_saved(self) -> int:
        return sum(result.saved_count for result in self.results)

    @property
    def total_errors(self) -> int:
        return sum(result.error_count for result in self.results)

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "mode": self.mode,
            "success": self.success,
            "periods_processed": self.periods_processed,
            "total_records_saved": self.total_records_saved,
            "total_errors": self.total_errors,
            "results": [result.to_dict() for result in self.results],
        }
        if self.total_periods_checked is not None:
            payload["total_periods_checked"] = self.total_periods_checked
        if self.window is not None:
            payload["window"] = self.window.to_dict()
        return payload
