"""File-per-record persistence under a deterministic directory layout.

Layout::

    {base}/{county}/{year}/{agency_code}/{sequence_code}.json   # JSON API rows
    {base}/{year}/{agency_code}/{sequence_code}.json            # legacy rows

Existing files are overwritten wholesale on every ingestion.
"""

from __future__ import annotations

import logging
import re
from datetime import datetime
from pathlib import Path
from typing import Callable, Iterable

from prtr_sanctions.common.context import RunContext
from prtr_sanctions.common.errors import FilesystemError, RowError
from prtr_sanctions.common.fs import ensure_dir, write_record_json
from prtr_sanctions.common.logging import log_event
from prtr_sanctions.common.models import ParsedIdentity, RawRecord, SaveResult
from prtr_sanctions.common.time_utils import format_created_at, taipei_now
from prtr_sanctions.pipeline.identity import find_unique_id, parse_unique_id

CREATED_AT_FIELD = "created_at"
_NON_ALNUM_RUN = re.compile(r"[\W_]+")


def sanitize_county(county: str) -> str:
    return _NON_ALNUM_RUN.sub("_", county).strip("_")


def record_file_path(base_path: Path, identity: ParsedIdentity) -> Path:
    root = Path(base_path)
    county = sanitize_county(identity.county) if identity.county else ""
    if county:
        root = root / county
    return root / str(identity.resolved_year) / identity.agency_code / f"{identity.sequence_code}.json"


class RecordStore:
    def __init__(
        self,
        base_path: Path | str,
        context: RunContext,
        clock: Callable[[], datetime] = taipei_now,
    ) -> None:
        self.base_path = Path(base_path)
        self.context = context
        self.logger: logging.Logger = context.logger
        self.clock = clock
        try:
            ensure_dir(self.base_path)
        except OSError as exc:
            raise FilesystemError(f"Failed to create data directory {self.base_path}: {exc}") from exc

    def file_path(self, identity: ParsedIdentity, base_path: Path | str | None = None) -> Path:
        return record_file_path(Path(base_path) if base_path is not None else self.base_path, identity)

    def _write(self, path: Path, record: RawRecord) -> None:
        ensure_dir(path.parent)
        payload = dict(record)
        payload[CREATED_AT_FIELD] = format_created_at(self.clock())
        write_record_json(path, payload)

    def save(self, records: Iterable[RawRecord]) -> SaveResult:
        result = SaveResult()
        for index, record in enumerate(records):
            result.total_processed += 1
            try:
                unique_id = find_unique_id(record)
                if not unique_id:
                    log_event(
                        self.logger,
                        f"no unique id found in row {index}",
                        level=logging.WARNING,
                        run_id=self.context.run_id,
                        event="ROW_SKIPPED",
                        status="warning",
                        error_code="NO_UNIQUE_ID",
                    )
                    result.skipped += 1
                    continue

                identity = parse_unique_id(unique_id, record)
                if identity is None:
                    log_event(
                        self.logger,
                        f"failed to parse unique id in row {index}",
                        level=logging.WARNING,
                        run_id=self.context.run_id,
                        event="ROW_SKIPPED",
                        status="warning",
                        unique_id=unique_id,
                        error_code="UNPARSEABLE_ID",
                    )
                    result.skipped += 1
                    continue

                path = self.file_path(identity)
                self._write(path, record)
                result.saved_paths.append(path)
                log_event(
                    self.logger,
                    "saved record",
                    level=logging.DEBUG,
                    run_id=self.context.run_id,
                    event="ROW_SAVED",
                    status="ok",
                    unique_id=unique_id,
                    path=str(path),
                )
            except Exception as exc:
                result.errors.append(f"Error processing row {index}: {exc}")
                log_event(
                    self.logger,
                    f"error processing row {index}: {exc}",
                    level=logging.ERROR,
                    run_id=self.context.run_id,
                    event="ROW_FAILED",
                    status="error",
                    error_code=RowError.error_code,
                )

        log_event(
            self.logger,
            "record saving completed",
            run_id=self.context.run_id,
            event="SAVE_END",
            status="ok",
            records_in=result.total_processed,
            records_saved=len(result.saved_paths),
            error_count=len(result.errors),
        )
        return result

    def exists(self, unique_id: str) -> bool:
        identity = parse_unique_id(unique_id)
        if identity is None:
            return False
        return self.file_path(identity).exists()
