"""Turn a raw Penalty API response into a flat list of records.

Two shapes are handled:

* the legacy export, a ZIP archive holding one or more CSV files whose header
  row carries Chinese column names;
* the JSON API, where records sit under ``Result.Data``, under ``data``, or
  form the top-level array.
"""

from __future__ import annotations

import csv
import io
import json
import logging
import zipfile
import zlib
from typing import Any, Iterable

from prtr_sanctions.common.errors import DecodeError, FetchError
from prtr_sanctions.common.http import HttpResponse
from prtr_sanctions.common.logging import log_event
from prtr_sanctions.common.models import RawRecord

ZIP_MAGIC = b"PK"
CSV_ENCODINGS = ("utf-8-sig", "cp950")
ARCHIVE_ERRORS = (zipfile.BadZipFile, zlib.error, EOFError, NotImplementedError, RuntimeError, csv.Error)


def is_zip_payload(body: bytes, content_type: str = "") -> bool:
    return "zip" in content_type.lower() or body[:2] == ZIP_MAGIC


def _decode_csv_bytes(raw: bytes, entry_name: str) -> str:
    for encoding in CSV_ENCODINGS:
        try:
            return raw.decode(encoding)
        except UnicodeDecodeError:
            continue
    raise DecodeError(f"Cannot decode CSV entry {entry_name} as any of {', '.join(CSV_ENCODINGS)}")


def _non_empty_rows(rows: Iterable[list[str]]) -> Iterable[list[str]]:
    for row in rows:
        if any(cell.strip() for cell in row):
            yield row


def parse_csv_text(text: str, logger: logging.Logger, *, source: str = "csv") -> list[RawRecord]:
    rows = _non_empty_rows(csv.reader(io.StringIO(text, newline="")))
    header = next(rows, None)
    if header is None:
        return []
    header = [name.strip() for name in header]

    records: list[RawRecord] = []
    for line_no, row in enumerate(rows, start=2):
        if len(row) != len(header):
            log_event(
                logger,
                f"skipping row {line_no} of {source}: {len(row)} fields, header has {len(header)}",
                level=logging.WARNING,
                event="CSV_ROW_SKIPPED",
                status="warning",
            )
            continue
        records.append(dict(zip(header, row)))
    return records


def extract_zip_records(body: bytes, logger: logging.Logger) -> list[RawRecord]:
    records: list[RawRecord] = []
    try:
        with zipfile.ZipFile(io.BytesIO(body)) as archive:
            for info in archive.infolist():
                if info.is_dir() or not info.filename.lower().endswith(".csv"):
                    continue
                text = _decode_csv_bytes(archive.read(info), info.filename)
                entry_records = parse_csv_text(text, logger, source=info.filename)
                log_event(
                    logger,
                    f"parsed archive entry {info.filename}",
                    event="CSV_ENTRY_PARSED",
                    status="ok",
                    records_in=len(entry_records),
                )
                records.extend(entry_records)
    except ARCHIVE_ERRORS as exc:
        raise DecodeError(f"Response body is not a valid ZIP archive: {type(exc).__name__}: {exc}") from exc
    return records


def _locate_records(payload: Any) -> list[Any]:
    if isinstance(payload, dict):
        result = payload.get("Result")
        if isinstance(result, dict) and "Data" in result:
            return result["Data"] or []
        if "data" in payload:
            return payload["data"] or []
    elif isinstance(payload, list):
        return payload
    raise DecodeError("JSON response has no recognizable record sequence")


def extract_json_records(body: bytes, logger: logging.Logger) -> list[RawRecord]:
    try:
        payload = json.loads(body)
    except (ValueError, UnicodeDecodeError) as exc:
        raise DecodeError(f"Failed to decode JSON response: {exc}") from exc

    located = _locate_records(payload)
    if not isinstance(located, list):
        raise DecodeError(f"JSON record sequence is a {type(located).__name__}, not a list")

    records: list[RawRecord] = []
    for index, item in enumerate(located):
        if not isinstance(item, dict):
            log_event(
                logger,
                f"dropping non-object item {index} from JSON response",
                level=logging.WARNING,
                event="JSON_ITEM_SKIPPED",
                status="warning",
            )
            continue
        records.append(item)
    return records


def extract_records(body: bytes, content_type: str, logger: logging.Logger) -> list[RawRecord]:
    if is_zip_payload(body, content_type):
        records = extract_zip_records(body, logger)
        shape = "zip"
    else:
        records = extract_json_records(body, logger)
        shape = "json"
    log_event(
        logger,
        f"{shape} response processed",
        event="RESPONSE_EXTRACTED",
        status="ok",
        records_in=len(records),
    )
    return records


def extract_response(response: HttpResponse, logger: logging.Logger) -> list[RawRecord]:
    if response.status_code != 200:
        raise FetchError(f"HTTP request failed with status code: {response.status_code}")
    return extract_records(response.body, response.content_type, logger)
