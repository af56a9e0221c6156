"""Unique-id derivation and filing-year resolution for sanction records.

The Penalty API renamed its fields between versions. Newer JSON rows carry
``COUNTY`` and ``DOCUMENTNO`` (``21-114-070054``: agency code, Minguo filing
year, sequence code); legacy CSV rows carry the document number under one of a
handful of Chinese column names and no county. Both shapes are probed through
ordered strategy tables so a new shape is one more entry, not another branch.
"""

from __future__ import annotations

import re
from typing import Callable, Mapping

from prtr_sanctions.common.constants import ROC_YEAR_OFFSET
from prtr_sanctions.common.models import ParsedIdentity

COUNTY_FIELD = "COUNTY"
DOCUMENT_NO_FIELD = "DOCUMENTNO"
LEGACY_ID_FIELDS = ("序號", "編號", "ID", "id", "案件編號", "處分書字號", "裁處書字號")
DATE_FIELDS = ("PENALTYDATE", "TRANSGRESSDATE", "UPDATETIME")
LEGACY_DATE_FIELDS = ("裁處時間", "違規時間", "裁處日期", "違規日期")
ID_SEPARATOR = "_"

DOCUMENT_NO_PATTERN = re.compile(r"(\d+)-(\d+)-(\d+)", re.ASCII)
GREGORIAN_DATE_PATTERNS = (re.compile(r"^(\d{4})/", re.ASCII), re.compile(r"^(\d{4})-", re.ASCII))
LOCAL_YEAR_PATTERN = re.compile(r"^(\d{2,3})/", re.ASCII)
LEGACY_GREGORIAN_PATTERN = re.compile(r"^(\d{4})", re.ASCII)

IdStrategy = Callable[[Mapping[str, object]], "str | None"]
YearStrategy = Callable[[Mapping[str, object]], "int | None"]


def roc_to_gregorian(local_year: int) -> int:
    return local_year + ROC_YEAR_OFFSET


def _text(record: Mapping[str, object], key: str) -> str:
    value = record.get(key)
    if value is None:
        return ""
    return str(value).strip()


def _is_document_no(value: str) -> bool:
    return DOCUMENT_NO_PATTERN.fullmatch(value) is not None


def county_document_id(record: Mapping[str, object]) -> str | None:
    county = _text(record, COUNTY_FIELD)
    document_no = _text(record, DOCUMENT_NO_FIELD)
    if county and document_no:
        return f"{county}{ID_SEPARATOR}{document_no}"
    return None


def legacy_column_id(record: Mapping[str, object]) -> str | None:
    for column in LEGACY_ID_FIELDS:
        value = _text(record, column)
        if value and _is_document_no(value):
            return value
    return None


def any_value_id(record: Mapping[str, object]) -> str | None:
    for value in record.values():
        if isinstance(value, str) and _is_document_no(value.strip()):
            return value.strip()
    return None


ID_STRATEGIES: tuple[tuple[str, IdStrategy], ...] = (
    ("county_document", county_document_id),
    ("legacy_column", legacy_column_id),
    ("any_value", any_value_id),
)


def find_unique_id(record: Mapping[str, object]) -> str | None:
    for _name, strategy in ID_STRATEGIES:
        unique_id = strategy(record)
        if unique_id:
            return unique_id
    return None


def _year_from_date_fields(record: Mapping[str, object]) -> int | None:
    for field in DATE_FIELDS:
        value = _text(record, field)
        if not value:
            continue
        for pattern in GREGORIAN_DATE_PATTERNS:
            match = pattern.match(value)
            if match:
                return int(match.group(1))
    return None


def _year_from_legacy_date_fields(record: Mapping[str, object]) -> int | None:
    for field in LEGACY_DATE_FIELDS:
        value = _text(record, field)
        if not value:
            continue
        match = LOCAL_YEAR_PATTERN.match(value)
        if match:
            return roc_to_gregorian(int(match.group(1)))
        match = LEGACY_GREGORIAN_PATTERN.match(value)
        if match:
            return int(match.group(1))
    return None


YEAR_STRATEGIES: tuple[tuple[str, YearStrategy], ...] = (
    ("date_fields", _year_from_date_fields),
    ("legacy_date_fields", _year_from_legacy_date_fields),
)


def extract_year(record: Mapping[str, object] | None) -> int | None:
    """Return the Gregorian filing year stated by the record's own date fields."""
    if not record:
        return None
    for _name, strategy in YEAR_STRATEGIES:
        year = strategy(record)
        if year is not None:
            return year
    return None


def parse_unique_id(unique_id: str, record: Mapping[str, object] | None = None) -> ParsedIdentity | None:
    """Split an id into its codes; ``None`` when it is not a document number.

    The year embedded in the document number can lag the real filing year once
    a document series rolls over, so an explicit date field wins and Minguo
    conversion is only the fallback.
    """
    county: str | None = None
    document_no: str | None = None
    candidate = unique_id
    if ID_SEPARATOR in unique_id:
        county_part, document_no = unique_id.split(ID_SEPARATOR, 1)
        county = county_part.strip() or None
        candidate = document_no

    match = DOCUMENT_NO_PATTERN.fullmatch(candidate)
    if match is None:
        return None

    agency_code, filing_year_local, sequence_code = match.groups()
    resolved_year = extract_year(record)
    if resolved_year is None:
        resolved_year = roc_to_gregorian(int(filing_year_local))

    return ParsedIdentity(
        original_id=unique_id,
        agency_code=agency_code,
        filing_year_local=filing_year_local,
        resolved_year=resolved_year,
        sequence_code=sequence_code,
        county=county,
        document_no=document_no,
    )
