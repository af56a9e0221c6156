"""Clock helpers pinned to Taiwan civil time."""

from __future__ import annotations

from datetime import date, datetime, timezone

from dateutil import tz

from prtr_sanctions.common.constants import CREATED_AT_FORMAT, LOCAL_TIMEZONE

TAIPEI = tz.gettz(LOCAL_TIMEZONE)


def taipei_now() -> datetime:
    return datetime.now(tz=TAIPEI)


def taipei_today() -> date:
    return taipei_now().date()


def format_created_at(moment: datetime) -> str:
    return moment.strftime(CREATED_AT_FORMAT)


def parse_iso_date(value: str | None) -> date:
    if not value:
        return taipei_today()
    return date.fromisoformat(value)


def utc_timestamp_iso() -> str:
    return datetime.now(tz=timezone.utc).isoformat(timespec="milliseconds")
