"""Run identifier helpers."""

from __future__ import annotations

from datetime import datetime, timezone


def generate_run_id(mode: str | None = None) -> str:
    """Sortable id such as ``run-daily-20250723T010203123456Z``."""
    stamp = datetime.now(tz=timezone.utc).strftime("%Y%m%dT%H%M%S%fZ")
    return f"run-{mode}-{stamp}" if mode else f"run-{stamp}"
