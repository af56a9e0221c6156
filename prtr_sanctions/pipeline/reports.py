"""Run report persistence."""

from __future__ import annotations

from pathlib import Path

from prtr_sanctions.common.fs import write_json
from prtr_sanctions.common.models import RunSummary
from prtr_sanctions.common.time_utils import format_created_at, taipei_now


def write_run_summary(data_dir: Path, run_id: str, summary: RunSummary) -> Path:
    summary_path = data_dir / "run_meta" / f"{run_id}_summary.json"
    payload = {
        "run_id": run_id,
        "finished_at": format_created_at(taipei_now()),
        **summary.to_dict(),
    }
    write_json(summary_path, payload)
    return summary_path
