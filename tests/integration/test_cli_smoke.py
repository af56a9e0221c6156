from __future__ import annotations

import json
from pathlib import Path

import pytest

from prtr_sanctions.cli import parse_args, run_command
from prtr_sanctions.common.constants import EXIT_HARD_FAIL, EXIT_SUCCESS
from prtr_sanctions.common.http import HttpResponse
from prtr_sanctions.harvest import penalty_harvest


class FakeHttpClient:
    def __init__(self, status_code: int = 200):
        self.status_code = status_code
        self.calls: list[dict] = []

    def get(self, url: str, *, params=None, headers=None):
        self.calls.append(dict(params or {}))
        body = json.dumps(
            {"Result": {"Data": [{"COUNTY": "高雄市", "DOCUMENTNO": "21-114-070054", "PENALTYDATE": "2025/07/03"}]}},
            ensure_ascii=False,
        ).encode("utf-8")
        return HttpResponse(status_code=self.status_code, headers={"content-type": "application/json"}, body=body)

    def close(self):
        return None


def _args(tmp_path: Path, *extra: str):
    return parse_args(
        [
            *extra,
            "--config-dir",
            "config",
            "--data-dir",
            str(tmp_path / "data"),
            "--docs-dir",
            str(tmp_path / "docs"),
            "--run-id",
            "run-test",
        ]
    )


@pytest.mark.integration
def test_cli_range_writes_records_and_summary(monkeypatch, tmp_path: Path):
    client = FakeHttpClient()
    monkeypatch.setattr(penalty_harvest, "build_http_client", lambda _config: client)

    exit_code = run_command(_args(tmp_path, "range", "--start", "2025-07-01", "--end", "2025-07-31", "--county", "高雄市"))

    assert exit_code == EXIT_SUCCESS
    assert client.calls[0]["County"] == "高雄市"
    assert (tmp_path / "docs" / "高雄市" / "2025" / "21" / "070054.json").exists()
    summary = json.loads((tmp_path / "data" / "run_meta" / "run-test_summary.json").read_text(encoding="utf-8"))
    assert summary["success"] is True
    assert summary["total_records_saved"] == 1
    assert (tmp_path / "data" / "run_meta" / "run-test.log.jsonl").exists()


@pytest.mark.integration
def test_cli_range_exits_non_zero_on_fetch_failure(monkeypatch, tmp_path: Path):
    monkeypatch.setattr(penalty_harvest, "build_http_client", lambda _config: FakeHttpClient(status_code=503))

    exit_code = run_command(_args(tmp_path, "range", "--start", "2025-07-01", "--end", "2025-07-31"))

    assert exit_code == EXIT_HARD_FAIL
    assert not (tmp_path / "data" / "run_meta" / "run-test_summary.json").exists()


@pytest.mark.integration
def test_cli_range_requires_start(monkeypatch, tmp_path: Path):
    monkeypatch.setattr(penalty_harvest, "build_http_client", lambda _config: FakeHttpClient())
    assert run_command(_args(tmp_path, "range")) == EXIT_HARD_FAIL


@pytest.mark.integration
def test_cli_cleanup_removes_transient_directory(tmp_path: Path):
    scratch = tmp_path / "scratch"
    (scratch / "nested").mkdir(parents=True)
    (scratch / "nested" / "payload.zip").write_bytes(b"PK")

    exit_code = run_command(_args(tmp_path, "cleanup", "--path", str(scratch)))

    assert exit_code == EXIT_SUCCESS
    assert not scratch.exists()


@pytest.mark.integration
def test_cli_backfill_exits_non_zero_when_every_quarter_fails(monkeypatch, tmp_path: Path):
    overlay = tmp_path / "overlay"
    overlay.mkdir()
    (overlay / "crawler.yml").write_text("crawl:\n  pacing_seconds: 0\n", encoding="utf-8")
    client = FakeHttpClient(status_code=503)
    monkeypatch.setattr(penalty_harvest, "build_http_client", lambda _config: client)

    exit_code = run_command(_args(tmp_path, "backfill", "--overlay-config-dir", str(overlay)))

    assert exit_code == EXIT_HARD_FAIL
    assert len(client.calls) == 3
    summary = json.loads((tmp_path / "data" / "run_meta" / "run-test_summary.json").read_text(encoding="utf-8"))
    assert summary["success"] is False
    assert summary["total_periods_checked"] == 3
