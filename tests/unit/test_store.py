from __future__ import annotations

import json
from datetime import datetime
from pathlib import Path

import pytest

from prtr_sanctions.common.errors import FilesystemError
from prtr_sanctions.common.time_utils import TAIPEI
from prtr_sanctions.pipeline import store as store_module
from prtr_sanctions.pipeline.identity import parse_unique_id
from prtr_sanctions.pipeline.store import RecordStore, record_file_path, sanitize_county

NEW_RECORD = {"COUNTY": "高雄市", "DOCUMENTNO": "21-114-070054", "PENALTYDATE": "2025/07/03"}
LEGACY_RECORD = {"裁處書字號": "21-113-000123", "裁處日期": "113/05/01"}


def test_file_path_for_new_format_identity():
    identity = parse_unique_id("高雄市_21-114-070054", NEW_RECORD)
    assert record_file_path(Path("docs/sanctions"), identity) == Path("docs/sanctions/高雄市/2025/21/070054.json")


def test_file_path_for_legacy_identity_has_no_county_segment():
    identity = parse_unique_id("21-113-000123", LEGACY_RECORD)
    assert record_file_path(Path("docs/sanctions"), identity) == Path("docs/sanctions/2024/21/000123.json")


@pytest.mark.parametrize(
    "county,expected",
    [
        ("高雄市", "高雄市"),
        ("臺北市 (North)", "臺北市_North"),
        ("__a--b__", "a_b"),
        ("桃園市/中壢區", "桃園市_中壢區"),
    ],
)
def test_sanitize_county(county, expected):
    assert sanitize_county(county) == expected


def test_save_writes_pretty_unicode_json_with_created_at(store):
    result = store.save([NEW_RECORD])

    path = store.base_path / "高雄市" / "2025" / "21" / "070054.json"
    assert result.saved_paths == [path]
    assert result.errors == []
    assert result.total_processed == 1

    text = path.read_text(encoding="utf-8")
    assert "高雄市" in text
    assert "\\u" not in text
    assert json.loads(text) == {**NEW_RECORD, "created_at": "2025-07-04 09:00:00"}


def test_save_twice_overwrites_single_file(context, tmp_path, make_clock):
    clock = make_clock(
        datetime(2025, 7, 4, 9, 0, 0, tzinfo=TAIPEI),
        datetime(2025, 7, 5, 10, 30, 0, tzinfo=TAIPEI),
    )
    store = RecordStore(tmp_path / "docs", context, clock=clock)

    first = store.save([NEW_RECORD])
    second = store.save([NEW_RECORD])

    assert first.saved_paths == second.saved_paths
    county_dir = store.base_path / "高雄市"
    assert [p for p in county_dir.rglob("*.json")] == first.saved_paths
    assert json.loads(first.saved_paths[0].read_text(encoding="utf-8"))["created_at"] == "2025-07-05 10:30:00"


def test_save_skips_records_without_usable_id(store):
    result = store.save([{"FACILITYNAME": "某工廠"}, {"COUNTY": "高雄市", "DOCUMENTNO": "N/A"}, LEGACY_RECORD])

    assert result.total_processed == 3
    assert result.skipped == 2
    assert result.errors == []
    assert result.saved_paths == [store.base_path / "2024" / "21" / "000123.json"]


def test_save_unparseable_new_format_id_is_skipped(store):
    result = store.save([{"COUNTY": "高雄市", "DOCUMENTNO": "無"}])
    assert result.saved_paths == []
    assert result.skipped == 1


def test_row_failure_is_collected_and_batch_continues(store, monkeypatch):
    original = store_module.write_record_json
    calls = {"n": 0}

    def flaky_write(path, record):
        calls["n"] += 1
        if calls["n"] == 1:
            raise OSError("disk full")
        original(path, record)

    monkeypatch.setattr(store_module, "write_record_json", flaky_write)
    result = store.save([NEW_RECORD, LEGACY_RECORD])

    assert len(result.errors) == 1
    assert result.errors[0].startswith("Error processing row 0")
    assert result.saved_paths == [store.base_path / "2024" / "21" / "000123.json"]


def test_exists_uses_calendar_conversion_only(store):
    store.save([LEGACY_RECORD, NEW_RECORD])

    assert store.exists("21-113-000123") is True
    assert store.exists("高雄市_21-114-070054") is True
    assert store.exists("21-113-999999") is False
    assert store.exists("garbage") is False


def test_unwritable_base_directory_is_fatal(context, tmp_path):
    blocker = tmp_path / "blocker"
    blocker.write_text("x", encoding="utf-8")

    with pytest.raises(FilesystemError):
        RecordStore(blocker / "docs", context)
