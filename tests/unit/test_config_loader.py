from pathlib import Path

import pytest

from prtr_sanctions.common.config_loader import load_config
from prtr_sanctions.common.errors import ConfigError

BASE_CONFIG = """api:
  base_url: "https://prtr.example.test/api/v1/Penalty"
  timeout:
    connect: 30
    read: 120
  max_attempts: 1
  headers: {}
  default_params:
    County: ""
    PageSize: -1
crawl:
  period_months: 3
  recent_months: 3
  max_empty_periods: 3
  pacing_seconds: 1.0
storage:
  docs_dir: docs/sanctions
"""


def test_load_config_from_repo_config_dir():
    cfg = load_config(Path("config"))
    assert cfg["api"]["base_url"] == "https://prtr.moenv.gov.tw/api/v1/Penalty"
    assert cfg["api"]["default_params"]["PageSize"] == -1
    assert cfg["crawl"]["max_empty_periods"] == 3
    assert cfg["storage"]["docs_dir"] == "docs/sanctions"


def test_load_config_applies_overlay_values(tmp_path: Path):
    base = tmp_path / "base"
    overlay = tmp_path / "overlay"
    base.mkdir()
    overlay.mkdir()
    (base / "crawler.yml").write_text(BASE_CONFIG, encoding="utf-8")
    (overlay / "crawler.yml").write_text(
        """crawl:
  pacing_seconds: 0
api:
  default_params:
    County: "高雄市"
""",
        encoding="utf-8",
    )

    cfg = load_config(base, overlay_config_dir=overlay)

    assert cfg["crawl"]["pacing_seconds"] == 0
    assert cfg["crawl"]["period_months"] == 3
    assert cfg["api"]["default_params"] == {"County": "高雄市", "PageSize": -1}


def test_missing_overlay_file_is_ignored(tmp_path: Path):
    (tmp_path / "crawler.yml").write_text(BASE_CONFIG, encoding="utf-8")
    cfg = load_config(tmp_path, overlay_config_dir=tmp_path / "absent")
    assert cfg["crawl"]["pacing_seconds"] == 1.0


def test_missing_config_file_raises(tmp_path: Path):
    with pytest.raises(ConfigError):
        load_config(tmp_path)


def test_missing_section_raises(tmp_path: Path):
    (tmp_path / "crawler.yml").write_text(BASE_CONFIG.split("crawl:")[0], encoding="utf-8")
    with pytest.raises(ConfigError, match="crawl"):
        load_config(tmp_path)


def test_unknown_keys_rejected_unless_allowed(tmp_path: Path):
    (tmp_path / "crawler.yml").write_text(BASE_CONFIG + "extra: true\n", encoding="utf-8")

    with pytest.raises(ConfigError, match="extra"):
        load_config(tmp_path)
    assert load_config(tmp_path, allow_unknown=True)["extra"] is True


@pytest.mark.parametrize(
    "old,new",
    [
        ("pacing_seconds: 1.0", "pacing_seconds: -1"),
        ("max_empty_periods: 3", "max_empty_periods: 0"),
        ("period_months: 3", "period_months: three"),
    ],
)
def test_invalid_crawl_values_raise(tmp_path: Path, old, new):
    (tmp_path / "crawler.yml").write_text(BASE_CONFIG.replace(old, new), encoding="utf-8")
    with pytest.raises(ConfigError):
        load_config(tmp_path)
