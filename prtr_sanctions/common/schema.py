"""Minimal strict schemas for YAML config validation."""

from __future__ import annotations

from prtr_sanctions.common.errors import ConfigError


def _assert_mapping(obj: object, ctx: str) -> dict:
    if not isinstance(obj, dict):
        raise ConfigError(f"{ctx} must be a mapping")
    return obj


def _assert_required_keys(obj: dict, required: set[str], ctx: str) -> None:
    missing = required - set(obj)
    if missing:
        missing_str = ", ".join(sorted(missing))
        raise ConfigError(f"Missing keys in {ctx}: {missing_str}")


def _assert_no_unknown_keys(obj: dict, known: set[str], ctx: str, allow_unknown: bool) -> None:
    if allow_unknown:
        return
    unknown = set(obj) - known
    if unknown:
        unknown_str = ", ".join(sorted(unknown))
        raise ConfigError(f"Unknown keys in {ctx}: {unknown_str}")


def _assert_positive(value: object, ctx: str, *, allow_zero: bool = False) -> None:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ConfigError(f"{ctx} must be a number")
    if value < 0 or (value == 0 and not allow_zero):
        raise ConfigError(f"{ctx} must be {'non-negative' if allow_zero else 'positive'}")


def validate_crawler_config(cfg: dict, *, allow_unknown: bool = False) -> dict:
    top_required = {"api", "crawl", "storage"}
    _assert_mapping(cfg, "crawler config")
    _assert_required_keys(cfg, top_required, "crawler config")
    _assert_no_unknown_keys(cfg, top_required, "crawler config", allow_unknown)

    api = _assert_mapping(cfg["api"], "api")
    api_required = {"base_url", "timeout", "max_attempts", "headers", "default_params"}
    _assert_required_keys(api, api_required, "api")
    _assert_no_unknown_keys(api, api_required | {"user_agent"}, "api", allow_unknown)
    timeout = _assert_mapping(api["timeout"], "api.timeout")
    _assert_required_keys(timeout, {"connect", "read"}, "api.timeout")
    _assert_positive(timeout["connect"], "api.timeout.connect")
    _assert_positive(timeout["read"], "api.timeout.read")
    _assert_positive(api["max_attempts"], "api.max_attempts")
    _assert_mapping(api["headers"] or {}, "api.headers")
    _assert_mapping(api["default_params"] or {}, "api.default_params")

    crawl = _assert_mapping(cfg["crawl"], "crawl")
    crawl_required = {"period_months", "recent_months", "max_empty_periods", "pacing_seconds"}
    _assert_required_keys(crawl, crawl_required, "crawl")
    _assert_no_unknown_keys(crawl, crawl_required, "crawl", allow_unknown)
    _assert_positive(crawl["period_months"], "crawl.period_months")
    _assert_positive(crawl["recent_months"], "crawl.recent_months")
    _assert_positive(crawl["max_empty_periods"], "crawl.max_empty_periods")
    _assert_positive(crawl["pacing_seconds"], "crawl.pacing_seconds", allow_zero=True)

    storage = _assert_mapping(cfg["storage"], "storage")
    _assert_required_keys(storage, {"docs_dir"}, "storage")
    _assert_no_unknown_keys(storage, {"docs_dir"}, "storage", allow_unknown)

    return cfg
