"""Explicit run context handed to every pipeline component."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class RunContext:
    run_id: str
    logger: logging.Logger
    config: dict[str, Any] = field(default_factory=dict)

    def crawl_setting(self, key: str, default: Any) -> Any:
        return (self.config.get("crawl") or {}).get(key, default)

    def api_setting(self, key: str, default: Any) -> Any:
        return (self.config.get("api") or {}).get(key, default)
