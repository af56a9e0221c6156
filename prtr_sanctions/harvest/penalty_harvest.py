"""Penalty API harvest: drives periods through fetch, extraction and storage."""

from __future__ import annotations

import logging
import time
from datetime import date
from pathlib import Path
from types import TracebackType
from typing import Any, Callable, Iterable

from dateutil.relativedelta import relativedelta

from prtr_sanctions.common.constants import DEFAULT_DOCS_DIR, DEFAULT_QUERY_PARAMS, PENALTY_API_URL, USER_AGENT
from prtr_sanctions.common.context import RunContext
from prtr_sanctions.common.errors import PipelineError, StageError
from prtr_sanctions.common.http import HttpClient, RetryConfig, TimeoutConfig
from prtr_sanctions.common.logging import log_event
from prtr_sanctions.common.models import Period, PeriodResult, RunSummary
from prtr_sanctions.common.time_utils import taipei_today
from prtr_sanctions.pipeline.extract import extract_response
from prtr_sanctions.pipeline.periods import current_quarter, fixed_width_periods, quarter_walk_backward
from prtr_sanctions.pipeline.store import RecordStore


def build_http_client(config: dict) -> HttpClient:
    api = config.get("api") or {}
    timeout = api.get("timeout") or {}
    return HttpClient(
        timeout=TimeoutConfig(
            connect=float(timeout.get("connect", 30)),
            read=float(timeout.get("read", 120)),
        ),
        retry=RetryConfig(max_attempts=int(api.get("max_attempts", 1))),
        headers=api.get("headers") or None,
        user_agent=api.get("user_agent") or USER_AGENT,
    )


class PenaltyHarvester:
    def __init__(
        self,
        context: RunContext,
        *,
        http_client: HttpClient | None = None,
        store: RecordStore | None = None,
        sleep: Callable[[float], None] = time.sleep,
        today: Callable[[], date] = taipei_today,
    ) -> None:
        self.context = context
        self.logger: logging.Logger = context.logger
        docs_dir = (context.config.get("storage") or {}).get("docs_dir", DEFAULT_DOCS_DIR)
        self.store = store or RecordStore(Path(docs_dir), context)
        self.owns_client = http_client is None
        self.client = http_client or build_http_client(context.config)
        self.sleep = sleep
        self.today = today
        self.base_url = context.api_setting("base_url", PENALTY_API_URL)
        self.pacing_seconds = float(context.crawl_setting("pacing_seconds", 1.0))
        self._requests_sent = 0

    def close(self) -> None:
        if self.owns_client:
            self.client.close()

    def __enter__(self) -> "PenaltyHarvester":
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()

    def build_params(self, period: Period, extra_params: dict[str, Any] | None = None) -> dict[str, Any]:
        params = dict(self.context.api_setting("default_params", None) or DEFAULT_QUERY_PARAMS)
        params.update(extra_params or {})
        params.update(period.to_params())
        return params

    def _pace(self) -> None:
        if self._requests_sent and self.pacing_seconds > 0:
            self.sleep(self.pacing_seconds)
        self._requests_sent += 1

    def fetch_and_store(self, period: Period, extra_params: dict[str, Any] | None = None) -> PeriodResult:
        self._pace()
        params = self.build_params(period, extra_params)
        log_event(
            self.logger,
            "requesting penalty data",
            run_id=self.context.run_id,
            period=period.describe(),
            event="FETCH_START",
            status="ok",
        )
        started = time.monotonic()
        response = self.client.get(self.base_url, params=params)
        log_event(
            self.logger,
            f"response received: HTTP {response.status_code} {response.content_type or '-'}",
            run_id=self.context.run_id,
            period=period.describe(),
            event="FETCH_END",
            status="ok" if response.status_code == 200 else "error",
            duration_ms=int((time.monotonic() - started) * 1000),
        )
        records = extract_response(response, self.logger)
        saved = self.store.save(records) if records else None
        result = PeriodResult(
            period=period,
            total_records=len(records),
            saved_count=len(saved.saved_paths) if saved else 0,
            error_count=len(saved.errors) if saved else 0,
        )
        log_event(
            self.logger,
            "period processed",
            run_id=self.context.run_id,
            period=period.describe(),
            event="PERIOD_END",
            status="ok",
            records_in=result.total_records,
            records_saved=result.saved_count,
            error_count=result.error_count,
        )
        return result

    def _run_periods(
        self,
        summary: RunSummary,
        periods: Iterable[Period],
        extra_params: dict[str, Any] | None,
    ) -> RunSummary:
        for period in periods:
            try:
                summary.results.append(self.fetch_and_store(period, extra_params))
            except StageError as exc:
                log_event(
                    self.logger,
                    f"failed to crawl period {period.describe()}: {exc}",
                    level=logging.ERROR,
                    run_id=self.context.run_id,
                    stage=summary.mode,
                    period=period.describe(),
                    event="PERIOD_FAIL",
                    status="error",
                    error_code=exc.error_code,
                )
                raise
        return summary

    def crawl_range(
        self,
        start: date,
        end: date,
        extra_params: dict[str, Any] | None = None,
        *,
        mode: str = "range",
    ) -> RunSummary:
        """Crawl ``[start, end]`` in fixed-width periods; any period failure aborts the run."""
        width = int(self.context.crawl_setting("period_months", 3))
        periods = fixed_width_periods(start, end, width)
        log_event(
            self.logger,
            f"starting crawl with {len(periods)} periods",
            run_id=self.context.run_id,
            stage=mode,
            period=f"{start.isoformat()}..{end.isoformat()}",
            event="RUN_START",
            status="ok",
        )
        summary = self._run_periods(RunSummary(mode=mode), periods, extra_params)
        self._log_run_end(summary)
        return summary

    def crawl_backwards(
        self,
        extra_params: dict[str, Any] | None = None,
        max_empty_periods: int | None = None,
    ) -> RunSummary:
        """Walk quarters backwards from today until enough consecutive quarters come back empty.

        The run is unsuccessful only when every quarter it checked failed to fetch or decode.
        """
        threshold = max_empty_periods or int(self.context.crawl_setting("max_empty_periods", 3))
        today = self.today()
        summary = RunSummary(mode="backfill", total_periods_checked=0)
        empty_streak = 0
        failed_periods = 0

        for period in quarter_walk_backward(today.year, current_quarter(today)):
            if empty_streak >= threshold:
                break
            summary.total_periods_checked += 1
            try:
                result = self.fetch_and_store(period, extra_params)
            except PipelineError as exc:
                empty_streak += 1
                failed_periods += 1
                log_event(
                    self.logger,
                    f"failed to crawl {period.label}: {exc}",
                    level=logging.ERROR,
                    run_id=self.context.run_id,
                    stage=summary.mode,
                    period=period.describe(),
                    event="PERIOD_FAIL",
                    status="error",
                    error_code=exc.error_code,
                )
                continue

            if result.has_data:
                summary.results.append(result)
                empty_streak = 0
                message = f"{period.label} has data, continuing"
            else:
                empty_streak += 1
                message = f"{period.label} has no data ({empty_streak}/{threshold} empty periods)"
            log_event(
                self.logger,
                message,
                run_id=self.context.run_id,
                stage=summary.mode,
                period=period.describe(),
                event="QUARTER_CHECKED",
                status="ok",
            )

        if failed_periods and failed_periods == summary.total_periods_checked:
            summary.success = False
        self._log_run_end(summary)
        return summary

    def crawl_recent(
        self,
        extra_params: dict[str, Any] | None = None,
        months: int | None = None,
    ) -> RunSummary:
        window_months = months or int(self.context.crawl_setting("recent_months", 3))
        end = self.today()
        start = end - relativedelta(months=window_months)
        summary = self.crawl_range(start, end, extra_params, mode="daily")
        summary.window = Period(start=start, end=end, label=f"recent_{window_months}_months")
        return summary

    def _log_run_end(self, summary: RunSummary) -> None:
        log_event(
            self.logger,
            f"finished {summary.mode} crawl: {summary.periods_processed} periods with results",
            run_id=self.context.run_id,
            stage=summary.mode,
            event="RUN_END",
            status="ok" if summary.success else "error",
            records_saved=summary.total_records_saved,
            error_count=summary.total_errors,
        )
