"""CLI entrypoint for the PRTR sanctions crawler."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from prtr_sanctions.common.config_loader import load_config
from prtr_sanctions.common.constants import EXIT_HARD_FAIL, EXIT_SUCCESS, MODES
from prtr_sanctions.common.context import RunContext
from prtr_sanctions.common.errors import PipelineError
from prtr_sanctions.common.fs import remove_tree
from prtr_sanctions.common.ids import generate_run_id
from prtr_sanctions.common.logging import build_logger, close_logger, log_event
from prtr_sanctions.common.models import RunSummary
from prtr_sanctions.common.time_utils import parse_iso_date
from prtr_sanctions.harvest.penalty_harvest import PenaltyHarvester
from prtr_sanctions.pipeline.reports import write_run_summary


def parse_args(argv: list[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("command", choices=[*MODES, "cleanup"])
    parser.add_argument("--start", default=None, help="range start date, YYYY-MM-DD")
    parser.add_argument("--end", default=None, help="range end date, YYYY-MM-DD (default: today)")
    parser.add_argument("--months", type=int, default=None, help="daily window length in months")
    parser.add_argument("--max-empty-periods", type=int, default=None)
    parser.add_argument("--county", default="")
    parser.add_argument("--path", default=None, help="path removed by the cleanup command")
    parser.add_argument("--run-id", default=None)
    parser.add_argument("--config-dir", default="./config")
    parser.add_argument("--overlay-config-dir", default=None)
    parser.add_argument("--data-dir", default="./data")
    parser.add_argument("--docs-dir", default=None)
    parser.add_argument("--log-level", default="INFO", choices=["DEBUG", "INFO", "WARN", "ERROR"])
    return parser.parse_args(argv)


def execute_mode(args: argparse.Namespace, harvester: PenaltyHarvester) -> RunSummary:
    extra_params = {"County": args.county}
    if args.command == "range":
        if not args.start:
            raise PipelineError("range requires --start")
        return harvester.crawl_range(parse_iso_date(args.start), parse_iso_date(args.end), extra_params)
    if args.command == "backfill":
        return harvester.crawl_backwards(extra_params, max_empty_periods=args.max_empty_periods)
    if args.command == "daily":
        return harvester.crawl_recent(extra_params, months=args.months)
    raise ValueError(f"Unknown mode: {args.command}")


def run_cleanup(args: argparse.Namespace, logger: logging.Logger, run_id: str) -> int:
    if not args.path:
        log_event(logger, "cleanup requires --path", level=logging.ERROR, run_id=run_id, status="error")
        return EXIT_HARD_FAIL
    removed = remove_tree(Path(args.path))
    log_event(
        logger,
        f"cleanup of {args.path}: {'removed' if removed else 'nothing to remove'}",
        run_id=run_id,
        stage="cleanup",
        event="CLEANUP",
        status="ok",
        path=args.path,
    )
    return EXIT_SUCCESS


def run_command(args: argparse.Namespace) -> int:
    run_id = args.run_id or generate_run_id(args.command)
    data_dir = Path(args.data_dir)
    logger = build_logger(run_id, data_dir=data_dir, level=args.log_level)
    try:
        if args.command == "cleanup":
            return run_cleanup(args, logger, run_id)

        overlay_config_dir = Path(args.overlay_config_dir) if args.overlay_config_dir else None
        config = load_config(Path(args.config_dir), overlay_config_dir=overlay_config_dir)
        if args.docs_dir:
            config["storage"] = {**config["storage"], "docs_dir": args.docs_dir}
        context = RunContext(run_id=run_id, logger=logger, config=config)

        log_event(logger, f"{args.command} run start", run_id=run_id, stage=args.command, event="RUN_START", status="ok")
        try:
            with PenaltyHarvester(context) as harvester:
                summary = execute_mode(args, harvester)
        except PipelineError as exc:
            log_event(
                logger,
                f"{args.command} run failed: {exc}",
                level=logging.ERROR,
                run_id=run_id,
                stage=args.command,
                event="RUN_FAIL",
                status="error",
                error_code=exc.error_code,
            )
            return EXIT_HARD_FAIL

        write_run_summary(data_dir, run_id, summary)
        log_event(
            logger,
            f"{args.command} run end: {summary.periods_processed} periods, "
            f"{summary.total_records_saved} records saved, {summary.total_errors} errors",
            run_id=run_id,
            stage=args.command,
            event="RUN_END",
            status="ok" if summary.success else "error",
            records_saved=summary.total_records_saved,
            error_count=summary.total_errors,
        )
        return EXIT_SUCCESS if summary.success else EXIT_HARD_FAIL
    finally:
        close_logger(logger)


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv if argv is not None else sys.argv[1:])
    try:
        return run_command(args)
    except PipelineError:
        return EXIT_HARD_FAIL
    except Exception:
        return EXIT_HARD_FAIL


if __name__ == "__main__":
    raise SystemExit(main())
