"""Query window generation: fixed-width slices and backward quarter walks."""

from __future__ import annotations

from datetime import date, timedelta
from typing import Iterator

from dateutil.relativedelta import relativedelta

from prtr_sanctions.common.models import Period

QUARTER_START_MONTH = {1: 1, 2: 4, 3: 7, 4: 10}


def fixed_width_periods(start: date, end: date, width_months: int = 3) -> list[Period]:
    """Cover ``[start, end]`` with consecutive ``width_months`` slices.

    Each slice start is offset from the original ``start`` so month-end
    clamping never drifts. The last slice is clipped to ``end``.
    """
    if width_months < 1:
        raise ValueError(f"width_months must be >= 1, got {width_months}")

    periods: list[Period] = []
    index = 0
    current = start
    while current <= end:
        next_start = start + relativedelta(months=width_months * (index + 1))
        period_end = min(next_start - timedelta(days=1), end)
        periods.append(Period(start=current, end=period_end))
        index += 1
        current = next_start
    return periods


def current_quarter(reference_date: date) -> int:
    return (reference_date.month - 1) // 3 + 1


def quarter_period(year: int, quarter: int) -> Period:
    if quarter not in QUARTER_START_MONTH:
        raise ValueError(f"Invalid quarter: {quarter}")
    start = date(year, QUARTER_START_MONTH[quarter], 1)
    end = start + relativedelta(months=3) - timedelta(days=1)
    return Period(start=start, end=end, label=f"{year}Q{quarter}")


def quarter_walk_backward(from_year: int, from_quarter: int) -> Iterator[Period]:
    if from_quarter not in QUARTER_START_MONTH:
        raise ValueError(f"Invalid quarter: {from_quarter}")
    year, quarter = from_year, from_quarter
    while True:
        yield quarter_period(year, quarter)
        quarter -= 1
        if quarter < 1:
            quarter = 4
            year -= 1
