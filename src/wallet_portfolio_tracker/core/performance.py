"""Mocked historical portfolio performance series."""

import random
from datetime import UTC, datetime, timedelta
from decimal import Decimal
from enum import StrEnum

from pydantic import BaseModel

# Simulated values vary by up to 15% in either direction.
MAX_VARIATION = 0.15


class Period(StrEnum):
    """Chart period."""

    DAY = "1d"
    WEEK = "1w"
    MONTH = "1m"
    YEAR = "1y"


# period -> (number of points, spacing, label format)
PERIOD_LAYOUT: dict[Period, tuple[int, timedelta, str]] = {
    Period.DAY: (24, timedelta(hours=1), "%H:00"),
    Period.WEEK: (7, timedelta(days=1), "%a"),
    Period.MONTH: (30, timedelta(days=1), "%b %d"),
    Period.YEAR: (52, timedelta(weeks=1), "%b %d"),
}


class HistoryPoint(BaseModel):
    """One point of the performance chart."""

    timestamp: datetime
    label: str
    usd_value: Decimal


def generate_history(
    current_value: Decimal,
    period: Period = Period.YEAR,
    now: datetime | None = None,
    rng: random.Random | None = None,
) -> list[HistoryPoint]:
    """
    Simulate a value history ending at ``now``.

    No historical balances are fetched; every point is the current value
    scaled by a random factor in [0.85, 1.15], floored at zero.

    Parameters
    ----------
    current_value : Decimal
        Current portfolio value in USD
    period : Period
        Chart period
    now : datetime | None
        End of the series (defaults to UTC now)
    rng : random.Random | None
        Random source, seedable for reproducible output

    Returns
    -------
    list[HistoryPoint]
        Points in chronological order, the last one at ``now``

    """
    rng = rng or random.Random()
    now = now or datetime.now(UTC)
    count, step, label_format = PERIOD_LAYOUT[Period(period)]

    points = []
    for i in range(count - 1, -1, -1):
        timestamp = now - step * i
        variation = Decimal(str(round(rng.uniform(-MAX_VARIATION, MAX_VARIATION), 6)))
        value = max(Decimal("0"), current_value * (1 + variation))
        points.append(HistoryPoint(timestamp=timestamp, label=timestamp.strftime(label_format), usd_value=value))
    return points
