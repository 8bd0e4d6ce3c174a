"""
Data model
==========

One uploaded spreadsheet per day gives, for every hospital, the number of
green area (low acuity) emergency visits and the total number of visits.

- `EntityRecord` is one hospital on one day.
- `DailyUpload` is the stored document for one day (all hospitals).
- `EntityTotals` is what the aggregator produces after summing many days.
- `TimeSeriesRow` is one hospital's daily rates, ready for a trend table.

Records are immutable (`frozen=True`): filters and merges build new values
instead of editing what came out of the store.

Dates are plain `YYYY-MM-DD` strings ("DateKey"). Comparing them as strings
gives chronological order, so most code never converts them to `date`.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from datetime import date
from typing import Dict, List, Optional, Tuple
import re

DateKey = str

_DATE_KEY_RE = re.compile(r"^(\d{4})-(\d{2})-(\d{2})$")


def parse_date_key(key: DateKey) -> Tuple[int, int, int]:
    """Split a `YYYY-MM-DD` key into (year, month, day).

    Raises ValueError for anything that is not a real calendar date.
    """
    m = _DATE_KEY_RE.match(str(key))
    if not m:
        raise ValueError(f"Invalid date key: {key!r} (expected YYYY-MM-DD)")
    y, mo, d = int(m.group(1)), int(m.group(2)), int(m.group(3))
    date(y, mo, d)  # raises ValueError for 2024-02-30 and friends
    return y, mo, d


def date_key(year: int, month: int, day: int) -> DateKey:
    """Format (year, month, day) as a DateKey."""
    return f"{year:04d}-{month:02d}-{day:02d}"


def compute_rate(green: float, total: float) -> float:
    """Green area rate in percent; 0.0 when there were no visits at all."""
    if total > 0:
        return green / total * 100.0
    return 0.0


@dataclass(frozen=True)
class DateRange:
    """A start/end pair picked on the calendar.

    `end` without `start` is never valid. The pair may be stored unordered;
    use `normalized()` when order matters.
    """
    start: Optional[DateKey] = None
    end: Optional[DateKey] = None

    def __post_init__(self) -> None:
        if self.end is not None and self.start is None:
            raise ValueError("DateRange.end requires a start date")

    @property
    def is_empty(self) -> bool:
        return self.start is None

    @property
    def is_complete(self) -> bool:
        return self.start is not None and self.end is not None

    def normalized(self) -> "DateRange":
        """Return the same range with the earlier date as `start`."""
        if self.is_complete and self.end < self.start:
            return DateRange(start=self.end, end=self.start)
        return self


@dataclass(frozen=True)
class EntityRecord:
    """Green/total visit counts of one hospital on one day."""
    entity_id: str
    green_count: int
    total_count: int

    def __post_init__(self) -> None:
        if self.green_count < 0 or self.total_count < 0:
            raise ValueError(f"Negative visit count for {self.entity_id!r}")

    @property
    def rate(self) -> float:
        return compute_rate(self.green_count, self.total_count)


@dataclass(frozen=True)
class DailyUpload:
    """Stored document for one date. A newer upload replaces the older one."""
    date: DateKey
    records: Tuple[EntityRecord, ...]
    file_name: str = ""
    uploaded_by: str = ""
    # epoch milliseconds
    uploaded_at: int = 0

    @property
    def record_count(self) -> int:
        return len(self.records)


@dataclass(frozen=True)
class EntityTotals:
    """Summed counts over a date set (one hospital or the province)."""
    green_count: int = 0
    total_count: int = 0

    @property
    def rate(self) -> float:
        return compute_rate(self.green_count, self.total_count)

    def plus(self, other: "EntityTotals") -> "EntityTotals":
        return EntityTotals(
            green_count=self.green_count + other.green_count,
            total_count=self.total_count + other.total_count,
        )


@dataclass
class TimeSeriesRow:
    """One hospital's rate for every date in the resolved set.

    `daily_rates[d] is None` means "no record that day", which is different
    from a computed rate of 0.0.
    """
    entity_id: str
    label: str
    daily_rates: Dict[DateKey, Optional[float]] = field(default_factory=dict)

    def values(self) -> List[Optional[float]]:
        """Rates in date order (the dict is filled in ascending date order)."""
        return list(self.daily_rates.values())

    def average(self) -> Optional[float]:
        """Plain mean of the days that have data, or None if there are none."""
        present = [v for v in self.daily_rates.values() if v is not None]
        if not present:
            return None
        return sum(present) / len(present)
