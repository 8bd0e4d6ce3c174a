"""
Availability index (which dates have data)
==========================================

Built once from every DateKey the store knows about, and used to fill the
year/month filters and the calendar.

Example, for {2024-01-05, 2024-01-06, 2024-02-10}:
- `years` is [2024] (most recent year first)
- `months_by_year[2024]` is [1, 2]
- `days_by_year_month["2024-1"]` is [5, 6]

`dates` keeps the full ascending list so range lookups can use binary search.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Dict, Iterable, List
from bisect import bisect_left, bisect_right
import logging

from .dsa import unique_sorted, union_sorted
from .models import DateKey, date_key, parse_date_key

logger = logging.getLogger(__name__)


def month_key(year: int, month: int) -> str:
    """Key used by `days_by_year_month` (no zero padding: "2024-1")."""
    return f"{year}-{month}"


@dataclass
class AvailabilityIndex:
    """Year -> months -> days hierarchy of dates that have at least one upload."""
    years: List[int] = field(default_factory=list)
    months_by_year: Dict[int, List[int]] = field(default_factory=dict)
    days_by_year_month: Dict[str, List[int]] = field(default_factory=dict)
    dates: List[DateKey] = field(default_factory=list)

    def __contains__(self, key: DateKey) -> bool:
        i = bisect_left(self.dates, key)
        return i < len(self.dates) and self.dates[i] == key

    def __len__(self) -> int:
        return len(self.dates)

    def days_for(self, year: int, month: int) -> List[int]:
        return self.days_by_year_month.get(month_key(year, month), [])

    def months_for_years(self, years: Iterable[int]) -> List[int]:
        """Months that have data in any of the given years (for the month filter)."""
        out: List[int] = []
        for y in years:
            out = union_sorted(out, self.months_by_year.get(y, []))
        return out

    def dates_in_month(self, year: int, month: int) -> List[DateKey]:
        return [date_key(year, month, d) for d in self.days_for(year, month)]

    def dates_between(self, start: DateKey, end: DateKey) -> List[DateKey]:
        """Known dates in [start, end] (inclusive), via binary search."""
        lo = bisect_left(self.dates, start)
        hi = bisect_right(self.dates, end)
        return self.dates[lo:hi]


def build_availability_index(dates: Iterable[DateKey]) -> AvailabilityIndex:
    """Build the index from the full list of known DateKeys.

    Returns an empty index for empty input. Raises ValueError on a malformed key.
    """
    months_by_year: Dict[int, List[int]] = {}
    days_by_year_month: Dict[str, List[int]] = {}

    all_dates = unique_sorted(dates)
    for key in all_dates:
        y, m, d = parse_date_key(key)
        months_by_year.setdefault(y, []).append(m)
        days_by_year_month.setdefault(month_key(y, m), []).append(d)

    # keys were visited in ascending order, only duplicates need removing
    for y in months_by_year:
        months_by_year[y] = unique_sorted(months_by_year[y])
    for k in days_by_year_month:
        days_by_year_month[k] = unique_sorted(days_by_year_month[k])

    years = sorted(months_by_year.keys(), reverse=True)
    logger.debug("Availability index built: %d dates over %d years", len(all_dates), len(years))
    return AvailabilityIndex(
        years=years,
        months_by_year=months_by_year,
        days_by_year_month=days_by_year_month,
        dates=all_dates,
    )
