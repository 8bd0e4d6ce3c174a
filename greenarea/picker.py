"""
Calendar range picker
=====================

A two-click state machine for picking a start/end pair on a month calendar.

States:
- EMPTY           nothing picked
- START_PICKED    start set, waiting for the second click
- RANGE_COMPLETE  start and end set (start <= end)

Clicks on days without data are ignored. A click after a complete range starts
a new selection instead of extending the old one. Moving between months only
changes which month is shown.

The hover preview while waiting for the second click is not part of the
picker's state: the caller owns the hovered date and asks `preview_range`.
"""

from __future__ import annotations
from calendar import monthrange
from datetime import date, timedelta
from typing import Iterable, List, Optional, Set
import logging

from .dsa import unique_sorted
from .models import DateKey, DateRange, date_key, parse_date_key

logger = logging.getLogger(__name__)

EMPTY = "empty"
START_PICKED = "start_picked"
RANGE_COMPLETE = "range_complete"


def _to_date(key: DateKey) -> date:
    return date(*parse_date_key(key))


def calendar_span(a: DateKey, b: DateKey) -> List[DateKey]:
    """Every calendar day between a and b inclusive, ascending (either order)."""
    lo, hi = sorted((_to_date(a), _to_date(b)))
    out: List[DateKey] = []
    cur = lo
    while cur <= hi:
        out.append(cur.isoformat())
        cur += timedelta(days=1)
    return out


def preview_range(start: Optional[DateKey], hover: Optional[DateKey]) -> List[DateKey]:
    """Dates to highlight while the user hovers after picking a start."""
    if start is None or hover is None:
        return []
    return calendar_span(start, hover)


def month_grid(year: int, month: int) -> List[Optional[int]]:
    """Day numbers of a month laid out Monday-first, padded with None before day 1."""
    first_weekday, days_in_month = monthrange(year, month)  # Monday == 0
    return [None] * first_weekday + list(range(1, days_in_month + 1))


def state_of(value: DateRange) -> str:
    if value.start is None:
        return EMPTY
    if value.end is None:
        return START_PICKED
    return RANGE_COMPLETE


class CalendarSelector:
    """Start/end picker bound to the set of dates that have uploads."""

    def __init__(self, available_dates: Iterable[DateKey], year: int, month: int,
                 value: Optional[DateRange] = None) -> None:
        self._available: Set[DateKey] = set(available_dates)
        self.view_year = year
        self.view_month = month
        self.value = value.normalized() if value is not None else DateRange()

    @property
    def state(self) -> str:
        return state_of(self.value)

    # ---------------- Clicks ----------------
    def click(self, day: int) -> bool:
        """Click a day of the month currently shown. Returns False if ignored."""
        return self.click_date(date_key(self.view_year, self.view_month, day))

    def click_date(self, key: DateKey) -> bool:
        if key not in self._available:
            return False
        state = self.state
        if state == START_PICKED:
            lo, hi = sorted((self.value.start, key))
            self.value = DateRange(start=lo, end=hi)
        else:
            # EMPTY or RANGE_COMPLETE: start over
            self.value = DateRange(start=key)
        logger.debug("Calendar %s -> %s (%s)", state, self.state, key)
        return True

    def clear(self) -> None:
        self.value = DateRange()

    def hover_preview(self, hover: Optional[DateKey]) -> List[DateKey]:
        """Preview span for a hovered date; empty unless a start is waiting for its end."""
        if self.state != START_PICKED:
            return []
        return preview_range(self.value.start, hover)

    # ---------------- Navigation ----------------
    def show_month(self, year: int, month: int) -> None:
        if not 1 <= month <= 12:
            raise ValueError(f"Month out of range 1..12: {month}")
        self.view_year, self.view_month = year, month

    def next_month(self) -> None:
        if self.view_month == 12:
            self.show_month(self.view_year + 1, 1)
        else:
            self.show_month(self.view_year, self.view_month + 1)

    def previous_month(self) -> None:
        if self.view_month == 1:
            self.show_month(self.view_year - 1, 12)
        else:
            self.show_month(self.view_year, self.view_month - 1)

    # ---------------- Read-only views ----------------
    def grid(self) -> List[Optional[int]]:
        return month_grid(self.view_year, self.view_month)

    def available_days(self) -> List[int]:
        """Days of the shown month that can be clicked."""
        out = []
        for key in self._available:
            y, m, d = parse_date_key(key)
            if y == self.view_year and m == self.view_month:
                out.append(d)
        return unique_sorted(out)

    def selected_dates(self) -> List[DateKey]:
        """Calendar days covered by the current value (start only while picking)."""
        if self.value.start is None:
            return []
        if self.value.end is None:
            return [self.value.start]
        return calendar_span(self.value.start, self.value.end)

    def day_count(self) -> int:
        """Inclusive length of a complete range in calendar days, else 0."""
        if not self.value.is_complete:
            return 0
        return (_to_date(self.value.end) - _to_date(self.value.start)).days + 1
