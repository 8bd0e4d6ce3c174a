"""
Range resolver
==============

Turns the panel's `SelectionState` into the concrete list of dates to fetch.

Priority:
1) no years selected -> nothing
2) a complete calendar range -> every known date inside it (either order)
3) otherwise -> known dates of the selected years, limited to the selected
   months when any are selected

Dates inside a range that have no upload (weekends, holidays) are dropped
quietly. The result is always ascending with no duplicates.
"""

from __future__ import annotations
from typing import Iterable, List, Optional

from .dsa import unique_sorted
from .indices import AvailabilityIndex
from .models import DateKey, parse_date_key
from .selection import SelectionState


def resolve_dates(
    selection: SelectionState,
    index: AvailabilityIndex,
    known_dates: Optional[Iterable[DateKey]] = None,
) -> List[DateKey]:
    """Resolve a selection into an ascending list of DateKeys.

    `known_dates` defaults to the dates the index was built from. When given,
    it should be the same set (or a narrower one, e.g. the calendar's dates).
    """
    if not selection.years:
        return []

    rng = selection.range
    if rng.is_complete:
        lo, hi = min(rng.start, rng.end), max(rng.start, rng.end)
        if known_dates is None:
            return index.dates_between(lo, hi)
        return [d for d in unique_sorted(known_dates) if lo <= d <= hi]

    known = index.dates if known_dates is None else unique_sorted(known_dates)

    out: List[DateKey] = []
    for key in known:
        y, m, _ = parse_date_key(key)
        if y not in selection.years:
            continue
        if selection.months and m not in selection.months:
            continue
        out.append(key)
    return out
