"""
Pivot builder (daily trend table)
=================================

Reshapes per-date records into one row per hospital with a value for every
date in the resolved set:

- record with visits      -> green / total * 100
- record with zero visits -> 0.0
- no record that day      -> None ("absent", shown as "-" and skipped in averages)

A province row is computed the same way from the per-day province totals.
"""

from __future__ import annotations
from typing import Dict, List, Optional, Sequence, Tuple

from .aggregate import Predicate, RecordsByDate, allow_all, province_total
from .dsa import merge_sort, unique_sorted
from .models import DateKey, TimeSeriesRow, compute_rate
from .naming import EntityOrdering

PROVINCE_LABEL = "İL GENELİ"
PROVINCE_ID = "__province__"


def pivot(dates: Sequence[DateKey], records_by_date: RecordsByDate,
          is_authorized: Predicate = allow_all,
          ordering: Optional[EntityOrdering] = None) -> List[TimeSeriesRow]:
    """One TimeSeriesRow per authorized hospital, ordered by `ordering`."""
    ordering = ordering or EntityOrdering()
    sorted_dates = unique_sorted(dates)

    # entity -> date -> (green, total); repeated rows for one day are summed
    cells: Dict[str, Dict[DateKey, Tuple[int, int]]] = {}
    for d in sorted_dates:
        for rec in records_by_date.get(d, ()):
            if not is_authorized(rec.entity_id):
                continue
            per_date = cells.setdefault(rec.entity_id, {})
            g, t = per_date.get(d, (0, 0))
            per_date[d] = (g + rec.green_count, t + rec.total_count)

    rows: List[TimeSeriesRow] = []
    for eid, per_date in cells.items():
        daily: Dict[DateKey, Optional[float]] = {}
        for d in sorted_dates:
            cell = per_date.get(d)
            daily[d] = None if cell is None else compute_rate(*cell)
        rows.append(TimeSeriesRow(entity_id=eid, label=ordering.label(eid), daily_rates=daily))

    return merge_sort(rows, key=lambda r: ordering.sort_key(r.entity_id))


def province_row(dates: Sequence[DateKey], records_by_date: RecordsByDate,
                 is_authorized: Predicate = allow_all,
                 label: str = PROVINCE_LABEL) -> TimeSeriesRow:
    """Province-wide rate per day; a day with no authorized records is absent."""
    daily: Dict[DateKey, Optional[float]] = {}
    for d in unique_sorted(dates):
        day_records = [r for r in records_by_date.get(d, ()) if is_authorized(r.entity_id)]
        if not day_records:
            daily[d] = None
            continue
        daily[d] = province_total([d], records_by_date, is_authorized).rate
    return TimeSeriesRow(entity_id=PROVINCE_ID, label=label, daily_rates=daily)
