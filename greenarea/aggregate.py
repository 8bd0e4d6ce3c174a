"""
Aggregator
==========

Sums green/total counts per hospital over a set of dates, then derives the
rate from the sums (never by averaging daily rates).

Summation is order independent, so splitting a date set in two and merging the
two results with `merge_results` gives the same answer as one pass.
"""

from __future__ import annotations
from typing import Callable, Dict, Iterable, List, Mapping

from .models import DateKey, EntityRecord, EntityTotals

AggregateResult = Dict[str, EntityTotals]
RecordsByDate = Mapping[DateKey, List[EntityRecord]]
Predicate = Callable[[str], bool]


def allow_all(entity_id: str) -> bool:
    return True


def aggregate(dates: Iterable[DateKey], records_by_date: RecordsByDate,
              is_authorized: Predicate = allow_all) -> AggregateResult:
    """Per-hospital totals over `dates`. Dates with no records add nothing."""
    green: Dict[str, int] = {}
    total: Dict[str, int] = {}
    for d in dates:
        for rec in records_by_date.get(d, ()):
            if not is_authorized(rec.entity_id):
                continue
            green[rec.entity_id] = green.get(rec.entity_id, 0) + rec.green_count
            total[rec.entity_id] = total.get(rec.entity_id, 0) + rec.total_count
    return {eid: EntityTotals(green_count=green[eid], total_count=total[eid]) for eid in green}


def province_total(dates: Iterable[DateKey], records_by_date: RecordsByDate,
                   is_authorized: Predicate = allow_all) -> EntityTotals:
    """All authorized hospitals summed into one pseudo-entity."""
    out = EntityTotals()
    for totals in aggregate(dates, records_by_date, is_authorized).values():
        out = out.plus(totals)
    return out


def merge_results(a: AggregateResult, b: AggregateResult) -> AggregateResult:
    """Entity-wise sum of two results (e.g. two disjoint sub-ranges)."""
    out: AggregateResult = dict(a)
    for eid, totals in b.items():
        out[eid] = out[eid].plus(totals) if eid in out else totals
    return out
