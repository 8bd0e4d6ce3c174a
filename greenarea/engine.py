"""
Filter panel (session engine)
=============================

A `FilterPanel` is one independent view on the data (the summary cards and the
daily table each get their own). It works like a tiny analytics session:

1) Load the availability index from the store (once, and again after uploads)
2) Keep the user's current `SelectionState` (years, months, range, active month)
3) Change it only through selection events, with undo/redo history
4) On `apply()`: resolve dates -> fetch records -> aggregate + pivot
5) Keep the last successful result as an immutable `PanelSnapshot` for exports

A failed apply (empty selection, store error) leaves the previous snapshot and
selection exactly as they were.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, Iterable, List, Optional, Sequence, Tuple
import logging

from .access import AccessPolicy
from .aggregate import AggregateResult, aggregate, province_total
from .errors import ApplyInProgress, EmptySelection, GreenAreaError, PermissionDenied
from .indices import AvailabilityIndex
from .models import DailyUpload, DateKey, DateRange, EntityRecord, EntityTotals, TimeSeriesRow, parse_date_key
from .naming import EntityOrdering
from .picker import CalendarSelector
from .pivot import PROVINCE_LABEL, pivot, province_row
from .resolver import resolve_dates
from .selection import (ClearRange, ResetSelection, SelectionState, SetActiveMonth, SetRange, Transition,
                        make_months, make_years, reduce_selection)
from .store import RecordStore

logger = logging.getLogger(__name__)

MISSING_AUTHORIZATION = "missing_authorization"


@dataclass(frozen=True)
class PanelSnapshot:
    """Everything one successful apply produced. Exporters only read this."""
    selection: SelectionState
    dates: Tuple[DateKey, ...]
    totals: AggregateResult
    rows: Tuple[TimeSeriesRow, ...]
    province: Optional[EntityTotals] = None
    province_row: Optional[TimeSeriesRow] = None
    created_at: str = ""

    @property
    def entity_count(self) -> int:
        return len(self.totals)


@dataclass
class FilterPanel:
    """One filter panel: selection + history + last results."""
    store: RecordStore
    access: AccessPolicy = field(default_factory=AccessPolicy)
    ordering: EntityOrdering = field(default_factory=EntityOrdering)
    can_upload: bool = False
    user: str = "anonymous"
    province_label: str = PROVINCE_LABEL
    # Every hospital in the province; full access is measured against this list
    known_entities: Sequence[str] = ()
    # Stores user commands (for reproducibility in reports)
    command_log: List[str] = field(default_factory=list)

    index: AvailabilityIndex = field(init=False)
    selection: SelectionState = field(default_factory=SelectionState, init=False)
    snapshot: Optional[PanelSnapshot] = field(default=None, init=False)
    loading: bool = field(default=False, init=False)
    advisory: Optional[str] = field(default=None, init=False)

    # Stacks for undo/redo (store previous selections)
    _undo: List[SelectionState] = field(default_factory=list, init=False)
    _redo: List[SelectionState] = field(default_factory=list, init=False)
    # calendar month currently shown (UI only, never part of the selection)
    _view: Optional[Tuple[int, int]] = field(default=None, init=False)

    def __post_init__(self) -> None:
        self.refresh_index()

    def refresh_index(self) -> None:
        self.index = self.store.get_availability_index()
        logger.info("Availability index loaded: %d dates", len(self.index))

    # ---------------- History (Stacks) ----------------
    def _push_history(self) -> None:
        self._undo.append(self.selection)
        self._redo.clear()

    def undo(self) -> bool:
        if not self._undo:
            return False
        self._redo.append(self.selection)
        self.selection = self._undo.pop()
        self._view = None
        return True

    def redo(self) -> bool:
        if not self._redo:
            return False
        self._undo.append(self.selection)
        self.selection = self._redo.pop()
        self._view = None
        return True

    # ---------------- Selection events ----------------
    def dispatch(self, event: object) -> Transition:
        """Run one selection event through the reducer and record history."""
        tr = reduce_selection(self.selection, event)
        if tr.state != self.selection:
            self._push_history()
            self.selection = tr.state
        if tr.reset:
            logger.debug("Selection change reset %s", sorted(tr.reset))
        if "active_month" in tr.reset or isinstance(event, SetActiveMonth):
            self._view = None
        return tr

    def select_years(self, years: Iterable[int]) -> Transition:
        years = list(years)
        return self.dispatch(make_years(years, self.index.months_for_years(years)))

    def select_months(self, months: Iterable[int]) -> Transition:
        return self.dispatch(make_months(months))

    def set_active_month(self, month: Optional[int]) -> Transition:
        return self.dispatch(SetActiveMonth(month))

    def set_range(self, start: Optional[DateKey], end: Optional[DateKey] = None) -> Transition:
        return self.dispatch(SetRange(DateRange(start=start, end=end)))

    def clear_range(self) -> Transition:
        return self.dispatch(ClearRange())

    def reset(self) -> Transition:
        return self.dispatch(ResetSelection())

    def select_entities(self, entity_ids: Iterable[str]) -> None:
        """Narrow the visible hospitals (never beyond the allow-list)."""
        self.access = self.access.with_selection(entity_ids)

    # ---------------- Calendar ----------------
    def candidate_dates(self) -> List[DateKey]:
        """Dates the calendar may offer: the selected years within the active month.

        With no active month there is nothing to pick; a range always belongs
        to exactly one month.
        """
        active = self.selection.active_month
        if active is None:
            return []
        return resolve_dates(SelectionState(years=self.selection.years, months=frozenset([active])), self.index)

    def _default_view(self, candidates: Sequence[DateKey]) -> Tuple[int, int]:
        if self.selection.years:
            year = max(self.selection.years)
            if self.selection.active_month is not None:
                return year, self.selection.active_month
            months = self.index.months_by_year.get(year)
            if months:
                return year, months[-1]
        if candidates:
            y, m, _ = parse_date_key(candidates[-1])
            return y, m
        now = datetime.now()
        return now.year, now.month

    def calendar(self) -> CalendarSelector:
        """Calendar bound to the current selection; clicks go through `click_date`."""
        candidates = self.candidate_dates()
        year, month = self._view or self._default_view(candidates)
        return CalendarSelector(candidates, year, month, value=self.selection.range)

    def show_month(self, year: int, month: int) -> None:
        cal = self.calendar()
        cal.show_month(year, month)
        self._view = (cal.view_year, cal.view_month)

    def click_date(self, key: DateKey) -> bool:
        """Calendar click; days without data are ignored (returns False)."""
        cal = self.calendar()
        if not cal.click_date(key):
            return False
        self.dispatch(SetRange(cal.value))
        return True

    # ---------------- Apply ----------------
    def resolved_dates(self) -> List[DateKey]:
        return resolve_dates(self.selection, self.index)

    def apply(self) -> Optional[PanelSnapshot]:
        """Fetch and compute results for the current selection.

        Raises EmptySelection when no dates match, ApplyInProgress if a previous
        apply is still running. Returns None (and sets `advisory`) when a
        restricted user has not picked any hospitals yet.
        """
        if self.loading:
            raise ApplyInProgress("This panel is still loading")
        dates = self.resolved_dates()
        if not dates:
            raise EmptySelection("No data for the selected years/months/range")

        self.loading = True
        try:
            records_by_date = self.store.list_records_for_dates(dates)
            total_entities = self.entity_universe_size(records_by_date)
            if self.access.needs_selection(total_entities):
                self.advisory = MISSING_AUTHORIZATION
                logger.info("Apply skipped: hospital selection required")
                return None
            self.advisory = None
            self.snapshot = self._compute(dates, records_by_date, total_entities)
            logger.info("Applied selection: %d dates, %d hospitals", len(dates), self.snapshot.entity_count)
            return self.snapshot
        finally:
            self.loading = False

    def entity_universe_size(self, records_by_date: Dict[DateKey, List[EntityRecord]]) -> int:
        """Number of hospitals full access is judged against.

        The configured `known_entities` list when there is one, otherwise the
        hospitals present in the fetched records.
        """
        if self.known_entities:
            return len(set(self.known_entities))
        return len({r.entity_id for rs in records_by_date.values() for r in rs})

    def _compute(self, dates: List[DateKey], records_by_date: Dict[DateKey, List[EntityRecord]],
                 total_entities: int) -> PanelSnapshot:
        allowed = self.access.is_authorized
        full = self.access.has_full_access(total_entities)
        return PanelSnapshot(
            selection=self.selection,
            dates=tuple(dates),
            totals=aggregate(dates, records_by_date, allowed),
            rows=tuple(pivot(dates, records_by_date, allowed, self.ordering)),
            province=province_total(dates, records_by_date, allowed) if full else None,
            province_row=province_row(dates, records_by_date, allowed, self.province_label) if full else None,
            created_at=datetime.now().isoformat(timespec="seconds"),
        )

    def require_snapshot(self) -> PanelSnapshot:
        """Snapshot for exporters; refuses while loading or before the first apply."""
        if self.loading:
            raise ApplyInProgress("Cannot export while the panel is loading")
        if self.snapshot is None:
            raise GreenAreaError("Nothing to export yet: apply a selection first")
        return self.snapshot

    # ---------------- Upload ----------------
    def upload(self, date: DateKey, records: Sequence[EntityRecord], file_name: str = "") -> DailyUpload:
        """Store one day's records and reload the availability index."""
        if not self.can_upload:
            raise PermissionDenied(f"{self.user} may not upload daily records")
        upload = self.store.upload_daily_records(date, records, self.user, file_name=file_name)
        self.refresh_index()
        return upload
