"""
Selection state and its reducer
===============================

The filter panel's choices (years, months, calendar range, active month) live
in an immutable `SelectionState`. It only changes through `reduce_selection(state, event)`,
which returns the new state plus the names of the downstream fields it had to
reset.

Cascade rules (see `_TRANSITIONS`):
- changing years may drop months that no longer exist, and always clears the range
- changing months moves the active month if needed, and always clears the range
- switching the active month clears the range
- setting or clearing the range touches nothing else

A range only ever makes sense against the years/months it was picked under, so
it is never carried across a change of filter shape.
"""

from __future__ import annotations
from dataclasses import dataclass, field, replace
from typing import Callable, Dict, FrozenSet, Iterable, Optional, Tuple, Type

from .models import DateRange

RANGE = "range"
MONTHS = "months"
ACTIVE_MONTH = "active_month"


@dataclass(frozen=True)
class SelectionState:
    years: FrozenSet[int] = frozenset()
    months: FrozenSet[int] = frozenset()
    range: DateRange = field(default_factory=DateRange)
    active_month: Optional[int] = None


# ---------------- Events ----------------

@dataclass(frozen=True)
class SetYears:
    years: FrozenSet[int]
    # months that exist in the new years; when given, selected months outside it are dropped
    available_months: Optional[FrozenSet[int]] = None


@dataclass(frozen=True)
class SetMonths:
    months: FrozenSet[int]


@dataclass(frozen=True)
class SetActiveMonth:
    month: Optional[int]


@dataclass(frozen=True)
class SetRange:
    range: DateRange


@dataclass(frozen=True)
class ClearRange:
    pass


@dataclass(frozen=True)
class ResetSelection:
    pass


@dataclass(frozen=True)
class Transition:
    state: SelectionState
    reset: FrozenSet[str] = frozenset()


def make_years(years: Iterable[int], available_months: Optional[Iterable[int]] = None) -> SetYears:
    return SetYears(
        years=frozenset(int(y) for y in years),
        available_months=frozenset(int(m) for m in available_months) if available_months is not None else None,
    )


def make_months(months: Iterable[int]) -> SetMonths:
    out = frozenset(int(m) for m in months)
    bad = [m for m in out if not 1 <= m <= 12]
    if bad:
        raise ValueError(f"Month out of range 1..12: {sorted(bad)}")
    return SetMonths(months=out)


# ---------------- Transition handlers ----------------
# Each handler returns (new_state, fields it reset).

def _fix_active_month(months: FrozenSet[int], current: Optional[int]) -> Optional[int]:
    """Keep the active month if still selected, else fall back to the earliest selected month.

    Months are a set, so the order the user clicked them in is not known here;
    the earliest month is the deterministic choice (not "the last one clicked").
    """
    if current in months:
        return current
    return min(months) if months else None


def _on_years(state: SelectionState, ev: SetYears) -> Tuple[SelectionState, FrozenSet[str]]:
    if ev.years == state.years and ev.available_months is None:
        return state, frozenset()
    reset = set()
    months = state.months
    if ev.available_months is not None:
        months = frozenset(m for m in months if m in ev.available_months)
        if months != state.months:
            reset.add(MONTHS)
    active = _fix_active_month(months, state.active_month)
    if active != state.active_month:
        reset.add(ACTIVE_MONTH)
    if ev.years != state.years or reset:
        reset.add(RANGE)
    new = SelectionState(years=ev.years, months=months, range=DateRange() if RANGE in reset else state.range,
                         active_month=active)
    return new, frozenset(reset)


def _on_months(state: SelectionState, ev: SetMonths) -> Tuple[SelectionState, FrozenSet[str]]:
    if ev.months == state.months:
        return state, frozenset()
    reset = {RANGE}
    active = _fix_active_month(ev.months, state.active_month)
    if active != state.active_month:
        reset.add(ACTIVE_MONTH)
    return replace(state, months=ev.months, range=DateRange(), active_month=active), frozenset(reset)


def _on_active_month(state: SelectionState, ev: SetActiveMonth) -> Tuple[SelectionState, FrozenSet[str]]:
    if ev.month is not None and ev.month not in state.months:
        raise ValueError(f"Active month {ev.month} is not one of the selected months {sorted(state.months)}")
    if ev.month is None and state.months:
        raise ValueError("Active month can only be cleared when no months are selected")
    if ev.month == state.active_month:
        return state, frozenset()
    return replace(state, active_month=ev.month, range=DateRange()), frozenset({RANGE})


def _on_range(state: SelectionState, ev: SetRange) -> Tuple[SelectionState, FrozenSet[str]]:
    return replace(state, range=ev.range), frozenset()


def _on_clear_range(state: SelectionState, ev: ClearRange) -> Tuple[SelectionState, FrozenSet[str]]:
    return replace(state, range=DateRange()), frozenset()


def _on_reset(state: SelectionState, ev: ResetSelection) -> Tuple[SelectionState, FrozenSet[str]]:
    return SelectionState(), frozenset({MONTHS, ACTIVE_MONTH, RANGE})


_TRANSITIONS: Dict[Type, Callable[[SelectionState, object], Tuple[SelectionState, FrozenSet[str]]]] = {
    SetYears: _on_years,
    SetMonths: _on_months,
    SetActiveMonth: _on_active_month,
    SetRange: _on_range,
    ClearRange: _on_clear_range,
    ResetSelection: _on_reset,
}


def check_invariants(state: SelectionState) -> None:
    """Raise ValueError if the state breaks a selection invariant."""
    if state.active_month is not None and state.active_month not in state.months:
        raise ValueError("active_month must be one of the selected months")
    if state.active_month is None and state.months:
        raise ValueError("active_month must be set when months are selected")
    if state.range.end is not None and state.range.start is None:
        raise ValueError("range end without start")


def reduce_selection(state: SelectionState, event: object) -> Transition:
    """Apply one filter event and return the new state plus the reset fields."""
    handler = _TRANSITIONS.get(type(event))
    if handler is None:
        raise ValueError(f"Unknown selection event: {event!r}")
    new_state, reset = handler(state, event)
    check_invariants(new_state)
    return Transition(state=new_state, reset=reset)
