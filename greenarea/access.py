"""
Hospital access filter
======================

Each user carries an allow-list of hospitals. By convention an EMPTY allow-list
means "all hospitals" (administrators are stored that way). That convention is
the `empty_allows_all` flag on `AccessPolicy`, not an accident of `if allowed:`.

A user may additionally pick a sub-selection; it can only narrow the
allow-list, never widen it.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import FrozenSet, Iterable, Optional


@dataclass(frozen=True)
class AccessPolicy:
    allowed: FrozenSet[str] = frozenset()
    selected: FrozenSet[str] = frozenset()
    empty_allows_all: bool = True

    @classmethod
    def build(cls, allowed: Optional[Iterable[str]] = None, selected: Optional[Iterable[str]] = None,
              empty_allows_all: bool = True) -> "AccessPolicy":
        return cls(
            allowed=frozenset(allowed or ()),
            selected=frozenset(selected or ()),
            empty_allows_all=empty_allows_all,
        )

    def with_selection(self, selected: Iterable[str]) -> "AccessPolicy":
        return AccessPolicy(allowed=self.allowed, selected=frozenset(selected),
                            empty_allows_all=self.empty_allows_all)

    @property
    def unrestricted(self) -> bool:
        return not self.allowed and self.empty_allows_all

    def is_authorized(self, entity_id: str) -> bool:
        if not self.allowed:
            return self.empty_allows_all
        if self.selected:
            return entity_id in self.selected and entity_id in self.allowed
        return entity_id in self.allowed

    # lets the policy be passed wherever a predicate is expected
    __call__ = is_authorized

    def has_full_access(self, total_entities: int) -> bool:
        """True when the user may see province-wide totals."""
        if self.unrestricted:
            return True
        return bool(self.allowed) and len(self.allowed) >= total_entities

    def needs_selection(self, total_entities: int) -> bool:
        """Restricted user who has not picked any hospitals yet (advisory, not an error)."""
        if not self.allowed or self.has_full_access(total_entities):
            return False
        return not self.selected


def is_authorized(entity_id: str, allowed: Iterable[str], selected: Iterable[str]) -> bool:
    """Three-argument form using the default "empty allow-list means everything" convention."""
    return AccessPolicy.build(allowed, selected).is_authorized(entity_id)
