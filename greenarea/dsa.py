"""
Sorted-sequence utilities
=========================

Small, explicit helpers over sorted lists. DateKeys sort correctly as plain
strings, so the same helpers work for dates, months and years.

Included:
- Merge Sort (stable, O(n log n)) with a key function
- Union of two ascending lists (two-pointer technique)
- De-duplication of an ascending list
"""

from __future__ import annotations
from typing import Any, Callable, Iterable, List, TypeVar

T = TypeVar("T")


def merge_sort(arr: List[T], key: Callable[[T], Any] = lambda x: x, reverse: bool = False) -> List[T]:
    """Stable merge sort.

    The pivot sorts hospitals by a composite (priority, collation) key; two
    names can collate equal, and stability keeps them in the order the
    records arrived instead of shuffling rows between applies.
    """
    if len(arr) <= 1:
        return arr[:]
    mid = len(arr) // 2
    left = merge_sort(arr[:mid], key=key, reverse=reverse)
    right = merge_sort(arr[mid:], key=key, reverse=reverse)
    return _merge(left, right, key=key, reverse=reverse)


def _merge(left: List[T], right: List[T], key: Callable[[T], Any], reverse: bool) -> List[T]:
    out: List[T] = []
    # i and j are pointers into each sorted list
    i = j = 0
    while i < len(left) and j < len(right):
        a, b = key(left[i]), key(right[j])
        # ties go left so equal keys keep their input order
        take_left = (a >= b) if reverse else (a <= b)
        if take_left:
            out.append(left[i]); i += 1
        else:
            out.append(right[j]); j += 1
    out.extend(left[i:])
    out.extend(right[j:])
    return out


def unique_sorted(values: Iterable[T]) -> List[T]:
    """Sort ascending and drop duplicates."""
    out: List[T] = []
    for v in sorted(values):
        if not out or out[-1] != v:
            out.append(v)
    return out


def union_sorted(a: List[T], b: List[T]) -> List[T]:
    """Merge two ascending lists into one ascending, duplicate-free list."""
    i = j = 0
    out: List[T] = []
    while i < len(a) and j < len(b):
        if a[i] == b[j]:
            x = a[i]; i += 1; j += 1
        elif a[i] < b[j]:
            x = a[i]; i += 1
        else:
            x = b[j]; j += 1
        if not out or out[-1] != x:
            out.append(x)
    for x in a[i:] + b[j:]:
        if not out or out[-1] != x:
            out.append(x)
    return out
