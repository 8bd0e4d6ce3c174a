"""
greenarea package
=================

This package contains the Green Area Rate engine: daily "green area" (low
acuity) emergency visit rates per hospital, merged over user-chosen dates.

- The CLI entry point is in `greenarea/cli.py`.
- The filter panel (selection, apply, history) is in `greenarea/engine.py`.
- Date selection lives in `indices.py`, `selection.py`, `resolver.py` and `picker.py`.
- Merging and trend tables are in `aggregate.py` and `pivot.py`.
- Stored uploads are read through `greenarea/store.py`.
"""

__version__ = '0.3.0'
