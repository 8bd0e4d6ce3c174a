"""
Error types
===========

Everything the engine raises on purpose derives from `GreenAreaError`, so the
CLI (or any other caller) can show one message and keep the previous results.

Gaps in the daily data are NOT errors: they show up as `None` in a
`TimeSeriesRow`.
"""


class GreenAreaError(Exception):
    """Base class for green area engine errors."""


class EmptySelection(GreenAreaError):
    """The current filters resolve to no dates; pick other years/months/range."""


class IngestionFailure(GreenAreaError):
    """An uploaded workbook could not be turned into records."""


class PersistenceFailure(GreenAreaError):
    """The record store could not be read or written."""


class ApplyInProgress(GreenAreaError):
    """A panel was asked to apply or export while it is still loading."""


class PermissionDenied(GreenAreaError):
    """The current user may not upload daily records."""
