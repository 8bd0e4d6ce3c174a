"""
Daily workbook loader (Excel -> EntityRecord list)
==================================================

Each day the emergency department report is exported as a spreadsheet with
(at least) these columns:

    Kurum Adı | Yeşil Alan Muayene Sayısı | Toplam Muayene Sayısı

Key ideas:
- Header names drift between exports, so columns are found by normalized
  substring match against a few candidate names.
- Numbers may arrive as text in Turkish format ("1.234" = 1234, "12,5" = 12.5).
- Rows without a hospital name are skipped; blank or "-" counts are 0.
"""

from __future__ import annotations
from typing import List, Optional, Sequence
import logging
import numbers

import pandas as pd

from .errors import IngestionFailure
from .models import EntityRecord
from .naming import normalize_name, turkish_lower

logger = logging.getLogger(__name__)

NAME_COLUMNS = ("Kurum Adı", "Kurum", "Hastane")
GREEN_COLUMNS = ("Yeşil Alan Muayene", "Yeşil Alan")
TOTAL_COLUMNS = ("Toplam Muayene", "Toplam")


def _norm(s) -> str:
    return turkish_lower(normalize_name(str(s)))


def _find_col(df: pd.DataFrame, patterns: Sequence[str], exclude: Sequence[str] = ()) -> Optional[str]:
    """Column whose normalized header contains a pattern; earlier patterns win."""
    for p in patterns:
        np_ = _norm(p)
        for c in df.columns:
            if c not in exclude and np_ in _norm(c):
                return c
    return None


def parse_count(x) -> float:
    """Convert a cell to a number, returning 0 for blanks/invalid values."""
    if x is None:
        return 0.0
    if isinstance(x, numbers.Real):
        return 0.0 if pd.isna(x) else float(x)
    s = str(x).strip()
    if s in ("", "-"):
        return 0.0
    if "." in s and "," not in s:
        # "1.234" is a thousands separator
        s = s.replace(".", "")
    else:
        s = s.replace(".", "").replace(",", ".")
    try:
        return float(s)
    except ValueError:
        return 0.0


def records_from_frame(df: pd.DataFrame) -> List[EntityRecord]:
    """Convert a sheet (already read into a DataFrame) into records."""
    df = df.rename(columns={c: str(c).strip() for c in df.columns})
    name_col = _find_col(df, NAME_COLUMNS)
    green_col = _find_col(df, GREEN_COLUMNS, exclude=[name_col])
    # "Toplam" alone is loose, it must not grab the green column
    total_col = _find_col(df, TOTAL_COLUMNS, exclude=[name_col, green_col])

    if not name_col or not green_col or not total_col:
        raise IngestionFailure(
            "Required columns not found: need 'Kurum Adı', 'Yeşil Alan Muayene Sayısı' and "
            f"'Toplam Muayene Sayısı'. Available={list(df.columns)}"
        )

    records: List[EntityRecord] = []
    for _, row in df.iterrows():
        raw_name = row[name_col]
        name = "" if pd.isna(raw_name) else normalize_name(raw_name)
        if not name:
            continue
        green = parse_count(row[green_col])
        total = parse_count(row[total_col])
        try:
            records.append(EntityRecord(entity_id=name, green_count=int(round(green)),
                                        total_count=int(round(total))))
        except ValueError as e:
            raise IngestionFailure(f"Bad counts for {name!r}: {e}") from e
    logger.info("Parsed %d hospital rows", len(records))
    return records


def load_daily_workbook(path: str) -> List[EntityRecord]:
    """Read the first sheet of a daily export. Raises IngestionFailure on any problem."""
    try:
        df = pd.read_excel(path, engine="openpyxl")
    except Exception as e:
        raise IngestionFailure(f"Cannot read workbook {path}: {e}") from e
    if df.empty:
        raise IngestionFailure(f"Workbook {path} has no rows")
    return records_from_frame(df)
