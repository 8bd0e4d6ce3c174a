"""
Exports of a panel snapshot
===========================

- `export_xlsx`   daily rate table + totals table as an Excel workbook
- `to_tsv`        the daily rate table as tab separated text (clipboard paste)
- `export_trend_png`  line chart of the daily rates

All of these read a finished `PanelSnapshot`; none of them touch the panel.

Daily table layout (same as the on-screen table):

    Kurum | 05.01 | 06.01 | ... | Ortalama
    <hospital rows, in pivot order>
    İL GENELİ (when the user may see province totals)

Rates print as "%52.3", days without data as "-".
"""

from __future__ import annotations
from typing import List, Optional
import logging
import os

import pandas as pd

from .engine import PanelSnapshot
from .models import DateKey, TimeSeriesRow, parse_date_key

logger = logging.getLogger(__name__)

DAILY_SHEET = "Günlük Yeşil Alan Oranları"
TOTALS_SHEET = "Toplam"
NO_DATA = "-"


def format_rate(rate: Optional[float]) -> str:
    return NO_DATA if rate is None else f"%{rate:.1f}"


def format_date_header(key: DateKey) -> str:
    _, m, d = parse_date_key(key)
    return f"{d:02d}.{m:02d}"


def _table_rows(snapshot: PanelSnapshot) -> List[TimeSeriesRow]:
    rows = list(snapshot.rows)
    if snapshot.province_row is not None:
        rows.append(snapshot.province_row)
    return rows


def daily_table(snapshot: PanelSnapshot) -> pd.DataFrame:
    """Formatted daily table (strings), one row per hospital plus the province row."""
    headers = ["Kurum"] + [format_date_header(d) for d in snapshot.dates] + ["Ortalama"]
    body = []
    for row in _table_rows(snapshot):
        values = [format_rate(row.daily_rates.get(d)) for d in snapshot.dates]
        body.append([row.label] + values + [format_rate(row.average())])
    return pd.DataFrame(body, columns=headers)


def totals_table(snapshot: PanelSnapshot) -> pd.DataFrame:
    """Summed counts and rate per hospital over the whole date set."""
    labels = {r.entity_id: r.label for r in snapshot.rows}
    body = []
    for row in snapshot.rows:
        t = snapshot.totals[row.entity_id]
        body.append([labels[row.entity_id], t.green_count, t.total_count, round(t.rate, 1)])
    if snapshot.province is not None:
        p = snapshot.province
        label = snapshot.province_row.label if snapshot.province_row is not None else "Province"
        body.append([label, p.green_count, p.total_count, round(p.rate, 1)])
    return pd.DataFrame(body, columns=["Kurum", "Yeşil Alan Muayene", "Toplam Muayene", "Oran (%)"])


def to_tsv(snapshot: PanelSnapshot) -> str:
    df = daily_table(snapshot)
    lines = ["\t".join(df.columns)]
    for values in df.itertuples(index=False):
        lines.append("\t".join(str(v) for v in values))
    return "\n".join(lines)


def default_file_name(snapshot: PanelSnapshot, ext: str = "xlsx") -> str:
    first = snapshot.dates[0] if snapshot.dates else "rapor"
    return f"yesil_alan_gunluk_{first}.{ext}"


def export_xlsx(snapshot: PanelSnapshot, out_path: str) -> str:
    os.makedirs(os.path.dirname(out_path) or ".", exist_ok=True)
    with pd.ExcelWriter(out_path, engine="openpyxl") as writer:
        daily_table(snapshot).to_excel(writer, sheet_name=DAILY_SHEET, index=False)
        totals_table(snapshot).to_excel(writer, sheet_name=TOTALS_SHEET, index=False)
    logger.info("Wrote %s (%d hospitals, %d days)", out_path, len(snapshot.rows), len(snapshot.dates))
    return out_path


def export_trend_png(snapshot: PanelSnapshot, out_path: str, *, title: str = "Günlük Yeşil Alan Oranları (%)",
                     max_lines: int = 12) -> str:
    """Line chart of daily rates; days without data break the line instead of dropping to zero."""
    try:
        import matplotlib
        matplotlib.use("Agg")
        import matplotlib.pyplot as plt
        import numpy as np
    except ImportError as e:
        raise ImportError(
            "Missing dependency: matplotlib (and numpy).\n"
            "Install with: python -m pip install matplotlib numpy"
        ) from e

    if not snapshot.dates:
        raise ValueError("No dates to chart (result set is empty).")

    x = [format_date_header(d) for d in snapshot.dates]
    plt.figure(figsize=(10, 5))
    for row in list(snapshot.rows)[:max_lines]:
        # None becomes NaN, which matplotlib leaves as a gap
        y = np.array(row.values(), dtype=float)
        plt.plot(x, y, marker="o", linewidth=1, markersize=3, label=row.label)
    if snapshot.province_row is not None:
        y = np.array(snapshot.province_row.values(), dtype=float)
        plt.plot(x, y, color="black", linestyle="--", linewidth=2, label=snapshot.province_row.label)
    plt.ylim(0, 100)
    plt.ylabel("%")
    plt.title(title)
    plt.xticks(rotation=45, ha="right")
    plt.legend(fontsize=7, loc="upper left", bbox_to_anchor=(1.0, 1.0))
    plt.tight_layout()
    os.makedirs(os.path.dirname(out_path) or ".", exist_ok=True)
    plt.savefig(out_path, dpi=150)
    plt.close()
    return out_path
