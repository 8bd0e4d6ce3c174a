from __future__ import annotations

"""
Green area report generator
---------------------------
This module writes a DOCX report from a `PanelSnapshot`.

Design goals:
- Keep the engine usable even if report dependencies are missing (lazy imports).
- Report exactly what the panel shows: the same dates, hospitals and order.
- Make gaps visible: days without an upload are listed, never shown as 0%.
"""

from dataclasses import dataclass
from typing import List, Optional, Tuple
import os
import tempfile

from .engine import PanelSnapshot
from .export import daily_table, export_trend_png, format_rate, totals_table


@dataclass
class ReportConfig:
    """High-level knobs to control how the report is written."""
    title: str = "Acil Servis Yeşil Alan Raporu"
    subtitle: str = "Günlük yeşil alan hasta oranları"
    region_name: str = "Şanlıurfa"

    # How many hospitals to list in the best/worst tables
    top_n: int = 5

    # Wider daily tables do not fit a portrait page; they go to the spreadsheet export instead
    max_daily_columns: int = 10

    # Optional: list of CLI commands used to create the current selection
    command_log: Optional[List[str]] = None


def _ranked(snapshot: PanelSnapshot) -> List[Tuple[str, float]]:
    """(label, rate) for hospitals with any visits, highest rate first."""
    out = []
    for row in snapshot.rows:
        t = snapshot.totals[row.entity_id]
        if t.total_count > 0:
            out.append((row.label, t.rate))
    out.sort(key=lambda x: x[1], reverse=True)
    return out


def generate_docx_report(snapshot: PanelSnapshot, out_path: str, *,
                         config: Optional[ReportConfig] = None) -> str:
    """Generate a DOCX report (tables + trend chart) for one snapshot."""
    config = config or ReportConfig()

    # Lazy import: only required when "report" is used.
    try:
        from docx import Document
        from docx.shared import Pt, Inches
        from docx.enum.text import WD_ALIGN_PARAGRAPH
    except ImportError as e:
        raise ImportError(
            "Missing dependency: python-docx.\n"
            "Install it with: python -m pip install python-docx"
        ) from e

    if not snapshot.dates or not snapshot.rows:
        raise ValueError("Nothing to report on (result set is empty).")

    tmpdir = tempfile.mkdtemp(prefix="greenarea_report_")
    chart_path = export_trend_png(snapshot, os.path.join(tmpdir, "trend.png"))

    doc = Document()
    style = doc.styles["Normal"]
    style.font.name = "Calibri"
    style.font.size = Pt(11)

    def _center_title(text: str, size: int, bold: bool = False, italic: bool = False) -> None:
        p = doc.add_paragraph()
        r = p.add_run(text)
        r.bold = bold
        r.italic = italic
        r.font.size = Pt(size)
        p.alignment = WD_ALIGN_PARAGRAPH.CENTER

    def _kv(key: str, value: str) -> None:
        p = doc.add_paragraph()
        r = p.add_run(f"{key}: ")
        r.bold = True
        p.add_run(value)

    def _table(df) -> None:
        t = doc.add_table(rows=1, cols=len(df.columns))
        t.style = "Table Grid"
        for i, col in enumerate(df.columns):
            t.rows[0].cells[i].text = str(col)
        for values in df.itertuples(index=False):
            cells = t.add_row().cells
            for i, v in enumerate(values):
                cells[i].text = str(v)

    _center_title(config.title, 20, bold=True)
    _center_title(f"{config.region_name} - {config.subtitle}", 12, italic=True)

    doc.add_paragraph("")
    _kv("Date range", f"{snapshot.dates[0]} to {snapshot.dates[-1]}")
    _kv("Days with data", str(len(snapshot.dates)))
    _kv("Hospitals", str(len(snapshot.rows)))
    if snapshot.province is not None:
        p = snapshot.province
        _kv("Province green area visits", f"{p.green_count:,} / {p.total_count:,} ({format_rate(p.rate)})")

    doc.add_heading("Totals over the selected days", level=1)
    _table(totals_table(snapshot))

    doc.add_heading("Daily rates", level=1)
    if len(snapshot.dates) <= config.max_daily_columns:
        _table(daily_table(snapshot))
    else:
        doc.add_paragraph(
            f"{len(snapshot.dates)} days selected; the daily table is available in the spreadsheet export."
        )
    doc.add_picture(chart_path, width=Inches(6.5))

    ranked = _ranked(snapshot)
    if ranked:
        doc.add_heading(f"Highest and lowest {config.top_n} hospitals", level=1)
        for label, rate in ranked[:config.top_n]:
            doc.add_paragraph(f"{label}: {format_rate(rate)}", style="List Bullet")
        doc.add_paragraph("")
        for label, rate in ranked[::-1][:config.top_n]:
            doc.add_paragraph(f"{label}: {format_rate(rate)}", style="List Bullet")

    # Data completeness: days a hospital is missing from the uploads
    gaps = [(row.label, sum(1 for v in row.values() if v is None)) for row in snapshot.rows]
    gaps = [g for g in gaps if g[1] > 0]
    doc.add_heading("Data completeness", level=1)
    if gaps:
        doc.add_paragraph("Hospitals missing from some daily uploads (shown as '-' in tables):")
        for label, n in gaps:
            doc.add_paragraph(f"{label}: {n} of {len(snapshot.dates)} days missing", style="List Bullet")
    else:
        doc.add_paragraph("Every hospital has data for every selected day.")

    # -----------------------------
    # Reproducibility footer
    # -----------------------------
    doc.add_heading("Reproducibility footer", level=1)
    from . import __version__
    from datetime import datetime as _dt
    doc.add_paragraph(f"greenarea version: {__version__}")
    doc.add_paragraph(f"Results computed at: {snapshot.created_at}")
    doc.add_paragraph(f"Report generated at: {_dt.now().isoformat(timespec='seconds')}")
    if config.command_log:
        doc.add_paragraph("Commands used (log):")
        for line in config.command_log:
            doc.add_paragraph(line, style="List Bullet")

    os.makedirs(os.path.dirname(out_path) or ".", exist_ok=True)
    doc.save(out_path)
    return out_path
