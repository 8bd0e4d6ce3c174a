"""
greenarea Command Line Interface (CLI)
======================================

Interactive terminal program, run like:

    python -m greenarea.cli --store "data/green-area"

It demonstrates:
- Argument parsing (argparse) on top of `.env`/environment settings
- A REPL loop (Read-Eval-Print Loop) for commands
- Mapping user commands to FilterPanel methods (filters, calendar, apply, export)

Uploads go to the store; everything else only changes the in-memory selection.
"""

from __future__ import annotations
import argparse, os, shlex

from .access import AccessPolicy
from .config import Settings, configure_logging, load_settings
from .engine import MISSING_AUTHORIZATION, FilterPanel
from .models import date_key
from .naming import EntityOrdering, shorten_name
from .store import JsonDirectoryStore

HELP = """
Commands:
  help
  stats
  reset
  undo
  redo

  years <y1> [y2 ...]              (example: years 2024 2025)
  months <m1> [m2 ...]             (example: months 1 2; "months" alone = all months)
  active <m>                       (which selected month the calendar works on)
  hospitals ["<name>" ...]         (narrow to some of your hospitals; none = clear)

  calendar                         (show the calendar month, * = has data)
  prev | next                      (move the calendar one month)
  click <day|YYYY-MM-DD>           (first click = start, second = end)
  hover <day|YYYY-MM-DD>           (preview the span from the picked start)
  clear                            (clear the date range)

  apply                            (fetch + compute for the current selection)
  show [n]                         (totals per hospital)
  table                            (daily rates, tab separated)

  upload <YYYY-MM-DD> "<file.xlsx>"
  export xlsx|tsv|png ["<path>"]
  report "<path.docx>"
  quit
"""


def build_panel(settings: Settings) -> FilterPanel:
    prefix = settings.name_prefix
    return FilterPanel(
        store=JsonDirectoryStore(settings.store_dir),
        access=AccessPolicy.build(settings.allowed),
        ordering=EntityOrdering(priority=settings.priority, labeler=lambda name: shorten_name(name, prefix=prefix)),
        can_upload=settings.can_upload,
        user=settings.user,
        province_label=settings.province_label,
        known_entities=tuple(settings.hospitals),
    )


def main(argv=None):
    """Entry point for the greenarea CLI.

    1) Load settings (environment, then flags)
    2) Open the store and build the availability index
    3) Start an interactive REPL
    """
    settings = load_settings()
    ap = argparse.ArgumentParser(description="Green area rate engine")
    ap.add_argument("--store", default=settings.store_dir, help="Folder with daily JSON uploads")
    ap.add_argument("--priority", default=None, help='Hospitals listed first, separated by ";"')
    ap.add_argument("--allowed", default=None, help='Hospitals this user may see, separated by ";"')
    ap.add_argument("--hospitals", default=None, help='Every hospital in the province, separated by ";"')
    ap.add_argument("--name-prefix", default=settings.name_prefix, help="City name dropped from displayed hospital names")
    ap.add_argument("--user", default=settings.user, help="Name recorded on uploads")
    ap.add_argument("--can-upload", action="store_true", default=settings.can_upload)
    ap.add_argument("--log-level", default=settings.log_level)
    args = ap.parse_args(argv)

    settings.store_dir = args.store
    settings.user = args.user
    settings.can_upload = args.can_upload
    settings.log_level = args.log_level
    settings.name_prefix = args.name_prefix
    if args.priority is not None:
        settings.priority = [p.strip() for p in args.priority.split(";") if p.strip()]
    if args.allowed is not None:
        settings.allowed = [p.strip() for p in args.allowed.split(";") if p.strip()]
    if args.hospitals is not None:
        settings.hospitals = [p.strip() for p in args.hospitals.split(";") if p.strip()]
    configure_logging(settings.log_level)

    panel = build_panel(settings)
    print(f"Loaded {len(panel.index)} days with data. Years: {panel.index.years}. Type 'help' for commands.")
    while True:
        try:
            line = input("greenarea> ")
            # Keep a lightweight log of commands for the report (reproducibility).
            stripped = line.strip()
            if stripped:
                cmd0 = stripped.split()[0].lower()
                if cmd0 not in ("help", "show", "stats", "calendar", "table", "hover", "quit"):
                    panel.command_log.append(stripped)
        except EOFError:
            break
        if not line.strip():
            continue
        if line.strip().lower() in ("quit", "exit"):
            break
        try:
            handle(panel, line)
        except Exception as e:
            print(f"Error: {e}")


def _to_key(panel: FilterPanel, token: str) -> str:
    """Accept a full DateKey or a day number of the month the calendar shows."""
    if token.isdigit():
        cal = panel.calendar()
        return date_key(cal.view_year, cal.view_month, int(token))
    return token


def handle(panel: FilterPanel, line: str) -> None:
    """Handle one CLI command line.

    This parses the command and calls the appropriate panel method.
    """
    parts = shlex.split(line)
    cmd = parts[0].lower()

    if cmd == "help":
        print(HELP)
        return

    if cmd == "stats":
        sel = panel.selection
        print(f"Years: {sorted(sel.years)} | Months: {sorted(sel.months)} | Active month: {sel.active_month}")
        print(f"Range: {sel.range.start or '-'} .. {sel.range.end or '-'} | Resolved days: {len(panel.resolved_dates())}")
        if panel.snapshot is not None:
            print(f"Last apply: {len(panel.snapshot.dates)} days, {panel.snapshot.entity_count} hospitals")
        return

    if cmd == "reset":
        panel.reset()
        print("Selection reset.")
        return

    if cmd == "undo":
        print("Undone." if panel.undo() else "Nothing to undo.")
        return

    if cmd == "redo":
        print("Redone." if panel.redo() else "Nothing to redo.")
        return

    if cmd == "years":
        tr = panel.select_years(int(p) for p in parts[1:])
        print(f"Years={sorted(panel.selection.years)}. Months available: {panel.index.months_for_years(panel.selection.years)}")
        if tr.reset:
            print(f"Reset: {', '.join(sorted(tr.reset))}")
        return

    if cmd == "months":
        tr = panel.select_months(int(p) for p in parts[1:])
        print(f"Months={sorted(panel.selection.months) or 'all'}. Active month: {panel.selection.active_month}")
        if tr.reset:
            print(f"Reset: {', '.join(sorted(tr.reset))}")
        return

    if cmd == "active":
        panel.set_active_month(int(parts[1]))
        print(f"Active month: {panel.selection.active_month} (range cleared)")
        return

    if cmd == "hospitals":
        panel.select_entities(parts[1:])
        print(f"Hospital selection: {sorted(panel.access.selected) or 'none'}")
        return

    if cmd == "calendar":
        _print_calendar(panel)
        return

    if cmd in ("prev", "next"):
        cal = panel.calendar()
        if cmd == "prev":
            cal.previous_month()
        else:
            cal.next_month()
        panel.show_month(cal.view_year, cal.view_month)
        _print_calendar(panel)
        return

    if cmd == "click":
        key = _to_key(panel, parts[1])
        if panel.click_date(key):
            rng = panel.selection.range
            print(f"Range: {rng.start} .. {rng.end or '...'}")
        else:
            print(f"{key} has no data; ignored.")
        return

    if cmd == "hover":
        span = panel.calendar().hover_preview(_to_key(panel, parts[1]))
        print(f"Preview: {span[0]} .. {span[-1]} ({len(span)} days)" if span else "No start picked.")
        return

    if cmd == "clear":
        panel.clear_range()
        print("Range cleared.")
        return

    if cmd == "apply":
        snap = panel.apply()
        if snap is None and panel.advisory == MISSING_AUTHORIZATION:
            print("Select one or more hospitals first (hospitals \"<name>\" ...).")
            return
        print(f"Applied: {len(snap.dates)} days, {snap.entity_count} hospitals.")
        if snap.province is not None:
            p = snap.province
            print(f"{panel.province_label}: {p.green_count}/{p.total_count} = %{p.rate:.1f}")
        return

    if cmd == "show":
        n = int(parts[1]) if len(parts) >= 2 else 20
        snap = panel.require_snapshot()
        for row in snap.rows[:n]:
            t = snap.totals[row.entity_id]
            print(f"{row.label} | green={t.green_count} total={t.total_count} rate=%{t.rate:.1f}")
        return

    if cmd == "table":
        from .export import to_tsv
        print(to_tsv(panel.require_snapshot()))
        return

    if cmd == "upload":
        # upload <date> "<file.xlsx>"
        from .loader import load_daily_workbook
        date, path = parts[1], parts[2]
        records = load_daily_workbook(path)
        up = panel.upload(date, records, file_name=os.path.basename(path))
        print(f"Stored {up.record_count} hospitals for {date}.")
        return

    if cmd == "export":
        # export <xlsx|tsv|png> "<path>"
        if len(parts) < 2:
            print('Usage: export xlsx "out.xlsx" | export tsv "out.tsv" | export png "out.png"')
            return
        from .export import default_file_name, export_trend_png, export_xlsx, to_tsv
        fmt = parts[1].lower()
        snap = panel.require_snapshot()
        out_path = parts[2] if len(parts) >= 3 else default_file_name(snap, fmt)
        if fmt == "xlsx":
            export_xlsx(snap, out_path)
        elif fmt == "tsv":
            with open(out_path, "w", encoding="utf-8") as f:
                f.write(to_tsv(snap))
        elif fmt == "png":
            export_trend_png(snap, out_path)
        else:
            print("Unknown export format. Use: xlsx, tsv or png")
            return
        print(f"Exported {fmt.upper()} to {out_path}")
        return

    if cmd == "report":
        from .report import ReportConfig, generate_docx_report
        path = parts[1]
        cfg = ReportConfig(command_log=panel.command_log)
        generate_docx_report(panel.require_snapshot(), path, config=cfg)
        print(f"Report written to {path}")
        return

    print("Unknown command. Type 'help'.")
    return


def _print_calendar(panel: FilterPanel) -> None:
    cal = panel.calendar()
    available = set(cal.available_days())
    picked = set(cal.selected_dates())
    print(f"{cal.view_year}-{cal.view_month:02d}")
    print(" Mo  Tu  We  Th  Fr  Sa  Su")
    cells = []
    for day in cal.grid():
        if day is None:
            cells.append("    ")
            continue
        mark = "[" if date_key(cal.view_year, cal.view_month, day) in picked else " "
        star = "*" if day in available else " "
        cells.append(f"{mark}{day:2d}{star}")
    for i in range(0, len(cells), 7):
        print("".join(cells[i:i + 7]))


if __name__ == "__main__":
    main()
