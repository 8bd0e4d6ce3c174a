"""
Workbook loader tests: column detection, Turkish number formats and xlsx reading.
"""
import pandas as pd
import pytest

from greenarea.errors import IngestionFailure
from greenarea.loader import load_daily_workbook, parse_count, records_from_frame
from greenarea.models import EntityRecord


def frame(rows, columns=("Kurum Adı", "Yeşil Alan Muayene Sayısı", "Toplam Muayene Sayısı")):
    return pd.DataFrame(rows, columns=list(columns))


class TestParseCount:
    @pytest.mark.parametrize("raw, expected", [
        (12, 12.0),
        (3.5, 3.5),
        ("1.234", 1234.0),
        ("12,5", 12.5),
        ("1.234,5", 1234.5),
        ("  7 ", 7.0),
        ("", 0.0),
        ("-", 0.0),
        ("abc", 0.0),
        (None, 0.0),
        (float("nan"), 0.0),
    ])
    def test_values(self, raw, expected):
        assert parse_count(raw) == expected


class TestRecordsFromFrame:
    def test_basic_sheet(self):
        df = frame([
            ["Birecik Devlet Hastanesi", 120, 400],
            ["Siverek  Devlet Hastanesi ", "1.050", "2.100"],
        ])

        assert records_from_frame(df) == [
            EntityRecord("Birecik Devlet Hastanesi", 120, 400),
            EntityRecord("Siverek Devlet Hastanesi", 1050, 2100),
        ]

    def test_blank_names_skipped(self):
        df = frame([["Birecik DH", 1, 2], [None, 5, 5], ["   ", 3, 3]])
        assert [r.entity_id for r in records_from_frame(df)] == ["Birecik DH"]

    def test_header_variants(self):
        df = frame([["Harran DH", 2, 8]], columns=("KURUM", "Yeşil Alan", "Toplam"))
        assert records_from_frame(df) == [EntityRecord("Harran DH", 2, 8)]

    def test_total_column_not_confused_with_green(self):
        # both headers contain "Muayene"; "Toplam" must pick the total column
        df = frame([["Suruç DH", 4, 10]],
                   columns=("Kurum Adı", "Toplam Yeşil Alan Muayene", "Toplam Muayene Sayısı"))
        assert records_from_frame(df) == [EntityRecord("Suruç DH", 4, 10)]

    def test_missing_column_lists_available(self):
        df = frame([["Birecik DH", 1]], columns=("Kurum Adı", "Yeşil Alan Muayene Sayısı"))
        with pytest.raises(IngestionFailure) as exc:
            records_from_frame(df)
        assert "Available=" in str(exc.value)

    def test_negative_counts_rejected(self):
        with pytest.raises(IngestionFailure):
            records_from_frame(frame([["Birecik DH", -1, 2]]))


class TestLoadDailyWorkbook:
    def test_reads_xlsx(self, tmp_path):
        path = tmp_path / "05.01.2024.xlsx"
        frame([["Birecik DH", 10, 20], ["Viranşehir DH", "1.200", "3.000"]]).to_excel(path, index=False)

        assert load_daily_workbook(str(path)) == [
            EntityRecord("Birecik DH", 10, 20),
            EntityRecord("Viranşehir DH", 1200, 3000),
        ]

    def test_unreadable_file(self, tmp_path):
        path = tmp_path / "broken.xlsx"
        path.write_bytes(b"not a workbook")
        with pytest.raises(IngestionFailure):
            load_daily_workbook(str(path))

    def test_empty_sheet(self, tmp_path):
        path = tmp_path / "empty.xlsx"
        frame([]).to_excel(path, index=False)
        with pytest.raises(IngestionFailure):
            load_daily_workbook(str(path))
