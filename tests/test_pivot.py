"""
Pivot builder tests: absent vs zero cells, row ordering and the province row.
"""
import pytest

from greenarea.access import AccessPolicy
from greenarea.models import EntityRecord
from greenarea.naming import EntityOrdering
from greenarea.pivot import PROVINCE_ID, PROVINCE_LABEL, pivot, province_row

from conftest import A, B, rec

DATES = ["2024-01-05", "2024-01-06", "2024-02-10"]


def row_for(rows, entity_id):
    return next(r for r in rows if r.entity_id == entity_id)


class TestPivotCells:
    def test_absent_is_not_zero(self, records_by_date):
        rows = pivot(DATES, records_by_date)
        b = row_for(rows, B)

        assert b.daily_rates["2024-01-05"] == pytest.approx(50.0)
        assert b.daily_rates["2024-01-06"] == 0.0  # reported, zero visits
        assert b.daily_rates["2024-02-10"] is None  # did not report

    def test_every_row_covers_every_date(self, records_by_date):
        for row in pivot(DATES, records_by_date):
            assert list(row.daily_rates) == DATES

    def test_average_skips_absent_days(self, records_by_date):
        b = row_for(pivot(DATES, records_by_date), B)
        assert b.average() == pytest.approx(25.0)

    def test_no_row_for_hospital_without_records(self, records_by_date):
        rows = pivot(["2024-02-10"], records_by_date)
        assert [r.entity_id for r in rows] == [A]

    def test_duplicate_rows_for_one_day_are_summed(self):
        data = {"2024-01-05": [rec(A, 1, 4), rec(A, 3, 4)]}
        row = pivot(["2024-01-05"], data)[0]
        assert row.daily_rates["2024-01-05"] == pytest.approx(50.0)

    def test_unauthorized_hospitals_have_no_row(self, records_by_date):
        rows = pivot(DATES, records_by_date, AccessPolicy.build([A]))
        assert [r.entity_id for r in rows] == [A]


class TestPivotOrdering:
    def test_priority_first_then_alphabetical(self):
        names = ["Zeytin DH", "Çiçek DH", "Akçakale DH", "Merkez EAH"]
        data = {"2024-01-05": [EntityRecord(n, 1, 2) for n in names]}
        ordering = EntityOrdering(priority=["Merkez EAH"])

        rows = pivot(["2024-01-05"], data, ordering=ordering)

        assert [r.entity_id for r in rows] == ["Merkez EAH", "Akçakale DH", "Çiçek DH", "Zeytin DH"]

    def test_turkish_letters_sort_in_place(self):
        names = ["Ilgın", "İzmir", "Hilvan", "Ceylanpınar", "Çamlıdere"]
        data = {"2024-01-05": [EntityRecord(n, 0, 1) for n in names]}

        rows = pivot(["2024-01-05"], data)

        assert [r.entity_id for r in rows] == ["Ceylanpınar", "Çamlıdere", "Hilvan", "Ilgın", "İzmir"]


class TestProvinceRow:
    def test_province_row_values(self, records_by_date):
        row = province_row(DATES, records_by_date)

        assert row.entity_id == PROVINCE_ID
        assert row.label == PROVINCE_LABEL
        assert row.daily_rates["2024-01-05"] == pytest.approx(50.0)
        assert row.daily_rates["2024-01-06"] == pytest.approx(50.0)
        assert row.daily_rates["2024-02-10"] == pytest.approx(75.0)

    def test_day_without_records_is_absent(self, records_by_date):
        row = province_row(["2024-01-05", "2024-03-01"], records_by_date)
        assert row.daily_rates["2024-03-01"] is None

    def test_day_with_only_zero_totals_is_zero(self):
        data = {"2024-01-05": [rec(A, 0, 0)]}
        assert province_row(["2024-01-05"], data).daily_rates["2024-01-05"] == 0.0
