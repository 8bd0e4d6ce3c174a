"""
Record store tests: in-memory and JSON-directory stores.
"""
import json
import os

import pytest

from greenarea.errors import IngestionFailure, PersistenceFailure
from greenarea.models import DailyUpload
from greenarea.store import JsonDirectoryStore, MemoryStore, upload_from_dict, upload_to_dict

from conftest import A, B, rec


@pytest.fixture(params=["memory", "json"])
def any_store(request, tmp_path):
    if request.param == "memory":
        return MemoryStore()
    return JsonDirectoryStore(str(tmp_path / "green-area"))


class TestStoreContract:
    def test_empty_store(self, any_store):
        assert any_store.available_dates() == []
        assert any_store.list_records_for_dates(["2024-01-05"]) == {}

    def test_upload_then_read(self, any_store):
        upload = any_store.upload_daily_records("2024-01-05", [rec(A, 10, 20), rec(B, 5, 10)], "ayse",
                                                file_name="05.01.2024.xlsx")

        assert upload.record_count == 2
        assert upload.uploaded_by == "ayse"
        assert upload.uploaded_at > 0
        assert any_store.available_dates() == ["2024-01-05"]
        assert any_store.list_records_for_dates(["2024-01-05", "2024-01-06"]) == {
            "2024-01-05": [rec(A, 10, 20), rec(B, 5, 10)],
        }

    def test_new_upload_replaces_old(self, any_store):
        any_store.upload_daily_records("2024-01-05", [rec(A, 10, 20), rec(B, 5, 10)], "ayse")
        any_store.upload_daily_records("2024-01-05", [rec(A, 1, 2)], "mehmet")

        assert any_store.list_records_for_dates(["2024-01-05"])["2024-01-05"] == [rec(A, 1, 2)]
        assert any_store.get_upload("2024-01-05").uploaded_by == "mehmet"

    def test_dates_come_back_sorted(self, any_store):
        for d in ["2025-03-01", "2024-01-05", "2024-02-10"]:
            any_store.upload_daily_records(d, [rec(A, 1, 2)], "ayse")
        assert any_store.available_dates() == ["2024-01-05", "2024-02-10", "2025-03-01"]
        assert any_store.get_availability_index().years == [2025, 2024]

    def test_bad_date_rejected(self, any_store):
        with pytest.raises(IngestionFailure):
            any_store.upload_daily_records("2024-02-30", [rec(A, 1, 2)], "ayse")
        assert any_store.available_dates() == []

    def test_empty_records_rejected(self, any_store):
        with pytest.raises(IngestionFailure):
            any_store.upload_daily_records("2024-01-05", [], "ayse")


class TestJsonDirectoryStore:
    def test_document_layout(self, tmp_path):
        store = JsonDirectoryStore(str(tmp_path))
        store.upload_daily_records("2024-01-05", [rec(A, 10, 20)], "ayse", file_name="gunluk.xlsx")

        with open(tmp_path / "2024-01-05.json", encoding="utf-8") as f:
            doc = json.load(f)

        assert doc["date"] == "2024-01-05"
        assert doc["fileName"] == "gunluk.xlsx"
        assert doc["recordCount"] == 1
        assert doc["data"][0] == {
            "hospitalName": A, "greenAreaCount": 10, "totalCount": 20, "greenAreaRate": 50.0,
        }

    def test_no_temp_files_left_behind(self, tmp_path):
        store = JsonDirectoryStore(str(tmp_path))
        store.upload_daily_records("2024-01-05", [rec(A, 1, 2)], "ayse")
        store.upload_daily_records("2024-01-05", [rec(A, 2, 2)], "ayse")
        assert os.listdir(tmp_path) == ["2024-01-05.json"]

    def test_stray_files_ignored(self, tmp_path):
        (tmp_path / "notes.json").write_text("{}", encoding="utf-8")
        (tmp_path / "readme.txt").write_text("hi", encoding="utf-8")
        assert JsonDirectoryStore(str(tmp_path)).available_dates() == []

    def test_corrupt_document_is_persistence_failure(self, tmp_path):
        (tmp_path / "2024-01-05.json").write_text("{not json", encoding="utf-8")
        store = JsonDirectoryStore(str(tmp_path))

        with pytest.raises(PersistenceFailure):
            store.list_records_for_dates(["2024-01-05"])

    def test_missing_field_is_persistence_failure(self, tmp_path):
        (tmp_path / "2024-01-05.json").write_text('{"date": "2024-01-05", "data": [{}]}', encoding="utf-8")
        with pytest.raises(PersistenceFailure):
            JsonDirectoryStore(str(tmp_path)).get_upload("2024-01-05")

    def test_dict_conversion_keeps_metadata(self):
        upload = DailyUpload(date="2024-01-05", records=(rec(A, 3, 4),), file_name="x.xlsx",
                             uploaded_by="ayse", uploaded_at=1700000000000)
        assert upload_from_dict(upload_to_dict(upload)) == upload
