"""
Record store (persistence)
==========================

The engine reads uploads through `RecordStore`:

- `available_dates()`            every date that has an upload
- `list_records_for_dates(ds)`   bulk read; dates without an upload are simply missing
- `upload_daily_records(...)`    write one day's records, replacing that day's previous upload

Two implementations:
- `MemoryStore`: a dict, for tests and embedding
- `JsonDirectoryStore`: one `YYYY-MM-DD.json` document per day in a folder

Any I/O or decoding problem is raised as `PersistenceFailure`; a failed
upload never leaves a half-written document behind.
"""

from __future__ import annotations
from abc import ABC, abstractmethod
from typing import Dict, Iterable, List, Optional, Sequence
import json
import logging
import os
import tempfile
import time

from .errors import IngestionFailure, PersistenceFailure
from .indices import AvailabilityIndex, build_availability_index
from .models import DailyUpload, DateKey, EntityRecord, parse_date_key

logger = logging.getLogger(__name__)


def _now_ms() -> int:
    return int(time.time() * 1000)


def _check_upload(date: DateKey, records: Sequence[EntityRecord]) -> None:
    try:
        parse_date_key(date)
    except ValueError as e:
        raise IngestionFailure(str(e)) from e
    if not records:
        raise IngestionFailure(f"No hospital rows to store for {date}")


class RecordStore(ABC):
    """Read/write access to per-day hospital records."""

    @abstractmethod
    def available_dates(self) -> List[DateKey]:
        ...

    @abstractmethod
    def get_upload(self, date: DateKey) -> Optional[DailyUpload]:
        ...

    @abstractmethod
    def save_upload(self, upload: DailyUpload) -> None:
        ...

    def get_availability_index(self) -> AvailabilityIndex:
        return build_availability_index(self.available_dates())

    def list_records_for_dates(self, dates: Iterable[DateKey]) -> Dict[DateKey, List[EntityRecord]]:
        out: Dict[DateKey, List[EntityRecord]] = {}
        for d in dates:
            upload = self.get_upload(d)
            if upload is not None:
                out[d] = list(upload.records)
        logger.debug("Fetched %d of the requested dates", len(out))
        return out

    def upload_daily_records(self, date: DateKey, records: Sequence[EntityRecord], uploader_id: str,
                             file_name: str = "") -> DailyUpload:
        """Store one day's records; the newest upload for a date wins."""
        _check_upload(date, records)
        upload = DailyUpload(date=date, records=tuple(records), file_name=file_name,
                             uploaded_by=uploader_id, uploaded_at=_now_ms())
        self.save_upload(upload)
        logger.info("Stored %d hospital rows for %s (uploaded by %s)", upload.record_count, date, uploader_id)
        return upload


class MemoryStore(RecordStore):
    def __init__(self, uploads: Optional[Iterable[DailyUpload]] = None) -> None:
        self._uploads: Dict[DateKey, DailyUpload] = {}
        for u in uploads or ():
            self._uploads[u.date] = u

    @classmethod
    def from_records(cls, records_by_date: Dict[DateKey, List[EntityRecord]]) -> "MemoryStore":
        return cls(DailyUpload(date=d, records=tuple(rs)) for d, rs in records_by_date.items())

    def available_dates(self) -> List[DateKey]:
        return sorted(self._uploads)

    def get_upload(self, date: DateKey) -> Optional[DailyUpload]:
        return self._uploads.get(date)

    def save_upload(self, upload: DailyUpload) -> None:
        self._uploads[upload.date] = upload


# ---------------- JSON documents ----------------

def upload_to_dict(upload: DailyUpload) -> dict:
    return {
        "date": upload.date,
        "fileName": upload.file_name,
        "uploadedBy": upload.uploaded_by,
        "uploadedAt": upload.uploaded_at,
        "recordCount": upload.record_count,
        "data": [
            {
                "hospitalName": r.entity_id,
                "greenAreaCount": r.green_count,
                "totalCount": r.total_count,
                "greenAreaRate": r.rate,
            }
            for r in upload.records
        ],
    }


def upload_from_dict(payload: dict) -> DailyUpload:
    records = tuple(
        EntityRecord(
            entity_id=row["hospitalName"],
            green_count=int(row["greenAreaCount"]),
            total_count=int(row["totalCount"]),
        )
        for row in payload.get("data", [])
    )
    return DailyUpload(
        date=payload["date"],
        records=records,
        file_name=payload.get("fileName", ""),
        uploaded_by=payload.get("uploadedBy", ""),
        uploaded_at=int(payload.get("uploadedAt", 0)),
    )


class JsonDirectoryStore(RecordStore):
    """One JSON document per day: `<root>/YYYY-MM-DD.json`."""

    def __init__(self, root: str) -> None:
        self.root = root

    def _path(self, date: DateKey) -> str:
        return os.path.join(self.root, f"{date}.json")

    def available_dates(self) -> List[DateKey]:
        if not os.path.isdir(self.root):
            return []
        try:
            names = os.listdir(self.root)
        except OSError as e:
            raise PersistenceFailure(f"Cannot list {self.root}: {e}") from e
        out: List[DateKey] = []
        for name in names:
            if not name.endswith(".json"):
                continue
            key = name[:-len(".json")]
            try:
                parse_date_key(key)
            except ValueError:
                logger.warning("Ignoring unexpected file in store: %s", name)
                continue
            out.append(key)
        return sorted(out)

    def get_upload(self, date: DateKey) -> Optional[DailyUpload]:
        path = self._path(date)
        if not os.path.exists(path):
            return None
        try:
            with open(path, "r", encoding="utf-8") as f:
                return upload_from_dict(json.load(f))
        except (OSError, ValueError, KeyError, TypeError) as e:
            raise PersistenceFailure(f"Cannot read upload for {date}: {e}") from e

    def save_upload(self, upload: DailyUpload) -> None:
        try:
            os.makedirs(self.root, exist_ok=True)
            fd, tmp = tempfile.mkstemp(prefix=f".{upload.date}.", suffix=".tmp", dir=self.root)
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    json.dump(upload_to_dict(upload), f, ensure_ascii=False, indent=2)
                # replace in one step so readers never see a partial document
                os.replace(tmp, self._path(upload.date))
            except BaseException:
                if os.path.exists(tmp):
                    os.remove(tmp)
                raise
        except OSError as e:
            raise PersistenceFailure(f"Cannot write upload for {upload.date}: {e}") from e
