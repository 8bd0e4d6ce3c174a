"""
Shared pytest fixtures for the green area engine tests.

Dataset used by most tests:

    2024-01-05  Hospital A 10/20   Hospital B 5/10
    2024-01-06  Hospital A  8/16   Hospital B 0/0
    2024-02-10  Hospital A  3/4    (Hospital B did not report)
    2025-03-01  Hospital A  1/2    Hospital B 1/4
"""
import sys
from pathlib import Path

import pytest

# Add project root to path for all tests
project_root = Path(__file__).parent.parent
if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))

from greenarea.engine import FilterPanel
from greenarea.indices import build_availability_index
from greenarea.models import EntityRecord
from greenarea.store import MemoryStore

A = "Hospital A"
B = "Hospital B"


def rec(entity_id, green, total):
    return EntityRecord(entity_id=entity_id, green_count=green, total_count=total)


@pytest.fixture
def records_by_date():
    return {
        "2024-01-05": [rec(A, 10, 20), rec(B, 5, 10)],
        "2024-01-06": [rec(A, 8, 16), rec(B, 0, 0)],
        "2024-02-10": [rec(A, 3, 4)],
        "2025-03-01": [rec(A, 1, 2), rec(B, 1, 4)],
    }


@pytest.fixture
def known_dates(records_by_date):
    return sorted(records_by_date)


@pytest.fixture
def index(known_dates):
    return build_availability_index(known_dates)


@pytest.fixture
def store(records_by_date):
    return MemoryStore.from_records(records_by_date)


@pytest.fixture
def panel(store):
    return FilterPanel(store=store)
