from datetime import timedelta

import pytest

from fakes import NOW
from lankarates.models import RateObservation
from local_server import InMemoryRateStore


@pytest.fixture
def clock():
    return lambda: NOW


@pytest.fixture
def memory_store():
    return InMemoryRateStore()


@pytest.fixture
def seeded_store(memory_store):
    for bank, rate, age in [
        ("SAMPATH", 300.10, timedelta(days=1)),
        ("SAMPATH", 300.50, timedelta(hours=2)),
        ("HNB", 299.75, timedelta(days=3)),
        ("SAMPATH", 295.00, timedelta(days=10)),
        ("HNB", 290.00, timedelta(days=400)),
    ]:
        memory_store.insert(RateObservation(bank=bank, rate=rate, fetched_at=NOW - age))
    return memory_store
