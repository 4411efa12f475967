"""FirestoreManager tests against a hand-written Firestore client double."""

from datetime import datetime, timedelta, timezone

import pytest
from google.api_core import exceptions as google_exceptions

from lankarates.config import StorageSettings
from lankarates.firestore_manager import FirestoreManager, StorageError, open_firestore_manager
from lankarates.models import RateObservation
from lankarates.windows import resolve_window

NOW = datetime(2024, 6, 15, 12, 0, tzinfo=timezone.utc)

_OPS = {
    "==": lambda left, right: left == right,
    ">=": lambda left, right: left >= right,
}


class _Snapshot:
    def __init__(self, data):
        self._data = data

    def to_dict(self):
        return dict(self._data)


class _DocumentRef:
    def __init__(self, collection, doc_id):
        self._collection = collection
        self.id = doc_id

    def set(self, data, retry=None, timeout=None):
        self._collection.set_calls.append({"retry": retry, "timeout": timeout})
        if self._collection.fail_writes:
            raise google_exceptions.ServiceUnavailable("firestore down")
        self._collection.docs.append(dict(data))


class _Query:
    def __init__(self, collection, filters=(), order=None, limit_to=None):
        self._collection = collection
        self.filters = tuple(filters)
        self.order = order
        self.limit_to = limit_to

    def where(self, filter):
        return _Query(self._collection, self.filters + (filter,), self.order, self.limit_to)

    def order_by(self, field, direction):
        return _Query(self._collection, self.filters, (field, direction), self.limit_to)

    def limit(self, count):
        return _Query(self._collection, self.filters, self.order, count)

    def stream(self, timeout=None):
        self._collection.queries.append(self)
        if self._collection.fail_reads:
            raise google_exceptions.DeadlineExceeded("query timed out")
        docs = list(self._collection.docs)
        for field_filter in self.filters:
            compare = _OPS[field_filter.op_string]
            docs = [doc for doc in docs if compare(doc[field_filter.field_path], field_filter.value)]
        if self.order:
            field, direction = self.order
            docs.sort(key=lambda doc: doc[field], reverse=direction == "DESCENDING")
        if self.limit_to:
            docs = docs[: self.limit_to]
        for doc in docs:
            yield _Snapshot(doc)


class _Collection(_Query):
    def __init__(self):
        super().__init__(self)
        self.docs = []
        self.queries = []
        self.set_calls = []
        self.fail_writes = False
        self.fail_reads = False

    def document(self):
        return _DocumentRef(self, f"doc-{len(self.docs) + 1}")


class _Client:
    def __init__(self):
        self.collections = {}
        self.closed = False

    def collection(self, name):
        return self.collections.setdefault(name, _Collection())

    def close(self):
        self.closed = True


@pytest.fixture
def client():
    return _Client()


@pytest.fixture
def manager(client):
    return FirestoreManager(client, "usd_rates", timeout=3)


def _observation(bank, rate, age):
    return RateObservation(bank=bank, rate=rate, fetched_at=NOW - age)


def test_insert_writes_document_layout_without_retry(manager, client):
    observation = _observation("SAMPATH", 301.25, timedelta(0))

    doc_id = manager.insert(observation)

    collection = client.collection("usd_rates")
    assert doc_id == "doc-1"
    assert collection.docs == [{"rate": 301.25, "fetchedAt": NOW, "bank": "SAMPATH"}]
    assert collection.set_calls == [{"retry": None, "timeout": 3}]


def test_insert_failure_raises_storage_error(manager, client):
    client.collection("usd_rates").fail_writes = True

    with pytest.raises(StorageError, match="SAMPATH"):
        manager.insert(_observation("SAMPATH", 301.25, timedelta(0)))
    assert client.collection("usd_rates").docs == []


def test_latest_returns_newest_for_bank(manager):
    for rate, hours in [(300.0, 3), (301.0, 1), (300.5, 2)]:
        manager.insert(_observation("HNB", rate, timedelta(hours=hours)))
    manager.insert(_observation("SAMPATH", 310.0, timedelta(minutes=5)))

    latest = manager.latest("HNB")

    assert latest.rate == 301.0
    assert latest.fetched_at == NOW - timedelta(hours=1)
    assert manager.latest().bank == "SAMPATH"


def test_latest_on_empty_collection_is_none(manager):
    assert manager.latest("HNB") is None


def test_history_applies_window_bank_and_order(manager, client):
    for days in (1, 2, 3, 8, 30):
        manager.insert(_observation("SAMPATH", 300 + days, timedelta(days=days)))
    manager.insert(_observation("HNB", 299.0, timedelta(days=1)))

    window = resolve_window("week", now=NOW)
    history = manager.history("SAMPATH", window)

    assert [obs.rate for obs in history] == [301, 302, 303]
    query = client.collection("usd_rates").queries[-1]
    assert [(f.field_path, f.op_string) for f in query.filters] == [("bank", "=="), ("fetchedAt", ">=")]
    assert query.order == ("fetchedAt", "DESCENDING")
    assert query.limit_to == 7


def test_history_caps_results_at_window_limit(manager):
    for hours in range(10):
        manager.insert(_observation("SAMPATH", 300 + hours, timedelta(hours=hours)))

    history = manager.history(None, resolve_window("week", now=NOW))

    assert len(history) == 7
    assert history[0].fetched_at > history[-1].fetched_at


def test_malformed_documents_are_skipped(manager, client):
    manager.insert(_observation("SAMPATH", 301.25, timedelta(0)))
    client.collection("usd_rates").docs.append({"rate": -1, "fetchedAt": NOW, "bank": "HNB"})

    history = manager.history(None, resolve_window("week", now=NOW))

    assert [obs.bank for obs in history] == ["SAMPATH"]


def test_read_failure_raises_storage_error(manager, client):
    client.collection("usd_rates").fail_reads = True

    with pytest.raises(StorageError):
        manager.latest()


def test_open_firestore_manager_closes_client(client):
    settings = StorageSettings(project_id="demo", database="(default)", collection="usd_rates")

    with open_firestore_manager(settings, client=client) as manager:
        assert manager.collection_name == "usd_rates"
        assert client.closed is False

    assert client.closed is True
