"""Hand-written test doubles shared across the test modules."""

from datetime import datetime, timezone

import requests

from lankarates.banks import BankExtractor, ExtractionError
from lankarates.firestore_manager import StorageError
from local_server import InMemoryRateStore

NOW = datetime(2024, 6, 15, 12, 0, tzinfo=timezone.utc)


class FakeResponse:
    def __init__(self, json_data=None, content=b"", status_code=200, json_error=False):
        self._json_data = json_data
        self._json_error = json_error
        self.content = content
        self.status_code = status_code

    def json(self):
        if self._json_error:
            raise ValueError("Expecting value: line 1 column 1 (char 0)")
        return self._json_data

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} Server Error")


class FakeSession:
    """Stands in for ``requests.Session`` and records every GET."""

    def __init__(self, response=None, error=None):
        self.headers = {}
        self.response = response
        self.error = error
        self.calls = []
        self.sent_headers = []

    def get(self, url, headers=None, timeout=None):
        self.calls.append((url, timeout))
        self.sent_headers.append(dict(headers or {}))
        if self.error is not None:
            raise self.error
        return self.response


class StaticExtractor(BankExtractor):
    """Returns a fixed rate or raises a fixed error."""

    def __init__(self, bank_code, rate=None, error=None):
        super().__init__(session=FakeSession())
        self.bank_code = bank_code
        self.bank_name = bank_code.title()
        self.rate = rate
        self.error = error
        self.calls = 0

    def extract_usd_rate(self):
        self.calls += 1
        if self.error is not None:
            raise self.error
        return self.rate


class FailingStore(InMemoryRateStore):
    """In-memory store that rejects writes for selected banks."""

    def __init__(self, failing_banks):
        super().__init__()
        self.failing_banks = set(failing_banks)

    def insert(self, observation):
        if observation.bank in self.failing_banks:
            raise StorageError("write rejected")
        return super().insert(observation)


def transport_error(bank_code):
    return ExtractionError(bank_code, "request to https://bad.example failed: connection refused")
