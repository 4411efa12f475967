"""Local development server that mirrors the production Firebase API."""

import logging
from typing import Dict, List, Optional

from lankarates.api import create_app
from lankarates.banks import ExtractorRegistry, build_registry
from lankarates.config import configure_logging
from lankarates.firestore_manager import FirestoreManager
from lankarates.models import RateObservation
from lankarates.services import IngestionService, QueryService

logger = logging.getLogger(__name__)


class InMemoryRateStore(FirestoreManager):
    """A lightweight Firestore replacement for local development."""

    def __init__(self):
        # Intentionally skip the Firestore initialisation in the base class.
        self.db = None
        self.collection_name = "memory"
        self.timeout = 0
        self._documents: List[Dict] = []

    # ``latest`` and ``history`` come from the base class and call ``_run_query``.

    def insert(self, observation: RateObservation) -> str:
        self._documents.append(observation.to_document())
        return str(len(self._documents))

    def _run_query(self, bank=None, start=None, limit: Optional[int] = None) -> List[RateObservation]:
        matching = [
            doc
            for doc in self._documents
            if (not bank or doc["bank"] == bank) and (start is None or doc["fetchedAt"] >= start)
        ]
        matching.sort(key=lambda doc: doc["fetchedAt"], reverse=True)
        if limit:
            matching = matching[:limit]
        return [RateObservation.from_document(doc) for doc in matching]


def build_app(registry: Optional[ExtractorRegistry] = None, store: Optional[FirestoreManager] = None):
    store = store or InMemoryRateStore()
    registry = registry if registry is not None else build_registry()
    return create_app(IngestionService(store, registry), QueryService(store))


if __name__ == "__main__":
    configure_logging()
    registry = build_registry()
    app = build_app(registry=registry)

    print("=" * 72)
    print("Lanka USD Rates API - Local Development Server")
    print("=" * 72)
    print("\n🏦 Active banks:")
    for extractor in registry:
        metadata = extractor.get_metadata()
        print(f"  • {metadata['bank_code']} ({metadata['bank_name']})")
    print("\n📡 Available endpoints:")
    print("  GET http://localhost:8080/health")
    print("  GET http://localhost:8080/banks")
    print("  GET http://localhost:8080/fetch-rate[?bank=<code>]")
    print("  GET http://localhost:8080/latest-rate[?bank=<code>]")
    print("  GET http://localhost:8080/history[?bank=<code>&period=week|month|year]")
    print("\n" + "=" * 72 + "\n")

    app.run(debug=True, host="0.0.0.0", port=8080)
