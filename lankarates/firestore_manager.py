"""Append-only storage of rate observations in a Firestore collection."""

from contextlib import contextmanager
from typing import Iterator, List, Optional
import logging

from google.api_core import exceptions as google_exceptions
from google.cloud import firestore
from google.cloud.firestore_v1.base_query import FieldFilter

from .config import Config, StorageSettings
from .models import RateObservation
from .windows import QueryWindow

logger = logging.getLogger(__name__)


class StorageError(RuntimeError):
    """Raised when the store is unreachable or rejects an operation."""


class FirestoreManager:
    """Write-once, read-many observation store.

    Documents use the layout ``{rate, fetchedAt, bank}``. Bank-filtered
    history queries need a composite index on ``bank`` + ``fetchedAt desc``.
    """

    def __init__(self, client, collection_name: str, timeout: Optional[float] = None):
        self.db = client
        self.collection_name = collection_name
        self.timeout = Config.STORE_TIMEOUT_SECONDS if timeout is None else timeout

    def _collection(self):
        return self.db.collection(self.collection_name)

    def insert(self, observation: RateObservation) -> str:
        """
        Store a single observation

        Args:
            observation: The observation to persist

        Returns:
            str: The generated document id

        Raises:
            StorageError: If the write fails or times out
        """
        try:
            doc_ref = self._collection().document()
            # Single attempt; the caller records the failure instead of retrying.
            doc_ref.set(observation.to_document(), retry=None, timeout=self.timeout)
        except google_exceptions.GoogleAPIError as e:
            raise StorageError(f"Error saving observation for {observation.bank}: {e}") from e

        logger.info(f"Saved {observation.bank} rate {observation.rate} (doc_id: {doc_ref.id})")
        return doc_ref.id

    def latest(self, bank: Optional[str] = None) -> Optional[RateObservation]:
        """Return the most recent observation, optionally for one bank only."""
        results = self._run_query(bank=bank, limit=1)
        if not results:
            logger.info(f"No observations found for bank: {bank or 'any'}")
            return None
        return results[0]

    def history(self, bank: Optional[str], window: QueryWindow) -> List[RateObservation]:
        """Return observations newer than ``window.start``, newest first, capped at ``window.limit``."""
        return self._run_query(bank=bank, start=window.start, limit=window.limit)

    def _run_query(self, bank=None, start=None, limit: Optional[int] = None) -> List[RateObservation]:
        query = self._collection()

        if bank:
            query = query.where(filter=FieldFilter("bank", "==", bank))
        if start is not None:
            query = query.where(filter=FieldFilter("fetchedAt", ">=", start))

        query = query.order_by("fetchedAt", direction=firestore.Query.DESCENDING)
        if limit:
            query = query.limit(limit)

        try:
            documents = [doc.to_dict() for doc in query.stream(timeout=self.timeout)]
        except google_exceptions.GoogleAPIError as e:
            raise StorageError(f"Error querying observations: {e}") from e

        observations = []
        for document in documents:
            try:
                observations.append(RateObservation.from_document(document))
            except ValueError as e:
                logger.warning(f"Skipping malformed observation document: {e}")
        return observations


@contextmanager
def open_firestore_manager(settings: StorageSettings, client=None) -> Iterator[FirestoreManager]:
    """Open a Firestore client for ``settings`` and close it when the block exits."""

    client = client or firestore.Client(project=settings.project_id, database=settings.database)
    logger.info(
        "Firestore client initialized (project=%s, database=%s, collection=%s)",
        settings.project_id,
        settings.database,
        settings.collection,
    )
    try:
        yield FirestoreManager(client, settings.collection)
    finally:
        client.close()
        logger.info("Firestore client closed")
