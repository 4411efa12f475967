"""Application service that runs extractors and stores their observations."""

from __future__ import annotations

from typing import Callable, Optional, Sequence
from datetime import datetime
import logging

from ..banks import BankExtractor, ExtractionError, ExtractorRegistry
from ..firestore_manager import StorageError
from ..models import BankFailure, IngestionReport, RateObservation, normalize_bank_code, utc_now

logger = logging.getLogger(__name__)


class UnsupportedBankError(ValueError):
    """Raised when the caller references a bank with no active extractor."""

    def __init__(self, bank: str, available: Sequence[str]):
        super().__init__(f"Bank not supported: {bank}")
        self.bank = bank
        self.available = list(available)


class IngestionService:
    """Drives the registered extractors and persists every successful reading.

    Banks are processed one at a time in registry order. A failing bank is
    recorded in the report and never stops the remaining banks.
    """

    def __init__(
        self,
        store,
        registry: ExtractorRegistry,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._store = store
        self._registry = registry
        self._clock = clock

    @property
    def registry(self) -> ExtractorRegistry:
        return self._registry

    def run(self, bank: Optional[str] = None) -> IngestionReport:
        """Fetch and store rates for ``bank``, or for every active bank when omitted."""

        targets = self._resolve_targets(bank)
        report = IngestionReport()

        for extractor in targets:
            self._ingest_one(extractor, report)

        logger.info(
            "Ingestion finished: %d stored, %d failed",
            len(report.stored),
            len(report.failures),
        )
        return report

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    def _resolve_targets(self, bank: Optional[str]) -> Sequence[BankExtractor]:
        code = normalize_bank_code(bank)
        if code is None:
            return self._registry.all()

        extractor = self._registry.by_name(code)
        if extractor is None:
            raise UnsupportedBankError(code, self._registry.bank_codes())
        return (extractor,)

    def _ingest_one(self, extractor: BankExtractor, report: IngestionReport) -> None:
        bank_code = extractor.bank_code
        logger.info("Fetching exchange rate from %s...", bank_code)

        try:
            rate = extractor.extract_usd_rate()
            observation = RateObservation(bank=bank_code, rate=rate, fetched_at=self._clock())
        except ExtractionError as exc:
            self._record_failure(report, bank_code, f"Error fetching rate from {bank_code}: {exc}")
            return
        except Exception as exc:
            logger.exception("Unexpected error in %s extractor", bank_code)
            self._record_failure(report, bank_code, f"Error fetching rate from {bank_code}: {exc}")
            return

        try:
            self._store.insert(observation)
        except StorageError as exc:
            self._record_failure(report, bank_code, f"Error inserting rate for {bank_code} to DB: {exc}")
            return

        report.stored.append(observation)
        logger.info("Successfully fetched and added rate for %s: %s", bank_code, observation.rate)

    @staticmethod
    def _record_failure(report: IngestionReport, bank_code: str, reason: str) -> None:
        logger.error(reason)
        report.failures.append(BankFailure(bank=bank_code, reason=reason))
