"""
Base interface for bank USD rate extractors
"""
from abc import ABC, abstractmethod
from typing import Dict, Optional
import logging
import math

import requests

from ..config import Config

logger = logging.getLogger(__name__)


class ExtractionError(RuntimeError):
    """Raised when an extractor cannot produce a USD rate."""

    def __init__(self, bank_code: str, message: str):
        super().__init__(message)
        self.bank_code = bank_code


class BankExtractor(ABC):
    """Abstract base class for bank exchange rate extractors"""

    bank_code = "UNKNOWN"
    bank_name = "Unknown"
    USER_AGENT = "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36"

    def __init__(self, session: Optional[requests.Session] = None, timeout: Optional[float] = None):
        self.timeout = Config.REQUEST_TIMEOUT_SECONDS if timeout is None else timeout
        self.session = session or requests.Session()

    @abstractmethod
    def extract_usd_rate(self) -> float:
        """
        Fetch the bank's published USD buying rate

        Returns:
            float: Positive USD buying rate in LKR

        Raises:
            ExtractionError: If the source cannot be fetched or parsed
        """
        pass

    def get_metadata(self) -> Dict:
        """
        Get metadata about this bank extractor

        Returns:
            Dict: Metadata including bank code and display name
        """
        return {
            "bank_code": self.bank_code,
            "bank_name": self.bank_name,
        }

    def fail(self, message: str) -> ExtractionError:
        return ExtractionError(self.bank_code, message)

    def get(self, url: str) -> requests.Response:
        """Issue a single GET with no retry, raising ExtractionError on failure."""
        try:
            logger.info(f"{self.bank_code}: fetching {url}")
            response = self.session.get(url, headers={'User-Agent': self.USER_AGENT}, timeout=self.timeout)
            response.raise_for_status()
            return response
        except requests.RequestException as e:
            raise self.fail(f"request to {url} failed: {e}") from e

    def parse_rate(self, value) -> float:
        """Convert published rate text such as ``"1,301.25"`` to a positive float"""
        text = str(value).strip().replace(",", "")
        try:
            rate = float(text)
        except ValueError as e:
            raise self.fail(f"malformed rate {value!r}") from e

        if not math.isfinite(rate) or rate <= 0:
            raise self.fail(f"rate must be positive, got {value!r}")
        return rate
