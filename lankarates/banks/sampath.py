"""
Sampath Bank exchange rate extractor
"""
import logging

from ..models import SAMPATH
from .base import BankExtractor

logger = logging.getLogger(__name__)


class SampathExtractor(BankExtractor):
    """Extractor for the Sampath Bank exchange rate API"""

    bank_code = SAMPATH
    bank_name = "Sampath Bank"

    API_URL = "https://www.sampath.lk/api/exchange-rates"
    USER_AGENT = "lanka-usd-rates/1.0"

    def extract_usd_rate(self) -> float:
        """
        Read the USD telegraphic transfer buying rate from the API

        The endpoint answers with ``{"success": bool, "data": [{"CurrCode", "TTBUY"}, ...]}``.
        """
        response = self.get(self.API_URL)

        try:
            payload = response.json()
        except ValueError as e:
            raise self.fail(f"invalid JSON response: {e}") from e

        if not isinstance(payload, dict):
            raise self.fail("unexpected response envelope")

        if not payload.get("success"):
            description = payload.get("description") or "no description"
            raise self.fail(f"API reported failure: {description}")

        for entry in payload.get("data") or []:
            if isinstance(entry, dict) and entry.get("CurrCode") == "USD":
                rate = self.parse_rate(entry.get("TTBUY"))
                logger.info(f"{self.bank_code}: USD buying rate {rate}")
                return rate

        raise self.fail("USD rate not found")
