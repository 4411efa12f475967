"""
Hatton National Bank exchange rate extractor
"""
from __future__ import annotations

import logging
from typing import Optional, Tuple

from bs4 import BeautifulSoup

from ..models import HNB
from .base import BankExtractor

logger = logging.getLogger(__name__)


class HNBExtractor(BankExtractor):
    """Scrapes the USD row from the HNB exchange rate table"""

    bank_code = HNB
    bank_name = "Hatton National Bank"

    BASE_URL = "https://www.hnb.net/exchange-rates"
    CELL_CLASS = "exrateText"

    def find_usd_row(self, soup: BeautifulSoup) -> Optional[Tuple[str, str]]:
        """Return the (buying, selling) rate text of the USD row, if present.

        Rates sit in ``td.exrateText`` cells: code in the second, buying in
        the third and selling in the fourth.
        """
        for row in soup.find_all("tr"):
            cells = row.find_all("td", class_=self.CELL_CLASS)
            if len(cells) < 4:
                continue
            if cells[1].get_text(strip=True) == "USD":
                return cells[2].get_text(strip=True), cells[3].get_text(strip=True)
        return None

    def extract_usd_rate(self) -> float:
        response = self.get(self.BASE_URL)
        soup = BeautifulSoup(response.content, "html.parser")

        rates = self.find_usd_row(soup)
        if rates is None:
            raise self.fail("USD row not found in exchange rate table")

        buying, selling = rates
        logger.info("%s: USD buying rate %s, selling rate %s", self.bank_code, buying, selling)
        return self.parse_rate(buying)
