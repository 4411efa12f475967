"""Read-side façade over the observation store."""

from __future__ import annotations

from datetime import datetime
from typing import Callable, List, Optional
import logging

from ..models import KNOWN_BANKS, RateObservation, normalize_bank_code, utc_now
from ..windows import resolve_window

logger = logging.getLogger(__name__)


def resolve_bank_filter(bank: Optional[str]) -> Optional[str]:
    """Return a known bank code, or ``None`` meaning every bank."""

    code = normalize_bank_code(bank)
    if code not in KNOWN_BANKS:
        if code is not None:
            logger.info("Ignoring unknown bank filter '%s'", code)
        return None
    return code


class QueryService:
    """Answers latest and history queries."""

    def __init__(self, store, clock: Callable[[], datetime] = utc_now) -> None:
        self._store = store
        self._clock = clock

    def latest(self, bank: Optional[str] = None) -> Optional[RateObservation]:
        return self._store.latest(resolve_bank_filter(bank))

    def history(self, bank: Optional[str] = None, period: Optional[str] = None) -> List[RateObservation]:
        window = resolve_window(period, now=self._clock())
        logger.info(
            "History query bank=%s period=%s since=%s limit=%d",
            bank or "all",
            window.name,
            window.start.isoformat(),
            window.limit,
        )
        return self._store.history(resolve_bank_filter(bank), window)
