"""
USD rate extractors for Sri Lankan banks
"""
from typing import Dict, Iterable, Iterator, List, Optional, Tuple, Type

import requests

from ..config import Config, ConfigurationError
from ..models import HNB, SAMPATH, normalize_bank_code
from .base import BankExtractor, ExtractionError
from .hnb import HNBExtractor
from .sampath import SampathExtractor

__all__ = [
    'BankExtractor',
    'ExtractionError',
    'ExtractorRegistry',
    'HNBExtractor',
    'SampathExtractor',
    'EXTRACTOR_CLASSES',
    'build_registry',
]

# Every bank code that has a working extractor implementation
EXTRACTOR_CLASSES: Dict[str, Type[BankExtractor]] = {
    SAMPATH: SampathExtractor,
    HNB: HNBExtractor,
}


class ExtractorRegistry:
    """Immutable, ordered set of active extractors keyed by bank code"""

    def __init__(self, extractors: Iterable[BankExtractor]):
        ordered: Tuple[BankExtractor, ...] = tuple(extractors)
        by_code: Dict[str, BankExtractor] = {}
        for extractor in ordered:
            if extractor.bank_code in by_code:
                raise ValueError(f"Duplicate extractor for bank: {extractor.bank_code}")
            by_code[extractor.bank_code] = extractor

        self._extractors = ordered
        self._by_code = by_code

    def all(self) -> Tuple[BankExtractor, ...]:
        """Return the extractors in configuration order"""
        return self._extractors

    def by_name(self, bank_code: Optional[str]) -> Optional[BankExtractor]:
        code = normalize_bank_code(bank_code)
        if code is None:
            return None
        return self._by_code.get(code)

    def bank_codes(self) -> List[str]:
        return [extractor.bank_code for extractor in self._extractors]

    def __contains__(self, bank_code) -> bool:
        return self.by_name(bank_code) is not None

    def __iter__(self) -> Iterator[BankExtractor]:
        return iter(self._extractors)

    def __len__(self) -> int:
        return len(self._extractors)


def build_registry(
    enabled: Optional[Iterable[str]] = None,
    session: Optional[requests.Session] = None,
) -> ExtractorRegistry:
    """
    Build the registry from the configured list of enabled banks

    Args:
        enabled: Bank codes in the desired order, defaults to ``Config.ENABLED_BANKS``
        session: Optional HTTP session shared by every extractor

    Returns:
        ExtractorRegistry: The active extractors

    Raises:
        ConfigurationError: If a code has no extractor implementation
    """
    codes = [normalize_bank_code(code) for code in (Config.ENABLED_BANKS if enabled is None else enabled)]

    extractors = []
    for code in codes:
        if code is None:
            continue
        extractor_class = EXTRACTOR_CLASSES.get(code)
        if extractor_class is None:
            raise ConfigurationError(
                f"No extractor available for bank: {code}. Available banks: {list(EXTRACTOR_CLASSES)}"
            )
        extractors.append(extractor_class(session=session))

    try:
        return ExtractorRegistry(extractors)
    except ValueError as exc:
        raise ConfigurationError(str(exc)) from exc
