"""Domain objects shared by the extractors, the store and the API."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Mapping, Optional

# Bank codes -------------------------------------------------------------------
SAMPATH = "SAMPATH"
COMMERCIAL = "COMMERCIAL"
HNB = "HNB"
NSB = "NSB"
SEYLAN = "SEYLAN"
NATION = "NATION"

KNOWN_BANKS = (SAMPATH, COMMERCIAL, HNB, NSB, SEYLAN, NATION)


def normalize_bank_code(value: Optional[str]) -> Optional[str]:
    """Return the canonical upper-case code for user input, ``None`` if blank."""

    if value is None:
        return None
    code = value.strip().upper()
    return code or None


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def format_timestamp(value: datetime) -> str:
    return value.astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%S.%fZ")


def parse_timestamp(value: Any) -> datetime:
    """Coerce a stored ``fetchedAt`` value into an aware UTC datetime."""

    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str):
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    elif hasattr(value, "timestamp"):
        parsed = datetime.fromtimestamp(value.timestamp(), tz=timezone.utc)
    else:
        raise ValueError(f"Unsupported timestamp value: {value!r}")

    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


@dataclass(frozen=True)
class RateObservation:
    """One persisted USD buying rate reading for one bank."""

    bank: str
    rate: float
    fetched_at: datetime

    def __post_init__(self) -> None:
        if not self.bank:
            raise ValueError("Observation requires a bank code")
        rate = float(self.rate)
        if not math.isfinite(rate) or rate <= 0:
            raise ValueError(f"Rate must be a positive number, got {self.rate!r}")
        if self.fetched_at.tzinfo is None:
            raise ValueError("fetched_at must be timezone aware")
        object.__setattr__(self, "rate", rate)
        object.__setattr__(self, "fetched_at", self.fetched_at.astimezone(timezone.utc))

    def to_document(self) -> Dict[str, Any]:
        """Return the persisted record layout."""

        return {"rate": self.rate, "fetchedAt": self.fetched_at, "bank": self.bank}

    def to_dict(self) -> Dict[str, Any]:
        """Return the JSON layout served by the API."""

        return {
            "rate": self.rate,
            "fetchedAt": format_timestamp(self.fetched_at),
            "bank": self.bank,
        }

    @classmethod
    def from_document(cls, document: Mapping[str, Any]) -> "RateObservation":
        try:
            return cls(
                bank=document["bank"],
                rate=document["rate"],
                fetched_at=parse_timestamp(document["fetchedAt"]),
            )
        except KeyError as exc:
            raise ValueError(f"Observation document is missing {exc.args[0]!r}") from exc


@dataclass(frozen=True)
class BankFailure:
    bank: str
    reason: str


@dataclass
class IngestionReport:
    """Outcome of one ingestion run: stored observations plus per-bank failures."""

    stored: List[RateObservation] = field(default_factory=list)
    failures: List[BankFailure] = field(default_factory=list)

    @property
    def all_failed(self) -> bool:
        return not self.stored and bool(self.failures)

    @property
    def errors(self) -> List[str]:
        return [failure.reason for failure in self.failures]

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"stored": [obs.to_dict() for obs in self.stored]}
        if self.failures:
            payload["errors"] = self.errors
        return payload
