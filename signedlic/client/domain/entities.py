"""Domain layer: Core license entities and rules.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Union


@dataclass(frozen=True)
class TrialLicense:
    """Domain entity representing a time-limited trial license."""

    expiration_date: datetime
    # Arbitrary data the activation server attaches for the application's own
    # licensing model; never interpreted here.
    extra_info: bytes

    def is_expired(self, now: datetime | None = None) -> bool:
        """Return True once the expiration date has been reached."""
        if now is None:
            now = datetime.now(timezone.utc)
        return self.expiration_date <= now


@dataclass(frozen=True)
class PurchasedLicense:
    """Domain entity representing a purchased license."""

    license_key: str
    extra_info: bytes

    def __repr__(self) -> str:
        return f"PurchasedLicense(license_key='***', extra_info={self.extra_info!r})"


License = Union[TrialLicense, PurchasedLicense]
