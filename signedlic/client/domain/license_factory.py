"""Domain layer: Building domain licenses from verified payloads.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import TYPE_CHECKING, Any

from signedlic.client.domain.entities import License, PurchasedLicense, TrialLicense
from signedlic.common.exceptions import InternalInvariantError

if TYPE_CHECKING:
    from signedlic.client.infrastructure.schema import LicenseInfo

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def make_trial_license(trial_info: Any, extra_info: bytes) -> TrialLicense:
    """Build a trial license; raises ``OverflowError`` for unrepresentable dates."""
    expiration_date = EPOCH + timedelta(seconds=trial_info.expiration_timestamp_in_sec)
    return TrialLicense(expiration_date=expiration_date, extra_info=extra_info)


def make_purchased_license(purchased_info: Any, extra_info: bytes) -> PurchasedLicense:
    return PurchasedLicense(license_key=purchased_info.license_key, extra_info=extra_info)


def make_license(payload: LicenseInfo) -> License:
    """Convert a verified, device-bound payload into a domain license."""
    kind = payload.WhichOneof("specific_info")
    extra_info = bytes(payload.extra_info)
    if kind == "trial":
        return make_trial_license(payload.trial, extra_info)
    if kind == "purchased":
        return make_purchased_license(payload.purchased, extra_info)
    msg = f"make_license called with unsupported license kind: {kind!r}"
    raise InternalInvariantError(msg)
