# signedlic: signed software license activation client

from signedlic.client.client import LicenseClient
from signedlic.client.domain.entities import License, PurchasedLicense, TrialLicense
from signedlic.common.decorators import requires_license, requires_purchased_license
from signedlic.common.exceptions import (
    ActivationError,
    LicenseLoadError,
    LicenseValidationError,
    LicensingError,
)

__all__ = [
    "ActivationError",
    "License",
    "LicenseClient",
    "LicenseLoadError",
    "LicenseValidationError",
    "LicensingError",
    "PurchasedLicense",
    "TrialLicense",
    "requires_license",
    "requires_purchased_license",
]
