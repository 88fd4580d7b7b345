"""
Custom exceptions for the licensing client.

Three families share one root:

* ``LicenseValidationError`` - the bytes were not a valid signed license for
  this device (framing, trust and binding failures).
* ``LicenseLoadError`` - loading the stored license failed validation.
* ``ActivationError`` - talking to the activation server failed, or what it
  returned failed validation (``LicenseValidationFailure``).
"""

from __future__ import annotations

from enum import Enum


class LicensingError(Exception):
    """Base class for all recoverable licensing errors."""


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------


class LicenseValidationError(LicensingError):
    """Exception for signed license validation failures."""


class DeserializationFailure(LicenseValidationError):
    """The envelope or the payload inside it could not be decoded."""

    def __init__(self, cause: BaseException | None = None) -> None:
        super().__init__(f"Failed to deserialize signed license: {cause}")
        self.cause = cause


class UnsupportedKeyType(LicenseValidationError):
    def __init__(self, key_type: int) -> None:
        super().__init__(f"Unsupported public key type: {key_type}")
        self.key_type = key_type


class InvalidPublicKey(LicenseValidationError):
    def __init__(self, key_data: bytes, cause: BaseException | None = None) -> None:
        super().__init__(f"Public key could not be imported: {cause}")
        self.key_data = key_data
        self.cause = cause


class UnknownPublicKey(LicenseValidationError):
    """The envelope was signed by a key that is not in the trust registry."""

    def __init__(self, key_data: bytes) -> None:
        super().__init__("Public key is not trusted")
        self.key_data = key_data


class UnsupportedSignatureAlgorithm(LicenseValidationError):
    def __init__(self, algorithm: int) -> None:
        super().__init__(f"Unsupported signature algorithm: {algorithm}")
        self.algorithm = algorithm


class InvalidSignature(LicenseValidationError):
    def __init__(self, cause: BaseException | None = None) -> None:
        super().__init__("Signature verification failed")
        self.cause = cause


class MissingDeviceIdentifier(LicenseValidationError):
    def __init__(self) -> None:
        super().__init__("Device identifier is unavailable")


class DeviceMismatch(LicenseValidationError):
    def __init__(self) -> None:
        super().__init__("License is bound to a different device")


class MissingData(LicenseValidationError):
    def __init__(self) -> None:
        super().__init__("License payload has no license information")


# ---------------------------------------------------------------------------
# Loading
# ---------------------------------------------------------------------------


class LicenseLoadError(LicensingError):
    """Exception for stored license load failures."""

    def __init__(self, validation_error: LicenseValidationError) -> None:
        super().__init__(f"Stored license is invalid: {validation_error}")
        self.validation_error = validation_error


# ---------------------------------------------------------------------------
# Activation
# ---------------------------------------------------------------------------


class ActivationError(LicensingError):
    """Exception for activation failures."""


class MissingSystemInformation(ActivationError):
    def __init__(self) -> None:
        super().__init__("Device identifier is unavailable; activation not attempted")


class NetworkFailure(ActivationError):
    def __init__(self, cause: BaseException | None = None) -> None:
        super().__init__(f"Network failure: {cause}")
        self.cause = cause


class ServerRejectedRequest(ActivationError):
    def __init__(self, status_code: int) -> None:
        super().__init__(f"Activation server rejected the request: HTTP {status_code}")
        self.status_code = status_code


class MissingServerResponse(ActivationError):
    def __init__(self) -> None:
        super().__init__("Activation server returned an empty response")


class InvalidServerResponseReason(str, Enum):
    DESERIALIZATION_FAILURE = "deserialization_failure"
    MISMATCHED_LICENSE_TYPE = "mismatched_license_type"
    MISSING_DATA = "missing_data"


class InvalidServerResponse(ActivationError):
    """The activation server answered with something this client cannot use."""

    def __init__(
        self,
        reason: InvalidServerResponseReason,
        cause: BaseException | None = None,
    ) -> None:
        message = f"Invalid server response: {reason.value}"
        if cause is not None:
            message = f"{message} ({cause})"
        super().__init__(message)
        self.reason = reason
        self.cause = cause


class LicenseKeyNotFound(ActivationError):
    def __init__(self) -> None:
        super().__init__("License key not found")


class DeviceQuotaExceeded(ActivationError):
    def __init__(self) -> None:
        super().__init__("Device quota exceeded for this license key")


class UnrecognizedServerError(ActivationError):
    """Server-reported error code this client does not know about."""

    def __init__(self, code: str) -> None:
        super().__init__(f"Unrecognized activation error: {code}")
        self.code = code


class LicenseValidationFailure(ActivationError):
    def __init__(self, validation_error: LicenseValidationError) -> None:
        super().__init__(f"Activated license is invalid: {validation_error}")
        self.validation_error = validation_error


# ---------------------------------------------------------------------------
# Outside the recoverable hierarchy
# ---------------------------------------------------------------------------


class TransportError(Exception):
    """Raised by an HTTP transport when no response could be obtained."""


class LicenseRequiredError(LicensingError):
    """Raised by the license-gating decorators."""


class InternalInvariantError(RuntimeError):
    """A component broke its contract with another component.

    Not a ``LicensingError``: it signals a bug, not bad input, and aborts the
    current operation only.
    """
