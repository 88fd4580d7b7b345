"""
Application layer: The signed license verification pipeline.

Activation and loading both run every envelope through
``LicensePipeline.extract_license`` so they accept and reject the same bytes.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from google.protobuf.message import DecodeError

from signedlic.client.domain.license_factory import make_license
from signedlic.client.infrastructure.schema import LicenseInfo, SignedBundle
from signedlic.common.exceptions import (
    DeserializationFailure,
    DeviceMismatch,
    InternalInvariantError,
    LicenseValidationError,
    MissingData,
    MissingDeviceIdentifier,
)

if TYPE_CHECKING:
    from signedlic.client.application.verifier import TrustVerifier
    from signedlic.client.domain.entities import License
    from signedlic.common.interfaces import IDeviceIdentifierProvider

logger = logging.getLogger(__name__)


def decode_envelope(data: bytes) -> Any:
    """Parse the outer ``SignedBundle``."""
    envelope = SignedBundle()
    try:
        envelope.ParseFromString(data)
    except (DecodeError, ValueError, TypeError) as err:
        raise DeserializationFailure(err) from err
    return envelope


def decode_payload(data: bytes) -> Any:
    """Parse the inner ``LicenseInfo``."""
    payload = LicenseInfo()
    try:
        payload.ParseFromString(data)
    except (DecodeError, ValueError, TypeError) as err:
        raise DeserializationFailure(err) from err
    return payload


class LicensePipeline:
    """Decode, verify, bind and build a license from signed envelope bytes."""

    def __init__(
        self,
        verifier: TrustVerifier,
        device_provider: IDeviceIdentifierProvider,
    ):
        self.verifier = verifier
        self.device_provider = device_provider

    def check_device_binding(self, payload: Any) -> None:
        device_id = self.device_provider.resolve()
        if device_id is None:
            raise MissingDeviceIdentifier
        if bytes(payload.device_id) != device_id:
            logger.debug(
                "License bound to %s, local device is %s",
                bytes(payload.device_id).hex(),
                device_id.hex(),
            )
            raise DeviceMismatch

    def _extract(self, data: bytes) -> License:
        envelope = decode_envelope(data)
        signed_message = self.verifier.verify(envelope)
        payload = decode_payload(signed_message)
        self.check_device_binding(payload)
        if payload.WhichOneof("specific_info") is None:
            raise MissingData
        try:
            return make_license(payload)
        except OverflowError as err:
            raise DeserializationFailure(err) from err

    def extract_license(self, data: bytes) -> License:
        """Run the full pipeline; raises ``LicenseValidationError`` subclasses only."""
        try:
            return self._extract(data)
        except LicenseValidationError:
            raise
        except InternalInvariantError:
            raise
        except Exception as err:
            msg = f"Unexpected error while extracting license: {err!r}"
            raise InternalInvariantError(msg) from err
