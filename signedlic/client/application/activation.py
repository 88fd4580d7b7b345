"""
Application layer: Trial and purchase activation use cases.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import TYPE_CHECKING, Callable

from pydantic import ValidationError

from signedlic.client.domain.entities import License, PurchasedLicense
from signedlic.client.infrastructure.device import format_device_id
from signedlic.common.exceptions import (
    ActivationError,
    DeviceQuotaExceeded,
    InternalInvariantError,
    InvalidServerResponse,
    InvalidServerResponseReason,
    LicenseKeyNotFound,
    LicenseValidationError,
    LicenseValidationFailure,
    MissingServerResponse,
    MissingSystemInformation,
    NetworkFailure,
    ServerRejectedRequest,
    TransportError,
    UnrecognizedServerError,
)
from signedlic.common.models import (
    ActivationResponse,
    PurchaseActivationRequest,
    TrialActivationRequest,
)

if TYPE_CHECKING:
    from pydantic import BaseModel

    from signedlic.client.application.pipeline import LicensePipeline
    from signedlic.common.interfaces import (
        HttpResponse,
        IDeviceIdentifierProvider,
        IHttpTransport,
        IKeyValueStore,
    )

HTTP_OK = 200

logger = logging.getLogger(__name__)


class ActivationState(str, Enum):
    IDLE = "idle"
    IDENTIFIER_RESOLVED = "identifier_resolved"
    REQUEST_SENT = "request_sent"
    RESPONSE_CLASSIFIED = "response_classified"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


class KnownServerErrorCode(str, Enum):
    LICENSE_KEY_NOT_FOUND = "license_key_not_found"
    DEVICE_QUOTA_EXCEEDED = "device_quota_exceeded"


def parse_server_error_code(code: str) -> KnownServerErrorCode | str:
    """Known code, or the raw string for codes newer than this client."""
    try:
        return KnownServerErrorCode(code)
    except ValueError:
        return code


def server_error_to_exception(code: str) -> ActivationError:
    parsed = parse_server_error_code(code)
    if parsed is KnownServerErrorCode.LICENSE_KEY_NOT_FOUND:
        return LicenseKeyNotFound()
    if parsed is KnownServerErrorCode.DEVICE_QUOTA_EXCEEDED:
        return DeviceQuotaExceeded()
    return UnrecognizedServerError(code)


def classify_response(response: HttpResponse) -> bytes:
    """Return the signed license bytes of a usable response or raise.

    Checks run in priority order: status, empty body, JSON shape, explicit
    server error, missing license.
    """
    if response.status_code != HTTP_OK:
        raise ServerRejectedRequest(response.status_code)

    if not response.body:
        raise MissingServerResponse

    try:
        body = ActivationResponse.model_validate_json(response.body)
    except ValidationError as err:
        raise InvalidServerResponse(
            InvalidServerResponseReason.DESERIALIZATION_FAILURE, err
        ) from err

    if body.activation_error is not None:
        raise server_error_to_exception(body.activation_error)

    if body.signed_license is None:
        raise InvalidServerResponse(InvalidServerResponseReason.MISSING_DATA)

    return body.signed_license


class ActivationOrchestrator:
    """Drives one activation from device lookup to persisted license."""

    def __init__(
        self,
        pipeline: LicensePipeline,
        device_provider: IDeviceIdentifierProvider,
        transport: IHttpTransport,
        store: IKeyValueStore,
        store_key: str = "license",
    ):
        self.pipeline = pipeline
        self.device_provider = device_provider
        self.transport = transport
        self.store = store
        self.store_key = store_key

    def activate_trial(self, endpoint_url: str) -> License:
        """Activate a trial for this device.

        The server may hand back a purchased license previously activated on
        this device; that is returned as-is.
        """
        return self._activate(
            endpoint_url,
            lambda device_id: TrialActivationRequest(device_id=device_id),
            require_purchased=False,
        )

    def activate_purchase(self, license_key: str, endpoint_url: str) -> PurchasedLicense:
        """Activate a purchase for this device."""
        license_ = self._activate(
            endpoint_url,
            lambda device_id: PurchaseActivationRequest(
                device_id=device_id, license_key=license_key
            ),
            require_purchased=True,
        )
        if not isinstance(license_, PurchasedLicense):
            msg = f"Purchase activation produced {type(license_).__name__}"
            raise InternalInvariantError(msg)
        return license_

    def _activate(
        self,
        endpoint_url: str,
        make_request: Callable[[str], BaseModel],
        *,
        require_purchased: bool,
    ) -> License:
        state = ActivationState.IDLE
        try:
            device_id = self.device_provider.resolve()
            if device_id is None:
                raise MissingSystemInformation
            state = self._transition(state, ActivationState.IDENTIFIER_RESOLVED)

            request = make_request(format_device_id(device_id))
            try:
                response = self.transport.post(endpoint_url, request.model_dump())
            except TransportError as err:
                raise NetworkFailure(err) from err
            state = self._transition(state, ActivationState.REQUEST_SENT)

            signed_license = classify_response(response)
            state = self._transition(state, ActivationState.RESPONSE_CLASSIFIED)

            try:
                license_ = self.pipeline.extract_license(signed_license)
            except LicenseValidationError as err:
                raise LicenseValidationFailure(err) from err

            if require_purchased and not isinstance(license_, PurchasedLicense):
                raise InvalidServerResponse(
                    InvalidServerResponseReason.MISMATCHED_LICENSE_TYPE
                )
        except ActivationError as err:
            self._transition(state, ActivationState.FAILED)
            logger.info("Activation failed: %s: %s", type(err).__name__, err)
            raise

        # Only a fully verified license is ever stored.
        self.store.set(self.store_key, signed_license)
        self._transition(state, ActivationState.SUCCEEDED)
        logger.info("Activated %s", type(license_).__name__)
        return license_

    @staticmethod
    def _transition(
        current: ActivationState, new: ActivationState
    ) -> ActivationState:
        logger.debug("Activation state %s -> %s", current.value, new.value)
        return new
