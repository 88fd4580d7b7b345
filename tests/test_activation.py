import base64
import json

import pytest

from signedlic.client.application.activation import (
    KnownServerErrorCode,
    classify_response,
    parse_server_error_code,
)
from signedlic.client.client import LicenseClient
from signedlic.client.domain.entities import PurchasedLicense, TrialLicense
from signedlic.client.infrastructure.device import StaticDeviceIdentifierProvider
from signedlic.common.exceptions import (
    DeserializationFailure,
    DeviceMismatch,
    DeviceQuotaExceeded,
    InvalidServerResponse,
    InvalidServerResponseReason,
    InvalidSignature,
    LicenseKeyNotFound,
    LicenseValidationFailure,
    MissingServerResponse,
    MissingSystemInformation,
    NetworkFailure,
    ServerRejectedRequest,
    UnknownPublicKey,
    UnrecognizedServerError,
)
from signedlic.common.interfaces import HttpResponse
from signedlic.common.models import ClientConfig

from conftest import LICENSE_KEY, PURCHASE_URL, TRIAL_URL


def license_body(data: bytes) -> dict:
    return {"signed_license": base64.b64encode(data).decode("ascii")}


# Response classification


def test_classify_returns_decoded_license(envelopes):
    data = envelopes.trial()
    response = HttpResponse(200, json.dumps(license_body(data)).encode())
    assert classify_response(response) == data


@pytest.mark.parametrize("status_code", [201, 204, 400, 404, 500, 503])
def test_classify_non_200_status(status_code):
    with pytest.raises(ServerRejectedRequest) as exc_info:
        classify_response(HttpResponse(status_code, b'{"signed_license": "AAAA"}'))
    assert exc_info.value.status_code == status_code


def test_classify_status_checked_before_body():
    with pytest.raises(ServerRejectedRequest):
        classify_response(HttpResponse(500, b""))


def test_classify_empty_body():
    with pytest.raises(MissingServerResponse):
        classify_response(HttpResponse(200, b""))


@pytest.mark.parametrize(
    "body",
    [
        b"not json",
        b"[1, 2, 3]",
        b'{"signed_license": 42}',
        b'{"signed_license": "***not base64***"}',
        b'{"activation_error": ["license_key_not_found"]}',
    ],
)
def test_classify_undecodable_body(body):
    with pytest.raises(InvalidServerResponse) as exc_info:
        classify_response(HttpResponse(200, body))
    assert exc_info.value.reason is InvalidServerResponseReason.DESERIALIZATION_FAILURE


def test_classify_empty_object():
    with pytest.raises(InvalidServerResponse) as exc_info:
        classify_response(HttpResponse(200, b"{}"))
    assert exc_info.value.reason is InvalidServerResponseReason.MISSING_DATA


def test_classify_error_wins_over_license():
    body = b'{"signed_license": "AAAA", "activation_error": "license_key_not_found"}'
    with pytest.raises(LicenseKeyNotFound):
        classify_response(HttpResponse(200, body))


def test_classify_ignores_unknown_fields(envelopes):
    data = envelopes.trial()
    body = license_body(data)
    body["server_version"] = "2.1"
    response = HttpResponse(200, json.dumps(body).encode())
    assert classify_response(response) == data


def test_parse_server_error_code():
    assert parse_server_error_code("license_key_not_found") is (
        KnownServerErrorCode.LICENSE_KEY_NOT_FOUND
    )
    assert parse_server_error_code("device_quota_exceeded") is (
        KnownServerErrorCode.DEVICE_QUOTA_EXCEEDED
    )
    assert parse_server_error_code("brand_new_code") == "brand_new_code"


# Trial activation


def test_activate_trial(client, transport, store, envelopes):
    """Test a successful trial activation stores the license."""
    data = envelopes.trial()
    transport.queue(body=license_body(data))

    license_ = client.activate_trial()

    assert isinstance(license_, TrialLicense)
    assert license_.extra_info == envelopes.extra_info
    assert store.get("license") == data


def test_activate_trial_request_shape(client, transport, envelopes):
    transport.queue(body=license_body(envelopes.trial()))

    client.activate_trial()

    assert transport.requests == [
        (TRIAL_URL, {"device_id": "9CAE2AA4-3268-4AF7-A75D-7B176251F0A7"})
    ]


def test_activate_trial_explicit_url(client, transport, envelopes):
    transport.queue(body=license_body(envelopes.trial()))
    client.activate_trial("https://other.example.com/trial")
    assert transport.requests[0][0] == "https://other.example.com/trial"


def test_activate_trial_may_return_purchased_license(client, transport, store, envelopes):
    """A device with a previous purchase gets its purchased license back."""
    data = envelopes.purchased()
    transport.queue(body=license_body(data))

    license_ = client.activate_trial()

    assert isinstance(license_, PurchasedLicense)
    assert store.get("license") == data


def test_activate_trial_server_error(client, transport, store):
    transport.queue(body={"activation_error": "my_error"})

    with pytest.raises(UnrecognizedServerError) as exc_info:
        client.activate_trial()

    assert exc_info.value.code == "my_error"
    assert store.get("license") is None


def test_activate_trial_network_failure(client, transport, store):
    transport.queue_error("connection reset")

    with pytest.raises(NetworkFailure):
        client.activate_trial()

    assert store.get("license") is None


def test_activate_trial_without_device_sends_nothing(
    public_key, transport, store, tmp_path
):
    client = LicenseClient(
        [public_key],
        client_config=ClientConfig(data_dir=tmp_path, trial_activation_url=TRIAL_URL),
        device_provider=StaticDeviceIdentifierProvider(None),
        transport=transport,
        store=store,
    )

    with pytest.raises(MissingSystemInformation):
        client.activate_trial()

    assert transport.requests == []


def test_activate_trial_bound_to_other_device(client, transport, store, envelopes):
    transport.queue(body=license_body(envelopes.trial(device_id=envelopes.other_device_id)))

    with pytest.raises(LicenseValidationFailure) as exc_info:
        client.activate_trial()

    assert isinstance(exc_info.value.validation_error, DeviceMismatch)
    assert store.get("license") is None


def test_activate_trial_invalid_envelope(client, transport, store):
    transport.queue(body=license_body(bytes([1, 2, 3])))

    with pytest.raises(LicenseValidationFailure) as exc_info:
        client.activate_trial()

    assert isinstance(exc_info.value.validation_error, DeserializationFailure)
    assert store.get("license") is None


def test_activate_trial_untrusted_signer(
    client, transport, store, envelopes, untrusted_private_key
):
    bundle = envelopes.bundle(envelopes.license_info(), private_key=untrusted_private_key)
    transport.queue(body=license_body(bundle.SerializeToString()))

    with pytest.raises(LicenseValidationFailure) as exc_info:
        client.activate_trial()

    assert isinstance(exc_info.value.validation_error, UnknownPublicKey)
    assert store.get("license") is None


def test_failed_activation_keeps_previous_license(client, transport, store, envelopes):
    previous = envelopes.purchased()
    store.set("license", previous)
    bundle = envelopes.trial_bundle()
    bundle.signature = bytes([1, 2, 3])
    transport.queue(body=license_body(bundle.SerializeToString()))

    with pytest.raises(LicenseValidationFailure) as exc_info:
        client.activate_trial()

    assert isinstance(exc_info.value.validation_error, InvalidSignature)
    assert store.get("license") == previous


# Purchase activation


def test_activate_purchase(client, transport, store, envelopes):
    """Test a successful purchase activation stores the license."""
    data = envelopes.purchased()
    transport.queue(body=license_body(data))

    license_ = client.activate_purchase(LICENSE_KEY)

    assert isinstance(license_, PurchasedLicense)
    assert license_.license_key == LICENSE_KEY
    assert store.get("license") == data
    assert transport.requests == [
        (
            PURCHASE_URL,
            {
                "device_id": "9CAE2AA4-3268-4AF7-A75D-7B176251F0A7",
                "license_key": LICENSE_KEY,
            },
        )
    ]


def test_activate_purchase_mismatched_license_type(client, transport, store, envelopes):
    """A trial license from the purchase endpoint is rejected and not stored."""
    previous = envelopes.purchased()
    store.set("license", previous)
    transport.queue(body=license_body(envelopes.trial()))

    with pytest.raises(InvalidServerResponse) as exc_info:
        client.activate_purchase(LICENSE_KEY)

    assert exc_info.value.reason is InvalidServerResponseReason.MISMATCHED_LICENSE_TYPE
    assert store.get("license") == previous


@pytest.mark.parametrize(
    ("code", "expected"),
    [
        ("license_key_not_found", LicenseKeyNotFound),
        ("device_quota_exceeded", DeviceQuotaExceeded),
        ("license_quota_exceeded", UnrecognizedServerError),
    ],
)
def test_activate_purchase_server_errors(client, transport, store, code, expected):
    transport.queue(body={"activation_error": code})

    with pytest.raises(expected):
        client.activate_purchase(LICENSE_KEY)

    assert store.get("license") is None


def test_activate_purchase_rejected_status(client, transport):
    transport.queue(status_code=403, body=b"Forbidden")

    with pytest.raises(ServerRejectedRequest) as exc_info:
        client.activate_purchase(LICENSE_KEY)

    assert exc_info.value.status_code == 403  # noqa: PLR2004


def test_activate_purchase_missing_license(client, transport):
    transport.queue(body={"something_else": True})

    with pytest.raises(InvalidServerResponse) as exc_info:
        client.activate_purchase(LICENSE_KEY)

    assert exc_info.value.reason is InvalidServerResponseReason.MISSING_DATA
