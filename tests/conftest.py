import json
import logging
import uuid

import pytest
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import padding, rsa

from signedlic.client.client import LicenseClient
from signedlic.client.infrastructure.device import StaticDeviceIdentifierProvider
from signedlic.client.infrastructure.schema import LicenseInfo, SignedBundle
from signedlic.client.infrastructure.storage import MemoryKeyValueStore
from signedlic.common.exceptions import TransportError
from signedlic.common.interfaces import HttpResponse
from signedlic.common.models import ClientConfig

DEVICE_ID = uuid.UUID("9CAE2AA4-3268-4AF7-A75D-7B176251F0A7").bytes
OTHER_DEVICE_ID = uuid.UUID("0F1E2D3C-4B5A-6978-8796-A5B4C3D2E1F0").bytes
EXTRA_INFO = bytes([1, 2, 3])
LICENSE_KEY = "3F2504E0-4F89-41D3-9A0C-0305E82C3301"
# 3000-01-01T00:00:00Z
FAR_FUTURE_TIMESTAMP = 32503680000

TRIAL_URL = "https://api.example.com/v1/activate_trial"
PURCHASE_URL = "https://api.example.com/v1/activate_purchase"


class EnvelopeFactory:
    """Builds signed envelopes the way the activation server does."""

    device_id = DEVICE_ID
    other_device_id = OTHER_DEVICE_ID
    extra_info = EXTRA_INFO
    license_key = LICENSE_KEY
    expiration_timestamp = FAR_FUTURE_TIMESTAMP

    def __init__(self, private_key: rsa.RSAPrivateKey):
        self.private_key = private_key

    @staticmethod
    def public_key_bytes(private_key: rsa.RSAPrivateKey) -> bytes:
        return private_key.public_key().public_bytes(
            encoding=serialization.Encoding.DER,
            format=serialization.PublicFormat.PKCS1,
        )

    def license_info(
        self,
        kind="trial",
        device_id=DEVICE_ID,
        expiration_timestamp=FAR_FUTURE_TIMESTAMP,
        license_key=LICENSE_KEY,
        extra_info=EXTRA_INFO,
    ) -> bytes:
        info = LicenseInfo()
        info.device_id = device_id
        info.extra_info = extra_info
        if kind == "trial":
            info.trial.expiration_timestamp_in_sec = expiration_timestamp
        elif kind == "purchased":
            info.purchased.license_key = license_key
        return info.SerializeToString()

    def bundle(self, signed_message: bytes, private_key=None):
        private_key = private_key or self.private_key
        signature = private_key.sign(
            signed_message,
            padding.PSS(
                mgf=padding.MGF1(hashes.SHA512()),
                salt_length=padding.PSS.DIGEST_LENGTH,
            ),
            hashes.SHA512(),
        )
        bundle = SignedBundle()
        bundle.key_type = 0
        bundle.public_key = self.public_key_bytes(private_key)
        bundle.signature_algorithm = 0
        bundle.signature = signature
        bundle.signed_message = signed_message
        return bundle

    def trial_bundle(self, **kwargs):
        return self.bundle(self.license_info("trial", **kwargs))

    def purchased_bundle(self, **kwargs):
        return self.bundle(self.license_info("purchased", **kwargs))

    def trial(self, **kwargs) -> bytes:
        return self.trial_bundle(**kwargs).SerializeToString()

    def purchased(self, **kwargs) -> bytes:
        return self.purchased_bundle(**kwargs).SerializeToString()


class FakeTransport:
    """Records posted requests and replays queued responses."""

    def __init__(self):
        self.requests = []
        self.responses = []

    def queue(self, status_code=200, body=b""):
        if isinstance(body, dict):
            body = json.dumps(body).encode()
        self.responses.append(HttpResponse(status_code=status_code, body=body))

    def queue_error(self, message="connection lost"):
        self.responses.append(TransportError(message))

    def post(self, url, json_body):
        self.requests.append((url, json_body))
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response


@pytest.fixture(scope="session")
def private_key():
    return rsa.generate_private_key(public_exponent=65537, key_size=4096)


@pytest.fixture(scope="session")
def public_key(private_key):
    return private_key.public_key()


@pytest.fixture(scope="session")
def untrusted_private_key():
    return rsa.generate_private_key(public_exponent=65537, key_size=4096)


@pytest.fixture(scope="session")
def envelopes(private_key):
    return EnvelopeFactory(private_key)


@pytest.fixture
def store():
    return MemoryKeyValueStore()


@pytest.fixture
def device_provider():
    return StaticDeviceIdentifierProvider(DEVICE_ID)


@pytest.fixture
def transport():
    return FakeTransport()


@pytest.fixture
def client(public_key, device_provider, transport, store, tmp_path):
    client = LicenseClient(
        [public_key],
        client_config=ClientConfig(
            data_dir=tmp_path,
            log_level=logging.WARNING,
            trial_activation_url=TRIAL_URL,
            purchase_activation_url=PURCHASE_URL,
        ),
        device_provider=device_provider,
        transport=transport,
        store=store,
    )
    yield client
    client.close()
