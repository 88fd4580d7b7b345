"""
Application layer: Signature verification against trusted public keys.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from cryptography.exceptions import InvalidSignature as CryptoInvalidSignature
from cryptography.exceptions import UnsupportedAlgorithm
from cryptography.hazmat.primitives.asymmetric import rsa

from signedlic.client.infrastructure.schema import (
    KeyType,
    SignatureAlgorithm,
    parse_key_type,
    parse_signature_algorithm,
)
from signedlic.common.crypto import CryptoUtils, PublicKeyLike
from signedlic.common.exceptions import (
    InvalidPublicKey,
    InvalidSignature,
    UnknownPublicKey,
    UnsupportedKeyType,
    UnsupportedSignatureAlgorithm,
)

if TYPE_CHECKING:
    from collections.abc import Iterable, Iterator

logger = logging.getLogger(__name__)

RSA_KEY_SIZE = 4096


class PublicKeyRegistry:
    """Immutable set of trusted public keys, compared by canonical bytes.

    Normally there is a single key, paired with the activation server's
    private key. Several are trusted at once only while moving to a new
    server key, so that licenses signed with either keep validating.
    """

    def __init__(self, public_keys: Iterable[PublicKeyLike]):
        self._keys: frozenset[bytes] = frozenset(
            CryptoUtils.canonical_public_key_bytes(key) for key in public_keys
        )

    def __contains__(self, key_data: object) -> bool:
        return key_data in self._keys

    def __len__(self) -> int:
        return len(self._keys)

    def __iter__(self) -> Iterator[bytes]:
        return iter(self._keys)


class TrustVerifier:
    """Checks a signed envelope and hands back its signed message."""

    def __init__(self, registry: PublicKeyRegistry):
        self.registry = registry

    @staticmethod
    def import_public_key(key_data: bytes) -> rsa.RSAPublicKey:
        """Import an RSA-4096 public key or raise ``InvalidPublicKey``."""
        try:
            public_key = CryptoUtils.load_rsa_public_key(key_data)
        except (ValueError, TypeError, UnsupportedAlgorithm) as err:
            raise InvalidPublicKey(key_data, err) from err
        if public_key.key_size != RSA_KEY_SIZE:
            msg = f"expected a {RSA_KEY_SIZE}-bit key, got {public_key.key_size} bits"
            raise InvalidPublicKey(key_data, ValueError(msg))
        return public_key

    def verify(self, envelope: Any) -> bytes:
        """Verify ``envelope`` (a ``SignedBundle``) and return its signed message.

        Structural checks run before the signature check so malformed input
        gets a precise error.
        """
        key_type = parse_key_type(envelope.key_type)
        if key_type is not KeyType.RSA_4096:
            logger.info("Rejecting license: unsupported key type %s", key_type)
            raise UnsupportedKeyType(int(key_type))

        key_data = bytes(envelope.public_key)
        public_key = self.import_public_key(key_data)

        # Compare the re-exported key, not the raw field, so that equivalent
        # encodings of the same key match.
        canonical = CryptoUtils.canonical_public_key_bytes(public_key)
        if canonical not in self.registry:
            logger.info("Rejecting license: signed by an untrusted key")
            raise UnknownPublicKey(key_data)

        algorithm = parse_signature_algorithm(envelope.signature_algorithm)
        if algorithm is not SignatureAlgorithm.RSA_PSS_SHA512:
            logger.info("Rejecting license: unsupported signature algorithm %s", algorithm)
            raise UnsupportedSignatureAlgorithm(int(algorithm))

        signed_message = bytes(envelope.signed_message)
        try:
            CryptoUtils.verify_rsa_pss_sha512(
                public_key, bytes(envelope.signature), signed_message
            )
        except CryptoInvalidSignature as err:
            logger.info("Rejecting license: signature verification failed")
            raise InvalidSignature(err) from err

        logger.debug("License signature valid")
        return signed_message
