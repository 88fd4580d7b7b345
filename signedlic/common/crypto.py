"""Common cryptographic utilities.
"""

from __future__ import annotations

from typing import Union

from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import padding, rsa

PublicKeyLike = Union[rsa.RSAPublicKey, bytes]


class CryptoUtils:
    """Utility class for cryptographic operations."""

    @staticmethod
    def load_rsa_public_key(data: bytes) -> rsa.RSAPublicKey:
        """Import an RSA public key from PEM or DER (SPKI or PKCS#1).

        Raises ``ValueError`` if the data is not an RSA public key.
        """
        if data.lstrip().startswith(b"-----BEGIN"):
            key = serialization.load_pem_public_key(data)
        else:
            key = serialization.load_der_public_key(data)
        if not isinstance(key, rsa.RSAPublicKey):
            msg = f"Expected an RSA public key, got {type(key).__name__}"
            raise ValueError(msg)  # noqa: TRY004
        return key

    @staticmethod
    def canonical_public_key_bytes(key: PublicKeyLike) -> bytes:
        """Export a public key as PKCS#1 DER, the form trust is compared in."""
        if isinstance(key, bytes):
            key = CryptoUtils.load_rsa_public_key(key)
        return key.public_bytes(
            encoding=serialization.Encoding.DER,
            format=serialization.PublicFormat.PKCS1,
        )

    @staticmethod
    def rsa_pss_sha512_padding() -> padding.PSS:
        """PSS parameters of the RSA-PSS-SHA512 scheme (salt = digest length)."""
        return padding.PSS(
            mgf=padding.MGF1(hashes.SHA512()),
            salt_length=padding.PSS.DIGEST_LENGTH,
        )

    @staticmethod
    def verify_rsa_pss_sha512(
        public_key: rsa.RSAPublicKey, signature: bytes, message: bytes
    ) -> None:
        """Verify a signature; raises ``cryptography.exceptions.InvalidSignature``."""
        public_key.verify(
            signature,
            message,
            CryptoUtils.rsa_pss_sha512_padding(),
            hashes.SHA512(),
        )
