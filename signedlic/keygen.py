"""
Key generator for the activation server's RSA-4096 signing key pair.

The private half belongs on the activation server (ideally in an HSM); the
public half is what clients put in their trusted keys directory.
"""

from __future__ import annotations

import logging
from pathlib import Path

from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa

from signedlic.common.config import Config

logger = logging.getLogger(__name__)

PUBLIC_EXPONENT = 65537


class KeyGenerator:
    """Key generator for creating activation server RSA keys."""

    def __init__(self, keys_dir: Path | None = None, key_size: int | None = None):
        config = Config()
        self.keys_dir = keys_dir or config.TRUSTED_KEYS_DIR
        self.key_size = key_size or config.KEY_SIZE
        self.public_key_filename = config.PUBLIC_KEY_FILENAME
        self.private_key_filename = config.PRIVATE_KEY_FILENAME

    def generate_keys(self) -> tuple[Path, Path]:
        """Generate and save the public/private key pair; returns their paths."""
        logger.info("Generating RSA-%d activation keys...", self.key_size)

        private_key = rsa.generate_private_key(
            public_exponent=PUBLIC_EXPONENT, key_size=self.key_size
        )
        public_key = private_key.public_key()

        private_pem = private_key.private_bytes(
            encoding=serialization.Encoding.PEM,
            format=serialization.PrivateFormat.PKCS8,
            encryption_algorithm=serialization.NoEncryption(),
        )
        public_pem = public_key.public_bytes(
            encoding=serialization.Encoding.PEM,
            format=serialization.PublicFormat.SubjectPublicKeyInfo,
        )

        private_path = self.keys_dir / self.private_key_filename
        public_path = self.keys_dir / self.public_key_filename
        self.keys_dir.mkdir(parents=True, exist_ok=True)

        with private_path.open("wb") as f:
            f.write(private_pem)
        private_path.chmod(0o600)

        with public_path.open("wb") as f:
            f.write(public_pem)

        logger.info("Keys generated and saved:")
        logger.info("  Private: %s", private_path)
        logger.info("  Public: %s", public_path)
        logger.info("Move the private key to the activation server and keep it secure!")
        return public_path, private_path
