"""
Configuration settings for the licensing client.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import TYPE_CHECKING, cast

from cryptography.hazmat.primitives import serialization

if TYPE_CHECKING:
    from cryptography.hazmat.primitives.asymmetric.rsa import RSAPublicKey


class Config:
    """Central configuration class for all client settings."""

    def __init__(self) -> None:
        # Activation endpoints
        self.TRIAL_ACTIVATION_URL: str | None = os.getenv("SIGNEDLIC_TRIAL_URL")
        self.PURCHASE_ACTIVATION_URL: str | None = os.getenv("SIGNEDLIC_PURCHASE_URL")
        self.REQUEST_TIMEOUT: float = float(
            os.getenv("SIGNEDLIC_REQUEST_TIMEOUT", "10")
        )

        # Background activation
        self.MAX_WORKERS: int = 4

        # File paths
        self.DATA_DIR: Path = Path(
            os.getenv("SIGNEDLIC_DATA_DIR", str(Path.home() / ".signedlic"))
        )
        self.STORE_PATH: Path = self.DATA_DIR / "license_store.json"
        self.TRUSTED_KEYS_DIR: Path = Path(
            os.getenv("SIGNEDLIC_KEYS_DIR", str(self.DATA_DIR / "keys"))
        )
        self.PUBLIC_KEY_FILENAME: str = "activation_public.pem"
        self.PRIVATE_KEY_FILENAME: str = "activation_private.pem"

        # Protocol constants
        self.LICENSE_STORE_KEY: str = "license"
        self.KEY_SIZE: int = 4096

        # Logging
        self.LOG_LEVEL: int = logging.getLevelName(
            os.getenv("SIGNEDLIC_LOG_LEVEL", "INFO").upper()
        )
        if not isinstance(self.LOG_LEVEL, int):
            self.LOG_LEVEL = logging.INFO

    def get_trusted_public_keys(
        self, keys_dir: Path | None = None
    ) -> list[RSAPublicKey]:
        """Load every ``*.pem`` public key in the trusted keys directory."""
        keys_dir = keys_dir or self.TRUSTED_KEYS_DIR
        if not keys_dir.is_dir():
            msg = (
                f"Trusted keys directory not found at {keys_dir}. "
                "Run 'signedlic keygen' or point SIGNEDLIC_KEYS_DIR at the "
                "activation server's public keys."
            )
            raise ValueError(msg)

        keys = []
        for key_path in sorted(keys_dir.glob("*.pem")):
            with key_path.open("rb") as f:
                pem = f.read()
            # keygen writes the private half next to the public one
            if b"PRIVATE KEY" in pem:
                continue
            keys.append(cast("RSAPublicKey", serialization.load_pem_public_key(pem)))
        if not keys:
            msg = f"No trusted public keys found in {keys_dir}"
            raise ValueError(msg)
        return keys
