"""Infrastructure layer: Configuration loading and file operations.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from signedlic.common.config import Config
from signedlic.common.logging_utils import setup_logger
from signedlic.common.models import ClientConfig

if TYPE_CHECKING:
    from cryptography.hazmat.primitives.asymmetric.rsa import RSAPublicKey


class ConfigLoader:
    """Resolves client overrides against ``Config`` defaults."""

    def __init__(self, client_config: ClientConfig | None = None):
        client_config = client_config or ClientConfig()
        self.config: Config = Config()

        self.trial_activation_url = (
            client_config.trial_activation_url or self.config.TRIAL_ACTIVATION_URL
        )
        self.purchase_activation_url = (
            client_config.purchase_activation_url
            or self.config.PURCHASE_ACTIVATION_URL
        )
        self.request_timeout: float = (
            client_config.request_timeout
            if client_config.request_timeout is not None
            else self.config.REQUEST_TIMEOUT
        )
        self.max_workers: int = (
            client_config.max_workers
            if client_config.max_workers is not None
            else self.config.MAX_WORKERS
        )

        # Configurable paths
        self.data_dir = client_config.data_dir or self.config.DATA_DIR
        self.store_path = client_config.store_path or (
            self.data_dir / self.config.STORE_PATH.name
        )
        self.trusted_keys_dir = (
            client_config.trusted_keys_dir or self.config.TRUSTED_KEYS_DIR
        )
        self.license_store_key: str = self.config.LICENSE_STORE_KEY

        self.log_level: int = (
            client_config.log_level
            if client_config.log_level is not None
            else self.config.LOG_LEVEL
        )

        # Setup logging
        self.logger = logging.getLogger("signedlic")
        setup_logger(self.logger, self.log_level)

    def load_trusted_public_keys(self) -> list[RSAPublicKey]:
        """Load the trusted public keys from the keys directory."""
        return self.config.get_trusted_public_keys(self.trusted_keys_dir)
