"""
Application layer: Loading the stored license.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from signedlic.common.exceptions import LicenseLoadError, LicenseValidationError

if TYPE_CHECKING:
    from signedlic.client.application.pipeline import LicensePipeline
    from signedlic.client.domain.entities import License
    from signedlic.common.interfaces import IKeyValueStore

logger = logging.getLogger(__name__)


class LicenseLoader:
    """Reads the stored envelope and validates it like a fresh activation."""

    def __init__(
        self,
        pipeline: LicensePipeline,
        store: IKeyValueStore,
        store_key: str = "license",
    ):
        self.pipeline = pipeline
        self.store = store
        self.store_key = store_key

    def load(self) -> License | None:
        """Return the stored license, or None if nothing was ever activated.

        Only integrity is checked here; enforcing trial expiration is up to
        the caller.
        """
        signed_license = self.store.get(self.store_key)
        if signed_license is None:
            logger.debug("No stored license")
            return None

        try:
            license_ = self.pipeline.extract_license(signed_license)
        except LicenseValidationError as err:
            logger.warning("Stored license is invalid: %s", err)
            raise LicenseLoadError(err) from err

        logger.debug("Loaded stored %s", type(license_).__name__)
        return license_

    def clear(self) -> None:
        """Forget the stored license."""
        self.store.delete(self.store_key)
        logger.info("Stored license removed")
