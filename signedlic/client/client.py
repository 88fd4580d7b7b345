"""
License client: activate, store and load signed software licenses.
"""

from __future__ import annotations

import logging
import threading
from concurrent.futures import Executor, Future, ThreadPoolExecutor
from typing import TYPE_CHECKING, Any, Callable

from signedlic.client.application.activation import ActivationOrchestrator
from signedlic.client.application.loader import LicenseLoader
from signedlic.client.application.pipeline import LicensePipeline
from signedlic.client.application.verifier import PublicKeyRegistry, TrustVerifier
from signedlic.client.infrastructure.config_loader import ConfigLoader
from signedlic.client.infrastructure.device import SystemDeviceIdentifierProvider
from signedlic.client.infrastructure.storage import FileKeyValueStore
from signedlic.client.infrastructure.transport import RequestsTransport

if TYPE_CHECKING:
    from collections.abc import Iterable

    from signedlic.client.domain.entities import License, PurchasedLicense
    from signedlic.common.crypto import PublicKeyLike
    from signedlic.common.interfaces import (
        IDeviceIdentifierProvider,
        IHttpTransport,
        IKeyValueStore,
    )
    from signedlic.common.models import ClientConfig

logger = logging.getLogger(__name__)

CompletionHandler = Callable[["Future[Any]"], None]


class LicenseClient:
    """Used to activate, store, and load software licenses.

    ``trusted_public_keys`` are the activation server's public keys; when
    omitted they are read from the configured keys directory. There is no
    way to revoke a trusted key, so guard the server's private key well.
    """

    def __init__(
        self,
        trusted_public_keys: Iterable[PublicKeyLike] | None = None,
        *,
        client_config: ClientConfig | None = None,
        device_provider: IDeviceIdentifierProvider | None = None,
        transport: IHttpTransport | None = None,
        store: IKeyValueStore | None = None,
        executor: Executor | None = None,
    ):
        self.settings = ConfigLoader(client_config)

        if trusted_public_keys is None:
            trusted_public_keys = self.settings.load_trusted_public_keys()
        self.registry = PublicKeyRegistry(trusted_public_keys)

        self.device_provider = device_provider or SystemDeviceIdentifierProvider()
        self.transport = transport or RequestsTransport(
            timeout=self.settings.request_timeout
        )
        self.store = store or FileKeyValueStore(self.settings.store_path)

        self.pipeline = LicensePipeline(TrustVerifier(self.registry), self.device_provider)
        self.loader = LicenseLoader(
            self.pipeline, self.store, self.settings.license_store_key
        )
        self.orchestrator = ActivationOrchestrator(
            self.pipeline,
            self.device_provider,
            self.transport,
            self.store,
            self.settings.license_store_key,
        )

        self._executor = executor
        self._owns_executor = executor is None
        self._executor_lock = threading.Lock()

        logger.debug("License client ready with %d trusted key(s)", len(self.registry))

    # Loading

    def load_license(self) -> License | None:
        """Load and validate the stored license, if any.

        Raises ``LicenseLoadError`` if a stored license fails validation.
        """
        return self.loader.load()

    def clear_license(self) -> None:
        self.loader.clear()

    # Activation

    def _endpoint(self, endpoint_url: str | None, default: str | None, kind: str) -> str:
        url = endpoint_url or default
        if not url:
            msg = f"No {kind} activation endpoint configured"
            raise ValueError(msg)
        return url

    def activate_trial(self, endpoint_url: str | None = None) -> License:
        """Activate a trial for this device and store the license.

        The trial endpoint may return a purchased license if a purchase was
        previously activated on this device. Raises ``ActivationError``.
        """
        url = self._endpoint(endpoint_url, self.settings.trial_activation_url, "trial")
        return self.orchestrator.activate_trial(url)

    def activate_purchase(
        self, license_key: str, endpoint_url: str | None = None
    ) -> PurchasedLicense:
        """Activate a purchase for this device and store the license.

        Raises ``ActivationError``.
        """
        url = self._endpoint(
            endpoint_url, self.settings.purchase_activation_url, "purchase"
        )
        return self.orchestrator.activate_purchase(license_key, url)

    # Background activation

    def _get_executor(self) -> Executor:
        with self._executor_lock:
            if self._executor is None:
                self._executor = ThreadPoolExecutor(
                    max_workers=self.settings.max_workers,
                    thread_name_prefix="signedlic-activation",
                )
            return self._executor

    def _submit(
        self,
        fn: Callable[[], Any],
        completion_handler: CompletionHandler | None,
        completion_executor: Executor | None,
    ) -> Future[Any]:
        future = self._get_executor().submit(fn)
        if completion_handler is not None:

            def deliver(done: Future[Any]) -> None:
                if completion_executor is None:
                    completion_handler(done)
                else:
                    completion_executor.submit(completion_handler, done)

            future.add_done_callback(deliver)
        return future

    def activate_trial_async(
        self,
        endpoint_url: str | None = None,
        completion_handler: CompletionHandler | None = None,
        completion_executor: Executor | None = None,
    ) -> Future[License]:
        """Run ``activate_trial`` off the calling thread.

        ``completion_handler`` receives the finished future exactly once, on
        ``completion_executor`` when given, otherwise on the worker thread.
        """
        url = self._endpoint(endpoint_url, self.settings.trial_activation_url, "trial")
        return self._submit(
            lambda: self.orchestrator.activate_trial(url),
            completion_handler,
            completion_executor,
        )

    def activate_purchase_async(
        self,
        license_key: str,
        endpoint_url: str | None = None,
        completion_handler: CompletionHandler | None = None,
        completion_executor: Executor | None = None,
    ) -> Future[PurchasedLicense]:
        """Run ``activate_purchase`` off the calling thread."""
        url = self._endpoint(
            endpoint_url, self.settings.purchase_activation_url, "purchase"
        )
        return self._submit(
            lambda: self.orchestrator.activate_purchase(license_key, url),
            completion_handler,
            completion_executor,
        )

    # Lifecycle

    def close(self) -> None:
        """Shut down the client-owned worker pool, if one was started."""
        with self._executor_lock:
            if self._owns_executor and self._executor is not None:
                self._executor.shutdown(wait=True)
                self._executor = None

    def __enter__(self) -> LicenseClient:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()
