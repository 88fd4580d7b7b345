"""Infrastructure layer: HTTP transport for the activation endpoints.
"""

from __future__ import annotations

import logging
from typing import Any

import requests

from signedlic.common.exceptions import TransportError
from signedlic.common.interfaces import HttpResponse

logger = logging.getLogger(__name__)

JSON_HEADERS = {
    "Content-Type": "application/json",
    "Accept": "application/json",
}


class RequestsTransport:
    """POSTs JSON with ``requests``; no retries, no redirects, no cookies."""

    def __init__(self, timeout: float = 10, session: requests.Session | None = None):
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.update(JSON_HEADERS)

    def post(self, url: str, json_body: dict[str, Any]) -> HttpResponse:
        logger.debug("POST %s", url)
        try:
            r = self.session.post(
                url,
                json=json_body,
                timeout=self.timeout,
                allow_redirects=False,
            )
        except requests.RequestException as err:
            logger.warning("Request to %s failed: %s", url, err)
            raise TransportError(str(err)) from err
        logger.debug("POST %s -> %s (%d bytes)", url, r.status_code, len(r.content))
        # Responses are never cached or used to set cookies for later requests.
        self.session.cookies.clear()
        return HttpResponse(status_code=r.status_code, body=r.content or b"")

    def close(self) -> None:
        self.session.close()
