from __future__ import annotations

import threading
from typing import Protocol

from goproxy_notify.core.models import ProxyRequest, ProxyResponse


class ProxyTransport(Protocol):
    """Synchronous request/response boundary to the module proxy."""
    def send(self, request: ProxyRequest, cancel: threading.Event | None = None) -> ProxyResponse:
        """Perform the request and return the proxy's status and body.

        Args:
            request (ProxyRequest): URL, headers, and timeout for the GET.
            cancel (threading.Event | None): Set by the caller to abandon the
                request.

        Returns:
            ProxyResponse: Status code and decoded body text.

        Raises:
            NetworkError: When no response could be obtained, including
                timeouts, redirect policy violations, and cancellation.
        """
        ...
