from __future__ import annotations

import concurrent.futures
import logging
import ssl
import threading
import time

import httpx

from goproxy_notify.core.errors import NetworkError
from goproxy_notify.core.models import ProxyRequest, ProxyResponse


logger = logging.getLogger(__name__)

MAX_REDIRECTS = 3
MAX_CONNECTIONS = 10
MAX_KEEPALIVE_CONNECTIONS = 5
KEEPALIVE_EXPIRY_SECONDS = 90.0
# How often a waiting caller re-checks its cancel event.
CANCEL_POLL_SECONDS = 0.05


class RedirectRejected(httpx.RequestError):
    """Raised when a redirect would leave HTTPS."""


def build_ssl_context() -> ssl.SSLContext:
    context = ssl.create_default_context()
    context.minimum_version = ssl.TLSVersion.TLSv1_3
    return context


def require_https(request: httpx.Request) -> None:
    """Request hook rejecting any hop, redirects included, that is not HTTPS."""
    if request.url.scheme != "https":
        raise RedirectRejected("redirect to non-HTTPS URL not allowed", request=request)


def build_http_client(
    timeout_seconds: float = 30.0,
    transport: httpx.BaseTransport | None = None,
) -> httpx.Client:
    """Create the pooled client shared by all notifications.

    Args:
        timeout_seconds (float): Default timeout; each request overrides it.
        transport (httpx.BaseTransport | None): Optional transport, mainly for
            tests. Pool limits and TLS settings apply to the default one.

    Returns:
        httpx.Client: Client following at most three redirects, HTTPS only.
    """
    return httpx.Client(
        timeout=httpx.Timeout(timeout_seconds),
        limits=httpx.Limits(
            max_connections=MAX_CONNECTIONS,
            max_keepalive_connections=MAX_KEEPALIVE_CONNECTIONS,
            keepalive_expiry=KEEPALIVE_EXPIRY_SECONDS,
        ),
        verify=build_ssl_context(),
        follow_redirects=True,
        max_redirects=MAX_REDIRECTS,
        event_hooks={"request": [require_https]},
        transport=transport,
    )


class HttpxTransport:
    """Send proxy requests over a shared httpx client.

    The client is created once and reused so connections are pooled across
    invocations; it is never mutated per request. Each exchange runs on a
    worker thread so the caller can walk away from it on cancel or when the
    overall deadline passes.
    """
    def __init__(self, client: httpx.Client | None = None, max_workers: int = MAX_CONNECTIONS) -> None:
        self.client = client or build_http_client()
        self._executor = concurrent.futures.ThreadPoolExecutor(
            max_workers=max_workers,
            thread_name_prefix="goproxy-notify",
        )

    def send(self, request: ProxyRequest, cancel: threading.Event | None = None) -> ProxyResponse:
        """Issue the GET and return status plus body text.

        Notes:
            ``request.timeout_seconds`` bounds the whole exchange, connect to
            last body byte. When ``cancel`` is set or the deadline passes the
            call returns at once with NetworkError; the abandoned exchange
            stops reading and closes its response as soon as it notices.
        """
        _raise_if_cancelled(cancel)
        deadline = time.monotonic() + request.timeout_seconds
        abort = threading.Event()
        future = self._executor.submit(self._exchange, request, abort)
        while True:
            remaining = deadline - time.monotonic()
            if remaining <= 0:
                abort.set()
                raise NetworkError(f"failed to send request: timed out after {request.timeout_seconds}s")
            try:
                return future.result(timeout=min(remaining, CANCEL_POLL_SECONDS))
            except concurrent.futures.TimeoutError:
                if cancel is not None and cancel.is_set():
                    abort.set()
                    raise NetworkError("failed to send request: request cancelled")

    def close(self) -> None:
        self._executor.shutdown(wait=False)
        self.client.close()

    def _exchange(self, request: ProxyRequest, abort: threading.Event) -> ProxyResponse:
        try:
            with self.client.stream(
                "GET",
                request.url,
                headers=request.headers,
                timeout=request.timeout_seconds,
            ) as response:
                body = _read_body(response, abort)
                return ProxyResponse(status_code=response.status_code, body=body)
        except httpx.HTTPError as exc:
            logger.debug("request to %s failed: %r", request.url, exc)
            raise NetworkError(f"failed to send request: {exc}") from exc


def _read_body(response: httpx.Response, abort: threading.Event) -> str:
    chunks: list[bytes] = []
    try:
        for chunk in response.iter_bytes():
            _raise_if_cancelled(abort)
            chunks.append(chunk)
    except httpx.HTTPError as exc:
        raise NetworkError(f"failed to read response: {exc}") from exc
    return b"".join(chunks).decode(response.encoding or "utf-8", errors="replace")


def _raise_if_cancelled(cancel: threading.Event | None) -> None:
    if cancel is not None and cancel.is_set():
        raise NetworkError("failed to send request: request cancelled")
