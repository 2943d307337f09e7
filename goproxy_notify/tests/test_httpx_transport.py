import ssl
import threading
import time

import httpx
import pytest

from goproxy_notify.adapters.httpx_transport import (
    MAX_REDIRECTS,
    HttpxTransport,
    RedirectRejected,
    build_http_client,
    build_ssl_context,
    require_https,
)
from goproxy_notify.core.errors import NetworkError
from goproxy_notify.core.models import ProxyRequest


INFO_URL = "https://proxy.golang.org/github.com/user/repo/@v/v1.2.3.info"


def _transport(handler) -> HttpxTransport:
    return HttpxTransport(build_http_client(transport=httpx.MockTransport(handler)))


def test_send_returns_status_and_body() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, text='{"Version":"v1.2.3"}')

    response = _transport(handler).send(
        ProxyRequest(url=INFO_URL, headers={"User-Agent": "goproxy-notify/test"}, timeout_seconds=5)
    )

    assert response.status_code == 200
    assert response.body == '{"Version":"v1.2.3"}'
    assert len(seen) == 1
    assert seen[0].method == "GET"
    assert str(seen[0].url) == INFO_URL
    assert seen[0].headers["User-Agent"] == "goproxy-notify/test"
    assert seen[0].content == b""


def test_send_returns_error_statuses_without_raising() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(404, text="not found")

    response = _transport(handler).send(ProxyRequest(url=INFO_URL))

    assert response.status_code == 404
    assert response.body == "not found"


def test_send_follows_https_redirects() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.host == "proxy.golang.org":
            return httpx.Response(302, headers={"Location": "https://mirror.example.com/info"})
        return httpx.Response(200, text="ok")

    response = _transport(handler).send(ProxyRequest(url=INFO_URL))

    assert response.status_code == 200
    assert response.body == "ok"


def test_send_rejects_redirect_to_plain_http() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(302, headers={"Location": "http://evil.example.com/"})

    with pytest.raises(NetworkError, match="non-HTTPS"):
        _transport(handler).send(ProxyRequest(url=INFO_URL))


def test_send_stops_after_redirect_limit() -> None:
    hops: list[str] = []

    def handler(request: httpx.Request) -> httpx.Response:
        hops.append(str(request.url))
        return httpx.Response(302, headers={"Location": f"https://proxy.golang.org/hop/{len(hops)}"})

    with pytest.raises(NetworkError, match="failed to send request"):
        _transport(handler).send(ProxyRequest(url=INFO_URL))

    assert len(hops) == MAX_REDIRECTS + 1


def test_send_wraps_transport_errors() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(NetworkError, match="connection refused"):
        _transport(handler).send(ProxyRequest(url=INFO_URL))


def test_send_wraps_timeouts() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ReadTimeout("timed out", request=request)

    with pytest.raises(NetworkError, match="timed out"):
        _transport(handler).send(ProxyRequest(url=INFO_URL))


def test_send_honors_cancellation_before_dispatch() -> None:
    calls: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        return httpx.Response(200)

    cancel = threading.Event()
    cancel.set()

    with pytest.raises(NetworkError, match="cancelled"):
        _transport(handler).send(ProxyRequest(url=INFO_URL), cancel)

    assert calls == []


def test_require_https_rejects_plain_http() -> None:
    with pytest.raises(RedirectRejected):
        require_https(httpx.Request("GET", "http://evil.example.com"))

    require_https(httpx.Request("GET", "https://proxy.golang.org"))


def test_default_client_settings() -> None:
    client = build_http_client(timeout_seconds=12)
    try:
        assert client.max_redirects == MAX_REDIRECTS
        assert client.follow_redirects is True
        assert client.timeout.read == 12
        assert require_https in client.event_hooks["request"]
    finally:
        client.close()


def test_ssl_context_requires_tls13() -> None:
    context = build_ssl_context()

    assert context.minimum_version == ssl.TLSVersion.TLSv1_3
    assert context.verify_mode == ssl.CERT_REQUIRED


def test_send_aborts_when_cancelled_while_waiting_for_headers() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        time.sleep(1.0)
        return httpx.Response(200, text="late")

    transport = _transport(handler)
    cancel = threading.Event()
    timer = threading.Timer(0.1, cancel.set)
    timer.start()
    started = time.monotonic()
    try:
        with pytest.raises(NetworkError, match="cancelled"):
            transport.send(ProxyRequest(url=INFO_URL, timeout_seconds=5), cancel)
    finally:
        timer.cancel()
        transport.close()

    assert time.monotonic() - started < 0.6


def test_send_deadline_covers_slow_body() -> None:
    def slow_body():
        for _ in range(20):
            time.sleep(0.1)
            yield b"x"

    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, content=slow_body())

    transport = _transport(handler)
    started = time.monotonic()
    try:
        with pytest.raises(NetworkError, match="timed out"):
            transport.send(ProxyRequest(url=INFO_URL, timeout_seconds=0.3))
    finally:
        transport.close()

    assert time.monotonic() - started < 1.0
