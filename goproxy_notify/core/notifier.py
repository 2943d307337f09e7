from __future__ import annotations

import logging
import threading
from urllib.parse import quote

from goproxy_notify.core.errors import ConfigError, ProxyProtocolError
from goproxy_notify.core.models import ProxyRequest, ProxyResponse
from goproxy_notify.core.validation import proxy_url_error
from goproxy_notify.core.version import __version__
from goproxy_notify.ports.transport import ProxyTransport


logger = logging.getLogger(__name__)

USER_AGENT = f"goproxy-notify/{__version__}"


def build_request_url(proxy_url: str, module_path: str, version: str) -> str:
    """Compose the ``.info`` URL that makes the proxy fetch a version.

    Args:
        proxy_url (str): Base proxy URL; a trailing slash is dropped.
        module_path (str): Module path, percent-encoded except for ``/``.
        version (str): Normalized version, e.g. ``v1.2.3``.

    Returns:
        str: ``{proxy}/{module}/@v/{version}.info``.

    Raises:
        ConfigError: When the composed URL no longer passes the proxy URL
            rules, e.g. because the module path altered its host.
    """
    encoded_module = quote(module_path, safe="/")
    url = f"{proxy_url.rstrip('/')}/{encoded_module}/@v/{version}.info"
    problem = proxy_url_error(url)
    if problem:
        raise ConfigError(f"invalid request URL: {problem}")
    return url


def classify_response(response: ProxyResponse) -> None:
    """Raise ProxyProtocolError for statuses that mean the proxy refused."""
    status = response.status_code
    body = response.body
    if status == 200:
        return
    if status == 404:
        raise ProxyProtocolError(
            f"module or version not found (404): {body} - the tag may need time to propagate",
            status,
            body,
        )
    if status == 410:
        raise ProxyProtocolError(f"version does not exist or is unavailable (410): {body}", status, body)
    if status >= 400:
        raise ProxyProtocolError(f"proxy returned error status {status}: {body}", status, body)


class ProxyNotifier:
    """Ask a module proxy to index one module version.

    One GET per call, never retried. The transport is injected so tests can
    substitute it without touching orchestration.
    """
    def __init__(self, transport: ProxyTransport, agent: str | None = None) -> None:
        self.transport = transport
        self.agent = agent or USER_AGENT

    def notify(
        self,
        proxy_url: str,
        module_path: str,
        version: str,
        timeout_seconds: float,
        cancel: threading.Event | None = None,
    ) -> ProxyResponse:
        """Request the version info and classify the proxy's answer.

        Returns:
            ProxyResponse: The accepted response.

        Raises:
            ConfigError: The request URL failed the safety rules.
            NetworkError: The transport could not complete the exchange.
            ProxyProtocolError: The proxy returned an error status.
        """
        url = build_request_url(proxy_url, module_path, version)
        request = ProxyRequest(
            url=url,
            headers={"User-Agent": self.agent},
            timeout_seconds=timeout_seconds,
        )
        logger.info("notifying module proxy: %s", url)
        response = self.transport.send(request, cancel)
        try:
            classify_response(response)
        except ProxyProtocolError:
            logger.warning("proxy rejected %s with status %s", url, response.status_code)
            raise
        logger.info("proxy accepted %s@%s with status %s", module_path, version, response.status_code)
        return response
