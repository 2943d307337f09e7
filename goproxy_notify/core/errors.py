from __future__ import annotations


class NotifyError(RuntimeError):
    """Base class for failures raised while notifying a module proxy."""


class ConfigError(NotifyError):
    """Raised when the module path, proxy URL, or timeout is unusable."""


class VersionError(NotifyError):
    """Raised when the release carries no version to notify."""


class NetworkError(NotifyError):
    """Raised when the request never produced a proxy response."""


class ProxyProtocolError(NotifyError):
    """Raised when the proxy answers with an error status."""

    def __init__(self, message: str, status_code: int, body: str = "") -> None:
        super().__init__(message)
        self.status_code = status_code
        self.body = body
