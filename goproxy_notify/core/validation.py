from __future__ import annotations

import logging
import re
from typing import Any, Callable, Mapping
from urllib.parse import urlsplit

from goproxy_notify.core.config import resolve_module_path
from goproxy_notify.core.models import ValidationResult


logger = logging.getLogger(__name__)

MAX_MODULE_PATH_LENGTH = 500

# host.tld followed by one or more path segments.
_MODULE_PATH_PATTERN = re.compile(r"[a-zA-Z0-9][a-zA-Z0-9._-]*\.[a-zA-Z0-9._-]+(/[a-zA-Z0-9._-]+)+")

_LOCALHOST_NAMES = {"localhost", "127.0.0.1", "::1"}
_PRIVATE_PREFIXES = ("10.", "192.168.", "172.")
_PRIVATE_SUFFIXES = (".local", ".internal")

Rule = tuple[Callable[[str], bool], str]

_MODULE_PATH_RULES: list[Rule] = [
    (lambda path: path == "", "module path cannot be empty"),
    (
        lambda path: len(path) > MAX_MODULE_PATH_LENGTH,
        f"module path too long (max {MAX_MODULE_PATH_LENGTH} characters)",
    ),
    (lambda path: ".." in path, "module path cannot contain '..'"),
    (lambda path: path.startswith("/"), "module path cannot start with '/'"),
    (lambda path: "//" in path, "module path cannot contain '//'"),
    (
        lambda path: _MODULE_PATH_PATTERN.fullmatch(path) is None,
        "invalid module path format: must be like 'github.com/user/repo'",
    ),
]


def module_path_error(module_path: str) -> str | None:
    """Return the first module path rule the value violates.

    Args:
        module_path (str): Go module import path, e.g. ``github.com/user/repo``.

    Returns:
        str | None: Violation message, or None when the path is acceptable.
    """
    for violated, message in _MODULE_PATH_RULES:
        if violated(module_path):
            return message
    return None


def proxy_url_error(proxy_url: str) -> str | None:
    """Return why a proxy URL is unsafe to request, if it is.

    Args:
        proxy_url (str): Base proxy URL or a fully built request URL.

    Returns:
        str | None: Violation message, or None when the URL may be requested.

    Notes:
        The scheme is checked on the literal prefix rather than the parsed
        scheme. Private ranges are matched on hostname prefixes, so the whole
        172.x.x.x space is rejected, not only 172.16.0.0/12.
    """
    if not proxy_url.startswith("https://"):
        return "proxy URL must use HTTPS"

    try:
        parts = urlsplit(proxy_url)
        # Raises on a non-numeric or out-of-range port.
        parts.port
    except ValueError as exc:
        return f"invalid proxy URL: {exc}"

    host = (parts.hostname or "").lower()
    if not host:
        return "proxy URL must have a valid host"
    if host in _LOCALHOST_NAMES:
        return "proxy URL cannot be localhost"
    if host.startswith(_PRIVATE_PREFIXES) or host.endswith(_PRIVATE_SUFFIXES):
        return "proxy URL cannot point to private network"
    return None


def _check_module_path(raw: Mapping[str, Any], environ: Mapping[str, str] | None) -> str | None:
    module_path = resolve_module_path(raw, environ)
    if not module_path:
        return "Go module path is required"
    return module_path_error(module_path)


def _check_proxy_url(raw: Mapping[str, Any], environ: Mapping[str, str] | None) -> str | None:
    proxy_url = raw.get("proxy_url")
    if not isinstance(proxy_url, str) or not proxy_url:
        return None
    return proxy_url_error(proxy_url)


def _check_timeout(raw: Mapping[str, Any], environ: Mapping[str, str] | None) -> str | None:
    if "timeout" not in raw:
        return None
    value = raw["timeout"]
    if isinstance(value, str):
        return None
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        if value <= 0:
            return "timeout must be a positive integer"
        return None
    return "timeout must be an integer"


_FIELD_CHECKS = [
    ("module_path", _check_module_path),
    ("proxy_url", _check_proxy_url),
    ("timeout", _check_timeout),
]


def validate_config(
    raw: Mapping[str, Any] | None,
    environ: Mapping[str, str] | None = None,
) -> ValidationResult:
    """Check a raw host configuration field by field.

    Args:
        raw (Mapping[str, Any] | None): Untyped configuration from the host.
        environ (Mapping[str, str] | None): Environment for the module path
            fallback. Defaults to ``os.environ``.

    Returns:
        ValidationResult: Ordered field errors; empty when the config is valid.
    """
    raw = raw or {}
    result = ValidationResult()
    for field_name, check in _FIELD_CHECKS:
        message = check(raw, environ)
        if message is None:
            continue
        logger.warning("config field %s rejected: %s", field_name, message)
        result.add(field_name, message)
    return result
