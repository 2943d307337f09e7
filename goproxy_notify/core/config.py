from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping

import yaml


logger = logging.getLogger(__name__)

DEFAULT_PROXY_URL = "https://proxy.golang.org"
DEFAULT_TIMEOUT_SECONDS = 30
MODULE_PATH_ENV = "GO_MODULE_PATH"


@dataclass(frozen=True)
class NotifyConfig:
    module_path: str
    proxy_url: str = DEFAULT_PROXY_URL
    private: bool = False
    timeout_seconds: int = DEFAULT_TIMEOUT_SECONDS

    def snapshot(self) -> dict:
        return {
            "module_path": self.module_path,
            "proxy_url": self.proxy_url,
            "private": self.private,
            "timeout": self.timeout_seconds,
        }


def resolve_config(
    raw: Mapping[str, Any] | None,
    environ: Mapping[str, str] | None = None,
) -> NotifyConfig:
    """Build a fully defaulted config from untyped host input.

    Args:
        raw (Mapping[str, Any] | None): Host-provided configuration mapping.
        environ (Mapping[str, str] | None): Environment used for the
            module path fallback. Defaults to ``os.environ``.

    Returns:
        NotifyConfig: Best-effort configuration. Nothing here is rejected;
            validation reports problems separately.
    """
    raw = raw or {}
    config = NotifyConfig(
        module_path=resolve_module_path(raw, environ),
        proxy_url=_string(raw.get("proxy_url")) or DEFAULT_PROXY_URL,
        private=_flag(raw.get("private")),
        timeout_seconds=_positive_int(raw.get("timeout")) or DEFAULT_TIMEOUT_SECONDS,
    )
    logger.debug("resolved config: %s", config.snapshot())
    return config


def resolve_module_path(raw: Mapping[str, Any] | None, environ: Mapping[str, str] | None = None) -> str:
    value = _string((raw or {}).get("module_path"))
    if value:
        return value
    env = os.environ if environ is None else environ
    return env.get(MODULE_PATH_ENV, "")


def load_config_file(path: str) -> dict:
    """Read a raw plugin config mapping from a YAML or JSON file."""
    ext = Path(path).suffix.lower()
    with open(path, "r", encoding="utf-8") as handle:
        if ext in {".yaml", ".yml"}:
            data = yaml.safe_load(handle)
        elif ext == ".json":
            data = json.load(handle)
        else:
            raise ValueError(f"Unsupported config file extension: {ext}")

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValueError(f"Config file must contain a mapping: {path}")
    return data


def _string(value: Any) -> str:
    if isinstance(value, str):
        return value
    return ""


def _flag(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    # Only the exact lowercase spellings are accepted.
    if value == "true":
        return True
    return False


def _positive_int(value: Any) -> int | None:
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, str):
        try:
            value = float(value.strip())
        except ValueError:
            return None
    if isinstance(value, float):
        if not value.is_integer():
            return None
        value = int(value)
    if isinstance(value, int) and value > 0:
        return value
    return None
