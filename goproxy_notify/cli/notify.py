from __future__ import annotations

"""goproxy-notify command-line interface entrypoint."""

import argparse
import json
import logging
import os
import sys

from goproxy_notify.adapters.httpx_transport import HttpxTransport
from goproxy_notify.core.config import load_config_file
from goproxy_notify.core.models import Hook, ReleaseContext
from goproxy_notify.core.notifier import ProxyNotifier
from goproxy_notify.core.plugin import ProxyNotifyPlugin


def _env_bool(name: str, default: bool) -> bool:
    """Read a boolean from the environment with a safe default."""
    value = os.environ.get(name)
    if value is None:
        return default
    return value.lower() in {"1", "true", "yes"}


def _parse_bool(value: str | None) -> bool:
    """Parse optional boolean flags that allow an implicit True value."""
    if value is None:
        return True
    return value.lower() in {"1", "true", "yes"}


def _build_transport() -> HttpxTransport:
    return HttpxTransport()


def _load_config(path: str | None) -> dict | None:
    if path is None:
        return {}
    try:
        return load_config_file(path)
    except (OSError, ValueError) as exc:
        print(f"Failed to load config: {exc}", file=sys.stderr)
        return None


def validate_command(args: argparse.Namespace) -> int:
    """Validate a plugin config file and print field errors as JSON."""
    raw = _load_config(args.config)
    if raw is None:
        return 2
    transport = _build_transport()
    try:
        result = ProxyNotifyPlugin(ProxyNotifier(transport)).validate(raw)
    finally:
        transport.close()
    print(json.dumps(result.to_dict(), indent=2, sort_keys=True))
    return 0 if result.valid else 1


def execute_command(args: argparse.Namespace) -> int:
    """Run a hook against the configured module proxy."""
    raw = _load_config(args.config)
    if raw is None:
        return 2
    release = ReleaseContext(version=args.version or "", tag_name=args.tag_name or "")
    transport = _build_transport()
    try:
        plugin = ProxyNotifyPlugin(ProxyNotifier(transport))
        result = plugin.execute(args.hook, raw, release, dry_run=args.dry_run)
    finally:
        transport.close()
    print(json.dumps(result.to_dict(), indent=2, sort_keys=True))
    return 0 if result.success else 1


def main() -> int:
    """CLI entrypoint and command registration."""
    parser = argparse.ArgumentParser(prog="goproxy-notify")
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")
    subparsers = parser.add_subparsers(dest="command", required=True)

    validate_parser = subparsers.add_parser("validate", help="Validate a plugin config")
    validate_parser.add_argument("--config", default=None, help="Path to a YAML or JSON config")
    validate_parser.set_defaults(func=validate_command)

    execute_parser = subparsers.add_parser("execute", help="Run a lifecycle hook")
    execute_parser.add_argument("--config", default=None, help="Path to a YAML or JSON config")
    execute_parser.add_argument(
        "--hook",
        default=Hook.POST_PUBLISH.value,
        choices=[hook.value for hook in Hook],
        help="Lifecycle hook to run",
    )
    execute_parser.add_argument("--version", default=None, help="Released version, e.g. 1.2.3")
    execute_parser.add_argument("--tag-name", default=None, help="Release tag, used when --version is absent")
    execute_parser.add_argument(
        "--dry-run",
        nargs="?",
        const=True,
        default=_env_bool("DRY_RUN", False),
        type=_parse_bool,
        help="Report the notification without sending it (true/false)",
    )
    execute_parser.set_defaults(func=execute_command)

    args = parser.parse_args()
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )
    return args.func(args)


if __name__ == "__main__":
    raise SystemExit(main())
