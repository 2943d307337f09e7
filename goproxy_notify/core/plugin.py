from __future__ import annotations

import logging
import threading
from typing import Any, Mapping

from goproxy_notify.core.config import NotifyConfig, resolve_config
from goproxy_notify.core.errors import NotifyError
from goproxy_notify.core.models import ExecutionResult, Hook, ReleaseContext, ValidationResult
from goproxy_notify.core.notifier import ProxyNotifier
from goproxy_notify.core.release import normalize_version
from goproxy_notify.core.validation import module_path_error, proxy_url_error, validate_config


logger = logging.getLogger(__name__)


class ProxyNotifyPlugin:
    """Entry points the plugin host calls into.

    Every path ends in a ValidationResult or ExecutionResult; core errors are
    converted here so nothing is raised back to the host.
    """
    def __init__(self, notifier: ProxyNotifier, environ: Mapping[str, str] | None = None) -> None:
        self.notifier = notifier
        self.environ = environ

    def validate(self, raw: Mapping[str, Any] | None) -> ValidationResult:
        """Report every invalid config field at once."""
        return validate_config(raw, self.environ)

    def execute(
        self,
        hook: Hook | str,
        raw: Mapping[str, Any] | None,
        release: ReleaseContext | Mapping[str, Any] | None,
        dry_run: bool = False,
        cancel: threading.Event | None = None,
    ) -> ExecutionResult:
        """Run the plugin for a lifecycle hook.

        Args:
            hook (Hook | str): Lifecycle point; only post-publish does work.
            raw (Mapping[str, Any] | None): Untyped configuration from the host.
            release (ReleaseContext | Mapping[str, Any] | None): Release metadata.
            dry_run (bool): Report the notification without sending it.
            cancel (threading.Event | None): Abandons the outbound request when set.

        Returns:
            ExecutionResult: Success flag, message or error, and outputs.
        """
        hook_name = hook.value if isinstance(hook, Hook) else str(hook)
        if hook_name != Hook.POST_PUBLISH.value:
            return ExecutionResult.ok(f"Hook {hook_name} not handled")
        config = resolve_config(raw, self.environ)
        if not isinstance(release, ReleaseContext):
            release = ReleaseContext.from_mapping(release)
        return self._post_publish(config, release, dry_run, cancel)

    def _post_publish(
        self,
        config: NotifyConfig,
        release: ReleaseContext,
        dry_run: bool,
        cancel: threading.Event | None,
    ) -> ExecutionResult:
        problem = module_path_error(config.module_path)
        if problem:
            return _failure(f"invalid module path: {problem}")

        if config.private:
            return ExecutionResult.ok(
                "Skipping proxy notification for private module",
                {"module_path": config.module_path, "private": True, "skipped": True},
            )

        problem = proxy_url_error(config.proxy_url)
        if problem:
            return _failure(f"invalid proxy URL: {problem}")

        try:
            version = normalize_version(release)
        except NotifyError as exc:
            return _failure(str(exc))

        outputs = {
            "module_path": config.module_path,
            "version": version,
            "proxy_url": config.proxy_url,
        }
        if dry_run:
            return ExecutionResult.ok(
                f"Would notify Go module proxy for {config.module_path}@{version}",
                outputs,
            )

        try:
            self.notifier.notify(
                config.proxy_url,
                config.module_path,
                version,
                config.timeout_seconds,
                cancel,
            )
        except NotifyError as exc:
            return _failure(f"failed to notify proxy: {exc}")

        return ExecutionResult.ok(
            f"Go module proxy notified for {config.module_path}@{version}",
            outputs,
        )


def _failure(error: str) -> ExecutionResult:
    logger.warning("post-publish notification aborted: %s", error)
    return ExecutionResult.failed(error)
