from __future__ import annotations

from goproxy_notify.core.errors import VersionError
from goproxy_notify.core.models import ReleaseContext


def normalize_version(release: ReleaseContext) -> str:
    """Pick the release version and give it the leading ``v`` Go expects.

    ``version`` wins over ``tag_name``. Already prefixed values are returned
    unchanged, so normalizing twice is a no-op.
    """
    value = release.version or release.tag_name
    if not value:
        raise VersionError("version is required for proxy notification")
    return ensure_v_prefix(value)


def ensure_v_prefix(value: str) -> str:
    if value.startswith("v"):
        return value
    return f"v{value}"
