import pytest

from goproxy_notify.core.errors import VersionError
from goproxy_notify.core.models import ReleaseContext
from goproxy_notify.core.release import ensure_v_prefix, normalize_version


@pytest.mark.parametrize(
    "release,expected",
    [
        (ReleaseContext(version="1.0.0"), "v1.0.0"),
        (ReleaseContext(version="v2.0.0"), "v2.0.0"),
        (ReleaseContext(version="1.0.0-beta.1"), "v1.0.0-beta.1"),
        (ReleaseContext(version="v1.0.0-rc.1"), "v1.0.0-rc.1"),
        (ReleaseContext(tag_name="v3.1.4"), "v3.1.4"),
        (ReleaseContext(version="1.2.3", tag_name="v9.9.9"), "v1.2.3"),
    ],
)
def test_normalize_version_prefers_version_and_adds_prefix(release, expected) -> None:
    assert normalize_version(release) == expected


def test_normalize_version_is_idempotent() -> None:
    for raw in ["1.0.0", "v1.0.0", "0.0.1-alpha", "version"]:
        once = normalize_version(ReleaseContext(version=raw))
        twice = normalize_version(ReleaseContext(version=once))
        assert once == twice
        assert once.startswith("v")
        assert ensure_v_prefix(once) == once


def test_normalize_version_requires_a_value() -> None:
    with pytest.raises(VersionError, match="version is required"):
        normalize_version(ReleaseContext())


def test_release_context_from_mapping_tolerates_missing_keys() -> None:
    assert ReleaseContext.from_mapping(None) == ReleaseContext()
    assert ReleaseContext.from_mapping({"tag_name": "v1.0.0", "version": None}) == ReleaseContext(
        version="",
        tag_name="v1.0.0",
    )
