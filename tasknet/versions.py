"""Version normalization, comparison and release diffing."""

from __future__ import annotations

import functools
from collections.abc import Iterable, Mapping
from enum import Enum
from typing import NamedTuple

PRERELEASE_MARKERS = ("nightly", "preview", "alpha", "beta", "rc")
INT64_MAX = 2**63 - 1


class NormalizedVersion(NamedTuple):
    """A version reduced to three numeric components."""

    major: int
    minor: int
    patch: int

    def __str__(self) -> str:
        return f"{self.major}.{self.minor}.{self.patch}"


class VersionClass(Enum):
    """Whether a version string is a normal release or a pre-release."""

    NORMAL = "normal"
    PRERELEASE = "prerelease"


ReleaseSet = dict[NormalizedVersion, set[str]]


def _to_int(component: str) -> int:
    # ASCII digits only, and the value must fit a signed 64-bit integer
    if not (component.isascii() and component.isdigit()):
        return 0
    digits = component.lstrip("0") or "0"
    if len(digits) > 19:
        return 0
    value = int(digits)
    return value if value <= INT64_MAX else 0


def normalize_version(version: str) -> NormalizedVersion:
    """Reduce a version string to ``(major, minor, patch)``.

    A single leading ``v`` is dropped, missing components become ``0`` and
    anything past the third component is ignored. Components that are not
    plain ASCII integers (``"0-rc1"``) or that overflow a signed 64-bit
    integer count as ``0``.
    """
    parts = strip_tag_prefix(version).split(".")
    parts += ["0"] * (3 - len(parts))
    major, minor, patch = (_to_int(p) for p in parts[:3])
    return NormalizedVersion(major, minor, patch)


def format_version(version: NormalizedVersion) -> str:
    """Render a normalized version as ``major.minor.patch``."""
    return str(version)


def classify_version(version: str) -> VersionClass:
    """Classify a version string as normal or pre-release."""
    if any(marker in version for marker in PRERELEASE_MARKERS):
        return VersionClass.PRERELEASE
    if not "0" <= version[:1] <= "9":
        return VersionClass.PRERELEASE
    return VersionClass.NORMAL


def is_normal_version(version: str) -> bool:
    """Return True for versions that take part in comparison and diffing."""
    return classify_version(version) is VersionClass.NORMAL


def compare_versions(v1: str, v2: str) -> int:
    """Compare two version strings, returning -1, 0 or 1."""
    n1, n2 = normalize_version(v1), normalize_version(v2)
    if n1 < n2:
        return -1
    if n1 > n2:
        return 1
    return 0


def sort_versions(versions: Iterable[str], descending: bool = True) -> list[str]:  # noqa: FBT001, FBT002
    """Sort version strings by their normalized value (stable)."""
    return sorted(
        versions,
        key=functools.cmp_to_key(compare_versions),
        reverse=descending,
    )


def build_release_set(versions: Iterable[str]) -> ReleaseSet:
    """Group version strings by their normalized form."""
    release_set: ReleaseSet = {}
    for version in versions:
        release_set.setdefault(normalize_version(version), set()).add(version)
    return release_set


def strip_tag_prefix(version: str) -> str:
    """Drop the ``v`` that release tags carry (``v3.44.0`` -> ``3.44.0``)."""
    return version.removeprefix("v")


def _version_strings(versions: ReleaseSet | Iterable[str]) -> list[str]:
    if isinstance(versions, Mapping):
        strings = [v for originals in versions.values() for v in sorted(originals)]
    else:
        strings = list(versions)
    return [strip_tag_prefix(v) for v in strings]


def find_missing_versions(
    upstream: ReleaseSet | Iterable[str],
    registry: ReleaseSet | Iterable[str],
) -> list[str]:
    """Return upstream versions that have no published counterpart, newest first.

    Versions are matched on their normalized form, so ``3.43`` upstream is
    considered published when the registry carries ``3.43.0``. Tag prefixes
    are stripped and pre-releases on either side are ignored.
    """
    published = {
        normalize_version(v) for v in _version_strings(registry) if is_normal_version(v)
    }
    missing = [
        version
        for version in _version_strings(upstream)
        if is_normal_version(version) and normalize_version(version) not in published
    ]
    return sort_versions(missing)
