"""Remote sources of version strings."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Any

from .config import TaskNetConfig
from .errors import DecodeError, ResourceNotFoundError
from .utils import USER_AGENT, get_json, github_headers, log
from .versions import find_missing_versions, is_normal_version, strip_tag_prefix

logger = logging.getLogger(__name__)

GITHUB_PAGE_SIZE = 100
PACKAGE_BASE_ADDRESS_TYPE = "PackageBaseAddress/3.0.0"


class ReleaseSource(ABC):
    """Something that knows which versions of a project exist."""

    name = "release source"

    @abstractmethod
    def fetch(self) -> list[str]:
        """Return the normal (non pre-release) version strings of this source."""


class GitHubReleaseSource(ReleaseSource):
    """Release tags of a GitHub repository."""

    name = "GitHub releases"

    def __init__(self, repo: str, config: TaskNetConfig | None = None) -> None:
        self.repo = repo
        self.config = config or TaskNetConfig()

    @property
    def url(self) -> str:
        base = self.config.github_api_url.rstrip("/")
        return f"{base}/repos/{self.repo}/releases?per_page={GITHUB_PAGE_SIZE}"

    def fetch(self) -> list[str]:
        log(f"Fetching releases of {self.repo}")
        releases = get_json(
            self.url,
            timeout=self.config.request_timeout,
            headers=github_headers(self.config.github_token),
        )
        tags = _tag_names(releases, self.url)
        versions = [strip_tag_prefix(tag) for tag in tags]
        normal = [v for v in versions if is_normal_version(v)]
        log(f"Found {len(normal)} releases ({len(versions) - len(normal)} pre-releases skipped)", "debug")
        return normal


def _tag_names(releases: Any, url: str) -> list[str]:
    if not isinstance(releases, list):
        msg = f"Expected a list of releases from {url}"
        raise DecodeError(msg, f"got {type(releases).__name__}")
    tags = []
    for release in releases:
        tag = release.get("tag_name") if isinstance(release, dict) else None
        if not isinstance(tag, str):
            msg = f"Release entry from {url} has no tag_name"
            raise DecodeError(msg, repr(release))
        tags.append(tag)
    return tags


class NuGetVersionSource(ReleaseSource):
    """Published versions of a NuGet package."""

    name = "NuGet versions"

    def __init__(self, package_id: str, config: TaskNetConfig | None = None) -> None:
        self.package_id = package_id
        self.config = config or TaskNetConfig()

    def _get(self, url: str) -> Any:
        return get_json(
            url,
            timeout=self.config.request_timeout,
            headers={"User-Agent": USER_AGENT},
        )

    def package_base_address(self) -> str:
        """Look up the PackageBaseAddress endpoint in the service index."""
        index_url = self.config.nuget_index_url
        service_index = self._get(index_url)
        resources = service_index.get("resources") if isinstance(service_index, dict) else None
        if not isinstance(resources, list):
            msg = f"Service index at {index_url} has no resources list"
            raise DecodeError(msg)

        for resource in resources:
            if isinstance(resource, dict) and resource.get("@type") == PACKAGE_BASE_ADDRESS_TYPE:
                address = resource.get("@id")
                if not isinstance(address, str):
                    msg = f"{PACKAGE_BASE_ADDRESS_TYPE} resource has no @id"
                    raise DecodeError(msg, repr(resource))
                log(f"Package base address: {address}", "debug")
                return address

        msg = f"{PACKAGE_BASE_ADDRESS_TYPE} resource not found in {index_url}"
        raise ResourceNotFoundError(msg)

    def fetch(self) -> list[str]:
        log(f"Fetching NuGet versions of {self.package_id}")
        base = self.package_base_address()
        if not base.endswith("/"):
            base += "/"
        url = f"{base}{self.package_id.lower()}/index.json"
        data = self._get(url)
        versions = data.get("versions") if isinstance(data, dict) else None
        if not isinstance(versions, list) or not all(isinstance(v, str) for v in versions):
            msg = f"Expected a list of versions from {url}"
            raise DecodeError(msg, repr(data)[:200])
        # NuGet marks pre-release qualifiers with a hyphen
        return [v for v in versions if is_normal_version(v) and "-" not in v]


def compare_sources(upstream: ReleaseSource, registry: ReleaseSource) -> list[str]:
    """Fetch both sources and return upstream versions missing from the registry."""
    upstream_versions = upstream.fetch()
    registry_versions = registry.fetch()
    missing = find_missing_versions(upstream_versions, registry_versions)
    log(
        f"{len(missing)} of {len(upstream_versions)} {upstream.name} "
        f"missing from {registry.name}",
        "success",
    )
    return missing
