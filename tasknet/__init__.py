"""task-net - Task releases for NuGet.

Keeps a NuGet redistribution of the Task runner (go-task/task) in step with
upstream: lists the Task releases that are not published on NuGet yet,
downloads and repackages the Task binary for one platform/architecture, and
sets the version field of the package's .csproj manifest.
"""

from __future__ import annotations

__version__ = "0.1.0"

from . import cli, config, download, extract, manifest, sources, utils, versions
from .cli import main
from .config import TaskNetConfig
from .download import PlatformTarget, download_release, task_archive_name
from .extract import TarGzExtractor, ZipExtractor, extractor_for_platform
from .manifest import set_manifest_version
from .sources import GitHubReleaseSource, NuGetVersionSource, compare_sources
from .versions import compare_versions, find_missing_versions, normalize_version

__all__ = [
    "GitHubReleaseSource",
    "NuGetVersionSource",
    "PlatformTarget",
    "TarGzExtractor",
    "TaskNetConfig",
    "ZipExtractor",
    "cli",
    "compare_sources",
    "compare_versions",
    "config",
    "download",
    "download_release",
    "extract",
    "extractor_for_platform",
    "find_missing_versions",
    "main",
    "manifest",
    "normalize_version",
    "set_manifest_version",
    "sources",
    "task_archive_name",
    "utils",
    "versions",
]
