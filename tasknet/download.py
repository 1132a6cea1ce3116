"""Download a Task release and repackage its binary."""

from __future__ import annotations

import logging
import shutil
import tempfile
from pathlib import Path
from typing import NamedTuple

import requests

from .config import TaskNetConfig
from .errors import DownloadError, PermissionChangeError, RelocationError
from .extract import extractor_for_platform
from .utils import USER_AGENT, log

logger = logging.getLogger(__name__)

PLATFORMS = ("linux", "darwin", "windows")
ARCHITECTURES = ("amd64", "arm64", "arm", "386")


class PlatformTarget(NamedTuple):
    """A platform/architecture pair Task publishes binaries for."""

    platform: str
    arch: str

    @classmethod
    def create(cls, platform: str, arch: str) -> PlatformTarget:
        """Build a target, rejecting platforms or architectures Task does not ship."""
        if platform not in PLATFORMS:
            msg = f"Unsupported platform {platform!r}, expected one of {', '.join(PLATFORMS)}"
            raise ValueError(msg)
        if arch not in ARCHITECTURES:
            msg = f"Unsupported architecture {arch!r}, expected one of {', '.join(ARCHITECTURES)}"
            raise ValueError(msg)
        return cls(platform, arch)

    @property
    def is_windows(self) -> bool:
        return self.platform == "windows"

    @property
    def archive_name(self) -> str:
        return task_archive_name(self.platform, self.arch)


def task_archive_name(platform: str, arch: str) -> str:
    """Return the release asset name Task uses for a platform/arch."""
    ext = "zip" if platform == "windows" else "tar.gz"
    return f"task_{platform}_{arch}.{ext}"


def release_tag(version: str) -> str:
    """Make sure a version carries the ``v`` tag prefix."""
    return version if version.startswith("v") else f"v{version}"


def download_file(url: str, destination: str | Path, timeout: float = 30) -> Path:
    """Download a file from a URL to a destination path."""
    log(f"Downloading from {url}", "info", "📥")
    try:
        with requests.get(
            url,
            stream=True,
            timeout=timeout,
            headers={"User-Agent": USER_AGENT},
        ) as response:
            response.raise_for_status()
            with open(destination, "wb") as f:
                for chunk in response.iter_content(chunk_size=8192):
                    f.write(chunk)
    except requests.RequestException as e:
        msg = f"Failed to download {url}"
        raise DownloadError(msg, str(e)) from e
    except OSError as e:
        msg = f"Failed to write {destination}"
        raise DownloadError(msg, str(e)) from e
    return Path(destination)


def _destination_name(name: str, target: PlatformTarget) -> str:
    if target.is_windows and not name.endswith(".exe"):
        return f"{name}.exe"
    return name


def _relocate_binary(source: Path, output_dir: Path, dest_name: str) -> Path:
    """Move the extracted binary to ``output_dir/dest_name``."""
    try:
        output_dir.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        msg = f"Failed to create output directory {output_dir}"
        raise RelocationError(msg, str(e)) from e

    if not source.is_file():
        msg = f"Binary {source.name} not found in the release archive"
        raise RelocationError(msg)

    dest_path = output_dir / dest_name
    try:
        if dest_path.exists():
            dest_path.unlink()
        # the temp dir may live on another filesystem than output_dir
        shutil.move(str(source), dest_path)
    except OSError as e:
        msg = f"Failed to move {source.name} to {dest_path}"
        raise RelocationError(msg, str(e)) from e
    return dest_path


def _make_executable(path: Path) -> None:
    try:
        path.chmod(0o755)
    except OSError as e:
        msg = f"Failed to make {path} executable"
        raise PermissionChangeError(msg, str(e)) from e


def download_release(
    version: str,
    name: str,
    output_dir: str | Path,
    platform: str,
    arch: str,
    config: TaskNetConfig | None = None,
) -> Path:
    """Download a Task release for one platform/arch and store its binary as ``name``.

    The archive is fetched and unpacked in a temporary directory that is
    removed whatever happens. On Windows ``.exe`` is appended to ``name`` when
    missing, elsewhere the binary is made executable.

    Returns:
        Path of the repackaged binary.

    Raises:
        DownloadError: The archive could not be downloaded.
        ExtractionError: The archive could not be unpacked.
        RelocationError: The binary is missing or could not be moved.
        PermissionChangeError: The binary could not be made executable.

    """
    config = config or TaskNetConfig()
    target = PlatformTarget.create(platform, arch)
    tag = release_tag(version)
    filename = target.archive_name
    url = config.asset_url_template.format(version=tag, filename=filename)
    output_dir = Path(output_dir)

    log(f"Downloading Task {tag} for {target.platform}/{target.arch}...")
    with tempfile.TemporaryDirectory(prefix="task-download-") as tmp:
        tmp_dir = Path(tmp)
        archive_path = download_file(
            url,
            tmp_dir / filename,
            timeout=config.request_timeout,
        )

        extract_dir = tmp_dir / "extracted"
        extractor_for_platform(target.platform).extract(archive_path, extract_dir)

        binary = config.binary_name + (".exe" if target.is_windows else "")
        dest_path = _relocate_binary(
            extract_dir / binary,
            output_dir,
            _destination_name(name, target),
        )

    if not target.is_windows:
        _make_executable(dest_path)

    log(
        f"Downloaded Task {tag} for {target.platform}/{target.arch} as {dest_path}",
        "success",
    )
    return dest_path
