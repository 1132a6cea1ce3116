"""Extract files from release archives."""

from __future__ import annotations

import contextlib
import logging
import os
import stat
import tarfile
import zipfile
import zlib
from abc import ABC, abstractmethod
from collections.abc import Iterator
from dataclasses import dataclass
from pathlib import Path, PurePosixPath, PureWindowsPath

from .errors import ExtractionError
from .utils import log

logger = logging.getLogger(__name__)

DIRECTORY_MODE = 0o755
DEFAULT_FILE_MODE = 0o644


@dataclass
class ArchiveEntry:
    """A single member of an archive."""

    name: str
    is_dir: bool
    mode: int
    data: bytes | None = None


def _is_within(base: str, candidate: str) -> bool:
    try:
        return os.path.commonpath([base, candidate]) == base
    except ValueError:
        return False


def safe_extract_path(dest_dir: Path, name: str) -> Path:
    """Resolve where an archive member lands, refusing paths outside ``dest_dir``."""
    if not name or "\x00" in name:
        msg = f"Unsafe archive member name {name!r}"
        raise ExtractionError(msg)
    windows_path = PureWindowsPath(name)
    if PurePosixPath(name).is_absolute() or windows_path.drive or windows_path.root:
        msg = f"Archive member {name!r} has an absolute path"
        raise ExtractionError(msg)

    base = os.path.realpath(dest_dir)
    target = os.path.realpath(os.path.join(base, name))
    if not _is_within(base, target):
        msg = f"Archive member {name!r} would be extracted outside {dest_dir}"
        raise ExtractionError(msg)
    return Path(target)


def _write_file(data: bytes, path: Path, mode: int) -> None:
    """Write data to a file with specified permissions."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(data)
    path.chmod(mode)


class ArchiveExtractor(ABC):
    """Unpacks one archive format into a directory."""

    @abstractmethod
    def _entries(self, archive_path: Path) -> Iterator[ArchiveEntry]:
        """Yield the members of the archive in archive order."""

    def extract(self, archive_path: str | Path, dest_dir: str | Path) -> list[Path]:
        """Extract every entry of ``archive_path`` below ``dest_dir``.

        Regular files keep the mode recorded in the archive, directories are
        created with ``0o755``. Returns the created paths in archive order.
        Files written before a failure are left in place.

        Raises:
            ExtractionError: The archive is corrupt, holds an unsafe path or
                could not be written out.

        """
        archive_path = Path(archive_path)
        dest_dir = Path(dest_dir)
        log(f"Extracting {archive_path.name} to {dest_dir}", "info", "📦")
        created: list[Path] = []
        try:
            dest_dir.mkdir(parents=True, exist_ok=True)
            with contextlib.closing(self._entries(archive_path)) as entries:
                for entry in entries:
                    target = safe_extract_path(dest_dir, entry.name)
                    if entry.is_dir:
                        target.mkdir(parents=True, exist_ok=True)
                        target.chmod(DIRECTORY_MODE)
                    else:
                        _write_file(entry.data or b"", target, entry.mode)
                    log(f"  - {entry.name}", "debug")
                    created.append(target)
        except ExtractionError:
            raise
        except (OSError, EOFError, zlib.error, zipfile.BadZipFile, tarfile.TarError) as e:
            msg = f"Failed to extract {archive_path.name}"
            raise ExtractionError(msg, str(e)) from e
        return created


class ZipExtractor(ArchiveExtractor):
    """Extractor for ``.zip`` archives."""

    def _entries(self, archive_path: Path) -> Iterator[ArchiveEntry]:
        with zipfile.ZipFile(archive_path) as zip_file:
            for info in zip_file.infolist():
                if info.is_dir():
                    yield ArchiveEntry(name=info.filename, is_dir=True, mode=DIRECTORY_MODE)
                    continue
                # Unix mode bits live in the high word; Windows-made zips leave it empty
                unix_mode = info.external_attr >> 16
                if stat.S_IFMT(unix_mode) and not stat.S_ISREG(unix_mode):
                    log(f"Skipping non-regular archive member {info.filename}", "warning")
                    continue
                mode = unix_mode & 0o777 or DEFAULT_FILE_MODE
                yield ArchiveEntry(
                    name=info.filename,
                    is_dir=False,
                    mode=mode,
                    data=zip_file.read(info),
                )


class TarGzExtractor(ArchiveExtractor):
    """Extractor for gzip compressed tarballs."""

    def _entries(self, archive_path: Path) -> Iterator[ArchiveEntry]:
        with tarfile.open(archive_path, mode="r:gz") as tar:
            for member in tar:
                if member.isdir():
                    yield ArchiveEntry(name=member.name, is_dir=True, mode=DIRECTORY_MODE)
                elif member.isreg():
                    file_data = tar.extractfile(member)
                    yield ArchiveEntry(
                        name=member.name,
                        is_dir=False,
                        mode=member.mode & 0o777,
                        data=file_data.read() if file_data else b"",
                    )
                else:
                    log(f"Skipping non-regular archive member {member.name}", "warning")


def extractor_for_platform(platform: str) -> ArchiveExtractor:
    """Return the extractor matching the archive format released for a platform."""
    if platform == "windows":
        return ZipExtractor()
    return TarGzExtractor()
