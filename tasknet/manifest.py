"""Set the version of a .csproj style manifest."""

from __future__ import annotations

import os
import re
import tempfile
from pathlib import Path

from .errors import ManifestIOError, StructureError
from .utils import log

VERSION_PATTERN = re.compile(r"<Version>.*?</Version>")
PROPERTY_GROUP_PATTERN = re.compile(r"<PropertyGroup>([ \t]*\r?\n?[ \t]*)")
LINE_INDENT_PATTERN = re.compile(r"(?:[ \t]*\r?\n)*([ \t]*)")
DEFAULT_INDENT = "    "


def patch_version(text: str, version: str) -> str:
    """Return ``text`` with its ``<Version>`` set to ``version``.

    Existing ``<Version>`` elements are rewritten in place. Without one, a new
    element is added as the first line of the only ``<PropertyGroup>``.
    """
    replacement = f"<Version>{version}</Version>"
    if VERSION_PATTERN.search(text):
        return VERSION_PATTERN.sub(lambda _: replacement, text)

    groups = list(PROPERTY_GROUP_PATTERN.finditer(text))
    if not groups:
        msg = "No <Version> or <PropertyGroup> found in manifest"
        raise StructureError(msg)
    if len(groups) > 1:
        msg = "Manifest has no <Version> and several <PropertyGroup> elements"
        raise StructureError(msg, "add a <Version> element to the intended group")

    match = groups[0]
    indent = match.group(1)
    if "\n" not in indent:
        indent = "\n" + DEFAULT_INDENT
    elif indent.endswith("\n"):
        # no indent after the tag, borrow the one of the next non-blank line
        indent += LINE_INDENT_PATTERN.match(text, match.end()).group(1) or DEFAULT_INDENT
    insertion = f"<PropertyGroup>{indent}{replacement}{match.group(1) or indent}"
    return text[: match.start()] + insertion + text[match.end() :]


def _atomic_write(path: Path, content: str) -> None:
    fd, temp_path = tempfile.mkstemp(dir=path.parent, prefix="tmp-", suffix=path.suffix)
    try:
        with os.fdopen(fd, "w", encoding="utf-8", errors="surrogateescape", newline="") as f:
            f.write(content)
        if path.exists():
            os.chmod(temp_path, path.stat().st_mode & 0o777)
        os.replace(temp_path, path)
    finally:
        if os.path.exists(temp_path):
            os.unlink(temp_path)


def set_manifest_version(path: str | Path, version: str) -> None:
    """Set the version field of the manifest at ``path``.

    Raises:
        StructureError: There is nowhere to put the version.
        ManifestIOError: The manifest could not be read or written.

    """
    path = Path(path)
    try:
        with open(path, encoding="utf-8", errors="surrogateescape", newline="") as f:
            text = f.read()
    except OSError as e:
        msg = f"Failed to read {path}"
        raise ManifestIOError(msg, str(e)) from e

    patched = patch_version(text, version)

    try:
        _atomic_write(path, patched)
    except OSError as e:
        msg = f"Failed to write {path}"
        raise ManifestIOError(msg, str(e)) from e
    log(f"Set version {version} in {path}", "success")
