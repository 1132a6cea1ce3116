"""Tests for setting the version of a csproj manifest."""

from __future__ import annotations

from pathlib import Path

import pytest

from tasknet.errors import ManifestIOError, StructureError
from tasknet.manifest import patch_version, set_manifest_version

CSPROJ_WITH_VERSION = """\
<Project Sdk="Microsoft.NET.Sdk">

  <PropertyGroup>
    <OutputType>Exe</OutputType>
    <TargetFramework>net8.0</TargetFramework>
    <Version>1.0.0</Version>
    <PackAsTool>true</PackAsTool>
  </PropertyGroup>

</Project>
"""

CSPROJ_WITHOUT_VERSION = """\
<Project Sdk="Microsoft.NET.Sdk">
  <PropertyGroup>
    <TargetFramework>net8.0</TargetFramework>
  </PropertyGroup>
</Project>
"""


def test_replaces_existing_version(tmp_path: Path) -> None:
    csproj = tmp_path / "Task.csproj"
    csproj.write_text(CSPROJ_WITH_VERSION)
    set_manifest_version(csproj, "2.0.0")

    content = csproj.read_text()
    assert content.count("<Version>2.0.0</Version>") == 1
    assert "1.0.0" not in content
    assert content == CSPROJ_WITH_VERSION.replace("1.0.0", "2.0.0")


def test_inserts_version_after_property_group(tmp_path: Path) -> None:
    csproj = tmp_path / "Task.csproj"
    csproj.write_text(CSPROJ_WITHOUT_VERSION)
    set_manifest_version(csproj, "3.44.0")

    assert csproj.read_text() == (
        '<Project Sdk="Microsoft.NET.Sdk">\n'
        "  <PropertyGroup>\n"
        "    <Version>3.44.0</Version>\n"
        "    <TargetFramework>net8.0</TargetFramework>\n"
        "  </PropertyGroup>\n"
        "</Project>\n"
    )


def test_inserts_into_empty_property_group() -> None:
    patched = patch_version("<Project><PropertyGroup></PropertyGroup></Project>", "1.2.3")
    assert "<PropertyGroup>\n    <Version>1.2.3</Version>" in patched
    assert patched.endswith("</PropertyGroup></Project>")


def test_insert_after_blank_line_uses_next_indent() -> None:
    text = "<PropertyGroup>\n\n    <A>x</A>\n</PropertyGroup>"
    assert patch_version(text, "2.0.0") == (
        "<PropertyGroup>\n    <Version>2.0.0</Version>\n\n    <A>x</A>\n</PropertyGroup>"
    )


def test_insert_before_unindented_line_uses_default_indent() -> None:
    text = "<PropertyGroup>\n</PropertyGroup>"
    assert patch_version(text, "2.0.0") == (
        "<PropertyGroup>\n    <Version>2.0.0</Version>\n</PropertyGroup>"
    )


def test_preserves_crlf_line_endings(tmp_path: Path) -> None:
    csproj = tmp_path / "Task.csproj"
    original = CSPROJ_WITHOUT_VERSION.replace("\n", "\r\n").encode()
    csproj.write_bytes(original)
    set_manifest_version(csproj, "3.44.0")

    assert csproj.read_bytes() == original.replace(
        b"<PropertyGroup>\r\n",
        b"<PropertyGroup>\r\n    <Version>3.44.0</Version>\r\n",
    )


def test_replaces_every_version_element() -> None:
    text = "<Version>1.0.0</Version>\n<Version>1.0.1</Version>\n"
    assert patch_version(text, "2.0.0") == "<Version>2.0.0</Version>\n<Version>2.0.0</Version>\n"


def test_missing_structure(tmp_path: Path) -> None:
    csproj = tmp_path / "Task.csproj"
    csproj.write_text("<Project></Project>\n")
    with pytest.raises(StructureError, match="PropertyGroup"):
        set_manifest_version(csproj, "2.0.0")
    assert csproj.read_text() == "<Project></Project>\n"


def test_multiple_property_groups_without_version() -> None:
    text = "<PropertyGroup>\n</PropertyGroup>\n<PropertyGroup>\n</PropertyGroup>\n"
    with pytest.raises(StructureError, match="several"):
        patch_version(text, "2.0.0")


def test_missing_file(tmp_path: Path) -> None:
    with pytest.raises(ManifestIOError, match="Failed to read"):
        set_manifest_version(tmp_path / "missing.csproj", "2.0.0")


def test_keeps_file_mode(tmp_path: Path) -> None:
    csproj = tmp_path / "Task.csproj"
    csproj.write_text(CSPROJ_WITH_VERSION)
    csproj.chmod(0o640)
    set_manifest_version(csproj, "2.0.0")
    assert csproj.stat().st_mode & 0o777 == 0o640
    assert [p.name for p in tmp_path.iterdir()] == ["Task.csproj"]


def test_keeps_non_utf8_bytes(tmp_path: Path) -> None:
    csproj = tmp_path / "Task.csproj"
    original = CSPROJ_WITH_VERSION.replace("Exe", "Caf\xe9").encode("latin-1")
    csproj.write_bytes(original)
    set_manifest_version(csproj, "2.0.0")
    assert csproj.read_bytes() == original.replace(b"1.0.0", b"2.0.0")
