"""Utility functions for task-net."""

from __future__ import annotations

import os
import platform as _platform
import sys
from typing import Any, Literal

import requests
from rich.console import Console
from rich.markup import escape

from .errors import DecodeError, FetchError

# Log output goes to stderr so stdout only carries command results
console = Console(stderr=True)

USER_AGENT = "task-net"

_VERBOSE = False

_LOG_STYLES = {
    "info": ("🔍", "blue"),
    "success": ("✅", "green"),
    "warning": ("⚠️", "yellow"),
    "error": ("❌", "bold red"),
    "debug": ("🐛", "dim"),
}


def setup_logging(verbose: bool = False) -> None:  # noqa: FBT001, FBT002
    """Enable or disable debug output."""
    global _VERBOSE  # noqa: PLW0603
    _VERBOSE = verbose


def log(
    message: str,
    level: Literal["info", "success", "warning", "error", "debug"] = "info",
    emoji: str = "",
) -> None:
    """Print a styled log message to the console."""
    if level == "debug" and not _VERBOSE:
        return
    default_emoji, style = _LOG_STYLES[level]
    console.print(f"{emoji or default_emoji} [{style}]{escape(message)}[/{style}]")


def github_headers(token: str | None = None) -> dict[str, str]:
    """Build request headers for the GitHub API."""
    headers = {
        "Accept": "application/vnd.github+json",
        "User-Agent": USER_AGENT,
    }
    token = token or os.environ.get("GITHUB_TOKEN")
    if token:
        log("Using GITHUB_TOKEN for GitHub API requests", "debug")
        headers["Authorization"] = f"Bearer {token}"
    return headers


def get_json(
    url: str,
    *,
    timeout: float = 30,
    headers: dict[str, str] | None = None,
) -> Any:
    """Fetch a URL and decode its JSON body.

    Raises:
        FetchError: The request failed, timed out or returned a non-2xx status.
        DecodeError: The body is not valid JSON.

    """
    log(f"Fetching {url}", "debug")
    try:
        response = requests.get(
            url,
            headers=headers or {"User-Agent": USER_AGENT},
            timeout=timeout,
        )
        response.raise_for_status()
    except requests.RequestException as e:
        msg = f"Failed to fetch {url}"
        raise FetchError(msg, str(e)) from e

    try:
        return response.json()
    except ValueError as e:
        msg = f"Response from {url} is not valid JSON"
        raise DecodeError(msg, str(e)) from e


_MACHINE_TO_ARCH = {
    "x86_64": "amd64",
    "amd64": "amd64",
    "aarch64": "arm64",
    "arm64": "arm64",
    "armv6l": "arm",
    "armv7l": "arm",
    "arm": "arm",
    "i386": "386",
    "i686": "386",
    "x86": "386",
}


def current_platform() -> tuple[str, str]:
    """Detect the current platform and architecture."""
    platform = "linux"
    if sys.platform == "darwin":
        platform = "darwin"
    elif sys.platform.startswith(("win", "cygwin")):
        platform = "windows"

    machine = _platform.machine().lower()
    arch = _MACHINE_TO_ARCH.get(machine, "amd64")
    return platform, arch
