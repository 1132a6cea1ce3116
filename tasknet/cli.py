"""Command-line interface for task-net."""

from __future__ import annotations

import argparse
import logging
import sys

from rich.console import Console
from rich.markup import escape

from . import __version__
from .config import TaskNetConfig
from .download import ARCHITECTURES, PLATFORMS, download_release
from .errors import TaskNetError
from .manifest import set_manifest_version
from .sources import GitHubReleaseSource, NuGetVersionSource, compare_sources
from .utils import console as err_console
from .utils import current_platform, setup_logging

# Command results go to stdout, everything else to stderr
console = Console()
logger = logging.getLogger(__name__)


def compare(args: argparse.Namespace, config: TaskNetConfig) -> None:
    """Print upstream Task versions that are not yet on NuGet."""
    missing = compare_sources(
        GitHubReleaseSource(config.github_repo, config),
        NuGetVersionSource(args.package_id, config),
    )
    for version in missing:
        console.print(version, highlight=False)


def download(args: argparse.Namespace, config: TaskNetConfig) -> None:
    """Download one Task release for one platform/arch."""
    download_release(
        args.version,
        args.name,
        args.output,
        args.platform,
        args.arch,
        config,
    )


def set_version(args: argparse.Namespace, _config: TaskNetConfig) -> None:
    """Set the version in a csproj file."""
    set_manifest_version(args.file, args.version)


def create_parser() -> argparse.ArgumentParser:
    """Create command-line argument parser."""
    parser = argparse.ArgumentParser(
        prog="task-net",
        description="task-net - Compare Task versions with NuGet packages and download Task releases",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )

    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable verbose output",
    )
    parser.add_argument(
        "--config-file",
        type=str,
        help="Path to configuration file",
    )

    subparsers = parser.add_subparsers(dest="command", help="Command to execute")

    # compare command
    compare_parser = subparsers.add_parser(
        "compare",
        help="Compare Task versions with NuGet package versions",
    )
    compare_parser.add_argument("package_id", help="NuGet package id")
    compare_parser.set_defaults(func=compare)

    # download command
    default_platform, default_arch = current_platform()
    download_parser = subparsers.add_parser(
        "download",
        help="Download a specific Task release",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    download_parser.add_argument(
        "-v",
        "--version",
        required=True,
        help="Task version to download",
    )
    download_parser.add_argument(
        "-n",
        "--name",
        required=True,
        help="Custom name for the binary",
    )
    download_parser.add_argument(
        "-o",
        "--output",
        required=True,
        help="Output directory",
    )
    download_parser.add_argument(
        "-p",
        "--platform",
        choices=PLATFORMS,
        default=default_platform,
        help="Target platform",
    )
    download_parser.add_argument(
        "-a",
        "--arch",
        choices=ARCHITECTURES,
        default=default_arch,
        help="Target architecture",
    )
    download_parser.set_defaults(func=download)

    # set-version command
    set_version_parser = subparsers.add_parser(
        "set-version",
        help="Set version in a csproj file",
    )
    set_version_parser.add_argument(
        "-f",
        "--file",
        required=True,
        help="Path to csproj file",
    )
    set_version_parser.add_argument(
        "-v",
        "--version",
        required=True,
        help="Version to set",
    )
    set_version_parser.set_defaults(func=set_version)

    # version command
    version_parser = subparsers.add_parser("version", help="Print version information")
    version_parser.set_defaults(
        func=lambda _, __: console.print(f"[yellow]task-net[/] [bold]v{__version__}[/]"),
    )

    return parser


def main(argv: list[str] | None = None) -> None:
    """Main function to parse arguments and execute commands."""
    parser = create_parser()
    args = parser.parse_args(argv)

    setup_logging(args.verbose)

    if not hasattr(args, "func"):
        parser.print_help()
        sys.exit(1)

    try:
        config = TaskNetConfig.load_from_file(args.config_file)
        args.func(args, config)
    except Exception as e:  # noqa: BLE001
        err_console.print(f"❌ [bold red]Error: {escape(str(e))}[/bold red]", highlight=False, soft_wrap=True)
        if args.verbose and not isinstance(e, TaskNetError):
            err_console.print_exception()
        sys.exit(1)


if __name__ == "__main__":
    main()
