"""Main entry point for version guard."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

import yaml
from rich.console import Console
from rich.logging import RichHandler
from rich.prompt import Confirm
from rich.table import Table

from .cache import CacheCleaner
from .catalog import ARCHIVE_VERSIONS, find_archive_version
from .config import GuardConfig
from .paths import InstallPathError, InstallPaths, resolve_install_paths
from .process import PsutilProcessInspector
from .protector import (
    ProtectionOptions,
    ProtectionOrchestrator,
    ProtectionState,
    protected_paths,
)
from .retention import RetentionMode, decide
from .scanner import VersionScanner

LOGGER_NAME = "version-guard"

EXIT_OK = 0
EXIT_FAILED = 1
EXIT_ENVIRONMENT = 2


def setup_logging(config: GuardConfig) -> logging.Logger:
    """Set up the application logger.

    Args:
        config: Guard configuration.

    Returns:
        Configured logger instance.

    """
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(getattr(logging, config.log_level.upper()))

    # Clear existing handlers to avoid duplicates if called twice
    if logger.handlers:
        logger.handlers.clear()

    console_handler = RichHandler(
        console=Console(stderr=True),
        show_time=True,
        show_path=False,
    )
    console_handler.setLevel(logging.INFO)
    logger.addHandler(console_handler)

    config.log_file.parent.mkdir(parents=True, exist_ok=True)
    file_handler = logging.FileHandler(config.log_file, encoding="utf-8")
    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(
        logging.Formatter("%(asctime)s | %(levelname)s | %(message)s")
    )
    logger.addHandler(file_handler)

    return logger


class ConsoleObserver:
    """Prints protection progress to a rich console."""

    def __init__(self, console: Console) -> None:
        self.console = console

    def on_transition(self, state: ProtectionState) -> None:
        if not state.is_terminal:
            self.console.rule(f"[cyan]{state.value.replace('_', ' ')}[/cyan]", style="dim")

    def on_log(self, line: str) -> None:
        if line.startswith("[OK]"):
            style = "green"
        elif line.startswith("[FAILED]"):
            style = "bold red"
        elif line.startswith("[!]"):
            style = "yellow"
        else:
            style = None
        self.console.print(line, style=style, markup=False)


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command line arguments.

    Returns:
        Parsed arguments.

    """
    parser = argparse.ArgumentParser(
        prog="version-guard",
        description="Pin an installed application version and block its auto-updater",
    )

    parser.add_argument(
        "--config",
        "-c",
        type=Path,
        default=None,
        help="Path to configuration file",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    scan_parser = subparsers.add_parser("scan", help="List installed versions")
    scan_parser.add_argument(
        "--root",
        type=Path,
        default=None,
        help="Install root to scan instead of the one derived from the environment",
    )

    protect_parser = subparsers.add_parser("protect", help="Run the protection sequence")
    protect_parser.add_argument(
        "--root",
        type=Path,
        default=None,
        help="Install root to protect instead of the one derived from the environment",
    )
    keep_group = protect_parser.add_mutually_exclusive_group()
    keep_group.add_argument(
        "--keep",
        default=None,
        metavar="VERSION",
        help="Keep only this version directory and delete all others",
    )
    keep_group.add_argument(
        "--keep-index",
        type=int,
        default=None,
        metavar="N",
        help="Keep only the N-th scanned version (0 = oldest) and delete all others",
    )
    protect_parser.add_argument("--no-clean-cache", action="store_true", help="Skip cache cleaning")
    protect_parser.add_argument("--no-lock-config", action="store_true", help="Skip locking configure.ini")
    protect_parser.add_argument("--no-blockers", action="store_true", help="Skip creating updater blockers")
    protect_parser.add_argument("--yes", "-y", action="store_true", help="Do not ask for confirmation")

    archive_parser = subparsers.add_parser("archive", help="List curated archive versions")
    archive_parser.add_argument(
        "--version",
        default=None,
        dest="archive_version",
        help="Show details of a single archive version",
    )

    config_parser = subparsers.add_parser("config", help="Configuration management")
    config_parser.add_argument(
        "--init",
        action="store_true",
        help="Create default configuration file",
    )
    config_parser.add_argument(
        "--show",
        action="store_true",
        help="Show current configuration",
    )

    # Bare invocation falls back to scan, which reads --root
    parser.set_defaults(root=None)

    return parser.parse_args(argv)


def _install_paths(config: GuardConfig, root: Path | None) -> InstallPaths:
    if root is not None:
        return InstallPaths.from_install_root(root, config.apps_folder)
    return resolve_install_paths(config.env_var, config.vendor_folder, config.apps_folder)


def _options_from_args(config: GuardConfig, args: argparse.Namespace) -> ProtectionOptions:
    options = ProtectionOptions.from_config(config)
    if args.keep is not None:
        options.mode = RetentionMode.EXPLICIT
        options.keep = args.keep
    elif args.keep_index is not None:
        options.mode = RetentionMode.EXPLICIT
        options.keep = args.keep_index
    if args.no_clean_cache:
        options.clean_cache = False
    if args.no_lock_config:
        options.lock_config = False
    if args.no_blockers:
        options.create_blockers = False
    return options


def cmd_scan(config: GuardConfig, args: argparse.Namespace, console: Console) -> int:
    """Execute scan command.

    Args:
        config: Guard configuration.
        args: Parsed arguments.
        console: Output console.

    Returns:
        Exit code.

    """
    paths = _install_paths(config, args.root)
    versions = VersionScanner().scan(paths.apps_root)

    if not versions:
        console.print(f"[yellow]No installed versions found in {paths.apps_root}[/yellow]")
        return EXIT_OK

    table = Table(title=f"Installed versions ({len(versions)})")
    table.add_column("#", style="dim", justify="right")
    table.add_column("Version", style="cyan")
    table.add_column("Size (MB)", justify="right")
    table.add_column("Path", style="dim")

    for index, entry in enumerate(versions):
        table.add_row(str(index), entry.name, f"{entry.size_mb:.1f}", str(entry.path))

    console.print(table)
    return EXIT_OK


def cmd_protect(config: GuardConfig, args: argparse.Namespace, console: Console) -> int:
    """Execute protect command.

    Args:
        config: Guard configuration.
        args: Parsed arguments.
        console: Output console.

    Returns:
        Exit code.

    """
    logger = setup_logging(config)
    paths = _install_paths(config, args.root)
    options = _options_from_args(config, args)

    if not args.yes:
        planned = decide(VersionScanner().scan(paths.apps_root), options.mode, options.keep)
        console.print(f"Install root: [cyan]{paths.install_root}[/cyan]")
        deleting = ", ".join(entry.name for entry in planned.to_delete) or "none"
        console.print(f"Versions to delete: [red]{deleting}[/red]")
        if options.lock_config or options.create_blockers:
            console.print("Files to lock:")
            for path in protected_paths(paths):
                console.print(f"  {path}", markup=False)
        if not Confirm.ask("Continue?", console=console, default=False):
            console.print("[yellow]Aborted[/yellow]")
            return EXIT_FAILED

    orchestrator = ProtectionOrchestrator(
        paths,
        PsutilProcessInspector(config.process_names),
        logger,
        app_name=config.app_name,
        cache_cleaner=CacheCleaner(config.cache_directories, logger),
        observer=ConsoleObserver(console),
    )
    result = orchestrator.run(options)

    if result.success:
        console.print(f"[green]Success! {config.app_name} is guarded.[/green]")
        return EXIT_OK

    console.print(f"[red]Protection failed: {result.error}[/red]")
    return EXIT_FAILED


def cmd_archive(args: argparse.Namespace, console: Console) -> int:
    """Execute archive command.

    Args:
        args: Parsed arguments.
        console: Output console.

    Returns:
        Exit code.

    """
    if args.archive_version:
        entry = find_archive_version(args.archive_version)
        if entry is None:
            console.print(f"[red]Unknown archive version: {args.archive_version}[/red]")
            return EXIT_FAILED
        console.print(f"[bold]{entry.version}[/bold] - {entry.persona} ({entry.risk_level} risk)")
        console.print(entry.description)
        console.print("Features: " + ", ".join(entry.features))
        console.print(entry.download_url, markup=False)
        return EXIT_OK

    table = Table(title="Archive versions")
    table.add_column("Version", style="cyan")
    table.add_column("Persona")
    table.add_column("Risk")
    table.add_column("Description", style="dim")

    for entry in ARCHIVE_VERSIONS:
        table.add_row(entry.version, entry.persona, entry.risk_level, entry.description)

    console.print(table)
    return EXIT_OK


def cmd_config(config: GuardConfig, args: argparse.Namespace, console: Console) -> int:
    """Execute config command.

    Args:
        config: Guard configuration.
        args: Parsed arguments.
        console: Output console.

    Returns:
        Exit code.

    """
    if args.init:
        config_path = args.config or GuardConfig.get_config_path()
        if config_path.exists():
            console.print(f"[yellow]Config already exists: {config_path}[/yellow]")
            return EXIT_FAILED
        config.save(config_path)
        console.print(f"[green]Created config: {config_path}[/green]")
        return EXIT_OK

    if args.show:
        table = Table(title="Current Configuration")
        table.add_column("Setting", style="cyan")
        table.add_column("Value", style="green")

        table.add_row("Install location", f"${config.env_var}/{config.vendor_folder}/{config.apps_folder}")
        table.add_row("Process names", ", ".join(config.process_names))
        table.add_row("Cache directories", "\n".join(config.cache_directories))
        table.add_row("Clean cache", str(config.clean_cache))
        table.add_row("Lock config", str(config.lock_config))
        table.add_row("Create blockers", str(config.create_blockers))
        table.add_row("Retention mode", config.retention_mode.value)
        table.add_row("Keep version", "-" if config.keep_version is None else str(config.keep_version))
        table.add_row("Log file", str(config.log_file))
        table.add_row("Log level", config.log_level)

        console.print(table)
        return EXIT_OK

    console.print("[yellow]Use --init or --show[/yellow]")
    return EXIT_FAILED


def main(argv: list[str] | None = None) -> int:
    """Main entry point.

    Returns:
        Exit code.

    """
    args = parse_args(argv)
    console = Console()

    try:
        config = GuardConfig.load(args.config)
    except (ValueError, OSError, yaml.YAMLError) as e:
        console.print(f"[red]Invalid configuration: {e}[/red]")
        return EXIT_ENVIRONMENT

    command = args.command or "scan"

    try:
        if command == "scan":
            return cmd_scan(config, args, console)
        elif command == "protect":
            return cmd_protect(config, args, console)
        elif command == "archive":
            return cmd_archive(args, console)
        elif command == "config":
            return cmd_config(config, args, console)
        else:
            console.print(f"Unknown command: {command}")
            return EXIT_FAILED
    except InstallPathError as e:
        console.print(f"[red]{e}[/red]")
        return EXIT_ENVIRONMENT


if __name__ == "__main__":
    sys.exit(main())
