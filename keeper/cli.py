"""
config-keeper command line.

Usage:
    config-keeper sanitize settings.toml
    config-keeper sanitize .github/app.yaml --output app.sanitized.yaml
    config-keeper hash settings.toml
    config-keeper status stored/settings.toml settings.toml
    config-keeper merge stored/settings.toml settings.toml
    config-keeper formats

Exit codes: 0 success, 1 drift detected, 2 error.
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from . import __version__
from .core.colors import bold, dim, error, success, warning, print_box
from .core.config_validator import (
    ConfigValidationError,
    KeeperConfig,
    find_config_file,
    validate_and_load_config,
)
from .core.logger import LogContext, setup_logger
from .core.path_validator import FileSystemError
from .core.security import safe_read_text, sanitize_error_message
from .core.workspace import file_hash, read_file, write_file
from .sanitizers import SANITIZERS, SanitizerError, sanitize
from .snapshot import (
    ConfigSnapshot,
    Workspace,
    check_file_status,
    merge_data,
)


EXIT_OK = 0
EXIT_DRIFT = 1
EXIT_ERROR = 2


class CommandError(Exception):
    """User-facing failure with a one-line message."""
    pass


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='config-keeper',
        description="Redact, hash and drift-check configuration files",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s sanitize settings.toml
  %(prog)s sanitize app.yaml --output app.sanitized.yaml
  %(prog)s status stored/app.yaml app.yaml
  %(prog)s merge stored/app.yaml app.yaml
        """
    )

    parser.add_argument(
        '--version',
        action='version',
        version=f'%(prog)s {__version__}'
    )

    parser.add_argument(
        '--config',
        type=Path,
        help='Path to configuration file (YAML, TOML or JSON). '
             'Default: keeper.yaml/.yml/.toml/.json in the current directory'
    )

    parser.add_argument(
        '--verbose', '-v',
        action='store_true',
        help='Show detailed output (debug logging)'
    )

    parser.add_argument(
        '--quiet', '-q',
        action='store_true',
        help='Minimal output (errors only)'
    )

    parser.add_argument(
        '--log-file',
        type=Path,
        help='Write JSON-lines log to this file'
    )

    subparsers = parser.add_subparsers(dest='command', metavar='COMMAND')
    subparsers.required = True

    root_help = 'Workspace root (default: from config or current directory)'

    sanitize_parser = subparsers.add_parser('sanitize', help='Print or write the redacted file')
    sanitize_parser.add_argument('file', help='File path relative to the workspace root')
    sanitize_parser.add_argument('--root', type=Path, help=root_help)
    sanitize_parser.add_argument(
        '--output', '-o',
        help='Write the redacted text to this workspace path instead of stdout'
    )

    hash_parser = subparsers.add_parser('hash', help='Print the SHA-256 digest of a file')
    hash_parser.add_argument('file', help='File path relative to the workspace root')
    hash_parser.add_argument('--root', type=Path, help=root_help)

    status_parser = subparsers.add_parser(
        'status', help='Compare a stored snapshot with the workspace file'
    )
    status_parser.add_argument('snapshot', type=Path, help='File holding the stored snapshot text')
    status_parser.add_argument('file', help='File path relative to the workspace root')
    status_parser.add_argument('--root', type=Path, help=root_help)

    merge_parser = subparsers.add_parser(
        'merge', help='Print both versions between conflict markers'
    )
    merge_parser.add_argument('snapshot', type=Path, help='File holding the stored snapshot text')
    merge_parser.add_argument('file', help='File path relative to the workspace root')
    merge_parser.add_argument('--root', type=Path, help=root_help)

    subparsers.add_parser('formats', help='List supported file extensions')

    return parser


def load_settings(config_path: Optional[Path], quiet: bool = False) -> KeeperConfig:
    """
    Load settings from an explicit or discovered config file.

    Raises:
        CommandError: If the config file is missing, unreadable or invalid
    """
    if config_path is None:
        config_path = find_config_file(Path.cwd())
        if config_path is None:
            return KeeperConfig()

    try:
        config, result = validate_and_load_config(config_path)
    except FileNotFoundError:
        raise CommandError(f"Config file not found: {config_path}")
    except ValueError as e:
        raise CommandError(f"Failed to load config: {e}")

    if not quiet:
        for message in result.warnings:
            print(warning(f"Warning: {message}", sys.stderr), file=sys.stderr)

    try:
        result.raise_if_invalid()
    except ConfigValidationError as e:
        raise CommandError(str(e))

    return KeeperConfig.from_dict(config, base_dir=Path(config_path).parent)


def _workspace(args, settings: KeeperConfig) -> Workspace:
    root = args.root or settings.workspace_root or Path.cwd()
    return Workspace(
        name=settings.workspace_name or Path(root).resolve().name,
        root=root,
        max_file_size=settings.max_file_size,
        encoding=settings.encoding,
        backup_dir=settings.backup_dir,
    )


def _read_snapshot(args, workspace: Workspace) -> ConfigSnapshot:
    try:
        content = safe_read_text(args.snapshot, workspace.max_file_size, workspace.encoding)
    except (OSError, ValueError) as e:
        raise CommandError(f"Cannot read snapshot {args.snapshot}: {e}")
    return ConfigSnapshot(path=args.file, name=Path(args.file).name, original_content=content)


def cmd_sanitize(args, workspace: Workspace) -> int:
    content = read_file(workspace.root, args.file, workspace.max_file_size, workspace.encoding)
    redacted = sanitize(content, args.file)

    if args.output:
        written = write_file(workspace.root, args.output, redacted,
                             workspace.encoding, workspace.backup_dir)
        if not args.quiet:
            print(success(f"✓ Wrote {written}", sys.stderr), file=sys.stderr)
    else:
        sys.stdout.write(redacted)
    return EXIT_OK


def cmd_hash(args, workspace: Workspace) -> int:
    digest = file_hash(workspace.root, args.file, workspace.max_file_size, workspace.encoding)
    print(f"{digest}  {args.file}")
    return EXIT_OK


def cmd_status(args, workspace: Workspace) -> int:
    snapshot = _read_snapshot(args, workspace)
    status = check_file_status(snapshot, workspace)

    if not args.quiet:
        if status.has_external_changes:
            headline = warning("⚠ External changes detected")
        else:
            headline = success("✓ In sync")
        print_box([
            headline,
            f"Snapshot: {status.snapshot_hash[:16]}",
            f"Disk:     {status.current_hash[:16]}",
        ], title=f"{workspace.name}: {snapshot.name}")

    return EXIT_DRIFT if status.has_external_changes else EXIT_OK


def cmd_merge(args, workspace: Workspace) -> int:
    snapshot = _read_snapshot(args, workspace)
    pair = merge_data(snapshot, workspace)

    if not pair.has_conflict:
        if not args.quiet:
            print(dim("No differences", sys.stderr), file=sys.stderr)
        return EXIT_OK

    sys.stdout.write(pair.as_markers())
    return EXIT_OK


def cmd_formats(args, workspace: Optional[Workspace] = None) -> int:
    for sanitizer in SANITIZERS.values():
        extensions = ', '.join(f".{ext}" for ext in sanitizer.extensions)
        print(f"{bold(sanitizer.name.upper()):<6}  {extensions}")
    return EXIT_OK


COMMANDS = {
    'sanitize': cmd_sanitize,
    'hash': cmd_hash,
    'status': cmd_status,
    'merge': cmd_merge,
    'formats': cmd_formats,
}


def main(argv: Optional[List[str]] = None) -> int:
    """Main CLI entry point"""
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        settings = load_settings(args.config, quiet=args.quiet)
    except CommandError as e:
        print(error(f"ERROR: {e}", sys.stderr), file=sys.stderr)
        return EXIT_ERROR

    if args.verbose:
        level = logging.DEBUG
    elif args.quiet:
        level = logging.ERROR
    else:
        level = settings.log_level_number

    workspace = _workspace(args, settings) if hasattr(args, 'root') else None
    logger = setup_logger(
        log_file=args.log_file or settings.log_file,
        level=level,
        context=LogContext(workspace=workspace.name if workspace else None),
    )

    try:
        return COMMANDS[args.command](args, workspace)
    except (FileSystemError, SanitizerError, CommandError) as e:
        root = workspace.root if workspace else None
        message = sanitize_error_message(str(e), root)
        logger.debug(f"{args.command} failed: {message}")
        print(error(f"ERROR: {message}", sys.stderr), file=sys.stderr)
        return EXIT_ERROR


if __name__ == '__main__':
    sys.exit(main())
