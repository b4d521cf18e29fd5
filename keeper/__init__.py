"""
Config Keeper - snapshot, redact and drift-check configuration files.

Redacts JSON, YAML, TOML and dotenv files while keeping their structure,
confines every file access to a workspace root, and detects when a tracked
file has changed on disk since it was captured.
"""

__version__ = "0.1.0"

from keeper.core import (
    FileSystemError,
    InvalidPathError,
    FileAccessError,
    resolve_path,
    read_file,
    write_file,
    file_exists,
    content_hash,
    file_hash,
    detect_conflict,
    conflict_markers,
    DriftStatus,
    MergePair,
)
from keeper.sanitizers import (
    SanitizerError,
    UnsupportedFormatError,
    ParseError,
    FileFormat,
    detect_format,
    sanitize,
)
from keeper.snapshot import (
    ConfigSnapshot,
    Workspace,
    track_file,
    sanitized_preview,
    check_file_status,
    merge_data,
    resolve_conflict,
    with_sanitized_override,
    restore_to_disk,
    export_sanitized,
)

__all__ = [
    # Sanitization
    "sanitize",
    "detect_format",
    "FileFormat",
    # Workspace files
    "resolve_path",
    "read_file",
    "write_file",
    "file_exists",
    # Hashing, drift, merge
    "content_hash",
    "file_hash",
    "detect_conflict",
    "conflict_markers",
    "DriftStatus",
    "MergePair",
    # Snapshots
    "ConfigSnapshot",
    "Workspace",
    "track_file",
    "sanitized_preview",
    "check_file_status",
    "merge_data",
    "resolve_conflict",
    "with_sanitized_override",
    "restore_to_disk",
    "export_sanitized",
    # Errors
    "FileSystemError",
    "InvalidPathError",
    "FileAccessError",
    "SanitizerError",
    "UnsupportedFormatError",
    "ParseError",
    # Version info
    "__version__",
]
