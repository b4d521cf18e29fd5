"""
Keeper Core - workspace access, hashing, drift and merge primitives.

Everything here is format-agnostic; the per-format redaction engines live in
keeper.sanitizers.
"""

from .path_validator import (
    FileSystemError,
    InvalidPathError,
    FileAccessError,
    WorkspacePathResolver,
    resolve_path,
    validate_path_contained,
)
from .workspace import (
    read_file,
    write_file,
    file_exists,
    file_hash,
)
from .hashing import content_hash, hashes_match
from .drift import DriftStatus, check_drift, compare_hashes
from .merge import MergePair, build_merge_pair, detect_conflict, conflict_markers
from .atomic_write import atomic_write, AtomicWriteError
from .config_validator import (
    ConfigError,
    ConfigValidationError,
    KeeperConfig,
    ValidationResult,
    validate_config_schema,
    validate_and_load_config,
    load_config_strict,
)
from .logger import setup_logger, get_logger, OperationLogger, LogContext

__all__ = [
    # Paths
    'FileSystemError',
    'InvalidPathError',
    'FileAccessError',
    'WorkspacePathResolver',
    'resolve_path',
    'validate_path_contained',

    # Workspace files
    'read_file',
    'write_file',
    'file_exists',
    'file_hash',
    'atomic_write',
    'AtomicWriteError',

    # Drift & merge
    'content_hash',
    'hashes_match',
    'DriftStatus',
    'check_drift',
    'compare_hashes',
    'MergePair',
    'build_merge_pair',
    'detect_conflict',
    'conflict_markers',

    # Config
    'ConfigError',
    'ConfigValidationError',
    'KeeperConfig',
    'ValidationResult',
    'validate_config_schema',
    'validate_and_load_config',
    'load_config_strict',

    # Logging
    'setup_logger',
    'get_logger',
    'OperationLogger',
    'LogContext',
]
