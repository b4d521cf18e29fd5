"""
Workspace-scoped file access.

All functions take the workspace root and an untrusted relative path, resolve
it with resolve_path() and only then touch the file system. Failures surface
as FileAccessError or InvalidPathError; nothing here aborts the process.
"""

import errno
from pathlib import Path
from typing import Optional, Union

from .atomic_write import atomic_write, AtomicWriteError
from .hashing import content_hash
from .logger import OperationLogger
from .path_validator import (
    FileAccessError,
    InvalidPathError,
    resolve_path,
)
from .security import MAX_FILE_SIZE_BYTES, safe_read_text


_log = OperationLogger("workspace")

PathLike = Union[str, Path]


def _error_code_for(error: OSError) -> str:
    if error.errno in (errno.EACCES, errno.EPERM, errno.EROFS):
        return "FS-01"
    if error.errno == errno.ENOSPC:
        return "FS-03"
    return "FS-06"


def _resolve(workspace_root: PathLike, relative_path: PathLike) -> Path:
    try:
        return resolve_path(workspace_root, relative_path)
    except InvalidPathError as e:
        _log.file_error(e.reason, relative_path, error_code=e.error_code)
        raise


def read_file(
    workspace_root: PathLike,
    relative_path: PathLike,
    max_size: int = MAX_FILE_SIZE_BYTES,
    encoding: str = 'utf-8'
) -> str:
    """
    Read a workspace file as text, byte-for-byte.

    Args:
        workspace_root: Workspace root directory
        relative_path: Path relative to the root
        max_size: Maximum allowed file size in bytes
        encoding: Text encoding

    Returns:
        File contents

    Raises:
        InvalidPathError: If the path escapes the workspace
        FileAccessError: If the file cannot be read or decoded
    """
    full_path = _resolve(workspace_root, relative_path)

    try:
        return safe_read_text(full_path, max_size=max_size, encoding=encoding)
    except ValueError as e:
        # UnicodeDecodeError is a ValueError too
        code = "DC-08" if isinstance(e, UnicodeDecodeError) else "DC-05"
        _log.file_error(str(e), relative_path, error_code=code)
        raise FileAccessError(str(e), full_path) from e
    except OSError as e:
        _log.file_error(f"Cannot read file: {e.strerror or e}", relative_path,
                        error_code=_error_code_for(e))
        raise FileAccessError(f"Cannot read {full_path}: {e.strerror or e}", full_path) from e


def write_file(
    workspace_root: PathLike,
    relative_path: PathLike,
    content: str,
    encoding: str = 'utf-8',
    backup_dir: Optional[Path] = None
) -> Path:
    """
    Write text to a workspace file, creating missing parent directories.

    The write is atomic. Parent directories are only created below the
    validated path, never outside the workspace.

    Args:
        workspace_root: Workspace root directory
        relative_path: Path relative to the root
        content: Text to write
        encoding: Text encoding
        backup_dir: Optional directory for a backup of the previous file

    Returns:
        The resolved path that was written

    Raises:
        InvalidPathError: If the path escapes the workspace
        FileAccessError: If the file or its parents cannot be written
    """
    full_path = _resolve(workspace_root, relative_path)

    try:
        atomic_write(full_path, content, encoding=encoding, backup_dir=backup_dir)
    except AtomicWriteError as e:
        cause = e.__cause__
        code = _error_code_for(cause) if isinstance(cause, OSError) else None
        _log.file_error(str(e), relative_path, error_code=code)
        raise FileAccessError(str(e), full_path) from e

    _log.debug(f"Wrote {len(content)} chars", file_path=relative_path, operation="write")
    return full_path


def file_exists(workspace_root: PathLike, relative_path: PathLike) -> bool:
    """Check whether a workspace file exists. Invalid paths count as missing."""
    try:
        return resolve_path(workspace_root, relative_path).is_file()
    except InvalidPathError:
        return False


def file_hash(
    workspace_root: PathLike,
    relative_path: PathLike,
    max_size: int = MAX_FILE_SIZE_BYTES,
    encoding: str = 'utf-8'
) -> str:
    """
    Hash the current on-disk content of a workspace file.

    Raises:
        InvalidPathError: If the path escapes the workspace
        FileAccessError: If the file cannot be read
    """
    return content_hash(read_file(workspace_root, relative_path, max_size, encoding))
