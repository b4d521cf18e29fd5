"""
Atomic replacement of workspace files.

New content is written to a temporary file in the target's directory,
fsynced, then renamed over the target with os.replace(). A reader sees the
old file or the new one, never a truncated mix, even if the process is
killed mid-write or the disk fills up.

Content is encoded before anything touches the disk and written as bytes,
so line endings land exactly as given.

Usage:
    from keeper.core.atomic_write import atomic_write

    atomic_write(Path("settings.toml"), text)
    atomic_write(Path("settings.toml"), text, backup_dir=Path(".keeper/backups"))
"""

import errno
import os
import shutil
import tempfile
from datetime import datetime
from pathlib import Path
from typing import Optional


class AtomicWriteError(Exception):
    """A write failed and the target file was left as it was."""
    pass


_ERRNO_MESSAGES = {
    errno.ENOSPC: "Disk full: Cannot write to {path}. Free up space and try again.",
    errno.EDQUOT: "Disk quota exceeded: Cannot write to {path}.",
    errno.EACCES: "Permission denied: Cannot write to {path}. Check directory permissions.",
    errno.EPERM: "Permission denied: Cannot write to {path}. Check directory permissions.",
    errno.EROFS: "Read-only file system: Cannot write to {path}.",
}


def _describe(error: OSError, path: Path) -> str:
    template = _ERRNO_MESSAGES.get(error.errno)
    if template:
        return template.format(path=path)
    return f"Cannot write to {path}: {error.strerror or error}"


def _discard(temp_name: str):
    try:
        os.unlink(temp_name)
    except FileNotFoundError:
        pass


def backup_file(file_path: Path, backup_dir: Path) -> Path:
    """Copy ``file_path`` into ``backup_dir`` as ``<name>.<timestamp>.bak``."""
    backup_dir = Path(backup_dir)
    backup_dir.mkdir(parents=True, exist_ok=True)
    stamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    target = backup_dir / f"{file_path.name}.{stamp}.bak"
    shutil.copy2(file_path, target)
    return target


def atomic_write(
    file_path: Path,
    content: str,
    encoding: str = 'utf-8',
    backup_dir: Optional[Path] = None
) -> Path:
    """
    Replace ``file_path`` with ``content`` in one step.

    Missing parent directories are created. An existing file keeps its
    permission bits.

    Args:
        file_path: File to write
        content: New text
        encoding: Text encoding
        backup_dir: Copy the existing file here first

    Returns:
        The path written

    Raises:
        AtomicWriteError: If encoding or any file operation fails; the
            OSError or UnicodeEncodeError is chained as __cause__
    """
    file_path = Path(file_path)

    try:
        data = content.encode(encoding)
    except UnicodeEncodeError as e:
        raise AtomicWriteError(
            f"Cannot encode content for {file_path} as {encoding}: {e.reason}"
        ) from e

    temp_name = None
    try:
        file_path.parent.mkdir(parents=True, exist_ok=True)

        if backup_dir is not None and file_path.is_file():
            backup_file(file_path, backup_dir)

        # Same directory so the rename never crosses file systems
        fd, temp_name = tempfile.mkstemp(
            prefix=f".{file_path.name}.",
            suffix=".tmp",
            dir=file_path.parent,
        )
        with os.fdopen(fd, 'wb') as handle:
            handle.write(data)
            handle.flush()
            os.fsync(handle.fileno())

        if file_path.exists():
            try:
                shutil.copymode(file_path, temp_name)
            except OSError:
                pass  # mkstemp's 0600 is an acceptable fallback

        os.replace(temp_name, file_path)
    except OSError as e:
        if temp_name is not None:
            _discard(temp_name)
        raise AtomicWriteError(_describe(e, file_path)) from e

    return file_path
