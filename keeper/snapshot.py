"""
Snapshot operations.

A ConfigSnapshot is the stored copy of a tracked config file. Nothing here
persists snapshots; callers keep them wherever they like and pass them back
in. Every operation that "changes" a snapshot returns a new value.
"""

from dataclasses import dataclass, replace
from pathlib import Path, PurePosixPath
from typing import Optional, Union

from .core.drift import DriftStatus, check_drift
from .core.logger import OperationLogger
from .core.merge import MergePair, build_merge_pair
from .core.security import MAX_FILE_SIZE_BYTES
from .core.workspace import read_file, write_file
from .sanitizers import sanitize


_log = OperationLogger("snapshot")


@dataclass(frozen=True)
class Workspace:
    """A named workspace root."""
    name: str
    root: Path
    max_file_size: int = MAX_FILE_SIZE_BYTES
    encoding: str = 'utf-8'
    backup_dir: Optional[Path] = None

    def __post_init__(self):
        object.__setattr__(self, 'root', Path(self.root))


@dataclass(frozen=True)
class ConfigSnapshot:
    """
    Stored copy of one tracked config file.

    Attributes:
        path: File path relative to the workspace root
        name: Display name
        original_content: Text captured verbatim when the file was tracked
        sanitized_content: Manually edited redacted text, or None to
            sanitize on demand
    """
    path: str
    name: str
    original_content: str
    sanitized_content: Optional[str] = None

    @property
    def has_override(self) -> bool:
        return self.sanitized_content is not None


def track_file(
    workspace: Workspace,
    relative_path: Union[str, Path],
    name: Optional[str] = None
) -> ConfigSnapshot:
    """
    Capture a workspace file as a new snapshot.

    Raises:
        InvalidPathError: If the path escapes the workspace
        FileAccessError: If the file cannot be read
    """
    _log.operation_start("track", relative_path)
    content = read_file(workspace.root, relative_path,
                        workspace.max_file_size, workspace.encoding)
    path = PurePosixPath(Path(relative_path).as_posix())
    snapshot = ConfigSnapshot(
        path=str(path),
        name=name or path.name,
        original_content=content,
    )
    _log.operation_complete("track", relative_path)
    return snapshot


def sanitized_preview(snapshot: ConfigSnapshot) -> str:
    """
    Redacted text for a snapshot.

    The manual override wins when set; otherwise the original text is
    sanitized by file extension.

    Raises:
        UnsupportedFormatError: If the extension has no sanitizer
        ParseError: If the original text is malformed
    """
    if snapshot.sanitized_content is not None:
        return snapshot.sanitized_content
    return sanitize(snapshot.original_content, snapshot.path)


def check_file_status(snapshot: ConfigSnapshot, workspace: Workspace) -> DriftStatus:
    """Compare the snapshot with the file currently on disk."""
    status = check_drift(snapshot.original_content, workspace.root, snapshot.path,
                         workspace.max_file_size, workspace.encoding)
    if status.has_external_changes:
        _log.info("External changes detected", file_path=snapshot.path, operation="status")
    return status


def merge_data(snapshot: ConfigSnapshot, workspace: Workspace) -> MergePair:
    """Both versions of a file, verbatim, for presenting a merge."""
    disk_content = read_file(workspace.root, snapshot.path,
                             workspace.max_file_size, workspace.encoding)
    return build_merge_pair(snapshot.original_content, disk_content)


def resolve_conflict(snapshot: ConfigSnapshot, merged_content: str) -> ConfigSnapshot:
    """Replace the stored original text with the result of a merge."""
    _log.debug("Conflict resolved", file_path=snapshot.path, operation="merge")
    return replace(snapshot, original_content=merged_content)


def with_sanitized_override(
    snapshot: ConfigSnapshot,
    sanitized_content: Optional[str]
) -> ConfigSnapshot:
    """Set (or clear, with None) the manually edited redacted text."""
    return replace(snapshot, sanitized_content=sanitized_content)


def restore_to_disk(snapshot: ConfigSnapshot, workspace: Workspace) -> Path:
    """
    Write the stored original text back to the workspace file verbatim.

    Returns:
        The resolved path that was written
    """
    _log.operation_start("restore", snapshot.path)
    written = write_file(workspace.root, snapshot.path, snapshot.original_content,
                         workspace.encoding, workspace.backup_dir)
    _log.operation_complete("restore", snapshot.path)
    return written


def export_sanitized(snapshot: ConfigSnapshot, workspace: Workspace) -> Path:
    """
    Write the redacted text over the workspace file.

    Sanitization happens before anything is written, so a malformed snapshot
    leaves the file untouched.
    """
    _log.operation_start("export", snapshot.path)
    content = sanitized_preview(snapshot)
    written = write_file(workspace.root, snapshot.path, content,
                         workspace.encoding, workspace.backup_dir)
    _log.operation_complete("export", snapshot.path)
    return written
