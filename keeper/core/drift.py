"""
Drift detection between a stored snapshot and the file on disk.

Only digests are compared: the result is a single boolean plus the current
digest. Line-level comparison belongs to whoever presents the merge.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Union

from .hashing import content_hash
from .security import MAX_FILE_SIZE_BYTES
from .workspace import file_hash


@dataclass(frozen=True)
class DriftStatus:
    """
    Result of comparing a snapshot with the live file.

    Attributes:
        has_external_changes: True when the disk content differs
        current_hash: Digest of the file currently on disk
        snapshot_hash: Digest of the stored snapshot text
    """
    has_external_changes: bool
    current_hash: str
    snapshot_hash: str

    @property
    def matches(self) -> bool:
        return not self.has_external_changes


def compare_hashes(snapshot_content: str, disk_hash: str) -> DriftStatus:
    """Build a DriftStatus from snapshot text and an already computed disk digest."""
    snapshot_hash = content_hash(snapshot_content)
    return DriftStatus(
        has_external_changes=disk_hash != snapshot_hash,
        current_hash=disk_hash,
        snapshot_hash=snapshot_hash,
    )


def check_drift(
    snapshot_content: str,
    workspace_root: Union[str, Path],
    relative_path: Union[str, Path],
    max_size: int = MAX_FILE_SIZE_BYTES,
    encoding: str = 'utf-8'
) -> DriftStatus:
    """
    Compare stored snapshot text against the file currently on disk.

    Args:
        snapshot_content: Original text captured when the file was tracked
        workspace_root: Workspace root directory
        relative_path: Tracked file, relative to the root
        max_size: Maximum file size to read
        encoding: File encoding

    Returns:
        Fresh DriftStatus (never cached)

    Raises:
        InvalidPathError: If the path escapes the workspace
        FileAccessError: If the file cannot be read
    """
    disk_hash = file_hash(workspace_root, relative_path, max_size, encoding)
    return compare_hashes(snapshot_content, disk_hash)
