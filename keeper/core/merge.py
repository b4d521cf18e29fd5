"""
Merge data assembly for drifted config files.

No reconciliation happens here. Both versions are handed to whatever
presents the diff; conflict_markers() is the plain-text fallback.
"""

from dataclasses import dataclass


SNAPSHOT_MARKER = "<<<<<<< Database Version"
SEPARATOR_MARKER = "======="
DISK_MARKER = ">>>>>>> Disk Version"


@dataclass(frozen=True)
class MergePair:
    """Snapshot text and disk text, both verbatim."""
    snapshot_content: str
    disk_content: str

    @property
    def has_conflict(self) -> bool:
        return detect_conflict(self.snapshot_content, self.disk_content)

    def as_markers(self) -> str:
        return conflict_markers(self.snapshot_content, self.disk_content)


def build_merge_pair(snapshot_content: str, disk_content: str) -> MergePair:
    return MergePair(snapshot_content=snapshot_content, disk_content=disk_content)


def detect_conflict(snapshot_content: str, disk_content: str) -> bool:
    """True when the two versions differ at all."""
    return snapshot_content != disk_content


def conflict_markers(snapshot_content: str, disk_content: str) -> str:
    """
    Concatenate both versions between git-style conflict markers.

    Example:
        >>> print(conflict_markers("a = 1", "a = 2"), end="")
        <<<<<<< Database Version
        a = 1
        =======
        a = 2
        >>>>>>> Disk Version
    """
    return (
        f"{SNAPSHOT_MARKER}\n"
        f"{snapshot_content}\n"
        f"{SEPARATOR_MARKER}\n"
        f"{disk_content}\n"
        f"{DISK_MARKER}\n"
    )
