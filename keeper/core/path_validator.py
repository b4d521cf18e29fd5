"""
Workspace path resolver for preventing path traversal attacks.

Every read and write of a tracked config file goes through resolve_path().
The caller-supplied relative path is untrusted: it may contain ``..``
segments, absolute paths or symlinks pointing elsewhere. The resolved path
is canonical and always equal to or below the canonical workspace root.
"""

from pathlib import Path
from typing import List, Union
import os


# Linux PATH_MAX
MAX_PATH_LENGTH = 4096


class FileSystemError(Exception):
    """Base class for workspace file system errors."""
    pass


class InvalidPathError(FileSystemError):
    """Raised when a path escapes the workspace or cannot be resolved."""

    def __init__(self, reason: str, error_code: str = "FS-12"):
        self.reason = reason
        self.error_code = error_code
        super().__init__(f"Invalid path: {reason}")


class FileAccessError(FileSystemError):
    """Raised when an underlying read, write or create fails."""

    def __init__(self, message: str, path: Union[str, Path, None] = None):
        self.path = path
        super().__init__(f"IO error: {message}")


def _check_path_string(path_str: str, label: str):
    if '\x00' in path_str:
        raise InvalidPathError(f"{label} contains null byte")
    if len(path_str) > MAX_PATH_LENGTH:
        raise InvalidPathError(
            f"{label} is too long ({len(path_str)} chars, max {MAX_PATH_LENGTH})"
        )


def validate_workspace_root(root: Union[str, Path]) -> Path:
    """
    Validate that a workspace root exists and is a directory.

    Args:
        root: Workspace root path

    Returns:
        Canonical absolute path

    Raises:
        InvalidPathError: If root is invalid
    """
    _check_path_string(str(root), "Workspace root")

    try:
        resolved = Path(root).resolve(strict=True)
    except (OSError, RuntimeError) as e:
        raise InvalidPathError(f"Invalid workspace path {root}: {e}") from e

    if not resolved.is_dir():
        raise InvalidPathError(f"Workspace root is not a directory: {resolved}")

    return resolved


def canonicalize(path: Path) -> Path:
    """
    Canonicalize a path that may not exist yet.

    ``..`` is collapsed lexically first, so every remaining component that
    exists on disk goes through ``Path.resolve``. Callers must use the
    returned path, not the original string.

    Existing paths are then resolved strictly. For a missing path, walk upward
    to the nearest existing ancestor (however many levels are missing), resolve
    that ancestor and reattach the missing components, none of which exist.

    Raises:
        InvalidPathError: If no ancestor exists or resolution fails
    """
    path = Path(os.path.normpath(path))
    try:
        return path.resolve(strict=True)
    except FileNotFoundError:
        pass
    except (OSError, RuntimeError) as e:
        raise InvalidPathError(f"Cannot resolve path {path}: {e}") from e

    missing: List[str] = []
    ancestor = path
    while not os.path.lexists(ancestor):
        if ancestor.parent == ancestor:
            raise InvalidPathError(f"Cannot resolve path {path}: no existing ancestor")
        missing.append(ancestor.name)
        ancestor = ancestor.parent

    try:
        result = ancestor.resolve(strict=True)
    except (OSError, RuntimeError) as e:
        raise InvalidPathError(f"Cannot resolve path {path}: {e}") from e

    return result.joinpath(*reversed(missing))


def is_within(path: Path, root: Path) -> bool:
    """Check that canonical ``path`` is ``root`` or below it."""
    try:
        path.relative_to(root)
        return True
    except ValueError:
        return False


def resolve_path(workspace_root: Union[str, Path], relative_path: Union[str, Path]) -> Path:
    """
    Resolve a caller-supplied relative path against a workspace root.

    Args:
        workspace_root: Absolute workspace root directory
        relative_path: Untrusted path relative to the root

    Returns:
        Canonical absolute path inside the workspace

    Raises:
        InvalidPathError: If the path is outside the workspace or unresolvable

    Example:
        >>> resolve_path("/srv/app", "config/settings.toml")
        PosixPath('/srv/app/config/settings.toml')
    """
    _check_path_string(str(relative_path), "Path")
    canonical_root = validate_workspace_root(workspace_root)

    full_path = Path(workspace_root) / relative_path
    canonical = canonicalize(full_path)

    if not is_within(canonical, canonical_root):
        raise InvalidPathError(
            f"Path {relative_path} is outside workspace {canonical_root}",
            error_code="FS-11",
        )

    return canonical


class WorkspacePathResolver:
    """Resolves paths for a single workspace root."""

    def __init__(self, workspace_root: Union[str, Path]):
        """
        Initialize resolver.

        Args:
            workspace_root: Workspace root directory (must exist)

        Raises:
            InvalidPathError: If the root is invalid
        """
        self.root = validate_workspace_root(workspace_root)

    def resolve(self, relative_path: Union[str, Path]) -> Path:
        """Resolve a relative path inside this workspace."""
        return resolve_path(self.root, relative_path)

    def resolve_many(self, paths: List[Union[str, Path]]) -> List[Path]:
        """
        Resolve multiple paths.

        Raises:
            InvalidPathError: If any path is invalid
        """
        return [self.resolve(path) for path in paths]

    def is_valid(self, relative_path: Union[str, Path]) -> bool:
        """Quick check without raising."""
        try:
            self.resolve(relative_path)
            return True
        except InvalidPathError:
            return False

    def relative_to_root(self, path: Path) -> Path:
        """Express a resolved path relative to the workspace root."""
        return Path(path).relative_to(self.root)

    @staticmethod
    def is_safe_filename(filename: str) -> bool:
        """
        Check if a filename is safe (no path components).

        Args:
            filename: Filename to check

        Returns:
            True if safe, False otherwise
        """
        # Check for path separators
        if os.sep in filename or (os.altsep and os.altsep in filename):
            return False

        if filename in ('', '.', '..'):
            return False

        if '\x00' in filename:
            return False

        return True


def validate_path_contained(path: Union[str, Path], container: Union[str, Path]) -> Path:
    """
    Validate that an absolute or relative path is contained within a directory.

    Relative paths are taken relative to the container.

    Returns:
        Canonical absolute path

    Raises:
        InvalidPathError: If path is outside container
    """
    path = Path(path)
    canonical_container = validate_workspace_root(container)
    if not path.is_absolute():
        path = canonical_container / path

    _check_path_string(str(path), "Path")
    canonical = canonicalize(path)
    if not is_within(canonical, canonical_container):
        raise InvalidPathError(
            f"Path {canonical} is outside container {canonical_container}",
            error_code="FS-11",
        )
    return canonical
