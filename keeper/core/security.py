"""
Guards around reading config files and reporting errors.

- a size ceiling so a stray multi-gigabyte file is refused, not loaded
- byte-exact reads: no newline translation, so digests match the disk
- scrubbing of absolute paths from messages shown on the console
"""

import os
from pathlib import Path
from typing import Optional, Tuple, Union


# Config files are expected to be far smaller than this
MAX_FILE_SIZE_BYTES = 10 * 1024 * 1024


def validate_file_size(
    file_path: Path,
    max_size: int = MAX_FILE_SIZE_BYTES
) -> Tuple[bool, Optional[str]]:
    """
    Check a file against the size ceiling.

    A missing file passes; the read that follows reports it properly.

    Returns:
        (True, None) if the file fits, (False, reason) otherwise
    """
    try:
        size = os.stat(file_path).st_size
    except FileNotFoundError:
        return True, None

    if size <= max_size:
        return True, None
    return False, f"File too large: {file_path} has {size:,} bytes, limit is {max_size:,}"


def safe_read_text(
    file_path: Path,
    max_size: int = MAX_FILE_SIZE_BYTES,
    encoding: str = 'utf-8'
) -> str:
    """
    Read a whole file as text, keeping ``\\r\\n`` and lone ``\\r`` as they are.

    Raises:
        ValueError: If the file exceeds ``max_size``
        UnicodeDecodeError: If the bytes are not valid ``encoding``
        OSError: If the file cannot be opened or read
    """
    fits, reason = validate_file_size(file_path, max_size)
    if not fits:
        raise ValueError(reason)

    with open(file_path, 'rb') as handle:
        raw = handle.read(max_size + 1)

    # The file may have grown between stat() and read()
    if len(raw) > max_size:
        raise ValueError(f"File too large: {file_path} exceeds limit of {max_size:,} bytes")

    return raw.decode(encoding)


def sanitize_error_message(
    message: str,
    workspace_root: Optional[Union[str, Path]] = None
) -> str:
    """
    Replace the workspace root with ``<workspace>`` and the home directory
    with ``<home>`` so console output doesn't expose local paths.
    """
    replacements = []

    if workspace_root:
        root = Path(workspace_root)
        replacements.append((str(root.resolve()), '<workspace>'))
        if root.is_absolute():
            replacements.append((str(root), '<workspace>'))

    home = os.path.expanduser('~')
    if home not in ('~', os.sep, ''):
        replacements.append((home, '<home>'))

    for needle, marker in replacements:
        message = message.replace(needle, marker)
    return message
