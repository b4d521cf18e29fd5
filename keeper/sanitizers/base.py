"""
Core abstractions for the sanitization engine.

Every sanitizer turns file text into an equivalent text in which each leaf
scalar has been replaced by a fixed placeholder of the same kind:

    string  -> "***"
    number  -> 0
    boolean -> false
    null    -> unchanged

Keys are never redacted, and containers keep their length, order and key set.
"""

from abc import ABC, abstractmethod
from enum import Enum
from pathlib import PurePath
from typing import Tuple, Union


REDACTION_TOKEN = "***"


class SanitizerError(Exception):
    """Base class for sanitization failures."""
    pass


class UnsupportedFormatError(SanitizerError):
    """Raised when a file extension has no sanitizer."""

    def __init__(self, extension: str):
        self.extension = extension
        super().__init__(
            f"Unsupported format: File extension '{extension}' "
            f"is not supported for automatic sanitization"
        )


class ParseError(SanitizerError):
    """Raised when content is malformed for its detected format."""

    def __init__(self, detail: str):
        self.detail = detail
        super().__init__(f"Parse error: {detail}")


class FileFormat(Enum):
    """Grammars the engine knows how to redact."""
    JSON = "json"
    YAML = "yaml"
    TOML = "toml"
    ENV = "env"
    UNSUPPORTED = "unsupported"


EXTENSION_FORMATS = {
    "json": FileFormat.JSON,
    "yaml": FileFormat.YAML,
    "yml": FileFormat.YAML,
    "toml": FileFormat.TOML,
    "env": FileFormat.ENV,
}


def file_extension(path: Union[str, PurePath]) -> str:
    """
    Extension of the final path component, without the dot.

    Case is kept as given. Dotfiles such as ``.env`` have no extension.
    """
    return PurePath(path).suffix[1:]


def detect_format(path: Union[str, PurePath]) -> FileFormat:
    """
    Map a file path to its format by extension.

    Examples:
        >>> detect_format("config/app.yml")
        <FileFormat.YAML: 'yaml'>
        >>> detect_format("notes.txt")
        <FileFormat.UNSUPPORTED: 'unsupported'>
    """
    return EXTENSION_FORMATS.get(file_extension(path), FileFormat.UNSUPPORTED)


def detect_format_with_extension(path: Union[str, PurePath]) -> Tuple[FileFormat, str]:
    extension = file_extension(path)
    return EXTENSION_FORMATS.get(extension, FileFormat.UNSUPPORTED), extension


class Sanitizer(ABC):
    """
    Base class for all per-format sanitizers.

    Subclasses set ``file_format`` and implement sanitize(). A sanitizer is
    stateless: the same instance may be shared and called repeatedly.
    """

    file_format: FileFormat = FileFormat.UNSUPPORTED

    @property
    def name(self) -> str:
        return self.file_format.value

    @property
    def extensions(self) -> Tuple[str, ...]:
        return tuple(
            ext for ext, fmt in EXTENSION_FORMATS.items() if fmt is self.file_format
        )

    @abstractmethod
    def sanitize(self, content: str) -> str:
        """
        Return a redacted copy of ``content``.

        Raises:
            ParseError: If content is malformed for this format
        """
        pass

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"
