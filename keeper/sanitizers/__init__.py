"""
Config Keeper Sanitizers

Per-format redaction engines and the sanitize() dispatcher.
"""

from pathlib import PurePath
from typing import Dict, Union

from ..core.logger import OperationLogger
from .base import (
    REDACTION_TOKEN,
    FileFormat,
    Sanitizer,
    SanitizerError,
    UnsupportedFormatError,
    ParseError,
    detect_format,
    detect_format_with_extension,
    file_extension,
)
from .json_sanitizer import JsonSanitizer
from .yaml_sanitizer import YamlSanitizer
from .toml_sanitizer import TomlSanitizer
from .env_sanitizer import EnvSanitizer


_log = OperationLogger("sanitize")

SANITIZERS: Dict[FileFormat, Sanitizer] = {
    FileFormat.JSON: JsonSanitizer(),
    FileFormat.YAML: YamlSanitizer(),
    FileFormat.TOML: TomlSanitizer(),
    FileFormat.ENV: EnvSanitizer(),
}


def get_sanitizer(path: Union[str, PurePath]) -> Sanitizer:
    """
    Pick the sanitizer for a file path.

    Raises:
        UnsupportedFormatError: If the extension has no sanitizer
    """
    file_format, extension = detect_format_with_extension(path)
    sanitizer = SANITIZERS.get(file_format)
    if sanitizer is None:
        raise UnsupportedFormatError(extension)
    return sanitizer


def sanitize(content: str, path: Union[str, PurePath]) -> str:
    """
    Produce a redacted copy of ``content`` based on the extension of ``path``.

    ``content`` itself is never modified.

    Args:
        content: File text
        path: File path (only the extension is used)

    Returns:
        Redacted text

    Raises:
        UnsupportedFormatError: If the extension has no sanitizer
        ParseError: If content is malformed for the detected format
    """
    try:
        sanitizer = get_sanitizer(path)
    except UnsupportedFormatError as e:
        _log.warning(str(e), file_path=path, error_code="SAN-01")
        raise

    try:
        result = sanitizer.sanitize(content)
    except ParseError as e:
        _log.warning(e.detail, file_path=path, file_format=sanitizer.name,
                     error_code="SAN-02")
        raise

    _log.debug("Sanitized", file_path=path, file_format=sanitizer.name)
    return result


def supported_extensions():
    """Extensions with a sanitizer, in a stable order."""
    return sorted(ext for sanitizer in SANITIZERS.values() for ext in sanitizer.extensions)


__all__ = [
    'REDACTION_TOKEN',
    'FileFormat',
    'Sanitizer',
    'SanitizerError',
    'UnsupportedFormatError',
    'ParseError',
    'detect_format',
    'file_extension',
    'get_sanitizer',
    'sanitize',
    'supported_extensions',
    'JsonSanitizer',
    'YamlSanitizer',
    'TomlSanitizer',
    'EnvSanitizer',
]
