"""
Configuration loading and validation for Config Keeper.

The config file is optional. It may be YAML, TOML or JSON:

    workspace:
      name: my-project
      root: .                  # relative to the config file
    files:
      max_size: 10485760       # bytes
      encoding: utf-8
      backup: false
    logging:
      level: INFO
      file: .keeper/keeper.log

Every key is checked against SCHEMA before the workspace is touched. Wrong
types and out-of-range values are errors carrying a suggestion; unknown
sections and keys are only warnings, so a newer config still loads.

Usage:
    config, result = validate_and_load_config(Path("keeper.yaml"))
    result.raise_if_invalid().log_warnings()
    settings = KeeperConfig.from_dict(config, base_dir=Path("."))
"""

import codecs
import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Tuple

from .security import MAX_FILE_SIZE_BYTES

logger = logging.getLogger(__name__)

MAX_CONFIG_FILE_SIZE = 1024 * 1024
MAX_PATH_LENGTH = 4096
MAX_ERRORS_SHOWN = 20

CONFIG_FILE_NAMES = ('keeper.yaml', 'keeper.yml', 'keeper.toml', 'keeper.json')

VALID_LOG_LEVELS = ('DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL')


class ConfigError(Exception):
    """One invalid config value."""

    def __init__(self, key: str, message: str, value: Any = None, suggestion: str = None):
        self.key = key
        self.message = message
        self.value = value
        self.suggestion = suggestion
        super().__init__(self.describe(prefix=f"Config error at '{key}': "))

    def describe(self, prefix: str = "") -> str:
        text = prefix + self.message
        if self.value is not None:
            text += f" (got: {self.value!r})"
        if self.suggestion:
            text += f". Suggestion: {self.suggestion}"
        return text


class ConfigValidationError(Exception):
    """Raised by load_config_strict() and raise_if_invalid()."""

    def __init__(self, errors: List[str], warnings: List[str] = None):
        self.errors = errors
        self.warnings = warnings or []
        lines = [f"Configuration validation failed with {len(errors)} error(s):"]
        lines.extend(f"  - {error}" for error in errors[:MAX_ERRORS_SHOWN])
        hidden = len(errors) - MAX_ERRORS_SHOWN
        if hidden > 0:
            lines.append(f"  ... and {hidden} more errors")
        super().__init__("\n".join(lines))


@dataclass
class ValidationResult:
    """Outcome of validating one config dict."""
    is_valid: bool
    errors: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)
    validated_config: Dict[str, Any] = field(default_factory=dict)

    def __bool__(self) -> bool:
        return self.is_valid

    def raise_if_invalid(self) -> 'ValidationResult':
        if self.errors or not self.is_valid:
            raise ConfigValidationError(self.errors, self.warnings)
        return self

    def log_warnings(self) -> 'ValidationResult':
        for message in self.warnings:
            logger.warning(f"Config warning: {message}", extra={'error_code': 'CFG-01'})
        return self


# =============================================================================
# Field validators: (value, dotted key) -> normalized value, or ConfigError
# =============================================================================

def validate_positive_int(value: Any, key_name: str) -> int:
    if isinstance(value, str):
        raise ConfigError(
            key_name,
            "Must be a number, got string",
            value,
            f"Remove quotes: use {key_name.rsplit('.', 1)[-1]} = {value}"
        )
    if isinstance(value, bool) or not isinstance(value, int):
        raise ConfigError(key_name, f"Must be an integer, got {type(value).__name__}", value)
    if value <= 0:
        raise ConfigError(key_name, "Must be positive", value, "Use a value greater than 0")
    return value


def validate_bool(value: Any, key_name: str) -> bool:
    if isinstance(value, bool):
        return value
    raise ConfigError(
        key_name,
        f"Must be true or false, got {type(value).__name__}",
        value,
        "Use an unquoted true/false"
    )


def validate_name(value: Any, key_name: str) -> str:
    if isinstance(value, str) and value.strip():
        return value
    raise ConfigError(key_name, "Must be a non-empty string", value)


def validate_path_string(value: Any, key_name: str) -> str:
    """Paths must be non-empty strings without control characters."""
    if not isinstance(value, str):
        raise ConfigError(key_name, f"Must be a path string, got {type(value).__name__}", value)
    if not value:
        raise ConfigError(key_name, "Path is empty", value, "Use '.' for the current directory")
    if '\x00' in value:
        raise ConfigError(key_name, "Path contains null byte", value, "Remove the null character")
    if '\n' in value or '\r' in value:
        raise ConfigError(key_name, "Path contains a line break", value, "Put the path on one line")
    if len(value) > MAX_PATH_LENGTH:
        raise ConfigError(
            key_name,
            f"Path longer than {MAX_PATH_LENGTH} characters",
            f"...{value[-50:]}",
            "Use a shorter path"
        )
    return value


def validate_log_level(value: Any, key_name: str) -> str:
    if isinstance(value, str) and value.upper() in VALID_LOG_LEVELS:
        return value.upper()
    raise ConfigError(
        key_name,
        "Invalid log level",
        value,
        f"Use one of: {', '.join(VALID_LOG_LEVELS)}"
    )


def validate_encoding(value: Any, key_name: str) -> str:
    if not isinstance(value, str):
        raise ConfigError(key_name, f"Must be a string, got {type(value).__name__}", value)
    try:
        codecs.lookup(value)
    except LookupError:
        raise ConfigError(key_name, "Unknown text encoding", value, "Use utf-8")
    return value


Validator = Callable[[Any, str], Any]

SCHEMA: Dict[str, Dict[str, Validator]] = {
    'workspace': {
        'name': validate_name,
        'root': validate_path_string,
    },
    'files': {
        'max_size': validate_positive_int,
        'encoding': validate_encoding,
        'backup': validate_bool,
    },
    'logging': {
        'level': validate_log_level,
        'file': validate_path_string,
    },
}


def validate_config_schema(config: Any) -> ValidationResult:
    """
    Check a parsed config against SCHEMA.

    All problems are collected; nothing is raised.
    """
    if config is None:
        return ValidationResult(
            is_valid=False,
            errors=["[config] Configuration is empty | Suggestion: Provide at least one section"],
        )
    if not isinstance(config, dict):
        return ValidationResult(
            is_valid=False,
            errors=[f"[config] Top level must be a mapping, got {type(config).__name__}"],
        )

    errors: List[str] = []
    warnings: List[str] = []

    for section, entries in config.items():
        known = SCHEMA.get(section)
        if known is None:
            warnings.append(f"[{section}] Unknown section, ignored")
            continue
        if not isinstance(entries, dict):
            errors.append(f"[{section}] Section must be a mapping, got {type(entries).__name__}")
            continue

        for key, value in entries.items():
            dotted = f"{section}.{key}"
            validate = known.get(key)
            if validate is None:
                warnings.append(f"[{dotted}] Unknown key, ignored")
                continue
            try:
                validate(value, dotted)
            except ConfigError as e:
                detail = e.message if e.value is None else f"{e.message} (got: {e.value!r})"
                if e.suggestion:
                    detail += f" | Suggestion: {e.suggestion}"
                errors.append(f"[{e.key}] {detail}")

    max_size = config.get('files', {}).get('max_size') if isinstance(config.get('files'), dict) else None
    if isinstance(max_size, int) and not isinstance(max_size, bool) and max_size > MAX_FILE_SIZE_BYTES * 10:
        warnings.append(f"[files.max_size] Very large limit ({max_size:,} bytes); files are read into memory")

    return ValidationResult(
        is_valid=not errors,
        errors=errors,
        warnings=warnings,
        validated_config={} if errors else config,
    )


def safe_read_file(path: Path, max_size: int = MAX_CONFIG_FILE_SIZE) -> str:
    """
    Read a config file, refusing anything over ``max_size`` bytes.

    Raises:
        FileNotFoundError: If the file is missing
        ValueError: If the file is too large
    """
    path = Path(path)
    if not path.is_file():
        raise FileNotFoundError(f"File not found: {path}")

    size = path.stat().st_size
    if size > max_size:
        raise ValueError(f"Config file too large: {path} has {size:,} bytes, limit is {max_size:,}")

    return path.read_text(encoding='utf-8')


def _load_yaml(text: str) -> Any:
    import yaml
    try:
        return yaml.safe_load(text)
    except yaml.YAMLError as e:
        raise ValueError(f"YAML parse error: {e}") from e


def _load_toml(text: str) -> Any:
    try:
        import tomllib
    except ImportError:
        import toml as tomllib
    try:
        return tomllib.loads(text)
    except Exception as e:
        # tomllib.TOMLDecodeError or toml.TomlDecodeError
        raise ValueError(f"TOML parse error: {e}") from e


def _load_json(text: str) -> Any:
    try:
        return json.loads(text)
    except json.JSONDecodeError as e:
        raise ValueError(f"JSON parse error at line {e.lineno}: {e.msg}") from e


LOADERS = {
    '.yaml': _load_yaml,
    '.yml': _load_yaml,
    '.toml': _load_toml,
    '.json': _load_json,
}


def validate_and_load_config(config_path: Path) -> Tuple[Dict[str, Any], ValidationResult]:
    """
    Load a config file and validate it.

    Parse errors come back as an invalid ValidationResult, not an exception.

    Returns:
        (config, result); config is {} unless the result is valid

    Raises:
        FileNotFoundError: If the file is missing
        ValueError: If the extension is unsupported or the file is too large
    """
    config_path = Path(config_path)
    loader = LOADERS.get(config_path.suffix.lower())
    if loader is None:
        raise ValueError(
            f"Unsupported config format: {config_path.suffix or '(none)'}. "
            f"Use {', '.join(LOADERS)}"
        )

    text = safe_read_file(config_path)
    if not text.strip():
        return {}, ValidationResult(is_valid=True)

    try:
        config = loader(text)
    except ValueError as e:
        return {}, ValidationResult(is_valid=False, errors=[f"[config_file] {e}"])

    result = validate_config_schema(config)
    return result.validated_config, result


def load_config_strict(config_path: Path) -> Dict[str, Any]:
    """
    Load config, raising on the first sign of trouble and logging warnings.

    Raises:
        ConfigValidationError: If the config is invalid
        FileNotFoundError: If the file is missing
        ValueError: If the extension is unsupported
    """
    config, result = validate_and_load_config(config_path)
    result.raise_if_invalid().log_warnings()
    return config


def find_config_file(directory: Path) -> Optional[Path]:
    """First of CONFIG_FILE_NAMES present in ``directory``, or None."""
    for name in CONFIG_FILE_NAMES:
        candidate = Path(directory) / name
        if candidate.is_file():
            return candidate
    return None


@dataclass
class KeeperConfig:
    """Typed settings with defaults, built from a validated config dict."""
    workspace_name: Optional[str] = None
    workspace_root: Optional[Path] = None
    max_file_size: int = MAX_FILE_SIZE_BYTES
    encoding: str = 'utf-8'
    backup: bool = False
    log_level: str = 'INFO'
    log_file: Optional[Path] = None

    @classmethod
    def from_dict(cls, config: Dict[str, Any], base_dir: Optional[Path] = None) -> 'KeeperConfig':
        """
        Relative paths in ``config`` are taken relative to ``base_dir``,
        normally the directory holding the config file.
        """
        base_dir = Path(base_dir) if base_dir is not None else Path.cwd()
        workspace = config.get('workspace', {})
        files = config.get('files', {})
        logging_section = config.get('logging', {})

        def _path(value: Optional[str]) -> Optional[Path]:
            if value is None:
                return None
            path = Path(value).expanduser()
            return path if path.is_absolute() else base_dir / path

        return cls(
            workspace_name=workspace.get('name'),
            workspace_root=_path(workspace.get('root')),
            max_file_size=files.get('max_size', MAX_FILE_SIZE_BYTES),
            encoding=files.get('encoding', 'utf-8'),
            backup=files.get('backup', False),
            log_level=logging_section.get('level', 'INFO').upper(),
            log_file=_path(logging_section.get('file')),
        )

    @property
    def backup_dir(self) -> Optional[Path]:
        if not self.backup or self.workspace_root is None:
            return None
        return self.workspace_root / '.keeper' / 'backups'

    @property
    def log_level_number(self) -> int:
        return getattr(logging, self.log_level, logging.INFO)
