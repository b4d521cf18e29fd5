"""
Logging for Config Keeper.

Two sinks, both optional:
- stderr, one human-readable line per record, colored on a TTY
- a JSON-lines file for later inspection

Records carry the workspace, file path, file format, error code and
operation as attributes; ContextFilter fills in whatever a record lacks.

Usage:
    from keeper.core.logger import LogContext, OperationLogger, setup_logger

    setup_logger(log_file=Path(".keeper/keeper.log"), context=LogContext(workspace="api"))

    log = OperationLogger("workspace")
    log.file_error("Path escapes the workspace", "../x", error_code="FS-11")
"""

import json
import logging
import sys
from dataclasses import dataclass, fields
from datetime import datetime, timezone
from pathlib import Path, PurePath
from typing import Optional, Dict, Any

from .colors import Colors


ROOT_LOGGER_NAME = "keeper"

ERROR_CODES = {
    "FS-01": "Permission denied",
    "FS-03": "Disk full",
    "FS-06": "File not found",
    "FS-11": "Path outside workspace",
    "FS-12": "Unresolvable path",
    "DC-05": "File too large",
    "DC-08": "Invalid encoding",
    "SAN-01": "Unsupported format",
    "SAN-02": "Malformed content",
    "CFG-01": "Invalid config value",
}

CONTEXT_FIELDS = ('workspace', 'file_path', 'file_format', 'error_code', 'operation')


@dataclass
class LogContext:
    """Defaults stamped onto records that don't set a field themselves."""
    workspace: Optional[str] = None
    file_path: Optional[str] = None
    file_format: Optional[str] = None
    error_code: Optional[str] = None
    operation: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        values = ((f.name, getattr(self, f.name)) for f in fields(self))
        return {name: value for name, value in values if value is not None}


class ContextFilter(logging.Filter):
    """Make every context field present on the record, filling in defaults."""

    def __init__(self, default_context: Optional[LogContext] = None):
        super().__init__()
        self.defaults = (default_context or LogContext()).to_dict()

    def filter(self, record: logging.LogRecord) -> bool:
        for name in CONTEXT_FIELDS:
            if getattr(record, name, None) is None:
                setattr(record, name, self.defaults.get(name))
        return True


class ColoredFormatter(logging.Formatter):
    """
    One line per record: icon, level, [operation], (file), message, [code].

    Colors are only used when the target stream is a TTY.
    """

    LEVEL_COLORS = {
        logging.DEBUG: Colors.CYAN,
        logging.INFO: Colors.GREEN,
        logging.WARNING: Colors.YELLOW,
        logging.ERROR: Colors.RED,
        logging.CRITICAL: Colors.BOLD + Colors.RED,
    }

    LEVEL_ICONS = {
        logging.DEBUG: '🔍',
        logging.INFO: '✅',
        logging.WARNING: '⚠️ ',
        logging.ERROR: '❌',
        logging.CRITICAL: '🚨',
    }

    def __init__(self, use_colors: bool = True, use_icons: bool = True, stream=None):
        super().__init__()
        stream = stream or sys.stderr
        self.use_colors = use_colors and hasattr(stream, 'isatty') and stream.isatty()
        self.use_icons = use_icons

    def _level(self, record: logging.LogRecord) -> str:
        if not self.use_colors:
            return record.levelname
        color = self.LEVEL_COLORS.get(record.levelno, '')
        return f"{color}{record.levelname}{Colors.RESET}"

    def format(self, record: logging.LogRecord) -> str:
        parts = []
        if self.use_icons and record.levelno in self.LEVEL_ICONS:
            parts.append(self.LEVEL_ICONS[record.levelno])
        parts.append(self._level(record))

        operation = getattr(record, 'operation', None)
        if operation:
            parts.append(f"[{operation}]")

        file_path = getattr(record, 'file_path', None)
        if file_path:
            file_format = getattr(record, 'file_format', None)
            parts.append(f"({file_path} as {file_format})" if file_format else f"({file_path})")

        parts.append(record.getMessage())

        code = getattr(record, 'error_code', None)
        if code:
            parts.append(f"[{code}: {ERROR_CODES.get(code, 'Unknown error')}]")

        text = ' '.join(parts)
        if record.exc_info:
            text += '\n' + self.formatException(record.exc_info)
        return text


class JSONFormatter(logging.Formatter):
    """One JSON object per line; context fields only when set."""

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            'timestamp': datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            'level': record.levelname,
            'logger': record.name,
            'message': record.getMessage(),
        }
        entry.update(
            (name, getattr(record, name))
            for name in CONTEXT_FIELDS
            if getattr(record, name, None) is not None
        )
        if record.exc_info:
            entry['exception'] = self.formatException(record.exc_info)
        return json.dumps(entry, ensure_ascii=False)


def _console_handler(level: int, use_colors: bool, use_icons: bool) -> logging.Handler:
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(ColoredFormatter(use_colors, use_icons, sys.stderr))
    handler.setLevel(level)
    return handler


def _file_handler(log_file: Path, level: int) -> logging.Handler:
    log_file = Path(log_file)
    log_file.parent.mkdir(parents=True, exist_ok=True)
    handler = logging.FileHandler(log_file, encoding='utf-8')
    handler.setFormatter(JSONFormatter())
    handler.setLevel(level)
    return handler


def setup_logger(
    name: str = ROOT_LOGGER_NAME,
    log_file: Optional[Path] = None,
    level: int = logging.INFO,
    console: bool = True,
    use_colors: bool = True,
    use_icons: bool = True,
    context: Optional[LogContext] = None
) -> logging.Logger:
    """
    Configure the ``keeper`` logger (or a child of it).

    Calling this again replaces the handlers from the previous call. The
    context filter sits on the handlers, not the logger, so records from
    child loggers such as ``keeper.workspace`` are covered too.

    Args:
        name: Logger name
        log_file: JSON-lines log file; parent directories are created
        level: Logging level for the logger and its handlers
        console: Log to stderr
        use_colors: Color the level name when stderr is a TTY
        use_icons: Prefix console lines with an icon
        context: Defaults for the context fields

    Returns:
        The configured logger
    """
    logger = logging.getLogger(name)
    logger.setLevel(level)

    while logger.handlers:
        old = logger.handlers[0]
        logger.removeHandler(old)
        old.close()

    handlers = []
    if console:
        handlers.append(_console_handler(level, use_colors, use_icons))
    if log_file:
        handlers.append(_file_handler(log_file, level))

    context_filter = ContextFilter(context)
    for handler in handlers:
        handler.addFilter(context_filter)
        logger.addHandler(handler)

    return logger


def get_logger(name: str = ROOT_LOGGER_NAME) -> logging.Logger:
    return logging.getLogger(name)


class OperationLogger(logging.LoggerAdapter):
    """
    Adapter that logs under ``keeper.<component>``.

    Context fields can be passed as keyword arguments:

        log.warning("Unsupported", file_path=path, error_code="SAN-01")

    ``operation`` defaults to the component name.
    """

    def __init__(self, component: str, logger: Optional[logging.Logger] = None):
        super().__init__(
            logger or get_logger(f"{ROOT_LOGGER_NAME}.{component}"),
            {'operation': component},
        )
        self.component = component

    def process(self, msg, kwargs):
        extra = dict(self.extra)
        for name in CONTEXT_FIELDS:
            value = kwargs.pop(name, None)
            if value is not None:
                extra[name] = str(value) if isinstance(value, PurePath) else value
        extra.update(kwargs.pop('extra', None) or {})
        kwargs['extra'] = extra
        return msg, kwargs

    def file_error(self, message: str, file_path, error_code: Optional[str] = None):
        """Log an error about one file, tagged with an ERROR_CODES key."""
        self.error(message, file_path=file_path, error_code=error_code)

    def operation_start(self, operation: str, file_path=None):
        self.debug(f"Starting: {operation}", file_path=file_path, operation=operation)

    def operation_complete(self, operation: str, file_path=None, success: bool = True):
        if success:
            self.debug(f"Completed: {operation}", file_path=file_path, operation=operation)
        else:
            self.warning(f"Failed: {operation}", file_path=file_path, operation=operation)
