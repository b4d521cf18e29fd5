"""
ENV sanitizer.

Line oriented, not a grammar. Comments, blank lines and lines without ``=``
pass through untouched; every ``KEY=value`` line becomes ``KEY=***``.
Cannot fail on any input.
"""

from .base import Sanitizer, FileFormat, REDACTION_TOKEN


def redact_env_line(line: str) -> str:
    trimmed = line.strip()

    if not trimmed or trimmed.startswith('#'):
        return line

    key, sep, _ = trimmed.partition('=')
    if not sep:
        return line

    # Keep the CR of a CRLF line so endings stay uniform
    ending = '\r' if line.endswith('\r') else ''
    return f"{key}={REDACTION_TOKEN}{ending}"


class EnvSanitizer(Sanitizer):
    """Redacts every value in a dotenv-style file."""

    file_format = FileFormat.ENV

    def sanitize(self, content: str) -> str:
        return '\n'.join(redact_env_line(line) for line in content.split('\n'))
