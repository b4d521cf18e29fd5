"""
ANSI styling for config-keeper console output.

Styling is applied only when the destination stream is a TTY, so piped
output (sanitized files, digests, merge markers) stays byte-clean.
"""

import re
import sys


class Colors:
    RED = '\033[91m'
    GREEN = '\033[92m'
    YELLOW = '\033[93m'
    CYAN = '\033[96m'
    BOLD = '\033[1m'
    DIM = '\033[2m'
    RESET = '\033[0m'


_ESCAPE = re.compile(r'\033\[[0-9;]*m')


def _is_tty(stream) -> bool:
    isatty = getattr(stream, 'isatty', None)
    return bool(isatty and isatty())


def colorize(text: str, color: str, stream=None) -> str:
    """Wrap ``text`` in ``color`` if ``stream`` (default stdout) is a terminal."""
    if _is_tty(stream or sys.stdout):
        return f"{color}{text}{Colors.RESET}"
    return text


def strip_colors(text: str) -> str:
    return _ESCAPE.sub('', text)


def success(text: str, stream=None) -> str:
    return colorize(text, Colors.GREEN, stream)


def error(text: str, stream=None) -> str:
    return colorize(text, Colors.RED, stream)


def warning(text: str, stream=None) -> str:
    return colorize(text, Colors.YELLOW, stream)


def bold(text: str, stream=None) -> str:
    return colorize(text, Colors.BOLD, stream)


def dim(text: str, stream=None) -> str:
    return colorize(text, Colors.DIM, stream)


def print_box(lines, title: str = "", width: int = 60, stream=None):
    """
    Draw ``lines`` inside a rounded frame ``width`` columns wide.

    Lines that don't fit are cut and lose their styling.
    """
    stream = stream or sys.stdout
    inner = width - 2
    room = width - 6

    if title:
        label = f" {title} "[:inner]
        left = (inner - len(label)) // 2
        top = '╭' + '─' * left + label + '─' * (inner - left - len(label)) + '╮'
    else:
        top = '╭' + '─' * inner + '╮'
    side = colorize('│', Colors.BOLD, stream)

    print(colorize(top, Colors.BOLD, stream), file=stream)
    for line in lines:
        plain = strip_colors(line)
        if len(plain) > room:
            line = plain = plain[:room - 3] + '...'
        fill = ' ' * max(0, inner - 2 - len(plain))
        print(f"{side}  {line}{fill}{side}", file=stream)
    print(colorize('╰' + '─' * inner + '╯', Colors.BOLD, stream), file=stream)
