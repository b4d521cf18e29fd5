"""
TOML sanitizer.

TOML files are usually hand-written: comments, blank lines and the order of
table headers carry meaning for the people who maintain them. Parsing into
plain dicts and dumping again would lose all of that, so this sanitizer edits
tomlkit's document tree in place instead:

- the document body is walked entry by entry, including super tables,
  dotted-key tables, out-of-order tables and every array-of-tables element;
- leaf values are swapped for placeholders carrying the original trivia
  (indent, inline comment, trailing whitespace);
- comments, whitespace and table headers are never touched.

Dates, times and datetimes are left as they are.
"""

from typing import Optional

import tomlkit
from tomlkit.container import Container
from tomlkit.exceptions import TOMLKitError
from tomlkit.items import (
    AoT,
    Array,
    Bool,
    Date,
    DateTime,
    Float,
    InlineTable,
    Integer,
    Item,
    String,
    Table,
    Time,
)

from .base import Sanitizer, FileFormat, ParseError, REDACTION_TOKEN


def _with_trivia(new: Item, old: Item) -> Item:
    """Copy indent, comment and trailing whitespace of ``old`` onto ``new``."""
    new.trivia.indent = old.trivia.indent
    new.trivia.comment_ws = old.trivia.comment_ws
    new.trivia.comment = old.trivia.comment
    new.trivia.trail = old.trivia.trail
    return new


def redacted_leaf(item: Item) -> Optional[Item]:
    """
    Placeholder for a scalar item, or None if the item is kept or is a container.

    Containers are redacted in place by redact_item().
    """
    if isinstance(item, String):
        return _with_trivia(tomlkit.string(REDACTION_TOKEN), item)
    if isinstance(item, Bool):
        return _with_trivia(tomlkit.item(False), item)
    if isinstance(item, Integer):
        return _with_trivia(tomlkit.integer(0), item)
    if isinstance(item, Float):
        return _with_trivia(tomlkit.float_(0.0), item)
    return None


def redact_array(array: Array):
    for index in range(len(array)):
        element = array[index]
        replacement = redacted_leaf(element)
        if replacement is not None:
            array[index] = replacement
        else:
            redact_item(element)


def redact_container(container: Container):
    """Redact every entry of a table body in place."""
    for key, item in list(container.body):
        if key is None:
            # Whitespace and comment lines
            continue
        replacement = redacted_leaf(item)
        if replacement is not None:
            container[key] = replacement
        else:
            redact_item(item)


def redact_item(item: Item):
    """Recurse into container items. Leaves are handled by the parent."""
    if isinstance(item, (Table, InlineTable)):
        redact_container(item.value)
    elif isinstance(item, AoT):
        for table in item.body:
            redact_container(table.value)
    elif isinstance(item, Array):
        redact_array(item)
    elif isinstance(item, (Date, DateTime, Time)):
        # Not sensitive; rewriting could produce an invalid literal
        pass


class TomlSanitizer(Sanitizer):
    """Redacts every scalar in a TOML document, preserving layout."""

    file_format = FileFormat.TOML

    def sanitize(self, content: str) -> str:
        try:
            document = tomlkit.parse(content)
        except TOMLKitError as e:
            raise ParseError(f"Invalid TOML: {e}") from e

        redact_container(document)
        return tomlkit.dumps(document)
