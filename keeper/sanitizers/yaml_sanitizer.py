"""
YAML sanitizer.

Works on PyYAML's representation graph rather than on constructed Python
objects so that tags survive the round trip:

- plain and core-tagged scalars are redacted by their resolved type;
- a scalar carrying any other tag (``!secret abc``) is a tagged value: the
  inner text is resolved implicitly, redacted by the same rules, and the tag
  is kept on the output;
- sequences and mappings keep their tag, flow style, length and key order;
- anchors and aliases stay shared, because each source node is transformed
  exactly once.

Mapping keys are never redacted.
"""

from typing import Dict, List

import yaml
from yaml.nodes import Node, ScalarNode, SequenceNode, MappingNode
from yaml.resolver import Resolver

from .base import Sanitizer, FileFormat, ParseError, REDACTION_TOKEN


CORE_TAG_PREFIX = "tag:yaml.org,2002:"
NULL_TAG = CORE_TAG_PREFIX + "null"
BOOL_TAG = CORE_TAG_PREFIX + "bool"
INT_TAG = CORE_TAG_PREFIX + "int"
FLOAT_TAG = CORE_TAG_PREFIX + "float"
STR_TAG = CORE_TAG_PREFIX + "str"

_resolver = Resolver()


def _is_core_tag(tag: str) -> bool:
    return tag.startswith(CORE_TAG_PREFIX)


def _redacted_scalar_value(resolved_tag: str, value: str):
    """Return (tag, value) for a scalar whose type is ``resolved_tag``."""
    if resolved_tag == NULL_TAG:
        return NULL_TAG, value
    if resolved_tag == BOOL_TAG:
        return BOOL_TAG, "false"
    if resolved_tag in (INT_TAG, FLOAT_TAG):
        return INT_TAG, "0"
    # str, timestamp, binary and any other core scalar
    return STR_TAG, REDACTION_TOKEN


class _GraphRedactor:
    """Transforms one composed document; holds the alias memo."""

    def __init__(self):
        self._memo: Dict[int, Node] = {}

    def redact(self, node: Node) -> Node:
        done = self._memo.get(id(node))
        if done is not None:
            return done

        if isinstance(node, ScalarNode):
            result = self._redact_scalar(node)
            self._memo[id(node)] = result
            return result

        if isinstance(node, SequenceNode):
            result = SequenceNode(node.tag, [], flow_style=node.flow_style)
            self._memo[id(node)] = result
            result.value.extend(self.redact(item) for item in node.value)
            return result

        if isinstance(node, MappingNode):
            result = MappingNode(node.tag, [], flow_style=node.flow_style)
            self._memo[id(node)] = result
            result.value.extend(
                (key, self.redact(value)) for key, value in node.value
            )
            return result

        raise ParseError(f"Invalid YAML: unexpected node {type(node).__name__}")

    def _redact_scalar(self, node: ScalarNode) -> ScalarNode:
        if _is_core_tag(node.tag):
            if node.tag == NULL_TAG:
                return node
            tag, value = _redacted_scalar_value(node.tag, node.value)
            return ScalarNode(tag, value)

        # Tagged value: explicit tags are always emitted with quoted scalars,
        # so the inner type is resolved from the text alone.
        inner_tag = _resolver.resolve(ScalarNode, node.value, (True, False))
        if inner_tag == NULL_TAG:
            return node
        _, value = _redacted_scalar_value(inner_tag, node.value)
        return ScalarNode(node.tag, value)


def redact_yaml_node(node: Node) -> Node:
    """Redact a single composed YAML document."""
    return _GraphRedactor().redact(node)


class YamlSanitizer(Sanitizer):
    """Redacts every scalar in a (possibly multi-document) YAML stream."""

    file_format = FileFormat.YAML

    def sanitize(self, content: str) -> str:
        try:
            documents: List[Node] = list(yaml.compose_all(content, Loader=yaml.SafeLoader))
            redacted = [redact_yaml_node(document) for document in documents]
        except yaml.YAMLError as e:
            raise ParseError(f"Invalid YAML: {e}") from e
        except RecursionError as e:
            raise ParseError("Invalid YAML: nesting too deep") from e

        try:
            return yaml.serialize_all(
                redacted,
                Dumper=yaml.SafeDumper,
                allow_unicode=True,
            )
        except yaml.YAMLError as e:
            raise ParseError(f"Failed to serialize YAML: {e}") from e
        except RecursionError as e:
            raise ParseError("Failed to serialize YAML: nesting too deep") from e
