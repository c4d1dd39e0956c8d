"""Recovery of the original source text of a story's body.

A ``<Story>`` body can be written in several ways, tried in this order:

1. self-closing with ``children={template}`` pointing at a root snippet block;
2. self-closing while the instance script called ``setTemplate(template)``;
3. self-closing with neither: a placeholder rendering the meta ``component``;
4. an inline ``{#snippet children(args)}`` block;
5. any other inline content.

The recovered slice runs from the start of the first body node to the end of
the last one and is normalised either with a block dedent or by collapsing
it onto one line.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Mapping, Optional, Sequence

from ..constants import CHILDREN_SNIPPET, UNSPECIFIED_COMPONENT
from ..document import SourceDocument
from ..errors import (
    InvalidComponentValueError,
    InvalidSetTemplateFirstArgumentError,
    SnippetBlockNotFoundError,
)
from ..walker import Node, node_type
from .attributes import get_children_identifier
from .properties import lookup_property
from .text import dedent_block, strip_newlines


class RawSourceStyle(Enum):
    DEDENT = "dedent"
    COMPACT = "compact"


def set_template_snippet_name(call: Optional[Node], *, filename: Optional[str] = None) -> Optional[str]:
    if call is None:
        return None
    arguments = call.get("arguments") or []
    if not arguments or node_type(arguments[0]) != "Identifier":
        raise InvalidSetTemplateFirstArgumentError(filename=filename)
    return arguments[0]["name"]


def meta_component_name(meta_object: Optional[Node], *, filename: Optional[str] = None) -> Optional[str]:
    if meta_object is None:
        return None
    prop = lookup_property(meta_object, "component")
    if prop is None:
        return None
    value = prop.get("value") or {}
    if node_type(value) != "Identifier":
        raise InvalidComponentValueError(filename=filename)
    return value["name"]


@dataclass(frozen=True)
class TemplateContext:
    """Document-level nodes the body resolver may need besides the marker itself.

    ``set_template_call`` and ``meta_object`` are kept as raw nodes and only
    checked when a self-closing story actually falls back to them.
    """

    snippet_blocks: Mapping[str, Node] = field(default_factory=dict)
    set_template_call: Optional[Node] = None
    meta_object: Optional[Node] = None

    def snippet(self, name: str, *, filename: Optional[str] = None) -> Node:
        block = self.snippet_blocks.get(name)
        if block is None:
            raise SnippetBlockNotFoundError(name, filename=filename)
        return block

    def template_name(self, *, filename: Optional[str] = None) -> Optional[str]:
        return set_template_snippet_name(self.set_template_call, filename=filename)

    def component_name(self, *, filename: Optional[str] = None) -> Optional[str]:
        return meta_component_name(self.meta_object, filename=filename)


def snippet_block_name(block: Node) -> Optional[str]:
    expression = block.get("expression") or {}
    if node_type(expression) == "Identifier":
        return expression.get("name")
    return None


def fragment_nodes(node: Node) -> Sequence[Node]:
    fragment = node.get("fragment") or node.get("body") or {}
    return fragment.get("nodes") or []


def span_raw_source(document: SourceDocument, nodes: Sequence[Node]) -> Optional[str]:
    if not nodes:
        return None
    return document.slice(nodes[0]["start"], nodes[-1]["end"])


def normalize_raw_source(raw: Optional[str], style: RawSourceStyle) -> Optional[str]:
    if raw is None:
        return None
    if style is RawSourceStyle.COMPACT:
        normalized = strip_newlines(raw)
    else:
        normalized = dedent_block(raw)
    return normalized or None


def find_children_snippet_block(component: Node) -> Optional[Node]:
    for child in fragment_nodes(component):
        if node_type(child) == "SnippetBlock" and snippet_block_name(child) == CHILDREN_SNIPPET:
            return child
    return None


def placeholder_source(component_name: Optional[str]) -> str:
    return f"<{component_name or UNSPECIFIED_COMPONENT} {{...args}} />"


def get_story_children_raw_source(
    component: Node,
    document: SourceDocument,
    templates: TemplateContext,
    *,
    style: RawSourceStyle = RawSourceStyle.DEDENT,
    placeholder: bool = False,
    filename: Optional[str] = None,
) -> Optional[str]:
    """Return the normalised source of the story body, or ``None`` if it has none."""
    nodes = fragment_nodes(component)

    if not nodes:
        template_name = get_children_identifier(component, filename=filename)
        if template_name is None:
            template_name = templates.template_name(filename=filename)
        if template_name is not None:
            block = templates.snippet(template_name, filename=filename)
            return normalize_raw_source(span_raw_source(document, fragment_nodes(block)), style)
        if placeholder:
            return placeholder_source(templates.component_name(filename=filename))
        return None

    children_block = find_children_snippet_block(component)
    if children_block is not None:
        nodes = fragment_nodes(children_block)
    return normalize_raw_source(span_raw_source(document, nodes), style)


__all__ = [
    "RawSourceStyle",
    "TemplateContext",
    "find_children_snippet_block",
    "fragment_nodes",
    "get_story_children_raw_source",
    "meta_component_name",
    "normalize_raw_source",
    "placeholder_source",
    "set_template_snippet_name",
    "snippet_block_name",
    "span_raw_source",
]
