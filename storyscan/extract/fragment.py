"""Full extraction of story metadata from the markup fragment."""

from __future__ import annotations

from typing import Optional

from ..analyse.attributes import get_source_attribute
from ..analyse.comments import CommentCursor
from ..analyse.identity import StoryIdentityResolver
from ..analyse.raw_source import RawSourceStyle, TemplateContext, get_story_children_raw_source
from ..constants import DEFAULT_PACKAGE_NAME
from ..document import SourceDocument
from ..logging import document_logger
from ..models import Catalog, FragmentMeta, StoryMeta
from ..walker import Context, Node, Visitors, walk
from .svelte_nodes import SvelteASTNodes, extract_svelte_ast_nodes


class _StoryRecognizer:
    """Visitor set for one traversal of a fragment.

    The fragment is the markup part of the document, outside of ``<script>``
    and ``<style>``.
    """

    def __init__(
        self,
        document: SourceDocument,
        story_tag: str,
        templates: TemplateContext,
        filename: Optional[str],
    ) -> None:
        self.document = document
        self.story_tag = story_tag
        self.templates = templates
        self.filename = filename
        self.comments = CommentCursor()
        self.identities = StoryIdentityResolver(filename=filename)

    def visitors(self) -> Visitors:
        return {"Comment": self.visit_comment, "Component": self.visit_component}

    def visit_comment(self, node: Node, context: Context[FragmentMeta]) -> None:
        self.comments.track(node)
        context.next()

    def visit_component(self, node: Node, context: Context[FragmentMeta]) -> None:
        if node.get("name") == self.story_tag:
            meta = self.recognize(node)
            context.state.stories[meta.name] = meta
        self.comments.clear()

    def recognize(self, node: Node) -> StoryMeta:
        name = self.identities.resolve_name(node)
        story_id = self.identities.resolve_id(node, name)
        source = get_source_attribute(node, filename=self.filename)
        description = self.comments.description_for(node)
        raw_source = get_story_children_raw_source(
            node,
            self.document,
            self.templates,
            style=RawSourceStyle.DEDENT,
            filename=self.filename,
        )
        return StoryMeta(
            id=story_id,
            name=name,
            description=description,
            source=source,
            raw_source=raw_source,
        )


def walk_on_fragment(
    document: SourceDocument,
    nodes: SvelteASTNodes,
    *,
    filename: Optional[str] = None,
) -> FragmentMeta:
    """Collect a :class:`StoryMeta` for every story marker in the fragment."""
    filename = filename or document.filename
    recognizer = _StoryRecognizer(
        document,
        nodes.story_tag,
        nodes.templates(),
        filename,
    )
    return walk(document.fragment, FragmentMeta(), recognizer.visitors())


def extract_stories(
    document: SourceDocument,
    *,
    package_name: str = DEFAULT_PACKAGE_NAME,
) -> Catalog:
    """Return the story catalog (name to metadata) of one document."""
    nodes = extract_svelte_ast_nodes(document, package_name=package_name)
    meta = walk_on_fragment(document, nodes)
    document_logger("extract.fragment", document.filename).debug("Extracted %d stories", len(meta.stories))
    return meta.stories


__all__ = ["extract_stories", "walk_on_fragment"]
