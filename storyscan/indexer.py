"""Lean parse of a stories file for the stories index.

Only what the index needs is collected: the meta ``title`` and ``tags``,
and for each story its export name, name and tags, in document order. Two
dialects are understood:

* modern: ``const { Story } = defineMeta({ ... })`` in the module script;
* legacy (opt-in): ``<Meta>`` and ``<Story>`` components imported from the
  addon, with ``export const meta = { ... }`` or ``<Meta title=...>``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

from .analyse.attributes import get_array_of_strings_from_attribute, get_string_from_attribute
from .analyse.identity import get_story_identifiers
from .analyse.properties import (
    get_property_array_of_strings_value,
    get_property_string_value,
    property_key_name,
)
from .analyse.raw_source import RawSourceStyle, TemplateContext, get_story_children_raw_source
from .constants import (
    DEFAULT_PACKAGE_NAME,
    DEFINE_META,
    LEGACY_META_COMPONENT,
    LEGACY_META_EXPORT,
    STORY_COMPONENT,
)
from .document import SourceDocument
from .errors import (
    DefaultOrNamespaceImportUsedError,
    GetDefineMetaFirstArgumentError,
    MissingModuleTagError,
    NoStoryComponentDestructuredError,
)
from .extract.svelte_nodes import (
    call_callee_name,
    collect_template_context,
    destructured_identifier,
    imported_name,
    local_name,
)
from .logging import document_logger
from .models import IndexedStory, IndexerResult
from .walker import Context, Node, Visitors, node_type, walk


@dataclass
class _IndexerState:
    result: IndexerResult = field(default_factory=IndexerResult)
    define_meta_identifier: str = DEFINE_META
    story_identifier: str = STORY_COMPONENT
    meta_identifier: str = LEGACY_META_COMPONENT
    found_meta: bool = False
    meta_object: Optional[Node] = None
    templates: Optional[TemplateContext] = None


class _IndexerVisitors:
    def __init__(
        self,
        document: SourceDocument,
        *,
        legacy_template: bool,
        package_name: str,
        include_raw_source: bool,
    ) -> None:
        self.document = document
        self.filename = document.filename
        self.legacy_template = legacy_template
        self.package_name = package_name
        self.include_raw_source = include_raw_source

    def as_dict(self) -> Visitors:
        return {
            "Root": self.visit_root,
            "Script": self.visit_script,
            "Program": self.visit_program,
            "ImportDeclaration": self.visit_import_declaration,
            "VariableDeclaration": self.visit_variable_declaration,
            "ObjectExpression": self.visit_object_expression,
            "Property": self.visit_property,
            "Fragment": self.visit_fragment,
            "Component": self.visit_component,
        }

    def visit_root(self, node: Node, context: Context[_IndexerState]) -> None:
        module = node.get("module")
        if module is None and not self.legacy_template:
            raise MissingModuleTagError(self.filename)
        if module is not None:
            context.visit(module)
        fragment = node.get("fragment")
        if fragment is not None:
            context.visit(fragment)

    def visit_script(self, node: Node, context: Context[_IndexerState]) -> None:
        if node.get("context") == "module" and node.get("content") is not None:
            context.visit(node["content"])

    def visit_program(self, node: Node, context: Context[_IndexerState]) -> None:
        for statement in node.get("body") or []:
            kind = node_type(statement)
            if kind == "ImportDeclaration":
                if (statement.get("source") or {}).get("value") == self.package_name:
                    context.visit(statement)
            elif kind == "VariableDeclaration":
                context.visit(statement)
            elif self.legacy_template and kind == "ExportNamedDeclaration":
                declaration = statement.get("declaration") or {}
                if node_type(declaration) == "VariableDeclaration":
                    context.visit(declaration)

    def visit_import_declaration(self, node: Node, context: Context[_IndexerState]) -> None:
        state = context.state
        for specifier in node.get("specifiers") or []:
            if node_type(specifier) != "ImportSpecifier":
                raise DefaultOrNamespaceImportUsedError(self.package_name, filename=self.filename)
            name = imported_name(specifier)
            local = local_name(specifier) or name
            if local is None:
                continue
            if name == DEFINE_META:
                state.define_meta_identifier = local
            elif self.legacy_template and name == LEGACY_META_COMPONENT:
                state.meta_identifier = local
            elif self.legacy_template and name == STORY_COMPONENT:
                state.story_identifier = local

    def visit_variable_declaration(self, node: Node, context: Context[_IndexerState]) -> None:
        state = context.state
        for declarator in node.get("declarations") or []:
            pattern = declarator.get("id") or {}
            init = declarator.get("init")

            if call_callee_name(init) == state.define_meta_identifier:
                state.found_meta = True
                story = None
                if node_type(pattern) == "ObjectPattern":
                    story = destructured_identifier(pattern, STORY_COMPONENT)
                if story is None:
                    raise NoStoryComponentDestructuredError(
                        state.define_meta_identifier, filename=self.filename
                    )
                state.story_identifier = story["name"]
                arguments = init.get("arguments") or []
                if not arguments or node_type(arguments[0]) != "ObjectExpression":
                    raise GetDefineMetaFirstArgumentError(filename=self.filename)
                state.meta_object = arguments[0]
                context.visit(arguments[0])
                continue

            if (
                self.legacy_template
                and not state.found_meta
                and node_type(pattern) == "Identifier"
                and pattern.get("name") == LEGACY_META_EXPORT
            ):
                state.found_meta = True
                if init is None or node_type(init) != "ObjectExpression":
                    raise GetDefineMetaFirstArgumentError(filename=self.filename)
                state.meta_object = init
                context.visit(init)

    def visit_object_expression(self, node: Node, context: Context[_IndexerState]) -> None:
        for prop in node.get("properties") or []:
            if property_key_name(prop) is not None:
                context.visit(prop)

    def visit_property(self, node: Node, context: Context[_IndexerState]) -> None:
        meta = context.state.result.meta
        name = property_key_name(node)
        if name == "title":
            meta.title = get_property_string_value(node, filename=self.filename)
        elif name == "tags":
            meta.tags = get_property_array_of_strings_value(node, filename=self.filename)

    def visit_fragment(self, node: Node, context: Context[_IndexerState]) -> None:
        for child in node.get("nodes") or []:
            if node_type(child) == "Component":
                context.visit(child)

    def visit_component(self, node: Node, context: Context[_IndexerState]) -> None:
        state = context.state
        name = node.get("name")

        if self.legacy_template and not state.found_meta and name == state.meta_identifier:
            self._legacy_meta_attributes(node, state)

        if name == state.story_identifier:
            export_name, story_name = get_story_identifiers(node, filename=self.filename)
            tags = get_array_of_strings_from_attribute(node, "tags", filename=self.filename)
            state.result.stories.append(
                IndexedStory(
                    export_name=export_name,
                    name=story_name,
                    tags=tags or [],
                    raw_source=self._raw_source(node, state),
                )
            )

    def _legacy_meta_attributes(self, node: Node, state: _IndexerState) -> None:
        meta = state.result.meta
        title = get_string_from_attribute(node, "title", filename=self.filename)
        if title is not None:
            meta.title = title
        tags = get_array_of_strings_from_attribute(node, "tags", filename=self.filename)
        if tags is not None:
            meta.tags = tags

    def _raw_source(self, node: Node, state: _IndexerState) -> Optional[str]:
        if not self.include_raw_source:
            return None
        if state.templates is None:
            state.templates = collect_template_context(
                self.document,
                package_name=self.package_name,
                define_meta_object=state.meta_object,
            )
        return get_story_children_raw_source(
            node,
            self.document,
            state.templates,
            style=RawSourceStyle.COMPACT,
            placeholder=True,
            filename=self.filename,
        )


def parse_for_indexer(
    document: SourceDocument,
    *,
    legacy_template: bool = False,
    package_name: str = DEFAULT_PACKAGE_NAME,
    include_raw_source: bool = False,
) -> IndexerResult:
    """Return the meta title/tags and the ordered story summaries of a document."""
    visitors = _IndexerVisitors(
        document,
        legacy_template=legacy_template,
        package_name=package_name,
        include_raw_source=include_raw_source,
    )
    state = walk(document.ast, _IndexerState(), visitors.as_dict())
    document_logger("indexer", document.filename).debug("Indexed %d stories", len(state.result.stories))
    return state.result


__all__ = ["parse_for_indexer"]
