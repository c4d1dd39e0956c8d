"""Locate the script-level nodes that define how stories are declared.

The module script of a stories file imports ``defineMeta`` and destructures
the ``Story`` component from its result; the local name bound there is the
tag recognised as a story marker in the markup. The instance script may call
``setTemplate(snippet)`` to give every self-closing story a default body.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional

from ..analyse.raw_source import TemplateContext, snippet_block_name
from ..constants import DEFAULT_PACKAGE_NAME, DEFINE_META, SET_TEMPLATE, STORY_COMPONENT
from ..document import SourceDocument
from ..errors import (
    DefaultOrNamespaceImportUsedError,
    GetDefineMetaFirstArgumentError,
    MissingDefineMetaVariableDeclarationError,
    MissingImportedDefineMetaError,
    MissingModuleTagError,
    NoStoryComponentDestructuredError,
)
from ..walker import Context, Node, node_type, walk


def imported_name(specifier: Node) -> Optional[str]:
    imported = specifier.get("imported") or {}
    if node_type(imported) == "Identifier":
        return imported.get("name")
    if node_type(imported) == "Literal" and isinstance(imported.get("value"), str):
        return imported["value"]
    return None


def local_name(specifier: Node) -> Optional[str]:
    return (specifier.get("local") or {}).get("name")


def destructured_identifier(pattern: Node, key: str) -> Optional[Node]:
    """Return the local identifier bound to ``key`` in ``{ key: local }``."""
    for prop in pattern.get("properties") or []:
        if node_type(prop) != "Property":
            continue
        prop_key = prop.get("key") or {}
        if node_type(prop_key) != "Identifier" or prop_key.get("name") != key:
            continue
        value = prop.get("value") or {}
        if node_type(value) == "Identifier":
            return value
    return None


def call_callee_name(expression: Optional[Node]) -> Optional[str]:
    if expression is None or node_type(expression) != "CallExpression":
        return None
    callee = expression.get("callee") or {}
    if node_type(callee) == "Identifier":
        return callee.get("name")
    return None


@dataclass
class _ScriptScan:
    package_name: str
    filename: Optional[str]
    imports: Dict[str, Node] = field(default_factory=dict)
    declarations: List[Node] = field(default_factory=list)
    calls: List[Node] = field(default_factory=list)


def _visit_program(node: Node, context: Context[_ScriptScan]) -> None:
    # Only top-level statements matter; function bodies are never entered.
    for statement in node.get("body") or []:
        kind = node_type(statement)
        if kind == "ExportNamedDeclaration" and statement.get("declaration"):
            statement = statement["declaration"]
            kind = node_type(statement)
        if kind in {"ImportDeclaration", "VariableDeclaration", "ExpressionStatement"}:
            context.visit(statement)


def _visit_import(node: Node, context: Context[_ScriptScan]) -> None:
    scan = context.state
    if (node.get("source") or {}).get("value") != scan.package_name:
        return
    for specifier in node.get("specifiers") or []:
        if node_type(specifier) != "ImportSpecifier":
            raise DefaultOrNamespaceImportUsedError(scan.package_name, filename=scan.filename)
        name = imported_name(specifier)
        if name is not None:
            scan.imports[name] = specifier


def _visit_variable_declaration(node: Node, context: Context[_ScriptScan]) -> None:
    for declarator in node.get("declarations") or []:
        if call_callee_name(declarator.get("init")) is not None:
            context.state.declarations.append(node)
            return


def _visit_expression_statement(node: Node, context: Context[_ScriptScan]) -> None:
    expression = node.get("expression")
    if call_callee_name(expression) is not None:
        context.state.calls.append(expression)


_SCRIPT_VISITORS = {
    "Program": _visit_program,
    "ImportDeclaration": _visit_import,
    "VariableDeclaration": _visit_variable_declaration,
    "ExpressionStatement": _visit_expression_statement,
}


def scan_script(script: Optional[Node], scan: _ScriptScan) -> None:
    if script is None:
        return
    content = script.get("content")
    if content is not None:
        walk(content, scan, _SCRIPT_VISITORS)


@dataclass(frozen=True)
class SvelteASTNodes:
    """Script nodes of a stories file needed to recognise and render stories."""

    module: Node
    define_meta_import: Node
    define_meta_variable_declaration: Node
    define_meta_object: Node
    story_identifier: Node
    set_template_call: Optional[Node] = None
    snippet_blocks: Dict[str, Node] = field(default_factory=dict)

    @property
    def story_tag(self) -> str:
        return self.story_identifier["name"]

    def templates(self) -> TemplateContext:
        return TemplateContext(
            snippet_blocks=self.snippet_blocks,
            set_template_call=self.set_template_call,
            meta_object=self.define_meta_object,
        )


def root_snippet_blocks(document: SourceDocument) -> Dict[str, Node]:
    blocks: Dict[str, Node] = {}
    for node in document.fragment.get("nodes") or []:
        if node_type(node) == "SnippetBlock":
            name = snippet_block_name(node)
            if name is not None:
                blocks.setdefault(name, node)
    return blocks


def _find_call(calls: List[Node], callee: Optional[str]) -> Optional[Node]:
    if callee is None:
        return None
    for call in calls:
        if call_callee_name(call) == callee:
            return call
    return None


def extract_svelte_ast_nodes(
    document: SourceDocument,
    *,
    package_name: str = DEFAULT_PACKAGE_NAME,
    filename: Optional[str] = None,
) -> SvelteASTNodes:
    """Resolve the ``defineMeta`` declaration, ``Story`` tag and templates."""
    filename = filename or document.filename
    module = document.module
    if module is None:
        raise MissingModuleTagError(filename)

    module_scan = _ScriptScan(package_name=package_name, filename=filename)
    scan_script(module, module_scan)
    instance_scan = _ScriptScan(package_name=package_name, filename=filename)
    scan_script(document.instance, instance_scan)

    define_meta_import = module_scan.imports.get(DEFINE_META)
    if define_meta_import is None:
        raise MissingImportedDefineMetaError(package_name, filename=filename)
    define_meta_name = local_name(define_meta_import) or DEFINE_META

    declaration: Optional[Node] = None
    declarator: Optional[Node] = None
    for candidate in module_scan.declarations:
        for item in candidate.get("declarations") or []:
            if call_callee_name(item.get("init")) == define_meta_name:
                declaration, declarator = candidate, item
                break
        if declaration is not None:
            break
    if declaration is None or declarator is None:
        raise MissingDefineMetaVariableDeclarationError(define_meta_name, filename=filename)

    pattern = declarator.get("id") or {}
    story_identifier = None
    if node_type(pattern) == "ObjectPattern":
        story_identifier = destructured_identifier(pattern, STORY_COMPONENT)
    if story_identifier is None:
        raise NoStoryComponentDestructuredError(define_meta_name, filename=filename)

    arguments = declarator["init"].get("arguments") or []
    if not arguments or node_type(arguments[0]) != "ObjectExpression":
        raise GetDefineMetaFirstArgumentError(filename=filename)

    set_template_import = instance_scan.imports.get(SET_TEMPLATE) or module_scan.imports.get(SET_TEMPLATE)
    set_template_call = None
    if set_template_import is not None:
        set_template_name = local_name(set_template_import)
        set_template_call = _find_call(instance_scan.calls, set_template_name) or _find_call(
            module_scan.calls, set_template_name
        )

    return SvelteASTNodes(
        module=module,
        define_meta_import=define_meta_import,
        define_meta_variable_declaration=declaration,
        define_meta_object=arguments[0],
        story_identifier=story_identifier,
        set_template_call=set_template_call,
        snippet_blocks=root_snippet_blocks(document),
    )


def collect_template_context(
    document: SourceDocument,
    *,
    package_name: str = DEFAULT_PACKAGE_NAME,
    define_meta_object: Optional[Node] = None,
    filename: Optional[str] = None,
) -> TemplateContext:
    """Gather templates without requiring the modern ``defineMeta`` schema."""
    filename = filename or document.filename
    scan = _ScriptScan(package_name=package_name, filename=filename)
    scan_script(document.instance, scan)
    set_template_call = None
    specifier = scan.imports.get(SET_TEMPLATE)
    if specifier is not None:
        set_template_call = _find_call(scan.calls, local_name(specifier))
    return TemplateContext(
        snippet_blocks=root_snippet_blocks(document),
        set_template_call=set_template_call,
        meta_object=define_meta_object,
    )


__all__ = [
    "SvelteASTNodes",
    "collect_template_context",
    "extract_svelte_ast_nodes",
    "root_snippet_blocks",
]
