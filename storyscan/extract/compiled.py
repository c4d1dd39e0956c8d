"""Relocate story nodes in the compiled output of a stories file.

The rewrite step that runs after the Svelte compiler needs a handful of nodes
from the generated program. Depending on the compilation mode the stories
component function is either declared at the top level and exported later
(``export default Button_stories``) or declared inside the default export.
Both shapes are handled.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Optional

from ..constants import DEFAULT_PACKAGE_NAME, DEFINE_META, STORIES_FUNCTION_SUFFIX, STORY_COMPONENT
from ..errors import DefaultOrNamespaceImportUsedError, NodeNotFoundError
from ..logging import get_logger
from ..models import CompiledASTNodes
from ..walker import Context, Node, node_type, walk
from .svelte_nodes import call_callee_name, destructured_identifier, imported_name, local_name

_LOGGER = get_logger("extract.compiled")


@dataclass
class _CompiledState:
    define_meta_import: Optional[Node] = None
    define_meta_variable_declaration: Optional[Node] = None
    export_default: Optional[Node] = None
    story_identifier: Optional[Node] = None
    stories_function_declaration: Optional[Node] = None
    functions: Dict[str, Node] = field(default_factory=dict)


def is_stories_component_function(node: Node) -> bool:
    function_id = node.get("id") or {}
    name = function_id.get("name")
    return isinstance(name, str) and name.endswith(STORIES_FUNCTION_SUFFIX)


def extract_compiled_ast_nodes(
    program: Node,
    *,
    filename: Optional[str] = None,
    package_name: str = DEFAULT_PACKAGE_NAME,
) -> CompiledASTNodes:
    """Find the nodes of the compiled program that the rewrite step replaces."""

    def visit_import_declaration(node: Node, context: Context[_CompiledState]) -> None:
        if (node.get("source") or {}).get("value") != package_name:
            return
        for specifier in node.get("specifiers") or []:
            if node_type(specifier) != "ImportSpecifier":
                raise DefaultOrNamespaceImportUsedError(package_name, filename=filename)
            context.visit(specifier)

    def visit_import_specifier(node: Node, context: Context[_CompiledState]) -> None:
        if imported_name(node) == DEFINE_META:
            context.state.define_meta_import = node

    def visit_variable_declaration(node: Node, context: Context[_CompiledState]) -> None:
        state = context.state
        if state.define_meta_import is None:
            return
        define_meta_name = local_name(state.define_meta_import)
        for declarator in node.get("declarations") or []:
            pattern = declarator.get("id") or {}
            if node_type(pattern) != "ObjectPattern":
                continue
            if call_callee_name(declarator.get("init")) != define_meta_name:
                continue
            state.define_meta_variable_declaration = node
            identifier = destructured_identifier(pattern, STORY_COMPONENT)
            if identifier is not None:
                state.story_identifier = identifier

    def visit_export_default(node: Node, context: Context[_CompiledState]) -> None:
        context.state.export_default = node
        declaration = node.get("declaration") or {}
        if node_type(declaration) == "FunctionDeclaration" and is_stories_component_function(declaration):
            context.state.stories_function_declaration = declaration

    def visit_function_declaration(node: Node, context: Context[_CompiledState]) -> None:
        name = (node.get("id") or {}).get("name")
        if isinstance(name, str):
            context.state.functions[name] = node
        if is_stories_component_function(node):
            context.state.stories_function_declaration = node

    state = walk(
        program,
        _CompiledState(),
        {
            "ImportDeclaration": visit_import_declaration,
            "ImportSpecifier": visit_import_specifier,
            "VariableDeclaration": visit_variable_declaration,
            "ExportDefaultDeclaration": visit_export_default,
            "FunctionDeclaration": visit_function_declaration,
        },
    )

    if state.stories_function_declaration is None and state.export_default is not None:
        declaration = state.export_default.get("declaration") or {}
        if node_type(declaration) == "Identifier":
            target = state.functions.get(declaration.get("name", ""))
            if target is not None and is_stories_component_function(target):
                state.stories_function_declaration = target

    return _require_nodes(state, filename=filename, package_name=package_name)


def _require_nodes(state: _CompiledState, *, filename: Optional[str], package_name: str) -> CompiledASTNodes:
    if state.define_meta_import is None:
        raise NodeNotFoundError(
            f"Could not find '{DEFINE_META}' imported from \"{package_name}\" in the compiled output.",
            filename=filename,
        )
    if state.define_meta_variable_declaration is None:
        raise NodeNotFoundError(
            f"Could not find '{local_name(state.define_meta_import)}({{ ... }})' in the compiled output.",
            filename=filename,
        )
    if state.export_default is None:
        raise NodeNotFoundError("Could not find 'export default' in the compiled output.", filename=filename)
    if state.story_identifier is None:
        raise NodeNotFoundError(
            f"Could not find '{STORY_COMPONENT}' identifier in the compiled output.", filename=filename
        )
    if state.stories_function_declaration is None:
        raise NodeNotFoundError(
            f"Could not find the stories component '*{STORIES_FUNCTION_SUFFIX}' function in the compiled output.",
            filename=filename,
        )
    _LOGGER.debug("Located compiled story nodes for %s", filename or "<unknown>")
    return CompiledASTNodes(
        define_meta_import=state.define_meta_import,
        define_meta_variable_declaration=state.define_meta_variable_declaration,
        export_default=state.export_default,
        story_identifier=state.story_identifier,
        stories_function_declaration=state.stories_function_declaration,
    )


__all__ = ["extract_compiled_ast_nodes", "is_stories_component_function"]
