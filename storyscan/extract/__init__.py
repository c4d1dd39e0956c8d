"""Extraction passes over stories files and their compiled output."""

from .compiled import extract_compiled_ast_nodes
from .fragment import extract_stories, walk_on_fragment
from .svelte_nodes import SvelteASTNodes, collect_template_context, extract_svelte_ast_nodes

__all__ = [
    "SvelteASTNodes",
    "collect_template_context",
    "extract_compiled_ast_nodes",
    "extract_stories",
    "extract_svelte_ast_nodes",
    "walk_on_fragment",
]
