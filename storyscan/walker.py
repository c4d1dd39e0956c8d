"""Depth-first walker over JSON syntax trees with kind-based visitor dispatch.

Nodes are plain mappings tagged by a ``"type"`` key, as emitted by the Svelte
compiler (markup) and ESTree producers (scripts). A visitor receives the node
and a :class:`Context`; it must call :meth:`Context.next` to descend into the
node's children, or :meth:`Context.visit` to descend into a chosen node.
Nothing is visited implicitly, so a visitor that does neither prunes the
subtree. Node kinds without a visitor fall back to the ``"_"`` visitor when
one is registered, otherwise they pass through to their children.
"""

from __future__ import annotations

from typing import Any, Callable, Dict, Generic, Iterator, Mapping, Optional, Tuple, TypeVar

Node = Mapping[str, Any]
S = TypeVar("S")

Visitor = Callable[[Node, "Context[S]"], None]
Visitors = Mapping[str, Visitor]

FALLBACK_VISITOR = "_"

_UNSET: Any = object()


def node_type(node: Node) -> Optional[str]:
    kind = node.get("type")
    return kind if isinstance(kind, str) else None


def is_node(value: Any) -> bool:
    return isinstance(value, Mapping) and isinstance(value.get("type"), str)


def child_nodes(node: Node) -> Iterator[Node]:
    """Yield the direct child nodes of ``node`` in field order."""
    for value in node.values():
        if is_node(value):
            yield value
        elif isinstance(value, list):
            for item in value:
                if is_node(item):
                    yield item


class Context(Generic[S]):
    """Handle passed to visitors for one node of the traversal."""

    def __init__(self, walker: "_Walker[S]", node: Node, state: S, path: Tuple[Node, ...]) -> None:
        self._walker = walker
        self._node = node
        self.state = state
        self.path = path

    @property
    def parent(self) -> Optional[Node]:
        return self.path[-1] if self.path else None

    def next(self, state: S = _UNSET) -> None:
        """Visit every child of the current node."""
        next_state = self.state if state is _UNSET else state
        path = self.path + (self._node,)
        for child in child_nodes(self._node):
            self._walker.dispatch(child, next_state, path)

    def visit(self, node: Node, state: S = _UNSET) -> None:
        """Visit ``node`` as if it were a child of the current node."""
        next_state = self.state if state is _UNSET else state
        self._walker.dispatch(node, next_state, self.path + (self._node,))


class _Walker(Generic[S]):
    def __init__(self, visitors: Visitors) -> None:
        self._visitors: Dict[str, Visitor] = dict(visitors)

    def dispatch(self, node: Node, state: S, path: Tuple[Node, ...]) -> None:
        context: Context[S] = Context(self, node, state, path)
        kind = node_type(node)
        visitor = self._visitors.get(kind) if kind is not None else None
        if visitor is None:
            visitor = self._visitors.get(FALLBACK_VISITOR)
        if visitor is None:
            context.next()
            return
        visitor(node, context)


def walk(node: Node, state: S, visitors: Visitors) -> S:
    """Walk ``node`` in preorder, threading ``state`` through the visitors.

    The state object is scoped to this call; it is returned for convenience so
    callers can write ``result = walk(tree, Result(), visitors)``.
    """
    if not is_node(node):
        raise TypeError("walk() expects a node mapping with a string 'type' key")
    _Walker(visitors).dispatch(node, state, ())
    return state


__all__ = [
    "Context",
    "FALLBACK_VISITOR",
    "Node",
    "Visitor",
    "Visitors",
    "child_nodes",
    "is_node",
    "node_type",
    "walk",
]
