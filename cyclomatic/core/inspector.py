"""
Depth-first traversal with enter/exit notifications.

Checks register the node types they care about and receive an
``on_enter`` call before a node's children are visited and an
``on_exit`` call after them.
"""

from typing import Iterable, Iterator, Optional, Protocol, Tuple

from cyclomatic.parsers.base import SyntaxNode


class NodeVisitor(Protocol):
    """Receiver of traversal events."""

    def on_enter(self, node: SyntaxNode) -> None:
        ...

    def on_exit(self, node: SyntaxNode) -> None:
        ...


class Inspector:
    """Walks a normalized syntax tree in source order."""

    def __init__(self, root: SyntaxNode):
        self.root = root

    def nodes(self, node_types: Optional[Iterable[str]] = None) -> Iterator[Tuple[SyntaxNode, bool]]:
        """
        Yield ``(node, entering)`` events for nodes of the given types.

        Every node is descended into; the filter only decides which nodes
        produce events. If node_types is None, every node produces events.
        """
        wanted = set(node_types) if node_types is not None else None
        stack = [(self.root, False)]

        while stack:
            node, exiting = stack.pop()
            interesting = wanted is None or node.type in wanted

            if exiting:
                yield node, False
                continue

            if interesting:
                yield node, True
                stack.append((node, True))

            stack.extend((child, False) for child in reversed(node.children))

    def walk(self, visitor: NodeVisitor, node_types: Optional[Iterable[str]] = None) -> None:
        """Dispatch traversal events to a visitor's on_enter/on_exit methods."""
        for node, entering in self.nodes(node_types):
            if entering:
                visitor.on_enter(node)
            else:
                visitor.on_exit(node)
