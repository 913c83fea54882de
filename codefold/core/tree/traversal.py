"""Pre-order traversal driver and the tree-wide node operations.

Every tree-wide computation is a node operation run by one of two drivers:

- ``traverse``: visits the root, then each child in stored order. The value a
  node's operation returns is handed to each of its children as their
  accumulator; siblings never see each other's results.
- ``traverse_lines_greedy``: same shape, but the operation also writes one
  Option per node into a shared table.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections import Counter
from typing import TYPE_CHECKING, Generic, TypeVar

if TYPE_CHECKING:
    from codefold.core.models import Option, Span
    from codefold.core.tree.base import FoldableTree
    from codefold.core.tree.node import FoldableNode
    from codefold.languages.models import TermAssociation

T = TypeVar("T")


class NodeOp(ABC, Generic[T]):
    """Operation applied to each node with its parent's result."""

    @abstractmethod
    def perform(self, node: FoldableNode, prev: T) -> T: ...


class GreedyNodeOp(ABC):
    """Operation that records an Option per node while accumulating cost."""

    @abstractmethod
    def perform(self, node: FoldableNode, prev: int, options: dict[FoldableNode, Option]) -> int: ...


def traverse(root: FoldableNode, op: NodeOp[T], prev: T) -> T:
    """Run ``op`` over the subtree at ``root`` in pre-order.

    Returns the value produced at ``root``. Children attached by the
    operation itself are visited too.
    """
    result = op.perform(root, prev)
    stack = [(child, result) for child in reversed(root.children)]
    while stack:
        node, acc = stack.pop()
        val = op.perform(node, acc)
        stack.extend((child, val) for child in reversed(node.children))
    return result


def traverse_lines_greedy(
    root: FoldableNode,
    op: GreedyNodeOp,
    prev: int,
    options: dict[FoldableNode, Option],
) -> dict[FoldableNode, Option]:
    """Run ``op`` over the subtree at ``root``, filling ``options``."""
    stack = [(root, prev)]
    while stack:
        node, acc = stack.pop()
        val = op.perform(node, acc, options)
        stack.extend((child, val) for child in reversed(node.children))
    return options


class SetLevelOp(NodeOp[None]):
    """Set each node's level from its parent's."""

    def __init__(self, tree: FoldableTree) -> None:
        self._tree = tree

    def perform(self, node: FoldableNode, prev: None) -> None:
        if node.level != 0:
            parent = self._tree.parent(node)
            node.level = parent.level + 1 if parent is not None else 0
        return None


class AddNodesOp(NodeOp["list[TermAssociation]"]):
    """Attach a new child, with its terms, for every association carried by the node."""

    def __init__(self, tree: FoldableTree) -> None:
        self._tree = tree

    def perform(
        self, node: FoldableNode, prev: list[TermAssociation]
    ) -> list[TermAssociation]:
        for assoc in prev:
            if assoc.carrier is node.syntax:
                child = self._tree.new_node(assoc.node)
                child.add_terms(assoc.terms)
                node.add_child(child)
        return prev


class GetTermsOp(NodeOp["dict[Span, Counter[str]]"]):
    """Collect each node's terms keyed by span."""

    def perform(
        self, node: FoldableNode, prev: dict[Span, Counter[str]]
    ) -> dict[Span, Counter[str]]:
        prev[node.span] = Counter(node.term_freqs)
        return prev


class GetIdTermsOp(NodeOp["dict[int, Counter[str]]"]):
    """Collect each node's terms keyed by node id."""

    def perform(
        self, node: FoldableNode, prev: dict[int, Counter[str]]
    ) -> dict[int, Counter[str]]:
        prev[node.node_id] = Counter(node.term_freqs)
        return prev


class ToStringOp(NodeOp["list[str]"]):
    def perform(self, node: FoldableNode, prev: list[str]) -> list[str]:
        prev.append("\n" + str(node))
        return prev
