"""Foldable node: one syntactic region of a source file."""

from __future__ import annotations

from collections import Counter
from collections.abc import Iterable, Iterator
from typing import TYPE_CHECKING

from codefold.core.exceptions import InvariantViolationError

if TYPE_CHECKING:
    from codefold.core.models import Span
    from codefold.languages.base import SyntaxNode


class FoldableNode:
    """A region of the fold tree.

    Nodes are created through ``FoldableTree.new_node`` so ids come from the
    owning tree's counter. Children are owned by the parent; the parent is
    kept as an id into the tree's node table.
    """

    __slots__ = (
        "node_id",
        "syntax",
        "span",
        "text",
        "level",
        "term_freqs",
        "children",
        "parent_id",
        "_unfolded",
    )

    def __init__(self, node_id: int, syntax: SyntaxNode, span: Span, text: str) -> None:
        self.node_id = node_id
        self.syntax = syntax
        self.span = span
        self.text = text
        self.level = -1
        # raw term frequencies at this node only, not including children's
        self.term_freqs: Counter[str] = Counter()
        self.children: list[FoldableNode] = []
        self.parent_id: int | None = None
        self._unfolded = False

    @property
    def kind(self) -> str:
        return self.syntax.kind

    @property
    def range(self) -> tuple[int, int]:
        """Inclusive character-offset range."""
        return self.span.start, self.span.end

    @property
    def is_unfolded(self) -> bool:
        return self._unfolded

    def set_unfolded(self) -> None:
        self._unfolded = True

    def add_child(self, child: FoldableNode) -> None:
        """Attach ``child`` as the last child of this node."""
        if child.parent_id is not None:
            raise InvariantViolationError(
                f"Node {child.node_id} is already attached to node {child.parent_id}"
            )
        self.children.append(child)
        child.parent_id = self.node_id

    def add_term(self, term: str) -> None:
        self.term_freqs[term] += 1

    def add_terms(self, terms: Iterable[str]) -> None:
        self.term_freqs.update(terms)

    def remove_terms(self, terms: Iterable[str]) -> None:
        """Remove one occurrence of each listed term, if present."""
        for term in terms:
            if self.term_freqs[term] > 1:
                self.term_freqs[term] -= 1
            else:
                self.term_freqs.pop(term, None)

    def line_count(self) -> int:
        """Length of the node in lines, both ends inclusive."""
        return self.span.line_count

    def unique_cost(self) -> int:
        """Lines this node shows that none of its direct children show.

        Raises InvariantViolationError when children's spans do not nest
        inside this node.
        """
        cost = self.line_count() - 1
        for child in self.children:
            cost -= child.line_count() - 1
        if cost < 0:
            raise InvariantViolationError(
                f"Negative unique cost {cost} for node {self.node_id} "
                f"at lines {self.print_range()}"
            )
        return cost

    def node_to_string(self) -> str:
        """Node text with the text of every direct child cut out."""
        parts: list[str] = []
        cursor = self.span.start
        for child in sorted(self.children, key=lambda c: c.span.start):
            if child.span.start < cursor:
                continue
            parts.append(self.text[cursor - self.span.start : child.span.start - self.span.start])
            cursor = child.span.end + 1
        parts.append(self.text[cursor - self.span.start :])
        return "".join(parts)

    def print_range(self) -> str:
        return f"({self.span.start_line}, {self.span.end_line})"

    def __iter__(self) -> Iterator[FoldableNode]:
        """Pre-order traversal."""
        stack = [self]
        while stack:
            node = stack.pop()
            yield node
            stack.extend(reversed(node.children))

    def __len__(self) -> int:
        """Total nodes in subtree."""
        return sum(1 for _ in self)

    def __str__(self) -> str:
        return (
            f"Level: {self.level} isUnfolded: {self._unfolded} - Range {self.print_range()} : \n "
            f"{self.node_to_string()}raw-tfs: {dict(self.term_freqs)}\n"
        )

    def __repr__(self) -> str:
        return f"FoldableNode(id={self.node_id}, kind={self.kind!r}, lines={self.print_range()})"
