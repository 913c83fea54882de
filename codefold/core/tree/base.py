"""FoldableTree: the fold tree of one source file."""

from __future__ import annotations

import bisect
import logging
from collections import Counter
from collections.abc import Iterable, Iterator
from pathlib import Path
from typing import TYPE_CHECKING

from codefold.core.exceptions import InvariantViolationError
from codefold.core.models import Span
from codefold.core.tree.node import FoldableNode
from codefold.core.tree.traversal import (
    AddNodesOp,
    GetIdTermsOp,
    GetTermsOp,
    SetLevelOp,
    ToStringOp,
    traverse,
)

if TYPE_CHECKING:
    from codefold.core.config import Settings
    from codefold.languages.base import SyntaxNode
    from codefold.languages.models import TermAssociation

logger = logging.getLogger(__name__)


class FoldableTree:
    """Fold tree over the syntactic regions of one file.

    Owns the node table (indexed by node id), the id counter and the
    remaining display-line budget.
    """

    def __init__(self, source: str, file: Path | str, settings: Settings | None = None) -> None:
        self.source = source
        self.file = Path(file)
        self.settings = settings
        self._root: FoldableNode | None = None
        self._nodes: list[FoldableNode] = []
        self._budget = 0.0
        self._line_starts = [0] + [i + 1 for i, ch in enumerate(source) if ch == "\n"]

    @property
    def file_id(self) -> str:
        """File name without directory or extension, as the sampler keys it."""
        return self.file.stem

    @property
    def root(self) -> FoldableNode:
        if self._root is None:
            raise InvariantViolationError(f"Fold tree for {self.file} has no root")
        return self._root

    def set_root(self, root: FoldableNode) -> None:
        self._root = root
        root.level = 0

    @property
    def node_count(self) -> int:
        return len(self._nodes)

    @property
    def budget(self) -> float:
        return self._budget

    def set_budget(self, budget: float) -> None:
        self._budget = budget

    def shrink_budget(self, cost: int) -> None:
        """Pay ``cost`` lines out of the remaining budget."""
        if cost < 0:
            raise InvariantViolationError(f"Cannot shrink budget by negative cost {cost}")
        self._budget -= cost

    def line_number(self, offset: int) -> int:
        """1-based line number of a character offset."""
        return bisect.bisect_right(self._line_starts, offset)

    def new_node(self, syntax: SyntaxNode) -> FoldableNode:
        """Create a node for ``syntax`` with the next free id."""
        start = syntax.start_position
        end = start + max(syntax.length, 1) - 1
        span = Span(
            start=start,
            end=end,
            start_line=self.line_number(start),
            end_line=self.line_number(end),
        )
        node = FoldableNode(len(self._nodes), syntax, span, self.source[start : end + 1])
        self._nodes.append(node)
        return node

    def node(self, node_id: int) -> FoldableNode:
        return self._nodes[node_id]

    def parent(self, node: FoldableNode) -> FoldableNode | None:
        if node.parent_id is None:
            return None
        return self._nodes[node.parent_id]

    def set_levels(self) -> None:
        """Set levels for all nodes."""
        traverse(self.root, SetLevelOp(self), None)

    def add_nodes(self, associations: Iterable[TermAssociation]) -> None:
        """Graft term-bearing nodes (e.g. comments) under their carriers."""
        before = self.node_count
        traverse(self.root, AddNodesOp(self), list(associations))
        logger.debug("Grafted %d nodes onto %s", self.node_count - before, self.file)

    def get_terms(self) -> dict[Span, Counter[str]]:
        """Terms of every node, keyed by node span."""
        return traverse(self.root, GetTermsOp(), {})

    def get_id_terms(self) -> dict[int, Counter[str]]:
        """Terms of every node, keyed by node id."""
        return traverse(self.root, GetIdTermsOp(), {})

    def unfolded_nodes(self) -> list[FoldableNode]:
        return [node for node in self if node.is_unfolded]

    def __iter__(self) -> Iterator[FoldableNode]:
        """Pre-order traversal from the root."""
        return iter(self.root)

    def __len__(self) -> int:
        return len(self.root)

    def __str__(self) -> str:
        return "".join(traverse(self.root, ToStringOp(), []))

    def __repr__(self) -> str:
        return f"FoldableTree(file={self.file.name!r}, nodes={self.node_count}, budget={self._budget})"
