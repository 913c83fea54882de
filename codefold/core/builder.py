"""Builder that turns parser output into a fold tree."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING

from codefold.core.tree import FoldableNode, FoldableTree
from codefold.languages import LanguageParser, ParseResult, PythonParser

if TYPE_CHECKING:
    from codefold.core.config import Settings
    from codefold.languages.models import Region

logger = logging.getLogger(__name__)


class FoldTreeBuilder:
    """Coordinates parsing and fold tree construction."""

    def __init__(self, settings: Settings | None = None, parser: LanguageParser | None = None) -> None:
        self._settings = settings
        self._parser = parser or PythonParser()

    def build_file(self, file: Path) -> FoldableTree:
        """Parse ``file`` and build its fold tree.

        Raises:
            ParseError: if the file cannot be read or parsed
        """
        return self.build(self._parser.parse(file))

    def build(self, result: ParseResult) -> FoldableTree:
        """Build a fold tree from a parse result.

        Two steps:
        1. Mirror the region skeleton, creating nodes in pre-order
        2. Graft the term associations (comments, docstrings) under their carriers
        """
        tree = FoldableTree(result.source, result.file, self._settings)
        tree.set_root(self._mirror(tree, result.root))
        skeleton = tree.node_count

        tree.add_nodes(result.associations)
        tree.set_levels()

        logger.debug(
            "Built fold tree for %s: %d skeleton nodes, %d grafted",
            result.file,
            skeleton,
            tree.node_count - skeleton,
        )
        return tree

    def _mirror(self, tree: FoldableTree, region: Region) -> FoldableNode:
        node = tree.new_node(region)
        node.add_terms(region.terms)
        for child in region.children:
            node.add_child(self._mirror(tree, child))
        return node
