"""
Fold tree data structures and passes.

Data Structures:
    - FoldableNode: One syntactic region with its raw terms and fold state
    - FoldableTree: Owns the nodes of one file, the id counter and the budget

Traversal (traversal.py):
    - traverse(): pre-order walk threading a parent value to each child
    - traverse_lines_greedy(): same walk, filling a node -> Option table

Passes (options.py):
    - baseline_options(): cost of unfolding every node
    - topic_sum_options(): cost plus content-model profit
"""

from codefold.core.tree.base import FoldableTree
from codefold.core.tree.node import FoldableNode
from codefold.core.tree.options import (
    BaselineOptionsOp,
    TopicSumOptionsOp,
    baseline_options,
    topic_sum_options,
)

__all__ = [
    "FoldableNode",
    "FoldableTree",
    "BaselineOptionsOp",
    "TopicSumOptionsOp",
    "baseline_options",
    "topic_sum_options",
]
