"""Cost and profit passes over a fold tree.

Both passes share one cost rule. An unfolded node costs nothing and its
subtree starts accumulating from zero again. A folded node costs what its
parent accumulated plus its own unique cost, and hands that on to its
children.
"""

from __future__ import annotations

import logging
import math
from collections import Counter
from typing import TYPE_CHECKING

from codefold.core.exceptions import ConfigurationError, InvariantViolationError
from codefold.core.models import Option, ProfitPolicy
from codefold.core.tree.traversal import GreedyNodeOp, traverse_lines_greedy

if TYPE_CHECKING:
    from codefold.core.config import Settings
    from codefold.core.sampler import TopicSampler
    from codefold.core.tree.base import FoldableTree
    from codefold.core.tree.node import FoldableNode

logger = logging.getLogger(__name__)


def _record(
    node: FoldableNode, prev: int, profit: float | None, options: dict[FoldableNode, Option]
) -> int:
    """Store the node's Option and return the cost its children accumulate from."""
    if node.is_unfolded:
        options[node] = Option(cost=0, profit=profit)
        return 0

    cost = prev + node.unique_cost()
    if cost < 0:
        raise InvariantViolationError(f"Negative accumulated cost {cost} at node {node.node_id}")
    options[node] = Option(cost=cost, profit=profit)
    return cost


class BaselineOptionsOp(GreedyNodeOp):
    """Accumulate lines in a folded node and all its folded children."""

    def perform(self, node: FoldableNode, prev: int, options: dict[FoldableNode, Option]) -> int:
        return _record(node, prev, None, options)


class TopicSumOptionsOp(GreedyNodeOp):
    """Cost plus a content-model profit for every folded node.

    Keeps a working set of unfolded node ids and their terms for the life of
    the pass. Each folded node is scored as if it were added to that set;
    the set is restored before the next node is visited. Use one instance
    per pass.
    """

    def __init__(
        self, tree: FoldableTree, settings: Settings, sampler: TopicSampler | None = None
    ) -> None:
        self._profit = settings.profit_function
        if self._profit.policy.needs_sampler and sampler is None:
            raise ConfigurationError(f"Profit function {self._profit} needs a topic sampler")

        self._sampler = sampler
        self._project = settings.cur_proj
        self._file = tree.file_id
        self._suppress_unfolded = settings.unfolded_profit == "suppress"

        self._file_terms: Counter[str] = Counter()
        for node_terms in tree.get_id_terms().values():
            self._file_terms.update(node_terms)

        self._unfolded_node_ids: set[int] = set()
        self._unfolded_terms: Counter[str] = Counter()
        for node in tree.unfolded_nodes():
            self.add_node_to_unfolded(node)

    @property
    def unfolded_node_ids(self) -> frozenset[int]:
        return frozenset(self._unfolded_node_ids)

    @property
    def unfolded_terms(self) -> Counter[str]:
        return Counter(self._unfolded_terms)

    @property
    def file_terms(self) -> Counter[str]:
        return Counter(self._file_terms)

    def add_node_to_unfolded(self, node: FoldableNode) -> None:
        if node.node_id in self._unfolded_node_ids:
            return
        self._unfolded_node_ids.add(node.node_id)
        self._unfolded_terms += node.term_freqs

    def perform(self, node: FoldableNode, prev: int, options: dict[FoldableNode, Option]) -> int:
        profit: float | None
        if node.is_unfolded:
            profit = None if self._suppress_unfolded else 0.0
        else:
            profit = self.score(node)
            # If node has no terms, never unfold it
            if not node.term_freqs:
                profit = -math.inf
        return _record(node, prev, profit, options)

    def score(self, node: FoldableNode) -> float:
        """Profit of unfolding ``node`` given the current working set.

        The working set is left exactly as it was found.
        """
        policy = self._profit.policy
        pushed = policy.adds_node_to_unfolded and node.node_id not in self._unfolded_node_ids
        if pushed:
            self._unfolded_node_ids.add(node.node_id)
            self._unfolded_terms += node.term_freqs
        try:
            profit = self._call_sampler(node)
        finally:
            if pushed:
                self._unfolded_node_ids.discard(node.node_id)
                self._unfolded_terms -= node.term_freqs

        if profit < 0 and not policy.allows_negative:
            raise InvariantViolationError(
                f"Profit {profit} for node {node.node_id} must be non-negative under {self._profit}"
            )
        return profit

    def _call_sampler(self, node: FoldableNode) -> float:
        policy = self._profit.policy
        if policy is ProfitPolicy.NO_CONTENT_MODEL:
            return 1.0

        sampler = self._sampler
        if sampler is None:
            raise ConfigurationError(f"Profit function {self._profit} needs a topic sampler")
        summary = Counter(self._unfolded_terms)
        if policy is ProfitPolicy.SURPRISING:
            return sampler.get_surprise_tokens(summary, self._project, self._file, node.node_id)
        elif policy is ProfitPolicy.COND_SURPRISING:
            rest = Counter(
                {term: n for term, n in self._file_terms.items() if term not in summary}
            )
            return sampler.get_minus_conditional_surprise(
                rest, summary, self._project, self._file, node.node_id
            )
        elif policy is ProfitPolicy.COND_SURPRISING_2:
            return sampler.get_conditional_surprise(
                Counter(node.term_freqs), summary, self._project, self._file, node.node_id
            )
        elif policy is ProfitPolicy.LIKELY:
            return sampler.get_shifted_log_prob_tokens(
                0.0, summary, self._project, self._file, node.node_id
            )
        elif policy is ProfitPolicy.SPECIFIC:
            return sampler.get_shifted_specific_log_prob_tokens(
                0.0, summary, self._profit.name, self._project, self._file, node.node_id
            )
        elif policy is ProfitPolicy.KL_DIV:
            return -1 * sampler.get_kl_div(
                self._profit.name, self._project, self._file, frozenset(self._unfolded_node_ids)
            )
        raise ConfigurationError(f"Incorrect profit function {self._profit}")


def baseline_options(tree: FoldableTree) -> dict[FoldableNode, Option]:
    """Run the cost-only pass over the whole tree."""
    options = traverse_lines_greedy(tree.root, BaselineOptionsOp(), 0, {})
    logger.debug("Baseline pass over %s: %d options", tree.file, len(options))
    return options


def topic_sum_options(
    tree: FoldableTree, settings: Settings, sampler: TopicSampler | None = None
) -> dict[FoldableNode, Option]:
    """Run the cost/profit pass over the whole tree with a fresh working set."""
    op = TopicSumOptionsOp(tree, settings, sampler)
    options = traverse_lines_greedy(tree.root, op, 0, {})
    logger.debug(
        "Topic-aware pass over %s with %s: %d options", tree.file, settings.profit_function, len(options)
    )
    return options
