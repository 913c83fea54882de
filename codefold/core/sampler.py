"""Protocol for the content-scoring oracle (topic model sampler)."""

from __future__ import annotations

from collections import Counter
from typing import Protocol


class TopicSampler(Protocol):
    """Scores term multisets for a node of a file within a project.

    Numeric semantics of each score belong to the sampler; the fold tree
    only routes calls and checks signs.
    """

    def get_surprise_tokens(
        self, terms: Counter[str], project: str, file: str, node_id: int
    ) -> float:
        """Surprise of the terms at the node's position."""
        ...

    def get_minus_conditional_surprise(
        self,
        terms: Counter[str],
        given: Counter[str],
        project: str,
        file: str,
        node_id: int,
    ) -> float:
        """Negated surprise of ``terms`` conditioned on ``given``."""
        ...

    def get_conditional_surprise(
        self,
        terms: Counter[str],
        given: Counter[str],
        project: str,
        file: str,
        node_id: int,
    ) -> float:
        """Surprise of ``terms`` conditioned on ``given``."""
        ...

    def get_shifted_log_prob_tokens(
        self, shift: float, terms: Counter[str], project: str, file: str, node_id: int
    ) -> float:
        """Log-probability of the terms plus ``shift``."""
        ...

    def get_shifted_specific_log_prob_tokens(
        self,
        shift: float,
        terms: Counter[str],
        variant: str,
        project: str,
        file: str,
        node_id: int,
    ) -> float:
        """Log-probability under the named specific variant plus ``shift``."""
        ...

    def get_kl_div(
        self, variant: str, project: str, file: str, node_ids: frozenset[int]
    ) -> float:
        """KL-divergence between the file and the summary made of ``node_ids``."""
        ...
