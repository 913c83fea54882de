"""Data models for Codefold."""

from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum

from codefold.core.exceptions import ConfigurationError


@dataclass(frozen=True)
class Span:
    """Inclusive character-offset range of a region with its resolved lines."""

    start: int
    end: int
    start_line: int
    end_line: int

    @property
    def line_count(self) -> int:
        return self.end_line - self.start_line + 1

    def __repr__(self) -> str:
        return f"Span([{self.start}..{self.end}], lines {self.start_line}-{self.end_line})"


@dataclass(frozen=True)
class Option:
    """Cost and profit of unfolding one node.

    ``profit`` is None when no content model was consulted.
    """

    cost: int
    profit: float | None = None

    @property
    def is_worthless(self) -> bool:
        return self.profit is not None and self.profit == -math.inf


class ProfitPolicy(Enum):
    """Content-scoring policies understood by the topic-aware pass."""

    SURPRISING = "Surprising"
    COND_SURPRISING = "CondSurprising"
    COND_SURPRISING_2 = "CondSurprising2"
    LIKELY = "Likely"
    SPECIFIC = "Specific"
    KL_DIV = "KLDiv"
    NO_CONTENT_MODEL = "NoContentModel"

    @property
    def is_family(self) -> bool:
        """Families accept any suffix after the declared name."""
        return self in (ProfitPolicy.SPECIFIC, ProfitPolicy.KL_DIV)

    @property
    def allows_negative(self) -> bool:
        return self in (
            ProfitPolicy.COND_SURPRISING,
            ProfitPolicy.COND_SURPRISING_2,
            ProfitPolicy.LIKELY,
            ProfitPolicy.SPECIFIC,
            ProfitPolicy.KL_DIV,
        )

    @property
    def adds_node_to_unfolded(self) -> bool:
        return self is not ProfitPolicy.COND_SURPRISING_2

    @property
    def needs_sampler(self) -> bool:
        return self is not ProfitPolicy.NO_CONTENT_MODEL


@dataclass(frozen=True)
class ProfitFunction:
    """A resolved profit policy plus the configured name.

    The name matters for the families, where the oracle picks the variant
    from it (e.g. ``KLDivTopic`` vs ``KLDivTerm``).
    """

    policy: ProfitPolicy
    name: str

    @classmethod
    def parse(cls, name: str) -> ProfitFunction:
        """Resolve a configured policy name, case-insensitively."""
        key = name.strip().lower()
        for policy in ProfitPolicy:
            if key == policy.value.lower():
                return cls(policy=policy, name=name.strip())
        for policy in ProfitPolicy:
            if policy.is_family and key.startswith(policy.value.lower()):
                return cls(policy=policy, name=name.strip())
        known = ", ".join(p.value + ("*" if p.is_family else "") for p in ProfitPolicy)
        raise ConfigurationError(f"Unknown profit function {name!r} (expected one of: {known})")

    def __str__(self) -> str:
        return self.name
