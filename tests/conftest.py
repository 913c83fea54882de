"""Shared fixtures: hand-built region skeletons and a recording sampler."""

from collections import Counter
from pathlib import Path

import pytest

from codefold.core.builder import FoldTreeBuilder
from codefold.core.config import Settings
from codefold.core.tree import FoldableTree
from codefold.languages.models import ParseResult, Region


def numbered_source(num_lines: int) -> str:
    """Source text whose line N reads 'line N'."""
    return "\n".join(f"line {i}" for i in range(1, num_lines + 1))


def line_region(source: str, start_line: int, end_line: int, kind: str = "block") -> Region:
    """Region covering whole lines ``start_line``..``end_line`` of ``source``."""
    starts = [0] + [i + 1 for i, ch in enumerate(source) if ch == "\n"]
    start = starts[start_line - 1]
    end = starts[end_line] - 1 if end_line < len(starts) else len(source)
    return Region(start_position=start, length=end - start, kind=kind)


def build(source: str, root: Region, settings: Settings | None = None) -> FoldableTree:
    result = ParseResult(file=Path("scenario.py"), source=source, root=root, associations=[])
    return FoldTreeBuilder(settings).build(result)


@pytest.fixture
def scenario_tree() -> FoldableTree:
    """Root (1-20) with child A (2-10, terms x y) and child B (11-19, no terms)."""
    source = numbered_source(20)
    root = line_region(source, 1, 20, "module")
    a = root.add_child(line_region(source, 2, 10, "function"))
    a.terms = ["x", "y"]
    root.add_child(line_region(source, 11, 19, "function"))
    return build(source, root)


@pytest.fixture
def nested_tree() -> FoldableTree:
    """Three levels: module (1-30) > class (2-20) > methods (3-10, 11-19); function (21-29)."""
    source = numbered_source(30)
    root = line_region(source, 1, 30, "module")
    root.terms = ["module"]
    cls = root.add_child(line_region(source, 2, 20, "class"))
    cls.terms = ["order", "queue"]
    first = cls.add_child(line_region(source, 3, 10, "method"))
    first.terms = ["push", "order", "order"]
    second = cls.add_child(line_region(source, 11, 19, "method"))
    second.terms = ["pop", "queue"]
    func = root.add_child(line_region(source, 21, 29, "function"))
    func.terms = ["drain"]
    return build(source, root)


class RecordingSampler:
    """Sampler stub returning a fixed score and recording every call."""

    def __init__(self, score: float = 1.0) -> None:
        self.score = score
        self.calls: list[dict[str, object]] = []

    def _record(self, method: str, **kwargs: object) -> float:
        self.calls.append({"method": method, **kwargs})
        return self.score

    def get_surprise_tokens(self, terms: Counter, project: str, file: str, node_id: int) -> float:
        return self._record("surprise", terms=Counter(terms), project=project, file=file, node_id=node_id)

    def get_minus_conditional_surprise(
        self, terms: Counter, given: Counter, project: str, file: str, node_id: int
    ) -> float:
        return self._record(
            "minus_cond", terms=Counter(terms), given=Counter(given), file=file, node_id=node_id
        )

    def get_conditional_surprise(
        self, terms: Counter, given: Counter, project: str, file: str, node_id: int
    ) -> float:
        return self._record(
            "cond", terms=Counter(terms), given=Counter(given), file=file, node_id=node_id
        )

    def get_shifted_log_prob_tokens(
        self, shift: float, terms: Counter, project: str, file: str, node_id: int
    ) -> float:
        return self._record("log_prob", shift=shift, terms=Counter(terms), node_id=node_id)

    def get_shifted_specific_log_prob_tokens(
        self, shift: float, terms: Counter, variant: str, project: str, file: str, node_id: int
    ) -> float:
        return self._record(
            "specific", shift=shift, terms=Counter(terms), variant=variant, node_id=node_id
        )

    def get_kl_div(self, variant: str, project: str, file: str, node_ids: frozenset[int]) -> float:
        return self._record("kl_div", variant=variant, node_ids=frozenset(node_ids))


@pytest.fixture
def sampler() -> RecordingSampler:
    return RecordingSampler()
