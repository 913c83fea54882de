"""Integration tests for parser, builder and the option passes."""

import math
import tempfile
from collections import Counter
from pathlib import Path

import pytest

from codefold.core.builder import FoldTreeBuilder
from codefold.core.config import Settings
from codefold.core.tree import FoldableTree, baseline_options, topic_sum_options
from codefold.languages.python import PythonParser, split_identifier, split_text

SAMPLE = '''"""Order queue helpers."""

import collections
import logging


class OrderQueue:
    """Bounded queue of orders."""

    def __init__(self, limit):
        # remember the limit
        self.limit = limit
        self.items = collections.deque()

    def push(self, order):
        if len(self.items) >= self.limit:
            raise OverflowError(order)
        self.items.append(order)


def drain(queue):
    for order in queue.items:
        logging.info(order)
'''


@pytest.fixture
def temp_dir():
    """Create a temporary directory for tests."""
    with tempfile.TemporaryDirectory() as td:
        yield Path(td)


@pytest.fixture
def sample_python_file(temp_dir: Path) -> Path:
    """Create a sample Python file for testing."""
    file_path = temp_dir / "orders.py"
    file_path.write_text(SAMPLE)
    return file_path


@pytest.fixture
def fold_tree(sample_python_file: Path) -> FoldableTree:
    return FoldTreeBuilder().build_file(sample_python_file)


def build_source(source: str) -> FoldableTree:
    return FoldTreeBuilder().build(PythonParser().parse_source(source, Path("snippet.py")))


class TestTermSplitting:
    """Tests for identifier and text splitting."""

    @pytest.mark.parametrize(
        "name, expected",
        [
            ("order_queue", ["order", "queue"]),
            ("OrderQueue", ["order", "queue"]),
            ("parseHTTPResponse", ["parse", "http", "response"]),
            ("__init__", ["init"]),
            ("x1", []),
            ("utf8_codec", ["utf", "codec"]),
        ],
    )
    def test_split_identifier(self, name: str, expected: list[str]) -> None:
        assert split_identifier(name) == expected

    def test_split_text(self) -> None:
        assert split_text("Drain the orderQueue, then stop.") == [
            "drain",
            "the",
            "order",
            "queue",
            "then",
            "stop",
        ]


class TestFoldTreeStructure:
    """Tests for the tree built from a real file."""

    def test_nodes_in_creation_order(self, fold_tree: FoldableTree) -> None:
        kinds = [fold_tree.node(i).kind for i in range(fold_tree.node_count)]
        assert kinds == [
            "module",
            "imports",
            "class",
            "method",
            "method",
            "block",
            "function",
            "block",
            "docstring",
            "docstring",
            "comment",
        ]

    def test_line_ranges(self, fold_tree: FoldableTree) -> None:
        ranges = [fold_tree.node(i).print_range() for i in range(fold_tree.node_count)]
        assert ranges == [
            "(1, 23)",
            "(3, 4)",
            "(7, 18)",
            "(10, 13)",
            "(15, 18)",
            "(16, 17)",
            "(21, 23)",
            "(22, 23)",
            "(1, 1)",
            "(8, 8)",
            "(11, 11)",
        ]

    def test_grafted_nodes_hang_under_carriers(self, fold_tree: FoldableTree) -> None:
        assert fold_tree.parent(fold_tree.node(8)) is fold_tree.root
        assert fold_tree.parent(fold_tree.node(9)).node_id == 2
        assert fold_tree.parent(fold_tree.node(10)).node_id == 3

    def test_levels(self, fold_tree: FoldableTree) -> None:
        levels = [fold_tree.node(i).level for i in range(fold_tree.node_count)]
        assert levels == [0, 1, 1, 2, 2, 3, 1, 2, 1, 2, 3]

    def test_unique_costs(self, fold_tree: FoldableTree) -> None:
        costs = [fold_tree.node(i).unique_cost() for i in range(fold_tree.node_count)]
        assert costs == [8, 1, 5, 3, 2, 1, 1, 1, 0, 0, 0]

    def test_node_count_matches_traversal(self, fold_tree: FoldableTree) -> None:
        assert len(fold_tree) == fold_tree.node_count == 11
        assert sorted(n.node_id for n in fold_tree) == list(range(11))

    def test_node_text_excludes_children(self, fold_tree: FoldableTree) -> None:
        text = fold_tree.node(4).node_to_string()
        assert "def push(self, order):" in text
        assert "self.items.append(order)" in text
        assert "OverflowError" not in text

    def test_str_lists_every_node(self, fold_tree: FoldableTree) -> None:
        text = str(fold_tree)
        assert text.startswith("\nLevel: 0 isUnfolded: False - Range (1, 23) : \n ")
        assert text.count("Level: ") == 11


class TestTermAttribution:
    """Tests for where terms end up."""

    def test_imports_carry_module_names(self, fold_tree: FoldableTree) -> None:
        assert fold_tree.node(1).term_freqs == Counter({"collections": 1, "logging": 1})

    def test_root_has_no_terms_of_its_own(self, fold_tree: FoldableTree) -> None:
        assert fold_tree.root.term_freqs == Counter()

    def test_method_terms(self, fold_tree: FoldableTree) -> None:
        terms = fold_tree.node(3).term_freqs
        assert terms["init"] == 1
        assert terms["self"] == 3
        assert terms["limit"] == 3
        assert terms["deque"] == 1

    def test_block_terms_stay_in_block(self, fold_tree: FoldableTree) -> None:
        block = fold_tree.node(5).term_freqs
        push = fold_tree.node(4).term_freqs
        assert block["overflow"] == 1
        assert "overflow" not in push
        assert push["append"] == 1

    def test_comment_and_docstring_terms(self, fold_tree: FoldableTree) -> None:
        assert fold_tree.node(10).term_freqs == Counter({"remember": 1, "the": 1, "limit": 1})
        assert fold_tree.node(9).term_freqs == Counter(
            {"bounded": 1, "queue": 1, "of": 1, "orders": 1}
        )

    def test_get_terms_keyed_by_span(self, fold_tree: FoldableTree) -> None:
        terms = fold_tree.get_terms()
        comment = fold_tree.node(10)
        assert terms[comment.span] == comment.term_freqs
        assert len(terms) == 11

    def test_get_id_terms_are_copies(self, fold_tree: FoldableTree) -> None:
        terms = fold_tree.get_id_terms()
        terms[3]["limit"] = 0
        assert fold_tree.node(3).term_freqs["limit"] == 3


class TestOptionsOnRealFile:
    """Tests for the option passes over a parsed file."""

    def test_baseline_costs(self, fold_tree: FoldableTree) -> None:
        options = baseline_options(fold_tree)
        costs = {node.node_id: option.cost for node, option in options.items()}
        assert costs == {0: 8, 1: 9, 2: 13, 3: 16, 4: 15, 5: 16, 6: 9, 7: 10, 8: 8, 9: 13, 10: 16}

    def test_unfolding_class_resets_its_subtree(self, fold_tree: FoldableTree) -> None:
        fold_tree.root.set_unfolded()
        fold_tree.node(2).set_unfolded()
        options = baseline_options(fold_tree)
        costs = {node.node_id: option.cost for node, option in options.items()}
        assert costs[0] == 0
        assert costs[2] == 0
        assert costs[3] == 3
        assert costs[5] == 3
        assert costs[6] == 1

    def test_no_content_model(self, fold_tree: FoldableTree) -> None:
        fold_tree.root.set_unfolded()
        options = topic_sum_options(fold_tree, Settings())
        profits = {node.node_id: option.profit for node, option in options.items()}
        assert profits[0] == 0.0
        assert all(profits[i] == 1.0 for i in range(1, 11))

    def test_root_without_terms_is_worthless(self, fold_tree: FoldableTree) -> None:
        options = topic_sum_options(fold_tree, Settings())
        assert options[fold_tree.root].profit == -math.inf


class TestComments:
    """Tests for comment grouping."""

    def test_consecutive_comments_form_one_block(self) -> None:
        tree = build_source("def f():\n    # first line\n    # second line\n    return 1\n")
        comments = [n for n in tree if n.kind == "comment"]
        assert len(comments) == 1
        assert comments[0].print_range() == "(2, 3)"
        assert tree.parent(comments[0]).kind == "function"
        assert tree.node(1).unique_cost() == 2

    def test_trailing_comment_is_own_block(self) -> None:
        tree = build_source("# header\nLIMIT = 3  # default limit\n")
        comments = [n for n in tree if n.kind == "comment"]
        assert [c.print_range() for c in comments] == ["(1, 1)", "(2, 2)"]
        assert comments[1].term_freqs == Counter({"default": 1, "limit": 1})
        assert all(tree.parent(c) is tree.root for c in comments)

    def test_single_line_imports_not_grouped(self) -> None:
        tree = build_source("import os\n\nx = os.sep\n")
        assert [n.kind for n in tree] == ["module"]
        assert tree.root.term_freqs["os"] == 2

    def test_decorator_terms_outside_function(self) -> None:
        tree = build_source("@cache\ndef compute(value):\n    return value\n")
        func = tree.node(1)
        assert tree.root.term_freqs["cache"] == 1
        assert "cache" not in func.term_freqs
        assert func.print_range() == "(2, 3)"
