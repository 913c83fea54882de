"""CLI entry point for Codefold."""

import json
import logging
import math
from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console
from rich.table import Table

from codefold.core.builder import FoldTreeBuilder
from codefold.core.config import Settings, load_settings
from codefold.core.exceptions import CodefoldError
from codefold.core.models import Option
from codefold.core.tree import FoldableNode, FoldableTree, baseline_options, topic_sum_options

app = typer.Typer(
    name="codefold",
    help="Inspect fold trees and unfold costs for Python source files.",
    no_args_is_help=True,
)
console = Console()

_MAX_TEXT_DISPLAY = 40


@app.callback()
def main(
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Log debug output")] = False,
) -> None:
    """Fold tree diagnostics."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


def build_tree(file: Path, settings: Settings | None = None) -> FoldableTree:
    """Build the fold tree for ``file``, exiting with a message on errors."""
    try:
        return FoldTreeBuilder(settings).build_file(file)
    except CodefoldError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(code=1) from e


def preview(node: FoldableNode) -> str:
    """First line of the node's own text, shortened for display."""
    lines = node.node_to_string().strip().splitlines()
    text = lines[0].strip() if lines else ""
    if len(text) > _MAX_TEXT_DISPLAY:
        text = text[: _MAX_TEXT_DISPLAY - 3] + "..."
    return text


def format_profit(option: Option) -> str:
    if option.profit is None:
        return "-"
    if option.is_worthless:
        return "-inf"
    return f"{option.profit:.4g}"


def json_profit(option: Option) -> float | str | None:
    """Profit as a JSON value; infinities become strings."""
    if option.profit is None or math.isfinite(option.profit):
        return option.profit
    return str(option.profit)


def node_to_dict(node: FoldableNode) -> dict[str, object]:
    return {
        "id": node.node_id,
        "kind": node.kind,
        "level": node.level,
        "start_line": node.span.start_line,
        "end_line": node.span.end_line,
        "unique_cost": node.unique_cost(),
        "terms": dict(node.term_freqs),
    }


@app.command()
def tree(
    file: Annotated[Path, typer.Argument(help="Python file to fold")],
    output_json: Annotated[bool, typer.Option("--json", "-j", help="Output as JSON")] = False,
) -> None:
    """Show the fold tree of a file."""
    fold_tree = build_tree(file)

    if output_json:

        def tree_to_dict(node: FoldableNode) -> dict[str, object]:
            result = node_to_dict(node)
            result["children"] = [tree_to_dict(c) for c in node.children]
            return result

        print(json.dumps(tree_to_dict(fold_tree.root)))
        return

    console.print(f"\n[bold]Fold tree for [cyan]{file.name}[/cyan][/] ({fold_tree.node_count} nodes)\n")

    def print_node(node: FoldableNode, prefix: str = "", is_last: bool = True, is_root: bool = False) -> None:
        branch = "" if is_root else ("└─ " if is_last else "├─ ")
        terms = sum(node.term_freqs.values())
        console.print(
            f"{prefix}{branch}[cyan]#{node.node_id}[/] {node.kind} "
            f"[dim]lines {node.span.start_line}-{node.span.end_line}, "
            f"unique {node.unique_cost()}, {terms} terms[/]"
        )
        child_prefix = prefix if is_root else prefix + ("   " if is_last else "│  ")
        for i, child in enumerate(node.children):
            print_node(child, child_prefix, i == len(node.children) - 1)

    print_node(fold_tree.root, is_root=True)


@app.command()
def options(
    file: Annotated[Path, typer.Argument(help="Python file to fold")],
    policy: Annotated[
        str | None,
        typer.Option(
            "--policy",
            "-p",
            help="Profit function, overriding config and env (only NoContentModel runs without a sampler)",
        ),
    ] = None,
    baseline: Annotated[
        bool, typer.Option("--baseline", help="Costs only, without consulting a content model")
    ] = False,
    unfold: Annotated[
        list[int] | None, typer.Option("--unfold", "-u", help="Node ids to unfold, in order")
    ] = None,
    budget: Annotated[float | None, typer.Option("--budget", "-b", help="Display line budget")] = None,
    output_json: Annotated[bool, typer.Option("--json", "-j", help="Output as JSON")] = False,
) -> None:
    """Show the cost (and profit) of unfolding each node."""
    try:
        settings = load_settings(profit_type=policy)
    except CodefoldError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(code=1) from e

    fold_tree = build_tree(file, settings)
    if budget is not None:
        fold_tree.set_budget(budget)

    try:
        for node_id in unfold or []:
            if not 0 <= node_id < fold_tree.node_count:
                console.print(f"[red]No node #{node_id} in {file.name}[/red]")
                raise typer.Exit(code=1)
            node = fold_tree.node(node_id)
            # pay what the node costs given everything unfolded so far
            fold_tree.shrink_budget(baseline_options(fold_tree)[node].cost)
            node.set_unfolded()

        if baseline:
            table = baseline_options(fold_tree)
        else:
            table = topic_sum_options(fold_tree, settings)
    except CodefoldError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(code=1) from e

    if output_json:
        result = {
            "file": str(file),
            "budget": fold_tree.budget,
            "options": [
                {
                    "id": node.node_id,
                    "cost": option.cost,
                    "profit": json_profit(option),
                }
                for node, option in table.items()
            ],
        }
        print(json.dumps(result))
        return

    view = Table(title=f"Unfold options for {file.name}")
    view.add_column("id", justify="right", style="cyan")
    view.add_column("kind")
    view.add_column("lines", style="dim")
    view.add_column("cost", justify="right")
    view.add_column("profit", justify="right")
    view.add_column("text", style="dim")
    for node, option in table.items():
        state = " [green](unfolded)[/]" if node.is_unfolded else ""
        view.add_row(
            str(node.node_id),
            node.kind + state,
            f"{node.span.start_line}-{node.span.end_line}",
            str(option.cost),
            format_profit(option),
            preview(node),
        )
    console.print(view)
    if budget is not None:
        console.print(f"[dim]Remaining budget: {fold_tree.budget:g} lines[/]")


@app.command()
def terms(
    file: Annotated[Path, typer.Argument(help="Python file to fold")],
    output_json: Annotated[bool, typer.Option("--json", "-j", help="Output as JSON")] = False,
) -> None:
    """Show the terms attributed to each node."""
    fold_tree = build_tree(file)
    id_terms = fold_tree.get_id_terms()

    if output_json:
        print(json.dumps({str(node_id): dict(counts) for node_id, counts in id_terms.items()}))
        return

    for node_id, counts in id_terms.items():
        node = fold_tree.node(node_id)
        console.print(f"[cyan]#{node_id}[/cyan] {node.kind} [dim]{node.print_range()}[/]")
        if not counts:
            console.print("  [dim]no terms[/]")
            continue
        listed = ", ".join(f"{term}×{n}" if n > 1 else term for term, n in counts.most_common())
        console.print(f"  {listed}")


if __name__ == "__main__":
    app()
