"""
Codefold: choose which regions of a source file to show unfolded.

Codefold builds a fold tree over the syntactic regions of a file and prices
each region for a compressed view under a line budget:
- Cost: lines an unfolded region adds, given what is already unfolded
- Profit: how informative the region is, according to a content model

Usage:
    from pathlib import Path

    from codefold.core import load_settings
    from codefold.core.builder import FoldTreeBuilder
    from codefold.core.tree import topic_sum_options

    settings = load_settings(profit_type="NoContentModel")
    tree = FoldTreeBuilder(settings).build_file(Path("module.py"))
    options = topic_sum_options(tree, settings)
"""

__version__ = "0.1.0"
