"""
Core module: data models, exceptions, settings and the fold tree.

Models (models.py):
    - Span: Character and line extent of a region
    - Option: Cost/profit pair produced for each node by a pass
    - ProfitPolicy/ProfitFunction: Resolved content-scoring policy

Exceptions (exceptions.py):
    - CodefoldError: Base exception for all codefold errors
    - InvariantViolationError: Span/nesting/score data broke a tree invariant
    - ConfigurationError: Settings could not be resolved
    - ParseError: Source file could not be parsed

Tree (tree/):
    - FoldableTree/FoldableNode and the cost/profit passes
"""

from codefold.core.config import Settings, load_settings
from codefold.core.exceptions import (
    CodefoldError,
    ConfigurationError,
    InvariantViolationError,
    ParseError,
)
from codefold.core.models import Option, ProfitFunction, ProfitPolicy, Span
from codefold.core.sampler import TopicSampler

__all__ = [
    # Models
    "Option",
    "ProfitFunction",
    "ProfitPolicy",
    "Span",
    # Exceptions
    "CodefoldError",
    "ConfigurationError",
    "InvariantViolationError",
    "ParseError",
    # Settings
    "Settings",
    "load_settings",
    # Oracle
    "TopicSampler",
]
