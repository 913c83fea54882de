"""
Language parsers: turn source files into foldable regions.

Components:
    - SyntaxNode: Protocol for a parsed region (offset, length, kind, children)
    - LanguageParser: Protocol defining the parser interface
    - PythonParser: ast/tokenize based parser for Python files
    - ParseResult: Region skeleton plus term associations

The parser produces:
    - Regions: module, import runs, classes, functions, multi-line blocks
    - Terms: identifier subtokens attributed to the innermost region
    - Associations: comments and docstrings with their terms, to be grafted
      under the region that carries them

Adding a new language:
    1. Create a parser class implementing LanguageParser protocol
    2. Implement parse() to return ParseResult
    3. Implement supports() to check file extensions
"""

from codefold.languages.base import LanguageParser, SyntaxNode
from codefold.languages.models import ParseResult, Region, RegionKind, TermAssociation
from codefold.languages.python import PythonParser

__all__ = [
    "LanguageParser",
    "ParseResult",
    "PythonParser",
    "Region",
    "RegionKind",
    "SyntaxNode",
    "TermAssociation",
]
