"""Protocols for the parser boundary."""

from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path
from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from codefold.languages.models import ParseResult


class SyntaxNode(Protocol):
    """A parsed region. Identity is object identity."""

    @property
    def start_position(self) -> int:
        """Character offset of the first character."""
        ...

    @property
    def length(self) -> int:
        """Number of characters covered."""
        ...

    @property
    def kind(self) -> str: ...

    @property
    def children(self) -> Sequence[SyntaxNode]: ...


class LanguageParser(Protocol):
    """Protocol for language parsers."""

    def parse(self, file: Path) -> ParseResult:
        """Parse a file into a region skeleton and its term associations."""
        ...

    def supports(self, file: Path) -> bool:
        """Check if this parser supports the given file."""
        ...
