"""Data models for language parser results."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path


class RegionKind(str, Enum):
    """Kinds of foldable regions produced by the parsers."""

    MODULE = "module"
    IMPORTS = "imports"
    CLASS = "class"
    FUNCTION = "function"
    METHOD = "method"
    BLOCK = "block"
    COMMENT = "comment"
    DOCSTRING = "docstring"


@dataclass(eq=False)
class Region:
    """A syntactic region of a source file (before it joins a fold tree)."""

    start_position: int
    length: int
    kind: str
    name: str | None = None
    children: list[Region] = field(default_factory=list)
    # identifier terms found directly in this region, not in its children
    terms: list[str] = field(default_factory=list)

    @property
    def end_position(self) -> int:
        return self.start_position + self.length

    def contains(self, start: int, end: int) -> bool:
        return self.start_position <= start and end <= self.end_position

    def add_child(self, child: Region) -> Region:
        self.children.append(child)
        return child


@dataclass(eq=False)
class TermAssociation:
    """A term-bearing region to graft under the region that carries it."""

    node: Region
    carrier: Region
    terms: list[str]


@dataclass
class ParseResult:
    """Result of parsing a file."""

    file: Path
    source: str
    root: Region
    associations: list[TermAssociation]
