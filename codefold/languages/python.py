"""Python parser producing foldable regions and their terms."""

from __future__ import annotations

import ast
import io
import re
import tokenize
from pathlib import Path

from codefold.core.exceptions import ParseError
from codefold.languages.models import ParseResult, Region, RegionKind, TermAssociation

_WORD = re.compile(r"[A-Za-z_][A-Za-z0-9_]*")
_SUBWORD = re.compile(r"[A-Z]+(?![a-z])|[A-Z]?[a-z]+|\d+")

_MIN_TERM_LENGTH = 2


def split_identifier(name: str) -> list[str]:
    """Split snake_case / camelCase identifiers into lowercase subtokens."""
    terms: list[str] = []
    for part in name.split("_"):
        for sub in _SUBWORD.findall(part):
            if sub.isdigit() or len(sub) < _MIN_TERM_LENGTH:
                continue
            terms.append(sub.lower())
    return terms


def split_text(text: str) -> list[str]:
    """Terms of free text such as comments and docstrings."""
    terms: list[str] = []
    for word in _WORD.findall(text):
        terms.extend(split_identifier(word))
    return terms


class PythonParser:
    """Parser for Python source files using the ast and tokenize modules."""

    def supports(self, file: Path) -> bool:
        """Check if this parser supports the given file."""
        return file.suffix == ".py"

    def parse(self, file: Path) -> ParseResult:
        """Parse a Python file into regions and term associations."""
        try:
            source = file.read_text(encoding="utf-8")
        except UnicodeDecodeError as e:
            raise ParseError(f"Cannot read {file}: {e}") from e

        return self.parse_source(source, file)

    def parse_source(self, source: str, file: Path = Path("<string>")) -> ParseResult:
        """Parse Python source text."""
        try:
            tree = ast.parse(source, filename=str(file))
        except SyntaxError as e:
            raise ParseError(f"Syntax error in {file}: {e}") from e

        visitor = _RegionVisitor(source)
        visitor.visit(tree)

        try:
            comments = _comment_associations(source, visitor.root, visitor.offsets)
        except (tokenize.TokenError, SyntaxError) as e:
            raise ParseError(f"Cannot tokenize {file}: {e}") from e

        return ParseResult(
            file=file,
            source=source,
            root=visitor.root,
            associations=visitor.associations + comments,
        )


class _Offsets:
    """Maps (line, column) positions to character offsets."""

    def __init__(self, source: str) -> None:
        self._lines = source.split("\n")
        self._starts = [0]
        for line in self._lines[:-1]:
            self._starts.append(self._starts[-1] + len(line) + 1)

    def from_ast(self, lineno: int, col_offset: int) -> int:
        """Offset of an ast position; ast columns count UTF-8 bytes."""
        line = self._lines[lineno - 1]
        col = len(line.encode("utf-8")[:col_offset].decode("utf-8", errors="ignore"))
        return self._starts[lineno - 1] + col

    def from_token(self, row: int, col: int) -> int:
        """Offset of a tokenize position; token columns count characters."""
        return self._starts[row - 1] + col


class _RegionVisitor(ast.NodeVisitor):
    """AST visitor that builds the region skeleton and attributes identifier terms."""

    def __init__(self, source: str) -> None:
        self.offsets = _Offsets(source)
        self.root = Region(start_position=0, length=len(source), kind=RegionKind.MODULE.value)
        self.associations: list[TermAssociation] = []
        self._stack: list[Region] = [self.root]

    def _current(self) -> Region:
        return self._stack[-1]

    def _region_for(self, node: ast.stmt, kind: RegionKind, name: str | None = None) -> Region:
        start = self.offsets.from_ast(node.lineno, node.col_offset)
        end = self.offsets.from_ast(node.end_lineno or node.lineno, node.end_col_offset or 0)
        return Region(start_position=start, length=end - start, kind=kind.value, name=name)

    def _add_terms(self, terms: list[str]) -> None:
        self._current().terms.extend(terms)

    def _visit_fields(self, node: ast.AST, skip: tuple[str, ...] = ()) -> None:
        for name, value in ast.iter_fields(node):
            if name in skip:
                continue
            if isinstance(value, list):
                for item in value:
                    if isinstance(item, ast.AST):
                        self.visit(item)
            elif isinstance(value, ast.AST):
                self.visit(value)

    def _enter(self, region: Region) -> None:
        self._current().add_child(region)
        self._stack.append(region)

    def _leave(self) -> None:
        self._stack.pop()

    def _docstring(self, node: ast.Module | ast.ClassDef | ast.FunctionDef | ast.AsyncFunctionDef) -> None:
        """Graft the docstring of ``node``, if any, under the current region."""
        if not node.body:
            return
        first = node.body[0]
        if not (
            isinstance(first, ast.Expr)
            and isinstance(first.value, ast.Constant)
            and isinstance(first.value.value, str)
        ):
            return
        region = self._region_for(first, RegionKind.DOCSTRING)
        self.associations.append(
            TermAssociation(node=region, carrier=self._current(), terms=split_text(first.value.value))
        )

    def visit_Module(self, node: ast.Module) -> None:
        """Group runs of top-level imports into one region."""
        self._docstring(node)
        run: list[ast.stmt] = []
        for stmt in node.body:
            if isinstance(stmt, (ast.Import, ast.ImportFrom)):
                run.append(stmt)
                continue
            self._visit_imports(run)
            run = []
            self.visit(stmt)
        self._visit_imports(run)

    def _visit_imports(self, run: list[ast.stmt]) -> None:
        if not run:
            return
        first, last = run[0], run[-1]
        if (last.end_lineno or last.lineno) == first.lineno:
            for stmt in run:
                self.visit(stmt)
            return
        start = self.offsets.from_ast(first.lineno, first.col_offset)
        end = self.offsets.from_ast(last.end_lineno or last.lineno, last.end_col_offset or 0)
        self._enter(Region(start_position=start, length=end - start, kind=RegionKind.IMPORTS.value))
        for stmt in run:
            self.visit(stmt)
        self._leave()

    def visit_alias(self, node: ast.alias) -> None:
        for part in node.name.split("."):
            self._add_terms(split_identifier(part))
        if node.asname:
            self._add_terms(split_identifier(node.asname))

    def visit_ImportFrom(self, node: ast.ImportFrom) -> None:
        for part in (node.module or "").split("."):
            self._add_terms(split_identifier(part))
        self.generic_visit(node)

    def visit_ClassDef(self, node: ast.ClassDef) -> None:
        for decorator in node.decorator_list:
            self.visit(decorator)
        self._enter(self._region_for(node, RegionKind.CLASS, node.name))
        self._add_terms(split_identifier(node.name))
        self._docstring(node)
        self._visit_fields(node, skip=("decorator_list",))
        self._leave()

    def visit_FunctionDef(self, node: ast.FunctionDef) -> None:
        self._visit_function(node)

    def visit_AsyncFunctionDef(self, node: ast.AsyncFunctionDef) -> None:
        self._visit_function(node)

    def _visit_function(self, node: ast.FunctionDef | ast.AsyncFunctionDef) -> None:
        """Common handler for sync and async functions."""
        for decorator in node.decorator_list:
            self.visit(decorator)
        is_method = self._current().kind == RegionKind.CLASS.value
        kind = RegionKind.METHOD if is_method else RegionKind.FUNCTION
        self._enter(self._region_for(node, kind, node.name))
        self._add_terms(split_identifier(node.name))
        self._docstring(node)
        self._visit_fields(node, skip=("decorator_list",))
        self._leave()

    def visit_arg(self, node: ast.arg) -> None:
        self._add_terms(split_identifier(node.arg))
        self.generic_visit(node)

    def visit_keyword(self, node: ast.keyword) -> None:
        if node.arg:
            self._add_terms(split_identifier(node.arg))
        self.generic_visit(node)

    def visit_Name(self, node: ast.Name) -> None:
        self._add_terms(split_identifier(node.id))

    def visit_Attribute(self, node: ast.Attribute) -> None:
        self.visit(node.value)
        self._add_terms(split_identifier(node.attr))

    def _visit_block(self, node: ast.stmt) -> None:
        """Multi-line compound statements become block regions."""
        if (node.end_lineno or node.lineno) == node.lineno:
            self.generic_visit(node)
            return
        self._enter(self._region_for(node, RegionKind.BLOCK, type(node).__name__.lower()))
        self.generic_visit(node)
        self._leave()

    visit_If = _visit_block
    visit_For = _visit_block
    visit_AsyncFor = _visit_block
    visit_While = _visit_block
    visit_Try = _visit_block
    visit_TryStar = _visit_block
    visit_With = _visit_block
    visit_AsyncWith = _visit_block
    visit_Match = _visit_block


def _innermost(root: Region, start: int, end: int) -> Region:
    """Deepest skeleton region containing [start, end)."""
    region = root
    while True:
        for child in region.children:
            if child.contains(start, end):
                region = child
                break
        else:
            return region


def _comment_associations(source: str, root: Region, offsets: _Offsets) -> list[TermAssociation]:
    """Group comments into regions and attach each to its innermost enclosing region.

    Consecutive whole-line comments in the same column form one block; a
    comment that follows code on its line is a block of its own.
    """
    blocks: list[list[tokenize.TokenInfo]] = []
    for tok in tokenize.generate_tokens(io.StringIO(source).readline):
        if tok.type != tokenize.COMMENT:
            continue
        row, col = tok.start
        standalone = not tok.line[:col].strip()
        if blocks and standalone:
            prev = blocks[-1][-1]
            prev_standalone = not prev.line[: prev.start[1]].strip()
            if prev_standalone and prev.start[0] == row - 1 and prev.start[1] == col:
                blocks[-1].append(tok)
                continue
        blocks.append([tok])

    associations: list[TermAssociation] = []
    for block in blocks:
        start = offsets.from_token(*block[0].start)
        end = offsets.from_token(*block[-1].end)
        region = Region(start_position=start, length=end - start, kind=RegionKind.COMMENT.value)
        terms: list[str] = []
        for tok in block:
            terms.extend(split_text(tok.string.lstrip("#")))
        associations.append(
            TermAssociation(node=region, carrier=_innermost(root, start, end), terms=terms)
        )
    return associations
