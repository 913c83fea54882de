"""Codefold custom exceptions."""


class CodefoldError(Exception):
    """Base exception for Codefold errors."""


class InvariantViolationError(CodefoldError):
    """Span, nesting or score data broke a tree invariant."""


class ConfigurationError(CodefoldError):
    """Settings could not be resolved into a runnable configuration."""


class ParseError(CodefoldError):
    """Error parsing a source file."""
