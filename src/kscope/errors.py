"""
kscope Error Hierarchy
======================

This module defines the root of the exception hierarchy for kscope.
All exceptions inherit from KscopeError, allowing callers to catch all
kscope-related errors with a single except clause if desired.

Exception Hierarchy
-------------------
KscopeError (base)
└── FrontendError (tokenizer and parser, see kscope.frontend.errors)
    └── KSyntaxError - syntax errors in source
        ├── UnexpectedTokenError - required token missing
        ├── UnknownPrimaryError - token cannot start an expression
        ├── ArgumentListError - malformed call argument list
        ├── MalformedNumberError - numeric literal is not a valid number
        └── NestingTooDeepError - expression nesting limit exceeded

Error messages follow this format:
    filename:line:column: error: description
    source_line_text
        ^ (pointer to error location)
    hint: suggestion for fixing (when available)
"""

from dataclasses import dataclass


# =============================================================================
# Base Exception Class
# =============================================================================

class KscopeError(Exception):
    """
    Base exception for all kscope errors.

    Every exception raised by the package inherits from this class:

        try:
            tree = parse_expression(text)
        except KscopeError as e:
            print(f"Error: {e}")
    """
    pass


# =============================================================================
# Source Location Tracking
# =============================================================================

@dataclass(frozen=True)
class SourceLocation:
    """
    Represents a location in source text for error reporting.

    Tokens and AST nodes carry one of these so diagnostics can point at
    the exact character where a construct begins.

    Attributes:
        filename: Name of the source (or "<input>" for string input)
        line: Line number (1-indexed)
        column: Column number (1-indexed)
    """
    filename: str
    line: int
    column: int

    def __str__(self) -> str:
        """Format as 'filename:line:column' for error messages."""
        return f"{self.filename}:{self.line}:{self.column}"
