"""
Front End Error Hierarchy
=========================

Exceptions raised by the tokenizer and parser. All of them are syntax
errors: there is no separate lexical category, malformed numbers and stray
characters surface as parse failures like everything else.

Exception Hierarchy
-------------------
FrontendError (base for all front end errors)
└── KSyntaxError
    ├── UnexpectedTokenError - a specific token was required
    ├── UnknownPrimaryError - the token starts no primary expression
    ├── ArgumentListError - missing ',' or ')' in call arguments
    ├── MalformedNumberError - numeric text such as '1.2.3'
    └── NestingTooDeepError - nesting limit exceeded

Example:
    calc.ks:3:9: error: expected ')'
        def f(x y
                ^
    hint: close the parameter list with ')'
"""

from typing import Optional, List

from kscope.errors import KscopeError, SourceLocation


# =============================================================================
# Base Front End Exception
# =============================================================================

class FrontendError(KscopeError):
    """
    Base exception for all front end errors.

    Attributes:
        message: The error description
        location: Where in the source the error occurred
        hint: A suggestion for fixing the error
        source_line: The source text of the offending line, if known
    """

    def __init__(
        self,
        message: str,
        location: Optional[SourceLocation] = None,
        hint: Optional[str] = None,
        source_line: Optional[str] = None,
    ):
        self.message = message
        self.location = location
        self.hint = hint
        self.source_line = source_line
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """
        Format the error message with location, source context, and hint.

            calc.ks:1:5: error: unknown token ')' when expecting an expression
                1 + )
                    ^
        """
        parts = []

        if self.location:
            parts.append(f"{self.location}: error: {self.message}")
        else:
            parts.append(f"error: {self.message}")

        if self.source_line is not None and self.location is not None:
            parts.append(f"    {self.source_line}")
            if self.location.column > 0:
                padding = " " * (4 + self.location.column - 1)
                parts.append(f"{padding}^")

        if self.hint:
            parts.append(f"hint: {self.hint}")

        return "\n".join(parts)

    def summary(self) -> str:
        """Return the single-line form 'location: error: message'."""
        if self.location:
            return f"{self.location}: error: {self.message}"
        return f"error: {self.message}"


# =============================================================================
# Syntax Errors
# =============================================================================

class KSyntaxError(FrontendError):
    """
    Syntax error in source text.

    Raised by the parser whenever the token stream does not match the
    grammar. Parsing routines never catch it themselves, so a failing
    child production aborts every enclosing production with it.
    """
    pass


class UnexpectedTokenError(KSyntaxError):
    """
    A specific token was required but something else was found.

    Examples:
        - missing '(' after a prototype name
        - missing ')' after a parenthesized expression
        - missing function name after 'def' or 'extern'
    """

    def __init__(
        self,
        expected: str,
        found: Optional[str] = None,
        location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
        hint: Optional[str] = None,
    ):
        self.expected = expected
        self.found = found

        message = f"expected {expected}"
        if found is not None:
            message = f"{message}, found {found}"

        super().__init__(
            message,
            location=location,
            hint=hint,
            source_line=source_line,
        )


class UnknownPrimaryError(KSyntaxError):
    """The current token cannot begin a primary expression."""

    def __init__(
        self,
        found: str,
        location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
    ):
        self.found = found
        super().__init__(
            f"unknown token {found} when expecting an expression",
            location=location,
            hint="an expression starts with a number, a name or '('",
            source_line=source_line,
        )


class ArgumentListError(KSyntaxError):
    """A call argument was followed by something other than ',' or ')'."""

    def __init__(
        self,
        found: str,
        location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
    ):
        self.found = found
        super().__init__(
            f"expected ')' or ',' in argument list, found {found}",
            location=location,
            source_line=source_line,
        )


class MalformedNumberError(KSyntaxError):
    """
    Numeric text that is not a valid decimal number.

    The tokenizer accepts any run of digits and dots; only runs with at
    most one dot and at least one digit denote a number.

    Example:
        1.2.3
    """

    def __init__(
        self,
        text: str,
        location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
    ):
        self.text = text
        super().__init__(
            f"malformed number '{text}'",
            location=location,
            hint="a number is digits with at most one '.'",
            source_line=source_line,
        )


class NestingTooDeepError(KSyntaxError):
    """Expressions are nested deeper than the parser allows."""

    def __init__(
        self,
        limit: int,
        location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
    ):
        self.limit = limit
        super().__init__(
            f"expression nesting exceeds the limit of {limit}",
            location=location,
            hint="raise max_depth if this input is legitimate",
            source_line=source_line,
        )


# =============================================================================
# Error Collection
# =============================================================================

class ErrorCollector:
    """
    Collects the syntax errors reported during a parsing session.

    The read loop keeps going after a failure, so errors accumulate here
    for callers that want a summary once the stream is exhausted.

    Example:
        collector = ErrorCollector()
        collector.add(error)
        if collector.has_errors():
            print(f"{collector.error_count()} error(s)")
    """

    def __init__(self):
        self.errors: List[FrontendError] = []

    def add(self, error: FrontendError) -> None:
        """Add an error to the collection."""
        self.errors.append(error)

    def has_errors(self) -> bool:
        """Return True if any errors have been collected."""
        return len(self.errors) > 0

    def error_count(self) -> int:
        """Return the number of collected errors."""
        return len(self.errors)
