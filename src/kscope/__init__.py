"""
kscope - Front End for a Toy Expression Language
================================================

kscope reads programs written in a small functional expression language
and turns them into abstract syntax trees, one top-level construct at a
time. It is meant to sit in front of an interpreter or code generator,
which consume the trees it produces.

Main Components
---------------
- **frontend**: lexer, precedence-climbing parser, AST and read loop
- **cli**: the ``ksrepl`` command (interactive loop or file checker)

Quick Start
-----------
Parse a program:
    >>> from kscope import parse_program
    >>> for result in parse_program("def f(x) x * 2; f(4)"):
    ...     print(result.kind.status_message)
    Parsed a function definition.
    Parsed a top-level expr

Parse a single expression:
    >>> from kscope import parse_expression, format_expression
    >>> format_expression(parse_expression("1 + 2 * 3"))
    '(1 + (2 * 3))'

Or use the command-line tool:
    $ ksrepl program.ks --ast
    $ echo "def f(x) x + 1" | ksrepl
"""

__version__ = "1.0.0"

# =============================================================================
# Public API Exports
# =============================================================================

from kscope.errors import KscopeError, SourceLocation
from kscope.frontend import (
    Lexer,
    Token,
    TokenType,
    Parser,
    Driver,
    FrontendOptions,
    ConstructKind,
    ParseResult,
    parse_program,
    parse_expression,
    format_expression,
    DEFAULT_PRECEDENCE,
    NumberLiteral,
    VariableReference,
    BinaryExpression,
    CallExpression,
    Prototype,
    Function,
    FrontendError,
    KSyntaxError,
)

__all__ = [
    # Version info
    "__version__",
    # Exception hierarchy
    "KscopeError",
    "SourceLocation",
    "FrontendError",
    "KSyntaxError",
    # Front end
    "Lexer",
    "Token",
    "TokenType",
    "Parser",
    "Driver",
    "FrontendOptions",
    "ConstructKind",
    "ParseResult",
    "parse_program",
    "parse_expression",
    "format_expression",
    "DEFAULT_PRECEDENCE",
    # AST
    "NumberLiteral",
    "VariableReference",
    "BinaryExpression",
    "CallExpression",
    "Prototype",
    "Function",
]
