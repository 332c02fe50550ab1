"""
kscope Front End
================

Tokenizer and operator-precedence parser for the kscope expression
language. The front end checks syntax and builds trees; it does not
evaluate, type check or resolve names.

Pipeline
--------
    Characters → Lexer → Tokens → Parser → AST → Driver results

Language
--------
    # A comment runs to the end of the line
    extern sin(x);
    def square(x) x * x;
    def poly(a b) a * a + 2 * b - 1;
    square(sin(0.5)) + poly(1, 2);

- Numbers are floating point literals such as 1, 1.5, .5
- Function definitions use 'def', external declarations use 'extern'
- Prototype parameters are separated by spaces, call arguments by commas
- Binary operators: '<' (10), '+' (20), '-' (30), '*' (40); the table
  can be changed before parsing
- Any other expression at top level is parsed as an anonymous function

Usage
-----
>>> from kscope.frontend import parse_program
>>> results = parse_program("def double(x) x + x; double(21)")
>>> [r.kind.status_message for r in results]
['Parsed a function definition.', 'Parsed a top-level expr']
"""

from kscope.frontend.lexer import Lexer, Token, TokenType, tokenize
from kscope.frontend.parser import (
    Parser,
    DEFAULT_PRECEDENCE,
    DEFAULT_MAX_DEPTH,
    max_depth_limit,
    parse_expression,
)
from kscope.frontend.driver import (
    Driver,
    FrontendOptions,
    ConstructKind,
    ParseResult,
    parse_program,
)
from kscope.frontend.ast import (
    ANONYMOUS_NAME,
    ASTNode,
    ASTPrinter,
    ASTVisitor,
    BinaryExpression,
    CallExpression,
    Expression,
    Function,
    NodeKind,
    NumberLiteral,
    Prototype,
    VariableReference,
    format_expression,
)
from kscope.frontend.errors import (
    FrontendError,
    KSyntaxError,
    UnexpectedTokenError,
    UnknownPrimaryError,
    ArgumentListError,
    MalformedNumberError,
    NestingTooDeepError,
    ErrorCollector,
)

__all__ = [
    # Lexer
    "Lexer",
    "Token",
    "TokenType",
    "tokenize",
    # Parser
    "Parser",
    "DEFAULT_PRECEDENCE",
    "DEFAULT_MAX_DEPTH",
    "max_depth_limit",
    "parse_expression",
    # Driver
    "Driver",
    "FrontendOptions",
    "ConstructKind",
    "ParseResult",
    "parse_program",
    # AST Nodes
    "ANONYMOUS_NAME",
    "ASTNode",
    "ASTPrinter",
    "ASTVisitor",
    "BinaryExpression",
    "CallExpression",
    "Expression",
    "Function",
    "NodeKind",
    "NumberLiteral",
    "Prototype",
    "VariableReference",
    "format_expression",
    # Errors
    "FrontendError",
    "KSyntaxError",
    "UnexpectedTokenError",
    "UnknownPrimaryError",
    "ArgumentListError",
    "MalformedNumberError",
    "NestingTooDeepError",
    "ErrorCollector",
]
