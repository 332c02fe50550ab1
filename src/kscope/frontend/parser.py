"""
kscope Recursive Descent Parser
===============================

This module turns the lexer's token stream into AST nodes. There is one
routine per grammar production, plus precedence climbing for binary
operators. The parser holds exactly one token of lookahead and never
backtracks.

Grammar (Informal EBNF)
-----------------------
program         ::= (definition | extern | toplevel-expr | ';')*
definition      ::= 'def' prototype expression
extern          ::= 'extern' prototype
prototype       ::= IDENTIFIER '(' IDENTIFIER* ')'
expression      ::= primary binop-rhs
binop-rhs       ::= (BINOP primary)*
primary         ::= NUMBER | identifier-expr | '(' expression ')'
identifier-expr ::= IDENTIFIER | IDENTIFIER '(' (expression (',' expression)*)? ')'

Prototype parameters are separated by whitespace only, while call
arguments are separated by commas.

Operator Precedence
-------------------
Binary operators and their precedences come from a mutable table
(higher binds tighter). The default table is

    '<' 10,  '+' 20,  '-' 30,  '*' 40

Characters missing from the table, or registered with a precedence of
zero or less, are not binary operators; they end the expression. This is
how ';', ')' and ',' terminate expressions.

Error Handling
--------------
The ``_parse_*`` routines raise KSyntaxError, which unwinds every
enclosing production so no partial tree escapes. The public parse_*
methods catch it, record it, report it and return None.

Example Usage
-------------
>>> from kscope.frontend.parser import Parser
>>> parser = Parser.from_source("def f(x y) x + y * 2")
>>> parser.advance()
Token(DEF, 'def', 1:1)
>>> function = parser.parse_definition()
>>> function.prototype
Prototype(name='f', params=('x', 'y'))
"""

import logging
import sys
from typing import Callable, Mapping, Optional, TextIO, TypeVar, Union

from kscope.frontend.lexer import Lexer, Token, TokenType
from kscope.frontend.ast import (
    ANONYMOUS_NAME,
    Expression,
    NumberLiteral,
    VariableReference,
    BinaryExpression,
    CallExpression,
    Prototype,
    Function,
)
from kscope.frontend.errors import (
    KSyntaxError,
    UnexpectedTokenError,
    UnknownPrimaryError,
    ArgumentListError,
    MalformedNumberError,
    NestingTooDeepError,
    ErrorCollector,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Installed by default; the driver or caller may change it before use
DEFAULT_PRECEDENCE: dict[str, int] = {
    "<": 10,
    "+": 20,
    "-": 30,
    "*": 40,
}

DEFAULT_MAX_DEPTH = 100

# One nesting level costs up to four interpreter frames; the reserve is
# left for the frames of whoever calls the parser
_FRAMES_PER_LEVEL = 4
_RESERVED_FRAMES = 250


def max_depth_limit() -> int:
    """Largest max_depth that fits within the interpreter recursion limit."""
    return max(1, (sys.getrecursionlimit() - _RESERVED_FRAMES) // _FRAMES_PER_LEVEL)


def _report_to_log(error: KSyntaxError) -> None:
    logger.error(error.summary())


class Parser:
    """
    Recursive descent parser with one token of lookahead.

    The parser starts with no current token. Callers call advance() once
    to prime the lookahead, then dispatch on ``current``, which is what
    the driver's read loop does.

    Attributes:
        precedence: Binary operator precedence table (mutable)
        max_depth: Maximum expression nesting depth
        errors: Every syntax error reported so far
        last_error: The most recent syntax error, or None
    """

    def __init__(
        self,
        lexer: Lexer,
        precedence: Optional[Mapping[str, int]] = None,
        max_depth: int = DEFAULT_MAX_DEPTH,
        report: Optional[Callable[[KSyntaxError], None]] = None,
    ):
        """
        Initialize the parser.

        Args:
            lexer: Token source
            precedence: Operator table; a copy of DEFAULT_PRECEDENCE if None
            max_depth: Maximum nesting of expressions before
                NestingTooDeepError, between 1 and max_depth_limit()
            report: Diagnostic channel for syntax errors; logs at ERROR if None

        Raises:
            ValueError: If max_depth is out of range
        """
        limit = max_depth_limit()
        if not 1 <= max_depth <= limit:
            raise ValueError(f"max_depth must be between 1 and {limit}, got {max_depth}")

        self._lexer = lexer
        self.precedence: dict[str, int] = dict(
            DEFAULT_PRECEDENCE if precedence is None else precedence
        )
        self.max_depth = max_depth
        self._report = report or _report_to_log

        self.errors = ErrorCollector()
        self.last_error: Optional[KSyntaxError] = None

        # The single lookahead token; None until the first advance()
        self._current: Optional[Token] = None
        self._depth = 0

    @classmethod
    def from_source(
        cls,
        source: Union[str, TextIO],
        filename: str = "<input>",
        **kwargs,
    ) -> "Parser":
        """Create a parser reading directly from `source`."""
        return cls(Lexer(source, filename), **kwargs)

    # =========================================================================
    # Lookahead and Precedence Table
    # =========================================================================

    @property
    def current(self) -> Token:
        """The lookahead token (the first token is lexed on demand)."""
        if self._current is None:
            self.advance()
        return self._current

    def advance(self) -> Token:
        """Consume the current token and lex the next one into the buffer."""
        self._current = self._lexer.next_token()
        return self._current

    def install_operator(self, operator: str, precedence: int) -> None:
        """
        Register a binary operator or change its precedence.

        A precedence of zero or less leaves the character in the table
        but stops it acting as a binary operator.
        """
        if not isinstance(operator, str) or len(operator) != 1:
            raise ValueError(f"operator must be a single character, got {operator!r}")
        if not isinstance(precedence, int) or isinstance(precedence, bool):
            raise ValueError(f"precedence must be an integer, got {precedence!r}")
        self.precedence[operator] = precedence

    def token_precedence(self) -> int:
        """Precedence of the current token as a binary operator, or -1."""
        token = self.current
        if token.type is not TokenType.CHAR:
            return -1

        precedence = self.precedence.get(token.value, -1)
        if precedence <= 0:
            return -1
        return precedence

    # =========================================================================
    # Public Parsing Operations
    # =========================================================================

    def parse_expression(self) -> Optional[Expression]:
        """Parse one expression, or return None on a syntax error."""
        return self._attempt(self._parse_expression)

    def parse_definition(self) -> Optional[Function]:
        """Parse ``'def' prototype expression``, or return None."""
        return self._attempt(self._parse_definition)

    def parse_extern(self) -> Optional[Prototype]:
        """Parse ``'extern' prototype``, or return None."""
        return self._attempt(self._parse_extern)

    def parse_top_level_expr(self) -> Optional[Function]:
        """Parse a bare expression as an anonymous function, or return None."""
        return self._attempt(self._parse_top_level_expr)

    def _attempt(self, production: Callable[[], T]) -> Optional[T]:
        try:
            return production()
        except KSyntaxError as e:
            error = e
        except RecursionError:
            # The caller's own stack left less room than max_depth assumes
            self._depth = 0
            error = self._nesting_error()

        self.last_error = error
        self.errors.add(error)
        logger.debug(f"{production.__name__} failed at {self.current!r}")
        self._report(error)
        return None

    # =========================================================================
    # Error Helpers
    # =========================================================================

    def _source_line(self, token: Token) -> Optional[str]:
        return self._lexer.line_text(token.line)

    def _expect_char(self, char: str, hint: Optional[str] = None) -> Token:
        """Consume the character token `char` or raise UnexpectedTokenError."""
        token = self.current
        if token.is_char(char):
            self.advance()
            return token

        raise UnexpectedTokenError(
            f"'{char}'",
            found=token.describe(),
            location=token.location,
            source_line=self._source_line(token),
            hint=hint,
        )

    # =========================================================================
    # Expression Parsing
    # =========================================================================

    def _enter_nesting(self) -> None:
        """Count one level of recursion, failing past max_depth."""
        self._depth += 1
        if self._depth > self.max_depth:
            raise self._nesting_error()

    def _nesting_error(self) -> NestingTooDeepError:
        token = self.current
        return NestingTooDeepError(
            self.max_depth,
            location=token.location,
            source_line=self._source_line(token),
        )

    def _parse_expression(self) -> Expression:
        """expression ::= primary binop-rhs"""
        try:
            self._enter_nesting()
            lhs = self._parse_primary()
            return self._parse_binop_rhs(0, lhs)
        finally:
            self._depth -= 1

    def _parse_binop_rhs(self, min_precedence: int, lhs: Expression) -> Expression:
        """
        Precedence climbing over ``(BINOP primary)*``.

        Operators binding at least as tightly as `min_precedence` are folded
        into `lhs` left to right. When the operator after a right operand
        binds tighter than the current one, that operand is first extended
        by a recursive call, so ``a + b * c`` groups as ``a + (b * c)``
        while ``a - b - c`` groups as ``(a - b) - c``.
        """
        while True:
            token_precedence = self.token_precedence()
            if token_precedence < min_precedence:
                return lhs

            op_token = self.current
            self.advance()

            rhs = self._parse_primary()

            if token_precedence < self.token_precedence():
                try:
                    self._enter_nesting()
                    rhs = self._parse_binop_rhs(token_precedence + 1, rhs)
                finally:
                    self._depth -= 1

            lhs = BinaryExpression(
                operator=op_token.value,
                left=lhs,
                right=rhs,
                location=op_token.location,
            )

    def _parse_primary(self) -> Expression:
        """primary ::= NUMBER | identifier-expr | '(' expression ')'"""
        token = self.current

        if token.type is TokenType.IDENTIFIER:
            return self._parse_identifier_expr()

        if token.type is TokenType.NUMBER:
            self.advance()
            return NumberLiteral(value=token.value, location=token.location)

        if token.is_char("("):
            return self._parse_paren_expr()

        if token.type is TokenType.MALFORMED_NUMBER:
            raise MalformedNumberError(
                token.value,
                location=token.location,
                source_line=self._source_line(token),
            )

        raise UnknownPrimaryError(
            token.describe(),
            location=token.location,
            source_line=self._source_line(token),
        )

    def _parse_paren_expr(self) -> Expression:
        """'(' expression ')' - the parentheses leave no node behind."""
        self.advance()  # eat '('
        expr = self._parse_expression()
        self._expect_char(")", hint="close the parenthesized expression")
        return expr

    def _parse_identifier_expr(self) -> Expression:
        """identifier-expr ::= IDENTIFIER | IDENTIFIER '(' arguments? ')'"""
        name_token = self.current
        self.advance()

        if not self.current.is_char("("):
            return VariableReference(name=name_token.value, location=name_token.location)

        self.advance()  # eat '('
        arguments = []
        if not self.current.is_char(")"):
            while True:
                arguments.append(self._parse_expression())

                if self.current.is_char(")"):
                    break

                token = self.current
                if not token.is_char(","):
                    raise ArgumentListError(
                        token.describe(),
                        location=token.location,
                        source_line=self._source_line(token),
                    )
                self.advance()

        self.advance()  # eat ')'
        return CallExpression(
            callee=name_token.value,
            arguments=tuple(arguments),
            location=name_token.location,
        )

    # =========================================================================
    # Declaration Parsing
    # =========================================================================

    def _parse_prototype(self) -> Prototype:
        """prototype ::= IDENTIFIER '(' IDENTIFIER* ')'"""
        name_token = self.current
        if name_token.type is not TokenType.IDENTIFIER:
            raise UnexpectedTokenError(
                "function name in prototype",
                found=name_token.describe(),
                location=name_token.location,
                source_line=self._source_line(name_token),
            )
        self.advance()

        self._expect_char("(", hint="a prototype looks like 'name(a b c)'")

        params = []
        while self.current.type is TokenType.IDENTIFIER:
            params.append(self.current.value)
            self.advance()

        self._expect_char(")", hint="parameters are names separated by spaces, not commas")

        return Prototype(
            name=name_token.value,
            params=tuple(params),
            location=name_token.location,
        )

    def _parse_definition(self) -> Function:
        """definition ::= 'def' prototype expression"""
        def_token = self.current
        self.advance()  # eat 'def'
        prototype = self._parse_prototype()
        body = self._parse_expression()
        logger.debug(f"Parsed definition of '{prototype.name}'")
        return Function(prototype=prototype, body=body, location=def_token.location)

    def _parse_extern(self) -> Prototype:
        """extern ::= 'extern' prototype"""
        self.advance()  # eat 'extern'
        prototype = self._parse_prototype()
        logger.debug(f"Parsed extern '{prototype.name}'")
        return prototype

    def _parse_top_level_expr(self) -> Function:
        """toplevel-expr ::= expression, wrapped in an anonymous prototype"""
        start = self.current
        body = self._parse_expression()
        prototype = Prototype(name=ANONYMOUS_NAME, params=(), location=start.location)
        return Function(prototype=prototype, body=body, location=start.location)


# =============================================================================
# Convenience Functions
# =============================================================================

def parse_expression(
    source: Union[str, TextIO],
    filename: str = "<input>",
    precedence: Optional[Mapping[str, int]] = None,
) -> Expression:
    """
    Parse a single expression from `source`.

    Unlike the sentinel-returning parser methods this raises, which suits
    callers handling one self-contained string. Trailing input after the
    expression is ignored.

    Raises:
        KSyntaxError: If the text is not an expression
    """
    parser = Parser.from_source(source, filename, precedence=precedence)
    parser.advance()
    try:
        return parser._parse_expression()
    except RecursionError:
        raise parser._nesting_error() from None
