"""
kscope Read Loop
================

This module drives the parser over a whole program, one top-level
construct at a time:

    Characters → Lexer → Parser → ParseResult per construct

Dispatch
--------
The driver looks at the current token and picks a production:

| Token    | Action                                   |
|----------|------------------------------------------|
| EOF      | stop                                     |
| ';'      | consume, no result                       |
| 'def'    | definition → Function                    |
| 'extern' | extern declaration → Prototype           |
| other    | top-level expression → anonymous Function|

Error Recovery
--------------
When a construct fails the driver skips one token and resumes dispatch.
There is no resynchronization to a ';', so a failure in the middle of a
construct may produce further errors from its remaining tokens. Syntax
errors never end the loop; only end of input does.

Usage
-----
>>> from kscope.frontend.driver import parse_program
>>> [r.kind.name for r in parse_program("extern sin(x); def f(x) x*2; f(3)")]
['EXTERN', 'DEFINITION', 'EXPRESSION']
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Iterator, Optional, TextIO, Union

from kscope.frontend.lexer import Lexer, TokenType
from kscope.frontend.parser import Parser, DEFAULT_PRECEDENCE, DEFAULT_MAX_DEPTH
from kscope.frontend.ast import Function, Prototype
from kscope.frontend.errors import KSyntaxError

logger = logging.getLogger(__name__)


class ConstructKind(Enum):
    """Top-level constructs, valued by their status message."""

    DEFINITION = "Parsed a function definition."
    EXTERN = "Parsed an extern"
    EXPRESSION = "Parsed a top-level expr"

    @property
    def status_message(self) -> str:
        return self.value


@dataclass
class FrontendOptions:
    """
    Front end configuration options.

    Attributes:
        precedence: Binary operator table installed before parsing starts.
                    None means DEFAULT_PRECEDENCE.
        max_depth: Maximum expression nesting depth
        filename: Source name used in diagnostics
    """
    precedence: Optional[dict[str, int]] = None
    max_depth: int = DEFAULT_MAX_DEPTH
    filename: str = "<input>"

    def __post_init__(self):
        if self.precedence is None:
            self.precedence = dict(DEFAULT_PRECEDENCE)


@dataclass(frozen=True)
class ParseResult:
    """
    Outcome of one top-level construct.

    Attributes:
        kind: Which production the driver dispatched to
        node: The parsed Function or Prototype, None on failure
        error: The syntax error on failure, None on success
    """
    kind: ConstructKind
    node: Optional[Union[Function, Prototype]] = None
    error: Optional[KSyntaxError] = field(default=None, compare=False)

    @property
    def ok(self) -> bool:
        return self.node is not None


class Driver:
    """
    Read loop dispatching top-level constructs to the parser.

    Example:
        driver = Driver.from_source(open("prog.ks"))
        for result in driver.results():
            print(result.kind.status_message if result.ok else result.error)

    Attributes:
        parser: The parser being driven
    """

    def __init__(
        self,
        parser: Parser,
        prompt: Optional[Callable[[], None]] = None,
    ):
        """
        Initialize the driver.

        Args:
            parser: Parser to drive; its lookahead is primed on first use
            prompt: Called at the top of every loop iteration, before the
                next construct is read
        """
        self.parser = parser
        self._prompt = prompt

    @classmethod
    def from_source(
        cls,
        source: Union[str, TextIO],
        options: Optional[FrontendOptions] = None,
        prompt: Optional[Callable[[], None]] = None,
        report: Optional[Callable[[KSyntaxError], None]] = None,
    ) -> "Driver":
        """Build the lexer, parser and driver for `source`."""
        options = options or FrontendOptions()
        parser = Parser(
            Lexer(source, options.filename),
            precedence=options.precedence,
            max_depth=options.max_depth,
            report=report,
        )
        return cls(parser, prompt=prompt)

    def results(self) -> Iterator[ParseResult]:
        """
        Run the read loop, yielding one result per dispatched construct.

        Stops at end of input. A bare ';' is consumed without a result.
        """
        parser = self.parser

        if self._prompt:
            self._prompt()
        parser.advance()

        while True:
            token = parser.current

            if token.type is TokenType.EOF:
                logger.debug("End of input")
                return

            if token.is_char(";"):
                parser.advance()
            elif token.type is TokenType.DEF:
                yield self._handle(ConstructKind.DEFINITION, parser.parse_definition)
            elif token.type is TokenType.EXTERN:
                yield self._handle(ConstructKind.EXTERN, parser.parse_extern)
            else:
                yield self._handle(ConstructKind.EXPRESSION, parser.parse_top_level_expr)

            if self._prompt:
                self._prompt()

    def run(self) -> list[ParseResult]:
        """Run the loop to end of input and return every result."""
        return list(self.results())

    def _handle(
        self,
        kind: ConstructKind,
        production: Callable[[], Optional[Union[Function, Prototype]]],
    ) -> ParseResult:
        node = production()
        if node is not None:
            logger.debug(kind.status_message)
            return ParseResult(kind=kind, node=node)

        # Skip token for error recovery
        error = self.parser.last_error
        self.parser.advance()
        return ParseResult(kind=kind, error=error)


# =============================================================================
# Convenience Functions
# =============================================================================

def parse_program(
    source: Union[str, TextIO],
    options: Optional[FrontendOptions] = None,
    report: Optional[Callable[[KSyntaxError], None]] = None,
) -> list[ParseResult]:
    """
    Parse every top-level construct in `source`.

    Args:
        source: Program text or text stream
        options: Front end configuration (defaults if None)
        report: Diagnostic channel passed to the parser

    Returns:
        One ParseResult per construct, in source order
    """
    return Driver.from_source(source, options, report=report).run()
