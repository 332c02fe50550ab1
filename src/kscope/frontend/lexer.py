"""
kscope Lexer (Tokenizer)
========================

This module converts a stream of characters into tokens for the parser.
Characters are pulled one at a time from any text source exposing
``read(1)`` (a string is wrapped in ``io.StringIO``), so the lexer works
the same on a file, a string or an interactive terminal.

Token Categories
----------------
- Keywords: def, extern
- Identifiers: an ASCII letter followed by ASCII letters and digits
- Numbers: a run of digits and '.', converted to float
- Characters: any other single character ('(', ')', ',', ';', '+', ...)
- EOF: end of the character stream

Comments
--------
'#' starts a comment that runs to the end of the line.

Numbers
-------
The lexer consumes every digit and '.' it sees, so ``1.2.3`` is read as
one lexeme. Text with more than one '.' or without any digit is not a
number; it becomes a MALFORMED_NUMBER token that the parser rejects.

Example Usage
-------------
>>> from kscope.frontend.lexer import Lexer
>>> for token in Lexer("def f(x) x + 1"):
...     print(token)
Token(DEF, 'def', 1:1)
Token(IDENTIFIER, 'f', 1:5)
Token(CHAR, '(', 1:6)
Token(IDENTIFIER, 'x', 1:7)
Token(CHAR, ')', 1:8)
Token(IDENTIFIER, 'x', 1:10)
Token(CHAR, '+', 1:12)
Token(NUMBER, 1.0, 1:14)
Token(EOF, 1:14)
"""

import io
import logging
import string
from dataclasses import dataclass
from enum import Enum, auto
from typing import Iterator, Optional, TextIO, Union

from kscope.errors import SourceLocation

logger = logging.getLogger(__name__)


# =============================================================================
# Token Type Enumeration
# =============================================================================

class TokenType(Enum):
    """Token types of the expression language."""

    EOF = auto()                # End of the character stream
    DEF = auto()                # def
    EXTERN = auto()             # extern
    IDENTIFIER = auto()         # Function and variable names
    NUMBER = auto()             # Numeric literal, value is a float
    MALFORMED_NUMBER = auto()   # Digits and dots that are not a number
    CHAR = auto()               # Any other single character


KEYWORDS: dict[str, TokenType] = {
    "def": TokenType.DEF,
    "extern": TokenType.EXTERN,
}


# =============================================================================
# Token Data Class
# =============================================================================

@dataclass(frozen=True)
class Token:
    """
    A single lexical unit together with its payload.

    Attributes:
        type: The TokenType classification
        value: Identifier or keyword text, float for numbers, the character
            itself for CHAR, the raw text for MALFORMED_NUMBER, None for EOF
        line: Line number in source (1-indexed)
        column: Column number in source (1-indexed)
        filename: Name of the source
    """
    type: TokenType
    value: Union[str, float, None]
    line: int = 1
    column: int = 1
    filename: str = "<input>"

    def __repr__(self) -> str:
        """Format token for debugging output."""
        if self.value is None:
            return f"Token({self.type.name}, {self.line}:{self.column})"
        return f"Token({self.type.name}, {self.value!r}, {self.line}:{self.column})"

    @property
    def location(self) -> SourceLocation:
        """Return a SourceLocation for error reporting."""
        return SourceLocation(self.filename, self.line, self.column)

    def is_char(self, char: str) -> bool:
        """Return True if this is the single-character token `char`."""
        return self.type is TokenType.CHAR and self.value == char

    def describe(self) -> str:
        """Describe the token for diagnostics."""
        if self.type is TokenType.EOF:
            return "end of input"
        if self.type is TokenType.IDENTIFIER:
            return f"identifier '{self.value}'"
        if self.type is TokenType.NUMBER:
            return f"number {format_number(self.value)}"
        return f"'{self.value}'"


def format_number(value: float) -> str:
    """
    Render a numeric literal value without losing precision.

    Integral values print without a fraction (``1234567``); everything
    else uses the shortest round-tripping form (``0.1``, ``1e+20``).
    """
    if value.is_integer() and abs(value) < 1e16:
        return str(int(value))
    return repr(value)


# =============================================================================
# Lexer Implementation
# =============================================================================

class Lexer:
    """
    Tokenizes a character stream on demand.

    The lexer keeps one character of lookahead: the character following
    the last token has already been read from the source when that token
    is returned. Nothing is ever pushed back into the source.

    Usage:
        lexer = Lexer(sys.stdin, "<stdin>")
        token = lexer.next_token()

    Attributes:
        filename: Name of the source (for error reporting)
    """

    IDENT_START = string.ascii_letters
    IDENT_CHARS = string.ascii_letters + string.digits
    NUMBER_CHARS = string.digits + "."
    WHITESPACE = " \t\n\r\v\f"
    LINE_ENDS = "\n\r"

    def __init__(self, source: Union[str, TextIO], filename: str = "<input>"):
        """
        Initialize the lexer.

        Args:
            source: Source text, or a text stream read one character at a time
            filename: Name of the source (for error messages)
        """
        if isinstance(source, str):
            source = io.StringIO(source)
        self._stream = source
        self.filename = filename

        # Position of _last_char; a blank stands in before the first read
        self._last_char = " "
        self._line = 1
        self._column = 0

        # Characters read so far on the current line
        self._line_chars: list[str] = []

    def __iter__(self) -> Iterator[Token]:
        return self.tokenize()

    def tokenize(self) -> Iterator[Token]:
        """
        Generate tokens up to and including the first EOF token.

        Yields:
            Token objects in source order
        """
        while True:
            token = self.next_token()
            yield token
            if token.type is TokenType.EOF:
                return

    # =========================================================================
    # Character Access
    # =========================================================================

    def _advance(self) -> str:
        """Read the next character into _last_char ('' at end of stream)."""
        char = self._stream.read(1)

        # '\n', '\r\n' and a lone '\r' each end one line
        if self._last_char == "\n" or (self._last_char == "\r" and char != "\n"):
            self._line += 1
            self._column = 0
            self._line_chars = []

        if char:
            self._column += 1
            self._line_chars.append(char)

        self._last_char = char
        return char

    def line_text(self, line: int) -> Optional[str]:
        """
        Return the text read so far on `line`.

        Only the current line is retained, so earlier lines give None.
        """
        if line != self._line:
            return None
        return "".join(self._line_chars).rstrip()

    # =========================================================================
    # Token Scanning
    # =========================================================================

    def next_token(self) -> Token:
        """
        Scan and return the next token.

        Once the stream is exhausted every call returns an EOF token.
        """
        self._skip_whitespace_and_comments()

        line, column = self._line, self._column
        char = self._last_char

        if not char:
            token = self._make_token(TokenType.EOF, None, line, column)
        elif char in self.IDENT_START:
            token = self._scan_identifier(line, column)
        elif char in self.NUMBER_CHARS:
            token = self._scan_number(line, column)
        else:
            self._advance()
            token = self._make_token(TokenType.CHAR, char, line, column)

        logger.debug(f"Lexed {token!r}")
        return token

    def _skip_whitespace_and_comments(self) -> None:
        """Skip whitespace and '#' comments."""
        while self._last_char:
            if self._last_char in self.WHITESPACE:
                self._advance()
                continue

            if self._last_char == "#":
                while self._last_char and self._last_char not in self.LINE_ENDS:
                    self._advance()
                continue

            break

    def _scan_identifier(self, line: int, column: int) -> Token:
        """Scan an identifier or keyword."""
        chars = []
        while self._last_char and self._last_char in self.IDENT_CHARS:
            chars.append(self._last_char)
            self._advance()

        name = "".join(chars)
        token_type = KEYWORDS.get(name, TokenType.IDENTIFIER)
        return self._make_token(token_type, name, line, column)

    def _scan_number(self, line: int, column: int) -> Token:
        """
        Scan a run of digits and dots.

        Valid forms are 12, 12., .5 and 12.5. Anything else, such as
        1.2.3 or a lone '.', becomes a MALFORMED_NUMBER token.
        """
        chars = []
        while self._last_char and self._last_char in self.NUMBER_CHARS:
            chars.append(self._last_char)
            self._advance()

        text = "".join(chars)
        if text.count(".") > 1 or text == ".":
            return self._make_token(TokenType.MALFORMED_NUMBER, text, line, column)

        return self._make_token(TokenType.NUMBER, float(text), line, column)

    def _make_token(
        self,
        token_type: TokenType,
        value: Union[str, float, None],
        line: int,
        column: int,
    ) -> Token:
        return Token(
            type=token_type,
            value=value,
            line=line,
            column=max(column, 1),
            filename=self.filename,
        )


# =============================================================================
# Convenience Functions
# =============================================================================

def tokenize(source: Union[str, TextIO], filename: str = "<input>") -> list[Token]:
    """Tokenize `source` completely, returning every token including EOF."""
    return list(Lexer(source, filename).tokenize())
