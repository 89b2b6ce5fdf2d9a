"""
Nu Document Parser

Converts a token stream from the lexer into a value tree made of plain
Python values:

    null    -> None
    boolean -> bool
    number  -> int or float
    string  -> str (8-bit code points only)
    array   -> list
    object  -> dict (duplicate keys: last one wins)

The grammar is strict about delimiters: leading, doubled and trailing
commas are rejected, and so is a missing comma between elements.
"""

from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from nu2vgap.errors import ParseError
from nu2vgap.parser.lexer import (
    SNIPPET_LENGTH,
    Lexer,
    Token,
    TokenType,
    decode_source,
)

# A parsed document value
Value = Union[None, bool, int, float, str, List[Any], Dict[str, Any]]

SCALAR_TOKENS = (
    TokenType.STRING,
    TokenType.NUMBER,
    TokenType.TRUE,
    TokenType.FALSE,
    TokenType.NULL,
)

# Containers nested deeper than this are rejected
MAX_DEPTH = 256


class Parser:
    """
    Recursive-descent parser for Nu documents.

    Usage:
        parser = Parser(tokens, source)
        value = parser.parse()
    """

    def __init__(self, tokens: List[Token], source: str = "", filename: str = "<document>"):
        self.tokens = tokens
        self.source = source
        self.filename = filename
        self.pos = 0
        self.length = len(tokens)
        self.depth = 0

    def _current(self) -> Optional[Token]:
        """Get current token or None if at end."""
        if self.pos >= self.length:
            return None
        return self.tokens[self.pos]

    def _advance(self) -> Optional[Token]:
        """Advance one token and return the previous one."""
        token = self._current()
        if token is not None:
            self.pos += 1
        return token

    def _error(self, message: str, token: Optional[Token]) -> ParseError:
        if token is None:
            return ParseError(f"{message}, got end of input")
        return ParseError(
            message,
            offset=token.offset,
            snippet=self.source[token.offset:token.offset + SNIPPET_LENGTH],
            line=token.line,
            column=token.column,
        )

    def _expect(self, token_type: TokenType, message: str = None) -> Token:
        """Expect a specific token type, raise error if not found."""
        token = self._current()
        if token is None or token.type != token_type:
            raise self._error(message or f"Expected {token_type.name}", token)
        return self._advance()

    def parse(self) -> Value:
        """Parse exactly one value followed by end of input."""
        value = self._parse_value()
        self._expect(TokenType.EOF, "Expected end of input")
        return value

    def _parse_value(self) -> Value:
        token = self._current()
        if token is None:
            raise self._error("Expected element", None)

        if token.type in SCALAR_TOKENS:
            self._advance()
            return token.value
        if token.type in (TokenType.LBRACE, TokenType.LBRACKET):
            if self.depth >= MAX_DEPTH:
                raise self._error("Nesting too deep", token)
            self.depth += 1
            try:
                if token.type == TokenType.LBRACE:
                    return self._parse_object()
                return self._parse_array()
            finally:
                self.depth -= 1

        raise self._error("Expected element", token)

    def _parse_object(self) -> Dict[str, Value]:
        """Parse ``{ "key" : value, ... }``."""
        self._expect(TokenType.LBRACE)
        result: Dict[str, Value] = {}

        if self._current() is not None and self._current().type == TokenType.RBRACE:
            self._advance()
            return result

        while True:
            key = self._expect(TokenType.STRING, "Expected string key").value
            self._expect(TokenType.COLON, "Expected ':'")
            result[key] = self._parse_value()

            token = self._current()
            if token is not None and token.type == TokenType.COMMA:
                self._advance()
            elif token is not None and token.type == TokenType.RBRACE:
                self._advance()
                return result
            else:
                raise self._error("Expected ',' or '}'", token)

    def _parse_array(self) -> List[Value]:
        """Parse ``[ value, ... ]``."""
        self._expect(TokenType.LBRACKET)
        result: List[Value] = []

        if self._current() is not None and self._current().type == TokenType.RBRACKET:
            self._advance()
            return result

        while True:
            result.append(self._parse_value())

            token = self._current()
            if token is not None and token.type == TokenType.COMMA:
                self._advance()
            elif token is not None and token.type == TokenType.RBRACKET:
                self._advance()
                return result
            else:
                raise self._error("Expected ',' or ']'", token)


def parse_document(data: Union[bytes, str], filename: str = "<document>") -> Value:
    """
    Parse a Nu document into a value tree.

    Args:
        data: Raw document bytes, or text (treated as its UTF-8 encoding)
        filename: For error messages

    Returns:
        The root value

    Raises:
        ParseError: if the document is not well-formed
    """
    source = decode_source(data)
    tokens = Lexer(source, filename).tokenize_all()
    return Parser(tokens, source, filename).parse()


def parse_file(filepath: Union[str, Path]) -> Value:
    """Parse a document file."""
    with open(filepath, "rb") as f:
        data = f.read()
    return parse_document(data, str(filepath))
