"""
Nu Document Lexer (Tokenizer)

Converts raw document text into a stream of tokens.
Handles: strings, numbers, literals, braces, brackets, colons, commas.

The source is processed one byte per character: callers decode the raw
transport bytes as latin-1 so that every character offset is also a byte
offset. Strings are converted from UTF-8 to the 8-bit charset while they are
read.
"""

import re
from dataclasses import dataclass
from enum import Enum, auto
from typing import Iterator, List, Optional

from nu2vgap.errors import ParseError


class TokenType(Enum):
    """Types of tokens in a Nu document."""
    STRING = auto()     # "quoted string"
    NUMBER = auto()     # 123, -0.5, .25, 7.
    TRUE = auto()       # true
    FALSE = auto()      # false
    NULL = auto()       # null
    LBRACE = auto()     # {
    RBRACE = auto()     # }
    LBRACKET = auto()   # [
    RBRACKET = auto()   # ]
    COLON = auto()      # :
    COMMA = auto()      # ,
    EOF = auto()        # End of input


@dataclass
class Token:
    """A single token from the lexer."""
    type: TokenType
    value: object
    offset: int
    line: int
    column: int

    def __repr__(self):
        return f"Token({self.type.name}, {self.value!r}, @{self.offset})"


class LexerError(ParseError):
    """Error during lexical analysis."""


# Number shapes, tried in order: integer with fraction, fraction only, integer.
# There is no exponent form.
NUMBER_PATTERNS = [
    (re.compile(r"[-+]?\d+\.\d*"), float),
    (re.compile(r"[-+]?\.\d+"), float),
    (re.compile(r"[-+]?\d+"), int),
]

LITERALS = {
    "true": (TokenType.TRUE, True),
    "false": (TokenType.FALSE, False),
    "null": (TokenType.NULL, None),
}

PUNCTUATION = {
    "{": TokenType.LBRACE,
    "}": TokenType.RBRACE,
    "[": TokenType.LBRACKET,
    "]": TokenType.RBRACKET,
    ":": TokenType.COLON,
    ",": TokenType.COMMA,
}

ESCAPES = {
    "n": "\n",
    "t": "\t",
    "r": "\r",
}

WHITESPACE = " \t\n\r\f\v"
SNIPPET_LENGTH = 20

_WORD_RE = re.compile(r"[A-Za-z_]\w*")
_UTF8_LATIN1_RE = re.compile("([\xc0-\xc3])([\x80-\xbf])")


def utf8_to_latin1(text: str) -> str:
    """
    Fold 2-byte UTF-8 sequences for Latin-1 code points into single characters.

    Only lead bytes 0xC0..0xC3 are handled; longer sequences are left as
    their raw bytes because the target charset cannot represent them.
    """
    return _UTF8_LATIN1_RE.sub(
        lambda m: chr(((ord(m.group(1)) & 3) << 6) + (ord(m.group(2)) & 63)),
        text,
    )


class Lexer:
    """
    Tokenizer for Nu documents.

    Usage:
        lexer = Lexer(source_text)
        tokens = list(lexer.tokenize())
    """

    def __init__(self, source: str, filename: str = "<document>"):
        self.source = source
        self.filename = filename
        self.pos = 0
        self.line = 1
        self.column = 1
        self.length = len(source)

    def _current(self) -> Optional[str]:
        """Get current character or None if at end."""
        if self.pos >= self.length:
            return None
        return self.source[self.pos]

    def _advance(self, count: int = 1) -> None:
        """Advance ``count`` characters, tracking line and column."""
        for _ in range(count):
            if self.pos >= self.length:
                return
            if self.source[self.pos] == "\n":
                self.line += 1
                self.column = 1
            else:
                self.column += 1
            self.pos += 1

    def _error(self, message: str, offset: Optional[int] = None,
               line: Optional[int] = None, column: Optional[int] = None) -> LexerError:
        if offset is None:
            offset = self.pos
        return LexerError(
            message,
            offset=offset,
            snippet=self.source[offset:offset + SNIPPET_LENGTH],
            line=self.line if line is None else line,
            column=self.column if column is None else column,
        )

    def _skip_whitespace(self) -> None:
        while self._current() is not None and self._current() in WHITESPACE:
            self._advance()

    def _read_string(self) -> str:
        """Read a double-quoted string, handling escapes."""
        start, start_line, start_col = self.pos, self.line, self.column
        self._advance()  # opening quote

        result = []
        while True:
            ch = self._current()
            if ch is None:
                raise self._error("Unterminated string", start, start_line, start_col)
            if ch == '"':
                self._advance()
                break
            if ch == "\\":
                self._advance()
                esc = self._current()
                if esc is None:
                    raise self._error("Unterminated string", start, start_line, start_col)
                # Unknown escapes stand for the escaped character itself
                result.append(ESCAPES.get(esc, esc))
                self._advance()
            else:
                result.append(ch)
                self._advance()

        return utf8_to_latin1("".join(result))

    def _read_number(self):
        for pattern, convert in NUMBER_PATTERNS:
            match = pattern.match(self.source, self.pos)
            if match:
                text = match.group(0)
                self._advance(len(text))
                return convert(text)
        raise self._error("Expected number")

    def tokenize(self) -> Iterator[Token]:
        """Generate tokens from the source."""
        while True:
            self._skip_whitespace()

            ch = self._current()
            start, start_line, start_col = self.pos, self.line, self.column

            if ch is None:
                yield Token(TokenType.EOF, None, start, start_line, start_col)
                break

            if ch == '"':
                value = self._read_string()
                yield Token(TokenType.STRING, value, start, start_line, start_col)
                continue

            if ch in PUNCTUATION:
                self._advance()
                yield Token(PUNCTUATION[ch], ch, start, start_line, start_col)
                continue

            if ch.isdigit() or ch in "-+.":
                value = self._read_number()
                yield Token(TokenType.NUMBER, value, start, start_line, start_col)
                continue

            match = _WORD_RE.match(self.source, self.pos)
            if match and match.group(0) in LITERALS:
                token_type, value = LITERALS[match.group(0)]
                self._advance(len(match.group(0)))
                yield Token(token_type, value, start, start_line, start_col)
                continue

            raise self._error("Expected element")

    def tokenize_all(self) -> List[Token]:
        """Convenience method to get all tokens as a list."""
        return list(self.tokenize())


def decode_source(data) -> str:
    """
    Turn document input into lexer source text.

    Bytes are taken one byte per character. Text is treated as what it
    would have been on the wire, i.e. encoded as UTF-8 first.
    """
    if isinstance(data, str):
        data = data.encode("utf-8")
    return bytes(data).decode("latin-1")
