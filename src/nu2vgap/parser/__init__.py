"""
nu2vgap.parser - Nu Document Parser

Lexer and parser for the JSON-like documents served by the Nu host.
Converts raw bytes into a tree of plain Python values.
"""

from nu2vgap.errors import ParseError
from nu2vgap.parser.lexer import Lexer, LexerError, Token, TokenType, utf8_to_latin1
from nu2vgap.parser.parser import Parser, Value, parse_document, parse_file
from nu2vgap.parser.serde import dump

__all__ = [
    # Lexer
    "Lexer",
    "LexerError",
    "Token",
    "TokenType",
    "utf8_to_latin1",
    # Parser
    "Parser",
    "ParseError",
    "Value",
    "parse_document",
    "parse_file",
    # Dumping
    "dump",
]
