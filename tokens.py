"""
Splax token model
Token kinds, the token record shared by lexer and parser, and the reserved keyword table
"""

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Optional


class TokenType(Enum):
    """Every kind of token the lexer can emit"""

    # Single-character tokens
    LEFT_PAREN = "LEFT_PAREN"
    RIGHT_PAREN = "RIGHT_PAREN"
    LEFT_BRACE = "LEFT_BRACE"
    RIGHT_BRACE = "RIGHT_BRACE"
    COMMA = "COMMA"
    DOT = "DOT"
    MINUS = "MINUS"
    PLUS = "PLUS"
    SEMICOLON = "SEMICOLON"
    SLASH = "SLASH"
    STAR = "STAR"
    PERCENT = "PERCENT"

    # One or two character tokens
    BANG = "BANG"
    BANG_EQUAL = "BANG_EQUAL"
    EQUAL = "EQUAL"
    EQUAL_EQUAL = "EQUAL_EQUAL"
    GREATER = "GREATER"
    GREATER_EQUAL = "GREATER_EQUAL"
    LESS = "LESS"
    LESS_EQUAL = "LESS_EQUAL"

    # Literals
    IDENTIFIER = "IDENTIFIER"
    STRING = "STRING"
    NUMBER = "NUMBER"

    # Keywords
    AND = "AND"
    CLASS = "CLASS"
    ELSE = "ELSE"
    FALSE = "FALSE"
    FN = "FN"
    FOR = "FOR"
    IF = "IF"
    LET = "LET"
    NULL = "NULL"
    OR = "OR"
    PRINT = "PRINT"
    RETURN = "RETURN"
    SUPER = "SUPER"
    THIS = "THIS"
    TRUE = "TRUE"
    WHILE = "WHILE"

    EOF = "EOF"


RESERVED_KEYWORDS: Dict[str, TokenType] = {
    "true": TokenType.TRUE,
    "false": TokenType.FALSE,
    "null": TokenType.NULL,
    "and": TokenType.AND,
    "or": TokenType.OR,
    "let": TokenType.LET,
    "class": TokenType.CLASS,
    "fn": TokenType.FN,
    "return": TokenType.RETURN,
    "super": TokenType.SUPER,
    "this": TokenType.THIS,
    "if": TokenType.IF,
    "else": TokenType.ELSE,
    "while": TokenType.WHILE,
    "for": TokenType.FOR,
    "print": TokenType.PRINT,
}

# Tokens that begin a new statement; the parser resynchronizes on them
STATEMENT_STARTERS = frozenset({
    TokenType.LET, TokenType.CLASS, TokenType.FN, TokenType.RETURN,
    TokenType.IF, TokenType.WHILE, TokenType.FOR, TokenType.PRINT,
})


@dataclass(frozen=True)
class Token:
    """Splax token with its exact source text and location

    start/end are offsets into the source string, so that
    source[start:end] == lexeme for every token the lexer emits.
    """
    type: TokenType
    lexeme: str
    literal: Optional[Dict]
    line: int
    start: int = 0
    end: int = 0

    def __str__(self) -> str:
        if self.literal is not None:
            return f"{self.type.value}({self.lexeme!r}, {self.literal['value']!r})"
        return f"{self.type.value}({self.lexeme!r})"


def make_eof_token(line: int, offset: int) -> Token:
    """Create the synthetic end-of-file token"""
    return Token(TokenType.EOF, "", None, line, offset, offset)
