"""
Splax lexer
Single left-to-right pass over the source, one character at a time
"""

from typing import Dict, List, Optional, Tuple
import logging

from error_handling import DiagnosticCollector, LEXICAL
from tokens import Token, TokenType, RESERVED_KEYWORDS, make_eof_token
from utilities import make_number, make_string

logger = logging.getLogger("splax.lexer")
logger.addHandler(logging.NullHandler())


SINGLE_CHAR_TOKENS = {
    '(': TokenType.LEFT_PAREN,
    ')': TokenType.RIGHT_PAREN,
    '{': TokenType.LEFT_BRACE,
    '}': TokenType.RIGHT_BRACE,
    ',': TokenType.COMMA,
    '.': TokenType.DOT,
    '-': TokenType.MINUS,
    '+': TokenType.PLUS,
    ';': TokenType.SEMICOLON,
    '*': TokenType.STAR,
    '%': TokenType.PERCENT,
}

# first character -> (kind when followed by '=', kind otherwise)
TWO_CHAR_TOKENS = {
    '!': (TokenType.BANG_EQUAL, TokenType.BANG),
    '=': (TokenType.EQUAL_EQUAL, TokenType.EQUAL),
    '<': (TokenType.LESS_EQUAL, TokenType.LESS),
    '>': (TokenType.GREATER_EQUAL, TokenType.GREATER),
}

WHITESPACE = {' ', '\t', '\r'}


def is_digit(char: str) -> bool:
    return '0' <= char <= '9'


def is_alpha(char: str) -> bool:
    return ('a' <= char <= 'z') or ('A' <= char <= 'Z') or char == '_'


def is_alphanumeric(char: str) -> bool:
    return is_alpha(char) or is_digit(char)


class SplaxLexer:
    """Splax lexer: converts source text into an ordered token list

    Lexical errors never stop the scan; the offending token is dropped,
    a diagnostic is recorded and scanning carries on.
    """

    def __init__(self, source: str, keywords: Optional[Dict[str, TokenType]] = None,
                 diagnostics: Optional[DiagnosticCollector] = None):
        self.source = source
        self.keywords = keywords if keywords is not None else RESERVED_KEYWORDS
        self.diagnostics = diagnostics if diagnostics is not None else DiagnosticCollector()
        self.tokens: List[Token] = []
        self.start = 0
        self.current = 0
        self.line = 1

    def scan_tokens(self) -> List[Token]:
        """Scan the whole source and return its tokens, ending with EOF"""
        logger.debug("scanning %d characters", len(self.source))

        while not self.is_at_end():
            self.start = self.current
            self.scan_token()

        self.tokens.append(make_eof_token(self.line, self.current))
        logger.debug("done scanning, %d tokens", len(self.tokens))
        return self.tokens

    def scan_token(self) -> None:
        char = self.advance()

        if char in SINGLE_CHAR_TOKENS:
            self.add_token(SINGLE_CHAR_TOKENS[char])
        elif char in TWO_CHAR_TOKENS:
            with_equal, alone = TWO_CHAR_TOKENS[char]
            self.add_token(with_equal if self.match('=') else alone)
        elif char == '/':
            if self.match('/'):
                # comment runs to end of line
                while self.peek() != '\n' and not self.is_at_end():
                    self.advance()
            else:
                self.add_token(TokenType.SLASH)
        elif char in WHITESPACE:
            pass
        elif char == '\n':
            self.line += 1
        elif char == '"':
            self.scan_string()
        elif is_digit(char):
            self.scan_number()
        elif is_alpha(char):
            self.scan_identifier()
        else:
            logger.debug("unexpected character %r at line %d", char, self.line)
            self.error("Unexpected character.")

    # ------------------------------------------------------------------
    # Scanners
    # ------------------------------------------------------------------

    def scan_string(self) -> None:
        while self.peek() != '"' and not self.is_at_end():
            if self.peek() == '\n':
                self.line += 1
            self.advance()

        if self.is_at_end():
            self.error("Unterminated string.")
            return

        # closing quote
        self.advance()

        # literal is the text strictly between the quotes
        text = self.source[self.start + 1:self.current - 1]
        self.add_token(TokenType.STRING, make_string(text))

    def scan_number(self) -> None:
        while is_digit(self.peek()):
            self.advance()

        # fractional part needs at least one digit after the '.'
        if self.peek() == '.' and is_digit(self.peek_next()):
            self.advance()
            while is_digit(self.peek()):
                self.advance()

        lexeme = self.source[self.start:self.current]
        try:
            number = float(lexeme)
        except ValueError:
            self.error(f"Invalid number literal '{lexeme}'.")
            return
        self.add_token(TokenType.NUMBER, make_number(number))

    def scan_identifier(self) -> None:
        while is_alphanumeric(self.peek()):
            self.advance()

        text = self.source[self.start:self.current]
        self.add_token(self.keywords.get(text, TokenType.IDENTIFIER))

    # ------------------------------------------------------------------
    # Cursor helpers
    # ------------------------------------------------------------------

    def is_at_end(self) -> bool:
        return self.current >= len(self.source)

    def advance(self) -> str:
        char = self.source[self.current]
        self.current += 1
        return char

    def match(self, expected: str) -> bool:
        if self.is_at_end() or self.source[self.current] != expected:
            return False
        self.current += 1
        return True

    def peek(self) -> str:
        if self.is_at_end():
            return '\0'
        return self.source[self.current]

    def peek_next(self) -> str:
        if self.current + 1 >= len(self.source):
            return '\0'
        return self.source[self.current + 1]

    def add_token(self, token_type: TokenType, literal: Optional[Dict] = None) -> None:
        lexeme = self.source[self.start:self.current]
        self.tokens.append(Token(token_type, lexeme, literal, self.line, self.start, self.current))

    def error(self, message: str) -> None:
        self.diagnostics.report(LEXICAL, self.line, message)


def scan(source: str, keywords: Optional[Dict[str, TokenType]] = None,
         diagnostics: Optional[DiagnosticCollector] = None) -> Tuple[List[Token], List[Dict]]:
    """Tokenize source, returning (tokens, diagnostics)"""
    collector = diagnostics if diagnostics is not None else DiagnosticCollector()
    lexer = SplaxLexer(source, keywords, collector)
    return lexer.scan_tokens(), collector.diagnostics
