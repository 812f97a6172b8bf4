"""
Splax Parser
Recursive-descent parser with precedence climbing and panic-mode error recovery
"""

from typing import List, Dict, Any, Optional, Tuple
import logging

from error_handling import DiagnosticCollector, SplaxParseError, SYNTAX
from lexer import SplaxLexer
from syntax_tree import (
    Assignment, Binary, Block, Call, Expr, ExprStmt, Function, Grouping, If,
    Let, Literal, Logical, Print, Return, Stmt, Unary, Variable, While,
)
from tokens import Token, TokenType, RESERVED_KEYWORDS, STATEMENT_STARTERS
from utilities import make_boolean, make_null, stringify

logger = logging.getLogger("splax.parsing")
logger.addHandler(logging.NullHandler())

MAX_ARGUMENTS = 255


class SplaxGrammar:
    """Splax grammar over a token list

    Precedence, lowest to highest:
      assignment -> or -> and -> equality -> comparison -> term -> factor
      -> unary -> call -> primary

    A failed statement records a diagnostic and the parser resynchronizes at
    the next statement boundary, so one malformed statement yields roughly
    one diagnostic and the rest of the program is still checked.
    """

    def __init__(self, tokens: List[Token], diagnostics: Optional[DiagnosticCollector] = None):
        self.tokens = tokens
        self.diagnostics = diagnostics if diagnostics is not None else DiagnosticCollector()
        self.current = 0
        self.function_depth = 0

    def parse(self) -> List[Stmt]:
        """Parse the whole token list into a program"""
        statements = []
        while not self.is_at_end():
            try:
                stmt = self.declaration()
            except RecursionError:
                self.error(self.peek(), "Expression nested too deeply.")
                self.synchronize()
                continue
            if stmt is not None:
                statements.append(stmt)
        logger.debug("parsed %d top-level statements", len(statements))
        return statements

    # ------------------------------------------------------------------
    # Declarations
    # ------------------------------------------------------------------

    def declaration(self) -> Optional[Stmt]:
        try:
            if self.match(TokenType.FN):
                return self.function_declaration()
            if self.match(TokenType.LET):
                return self.let_declaration()
            return self.statement()
        except SplaxParseError as e:
            logger.debug("syntax error at line %d: %s", e.line, e.message)
            self.synchronize()
            return None

    def function_declaration(self) -> Function:
        name = self.consume(TokenType.IDENTIFIER, "Expect function name.")
        self.consume(TokenType.LEFT_PAREN, "Expect '(' after function name.")

        params = []
        if not self.check(TokenType.RIGHT_PAREN):
            while True:
                if len(params) >= MAX_ARGUMENTS:
                    self.error(self.peek(), f"Can't have more than {MAX_ARGUMENTS} parameters.")
                params.append(self.consume(TokenType.IDENTIFIER, "Expect parameter name."))
                if not self.match(TokenType.COMMA):
                    break
        self.consume(TokenType.RIGHT_PAREN, "Expect ')' after parameters.")

        self.consume(TokenType.LEFT_BRACE, "Expect '{' before function body.")
        self.function_depth += 1
        try:
            body = self.block()
        finally:
            self.function_depth -= 1

        return Function(name, tuple(params), tuple(body))

    def let_declaration(self) -> Let:
        name = self.consume(TokenType.IDENTIFIER, "Expect variable name.")

        if self.match(TokenType.EQUAL):
            initializer = self.expression()
        else:
            initializer = Literal(make_null())

        self.consume(TokenType.SEMICOLON, "Expect ';' after variable declaration.")
        return Let(name, initializer)

    # ------------------------------------------------------------------
    # Statements
    # ------------------------------------------------------------------

    def statement(self) -> Stmt:
        if self.match(TokenType.PRINT):
            return self.print_statement()
        if self.match(TokenType.RETURN):
            return self.return_statement()
        if self.match(TokenType.LEFT_BRACE):
            return Block(tuple(self.block()))
        if self.match(TokenType.IF):
            return self.if_statement()
        if self.match(TokenType.WHILE):
            return self.while_statement()
        if self.match(TokenType.FOR):
            return self.for_statement()
        return self.expression_statement()

    def print_statement(self) -> Print:
        value = self.expression()
        self.consume(TokenType.SEMICOLON, "Expect ';' after value.")
        return Print(value)

    def return_statement(self) -> Return:
        keyword = self.previous()
        if self.function_depth == 0:
            self.error(keyword, "Can't return from top-level code.")

        value = None
        if not self.check(TokenType.SEMICOLON):
            value = self.expression()

        self.consume(TokenType.SEMICOLON, "Expect ';' after return value.")
        return Return(keyword, value)

    def block(self) -> List[Stmt]:
        """Parse declarations up to the closing brace (the '{' is already consumed)"""
        statements = []
        while not self.check(TokenType.RIGHT_BRACE) and not self.is_at_end():
            stmt = self.declaration()
            if stmt is not None:
                statements.append(stmt)

        self.consume(TokenType.RIGHT_BRACE, "Expect '}' after block.")
        return statements

    def if_statement(self) -> If:
        self.consume(TokenType.LEFT_PAREN, "Expect '(' after 'if'.")
        condition = self.expression()
        self.consume(TokenType.RIGHT_PAREN, "Expect ')' after if condition.")

        then_branch = self.statement()
        else_branch = None
        if self.match(TokenType.ELSE):
            else_branch = self.statement()

        return If(condition, then_branch, else_branch)

    def while_statement(self) -> While:
        self.consume(TokenType.LEFT_PAREN, "Expect '(' after 'while'.")
        condition = self.expression()
        self.consume(TokenType.RIGHT_PAREN, "Expect ')' after condition.")
        body = self.statement()
        return While(condition, body)

    def for_statement(self) -> Block:
        """Desugar `for (init; cond; incr) body` into a block holding a while loop"""
        self.consume(TokenType.LEFT_PAREN, "Expect '(' after 'for'.")

        if self.match(TokenType.SEMICOLON):
            initializer = None
        elif self.match(TokenType.LET):
            initializer = self.let_declaration()
        else:
            initializer = self.expression_statement()

        condition = None
        if not self.check(TokenType.SEMICOLON):
            condition = self.expression()
        self.consume(TokenType.SEMICOLON, "Expect ';' after loop condition.")

        increment = None
        if not self.check(TokenType.RIGHT_PAREN):
            increment = self.expression()
        self.consume(TokenType.RIGHT_PAREN, "Expect ')' after for clauses.")

        body = self.statement()

        if increment is not None:
            body = Block((body, ExprStmt(increment)))
        if condition is None:
            condition = Literal(make_boolean(True))
        loop = While(condition, body)

        if initializer is not None:
            return Block((initializer, loop))
        return Block((loop,))

    def expression_statement(self) -> ExprStmt:
        expr = self.expression()
        self.consume(TokenType.SEMICOLON, "Expect ';' after expression.")
        return ExprStmt(expr)

    # ------------------------------------------------------------------
    # Expressions
    # ------------------------------------------------------------------

    def expression(self) -> Expr:
        return self.assignment()

    def assignment(self) -> Expr:
        expr = self.or_expression()

        if self.match(TokenType.EQUAL):
            equals = self.previous()
            value = self.assignment()

            if isinstance(expr, Variable):
                return Assignment(expr.name, value)

            # reported, not raised: the statement is still well-formed enough to continue
            self.error(equals, "Invalid assignment target.")

        return expr

    def or_expression(self) -> Expr:
        expr = self.and_expression()
        while self.match(TokenType.OR):
            operator = self.previous()
            right = self.and_expression()
            expr = Logical(expr, operator, right)
        return expr

    def and_expression(self) -> Expr:
        expr = self.equality()
        while self.match(TokenType.AND):
            operator = self.previous()
            right = self.equality()
            expr = Logical(expr, operator, right)
        return expr

    def equality(self) -> Expr:
        return self.binary_level(self.comparison, TokenType.BANG_EQUAL, TokenType.EQUAL_EQUAL)

    def comparison(self) -> Expr:
        return self.binary_level(self.term, TokenType.GREATER, TokenType.GREATER_EQUAL,
                                 TokenType.LESS, TokenType.LESS_EQUAL)

    def term(self) -> Expr:
        return self.binary_level(self.factor, TokenType.MINUS, TokenType.PLUS)

    def factor(self) -> Expr:
        return self.binary_level(self.unary, TokenType.SLASH, TokenType.STAR, TokenType.PERCENT)

    def binary_level(self, operand, *operators: TokenType) -> Expr:
        """Parse operand, then fold any run of operators left-associatively"""
        expr = operand()
        while self.match(*operators):
            operator = self.previous()
            right = operand()
            expr = Binary(expr, operator, right)
        return expr

    def unary(self) -> Expr:
        if self.match(TokenType.BANG, TokenType.MINUS):
            operator = self.previous()
            right = self.unary()
            return Unary(operator, right)
        return self.call()

    def call(self) -> Expr:
        expr = self.primary()
        while self.match(TokenType.LEFT_PAREN):
            expr = self.finish_call(expr)
        return expr

    def finish_call(self, callee: Expr) -> Call:
        arguments = []
        if not self.check(TokenType.RIGHT_PAREN):
            while True:
                if len(arguments) >= MAX_ARGUMENTS:
                    self.error(self.peek(), f"Can't have more than {MAX_ARGUMENTS} arguments.")
                arguments.append(self.expression())
                if not self.match(TokenType.COMMA):
                    break

        paren = self.consume(TokenType.RIGHT_PAREN, "Expect ')' after arguments.")
        return Call(callee, paren, tuple(arguments))

    def primary(self) -> Expr:
        if self.match(TokenType.FALSE):
            return Literal(make_boolean(False))
        if self.match(TokenType.TRUE):
            return Literal(make_boolean(True))
        if self.match(TokenType.NULL):
            return Literal(make_null())
        if self.match(TokenType.NUMBER, TokenType.STRING):
            return Literal(self.previous().literal)

        if self.match(TokenType.IDENTIFIER):
            return Variable(self.previous())

        if self.match(TokenType.LEFT_PAREN):
            expr = self.expression()
            self.consume(TokenType.RIGHT_PAREN, "Expect ')' after expression.")
            return Grouping(expr)

        raise self.error(self.peek(), "Expect expression.")

    # ------------------------------------------------------------------
    # Token helpers
    # ------------------------------------------------------------------

    def match(self, *types: TokenType) -> bool:
        for token_type in types:
            if self.check(token_type):
                self.advance()
                return True
        return False

    def check(self, token_type: TokenType) -> bool:
        if self.is_at_end():
            return False
        return self.peek().type == token_type

    def advance(self) -> Token:
        if not self.is_at_end():
            self.current += 1
        return self.previous()

    def is_at_end(self) -> bool:
        return self.peek().type == TokenType.EOF

    def peek(self) -> Token:
        return self.tokens[self.current]

    def previous(self) -> Token:
        return self.tokens[self.current - 1]

    def consume(self, token_type: TokenType, message: str) -> Token:
        if self.check(token_type):
            return self.advance()
        raise self.error(self.peek(), message)

    def error(self, token: Token, message: str) -> SplaxParseError:
        """Record a syntax diagnostic; the caller decides whether to raise it"""
        context = "at end" if token.type == TokenType.EOF else token.lexeme
        self.diagnostics.report(SYNTAX, token.line, message, context)
        return SplaxParseError(message, token.line, context)

    def synchronize(self) -> None:
        """Discard tokens until just past a ';' or right before a statement keyword"""
        self.advance()

        while not self.is_at_end():
            if self.previous().type == TokenType.SEMICOLON:
                return
            if self.peek().type in STATEMENT_STARTERS:
                return
            self.advance()


def parse(tokens: List[Token], diagnostics: Optional[DiagnosticCollector] = None) -> Tuple[List[Stmt], List[Dict]]:
    """Parse tokens, returning (statements, diagnostics)"""
    collector = diagnostics if diagnostics is not None else DiagnosticCollector()
    statements = SplaxGrammar(tokens, collector).parse()
    return statements, collector.diagnostics


class SplaxParser:
    """Front end: source text to statements, sharing one diagnostics collector"""

    def __init__(self, debug: bool = False, keywords: Optional[Dict[str, TokenType]] = None):
        self.debug = debug
        self.keywords = keywords if keywords is not None else RESERVED_KEYWORDS
        if debug:
            logging.getLogger("splax").setLevel(logging.DEBUG)

    def tokenize(self, text: str, diagnostics: Optional[DiagnosticCollector] = None) -> List[Token]:
        """Tokenize Splax source code"""
        return SplaxLexer(text, self.keywords, diagnostics).scan_tokens()

    def parse_string(self, text: str,
                     diagnostics: Optional[DiagnosticCollector] = None) -> Tuple[List[Stmt], List[Dict]]:
        """Parse Splax source code from a string

        Lexing and parsing report into the same collector; the statements are
        only fit to run if no diagnostic was recorded.
        """
        collector = diagnostics if diagnostics is not None else DiagnosticCollector()
        tokens = self.tokenize(text, collector)
        return parse(tokens, collector)

    def parse_file(self, filepath: str,
                   diagnostics: Optional[DiagnosticCollector] = None) -> Tuple[List[Stmt], List[Dict]]:
        """Parse a Splax source file"""
        with open(filepath, 'r', encoding='utf-8') as f:
            content = f.read()
        return self.parse_string(content, diagnostics)


# Factory functions for creating parsers
def create_parser(debug: bool = False) -> SplaxParser:
    """Create a Splax parser"""
    return SplaxParser(debug=debug)


def create_debug_parser() -> SplaxParser:
    """Create a Splax parser with debug logging enabled"""
    return SplaxParser(debug=True)


# Utility functions for working with the AST
def pretty_print_ast(node: Any, indent: int = 0) -> str:
    """Pretty print an AST node (expression or statement) for debugging"""
    pad = "  " * indent

    if isinstance(node, Binary):
        return (f"{pad}Binary({node.operator.lexeme})\n"
                + pretty_print_ast(node.left, indent + 1)
                + pretty_print_ast(node.right, indent + 1))
    elif isinstance(node, Logical):
        return (f"{pad}Logical({node.operator.lexeme})\n"
                + pretty_print_ast(node.left, indent + 1)
                + pretty_print_ast(node.right, indent + 1))
    elif isinstance(node, Grouping):
        return f"{pad}Grouping\n" + pretty_print_ast(node.expression, indent + 1)
    elif isinstance(node, Literal):
        if node.value['type'] == "String":
            return f"{pad}Literal({node.value['value']!r})\n"
        return f"{pad}Literal({stringify(node.value)})\n"
    elif isinstance(node, Unary):
        return f"{pad}Unary({node.operator.lexeme})\n" + pretty_print_ast(node.right, indent + 1)
    elif isinstance(node, Variable):
        return f"{pad}Variable({node.name.lexeme})\n"
    elif isinstance(node, Assignment):
        return f"{pad}Assignment({node.name.lexeme})\n" + pretty_print_ast(node.value, indent + 1)
    elif isinstance(node, Call):
        result = f"{pad}Call\n" + pretty_print_ast(node.callee, indent + 1)
        for argument in node.arguments:
            result += pretty_print_ast(argument, indent + 1)
        return result
    elif isinstance(node, ExprStmt):
        return f"{pad}ExprStmt\n" + pretty_print_ast(node.expression, indent + 1)
    elif isinstance(node, Print):
        return f"{pad}Print\n" + pretty_print_ast(node.expression, indent + 1)
    elif isinstance(node, Let):
        result = f"{pad}Let({node.name.lexeme})\n"
        if node.initializer is not None:
            result += pretty_print_ast(node.initializer, indent + 1)
        return result
    elif isinstance(node, Block):
        return f"{pad}Block\n" + "".join(pretty_print_ast(s, indent + 1) for s in node.statements)
    elif isinstance(node, If):
        result = f"{pad}If\n" + pretty_print_ast(node.condition, indent + 1)
        result += pretty_print_ast(node.then_branch, indent + 1)
        if node.else_branch is not None:
            result += f"{pad}Else\n" + pretty_print_ast(node.else_branch, indent + 1)
        return result
    elif isinstance(node, While):
        return (f"{pad}While\n"
                + pretty_print_ast(node.condition, indent + 1)
                + pretty_print_ast(node.body, indent + 1))
    elif isinstance(node, Function):
        params = ", ".join(p.lexeme for p in node.params)
        return f"{pad}Function({node.name.lexeme}({params}))\n" + "".join(
            pretty_print_ast(s, indent + 1) for s in node.body)
    elif isinstance(node, Return):
        result = f"{pad}Return\n"
        if node.value is not None:
            result += pretty_print_ast(node.value, indent + 1)
        return result

    raise TypeError(f"Unknown AST node: {type(node).__name__}")
