"""
Parser tests for Splax
Precedence, desugaring and panic-mode error recovery
"""

import pytest
from error_handling import format_diagnostic
from lexer import scan
from parsing import SplaxGrammar, create_parser, parse, pretty_print_ast
from syntax_tree import (
    Assignment, Binary, Block, Call, ExprStmt, Function, Grouping, If, Let,
    Literal, Logical, Print, Return, Unary, Variable, While,
)
from tokens import TokenType


def parse_source(source):
    tokens, lex_diagnostics = scan(source)
    assert lex_diagnostics == []
    return parse(tokens)


def messages(diagnostics):
    return [format_diagnostic(d) for d in diagnostics]


class TestExpressions:
    """Precedence climbing and associativity"""

    def test_multiplication_binds_tighter_than_addition(self):
        statements, diagnostics = parse_source("1 + 2 * 3;")
        assert diagnostics == []
        expr = statements[0].expression
        assert isinstance(expr, Binary)
        assert expr.operator.type == TokenType.PLUS
        assert isinstance(expr.right, Binary)
        assert expr.right.operator.type == TokenType.STAR

    def test_binary_operators_fold_left(self):
        statements, _ = parse_source("1 - 2 - 3;")
        expr = statements[0].expression
        assert isinstance(expr.left, Binary)
        assert expr.right.value['value'] == 3.0

    def test_assignment_is_right_associative(self):
        statements, _ = parse_source("a = b = 1;")
        expr = statements[0].expression
        assert isinstance(expr, Assignment)
        assert expr.name.lexeme == "a"
        assert isinstance(expr.value, Assignment)
        assert expr.value.name.lexeme == "b"

    def test_and_binds_tighter_than_or(self):
        statements, _ = parse_source("a or b and c;")
        expr = statements[0].expression
        assert isinstance(expr, Logical)
        assert expr.operator.type == TokenType.OR
        assert isinstance(expr.right, Logical)
        assert expr.right.operator.type == TokenType.AND

    def test_comparison_below_equality(self):
        statements, _ = parse_source("1 < 2 == true;")
        expr = statements[0].expression
        assert expr.operator.type == TokenType.EQUAL_EQUAL
        assert expr.left.operator.type == TokenType.LESS

    def test_unary_and_grouping(self):
        statements, _ = parse_source("!(-x);")
        expr = statements[0].expression
        assert isinstance(expr, Unary)
        assert isinstance(expr.right, Grouping)
        assert isinstance(expr.right.expression, Unary)
        assert isinstance(expr.right.expression.right, Variable)

    def test_chained_calls(self):
        statements, _ = parse_source("f(1, 2)(3);")
        expr = statements[0].expression
        assert isinstance(expr, Call)
        assert len(expr.arguments) == 1
        assert isinstance(expr.callee, Call)
        assert len(expr.callee.arguments) == 2
        assert expr.callee.callee.name.lexeme == "f"

    def test_literals(self):
        statements, _ = parse_source('true; false; null; "s"; 4;')
        values = [s.expression.value for s in statements]
        assert values == [
            {'value': True, 'type': 'Boolean'},
            {'value': False, 'type': 'Boolean'},
            {'value': None, 'type': 'Null'},
            {'value': 's', 'type': 'String'},
            {'value': 4.0, 'type': 'Number'},
        ]


class TestStatements:
    """Declarations and statements"""

    def test_let_without_initializer_defaults_to_null(self):
        statements, _ = parse_source("let x;")
        stmt = statements[0]
        assert isinstance(stmt, Let)
        assert stmt.initializer == Literal({'value': None, 'type': 'Null'})

    def test_function_declaration(self):
        statements, _ = parse_source("fn add(a, b) { return a + b; }")
        stmt = statements[0]
        assert isinstance(stmt, Function)
        assert stmt.name.lexeme == "add"
        assert [p.lexeme for p in stmt.params] == ["a", "b"]
        assert isinstance(stmt.body[0], Return)

    def test_if_else(self):
        statements, _ = parse_source("if (x) print 1; else print 2;")
        stmt = statements[0]
        assert isinstance(stmt, If)
        assert isinstance(stmt.then_branch, Print)
        assert isinstance(stmt.else_branch, Print)

    def test_dangling_else_binds_to_nearest_if(self):
        statements, _ = parse_source("if (a) if (b) print 1; else print 2;")
        outer = statements[0]
        assert outer.else_branch is None
        assert outer.then_branch.else_branch is not None

    def test_block(self):
        statements, _ = parse_source("{ let a = 1; print a; }")
        assert isinstance(statements[0], Block)
        assert len(statements[0].statements) == 2

    def test_for_loop_desugars_to_while(self):
        statements, diagnostics = parse_source("for (let i = 0; i < 3; i = i + 1) print i;")
        assert diagnostics == []
        outer = statements[0]
        assert isinstance(outer, Block)
        initializer, loop = outer.statements
        assert isinstance(initializer, Let)
        assert isinstance(loop, While)
        assert loop.condition.operator.type == TokenType.LESS
        body, increment = loop.body.statements
        assert isinstance(body, Print)
        assert isinstance(increment, ExprStmt)
        assert isinstance(increment.expression, Assignment)

    def test_empty_for_clauses(self):
        statements, _ = parse_source("for (;;) print 1;")
        loop = statements[0].statements[0]
        assert isinstance(loop, While)
        assert loop.condition == Literal({'value': True, 'type': 'Boolean'})
        assert isinstance(loop.body, Print)


class TestErrorRecovery:
    """Syntax diagnostics and synchronization"""

    def test_missing_expression_reports_offending_token(self):
        statements, diagnostics = parse_source("print ; print 2;")
        assert messages(diagnostics) == ["[line 1] Error ';' : Expect expression."]
        assert len(statements) == 1
        assert isinstance(statements[0], Print)

    def test_error_at_end(self):
        _, diagnostics = parse_source("print 1")
        assert messages(diagnostics) == ["[line 1] Error 'at end' : Expect ';' after value."]

    def test_one_diagnostic_per_bad_statement(self):
        statements, diagnostics = parse_source("let = 1;\nlet y = ;\nprint y;")
        assert messages(diagnostics) == [
            "[line 1] Error '=' : Expect variable name.",
            "[line 2] Error ';' : Expect expression.",
        ]
        assert len(statements) == 1

    def test_resynchronizes_on_statement_keyword(self):
        statements, diagnostics = parse_source("1 + + 2 print 3;")
        assert len(diagnostics) == 1
        assert isinstance(statements[0], Print)

    def test_error_inside_block_keeps_block(self):
        statements, diagnostics = parse_source("{ print ; print 1; }")
        assert len(diagnostics) == 1
        assert isinstance(statements[0], Block)
        assert len(statements[0].statements) == 1

    def test_invalid_assignment_target_is_recoverable(self):
        statements, diagnostics = parse_source("1 = 2; print 3;")
        assert messages(diagnostics) == ["[line 1] Error '=' : Invalid assignment target."]
        assert len(statements) == 2

    def test_return_outside_function(self):
        _, diagnostics = parse_source("return 1;")
        assert messages(diagnostics) == ["[line 1] Error 'return' : Can't return from top-level code."]

    def test_argument_limit_is_soft(self):
        args = ", ".join(["1"] * 256)
        statements, diagnostics = parse_source(f"f({args});")
        assert messages(diagnostics) == ["[line 1] Error '1' : Can't have more than 255 arguments."]
        assert len(statements[0].expression.arguments) == 256

    def test_parameter_limit_is_soft(self):
        params = ", ".join(f"p{i}" for i in range(256))
        statements, diagnostics = parse_source(f"fn f({params}) {{}}")
        assert messages(diagnostics) == ["[line 1] Error 'p255' : Can't have more than 255 parameters."]
        assert len(statements[0].params) == 256

    def test_unclosed_block(self):
        _, diagnostics = parse_source("{ print 1;")
        assert messages(diagnostics) == ["[line 1] Error 'at end' : Expect '}' after block."]

    def test_deep_nesting_is_a_syntax_diagnostic(self):
        source = "print " + "(" * 3000 + "1" + ")" * 3000 + ";\nprint 2;"
        statements, diagnostics = parse_source(source)
        assert messages(diagnostics) == ["[line 1] Error '(' : Expression nested too deeply."]
        assert len(statements) == 1
        assert isinstance(statements[0], Print)


class TestParserFrontEnd:
    """Parser facade and AST printing"""

    @pytest.fixture
    def parser(self):
        return create_parser()

    def test_parse_string_shares_diagnostics(self, parser):
        statements, diagnostics = parser.parse_string('print "open;\nprint 1')
        kinds = [d['kind'] for d in diagnostics]
        assert kinds[0] == "lexical"

    def test_parse_file(self, parser, tmp_path):
        script = tmp_path / "prog.splax"
        script.write_text("let a = 1;\nprint a;\n", encoding="utf-8")
        statements, diagnostics = parser.parse_file(str(script))
        assert diagnostics == []
        assert len(statements) == 2

    def test_grammar_reports_into_given_collector(self):
        tokens, _ = scan("print;")
        grammar = SplaxGrammar(tokens)
        grammar.parse()
        assert len(grammar.diagnostics) == 1

    def test_pretty_print_ast(self):
        statements, _ = parse_source("print 1 + 2;")
        assert pretty_print_ast(statements[0]) == (
            "Print\n"
            "  Binary(+)\n"
            "    Literal(1)\n"
            "    Literal(2)\n"
        )

    def test_pretty_print_function(self):
        statements, _ = parse_source('fn greet(name) { print "hi " + name; }')
        printed = pretty_print_ast(statements[0])
        assert printed.splitlines()[0] == "Function(greet(name))"
        assert "Literal('hi ')" in printed
