"""
Session tests for Splax
The compile entry point and REPL-style persistence of globals
"""

import io

import pytest
from session import Session, compile_source


class TestSession:
  """Test compile(source) behaviour across calls"""

  @pytest.fixture
  def session(self):
    output = io.StringIO()
    return Session(output=output), output

  def test_successful_compile(self, session):
    sess, output = session
    assert sess.compile("print 1;") is True
    assert output.getvalue() == "1\n"
    assert len(sess.diagnostics) == 0

  def test_globals_persist_between_compiles(self, session):
    sess, output = session
    assert sess.compile("let a = 40;")
    assert sess.compile("fn add2(n) { return n + 2; }")
    assert sess.compile("print add2(a);")
    assert output.getvalue() == "42\n"

  def test_runtime_error_does_not_end_session(self, session):
    sess, output = session
    sess.compile("let a = 1;")
    assert sess.compile("print nope;") is False
    assert sess.had_runtime_error
    assert not sess.had_compile_error
    assert sess.compile("print a;") is True
    assert output.getvalue() == "1\n"

  def test_compile_error_runs_nothing(self, session):
    sess, output = session
    assert sess.compile('let a = 1; print a; @') is False
    assert sess.had_compile_error
    assert output.getvalue() == ""
    assert sess.diagnostics.formatted() == ["[line 1] Error '' : Unexpected character."]

  def test_diagnostics_reset_per_compile(self, session):
    sess, _ = session
    sess.compile("print ;")
    assert len(sess.diagnostics) == 1
    sess.compile("print 1;")
    assert len(sess.diagnostics) == 0

  def test_deep_nesting_does_not_escape_compile(self, session):
    sess, output = session
    source = "print " + "(" * 3000 + "1" + ")" * 3000 + ";"
    assert sess.compile(source) is False
    assert sess.had_compile_error
    assert sess.compile("print 5;") is True
    assert output.getvalue() == "5\n"

  def test_last_statements_are_kept(self, session):
    sess, _ = session
    sess.compile("let a = 1; let b = 2;")
    assert len(sess.last_statements) == 2


class TestCompileSource:
  """One-shot compile helper"""

  def test_returns_diagnostics(self):
    output = io.StringIO()
    diagnostics = compile_source("print y;", output=output)
    assert [d['kind'] for d in diagnostics] == ["runtime"]
    assert output.getvalue() == ""

  def test_prints_to_stdout_by_default(self, capsys):
    assert compile_source('print "hello";') == []
    assert capsys.readouterr().out == "hello\n"
