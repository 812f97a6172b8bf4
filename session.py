"""
Session control for Splax. Drives lex -> parse -> interpret for a complete
source string, either once (a file) or repeatedly against the same globals
(the REPL).
"""

from typing import Any, Dict, List
import logging

from error_handling import DiagnosticCollector, RUNTIME
from interpreter import create_interpreter
from parsing import create_parser

logger = logging.getLogger("splax.session")
logger.addHandler(logging.NullHandler())


class Session:
  """Governs a Splax session; globals persist across compile calls."""

  def __init__(self, output: Any = None, debug: bool = False):
    self.parser = create_parser(debug=debug)
    self.interpreter = create_interpreter(debug=debug, output=output)
    self.diagnostics = DiagnosticCollector()
    self.last_statements: List[Any] = []

  @property
  def global_env(self) -> Dict:
    return self.interpreter.global_env

  def compile(self, source: str) -> bool:
    """Compile and run source. Returns False if any diagnostic was recorded.

    Lexical and syntax diagnostics suppress interpretation of the whole
    source; a runtime error stops it at the failing top-level statement.
    """
    self.diagnostics = DiagnosticCollector()
    logger.debug("compiling %d characters", len(source))

    statements, _ = self.parser.parse_string(source, self.diagnostics)
    self.last_statements = statements
    if self.diagnostics.has_errors():
      logger.debug("compilation failed with %d diagnostics", len(self.diagnostics))
      return False

    self.interpreter.interpret_program(statements, self.diagnostics)
    return not self.diagnostics.has_errors()

  @property
  def had_compile_error(self) -> bool:
    return self.diagnostics.has_compile_errors()

  @property
  def had_runtime_error(self) -> bool:
    return any(d['kind'] == RUNTIME for d in self.diagnostics)


def compile_source(source: str, output: Any = None, debug: bool = False) -> List[Dict]:
  """Compile and run source in a fresh session, returning its diagnostics"""
  session = Session(output=output, debug=debug)
  session.compile(source)
  return session.diagnostics.diagnostics

