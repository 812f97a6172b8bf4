"""
Splax Interpreter - tree-walking evaluator
One eval function per expression node and one exec function per statement node.
Environments are threaded through as shared, mutable scope dictionaries;
return values travel back up as explicit signals, never as host exceptions.
"""

from typing import Any, Dict, List, Optional
import logging
import math
import operator

from environment import make_runtime_env, env_define, env_get, env_assign
from error_handling import DiagnosticCollector, SplaxRuntimeError, RUNTIME
from stdlib import create_builtin_runtime_env, splax_print
from syntax_tree import (
    Assignment, Binary, Block, Call, ExprStmt, Function, Grouping, If, Let,
    Literal, Logical, Print, Return, Unary, Variable, While,
)
from tokens import TokenType
from utilities import (
  NUMBER,
  STRING,
  BOOLEAN,
  FUNCTION,
  make_value,
  make_boolean,
  make_null,
  make_function,
  is_truth,
  type_name,
  operator_error,
  operation_error,
  arity_error,
)

logger = logging.getLogger("splax.interpreter")
logger.addHandler(logging.NullHandler())


def ieee_divide(x: float, y: float) -> float:
  """Float division that yields inf/nan for a zero divisor instead of raising"""
  if y == 0:
    if x == 0 or math.isnan(x):
      return math.nan
    return math.copysign(math.inf, x) * math.copysign(1.0, y)
  return x / y


ARITHMETIC_OPERATORS = {
    TokenType.PLUS: operator.add,
    TokenType.MINUS: operator.sub,
    TokenType.STAR: operator.mul,
    TokenType.SLASH: ieee_divide,
}

COMPARISON_OPERATORS = {
    TokenType.GREATER: operator.gt,
    TokenType.GREATER_EQUAL: operator.ge,
    TokenType.LESS: operator.lt,
    TokenType.LESS_EQUAL: operator.le,
}

EQUALITY_OPERATORS = {
    TokenType.BANG_EQUAL: operator.ne,
    TokenType.EQUAL_EQUAL: operator.eq,
}


# ============================================================================
# DATA STRUCTURES (Immutable Dictionaries)
# ============================================================================

def make_execution_context(output: Any = None, debug: bool = False) -> Dict:
  """Create an execution context carrying the print stream and debug flag"""
  return {
      'output': output,
      'debug': debug,
      'line': 0
  }


def make_return_signal(value: Dict) -> Dict:
  """Control-flow result of a `return` statement, carried up to the call"""
  return {
      'signal': 'return',
      'value': value
  }


# ============================================================================
# EXPRESSIONS
# ============================================================================

def eval_expr(expr: Any, env: Dict, context: Dict) -> Dict:
  """Evaluate an expression node to a runtime value"""
  if isinstance(expr, Literal):
    return expr.value
  elif isinstance(expr, Grouping):
    return eval_expr(expr.expression, env, context)
  elif isinstance(expr, Unary):
    return eval_unary(expr, env, context)
  elif isinstance(expr, Binary):
    return eval_binary(expr, env, context)
  elif isinstance(expr, Logical):
    return eval_logical(expr, env, context)
  elif isinstance(expr, Variable):
    return env_get(env, expr.name.lexeme, expr.name.line)
  elif isinstance(expr, Assignment):
    value = eval_expr(expr.value, env, context)
    return env_assign(env, expr.name.lexeme, value, expr.name.line)
  elif isinstance(expr, Call):
    return eval_call(expr, env, context)

  raise TypeError(f"Unknown expression node: {type(expr).__name__}")


def eval_unary(expr: Unary, env: Dict, context: Dict) -> Dict:
  context['line'] = expr.operator.line
  right = eval_expr(expr.right, env, context)

  if expr.operator.type == TokenType.MINUS:
    # non-numbers pass through unchanged
    if type_name(right) == NUMBER:
      return make_value(-right['value'], NUMBER)
    return right
  if expr.operator.type == TokenType.BANG:
    return make_boolean(not is_truth(right))
  return right


def eval_binary(expr: Binary, env: Dict, context: Dict) -> Dict:
  """Evaluate both operands, then dispatch on the operand types"""
  context['line'] = expr.operator.line
  left = eval_expr(expr.left, env, context)
  right = eval_expr(expr.right, env, context)
  op = expr.operator

  if context['debug']:
    logger.debug("binary %s %s %s", type_name(left), op.lexeme, type_name(right))

  left_type = type_name(left)
  if left_type != type_name(right) or left_type not in (NUMBER, STRING, BOOLEAN):
    raise operation_error(op.lexeme, left, right, op.line)

  if left_type == NUMBER:
    return eval_number_operation(left['value'], op, right['value'], left)
  elif left_type == STRING:
    if op.type == TokenType.PLUS:
      return make_value(left['value'] + right['value'], STRING)
    if op.type in EQUALITY_OPERATORS:
      return make_boolean(EQUALITY_OPERATORS[op.type](left['value'], right['value']))
    raise operator_error(op.lexeme, left, op.line)
  else:
    if op.type in EQUALITY_OPERATORS:
      return make_boolean(EQUALITY_OPERATORS[op.type](left['value'], right['value']))
    raise operator_error(op.lexeme, left, op.line)


def eval_number_operation(x: float, op: Any, y: float, left: Dict) -> Dict:
  if op.type in ARITHMETIC_OPERATORS:
    return make_value(ARITHMETIC_OPERATORS[op.type](x, y), NUMBER)
  if op.type in COMPARISON_OPERATORS:
    return make_boolean(COMPARISON_OPERATORS[op.type](x, y))
  if op.type in EQUALITY_OPERATORS:
    return make_boolean(EQUALITY_OPERATORS[op.type](x, y))
  raise operator_error(op.lexeme, left, op.line)


def eval_logical(expr: Logical, env: Dict, context: Dict) -> Dict:
  """Short-circuit and/or, yielding the deciding operand's own value"""
  context['line'] = expr.operator.line
  left = eval_expr(expr.left, env, context)

  if expr.operator.type == TokenType.OR:
    if is_truth(left):
      return left
  elif not is_truth(left):
    return left

  return eval_expr(expr.right, env, context)


def eval_call(expr: Call, env: Dict, context: Dict) -> Dict:
  context['line'] = expr.paren.line
  callee = eval_expr(expr.callee, env, context)

  if type_name(callee) != FUNCTION:
    raise SplaxRuntimeError("Can only call functions.", expr.paren.line)

  arguments = [eval_expr(argument, env, context) for argument in expr.arguments]
  return call_function(callee, arguments, expr.paren.line, context)


def call_function(function: Dict, arguments: List[Dict], line: int, context: Dict) -> Dict:
  """Run a function body in a fresh scope whose parent is the function's closure"""
  declaration = function['value']['declaration']
  closure = function['value']['closure']

  if len(arguments) != len(declaration.params):
    raise arity_error(declaration.name.lexeme, len(declaration.params), len(arguments), line)

  if context['debug']:
    logger.debug("call %s/%d", declaration.name.lexeme, len(arguments))

  call_env = make_runtime_env(closure)
  for param, argument in zip(declaration.params, arguments):
    env_define(call_env, param.lexeme, argument)

  context['line'] = line
  signal = exec_block(declaration.body, call_env, context)
  if signal is not None:
    return signal['value']
  return make_null()


# ============================================================================
# STATEMENTS
# ============================================================================

def exec_stmt(stmt: Any, env: Dict, context: Dict) -> Optional[Dict]:
  """
  Execute a statement for its side effects.
  Returns a return signal if a `return` ran, otherwise None.
  """
  if context['debug']:
    logger.debug("executing %s", type(stmt).__name__)

  if isinstance(stmt, ExprStmt):
    eval_expr(stmt.expression, env, context)
  elif isinstance(stmt, Print):
    splax_print(eval_expr(stmt.expression, env, context), context)
  elif isinstance(stmt, Let):
    value = make_null()
    if stmt.initializer is not None:
      value = eval_expr(stmt.initializer, env, context)
    env_define(env, stmt.name.lexeme, value)
  elif isinstance(stmt, Block):
    return exec_block(stmt.statements, make_runtime_env(env), context)
  elif isinstance(stmt, If):
    if is_truth(eval_expr(stmt.condition, env, context)):
      return exec_stmt(stmt.then_branch, env, context)
    elif stmt.else_branch is not None:
      return exec_stmt(stmt.else_branch, env, context)
  elif isinstance(stmt, While):
    while is_truth(eval_expr(stmt.condition, env, context)):
      signal = exec_stmt(stmt.body, env, context)
      if signal is not None:
        return signal
  elif isinstance(stmt, Function):
    env_define(env, stmt.name.lexeme, make_function(stmt, env))
  elif isinstance(stmt, Return):
    value = make_null()
    if stmt.value is not None:
      value = eval_expr(stmt.value, env, context)
    return make_return_signal(value)
  else:
    raise TypeError(f"Unknown statement node: {type(stmt).__name__}")

  return None


def exec_block(statements: Any, env: Dict, context: Dict) -> Optional[Dict]:
  """Execute statements in order in env, stopping at the first return signal"""
  for stmt in statements:
    signal = exec_stmt(stmt, env, context)
    if signal is not None:
      return signal
  return None


# ============================================================================
# PROGRAM EVALUATION
# ============================================================================

def interpret_program(statements: List[Any], env: Optional[Dict] = None,
                      context: Optional[Dict] = None,
                      diagnostics: Optional[DiagnosticCollector] = None) -> List[Dict]:
  """
  Execute a program's statements in order against env (a fresh global scope
  by default). The first runtime error is recorded as a diagnostic and stops
  the program; the diagnostics list is returned.
  """
  if env is None:
    env = create_builtin_runtime_env()
  if context is None:
    context = make_execution_context()
  collector = diagnostics if diagnostics is not None else DiagnosticCollector()

  for stmt in statements:
    try:
      exec_stmt(stmt, env, context)
    except SplaxRuntimeError as e:
      logger.debug("runtime error at line %d: %s", e.line, e.message)
      collector.report(RUNTIME, e.line, e.message)
      break
    except RecursionError:
      collector.report(RUNTIME, context['line'], "Maximum recursion depth exceeded.")
      break

  return collector.diagnostics


# ============================================================================
# FACTORY FUNCTIONS
# ============================================================================

class SplaxInterpreter:
  """Interpreter with a persistent global environment"""

  def __init__(self, output: Any = None, debug: bool = False):
    self.global_env = create_builtin_runtime_env()
    self.context = make_execution_context(output, debug)
    if debug:
      logging.getLogger("splax").setLevel(logging.DEBUG)

  def interpret_program(self, statements: List[Any],
                        diagnostics: Optional[DiagnosticCollector] = None) -> List[Dict]:
    return interpret_program(statements, self.global_env, self.context, diagnostics)


def create_interpreter(debug: bool = False, output: Any = None) -> SplaxInterpreter:
  """Factory function returning an interpreter"""
  return SplaxInterpreter(output=output, debug=debug)

