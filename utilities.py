"""
Utilities module for the Splax interpreter
Runtime value constructors, truthiness, rendering and error message builders
"""

from typing import Any, Dict
import math

from error_handling import SplaxRuntimeError


NUMBER = "Number"
STRING = "String"
BOOLEAN = "Boolean"
NULL = "Null"
FUNCTION = "Function"


# ==================== VALUE CONSTRUCTORS ====================

def make_value(value: Any, type_name: str) -> Dict:
  """Create an immutable runtime value"""
  return {
      'value': value,
      'type': type_name
  }


def make_number(value: float) -> Dict:
  return make_value(float(value), NUMBER)


def make_string(value: str) -> Dict:
  return make_value(value, STRING)


def make_boolean(value: bool) -> Dict:
  return make_value(bool(value), BOOLEAN)


def make_null() -> Dict:
  return make_value(None, NULL)


def make_function(declaration: Any, closure: Dict) -> Dict:
  """Create a function value capturing its declaring environment"""
  return make_value({
      'declaration': declaration,
      'closure': closure
  }, FUNCTION)


# ==================== TYPE CHECKING UTILITIES ====================

def is_value_dict(val: Any) -> bool:
  """
  Check if value is a wrapped value dict

  Args:
    val: Value to check

  Returns:
    True if val is a dict with 'type' and 'value' keys
  """
  return isinstance(val, dict) and 'type' in val and 'value' in val


def type_name(val: Dict) -> str:
  return val['type'] if is_value_dict(val) else 'Unknown'


def is_truth(val: Dict) -> bool:
  """
  Truthiness of a runtime value

  Booleans are themselves, numbers are true unless exactly 0,
  null is false and strings are true unless empty.
  """
  kind = type_name(val)
  if kind == BOOLEAN:
    return val['value']
  if kind == NUMBER:
    return val['value'] != 0
  if kind == NULL:
    return False
  if kind == STRING:
    return val['value'] != ""
  # functions are always truthy
  return True


# ==================== RENDERING ====================

def format_number(number: float) -> str:
  """Render a float the way Splax prints it: integral values without '.0'"""
  if math.isnan(number):
    return "NaN"
  if math.isinf(number):
    return "inf" if number > 0 else "-inf"
  if number.is_integer():
    return str(int(number))
  return repr(number)


def stringify(val: Dict) -> str:
  """Textual rendering of a runtime value"""
  kind = type_name(val)
  if kind == NUMBER:
    return format_number(val['value'])
  elif kind == STRING:
    return val['value']
  elif kind == BOOLEAN:
    return "true" if val['value'] else "false"
  elif kind == NULL:
    return "null"
  elif kind == FUNCTION:
    return f"<fn {val['value']['declaration'].name.lexeme}>"
  return f"<{kind}>"


# ==================== ERROR MESSAGE BUILDERS ====================

def operator_error(op: str, left: Dict, line: int) -> SplaxRuntimeError:
  """
  Generate an error for an operator its operand type does not support

  Args:
    op: Operator lexeme
    left: Left operand value
    line: Source line of the operator

  Returns:
    SplaxRuntimeError with formatted message
  """
  return SplaxRuntimeError(
    f"Unsupported operator '{op}' for '{type_name(left)}'.", line
  )


def operation_error(op: str, left: Dict, right: Dict, line: int) -> SplaxRuntimeError:
  """
  Generate an operand type mismatch error

  Args:
    op: Operator lexeme
    left: Left operand value
    right: Right operand value
    line: Source line of the operator

  Returns:
    SplaxRuntimeError with formatted message
  """
  return SplaxRuntimeError(
    f"Unsupported operand type(s) for '{op}': '{type_name(left)}' and '{type_name(right)}'.",
    line
  )


def arity_error(func_name: str, expected: int, got: int, line: int) -> SplaxRuntimeError:
  """
  Generate arity mismatch error

  Args:
    func_name: Function name
    expected: Expected number of arguments
    got: Actual number of arguments
    line: Source line of the call

  Returns:
    SplaxRuntimeError with formatted message
  """
  return SplaxRuntimeError(
    f"Function '{func_name}' expected {expected} arguments but got {got}.", line
  )


def undefined_variable_error(name: str, line: int, assignment: bool = False) -> SplaxRuntimeError:
  if assignment:
    return SplaxRuntimeError(f"Assignment to undefined variable '{name}'.", line)
  return SplaxRuntimeError(f"Reference to undefined variable '{name}'.", line)
