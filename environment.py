"""
Splax runtime environments
A scope is a dictionary of bindings with a link to its enclosing scope.
Scopes are shared by reference: nested scopes and closures hold the same
parent dictionary, so a captured scope lives as long as its longest holder.
"""

from typing import Dict, Optional, List
import logging

from utilities import undefined_variable_error

logger = logging.getLogger("splax.environment")
logger.addHandler(logging.NullHandler())


def make_runtime_env(parent: Optional[Dict] = None, bindings: Optional[Dict] = None) -> Dict:
  """Create a runtime environment chained to parent"""
  return {
      'parent': parent,
      'bindings': dict(bindings) if bindings else {}
  }


def env_define(env: Dict, name: str, value: Dict) -> None:
  """Bind name in this scope, shadowing any outer binding"""
  logger.debug("define %s", name)
  env['bindings'][name] = value


def env_find(env: Dict, name: str) -> Optional[Dict]:
  """Return the innermost scope that binds name, or None"""
  scope = env
  while scope is not None:
    if name in scope['bindings']:
      return scope
    scope = scope['parent']
  return None


def env_get(env: Dict, name: str, line: int = 0) -> Dict:
  """Look name up from the innermost scope outward"""
  scope = env_find(env, name)
  if scope is None:
    raise undefined_variable_error(name, line)
  return scope['bindings'][name]


def env_assign(env: Dict, name: str, value: Dict, line: int = 0) -> Dict:
  """Overwrite an existing binding in place; never creates a new one"""
  scope = env_find(env, name)
  if scope is None:
    raise undefined_variable_error(name, line, assignment=True)
  logger.debug("assign %s", name)
  scope['bindings'][name] = value
  return value


def env_depth(env: Dict) -> int:
  """Number of scopes from env up to and including the global scope"""
  depth = 0
  scope = env
  while scope is not None:
    depth += 1
    scope = scope['parent']
  return depth


def env_user_bindings(env: Dict) -> List[str]:
  """Names bound in this scope that are not dunder built-ins"""
  return [name for name in env['bindings'] if not name.startswith('__')]
