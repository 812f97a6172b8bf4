"""
Splax Standard Library
The print statement's output and the bindings every program starts with
"""

from typing import Dict, Optional
import sys

from environment import make_runtime_env, env_define
from utilities import make_null, make_string, stringify


SPLAX_VERSION = "0.1.0"


# ============================================================================
# PRINT
# ============================================================================

def splax_print(value: Dict, context: Optional[Dict] = None) -> Dict:
  """Write a value's rendering and a newline to the context's output stream"""
  output = context.get('output') if context else None
  if output is None:
    output = sys.stdout
  output.write(stringify(value) + "\n")
  return make_null()


# ============================================================================
# GLOBALS
# ============================================================================

def create_builtin_runtime_env() -> Dict:
  """Create the global runtime environment with built-in bindings"""
  env = make_runtime_env()
  env_define(env, "__VERSION__", make_string(SPLAX_VERSION))
  return env
