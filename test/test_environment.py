"""
Environment tests for Splax
Scope chains: shadowing, enclosing lookup and in-place assignment
"""

import pytest
from environment import (
  make_runtime_env, env_define, env_get, env_assign, env_find, env_depth,
  env_user_bindings,
)
from error_handling import SplaxRuntimeError
from stdlib import create_builtin_runtime_env
from utilities import make_number, make_string


class TestEnvironment:
  """Test variable scopes"""

  @pytest.fixture
  def chain(self):
    """Global scope with one nested scope"""
    globals_env = make_runtime_env()
    inner = make_runtime_env(globals_env)
    return globals_env, inner

  def test_define_and_get(self, chain):
    globals_env, _ = chain
    env_define(globals_env, "x", make_number(1))
    assert env_get(globals_env, "x") == make_number(1)

  def test_define_overwrites_in_same_scope(self, chain):
    globals_env, _ = chain
    env_define(globals_env, "x", make_number(1))
    env_define(globals_env, "x", make_string("again"))
    assert env_get(globals_env, "x") == make_string("again")

  def test_lookup_walks_enclosing_scopes(self, chain):
    globals_env, inner = chain
    env_define(globals_env, "x", make_number(1))
    innermost = make_runtime_env(inner)
    assert env_get(innermost, "x") == make_number(1)
    assert env_depth(innermost) == 3

  def test_shadowing_leaves_outer_binding(self, chain):
    globals_env, inner = chain
    env_define(globals_env, "x", make_number(1))
    env_define(inner, "x", make_number(2))
    assert env_get(inner, "x") == make_number(2)
    assert env_get(globals_env, "x") == make_number(1)

  def test_assign_updates_the_owning_scope(self, chain):
    globals_env, inner = chain
    env_define(globals_env, "x", make_number(1))
    result = env_assign(inner, "x", make_number(5))
    assert result == make_number(5)
    assert "x" not in inner['bindings']
    assert env_get(globals_env, "x") == make_number(5)
    assert env_find(inner, "x") is globals_env

  def test_assign_never_creates_a_binding(self, chain):
    globals_env, inner = chain
    with pytest.raises(SplaxRuntimeError) as excinfo:
      env_assign(inner, "missing", make_number(1), line=4)
    assert excinfo.value.message == "Assignment to undefined variable 'missing'."
    assert excinfo.value.line == 4
    assert "missing" not in globals_env['bindings']

  def test_undefined_lookup(self, chain):
    _, inner = chain
    with pytest.raises(SplaxRuntimeError) as excinfo:
      env_get(inner, "nope", line=2)
    assert str(excinfo.value) == "[line 2] Error '' : Reference to undefined variable 'nope'."

  def test_scopes_are_shared_not_copied(self):
    parent = make_runtime_env()
    first = make_runtime_env(parent)
    second = make_runtime_env(parent)
    env_define(parent, "shared", make_number(0))
    env_assign(first, "shared", make_number(7))
    assert env_get(second, "shared") == make_number(7)

  def test_builtin_globals(self):
    env = create_builtin_runtime_env()
    assert env_get(env, "__VERSION__")['type'] == "String"
    assert env_user_bindings(env) == []
