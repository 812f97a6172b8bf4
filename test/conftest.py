"""
Test configuration for Splax tests
"""

import io
import sys
from pathlib import Path

import pytest

# Add the project root to Python path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from session import Session


@pytest.fixture
def run():
  """Compile source in a fresh session; return (printed lines, formatted diagnostics)"""
  def _run(source):
    output = io.StringIO()
    session = Session(output=output)
    session.compile(source)
    return output.getvalue().splitlines(), session.diagnostics.formatted()
  return _run
