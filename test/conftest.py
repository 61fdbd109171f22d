"""
Test configuration for the Monkey interpreter tests
"""

import pytest
import sys
from pathlib import Path

# Add the project root to Python path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from parsing import parse
from environment import Environment
from interpreter import eval_ast


def evaluate_source(source: str):
  """Parse source (asserting it is valid) and evaluate it in a fresh root scope"""
  program, errors = parse(source)
  assert errors == [], f"unexpected syntax errors: {errors}"
  return eval_ast(program, Environment())


@pytest.fixture
def evaluate():
  return evaluate_source
