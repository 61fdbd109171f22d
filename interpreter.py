"""
Monkey Interpreter - tree-walking evaluator
Walks the AST against a chained Environment; runtime errors are Error values
that short-circuit every enclosing construct up to the top level
"""

from typing import Callable, Dict, List, Optional, Type
from dataclasses import dataclass, field
import sys

import syntax_tree as ast
from environment import Environment, new_enclosed_environment
from error_handling import MonkeyStackExhausted
from objects import (
  MonkeyObject,
  Integer,
  String,
  Array,
  Hash,
  HashPair,
  Function,
  Builtin,
  ReturnValue,
  Error,
  NULL,
  is_hashable,
)
from parsing import create_parser
from stdlib import lookup_builtin
from utilities import (
  is_error,
  is_truthy,
  native_bool_to_boolean,
  wrap_int64,
  truncating_divide,
  type_mismatch_error,
  unknown_prefix_operator_error,
  unknown_infix_operator_error,
  identifier_not_found_error,
  not_a_function_error,
  index_not_supported_error,
  unusable_hash_key_error,
  arity_error,
  division_by_zero_error,
)


# ============================================================================
# DISPATCH
# ============================================================================

def eval_ast(node: Optional[ast.Node], env: Environment, debug: bool = False) -> Optional[MonkeyObject]:
  """
  Evaluate an AST node in env.
  Returns None for nodes that produce no value (e.g. an empty program).
  """
  if node is None:
    return None

  if debug:
    print(f"Evaluating: {type(node).__name__}")

  evaluator = NODE_EVALUATORS.get(type(node))
  if evaluator is None:
    if debug:
      print(f"Unknown node type: {type(node).__name__}")
    return None
  return evaluator(node, env, debug)


# ============================================================================
# STATEMENTS
# ============================================================================

def eval_program(node: ast.Program, env: Environment, debug: bool = False) -> Optional[MonkeyObject]:
  """Evaluate top-level statements, unwrapping a return at the top"""
  result = None
  for statement in node.statements:
    result = eval_ast(statement, env, debug)
    if isinstance(result, ReturnValue):
      return result.value
    if isinstance(result, Error):
      return result
  return result


def eval_block_statement(node: ast.BlockStatement, env: Environment, debug: bool = False) -> Optional[MonkeyObject]:
  """Evaluate a block; a ReturnValue is passed up still wrapped"""
  result = None
  for statement in node.statements:
    result = eval_ast(statement, env, debug)
    if isinstance(result, (ReturnValue, Error)):
      return result
  return result


def eval_expression_statement(node: ast.ExpressionStatement, env: Environment, debug: bool = False) -> Optional[MonkeyObject]:
  return eval_ast(node.expression, env, debug)


def eval_let_statement(node: ast.LetStatement, env: Environment, debug: bool = False) -> Optional[MonkeyObject]:
  value = eval_ast(node.value, env, debug)
  if is_error(value):
    return value
  env.set(node.name.value, value)
  return value


def eval_return_statement(node: ast.ReturnStatement, env: Environment, debug: bool = False) -> Optional[MonkeyObject]:
  value = eval_ast(node.return_value, env, debug)
  if is_error(value):
    return value
  return ReturnValue(value)


# ============================================================================
# LITERALS
# ============================================================================

def eval_integer_literal(node: ast.IntegerLiteral, env: Environment, debug: bool = False) -> MonkeyObject:
  return Integer(node.value)


def eval_string_literal(node: ast.StringLiteral, env: Environment, debug: bool = False) -> MonkeyObject:
  return String(node.value)


def eval_boolean_literal(node: ast.BooleanLiteral, env: Environment, debug: bool = False) -> MonkeyObject:
  return native_bool_to_boolean(node.value)


def eval_array_literal(node: ast.ArrayLiteral, env: Environment, debug: bool = False) -> MonkeyObject:
  elements = eval_expressions(node.elements, env, debug)
  if len(elements) == 1 and is_error(elements[0]):
    return elements[0]
  return Array(tuple(elements))


def eval_hash_literal(node: ast.HashLiteral, env: Environment, debug: bool = False) -> MonkeyObject:
  pairs = {}
  for key_node, value_node in node.pairs:
    key = eval_ast(key_node, env, debug)
    if is_error(key):
      return key
    if not is_hashable(key):
      return unusable_hash_key_error(key)

    value = eval_ast(value_node, env, debug)
    if is_error(value):
      return value

    pairs[key.hash_key()] = HashPair(key, value)
  return Hash(pairs)


def eval_function_literal(node: ast.FunctionLiteral, env: Environment, debug: bool = False) -> MonkeyObject:
  # Capturing env by reference is what makes closures work
  return Function(node.parameters, node.body, env)


# ============================================================================
# IDENTIFIERS
# ============================================================================

def eval_identifier(node: ast.Identifier, env: Environment, debug: bool = False) -> MonkeyObject:
  """Look up in the scope chain, then the builtin registry"""
  value = env.get(node.value)
  if value is not None:
    return value

  builtin = lookup_builtin(node.value)
  if builtin is not None:
    return builtin

  return identifier_not_found_error(node.value)


# ============================================================================
# OPERATORS
# ============================================================================

def eval_prefix_expression(node: ast.PrefixExpression, env: Environment, debug: bool = False) -> MonkeyObject:
  right = eval_ast(node.right, env, debug)
  if is_error(right):
    return right

  if node.operator == "!":
    return native_bool_to_boolean(not is_truthy(right))
  if node.operator == "-":
    if not isinstance(right, Integer):
      return unknown_prefix_operator_error("-", right)
    return Integer(wrap_int64(-right.value))
  return unknown_prefix_operator_error(node.operator, right)


def eval_infix_expression(node: ast.InfixExpression, env: Environment, debug: bool = False) -> MonkeyObject:
  left = eval_ast(node.left, env, debug)
  if is_error(left):
    return left

  right = eval_ast(node.right, env, debug)
  if is_error(right):
    return right

  return eval_infix_operator(node.operator, left, right)


def eval_infix_operator(op: str, left: MonkeyObject, right: MonkeyObject) -> MonkeyObject:
  if isinstance(left, Integer) and isinstance(right, Integer):
    return eval_integer_infix(op, left, right)
  if isinstance(left, String) and isinstance(right, String):
    return eval_string_infix(op, left, right)

  # Everything else compares by identity: only the shared singletons match
  if op == "==":
    return native_bool_to_boolean(left is right)
  if op == "!=":
    return native_bool_to_boolean(left is not right)

  if left.type() != right.type():
    return type_mismatch_error(left, op, right)
  return unknown_infix_operator_error(left, op, right)


def eval_integer_infix(op: str, left: Integer, right: Integer) -> MonkeyObject:
  a, b = left.value, right.value

  if op == "+":
    return Integer(wrap_int64(a + b))
  elif op == "-":
    return Integer(wrap_int64(a - b))
  elif op == "*":
    return Integer(wrap_int64(a * b))
  elif op == "/":
    if b == 0:
      return division_by_zero_error(a, b)
    return Integer(wrap_int64(truncating_divide(a, b)))
  elif op == "<":
    return native_bool_to_boolean(a < b)
  elif op == ">":
    return native_bool_to_boolean(a > b)
  elif op == "==":
    return native_bool_to_boolean(a == b)
  elif op == "!=":
    return native_bool_to_boolean(a != b)
  return unknown_infix_operator_error(left, op, right)


def eval_string_infix(op: str, left: String, right: String) -> MonkeyObject:
  if op != "+":
    return unknown_infix_operator_error(left, op, right)
  return String(left.value + right.value)


# ============================================================================
# CONTROL FLOW
# ============================================================================

def eval_if_expression(node: ast.IfExpression, env: Environment, debug: bool = False) -> MonkeyObject:
  condition = eval_ast(node.condition, env, debug)
  if is_error(condition):
    return condition

  if is_truthy(condition):
    result = eval_ast(node.consequence, env, debug)
  elif node.alternative is not None:
    result = eval_ast(node.alternative, env, debug)
  else:
    return NULL
  # An empty block still yields a value
  return NULL if result is None else result


# ============================================================================
# CALLS AND INDEXING
# ============================================================================

def eval_expressions(nodes, env: Environment, debug: bool = False) -> List[MonkeyObject]:
  """Evaluate left to right; on error return a one-element list holding it"""
  result = []
  for node in nodes:
    evaluated = eval_ast(node, env, debug)
    if is_error(evaluated):
      return [evaluated]
    result.append(evaluated)
  return result


def eval_call_expression(node: ast.CallExpression, env: Environment, debug: bool = False) -> MonkeyObject:
  function = eval_ast(node.function, env, debug)
  if is_error(function):
    return function

  args = eval_expressions(node.arguments, env, debug)
  if len(args) == 1 and is_error(args[0]):
    return args[0]

  return apply_function(function, args, debug)


def apply_function(function: MonkeyObject, args: List[MonkeyObject], debug: bool = False) -> MonkeyObject:
  if isinstance(function, Function):
    if len(args) != len(function.parameters):
      return arity_error(len(args), len(function.parameters))
    extended_env = extend_function_env(function, args)
    evaluated = eval_ast(function.body, extended_env, debug)
    return unwrap_return_value(evaluated)

  if isinstance(function, Builtin):
    return function.fn(*args)

  return not_a_function_error(function)


def extend_function_env(function: Function, args: List[MonkeyObject]) -> Environment:
  """New call frame whose outer link is the captured environment"""
  env = new_enclosed_environment(function.env)
  for param, arg in zip(function.parameters, args):
    env.set(param.value, arg)
  return env


def unwrap_return_value(value: Optional[MonkeyObject]) -> MonkeyObject:
  if isinstance(value, ReturnValue):
    return value.value
  if value is None:
    return NULL
  return value


def eval_index_expression(node: ast.IndexExpression, env: Environment, debug: bool = False) -> MonkeyObject:
  left = eval_ast(node.left, env, debug)
  if is_error(left):
    return left

  index = eval_ast(node.index, env, debug)
  if is_error(index):
    return index

  if isinstance(left, Array) and isinstance(index, Integer):
    return eval_array_index(left, index)
  if isinstance(left, Hash):
    return eval_hash_index(left, index)
  return index_not_supported_error(left)


def eval_array_index(array: Array, index: Integer) -> MonkeyObject:
  idx = index.value
  if idx < 0 or idx >= len(array.elements):
    return NULL
  return array.elements[idx]


def eval_hash_index(hash_obj: Hash, index: MonkeyObject) -> MonkeyObject:
  if not is_hashable(index):
    return unusable_hash_key_error(index)
  value = hash_obj.get(index)
  return NULL if value is None else value


NODE_EVALUATORS: Dict[Type[ast.Node], Callable] = {
    ast.Program: eval_program,
    ast.BlockStatement: eval_block_statement,
    ast.ExpressionStatement: eval_expression_statement,
    ast.LetStatement: eval_let_statement,
    ast.ReturnStatement: eval_return_statement,
    ast.IntegerLiteral: eval_integer_literal,
    ast.StringLiteral: eval_string_literal,
    ast.BooleanLiteral: eval_boolean_literal,
    ast.ArrayLiteral: eval_array_literal,
    ast.HashLiteral: eval_hash_literal,
    ast.FunctionLiteral: eval_function_literal,
    ast.Identifier: eval_identifier,
    ast.PrefixExpression: eval_prefix_expression,
    ast.InfixExpression: eval_infix_expression,
    ast.IfExpression: eval_if_expression,
    ast.CallExpression: eval_call_expression,
    ast.IndexExpression: eval_index_expression,
}


# ============================================================================
# ENTRY POINTS
# ============================================================================

# Each Monkey call costs roughly a dozen host frames
DEFAULT_RECURSION_LIMIT = 10_000


def evaluate(program: ast.Program, env: Environment, debug: bool = False,
             recursion_limit: int = DEFAULT_RECURSION_LIMIT) -> Optional[MonkeyObject]:
  """
  Evaluate a parsed program under a host recursion limit of recursion_limit.
  The previous limit is restored afterwards; host stack overflow becomes MonkeyStackExhausted.
  """
  previous_limit = sys.getrecursionlimit()
  sys.setrecursionlimit(recursion_limit)
  try:
    return eval_ast(program, env, debug)
  except RecursionError as e:
    raise MonkeyStackExhausted(recursion_limit) from e
  finally:
    sys.setrecursionlimit(previous_limit)


@dataclass
class RunResult:
  success: bool
  value: Optional[MonkeyObject] = None
  errors: List[str] = field(default_factory=list)
  program: Optional[ast.Program] = None
  stack_exhausted: bool = False


def run(source: str, env: Optional[Environment] = None, debug: bool = False,
        recursion_limit: int = DEFAULT_RECURSION_LIMIT) -> RunResult:
  """
  Parse and evaluate source text.

  Syntax errors: success=False, errors holds the parser's messages, no value.
  Runtime Error result: success=False, errors holds its inspect() text, value is the Error.
  Stack exhaustion: success=False, stack_exhausted=True, no value.
  """
  program, parse_errors = create_parser(debug).parse_string(source)
  if parse_errors:
    return RunResult(success=False, errors=list(parse_errors))

  if env is None:
    env = Environment()

  try:
    evaluated = evaluate(program, env, debug, recursion_limit)
  except MonkeyStackExhausted as e:
    return RunResult(success=False, errors=[e.message], program=program,
                     stack_exhausted=True)

  if isinstance(evaluated, Error):
    return RunResult(success=False, value=evaluated, errors=[evaluated.inspect()],
                     program=program)

  return RunResult(success=True, value=evaluated, program=program)


# ============================================================================
# FACTORY FUNCTIONS (for main.py)
# ============================================================================

class MonkeyInterpreter:
  """Interpreter session holding one root environment across runs"""

  def __init__(self, debug: bool = False, recursion_limit: int = DEFAULT_RECURSION_LIMIT):
    self.debug = debug
    self.recursion_limit = recursion_limit
    self.environment = Environment()

  def run(self, source: str) -> RunResult:
    return run(source, self.environment, self.debug, self.recursion_limit)

  def reset(self) -> None:
    self.environment = Environment()


def create_interpreter(debug: bool = False,
                       recursion_limit: int = DEFAULT_RECURSION_LIMIT) -> MonkeyInterpreter:
  """Factory function returning an interpreter"""
  return MonkeyInterpreter(debug=debug, recursion_limit=recursion_limit)


def create_debug_interpreter() -> MonkeyInterpreter:
  """Factory function returning a debug interpreter"""
  return create_interpreter(debug=True)
