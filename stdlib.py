"""
Monkey Standard Library
Builtin functions looked up by name when an identifier is not bound in scope
Builtins never mutate their arguments; container results are new objects
"""

from typing import Dict, List, Optional

from objects import (
  MonkeyObject,
  Integer,
  String,
  Array,
  Builtin,
  NULL,
  ARRAY_OBJ,
)
from utilities import (
  validate_arity,
  argument_not_supported_error,
  argument_type_error,
)


# ============================================================================
# PRINT FUNCTIONS
# ============================================================================

def monkey_puts(*args: MonkeyObject) -> MonkeyObject:
  """Print each argument on its own line"""
  for arg in args:
    print(arg.inspect())
  return NULL


def monkey_write(*args: MonkeyObject) -> MonkeyObject:
  """Output hook for embedding hosts; on the command line it prints like puts"""
  for arg in args:
    print(arg.inspect())
  return NULL


# ============================================================================
# SEQUENCE FUNCTIONS
# ============================================================================

def monkey_len(*args: MonkeyObject) -> MonkeyObject:
  """Get length of a string or array"""
  error = validate_arity(list(args), 1)
  if error is not None:
    return error

  arg = args[0]
  if isinstance(arg, String):
    return Integer(len(arg.value))
  elif isinstance(arg, Array):
    return Integer(len(arg.elements))
  else:
    return argument_not_supported_error("len", arg)


def monkey_first(*args: MonkeyObject) -> MonkeyObject:
  """Get first element of an array, or null when empty"""
  error = validate_arity(list(args), 1)
  if error is not None:
    return error
  if not isinstance(args[0], Array):
    return argument_type_error("first", ARRAY_OBJ, args[0])

  elements = args[0].elements
  return elements[0] if elements else NULL


def monkey_last(*args: MonkeyObject) -> MonkeyObject:
  """Get last element of an array, or null when empty"""
  error = validate_arity(list(args), 1)
  if error is not None:
    return error
  if not isinstance(args[0], Array):
    return argument_type_error("last", ARRAY_OBJ, args[0])

  elements = args[0].elements
  return elements[-1] if elements else NULL


def monkey_rest(*args: MonkeyObject) -> MonkeyObject:
  """Get a new array holding all but the first element, or null when empty"""
  error = validate_arity(list(args), 1)
  if error is not None:
    return error
  if not isinstance(args[0], Array):
    return argument_type_error("rest", ARRAY_OBJ, args[0])

  elements = args[0].elements
  if not elements:
    return NULL
  return Array(elements[1:])


def monkey_push(*args: MonkeyObject) -> MonkeyObject:
  """Get a new array with the second argument appended"""
  error = validate_arity(list(args), 2)
  if error is not None:
    return error
  if not isinstance(args[0], Array):
    return argument_type_error("push", ARRAY_OBJ, args[0])

  return Array(args[0].elements + (args[1],))


# ============================================================================
# REGISTRY
# ============================================================================

BUILTINS: Dict[str, Builtin] = {
    'len': Builtin(monkey_len, 'len'),
    'first': Builtin(monkey_first, 'first'),
    'last': Builtin(monkey_last, 'last'),
    'rest': Builtin(monkey_rest, 'rest'),
    'push': Builtin(monkey_push, 'push'),
    'puts': Builtin(monkey_puts, 'puts'),
    'write': Builtin(monkey_write, 'write'),
}


def lookup_builtin(name: str) -> Optional[Builtin]:
  return BUILTINS.get(name)


def builtin_names() -> List[str]:
  return sorted(BUILTINS.keys())
