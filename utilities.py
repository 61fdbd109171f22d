"""
Utilities module for the Monkey interpreter
Error message builders and small helpers shared by the evaluator and stdlib
"""

from typing import List, Optional

from objects import (
  MonkeyObject,
  Error,
  ERROR_OBJ,
  TRUE,
  FALSE,
  NULL,
)


# ==================== ERROR MESSAGE BUILDERS ====================

def new_error(message: str) -> Error:
  return Error(message)


def type_mismatch_error(left: MonkeyObject, op: str, right: MonkeyObject) -> Error:
  """
  Generate type mismatch error for operands of different kinds

  Examples:
    5 + true -> "type mismatch: INTEGER + BOOLEAN"
  """
  return new_error(f"type mismatch: {left.type()} {op} {right.type()}")


def unknown_prefix_operator_error(op: str, right: MonkeyObject) -> Error:
  """
  Generate error for a prefix operator the operand kind does not support

  Examples:
    -true -> "unknown operator: -BOOLEAN"
  """
  return new_error(f"unknown operator: {op}{right.type()}")


def unknown_infix_operator_error(left: MonkeyObject, op: str, right: MonkeyObject) -> Error:
  """
  Generate error for an infix operator the operand kinds do not support

  Examples:
    true + false -> "unknown operator: BOOLEAN + BOOLEAN"
  """
  return new_error(f"unknown operator: {left.type()} {op} {right.type()}")


def identifier_not_found_error(name: str) -> Error:
  return new_error(f"identifier not found: {name}")


def not_a_function_error(obj: MonkeyObject) -> Error:
  return new_error(f"not a function: {obj.type()}")


def index_not_supported_error(obj: MonkeyObject) -> Error:
  return new_error(f"index operator not supported: {obj.type()}")


def unusable_hash_key_error(obj: MonkeyObject) -> Error:
  return new_error(f"unusable as hash key: {obj.type()}")


def arity_error(got: int, want: int) -> Error:
  return new_error(f"wrong number of arguments. got={got}, want={want}")


def argument_not_supported_error(func_name: str, obj: MonkeyObject) -> Error:
  return new_error(f"argument to '{func_name}' not supported, got {obj.type()}")


def argument_type_error(func_name: str, expected: str, obj: MonkeyObject) -> Error:
  return new_error(f"argument to '{func_name}' must be {expected}, got {obj.type()}")


def division_by_zero_error(left: int, right: int) -> Error:
  return new_error(f"division by zero: {left} / {right}")


# ==================== VALIDATION UTILITIES ====================

def validate_arity(args: List[MonkeyObject], want: int) -> Optional[Error]:
  """Return an arity error when len(args) != want, otherwise None"""
  if len(args) != want:
    return arity_error(len(args), want)
  return None


def is_error(obj: Optional[MonkeyObject]) -> bool:
  return obj is not None and obj.type() == ERROR_OBJ


def is_truthy(obj: MonkeyObject) -> bool:
  """false and null are falsy; everything else, including 0, is truthy"""
  return obj is not FALSE and obj is not NULL


def native_bool_to_boolean(value: bool) -> MonkeyObject:
  return TRUE if value else FALSE


# ==================== INTEGER ARITHMETIC ====================

def wrap_int64(value: int) -> int:
  """Wrap an unbounded int into the signed 64-bit range"""
  value &= 0xffffffffffffffff
  if value >= 0x8000000000000000:
    value -= 0x10000000000000000
  return value


def truncating_divide(left: int, right: int) -> int:
  """Integer division rounding toward zero (-7 / 2 == -3)"""
  quotient = abs(left) // abs(right)
  if (left < 0) != (right < 0):
    quotient = -quotient
  return quotient
