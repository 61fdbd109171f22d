"""
Monkey runtime object system
Tagged runtime values, the HashKey contract for hash keys, and the shared singletons
"""

from typing import Callable, Dict, Optional, Tuple, TYPE_CHECKING
from dataclasses import dataclass, field

import syntax_tree as ast

if TYPE_CHECKING:
  from environment import Environment


INTEGER_OBJ = "INTEGER"
BOOLEAN_OBJ = "BOOLEAN"
STRING_OBJ = "STRING"
NULL_OBJ = "NULL"
ARRAY_OBJ = "ARRAY"
HASH_OBJ = "HASH"
FUNCTION_OBJ = "FUNCTION"
BUILTIN_OBJ = "BUILTIN"
RETURN_VALUE_OBJ = "RETURN_VALUE"
ERROR_OBJ = "ERROR"

FNV_OFFSET_BASIS = 0xcbf29ce484222325
FNV_PRIME = 0x100000001b3
UINT64_MASK = 0xffffffffffffffff


class MonkeyObject:
  """Base for every runtime value"""
  object_type = ""

  def type(self) -> str:
    return self.object_type

  def inspect(self) -> str:
    raise NotImplementedError


@dataclass(frozen=True)
class HashKey:
  """(type tag, 64-bit hash) identity of a hashable value"""
  type: str
  value: int


def fnv1a_64(text: str) -> int:
  """64-bit FNV-1a over the UTF-8 encoding of text"""
  h = FNV_OFFSET_BASIS
  for byte in text.encode('utf-8'):
    h ^= byte
    h = (h * FNV_PRIME) & UINT64_MASK
  return h


# ============================================================================
# SCALARS
# ============================================================================

@dataclass(frozen=True, eq=False)
class Integer(MonkeyObject):
  value: int
  object_type = INTEGER_OBJ

  def inspect(self) -> str:
    return str(self.value)

  def hash_key(self) -> HashKey:
    return HashKey(INTEGER_OBJ, self.value)


@dataclass(frozen=True, eq=False)
class Boolean(MonkeyObject):
  value: bool
  object_type = BOOLEAN_OBJ

  def inspect(self) -> str:
    return "true" if self.value else "false"

  def hash_key(self) -> HashKey:
    return HashKey(BOOLEAN_OBJ, 1 if self.value else 0)


@dataclass(frozen=True, eq=False)
class String(MonkeyObject):
  value: str
  object_type = STRING_OBJ

  def inspect(self) -> str:
    return self.value

  def hash_key(self) -> HashKey:
    return HashKey(STRING_OBJ, fnv1a_64(self.value))


class Null(MonkeyObject):
  object_type = NULL_OBJ

  def inspect(self) -> str:
    return "null"

  def __repr__(self) -> str:
    return "Null()"


# Process-wide singletons; comparisons against these are by identity
TRUE = Boolean(True)
FALSE = Boolean(False)
NULL = Null()


def is_hashable(obj: MonkeyObject) -> bool:
  return isinstance(obj, (Integer, Boolean, String))


def same_key(a: MonkeyObject, b: MonkeyObject) -> bool:
  """Content equality for hashable values, used to reject hash collisions"""
  return a.type() == b.type() and a.value == b.value


# ============================================================================
# CONTAINERS
# ============================================================================

@dataclass(frozen=True, eq=False)
class Array(MonkeyObject):
  elements: Tuple[MonkeyObject, ...] = ()
  object_type = ARRAY_OBJ

  def inspect(self) -> str:
    return "[" + ", ".join(e.inspect() for e in self.elements) + "]"


@dataclass(frozen=True)
class HashPair:
  key: MonkeyObject
  value: MonkeyObject


@dataclass(frozen=True, eq=False)
class Hash(MonkeyObject):
  """Mapping from HashKey to the original (key, value) pair"""
  pairs: Dict[HashKey, HashPair] = field(default_factory=dict)
  object_type = HASH_OBJ

  def get(self, key: MonkeyObject) -> Optional[MonkeyObject]:
    pair = self.pairs.get(key.hash_key())
    if pair is None or not same_key(pair.key, key):
      return None
    return pair.value

  def inspect(self) -> str:
    pairs = [f"{p.key.inspect()}: {p.value.inspect()}" for p in self.pairs.values()]
    return "{" + ", ".join(pairs) + "}"


# ============================================================================
# CALLABLES
# ============================================================================

@dataclass(frozen=True, eq=False)
class Function(MonkeyObject):
  """User function closing over its definition-time environment"""
  parameters: Tuple[ast.Identifier, ...]
  body: ast.BlockStatement
  env: 'Environment'
  object_type = FUNCTION_OBJ

  def inspect(self) -> str:
    params = ", ".join(str(p) for p in self.parameters)
    return f"fn({params}) {{\n{self.body}\n}}"


BuiltinFunction = Callable[..., MonkeyObject]


@dataclass(frozen=True, eq=False)
class Builtin(MonkeyObject):
  fn: BuiltinFunction
  name: str = ""
  object_type = BUILTIN_OBJ

  def inspect(self) -> str:
    return "builtin function"


# ============================================================================
# CONTROL FLOW
# ============================================================================

@dataclass(frozen=True, eq=False)
class ReturnValue(MonkeyObject):
  """Internal marker carrying a returned value up through blocks"""
  value: MonkeyObject
  object_type = RETURN_VALUE_OBJ

  def inspect(self) -> str:
    return self.value.inspect()


@dataclass(frozen=True, eq=False)
class Error(MonkeyObject):
  message: str
  object_type = ERROR_OBJ

  def inspect(self) -> str:
    return "ERROR: " + self.message
