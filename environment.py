"""
Monkey runtime environment
Chained name -> object scopes implementing lexical nesting and closures
"""

from typing import Dict, List, Optional

from objects import MonkeyObject


class Environment:
  """One binding frame plus an optional link to its enclosing frame"""

  def __init__(self, outer: Optional['Environment'] = None):
    self.store: Dict[str, MonkeyObject] = {}
    self.outer = outer

  def get(self, name: str) -> Optional[MonkeyObject]:
    """Look up name, walking outward; None on a miss"""
    scope: Optional[Environment] = self
    while scope is not None:
      value = scope.store.get(name)
      if value is not None:
        return value
      scope = scope.outer
    return None

  def set(self, name: str, value: MonkeyObject) -> MonkeyObject:
    """Bind name in this frame only; outer bindings are shadowed, never changed"""
    self.store[name] = value
    return value

  def local_names(self) -> List[str]:
    return sorted(self.store.keys())

  def __contains__(self, name: str) -> bool:
    return self.get(name) is not None


def new_enclosed_environment(outer: Environment) -> Environment:
  """Create a child scope, as used for each function invocation"""
  return Environment(outer)
