"""
Monkey abstract syntax tree
Immutable node types produced by the parser and walked by the interpreter
"""

from typing import Optional, Tuple
from dataclasses import dataclass


class Node:
    """Base for every AST node"""

    def token_literal(self) -> str:
        return ""


class Statement(Node):
    """Marker base for statement nodes"""


class Expression(Node):
    """Marker base for expression nodes"""


# ============================================================================
# STATEMENTS
# ============================================================================

@dataclass(frozen=True)
class Program(Node):
    """Root node: the ordered top-level statements of a source text"""
    statements: Tuple[Statement, ...] = ()

    def token_literal(self) -> str:
        if self.statements:
            return self.statements[0].token_literal()
        return ""

    def __str__(self) -> str:
        return "".join(str(stmt) for stmt in self.statements)


@dataclass(frozen=True)
class LetStatement(Statement):
    name: 'Identifier'
    value: Expression

    def token_literal(self) -> str:
        return "let"

    def __str__(self) -> str:
        return f"let {self.name} = {self.value};"


@dataclass(frozen=True)
class ReturnStatement(Statement):
    return_value: Expression

    def token_literal(self) -> str:
        return "return"

    def __str__(self) -> str:
        return f"return {self.return_value};"


@dataclass(frozen=True)
class ExpressionStatement(Statement):
    """An expression used in statement position"""
    expression: Expression

    def token_literal(self) -> str:
        return self.expression.token_literal()

    def __str__(self) -> str:
        return str(self.expression)


@dataclass(frozen=True)
class BlockStatement(Statement):
    """Braced statement sequence used as if/function bodies"""
    statements: Tuple[Statement, ...] = ()

    def token_literal(self) -> str:
        return "{"

    def __str__(self) -> str:
        return "".join(str(stmt) for stmt in self.statements)


# ============================================================================
# EXPRESSIONS
# ============================================================================

@dataclass(frozen=True)
class Identifier(Expression):
    value: str

    def token_literal(self) -> str:
        return self.value

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class IntegerLiteral(Expression):
    value: int
    literal: str

    def token_literal(self) -> str:
        return self.literal

    def __str__(self) -> str:
        return self.literal


@dataclass(frozen=True)
class StringLiteral(Expression):
    value: str

    def token_literal(self) -> str:
        return self.value

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class BooleanLiteral(Expression):
    value: bool

    def token_literal(self) -> str:
        return "true" if self.value else "false"

    def __str__(self) -> str:
        return self.token_literal()


@dataclass(frozen=True)
class ArrayLiteral(Expression):
    elements: Tuple[Expression, ...] = ()

    def token_literal(self) -> str:
        return "["

    def __str__(self) -> str:
        return "[" + ", ".join(str(el) for el in self.elements) + "]"


@dataclass(frozen=True)
class HashLiteral(Expression):
    """Key/value expression pairs, kept in source order"""
    pairs: Tuple[Tuple[Expression, Expression], ...] = ()

    def token_literal(self) -> str:
        return "{"

    def __str__(self) -> str:
        pairs = [f"{key}:{value}" for key, value in self.pairs]
        return "{" + ", ".join(pairs) + "}"


@dataclass(frozen=True)
class PrefixExpression(Expression):
    operator: str
    right: Expression

    def token_literal(self) -> str:
        return self.operator

    def __str__(self) -> str:
        return f"({self.operator}{self.right})"


@dataclass(frozen=True)
class InfixExpression(Expression):
    left: Expression
    operator: str
    right: Expression

    def token_literal(self) -> str:
        return self.operator

    def __str__(self) -> str:
        return f"({self.left} {self.operator} {self.right})"


@dataclass(frozen=True)
class IfExpression(Expression):
    condition: Expression
    consequence: BlockStatement
    alternative: Optional[BlockStatement] = None

    def token_literal(self) -> str:
        return "if"

    def __str__(self) -> str:
        out = f"if{self.condition} {self.consequence}"
        if self.alternative is not None:
            out += f"else {self.alternative}"
        return out


@dataclass(frozen=True)
class FunctionLiteral(Expression):
    parameters: Tuple[Identifier, ...]
    body: BlockStatement

    def token_literal(self) -> str:
        return "fn"

    def __str__(self) -> str:
        params = ", ".join(str(p) for p in self.parameters)
        return f"fn({params}) {self.body}"


@dataclass(frozen=True)
class CallExpression(Expression):
    function: Expression
    arguments: Tuple[Expression, ...] = ()

    def token_literal(self) -> str:
        return "("

    def __str__(self) -> str:
        args = ", ".join(str(a) for a in self.arguments)
        return f"{self.function}({args})"


@dataclass(frozen=True)
class IndexExpression(Expression):
    left: Expression
    index: Expression

    def token_literal(self) -> str:
        return "["

    def __str__(self) -> str:
        return f"({self.left}[{self.index}])"
