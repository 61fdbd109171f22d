"""
Monkey Programming Language Parser
pyparsing-driven tokenizer feeding a Pratt (precedence-climbing) parser
"""

from typing import Callable, Dict, Iterator, List, Optional, Tuple
from dataclasses import dataclass
from enum import IntEnum

from pyparsing import MatchFirst, ParserElement, Regex, one_of

import syntax_tree as ast
from error_handling import MonkeyParseError


@dataclass(frozen=True)
class Token:
    """Monkey token: kind tag plus the literal source text"""
    type: str
    literal: str

    def __str__(self) -> str:
        return f"{self.type}({self.literal!r})"


# ============================================================================
# TOKEN KINDS
# ============================================================================

ILLEGAL = "ILLEGAL"
EOF = "EOF"

IDENT = "IDENT"
INT = "INT"
STRING = "STRING"

ASSIGN = "="
PLUS = "+"
MINUS = "-"
BANG = "!"
ASTERISK = "*"
SLASH = "/"
LT = "<"
GT = ">"
EQ = "=="
NOT_EQ = "!="

COMMA = ","
SEMICOLON = ";"
COLON = ":"
LPAREN = "("
RPAREN = ")"
LBRACE = "{"
RBRACE = "}"
LBRACKET = "["
RBRACKET = "]"

FUNCTION = "FUNCTION"
LET = "LET"
TRUE = "TRUE"
FALSE = "FALSE"
IF = "IF"
ELSE = "ELSE"
RETURN = "RETURN"

KEYWORDS = {
    "fn": FUNCTION,
    "let": LET,
    "true": TRUE,
    "false": FALSE,
    "if": IF,
    "else": ELSE,
    "return": RETURN,
}

SYMBOLS = [EQ, NOT_EQ, ASSIGN, PLUS, MINUS, BANG, ASTERISK, SLASH, LT, GT,
           COMMA, SEMICOLON, COLON, LPAREN, RPAREN, LBRACE, RBRACE,
           LBRACKET, RBRACKET]

INT64_MAX = 2 ** 63 - 1


def lookup_ident(ident: str) -> str:
    """Map an identifier to its keyword kind, or IDENT"""
    return KEYWORDS.get(ident, IDENT)


# ============================================================================
# TOKENIZER
# ============================================================================

def _make_string_token(text: str) -> Token:
    # An unterminated string runs to the end of input
    if len(text) > 1 and text.endswith('"'):
        return Token(STRING, text[1:-1])
    return Token(STRING, text[1:])


def _build_token_expression() -> ParserElement:
    """Build the pyparsing expression matching exactly one token"""
    identifier = Regex(r"[A-Za-z_]+")
    identifier.set_parse_action(lambda t: Token(lookup_ident(t[0]), t[0]))

    integer = Regex(r"[0-9]+")
    integer.set_parse_action(lambda t: Token(INT, t[0]))

    string = Regex(r'"[^"]*"?')
    string.set_parse_action(lambda t: _make_string_token(t[0]))

    # one_of reorders so that '==' and '!=' win over '=' and '!'
    symbol = one_of(SYMBOLS)
    symbol.set_parse_action(lambda t: Token(t[0], t[0]))

    illegal = Regex(r"\S")
    illegal.set_parse_action(lambda t: Token(ILLEGAL, t[0]))

    token_expr = MatchFirst([string, identifier, integer, symbol, illegal])
    token_expr.parse_with_tabs()
    return token_expr


class MonkeyTokenizer:
    """Token stream over a source text, terminated by EOF forever"""

    def __init__(self, source: str):
        self.source = source
        self._token_expr = _build_token_expression()
        self._tokens: Iterator[Token] = self._scan()

    def _scan(self) -> Iterator[Token]:
        for tokens, _start, _end in self._token_expr.scan_string(self.source):
            yield tokens[0]

    def next_token(self) -> Token:
        return next(self._tokens, Token(EOF, ""))

    def __iter__(self) -> Iterator[Token]:
        return self._tokens


def tokenize(source: str) -> List[Token]:
    """Tokenize a whole source text; the list always ends with one EOF"""
    tokens = list(MonkeyTokenizer(source))
    tokens.append(Token(EOF, ""))
    return tokens


# ============================================================================
# PRATT PARSER
# ============================================================================

class Precedence(IntEnum):
    LOWEST = 1
    EQUALS = 2       # == !=
    LESSGREATER = 3  # < >
    SUM = 4          # + -
    PRODUCT = 5      # * /
    PREFIX = 6       # -x !x
    CALL = 7         # f(x)
    INDEX = 8        # a[i]


PRECEDENCES: Dict[str, Precedence] = {
    EQ: Precedence.EQUALS,
    NOT_EQ: Precedence.EQUALS,
    LT: Precedence.LESSGREATER,
    GT: Precedence.LESSGREATER,
    PLUS: Precedence.SUM,
    MINUS: Precedence.SUM,
    SLASH: Precedence.PRODUCT,
    ASTERISK: Precedence.PRODUCT,
    LPAREN: Precedence.CALL,
    LBRACKET: Precedence.INDEX,
}

PrefixParseFn = Callable[[], Optional[ast.Expression]]
InfixParseFn = Callable[[ast.Expression], Optional[ast.Expression]]


class PrattParser:
    """Precedence-climbing parser over a token stream

    Errors are collected in ``errors`` rather than raised; a statement whose
    expression fails to parse is dropped and parsing resumes with the next
    statement.
    """

    def __init__(self, tokens, debug: bool = False):
        self.tokens = tokens
        self.debug = debug
        self.errors: List[str] = []

        self.cur_token = Token(EOF, "")
        self.peek_token = Token(EOF, "")

        self.prefix_parse_fns: Dict[str, PrefixParseFn] = {
            IDENT: self.parse_identifier,
            INT: self.parse_integer_literal,
            STRING: self.parse_string_literal,
            BANG: self.parse_prefix_expression,
            MINUS: self.parse_prefix_expression,
            TRUE: self.parse_boolean,
            FALSE: self.parse_boolean,
            LPAREN: self.parse_grouped_expression,
            IF: self.parse_if_expression,
            FUNCTION: self.parse_function_literal,
            LBRACKET: self.parse_array_literal,
            LBRACE: self.parse_hash_literal,
        }
        self.infix_parse_fns: Dict[str, InfixParseFn] = {
            PLUS: self.parse_infix_expression,
            MINUS: self.parse_infix_expression,
            SLASH: self.parse_infix_expression,
            ASTERISK: self.parse_infix_expression,
            EQ: self.parse_infix_expression,
            NOT_EQ: self.parse_infix_expression,
            LT: self.parse_infix_expression,
            GT: self.parse_infix_expression,
            LPAREN: self.parse_call_expression,
            LBRACKET: self.parse_index_expression,
        }

        # Fill cur_token and peek_token
        self.next_token()
        self.next_token()

    # ------------------------------------------------------------------
    # Token cursor
    # ------------------------------------------------------------------

    def next_token(self) -> None:
        self.cur_token = self.peek_token
        self.peek_token = self.tokens.next_token()

    def cur_token_is(self, token_type: str) -> bool:
        return self.cur_token.type == token_type

    def peek_token_is(self, token_type: str) -> bool:
        return self.peek_token.type == token_type

    def expect_peek(self, token_type: str) -> bool:
        if self.peek_token_is(token_type):
            self.next_token()
            return True
        self.peek_error(token_type)
        return False

    def peek_error(self, token_type: str) -> None:
        self.errors.append(
            f"expected next token to be {token_type}, "
            f"got {self.peek_token.type} instead")

    def no_prefix_parse_fn_error(self, token_type: str) -> None:
        self.errors.append(f"no prefix parse function for {token_type} found")

    def peek_precedence(self) -> Precedence:
        return PRECEDENCES.get(self.peek_token.type, Precedence.LOWEST)

    def cur_precedence(self) -> Precedence:
        return PRECEDENCES.get(self.cur_token.type, Precedence.LOWEST)

    # ------------------------------------------------------------------
    # Statements
    # ------------------------------------------------------------------

    def parse_program(self) -> ast.Program:
        statements = []
        while not self.cur_token_is(EOF):
            stmt = self.parse_statement()
            if stmt is not None:
                if self.debug:
                    print(f"Parsed {type(stmt).__name__}: {stmt}")
                statements.append(stmt)
            self.next_token()
        return ast.Program(tuple(statements))

    def parse_statement(self) -> Optional[ast.Statement]:
        if self.cur_token_is(LET):
            return self.parse_let_statement()
        if self.cur_token_is(RETURN):
            return self.parse_return_statement()
        return self.parse_expression_statement()

    def parse_let_statement(self) -> Optional[ast.LetStatement]:
        if not self.expect_peek(IDENT):
            return None
        name = ast.Identifier(self.cur_token.literal)

        if not self.expect_peek(ASSIGN):
            return None
        self.next_token()

        value = self.parse_expression(Precedence.LOWEST)
        if value is None:
            return None

        if self.peek_token_is(SEMICOLON):
            self.next_token()
        return ast.LetStatement(name, value)

    def parse_return_statement(self) -> Optional[ast.ReturnStatement]:
        self.next_token()

        return_value = self.parse_expression(Precedence.LOWEST)
        if return_value is None:
            return None

        if self.peek_token_is(SEMICOLON):
            self.next_token()
        return ast.ReturnStatement(return_value)

    def parse_expression_statement(self) -> Optional[ast.ExpressionStatement]:
        expression = self.parse_expression(Precedence.LOWEST)
        if expression is None:
            return None

        if self.peek_token_is(SEMICOLON):
            self.next_token()
        return ast.ExpressionStatement(expression)

    def parse_block_statement(self) -> ast.BlockStatement:
        statements = []
        self.next_token()

        while not self.cur_token_is(RBRACE) and not self.cur_token_is(EOF):
            stmt = self.parse_statement()
            if stmt is not None:
                statements.append(stmt)
            self.next_token()

        return ast.BlockStatement(tuple(statements))

    # ------------------------------------------------------------------
    # Expressions
    # ------------------------------------------------------------------

    def parse_expression(self, precedence: Precedence) -> Optional[ast.Expression]:
        prefix = self.prefix_parse_fns.get(self.cur_token.type)
        if prefix is None:
            self.no_prefix_parse_fn_error(self.cur_token.type)
            return None

        left = prefix()
        if left is None:
            return None

        while not self.peek_token_is(SEMICOLON) and precedence < self.peek_precedence():
            infix = self.infix_parse_fns.get(self.peek_token.type)
            if infix is None:
                return left
            self.next_token()
            left = infix(left)
            if left is None:
                return None

        return left

    def parse_identifier(self) -> ast.Expression:
        return ast.Identifier(self.cur_token.literal)

    def parse_integer_literal(self) -> Optional[ast.Expression]:
        literal = self.cur_token.literal
        try:
            value = int(literal, 10)
        except ValueError:
            value = None
        if value is None or value > INT64_MAX:
            self.errors.append(f"could not parse {literal} as integer")
            return None
        return ast.IntegerLiteral(value, literal)

    def parse_string_literal(self) -> ast.Expression:
        return ast.StringLiteral(self.cur_token.literal)

    def parse_boolean(self) -> ast.Expression:
        return ast.BooleanLiteral(self.cur_token_is(TRUE))

    def parse_prefix_expression(self) -> Optional[ast.Expression]:
        operator = self.cur_token.literal
        self.next_token()

        right = self.parse_expression(Precedence.PREFIX)
        if right is None:
            return None
        return ast.PrefixExpression(operator, right)

    def parse_infix_expression(self, left: ast.Expression) -> Optional[ast.Expression]:
        operator = self.cur_token.literal
        precedence = self.cur_precedence()
        self.next_token()

        right = self.parse_expression(precedence)
        if right is None:
            return None
        return ast.InfixExpression(left, operator, right)

    def parse_grouped_expression(self) -> Optional[ast.Expression]:
        self.next_token()

        expression = self.parse_expression(Precedence.LOWEST)
        if not self.expect_peek(RPAREN):
            return None
        return expression

    def parse_if_expression(self) -> Optional[ast.Expression]:
        if not self.expect_peek(LPAREN):
            return None
        self.next_token()

        condition = self.parse_expression(Precedence.LOWEST)
        if condition is None:
            return None

        if not self.expect_peek(RPAREN):
            return None
        if not self.expect_peek(LBRACE):
            return None
        consequence = self.parse_block_statement()

        alternative = None
        if self.peek_token_is(ELSE):
            self.next_token()
            if not self.expect_peek(LBRACE):
                return None
            alternative = self.parse_block_statement()

        return ast.IfExpression(condition, consequence, alternative)

    def parse_function_literal(self) -> Optional[ast.Expression]:
        if not self.expect_peek(LPAREN):
            return None

        parameters = self.parse_function_parameters()
        if parameters is None:
            return None

        if not self.expect_peek(LBRACE):
            return None
        body = self.parse_block_statement()

        return ast.FunctionLiteral(tuple(parameters), body)

    def parse_function_parameters(self) -> Optional[List[ast.Identifier]]:
        identifiers: List[ast.Identifier] = []

        if self.peek_token_is(RPAREN):
            self.next_token()
            return identifiers

        if not self.expect_peek(IDENT):
            return None
        identifiers.append(ast.Identifier(self.cur_token.literal))

        while self.peek_token_is(COMMA):
            self.next_token()
            if not self.expect_peek(IDENT):
                return None
            identifiers.append(ast.Identifier(self.cur_token.literal))

        if not self.expect_peek(RPAREN):
            return None
        return identifiers

    def parse_call_expression(self, function: ast.Expression) -> Optional[ast.Expression]:
        arguments = self.parse_expression_list(RPAREN)
        if arguments is None:
            return None
        return ast.CallExpression(function, tuple(arguments))

    def parse_index_expression(self, left: ast.Expression) -> Optional[ast.Expression]:
        self.next_token()

        index = self.parse_expression(Precedence.LOWEST)
        if index is None:
            return None

        if not self.expect_peek(RBRACKET):
            return None
        return ast.IndexExpression(left, index)

    def parse_array_literal(self) -> Optional[ast.Expression]:
        elements = self.parse_expression_list(RBRACKET)
        if elements is None:
            return None
        return ast.ArrayLiteral(tuple(elements))

    def parse_hash_literal(self) -> Optional[ast.Expression]:
        pairs: List[Tuple[ast.Expression, ast.Expression]] = []

        while not self.peek_token_is(RBRACE):
            self.next_token()
            key = self.parse_expression(Precedence.LOWEST)
            if key is None:
                return None

            if not self.expect_peek(COLON):
                return None
            self.next_token()

            value = self.parse_expression(Precedence.LOWEST)
            if value is None:
                return None
            pairs.append((key, value))

            if not self.peek_token_is(RBRACE) and not self.expect_peek(COMMA):
                return None

        if not self.expect_peek(RBRACE):
            return None
        return ast.HashLiteral(tuple(pairs))

    def parse_expression_list(self, end: str) -> Optional[List[ast.Expression]]:
        """Parse comma-separated expressions up to the ``end`` token"""
        expressions: List[ast.Expression] = []

        if self.peek_token_is(end):
            self.next_token()
            return expressions

        self.next_token()
        expression = self.parse_expression(Precedence.LOWEST)
        if expression is None:
            return None
        expressions.append(expression)

        while self.peek_token_is(COMMA):
            self.next_token()
            self.next_token()
            expression = self.parse_expression(Precedence.LOWEST)
            if expression is None:
                return None
            expressions.append(expression)

        if not self.expect_peek(end):
            return None
        return expressions


# ============================================================================
# PARSER FACADE
# ============================================================================

class MonkeyParser:
    """Main Monkey parser combining tokenizer and Pratt parser"""

    def __init__(self, debug: bool = False):
        self.debug = debug

    def parse_string(self, text: str) -> Tuple[ast.Program, List[str]]:
        """Parse Monkey source code, returning the program and syntax errors"""
        parser = PrattParser(MonkeyTokenizer(text), self.debug)
        program = parser.parse_program()
        return program, parser.errors

    def parse_strict(self, text: str, filename: str = "<input>") -> ast.Program:
        """Parse Monkey source code, raising if any syntax error was found"""
        program, errors = self.parse_string(text)
        if errors:
            raise MonkeyParseError(errors, filename)
        return program

    def parse_file(self, filepath: str) -> ast.Program:
        """Parse a Monkey source file"""
        with open(filepath, 'r', encoding='utf-8') as f:
            content = f.read()
        return self.parse_strict(content, filepath)

    def tokenize(self, text: str) -> List[Token]:
        """Tokenize Monkey source code"""
        return tokenize(text)


def parse(source: str) -> Tuple[ast.Program, List[str]]:
    """Parse a source text into (Program, syntax error list)"""
    return MonkeyParser().parse_string(source)


# Factory functions for creating parsers
def create_parser(debug: bool = False) -> MonkeyParser:
    """Create a Monkey parser"""
    return MonkeyParser(debug=debug)


def create_debug_parser() -> MonkeyParser:
    """Create a Monkey parser with debug enabled"""
    return MonkeyParser(debug=True)


def pretty_print_ast(node: ast.Node, indent: int = 0) -> str:
    """Pretty print an AST node as an indented tree for debugging"""
    result = "  " * indent + type(node).__name__
    children = []

    if isinstance(node, ast.Identifier):
        result += f"({node.value})"
    elif isinstance(node, (ast.IntegerLiteral, ast.BooleanLiteral)):
        result += f"({node.token_literal()})"
    elif isinstance(node, ast.StringLiteral):
        result += f"({node.value!r})"
    elif isinstance(node, (ast.PrefixExpression, ast.InfixExpression)):
        result += f"({node.operator})"

    if isinstance(node, (ast.Program, ast.BlockStatement)):
        children = list(node.statements)
    elif isinstance(node, ast.LetStatement):
        children = [node.name, node.value]
    elif isinstance(node, ast.ReturnStatement):
        children = [node.return_value]
    elif isinstance(node, ast.ExpressionStatement):
        children = [node.expression]
    elif isinstance(node, ast.ArrayLiteral):
        children = list(node.elements)
    elif isinstance(node, ast.HashLiteral):
        children = [part for pair in node.pairs for part in pair]
    elif isinstance(node, ast.PrefixExpression):
        children = [node.right]
    elif isinstance(node, ast.InfixExpression):
        children = [node.left, node.right]
    elif isinstance(node, ast.IfExpression):
        children = [node.condition, node.consequence]
        if node.alternative is not None:
            children.append(node.alternative)
    elif isinstance(node, ast.FunctionLiteral):
        children = list(node.parameters) + [node.body]
    elif isinstance(node, ast.CallExpression):
        children = [node.function] + list(node.arguments)
    elif isinstance(node, ast.IndexExpression):
        children = [node.left, node.index]

    result += "\n"
    for child in children:
        result += pretty_print_ast(child, indent + 1)
    return result
