"""
Evaluator tests for Monkey
Arithmetic, truthiness, control flow, closures, containers and error propagation
"""

import pytest
from objects import (
  Integer, Boolean, String, Array, Hash, Function, Error,
  TRUE, FALSE, NULL,
)


def assert_integer(obj, expected):
  assert isinstance(obj, Integer), f"expected Integer, got {obj!r}"
  assert obj.value == expected


def assert_error(obj, message):
  assert isinstance(obj, Error), f"expected Error, got {obj!r}"
  assert obj.message == message


class TestIntegerArithmetic:
  """Integer arithmetic and comparison"""

  @pytest.mark.parametrize("source, expected", [
    ("5", 5),
    ("10", 10),
    ("-5", -5),
    ("-10", -10),
    ("5 + 5 + 5 + 5 - 10", 10),
    ("2 * 2 * 2 * 2 * 2", 32),
    ("-50 + 100 + -50", 0),
    ("5 * 2 + 10", 20),
    ("5 + 2 * 10", 25),
    ("20 + 2 * -10", 0),
    ("50 / 2 * 2 + 10", 60),
    ("2 * (5 + 10)", 30),
    ("3 * 3 * 3 + 10", 37),
    ("3 * (3 * 3) + 10", 37),
    ("(5 + 10 * 2 + 15 / 3) * 2 + -10", 50),
  ])
  def test_integer_expressions(self, evaluate, source, expected):
    assert_integer(evaluate(source), expected)

  @pytest.mark.parametrize("source, expected", [
    ("7 / 2", 3),
    ("-7 / 2", -3),
    ("7 / -2", -3),
    ("-7 / -2", 3),
    ("1 / 3", 0),
    ("-1 / 3", 0),
  ])
  def test_division_truncates_toward_zero(self, evaluate, source, expected):
    assert_integer(evaluate(source), expected)

  def test_division_by_zero(self, evaluate):
    assert_error(evaluate("10 / 0"), "division by zero: 10 / 0")

  def test_integers_wrap_at_64_bits(self, evaluate):
    assert_integer(evaluate("9223372036854775807 + 1"), -9223372036854775808)
    assert_integer(evaluate("-9223372036854775807 - 2"), 9223372036854775807)


class TestBooleans:
  """Boolean literals, comparisons and identity equality"""

  @pytest.mark.parametrize("source, expected", [
    ("true", True),
    ("false", False),
    ("1 < 2", True),
    ("1 > 2", False),
    ("1 < 1", False),
    ("1 == 1", True),
    ("1 != 1", False),
    ("1 == 2", False),
    ("1 != 2", True),
    ("true == true", True),
    ("false == false", True),
    ("true == false", False),
    ("true != false", True),
    ("(1 < 2) == true", True),
    ("(1 < 2) == false", False),
    ("(1 > 2) == false", True),
  ])
  def test_boolean_expressions(self, evaluate, source, expected):
    assert evaluate(source) is (TRUE if expected else FALSE)

  def test_booleans_are_singletons(self, evaluate):
    assert evaluate("true") is TRUE
    assert evaluate("1 == 1") is TRUE
    assert evaluate("false") is FALSE

  def test_mixed_kinds_compare_by_identity(self, evaluate):
    assert evaluate("5 == true") is FALSE
    assert evaluate("5 != true") is TRUE

  def test_null_equals_null(self, evaluate):
    assert evaluate("if (false) { 1 } == if (false) { 2 }") is TRUE

  def test_containers_compare_by_identity(self, evaluate):
    assert evaluate("[1] == [1]") is FALSE
    assert evaluate("let a = [1]; a == a") is TRUE


class TestTruthiness:
  """Bang operator: only false and null are falsy"""

  @pytest.mark.parametrize("source, expected", [
    ("!true", False),
    ("!false", True),
    ("!5", False),
    ("!!true", True),
    ("!!false", False),
    ("!!5", True),
    ("!0", False),
    ('!""', False),
  ])
  def test_bang_operator(self, evaluate, source, expected):
    assert evaluate(source) is (TRUE if expected else FALSE)

  def test_bang_null_is_true(self, evaluate):
    assert evaluate("!if (false) { 1 }") is TRUE


class TestConditionals:
  """if/else expressions always evaluate to a value"""

  @pytest.mark.parametrize("source, expected", [
    ("if (true) { 10 }", 10),
    ("if (1) { 10 }", 10),
    ("if (0) { 10 } else { 20 }", 10),
    ("if (1 < 2) { 10 }", 10),
    ("if (1 > 2) { 10 } else { 20 }", 20),
    ("if (1 < 2) { 10 } else { 20 }", 10),
  ])
  def test_if_else_expressions(self, evaluate, source, expected):
    assert_integer(evaluate(source), expected)

  @pytest.mark.parametrize("source", [
    "if (false) { 10 }",
    "if (1 > 2) { 10 }",
  ])
  def test_false_without_alternative_is_null(self, evaluate, source):
    assert evaluate(source) is NULL

  @pytest.mark.parametrize("source", [
    "if (true) {}",
    "if (false) { 1 } else {}",
    "let x = if (true) {}; x",
    "fn() { if (true) {} }()",
  ])
  def test_empty_block_is_null(self, evaluate, source):
    assert evaluate(source) is NULL

  def test_empty_block_inside_array(self, evaluate):
    assert evaluate("[if (true) {}, 1]").inspect() == "[null, 1]"

  @pytest.mark.parametrize("source, message", [
    ("if (true) {} + 1", "type mismatch: NULL + INTEGER"),
    ("-(if (true) {})", "unknown operator: -NULL"),
    ("len(if (true) {})", "argument to 'len' not supported, got NULL"),
  ])
  def test_empty_block_as_operand(self, evaluate, source, message):
    assert_error(evaluate(source), message)


class TestReturn:
  """return unwinds blocks up to the enclosing call or program"""

  @pytest.mark.parametrize("source, expected", [
    ("return 10;", 10),
    ("return 10; 9;", 10),
    ("return 2 * 5; 9;", 10),
    ("9; return 2 * 5; 9;", 10),
    ("if (10 > 1) { if (10 > 1) { return 10; } return 1; }", 10),
    ("let f = fn(x) { if (x > 1) { return 1; } return 2; }; f(5)", 1),
    ("let f = fn(x) { if (x > 1) { return 1; } return 2; }; f(0)", 2),
    ("let f = fn() { return 1; 2 }; f() + 10", 11),
  ])
  def test_return_statements(self, evaluate, source, expected):
    assert_integer(evaluate(source), expected)

  def test_return_inside_call_does_not_end_program(self, evaluate):
    assert_integer(evaluate("let f = fn() { return 1; }; f(); 42"), 42)


class TestLetAndIdentifiers:
  """Bindings and lookup"""

  @pytest.mark.parametrize("source, expected", [
    ("let a = 5; a;", 5),
    ("let a = 5 * 5; a;", 25),
    ("let a = 5; let b = a; b;", 5),
    ("let a = 5; let b = a; let c = a + b + 5; c;", 15),
  ])
  def test_let_statements(self, evaluate, source, expected):
    assert_integer(evaluate(source), expected)

  def test_let_evaluates_to_bound_value(self, evaluate):
    assert_integer(evaluate("let a = 7;"), 7)

  def test_empty_program_has_no_value(self, evaluate):
    assert evaluate("") is None

  def test_builtin_can_be_shadowed(self, evaluate):
    assert_integer(evaluate('let len = fn(x) { 42 }; len("abc")'), 42)


class TestFunctions:
  """Function objects, application, closures and recursion"""

  def test_function_object(self, evaluate):
    fn = evaluate("fn(x) { x + 2; };")
    assert isinstance(fn, Function)
    assert [p.value for p in fn.parameters] == ["x"]
    assert str(fn.body) == "(x + 2)"

  @pytest.mark.parametrize("source, expected", [
    ("let identity = fn(x) { x; }; identity(5);", 5),
    ("let identity = fn(x) { return x; }; identity(5);", 5),
    ("let double = fn(x) { x * 2; }; double(5);", 10),
    ("let add = fn(x, y) { x + y; }; add(5, 5);", 10),
    ("let add = fn(x, y) { x + y; }; add(5 + 5, add(5, 5));", 20),
    ("fn(x) { x; }(5)", 5),
  ])
  def test_function_application(self, evaluate, source, expected):
    assert_integer(evaluate(source), expected)

  def test_empty_body_returns_null(self, evaluate):
    assert evaluate("fn() {}()") is NULL

  def test_closures(self, evaluate):
    source = """
    let newAdder = fn(x) { fn(y) { x + y } };
    let addTwo = newAdder(2);
    addTwo(3);
    """
    assert_integer(evaluate(source), 5)

  def test_closures_are_independent(self, evaluate):
    source = """
    let newAdder = fn(x) { fn(y) { x + y } };
    let addTwo = newAdder(2);
    let addTen = newAdder(10);
    addTwo(1) + addTen(1);
    """
    assert_integer(evaluate(source), 14)

  def test_lexical_not_dynamic_scope(self, evaluate):
    source = "let x = 1; let f = fn() { x }; let g = fn(x) { f() }; g(99)"
    assert_integer(evaluate(source), 1)

  def test_shadowing_does_not_change_outer_binding(self, evaluate):
    source = "let x = 10; let f = fn() { let x = 20; x }; f(); x"
    assert_integer(evaluate(source), 10)
    assert_integer(evaluate("let x = 10; let f = fn() { let x = 20; x }; f()"), 20)

  def test_parameter_shadows_outer_binding(self, evaluate):
    assert_integer(evaluate("let x = 10; let f = fn(x) { x }; f(1); x"), 10)

  def test_recursive_fibonacci(self, evaluate):
    source = """
    let fibonacci = fn(x) {
      if (x == 0) {
        0
      } else {
        if (x == 1) {
          1
        } else {
          fibonacci(x - 1) + fibonacci(x - 2)
        }
      }
    };
    fibonacci(10);
    """
    assert_integer(evaluate(source), 55)

  def test_higher_order_functions(self, evaluate):
    source = """
    let map = fn(arr, f) {
      let iter = fn(arr, accumulated) {
        if (len(arr) == 0) {
          accumulated
        } else {
          iter(rest(arr), push(accumulated, f(first(arr))));
        }
      };
      iter(arr, []);
    };
    map([1, 2, 3], fn(x) { x * 2 });
    """
    assert evaluate(source).inspect() == "[2, 4, 6]"


class TestStrings:
  """String literals and concatenation"""

  def test_string_literal(self, evaluate):
    result = evaluate('"Hello World!"')
    assert isinstance(result, String)
    assert result.value == "Hello World!"

  def test_string_concatenation(self, evaluate):
    assert evaluate('"Hello" + " " + "World!"').value == "Hello World!"

  def test_only_plus_is_defined_for_strings(self, evaluate):
    assert_error(evaluate('"a" == "a"'), "unknown operator: STRING == STRING")


class TestArrays:
  """Array literals and bounds-safe indexing"""

  def test_array_literal(self, evaluate):
    result = evaluate("[1, 2 * 2, 3 + 3]")
    assert isinstance(result, Array)
    assert [e.value for e in result.elements] == [1, 4, 6]

  @pytest.mark.parametrize("source, expected", [
    ("[1, 2, 3][0]", 1),
    ("[1, 2, 3][1]", 2),
    ("[1, 2, 3][2]", 3),
    ("let i = 0; [1][i];", 1),
    ("[1, 2, 3][1 + 1];", 3),
    ("let myArray = [1, 2, 3]; myArray[2];", 3),
    ("let myArray = [1, 2, 3]; myArray[0] + myArray[1] + myArray[2];", 6),
    ("let myArray = [1, 2, 3]; let i = myArray[0]; myArray[i]", 2),
  ])
  def test_array_index(self, evaluate, source, expected):
    assert_integer(evaluate(source), expected)

  @pytest.mark.parametrize("source", [
    "[1, 2, 3][3]",
    "[1, 2, 3][-1]",
    "[][0]",
  ])
  def test_out_of_bounds_is_null(self, evaluate, source):
    assert evaluate(source) is NULL


class TestHashes:
  """Hash literals, key kinds and lookup"""

  def test_hash_literal(self, evaluate):
    source = """
    let two = "two";
    {
      "one": 10 - 9,
      two: 1 + 1,
      "thr" + "ee": 6 / 2,
      4: 4,
      true: 5,
      false: 6
    }
    """
    result = evaluate(source)
    assert isinstance(result, Hash)
    assert len(result.pairs) == 6
    assert result.get(String("one")).value == 1
    assert result.get(String("two")).value == 2
    assert result.get(String("three")).value == 3
    assert result.get(Integer(4)).value == 4
    assert result.get(TRUE).value == 5
    assert result.get(FALSE).value == 6

  @pytest.mark.parametrize("source, expected", [
    ('{"one": 1}["one"]', 1),
    ('{"foo": 5}["foo"]', 5),
    ('let key = "foo"; {"foo": 5}[key]', 5),
    ("{5: 5}[5]", 5),
    ("{true: 5}[true]", 5),
    ("{false: 5}[false]", 5),
  ])
  def test_hash_index(self, evaluate, source, expected):
    assert_integer(evaluate(source), expected)

  @pytest.mark.parametrize("source", [
    '{"foo": 5}["bar"]',
    '{}["foo"]',
    '{1: 5}[true]',
    '{"1": 5}[1]',
  ])
  def test_missing_key_is_null(self, evaluate, source):
    assert evaluate(source) is NULL

  def test_inspect_keeps_insertion_order(self, evaluate):
    assert evaluate('{"b": 2, "a": 1, 3: [true]}').inspect() == "{b: 2, a: 1, 3: [true]}"


class TestErrorPropagation:
  """Runtime errors are values that short-circuit evaluation"""

  @pytest.mark.parametrize("source, message", [
    ("5 + true;", "type mismatch: INTEGER + BOOLEAN"),
    ("5 + true; 5;", "type mismatch: INTEGER + BOOLEAN"),
    ("5 < true", "type mismatch: INTEGER < BOOLEAN"),
    ('"a" * 2', "type mismatch: STRING * INTEGER"),
    ("-true", "unknown operator: -BOOLEAN"),
    ('-"a"', "unknown operator: -STRING"),
    ("true + false;", "unknown operator: BOOLEAN + BOOLEAN"),
    ("5; true + false; 5", "unknown operator: BOOLEAN + BOOLEAN"),
    ("if (10 > 1) { true + false; }", "unknown operator: BOOLEAN + BOOLEAN"),
    ("if (10 > 1) { if (10 > 1) { return true + false; } return 1; }",
     "unknown operator: BOOLEAN + BOOLEAN"),
    ('"Hello" - "World"', "unknown operator: STRING - STRING"),
    ("[1] + [2]", "unknown operator: ARRAY + ARRAY"),
    ("foobar", "identifier not found: foobar"),
    ('{"name": "Monkey"}[fn(x) { x }];', "unusable as hash key: FUNCTION"),
    ("{[1]: 2}", "unusable as hash key: ARRAY"),
    ("{1: 2}[[1]]", "unusable as hash key: ARRAY"),
    ("1[0]", "index operator not supported: INTEGER"),
    ('[1, 2]["a"]', "index operator not supported: ARRAY"),
    ("5()", "not a function: INTEGER"),
    ('"f"(1)', "not a function: STRING"),
    ("fn(x) { x }(1, 2)", "wrong number of arguments. got=2, want=1"),
    ("fn(x, y) { x }(1)", "wrong number of arguments. got=1, want=2"),
  ])
  def test_error_messages(self, evaluate, source, message):
    assert_error(evaluate(source), message)

  @pytest.mark.parametrize("source", [
    "[1, foobar, 3]",
    '{"a": foobar}',
    "{foobar: 1}",
    "let f = fn(a, b) { a }; f(1, foobar)",
    "foobar(1)",
    "foobar[0]",
    "[1][foobar]",
    "-foobar",
    "foobar + 1",
    "1 + foobar",
    "if (foobar) { 1 }",
    "return foobar;",
    "let f = fn() { foobar }; f() + 1",
  ])
  def test_errors_short_circuit(self, evaluate, source):
    assert_error(evaluate(source), "identifier not found: foobar")

  def test_error_stops_later_statements(self, evaluate):
    assert_error(evaluate("let x = missing; puts(1); 5"), "identifier not found: missing")

  def test_failed_let_does_not_bind(self):
    from parsing import parse
    from environment import Environment
    from interpreter import eval_ast

    env = Environment()
    program, _ = parse("let x = missing;")
    eval_ast(program, env)
    assert env.get("x") is None


class TestImmutability:
  """Builtins return new containers"""

  def test_push_does_not_mutate(self, evaluate):
    assert_integer(evaluate("let a = [1, 2, 3]; let b = push(a, 4); len(a)"), 3)
    assert_integer(evaluate("let a = [1, 2, 3]; let b = push(a, 4); len(b)"), 4)

  def test_rest_does_not_mutate(self, evaluate):
    assert evaluate("let a = [1, 2, 3]; rest(a); a").inspect() == "[1, 2, 3]"


class TestDebugTrace:
  """The debug flag traces node dispatch"""

  def test_debug_prints_node_kinds(self, capsys):
    from parsing import parse
    from environment import Environment
    from interpreter import eval_ast

    program, _ = parse("1 + 2")
    eval_ast(program, Environment(), debug=True)
    out = capsys.readouterr().out
    assert "Evaluating: Program" in out
    assert "Evaluating: InfixExpression" in out
