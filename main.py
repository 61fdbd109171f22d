"""
Monkey Programming Language - Main Entry Point
A small expression-oriented language with closures, arrays and hashes
"""

import sys
import argparse
from pathlib import Path
from typing import List, Optional
import os

# Readline support for history and auto-completion
try:
  import readline
  READLINE_AVAILABLE = True
except ImportError:
  READLINE_AVAILABLE = False

from parsing import create_parser, pretty_print_ast, KEYWORDS
from interpreter import create_interpreter, RunResult, DEFAULT_RECURSION_LIMIT
from error_handling import format_parse_errors, format_runtime_error
from stdlib import builtin_names

VERSION = "Monkey v1.0.0 (Tree-walking Interpreter)"
HISTORY_FILE = "~/.monkey_history"
REPL_COMMANDS = [":tokens", ":parse", ":env", ":help", "exit"]


def create_arg_parser() -> argparse.ArgumentParser:
  """Create command line argument parser"""
  parser = argparse.ArgumentParser(
      description='Monkey Programming Language - tree-walking interpreter',
      formatter_class=argparse.RawDescriptionHelpFormatter,
      epilog="""
Examples:
  %(prog)s script.monkey             # Run a Monkey script
  %(prog)s -i                        # Interactive mode
  %(prog)s --tokens script.monkey    # Show the token stream
  %(prog)s --parse script.monkey     # Parse and show the AST
  %(prog)s --debug script.monkey     # Run with debug output
  %(prog)s --recursion-limit 20000 deep.monkey
        """
  )

  parser.add_argument(
      'script',
      nargs='?',
      help='Monkey script file to execute'
  )

  parser.add_argument(
      '-i', '--interactive',
      action='store_true',
      help='Start interactive mode'
  )

  parser.add_argument(
      '--tokens',
      action='store_true',
      help='Tokenize file and show tokens (for debugging)'
  )

  parser.add_argument(
      '--parse',
      action='store_true',
      help='Parse file and show AST (for debugging)'
  )

  parser.add_argument(
      '--debug',
      action='store_true',
      help='Enable debug output for all stages'
  )

  parser.add_argument(
      '--recursion-limit',
      type=int,
      default=DEFAULT_RECURSION_LIMIT,
      metavar='N',
      help=f"Host recursion limit during evaluation; bounds how deep Monkey recursion may go (default: {DEFAULT_RECURSION_LIMIT})"
  )

  parser.add_argument(
      '--version',
      action='version',
      version=VERSION
  )

  return parser


def read_script(script_path: str) -> str:
  """Read a script file, exiting with a hint when it cannot be read"""
  try:
    with open(script_path, 'r', encoding='utf-8') as f:
      return f.read()
  except FileNotFoundError:
    print(f"Error: Script file '{script_path}' not found")
    print(f"  Hint: Check the file path and make sure the file exists")
    sys.exit(1)
  except PermissionError:
    print(f"Error: Permission denied reading '{script_path}'")
    print(f"  Hint: Make sure you have read permissions for this file")
    sys.exit(1)
  except UnicodeDecodeError as e:
    print(f"Error: Cannot decode file '{script_path}': {e}")
    print(f"  Hint: Make sure the file is a text file with UTF-8 encoding")
    sys.exit(1)


def tokenize_file(script_path: str) -> None:
  """Tokenize a Monkey script file and show the tokens"""
  source = read_script(script_path)
  tokens = create_parser().tokenize(source)

  print(f"Tokenized {script_path}: {len(tokens)} tokens")
  print("=" * 50)
  for token in tokens:
    print(f"  {token.type:<10} {token.literal!r}")


def parse_file(script_path: str, debug: bool = False) -> None:
  """Parse a Monkey script file and show the AST"""
  source = read_script(script_path)
  parser = create_parser(debug)

  if debug:
    print(f"Parsing {script_path}...")
  program, errors = parser.parse_string(source)
  if errors:
    print(format_parse_errors(errors, script_path), end='')
    sys.exit(1)

  print(f"\nParsed {len(program.statements)} top-level statements:")
  print("=" * 50)
  for i, statement in enumerate(program.statements, 1):
    print(f"\nStatement {i}: {statement}")
    print(pretty_print_ast(statement), end='')


def report_failure(result: RunResult, source_name: str) -> None:
  """Print the report matching a failed RunResult"""
  if result.program is None:
    print(format_parse_errors(result.errors, source_name), end='')
  elif result.stack_exhausted:
    print(format_runtime_error(result.errors[0], source_name), end='')
  else:
    print(format_runtime_error(result.value.message, source_name), end='')


def run_script_file(script_path: str, debug: bool = False,
                    recursion_limit: int = DEFAULT_RECURSION_LIMIT) -> None:
  """Run a Monkey script file with full interpretation"""
  source = read_script(script_path)
  interpreter = create_interpreter(debug, recursion_limit)

  try:
    result = interpreter.run(source)
  except Exception as e:
    print(f"Unexpected error while executing '{script_path}': {e}")
    if debug:
      import traceback
      traceback.print_exc()
    sys.exit(1)

  if not result.success:
    report_failure(result, script_path)
    sys.exit(1)

  if debug and result.value is not None:
    print(f"=> {result.value.inspect()}")


def setup_readline() -> None:
  """Setup readline with history and auto-completion"""
  if not READLINE_AVAILABLE:
    return

  history_file = os.path.expanduser(HISTORY_FILE)
  try:
    readline.read_history_file(history_file)
  except (FileNotFoundError, PermissionError, OSError):
    pass  # First run, or history not readable

  readline.set_history_length(1000)

  completions = sorted(KEYWORDS.keys()) + builtin_names() + REPL_COMMANDS

  def completer(text, state):
    options = [cmd for cmd in completions if cmd.startswith(text)]
    if state < len(options):
      return options[state]
    return None

  readline.set_completer(completer)
  readline.parse_and_bind("tab: complete")

  import atexit
  atexit.register(readline.write_history_file, history_file)


def print_repl_help() -> None:
  print("REPL Commands:")
  print("  :tokens <code>    - Show the token stream")
  print("  :parse <code>     - Show the parsed AST")
  print("  :env              - Show current bindings")
  print("  :help             - Show this help")
  print("  exit              - Exit REPL")
  print()
  print("Language features:")
  print("  let x = 5;                          - Binding")
  print("  let add = fn(a, b) { a + b };       - Function")
  print("  add(1, 2)                           - Call")
  print("  [1, 2, 3][0]                        - Array indexing")
  print('  {"one": 1}["one"]                   - Hash lookup')
  print("  if (x > 1) { x } else { 0 }         - Conditional")
  print(f"  builtins: {', '.join(builtin_names())}")


def run_interactive_mode(debug: bool = False,
                         recursion_limit: int = DEFAULT_RECURSION_LIMIT) -> None:
  """Run Monkey in interactive mode with full interpretation"""
  print(f"{VERSION} - Interactive Mode")
  print("Type 'exit' to quit, ':help' for commands")
  if READLINE_AVAILABLE:
    print("Readline enabled: Use ↑/↓ for history, Tab for completion")
  if debug:
    print("Debug mode enabled")
  print()

  setup_readline()

  parser = create_parser(debug)
  interpreter = create_interpreter(debug, recursion_limit)

  while True:
    try:
      code = input(">> ")

      if code.strip() == "exit":
        break

      if not code.strip():
        continue

      if code.startswith(":tokens "):
        for token in parser.tokenize(code[8:]):
          print(f"  {token}")
        continue

      if code.startswith(":parse "):
        program, errors = parser.parse_string(code[7:])
        if errors:
          print(format_parse_errors(errors), end='')
        else:
          print(f"Program: {program}")
          print(pretty_print_ast(program), end='')
        continue

      if code.strip() == ":env":
        names = interpreter.environment.local_names()
        if names:
          for name in names:
            val_str = interpreter.environment.get(name).inspect().replace('\n', ' ')
            if len(val_str) > 60:
              val_str = val_str[:57] + "..."
            print(f"  {name} = {val_str}")
        else:
          print("  (no user-defined bindings)")
        continue

      if code.strip() == ":help":
        print_repl_help()
        continue

      result = interpreter.run(code)
      if result.success:
        if result.value is not None:
          print(result.value.inspect())
      else:
        report_failure(result, "<repl>")

    except KeyboardInterrupt:
      print("\nGoodbye!")
      break
    except EOFError:
      print("\nGoodbye!")
      break
    except Exception as e:
      print(f"Unexpected error: {e}")
      if debug:
        import traceback
        traceback.print_exc()
      print("  Hint: If this keeps happening, try restarting or use --debug for more details")


def show_language_info() -> None:
  """Show Monkey language information"""
  print("Monkey Programming Language")
  print("=" * 50)
  print("A small dynamically-typed language with:")
  print("• Integers, booleans, strings, arrays and hashes")
  print("• First-class functions with closures")
  print("• Expression-oriented if/else and return")
  print()


def main(argv: Optional[List[str]] = None) -> None:
  """Main entry point for Monkey"""
  arg_parser = create_arg_parser()
  args = arg_parser.parse_args(argv)

  if args.script:
    if not Path(args.script).exists():
      print(f"Error: Script file '{args.script}' does not exist")
      sys.exit(1)

    if args.tokens:
      tokenize_file(args.script)
    elif args.parse:
      parse_file(args.script, debug=args.debug)
    else:
      run_script_file(args.script, debug=args.debug, recursion_limit=args.recursion_limit)

  elif args.interactive:
    run_interactive_mode(debug=args.debug, recursion_limit=args.recursion_limit)

  else:
    show_language_info()
    print("Starting interactive mode...")
    print("Use 'monkey --help' for command line options")
    print()
    run_interactive_mode(debug=args.debug, recursion_limit=args.recursion_limit)


if __name__ == "__main__":
  main()
