"""
Splax Programming Language - Main Entry Point
A small dynamically-typed scripting language with lexical closures
"""

import sys
import argparse
import logging
from pathlib import Path
from typing import Dict, List, Optional
import os

from termcolor import colored

# Readline support for history and auto-completion
try:
  import readline
  READLINE_AVAILABLE = True
except ImportError:
  READLINE_AVAILABLE = False

from environment import env_user_bindings
from error_handling import DiagnosticCollector, format_diagnostic, get_context_lines
from parsing import create_parser, create_debug_parser, pretty_print_ast
from session import Session
from stdlib import SPLAX_VERSION
from tokens import RESERVED_KEYWORDS
from utilities import stringify

EXIT_COMPILE_ERROR = 65
EXIT_NO_INPUT = 66
EXIT_RUNTIME_ERROR = 70


def create_arg_parser() -> argparse.ArgumentParser:
  """Create command line argument parser"""
  parser = argparse.ArgumentParser(
      prog='splax',
      description='Splax Programming Language - a small scripting language',
      formatter_class=argparse.RawDescriptionHelpFormatter,
      epilog="""
Examples:
  %(prog)s script.splax           # Run a Splax script
  %(prog)s -i                     # Interactive mode
  %(prog)s --ast script.splax     # Parse and show the AST
  %(prog)s --tokens script.splax  # Show the token stream
  %(prog)s --docs                 # Language reference
  %(prog)s --debug script.splax   # Run with debug logging
        """
  )

  parser.add_argument(
      'script',
      nargs='?',
      help='Splax script file to execute'
  )

  parser.add_argument(
      '-i', '--interactive',
      action='store_true',
      help='Start interactive mode'
  )

  parser.add_argument(
      '--ast',
      action='store_true',
      help='Parse file and show the AST (for debugging)'
  )

  parser.add_argument(
      '--tokens',
      action='store_true',
      help='Tokenize file and show the tokens (for debugging)'
  )

  parser.add_argument(
      '--docs',
      action='store_true',
      help='Show the language reference'
  )

  parser.add_argument(
      '--debug',
      action='store_true',
      help='Enable debug logging for all stages'
  )

  parser.add_argument(
      '--version',
      action='version',
      version=f'Splax v{SPLAX_VERSION}'
  )

  return parser


def setup_logging(debug: bool = False) -> None:
  """Configure process-wide logging; SPLAX_LOG_LEVEL overrides the default level"""
  level_name = os.environ.get("SPLAX_LOG_LEVEL", "DEBUG" if debug else "WARNING")
  level = getattr(logging, level_name.upper(), logging.WARNING)
  logging.basicConfig(
      level=level,
      stream=sys.stderr,
      format="%(levelname)s %(name)s: %(message)s"
  )
  logging.getLogger("splax").setLevel(level)


def report_diagnostics(diagnostics: List[Dict], source: Optional[str] = None) -> None:
  """Print diagnostics to stderr, with the offending source line when known"""
  for diagnostic in diagnostics:
    print(colored(format_diagnostic(diagnostic), "red", attrs=["bold"]), file=sys.stderr)
    if source and diagnostic['line']:
      context = get_context_lines(source, diagnostic['line'])
      if context:
        print(colored(context, "magenta"), file=sys.stderr)


def read_script(script_path: str) -> str:
  """Read a script as UTF-8, exiting with a message if that is not possible"""
  try:
    with open(script_path, 'r', encoding='utf-8') as f:
      return f.read()
  except FileNotFoundError:
    print(f"Error: Script file '{script_path}' not found", file=sys.stderr)
    print(f"  Hint: Check the file path and make sure the file exists", file=sys.stderr)
    sys.exit(EXIT_NO_INPUT)
  except PermissionError:
    print(f"Error: Permission denied reading '{script_path}'", file=sys.stderr)
    sys.exit(EXIT_NO_INPUT)
  except UnicodeDecodeError as e:
    print(f"Error: Cannot decode file '{script_path}': {e}", file=sys.stderr)
    print(f"  Hint: Make sure the file is a text file with UTF-8 encoding", file=sys.stderr)
    sys.exit(EXIT_NO_INPUT)


def run_script_file(script_path: str, debug: bool = False) -> int:
  """Run a Splax script file, returning the process exit status"""
  source = read_script(script_path)

  session = Session(debug=debug)
  if session.compile(source):
    return 0

  report_diagnostics(session.diagnostics.diagnostics, source)
  if session.had_compile_error:
    return EXIT_COMPILE_ERROR
  return EXIT_RUNTIME_ERROR


def dump_ast(script_path: str, debug: bool = False) -> int:
  """Parse a Splax script file and show the AST"""
  source = read_script(script_path)
  parser = create_debug_parser() if debug else create_parser()

  statements, diagnostics = parser.parse_string(source)
  print(f"Parsed {len(statements)} top-level statements:")
  print("=" * 50)
  for stmt in statements:
    print(pretty_print_ast(stmt), end='')

  if diagnostics:
    report_diagnostics(diagnostics, source)
    return EXIT_COMPILE_ERROR
  return 0


def dump_tokens(script_path: str, debug: bool = False) -> int:
  """Tokenize a Splax script file and show the tokens"""
  source = read_script(script_path)
  parser = create_debug_parser() if debug else create_parser()

  collector = DiagnosticCollector()
  for token in parser.tokenize(source, collector):
    print(f"{token.line:4d}  {token}")

  if collector.has_errors():
    report_diagnostics(collector.diagnostics, source)
    return EXIT_COMPILE_ERROR
  return 0


def setup_readline():
  """Setup readline with history and auto-completion"""
  if not READLINE_AVAILABLE:
    return

  history_file = os.path.expanduser("~/.splax_history")
  try:
    readline.read_history_file(history_file)
  except OSError:
    pass  # First time, no history yet, or permission denied

  readline.set_history_length(1000)

  completions = sorted(RESERVED_KEYWORDS) + [":help", ":env", ":ast", "exit"]

  def completer(text, state):
    options = [cmd for cmd in completions if cmd.startswith(text)]
    if state < len(options):
      return options[state]
    return None

  readline.set_completer(completer)
  readline.parse_and_bind("tab: complete")

  import atexit
  atexit.register(readline.write_history_file, history_file)


def show_repl_help() -> None:
  print("REPL Commands:")
  print("  :ast <source>     - Show the parsed AST without running it")
  print("  :env              - Show global bindings")
  print("  :help             - Show this help")
  print("  exit              - Exit REPL (or Ctrl-D)")


def show_env(session: Session) -> None:
  print("Global environment:")
  names = env_user_bindings(session.global_env)
  if not names:
    print("  (no user-defined bindings)")
    return
  for name in names:
    val_str = stringify(session.global_env['bindings'][name])
    if len(val_str) > 60:
      val_str = val_str[:57] + "..."
    print(f"  {name} = {val_str}")


def run_interactive_mode(debug: bool = False) -> None:
  """Run Splax in interactive mode; globals persist between lines"""
  print(f"Splax v{SPLAX_VERSION} - Interactive Mode")
  print("Type 'exit' to quit, ':help' for commands")
  if READLINE_AVAILABLE:
    print("Readline enabled: Use ↑/↓ for history, Tab for completion")
  print()

  setup_readline()
  session = Session(debug=debug)

  while True:
    try:
      code = input("splax> ")
    except KeyboardInterrupt:
      print("\nGoodbye!")
      break
    except EOFError:
      print("\nGoodbye!")
      break

    stripped = code.strip()
    if stripped == "exit":
      break
    if not stripped:
      continue

    if stripped == ":help":
      show_repl_help()
      continue

    if stripped == ":env":
      show_env(session)
      continue

    if stripped.startswith(":ast "):
      statements, diagnostics = session.parser.parse_string(stripped[5:])
      for stmt in statements:
        print(pretty_print_ast(stmt), end='')
      report_diagnostics(diagnostics)
      continue

    if not session.compile(code):
      report_diagnostics(session.diagnostics.diagnostics)


def show_language_info() -> None:
  """Show Splax language reference"""
  print("Splax Programming Language")
  print("=" * 50)
  print("Values:      numbers (64-bit float), strings, true/false, null, functions")
  print("Keywords:    " + ", ".join(RESERVED_KEYWORDS))
  print("Operators:   + - * /   == != < <= > >=   ! and or   =")
  print()
  print("Statements:")
  print("  let x = 1;                       - Variable declaration (defaults to null)")
  print("  x = x + 1;                       - Assignment to an existing variable")
  print("  print x;                         - Print a value")
  print("  { ... }                          - Block with its own scope")
  print("  if (c) stmt else stmt            - Conditional")
  print("  while (c) stmt                   - Loop")
  print("  for (let i = 0; i < 3; i = i + 1) stmt")
  print("  fn add(a, b) { return a + b; }   - Function declaration (closures)")
  print()
  print("Truthiness: false, null, 0 and \"\" are false; everything else is true.")
  print("Comments start with // and run to the end of the line.")
  print()


def main() -> None:
  """Main entry point for Splax"""
  arg_parser = create_arg_parser()
  args = arg_parser.parse_args()

  setup_logging(args.debug)

  if args.docs:
    show_language_info()
    return

  if args.script:
    if not Path(args.script).exists():
      print(f"Error: Script file '{args.script}' does not exist", file=sys.stderr)
      sys.exit(EXIT_NO_INPUT)

    if args.ast:
      sys.exit(dump_ast(args.script, debug=args.debug))
    elif args.tokens:
      sys.exit(dump_tokens(args.script, debug=args.debug))
    else:
      sys.exit(run_script_file(args.script, debug=args.debug))

  if args.ast or args.tokens:
    arg_parser.error("--ast and --tokens need a script file")

  # No script: interactive mode
  run_interactive_mode(debug=args.debug)


if __name__ == "__main__":
  main()
