"""CLI entry point for the ptbr interpreter.

Usage:
    python -m ptbr [-v|-vv|-vvv] [--recursion-limit N] [--strict] <program_file>
    python -m ptbr [-v...] -c "<program text>"

Options:
  -v                   Increase debug verbosity (can be repeated)
  --recursion-limit N  Maximum nesting depth of function calls
  --strict             Reject redefining a variable in the same scope
  --debug-file PATH    Write debug traces to PATH instead of stderr
  -c CODE              Run CODE instead of a program file

Settings not given on the command line fall back to the PTBR_RECURSION_LIMIT,
PTBR_STRICT_DEFINITIONS and PTBR_DEBUG environment variables.
"""

import argparse
import sys
from pathlib import Path

from .config import InterpreterConfig
from .errors import PtbrError
from .interpreter import Interpreter
from .parser import parse_program


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(prog='ptbr', description="ptbr language interpreter")
    parser.add_argument('-v', action='count', default=None, help='increase debug verbosity (can be repeated)')
    parser.add_argument('--recursion-limit', type=int, metavar='N', help='maximum nesting depth of function calls')
    parser.add_argument('--strict', action='store_true', help='reject same-scope variable redefinition')
    parser.add_argument('--debug-file', metavar='PATH', help='write debug traces to PATH')
    group = parser.add_mutually_exclusive_group(required=True)
    group.add_argument('-c', dest='code', metavar='CODE', help='program text to execute')
    group.add_argument('program', nargs='?', help='ptbr program file (.ptbr) to execute')
    args = parser.parse_args(argv)

    try:
        config = InterpreterConfig.from_env(
            recursion_limit=args.recursion_limit,
            allow_redefinition=False if args.strict else None,
            debug_level=args.v,
            debug_file=args.debug_file,
        )
    except ValueError as e:
        parser.error(str(e))

    if args.code is not None:
        source = args.code
    else:
        program_file = Path(args.program)
        if not program_file.exists():
            print(f"Error: file {program_file} not found", file=sys.stderr)
            sys.exit(1)
        with open(program_file, 'r', encoding='utf-8') as f:
            source = f.read()

    interpreter = Interpreter(config=config)
    try:
        interpreter.run(parse_program(source))
    except PtbrError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == '__main__':
    main()
