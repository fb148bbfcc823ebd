"""
bindcheck Command-Line Interface.

Provides commands to check a ReScript project's external bindings and to
inspect the scanner and translator on their own.

Usage:
    bindcheck check                  # Check the project containing the cwd
    bindcheck check packages/web --json
    bindcheck scan src/Bindings.res  # List the externals in one file
    bindcheck translate "array<option<int>> => unit"
    bindcheck tokens src/Bindings.res
"""

import argparse
import json
import logging
import os
import sys
from pathlib import Path
from typing import Optional

from bindcheck import __version__
from bindcheck.compiler.checker import check_bindings
from bindcheck.compiler.externals import scan_externals
from bindcheck.compiler.lexer import Lexer
from bindcheck.compiler.synthesis import render_typescript
from bindcheck.compiler.type_translator import translate_type
from bindcheck.config import CheckOptions
from bindcheck.utils.diagnostics import CheckResult, Diagnostic
from bindcheck.utils.errors import BindCheckError

logger = logging.getLogger("bindcheck")


# =============================================================================
# ANSI Color Codes for Terminal Output
# =============================================================================


class Colors:
    """ANSI escape codes for colored terminal output."""

    RED = "\033[91m"
    GREEN = "\033[92m"
    YELLOW = "\033[93m"
    CYAN = "\033[96m"
    GRAY = "\033[90m"
    BOLD = "\033[1m"
    RESET = "\033[0m"

    @classmethod
    def disable(cls) -> None:
        """Disable all colors (for non-TTY output)."""
        cls.RED = ""
        cls.GREEN = ""
        cls.YELLOW = ""
        cls.CYAN = ""
        cls.GRAY = ""
        cls.BOLD = ""
        cls.RESET = ""


def _colors_enabled() -> bool:
    return sys.stdout.isatty() and not os.environ.get("NO_COLOR")


def _init_colors() -> None:
    """Initialize colors based on terminal capabilities."""
    if not _colors_enabled():
        Colors.disable()


_init_colors()


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser for the CLI."""
    parser = argparse.ArgumentParser(
        prog="bindcheck",
        description="Verify ReScript external bindings against TypeScript declarations",
    )

    parser.add_argument(
        "-V",
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )
    parser.add_argument(
        "--log-level",
        choices=["debug", "info", "warning", "error"],
        default="warning",
        help="Logging level (default: warning)",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # Check command
    check_parser = subparsers.add_parser(
        "check",
        help="Check every external in a ReScript project",
    )
    check_parser.add_argument(
        "dir",
        nargs="?",
        type=Path,
        default=None,
        help="Directory to search upward from for rescript.json (default: cwd)",
    )
    check_parser.add_argument(
        "--json",
        action="store_true",
        help="Print the result as JSON",
    )
    check_parser.add_argument(
        "--tsc",
        default=None,
        metavar="COMMAND",
        help="Command used to run the TypeScript compiler (default: $BINDCHECK_TSC, "
        "node_modules/.bin/tsc, or tsc on PATH)",
    )
    check_parser.add_argument(
        "--tsconfig",
        type=Path,
        default=None,
        help="tsconfig.json to extend (default: <project root>/tsconfig.json)",
    )
    check_parser.add_argument(
        "--timeout",
        type=float,
        default=None,
        help="Seconds to wait for the TypeScript compiler (default: 120)",
    )
    check_parser.add_argument(
        "--show-source",
        action="store_true",
        help="Show the offending source line under each diagnostic",
    )

    # Scan command
    scan_parser = subparsers.add_parser(
        "scan",
        help="List the external declarations in a file",
    )
    scan_parser.add_argument(
        "input",
        type=Path,
        help="ReScript source file (.res or .resi)",
    )
    scan_parser.add_argument(
        "--json",
        action="store_true",
        help="Print declarations as JSON",
    )

    # Translate command
    translate_parser = subparsers.add_parser(
        "translate",
        help="Translate a ReScript type expression to TypeScript",
    )
    translate_parser.add_argument(
        "type",
        help='ReScript type expression, e.g. "(string, int) => promise<unit>"',
    )

    # Tokens command
    tokens_parser = subparsers.add_parser(
        "tokens",
        help="Show the token stream of a file (debug)",
    )
    tokens_parser.add_argument(
        "input",
        type=Path,
        help="ReScript source file",
    )

    return parser


def _configure_logging(level_name: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level_name.upper()),
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )


# =============================================================================
# Commands
# =============================================================================


def cmd_check(args: argparse.Namespace) -> int:
    """Handle the check command."""
    try:
        options = CheckOptions.from_env(
            directory=args.dir,
            tsc=args.tsc,
            tsconfig=args.tsconfig,
            timeout=args.timeout,
        )
        result = check_bindings(options)
    except BindCheckError as e:
        print(f"{Colors.RED}Error:{Colors.RESET} {e}", file=sys.stderr)
        return 1
    except Exception as e:
        logger.debug("Unexpected failure", exc_info=True)
        print(f"{Colors.RED}Internal error:{Colors.RESET} {e}", file=sys.stderr)
        return 1

    if args.json:
        print(json.dumps(result.to_dict(), indent=2))
    else:
        _print_check_report(result, show_source=args.show_source)

    return 1 if result.has_errors else 0


def _print_check_report(result: CheckResult, show_source: bool = False) -> None:
    summary = result.summary
    status_color = Colors.RED if summary.errors else Colors.YELLOW if summary.warnings else Colors.GREEN
    print(
        f"{status_color}{Colors.BOLD}Checked {summary.externals} externals:{Colors.RESET} "
        f"{summary.errors} error(s), {summary.warnings} warning(s)."
    )

    use_color = bool(Colors.RESET)
    sources: dict[str, Optional[str]] = {}
    for diagnostic in result.diagnostics:
        source = _read_source(diagnostic, sources) if show_source else None
        print(diagnostic.render(use_color=use_color, source=source))


def _read_source(diagnostic: Diagnostic, cache: dict[str, Optional[str]]) -> Optional[str]:
    if diagnostic.file not in cache:
        try:
            cache[diagnostic.file] = Path(diagnostic.file).read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError):
            cache[diagnostic.file] = None
    return cache[diagnostic.file]


def cmd_scan(args: argparse.Namespace) -> int:
    """Handle the scan command."""
    input_path: Path = args.input

    if not input_path.exists():
        print(f"Error: File not found: {input_path}", file=sys.stderr)
        return 1

    try:
        source = input_path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        print(f"{Colors.RED}Error:{Colors.RESET} {e}", file=sys.stderr)
        return 1

    externals = scan_externals(source, str(input_path))

    if args.json:
        print(json.dumps([decl.to_dict() for decl in externals], indent=2))
        return 0

    for decl in externals:
        attributes = " ".join(
            f"@{name}" if value is True else f"@{name}({json.dumps(value)})"
            for name, value in decl.attributes.to_dict().items()
        )
        prefix = f"{Colors.GRAY}{decl.location}{Colors.RESET}"
        line = f"{prefix} {Colors.CYAN}{decl.name}{Colors.RESET}: {decl.res_type} = {json.dumps(decl.binding)}"
        print(f"{line} {attributes}".rstrip())
    print(f"{len(externals)} external(s)")
    return 0


def cmd_translate(args: argparse.Namespace) -> int:
    """Handle the translate command."""
    result = translate_type(args.type)
    print(render_typescript(result.descriptor))
    for message in result.warnings:
        print(f"{Colors.YELLOW}warning:{Colors.RESET} {message}", file=sys.stderr)
    return 0


def cmd_tokens(args: argparse.Namespace) -> int:
    """Handle the tokens command (debug)."""
    input_path: Path = args.input

    if not input_path.exists():
        print(f"Error: File not found: {input_path}", file=sys.stderr)
        return 1

    try:
        source = input_path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    for token in Lexer(source, str(input_path)).tokenize():
        print(token)
    return 0


def main(argv: Optional[list[str]] = None) -> int:
    """Main entry point for the CLI."""
    parser = create_parser()
    args = parser.parse_args(argv)

    _configure_logging(args.log_level)

    if args.command is None:
        parser.print_help()
        return 0

    command_handlers = {
        "check": cmd_check,
        "scan": cmd_scan,
        "translate": cmd_translate,
        "tokens": cmd_tokens,
    }

    handler = command_handlers.get(args.command)
    if handler:
        return handler(args)

    parser.print_help()
    return 1


if __name__ == "__main__":
    sys.exit(main())
