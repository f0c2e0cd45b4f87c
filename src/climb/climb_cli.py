"""
climb CLI Entrypoint.

Command-line driver for the climb toolchain: lex, parse, then render,
dump or evaluate a single expression.

Features:
    - Read source from `.climb` files or inline strings.
    - Render the tree as fully-parenthesized climb text, Python, or JSON.
    - Optionally evaluate the expression, with extra `-D name=value` bindings.
    - Parse with the bracket-delimited list grammar instead (`--lists`).
    - Launch an interactive REPL.

Example usage:
    climb -s "a + b * c"
    climb -s "-3 * x + 5 / y - 10" -e -D x=2 -D y=5
    climb expr.climb -t py -o expr.py
    climb -s "(add 3 (sub x y))" --lists
    climb --repl

Exit status is 0 on success and 1 when the input fails to lex, parse or
evaluate; the error message goes to stderr.
"""

import argparse
import json
import logging
import sys

from climb.climb_constants import format_number
from climb.climb_errors import EvalError, LexError, ParseError
from climb.climb_eval import Evaluator
from climb.climb_lexer import tokenize
from climb.climb_lists import parse_list, render_list
from climb.climb_parser import parse
from climb.climb_transpile import Transpiler

logger = logging.getLogger(__name__)


def parse_binding(text: str) -> tuple[str, float]:
    """Parses a `NAME=VALUE` command-line binding.

    Raises:
        argparse.ArgumentTypeError: If the text is not of that form.
    """
    name, sep, value = text.partition("=")
    name = name.strip()
    if not sep or not name.isidentifier():
        raise argparse.ArgumentTypeError(f"expected NAME=VALUE, got {text!r}")
    try:
        return name, float(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"not a number: {value!r}") from None


def run_climb(
    source: str,
    is_string: bool = False,
    target: str = "text",
    out: str | None = None,
    evaluate: bool = False,
    bindings: dict[str, float] | None = None,
    lists: bool = False,
    pretty: bool = False,
) -> str:
    """
    Run the climb toolchain on one expression and print (or write) the result.

    Args:
        source (str): The climb source or path to a `.climb` file.
        is_string (bool): If True, treats `source` as raw code instead of a file path.
        target (str): Output form: 'text', 'py' or 'json'. Defaults to 'text'.
        out (str | None): Optional path to write the rendered output to.
        evaluate (bool): If True, also evaluate the expression and print the value.
        bindings (dict[str, float] | None): Extra names for evaluation.
        lists (bool): Parse with the list grammar instead of the expression grammar.
        pretty (bool): Print banners around the output.

    Returns:
        str: The rendered output.

    Raises:
        ValueError: If `is_string` is False and the source does not end with '.climb'.
            Also raised for options the list grammar does not support.
        LexError, ParseError, EvalError: If the input is invalid.
    """
    if not is_string and not source.endswith(".climb"):
        raise ValueError("Only .climb files are supported.")
    if lists and (evaluate or target == "py"):
        raise ValueError("--lists only supports the text and json targets, without --eval")
    if not is_string:
        with open(source, encoding="utf-8") as f:
            source = f.read()

    tokens = tokenize(source)
    logger.debug("lexed %d tokens", len(tokens))

    if lists:
        item = parse_list(tokens)
        code = json.dumps(item.to_dict(), indent=2) if target == "json" else render_list(item)
        value = None
    else:
        ast = parse(tokens)
        if target == "json":
            code = json.dumps(ast.to_dict(), indent=2)
        else:
            code = Transpiler(target).transpile(ast)
        value = Evaluator.with_defaults(bindings).evaluate(ast) if evaluate else None

    if pretty:
        banner = "=" * 20
        print(f"{banner}\n{target}\n{banner}\n{code}\n{banner}")
    elif not out:
        print(code)

    if out:
        with open(out, "w", encoding="utf-8") as f:
            f.write(code + "\n")
        if pretty:
            print(f"(wrote to {out})")

    if value is not None:
        if pretty:
            print("<<< VALUE >>>")
        print(format_number(value) if isinstance(value, float) else value)

    return code


def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="climb", description="Parse and evaluate climb arithmetic expressions."
    )
    parser.add_argument("source", nargs="?", help="Filename or raw source (with -s)")
    parser.add_argument(
        "-s", "--string", action="store_true", help="Interpret source as literal string"
    )
    parser.add_argument(
        "-t",
        "--target",
        choices=("text", "py", "json"),
        default="text",
        help="Output form (default: text)",
    )
    parser.add_argument("-o", "--out", metavar="OUTFILE", help="Output to file")
    parser.add_argument(
        "-e", "--eval", dest="evaluate", action="store_true", help="Evaluate the expression"
    )
    parser.add_argument(
        "-D",
        "--define",
        dest="bindings",
        metavar="NAME=VALUE",
        type=parse_binding,
        action="append",
        default=[],
        help="Bind a name for evaluation (repeatable)",
    )
    parser.add_argument(
        "--lists", action="store_true", help="Use the bracket-delimited list grammar"
    )
    parser.add_argument(
        "-p", "--pretty", action="store_true", help="Show output with banners"
    )
    parser.add_argument(
        "--repl", action="store_true", help="Launch interactive REPL"
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true", help="Enable debug logging"
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    """
    Entry point for the climb CLI.

    Launches the REPL when no source is given or `--repl` is passed; otherwise
    runs the toolchain once. Returns the process exit status.
    """
    args = build_arg_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    if args.repl or args.source is None:
        from climb.climb_repl import start_repl

        start_repl(target=args.target, verbose=args.verbose)
        return 0

    try:
        run_climb(
            source=args.source,
            is_string=args.string,
            target=args.target,
            out=args.out,
            evaluate=args.evaluate,
            bindings=dict(args.bindings),
            lists=args.lists,
            pretty=args.pretty,
        )
    except (LexError, ParseError, EvalError, ValueError, OSError) as e:
        print(f"error: {e}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
