import io
import json
import logging
import traceback

from climb.climb_constants import format_number
from climb.climb_errors import EvalError, LexError, ParseError
from climb.climb_eval import Evaluator
from climb.climb_lexer import tokenize
from climb.climb_parser import parse
from climb.climb_transpile import Transpiler

logger = logging.getLogger(__name__)

MODES = ("text", "py", "json", "eval")


def print_traceback() -> None:
    buf = io.StringIO()
    traceback.print_exc(file=buf)
    print("[error] >>>")
    print(buf.getvalue())


def format_value(value: object) -> str:
    if isinstance(value, float):
        return format_number(value)
    return repr(value)


class ReplSession:
    """State of one REPL session: the output mode and the evaluator bindings."""

    def __init__(self, mode: str = "text", verbose: bool = False) -> None:
        if mode not in MODES:
            raise ValueError(f"Unknown REPL mode: {mode!r}")
        self.mode = mode
        self.verbose = verbose
        self.evaluator = Evaluator.with_defaults()

    def handle(self, src: str) -> str | None:
        """Runs one line of input and returns what should be printed."""
        src = src.strip()
        if not src or src.startswith("#"):
            return None
        if src.startswith(":"):
            return self.handle_command(src[1:])

        ast = parse(tokenize(src))
        if self.verbose:
            print(f"[tree] >>> {Transpiler('text').transpile(ast)}")
        if self.mode == "eval":
            return format_value(self.evaluator.evaluate(ast))
        if self.mode == "json":
            return json.dumps(ast.to_dict())
        return Transpiler(self.mode).transpile(ast)

    def handle_command(self, command: str) -> str:
        name, _, rest = command.strip().partition(" ")
        rest = rest.strip()

        if name == "target":
            if rest not in MODES:
                return f"[error] >>> Unknown mode {rest!r}; choose one of {', '.join(MODES)}"
            self.mode = rest
            return f"[mode] >>> {rest}"

        if name == "let":
            var, _, expr = rest.partition(" ")
            if not var.isidentifier() or not expr.strip():
                return "[error] >>> Usage: :let NAME EXPR"
            value = self.evaluator.evaluate(parse(tokenize(expr)))
            self.evaluator.bind(var, value)
            return f"{var} = {format_value(value)}"

        if name == "names":
            return "\n".join(
                f"{key:>12} = {format_value(val)}"
                for key, val in sorted(self.evaluator.names.items())
            )

        if name == "tokens":
            return " ".join(repr(tok) for tok in tokenize(rest))

        return f"[error] >>> Unknown command :{name}"


def start_repl(target: str = "text", verbose: bool = False) -> None:
    session = ReplSession("text" if target not in MODES else target, verbose)
    print(f"climb REPL [mode={session.mode}]. Type 'exit' or 'quit' to leave.")

    while True:
        try:
            line = input(">>> ")
            if line.strip() in ("exit", "quit"):
                print("Exiting climb REPL.")
                return
            try:
                result = session.handle(line)
            except (LexError, ParseError, EvalError) as e:
                print(f"[error] >>> {e}")
                continue
            except Exception:
                logger.debug("unexpected REPL failure", exc_info=True)
                print_traceback()
                continue
            if result:
                print(result)
        except (KeyboardInterrupt, EOFError):
            print("\nExiting climb REPL.")
            break


def main() -> None:
    start_repl()


if __name__ == "__main__":
    main()
