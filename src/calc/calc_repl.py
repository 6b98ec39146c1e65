import sys

from calc.calc_config import CalcConfig
from calc.calc_errors import CalcError, InputError
from calc.calc_session import Session

EXIT_COMMANDS = ("exit", "quit")


def is_interactive() -> bool:
    """True when both stdin and stderr are attached to a terminal."""
    return sys.stdin.isatty() and sys.stderr.isatty()


class PromptReader:
    """File-like source that feeds the lexer one ``input()`` line at a time.

    A new line is requested only when the lexer needs another character, so the
    prompt appears exactly when the session is waiting for input. ``exit`` or
    ``quit`` on a line of their own end the input.
    """

    def __init__(self, prompt: str = "") -> None:
        self.prompt = prompt
        self._buffer = ""
        self._done = False

    def read(self, size: int = -1) -> str:
        if not self._buffer and not self._done:
            try:
                line = input(self.prompt)
            except EOFError:
                line = None
            if line is None or line.strip() in EXIT_COMMANDS:
                self._done = True
            else:
                self._buffer = line + "\n"
        if size < 0:
            size = len(self._buffer)
        chunk, self._buffer = self._buffer[:size], self._buffer[size:]
        return chunk


def report_error(prog: str, message: str) -> None:
    print(f"{prog}: {message}", file=sys.stderr)


def run_session(session: Session, verbose: bool = False, prog: str = "calc") -> int:
    """Evaluates every expression of ``session``, printing values and errors.

    Returns:
        int: 0 once the input is exhausted, 1 if reading it failed.
    """
    while True:
        try:
            expr = session.next_expr()
            if expr is None:
                return 0
            if verbose:
                print(f"[ast] >>> {expr!r}")
            print(expr.value())
        except CalcError as e:
            report_error(prog, session.format_error(e))
        except InputError as e:
            report_error(prog, f"An unexpected I/O error occurred.\n\twhat: {e}")
            return 1


def start_repl(config: CalcConfig | None = None, prog: str = "calc") -> int:
    config = config or CalcConfig()
    interactive = is_interactive()
    if interactive:
        print(
            f"calc REPL [dialect={config.dialect.value}]. Type 'exit' or 'quit' to leave."
        )
    reader = PromptReader(config.prompt if interactive else "")
    session = Session(reader, config.dialect, config.ascii_only)
    try:
        status = run_session(session, config.verbose, prog)
    except KeyboardInterrupt:
        print("\nExiting calc REPL.")
        return 0
    if interactive:
        print("Exiting calc REPL.")
    return status


def main() -> None:
    sys.exit(start_repl())


if __name__ == "__main__":
    main()
