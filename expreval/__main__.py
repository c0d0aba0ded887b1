import argparse
import logging
import sys
from typing import IO, Iterable, Optional

from . import version
from .errors import ExpressionError
from .printer import Printer
from .session import EvaluationOptions, Session


log = logging.getLogger('expreval')

EXIT_COMMANDS = ('exit', 'quit')


class PathOrStdin:
    def __init__(self, path):
        self._path = path
        self._file: Optional[IO] = None

    def __enter__(self) -> IO:
        if self._path == '-':
            return sys.stdin
        self._file = open(self._path, 'r', encoding='utf-8')
        return self._file

    def __exit__(self, *args, **kwargs):
        if self._file is not None:
            self._file.close()
            self._file = None


def run(session: Session, expression: str, out: Printer, err: Printer, rpn: bool = False) -> bool:
    """Evaluates (or, if :obj:`rpn`, only parses) one expression and prints the outcome.

    Returns:
        bool: Whether the expression succeeded.

    """
    try:
        if rpn:
            output = ' '.join(map(str, session.parse(expression)))
        else:
            output = str(session.evaluate(expression))
    except ExpressionError as e:
        log.debug(f"{e!s} while evaluating {expression!r}")
        with err.error():
            err.write(f"error: {e!s}")
        err.newline()
        return False
    with out.bright():
        out.write(output)
    out.newline()
    return True


def print_variables(session: Session, out: Printer):
    for name, variable in sorted(session.variables.items()):
        if variable.is_initialized():
            out.write(f"{name} = {variable.value!s}")
        else:
            with out.dim():
                out.write(f"{name} = <uninitialized>")
        out.newline()


def print_history(session: Session, out: Printer):
    for index, result in enumerate(session.history, start=1):
        out.write(f"result({index}) = {result!s}")
        out.newline()


def expression_lines(lines: Iterable[str]) -> Iterable[str]:
    """Strips lines and skips blank lines and ``#`` comments."""
    for line in lines:
        line = line.strip()
        if line and not line.startswith('#'):
            yield line


def repl(session: Session, out: Printer, err: Printer, stream: IO, rpn: bool = False):
    """Reads and evaluates expressions from :obj:`stream` until it is exhausted or the user exits."""
    while True:
        out.write('> ')
        out.flush()
        line = stream.readline()
        if not line:
            out.newline()
            break
        line = line.strip()
        if not line or line.startswith('#'):
            continue
        elif line.lower() in EXIT_COMMANDS:
            break
        elif line.lower() == 'vars':
            print_variables(session, out)
        elif line.lower() == 'history':
            print_history(session, out)
        else:
            run(session, line, out, err, rpn=rpn)


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(
        description='Evaluates arithmetic and logical expressions with arbitrary-precision integers and decimals.'
    )
    parser.add_argument('EXPRESSION', type=str, nargs='*',
                        help='expressions to evaluate in order, sharing variables; if none are given and --file is '
                             'not used, an interactive prompt is started')
    parser.add_argument('--file', '-f', type=str, default=None,
                        help='evaluate one expression per line of this file; pass \'-\' to read from STDIN')
    parser.add_argument('--precision', '-p', type=int, default=None,
                        help='the number of significant digits for decimal arithmetic (default=%(default)s)')
    parser.add_argument('--rpn', action='store_true',
                        help='print the postfix form of each expression instead of evaluating it')
    parser.add_argument(
        '--no-status',
        action='store_true',
        help='do not display progress bars'
    )
    formatting = parser.add_argument_group(title='output formatting')
    color_group = formatting.add_mutually_exclusive_group()
    color_group.add_argument(
        '--color', '-c',
        action='store_true',
        default=None,
        help='force ANSI color output; this is turned on by default only if run from a TTY'
    )
    color_group.add_argument(
        '--no-color',
        action='store_true',
        default=None,
        help='do not use ANSI color in the output'
    )
    log_section = parser.add_argument_group(title='logging')
    log_group = log_section.add_mutually_exclusive_group()
    log_group.add_argument('--log-level', type=str, default='INFO', choices=list(
        logging.getLevelName(x)
        for x in range(1, 101)
        if not logging.getLevelName(x).startswith('Level')
    ), help='sets the log level for expreval (default=INFO)')
    log_group.add_argument('--debug', action='store_true', help='equivalent to `--log-level=DEBUG`')
    log_group.add_argument('--quiet', action='store_true', help='equivalent to `--log-level=CRITICAL --no-status`')
    parser.add_argument('--version', '-v', action='store_true', help='print expreval\'s version information to STDERR')
    parser.add_argument('-dumpversion', action='store_true',
                        help='print expreval\'s raw version information to STDOUT and exit')

    if argv is None:
        argv = sys.argv

    args = parser.parse_args(argv[1:])

    if args.debug:
        numeric_log_level = logging.DEBUG
    elif args.quiet:
        numeric_log_level = logging.CRITICAL
    else:
        numeric_log_level = getattr(logging, args.log_level.upper(), None)
        if not isinstance(numeric_log_level, int):
            sys.stderr.write(f'Invalid log level: {args.log_level}')
            return 1

    if args.dumpversion:
        print(version.VERSION_STRING)
        return 0

    if args.version:
        sys.stderr.write(f"expreval version {version.VERSION_STRING}\n")
        if not args.EXPRESSION and args.file is None:
            return 0

    if args.no_color:
        ansi_color = False
    elif args.color:
        ansi_color = True
    else:
        ansi_color = None

    # progress bars are only drawn while evaluating a file
    quiet = args.no_status or args.quiet or args.file is None
    out = Printer(sys.stdout, ansi_color=ansi_color, quiet=quiet)
    err = Printer(sys.stderr, ansi_color=ansi_color, quiet=quiet)

    logging.basicConfig(level=numeric_log_level, stream=err)

    if args.precision is not None:
        if args.precision < 1:
            sys.stderr.write(f'Invalid precision: {args.precision}\n')
            return 1
        options = EvaluationOptions(precision=args.precision)
    else:
        options = EvaluationOptions()
    session = Session(options)

    failures = 0
    try:
        for expression in args.EXPRESSION:
            if not run(session, expression, out, err, rpn=args.rpn):
                failures += 1
        if args.file is not None:
            with PathOrStdin(args.file) as f:
                lines = list(expression_lines(f))
            for expression in out.tqdm(lines, desc='evaluating', unit=' expressions', leave=False):
                if not run(session, expression, out, err, rpn=args.rpn):
                    failures += 1
        elif not args.EXPRESSION:
            repl(session, out, err, sys.stdin, rpn=args.rpn)
    except KeyboardInterrupt:
        return 1
    finally:
        out.close()
        err.close()
    if failures:
        return 1
    else:
        return 0


if __name__ == '__main__':
    sys.exit(main())
