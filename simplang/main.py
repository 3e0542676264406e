"""Uses the simplang implementation to scan, parse or interpret .sl files, or to run in command-line mode. Also uses
error handling context manager. Called from the simplang executable script.
"""

import argparse
import sys

from simplang.lang.error import ErrorHandler
from simplang.lang.session import Session
from simplang.lang.shell import Shell

MODES = {
    "scan": "print the tokens of FILE",
    "parse": "print the syntax tree of every function in FILE",
    "parse_exp": "parse FILE as a single expression and print its syntax tree",
    "interpret_exp": "evaluate FILE as a single expression and print the result",
    "interpret": "run the main function of FILE with ARGS and print the result (default)",
}


def build_parser():
    parser = argparse.ArgumentParser(prog="simplang")
    parser.add_argument("file", help="file to interpret and run (if empty, goes to command-line mode)", nargs="?")
    parser.add_argument("args", help="integer arguments for main", nargs="*", type=int)

    modes = parser.add_mutually_exclusive_group()
    for mode, help_text in MODES.items():
        flag = "--" + mode.replace("_", "-")
        modes.add_argument(flag, dest="mode", action="store_const", const=mode, help=help_text)
    parser.set_defaults(mode="interpret")

    parser.add_argument("--trace", action="store_true", help="print the invocation trace after the result")
    parser.add_argument("--recursion-limit", type=int, help="raise the Python recursion limit for deep programs")
    return parser


def run(args, out=sys.stdout):
    """Runs the mode selected by parsed args on args.file."""
    with ErrorHandler() as error_handler:
        if args.recursion_limit:
            sys.setrecursionlimit(args.recursion_limit)

        if args.file is None:
            Shell(Session(error_handler)).cmdloop()
            return

        sess = Session(error_handler, args.file)

        if args.mode == "scan":
            print(sess.scan_dump(), file=out)
        elif args.mode == "parse":
            print(sess.parse_dump(), file=out)
        elif args.mode == "parse_exp":
            print(sess.parse_expression_dump(), file=out)
        else:
            if args.mode == "interpret_exp":
                result = sess.evaluate()
            else:
                result = sess.run(args.args)

            print(result, file=out)
            if args.trace and len(sess.trace):
                print(sess.trace.format(), file=out)


def main(argv=None):
    """Runs simplang interpreter. Called from simplang executable script."""
    assert sys.version_info >= (3, 7), "simplang cannot be run with python < 3.7"
    run(build_parser().parse_args(argv))


if __name__ == "__main__":
    main()
