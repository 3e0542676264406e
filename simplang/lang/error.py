"""Error handling for simplang. Only GenericExceptions should be encountered during running: if another type of
error is raised and makes it all the way to ErrorHandler, it is assumed to be an internal issue.
"""

import sys

from termcolor import colored


class GenericException(Exception):
    """Templates a simplang error message. exprs are the offending snippets substituted into msg, location is the
    Location of the offending token (if known).
    """

    def __init__(self, msg, exprs=None, location=None, length=1, diagnosis=True, internal=False):
        if exprs is None:
            exprs = []
        if isinstance(exprs, str):
            exprs = [exprs]
        exprs = [str(expr) for expr in exprs]

        self.msg = msg.format(*(colored(expr, attrs=["bold"]) for expr in exprs))  # color expr snippets
        self.plain = msg.format(*exprs)
        self.location = location
        self.length = max(length, 1)  # needed for error display

        self.diagnosis = diagnosis
        self.internal = internal

        super().__init__(self.plain)


class ScanError(GenericException):
    """Raised when source text contains something that is not a token."""


class ParseError(GenericException):
    """Raised when the token stream does not match the grammar."""


class IncompleteInput(ParseError):
    """Raised when the token stream ends in the middle of a construct."""

    def __init__(self, expected):
        super().__init__("expected {}, got end of input", expected, diagnosis=False)


class EvaluationError(GenericException):
    """Raised when a well-formed program cannot be evaluated."""


class ErrorHandler:
    """Context manager that will silently suppress Python errors and print custom simplang errors."""
    ERROR = "red"

    def __init__(self, fatal=True):
        self.fatal = fatal
        self.sources = {}  # dict of path: source lines
        self.current = None

    def register_source(self, path, source):
        """Registers source text of path. Errors raised afterwards are reported against it."""
        self.sources[path] = source.splitlines()
        self.current = path

    def remove_source(self, path):
        """Removes path from the registered sources."""
        self.sources.pop(path, None)
        if self.current == path:
            self.current = None

    def diagnose(self, error):
        """Returns offending source line with the offending token highlighted and underlined."""
        lines = self.sources.get(self.current, [])
        line_num, col = error.location.line, error.location.column
        if not 0 < line_num <= len(lines):
            return None

        line = lines[line_num - 1]
        start = col - 1
        end = min(start + error.length, len(line))

        diagnosis = "  " + line[:start]
        diagnosis += colored(line[start:end], ErrorHandler.ERROR, attrs=["bold"])
        diagnosis += line[end:] + "\n"

        diagnosis += "  " + " " * start
        diagnosis += colored("^" + "~" * (end - start - 1), ErrorHandler.ERROR, attrs=["bold"])

        return diagnosis

    def throw(self, error):
        """Prints error, then exits if self.fatal. error must be a GenericException."""
        error_msg = ""
        if self.current is not None:
            prefix = self.current
            if error.location is not None:
                prefix += f":{error.location.line}:{error.location.column}"
            error_msg += colored(f"{prefix}: ", attrs=["bold"])

        if error.internal:
            error_msg += colored("[internal] ", ErrorHandler.ERROR, attrs=["bold"])

        error_msg += colored("error: ", ErrorHandler.ERROR, attrs=["bold"]) + error.msg
        print(error_msg, file=sys.stderr)

        if not error.internal and error.location is not None and error.diagnosis:
            diagnosis = self.diagnose(error)
            if diagnosis:
                print(diagnosis, file=sys.stderr)

        if self.fatal:
            sys.exit(1)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        do_exit = False
        if exc_type is KeyboardInterrupt:
            self.throw(GenericException("keyboard interrupt"))
        elif exc_type is SystemExit:
            do_exit = True
        elif exc_type is RecursionError:
            self.throw(GenericException("maximum recursion depth exceeded (try --recursion-limit)"))
        elif exc_type is not None and issubclass(exc_type, GenericException):
            self.throw(exc_val)
        elif exc_type is not None:
            self.throw(GenericException("unknown error: '{}: {}'", [exc_type.__name__, exc_val], internal=True))
            do_exit = True

        return not do_exit
