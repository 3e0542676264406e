"""Session control for simplang. Loads declarations from a file or from interactive input and evaluates programs and
single expressions against them.
"""

from simplang.lang.environment import Context, FunctionRegistry
from simplang.lang.error import GenericException
from simplang.lang.evaluator import call_function, evaluate_value
from simplang.lang.parser import Parser
from simplang.lang.printer import display, display_program, display_tokens
from simplang.lang.scanner import scan


class Session:
    """Governs a simplang session, with control over the declared functions. Every evaluation gets a fresh Context
    sharing only self.functions.
    """
    SH_FILE = "<in>"  # command-line interpreter filename
    ENTRY_POINT = "main"

    def __init__(self, error_handler, path=SH_FILE, source=None):
        self.error_handler = error_handler
        self.path = path  # used for error messages

        self.functions = FunctionRegistry()
        self.source = ""
        self.last_context = None  # Context of the most recent evaluation, kept for its trace

        if source is None and path != Session.SH_FILE:
            try:
                with open(path, "r", encoding="utf-8") as file:
                    source = file.read()
            except OSError:
                raise GenericException("'{}' could not be opened", path, diagnosis=False)

        if source is not None:
            self.source = source
            self.error_handler.register_source(path, source)

    @property
    def trace(self):
        return self.last_context.trace if self.last_context is not None else None

    def new_context(self):
        self.last_context = Context(self.functions)
        return self.last_context

    def tokens(self):
        return scan(self.source)

    def load(self):
        """Parses self.source as a program, adding its declarations to self.functions."""
        Parser(self.tokens(), self.functions).parse_program()
        return self.functions

    def parse_expression(self):
        """Parses self.source as a single expression."""
        return Parser(self.tokens(), self.functions).parse_expression()

    def run(self, args=()):
        """Loads self.source and evaluates its main function with args. Returns the result."""
        self.load()
        if self.ENTRY_POINT not in self.functions:
            raise GenericException("no '{}' function declared", self.ENTRY_POINT, diagnosis=False)
        return call_function(self.new_context(), self.ENTRY_POINT, list(args))

    def evaluate(self):
        """Evaluates self.source as a single expression. Returns the result."""
        return evaluate_value(self.parse_expression(), self.new_context())

    def add(self, line):
        """Adds a line of interactive input: declares a function, or evaluates an expression and returns its value.
        Returns None for declarations.
        """
        self.error_handler.register_source(self.path, line)

        parser = Parser(scan(line), self.functions)
        if parser.at_declaration():
            parser.parse_function()
            if not parser.done:
                raise parser.unexpected(parser.peek(), "end of input")
            return None

        return evaluate_value(parser.parse_expression(), self.new_context())

    def scan_dump(self):
        return display_tokens(self.tokens())

    def parse_dump(self):
        return display_program(self.load())

    def parse_expression_dump(self):
        return display(self.parse_expression())
