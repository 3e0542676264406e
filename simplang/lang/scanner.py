"""Lexical scanner for simplang: converts source text into a list of located tokens. Whitespace (newlines included)
separates tokens and is otherwise ignored. There are no comments.
"""

import string

from simplang.lang.error import ScanError
from simplang.lang.tokens import DOUBLED_OPERATORS, SINGLE_CHAR_OPERATORS, Keyword, Location, Operator, Token

INT_MIN = -2 ** 63
INT_MAX = 2 ** 63 - 1


class Scanner:
    """Scans a whole source string up front. Tokens are available as self.tokens after construction."""

    def __init__(self, source):
        self.source = source
        self.pos = 0
        self.line = 1
        self.column = 1

        self.tokens = list(self.scan())

    def peek(self, offset=0):
        """Returns the character offset positions ahead without consuming it, or "" past the end."""
        idx = self.pos + offset
        return self.source[idx] if idx < len(self.source) else ""

    def consume(self):
        """Consumes and returns the next character, keeping track of line and column."""
        char = self.source[self.pos]
        self.pos += 1
        if char == "\n":
            self.line += 1
            self.column = 1
        else:
            self.column += 1
        return char

    def consume_while(self, predicate):
        chars = ""
        while self.peek() and predicate(self.peek()):
            chars += self.consume()
        return chars

    @staticmethod
    def is_word_start(char):
        return char.isalpha() or char == "_"

    @staticmethod
    def is_word_char(char):
        return char.isalpha() or char in string.digits or char == "_"

    def scan(self):
        """Yields tokens in source order. Raises ScanError on the first character that starts no token."""
        while self.pos < len(self.source):
            char = self.peek()
            location = Location(self.line, self.column)

            if char.isspace():
                self.consume_while(str.isspace)

            elif self.is_word_start(char):
                word = self.consume_while(self.is_word_char)
                keyword = Keyword.lookup(word)
                if keyword is not None:
                    yield Token.keyword(keyword, location)
                else:
                    yield Token.identifier(word, location)

            elif char in string.digits:
                digits = self.consume_while(lambda c: c in string.digits)
                value = int(digits)
                if value > INT_MAX:
                    raise ScanError("integer literal '{}' out of range", digits, location, len(digits))
                yield Token.integer(value, location)

            elif char == "=":
                self.consume()
                if self.peek() == "=":
                    self.consume()
                    yield Token.operator(Operator.EQUALS, location)
                else:
                    yield Token.operator(Operator.ASSIGN, location)

            elif char in SINGLE_CHAR_OPERATORS:
                self.consume()
                yield Token.operator(SINGLE_CHAR_OPERATORS[char], location)

            elif char in DOUBLED_OPERATORS:
                if self.peek(1) != char:
                    raise ScanError("expected '{}', got '{}'", [char * 2, char], location)
                self.consume()
                self.consume()
                yield Token.operator(DOUBLED_OPERATORS[char], location)

            else:
                raise ScanError("invalid character '{}'", char, location)


def scan(source):
    """Returns the tokens of source."""
    return Scanner(source).tokens
