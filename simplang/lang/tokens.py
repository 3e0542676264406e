"""Token model for simplang.

Formally, the lexical grammar can be defined as

```
<token>      ::= <keyword> | <identifier> | <integer> | <operator>
<keyword>    ::= "let" | "and" | "in" | "if" | "then" | "else" | "recur" | "loop" | "end"
<identifier> ::= (<letter> | "_") (<letter> | <digit> | "_")*   ; anything but a keyword
<integer>    ::= <digit>+                                         ; signed 64-bit range
<operator>   ::= "!" | "-" | "(" | ")" | "=" | "<" | "+" | "*" | "==" | "&&" | "||"
```
"""

from dataclasses import dataclass, field
from enum import Enum, IntEnum
from typing import Any


class Keyword(Enum):
    LET = "let"
    AND = "and"
    IN = "in"
    IF = "if"
    THEN = "then"
    ELSE = "else"
    RECUR = "recur"
    LOOP = "loop"
    END = "end"

    @classmethod
    def lookup(cls, spelling):
        """Returns the Keyword spelled exactly like spelling, or None."""
        try:
            return cls(spelling)
        except ValueError:
            return None

    def __str__(self):
        return self.value


class Operator(IntEnum):
    """Operators in declaration order. Among the binary operators, declaration order is precedence, lowest first."""
    NOT = 1
    NEGATE = 2
    OPEN_PAREN = 3
    CLOSE_PAREN = 4
    ASSIGN = 5
    LESS_THAN = 6
    PLUS = 7
    MULTIPLY = 8
    EQUALS = 9
    AND = 10
    OR = 11

    @property
    def symbol(self):
        return _SYMBOLS[self]

    @property
    def is_unary(self):
        return self in (Operator.NOT, Operator.NEGATE)

    @property
    def is_binary(self):
        return self >= Operator.LESS_THAN

    @property
    def precedence(self):
        assert self.is_binary, f"'{self.symbol}' is not a binary operator"
        return int(self)

    def __str__(self):
        return self.symbol


_SYMBOLS = {
    Operator.NOT: "!",
    Operator.NEGATE: "-",
    Operator.OPEN_PAREN: "(",
    Operator.CLOSE_PAREN: ")",
    Operator.ASSIGN: "=",
    Operator.LESS_THAN: "<",
    Operator.PLUS: "+",
    Operator.MULTIPLY: "*",
    Operator.EQUALS: "==",
    Operator.AND: "&&",
    Operator.OR: "||",
}

# operators recognised from a single character ("=" is resolved separately against "==")
SINGLE_CHAR_OPERATORS = {symbol: op for op, symbol in _SYMBOLS.items() if len(symbol) == 1 and symbol != "="}

# operators spelled as a doubled character
DOUBLED_OPERATORS = {symbol[0]: op for op, symbol in _SYMBOLS.items() if len(symbol) == 2}


class TokenKind(Enum):
    KEYWORD = "keyword"
    IDENTIFIER = "identifier"
    INTEGER = "integer"
    OPERATOR = "operator"

    def __str__(self):
        return self.value


@dataclass(frozen=True)
class Location:
    """1-based position of a token in its source."""
    line: int
    column: int

    def __str__(self):
        return f"{self.line}:{self.column}"


@dataclass(frozen=True)
class Token:
    """A scanned token. Tokens compare by kind and payload, never by location."""
    kind: TokenKind
    value: Any
    location: Location = field(default=None, compare=False)

    def __post_init__(self):
        if self.kind is TokenKind.IDENTIFIER:
            assert Keyword.lookup(self.value) is None, f"identifier token cannot be keyword '{self.value}'"

    @classmethod
    def keyword(cls, keyword, location=None):
        return cls(TokenKind.KEYWORD, keyword, location)

    @classmethod
    def identifier(cls, name, location=None):
        return cls(TokenKind.IDENTIFIER, name, location)

    @classmethod
    def integer(cls, value, location=None):
        return cls(TokenKind.INTEGER, value, location)

    @classmethod
    def operator(cls, op, location=None):
        return cls(TokenKind.OPERATOR, op, location)

    def is_keyword(self, *keywords):
        return self.kind is TokenKind.KEYWORD and (not keywords or self.value in keywords)

    def is_operator(self, *ops):
        return self.kind is TokenKind.OPERATOR and (not ops or self.value in ops)

    @property
    def is_binary_operator(self):
        return self.kind is TokenKind.OPERATOR and self.value.is_binary

    @property
    def spelling(self):
        """The token as written in source."""
        return str(self.value)

    def __str__(self):
        return f"{self.kind} {self.spelling}"
