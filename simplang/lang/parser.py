"""Parser for simplang. Primary expressions are recognised by recursive descent, binary expressions are combined with
the shunting-yard algorithm.

Formally, the grammar can be defined as

```
<program>     ::= <function>*
<function>    ::= "let" <identifier> <identifier>+ "=" <expr> "end"   ; at least one parameter

<expr>        ::= <primary> (<binary-op> <primary>)*                 ; folded by precedence, left associative
<primary>     ::= <integer>
                | "if" <expr> "then" <expr> "else" <expr> "end"
                | ("let" | "loop") <binding> ("and" <binding>)* "in" <expr> "end"
                | "recur" <args>
                | <unary-op> <primary>
                | "(" <expr> ")"
                | <identifier> <args>                                ; only if <identifier> is a known function
                | <identifier>
<binding>     ::= <identifier> "=" <expr>
<args>        ::= ("(" <expr> ")")+
```

Binary operator precedence, lowest first: "<", "+", "*", "==", "&&", "||".
"""

from simplang.lang.environment import FunctionRegistry
from simplang.lang.error import IncompleteInput, ParseError
from simplang.lang.expressions import (
    Binary, Binding, Function, Identifier, If, Integer, Invocation, Let, Loop, Parenthesized, Recur, Unary
)
from simplang.lang.scanner import scan
from simplang.lang.tokens import Keyword, Operator, TokenKind


class _Scope:
    """Operand and operator stacks of one shunting-yard run. Every nested expression context gets its own."""

    def __init__(self):
        self.operands = []
        self.operators = []

    def fold(self):
        """Replaces the top operator and the top two operands with their Binary expression."""
        op = self.operators.pop()
        right = self.operands.pop()
        left = self.operands.pop()
        self.operands.append(Binary(op, left, right))

    def shunt(self, op):
        """Folds every stacked operator that binds at least as tightly as op, then stacks op."""
        while self.operators and op.precedence <= self.operators[-1].precedence:
            self.fold()
        self.operators.append(op)

    def drain(self):
        while self.operators:
            self.fold()
        assert len(self.operands) == 1, f"unbalanced shunting-yard scope: {self.operands}"
        return self.operands.pop()


class Parser:
    """Parses a token list. functions is the FunctionRegistry that declarations are added to and that decides
    whether an identifier is a function call.
    """

    def __init__(self, tokens, functions=None):
        self.tokens = list(tokens)
        self.pos = 0
        self.functions = functions if functions is not None else FunctionRegistry()
        self.scopes = []

    @classmethod
    def from_source(cls, source, functions=None):
        return cls(scan(source), functions)

    # ------------------------------------------------------------------------------------------------ token stream

    @property
    def done(self):
        return self.pos >= len(self.tokens)

    def peek(self, offset=0):
        idx = self.pos + offset
        return self.tokens[idx] if idx < len(self.tokens) else None

    def next(self, expected="a token"):
        """Consumes the next token. expected describes what the caller wants, for the end of input error."""
        token = self.peek()
        if token is None:
            raise IncompleteInput(expected)
        self.pos += 1
        return token

    @staticmethod
    def unexpected(token, expected):
        return ParseError("expected {}, got '{}'", [expected, token.spelling], token.location, len(token.spelling))

    def expect_keyword(self, keyword):
        expected = f"'{keyword}'"
        token = self.next(expected)
        if not token.is_keyword(keyword):
            raise self.unexpected(token, expected)
        return token

    def expect_operator(self, op):
        expected = f"'{op}'"
        token = self.next(expected)
        if not token.is_operator(op):
            raise self.unexpected(token, expected)
        return token

    def expect_identifier(self):
        token = self.next("an identifier")
        if token.kind is not TokenKind.IDENTIFIER:
            raise self.unexpected(token, "an identifier")
        return token

    def at_declaration(self):
        """Whether the upcoming tokens start a function declaration rather than a let expression."""
        first, second, third = self.peek(), self.peek(1), self.peek(2)
        return (
            first is not None and first.is_keyword(Keyword.LET)
            and second is not None and second.kind is TokenKind.IDENTIFIER
            and third is not None and third.kind is TokenKind.IDENTIFIER
        )

    # ------------------------------------------------------------------------------------------------- top level

    def parse_program(self):
        """Parses function declarations until input is exhausted. Returns self.functions."""
        while not self.done:
            self.parse_function()
        return self.functions

    def parse_function(self):
        """Parses let <name> <params>+ = <body> end and declares it."""
        self.expect_keyword(Keyword.LET)
        name_token = self.expect_identifier()
        name = name_token.value

        was_known = self.functions.is_known(name)
        self.functions.register(name)  # before the body, so that the body can call it
        try:
            params = []
            while self.peek() is not None and self.peek().kind is TokenKind.IDENTIFIER:
                params.append(self.next().value)
            if not params:
                raise ParseError("function '{}' must have at least one parameter", name, name_token.location, len(name))

            self.expect_operator(Operator.ASSIGN)
            body = self.parse_binary_expression()
            self.expect_keyword(Keyword.END)
        except ParseError:
            if not was_known:
                self.functions.forget(name)
            raise

        function = Function(name, tuple(params), body)
        self.functions.declare(function)
        return function

    def parse_expression(self):
        """Parses a single expression that must span all remaining tokens."""
        expression = self.parse_binary_expression()
        if not self.done:
            raise self.unexpected(self.peek(), "end of input")
        return expression

    # ----------------------------------------------------------------------------------------------- expressions

    def parse_binary_expression(self):
        """Shunting-yard over primaries and binary operators, in a fresh scope."""
        self.scopes.append(_Scope())
        try:
            scope = self.scopes[-1]
            while True:
                scope.operands.append(self.parse_primary())
                token = self.peek()
                if token is None or not token.is_binary_operator:
                    break
                scope.shunt(self.next().value)
            return scope.drain()
        finally:
            self.scopes.pop()

    def parse_primary(self):
        token = self.next("an expression")

        if token.kind is TokenKind.INTEGER:
            return Integer(token.value)

        elif token.kind is TokenKind.IDENTIFIER:
            if self.functions.is_known(token.value):
                return Invocation(token.value, self.parse_arguments(), token.location)
            return Identifier(token.value, token.location)

        elif token.is_keyword(Keyword.IF):
            condition = self.parse_binary_expression()
            self.expect_keyword(Keyword.THEN)
            consequent = self.parse_binary_expression()
            self.expect_keyword(Keyword.ELSE)
            alternative = self.parse_binary_expression()
            self.expect_keyword(Keyword.END)
            return If(condition, consequent, alternative)

        elif token.is_keyword(Keyword.LET, Keyword.LOOP):
            bindings = self.parse_bindings()
            self.expect_keyword(Keyword.IN)
            body = self.parse_binary_expression()
            self.expect_keyword(Keyword.END)
            variant = Let if token.value is Keyword.LET else Loop
            return variant(bindings, body)

        elif token.is_keyword(Keyword.RECUR):
            return Recur(self.parse_arguments(), token.location)

        elif token.is_operator(Operator.OPEN_PAREN):
            inner = self.parse_binary_expression()
            self.expect_operator(Operator.CLOSE_PAREN)
            return Parenthesized(inner)

        elif token.kind is TokenKind.OPERATOR and token.value.is_unary:
            return Unary(token.value, self.parse_primary())

        raise self.unexpected(token, "an expression")

    def parse_bindings(self):
        """Parses <name> = <expr> (and <name> = <expr>)*."""
        bindings = []
        while True:
            name = self.expect_identifier().value
            self.expect_operator(Operator.ASSIGN)
            bindings.append(Binding(name, self.parse_binary_expression()))

            token = self.peek()
            if token is None or not token.is_keyword(Keyword.AND):
                break
            self.next()
        return tuple(bindings)

    def parse_arguments(self):
        """Parses one or more back-to-back parenthesized arguments, each a full binary expression."""
        args = []
        while True:
            self.expect_operator(Operator.OPEN_PAREN)
            args.append(self.parse_binary_expression())
            self.expect_operator(Operator.CLOSE_PAREN)

            token = self.peek()
            if token is None or not token.is_operator(Operator.OPEN_PAREN):
                break
        return tuple(args)


def parse_program(source, functions=None):
    """Returns the FunctionRegistry of the declarations in source."""
    return Parser.from_source(source, functions).parse_program()


def parse_expression(source, functions=None):
    """Returns the Expression that is source."""
    return Parser.from_source(source, functions).parse_expression()
