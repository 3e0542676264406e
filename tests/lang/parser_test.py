import unittest

from simplang.lang.environment import FunctionRegistry
from simplang.lang.error import IncompleteInput, ParseError
from simplang.lang.expressions import (
    Binary, Binding, Identifier, If, Integer, Invocation, Let, Loop, Parenthesized, Recur, Unary
)
from simplang.lang.parser import Parser, parse_expression, parse_program
from simplang.lang.tokens import Operator


def binary(op, left, right):
    return Binary(op, left, right)


LT, PLUS, TIMES, EQ, AND, OR = (Operator.LESS_THAN, Operator.PLUS, Operator.MULTIPLY, Operator.EQUALS,
                                Operator.AND, Operator.OR)


class PrimaryTestCase(unittest.TestCase):

    def test_primaries(self):
        cases = {
            "42": Integer(42),
            "x": Identifier("x"),
            "(x)": Parenthesized(Identifier("x")),
            "!x": Unary(Operator.NOT, Identifier("x")),
            "--1": Unary(Operator.NEGATE, Unary(Operator.NEGATE, Integer(1))),
            "if 1 then 2 else 3 end": If(Integer(1), Integer(2), Integer(3)),
            "let x = 1 in x end": Let((Binding("x", Integer(1)),), Identifier("x")),
            "let x = 1 and y = x + 1 in y end": Let(
                (Binding("x", Integer(1)), Binding("y", binary(PLUS, Identifier("x"), Integer(1)))),
                Identifier("y")
            ),
            "loop i = 0 in recur(i + 1) end": Loop(
                (Binding("i", Integer(0)),), Recur((binary(PLUS, Identifier("i"), Integer(1)),))
            ),
            "recur(1)(2)(3)": Recur((Integer(1), Integer(2), Integer(3))),
        }
        for case, expected in cases.items():
            self.assertEqual(expected, parse_expression(case), case)

    def test_unary_binds_to_primary(self):
        self.assertEqual(binary(TIMES, Unary(Operator.NEGATE, Integer(3)), Integer(2)), parse_expression("-3 * 2"))
        self.assertEqual(Unary(Operator.NOT, Parenthesized(binary(AND, Integer(1), Integer(0)))),
                         parse_expression("!(1 && 0)"))

    def test_invalid(self):
        should_raise = [
            "then", ")", "+ 1", "if 1 then 2 end", "let x 1 in x end", "let 1 = 2 in 3 end", "let x = 1 x end",
            "(1 + 2", "recur", "recur 1", "1 2", "x = 1", "loop x = 0 and in x end", "(1))",
        ]
        for case in should_raise:
            self.assertRaises(ParseError, parse_expression, case)

    def test_incomplete_input(self):
        should_raise = ["", "if 1 then", "let x = 1 in x", "(1 + ", "1 +", "recur(1)(", "!"]
        for case in should_raise:
            self.assertRaises(IncompleteInput, parse_expression, case)

    def test_error_message(self):
        try:
            parse_expression("if 1 else 2 end")
        except ParseError as error:
            self.assertEqual("expected 'then', got 'else'", str(error))
            self.assertEqual((1, 6), (error.location.line, error.location.column))
        else:
            self.fail("ParseError not raised")


class PrecedenceTestCase(unittest.TestCase):

    def test_declared_order(self):
        ops = [(LT, "<"), (PLUS, "+"), (TIMES, "*"), (EQ, "=="), (AND, "&&"), (OR, "||")]
        for low_idx, (low, low_symbol) in enumerate(ops):
            for high, high_symbol in ops[low_idx + 1:]:
                a, b, c = Identifier("a"), Identifier("b"), Identifier("c")

                case = f"a {low_symbol} b {high_symbol} c"
                self.assertEqual(binary(low, a, binary(high, b, c)), parse_expression(case), case)

                case = f"a {high_symbol} b {low_symbol} c"
                self.assertEqual(binary(low, binary(high, a, b), c), parse_expression(case), case)

    def test_left_associative(self):
        cases = {
            "1 + 2 + 3": binary(PLUS, binary(PLUS, Integer(1), Integer(2)), Integer(3)),
            "1 < 2 < 3": binary(LT, binary(LT, Integer(1), Integer(2)), Integer(3)),
            "a || b || c": binary(OR, binary(OR, Identifier("a"), Identifier("b")), Identifier("c")),
        }
        for case, expected in cases.items():
            self.assertEqual(expected, parse_expression(case), case)

    def test_mixed_chain(self):
        # "<" lowest: a < ((b + (c * (d == e))) ...)
        expected = binary(
            LT,
            Identifier("a"),
            binary(PLUS, Identifier("b"), binary(TIMES, Identifier("c"), binary(EQ, Identifier("d"), Identifier("e"))))
        )
        self.assertEqual(expected, parse_expression("a < b + c * d == e"))

        expected = binary(
            PLUS,
            binary(PLUS, Integer(1), binary(TIMES, Integer(2), Integer(3))),
            Integer(4)
        )
        self.assertEqual(expected, parse_expression("1 + 2 * 3 + 4"))

    def test_parentheses(self):
        self.assertEqual(binary(PLUS, Integer(2), binary(TIMES, Integer(3), Integer(4))), parse_expression("2 + 3 * 4"))
        self.assertEqual(
            binary(TIMES, Parenthesized(binary(PLUS, Integer(2), Integer(3))), Integer(4)),
            parse_expression("(2 + 3) * 4")
        )

    def test_deep_nesting(self):
        depth = 60
        source = "(" * depth + "1 + 2" + ")" * depth + " * 3"
        expected = binary(PLUS, Integer(1), Integer(2))
        for __ in range(depth):
            expected = Parenthesized(expected)
        self.assertEqual(binary(TIMES, expected, Integer(3)), parse_expression(source))

    def test_nested_scopes_are_independent(self):
        # the outer "1 *" must not fold into the parenthesized "2 + 3"
        expected = binary(
            PLUS,
            binary(TIMES, Integer(1), Parenthesized(binary(PLUS, Integer(2), binary(TIMES, Integer(3), Integer(4))))),
            Integer(5)
        )
        self.assertEqual(expected, parse_expression("1 * (2 + 3 * 4) + 5"))

        expected = binary(
            TIMES,
            Integer(2),
            If(binary(LT, Identifier("x"), Integer(1)), binary(PLUS, Integer(1), Integer(2)), Integer(3))
        )
        self.assertEqual(expected, parse_expression("2 * if x < 1 then 1 + 2 else 3 end"))

    def test_scopes_released(self):
        parser = Parser.from_source("1 + (2 * (3 + 4)) + f")
        parser.parse_expression()
        self.assertEqual([], parser.scopes)


class FunctionTestCase(unittest.TestCase):

    def test_declaration(self):
        functions = parse_program("let add a b = a + b end")
        self.assertIn("add", functions)

        add = functions.lookup("add")
        self.assertEqual(("a", "b"), add.params)
        self.assertEqual(binary(PLUS, Identifier("a"), Identifier("b")), add.body)

    def test_recursive_call(self):
        functions = parse_program("let f n = if n < 1 then 0 else f(n + -1) end end")
        body = functions.lookup("f").body
        self.assertEqual(
            Invocation("f", (binary(PLUS, Identifier("n"), Unary(Operator.NEGATE, Integer(1))),)),
            body.alternative
        )

    def test_calls_to_earlier_functions(self):
        functions = parse_program("let g x = x end\nlet f x = g(x)(1) end")
        self.assertEqual(Invocation("g", (Identifier("x"), Integer(1))), functions.lookup("f").body)

    def test_forward_reference_is_identifier(self):
        functions = parse_program("let f x = g end\nlet g x = x end")
        self.assertEqual(Identifier("g"), functions.lookup("f").body)

    def test_call_argument_nesting(self):
        functions = parse_program("let f a = a end\nlet main x = f((f((1 + 2) * 3)) + f(4)) end")
        inner = Invocation("f", (binary(TIMES, Parenthesized(binary(PLUS, Integer(1), Integer(2))), Integer(3)),))
        expected = Invocation("f", (binary(PLUS, Parenthesized(inner), Invocation("f", (Integer(4),))),))
        self.assertEqual(expected, functions.lookup("main").body)

    def test_redeclaration_overwrites(self):
        functions = parse_program("let f x = 1 end\nlet f x = 2 end")
        self.assertEqual(1, len(functions))
        self.assertEqual(Integer(2), functions.lookup("f").body)

    def test_invalid(self):
        should_raise = [
            "let f = 1 end", "let f x = 1", "let f x 1 end", "f x = 1 end", "let f x = end", "let 1 x = 1 end",
            "let f x = 1 end end",
        ]
        for case in should_raise:
            self.assertRaises(ParseError, parse_program, case)

    def test_failed_declaration_is_forgotten(self):
        functions = FunctionRegistry()
        self.assertRaises(ParseError, parse_program, "let f x = f(1 end", functions)
        self.assertFalse(functions.is_known("f"))

        parse_program("let g x = x end", functions)
        self.assertRaises(ParseError, parse_program, "let g x = ) end", functions)
        self.assertTrue(functions.is_known("g"))

    def test_at_declaration(self):
        cases = {
            "let f x = x end": True,
            "let x = 1 in x end": False,
            "f(1)": False,
            "let": False,
        }
        for case, expected in cases.items():
            self.assertEqual(expected, Parser.from_source(case).at_declaration(), case)


if __name__ == '__main__':
    unittest.main()
