"""Readable dumps of tokens and syntax trees. One node per line, children indented two spaces deeper than their
parent; let/loop bindings sit two levels below the keyword with their value one level below the name.
"""

from simplang.lang.expressions import (
    VARIANTS, Binary, Identifier, If, Integer, Invocation, Let, Loop, Parenthesized, Recur, Unary
)

INDENT = "  "


def _line(depth, text):
    return [INDENT * depth + str(text)]


def _integer(node, depth):
    return _line(depth, node.value)


def _if(node, depth):
    lines = _line(depth, "if")
    for child in (node.condition, node.consequent, node.alternative):
        lines += _lines(child, depth + 1)
    return lines


def _parenthesized(node, depth):
    return _lines(node.inner, depth)


def _unary(node, depth):
    return _line(depth, node.op.symbol) + _lines(node.operand, depth + 1)


def _binary(node, depth):
    return _line(depth, node.op.symbol) + _lines(node.left, depth + 1) + _lines(node.right, depth + 1)


def _scoped(keyword):
    def display_scoped(node, depth):
        lines = _line(depth, keyword)
        for binding in node.bindings:
            lines += _line(depth + 2, binding.name) + _lines(binding.expression, depth + 3)
        return lines + _lines(node.body, depth + 1)
    return display_scoped


def _recur(node, depth):
    lines = _line(depth, "recur")
    for arg in node.args:
        lines += _lines(arg, depth + 1)
    return lines


def _identifier(node, depth):
    return _line(depth, node.name)


def _invocation(node, depth):
    lines = _line(depth, node.name)
    for arg in node.args:
        lines += _lines(arg, depth + 1)
    return lines


_RULES = {
    Integer: _integer,
    If: _if,
    Parenthesized: _parenthesized,
    Unary: _unary,
    Binary: _binary,
    Let: _scoped("let"),
    Loop: _scoped("loop"),
    Recur: _recur,
    Identifier: _identifier,
    Invocation: _invocation,
}

assert set(_RULES) == VARIANTS, f"display rules missing for {VARIANTS - set(_RULES)}"


def _lines(node, depth):
    return _RULES[type(node)](node, depth)


def display(expression, depth=0):
    """Returns the tree of expression as text."""
    return "\n".join(_lines(expression, depth))


def display_function(function, depth=0):
    lines = _line(depth, "function") + _line(depth + 2, function.name)
    for param in function.params:
        lines += _line(depth + 3, param)
    lines += _lines(function.body, depth + 1)
    return "\n".join(lines)


def display_program(functions):
    """Returns the trees of every function in functions, in declaration order."""
    return "\n".join(display_function(function) for function in functions)


def display_tokens(tokens):
    """Returns one "<kind> <spelling>" line per token."""
    return "\n".join(str(token) for token in tokens)
