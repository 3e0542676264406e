"""Tree-walking evaluator for simplang.

Every rule takes the node and the Context of the running evaluation and returns either an int or a RecurSignal. A
RecurSignal asks the innermost enclosing Loop to rebind its variables and run its body again; only If,
Parenthesized and Let pass one through, every other consumer rejects it.
"""

from dataclasses import dataclass, field
from typing import Tuple

from simplang.lang.error import EvaluationError
from simplang.lang.expressions import (
    VARIANTS, Binary, Identifier, If, Integer, Invocation, Let, Loop, Parenthesized, Recur, Unary
)
from simplang.lang.scanner import INT_MAX, INT_MIN
from simplang.lang.tokens import Operator


@dataclass(frozen=True)
class RecurSignal:
    """Result of a recur: the new values for the enclosing loop's bindings, in declaration order."""
    values: Tuple[int, ...]
    location: object = field(default=None, compare=False)


def wrap(value):
    """Wraps value into the signed 64-bit range."""
    return (value - INT_MIN) % (INT_MAX - INT_MIN + 1) + INT_MIN


def evaluate(expression, context):
    """Evaluates expression. Returns an int, or a RecurSignal if expression ends in a recur."""
    return _RULES[type(expression)](expression, context)


def evaluate_value(expression, context):
    """Evaluates expression where a plain value is required."""
    return value_of(evaluate(expression, context))


def value_of(result):
    if isinstance(result, RecurSignal):
        raise EvaluationError("'{}' used outside the tail position of a loop body", "recur", result.location, 5)
    return result


def call_function(context, name, args, location=None):
    """Invokes function name with the already evaluated args in a fresh frame, tracing entry and exit."""
    function = context.functions.lookup(name, location)
    if len(args) != function.arity:
        msg = "function '{}' expects {} argument(s), got {}"
        raise EvaluationError(msg, [name, function.arity, len(args)], location, len(name))

    env = context.environment
    env.push_frame(zip(function.params, args))
    try:
        context.trace.enter(name, args, context.depth)
        context.depth += 1
        result = evaluate_value(function.body, context)
        context.depth -= 1
        context.trace.exit(name, args, context.depth, result)
    finally:
        env.pop_frame()
    return result


# --------------------------------------------------------------------------------------------------------- rules

def _integer(node, context):
    return node.value


def _if(node, context):
    if evaluate_value(node.condition, context) != 0:
        return evaluate(node.consequent, context)
    return evaluate(node.alternative, context)


def _parenthesized(node, context):
    return evaluate(node.inner, context)


def _unary(node, context):
    value = evaluate_value(node.operand, context)
    if node.op is Operator.NOT:
        return 1 if value == 0 else 0
    elif node.op is Operator.NEGATE:
        return wrap(-value)
    raise EvaluationError("'{}' is not a unary operator", node.op.symbol, internal=True)


def _binary(node, context):
    left = evaluate_value(node.left, context)
    right = evaluate_value(node.right, context)  # no short-circuit

    if node.op is Operator.LESS_THAN:
        return int(left < right)
    elif node.op is Operator.PLUS:
        return wrap(left + right)
    elif node.op is Operator.MULTIPLY:
        return wrap(left * right)
    elif node.op is Operator.EQUALS:
        return int(left == right)
    elif node.op is Operator.AND:
        return 0 if left == 0 or right == 0 else 1
    elif node.op is Operator.OR:
        return 0 if left == 0 and right == 0 else 1
    raise EvaluationError("'{}' is not a binary operator", node.op.symbol, internal=True)


def _identifier(node, context):
    return context.environment.lookup(node.name, node.location)


def _push_bindings(bindings, context):
    """Evaluates every binding in the current scope, then pushes them all in order."""
    values = [evaluate_value(binding.expression, context) for binding in bindings]
    for binding, value in zip(bindings, values):
        context.environment.push(binding.name, value)


def _pop_bindings(bindings, context):
    for binding in reversed(bindings):
        context.environment.pop(binding.name)


def _let(node, context):
    _push_bindings(node.bindings, context)
    try:
        return evaluate(node.body, context)
    finally:
        _pop_bindings(node.bindings, context)


def _loop(node, context):
    env = context.environment
    _push_bindings(node.bindings, context)
    try:
        while True:
            result = evaluate(node.body, context)
            if not isinstance(result, RecurSignal):
                return result

            if len(result.values) != len(node.bindings):
                msg = "'{}' expects {} argument(s) for this loop, got {}"
                raise EvaluationError(msg, ["recur", len(node.bindings), len(result.values)], result.location, 5)
            for binding, value in zip(node.bindings, result.values):
                env.update(binding.name, value)
    finally:
        _pop_bindings(node.bindings, context)


def _recur(node, context):
    return RecurSignal(tuple(evaluate_value(arg, context) for arg in node.args), node.location)


def _invocation(node, context):
    function = context.functions.lookup(node.name, node.location)
    if len(node.args) != function.arity:
        msg = "function '{}' expects {} argument(s), got {}"
        raise EvaluationError(msg, [node.name, function.arity, len(node.args)], node.location, len(node.name))

    args = [evaluate_value(arg, context) for arg in node.args]  # in the caller's frame
    return call_function(context, node.name, args, node.location)


_RULES = {
    Integer: _integer,
    If: _if,
    Parenthesized: _parenthesized,
    Unary: _unary,
    Binary: _binary,
    Identifier: _identifier,
    Let: _let,
    Loop: _loop,
    Recur: _recur,
    Invocation: _invocation,
}

assert set(_RULES) == VARIANTS, f"evaluation rules missing for {VARIANTS - set(_RULES)}"
