"""Run-time state of a simplang evaluation: variable bindings, declared functions and the invocation trace.

Nothing here is global. A Context bundles the state of one evaluation and is passed into every evaluation call, so
independent evaluations never share bindings or traces.
"""

from dataclasses import dataclass, field
from typing import Optional, Tuple

from simplang.lang.error import EvaluationError


class Environment:
    """Stack of frames. A frame maps each bound name to a stack of values, the last of which is current. Let/loop
    bindings push onto the active frame, function calls push a whole new frame.
    """

    def __init__(self):
        self.frames = [{}]
        self.size = 0       # live bindings across all frames
        self.peak_size = 0
        self.peak_depth = 1

    @property
    def frame(self):
        return self.frames[-1]

    @property
    def depth(self):
        return len(self.frames)

    def push_frame(self, bindings=()):
        """Pushes a new frame holding bindings, an iterable of (name, value)."""
        self.frames.append({})
        self.peak_depth = max(self.peak_depth, self.depth)
        for name, value in bindings:
            self.push(name, value)

    def pop_frame(self):
        frame = self.frames.pop()
        self.size -= sum(len(values) for values in frame.values())

    def push(self, name, value):
        self.frame.setdefault(name, []).append(value)
        self.size += 1
        self.peak_size = max(self.peak_size, self.size)

    def pop(self, name):
        values = self.frame[name]
        values.pop()
        if not values:
            del self.frame[name]
        self.size -= 1

    def lookup(self, name, location=None):
        """Returns the current value of name in the active frame."""
        values = self.frame.get(name)
        if not values:
            raise EvaluationError("unbound identifier '{}'", name, location, len(name))
        return values[-1]

    def update(self, name, value):
        """Overwrites the current value of name in place."""
        self.frame[name][-1] = value

    def is_bound(self, name):
        return name in self.frame


class FunctionRegistry:
    """Declared functions by name. A name becomes known as soon as its declaration starts so that its body can call
    it; the Function itself is stored once the body is parsed.
    """

    def __init__(self):
        self.known = set()
        self.functions = {}

    def register(self, name):
        self.known.add(name)

    def forget(self, name):
        self.known.discard(name)
        self.functions.pop(name, None)

    def is_known(self, name):
        return name in self.known

    def declare(self, function):
        """Stores function, replacing an earlier declaration of the same name."""
        self.known.add(function.name)
        self.functions[function.name] = function

    def lookup(self, name, location=None):
        try:
            return self.functions[name]
        except KeyError:
            raise EvaluationError("unknown function '{}'", name, location, len(name)) from None

    def __contains__(self, name):
        return name in self.functions

    def __iter__(self):
        return iter(self.functions.values())

    def __len__(self):
        return len(self.functions)


@dataclass(frozen=True)
class TraceEvent:
    """Entry into (result is None) or exit from a function."""
    name: str
    args: Tuple[int, ...]
    depth: int
    result: Optional[int] = None

    @property
    def is_exit(self):
        return self.result is not None

    def __str__(self):
        line = "  " * self.depth + f"{self.name} {'exit' if self.is_exit else 'entry'}"
        line += "".join(f" {arg}" for arg in self.args)
        if self.is_exit:
            line += f" -> {self.result}"
        return line


class Trace:
    """Ordered log of function entries and exits. Written during evaluation, never read by it."""

    def __init__(self):
        self.events = []

    def enter(self, name, args, depth):
        self.events.append(TraceEvent(name, tuple(args), depth))

    def exit(self, name, args, depth, result):
        self.events.append(TraceEvent(name, tuple(args), depth, result))

    def format(self):
        return "\n".join(str(event) for event in self.events)

    def __iter__(self):
        return iter(self.events)

    def __len__(self):
        return len(self.events)


@dataclass
class Context:
    """State of one evaluation session."""
    functions: FunctionRegistry
    environment: Environment = field(default_factory=Environment)
    trace: Trace = field(default_factory=Trace)
    depth: int = 0
