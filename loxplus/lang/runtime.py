"""Runtime value model for Lox-plus.

A Lox-plus value is exactly one of

```
nil        None
boolean    bool
number     float
string     str
callable   LoxFunction | LoxClass
instance   LoxInstance
```

Environments are records in an EnvironmentArena and are referred to by integer handles: a closure keeps the handle of
the environment it captured, never the environment itself. A bound method keeps its instance and only gets a 'this'
environment for the duration of each call, so looking a method up allocates nothing in the arena.
"""

import math
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any

from loxplus.lang.error import LoxRuntimeError


@dataclass(frozen=True)
class Completion:
    """Outcome of executing a statement: either normal completion, or a 'return' travelling up to the enclosing call."""
    returning: bool = False
    value: Any = None


NORMAL = Completion()


class Environment:
    """One scope's bindings. enclosing is the handle of the surrounding environment (None for the global scope).
    captured is set once a closure or a captured descendant refers to this environment.
    """

    def __init__(self, enclosing=None):
        self.values = {}
        self.enclosing = enclosing
        self.captured = False

    def define(self, name, value):
        """Binds name in this scope, silently replacing any existing binding."""
        self.values[name] = value

    def __contains__(self, name):
        return name in self.values

    def __repr__(self):
        return f"Environment(values={self.values!r}, enclosing={self.enclosing!r}, captured={self.captured!r})"


class EnvironmentArena:
    """Owns all Environments created during a run. Handles are stable and never reused.

    A block or call environment is released when execution leaves it, unless a closure captured it (or one of its
    descendants). Captured environments stay for the life of the arena.
    """

    def __init__(self):
        self._records = {}
        self._next_handle = 0

    def new(self, enclosing=None):
        """Creates a fresh, empty environment and returns its handle."""
        handle = self._next_handle
        self._records[handle] = Environment(enclosing)
        self._next_handle += 1
        return handle

    def capture(self, handle):
        """Marks handle and all of its ancestors as captured by a closure."""
        while handle is not None:
            environment = self._records[handle]
            if environment.captured:
                return
            environment.captured = True
            handle = environment.enclosing

    def release(self, handle):
        """Drops the environment at handle if nothing captured it. Called once execution has left it for good."""
        if not self._records[handle].captured:
            del self._records[handle]

    def __getitem__(self, handle):
        return self._records[handle]

    def __contains__(self, handle):
        return handle in self._records

    def __len__(self):
        return len(self._records)

    def ancestor(self, handle, distance):
        """Walks distance enclosing links from handle. The resolver guarantees the chain is long enough."""
        environment = self._records[handle]
        for _ in range(distance):
            environment = self._records[environment.enclosing]
        return environment

    def get(self, handle, name):
        """Looks name (a Token) up from handle outward. Used for globals, which the resolver leaves unresolved."""
        environment = self._records[handle]
        while True:
            if name.lexeme in environment:
                return environment.values[name.lexeme]
            if environment.enclosing is None:
                raise LoxRuntimeError(name, f"Undefined variable '{name.lexeme}'.")
            environment = self._records[environment.enclosing]

    def assign(self, handle, name, value):
        """Assigns to an existing binding of name (a Token) from handle outward."""
        environment = self._records[handle]
        while True:
            if name.lexeme in environment:
                environment.values[name.lexeme] = value
                return
            if environment.enclosing is None:
                raise LoxRuntimeError(name, f"Undefined variable '{name.lexeme}'.")
            environment = self._records[environment.enclosing]

    def get_at(self, handle, distance, name):
        return self.ancestor(handle, distance).values[name]

    def assign_at(self, handle, distance, name, value):
        self.ancestor(handle, distance).values[name.lexeme] = value


class LoxCallable(ABC):
    """Anything that can appear on the left of a call: functions, bound methods and classes."""

    @abstractmethod
    def arity(self):
        """Number of arguments a call must pass."""

    @abstractmethod
    def call(self, interpreter, arguments):
        """Invokes this callable with already-evaluated arguments. Arity has been checked by the caller."""


class LoxFunction(LoxCallable):
    """A function or method declaration together with the handle of its defining environment. A method bound to an
    instance also carries that instance, which each call exposes as 'this'.
    """

    def __init__(self, declaration, closure, is_initializer=False, instance=None):
        self.declaration = declaration
        self.closure = closure
        self.is_initializer = is_initializer
        self.instance = instance

    def bind(self, instance):
        return LoxFunction(self.declaration, self.closure, self.is_initializer, instance)

    def arity(self):
        return len(self.declaration.params)

    def call(self, interpreter, arguments):
        arena = interpreter.arena

        enclosing = self.closure
        if self.instance is not None:
            enclosing = arena.new(self.closure)
            arena[enclosing].define("this", self.instance)

        environment = arena.new(enclosing)
        for param, argument in zip(self.declaration.params, arguments):
            arena[environment].define(param.lexeme, argument)

        try:
            completion = interpreter.execute_block(self.declaration.body, environment)
        finally:
            if self.instance is not None:
                arena.release(enclosing)

        if self.is_initializer:
            return self.instance
        return completion.value if completion.returning else None

    def __str__(self):
        return "<fun>"

    def __repr__(self):
        return f"LoxFunction({self.declaration.name.lexeme})"


class LoxClass(LoxCallable):
    """A class: its name and its unbound methods. Calling it constructs a LoxInstance."""

    def __init__(self, name, methods):
        self.name = name
        self.methods = methods

    def find_method(self, name):
        return self.methods.get(name)

    def arity(self):
        initializer = self.find_method("init")
        return initializer.arity() if initializer is not None else 0

    def call(self, interpreter, arguments):
        instance = LoxInstance(self)

        initializer = self.find_method("init")
        if initializer is not None:
            initializer.bind(instance).call(interpreter, arguments)

        return instance

    def __str__(self):
        return self.name

    def __repr__(self):
        return f"LoxClass({self.name})"


class LoxInstance:
    """An instance of a LoxClass. Fields are created on first assignment; there are no declared fields."""

    def __init__(self, klass):
        self._klass = klass
        self.fields = {}

    @property
    def klass(self):
        return self._klass

    def get(self, name):
        """Reads property name (a Token): own fields first, then methods of the class bound to this instance."""
        if name.lexeme in self.fields:
            return self.fields[name.lexeme]

        method = self._klass.find_method(name.lexeme)
        if method is not None:
            return method.bind(self)

        raise LoxRuntimeError(name, f"Undefined property '{name.lexeme}'.")

    def set(self, name, value):
        self.fields[name.lexeme] = value

    def __str__(self):
        return f"{self._klass.name} instance"

    def __repr__(self):
        return f"LoxInstance({self._klass.name})"


def kind(value):
    """Returns the name of the alternative value holds. bool must be tested before anything numeric."""
    if value is None:
        return "nil"
    elif isinstance(value, bool):
        return "boolean"
    elif isinstance(value, float):
        return "number"
    elif isinstance(value, str):
        return "string"
    elif isinstance(value, LoxCallable):
        return "callable"
    elif isinstance(value, LoxInstance):
        return "instance"
    raise TypeError(f"not a Lox-plus value: {value!r}")


def is_truthy(value):
    """nil and false are falsy, everything else (0 and "" included) is truthy."""
    if value is None:
        return False
    if isinstance(value, bool):
        return value
    return True


def is_equal(left, right):
    """Values of different kinds are never equal. Callables and instances are equal only to themselves."""
    if kind(left) != kind(right):
        return False
    if isinstance(left, (LoxCallable, LoxInstance)):
        return left is right
    return left == right


def divide(left, right):
    """IEEE division: Python raises on a zero divisor instead of returning inf/nan."""
    if right == 0:
        if left == 0 or math.isnan(left):
            return math.nan
        return math.copysign(math.inf, left) * math.copysign(1.0, right)
    return left / right


def stringify(value):
    """Canonical text of value, as printed by the 'print' statement."""
    if value is None:
        return "nil"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float):
        if math.isfinite(value) and value.is_integer():
            return f"{value:.0f}"
        return repr(value)
    return str(value)
