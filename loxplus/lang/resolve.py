"""Static scope resolution for Lox-plus.

Walks the AST once before execution, opening and closing scopes exactly where the interpreter will create environments:

```
block          one scope for its statements
function       one scope for its parameters and body statements
class          one scope holding 'this', around all of its methods
```

For every variable, assignment and 'this' expression found in one of those scopes, the distance (number of scopes out
from the innermost) is handed to the interpreter. Names not found in any scope are left alone and treated as globals at
runtime. Misuses of 'return' and 'this' and bad declarations are reported, and resolution carries on.
"""

from enum import Enum, auto

from loxplus.grammar import ast


class FunctionType(Enum):
    NONE = auto()
    FUNCTION = auto()
    METHOD = auto()
    INITIALIZER = auto()


class ClassType(Enum):
    NONE = auto()
    CLASS = auto()


class Resolver:
    """Resolves one list of statements into interpreter's resolution map."""

    def __init__(self, interpreter, error_handler):
        self.interpreter = interpreter
        self.error_handler = error_handler

        self.scopes = []  # innermost last, each a dict of name: whether its initializer has been resolved
        self.current_function = FunctionType.NONE
        self.current_class = ClassType.NONE

        self._statement_resolvers = {
            ast.Block: self.block_statement,
            ast.Class: self.class_statement,
            ast.Var: self.var_statement,
            ast.Function: self.function_statement,
            ast.Expression: self.expression_statement,
            ast.Print: self.expression_statement,
            ast.If: self.if_statement,
            ast.While: self.while_statement,
            ast.Return: self.return_statement,
        }
        self._expression_resolvers = {
            ast.Variable: self.variable,
            ast.Assign: self.assign,
            ast.This: self.this,
            ast.Binary: self.binary,
            ast.Logical: self.binary,
            ast.Unary: self.unary,
            ast.Grouping: self.grouping,
            ast.Call: self.call,
            ast.Get: self.get,
            ast.Set: self.set,
            ast.Literal: self.literal,
        }

    def resolve(self, statements):
        for statement in statements:
            self.resolve_stmt(statement)

    def resolve_stmt(self, stmt):
        try:
            resolver = self._statement_resolvers[type(stmt)]
        except KeyError:
            raise TypeError(f"unknown statement node: {type(stmt).__name__}") from None
        resolver(stmt)

    def resolve_expr(self, expr):
        try:
            resolver = self._expression_resolvers[type(expr)]
        except KeyError:
            raise TypeError(f"unknown expression node: {type(expr).__name__}") from None
        resolver(expr)

    # -- statements --

    def block_statement(self, stmt):
        self.begin_scope()
        self.resolve(stmt.statements)
        self.end_scope()

    def class_statement(self, stmt):
        self.declare(stmt.name)
        self.define(stmt.name)

        enclosing_class = self.current_class
        self.current_class = ClassType.CLASS

        self.begin_scope()
        self.scopes[-1]["this"] = True
        for method in stmt.methods:
            declaration = FunctionType.INITIALIZER if method.name.lexeme == "init" else FunctionType.METHOD
            self.resolve_function(method, declaration)
        self.end_scope()

        self.current_class = enclosing_class

    def var_statement(self, stmt):
        self.declare(stmt.name)
        if stmt.initializer is not None:
            self.resolve_expr(stmt.initializer)
        self.define(stmt.name)

    def function_statement(self, stmt):
        # defined before the body is resolved so the function can call itself
        self.declare(stmt.name)
        self.define(stmt.name)
        self.resolve_function(stmt, FunctionType.FUNCTION)

    def expression_statement(self, stmt):
        self.resolve_expr(stmt.expression)

    def if_statement(self, stmt):
        self.resolve_expr(stmt.condition)
        self.resolve_stmt(stmt.then_branch)
        if stmt.else_branch is not None:
            self.resolve_stmt(stmt.else_branch)

    def while_statement(self, stmt):
        self.resolve_expr(stmt.condition)
        self.resolve_stmt(stmt.body)

    def return_statement(self, stmt):
        if self.current_function is FunctionType.NONE:
            self.error_handler.error_at(stmt.keyword, "Cannot return from top-level code.")

        if stmt.value is not None:
            if self.current_function is FunctionType.INITIALIZER:
                self.error_handler.error_at(stmt.keyword, "Cannot return a value from an initializer.")
            self.resolve_expr(stmt.value)

    # -- expressions --

    def variable(self, expr):
        if self.scopes and self.scopes[-1].get(expr.name.lexeme) is False:
            self.error_handler.error_at(expr.name, "Cannot read local variable in its own initializer.")
        self.resolve_local(expr, expr.name)

    def assign(self, expr):
        self.resolve_expr(expr.value)
        self.resolve_local(expr, expr.name)

    def this(self, expr):
        if self.current_class is ClassType.NONE:
            self.error_handler.error_at(expr.keyword, "Cannot use 'this' outside of a class.")
            return
        self.resolve_local(expr, expr.keyword)

    def binary(self, expr):
        self.resolve_expr(expr.left)
        self.resolve_expr(expr.right)

    def unary(self, expr):
        self.resolve_expr(expr.right)

    def grouping(self, expr):
        self.resolve_expr(expr.expression)

    def call(self, expr):
        self.resolve_expr(expr.callee)
        for argument in expr.arguments:
            self.resolve_expr(argument)

    def get(self, expr):
        self.resolve_expr(expr.object)  # property names are looked up dynamically

    def set(self, expr):
        self.resolve_expr(expr.value)
        self.resolve_expr(expr.object)

    def literal(self, expr):
        pass

    # -- scopes --

    def resolve_function(self, function, function_type):
        enclosing_function = self.current_function
        self.current_function = function_type

        self.begin_scope()
        for param in function.params:
            self.declare(param)
            self.define(param)
        self.resolve(function.body)
        self.end_scope()

        self.current_function = enclosing_function

    def resolve_local(self, expr, name):
        for depth, scope in enumerate(reversed(self.scopes)):
            if name.lexeme in scope:
                self.interpreter.resolve(expr, depth)
                return

    def begin_scope(self):
        self.scopes.append({})

    def end_scope(self):
        self.scopes.pop()

    def declare(self, name):
        """Marks name as present but not yet usable in the innermost scope. The global scope is not tracked."""
        if not self.scopes:
            return

        scope = self.scopes[-1]
        if name.lexeme in scope:
            self.error_handler.error_at(name, "Variable with this name already declared in this scope.")
        scope[name.lexeme] = False

    def define(self, name):
        if self.scopes:
            self.scopes[-1][name.lexeme] = True
