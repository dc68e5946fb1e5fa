"""Tree-walking evaluator for Lox-plus.

Expressions evaluate to runtime values (see lang/runtime.py). Statements execute to a Completion: NORMAL, or a returning
completion that every block, loop and branch hands straight back to its caller until the function-call boundary consumes
it. Runtime errors are raised as LoxRuntimeError; they unwind every pending block and call (each restoring the
environment it replaced) and are caught once, in interpret.
"""

from loxplus.grammar import ast
from loxplus.grammar.tokens import TokenType
from loxplus.lang.error import LoxRuntimeError
from loxplus.lang.runtime import (
    NORMAL, Completion, EnvironmentArena, LoxCallable, LoxClass, LoxFunction, LoxInstance, divide, is_equal, is_truthy,
    kind, stringify,
)


class Interpreter:
    """Holds the state of one program run: the environment arena, the globals, the current environment and the
    resolution map filled in by the Resolver. Reusable across several interpret calls (the shell does this).
    """
    ARITHMETIC = {
        TokenType.MINUS: lambda left, right: left - right,
        TokenType.STAR: lambda left, right: left * right,
        TokenType.SLASH: divide,
        TokenType.GREATER: lambda left, right: left > right,
        TokenType.GREATER_EQUAL: lambda left, right: left >= right,
        TokenType.LESS: lambda left, right: left < right,
        TokenType.LESS_EQUAL: lambda left, right: left <= right,
    }

    def __init__(self, error_handler, out=None):
        self.error_handler = error_handler
        self.out = out  # None means sys.stdout at print time

        self.arena = EnvironmentArena()
        self.globals = self.arena.new()
        self.environment = self.globals

        self.locals = {}  # expression node: scope distance

        self._evaluators = {
            ast.Literal: self.literal,
            ast.Grouping: self.grouping,
            ast.Unary: self.unary,
            ast.Binary: self.binary,
            ast.Logical: self.logical,
            ast.Variable: self.variable,
            ast.Assign: self.assign,
            ast.Call: self.call,
            ast.Get: self.get,
            ast.Set: self.set,
            ast.This: self.this,
        }
        self._executors = {
            ast.Expression: self.expression_statement,
            ast.Print: self.print_statement,
            ast.Var: self.var_statement,
            ast.Block: self.block_statement,
            ast.If: self.if_statement,
            ast.While: self.while_statement,
            ast.Function: self.function_statement,
            ast.Return: self.return_statement,
            ast.Class: self.class_statement,
        }

    def interpret(self, statements):
        """Executes statements in order. A runtime error is reported and stops the run."""
        try:
            for statement in statements:
                self.execute(statement)
        except LoxRuntimeError as error:
            self.error_handler.runtime_error(error)

    def resolve(self, expr, depth):
        """Records that expr refers to a binding depth environments out from where it is evaluated. Called by the
        Resolver.
        """
        self.locals[expr] = depth

    def evaluate(self, expr):
        try:
            evaluator = self._evaluators[type(expr)]
        except KeyError:
            raise TypeError(f"unknown expression node: {type(expr).__name__}") from None
        return evaluator(expr)

    def execute(self, stmt):
        try:
            executor = self._executors[type(stmt)]
        except KeyError:
            raise TypeError(f"unknown statement node: {type(stmt).__name__}") from None
        return executor(stmt)

    def execute_block(self, statements, environment):
        """Executes statements with environment (a handle to a fresh environment) as the current environment. On every
        way out the previous environment is restored and environment is released back to the arena.
        """
        previous = self.environment
        self.environment = environment
        try:
            for statement in statements:
                completion = self.execute(statement)
                if completion.returning:
                    return completion
            return NORMAL
        finally:
            self.environment = previous
            self.arena.release(environment)

    # -- statements --

    def expression_statement(self, stmt):
        self.evaluate(stmt.expression)
        return NORMAL

    def print_statement(self, stmt):
        value = self.evaluate(stmt.expression)
        print(stringify(value), file=self.out)
        return NORMAL

    def var_statement(self, stmt):
        value = None
        if stmt.initializer is not None:
            value = self.evaluate(stmt.initializer)

        self.arena[self.environment].define(stmt.name.lexeme, value)
        return NORMAL

    def block_statement(self, stmt):
        return self.execute_block(stmt.statements, self.arena.new(self.environment))

    def if_statement(self, stmt):
        if is_truthy(self.evaluate(stmt.condition)):
            return self.execute(stmt.then_branch)
        elif stmt.else_branch is not None:
            return self.execute(stmt.else_branch)
        return NORMAL

    def while_statement(self, stmt):
        while is_truthy(self.evaluate(stmt.condition)):
            completion = self.execute(stmt.body)
            if completion.returning:
                return completion
        return NORMAL

    def function_statement(self, stmt):
        self.arena.capture(self.environment)
        function = LoxFunction(stmt, self.environment)
        self.arena[self.environment].define(stmt.name.lexeme, function)
        return NORMAL

    def return_statement(self, stmt):
        value = None
        if stmt.value is not None:
            value = self.evaluate(stmt.value)
        return Completion(returning=True, value=value)

    def class_statement(self, stmt):
        """The class name is bound before its methods are built, so the methods may refer to it."""
        self.arena.capture(self.environment)
        environment = self.arena[self.environment]
        environment.define(stmt.name.lexeme, None)

        methods = {}
        for method in stmt.methods:
            methods[method.name.lexeme] = LoxFunction(method, self.environment, method.name.lexeme == "init")

        environment.define(stmt.name.lexeme, LoxClass(stmt.name.lexeme, methods))
        return NORMAL

    # -- expressions --

    def literal(self, expr):
        return expr.value

    def grouping(self, expr):
        return self.evaluate(expr.expression)

    def unary(self, expr):
        right = self.evaluate(expr.right)

        if expr.operator.type is TokenType.MINUS:
            if kind(right) != "number":
                raise LoxRuntimeError(expr.operator, "Operand must be a number.")
            return -right

        return not is_truthy(right)  # TokenType.BANG

    def binary(self, expr):
        left = self.evaluate(expr.left)
        right = self.evaluate(expr.right)
        operator = expr.operator

        if operator.type is TokenType.EQUAL_EQUAL:
            return is_equal(left, right)
        if operator.type is TokenType.BANG_EQUAL:
            return not is_equal(left, right)

        if kind(left) != kind(right):
            raise LoxRuntimeError(operator, "Operands must be of the same type.")

        if operator.type is TokenType.PLUS:
            if kind(left) in ("number", "string"):
                return left + right
            raise LoxRuntimeError(operator, "Operands must be two numbers or two strings.")

        if kind(left) != "number":
            raise LoxRuntimeError(operator, "Operands must be numbers.")
        return Interpreter.ARITHMETIC[operator.type](left, right)

    def logical(self, expr):
        left = self.evaluate(expr.left)

        if expr.operator.type is TokenType.OR:
            if is_truthy(left):
                return left
        elif not is_truthy(left):
            return left

        return self.evaluate(expr.right)

    def variable(self, expr):
        return self.look_up_variable(expr.name, expr)

    def this(self, expr):
        return self.look_up_variable(expr.keyword, expr)

    def look_up_variable(self, name, expr):
        distance = self.locals.get(expr)
        if distance is not None:
            return self.arena.get_at(self.environment, distance, name.lexeme)
        return self.arena.get(self.globals, name)

    def assign(self, expr):
        value = self.evaluate(expr.value)

        distance = self.locals.get(expr)
        if distance is not None:
            self.arena.assign_at(self.environment, distance, expr.name, value)
        else:
            self.arena.assign(self.globals, expr.name, value)

        return value

    def call(self, expr):
        callee = self.evaluate(expr.callee)
        arguments = [self.evaluate(argument) for argument in expr.arguments]

        if not isinstance(callee, LoxCallable):
            raise LoxRuntimeError(expr.paren, "Can only call functions and classes.")

        if len(arguments) != callee.arity():
            raise LoxRuntimeError(expr.paren, f"Expected {callee.arity()} arguments but got {len(arguments)}.")

        try:
            return callee.call(self, arguments)
        except RecursionError:
            raise LoxRuntimeError(expr.paren, "Stack overflow.") from None

    def get(self, expr):
        obj = self.evaluate(expr.object)
        if not isinstance(obj, LoxInstance):
            raise LoxRuntimeError(expr.name, "Only instances have properties.")
        return obj.get(expr.name)

    def set(self, expr):
        obj = self.evaluate(expr.object)
        if not isinstance(obj, LoxInstance):
            raise LoxRuntimeError(expr.name, "Only instances have fields.")

        value = self.evaluate(expr.value)
        obj.set(expr.name, value)
        return value
