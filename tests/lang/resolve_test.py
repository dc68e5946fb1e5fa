import io
import unittest

from loxplus.lang.error import ErrorHandler
from loxplus.lang.interpret import Interpreter
from loxplus.lang.lexical import Scanner
from loxplus.lang.parse import Parser
from loxplus.lang.resolve import Resolver


def resolve(source):
    """Returns (statements, interpreter, error_handler) after resolving source."""
    error_handler = ErrorHandler(fatal=False, out=io.StringIO())
    statements = Parser(Scanner(source, error_handler).scan_tokens(), error_handler).parse()
    assert not error_handler.had_error, error_handler.messages

    interpreter = Interpreter(error_handler, out=io.StringIO())
    Resolver(interpreter, error_handler).resolve(statements)
    return statements, interpreter, error_handler


class DistanceTestCase(unittest.TestCase):

    def test_globals_are_unresolved(self):
        statements, interpreter, __ = resolve("var a = 1; print a; a = 2;")
        self.assertEqual({}, interpreter.locals)

    def test_block_distances(self):
        statements, interpreter, __ = resolve("{ var a = 1; { print a; a = 3; } print a; }")
        outer = statements[0]
        inner = outer.statements[1]

        self.assertEqual(1, interpreter.locals[inner.statements[0].expression])
        self.assertEqual(1, interpreter.locals[inner.statements[1].expression])
        self.assertEqual(0, interpreter.locals[outer.statements[2].expression])

    def test_identical_references_are_distinct(self):
        statements, interpreter, __ = resolve("{ var x = 1; { var y = x + x; } }")
        binary = statements[0].statements[1].statements[0].initializer
        self.assertEqual(2, len(interpreter.locals))
        self.assertEqual(1, interpreter.locals[binary.left])
        self.assertEqual(1, interpreter.locals[binary.right])

    def test_function_scopes(self):
        statements, interpreter, __ = resolve("fun outer(x) { var y = x; fun inner() { return x + y; } }")
        outer = statements[0]
        initializer = outer.body[0].initializer
        self.assertEqual(0, interpreter.locals[initializer])

        returned = outer.body[1].body[0].value
        self.assertEqual(1, interpreter.locals[returned.left])
        self.assertEqual(1, interpreter.locals[returned.right])

    def test_this_distance(self):
        statements, interpreter, __ = resolve("class C { m() { return this; } }")
        this = statements[0].methods[0].body[0].value
        self.assertEqual(1, interpreter.locals[this])

    def test_static_scope(self):
        # the 'a' in show() is fixed to the global before the block's own 'a' is declared
        statements, interpreter, __ = resolve("var a = 1; { fun show() { print a; } var a = 2; }")
        show = statements[1].statements[0]
        self.assertNotIn(show.body[0].expression, interpreter.locals)


class ResolutionErrorTestCase(unittest.TestCase):

    def test_errors(self):
        cases = {
            "{ var a = 1; var a = 2; }": "[line 1] Error at 'a': Variable with this name already declared in this scope.",
            "fun f(a, a) {}": "[line 1] Error at 'a': Variable with this name already declared in this scope.",
            "{ var a = a; }": "[line 1] Error at 'a': Cannot read local variable in its own initializer.",
            "return 1;": "[line 1] Error at 'return': Cannot return from top-level code.",
            "print this;": "[line 1] Error at 'this': Cannot use 'this' outside of a class.",
            "fun f() { return this; }": "[line 1] Error at 'this': Cannot use 'this' outside of a class.",
            "class C { init() { return 1; } }": "[line 1] Error at 'return': Cannot return a value from an initializer.",
        }
        for case, expected in cases.items():
            __, __, error_handler = resolve(case)
            self.assertEqual([expected], error_handler.messages, case)

    def test_legal(self):
        should_pass = [
            "var a = 1; var a = 2;",
            "var a = a;",
            "{ var a = 1; { var b = a; } }",
            "class C { init() { return; } }",
            "class C { m() { fun f() { return this; } return f; } }",
            "fun f() { return; }",
            "fun fib(n) { if (n < 2) return n; return fib(n - 1) + fib(n - 2); }",
        ]
        for case in should_pass:
            __, __, error_handler = resolve(case)
            self.assertFalse(error_handler.had_error, case)

    def test_resolution_continues(self):
        __, __, error_handler = resolve("return 1;\n{ var b; var b; }\nprint this;")
        self.assertEqual([
            "[line 1] Error at 'return': Cannot return from top-level code.",
            "[line 2] Error at 'b': Variable with this name already declared in this scope.",
            "[line 3] Error at 'this': Cannot use 'this' outside of a class.",
        ], error_handler.messages)

    def test_unknown_node(self):
        error_handler = ErrorHandler(fatal=False, out=io.StringIO())
        resolver = Resolver(Interpreter(error_handler, out=io.StringIO()), error_handler)

        self.assertRaises(TypeError, resolver.resolve_stmt, object())
        self.assertRaises(TypeError, resolver.resolve_expr, object())


if __name__ == '__main__':
    unittest.main()
