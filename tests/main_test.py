import contextlib
import io
import os
import sys
import tempfile
import unittest

from loxplus.lang.error import ErrorHandler
from loxplus.main import RECURSION_LIMIT, call_with_deep_stack, main


class MainTestCase(unittest.TestCase):

    def setUp(self):
        self.tmp = tempfile.TemporaryDirectory()

    def tearDown(self):
        self.tmp.cleanup()

    def run_main(self, source, *flags):
        path = os.path.join(self.tmp.name, "program.lox")
        with open(path, "w", encoding="utf-8") as file:
            file.write(source)

        stdout = io.StringIO()
        with contextlib.redirect_stdout(stdout):
            code = main([*flags, path])
        return code, stdout.getvalue()

    def test_exit_codes(self):
        cases = {
            "print \"ok\";": ErrorHandler.EXIT_OK,
            "print ;": ErrorHandler.EXIT_COMPILE,
            "return 1;": ErrorHandler.EXIT_COMPILE,
            "print nil + 1;": ErrorHandler.EXIT_RUNTIME,
        }
        for case, expected in cases.items():
            code, __ = self.run_main(case)
            self.assertEqual(expected, code, case)

    def test_output(self):
        code, output = self.run_main("for (var i = 0; i < 3; i = i + 1) print i;\nprint undefinedVar;")
        lines = output.splitlines()

        self.assertEqual(["0", "1", "2"], lines[:3])
        self.assertIn("[line 2] ", lines[3])
        self.assertIn("Undefined variable 'undefinedVar'.", lines[3])
        self.assertEqual(ErrorHandler.EXIT_RUNTIME, code)

    def test_deep_recursion(self):
        code, output = self.run_main("fun depth(n) { if (n == 0) return 0; return depth(n - 1) + 1; }\nprint depth(3000);")
        self.assertEqual(["3000"], output.splitlines())
        self.assertEqual(ErrorHandler.EXIT_OK, code)

        code, output = self.run_main("fun forever() { forever(); }\nforever();")
        self.assertIn("Stack overflow.", output)
        self.assertEqual(ErrorHandler.EXIT_RUNTIME, code)

    def test_deep_stack_is_scoped(self):
        limit = sys.getrecursionlimit()
        self.assertEqual(max(limit, RECURSION_LIMIT), call_with_deep_stack(sys.getrecursionlimit))
        self.assertEqual(limit, sys.getrecursionlimit())

        with self.assertRaises(ValueError):
            call_with_deep_stack(int, "not a number")

    def test_ast(self):
        code, output = self.run_main("print 1;", "--ast")
        self.assertEqual("Print(nodes=[\n    Literal(value=1.0)\n])\n", output)
        self.assertEqual(ErrorHandler.EXIT_OK, code)

    def test_missing_file(self):
        stdout = io.StringIO()
        with contextlib.redirect_stdout(stdout):
            code = main([os.path.join(self.tmp.name, "missing.lox")])

        self.assertEqual(ErrorHandler.EXIT_USAGE, code)
        self.assertIn("could not be opened", stdout.getvalue())


if __name__ == '__main__':
    unittest.main()
