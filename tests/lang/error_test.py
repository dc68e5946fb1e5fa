import io
import unittest

from loxplus.grammar.tokens import Token, TokenType
from loxplus.lang.error import ErrorHandler, LoxRuntimeError


class ErrorHandlerTestCase(unittest.TestCase):

    def setUp(self):
        self.out = io.StringIO()
        self.error_handler = ErrorHandler(fatal=False, out=self.out)

    def test_compile_errors(self):
        self.error_handler.error(3, "Unexpected character.")
        self.error_handler.error_at(Token(TokenType.IDENTIFIER, "foo", None, 4), "Bad.")
        self.error_handler.error_at(Token(TokenType.EOF, "", None, 5), "Worse.")

        self.assertEqual([
            "[line 3] Error: Unexpected character.",
            "[line 4] Error at 'foo': Bad.",
            "[line 5] Error at end: Worse.",
        ], self.error_handler.messages)
        self.assertTrue(self.error_handler.had_error)
        self.assertFalse(self.error_handler.had_runtime_error)
        self.assertEqual(ErrorHandler.EXIT_COMPILE, self.error_handler.exit_code)
        self.assertEqual(3, len(self.out.getvalue().splitlines()))

    def test_runtime_error(self):
        error = LoxRuntimeError(Token(TokenType.MINUS, "-", None, 7), "Operand must be a number.")
        self.error_handler.runtime_error(error)

        self.assertEqual(["[line 7] Operand must be a number."], self.error_handler.messages)
        self.assertIn("Operand must be a number.", self.out.getvalue())
        self.assertFalse(self.error_handler.had_error)
        self.assertEqual(ErrorHandler.EXIT_RUNTIME, self.error_handler.exit_code)

    def test_compile_error_takes_precedence(self):
        self.error_handler.runtime_error(LoxRuntimeError(Token(TokenType.NIL, "nil", None, 1), "Bad."))
        self.error_handler.error(1, "Worse.")
        self.assertEqual(ErrorHandler.EXIT_COMPILE, self.error_handler.exit_code)

    def test_reset(self):
        self.error_handler.error(1, "Unexpected character.")
        self.error_handler.reset()

        self.assertFalse(self.error_handler.had_error)
        self.assertEqual([], self.error_handler.messages)
        self.assertEqual(ErrorHandler.EXIT_OK, self.error_handler.exit_code)

    def test_warn(self):
        self.error_handler.warn("careful")
        self.assertEqual(["warning: careful"], self.error_handler.messages)
        self.assertEqual(ErrorHandler.EXIT_OK, self.error_handler.exit_code)

    def test_context_manager(self):
        with self.error_handler:
            raise ValueError("boom")
        self.assertEqual(["[internal] error: unknown error: 'ValueError: boom'"], self.error_handler.messages)

        with self.error_handler:
            raise KeyboardInterrupt()
        self.assertEqual("error: keyboard interrupt", self.error_handler.messages[-1])

        with self.assertRaises(SystemExit):
            with self.error_handler:
                raise SystemExit(3)

    def test_fatal(self):
        error_handler = ErrorHandler(fatal=True, out=io.StringIO())
        with self.assertRaises(SystemExit) as context:
            with error_handler:
                raise ValueError("boom")
        self.assertEqual(ErrorHandler.EXIT_INTERNAL, context.exception.code)


if __name__ == '__main__':
    unittest.main()
