"""Error handling for Lox-plus. Compile-time errors (lexical, syntax, resolution) are collected by an ErrorHandler and never
abort the stage in progress; runtime errors are raised as LoxRuntimeError and caught once by the interpreter, which hands
them to the same ErrorHandler. If any other Python error makes it all the way to ErrorHandler, it is assumed to be an
internal issue.
"""

import sys

from termcolor import colored

from loxplus.grammar.tokens import TokenType


class LoxError(Exception):
    """Superclass of every error raised by the interpreter."""


class ParseError(LoxError):
    """Raised by the parser to unwind to the enclosing declaration. Always reported before being raised."""


class LoxRuntimeError(LoxError):
    """Runtime error that halts the current run. token locates the error in source."""

    def __init__(self, token, message):
        super().__init__(message)
        self.token = token
        self.message = message


class ErrorHandler:
    """Diagnostics collector shared by every pipeline stage. Tracks whether a compile-time or runtime error occurred and
    prints each diagnostic as it is reported. Also a context manager that reports stray Python errors.
    """
    ERROR = "red"
    WARNING = "magenta"

    EXIT_OK = 0
    EXIT_INTERNAL = 1
    EXIT_USAGE = 64
    EXIT_COMPILE = 65
    EXIT_RUNTIME = 70

    def __init__(self, fatal=True, out=None):
        self.fatal = fatal
        self.out = out  # None means sys.stdout at print time

        self.had_error = False
        self.had_runtime_error = False
        self.messages = []  # plain text of every diagnostic, in report order

    @property
    def exit_code(self):
        """Process exit code for the errors seen so far."""
        if self.had_error:
            return ErrorHandler.EXIT_COMPILE
        if self.had_runtime_error:
            return ErrorHandler.EXIT_RUNTIME
        return ErrorHandler.EXIT_OK

    def reset(self):
        """Clears error flags. Called between shell lines so one bad line does not gate the next."""
        self.had_error = False
        self.had_runtime_error = False
        self.messages = []

    def _print(self, plain, styled):
        self.messages.append(plain)
        print(styled, file=self.out if self.out is not None else sys.stdout)

    def report(self, line, where, message):
        """Reports a compile-time error: '[line <line>] Error<where>: <message>'."""
        prefix = f"[line {line}] "
        label = f"Error{where}:"

        styled = colored(prefix, attrs=["bold"]) + colored(label, ErrorHandler.ERROR, attrs=["bold"]) + f" {message}"
        self._print(f"{prefix}{label} {message}", styled)
        self.had_error = True

    def error(self, line, message):
        """Reports a lexical error, which has no token to point at."""
        self.report(line, "", message)

    def error_at(self, token, message):
        """Reports a syntax or resolution error located at token."""
        if token.type is TokenType.EOF:
            self.report(token.line, " at end", message)
        else:
            self.report(token.line, f" at '{token.lexeme}'", message)

    def runtime_error(self, error):
        """Reports a LoxRuntimeError: '[line <line>] <message>'."""
        prefix = f"[line {error.token.line}] "

        styled = colored(prefix, attrs=["bold"]) + colored(error.message, ErrorHandler.ERROR)
        self._print(f"{prefix}{error.message}", styled)
        self.had_runtime_error = True

    def warn(self, message):
        """Prints a non-fatal warning. Does not set any error flag."""
        self._print(f"warning: {message}", colored("warning: ", ErrorHandler.WARNING, attrs=["bold"]) + message)

    def throw(self, message, internal=False):
        """Reports an error that escaped the pipeline. Exits if this handler is fatal."""
        styled = colored("[internal] ", ErrorHandler.ERROR, attrs=["bold"]) if internal else ""
        styled += colored("error: ", ErrorHandler.ERROR, attrs=["bold"]) + message
        self._print(("[internal] " if internal else "") + f"error: {message}", styled)

        if self.fatal:
            sys.exit(ErrorHandler.EXIT_INTERNAL)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        do_exit = False
        if exc_type is KeyboardInterrupt:
            self.throw("keyboard interrupt")
        elif exc_type is SystemExit:
            do_exit = True
        elif exc_type is not None:
            self.throw(f"unknown error: '{exc_type.__name__}: {exc_val}'", internal=True)

        return not do_exit
