"""Session control for Lox-plus. Drives source text through the pipeline, either for a whole file or line by line in
command-line mode:

    1. Scanner: source text -> tokens
    2. Parser: tokens -> statements
    3. Resolver: statements -> scope distances, recorded in the interpreter
    4. Interpreter: executes statements

Compile-time errors from stages 1-3 are collected by the session's ErrorHandler, and any of them stops the pipeline
before the next stage runs. The interpreter (and so the global scope) lives as long as the session.
"""

import re

from loxplus.lang.interpret import Interpreter
from loxplus.lang.lexical import Scanner
from loxplus.lang.parse import Parser
from loxplus.lang.resolve import Resolver


class Session:
    """Governs a Lox-plus session, with one interpreter shared by every run."""
    SH_FILE = "<in>"  # command-line interpreter filename

    def __init__(self, error_handler, path=SH_FILE, cmd_line=False, out=None):
        self.error_handler = error_handler
        self.path = path          # used for error messages
        self.cmd_line = cmd_line  # whether or not in command-line mode

        if self.cmd_line:
            self.error_handler.fatal = False

        self.interpreter = Interpreter(error_handler, out)

    def parse(self, source):
        """Runs the scanner and parser only. Returns the statements, which are only complete if no error was reported."""
        tokens = Scanner(source, self.error_handler).scan_tokens()
        return Parser(tokens, self.error_handler).parse()

    def run(self, source):
        """Runs source through the whole pipeline. Returns the error handler's exit code for this run."""
        if self.cmd_line:
            self.error_handler.reset()

        statements = self.parse(source)
        if self.error_handler.had_error:
            return self.error_handler.exit_code

        Resolver(self.interpreter, self.error_handler).resolve(statements)
        if self.error_handler.had_error:
            return self.error_handler.exit_code

        self.interpreter.interpret(statements)
        return self.error_handler.exit_code

    def run_file(self):
        """Reads self.path and runs it."""
        if self.path == Session.SH_FILE:
            raise ValueError(f"'{Session.SH_FILE}' is a reserved filename")

        with open(self.path, "r", encoding="utf-8") as file:
            source = file.read()

        return self.run(source)

    @staticmethod
    def preprocess_line(line, prev=""):
        """Joins line onto the unfinished prev line (if any). Returns the joined line and whether it still needs
        continuing, which is the case while braces or parentheses are left open.
        """
        if prev:
            line = prev + "\n" + line

        # brackets inside strings and comments don't count; an unterminated string runs to the end, as when scanning
        code = re.sub(r"\"[^\"]*(\"|$)|//[^\n]*", "", line)
        still_open = code.count("{") > code.count("}") or code.count("(") > code.count(")")
        return line, still_open
