"""Handles interactive/command-line mode for the Lox-plus interpreter. Uses cmd as backend."""

import cmd


class Shell(cmd.Cmd):
    """Lox-plus interpreter shell."""
    intro = "Lox-plus interpreter :: Python backend\nType '?' or 'help' for more information."
    prompt = "> "
    secondary_prompt = ". "  # used for line continuations
    _tmp_prompt = "> "       # also used for prompt swapping in line continuations

    def __init__(self, sess, *args, **kwargs):
        super().__init__(*args, **kwargs)

        self.sess = sess
        self._tmp_line = ""

    def default(self, line):
        """Executes arbitrary Lox-plus source. Globals persist from one line to the next."""
        with self.sess.error_handler:  # needed because cmd.Cmd automatically exits on Exception
            line, add_to_prev = self.sess.preprocess_line(line, self._tmp_line)

            if add_to_prev:
                self._tmp_line = line
                self.prompt = self.secondary_prompt
            else:
                self._tmp_line = ""
                self.prompt = self._tmp_prompt
                self.sess.run(line)

    def do_help(self, arg):
        """Doesnt return docs, but rather a short intro."""
        print("Welcome to the Lox-plus interpreter!\n\n"
              "Lox-plus is a small dynamically-typed scripting language with closures and \n"
              "classes. Statements end with ';' and blocks can span several lines.\n\n"
              "Try it out by typing 'var greeting = \"hi\";'. Next, try typing \n"
              "'print greeting;'. Globals are kept until you exit.")

    def emptyline(self):
        """Do not repeat previous command on empty line."""
        return ""

    def do_EOF(self, arg):
        """Exits interpreter."""
        print()
        return self.do_exit(arg)

    def do_exit(self, arg):
        """Exits interpreter."""
        if arg:
            self.sess.error_handler.warn(f"unrecognized argument to exit: '{arg}'")
            return False
        return True
