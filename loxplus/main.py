"""Command-line entry point for the Lox-plus interpreter. Runs a .lox file, or starts command-line mode when no file is
given. Called from the loxplus executable script.

Exit codes: 0 on success, 65 after a compile-time error, 70 after a runtime error, 64 if the file can't be read.
"""

import argparse
import sys
import threading

from loxplus.lang.error import ErrorHandler
from loxplus.lang.session import Session
from loxplus.lang.shell import Shell

RECURSION_LIMIT = 100000       # each Lox-plus call takes several Python frames
STACK_SIZE = 512 * 1024 * 1024  # bytes of C stack for the interpreter thread


def call_with_deep_stack(function, *args):
    """Calls function(*args) on a worker thread with a STACK_SIZE stack and RECURSION_LIMIT, and returns its result,
    re-raising whatever it raised. The main thread's stack is fixed by the OS and too small for RECURSION_LIMIT frames,
    so the limit is only raised while the worker runs.
    """
    outcome = {}

    def target():
        try:
            outcome["result"] = function(*args)
        except BaseException as error:
            outcome["error"] = error

    previous_limit = sys.getrecursionlimit()
    previous_size = threading.stack_size(STACK_SIZE)
    try:
        sys.setrecursionlimit(max(previous_limit, RECURSION_LIMIT))
        worker = threading.Thread(target=target, daemon=True)
        worker.start()
        worker.join()
    finally:
        threading.stack_size(previous_size)
        sys.setrecursionlimit(previous_limit)

    if "error" in outcome:
        raise outcome["error"]
    return outcome["result"]


def main(argv=None):
    """Runs the Lox-plus interpreter and returns the process exit code."""
    parser = argparse.ArgumentParser(prog="loxplus")
    parser.add_argument("file", help="file to interpret and run (if empty, goes to command-line mode)", nargs="?")
    parser.add_argument("--ast", action="store_true", help="print the syntax tree of file instead of running it")
    args = parser.parse_args(argv)

    with ErrorHandler() as error_handler:
        if args.file is None:
            call_with_deep_stack(Shell(Session(error_handler, Session.SH_FILE, cmd_line=True)).cmdloop)
            return ErrorHandler.EXIT_OK

        sess = Session(error_handler, args.file, cmd_line=False)
        try:
            if args.ast:
                with open(args.file, "r", encoding="utf-8") as file:
                    for statement in sess.parse(file.read()):
                        print(statement.display())
                return error_handler.exit_code

            return call_with_deep_stack(sess.run_file)
        except OSError:
            error_handler.fatal = False
            error_handler.throw(f"'{args.file}' could not be opened")
            return ErrorHandler.EXIT_USAGE

    return ErrorHandler.EXIT_INTERNAL


if __name__ == "__main__":
    sys.exit(main())
