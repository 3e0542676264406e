"""Handles interactive/command-line mode for simplang. Uses cmd as backend."""

import cmd

from simplang.lang.error import IncompleteInput


class Shell(cmd.Cmd):
    """simplang interpreter shell."""
    intro = "simplang interpreter :: Python backend\nType '?' or 'help' for more information."
    prompt = "> "
    secondary_prompt = ". "  # used for line continuations
    _tmp_prompt = "> "       # also used for prompt swapping in line continuations
    COMMANDS = ("trace", "functions", "help", "?", "exit", "EOF")

    def __init__(self, sess, *args, **kwargs):
        super().__init__(*args, **kwargs)

        self.sess = sess
        self.sess.error_handler.fatal = False

        self.show_trace = False
        self._tmp_line = ""

    def onecmd(self, line):
        """Only a bare command word (or help with a topic) is a shell command, anything else is simplang input."""
        words = line.split()
        if not words:
            return self.emptyline()
        if words[0] in self.COMMANDS and (len(words) == 1 or words[0] == "help"):
            return super().onecmd(line)
        return self.default(line)

    def default(self, line):
        """Declares a function or evaluates an expression. Unfinished input continues on the next line."""
        line = self._tmp_line + line
        self._tmp_line = ""
        self.prompt = self._tmp_prompt

        with self.sess.error_handler:  # needed because cmd.Cmd automatically exits on Exception
            try:
                result = self.sess.add(line)
            except IncompleteInput:
                self._tmp_line = line + "\n"
                self.prompt = self.secondary_prompt
                return

            if result is not None:
                print(result, file=self.stdout)
                if self.show_trace and len(self.sess.trace):
                    print(self.sess.trace.format(), file=self.stdout)

    def do_trace(self, arg):
        """Toggles printing of the invocation trace after each evaluation."""
        self.show_trace = not self.show_trace
        print(f"trace {'on' if self.show_trace else 'off'}", file=self.stdout)

    def do_functions(self, arg):
        """Lists declared functions with their parameters."""
        for function in self.sess.functions:
            print(f"{function.name} {' '.join(function.params)}", file=self.stdout)

    def do_help(self, arg):
        """Doesnt return docs, but rather a short intro."""
        print("Welcome to the simplang interpreter!\n\n"
              "Declare a function with 'let fact n = if n < 1 then 1 else n * fact(n + -1) end end'\n"
              "and call it with 'fact(5)'. Any other line is evaluated as an expression.\n\n"
              "Commands: 'trace' toggles the invocation trace, 'functions' lists declared\n"
              "functions, 'exit' leaves the shell.", file=self.stdout)

    def emptyline(self):
        """Do not repeat previous command on empty line."""
        return ""

    def do_EOF(self, arg):
        """Exits interpreter."""
        print(file=self.stdout)
        return self.do_exit(arg)

    def do_exit(self, arg):
        """Exits interpreter."""
        return True
