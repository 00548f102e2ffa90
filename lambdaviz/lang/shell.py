"""Handles interactive/command-line mode for lambdaviz. Uses cmd as backend."""

import cmd

from lambdaviz.lang.error import GenericException
from lambdaviz.layout.tromp import DEFAULT_SCALE
from lambdaviz.pure.printer import print_term
from lambdaviz.pure.reducer import locate_next_redex


def _number(arg, default):
    arg = arg.strip()
    if not arg:
        return default
    if not arg.isdigit() or int(arg) < 1:
        raise GenericException("'{}' is not a positive integer", arg)
    return int(arg)


class Shell(cmd.Cmd):
    """λ-calculus reduction shell."""
    intro = "lambdaviz :: step-by-step λ-calculus\nType '?' or 'help' for more information."
    prompt = "> "
    secondary_prompt = ". "  # while a "(" is left open

    def __init__(self, sess, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.sess = sess
        self.pending = ""  # statement collected so far while a "(" is left open
        self.line_num = 0

    def default(self, line):
        """Defines a named term, or reduces a λ-term to normal form and prints it prettified. Lines that leave a "("
        open are collected until it is closed.
        """
        with self.sess.error_handler:  # cmd.Cmd would exit on an uncaught Exception
            self.line_num += 1
            statement, still_open = self.sess.preprocess_line(f"{self.pending} {line}", self.line_num, False)
            self.pending = statement if still_open else ""
            self.prompt = self.secondary_prompt if still_open else Shell.prompt
            if still_open or not statement:
                return

            self.sess.add(statement, self.line_num)
            self.sess.run()
            while self.sess.results:
                print(self.sess.pop().pretty)

    def do_load(self, arg):
        """Loads a λ-term to step through: load <λ-term>"""
        with self.sess.error_handler:
            self.sess.load(arg)
            print(self.sess.show())

    def do_step(self, arg):
        """Contracts the next redex of the loaded term: step [count]"""
        with self.sess.error_handler:
            count = _number(arg, 1)
            for _ in range(count):
                if not self.sess.step().changed:
                    print("(normal form)")
                    break
                print(f"{len(self.sess.history) - 1}: {self.sess.show()}")

    def do_next(self, arg):
        """Shows the redex the next step will contract."""
        with self.sess.error_handler:
            if not self.sess.reducible:
                print("(normal form)")
                return
            redex_id = locate_next_redex(self.sess.term)
            print(print_term(next(node for node in self.sess.term.walk() if node.id == redex_id)))

    def do_pretty(self, arg):
        """Prints the loaded term with numerals and named terms collapsed."""
        with self.sess.error_handler:
            print(self.sess.prettify() if self.sess.term is not None else "")

    def do_names(self, arg):
        """Lists every named term, built-in and custom."""
        for named in self.sess.registry:
            description = f"  ;; {named.description}" if named.description else ""
            print(f"_{named.name} := {named.lam}{description}")

    def do_tree(self, arg):
        """Prints the tree layout of the loaded term as JSON."""
        print(self.sess.dump(self.sess.tree()))

    def do_tromp(self, arg):
        """Prints the Tromp diagram layout of the loaded term as JSON: tromp [scale]"""
        with self.sess.error_handler:
            layout = self.sess.tromp(_number(arg, DEFAULT_SCALE))
            print(self.sess.dump(layout))

    def do_help(self, arg):
        """Short intro; "help <command>" still shows that command's docstring."""
        if arg:
            return super().do_help(arg)
        print("Welcome to lambdaviz!\n\n"
              "Type a λ-term such as '_PLUS _2 _3' to reduce it to normal form. 'λ', 'L' and '\\' all \n"
              "start an abstraction; _N is the Church numeral N and _NAME a named term (try 'names').\n"
              "Define your own with 'PAIR := λa.λb.λf.f a b', then use it as '_PAIR'.\n\n"
              "To watch a reduction, type 'load <λ-term>', then 'step' (or 'step 5'). 'next' shows the \n"
              "upcoming redex, 'pretty' the prettified term, and 'tree' / 'tromp' print its layouts.")

    def emptyline(self):
        """An empty line does nothing (cmd.Cmd would repeat the last command)."""
        return ""

    def do_EOF(self, arg):
        """Exits lambdaviz."""
        print()
        return self.do_exit(arg)

    def do_exit(self, arg):
        """Exits lambdaviz."""
        return True
