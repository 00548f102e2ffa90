"""Session control for lambdaviz. Holds the custom named terms and the term being stepped through, and runs .lc files
or command-line input.

```
<define_stmt> ::= <name> ":=" <λ-term>     ; registers <name>; use it later as _<name>
<exec_stmt>   ::= <λ-term>                 ; reduced to normal form and prettified when the session is run
<comment>     ::= ";;" <char>*
```

A line with more "(" than ")" continues on the next line.
"""

import dataclasses
import json
from collections import namedtuple

from lambdaviz.lang.error import GenericException, StepLimitExceeded
from lambdaviz.lang.named import NamedTerm, Registry
from lambdaviz.lang.prettify import prettify
from lambdaviz.layout.tree import layout_tree
from lambdaviz.layout.tromp import DEFAULT_SCALE, CircuitLayout, layout_circuit
from lambdaviz.pure.lexical import parse
from lambdaviz.pure.printer import print_term
from lambdaviz.pure.reducer import locate_next_redex, normalize, reduce_step

Result = namedtuple("Result", ["expr", "reduction", "pretty"])


class Session:
    """Governs a lambdaviz session, with control over the scope of named terms."""
    SH_FILE = "<in>"  # command-line interpreter filename
    MAX_STEPS = 1000  # reduction ceiling; terms without a normal form stop here

    def __init__(self, error_handler, path=SH_FILE, cmd_line=True, max_steps=MAX_STEPS, structural=False):
        self.error_handler = error_handler
        self.path = path
        self.cmd_line = cmd_line
        self.max_steps = max_steps
        self.structural = structural  # prettify by subtree matching instead of string replacement

        self.registry = Registry()
        self.to_exec = {}  # line num: statement waiting to be reduced
        self.results = []  # Results, oldest first

        self.term = None   # term being stepped through
        self.history = []

        error_handler.register_file(path)
        if cmd_line:
            error_handler.fatal = False

        if path != Session.SH_FILE:
            for expr, line_num in Session.read(path):
                self.add(expr, line_num)

    @staticmethod
    def read(path):
        """Statements of the .lc file at path, each paired with the number of the line it starts on."""
        statements = []
        still_open = False
        try:
            with open(path, "r", encoding="utf-8") as file:
                for line_num, line in enumerate(file, start=1):
                    __, still_open = Session.preprocess_line(line, line_num, still_open, statements)
        except OSError:
            raise GenericException("'{}' could not be opened", path, diagnosis=False)
        return statements

    @staticmethod
    def preprocess_line(line, line_num, add_to_prev, exprs=None):
        """Strips the ;; comment and surrounding whitespace off line. When exprs (the statements read so far) is
        given, line also joins it: as a new statement, or appended to the last one if add_to_prev says that one was
        left open. Returns the resulting statement and whether it still has an unclosed "(".
        """
        line = line.split(";;", 1)[0].strip()
        if exprs is not None:
            if add_to_prev and exprs:
                statement, line_num = exprs.pop()
                line = f"{statement} {line}".strip()
            if line:
                exprs.append((line, line_num))
        return line, line.count("(") > line.count(")")

    def add(self, expr, line_num):
        """Adds a statement to the session. Definitions take effect immediately; reduction waits for run."""
        self.error_handler.register_line(self.path, expr, line_num)

        if ":=" in expr:
            name, lam = (part.strip() for part in expr.split(":=", 1))
            self.define(name, lam)
        else:
            parse(expr, self.registry)  # syntax errors are reported at the line they occur
            self.to_exec[line_num] = expr

        self.error_handler.remove_line(self.path)

    def define(self, name, lam, description=None):
        """Registers a custom named term. Raises RegistrationError or ParseError if it is rejected."""
        self.registry = self.registry.define(NamedTerm(name, lam, description))
        return self.registry.lookup(name)

    def run(self):
        """Reduces this session's pending statements to normal form. Warns on those that hit the step ceiling."""
        for line_num, expr in list(self.to_exec.items()):
            self.error_handler.register_line(self.path, expr, line_num)
            try:
                self.results.append(self.execute(expr))
            finally:
                del self.to_exec[line_num]
            self.error_handler.remove_line(self.path)

    def execute(self, expr):
        """Fully reduces expr. Returns a Result."""
        term = parse(expr, self.registry)
        reduction = normalize(term, self.max_steps)
        if reduction.limit_exceeded:
            msg = "'{}' has no normal form within {} steps: showing the last term reached"
            self.error_handler.warn(StepLimitExceeded(msg, (expr, str(self.max_steps)), diagnosis=False))
        return Result(expr, reduction, self.prettify(reduction.result))

    def pop(self):
        """Oldest unread Result."""
        return self.results.pop(0)

    def load(self, expr):
        """Makes expr the term to step through."""
        self.term = parse(expr, self.registry)
        self.history = [self.term]
        return self.term

    def step(self):
        """Contracts the next redex of the loaded term. Returns the reducer's Step."""
        if self.term is None:
            raise GenericException("no λ-term loaded", diagnosis=False)
        step = reduce_step(self.term)
        if step.changed:
            self.term = step.result
            self.history.append(self.term)
        return step

    @property
    def reducible(self):
        return self.term is not None and locate_next_redex(self.term) is not None

    def prettify(self, term=None):
        return prettify(term if term is not None else self.term, self.registry.custom,
                        self.registry.builtins, self.error_handler, self.structural)

    def show(self, term=None):
        term = term if term is not None else self.term
        return print_term(term) if term is not None else ""

    def tree(self):
        """Tree layout of the loaded term, highlighting its next redex."""
        if self.term is None:
            return layout_tree(None)
        return layout_tree(self.term, locate_next_redex(self.term))

    def tromp(self, scale=DEFAULT_SCALE):
        """Tromp layout of the loaded term, highlighting its next redex."""
        if self.term is None:
            return layout_circuit(None, scale)
        return layout_circuit(self.term, scale, locate_next_redex(self.term))

    @staticmethod
    def dump(layout):
        """JSON of a TreeLayout or CircuitLayout, for drawing elsewhere."""
        data = dataclasses.asdict(layout)
        if isinstance(layout, CircuitLayout):
            data["view_box"] = layout.view_box
        return json.dumps(data, ensure_ascii=False, indent=2)
