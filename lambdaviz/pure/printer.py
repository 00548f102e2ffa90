"""Renders λ-terms back to surface syntax with minimal parenthesization.

Two modes:
- as-written: variable names print exactly as stored
- canonical:  every binder is renamed to the next name of @a, @b, ..., @z, @26, @27, ... (one counter per call,
              incremented once per abstraction), so alpha-equivalent terms print identically

A node tagged as a Church numeral (e.g. "_7") prints its tag as an atom instead of its structure.
"""

from lambdaviz.lang.numerical import is_numeral_tag
from lambdaviz.pure.term import Abstraction, Application, Variable

CONTEXTS = ("func", "arg", "body", "top")


def needs_parentheses(term, context):
    """Abstractions need parentheses in function or argument position; Applications need them in argument position
    and, since application is left-associative, in function position too.
    """
    if isinstance(term, (Abstraction, Application)):
        return context in ("func", "arg")
    return False


def canonical_name(index):
    if index < 26:
        return "@" + chr(ord("a") + index)
    return f"@{index}"


class _Printer:

    def __init__(self, canonical, numerals, atom):
        self.canonical = canonical
        self.numerals = numerals
        self.atom = atom
        self.counter = 0

    def print(self, term, context, names):
        """names maps a bound name to its canonical name in the current scope; it is never mutated."""
        atom = self.atom(term) if self.atom is not None else None
        if atom is not None:
            result = atom

        elif self.numerals and is_numeral_tag(term.tag):
            result = term.tag

        elif isinstance(term, Variable):
            result = names.get(term.name, term.name)

        elif isinstance(term, Abstraction):
            param = term.param
            if self.canonical:
                param = canonical_name(self.counter)
                self.counter += 1
                names = {**names, term.param: param}
            result = f"λ{param}.{self.print(term.body, 'body', names)}"

        elif isinstance(term, Application):
            result = f"{self.print(term.func, 'func', names)} {self.print(term.arg, 'arg', names)}"

        else:
            raise TypeError(f"unknown λ-term type: {type(term).__name__}")

        return f"({result})" if needs_parentheses(term, context) else result


def print_term(term, context="top", canonical=False, numerals=True, atom=None):
    """Returns surface syntax of term as it would appear in context ("func", "arg", "body" or "top"). With
    numerals=False, numeral-tagged nodes print their structure like any other node.

    atom, if given, is called on every node before printing it; a string result is printed instead of the node.
    """
    if context not in CONTEXTS:
        raise ValueError(f"unknown print context: {context!r}")
    return _Printer(canonical, numerals, atom).print(term, context, {})
