"""Prettifier: turns a (usually reduced) λ-term back into readable syntax by recognizing Church numerals and named
terms inside it. Best-effort: never fails, falling back to the canonical printer output.

Priority order:
    1. the whole term has Church numeral shape         -> _N
    2. the term carries a numeral origin tag           -> that tag
    3. named terms, longest canonical form first       -> _NAME in place of each match
"""

import re
from collections import namedtuple

from lambdaviz.lang.error import GenericException
from lambdaviz.lang.named import BUILTINS, Registry
from lambdaviz.lang.numerical import is_numeral_tag, number
from lambdaviz.pure.lexical import parse
from lambdaviz.pure.printer import print_term
from lambdaviz.pure.term import Variable

ALWAYS_ALLOWED = re.compile(r"^([0-9]+|TRUE|FALSE)$", re.IGNORECASE)
MIN_PRINTED_LENGTH = 5

NamedForm = namedtuple("NamedForm", ["name", "lam", "printed"])


def named_forms(custom=(), builtins=BUILTINS, error_handler=None):
    """Canonical printed form of every registry entry worth collapsing, longest first. Trivial entries (a bare
    variable, or short and without λ or parentheses) are dropped unless their name is in ALWAYS_ALLOWED. Entries
    that fail to parse are skipped with a warning.
    """
    registry = Registry(custom, builtins)
    forms = []
    for named in registry:
        try:
            term = parse(named.lam, registry)
        except GenericException as error:
            if error_handler is not None:
                error_handler.warn("could not prettify with named term '{}': {}", (named.name, error.plain),
                                   diagnosis=False)
            continue

        printed = print_term(term, canonical=True)
        complex_enough = "λ" in printed or "(" in printed or len(printed) > MIN_PRINTED_LENGTH
        if printed and ((complex_enough and not isinstance(term, Variable)) or ALWAYS_ALLOWED.match(named.name)):
            forms.append(NamedForm(named.name, named.lam, printed))

    forms.sort(key=lambda form: len(form.printed), reverse=True)
    return forms


def prettify(term, custom=(), builtins=BUILTINS, error_handler=None, structural=False):
    """Readable form of term. By default named terms are found by exact substring replacement in the canonical
    printing of term; with structural=True, whole subtrees are matched instead (see prettify_structural).
    """
    if term is None:
        return ""

    num = number(term)
    if num is not None:
        return f"_{num}"

    if is_numeral_tag(term.tag):
        return term.tag

    forms = named_forms(custom, builtins, error_handler)
    if structural:
        return prettify_structural(term, forms)

    printed = print_term(term, canonical=True)
    for form in forms:
        printed = printed.replace(form.printed, f"_{form.name}")
    return printed


def prettify_structural(term, forms):
    """Canonical printing of term where every subtree that is a Church numeral, or whose canonical printing in
    isolation equals a named form, prints as _N or _NAME. Outer subtrees win over the subtrees inside them, and
    longer named forms win over shorter ones with the same printing.
    """
    by_printed = {}
    for form in forms:
        by_printed.setdefault(form.printed, form.name)

    def atom(node):
        if isinstance(node, Variable):
            return None
        num = number(node)
        if num is not None:
            return f"_{num}"
        name = by_printed.get(print_term(node, canonical=True))
        return f"_{name}" if name is not None else None

    return print_term(term, canonical=True, atom=atom)
