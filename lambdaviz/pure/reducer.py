"""Normal-order (leftmost-outermost) beta reduction with capture-avoiding substitution.

Every function here is pure: a reduction step returns a new tree with fresh identities and never touches its input.

Sources: http://pages.cs.wisc.edu/~horwitz/CS704-NOTES/1.LAMBDA-CALCULUS.html#NOR,
         https://en.wikipedia.org/wiki/Lambda_calculus#Capture-avoiding_substitutions
"""

from collections import namedtuple

from lambdaviz.lang.error import ReductionError, StepLimitExceeded
from lambdaviz.pure.term import Abstraction, Application, LambdaTerm, Variable

Step = namedtuple("Step", ["result", "changed", "redex_id"])

NORMAL_FORM = "normal"
STEP_LIMIT = "step_limit"


def _check(term):
    if not isinstance(term, LambdaTerm):
        raise ReductionError("'{}' is not a λ-term", repr(term), internal=True)


def free_variables(term, bound=frozenset()):
    """Names occurring free in term, ignoring those in bound."""
    _check(term)
    if isinstance(term, Variable):
        return set() if term.name in bound else {term.name}
    if isinstance(term, Abstraction):
        return free_variables(term.body, bound | {term.param})
    return free_variables(term.func, bound) | free_variables(term.arg, bound)


def all_names(term):
    """Every name in term, bound, binding or free."""
    names = set()
    for node in term.walk():
        if isinstance(node, Variable):
            names.add(node.name)
        elif isinstance(node, Abstraction):
            names.add(node.param)
    return names


class Freshener:
    """Generates fresh names by suffixing an increasing counter onto a base name. One instance per reduction step,
    so the counter restarts at every step.
    """

    def __init__(self):
        self.counter = 0
        self.tried = set()

    def fresh(self, base, avoid):
        while True:
            name = f"{base}{self.counter}"
            self.counter += 1
            if name not in avoid and name not in self.tried:
                self.tried.add(name)
                return name


def rename(term, old, new):
    """Renames free occurrences of old to new in term. new must not occur anywhere in term."""
    if isinstance(term, Variable):
        return term.copy(name=new) if term.name == old else term.copy()
    if isinstance(term, Abstraction):
        if term.param == old:
            return term.clone()
        return term.copy(body=rename(term.body, old, new))
    return term.copy(func=rename(term.func, old, new), arg=rename(term.arg, old, new))


def alpha_convert(abstraction, new_param):
    """λx.M -> λnew.M[x := new]. new_param must not occur in M."""
    return abstraction.copy(param=new_param, body=rename(abstraction.body, abstraction.param, new_param))


def substitute(body, name, replacement, freshener=None):
    """Returns body with every free occurrence of name replaced by a fresh copy of replacement. Abstractions whose
    parameter is free in replacement are alpha-converted first so that nothing gets captured.

    Nodes whose free variables change lose their origin tag, since they no longer are the named term they came from.
    """
    _check(body)
    if freshener is None:
        freshener = Freshener()
    return _substitute(body, name, replacement, free_variables(replacement), freshener)


def _substitute(term, name, replacement, replacement_free, freshener):
    if isinstance(term, Variable):
        return replacement.clone() if term.name == name else term.copy()

    if term.tag is not None and name not in free_variables(term):
        return term.clone()  # a closed named term is untouched by substitution

    if isinstance(term, Abstraction):
        if term.param == name:  # name is shadowed
            return term.clone()

        if term.param in replacement_free:  # term.param would capture a free variable of replacement
            avoid = all_names(term.body) | replacement_free | {name}
            term = alpha_convert(term, freshener.fresh(term.param, avoid))

        body = _substitute(term.body, name, replacement, replacement_free, freshener)
        return term.copy(body=body, tag=None)

    if isinstance(term, Application):
        return term.copy(func=_substitute(term.func, name, replacement, replacement_free, freshener),
                         arg=_substitute(term.arg, name, replacement, replacement_free, freshener),
                         tag=None)

    _check(term)


def contract(redex, freshener=None):
    """(λx.M) N -> M[x := N]"""
    abstraction = redex.func
    return substitute(abstraction.body, abstraction.param, redex.arg, freshener)


def reduce_step(term):
    """Contracts the leftmost-outermost redex of term. Returns Step(result, changed, redex_id); when changed is
    False, term is in normal form and result is a fresh clone of it.
    """
    _check(term)
    freshener = Freshener()

    def find_and_reduce(node):
        if isinstance(node, Application):
            if isinstance(node.func, Abstraction):
                return contract(node, freshener), node.id

            func, redex_id = find_and_reduce(node.func)
            if redex_id is not None:
                return node.copy(func=func, arg=node.arg.clone(), tag=None, is_redex=False), redex_id

            arg, redex_id = find_and_reduce(node.arg)
            if redex_id is not None:
                return node.copy(func=func, arg=arg, tag=None, is_redex=False), redex_id
            return node.copy(func=func, arg=arg, is_redex=False), None

        if isinstance(node, Abstraction):
            body, redex_id = find_and_reduce(node.body)
            tag = None if redex_id is not None else node.tag
            return node.copy(body=body, tag=tag, is_redex=False), redex_id

        if isinstance(node, Variable):
            return node.copy(is_redex=False), None

        _check(node)

    try:
        result, redex_id = find_and_reduce(term)
    except RecursionError:
        # printing term would recurse just as deep
        raise ReductionError("λ-term ({}) is too deeply nested to reduce", term.kind, diagnosis=False)
    return Step(result, redex_id is not None, redex_id)


def locate_next_redex(term):
    """Identity of the application reduce_step would contract next, or None if term is in normal form."""
    _check(term)
    stack = [term]
    while stack:
        node = stack.pop()
        if isinstance(node, Application) and node.is_reducible:
            return node.id
        stack.extend(reversed(node.nodes))
    return None


def mark_redex(term):
    """Returns (marked, redex_id): a clone of term in which the next redex application and its abstraction carry
    is_redex=True, and the identity of that application in the clone. Identities are fresh, so redex_id refers to
    marked, not to term.
    """
    target = locate_next_redex(term)

    def mark(node, is_redex_func=False):
        is_target = node.id == target
        children = node.child_fields()
        for name, child in children.items():
            children[name] = mark(child, is_target and name == "func")
        return node.copy(is_redex=is_target or is_redex_func, **children)

    marked = mark(term)
    if target is None:
        return marked, None
    return marked, locate_next_redex(marked)


class Reduction:
    """Outcome of reducing a term as far as the step ceiling allows. terms holds every intermediate term,
    starting with the input.
    """

    def __init__(self, terms, status):
        self.terms = terms
        self.status = status

    @property
    def result(self):
        return self.terms[-1]

    @property
    def steps(self):
        return len(self.terms) - 1

    @property
    def limit_exceeded(self):
        return self.status == STEP_LIMIT

    def raise_for_limit(self):
        if self.limit_exceeded:
            raise StepLimitExceeded("no normal form reached after {} reduction steps", str(self.steps),
                                    diagnosis=False)

    def __repr__(self):
        return f"Reduction(status={self.status!r}, steps={self.steps}, result={self.result!r})"


def normalize(term, max_steps=1000):
    """Calls reduce_step until term is in normal form or max_steps contractions were made. Reaching the ceiling is
    reported as status STEP_LIMIT rather than raised.
    """
    terms = [term]
    for _ in range(max_steps):
        step = reduce_step(terms[-1])
        if not step.changed:
            return Reduction(terms, NORMAL_FORM)
        terms.append(step.result)

    if locate_next_redex(terms[-1]) is None:
        return Reduction(terms, NORMAL_FORM)
    return Reduction(terms, STEP_LIMIT)
