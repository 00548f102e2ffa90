"""Natural numbers encoded as Church numerals. Note that operations are not implemented here (see the PLUS, MULT,
POW and SUCC entries in lang/named.py), so everything stays pure lambda calculus.

Source: https://en.wikipedia.org/wiki/Church_encoding#Calculation_with_Church_numerals
"""

import re

from lambdaviz.pure.term import Abstraction, Application, Variable

NUMERAL_TAG = re.compile(r"^_\d+$")
MAX_APPLICATIONS = 200  # walks longer than this are not recognized as numerals


def is_numeral_tag(tag):
    """Whether or not tag names a Church numeral (an underscore followed only by digits)."""
    return bool(tag) and NUMERAL_TAG.match(tag) is not None


def numeral_syntax(num):
    """Returns surface syntax of num as a Church numeral, e.g. 2 -> 'λf.λx. f (f x)'."""
    if isinstance(num, bool) or not isinstance(num, int) or num < 0:
        raise ValueError(f"expected natural number, got {num!r}")

    body = "x"
    for _ in range(num):
        body = f"f {body}" if body == "x" else f"f ({body})"
    return f"λf.λx. {body}"


def cnumber(num):
    """Returns Church numeral num as a λ-term tagged with its numeral name."""
    if isinstance(num, bool) or not isinstance(num, int) or num < 0:
        raise ValueError(f"expected natural number, got {num!r}")

    body = Variable("x")
    for _ in range(num):
        body = Application(Variable("f"), body)
    return Abstraction("f", Abstraction("x", body), tag=f"_{num}")


def number(cnum):
    """Returns the natural number encoded by cnum, or None if cnum isn't a Church numeral.

    cnum must be λf.λx.f (f (... x)) where every applied function is exactly the outer f and the innermost leaf is
    exactly the outer x. When the inner binder shadows the outer one (λf.λf.f), only zero is possible.
    """
    if not isinstance(cnum, Abstraction) or not isinstance(cnum.body, Abstraction):
        return None

    f, x = cnum.param, cnum.body.param
    nth_body = cnum.body.body
    if f == x:
        return 0 if isinstance(nth_body, Variable) and nth_body.name == x else None

    num = 0
    while num <= MAX_APPLICATIONS:
        if isinstance(nth_body, Variable):
            return num if nth_body.name == x else None
        if not isinstance(nth_body, Application):
            return None
        if not isinstance(nth_body.func, Variable) or nth_body.func.name != f:
            return None
        num += 1
        nth_body = nth_body.arg
    return None
