"""Named terms: the built-in registry, custom registration checks and `_NAME` / `_N` expansion.

Expansion is textual and happens before tokenization:

```
_N     -> (λf.λx. f (f (... (f x) ...)))    ; N applications of f, N a non-negative integer literal
_NAME  -> (<surface syntax of NAME>)        ; exact name lookup in built-in + custom terms
```

Unresolved names are left as literal text (they become free variables) and negative numerals are left untouched
so the tokenizer rejects them.
"""

import re
from dataclasses import dataclass
from typing import Optional

from lambdaviz.lang.error import RegistrationError
from lambdaviz.lang.numerical import numeral_syntax

NAME_PATTERN = re.compile(r"^[A-Za-z][A-Za-z0-9_']*$")

# parsers see TAG_OPEN + tag + TAG_CLOSE right after the "(" of a marked expansion
TAG_OPEN = "\ue000"
TAG_CLOSE = "\ue001"

NUMERAL_REF = re.compile(r"(?<![A-Za-z0-9_'\ue000])_(\d+)(?![A-Za-z0-9_'])")
NAME_REF = re.compile(r"(?<![A-Za-z0-9_'\ue000])_([A-Za-z][A-Za-z0-9_']*)")

MAX_PASSES = 10


@dataclass(frozen=True)
class NamedTerm:
    """A registry entry. lam is the entry's surface syntax."""
    name: str
    lam: str
    description: Optional[str] = None

    @property
    def tag(self):
        return f"_{self.name}"

    def references(self):
        """Names referenced through _NAME inside this entry's surface syntax."""
        return set(NAME_REF.findall(self.lam))

    def to_dict(self):
        result = {"name": self.name, "lambda": self.lam}
        if self.description is not None:
            result["description"] = self.description
        return result

    @classmethod
    def from_dict(cls, data):
        return cls(data["name"], data["lambda"], data.get("description"))


BUILTINS = (
    NamedTerm("ID", "λx.x", "Identity function (I)"),
    NamedTerm("TRUE", "λx.λy.x", "Church Boolean True (Kestrel)"),
    NamedTerm("FALSE", "λx.λy.y", "Church Boolean False (Kite)"),
    NamedTerm("NOT", "λp.p (λx.λy.y) (λx.λy.x)", "Boolean NOT (λp.p FALSE TRUE)"),
    NamedTerm("AND", "λp.λq.p q (λx.λy.y)", "Boolean AND (λp.λq.p q FALSE)"),
    NamedTerm("OR", "λp.λq.p (λx.λy.x) q", "Boolean OR (λp.λq.p TRUE q)"),
    NamedTerm("ZERO", "λf.λx.x", "Church Numeral 0"),
    NamedTerm("ONE", "λf.λx.f x", "Church Numeral 1"),
    NamedTerm("TWO", "λf.λx.f (f x)", "Church Numeral 2"),
    NamedTerm("THREE", "λf.λx.f (f (f x))", "Church Numeral 3"),
    NamedTerm("SUCC", "λn.λf.λx.f (n f x)", "Successor: λn.λf.λx.f (n f x)"),
    NamedTerm("PLUS", "λm.λn.λf.λx.m f (n f x)", "Addition: λm.λn.λf.λx.m f (n f x)"),
    NamedTerm("MULT", "λm.λn.λf.m (n f)", "Multiplication: λm.λn.λf.m (n f)"),
    NamedTerm("POW", "λb.λe.e b", "Exponentiation (b^e): λb.λe.e b (base, exponent)"),
    NamedTerm("Y", "λf.(λx.f (x x)) (λx.f (x x))", "Y Combinator (fixed-point combinator)"),
)


class Registry:
    """Built-in terms followed by custom terms. Lookup is by exact name; the first entry with a name wins, but
    validate keeps names unique across both lists.
    """

    def __init__(self, custom=(), builtins=BUILTINS):
        self.builtins = tuple(builtins)
        self.custom = tuple(custom)
        self._by_name = {}
        for term in self.entries:
            self._by_name.setdefault(term.name, term)

    @property
    def entries(self):
        return self.builtins + self.custom

    def lookup(self, name):
        """Returns the NamedTerm called name, or None."""
        return self._by_name.get(name)

    def __contains__(self, name):
        return name in self._by_name

    def __iter__(self):
        return iter(self.entries)

    def __len__(self):
        return len(self.entries)

    def validate(self, term):
        """Raises RegistrationError if term cannot join this registry: invalid name, name collision, invalid surface
        syntax, or a definition that refers back to itself through other entries.
        """
        from lambdaviz.pure.lexical import parse

        if not NAME_PATTERN.match(term.name):
            raise RegistrationError("'{}' is not a valid name", term.name, diagnosis=False)
        if term.name in self:
            raise RegistrationError("'{}' is already defined", term.name, diagnosis=False)

        candidate = Registry(self.custom + (term,), self.builtins)
        if candidate._reaches(term.name, term.name):
            raise RegistrationError("recursive definitions not supported: '{}' refers to itself", term.name,
                                    diagnosis=False)

        parse(term.lam, candidate)  # raises ParseError

    def _reaches(self, start, target):
        seen = set()
        stack = list(self.lookup(start).references())
        while stack:
            name = stack.pop()
            if name == target:
                return True
            if name in seen or name not in self:
                continue
            seen.add(name)
            stack.extend(self.lookup(name).references())
        return False

    def define(self, term):
        """Returns a new Registry with term appended to the custom terms."""
        self.validate(term)
        return Registry(self.custom + (term,), self.builtins)


def _wrap(tag, syntax, marked):
    if marked:
        return f"({TAG_OPEN}{tag}{TAG_CLOSE}{syntax})"
    return f"({syntax})"


def expand(text, registry=None, marked=False):
    """Replaces every _N and _NAME in text with parenthesized surface syntax. Expansion repeats until nothing
    changes, at most MAX_PASSES times, so named terms may reference other named terms.

    With marked=True, every expansion also carries its origin tag (see TAG_OPEN) for the parser.
    """
    if registry is None:
        registry = Registry()

    def sub_numeral(match):
        return _wrap(f"_{match.group(1)}", numeral_syntax(int(match.group(1))), marked)

    def sub_name(match):
        term = registry.lookup(match.group(1))
        if term is None:
            return match.group(0)
        return _wrap(term.tag, term.lam, marked)

    for _ in range(MAX_PASSES):
        expanded = NAME_REF.sub(sub_name, NUMERAL_REF.sub(sub_numeral, text))
        if expanded == text:
            break
        text = expanded
    return text
