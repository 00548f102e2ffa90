"""Pure lambda calculus tokenizer and recursive-descent parser.

Formally, the accepted surface syntax is

```
<term>     ::= <binder> <ident> "." <sequence>    ; "abstraction": bodies are greedy, λx.x y = λx.(x y)
             | "(" <sequence> ")"
             | <ident>                            ; "variable"
<sequence> ::= <term>+                            ; "application", associating by left: a b c = ((a b) c)
<binder>   ::= "λ" | "L" | "\\"
<ident>    ::= [A-Za-z_][A-Za-z0-9_']*
```

A sequence stops at ")", "." or end of input. `_NAME` and `_N` references are expanded before tokenization (see
lang/named.py); identifiers may start with "_" so that unresolved references survive as free variables. Because
"L" is a binder, it can never appear inside an identifier.

Sources: https://plato.stanford.edu/entries/lambda-calculus/#Com,
         https://opendsa-server.cs.vt.edu/ODSA/Books/PL/html/Syntax.html
"""

import re
from collections import namedtuple

from lambdaviz.lang.error import ParseError
from lambdaviz.lang.named import TAG_CLOSE, TAG_OPEN, expand
from lambdaviz.pure.term import Abstraction, Application, Variable

BINDER = "λ"
IDENTIFIER = re.compile(r"^[A-Za-z_][A-Za-z0-9_']*$")

_TAG = f"{TAG_OPEN}[^{TAG_CLOSE}]*{TAG_CLOSE}"
_BINDERS = re.compile(f"{_TAG}|[λL\\\\]")
_TOKENS = re.compile(
    f"(?P<tag>{TAG_OPEN}(?P<tagname>[^{TAG_CLOSE}]*){TAG_CLOSE})"
    r"|(?P<lambda>λ)"
    r"|(?P<open>\()"
    r"|(?P<close>\))"
    r"|(?P<dot>\.)"
    r"|(?P<ident>[A-Za-z_][A-Za-z0-9_']*)"
    r"|(?P<space>\s+)"
)

Token = namedtuple("Token", ["kind", "value", "pos"])


def normalize(expr):
    """Replaces every binder spelling (λ, L, \\) with λ. Origin tags are left alone."""
    return _BINDERS.sub(lambda match: match.group(0) if match.group(0).startswith(TAG_OPEN) else BINDER, expr)


def tokenize(expr):
    """Splits expr into Tokens. Kinds: "lambda", "(", ")", ".", "ident" and "tag" (an origin tag emitted by marked
    expansion). Raises ParseError on the first character that belongs to no token.
    """
    expr = normalize(expr)
    tokens = []
    pos = 0
    while pos < len(expr):
        match = _TOKENS.match(expr, pos)
        if match is None:
            raise ParseError("'{}' contains unexpected character '{}' at position {}",
                             (_strip_tags(expr), expr[pos], _display_pos(expr, pos)),
                             start=_display_pos(expr, pos), end=_display_pos(expr, pos) + 1)

        kind = match.lastgroup
        if kind == "tagname":
            kind = "tag"
        if kind == "tag":
            tokens.append(Token("tag", match.group("tagname"), pos))
        elif kind == "ident":
            tokens.append(Token("ident", match.group(0), pos))
        elif kind != "space":
            tokens.append(Token({"open": "(", "close": ")", "dot": "."}.get(kind, kind), match.group(0), pos))
        pos = match.end()
    return tokens


def _strip_tags(expr):
    return re.sub(_TAG, "", expr)


def _display_pos(expr, pos):
    """Position in expr once origin tags are removed."""
    return len(_strip_tags(expr[:pos]))


class Parser:
    """One-token-lookahead parser producing a λ-term. Every node it builds gets a fresh identity, and every
    parenthesized expansion of a named term is tagged with the term's origin tag.
    """

    def __init__(self, expr, registry=None):
        self.original_expr = expr
        self.expr = expand(expr, registry, marked=True)
        self.display_expr = _strip_tags(self.expr)
        self.tokens = []
        self.idx = 0

    def parse(self):
        if not self.original_expr.strip():
            raise ParseError("λ-term cannot be empty", diagnosis=False)

        self.tokens = tokenize(self.expr)
        self.idx = 0

        try:
            term = self.parse_sequence()
        except RecursionError:
            raise ParseError("'{}' is too deeply nested to parse", self.original_expr, diagnosis=False)
        if self.peek() is not None:
            self.unexpected(self.peek(), "after end of λ-term")
        return term

    def peek(self):
        return self.tokens[self.idx] if self.idx < len(self.tokens) else None

    def consume(self, expected=None):
        token = self.peek()
        if token is None:
            expected = f"'{expected}'" if expected else "more tokens"
            raise ParseError("'{}' ended unexpectedly: expected {}", (self.display_expr, expected),
                             start=max(len(self.display_expr) - 1, 0))
        if expected is not None and token.kind != expected:
            self.unexpected(token, f"(expected '{expected}')")
        self.idx += 1
        return token

    def unexpected(self, token, context):
        start = _display_pos(self.expr, token.pos)
        value = f"<{token.value}>" if token.kind == "tag" else token.value
        raise ParseError("'{}' has unexpected token '{}' at position {} {}",
                         (self.display_expr, value, start, context), start=start, end=start + len(token.value))

    def parse_sequence(self):
        """<sequence> ::= <term>+, folded into left-associative Applications."""
        left = self.parse_term()
        while self.peek() is not None and self.peek().kind not in (")", "."):
            right = self.parse_term()
            left = Application(left, right)
        return left

    def parse_term(self):
        token = self.peek()
        if token is None:
            self.consume()  # raises

        if token.kind == "lambda":
            return self.parse_abstraction()

        if token.kind == "(":
            self.consume("(")
            tag = self.consume("tag").value if self.peek() is not None and self.peek().kind == "tag" else None
            term = self.parse_sequence()
            self.consume(")")
            return term.copy(tag=tag) if tag else term

        if token.kind == "ident":
            return Variable(self.consume().value)

        self.unexpected(token, "(expected a variable, λ-abstraction or parenthesized λ-term)")

    def parse_abstraction(self):
        """<binder> <ident> "." <sequence>"""
        self.consume("lambda")

        param = self.peek()
        if param is None or param.kind != "ident":
            found = param.value if param is not None else "end of input"
            start = _display_pos(self.expr, param.pos) if param is not None else len(self.display_expr)
            raise ParseError("'{}' has invalid parameter name: expected variable after 'λ' but found '{}'",
                             (self.display_expr, found), start=start, end=start + 1)
        if not IDENTIFIER.match(param.value):
            start = _display_pos(self.expr, param.pos)
            raise ParseError("'{}' has invalid parameter name syntax '{}'", (self.display_expr, param.value),
                             start=start, end=start + len(param.value))
        self.consume()

        self.consume(".")
        body = self.parse_sequence()
        return Abstraction(param.value, body)


def parse(expr, registry=None):
    """Parses surface syntax expr into a λ-term, expanding _NAME/_N references with registry (built-ins only if
    registry is None). Raises ParseError.
    """
    return Parser(expr, registry).parse()
