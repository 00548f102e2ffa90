"""Pure lambda calculus term model.

```
<λ-term> ::= <variable>                 ; Variable
           | "λ" <variable> "." <λ-term> ; Abstraction
           | <λ-term> <λ-term>           ; Application, associating by left: abcd = (((a b) c) d)
```

Terms are immutable: every transformation (reduction, substitution, tagging) builds new nodes with fresh
identities. Since nothing mutates a node once it is constructed, untouched children may be shared between an old
tree and the tree derived from it.
"""

from abc import ABC, abstractmethod


class NodeIds:
    """Process-wide source of node identities. Wraps past LIMIT; identities only need to be unique within the
    trees alive during one render.
    """
    LIMIT = 10 ** 7

    def __init__(self):
        self._next = 0

    def __call__(self):
        if self._next > NodeIds.LIMIT:
            self._next = 0
        node_id = f"node-{self._next}"
        self._next += 1
        return node_id


generate_node_id = NodeIds()


class LambdaTerm(ABC):
    """Superclass of the three λ-term variants.

    id:       identity of this node, fresh for every constructed node
    tag:      origin tag naming the registry entry this node was expanded from (e.g. "_PLUS" or "_2")
    is_redex: transient highlight marker, set only by reducer.mark_redex
    """
    kind = None

    def __init__(self, tag=None, is_redex=False):
        self.id = generate_node_id()
        self.tag = tag
        self.is_redex = is_redex

    @property
    @abstractmethod
    def nodes(self):
        """Children of this node, left to right."""

    @abstractmethod
    def copy(self, **changes):
        """Returns a new node with a fresh identity. Fields not given in changes are carried over (children are
        shared, not cloned).
        """

    def clone(self):
        """Deep copy of this subtree with fresh identities for every node."""
        return self.copy(**{name: node.clone() for name, node in self.child_fields().items()})

    def child_fields(self):
        return {}

    def walk(self):
        """Yields every node of this subtree, pre-order."""
        stack = [self]
        while stack:
            node = stack.pop()
            yield node
            stack.extend(reversed(node.nodes))

    def size(self):
        return sum(1 for _ in self.walk())

    def alpha_equals(self, other):
        """Whether or not two terms are alpha-equivalent, decided by canonical printing."""
        from lambdaviz.pure.printer import print_term

        canonical = dict(canonical=True, numerals=False)
        return isinstance(other, LambdaTerm) and print_term(self, **canonical) == print_term(other, **canonical)

    def __str__(self):
        from lambdaviz.pure.printer import print_term

        return print_term(self)

    def __repr__(self):
        return f"{type(self).__name__}('{self}')"


class Variable(LambdaTerm):
    """Variable in lambda calculus: a bound or free occurrence of a name."""
    kind = "variable"

    def __init__(self, name, tag=None, is_redex=False):
        super().__init__(tag, is_redex)
        self.name = name

    @property
    def nodes(self):
        return []

    def copy(self, **changes):
        return Variable(changes.get("name", self.name), changes.get("tag", self.tag),
                        changes.get("is_redex", self.is_redex))


class Abstraction(LambdaTerm):
    """Abstraction λparam.body. body is owned exclusively by this node."""
    kind = "lambda"

    def __init__(self, param, body, tag=None, is_redex=False):
        super().__init__(tag, is_redex)
        self.param = param
        self.body = body

    @property
    def nodes(self):
        return [self.body]

    def child_fields(self):
        return {"body": self.body}

    def copy(self, **changes):
        return Abstraction(changes.get("param", self.param), changes.get("body", self.body),
                           changes.get("tag", self.tag), changes.get("is_redex", self.is_redex))


class Application(LambdaTerm):
    """Application func arg. Both children are owned exclusively by this node."""
    kind = "application"

    def __init__(self, func, arg, tag=None, is_redex=False):
        super().__init__(tag, is_redex)
        self.func = func
        self.arg = arg

    @property
    def nodes(self):
        return [self.func, self.arg]

    def child_fields(self):
        return {"func": self.func, "arg": self.arg}

    def copy(self, **changes):
        return Application(changes.get("func", self.func), changes.get("arg", self.arg),
                           changes.get("tag", self.tag), changes.get("is_redex", self.is_redex))

    @property
    def is_reducible(self):
        """An Application is a redex if its left child is an Abstraction."""
        return isinstance(self.func, Abstraction)
