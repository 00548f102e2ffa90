"""Tree layout: positions every node of a λ-term as a box, with straight connectors from parents to children.

Every subtree is laid out in its own block whose left edge is x = 0. A parent is centered over the blocks of its
children, which are then translated rigidly into the parent's block. Once the whole tree is done, the drawing is
moved so its bounding box starts at PADDING.
"""

import itertools
from dataclasses import dataclass, field
from typing import List, Optional

from lambdaviz.lang.error import LayoutError
from lambdaviz.pure.term import Abstraction, Application, Variable

MIN_NODE_WIDTH = 30
NODE_WIDTH = 50
NODE_HEIGHT = 40
HORIZONTAL_SPACING = 25
VERTICAL_SPACING = 60
TEXT_PADDING = 5
CHAR_WIDTH_ESTIMATE = 8
PADDING = 30

MIN_CANVAS_WIDTH = 200
MIN_CANVAS_HEIGHT = 100
ERROR_CANVAS = (300, 100)


@dataclass
class TreeNode:
    """Box of one λ-term node. id is the λ-term node's identity, svg_id is unique within one layout."""
    id: str
    svg_id: str
    type: str
    x: float
    y: float
    width: float
    height: float
    is_highlighted: bool = False
    tag: Optional[str] = None
    name: Optional[str] = None   # variables
    param: Optional[str] = None  # abstractions

    @property
    def text(self):
        if self.type == "variable":
            return self.name
        if self.type == "lambda":
            return f"λ{self.param}."
        return "@"


@dataclass
class Connector:
    """Straight line from the bottom-center of box from_id to the top-center of box to_id (svg ids)."""
    id: str
    from_id: str
    to_id: str
    x1: float
    y1: float
    x2: float
    y2: float
    is_highlighted: bool = False

    @property
    def path(self):
        return f"M {self.x1} {self.y1} L {self.x2} {self.y2}"


@dataclass
class TreeLayout:
    nodes: List[TreeNode] = field(default_factory=list)
    connectors: List[Connector] = field(default_factory=list)
    canvas_width: float = 0
    canvas_height: float = 0
    error: Optional[str] = None


class _Block:
    """Nodes and connectors of one laid-out subtree, in coordinates local to the subtree."""

    def __init__(self, root, width):
        self.root = root
        self.width = width
        self.nodes = [root]
        self.connectors = []

    def shift(self, dx):
        """Translates every node and connector endpoint of this block by dx."""
        for node in self.nodes:
            node.x += dx
        for connector in self.connectors:
            connector.x1 += dx
            connector.x2 += dx

    def absorb(self, child, dx):
        child.shift(dx)
        self.nodes.extend(child.nodes)
        self.connectors.extend(child.connectors)


def _text_width(text):
    return len(text) * CHAR_WIDTH_ESTIMATE + 2 * TEXT_PADDING


class _TreeLayouter:

    def __init__(self, highlight_id):
        self.highlight_id = highlight_id
        self.ids = itertools.count()

    def svg_id(self, kind):
        return f"svg-{kind}-{next(self.ids)}"

    def box(self, term, width, y):
        return TreeNode(term.id, self.svg_id(term.kind), term.kind, 0, y, width, NODE_HEIGHT,
                        is_highlighted=term.id == self.highlight_id or term.is_redex, tag=term.tag,
                        name=getattr(term, "name", None), param=getattr(term, "param", None))

    def on_redex_path(self, parent, child):
        """Whether the edge parent -> child is part of the highlighted redex."""
        if parent.id != self.highlight_id:
            return False
        return child.is_redex or (isinstance(parent, Application) and child is parent.func and parent.is_reducible)

    def connect(self, block, parent, child, child_block):
        top, bottom = block.root, child_block.root
        block.connectors.append(Connector(
            self.svg_id("connector"), top.svg_id, bottom.svg_id,
            top.x + top.width / 2, top.y + top.height, bottom.x + bottom.width / 2, bottom.y,
            is_highlighted=self.on_redex_path(parent, child),
        ))

    def layout(self, term, y):
        child_y = y + NODE_HEIGHT + VERTICAL_SPACING

        if isinstance(term, Variable):
            width = max(MIN_NODE_WIDTH, _text_width(term.name))
            return _Block(self.box(term, width, y), width)

        if isinstance(term, Abstraction):
            width = max(NODE_WIDTH, _text_width(f"λ{term.param}."))
            body = self.layout(term.body, child_y)

            block = _Block(self.box(term, width, y), max(width, body.width))
            block.root.x = (block.width - width) / 2
            block.absorb(body, (block.width - body.width) / 2)
            self.connect(block, term, term.body, body)
            return block

        if isinstance(term, Application):
            width = max(MIN_NODE_WIDTH, _text_width("@"))
            func = self.layout(term.func, child_y)
            arg = self.layout(term.arg, child_y)

            span = func.width + HORIZONTAL_SPACING + arg.width
            block = _Block(self.box(term, width, y), max(width, span))
            block.root.x = (block.width - width) / 2
            offset = (block.width - span) / 2
            block.absorb(func, offset)
            block.absorb(arg, offset + func.width + HORIZONTAL_SPACING)
            self.connect(block, term, term.func, func)
            self.connect(block, term, term.arg, arg)
            return block

        raise LayoutError("cannot lay out '{}': not a λ-term", repr(term), diagnosis=False)


def layout_tree(term, highlight_id=None):
    """Positions every node of term. Nodes and connectors whose parent has identity highlight_id are marked as part
    of the active redex. Never raises: a failed layout comes back with empty geometry and error set.
    """
    if term is None:
        return TreeLayout()

    try:
        block = _TreeLayouter(highlight_id).layout(term, 0)
    except Exception as error:  # a failed layout is reported in .error, never raised
        width, height = ERROR_CANVAS
        return TreeLayout(canvas_width=width, canvas_height=height, error=f"Layout Error: {error}")

    min_x = min(node.x for node in block.nodes)
    max_x = max(node.x + node.width for node in block.nodes)
    min_y = min(node.y for node in block.nodes)
    max_y = max(node.y + node.height for node in block.nodes)

    dx, dy = PADDING - min_x, PADDING - min_y
    for node in block.nodes:
        node.x += dx
        node.y += dy
    for connector in block.connectors:
        connector.x1 += dx
        connector.x2 += dx
        connector.y1 += dy
        connector.y2 += dy

    return TreeLayout(
        nodes=block.nodes,
        connectors=block.connectors,
        canvas_width=max(MIN_CANVAS_WIDTH, max_x - min_x + 2 * PADDING),
        canvas_height=max(MIN_CANVAS_HEIGHT, max_y - min_y + 2 * PADDING),
    )
