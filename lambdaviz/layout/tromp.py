"""Tromp diagram layout: draws a closed λ-term on an integer grid.

- an abstraction is a horizontal bar over the columns of its body, at the row where it is introduced
- a variable is a vertical wire from the row of its binder's bar down to its own row
- an application joins the wires of its function and argument with an elbow. An application in function position
  ("R": it still owes its right wire upward) draws ┌, one in argument position ("L": it owes its left wire) draws ┐,
  and one that owes nothing draws ┌┐

The layout runs twice over the same recursive function: once on a NullGrid to measure the term, once on a
CollectingGrid to draw it. Both passes share every line of geometry code, so they cannot disagree.

Source: https://tromp.github.io/cl/diagrams.html
"""

from collections import namedtuple
from dataclasses import dataclass, field
from typing import List, Optional

from lambdaviz.lang.error import LayoutError
from lambdaviz.layout.grid import PRIMARY, SECONDARY, CollectingGrid, NullGrid, Stroke
from lambdaviz.pure.term import Abstraction, Application, Variable

DEFAULT_SCALE = 20

Binding = namedtuple("Binding", ["row", "tag"])      # row of a binder's bar, tag to draw its wires with
Point = namedtuple("Point", ["row", "col"])


@dataclass
class CircuitLayout:
    strokes: List[Stroke] = field(default_factory=list)
    grid_width: int = 0
    grid_height: int = 0
    pixel_width: float = 0
    pixel_height: float = 0
    error: Optional[str] = None

    @property
    def view_box(self):
        return f"0 0 {self.grid_width} {self.grid_height}"


class _Circuit:

    def __init__(self, grid, highlight_id=None):
        self.grid = grid
        self.highlight_id = highlight_id

    def draw(self, term, to_leave, row, col, links, tag=None, highlight=None):
        """Draws term with its top-left at (row, col). links maps each name in scope to its Binding and is never
        mutated. Returns (dimensions, leftover): dimensions is the Point just past the last row and column used,
        leftover is the Point the caller must connect to when to_leave is "L" or "R", else None.
        """
        if not isinstance(term, (Variable, Abstraction, Application)):
            raise LayoutError("cannot lay out '{}': not a λ-term", repr(term), diagnosis=False)
        tag = term.tag or tag

        if isinstance(term, Variable):
            binding = links.get(term.name)
            if binding is None:
                raise LayoutError("'{}' is a free variable: Tromp diagrams need closed λ-terms", term.name,
                                  diagnosis=False)
            if to_leave is None:
                self.grid.drawv(binding.row, row, col, binding.tag or tag, highlight)
                return Point(row + 1, col + 1), None
            return Point(row, col + 1), Point(binding.row, col)

        if isinstance(term, Abstraction):
            inner = {**links, term.param: Binding(row, tag)}
            dimensions, leftover = self.draw(term.body, to_leave, row + 1, col, inner, tag, highlight)
            self.grid.drawl(row, col, dimensions.col - 1, term.param, tag, highlight)
            return dimensions, leftover

        func_highlight = arg_highlight = highlight
        if term.id == self.highlight_id:
            highlight = func_highlight = PRIMARY
            arg_highlight = SECONDARY

        left, left_over = self.draw(term.func, "R", row, col, links, tag, func_highlight)
        right, right_over = self.draw(term.arg, "L", row, left.col, links, tag, arg_highlight)
        if left_over is None or right_over is None:
            raise LayoutError("application parts did not leave a connection", internal=True)

        bottom = max(left.row, right.row)
        dimensions = Point(bottom + 1, right.col)
        if to_leave == "L":
            self.grid.drawbl(right_over.row, bottom, left_over.col, right_over.col, tag, highlight)
            return dimensions, left_over
        if to_leave == "R":
            self.grid.drawfl(left_over.row, bottom, left_over.col, right_over.col, tag, highlight)
            return dimensions, right_over
        self.grid.drawu(left_over.row, bottom, right_over.row, left_over.col, right_over.col, tag, highlight)
        return dimensions, None


def layout_circuit(term, scale=DEFAULT_SCALE, highlight_id=None):
    """Strokes of the Tromp diagram of term in grid units, plus grid and pixel extents. Strokes of the application
    with identity highlight_id are marked primary, those of its argument secondary. Never raises: a failed layout
    (e.g. a free variable) comes back without strokes and with error set.
    """
    if term is None:
        return CircuitLayout()

    try:
        dimensions, _ = _Circuit(NullGrid(), highlight_id).draw(term, None, 0, 0, {})

        grid = CollectingGrid(scale)
        _Circuit(grid, highlight_id).draw(term, None, 0, 0, {})
    except Exception as error:  # a failed layout is reported in .error, never raised
        return CircuitLayout(error=f"Layout Error: {error}")

    width, height = max(1, dimensions.col), max(1, dimensions.row)
    return CircuitLayout(grid.strokes, width, height, width * scale, height * scale)
