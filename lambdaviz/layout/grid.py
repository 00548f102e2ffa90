"""Grids the Tromp layout draws on. Both implement the same five primitives:

```
drawl   lambda bar          ───
drawv   variable wire        │
drawfl  forward L            ┌  (down the left column, across to the right one)
drawbl  backward L           ┐  (across the bottom, up the right column)
drawu   U                   ┌┐  (down the left column, across, up the right column)
```

Arguments are grid rows and columns. A CollectingGrid draws cell centered: column c is at x = c + 0.5 and row r at
y = r + 0.5, so every stroke stays inside a grid of the size the layout reports.
"""

from dataclasses import dataclass
from typing import Optional, Tuple

BAR_OVERHANG = 1 / 3
MIN_BAR_LENGTH = 0.2

PRIMARY = "primary"
SECONDARY = "secondary"


def _x(col):
    return col + 0.5


def _y(row):
    return row + 0.5


@dataclass
class Stroke:
    """A line ("bar", "wire") or elbow ("fl", "bl", "u") in grid units.

    primary:   the stroke is part of the active redex
    secondary: the stroke belongs to the argument about to be substituted
    """
    kind: str
    key: str
    points: Tuple[Tuple[float, float], ...]
    tag: Optional[str] = None
    title: Optional[str] = None
    primary: bool = False
    secondary: bool = False

    @property
    def svg_type(self):
        return "line" if len(self.points) == 2 else "polyline"

    @property
    def svg_points(self):
        return " ".join(f"{x},{y}" for x, y in self.points)

    def vertical_segments(self):
        """Segments of this stroke that are a variable's wire."""
        if self.kind == "bar":
            return []
        return [(start, end) for start, end in zip(self.points, self.points[1:]) if start[0] == end[0]]


class NullGrid:
    """Discards everything. Used to measure a layout before drawing it."""

    def drawl(self, r, cstart, cend, name=None, tag=None, highlight=None):
        pass

    def drawv(self, rstart, rend, c, tag=None, highlight=None):
        pass

    def drawfl(self, rstart, rend, cstart, cend, tag=None, highlight=None):
        pass

    def drawbl(self, rstart, rend, cstart, cend, tag=None, highlight=None):
        pass

    def drawu(self, rstart, rend, rback, cstart, cend, tag=None, highlight=None):
        pass


class CollectingGrid(NullGrid):
    """Records every primitive as a Stroke. Keys are unique within one grid."""

    def __init__(self, scale):
        self.scale = scale
        self.strokes = []
        self._key = 0

    def _add(self, kind, points, tag, highlight, title=None):
        self.strokes.append(Stroke(kind, f"tromp-elem-{self._key}", tuple(points), tag, title,
                                   primary=highlight == PRIMARY, secondary=highlight == SECONDARY))
        self._key += 1

    def drawl(self, r, cstart, cend, name=None, tag=None, highlight=None):
        start, end = _x(cstart) - BAR_OVERHANG, _x(cend) + BAR_OVERHANG
        if cend < cstart:
            start, end = _x(cstart), _x(cstart) + MIN_BAR_LENGTH
        self._add("bar", [(start, _y(r)), (end, _y(r))], tag, highlight, title=name)

    def drawv(self, rstart, rend, c, tag=None, highlight=None):
        self._add("wire", [(_x(c), _y(rstart)), (_x(c), _y(rend))], tag, highlight)

    def drawfl(self, rstart, rend, cstart, cend, tag=None, highlight=None):
        points = [(_x(cstart), _y(rstart)), (_x(cstart), _y(rend)), (_x(cend), _y(rend))]
        self._add("fl", points, tag, highlight)

    def drawbl(self, rstart, rend, cstart, cend, tag=None, highlight=None):
        points = [(_x(cstart), _y(rend)), (_x(cend), _y(rend)), (_x(cend), _y(rstart))]
        self._add("bl", points, tag, highlight)

    def drawu(self, rstart, rend, rback, cstart, cend, tag=None, highlight=None):
        points = [(_x(cstart), _y(rstart)), (_x(cstart), _y(rend)), (_x(cend), _y(rend)), (_x(cend), _y(rback))]
        self._add("u", points, tag, highlight)
