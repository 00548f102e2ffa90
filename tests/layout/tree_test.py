import unittest

from lambdaviz.layout.tree import (ERROR_CANVAS, HORIZONTAL_SPACING, MIN_CANVAS_HEIGHT, MIN_CANVAS_WIDTH, NODE_HEIGHT,
                                   PADDING, VERTICAL_SPACING, layout_tree)
from lambdaviz.pure.lexical import parse
from lambdaviz.pure.reducer import locate_next_redex, mark_redex
from lambdaviz.pure.term import Application, Variable


class TreeLayoutTestCase(unittest.TestCase):

    def test_empty(self):
        layout = layout_tree(None)
        self.assertEqual((layout.nodes, layout.connectors, layout.error), ([], [], None))

    def test_error(self):
        layout = layout_tree("λx.x")
        self.assertTrue(layout.error.startswith("Layout Error:"))
        self.assertEqual((layout.nodes, layout.connectors), ([], []))
        self.assertEqual((layout.canvas_width, layout.canvas_height), ERROR_CANVAS)

    def test_malformed_node(self):
        layout = layout_tree(Application(Variable(None), Variable("y")))
        self.assertTrue(layout.error.startswith("Layout Error:"))
        self.assertEqual((layout.canvas_width, layout.canvas_height), ERROR_CANVAS)

    def test_geometry(self):
        layout = layout_tree(parse("(λx.x) y"))
        app, lam, var_x, var_y = layout.nodes
        self.assertEqual([node.type for node in layout.nodes], ["application", "lambda", "variable", "variable"])
        self.assertEqual([node.text for node in layout.nodes], ["@", "λx.", "x", "y"])
        self.assertEqual(len(layout.connectors), 3)

        self.assertEqual(min(node.x for node in layout.nodes), PADDING)
        self.assertEqual(app.y, PADDING)
        self.assertEqual(lam.y, PADDING + NODE_HEIGHT + VERTICAL_SPACING)
        self.assertEqual(var_y.y, lam.y)
        self.assertEqual(var_x.y, lam.y + NODE_HEIGHT + VERTICAL_SPACING)

        # children side by side, parent centered over their span
        self.assertEqual(var_y.x, lam.x + lam.width + HORIZONTAL_SPACING)
        self.assertEqual(app.x + app.width / 2, (lam.x + var_y.x + var_y.width) / 2)
        self.assertEqual(var_x.x + var_x.width / 2, lam.x + lam.width / 2)

        self.assertEqual(layout.canvas_width, MIN_CANVAS_WIDTH)
        self.assertEqual(layout.canvas_height, var_x.y + var_x.height + PADDING)

    def test_connectors(self):
        layout = layout_tree(parse("(λx.x) y"))
        by_svg_id = {node.svg_id: node for node in layout.nodes}
        for connector in layout.connectors:
            parent, child = by_svg_id[connector.from_id], by_svg_id[connector.to_id]
            self.assertEqual((connector.x1, connector.y1), (parent.x + parent.width / 2, parent.y + parent.height))
            self.assertEqual((connector.x2, connector.y2), (child.x + child.width / 2, child.y))
            self.assertEqual(connector.path, f"M {connector.x1} {connector.y1} L {connector.x2} {connector.y2}")

    def test_unique_ids(self):
        layout = layout_tree(parse("(λx.x x) (λx.x x)"))
        ids = [node.svg_id for node in layout.nodes] + [connector.id for connector in layout.connectors]
        self.assertEqual(len(ids), len(set(ids)))
        self.assertEqual(len(layout.nodes), 9)
        self.assertEqual(len(layout.connectors), 8)

    def test_highlight(self):
        marked, redex_id = mark_redex(parse("(λx.x) y"))
        layout = layout_tree(marked, redex_id)
        self.assertEqual([node.is_highlighted for node in layout.nodes], [True, True, False, False])
        self.assertEqual(sum(connector.is_highlighted for connector in layout.connectors), 1)

        term = parse("a ((λx.x) b)")
        layout = layout_tree(term, locate_next_redex(term))
        highlighted = [node for node in layout.nodes if node.is_highlighted]
        self.assertEqual([node.id for node in highlighted], [term.arg.id])
        self.assertEqual(sum(connector.is_highlighted for connector in layout.connectors), 1)

    def test_no_highlight(self):
        layout = layout_tree(parse("λx.x y"))
        self.assertFalse(any(node.is_highlighted for node in layout.nodes))
        self.assertFalse(any(connector.is_highlighted for connector in layout.connectors))

    def test_tags(self):
        layout = layout_tree(parse("_ID y"))
        self.assertEqual([node.tag for node in layout.nodes], [None, "_ID", None, None])

    def test_minimum_canvas(self):
        layout = layout_tree(parse("x"))
        self.assertEqual((layout.canvas_width, layout.canvas_height), (MIN_CANVAS_WIDTH, MIN_CANVAS_HEIGHT))

    def test_wide_names(self):
        narrow = layout_tree(parse("x")).nodes[0]
        wide = layout_tree(parse("a_very_long_variable_name")).nodes[0]
        self.assertGreater(wide.width, narrow.width)


if __name__ == '__main__':
    unittest.main()
