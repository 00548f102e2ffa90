import unittest

from lambdaviz.pure.lexical import parse
from lambdaviz.pure.printer import canonical_name, needs_parentheses, print_term
from lambdaviz.pure.term import Abstraction, Application, Variable


class PrinterTestCase(unittest.TestCase):

    def test_needs_parentheses(self):
        lam, app, var = parse("λx.x"), parse("a b"), Variable("x")
        should_pass = [(lam, "func"), (lam, "arg"), (app, "func"), (app, "arg")]
        for term, context in should_pass:
            self.assertTrue(needs_parentheses(term, context), (term, context))

        should_fail = [(lam, "body"), (lam, "top"), (app, "body"), (app, "top"), (var, "func"), (var, "arg")]
        for term, context in should_fail:
            self.assertFalse(needs_parentheses(term, context), (term, context))

    def test_as_written(self):
        term = Application(Abstraction("x", Application(Variable("x"), Variable("x"))), Variable("y"))
        self.assertEqual(print_term(term), "(λx.x x) y")
        self.assertEqual(print_term(term, "arg"), "((λx.x x) y)")
        self.assertEqual(print_term(Variable("x"), "arg"), "x")

    def test_canonical(self):
        cases = {
            "λx.λy.x": "λ@a.λ@b.@a",
            "λp.λq.p": "λ@a.λ@b.@a",
            "λx.y": "λ@a.y",
            "(λx.x) (λy.y)": "(λ@a.@a) (λ@b.@b)",
            "λx.λx.x": "λ@a.λ@b.@b",
            "λx.(λy.y) x": "λ@a.(λ@b.@b) @a",
            "(λx.x) x": "(λ@a.@a) x",
        }
        for case, result in cases.items():
            self.assertEqual(print_term(parse(case), canonical=True), result, case)

    def test_canonical_names(self):
        self.assertEqual(canonical_name(0), "@a")
        self.assertEqual(canonical_name(25), "@z")
        self.assertEqual(canonical_name(26), "@26")

        deep = Variable("v")
        for num in range(30):
            deep = Abstraction(f"v{num}", deep)
        printed = print_term(deep, canonical=True)
        self.assertTrue(printed.startswith("λ@a.λ@b."))
        self.assertIn("λ@29.v", printed)

    def test_alpha_equivalence(self):
        should_pass = [("λx.x", "λy.y"), ("λx.λy.x y", "λa.λb.a b"), ("_2", "λg.λz.g (g z)")]
        for left, right in should_pass:
            self.assertTrue(parse(left).alpha_equals(parse(right)), (left, right))

        should_fail = [("λx.λy.x", "λx.λy.y"), ("λx.y", "λx.z"), ("a b", "b a")]
        for left, right in should_fail:
            self.assertFalse(parse(left).alpha_equals(parse(right)), (left, right))

    def test_numeral_tags(self):
        self.assertEqual(print_term(parse("_2")), "_2")
        self.assertEqual(print_term(parse("f _2")), "f (_2)")
        self.assertEqual(print_term(parse("_12 f")), "(_12) f")
        self.assertEqual(print_term(parse("f _2"), numerals=False), "f (λf.λx.f (f x))")
        self.assertEqual(print_term(parse("_1"), canonical=True, numerals=False), "λ@a.λ@b.@a @b")

    def test_named_tags_print_structure(self):
        self.assertEqual(print_term(parse("_ID y")), "(λx.x) y")

    def test_atom(self):
        def atom(node):
            return "I" if isinstance(node, Abstraction) and print_term(node, canonical=True) == "λ@a.@a" else None

        self.assertEqual(print_term(parse("f (λy.y) z"), atom=atom), "(f (I)) z")

    def test_bad_context(self):
        self.assertRaises(ValueError, print_term, parse("x"), "nowhere")


if __name__ == '__main__':
    unittest.main()
