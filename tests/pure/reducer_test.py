import unittest

from lambdaviz.lang.error import ReductionError, StepLimitExceeded
from lambdaviz.pure.lexical import parse
from lambdaviz.pure.printer import print_term
from lambdaviz.pure.reducer import (NORMAL_FORM, STEP_LIMIT, Freshener, alpha_convert, free_variables,
                                    locate_next_redex, mark_redex, normalize, reduce_step, substitute)
from lambdaviz.pure.term import Abstraction, Application, Variable


class SubstitutionTestCase(unittest.TestCase):

    def test_free_variables(self):
        cases = {"x": {"x"}, "λx.x": set(), "λx.x y z": {"y", "z"}, "(λx.x) x": {"x"}, "λx.λy.x y": set()}
        for case, result in cases.items():
            self.assertEqual(free_variables(parse(case)), result, case)

    def test_substitute(self):
        cases = {
            ("x", "x", "y"): "y",
            ("z", "x", "y"): "z",
            ("λx.x", "x", "y"): "λx.x",           # shadowed
            ("λz.x z", "x", "y"): "λz.y z",
            ("x x", "x", "λa.a"): "(λa.a) (λa.a)",
        }
        for (body, name, replacement), result in cases.items():
            self.assertEqual(print_term(substitute(parse(body), name, parse(replacement))), result)

    def test_capture_avoidance(self):
        result = substitute(parse("λy.x y"), "x", parse("y"))
        self.assertEqual(print_term(result), "λy0.y y0")
        self.assertEqual(free_variables(result), {"y"})

        result = reduce_step(parse("(λx.λy.x) y")).result
        self.assertEqual(print_term(result), "λy0.y")
        self.assertEqual(free_variables(result), {"y"})

    def test_fresh_names_avoid_body(self):
        result = substitute(parse("λy.x y0"), "x", parse("y"))
        self.assertEqual(print_term(result), "λy1.y y0")

    def test_freshener(self):
        freshener = Freshener()
        self.assertEqual(freshener.fresh("x", {"x0", "x1"}), "x2")
        self.assertEqual(freshener.fresh("x", set()), "x3")

    def test_alpha_convert(self):
        term = alpha_convert(parse("λx.x (λx.x) y"), "z")
        self.assertEqual(print_term(term), "λz.(z (λx.x)) y")

    def test_input_untouched(self):
        body = parse("λy.x y")
        before = [(node.id, str(node)) for node in body.walk()]
        substitute(body, "x", parse("y"))
        self.assertEqual([(node.id, str(node)) for node in body.walk()], before)


class ReduceStepTestCase(unittest.TestCase):

    def test_reduce_step(self):
        cases = {
            "(λx.x) y": "y",
            "(λx.z) ((λx.x x) (λx.x x))": "z",            # argument is not reduced first
            "λa.(λx.x) a": "λa.a",
            "((λx.x) (λy.y)) ((λz.z) w)": "(λy.y) ((λz.z) w)",
            "a ((λx.x) b)": "a b",
            "(λf.f f) (λx.x)": "(λx.x) (λx.x)",
        }
        for case, result in cases.items():
            step = reduce_step(parse(case))
            self.assertTrue(step.changed, case)
            self.assertEqual(print_term(step.result), result, case)

    def test_normal_form(self):
        for case in ["x", "λx.x", "a b", "λx.x (λy.y)", "x (λy.y z)"]:
            term = parse(case)
            step = reduce_step(term)
            self.assertFalse(step.changed, case)
            self.assertIsNone(step.redex_id)
            self.assertTrue(step.result.alpha_equals(term), case)
            self.assertEqual(print_term(step.result), print_term(term))

    def test_redex_id(self):
        for case in ["(λx.x) y", "a ((λx.x) b)", "λa.(λx.x) a", "((λx.x) (λy.y)) ((λz.z) w)"]:
            term = parse(case)
            self.assertEqual(reduce_step(term).redex_id, locate_next_redex(term), case)

    def test_fresh_identities(self):
        term = parse("(λx.x) (λy.y)")
        step = reduce_step(term)
        self.assertFalse({node.id for node in term.walk()} & {node.id for node in step.result.walk()})

        normal = parse("λx.x")
        self.assertNotEqual(reduce_step(normal).result.id, normal.id)

    def test_tags(self):
        result = reduce_step(parse("(λx.x) _TRUE")).result
        self.assertEqual(result.tag, "_TRUE")  # closed named term moves intact

        result = reduce_step(parse("_ID y")).result
        self.assertIsNone(result.tag)

        result = reduce_step(parse("λz._ID ((λx.x) z)")).result
        self.assertIsNone(result.tag)
        self.assertIsNone(result.body.tag)  # rewritten path loses its tags

    def test_not_a_term(self):
        self.assertRaises(ReductionError, reduce_step, "λx.x")

    def test_too_deep(self):
        # λf.λx.f (f (... ((λy.y) x))), built without the recursive parser
        body = Application(Abstraction("y", Variable("y")), Variable("x"))
        for _ in range(3000):
            body = Application(Variable("f"), body)
        term = Abstraction("f", Abstraction("x", body))

        with self.assertRaises(ReductionError) as context:
            reduce_step(term)
        self.assertIn("too deeply nested", context.exception.plain)
        self.assertFalse(context.exception.pointable)

    def test_locate_next_redex(self):
        self.assertIsNone(locate_next_redex(parse("λx.x y")))

        term = parse("a ((λx.x) b)")
        self.assertEqual(locate_next_redex(term), term.arg.id)

        term = parse("((λx.x) a) ((λy.y) b)")
        self.assertEqual(locate_next_redex(term), term.func.id)

    def test_mark_redex(self):
        marked, redex_id = mark_redex(parse("(λx.x) y"))
        self.assertEqual(redex_id, marked.id)
        self.assertTrue(marked.is_redex)
        self.assertTrue(marked.func.is_redex)
        self.assertFalse(marked.arg.is_redex)
        self.assertFalse(marked.func.body.is_redex)

        marked, redex_id = mark_redex(parse("λx.x"))
        self.assertIsNone(redex_id)
        self.assertFalse(any(node.is_redex for node in marked.walk()))

        remarked, _ = mark_redex(reduce_step(parse("(λx.(λy.y) x) z")).result)
        self.assertEqual(sum(node.is_redex for node in remarked.walk()), 2)


class NormalizeTestCase(unittest.TestCase):

    def test_normalize(self):
        cases = {
            "(λx.x) y": "y",
            "(λx.λy.x) a ((λz.z z) (λz.z z))": "a",
            "_AND _TRUE _FALSE": "λx.λy.y",
            "_NOT _FALSE": "λx.λy.x",
            "_SUCC _1": "λf.λx.f (f x)",
        }
        for case, result in cases.items():
            reduction = normalize(parse(case))
            self.assertEqual(reduction.status, NORMAL_FORM, case)
            self.assertTrue(reduction.result.alpha_equals(parse(result)), case)

    def test_idempotent(self):
        result = normalize(parse("_MULT _2 _2")).result
        again = normalize(result)
        self.assertEqual(again.steps, 0)
        self.assertEqual(print_term(again.result, canonical=True), print_term(result, canonical=True))

    def test_arithmetic(self):
        five = normalize(parse("_5")).result
        cases = ["_PLUS _2 _3", "_SUCC _4", "_PLUS _5 _0"]
        for case in cases:
            result = normalize(parse(case)).result
            self.assertEqual(print_term(result, canonical=True, numerals=False),
                             print_term(five, canonical=True, numerals=False), case)

        result = normalize(parse("_POW _2 _3")).result
        self.assertTrue(result.alpha_equals(normalize(parse("_8")).result))

    def test_confluence(self):
        # normal order against reducing the argument first by hand
        by_normal_order = normalize(parse("(λx.x x) ((λy.y) z)")).result
        by_argument_first = normalize(parse("(λx.x x) z")).result
        self.assertTrue(by_normal_order.alpha_equals(by_argument_first))
        self.assertEqual(print_term(by_normal_order), "z z")

        term = parse("(λx.λy.x y) (λz.z) w")
        after_one = reduce_step(term)
        self.assertTrue(after_one.changed)
        self.assertEqual(print_term(normalize(after_one.result).result), "w")
        self.assertEqual(print_term(normalize(term).result), "w")

    def test_step_limit(self):
        for case in ["(λx.x x) (λx.x x)", "_Y (λx.x)"]:
            reduction = normalize(parse(case), max_steps=25)
            self.assertEqual(reduction.status, STEP_LIMIT, case)
            self.assertTrue(reduction.limit_exceeded)
            self.assertEqual(reduction.steps, 25)
            self.assertRaises(StepLimitExceeded, reduction.raise_for_limit)

    def test_exact_ceiling(self):
        reduction = normalize(parse("(λx.x) ((λy.y) z)"), max_steps=2)
        self.assertEqual(reduction.status, NORMAL_FORM)
        self.assertEqual(reduction.steps, 2)
        reduction.raise_for_limit()

    def test_history(self):
        reduction = normalize(parse("(λx.x) ((λy.y) z)"))
        self.assertEqual([print_term(term) for term in reduction.terms], ["(λx.x) ((λy.y) z)", "(λy.y) z", "z"])


if __name__ == '__main__':
    unittest.main()
