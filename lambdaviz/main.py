"""Runs .lc files or single λ-terms through lambdaviz, or starts command-line mode. Also uses error handling context
manager. Called from the lambdaviz console script.

Python version must be >=3.7, because error handling requires that dicts are insertion-ordered.
"""

import argparse
import sys

from lambdaviz.lang.error import ErrorHandler
from lambdaviz.lang.session import Session
from lambdaviz.lang.shell import Shell
from lambdaviz.layout.tromp import DEFAULT_SCALE


def positive(text):
    value = int(text)
    if value < 1:
        raise argparse.ArgumentTypeError(f"'{text}' is not a positive integer")
    return value


def build_parser():
    parser = argparse.ArgumentParser(prog="lambdaviz", description="Step-by-step λ-calculus reduction.")
    parser.add_argument("file", help="file to run (if empty and no -e, goes to command-line mode)", nargs="?")
    parser.add_argument("-e", "--expr", help="λ-term to reduce (after the file's definitions, if any)")
    parser.add_argument("--max-steps", type=positive, default=Session.MAX_STEPS,
                        help=f"reduction step ceiling (default: {Session.MAX_STEPS})")
    parser.add_argument("--steps", action="store_true", help="print every intermediate term")
    parser.add_argument("--tree", action="store_true", help="print the tree layout of -e's term as JSON")
    parser.add_argument("--tromp", action="store_true", help="print the Tromp diagram layout of -e's term as JSON")
    parser.add_argument("--scale", type=positive, default=DEFAULT_SCALE,
                        help=f"Tromp diagram pixels per grid unit (default: {DEFAULT_SCALE})")
    parser.add_argument("--structural", action="store_true", help="prettify by matching whole subterms")
    parser.add_argument("--raw", action="store_true", help="print results as written instead of prettified")
    return parser


def report(sess, result, args):
    if args.steps:
        for step_num, term in enumerate(result.reduction.terms):
            print(f"{step_num}: {sess.show(term)}")
    print(sess.show(result.reduction.result) if args.raw else result.pretty)


def main(argv=None):
    """Runs lambdaviz. Called from the lambdaviz console script."""
    assert sys.version_info >= (3, 7), "lambdaviz cannot be run with python < 3.7"

    args = build_parser().parse_args(argv)

    with ErrorHandler() as error_handler:
        cmd_line = args.file is None and args.expr is None
        path = args.file if args.file is not None else Session.SH_FILE
        sess = Session(error_handler, path, cmd_line=cmd_line, max_steps=args.max_steps,
                       structural=args.structural)

        if cmd_line:
            Shell(sess).cmdloop()
            return

        sess.run()
        while sess.results:
            report(sess, sess.pop(), args)

        if args.expr is not None:
            report(sess, sess.execute(args.expr), args)

            if args.tree or args.tromp:
                sess.load(args.expr)
            if args.tree:
                print(sess.dump(sess.tree()))
            if args.tromp:
                print(sess.dump(sess.tromp(args.scale)))


if __name__ == "__main__":
    main()
