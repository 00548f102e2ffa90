"""Error reporting for lambdaviz.

The pure modules (parser, reducer, printer, layouts) only raise GenericException subclasses; printing happens here,
in ErrorHandler. Anything else that makes it all the way to ErrorHandler is reported as an internal error.
"""

import sys

from termcolor import colored


def bold(text, color=None):
    return colored(text, color, attrs=["bold"])


class GenericException(Exception):
    """Base of every lambdaviz error and warning.

    msg is a str.format template filled from exprs. In the colored message (the msg attribute) the substituted
    snippets are bold; plain holds the same message without color. exprs[0] is the offending expression, and
    [start, end) the span of it a diagnosis points at.
    """

    def __init__(self, msg, exprs=None, start=0, end=-1, diagnosis=True, internal=False):
        snippets = [exprs] if isinstance(exprs, str) else list(exprs or ())
        self.plain = msg.format(*snippets)
        self.msg = msg.format(*(bold(str(snippet)) for snippet in snippets))
        self.expr = str(snippets[0]) if snippets else ""
        self.start = start
        self.end = len(self.expr) if end == -1 else end
        self.diagnosis = diagnosis
        self.internal = internal

        super().__init__(self.plain)

    @property
    def pointable(self):
        """Whether or not a caret diagnosis can be drawn under expr."""
        return self.diagnosis and not self.internal and bool(self.expr)


class ParseError(GenericException):
    """Surface syntax could not be turned into a λ-term."""


class ReductionError(GenericException):
    """Malformed input reached the reducer."""


class LayoutError(GenericException):
    """Geometry could not be computed. Layouts catch this and return it as a structured error."""


class RegistrationError(GenericException):
    """A named term was rejected at registration time."""


class StepLimitExceeded(GenericException):
    """Full reduction stopped at the step ceiling before reaching a normal form."""


class ErrorHandler:
    """Context manager that reports lambdaviz errors instead of letting them propagate. A fatal handler exits after
    the first error; the interactive shell uses a non-fatal one and keeps going.

    traceback maps every registered file to the (line, line_num) being processed in it, or (None, None).
    """
    ERROR = "red"
    WARNING = "magenta"

    REPORTED = {
        KeyboardInterrupt: "keyboard interrupt",
        RecursionError: "λ-term is too deeply nested: maximum recursion depth exceeded",
    }

    def __init__(self, fatal=True, stream=None):
        self.fatal = fatal
        self.stream = sys.stdout if stream is None else stream
        self.traceback = {}  # insertion-ordered: outermost file first
        self.warnings = []

    def register_file(self, path):
        self.traceback[path] = (None, None)

    def register_line(self, path, line, line_num):
        """Marks line as the one being processed in path. Call before Session add/run so errors can point to it."""
        self.traceback[path] = (line, line_num)

    def remove_line(self, path):
        self.traceback[path] = (None, None)

    def active_lines(self):
        return [(path, line, line_num) for path, (line, line_num) in self.traceback.items() if line]

    @staticmethod
    def diagnose(error, warning=False):
        """error.expr with the offending span highlighted, and a caret underline of that span below it."""
        color = ErrorHandler.WARNING if warning else ErrorHandler.ERROR
        start, end = error.start, max(error.end, error.start + 1)

        marked = error.expr[:start] + bold(error.expr[start:end], color) + error.expr[end:]
        underline = " " * start + bold("^" + "~" * (end - start - 1), color)
        return f"  {marked}\n  {underline}"

    def _print(self, text):
        print(text, file=self.stream)

    def warn(self, *args, **kwargs):
        """Prints a warning and keeps it in self.warnings. Accepts a GenericException or its constructor args."""
        if len(args) == 1 and isinstance(args[0], GenericException):
            warning = args[0]
        else:
            warning = GenericException(*args, **kwargs)
        self.warnings.append(warning)

        location = "".join(bold(f"{path}:{line_num}: ") for path, _, line_num in self.active_lines()[:1])
        self._print(location + bold("warning: ", ErrorHandler.WARNING) + warning.msg)
        if warning.pointable:
            self._print(ErrorHandler.diagnose(warning, warning=True))

    def throw(self, error):
        """Prints error under the lines being processed when it was raised. Exits if fatal; otherwise forgets those
        lines so that the next statement starts clean.
        """
        active = self.active_lines()
        report = [f"  File '{path}', line {line_num}:\n    {line}" for path, line, line_num in active]
        if len(active) > 1:
            report.insert(0, "Traceback:")

        prefix = bold("[internal] ", ErrorHandler.ERROR) if error.internal else ""
        report.append(prefix + bold("error: ", ErrorHandler.ERROR) + error.msg)
        self._print("\n".join(report))
        if error.pointable:
            self._print(ErrorHandler.diagnose(error))

        if self.fatal:
            sys.exit(1)
        for path in self.traceback:
            self.remove_line(path)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        if exc_type is None:
            return True
        if exc_type is SystemExit:
            return False

        if issubclass(exc_type, GenericException):
            self.throw(exc_val)
        elif exc_type in ErrorHandler.REPORTED:
            self.throw(GenericException(ErrorHandler.REPORTED[exc_type], diagnosis=False))
        else:
            msg = "unknown error: '{}: {}'"
            self.throw(GenericException(msg, (exc_type.__name__, str(exc_val)), diagnosis=False, internal=True))
            return False  # let the original traceback through
        return True
