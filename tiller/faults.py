"""
Tiller faults: the errors value resolution can surface, and how they look.

Taxonomy
- InvalidDataError (also a TypeError): the external parser handed over a raw
  value whose runtime type disagrees with the declared kind. An integration bug.
- InvalidEnvironmentValueError (also a ValueError): a bound environment
  variable holds a string the kind cannot accept. A user misconfiguration.
- MissingRequiredValueError: a required parameter resolved to nothing. Raised
  by the provider, which sees every parameter at once.
- ParameterExit: an ExceptionGroup of the above, raised once per process()
  cycle when faults were collected.

Every fault carries a message and free-form options (code, title, hint,
parameter, docs, ...) plus the runtime switches shell/fancy/colorful/deferred.
trigger(fault, **options) merges options in with copy.replace() and then
either raises the fault or, in shell mode, prints it with rich on stderr and
exits with status 1.

Host hooks read from __main__
- __prog__: program name in headers (defaults to the basename of argv[0]).
- __styles__: rich style overrides, keyed like the defaults below.
- __codes__: FaultCode -> label, to print friendlier codes.
- __docs__: FaultCode -> short documentation, see getdoc().
"""
import copy
import os.path
import sys
from collections import defaultdict
from enum import IntEnum
from types import MappingProxyType

from rich.console import Console, Group
from rich.panel import Panel
from rich.text import Text

from .utils import Unset, coalesce

console = Console(stderr=True)

_STYLES = MappingProxyType({
    "prog-name": "bold #E6E6F0",
    "code": "bold #00E5FF",
    "title": "bold #FF4DA6",
    "message": "#C8C8D0",
    "hint-arrow": "#9CE19C dim",
    "hint": "italic #9CE19C",
    "docs": "underline #00E5FF dim",
})


class FaultCode(IntEnum):
    """
    Stable numeric identifiers, grouped by the stage that fails.

    - 211xx: raw parser data.
    - 212xx: environment variables.
    - 213xx: checks run after every parameter resolved.
    """
    INVALID_DATA                = 21101
    INVALID_CHOICE_DATA         = 21102

    INVALID_ENVIRONMENT_VALUE   = 21201
    MALFORMED_ENVIRONMENT_LIST  = 21202

    MISSING_REQUIRED_VALUE      = 21301

    def normalize(self):
        """The host's label for this code (see __codes__), or the number as a string."""
        return str(getattr(__import__("__main__"), "__codes__", {}).get(self, self.value))


def _program():
    main = __import__("__main__")
    if hasattr(main, "__prog__"):
        return main.__prog__
    return os.path.basename(sys.argv[0]) if sys.argv and sys.argv[0] else "tiller"


def _painter(colorful):
    """
    Return text(fragment, style) building rich Text with the host's styles.

    Empty fragments render as empty Text; styles are dropped when not colorful.
    """
    styles = defaultdict(str, dict(_STYLES) | getattr(__import__("__main__"), "__styles__", {}))

    def text(fragment, style=""):
        if fragment is None or fragment == "":
            return Text("")
        if isinstance(fragment, Text):
            return fragment if colorful else Text(fragment.plain)
        return Text(str(fragment), styles[style] if colorful else "")

    return text


def _surfaceable(fault, /):
    return callable(getattr(fault, "__trigger__", None)) and callable(getattr(fault, "__replace__", None))


class ParameterException(Exception):
    """
    Base of every resolution fault.

    message is the one-line description (str(fault)); options hold the
    rendering context and runtime switches and are read-only.
    """

    def __init__(self, message=Unset, /, **options):
        assert isinstance(message, str | Unset)
        super().__init__(coalesce(message, ""))
        self.message = message
        self.options = MappingProxyType(options)

    def __rich__(self):
        text = _painter(self.options.get("colorful", True))
        code = self.options.get("code")

        header = Text.assemble(
            "[ ", text(_program(), "prog-name"),
            " — ", text(code.normalize() if code is not None else "", "code"),
            " | ", text(self.options.get("title", "error").title(), "title"), " ]",
        )
        body = [text(coalesce(self.message, ""), "message")]
        if self.options.get("hint"):
            body.append(Text.assemble(text(" → ", "hint-arrow"), text(self.options["hint"], "hint")))
        if self.options.get("docs"):
            body.append(text(self.options["docs"], "docs"))

        if not self.options.get("fancy", False):
            return Group(header, *body)
        if "ratio" in self.options:
            width = int((console.width - 4) * self.options["ratio"])
        else:
            width = None
        return Panel(Group(*body), title=header, title_align="left", width=width)

    def __trigger__(self):
        if not self.options.get("shell", False):
            raise self from None
        console.print(self)
        if not self.options.get("deferred", False):
            sys.exit(1)

    def __replace__(self, /, **overrides):
        return type(self)(self.message, **self.options | overrides)


class InvalidDataError(ParameterException, TypeError): ...
class InvalidEnvironmentValueError(ParameterException, ValueError): ...
class MissingRequiredValueError(ParameterException): ...


class ParameterExit(ExceptionGroup[ParameterException]):
    """
    Faults collected over one process() cycle, surfaced together.

    Options are kept across split()/subgroup() so the parts render the same way.
    """

    def __new__(cls, exceptions, **options):
        return super().__new__(cls, "bad exit", exceptions)

    def __init__(self, exceptions, **options):
        super().__init__("bad exit", tuple(exceptions))
        self.options = MappingProxyType(options)

    def derive(self, exceptions):
        return type(self)(exceptions, **self.options)

    def __rich__(self):
        text = _painter(self.options.get("colorful", True))
        header = Text.assemble("[ ", text(_program(), "prog-name"), " — ", text(self.message.title(), "title"), " ]")
        renders = [copy.replace(exception, ratio=2/3) for exception in self.exceptions]
        if self.options.get("fancy", False):
            return Panel(Group(*renders), title=header, title_align="left")
        return Group(header, *renders)

    def __trigger__(self):
        if not self.options.get("shell", False):
            raise self from None
        console.print(self)
        sys.exit(1)

    def __replace__(self, /, **overrides):
        return type(self)(self.exceptions, **self.options | overrides)


def trigger(fault, /, **options):
    """
    Surface a fault: merge options in, then raise it or (shell mode) print and exit.

    Raises TypeError when fault lacks __trigger__/__replace__.
    """
    if not _surfaceable(fault):
        raise TypeError("trigger() argument must have a __trigger__ and __replace__ methods")
    copy.replace(fault, **options).__trigger__()


def getdoc(code, /):
    """
    Documentation the host registered for code in __main__.__docs__, or None.
    """
    if not isinstance(code, FaultCode):
        raise TypeError("getdoc() argument must be a fault-code")
    return getattr(__import__("__main__"), "__docs__", {}).get(code)


__all__ = (
    "ParameterException",
    "InvalidDataError",
    "InvalidEnvironmentValueError",
    "MissingRequiredValueError",
    "ParameterExit",
    "FaultCode",
    "trigger",
    "getdoc",
)
