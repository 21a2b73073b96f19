"""
clioptions faults (errors) and rendering.

Scope
- FaultCode: numeric identifier of each fault kind (2110x definitions,
  2111x parsing).
- OptionsException: base type carrying message + options (structured context),
  rendered by rich as a header line, the message and a hint.
- ConfigurationError: a broken OptionDefinition (programming error of the caller).
- ParseError and its kinds: malformed user input found while parsing tokens.
- trigger(): central entry point to surface any fault (respecting shell/fancy/colorful).
- getdoc(): optional description lookup for a code from the host application.

Structured context
- Every fault exposes its options mapping read-only, and each option is also
  readable as an attribute (fault.input, fault.index, fault.candidates, ...).
  Hosts can build their own wording from that context instead of the default
  message.

Integration
- The parser builds faults with their context and calls trigger(fault, **ctx).
- In non-shell mode, faults are raised; in shell mode, they are rendered via rich
  on stderr and the process exits.
"""
import copy
import functools
import sys
from collections import defaultdict
from enum import IntEnum
from types import MappingProxyType

from rich.console import Console, Group
from rich.panel import Panel
from rich.text import Text

from .utils import Unset, coalesce

console = Console(stderr=True)


class FaultCode(IntEnum):
    """
    fault codes shown in fault headers and attached as fault.code.
    """
    # --- definition errors (2110x) ---
    INVALID_DEFINITION          = 21101

    # --- parse errors (2111x) ---
    UNEXPECTED_ARGUMENT         = 21111
    MISSING_ARGUMENT            = 21112
    OPTION_NOT_FOUND            = 21113
    AMBIGUOUS_ABBREVIATION      = 21114

    def normalize(self):
        """
        label of this code: __main__.__codes__[code] when the host defines it,
        the number as a string otherwise.
        """
        return str(getattr(__import__("__main__"), "__codes__", {}).get(self, self.value))


class OptionsException(Exception):
    def __init__(self, message=Unset, /, **options):
        assert isinstance(message, str | Unset)
        super().__init__(coalesce(message, ""))
        self.message = message
        self.options = MappingProxyType(options)

    def __getattr__(self, name):
        # only reached for names that are not real attributes
        if name == "options":
            raise AttributeError(name)
        try:
            return self.options[name]
        except KeyError:
            raise AttributeError(f"{type(self).__name__!r} object has no attribute {name!r}") from None

    def __rich__(self):
        main = __import__("__main__")
        colorful = self.options.get("colorful", True)
        fancy = self.options.get("fancy", False)

        styles = defaultdict(str, {
            # header parts
            "prog-name": "bold #E6E6F0",  # near-white program name
            "code": "bold #00E5FF",  # neon cyan fault code
            "error-title": "bold #FF4DA6",  # friendly pinky title

            # body
            "error-message": "#C8C8D0",  # soft light gray message
            "hint-arrow": "#9CE19C dim",  # gentle green arrow
            "hint": "italic #9CE19C",  # gentle green hint text
            "docs": "dim #C8C8D0",
        } | getattr(main, "__styles__", {}))

        def styler(style):
            return styles[style] if colorful else ""

        def text(fragment, style=""):
            if not fragment:
                return Text("")
            if not colorful:
                return Text(str(fragment))
            if isinstance(fragment, Text):
                return fragment
            return Text(str(fragment), style)

        try:
            prog = self.options["parser"].prog
        except KeyError:
            prog = getattr(main, "__prog__", "clioptions")

        header = Text.assemble(
            "[ ",
            text(prog, styler("prog-name")),
            " — ",
            text(self.options["code"].normalize() if "code" in self.options else "", styler("code")),
            " | ",
            text(self.options.get("title", "error").title(), styler("error-title")),
            " ]"
        )
        message = text(self.message, styler("error-message"))
        hint = Text.assemble(text(" → ", styler("hint-arrow")), text(self.options.get("hint"), styler("hint")))
        body = [message, hint]
        if docs := self.options.get("docs"):
            body.append(text(docs, styler("docs")))

        if fancy:
            return Panel(Group(*body), title=header, title_align="left")

        return Group(header, *body)

    def __trigger__(self) -> None:
        if not self.options.get("shell", False):
            raise self from None
        console.print(self)
        sys.exit(1)

    def __reduce__(self):
        return functools.partial(type(self), **self.options), (self.message,)

    def __replace__(self, *unused, **overrides):
        assert not unused, "unused arguments are not allowed"
        return type(self)(self.message, **{**self.options, **overrides})


class ConfigurationError(OptionsException, ValueError): ...


class ParseError(OptionsException): ...
class UnexpectedArgumentError(ParseError): ...
class MissingArgumentError(ParseError): ...
class OptionNotFoundError(ParseError): ...
class AmbiguousAbbreviationError(ParseError): ...


def trigger(fault, /, **options):
    """
    merge options into fault (copy.replace) and fire it: raised, or printed on
    stderr followed by exit status 1 when the merged options say shell=True.
    """
    if (
        not hasattr(fault, "__trigger__") or
        not callable(fault.__trigger__) or
        not hasattr(fault, "__replace__") or
        not callable(fault.__replace__)
    ):
        raise TypeError("trigger() argument must have a __trigger__ and __replace__ methods")
    copy.replace(fault, **options).__trigger__()


def getdoc(code, /):
    """
    documentation of a code from __main__.__docs__, or None.
    """
    if not isinstance(code, FaultCode):
        raise TypeError("getdoc() argument must be a fault-code")
    try:
        return getattr(__import__("__main__"), "__docs__", {})[code]
    except KeyError:
        return None


__all__ = (
    "OptionsException",
    "ConfigurationError",
    "ParseError",
    "UnexpectedArgumentError",
    "MissingArgumentError",
    "OptionNotFoundError",
    "AmbiguousAbbreviationError",
    "FaultCode",
    "trigger",
    "getdoc",
)
