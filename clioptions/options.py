r"""
clioptions option definitions.

Overview
- Arity: how an option consumes values
  • NO_VALUE        presence-only switch (-v, --verbose)
  • COUNTING        repeatable switch counted by occurrence (-vvv)
  • REQUIRED_VALUE  option that always takes a value (-n5, -n 5, --num=5, --num 5)
  • OPTIONAL_VALUE  option whose value must be attached (-c, -cauto, --color, --color=auto)
  • MULTI_VALUE     repeatable option collecting every value in order (--tag a --tag b)

- OptionDefinition: immutable descriptor of one recognized option, built from a
  short name, a long name, an arity, a default and a help text.

- Introspection & representation
  • OptionType metaclass provides stable __repr__/__rich_repr__ and exposes selected
    fields via read-only properties declared in __introspectable__.

Metadata (sanitized on construction)
- short: None | str, exactly one ASCII letter or digit.
- long: None | str, at least two characters; ASCII letters/digits first, then
  letters, digits or hyphens.
- at least one of short/long must be given.
- arity: Arity member.
- default: shape checked against arity (see _sanitize_default).
- helptext: Unset | str | Text, non-empty when provided.

Every violation raises ConfigurationError at construction time; nothing is
deferred to parsing.

Quick example:
    >>> from clioptions.options import OptionDefinition, Arity
    >>> OptionDefinition("v", "verbose", Arity.COUNTING)
    option-definition(short='v', long='verbose', arity=<Arity.COUNTING: 1>, default=0, helptext=None)
"""
import builtins
import functools
import operator
import re
from collections.abc import Sequence
from enum import IntEnum

from rich.text import Text

from .faults import ConfigurationError, FaultCode, getdoc
from .present import present
from .utils import *


class Arity(IntEnum):
    """
    value arity of an option.

    the two predicates below drive the parser:
    - can_take_value: an attached value (-xVAL, --name=VAL) is accepted.
    - must_take_value: a missing attached value is taken from the next token.
    """
    NO_VALUE       = 0
    COUNTING       = 1
    REQUIRED_VALUE = 2
    OPTIONAL_VALUE = 3
    MULTI_VALUE    = 4

    @property
    def can_take_value(self):
        return self in (Arity.REQUIRED_VALUE, Arity.OPTIONAL_VALUE, Arity.MULTI_VALUE)

    @property
    def must_take_value(self):
        return self in (Arity.REQUIRED_VALUE, Arity.MULTI_VALUE)


class OptionType(type):
    """
    Metaclass that turns option specs into introspectable, read-only descriptors.

    Responsibilities
    - Expose selected fields as read-only properties using mirror() for all
      names listed in __introspectable__.
    - Provide stable, readable __repr__/__rich_repr__ implementations for
      diagnostics and help output.
    - Seal the built class: subclassing it raises TypeError.

    Conventions
    - __typename__ is derived from the class name (camel-case split with hyphens)
      and used in messages.
    """
    __introspectable__ = ()

    def __new__(cls, name, bases, namespace, **options):
        self = super().__new__(
            cls,
            name,
            bases,
            namespace | {
                "__typename__": re.sub(r"(?<!^)(?=[A-Z])", r"-", name).lower(),
            } | {
                name: mirror(name) for name in namespace.get("__introspectable__", ())
            },
        )

        @rename("__repr__")
        def __repr__(self):
            """
            Return a concise, stable representation with key metadata.

            Example
            - option-definition(short='v', long='verbose', ...)
            """
            return f"{type(self).__typename__}({
                ", ".join(map(functools.partial(operator.mod, "%s=%r"), self.__rich_repr__()))
            })"
        self.__repr__ = __repr__

        @rename("__rich_repr__")
        def __rich_repr__(self):
            """
            Yield (name, object) pairs for pretty printers, in __introspectable__ order.
            """
            for name in type(self).__introspectable__:
                yield name, getattr(self, name)
        self.__rich_repr__ = __rich_repr__

        @rename("__init_subclass__")
        def __init_subclass__(cls, **options):  # NOQA: F-841
            """
            Disallow subclassing of the built class.
            """
            raise TypeError(f"type {self.__name__!r} is not an acceptable base type")
        self.__init_subclass__ = classmethod(__init_subclass__)

        return self


def _fault(cls, field, message, /):
    return ConfigurationError(
        f"{cls.__typename__} {message}",
        title="invalid option definition",
        code=FaultCode.INVALID_DEFINITION,
        field=field,
        hint="fix the option definition; this is not caused by the command line",
        docs=getdoc(FaultCode.INVALID_DEFINITION),
    )


def _sanitize_names(cls, metadata, /):
    """
    Internal: validate the short and long names.

    - short: a single ASCII letter or digit (e.g., "v", "5").
    - long: an ASCII letter or digit followed by one or more letters, digits or
      hyphens (e.g., "verbose", "dry-run", "2d").
    - None means the form is absent; at least one form must remain.
    """
    short = metadata["short"]
    if short is not None and (not isinstance(short, str) or not re.fullmatch(r"[a-zA-Z0-9]", short)):
        raise _fault(cls, "short", "short name must be one alphanumeric character")

    long = metadata["long"]
    if long is not None and (not isinstance(long, str) or not re.fullmatch(r"[a-zA-Z0-9][a-zA-Z0-9-]+", long)):
        raise _fault(cls, "long", (
            "long name must be at least two characters long, the first of which is alphanumeric,"
            " the rest of which also allowing hyphens"
        ))

    if short is None and long is None:
        raise _fault(cls, "short", "must have at least one of short and long names")


def _sanitize_default(cls, metadata, /):
    """
    Internal: validate the default against the arity and fill the basic default.

    arity            omitted → basic default    accepted
    NO_VALUE         False                      bool
    COUNTING         0                          int >= 0 (bool rejected)
    REQUIRED_VALUE   None                       str | None
    OPTIONAL_VALUE   False                      str | bool (True becomes `present`)
    MULTI_VALUE      ()                         sequence of str (not a str itself)
    """
    arity = metadata["arity"]
    if not isinstance(arity, Arity):
        raise _fault(cls, "arity", "arity must be one of the Arity members")

    default = metadata["default"]
    match arity:
        case Arity.NO_VALUE:
            if not isinstance(default := coalesce(default, False), bool):
                raise _fault(cls, "default", "default must be a boolean for a switch")
        case Arity.COUNTING:
            default = coalesce(default, 0)
            if not isinstance(default, int) or isinstance(default, bool) or default < 0:
                raise _fault(cls, "default", "default must be zero or a positive integer for an accumulating switch")
        case Arity.REQUIRED_VALUE:
            if not isinstance(default := coalesce(default), str | None):
                raise _fault(cls, "default", "default must be a string for an option requiring a value")
        case Arity.OPTIONAL_VALUE:
            if not isinstance(default := coalesce(default, False), str | bool):
                raise _fault(cls, "default", "default must be a boolean or a string for an option with an optional value")
            if default is True:
                default = present
        case Arity.MULTI_VALUE:
            default = coalesce(default, ())
            if (
                not isinstance(default, Sequence) or
                isinstance(default, str) or
                not all(isinstance(value, str) for value in default)
            ):
                raise _fault(cls, "default", "default must be a sequence (which could be empty) of strings for a multiple value option")
            default = tuple(default)

    metadata["default"] = default


def _sanitize_helptext(cls, metadata, /):
    if not isinstance(helptext := metadata["helptext"], str | Text | Unset):
        raise _fault(cls, "helptext", "help text must be a string")
    elif isinstance(helptext, str) and not (helptext := helptext.strip()):
        raise _fault(cls, "helptext", "help text cannot be empty")
    metadata["helptext"] = coalesce(helptext)


class OptionDefinition(metaclass=OptionType):
    """
    Immutable descriptor of one command-line option.

    Highlights
    - Short form `-x` and/or long form `--name`.
    - Arity decides whether and how a value is consumed (see Arity).
    - The default seeds the parse result before any token is read.
    - key is the canonical result key: the long name if present, else the short name.

    Properties
    - The names listed in __introspectable__ are exposed as read-only attributes.
    - Assigning or deleting any attribute after construction raises AttributeError.
    """

    __introspectable__ = (
        "short",
        "long",
        "arity",
        "default",
        "helptext",
    )

    def __new__(
            cls,
            short=None,
            long=None,
            arity=Arity.NO_VALUE,
            default=Unset,
            helptext=Unset,
    ):
        """
        Construct an OptionDefinition with the provided metadata.

        Parameters
        - short: None | str
          Single alphanumeric character used as `-x`.
        - long: None | str
          Long name used as `--name`; abbreviations of it are accepted while
          they stay unique among the parser's long names.
        - arity: Arity
          Value arity. Defaults to NO_VALUE.
        - default: Any
          Seed value in the parse result; its shape must match the arity.
          When omitted, the basic default of the arity is used.
        - helptext: Unset | str | Text
          Description shown by the help renderer.

        Raises
        - ConfigurationError: for any invalid name, arity, default or help text.
        """
        metadata = {
            "short": short,
            "long": long,
            "arity": arity,
            "default": default,
            "helptext": helptext,
        }
        _sanitize_names(cls, metadata)
        _sanitize_default(cls, metadata)
        _sanitize_helptext(cls, metadata)

        self = super().__new__(cls)
        for name, object in metadata.items():
            builtins.object.__setattr__(self, "_" + name, object)
        return self

    def __setattr__(self, name, value, /):
        raise AttributeError(f"{type(self).__typename__} is read-only")

    def __delattr__(self, name, /):
        raise AttributeError(f"{type(self).__typename__} is read-only")

    def __reduce__(self):
        # rebuilt through the constructor
        return type(self), (
            self.short,
            self.long,
            self.arity,
            True if self.default is present else self.default,
            self.helptext if self.helptext is not None else Unset,
        )

    @property
    def can_take_value(self):
        return self.arity.can_take_value

    @property
    def must_take_value(self):
        return self.arity.must_take_value

    @property
    def key(self):
        return self.long if self.long is not None else self.short

    @property
    def forms(self):
        """
        The spellings accepted on the command line, short form first.
        """
        forms = []
        if self.short is not None:
            forms.append("-" + self.short)
        if self.long is not None:
            forms.append("--" + self.long)
        return tuple(forms)


__all__ = (
    "Arity",
    "OptionDefinition",
)

# Not part of the public API.
del OptionType
