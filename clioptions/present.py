"""
Presence sentinel for options with an optional value.

This module defines a process-wide singleton `present` and its type `presenttype`.
An option declared with Arity.OPTIONAL_VALUE can end up in three states once
a command line has been parsed:

- never given: the declared default (False unless configured otherwise),
- given with a value: that string (possibly empty, e.g. `--color=`),
- given without a value: `present`.

Using a dedicated object keeps the third state apart from every string a user
could type and from a plain True.

Semantics
- Truthy: bool(present) is True, so `if result["color"]:` reads naturally.
- Stable string form: repr(present) == "present" (and Rich uses a green style).
- Identity: presenttype() always returns the same instance per interpreter,
  across copy, deepcopy and pickle.

Example
    >>> result = parser.parse(["--color"])
    >>> result["color"] is present
    True
"""
import functools

from rich.text import Text


class presenttype:
    """
    Singleton type marking an optional-value option given without a value.

    Notes
    - This type is final; subclassing is blocked to preserve semantics.
    - Instances are singletons per interpreter process.
    """

    @functools.cache
    def __new__(cls):
        """
        Return the unique instance of presenttype (per process).
        """
        return super().__new__(cls)

    def __bool__(self):
        return True

    def __rich__(self):
        """
        Rich protocol hook: render a green 'present' token.
        """
        return Text(repr(self), style="green")

    def __repr__(self):
        return "present"

    def __init_subclass__(cls, **options):
        """
        Prevent subclassing to preserve the sentinel’s guarantees.
        """
        raise TypeError("type 'presenttype' is not an acceptable base type")


present = presenttype()


__all__ = (
    "presenttype",
    "present",
)
