"""
Shared helpers of clioptions.

- Unset: "argument not passed" marker, used where None is a meaningful value
  (an option without a long name, a required value without a default).
- coalesce(): materialize a fallback for Unset only.
- rename(): give generated methods a clean __name__/__qualname__.
- mirror(): read-only property over a private "_name" attribute; containers
  come back frozen so registries and defaults cannot be changed from outside.

    >>> coalesce(Unset, "tool"), coalesce(None, "tool")
    ('tool', None)
"""
import builtins
import functools
from collections.abc import Sequence, Mapping, Set
from types import MappingProxyType
from typing import final


@final
class UnsetType:
    """
    Type of the Unset marker.

    There is one instance per process; it is falsy, prints as "Unset", and
    takes part in isinstance unions (`isinstance(x, str | Unset)`).
    """

    def __or__(self, other, /):
        try:
            return other | type(self)
        except TypeError:
            return NotImplemented

    def __ror__(self, other, /):
        try:
            return other | type(self)
        except TypeError:
            return NotImplemented

    @functools.cache
    def __new__(cls):
        return super().__new__(cls)

    def __bool__(self):
        return False

    def __repr__(self):
        return "Unset"

    def __init_subclass__(cls, **options):
        raise TypeError("type 'UnsetType' is not an acceptable base type")


def coalesce(object, default=None, /):
    """
    Return default when object is Unset, object otherwise (None, 0 and "" included).
    """
    return object if object is not Unset else default


def rename(*parameters):
    """
    rename(callable, name) sets __name__ and __qualname__ and returns the callable;
    rename(name) returns a decorator doing the same.
    """
    match len(parameters):
        case 2:
            callable, name = parameters
            if not builtins.callable(callable):
                raise TypeError("rename() first argument must be callable")
            if not isinstance(name, str):
                raise TypeError("rename() second argument must be a string")
            try:
                callable.__qualname__ = name
                callable.__name__ = name
            except (AttributeError, TypeError):
                raise TypeError("rename() first argument must be a updatable callable") from None
            return callable
        case 1:
            name, = parameters
            if not isinstance(name, str):
                raise TypeError("@rename() argument must be a string")

            def wrapper(callable):
                return rename(callable, name)

            return rename(wrapper, "rename")
        case _:
            raise TypeError("rename takes 1 to 2 arguments but %d were given" % len(parameters))


def _freeze(object):
    # strings are sequences too, keep them whole
    if isinstance(object, Sequence) and not isinstance(object, str):
        return tuple(map(_freeze, object))
    elif isinstance(object, Mapping):
        return MappingProxyType(object)
    elif isinstance(object, Set):
        return frozenset(object)
    return object


def mirror(name, /):
    """
    Property reading self._<name>, returned through _freeze().

    Used by OptionDefinition (through its metaclass) and ArgumentParser:

        definitions = mirror("definitions")   # list kept in _definitions, read as a tuple
    """
    if not isinstance(name, str):
        raise TypeError("mirror() argument must be a string")

    @rename(name)
    def getter(self):
        return _freeze(getattr(self, "_" + name))

    return property(getter)


Unset = UnsetType()


__all__ = (
    "coalesce",
    "rename",
    "mirror",
    "UnsetType",
    "Unset",
)
