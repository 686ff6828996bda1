"""
Tiller helpers shared by the definitions, parameters and providers modules.

- Unset: sentinel for "keyword not passed", distinct from an explicit None.
- coalesce(value, default=None): swap Unset for a default, keep everything else.
- rename(...): fix __name__/__qualname__ of generated accessors.
- mirror("field"): read-only property over self._field, frozen on the way out.

    >>> coalesce(Unset, 3)
    3
    >>> coalesce(None, 3) is None
    True
"""
import builtins
import functools
from collections.abc import Sequence, Mapping, Set
from types import MappingProxyType
from typing import final


@final
class UnsetType:
    """
    Type of the Unset sentinel.

    UnsetType() always returns the same falsey instance, which survives copy
    and pickle by reference and can take part in isinstance() unions
    (isinstance(value, str | Unset)).
    """

    @functools.cache
    def __new__(cls):
        return super().__new__(cls)

    def __or__(self, other, /):
        try:
            return type(self) | other
        except TypeError:
            return NotImplemented

    def __ror__(self, other, /):
        try:
            return other | type(self)
        except TypeError:
            return NotImplemented

    def __reduce__(self):
        return "Unset"

    def __bool__(self):
        return False

    def __repr__(self):
        return "Unset"

    def __init_subclass__(cls, **options):
        raise TypeError("type 'UnsetType' is not an acceptable base type")


def coalesce(object, default=None, /):
    """Return default when object is Unset, object otherwise (None included)."""
    return default if object is Unset else object


def rename(*parameters):
    """
    Give a callable a stable name.

    rename(function, "name") renames in place and returns function;
    rename("name") returns a decorator doing the same.
    """
    match parameters:
        case [str() as name]:
            def decorator(function):
                if not builtins.callable(function):
                    raise TypeError("@rename() must be applied to a callable")
                return rename(function, name)
            return rename(decorator, "rename")
        case [function, str() as name] if builtins.callable(function):
            try:
                function.__name__ = function.__qualname__ = name
            except (AttributeError, TypeError):
                raise TypeError(f"cannot rename {function!r}") from None
            return function
        case [_] | [_, _]:
            raise TypeError("rename() expects (callable, name) or (name)")
        case _:
            raise TypeError(f"rename() takes 1 or 2 arguments but {len(parameters)} were given")


def _freeze(object):
    # str and bytes are sequences too; they are already immutable.
    match object:
        case str() | bytes():
            return object
        case Mapping():
            return MappingProxyType({key: _freeze(value) for key, value in object.items()})
        case Set():
            return frozenset(map(_freeze, object))
        case Sequence():
            return tuple(map(_freeze, object))
    return object


def mirror(name, /):
    """
    Read-only property exposing self._<name>.

    Containers come back frozen: sequences as tuples, mappings as read-only
    proxies, sets as frozensets. Nested containers are frozen too.
    """
    if not isinstance(name, str):
        raise TypeError("mirror() argument must be a string")
    return property(rename(lambda self: _freeze(getattr(self, f"_{name}")), name))


Unset = UnsetType()


__all__ = (
    "coalesce",
    "rename",
    "mirror",
    "UnsetType",
    "Unset",
)
