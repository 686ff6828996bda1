r"""
Tiller parameter declarations.

Overview
- ParameterKind: the closed set of parameter shapes
  (flag, integer, string, choice and the three list variants).
- ParameterDefinition: an immutable, sanitized declaration of one parameter.
- Factories: flag(), integer(), string(), choice(), string_list(),
  integer_list(), choice_list() build definitions of the matching kind.

Metadata (sanitized on construction)
- Shared (all kinds)
  • long_name: required, lower-case and dash-delimited (e.g., "--max-count").
  • short_name: Unset | str, a dash followed by a single letter (e.g., "-c").
  • environment_variable: Unset | str, upper-case letters, digits and underscores.
  • description: Unset | str, non-empty after trimming.
  • required: bool.
- Value-bearing kinds only (everything but flags)
  • argument_name: Unset | str, upper-case label used by help renderers.
  • default: Unset | value of the kind; validated here, trusted at resolution time.
- Choice kinds only
  • alternatives: non-empty iterable of distinct strings.
- List kinds only
  • delimiter: Unset | str used to split environment values.

Validation highlights
- A required parameter cannot declare a default.
- A choice default must be one of the alternatives.
- Integer defaults must be real integers (bool is rejected even though it is an int).
- Explicit None is rejected for every optional field; omit the keyword instead.

Quick example:
    >>> from tiller.definitions import integer, choice
    >>> count = integer("--count", short_name="-c", environment_variable="TOOL_COUNT", default=10)
    >>> mode = choice("--mode", alternatives=("fast", "safe"), default="safe")

Public API
- Types: ParameterKind, ParameterDefinition
- Factories: flag, integer, string, choice, string_list, integer_list, choice_list
"""
import functools
import operator
import re
from collections.abc import Iterable, Sequence
from enum import Enum

from .utils import *

_LONG_NAME = re.compile(r"-(-[a-z0-9]+)+")
_SHORT_NAME = re.compile(r"-[a-zA-Z]")
_ENVIRONMENT_VARIABLE = re.compile(r"[A-Z_][A-Z0-9_]*")
_ARGUMENT_NAME = re.compile(r"[A-Z_][A-Z0-9_]*")


class ParameterKind(Enum):
    """
    Closed set of supported parameter shapes.
    """
    FLAG = "flag"
    INTEGER = "integer"
    STRING = "string"
    CHOICE = "choice"
    STRING_LIST = "string-list"
    INTEGER_LIST = "integer-list"
    CHOICE_LIST = "choice-list"

    @property
    def plural(self):
        """True for the list variants."""
        return self.name.endswith("_LIST")

    @property
    def chosen(self):
        """True for the kinds restricted to a set of alternatives."""
        return self in (ParameterKind.CHOICE, ParameterKind.CHOICE_LIST)

    @property
    def scalar(self):
        """The element kind for list variants, the kind itself otherwise."""
        return ParameterKind(self.value.removesuffix("-list"))


class DefinitionType(type):
    """
    Metaclass that turns definitions into introspectable, sealed records.

    Responsibilities
    - Expose the fields listed in __introspectable__ as read-only properties
      (see mirror()).
    - Provide stable __repr__/__rich_repr__ implementations for diagnostics.
    - Seal classes created with final=True against subclassing.

    Conventions
    - __typename__ is derived from the class name (camel-case split with
      hyphens) and used in messages.
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
            return f"{type(self).__typename__}({
                ", ".join(map(functools.partial(operator.mod, "%s=%r"), self.__rich_repr__()))
            })"
        self.__repr__ = __repr__

        @rename("__rich_repr__")
        def __rich_repr__(self):
            # Unset metadata is omitted so reprs stay short.
            for name in type(self).__introspectable__:
                if (object := getattr(self, name)) is not None:
                    yield name, object
        self.__rich_repr__ = __rich_repr__

        if options.get("final", False):
            @rename("__init_subclass__")
            def __init_subclass__(cls, **options):  # NOQA: F-841
                raise TypeError(f"type {self.__name__!r} is not an acceptable base type")
            self.__init_subclass__ = classmethod(__init_subclass__)

        return self


def _sanitize_names(cls, metadata, /):
    """
    Internal: validate the long name, the short name and the environment variable.

    Raises
    - TypeError: when a name is not a string (or is None).
    - ValueError: when a name does not follow its required spelling.
    """
    if not isinstance(long_name := metadata["long_name"], str):
        raise TypeError(f"{cls.__typename__} 'long_name' must be a string")
    elif not _LONG_NAME.fullmatch(long_name := long_name.strip()):
        raise ValueError(
            f"invalid name: {long_name!r}. the parameter long name must be lower-case"
            f" and use dash delimiters (e.g. \"--do-a-thing\")"
        )
    metadata["long_name"] = long_name

    if not isinstance(short_name := metadata["short_name"], str | Unset):
        raise TypeError(f"{cls.__typename__} 'short_name' must be a string")
    elif isinstance(short_name, str) and not _SHORT_NAME.fullmatch(short_name := short_name.strip()):
        raise ValueError(
            f"invalid name: {short_name!r}. the parameter short name must be a dash followed"
            f" by a single upper-case or lower-case letter (e.g. \"-a\")"
        )
    metadata["short_name"] = coalesce(short_name)

    if not isinstance(variable := metadata["environment_variable"], str | Unset):
        raise TypeError(f"{cls.__typename__} 'environment_variable' must be a string")
    elif isinstance(variable, str) and not _ENVIRONMENT_VARIABLE.fullmatch(variable := variable.strip()):
        raise ValueError(
            f"invalid environment variable name: {variable!r}. the name must consist only of"
            f" upper-case letters, numbers, and underscores, and it may not start with a number"
        )
    metadata["environment_variable"] = coalesce(variable)


def _sanitize_metadata(cls, metadata, /):
    """
    Internal: normalize descriptive metadata (description, argument_name, required).

    - description: Unset → None; strings are trimmed and must stay non-empty.
    - argument_name: forbidden for flags; otherwise an upper-case label.
    - required: coerced to bool.
    """
    if not isinstance(description := metadata["description"], str | Unset):
        raise TypeError(f"{cls.__typename__} 'description' must be a string")
    elif isinstance(description, str) and not (description := description.strip()):
        raise ValueError(f"{cls.__typename__} 'description' cannot be empty")
    metadata["description"] = coalesce(description)

    if not isinstance(argument_name := metadata["argument_name"], str | Unset):
        raise TypeError(f"{cls.__typename__} 'argument_name' must be a string")
    elif argument_name is not Unset and metadata["kind"] is ParameterKind.FLAG:
        raise TypeError(f"flag {cls.__typename__} cannot specify an 'argument_name'")
    elif isinstance(argument_name, str) and not _ARGUMENT_NAME.fullmatch(argument_name := argument_name.strip()):
        raise ValueError(
            f"invalid argument name: {argument_name!r}. the name must consist only of"
            f" upper-case letters, numbers, and underscores"
        )
    metadata["argument_name"] = coalesce(argument_name)

    metadata["required"] = bool(metadata["required"])


def _sanitize_alternatives(cls, metadata, /):
    """
    Internal: validate the alternatives of choice kinds and the delimiter of list kinds.

    - alternatives: required for choice kinds, forbidden otherwise; duplicates
      are rejected and the order is kept (stored as a tuple).
    - delimiter: list kinds only; a non-empty string.
    """
    kind = metadata["kind"]

    if (alternatives := metadata["alternatives"]) is Unset:
        if kind.chosen:
            raise TypeError(f"{kind.value} {cls.__typename__} must specify 'alternatives'")
        metadata["alternatives"] = None
    elif not kind.chosen:
        raise TypeError(f"{kind.value} {cls.__typename__} cannot specify 'alternatives'")
    elif not isinstance(alternatives, Iterable) or isinstance(alternatives, str):
        raise TypeError(f"{cls.__typename__} 'alternatives' must be an iterable of strings")
    else:
        sanitized = []
        for alternative in alternatives:
            if not isinstance(alternative, str):
                raise TypeError(f"{cls.__typename__} 'alternatives' must be an iterable of strings")
            if alternative in sanitized:
                raise ValueError(f"{cls.__typename__} 'alternatives' cannot contain duplicates")
            sanitized.append(alternative)
        if not sanitized:
            raise ValueError(f"{cls.__typename__} 'alternatives' cannot be empty")
        metadata["alternatives"] = tuple(sanitized)

    if (delimiter := metadata["delimiter"]) is Unset:
        metadata["delimiter"] = None
    elif not kind.plural:
        raise TypeError(f"{kind.value} {cls.__typename__} cannot specify a 'delimiter'")
    elif not isinstance(delimiter, str):
        raise TypeError(f"{cls.__typename__} 'delimiter' must be a string")
    elif not delimiter:
        raise ValueError(f"{cls.__typename__} 'delimiter' cannot be empty")


def _sanitize_element(cls, metadata, element, /):
    """
    Internal: check one default element against the scalar kind. Returns the element.
    """
    match metadata["kind"].scalar:
        case ParameterKind.INTEGER if isinstance(element, bool) or not isinstance(element, int):
            raise TypeError(f"{cls.__typename__} default for {metadata['long_name']!r} must be an integer")
        case ParameterKind.STRING | ParameterKind.CHOICE if not isinstance(element, str):
            raise TypeError(f"{cls.__typename__} default for {metadata['long_name']!r} must be a string")
        case ParameterKind.CHOICE if element not in metadata["alternatives"]:
            raise ValueError(
                f"invalid default value {element!r} for {metadata['long_name']!r}."
                f" valid choices are: {", ".join(map(repr, metadata["alternatives"]))}"
            )
    return element


def _sanitize_default(cls, metadata, /):
    """
    Internal: construction-time validation of the declared default.

    Runs after the alternatives were sanitized, so choice defaults can be
    checked against them. The stored default is None when nothing was
    declared; list defaults are stored as tuples.

    Raises
    - TypeError: the default does not match the kind, or a flag declares one.
    - ValueError: the parameter is required, or a choice default is not allowed.
    """
    if (default := metadata["default"]) is Unset:
        metadata["default"] = None
        return

    kind = metadata["kind"]
    if kind is ParameterKind.FLAG:
        raise TypeError(f"flag {cls.__typename__} cannot specify a 'default'")
    if metadata["required"]:
        raise ValueError(
            f"a default value cannot be specified for {metadata['long_name']!r}"
            f" because it is a required parameter"
        )

    if kind.plural:
        if not isinstance(default, Sequence) or isinstance(default, str):
            raise TypeError(f"{cls.__typename__} default for {metadata['long_name']!r} must be a sequence")
        metadata["default"] = tuple(_sanitize_element(cls, metadata, element) for element in default)
    else:
        metadata["default"] = _sanitize_element(cls, metadata, default)


class ParameterDefinition(metaclass=DefinitionType, final=True):
    """
    Immutable declaration of one command-line parameter.

    A definition carries everything the resolution engine needs to know about
    a parameter: its kind, how it is spelled, where an environment override
    may come from, what its default is and whether it is required. It has no
    state of its own; the resolved value lives on tiller.parameters.Parameter.

    Properties
    - The names listed in __introspectable__ are exposed as read-only
      attributes. Fields that were not declared read as None.
    """

    __introspectable__ = (
        "kind",
        "long_name",
        "short_name",
        "environment_variable",
        "default",
        "required",
        "description",
        "argument_name",
        "alternatives",
        "delimiter",
    )

    def __new__(
            cls,
            kind,
            long_name,
            /,
            *,
            short_name=Unset,
            environment_variable=Unset,
            default=Unset,
            required=False,
            description=Unset,
            argument_name=Unset,
            alternatives=Unset,
            delimiter=Unset,
    ):
        """
        Construct a definition with the provided metadata.

        Parameters
        - kind: ParameterKind | str
          The parameter shape; strings are looked up by value (e.g., "integer").
        - long_name: str
          Canonical spelling, e.g., "--max-count". Raw data is keyed by it.
        - short_name, environment_variable, description, argument_name: see module docs.
        - default: value of the kind (tuple-like for list kinds).
        - required: bool
        - alternatives: choice kinds only.
        - delimiter: list kinds only.

        Notes
        - Metadata is sanitized in passes: names, descriptive metadata,
          alternatives/delimiter, then the default (which depends on the
          alternatives).
        """
        metadata = {
            "kind": ParameterKind(kind),
            "long_name": long_name,
            "short_name": short_name,
            "environment_variable": environment_variable,
            "default": default,
            "required": required,
            "description": description,
            "argument_name": argument_name,
            "alternatives": alternatives,
            "delimiter": delimiter,
        }
        _sanitize_names(cls, metadata)
        _sanitize_metadata(cls, metadata)
        _sanitize_alternatives(cls, metadata)
        _sanitize_default(cls, metadata)

        self = super().__new__(cls)

        # Mirror sanitized metadata into private fields; read-only properties expose them.
        for name, object in metadata.items():
            setattr(self, "_" + name, object)

        return self


def flag(long_name, /, **kwargs):
    """
    Declare a presence-only flag (e.g., --verbose).

    Flags resolve to a bool and take no default, argument name, alternatives
    or delimiter.
    """
    return ParameterDefinition(ParameterKind.FLAG, long_name, **kwargs)


def integer(long_name, /, **kwargs):
    """Declare an integer parameter (e.g., --count 3)."""
    return ParameterDefinition(ParameterKind.INTEGER, long_name, **kwargs)


def string(long_name, /, **kwargs):
    """Declare a free-form string parameter."""
    return ParameterDefinition(ParameterKind.STRING, long_name, **kwargs)


def choice(long_name, /, alternatives, **kwargs):
    """
    Declare a string parameter restricted to the given alternatives.

    The default (when declared) must be one of the alternatives.
    """
    return ParameterDefinition(ParameterKind.CHOICE, long_name, alternatives=alternatives, **kwargs)


def string_list(long_name, /, **kwargs):
    """Declare a repeatable string parameter."""
    return ParameterDefinition(ParameterKind.STRING_LIST, long_name, **kwargs)


def integer_list(long_name, /, **kwargs):
    """Declare a repeatable integer parameter."""
    return ParameterDefinition(ParameterKind.INTEGER_LIST, long_name, **kwargs)


def choice_list(long_name, /, alternatives, **kwargs):
    """Declare a repeatable parameter whose every value must be one of the alternatives."""
    return ParameterDefinition(ParameterKind.CHOICE_LIST, long_name, alternatives=alternatives, **kwargs)


__all__ = (
    # Types
    "ParameterKind",
    "ParameterDefinition",

    # Factories
    "flag",
    "integer",
    "string",
    "choice",
    "string_list",
    "integer_list",
    "choice_list",
)

# Remove the internal metaclass from the module namespace; not part of the public API.
del DefinitionType
