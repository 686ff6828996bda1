"""
tiller.resolution
~~~~~~~~~~~~~~~~~

The value-resolution protocol shared by every parameter kind.

Precedence (first stage that yields wins)
1. raw data handed over by the external token parser, checked against the kind.
   flags are the exception: the parser reports an omitted flag as False, so a
   raw False is indistinguishable from omission and falls through to stage 2.
   a parser that can tell "--flag=false" from omission should revisit this.
2. the bound environment variable, when set to a non-empty string. the string
   must satisfy the kind's strict format or resolution fails.
3. the declared default, or the kind's empty value (False / None / ()).

Strategies
- each kind maps to a Strategy(expected, validate, parse, empty) record:
  • expected: a short description of the raw shape (used in messages).
  • validate(definition, data): raw data → value, Unset to fall through, or raises.
  • parse(definition, variable, text): environment string → value, or raises.
  • empty: value when nothing else applies.
- resolve() is a pure function of (definition, data, environ); the process
  environment is only the default snapshot.

Errors
- InvalidDataError: raw data disagrees with the kind (integration bug).
- InvalidEnvironmentValueError: environment string does not fit the kind.
"""
import json
import os
import re
from collections.abc import Callable
from types import MappingProxyType
from typing import NamedTuple

from .definitions import ParameterKind
from .faults import FaultCode, InvalidDataError, InvalidEnvironmentValueError, getdoc
from .utils import Unset, coalesce

_INTEGER = re.compile(r"[+-]?[0-9]+")


class Strategy(NamedTuple):
    expected: str
    validate: Callable[..., object]
    parse: Callable[..., object]
    empty: object


def _report_invalid_data(definition, data, /):
    raise InvalidDataError(
        "unexpected data object for parameter %r: %r" % (definition.long_name, data),
        title="invalid parameter data",
        code=FaultCode.INVALID_DATA,
        hint="the parser must supply %s for %s parameters" % (
            STRATEGIES[definition.kind].expected, definition.kind.value
        ),
        parameter=definition.long_name,
        data=data,
        docs=getdoc(FaultCode.INVALID_DATA),
    )


def _report_invalid_choice(definition, data, /):
    raise InvalidDataError(
        "unexpected data object for parameter %r: %r is not one of the alternatives" % (
            definition.long_name, data
        ),
        title="invalid parameter data",
        code=FaultCode.INVALID_CHOICE_DATA,
        hint="the parser must restrict %s to: %s" % (definition.long_name, _quoted(definition.alternatives)),
        parameter=definition.long_name,
        data=data,
        docs=getdoc(FaultCode.INVALID_CHOICE_DATA),
    )


def _report_invalid_environment(definition, variable, text, requirement, /):
    raise InvalidEnvironmentValueError(
        "invalid value %s for the environment variable %s.  %s" % (json.dumps(text), variable, requirement),
        title="invalid environment value",
        code=FaultCode.INVALID_ENVIRONMENT_VALUE,
        hint="fix or unset %s (it sets %s)" % (variable, definition.long_name),
        parameter=definition.long_name,
        variable=variable,
        value=text,
        docs=getdoc(FaultCode.INVALID_ENVIRONMENT_VALUE),
    )


def _quoted(alternatives, /):
    return ", ".join(map(json.dumps, alternatives))


# --- stage 1: raw data ---

def _validate_flag(definition, data, /):
    match data:
        case True:
            return True
        case False:
            # Omitted flag; see the module docstring.
            return Unset
        case _:
            _report_invalid_data(definition, data)


def _validate_integer(definition, data, /, origin=Unset):
    match data:
        case bool():
            # bool is an int subclass; a flag value is never an integer.
            _report_invalid_data(definition, coalesce(origin, data))
        case int():
            return data
        case _:
            _report_invalid_data(definition, coalesce(origin, data))


def _validate_string(definition, data, /, origin=Unset):
    match data:
        case str():
            return data
        case _:
            _report_invalid_data(definition, coalesce(origin, data))


def _validate_choice(definition, data, /, origin=Unset):
    match data:
        case str() if data in definition.alternatives:
            return data
        case str():
            _report_invalid_choice(definition, coalesce(origin, data))
        case _:
            _report_invalid_data(definition, coalesce(origin, data))


def _listed(validate, /):
    def validator(definition, data, /):
        match data:
            case list() | tuple():
                return tuple(validate(definition, element, data) for element in data)
            case _:
                _report_invalid_data(definition, data)
    return validator


# --- stage 2: environment strings ---

def _parse_flag(definition, variable, text, /):
    if text not in ("0", "1"):
        _report_invalid_environment(definition, variable, text, "Valid choices are 0 or 1.")
    return text == "1"


def _parse_integer(definition, variable, text, /):
    if not _INTEGER.fullmatch(text):
        _report_invalid_environment(definition, variable, text, "It must be an integer value.")
    try:
        return int(text, 10)
    except ValueError:
        # Past sys.get_int_max_str_digits().
        _report_invalid_environment(definition, variable, text, "It must be an integer value.")


def _parse_string(definition, variable, text, /):
    return text


def _parse_choice(definition, variable, text, /):
    if text not in definition.alternatives:
        _report_invalid_environment(
            definition, variable, text, "Valid choices are: %s" % _quoted(definition.alternatives)
        )
    return text


def _split(definition, variable, text, /):
    """
    split an environment string into list items.

    - "[...]" is parsed as a JSON array that must contain only strings.
    - otherwise, when the definition declares a delimiter, the text is split on it.
    - otherwise the whole text is a single item.
    """
    if text.lstrip().startswith("["):
        try:
            items = json.loads(text)
        except (json.JSONDecodeError, RecursionError):
            items = Unset
        if not isinstance(items, list) or not all(isinstance(item, str) for item in items):
            raise InvalidEnvironmentValueError(
                "the [...] syntax for the environment variable %s requires a JSON array containing only strings" % variable,
                title="malformed environment list",
                code=FaultCode.MALFORMED_ENVIRONMENT_LIST,
                hint="use a value such as %s='[\"first\", \"second\"]'" % variable,
                parameter=definition.long_name,
                variable=variable,
                value=text,
                docs=getdoc(FaultCode.MALFORMED_ENVIRONMENT_LIST),
            )
        return items
    if definition.delimiter is not None:
        return text.split(definition.delimiter)
    return [text]


def _listed_parser(parse, /):
    def parser(definition, variable, text, /):
        return tuple(parse(definition, variable, item) for item in _split(definition, variable, text))
    return parser


STRATEGIES = MappingProxyType({
    ParameterKind.FLAG: Strategy("a boolean", _validate_flag, _parse_flag, False),
    ParameterKind.INTEGER: Strategy("an integer", _validate_integer, _parse_integer, None),
    ParameterKind.STRING: Strategy("a string", _validate_string, _parse_string, None),
    ParameterKind.CHOICE: Strategy("a string", _validate_choice, _parse_choice, None),
    ParameterKind.STRING_LIST: Strategy(
        "a list of strings", _listed(_validate_string), _listed_parser(_parse_string), ()
    ),
    ParameterKind.INTEGER_LIST: Strategy(
        "a list of integers", _listed(_validate_integer), _listed_parser(_parse_integer), ()
    ),
    ParameterKind.CHOICE_LIST: Strategy(
        "a list of strings", _listed(_validate_choice), _listed_parser(_parse_choice), ()
    ),
})


def read_environment(definition, /, environ=Unset):
    """
    read the environment override for a definition.

    returns Unset when no variable is bound, or when it is missing or empty.
    raises InvalidEnvironmentValueError when the value does not fit the kind.
    """
    if (variable := definition.environment_variable) is None:
        return Unset
    text = coalesce(environ, os.environ).get(variable)
    if text is None or text == "":
        return Unset
    return STRATEGIES[definition.kind].parse(definition, variable, text)


def resolve(definition, data, /, environ=Unset):
    """
    resolve the final value of a parameter.

    parameters
    - definition: ParameterDefinition
    - data: raw value from the token parser (None when omitted).
    - environ: mapping of environment variables; os.environ when Unset.

    returns
    - bool for flags, value | None for scalar kinds, tuple for list kinds.
    """
    strategy = STRATEGIES[definition.kind]

    if data is not None:
        if (value := strategy.validate(definition, data)) is not Unset:
            return value

    if (value := read_environment(definition, environ)) is not Unset:
        return value

    if definition.default is not None:
        return definition.default

    return strategy.empty


__all__ = (
    "Strategy",
    "STRATEGIES",
    "read_environment",
    "resolve",
)
