"""
Tiller parameters: resolved state for one declared parameter.

What this module provides
- Parameter: pairs a ParameterDefinition with the value resolved for it in the
  current parse cycle.
  • _set_value(data): ingest the external parser's raw data and resolve.
  • _get_value_from_env_var(): the environment override alone (or None).
  • value: the resolved value (read-only, never recomputed).
  • append_to_arg_list(arg_list): serialize the value back to argv tokens.
  • _get_supplementary_notes(notes): help notes derived from the definition.

Lifecycle
- Constructed once per declaration, before parsing. The value starts at the
  kind's empty value (False for flags, None for scalars, () for lists).
- _set_value runs once per parse cycle; calling it again re-resolves and the
  last call wins.

Environment
- Each parameter reads environment overrides from a mapping. Pass environ=
  at construction (or to _set_value) to resolve against a snapshot; the
  default is os.environ at call time.
"""
import json

from .definitions import ParameterDefinition, ParameterKind
from .resolution import STRATEGIES, read_environment, resolve
from .utils import *


def _delegate(name, /):
    """
    Internal: read-only property forwarding to the definition's field of the same name.
    """
    @rename(name)
    def getter(self):
        return getattr(self._definition, name)
    return property(getter)


class Parameter:
    """
    A named, typed, resolvable command-line parameter.

    The parameter owns its definition by reference and the resolved value;
    the definition never points back. All declaration fields are forwarded as
    read-only properties (kind, long_name, short_name, ...).
    """

    kind = _delegate("kind")
    long_name = _delegate("long_name")
    short_name = _delegate("short_name")
    environment_variable = _delegate("environment_variable")
    default = _delegate("default")
    required = _delegate("required")
    description = _delegate("description")
    argument_name = _delegate("argument_name")
    alternatives = _delegate("alternatives")
    delimiter = _delegate("delimiter")

    def __init__(self, definition, /, *, environ=Unset):
        if not isinstance(definition, ParameterDefinition):
            raise TypeError("Parameter() argument must be a parameter definition")
        self._definition = definition
        self._environ = environ
        self._value = STRATEGIES[definition.kind].empty

    @property
    def definition(self):
        return self._definition

    @property
    def value(self):
        """
        The resolved value.

        - flags: always a bool (False until resolved).
        - integer/string/choice: the value, or None when omitted without
          environment override or default.
        - list kinds: a tuple, empty when omitted without override or default.
        """
        return self._value

    def _set_value(self, data, /, environ=Unset):
        """
        Resolve and store the value from the parser's raw data.

        Raises
        - InvalidDataError: data does not match the kind.
        - InvalidEnvironmentValueError: the bound environment variable is malformed.

        A failed resolution leaves the kind's empty value, not the previous cycle's.
        """
        self._value = STRATEGIES[self.kind].empty
        self._value = resolve(self._definition, data, coalesce(environ, self._environ))

    def _get_value_from_env_var(self, environ=Unset):
        """
        Return the environment override, or None when there is none.
        """
        return coalesce(read_environment(self._definition, coalesce(environ, self._environ)))

    def append_to_arg_list(self, arg_list, /):
        """
        Append argv-style tokens that would reproduce the resolved value; returns arg_list.

        - flags: the long name, only when the value is True.
        - scalar kinds: long name and str(value), only when the value is not None.
        - list kinds: long name and item, once per item.
        """
        match self.kind:
            case ParameterKind.FLAG:
                if self._value:
                    arg_list.append(self.long_name)
            case kind if kind.plural:
                for item in self._value:
                    arg_list.append(self.long_name)
                    arg_list.append(str(item))
            case _:
                if self._value is not None:
                    arg_list.append(self.long_name)
                    arg_list.append(str(self._value))
        return arg_list

    def _get_supplementary_notes(self, notes, /):
        """
        Append help notes derived from the definition.

        Presentation only; help renderers call this and format the notes.
        """
        if (variable := self.environment_variable) is not None:
            notes.append(
                "This parameter may alternatively be specified via the %s environment variable." % variable
            )
            if self.kind.plural:
                if self.delimiter is not None:
                    notes.append(
                        "The environment value may be a JSON array of strings or a list separated by %s."
                        % json.dumps(self.delimiter)
                    )
                else:
                    notes.append("The environment value may be a JSON array of strings or a single value.")

        if (default := self.default) not in (None, ()):
            match self.kind.scalar:
                case ParameterKind.INTEGER if self.kind.plural:
                    notes.append("The default value is %s." % ", ".join(map(str, default)))
                case ParameterKind.INTEGER:
                    notes.append("The default value is %d." % default)
                case _ if self.kind.plural:
                    notes.append("The default value is %s." % ", ".join(map(json.dumps, default)))
                case _:
                    notes.append("The default value is %s." % json.dumps(default))

    def __rich_repr__(self):
        yield "long_name", self.long_name
        yield "kind", self.kind
        yield "value", self._value

    def __repr__(self):
        return "parameter(%s)" % ", ".join("%s=%r" % pair for pair in self.__rich_repr__())


__all__ = (
    "Parameter",
)
