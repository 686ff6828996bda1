"""
Tiller providers: own a set of parameters and drive one resolution cycle.

What this module provides
- ParameterProvider: the registry collaborator of the resolution engine.
  • define_*_parameter(...): declare a parameter of a given kind; names and
    environment variables must be unique within the provider.
  • get_parameter(long_name, kind=...): look a parameter up (optionally checking its kind).
  • process(data, environ=...): feed the raw data bag (keyed by long name)
    into every parameter, then check required parameters.
  • append_to_arg_list(arg_list): serialize every resolved value.

Fault handling
- Resolution faults (invalid data, invalid environment value) are surfaced
  through self.trigger(...), which merges the runtime options
  (shell/fancy/colorful/deferred):
  • non-deferred, non-shell: the fault is raised right away.
  • non-deferred, shell: the fault is printed (rich) and the process exits.
  • deferred: the fault is collected and reported at the end.
- After every parameter resolved, each required parameter whose value is
  None (or an empty tuple for lists) yields a MissingRequiredValueError.
- Collected faults are surfaced together as a ParameterExit group.

Quick start
    from tiller import ParameterProvider

    provider = ParameterProvider()
    count = provider.define_integer_parameter("--count", environment_variable="TOOL_COUNT", default=1)
    verbose = provider.define_flag_parameter("--verbose", short_name="-v")

    provider.process({"--count": None, "--verbose": False}, environ={"TOOL_COUNT": "3"})
    assert count.value == 3 and verbose.value is False
"""
import copy
import os
from collections.abc import Mapping

from .definitions import *
from .faults import *
from .faults import _surfaceable
from .parameters import Parameter
from .utils import *


class ParameterProvider:
    """
    Registry of parameters sharing one parse cycle.

    Parameters (keyword-only)
    - shell: render faults on stderr and exit instead of raising.
    - fancy: render faults inside a rich Panel.
    - colorful: colorize rendered faults.
    - deferred: collect resolution faults and report them together.
    - environ: default environment mapping for process(); os.environ when Unset.
    """

    def __init__(self, *, shell=False, fancy=False, colorful=True, deferred=False, environ=Unset):
        self.shell = bool(shell)
        self.fancy = bool(fancy)
        self.colorful = bool(colorful)
        self.deferred = bool(deferred)
        self._environ = environ
        self._parameters = {}
        self._short_names = {}
        self._variables = {}
        self._faults = []

    @property
    def parameters(self):
        """All parameters, in declaration order."""
        return tuple(self._parameters.values())

    def define_parameter(self, definition, /):
        """
        Register a parameter for a prebuilt definition and return it.

        Raises
        - TypeError: definition is not a ParameterDefinition.
        - ValueError: the long name, short name or environment variable is
          already used by another parameter of this provider.
        """
        if not isinstance(definition, ParameterDefinition):
            raise TypeError("define_parameter() argument must be a parameter definition")
        if definition.long_name in self._parameters:
            raise ValueError(f"a parameter named {definition.long_name!r} is already defined")
        if (short_name := definition.short_name) is not None and short_name in self._short_names:
            raise ValueError(
                f"the short name {short_name!r} of {definition.long_name!r} is already used"
                f" by {self._short_names[short_name]!r}"
            )
        if (variable := definition.environment_variable) is not None and variable in self._variables:
            raise ValueError(
                f"the environment variable {variable} of {definition.long_name!r} is already used"
                f" by {self._variables[variable]!r}"
            )

        parameter = Parameter(definition)
        self._parameters[definition.long_name] = parameter
        if short_name is not None:
            self._short_names[short_name] = definition.long_name
        if variable is not None:
            self._variables[variable] = definition.long_name
        return parameter

    def define_flag_parameter(self, long_name, /, **kwargs):
        return self.define_parameter(flag(long_name, **kwargs))

    def define_integer_parameter(self, long_name, /, **kwargs):
        return self.define_parameter(integer(long_name, **kwargs))

    def define_string_parameter(self, long_name, /, **kwargs):
        return self.define_parameter(string(long_name, **kwargs))

    def define_choice_parameter(self, long_name, /, alternatives, **kwargs):
        return self.define_parameter(choice(long_name, alternatives, **kwargs))

    def define_string_list_parameter(self, long_name, /, **kwargs):
        return self.define_parameter(string_list(long_name, **kwargs))

    def define_integer_list_parameter(self, long_name, /, **kwargs):
        return self.define_parameter(integer_list(long_name, **kwargs))

    def define_choice_list_parameter(self, long_name, /, alternatives, **kwargs):
        return self.define_parameter(choice_list(long_name, alternatives, **kwargs))

    def get_parameter(self, long_name, /, kind=Unset):
        """
        Return the parameter declared under long_name.

        Raises
        - KeyError: no parameter is declared under that name.
        - TypeError: kind is given and the parameter is of another kind.
        """
        try:
            parameter = self._parameters[long_name]
        except KeyError:
            raise KeyError(f"no parameter named {long_name!r} was defined") from None
        if kind is not Unset and parameter.kind is not ParameterKind(kind):
            raise TypeError(
                f"the parameter {long_name!r} is of kind {parameter.kind.value!r},"
                f" not {ParameterKind(kind).value!r}"
            )
        return parameter

    def get_flag_parameter(self, long_name, /):
        return self.get_parameter(long_name, ParameterKind.FLAG)

    def get_integer_parameter(self, long_name, /):
        return self.get_parameter(long_name, ParameterKind.INTEGER)

    def get_string_parameter(self, long_name, /):
        return self.get_parameter(long_name, ParameterKind.STRING)

    def get_choice_parameter(self, long_name, /):
        return self.get_parameter(long_name, ParameterKind.CHOICE)

    def get_string_list_parameter(self, long_name, /):
        return self.get_parameter(long_name, ParameterKind.STRING_LIST)

    def get_integer_list_parameter(self, long_name, /):
        return self.get_parameter(long_name, ParameterKind.INTEGER_LIST)

    def get_choice_list_parameter(self, long_name, /):
        return self.get_parameter(long_name, ParameterKind.CHOICE_LIST)

    def trigger(self, fault, /, **options):
        """
        surface a fault with this provider's runtime options merged in.

        deferred providers collect the fault instead; see _finalize().
        """
        if not _surfaceable(fault):
            raise TypeError("trigger() argument must have a __trigger__ and __replace__ methods")
        fault = copy.replace(fault, **options | dict(
            shell=self.shell, fancy=self.fancy, colorful=self.colorful, deferred=self.deferred
        ))
        if self.deferred:
            return self._faults.append(fault)
        trigger(fault)

    def process(self, data, /, environ=Unset):
        """
        run one resolution cycle.

        parameters
        - data: Mapping[str, raw value]
          the external parser's raw data bag, keyed by long name. missing keys
          are treated as None (omitted).
        - environ: Mapping[str, str]
          environment snapshot; falls back to the provider's, then os.environ.

        behavior
        - resolves every parameter in declaration order.
        - checks required parameters once everything resolved.
        - surfaces collected faults as a single ParameterExit.
        """
        if not isinstance(data, Mapping):
            raise TypeError("process() argument must be a mapping")

        environ = coalesce(environ, coalesce(self._environ, os.environ))
        self._faults = []

        for parameter in self._parameters.values():
            try:
                parameter._set_value(data.get(parameter.long_name), environ)
            except ParameterException as exception:
                self.trigger(exception)

        for parameter in self._parameters.values():
            if parameter.required and parameter.value in (None, ()):
                if parameter.environment_variable is not None:
                    hint = "pass %s or set the %s environment variable" % (
                        parameter.long_name, parameter.environment_variable
                    )
                else:
                    hint = "pass %s on the command line" % parameter.long_name
                self._faults.append(MissingRequiredValueError(
                    "the parameter %r is required, but no value was provided" % parameter.long_name,
                    title="missing required parameter",
                    code=FaultCode.MISSING_REQUIRED_VALUE,
                    hint=hint,
                    parameter=parameter.long_name,
                    docs=getdoc(FaultCode.MISSING_REQUIRED_VALUE),
                    shell=self.shell,
                    fancy=self.fancy,
                    colorful=self.colorful,
                ))

        self._finalize()

    def _finalize(self):
        """
        raise the collected faults, if any, as a single ParameterExit.
        """
        if not (faults := self._faults):
            return
        self._faults = []
        trigger(
            ParameterExit(faults),
            shell=self.shell,
            fancy=self.fancy,
            colorful=self.colorful,
        )

    def append_to_arg_list(self, arg_list, /):
        """
        serialize every parameter's resolved value, in declaration order.
        """
        for parameter in self._parameters.values():
            parameter.append_to_arg_list(arg_list)
        return arg_list

    def __rich_repr__(self):
        for parameter in self._parameters.values():
            yield parameter.long_name, parameter.value

    def __repr__(self):
        return "parameter-provider(%s)" % ", ".join("%r: %r" % pair for pair in self.__rich_repr__())


__all__ = (
    "ParameterProvider",
)
