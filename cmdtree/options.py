r"""
cmdtree option descriptors.

Overview
- OptionType: the five value kinds (switch, boolean, int, float, string).
- Option: a named option (long form and/or short form) plus the mutable value
  slot the parser writes into.
- looks_like_option_value(token): the one predicate the tokenizer uses to decide
  whether a following token may be consumed as a value.
- @switch(...): build a switch Option whose action is the decorated callable.

Metadata (sanitized on construction)
- long_form: Unset | str, at least two characters, no leading hyphen.
- short_form: Unset | str, exactly one character, not a hyphen.
  • At least one of the two forms is required.
- type: OptionType | str, defaults to "string".
- required / multiple / value_optional: bool.
  • value_optional is rejected for switch/boolean and for multiple options.
- default: Unset | scalar.
  • switch/boolean accept only False (and default to it); others default to None.
  • rejected together with multiple.
- label / placeholder / description: Unset | str.
  • "<<SAMPLE>>" inside the description becomes the placeholder when none is given.
- action: Unset | Callable[[Command], Any], switch options only.

Value slot
- value(want_list=False) reads, set_value(value, explicit=True) writes.
- A multiple option always holds a list once set; other options hold a scalar.
- explicit tells values typed on the command line from defaults.

Quick example:
    >>> verbose = Option("verbose", "v", type="boolean", description="Be chatty")
    >>> str(verbose), verbose.key
    ('--verbose', 'verbose')
    ...
    >>> @switch("dump", description="Dump the configuration and exit")
    >>> def dump(command): ...
"""
import builtins
import re
from enum import StrEnum

from .faults import InvalidOptionValueError
from .utils import *
from .utils import IntrospectableType


class OptionType(StrEnum):
    """Kinds of option values."""
    SWITCH = "switch"
    BOOLEAN = "boolean"
    INT = "int"
    FLOAT = "float"
    STRING = "string"

    @property
    def boolean(self):
        """True for the two presence-only kinds."""
        return self in (OptionType.SWITCH, OptionType.BOOLEAN)


def looks_like_option_value(token, /):
    """
    Tell whether a token may be consumed as the value of a preceding option.

    A token qualifies when it is at most one character long ("", "-", "7") or
    does not start with a hyphen. Anything else ("-x", "--name") is taken to be
    the next option.
    """
    return len(token) <= 1 or not token.startswith("-")


def _sanitize_forms(cls, metadata, /):
    """
    Internal: validate the long and short spellings.

    Raises
    - TypeError: a form is neither a string nor Unset.
    - ValueError: a form is malformed, or both are missing.
    """
    if not isinstance(long_form := metadata["long_form"], str | Unset):
        raise TypeError(f"{cls.__typename__} 'long_form' must be a string")
    elif isinstance(long_form, str) and (len(long_form) < 2 or long_form.startswith("-")):
        raise ValueError(f"{cls.__typename__} 'long_form' is illegal: {long_form!r}")

    if not isinstance(short_form := metadata["short_form"], str | Unset):
        raise TypeError(f"{cls.__typename__} 'short_form' must be a string")
    elif isinstance(short_form, str) and (len(short_form) != 1 or short_form == "-"):
        raise ValueError(f"{cls.__typename__} 'short_form' is illegal: {short_form!r}")

    if long_form is Unset and short_form is Unset:
        raise ValueError(f"{cls.__typename__} requires a 'long_form' or a 'short_form'")

    metadata["long_form"] = coalesce(long_form)
    metadata["short_form"] = coalesce(short_form)


def _sanitize_type(cls, metadata, /):
    """Internal: coerce the type field into an OptionType."""
    if isinstance(kind := metadata["type"], OptionType):
        return
    if not isinstance(kind, str):
        raise TypeError(f"{cls.__typename__} 'type' must be a string")
    try:
        metadata["type"] = OptionType(kind.strip().lower())
    except ValueError:
        raise ValueError(f"{cls.__typename__} 'type' is illegal: {kind!r}") from None


def _sanitize_flags(cls, metadata, /):
    """Internal: required, multiple and value_optional must be real booleans."""
    for name in ("required", "multiple", "value_optional"):
        if not isinstance(metadata[name], bool):
            raise TypeError(f"{cls.__typename__} {name!r} must be a boolean")


def _sanitize_strings(cls, metadata, /):
    """
    Internal: validate display metadata and extract a "<<placeholder>>".

    The marker is only honoured when no explicit placeholder is given; it is
    replaced in the description by the bare sample text.
    """
    for name in ("label", "placeholder", "description"):
        if not isinstance(metadata[name], str | Unset):
            raise TypeError(f"{cls.__typename__} {name!r} must be a string")

    description = metadata["description"]
    if isinstance(description, str) and metadata["placeholder"] is Unset:
        if match := re.search(r"<<(.+)>>", description):
            metadata["description"] = re.sub(r"<<(.+)>>", r"\1", description)
            metadata["placeholder"] = match.group(1)

    for name in ("label", "placeholder", "description"):
        metadata[name] = coalesce(metadata[name])


def _sanitize_semantics(cls, metadata, /):
    """
    Internal: cross-field rules between type, default, multiple, value_optional and action.

    Raises
    - TypeError: action is not callable.
    - ValueError: an inconsistent combination was requested.
    """
    kind = metadata["type"]

    if metadata["default"] is not Unset and metadata["multiple"]:
        raise ValueError(f"{cls.__typename__} 'default' is not permitted for options admitting multiple values")

    if kind.boolean:
        if metadata["default"] is not Unset and metadata["default"] is not False:
            raise ValueError(f"{cls.__typename__} 'default' of a {kind} option must be False")
        metadata["default"] = False
    else:
        metadata["default"] = coalesce(metadata["default"])

    if metadata["value_optional"] and (kind.boolean or metadata["multiple"]):
        raise ValueError(
            f"{cls.__typename__} 'value_optional' is not permitted for boolean options "
            f"or options admitting multiple values"
        )

    if (action := metadata["action"]) is not Unset:
        if not builtins.callable(action):
            raise TypeError(f"{cls.__typename__} 'action' must be callable")
        if kind is not OptionType.SWITCH:
            raise ValueError(f"{cls.__typename__} 'action' may be specified only for switch options")
    metadata["action"] = coalesce(action)


class Option(metaclass=IntrospectableType):
    """
    A named command-line option and its value slot.

    Construction validates every field up front (see module docstring); the
    option is then registered on a Command, which owns the lookup indices. The
    value slot is reset by Command.clear() and written by the parser through
    set_value().
    """

    __introspectable__ = (
        "long_form",
        "short_form",
        "type",
        "required",
        "default",
        "label",
        "placeholder",
        "description",
        "multiple",
        "value_optional",
        "action",
    )

    __displayable__ = (
        "long_form",
        "short_form",
        "type",
        "required",
        "default",
        "multiple",
        "value_optional",
    )

    def __init__(
            self,
            long_form=Unset,
            short_form=Unset,
            *,
            type=OptionType.STRING,
            required=False,
            default=Unset,
            label=Unset,
            placeholder=Unset,
            description=Unset,
            multiple=False,
            value_optional=False,
            action=Unset,
    ):
        cls = builtins.type(self)
        metadata = {
            "long_form": long_form,
            "short_form": short_form,
            "type": type,
            "required": required,
            "default": default,
            "label": label,
            "placeholder": placeholder,
            "description": description,
            "multiple": multiple,
            "value_optional": value_optional,
            "action": action,
        }
        _sanitize_forms(cls, metadata)
        _sanitize_type(cls, metadata)
        _sanitize_flags(cls, metadata)
        _sanitize_strings(cls, metadata)
        _sanitize_semantics(cls, metadata)

        for name, object in metadata.items():
            setattr(self, "_" + name, object)

        self._value = None
        self._explicit = False
        if self._default is not None:
            self.set_value(self._default, explicit=False)

    @classmethod
    def from_config(cls, config, /):
        """
        Build an Option from a mapping of field names.

        Unknown keys are rejected with TypeError naming the offending key.
        """
        if isinstance(config, cls):
            return config
        if not hasattr(config, "keys"):
            raise TypeError(f"{cls.__typename__} configuration must be a mapping")
        for name in config.keys():
            if name not in cls.__introspectable__:
                raise TypeError(f"{cls.__typename__} configuration has an illegal field: {name!r}")
        return cls(**config)

    @property
    def key(self):
        """Canonical identifier: the long form when present, else the short form."""
        return self._long_form if self._long_form is not None else self._short_form

    @property
    def explicit(self):
        return self._explicit

    def __str__(self):
        return f"--{self._long_form}" if self._long_form is not None else f"-{self._short_form}"

    def has_value(self):
        return self._value is not None

    def has_explicit_value(self):
        return self._explicit

    def value(self, want_list=False):
        """
        Return the current value.

        - Unset slot: [] for a multiple option when want_list is true, else None.
        - want_list: the stored value as is (a fresh list for multiple options).
        - Multiple option without want_list: the first collected value.
        """
        if self._value is None:
            return [] if self._multiple and want_list else None
        if want_list:
            return list(self._value) if self._multiple else self._value
        if self._multiple:
            return self._value[0]
        return self._value

    def set_value(self, value, explicit=True):
        """
        Store a value after checking it against the option's shape and type.

        None always clears the slot. Lists (or tuples) are required for multiple
        options and refused otherwise; every element must match the option type,
        except the literal True accepted by value-optional options.

        Raises
        - InvalidOptionValueError: on a shape or type mismatch.
        """
        if value is not None:
            if self._multiple != isinstance(value, list | tuple):
                expected, found = ("a list", "a scalar") if self._multiple else ("a scalar", "a list")
                raise InvalidOptionValueError(
                    f"Invalid value {value!r} for option {self}; expected {expected}; found {found}",
                    option=self,
                )
            if self._multiple:
                value = list(value)
                for element in value:
                    self._check(element)
            else:
                self._check(value)
        self._value = value
        self._explicit = explicit

    def _check(self, value):
        if self._value_optional and value is True:
            return
        match self._type:
            case OptionType.SWITCH | OptionType.BOOLEAN:
                valid, expected = isinstance(value, bool), "boolean"
            case OptionType.INT:
                valid, expected = isinstance(value, int) and not isinstance(value, bool), "an integer"
            case OptionType.FLOAT:
                valid, expected = isinstance(value, int | float) and not isinstance(value, bool), "a number"
            case _:
                valid, expected = isinstance(value, str), "a string"
        if not valid:
            raise InvalidOptionValueError(
                f"The value of {self} must be {expected}; {value!r} provided",
                option=self,
            )


def switch(long_form=Unset, short_form=Unset, /, **metadata):
    """
    Build a switch Option whose action is the decorated callable.

    Usage
        @switch("dump", "d", description="Dump the configuration and exit")
        def dump(command):
            ...

        command.add_option(dump)

    Parameters
    - long_form, short_form: forwarded to Option.
    - **metadata: any other Option field except 'type' and 'action'.

    Returns
    - A decorator turning a callable into an Option of type switch.
    """
    for name in ("type", "action"):
        if name in metadata:
            raise TypeError(f"@switch() does not accept {name!r}")

    @rename("switch")
    def wrapper(callback, /):
        if not callable(callback):
            raise TypeError("@switch() must be applied to a callable")
        return Option(long_form, short_form, type=OptionType.SWITCH, action=callback, **metadata)

    return wrapper


__all__ = (
    "OptionType",
    "Option",
    "looks_like_option_value",
    "switch",
)

