"""
cmdtree internal helpers.

Scope
- The Unset sentinel and coalesce(), used by every sanitizer to tell an
  omitted keyword from an explicit None.
- rename(), mirror() and IntrospectableType: the plumbing that gives Option
  and Command their read-only fields and readable reprs.
- wrap(): the word wrapper behind the usage page.

Quick examples
    >>> coalesce(Unset, "fallback")
    'fallback'
    >>> wrap("one two three", 9, "  ")
    '  one two\\n  three\\n'
"""
import functools
import operator
import re
import textwrap
from typing import final


@final
class UnsetType:
    """
    Type of the Unset sentinel: "no value was passed".

    There is exactly one instance. It is falsy, prints as "Unset" and takes part
    in PEP 604 unions, so sanitizers can write isinstance(value, str | Unset).
    """
    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __init_subclass__(cls, **options):
        raise TypeError("UnsetType cannot be subclassed")

    def __ror__(self, other, /):
        try:
            return other | UnsetType
        except TypeError:
            return NotImplemented

    def __bool__(self):
        return False

    def __repr__(self):
        return "Unset"


Unset = UnsetType()


def coalesce(object, default=None, /):
    """Return object, or default when object is Unset. None, 0 and "" are kept."""
    return default if object is Unset else object


def rename(name, /):
    """
    Decorator setting __name__ and __qualname__ of a generated function.

    Closures built inside metaclasses and factories otherwise show up in
    tracebacks as "<locals>.wrapper".
    """
    if not isinstance(name, str):
        raise TypeError("rename() argument must be a string")

    def decorator(function):
        function.__name__ = function.__qualname__ = name
        return function

    return decorator


def _detach(object):
    """Copy lists, tuples, dicts and sets (recursively) so callers cannot alter internal state."""
    match object:
        case list() | tuple():
            return [_detach(item) for item in object]
        case dict():
            return {key: _detach(value) for key, value in object.items()}
        case set() | frozenset():
            return set(object)
        case _:
            return object


def mirror(name, /):
    """Read-only property returning a detached copy of self._<name>."""
    @rename(name)
    def getter(self):
        return _detach(getattr(self, f"_{name}"))

    return property(getter)


class IntrospectableType(type):
    """
    Metaclass for the public descriptor classes (Option, Command).

    - Every name in __introspectable__ becomes a read-only property over "_name".
    - __typename__ is the hyphenated class name ("Command" -> "command"), used as
      the subject of validation messages.
    - __repr__ and __rich_repr__ list the fields named in __displayable__, or all
      introspectable fields when the class does not narrow them.
    """
    __introspectable__ = ()
    __displayable__ = Unset

    def __new__(cls, name, bases, namespace, **options):
        fields = {field: mirror(field) for field in namespace.get("__introspectable__", ())}
        typename = re.sub(r"(?<!^)(?=[A-Z])", "-", name).lower()
        self = super().__new__(cls, name, bases, {**namespace, **fields, "__typename__": typename})

        @rename("__rich_repr__")
        def __rich_repr__(self):
            for field in coalesce(type(self).__displayable__, type(self).__introspectable__):
                yield field, getattr(self, field)

        @rename("__repr__")
        def __repr__(self):
            pairs = map(functools.partial(operator.mod, "%s=%r"), self.__rich_repr__())
            return f"{type(self).__typename__}({', '.join(pairs)})"

        self.__rich_repr__ = __rich_repr__
        self.__repr__ = __repr__
        return self


def wrap(text, width, prefixes=(), /):
    """
    Wrap text into lines of at most `width` characters, prefix included.

    Behavior
    - Whitespace runs are collapsed to a single space and the text is trimmed.
    - Line n uses prefixes[n]; once prefixes run out the last one repeats. A
      single string is treated as a one-element list.
    - Lines break between words (textwrap rules, hyphens left alone); a word
      longer than the room left after the prefix is cut to fill the line.
    - Every line, including the last, ends with "\\n".

    Parameters
    - text: str to wrap.
    - width: int, maximum line length including the prefix.
    - prefixes: str | Sequence[str].

    Returns
    - str: the wrapped block.
    """
    if not isinstance(text, str):
        raise TypeError("wrap() first argument must be a string")
    if not isinstance(width, int) or width < 1:
        raise ValueError("wrap() second argument must be a positive integer")
    if isinstance(prefixes, str):
        prefixes = [prefixes]
    prefixes = list(prefixes) or [""]

    text = " ".join(text.split())
    lines = []
    while True:
        prefix = prefixes[min(len(lines), len(prefixes) - 1)]
        # One line at a time, since textwrap only knows two indents.
        wrapper = textwrap.TextWrapper(width, initial_indent=prefix, break_on_hyphens=False)
        line = next(iter(wrapper.wrap(text)), prefix)
        lines.append(line)
        text = text[len(line) - len(prefix):].lstrip(" ")
        if not text:
            break
    return "".join(line + "\n" for line in lines)


__all__ = (
    "coalesce",
    "rename",
    "mirror",
    "wrap",
    "UnsetType",
    "Unset",
)
