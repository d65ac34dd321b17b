"""
cmdtree command layer: build, parse, and run hierarchical command lines.

What this module provides
- Command: a named node owning options, subcommands and the parse state of the
  last run, with:
  • Registration: add_option()/add_subcommand() and typed shortcuts.
  • Lazy injection of --help/-h, --version/-v and the help/version subcommands.
  • A single-pass tokenizer (long, short and combined short options, optional
    values, "--" terminator, subcommand recursion) followed by validation and
    coercion of the collected values.
  • execute(): parse, descend to the deepest resolved subcommand and run its
    active switch, its action, or print its usage.

- Factories and helpers:
  • command(...): create a Command from a callable (direct or decorator form).
  • invoke(obj, prompt): convenience runner for Commands or plain callables.

Quick start
    from cmdtree import Command, invoke

    tool = Command("tool", description="Frobnicate files", version="1.0.0")
    tool.add_option(long_form="count", short_form="c", type="int", default=1)
    tool.add_option(long_form="dry-run", short_form="n", type="boolean")

    @tool.command(description="Show the current state")
    def status(command):
        print(command.parent.values(), command.arguments)

    if __name__ == "__main__":
        invoke(tool)                       # reads sys.argv[1:]
        # tool.execute(["tool", "-n", "status", "a.txt"])

Design notes
- argv[0] is always the name the command was invoked as and is never scanned.
- A matched subcommand consumes the rest of the vector; the parent keeps no
  positional arguments in that case.
- Parse faults go through faults.trigger(), so callers choose between raising
  and printing with throw_on_error.

See also
- cmdtree.options for option semantics and value checks.
- cmdtree.usage for the help layout.
- cmdtree.faults for fault codes and rendering.
"""
import builtins
import difflib
import inspect
import os.path
import re
import shlex
import sys
import weakref
from collections.abc import Iterable, Mapping

from .engine import Engine, report
from .faults import *
from .logs import get_logger
from .options import Option, OptionType, looks_like_option_value
from .usage import render
from .utils import *
from .utils import IntrospectableType

logger = get_logger(__name__)

_NUMERIC = re.compile(r"\s*[+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?\s*")
_INTEGER = re.compile(r"\s*[+-]?\d+\s*")


def _echo(text):
    # Help and version text is written untouched; tabs and trailing blanks survive.
    sys.stdout.write(text)


def _sanitize_name(cls, metadata):
    """
    Internal: validate the command name.

    Raises
    - TypeError: the name is not a string.
    - ValueError: the name is empty, contains whitespace or starts with a hyphen.
    """
    if not isinstance(name := metadata["name"], str):
        raise TypeError(f"{cls.__typename__} 'name' must be a string")
    elif not name or re.search(r"\s", name):
        raise ValueError(f"{cls.__typename__} 'name' must be a non-empty word")
    elif name.startswith("-"):
        raise ValueError(f"{cls.__typename__} 'name' cannot start with a hyphen: {name!r}")


def _sanitize_strings(cls, metadata):
    """Internal: optional scalars must be strings; Unset becomes None."""
    for name in ("description", "notes", "version", "copyright", "bug_email"):
        if not isinstance(metadata[name], str | Unset):
            raise TypeError(f"{cls.__typename__} {name!r} must be a string")
        metadata[name] = coalesce(metadata[name])


def _sanitize_iterables(cls, metadata):
    """
    Internal: normalize synopsis/examples into lists of strings.

    A lone string is accepted and treated as a one-element list.
    """
    for name in ("synopsis", "examples"):
        if isinstance(collection := metadata[name], str):
            collection = [collection]
        if not isinstance(collection, Iterable):
            raise TypeError(f"{cls.__typename__} {name!r} must be an iterable of strings")
        collection = list(collection)
        if not all(isinstance(item, str) for item in collection):
            raise TypeError(f"{cls.__typename__} {name!r} must be an iterable of strings")
        metadata[name] = collection


def _sanitize_behavior(cls, metadata):
    """Internal: callbacks must be callable, flags must be booleans."""
    if (action := metadata["action"]) is not Unset and not builtins.callable(action):
        raise TypeError(f"{cls.__typename__} 'action' must be callable")
    metadata["action"] = coalesce(action)

    if not builtins.callable(formatter := coalesce(metadata["formatter"], render)):
        raise TypeError(f"{cls.__typename__} 'formatter' must be callable")
    metadata["formatter"] = formatter

    for name in ("helpless", "no_engine"):
        if not isinstance(metadata[name], bool):
            raise TypeError(f"{cls.__typename__} {name!r} must be a boolean")


def _tokenize(argv, /):
    """
    Internal: materialize an argument vector (argv[0] included).

    - Unset: a copy of sys.argv.
    - str: shell-like splitting via shlex.split.
    - Iterable[str]: copied as is; empty strings are meaningful and kept.
    """
    if argv is Unset:
        return list(sys.argv)
    if isinstance(argv, str):
        return shlex.split(argv)
    if isinstance(argv, Iterable):
        argv = list(argv)
        if all(isinstance(token, str) for token in argv):
            return argv
    raise TypeError("argument vector must be a string or an iterable of strings")


def _coerce(command, option, value):
    """
    Internal: convert one collected occurrence to the option's value type.

    Literal True (flags, value-optional options without a value) passes through.
    Int accepts any numeric string whose integer and float readings agree
    ("33", "33.0", "1e3"); Float accepts any numeric string.
    """
    if isinstance(value, bool):
        return value
    match option.type:
        case OptionType.INT:
            if _NUMERIC.fullmatch(value) and float(value).is_integer():
                return int(value) if _INTEGER.fullmatch(value) else int(float(value))
            raise InvalidOptionValueError(
                f"The value of {option} must be an integer; '{value}' provided",
                command=command,
                option=option,
            )
        case OptionType.FLOAT:
            if _NUMERIC.fullmatch(value):
                return float(value)
            raise InvalidOptionValueError(
                f"The value of {option} must be a floating point value; '{value}' provided",
                command=command,
                option=option,
            )
        case _:
            return value


class Command(metaclass=IntrospectableType):
    """
    A command (or subcommand) of a command line.

    Responsibilities
    - Registry: options indexed by long and short form, subcommands by name.
    - Parsing: parse() resets the previous state, scans the vector and stores
      values on the options, positional arguments and the resolved subcommand.
    - Dispatch: execute() runs the deepest resolved command's switch or action.
    - Rendering: usage() produces the help page through the formatter.

    Lifecycle
    - Build the tree once (options, subcommands, metadata).
    - The first parse()/usage() fires the pre-parse latch, which adds the
      automatic help/version entries; helpless and version are frozen afterwards.
    - Parse as many times as needed; each call starts from a clean slate.

    Extension points
    - Subclasses may override do_pre_parse(), do_post_parse() and do_execute();
      overrides of do_pre_parse() must call the parent implementation.

    Notes
    - The parent link is a weak reference; keep the root alive while using a subtree.
    - Properties listed in __introspectable__ are read-only; use the set_*/add_*
      methods to change them.
    """

    __introspectable__ = (
        "name",
        "description",
        "notes",
        "synopsis",
        "examples",
        "options",
        "subcommands",
        "action",
        "helpless",
        "version",
        "copyright",
        "bug_email",
        "formatter",
        "no_engine",
        "arguments",
        "active_subcommand",
        "active_switch",
    )

    __displayable__ = (
        "name",
        "description",
        "version",
        "options",
        "subcommands",
        "arguments",
    )

    def __init__(
            self,
            name=Unset,
            description=Unset,
            notes=Unset,
            synopsis=(),
            examples=(),
            options=(),
            subcommands=(),
            *,
            action=Unset,
            helpless=False,
            version=Unset,
            copyright=Unset,
            bug_email=Unset,
            formatter=Unset,
            no_engine=False,
    ):
        """
        Build a command.

        Parameters
        - name: str. Defaults to the basename of sys.argv[0].
        - description, notes: str | Unset. Help text (wrapped when rendered).
        - synopsis, examples: str | Iterable[str]. Lines shown after the command chain.
        - options: Iterable[Option | Mapping]. Registered in order via add_option().
        - subcommands: Iterable[Command | Mapping]. Registered via add_subcommand().
        - action: Callable[[Command], Any] | Unset. Run by execute() when this is the
          deepest resolved command and no switch fired.
        - helpless: bool. Suppresses the automatic help option and subcommand.
        - version, copyright, bug_email: str | Unset. version also enables the
          automatic version option and subcommand.
        - formatter: Callable[[Command], str]. Defaults to cmdtree.usage.render.
        - no_engine: bool. Run execute() without the Engine wrapper.

        Raises
        - TypeError/ValueError on malformed metadata.
        - DuplicateOptionError/DuplicateSubcommandError on colliding registrations.
        """
        cls = type(self)
        metadata = {
            "name": coalesce(name, os.path.basename(sys.argv[0]) or "command"),
            "description": description,
            "notes": notes,
            "synopsis": synopsis,
            "examples": examples,
            "action": action,
            "helpless": helpless,
            "version": version,
            "copyright": copyright,
            "bug_email": bug_email,
            "formatter": formatter,
            "no_engine": no_engine,
        }
        _sanitize_name(cls, metadata)
        _sanitize_strings(cls, metadata)
        _sanitize_iterables(cls, metadata)
        _sanitize_behavior(cls, metadata)
        for name, object in metadata.items():
            setattr(self, "_" + name, object)

        self._options = []
        self._long_forms = {}
        self._short_forms = {}
        self._subcommands = {}
        self._parent = None
        self._pre_parsed = False
        self._arguments = []
        self._active_subcommand = None
        self._active_switch = None

        for option in options:
            self.add_option(option)
        for subcommand in subcommands:
            self.add_subcommand(subcommand)

    @property
    def parent(self):
        """The command this one is attached to, or None for a root."""
        return self._parent() if self._parent is not None else None

    @property
    def root(self):
        """
        Return the topmost command in the current command hierarchy.

        Walks up via .parent until there is no parent and returns that node.
        """
        child, parent = self, self.parent
        while parent is not None:
            child, parent = parent, parent.parent
        return child

    @property
    def path(self):
        """
        Return the full ancestry from root to this command as a tuple.

        The first element is the root command, the last is the current node;
        the usage renderer joins their names to build "tool sub subsub".
        """
        path = [command := self]
        while (command := command.parent) is not None:
            path.append(command)
        return tuple(reversed(path))

    @property
    def pre_parsed(self):
        return self._pre_parsed

    # ── Metadata ───────────────────────────────────────────────────────────────

    def set_description(self, description):
        if not isinstance(description, str | None):
            raise TypeError(f"{type(self).__typename__} 'description' must be a string")
        self._description = description

    def set_notes(self, notes):
        if not isinstance(notes, str | None):
            raise TypeError(f"{type(self).__typename__} 'notes' must be a string")
        self._notes = notes

    def add_synopsis(self, synopsis):
        if not isinstance(synopsis, str):
            raise TypeError(f"{type(self).__typename__} 'synopsis' must be a string")
        self._synopsis.append(synopsis)

    def add_example(self, example):
        if not isinstance(example, str):
            raise TypeError(f"{type(self).__typename__} 'examples' must be a string")
        self._examples.append(example)

    def set_action(self, action):
        if action is not None and not callable(action):
            raise TypeError(f"{type(self).__typename__} 'action' must be callable")
        self._action = action

    def set_helpless(self, helpless):
        """
        Enable or disable the automatic help option and subcommand.

        Raises
        - StateError: once the command has been parsed or rendered.
        """
        if self._pre_parsed:
            raise StateError(
                f"The 'helpless' flag of {self._name} cannot change after parsing",
                command=self,
            )
        if not isinstance(helpless, bool):
            raise TypeError(f"{type(self).__typename__} 'helpless' must be a boolean")
        self._helpless = helpless

    def set_version(self, version):
        """
        Set the version string shown by --version.

        Raises
        - StateError: once the command has been parsed or rendered.
        """
        if self._pre_parsed:
            raise StateError(
                f"The version of {self._name} cannot change after parsing",
                command=self,
            )
        if not isinstance(version, str | None):
            raise TypeError(f"{type(self).__typename__} 'version' must be a string")
        self._version = version

    def set_copyright(self, copyright):
        if not isinstance(copyright, str | None):
            raise TypeError(f"{type(self).__typename__} 'copyright' must be a string")
        self._copyright = copyright

    def set_bug_email(self, bug_email):
        if not isinstance(bug_email, str | None):
            raise TypeError(f"{type(self).__typename__} 'bug_email' must be a string")
        self._bug_email = bug_email

    def set_formatter(self, formatter):
        if not callable(formatter):
            raise TypeError(f"{type(self).__typename__} 'formatter' must be callable")
        self._formatter = formatter

    # ── Options ────────────────────────────────────────────────────────────────

    def has_option(self, name):
        """True if an option is registered under this long (2+ chars) or short form."""
        return name in (self._long_forms if len(name) > 1 else self._short_forms)

    def lookup_option(self, name):
        """
        Return the option registered under a long or short form.

        One-character names are looked up among short forms, longer ones among
        long forms. An Option instance is resolved through its key.

        Raises
        - ValueError: the name is empty.
        - UnknownOptionError: nothing is registered under that name.
        """
        if isinstance(name, Option):
            name = name.key
        if not isinstance(name, str):
            raise TypeError("lookup_option() argument must be a string")
        if not name:
            raise ValueError("Missing option name")

        registry, prefix = (self._long_forms, "--") if len(name) > 1 else (self._short_forms, "-")
        try:
            return registry[name]
        except KeyError:
            suggestions = difflib.get_close_matches(name, registry.keys(), n=1)
            raise UnknownOptionError(
                f"No such option: {prefix}{name}",
                command=self,
                hint=f"did you mean {prefix}{suggestions[0]}?" if suggestions else Unset,
            ) from None

    def add_option(self, option=Unset, /, **fields):
        """
        Register an option.

        Accepts an Option, a mapping of Option fields, or the fields as keyword
        arguments. Returns the registered Option.

        Raises
        - TypeError: unknown fields, or both an option and fields given.
        - DuplicateOptionError: the long or short form is taken on this command.
        """
        if option is Unset:
            option = Option.from_config(fields)
        elif fields:
            raise TypeError("add_option() takes an option or keyword fields, not both")
        else:
            option = Option.from_config(option)

        for form, registry, prefix in (
            (option.long_form, self._long_forms, "--"),
            (option.short_form, self._short_forms, "-"),
        ):
            if form is not None and form in registry:
                raise DuplicateOptionError(f"Duplicate option: {prefix}{form}", command=self, option=option)

        self._options.append(option)
        if option.long_form is not None:
            self._long_forms[option.long_form] = option
        if option.short_form is not None:
            self._short_forms[option.short_form] = option
        logger.debug("%s: registered option %s", self._name, option)
        return option

    def add_switch_option(self, **fields):
        return self.add_option(type=OptionType.SWITCH, **fields)

    def add_boolean_option(self, **fields):
        return self.add_option(type=OptionType.BOOLEAN, **fields)

    def add_int_option(self, **fields):
        return self.add_option(type=OptionType.INT, **fields)

    def add_float_option(self, **fields):
        return self.add_option(type=OptionType.FLOAT, **fields)

    # ── Subcommands ────────────────────────────────────────────────────────────

    def has_subcommand(self, name):
        return name in self._subcommands

    def lookup_subcommand(self, name):
        """
        Return the direct subcommand with the given name.

        Raises
        - UnknownSubcommandError: no such subcommand.
        """
        try:
            return self._subcommands[name]
        except KeyError:
            suggestions = difflib.get_close_matches(str(name), self._subcommands.keys(), n=1)
            raise UnknownSubcommandError(
                f"No such subcommand: {name}",
                command=self,
                hint=f"did you mean {suggestions[0]}?" if suggestions else Unset,
            ) from None

    def add_subcommand(self, command=Unset, /, **fields):
        """
        Attach a subcommand and point its parent link at this command.

        Accepts a Command, a mapping of Command fields, or the fields as keyword
        arguments. Returns the attached Command.

        Raises
        - TypeError: wrong argument shape or unknown fields.
        - ValueError: the command already belongs to another parent.
        - DuplicateSubcommandError: the name is taken on this command.
        """
        if command is Unset:
            command = Command(**fields)
        elif fields:
            raise TypeError("add_subcommand() takes a command or keyword fields, not both")
        elif isinstance(command, Mapping):
            command = Command(**command)
        elif not isinstance(command, Command):
            raise TypeError("add_subcommand() argument must be a command or a mapping")

        if command.parent is not None:
            raise ValueError(f"{type(self).__typename__} {command.name!r} is already attached to {command.parent.name!r}")
        if command.name in self._subcommands:
            raise DuplicateSubcommandError(f"Duplicate subcommand: {command.name}", command=self)

        self._subcommands[command.name] = command
        command._parent = weakref.ref(self)
        logger.debug("%s: attached subcommand %s", self._name, command.name)
        return command

    def command(self, source=Unset, /, **metadata):
        """
        Create a subcommand from a callable and attach it here.

        Same invocation modes as the module-level command(): direct
        (self.command(func, ...)) or decorator (@self.command(...)).
        """
        return command(source, parent=self, **metadata)

    # ── Values ─────────────────────────────────────────────────────────────────

    def has_value(self, option):
        return self.lookup_option(option).has_value()

    def has_explicit_value(self, option):
        return self.lookup_option(option).has_explicit_value()

    def get_value(self, option, want_list=False):
        return self.lookup_option(option).value(want_list)

    def set_value(self, option, value):
        self.lookup_option(option).set_value(value)

    def values(self):
        """Map each option key to value(True), for every option that holds a value."""
        return {option.key: option.value(True) for option in self._options if option.has_value()}

    # ── Running ────────────────────────────────────────────────────────────────

    def parse(self, argv=Unset, /, *, throw_on_error=True):
        """
        Parse an argument vector into this command tree.

        Parameters
        - argv: Unset (sys.argv), a shell-like string, or an iterable of strings.
          The first element is the invoked name and is not scanned.
        - throw_on_error: raise faults (default) or print them and return.
        """
        argv = _tokenize(argv)
        try:
            self._parse(argv)
        except CommandException as error:
            trigger(error, throw_on_error=throw_on_error)

    def execute(self, argv=Unset, /, *, throw_on_error=False):
        """
        Parse, then run the deepest resolved command.

        Dispatch order on the deepest command: its active switch's action, its
        own action, then do_execute() (prints the usage page). Each callback
        receives that command and its return value is handed back.

        Parameters
        - argv: as for parse().
        - throw_on_error: re-raise errors from parsing or the callback, or print
          them and return None (default).
        """
        argv = _tokenize(argv)

        @rename("dispatch")
        def dispatch():
            try:
                self._parse(argv)
                command = self
                while command._active_subcommand is not None:
                    command = command._active_subcommand
                if command._active_switch is not None:
                    logger.debug("%s: running switch %s", command._name, command._active_switch)
                    return command._active_switch.action(command)
                if command._action is not None:
                    logger.debug("%s: running action", command._name)
                    return command._action(command)
                return command.do_execute()
            except CommandException as error:
                trigger(error, throw_on_error=throw_on_error)
            except Exception as error:
                if throw_on_error:
                    raise
                logger.debug("%s: execution failed", self._name, exc_info=True)
                report(error)

        if self._no_engine:
            return dispatch()
        return Engine().run(dispatch, throw_on_error=throw_on_error)

    def clear(self):
        """Reset every option to its default (not explicit) and drop the parse results."""
        for option in self._options:
            option.set_value(option.default, explicit=False)
        self._active_switch = None
        self._arguments = []
        self._active_subcommand = None

    def usage(self):
        """Return the help page, firing the pre-parse latch first."""
        self.pre_parse()
        return render(self)

    def pre_parse(self):
        """Run do_pre_parse() once per command."""
        if not self._pre_parsed:
            self._pre_parsed = True
            self.do_pre_parse()

    def do_pre_parse(self):
        """
        Add the automatic version and help entries.

        - version set: a --version/-v switch printing it, plus a "version"
          subcommand when this command has subcommands.
        - not helpless: a --help/-h switch printing formatter(command), plus a
          "help" subcommand when this command has subcommands.

        Entries the user already registered are left alone; a short form that is
        taken is simply not assigned.
        """
        if self._version is not None:
            if not self.has_option("version"):
                self.add_option(
                    long_form="version",
                    short_form="v" if not self.has_option("v") else Unset,
                    type=OptionType.SWITCH,
                    label="version",
                    description="Displays the version",
                    action=self._print_version,
                )
            if self._subcommands and not self.has_subcommand("version"):
                self.add_subcommand(
                    name="version",
                    description="Displays the version",
                    action=self._print_version,
                )
        if not self._helpless:
            if not self.has_option("help"):
                self.add_option(
                    long_form="help",
                    short_form="h" if not self.has_option("h") else Unset,
                    type=OptionType.SWITCH,
                    label="help",
                    description="Displays this help",
                    action=self._print_help,
                )
            if self._subcommands and not self.has_subcommand("help"):
                self.add_subcommand(
                    name="help",
                    description="Displays this help",
                    action=self._print_subcommand_help,
                )

    def do_post_parse(self):
        """Hook run after a successful parse of this command."""

    def do_execute(self):
        """Default handler: print the usage page and report failure."""
        _echo(self.usage())
        return False

    def __invoke__(self, prompt=Unset, /, *, throw_on_error=False):
        """
        Execute this command with tokens that exclude the program name.

        Parameters
        - prompt:
          • Unset: read tokens from sys.argv[1:].
          • str: shell-like string; will be split via shlex.split.
          • Iterable[str]: pre-tokenized sequence.
        """
        if prompt is Unset:
            tokens = sys.argv[1:]
        else:
            tokens = _tokenize(prompt)
        return self.execute([self._name, *tokens], throw_on_error=throw_on_error)

    # ── Internals ──────────────────────────────────────────────────────────────

    def _print_version(self, command):
        _echo(self._version)

    def _print_help(self, command):
        _echo(command.formatter(command))

    def _print_subcommand_help(self, command):
        if not (arguments := command.arguments):
            _echo(self.usage())
        else:
            _echo(self.lookup_subcommand(arguments[0]).usage())

    def _set_active_switch(self, option):
        if self._active_switch is not None:
            raise ConflictingSwitchesError(
                f"The options {self._active_switch} and {option} are incompatible",
                command=self,
            )
        self._active_switch = option

    def _parse(self, argv):
        """
        Scan argv[1:], store the results and recurse into a matched subcommand.

        Occurrences are collected per option during the scan, then checked and
        coerced together. Values are stored only once every check has passed, so
        a failed parse leaves the options of this command at their defaults.
        """
        self.pre_parse()
        self.clear()
        logger.debug("%s: parsing %r", self._name, argv[1:])

        occurrences = {}
        index, count = 1, len(argv)
        while index < count:
            token = argv[index]
            following = argv[index + 1] if index + 1 < count else Unset

            if token == "--":
                index += 1
                break

            elif len(token) > 3 and token.startswith("--") and token[2] != "-":
                name, separator, inline = token[2:].partition("=")
                if not name:
                    raise UnknownOptionError(f"No such option: {token}", command=self)
                option = self.lookup_option(name)
                values = occurrences.setdefault(option, [])
                if separator:
                    values.append(inline)
                elif option.type.boolean:
                    values.append(True)
                    if option.action is not None:
                        self._set_active_switch(option)
                elif following is not Unset and looks_like_option_value(following):
                    values.append(following)
                    index += 1
                elif option.value_optional:
                    values.append(True)
                else:
                    raise MissingOptionArgumentError(
                        f"The option '{token}' requires an argument",
                        command=self,
                        option=option,
                    )

            elif len(token) > 1 and token.startswith("-"):
                for position in range(1, len(token)):
                    option = self.lookup_option(token[position])
                    values = occurrences.setdefault(option, [])
                    if option.type.boolean:
                        values.append(True)
                        if option.action is not None:
                            self._set_active_switch(option)
                        continue

                    # A value-taking option ends the combination.
                    if remainder := token[position + 1:]:
                        values.append(remainder)
                    elif following is not Unset and looks_like_option_value(following):
                        values.append(following)
                        index += 1
                    elif option.value_optional:
                        values.append(True)
                    else:
                        raise MissingOptionArgumentError(
                            f"The option '{token}' requires an argument",
                            command=self,
                            option=option,
                        )
                    break

            elif token in self._subcommands:
                if self._active_switch is not None:
                    raise SwitchSubcommandConflictError(
                        f"The option {self._active_switch} cannot be used with subcommands",
                        command=self,
                    )
                self._active_subcommand = child = self._subcommands[token]
                logger.debug("%s: descending into %s", self._name, child._name)
                child._parse(argv[index:])
                break

            else:
                break

            index += 1

        arguments = [] if self._active_subcommand is not None else list(argv[index:])

        coerced = {}
        for option, values in occurrences.items():
            if not option.multiple and len(values) > 1:
                raise RepeatedOptionError(f"The option {option} may occur only once", command=self, option=option)
            values = [_coerce(self, option, value) for value in values]
            coerced[option] = values if option.multiple else values[0]

        for option in self._options:
            if option.required and option not in occurrences:
                raise MissingRequiredOptionError(f"The option {option} is required", command=self, option=option)

        # Nothing is stored until every occurrence has passed validation.
        for option, value in coerced.items():
            option.set_value(value, explicit=True)
        self._arguments = arguments
        self.do_post_parse()


def command(source=Unset, /, *, parent=Unset, **metadata):
    """
    Create a Command whose action is a callable, or return a decorator doing so.

    Invocation modes
    - Direct:     cmd = command(func, name="x", ...)
    - Decorator:  @command(name="x", ...)
                  def func(command): ...

    Defaults
    - name: the callable's __name__ with underscores turned into hyphens.
    - description: the callable's docstring, when it has one.

    Parameters
    - source: Unset | Callable[[Command], Any]
    - parent: Command | Unset. When given, the new command is attached to it.
    - **metadata: forwarded to Command (options, subcommands, version, ...).

    Returns
    - Command | Callable[[Callable], Command]
    """
    if not isinstance(parent, Command | Unset):
        raise TypeError("command() 'parent' must be a command")

    @rename("command")
    def wrapper(source, /):
        if not callable(source) or isinstance(source, Command):
            raise TypeError("@command() must be applied to a callable")
        name = getattr(source, "__name__", Unset)
        defaults = {
            "name": name.replace("_", "-") if isinstance(name, str) else Unset,
            "description": inspect.getdoc(source) or Unset,
        }
        self = Command(action=source, **(defaults | metadata))
        if parent is not Unset:
            parent.add_subcommand(self)
        return self

    return wrapper(source) if source is not Unset else wrapper


def invoke(object, prompt=Unset, /, **options):
    """
    Convenience runner for commands or callables.

    Parameters
    - object: an instance providing __invoke__(prompt) or a plain callable.
    - prompt: Unset (sys.argv[1:]), a shell-like string, or an iterable of
      tokens; the program name is not part of it.
    - **options: forwarded to __invoke__ (throw_on_error).

    Returns
    - Whatever the dispatched callback returned.

    Raises
    - TypeError: when object is neither invokable nor callable.
    """
    if hasattr(object, "__invoke__") and callable(object.__invoke__):
        return object.__invoke__(prompt, **options)

    if callable(object):
        return invoke(command(object), prompt, **options)

    target = "argument" if prompt is Unset else "first argument"
    raise TypeError(f"invoke() {target} must implement __invoke__ method") from None


__all__ = (
    "Command",
    "command",
    "invoke",
)

