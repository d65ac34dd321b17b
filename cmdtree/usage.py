"""
cmdtree usage renderer.

Turns a Command's metadata into the plain-text help page printed by --help,
the help subcommand and the default command handler.

Layout (sections separated by a blank line, in this order, empty ones skipped)
- SYNOPSIS      one line per synopsis entry, prefixed by the command chain
- DESCRIPTION   wrapped description
- EXAMPLES      one line per example, prefixed by the command chain
- NOTES         wrapped notes
- OPTIONS       aligned "-s, --long PLACEHOLDER" column plus wrapped description
- SUBCOMMANDS   aligned names plus wrapped description and a pointer to `help`
- footer        bug report address and copyright

Notes
- Column widths are computed per command; nothing is shared across the tree.
- render() is read-only; callers are expected to run the pre-parse latch first
  (Command.usage() does).
"""
from .utils import wrap

LINE_LENGTH = 70
NO_DESCRIPTION = "no description available"


def _chain(command):
    return " ".join(node.name for node in command.path)


def _option_name(option, indented):
    """
    Render the left column for one option.

    indented is true when some option of the same command has a short form,
    so that long-only names line up under the "--long" part of the others.
    """
    if option.short_form is not None and option.long_form is not None:
        name = f"  -{option.short_form}, --{option.long_form} "
    elif option.short_form is not None:
        name = f"  -{option.short_form} "
    elif indented:
        name = f"      --{option.long_form} "
    else:
        name = f"  --{option.long_form} "

    if placeholder := option.placeholder:
        name += f"[{placeholder}] " if option.value_optional else f"{placeholder}  "
    else:
        name += " "
    return name


def _columns(entries, width):
    """Wrap (name, description) pairs with a hanging indent under the name column."""
    block = ""
    for name, description in entries:
        name = name.ljust(width)
        block += wrap(description or NO_DESCRIPTION, LINE_LENGTH, [name, " " * len(name)])
    return block


def render(command):
    """
    Return the help page of a command as a single string ending in a newline.

    Parameters
    - command: Command whose metadata, options and subcommands are rendered.

    Returns
    - str
    """
    sections = []
    chain = _chain(command)

    if synopsis := command.synopsis:
        sections.append("SYNOPSIS\n" + "".join(f"  {chain} {entry}\n" for entry in synopsis))

    if command.description is not None:
        sections.append("DESCRIPTION\n" + wrap(command.description, LINE_LENGTH, "  "))

    if examples := command.examples:
        sections.append("EXAMPLES\n" + "".join(f"  {chain} {entry}\n" for entry in examples))

    if command.notes is not None:
        sections.append("NOTES\n" + wrap(command.notes, LINE_LENGTH, "  "))

    if options := command.options:
        indented = any(option.short_form is not None for option in options)
        names = [_option_name(option, indented) for option in options]
        width = max(map(len, names))
        sections.append("OPTIONS\n" + _columns(
            zip(names, (option.description for option in options)),
            width
        ))

    if subcommands := command.subcommands:
        names = [f"  {name}" for name in subcommands]
        width = max(map(len, names)) + 2
        sections.append(
            "SUBCOMMANDS\n"
            + _columns(zip(names, (child.description for child in subcommands.values())), width)
            + f"\nType `{chain} help <command>' for help on a specific command"
        )

    footer = [line for line in (command.bug_email, command.copyright) if line is not None]
    if footer:
        sections.append("\n".join(footer))

    return "\n".join(sections) + "\n"


__all__ = (
    "render",
)
