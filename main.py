from rich.pretty import pprint

from cmdtree import *


@command(version="0.1.0", synopsis="[OPTION ...] COMMAND [ARG ...]")
def callback(command):
    """Demonstration tool for the cmdtree engine."""
    return command.do_execute()


callback.add_option(long_form="args", description="Extra arguments <<ARGS>>")
callback.add_switch_option(long_form="debug", short_form="d", description="Enable debug output")


@callback.command
def show(command):
    """Print the parsed command tree."""
    pprint(command.root)
    pprint(command.root.values())


if __name__ == '__main__':
    invoke(callback)
