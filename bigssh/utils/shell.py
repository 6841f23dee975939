"""Command line construction helpers."""

from collections.abc import Sequence

PREVIEW_LENGTH = 20


def escape_arg(arg: str) -> str:
    """Escape spaces in a single argument.

    Args:
        arg: Argument to escape

    Returns:
        Argument with every space replaced by ``\\ ``
    """
    return arg.replace(" ", "\\ ")


def build_command_line(command_line: str, command_args: Sequence[str] | None = None) -> str:
    """Join the base command line and its escaped arguments.

    The base command is always followed by one space, so ``("ls", [])``
    yields ``"ls "``.

    Args:
        command_line: Base command
        command_args: Arguments, escaped and joined by single spaces

    Returns:
        Final command string sent to the remote shell
    """
    args = " ".join(escape_arg(arg) for arg in (command_args or ()))
    return f"{command_line} {args}"


def preview(command: str, length: int = PREVIEW_LENGTH) -> str:
    """Return at most ``length`` leading characters of a command."""
    return command[:length]
