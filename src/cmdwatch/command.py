"""Build the shell command line from trailing CLI tokens."""

from __future__ import annotations

from collections.abc import Sequence

COMMAND_SEPARATOR = " "


def build_command_line(tokens: Sequence[str]) -> str:
    """Join command tokens into one string for ``<shell> -c``.

    Tokens are joined verbatim with a single space. Nothing is quoted, so a
    token that itself contains spaces or shell metacharacters is interpreted
    by the shell exactly as if it had been typed unquoted.
    """

    if not tokens:
        raise ValueError("At least one command token is required.")
    return COMMAND_SEPARATOR.join(tokens)
