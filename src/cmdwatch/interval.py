"""Interval argument parsing (whole seconds or ``<n>ms``)."""

from __future__ import annotations

import re

import rich_click as click

DEFAULT_INTERVAL_MS = 1_000
MILLISECONDS_SUFFIX = "ms"
_DIGITS = re.compile(r"[0-9]+")


def parse_interval(raw: str) -> int:
    """Return the interval in milliseconds.

    ``"2"`` means two seconds, ``"250ms"`` means 250 milliseconds. The unit is
    decided by the last two characters of the value only.
    """

    value = raw.strip()
    if value[-2:] == MILLISECONDS_SUFFIX:
        number, factor = value[:-2], 1
    else:
        number, factor = value, 1_000

    if not _DIGITS.fullmatch(number):
        raise ValueError(
            f"Invalid interval {raw!r}. Expected whole seconds like '2' or milliseconds like '500ms'.",
        )

    milliseconds = int(number) * factor
    if milliseconds <= 0:
        raise ValueError(f"Interval must be positive: {raw!r}")
    return milliseconds


class IntervalParamType(click.ParamType):
    """Click type converting ``--interval`` values to milliseconds."""

    name = "interval"

    def convert(self, value, param, ctx) -> int:
        if isinstance(value, int):
            return value
        try:
            return parse_interval(value)
        except ValueError as error:
            self.fail(str(error), param, ctx)


INTERVAL = IntervalParamType()
