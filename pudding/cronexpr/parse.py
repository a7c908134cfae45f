"""Field-level parsing of cron expressions."""

from __future__ import annotations

import enum
import functools
import re
from collections.abc import Callable
from dataclasses import dataclass, field


class CronSyntaxError(ValueError):
    """Raised when a cron expression or one of its fields is malformed."""


GENERIC_DEFAULT_LIST: tuple[int, ...] = tuple(range(60))
YEAR_DEFAULT_LIST: tuple[int, ...] = tuple(range(1970, 2100))

NUMBER_TOKENS: dict[str, int] = {
    **{str(n): n for n in range(60)},
    **{f"{n:02d}": n for n in range(10)},
    **{str(n): n for n in YEAR_DEFAULT_LIST},
}

MONTH_TOKENS: dict[str, int] = {}
for _number, _names in enumerate(
    (
        ("jan", "january"), ("feb", "february"), ("mar", "march"),
        ("apr", "april"), ("may",), ("jun", "june"), ("jul", "july"),
        ("aug", "august"), ("sep", "september"), ("oct", "october"),
        ("nov", "november"), ("dec", "december"),
    ),
    start=1,
):
    MONTH_TOKENS[str(_number)] = _number
    for _name in _names:
        MONTH_TOKENS[_name] = _number

DOW_TOKENS: dict[str, int] = {"7": 0}
for _number, _names in enumerate(
    (
        ("sun", "sunday"), ("mon", "monday"), ("tue", "tuesday"),
        ("wed", "wednesday"), ("thu", "thursday"), ("fri", "friday"),
        ("sat", "saturday"),
    )
):
    DOW_TOKENS[str(_number)] = _number
    for _name in _names:
        DOW_TOKENS[_name] = _number


def atoi(s: str) -> int:
    """Convert a numeric token; unknown tokens yield 0."""
    return NUMBER_TOKENS.get(s, 0)


def _month_atoi(s: str) -> int:
    return MONTH_TOKENS.get(s, 0)


def _dow_atoi(s: str) -> int:
    return DOW_TOKENS.get(s, 0)


@dataclass(frozen=True)
class FieldDescriptor:
    """Describes the name, range, defaults and token syntax of one cron field."""

    name: str
    min_value: int
    max_value: int
    default_list: tuple[int, ...]
    value_pattern: str
    atoi: Callable[[str], int] = field(default=atoi, compare=False, repr=False)


SECOND_DESCRIPTOR = FieldDescriptor(
    "second", 0, 59, GENERIC_DEFAULT_LIST[0:60], r"0?[0-9]|[1-5][0-9]")
MINUTE_DESCRIPTOR = FieldDescriptor(
    "minute", 0, 59, GENERIC_DEFAULT_LIST[0:60], r"0?[0-9]|[1-5][0-9]")
HOUR_DESCRIPTOR = FieldDescriptor(
    "hour", 0, 23, GENERIC_DEFAULT_LIST[0:24], r"0?[0-9]|1[0-9]|2[0-3]")
DOM_DESCRIPTOR = FieldDescriptor(
    "day-of-month", 1, 31, GENERIC_DEFAULT_LIST[1:32], r"0?[1-9]|[12][0-9]|3[01]")
MONTH_DESCRIPTOR = FieldDescriptor(
    "month", 1, 12, GENERIC_DEFAULT_LIST[1:13],
    r"0?[1-9]|1[012]|jan|feb|mar|apr|may|jun|jul|aug|sep|oct|nov|dec|"
    r"january|february|march|april|march|april|june|july|august|september|october|november|december",
    _month_atoi,
)
DOW_DESCRIPTOR = FieldDescriptor(
    "day-of-week", 0, 6, GENERIC_DEFAULT_LIST[0:7],
    r"0?[0-7]|sun|mon|tue|wed|thu|fri|sat|sunday|monday|tuesday|wednesday|thursday|friday|saturday",
    _dow_atoi,
)
YEAR_DESCRIPTOR = FieldDescriptor(
    "year", 1970, 2099, YEAR_DEFAULT_LIST, r"19[789][0-9]|20[0-9]{2}")

LAYOUT_WILDCARD = r"^\*$|^\?$"
LAYOUT_VALUE = r"^(%value%)$"
LAYOUT_RANGE = r"^(%value%)-(%value%)$"
LAYOUT_WILDCARD_AND_INTERVAL = r"^\*/(\d+)$"
LAYOUT_VALUE_AND_INTERVAL = r"^(%value%)/(\d+)$"
LAYOUT_RANGE_AND_INTERVAL = r"^(%value%)-(%value%)/(\d+)$"
LAYOUT_LAST_DOM = r"^l$"
LAYOUT_WORKDOM = r"^(%value%)w$"
LAYOUT_LAST_WORKDOM = r"^lw$"
LAYOUT_DOW_OF_LAST_WEEK = r"^(%value%)l$"
LAYOUT_DOW_OF_SPECIFIC_WEEK = r"^(%value%)#([1-5])$"

_FIELD_FINDER = re.compile(r"[^\t\n\f\r ]+")
_ENTRY_FINDER = re.compile(r"[^,]+")

_ALIASES = {
    "@yearly": "0 0 0 1 1 * *",
    "@annually": "0 0 0 1 1 * *",
    "@monthly": "0 0 0 1 * * *",
    "@weekly": "0 0 0 * * 0 *",
    "@daily": "0 0 0 * * * *",
    "@hourly": "0 0 * * * * *",
}
_ALIAS_FINDER = re.compile("|".join(re.escape(alias) for alias in _ALIASES))


class DirectiveKind(enum.IntEnum):
    """What a single comma-separated entry of a field denotes."""

    NONE = 0
    ONE = 1
    SPAN = 2
    ALL = 3


@dataclass
class Directive:
    """One parsed entry of a field, with its position in the field text."""

    kind: DirectiveKind = DirectiveKind.NONE
    first: int = 0
    last: int = 0
    step: int = 0
    start: int = 0
    end: int = 0


def normalize(cron_line: str) -> str:
    """Expand the built-in aliases such as @daily into full expressions."""
    return _ALIAS_FINDER.sub(lambda m: _ALIASES[m.group(0)], cron_line)


def split_fields(cron_line: str) -> list[str]:
    """Split an expression into its whitespace-separated fields."""
    return _FIELD_FINDER.findall(cron_line)


@functools.lru_cache(maxsize=None)
def layout_regexp(layout: str, value: str) -> re.Pattern[str]:
    """Compile (and cache) a layout with its %value% placeholders filled in."""
    return re.compile(layout.replace("%value%", value), re.ASCII)


def _checked_step(token: str, snormal: str, desc: FieldDescriptor) -> int:
    step = atoi(token)
    if step < 1 or step > desc.max_value:
        raise CronSyntaxError(f"invalid interval {snormal}")
    return step


def _parse_entry(snormal: str, desc: FieldDescriptor, directive: Directive) -> None:
    pattern = desc.value_pattern
    if layout_regexp(LAYOUT_WILDCARD, pattern).match(snormal):
        directive.kind = DirectiveKind.ALL
        directive.first, directive.last, directive.step = desc.min_value, desc.max_value, 1
        return
    if layout_regexp(LAYOUT_VALUE, pattern).match(snormal):
        directive.kind = DirectiveKind.ONE
        directive.first = desc.atoi(snormal)
        return
    if m := layout_regexp(LAYOUT_RANGE, pattern).match(snormal):
        directive.kind = DirectiveKind.SPAN
        directive.first, directive.last = desc.atoi(m.group(1)), desc.atoi(m.group(2))
        directive.step = 1
        return
    if m := layout_regexp(LAYOUT_WILDCARD_AND_INTERVAL, pattern).match(snormal):
        directive.kind = DirectiveKind.SPAN
        directive.first, directive.last = desc.min_value, desc.max_value
        directive.step = _checked_step(m.group(1), snormal, desc)
        return
    if m := layout_regexp(LAYOUT_VALUE_AND_INTERVAL, pattern).match(snormal):
        directive.kind = DirectiveKind.SPAN
        directive.first, directive.last = desc.atoi(m.group(1)), desc.max_value
        directive.step = _checked_step(m.group(2), snormal, desc)
        return
    if m := layout_regexp(LAYOUT_RANGE_AND_INTERVAL, pattern).match(snormal):
        directive.kind = DirectiveKind.SPAN
        directive.first, directive.last = desc.atoi(m.group(1)), desc.atoi(m.group(2))
        directive.step = _checked_step(m.group(3), snormal, desc)
        return
    directive.kind = DirectiveKind.NONE


def generic_field_parse(s: str, desc: FieldDescriptor) -> list[Directive]:
    """Parse every comma-separated entry of a field into a directive.

    Entries that match no generic layout come back with kind NONE so that
    field-specific handlers can interpret them.
    """
    matches = list(_ENTRY_FINDER.finditer(s))
    if not matches:
        raise CronSyntaxError(f"{desc.name} field: missing directive")
    directives = []
    for m in matches:
        directive = Directive(start=m.start(), end=m.end())
        _parse_entry(m.group(0).lower(), desc, directive)
        directives.append(directive)
    return directives


def generic_field_handler(s: str, desc: FieldDescriptor) -> list[int]:
    """Return the sorted values a field selects."""
    values: set[int] = set()
    for directive in generic_field_parse(s, desc):
        if directive.kind is DirectiveKind.NONE:
            raise CronSyntaxError(
                f"syntax error in {desc.name} field: '{s[directive.start:directive.end]}'")
        if directive.kind is DirectiveKind.ONE:
            values.add(directive.first)
        elif directive.kind is DirectiveKind.SPAN:
            values.update(range(directive.first, directive.last + 1, directive.step))
        else:
            return list(desc.default_list)
    return sorted(values)