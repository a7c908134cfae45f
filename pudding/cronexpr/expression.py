"""Cron expressions and the search for the instants that match them."""

from __future__ import annotations

import calendar
from bisect import bisect_left
from datetime import date, datetime

from pudding.cronexpr.parse import (
    DOM_DESCRIPTOR,
    DOW_DESCRIPTOR,
    HOUR_DESCRIPTOR,
    LAYOUT_DOW_OF_LAST_WEEK,
    LAYOUT_DOW_OF_SPECIFIC_WEEK,
    LAYOUT_LAST_DOM,
    LAYOUT_LAST_WORKDOM,
    LAYOUT_WORKDOM,
    MINUTE_DESCRIPTOR,
    MONTH_DESCRIPTOR,
    SECOND_DESCRIPTOR,
    YEAR_DESCRIPTOR,
    CronSyntaxError,
    DirectiveKind,
    generic_field_handler,
    generic_field_parse,
    layout_regexp,
    normalize,
    split_fields,
)

# Days of the month falling on the same weekday, indexed by the weekday
# offset from the first day of the month.
DOW_NORMALIZED_OFFSETS: tuple[tuple[int, ...], ...] = (
    (1, 8, 15, 22, 29),
    (2, 9, 16, 23, 30),
    (3, 10, 17, 24, 31),
    (4, 11, 18, 25),
    (5, 12, 19, 26),
    (6, 13, 20, 27),
    (7, 14, 21, 28),
)

_SATURDAY = 6
_SUNDAY = 0


def _weekday(d: date) -> int:
    """Weekday with Sunday as 0 and Saturday as 6."""
    return (d.weekday() + 1) % 7


def _workday_of_month(target: date, last_day: int) -> int:
    """Nearest weekday to target without leaving its month."""
    dom = target.day
    dow = _weekday(target)
    if dow == _SATURDAY:
        dom = dom - 1 if dom > 1 else dom + 2
    elif dow == _SUNDAY:
        dom = dom + 1 if dom < last_day else dom - 2
    return dom


def _at(t: datetime, year: int, month: int, day: int,
        hour: int, minute: int, second: int) -> datetime:
    return datetime(year, month, day, hour, minute, second, tzinfo=t.tzinfo)


class Expression:
    """A parsed cron expression.

    Accepts 5 to 7 fields: an optional leading seconds field, then minute,
    hour, day of month, month, day of week and an optional year. Fields
    beyond the seventh are ignored.
    """

    def __init__(self, cron_line: str) -> None:
        self.expression = cron_line
        fields = split_fields(normalize(cron_line))
        if len(fields) < 5:
            raise CronSyntaxError("missing field(s)")
        fields = fields[:7]
        remaining = iter(fields)

        if len(fields) == 7:
            self._seconds = generic_field_handler(next(remaining), SECOND_DESCRIPTOR)
        else:
            self._seconds = [0]
        self._minutes = generic_field_handler(next(remaining), MINUTE_DESCRIPTOR)
        self._hours = generic_field_handler(next(remaining), HOUR_DESCRIPTOR)
        self._parse_dom(next(remaining))
        self._months = generic_field_handler(next(remaining), MONTH_DESCRIPTOR)
        self._parse_dow(next(remaining))
        year_field = next(remaining, None)
        if year_field is not None:
            self._years = generic_field_handler(year_field, YEAR_DESCRIPTOR)
        else:
            self._years = list(YEAR_DESCRIPTOR.default_list)

        self._actual_days: list[int] = []

    def __repr__(self) -> str:
        return f"Expression({self.expression!r})"

    # ------------------------------------------------------------ parsing

    def _parse_dom(self, s: str) -> None:
        self._dom_restricted = True
        self._last_dom = False
        self._last_workdom = False
        self._days_of_month: set[int] = set()
        self._workdays_of_month: set[int] = set()

        pattern = DOM_DESCRIPTOR.value_pattern
        for directive in generic_field_parse(s, DOM_DESCRIPTOR):
            if directive.kind is DirectiveKind.NONE:
                sdirective = s[directive.start:directive.end]
                snormal = sdirective.lower()
                if layout_regexp(LAYOUT_LAST_DOM, pattern).match(snormal):
                    self._last_dom = True
                elif layout_regexp(LAYOUT_LAST_WORKDOM, pattern).match(snormal):
                    self._last_workdom = True
                elif m := layout_regexp(LAYOUT_WORKDOM, pattern).match(snormal):
                    self._workdays_of_month.add(DOM_DESCRIPTOR.atoi(m.group(1)))
                else:
                    raise CronSyntaxError(
                        f"syntax error in day-of-month field: '{sdirective}'")
            elif directive.kind is DirectiveKind.ONE:
                self._days_of_month.add(directive.first)
            else:
                self._days_of_month.update(
                    range(directive.first, directive.last + 1, directive.step))
                if directive.kind is DirectiveKind.ALL:
                    self._dom_restricted = False

    def _parse_dow(self, s: str) -> None:
        self._dow_restricted = True
        self._days_of_week: set[int] = set()
        self._last_week_days_of_week: set[int] = set()
        self._specific_week_days_of_week: set[int] = set()

        pattern = DOW_DESCRIPTOR.value_pattern
        atoi = DOW_DESCRIPTOR.atoi
        for directive in generic_field_parse(s, DOW_DESCRIPTOR):
            if directive.kind is DirectiveKind.NONE:
                sdirective = s[directive.start:directive.end]
                snormal = sdirective.lower()
                if m := layout_regexp(LAYOUT_DOW_OF_LAST_WEEK, pattern).match(snormal):
                    self._last_week_days_of_week.add(atoi(m.group(1)))
                elif m := layout_regexp(LAYOUT_DOW_OF_SPECIFIC_WEEK, pattern).match(snormal):
                    self._specific_week_days_of_week.add(
                        (atoi(m.group(2)) - 1) * 7 + atoi(m.group(1)) % 7)
                else:
                    raise CronSyntaxError(
                        f"syntax error in day-of-week field: '{sdirective}'")
            elif directive.kind is DirectiveKind.ONE:
                self._days_of_week.add(directive.first)
            else:
                self._days_of_week.update(
                    range(directive.first, directive.last + 1, directive.step))
                if directive.kind is DirectiveKind.ALL:
                    self._dow_restricted = False

    # ------------------------------------------------------------- search

    def next(self, from_time: datetime | None) -> datetime | None:
        """Return the first matching instant strictly after from_time.

        The result carries the tzinfo of from_time. None is returned when no
        matching instant exists or when from_time is None.
        """
        if from_time is None:
            return None
        t = from_time

        i = bisect_left(self._years, t.year)
        if i == len(self._years):
            return None
        if t.year != self._years[i]:
            return self._next_year(t)

        i = bisect_left(self._months, t.month)
        if i == len(self._months):
            return self._next_year(t)
        if t.month != self._months[i]:
            return self._next_month(t)

        self._actual_days = self._actual_days_of_month(t.year, t.month)
        if not self._actual_days:
            return self._next_month(t)

        i = bisect_left(self._actual_days, t.day)
        if i == len(self._actual_days):
            return self._next_month(t)
        if t.day != self._actual_days[i]:
            return self._next_day_of_month(t)

        i = bisect_left(self._hours, t.hour)
        if i == len(self._hours):
            return self._next_day_of_month(t)
        if t.hour != self._hours[i]:
            return self._next_hour(t)

        i = bisect_left(self._minutes, t.minute)
        if i == len(self._minutes):
            return self._next_hour(t)
        if t.minute != self._minutes[i]:
            return self._next_minute(t)

        i = bisect_left(self._seconds, t.second)
        if i == len(self._seconds):
            return self._next_minute(t)

        return self._next_second(t)

    def next_n(self, from_time: datetime | None, n: int) -> list[datetime]:
        """Return up to n consecutive matching instants after from_time."""
        result: list[datetime] = []
        if n <= 0:
            return result
        current = self.next(from_time)
        while current is not None:
            result.append(current)
            if len(result) == n:
                break
            current = self._next_second(current)
        return result

    def _next_year(self, t: datetime) -> datetime | None:
        i = bisect_left(self._years, t.year + 1)
        if i == len(self._years):
            return None
        year, month = self._years[i], self._months[0]
        self._actual_days = self._actual_days_of_month(year, month)
        if not self._actual_days:
            return self._next_month(_at(t, year, month, 1, self._hours[0],
                                        self._minutes[0], self._seconds[0]))
        return _at(t, year, month, self._actual_days[0], self._hours[0],
                   self._minutes[0], self._seconds[0])

    def _next_month(self, t: datetime) -> datetime | None:
        i = bisect_left(self._months, t.month + 1)
        if i == len(self._months):
            return self._next_year(t)
        month = self._months[i]
        self._actual_days = self._actual_days_of_month(t.year, month)
        if not self._actual_days:
            return self._next_month(_at(t, t.year, month, 1, self._hours[0],
                                        self._minutes[0], self._seconds[0]))
        return _at(t, t.year, month, self._actual_days[0], self._hours[0],
                   self._minutes[0], self._seconds[0])

    def _next_day_of_month(self, t: datetime) -> datetime | None:
        i = bisect_left(self._actual_days, t.day + 1)
        if i == len(self._actual_days):
            return self._next_month(t)
        return _at(t, t.year, t.month, self._actual_days[i], self._hours[0],
                   self._minutes[0], self._seconds[0])

    def _next_hour(self, t: datetime) -> datetime | None:
        i = bisect_left(self._hours, t.hour + 1)
        if i == len(self._hours):
            return self._next_day_of_month(t)
        return _at(t, t.year, t.month, t.day, self._hours[i],
                   self._minutes[0], self._seconds[0])

    def _next_minute(self, t: datetime) -> datetime | None:
        i = bisect_left(self._minutes, t.minute + 1)
        if i == len(self._minutes):
            return self._next_hour(t)
        return _at(t, t.year, t.month, t.day, t.hour,
                   self._minutes[i], self._seconds[0])

    def _next_second(self, t: datetime) -> datetime | None:
        # Assumes every other field of t already matches the expression.
        i = bisect_left(self._seconds, t.second + 1)
        if i == len(self._seconds):
            return self._next_minute(t)
        return _at(t, t.year, t.month, t.day, t.hour, t.minute, self._seconds[i])

    def _actual_days_of_month(self, year: int, month: int) -> list[int]:
        last_day = calendar.monthrange(year, month)[1]

        # When both day fields are restricted, a day matches if either does.
        if not self._dom_restricted and not self._dow_restricted:
            return list(range(1, last_day + 1))

        days: set[int] = set()
        if self._dom_restricted:
            if self._last_dom:
                days.add(last_day)
            if self._last_workdom:
                days.add(_workday_of_month(date(year, month, last_day), last_day))
            days.update(v for v in self._days_of_month if v <= last_day)
            # Work days never cross month boundaries.
            days.update(
                _workday_of_month(date(year, month, v), last_day)
                for v in self._workdays_of_month
                if v <= last_day
            )

        if self._dow_restricted:
            offset = 7 - _weekday(date(year, month, 1))
            for v in self._days_of_week:
                days.update(d for d in DOW_NORMALIZED_OFFSETS[(offset + v) % 7]
                            if d <= last_day)
            for v in self._specific_week_days_of_week:
                d = 1 + 7 * (v // 7) + (offset + v) % 7
                if d <= last_day:
                    days.add(d)
            origin = last_day - 6
            offset = 7 - _weekday(date(year, month, origin))
            for v in self._last_week_days_of_week:
                d = origin + (offset + v) % 7
                if d <= last_day:
                    days.add(d)

        return sorted(days)


def parse(cron_line: str) -> Expression:
    """Parse a cron expression, raising CronSyntaxError when malformed."""
    return Expression(cron_line)


def must_parse(cron_line: str) -> Expression:
    """Parse a cron expression that is expected to be well formed."""
    return parse(cron_line)