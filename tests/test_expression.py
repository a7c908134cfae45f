from datetime import datetime, timedelta, timezone

import pytest

from pudding.cronexpr.expression import Expression, must_parse, parse
from pudding.cronexpr.parse import CronSyntaxError

FULL = "%Y-%m-%d %H:%M:%S"
DAY = "%a %Y-%m-%d %H:%M"

CRONTESTS = [
    ("* * * * * * *", FULL, [
        ("2013-01-01 00:00:00", "2013-01-01 00:00:01"),
        ("2013-01-01 00:00:59", "2013-01-01 00:01:00"),
        ("2013-01-01 00:59:59", "2013-01-01 01:00:00"),
        ("2013-01-01 23:59:59", "2013-01-02 00:00:00"),
        ("2013-02-28 23:59:59", "2013-03-01 00:00:00"),
        ("2016-02-28 23:59:59", "2016-02-29 00:00:00"),
        ("2012-12-31 23:59:59", "2013-01-01 00:00:00"),
    ]),
    ("*/5 * * * * * *", FULL, [
        ("2013-01-01 00:00:00", "2013-01-01 00:00:05"),
        ("2013-01-01 00:00:59", "2013-01-01 00:01:00"),
        ("2013-01-01 00:59:59", "2013-01-01 01:00:00"),
        ("2013-01-01 23:59:59", "2013-01-02 00:00:00"),
        ("2013-02-28 23:59:59", "2013-03-01 00:00:00"),
        ("2016-02-28 23:59:59", "2016-02-29 00:00:00"),
        ("2012-12-31 23:59:59", "2013-01-01 00:00:00"),
    ]),
    ("* * * * *", FULL, [
        ("2013-01-01 00:00:00", "2013-01-01 00:01:00"),
        ("2013-01-01 00:00:59", "2013-01-01 00:01:00"),
        ("2013-01-01 00:59:00", "2013-01-01 01:00:00"),
        ("2013-01-01 23:59:00", "2013-01-02 00:00:00"),
        ("2013-02-28 23:59:00", "2013-03-01 00:00:00"),
        ("2016-02-28 23:59:00", "2016-02-29 00:00:00"),
        ("2012-12-31 23:59:00", "2013-01-01 00:00:00"),
    ]),
    ("17-43/5 * * * *", FULL, [
        ("2013-01-01 00:00:00", "2013-01-01 00:17:00"),
        ("2013-01-01 00:16:59", "2013-01-01 00:17:00"),
        ("2013-01-01 00:30:00", "2013-01-01 00:32:00"),
        ("2013-01-01 00:50:00", "2013-01-01 01:17:00"),
        ("2013-01-01 23:50:00", "2013-01-02 00:17:00"),
        ("2013-02-28 23:50:00", "2013-03-01 00:17:00"),
        ("2016-02-28 23:50:00", "2016-02-29 00:17:00"),
        ("2012-12-31 23:50:00", "2013-01-01 00:17:00"),
    ]),
    ("15-30/4,55 * * * *", FULL, [
        ("2013-01-01 00:00:00", "2013-01-01 00:15:00"),
        ("2013-01-01 00:16:00", "2013-01-01 00:19:00"),
        ("2013-01-01 00:30:00", "2013-01-01 00:55:00"),
        ("2013-01-01 00:55:00", "2013-01-01 01:15:00"),
        ("2013-01-01 23:55:00", "2013-01-02 00:15:00"),
        ("2013-02-28 23:55:00", "2013-03-01 00:15:00"),
        ("2016-02-28 23:55:00", "2016-02-29 00:15:00"),
        ("2012-12-31 23:54:00", "2012-12-31 23:55:00"),
        ("2012-12-31 23:55:00", "2013-01-01 00:15:00"),
    ]),
    ("0 0 * * MON", DAY, [
        ("2013-01-01 00:00:00", "Mon 2013-01-07 00:00"),
        ("2013-01-28 00:00:00", "Mon 2013-02-04 00:00"),
        ("2013-12-30 00:30:00", "Mon 2014-01-06 00:00"),
    ]),
    ("0 0 * * friday", DAY, [
        ("2013-01-01 00:00:00", "Fri 2013-01-04 00:00"),
        ("2013-01-28 00:00:00", "Fri 2013-02-01 00:00"),
        ("2013-12-30 00:30:00", "Fri 2014-01-03 00:00"),
    ]),
    ("0 0 * * 6,7", DAY, [
        ("2013-01-01 00:00:00", "Sat 2013-01-05 00:00"),
        ("2013-01-28 00:00:00", "Sat 2013-02-02 00:00"),
        ("2013-12-30 00:30:00", "Sat 2014-01-04 00:00"),
    ]),
    ("0 0 * * 6#5", DAY, [
        ("2013-09-02 00:00:00", "Sat 2013-11-30 00:00"),
    ]),
    ("0 0 14W * *", DAY, [
        ("2013-03-31 00:00:00", "Mon 2013-04-15 00:00"),
        ("2013-08-31 00:00:00", "Fri 2013-09-13 00:00"),
    ]),
    ("0 0 30W * *", DAY, [
        ("2013-03-02 00:00:00", "Fri 2013-03-29 00:00"),
        ("2013-06-02 00:00:00", "Fri 2013-06-28 00:00"),
        ("2013-09-02 00:00:00", "Mon 2013-09-30 00:00"),
        ("2013-11-02 00:00:00", "Fri 2013-11-29 00:00"),
    ]),
    ("0 0 L * *", DAY, [
        ("2013-09-02 00:00:00", "Mon 2013-09-30 00:00"),
        ("2014-01-01 00:00:00", "Fri 2014-01-31 00:00"),
        ("2014-02-01 00:00:00", "Fri 2014-02-28 00:00"),
        ("2016-02-15 00:00:00", "Mon 2016-02-29 00:00"),
    ]),
    ("0 0 LW * *", DAY, [
        ("2013-09-02 00:00:00", "Mon 2013-09-30 00:00"),
        ("2013-11-02 00:00:00", "Fri 2013-11-29 00:00"),
        ("2014-08-15 00:00:00", "Fri 2014-08-29 00:00"),
    ]),
]

CASES = [
    (expr, layout, start, expected)
    for expr, layout, times in CRONTESTS
    for start, expected in times
]


def _utc(text: str) -> datetime:
    return datetime.strptime(text, FULL).replace(tzinfo=timezone.utc)


@pytest.mark.parametrize("expr,layout,start,expected", CASES)
def test_expressions(expr, layout, start, expected):
    result = parse(expr).next(_utc(start))
    assert result.strftime(layout) == expected


def test_zero_when_year_passed():
    start = datetime(2013, 8, 31, tzinfo=timezone.utc)
    assert must_parse("* * * * * 1980").next(start) is None


def test_future_year_found():
    start = datetime(2013, 8, 31, tzinfo=timezone.utc)
    assert must_parse("* * * * * 2050").next(start) == datetime(
        2050, 1, 1, 0, 0, 0, tzinfo=timezone.utc)


def test_next_of_none_is_none():
    assert must_parse("* * * * * 2099").next(None) is None


def test_next_n_specific_week():
    start = _utc("2013-09-02 08:44:30")
    result = must_parse("0 0 * * 6#5").next_n(start, 5)
    expected = [
        datetime(2013, 11, 30, tzinfo=timezone.utc),
        datetime(2014, 3, 29, tzinfo=timezone.utc),
        datetime(2014, 5, 31, tzinfo=timezone.utc),
        datetime(2014, 8, 30, tzinfo=timezone.utc),
        datetime(2014, 11, 29, tzinfo=timezone.utc),
    ]
    assert result == expected
    assert all(t.weekday() == 5 for t in result)


def test_next_n_every_5_minutes():
    start = _utc("2013-09-02 08:44:32")
    result = must_parse("*/5 * * * *").next_n(start, 5)
    assert [t.strftime("%a, %d %b %Y %H:%M:%S") for t in result] == [
        "Mon, 02 Sep 2013 08:45:00",
        "Mon, 02 Sep 2013 08:50:00",
        "Mon, 02 Sep 2013 08:55:00",
        "Mon, 02 Sep 2013 09:00:00",
        "Mon, 02 Sep 2013 09:05:00",
    ]


def test_must_parse_example_leap_days():
    start = datetime(2013, 8, 31, tzinfo=timezone.utc)
    result = must_parse("0 0 29 2 *").next_n(start, 5)
    assert result == [
        datetime(year, 2, 29, tzinfo=timezone.utc)
        for year in (2016, 2020, 2024, 2028, 2032)
    ]


@pytest.mark.parametrize(
    "expr",
    ["*/60 * * * * *", "*/61 * * * * *", "2/60 * * * * *", "2-20/61 * * * * *"],
)
def test_interval_60_rejected(expr):
    with pytest.raises(CronSyntaxError):
        parse(expr)


def test_missing_fields():
    with pytest.raises(CronSyntaxError, match="missing field"):
        parse("* * * *")


def test_bad_day_of_month():
    with pytest.raises(CronSyntaxError, match="day-of-month"):
        must_parse("0 0 xx * *")


def test_bad_day_of_week():
    with pytest.raises(CronSyntaxError, match="day-of-week"):
        parse("0 0 * * 8")


def test_next_n_zero_is_empty():
    assert parse("* * * * *").next_n(_utc("2013-01-01 00:00:00"), 0) == []


def test_next_n_stops_when_exhausted():
    result = parse("0 0 0 1 1 * 2098-2099").next_n(_utc("2013-01-01 00:00:00"), 5)
    assert result == [
        datetime(2098, 1, 1, tzinfo=timezone.utc),
        datetime(2099, 1, 1, tzinfo=timezone.utc),
    ]


def test_aliases():
    start = _utc("2013-01-01 00:30:00")
    assert parse("@hourly").next(start) == _utc("2013-01-01 01:00:00")
    assert parse("@daily").next(start) == _utc("2013-01-02 00:00:00")
    assert parse("@weekly").next(start) == _utc("2013-01-06 00:00:00")
    assert parse("@monthly").next(start) == _utc("2013-02-01 00:00:00")
    assert parse("@yearly").next(start) == _utc("2014-01-01 00:00:00")


def test_timezone_preserved():
    tz = timezone(timedelta(hours=8))
    start = datetime(2013, 1, 1, 10, 7, 0, tzinfo=tz)
    result = parse("*/15 * * * *").next(start)
    assert result == datetime(2013, 1, 1, 10, 15, 0, tzinfo=tz)
    assert result.utcoffset() == timedelta(hours=8)


@pytest.mark.parametrize(
    "expr",
    [
        "* * * * *",
        "@hourly",
        "@weekly",
        "@yearly",
        "30 3 15W 3/3 *",
        "30 0 0 1-31/5 Oct-Dec * 2000,2006,2008,2013-2015",
        "0 0 0 * Feb-Nov/2 thu#3 2000-2050",
    ],
)
def test_results_strictly_increase(expr):
    start = _utc("2013-09-02 08:44:30")
    result = parse(expr).next_n(start, 5)
    assert result
    assert result[0] > start
    assert all(a < b for a, b in zip(result, result[1:]))


def test_third_thursday_expression():
    result = parse("0 0 0 * Feb-Nov/2 thu#3 2000-2050").next(_utc("2013-01-01 00:00:00"))
    assert result == _utc("2013-02-21 00:00:00")


def test_expression_class_constructs_same_as_parse():
    start = _utc("2013-01-01 00:00:00")
    assert Expression("0 12 * * *").next(start) == parse("0 12 * * *").next(start)
    assert Expression("0 12 * * *").next(start) == _utc("2013-01-01 12:00:00")