# pudding

Shared building blocks for a delayed-message scheduling service. The
package has no third-party dependencies and provides:

- **Cron expressions** (`pudding.cronexpr`): parsing of five-, six- and
  seven-field cron lines, including seconds and years, and calculation of
  the next matching instants.
- **Logging** (`pudding.log`, `pudding.logconfig`): named loggers
  configured by level, format (console or JSON) and writers (standard
  output or a size-rotated file), with structured key/value fields.
- **Errors** (`pudding.errno`): RPC-style errors carrying a status code, a
  message and optional details.
- **Command-line flags as configuration** (`pudding.configs.provider`):
  the options of an `argparse` parser read as a nested mapping.

## Cron expressions

```python
from datetime import datetime, timezone

from pudding.cronexpr.expression import must_parse, parse

start = datetime(2013, 8, 31, tzinfo=timezone.utc)
for moment in must_parse("0 0 29 2 *").next_n(start, 5):
    print(moment)
# 2016-02-29 00:00:00+00:00
# 2020-02-29 00:00:00+00:00
# 2024-02-29 00:00:00+00:00
# 2028-02-29 00:00:00+00:00
# 2032-02-29 00:00:00+00:00

every_five_minutes = parse("*/5 * * * *")
print(every_five_minutes.next(datetime(2013, 9, 2, 8, 44, 32)))
# 2013-09-02 08:45:00
```

Fields are, in order: an optional seconds field (present when the line has
seven fields), minute, hour, day of month, month, day of week and an
optional year (1970–2099). Fields past the seventh are ignored. Supported
syntax:

- `*` and `?`, single values, ranges `5-20`, steps `*/2`, `5/2`, `5-20/2`,
  and comma-separated lists of these;
- month names (`jan`, `january`, …) and weekday names (`mon`, `monday`, …),
  case-insensitive; `7` is also Sunday;
- in the day-of-month field: `L` (last day), `LW` (last weekday) and `15W`
  (weekday nearest the 15th, without leaving the month);
- in the day-of-week field: `5L` (last Friday of the month) and `6#3`
  (third Saturday);
- the aliases `@yearly`, `@annually`, `@monthly`, `@weekly`, `@daily` and
  `@hourly`.

When both day fields are restricted, a day matches if either one does.

`parse` raises `CronSyntaxError` (from `pudding.cronexpr.parse`, a
`ValueError`) for a malformed line, such as a missing field or a step
outside `1..max` like `*/60` in the seconds field. `must_parse` behaves the
same and is meant for literals known to be valid.

`Expression.next(from_time)` returns the first matching instant strictly
after `from_time`, keeping its `tzinfo`; it returns `None` when `from_time`
is `None` or no later match exists. `Expression.next_n(from_time, n)`
returns up to `n` consecutive matches.

The field-level parser is usable on its own: `generic_field_handler(text,
MINUTE_DESCRIPTOR)` returns the sorted values a field selects, and
`generic_field_parse` returns the individual `Directive` entries.

## Logging

```python
from pudding import log

log.info("service started")
log.infof("listening on port %d", 8080)
log.with_fields("module", "broker").warn("queue is filling up")
```

The default logger writes console-formatted lines at level `info` to
standard output. Format strings take printf-style verbs (`%v`, `%s`, `%d`,
`%f`, `%q`, `%x`, …). `fatal`/`fatalf` log and then raise `SystemExit(1)`;
`panicf` logs and then raises `RuntimeError` with the message. Warnings and
above carry a stack trace.

Further loggers are registered by name from a `LogConfig`:

```python
from pudding import log
from pudding.logconfig import FileConfig, LogConfig

config = LogConfig(
    writers=["console", "file"],
    format="json",
    level="debug",
    file_config=FileConfig(filepath="logs/app.log", max_size=256, max_backups=10, max_age=7),
)
log.register_logger("app", config, log.with_caller_skip(1))
log.get_logger_by_name("app").debugf("ready after %d ms", 42)
```

`get_logger_by_name` falls back to the default logger (with a warning) for
an unknown name; registering under `"default"` replaces the default logger.
The file writer rotates when the file exceeds `max_size` megabytes (100 if
unset), keeps timestamped backups, gzips them when `compress` is set, and
prunes them by `max_backups` and `max_age` days. `log.sync()` flushes every
registered logger. `default_config()` returns a fresh copy of the default
configuration and `level_for(name)` maps a level name to a `logging` level.

## Errors

```python
from pudding.errno import StatusCode, bad_request, internal_error

error = bad_request("delay must be positive")
assert error.code is StatusCode.INVALID_ARGUMENT
print(error)
# rpc error: code = InvalidArgument desc = delay must be positive
```

`internal_error` and `bad_request` return an `RPCError` with code
`INTERNAL` or `INVALID_ARGUMENT`; any extra arguments are kept in its
`details` tuple. `DuplicateMessageError` signals a message key that is
already queued.

## Command-line flags as configuration

```python
import argparse

from pudding.configs.provider import FlagProvider

parser = argparse.ArgumentParser()
parser.add_argument("--grpc-port", type=int, default=50050)

provider = FlagProvider(
    parser,
    ".",
    callback=lambda name, value: (f"server_config.{name}", value),
    args=["--grpc-port", "50051"],
)
print(provider.read())
# {'server_config': {'grpc_port': 50051}}
```

Without `args`, `sys.argv[1:]` is parsed. When an object with an
`exists(key)` method is given as `ko`, a flag left at its default is not
reported for a key it already holds. A callback may return `None` to skip
a flag. `read_bytes()` returns the same mapping as UTF-8 JSON, and
`unflatten({"a.b": 1}, ".")` gives `{"a": {"b": 1}}`.

## What this package does not do

It is a library only: it has no command to run and no server. It does not
read configuration files or environment variables, and has no typed models
for server settings; the only configuration source it offers is
command-line flags. It has no clock abstraction, no HTTP middleware, and no
queue or storage of its own.