"""Named loggers with console/JSON output, structured fields and rotating files."""

from __future__ import annotations

import dataclasses
import errno
import gzip
import json
import logging
import logging.handlers
import re
import shutil
import sys
import time
from collections.abc import Callable
from datetime import datetime
from pathlib import Path
from typing import Any

from pudding.logconfig import (
    ENCODER_TYPE_JSON,
    OUTPUT_CONSOLE,
    OUTPUT_FILE,
    FileConfig,
    LogConfig,
    default_config,
    level_for,
)

DEFAULT_LOGGER_NAME = "default"

_BASE_STACKLEVEL = 3
_DEFAULT_MAX_SIZE_MB = 100
_FIELDS_ATTR = "pudding_fields"
_LABEL_ATTR = "pudding_level"


# ----------------------------------------------------------------- formatting

def _go_str(value: Any) -> str:
    if value is None:
        return "<nil>"
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def _sprint(args: tuple[Any, ...]) -> str:
    """Join operands, adding spaces only between two non-string operands."""
    out: list[str] = []
    prev_is_str = True
    for position, arg in enumerate(args):
        is_str = isinstance(arg, str)
        if position and not is_str and not prev_is_str:
            out.append(" ")
        out.append(_go_str(arg))
        prev_is_str = is_str
    return "".join(out)


_VERB = re.compile(r"%([-+# 0]*)(\d*)(?:\.(\d+))?([a-zA-Z%])")


def _format_verb(arg: Any, flags: str, prec: str | None, verb: str) -> str:
    try:
        if verb in "vsw":
            text = _go_str(arg)
            return text[: int(prec)] if prec else text
        if verb == "d":
            return format(int(arg), "+d" if "+" in flags else "d")
        if verb in "feEg":
            number = float(arg)
            if verb == "g" and not prec:
                return repr(number)
            return format(number, f".{prec or 6}{verb}")
        if verb in "xX":
            if isinstance(arg, (str, bytes)):
                raw = arg.encode() if isinstance(arg, str) else arg
                text = raw.hex()
            else:
                text = format(int(arg), "x")
            return text.upper() if verb == "X" else text
        if verb in "ob":
            return format(int(arg), verb)
        if verb == "q":
            return json.dumps(_go_str(arg), ensure_ascii=False)
        if verb == "t":
            return _go_str(bool(arg))
        if verb == "T":
            return type(arg).__name__
        if verb == "c":
            return chr(int(arg))
    except (TypeError, ValueError):
        pass
    return f"%!{verb}({type(arg).__name__}={_go_str(arg)})"


def _sprintf(fmt: str, args: tuple[Any, ...]) -> str:
    """Format printf-style verbs (%v, %s, %d, %f, ...) with the given args."""
    if not args:
        return fmt
    remaining = iter(args)

    def replace(match: re.Match[str]) -> str:
        flags, width, prec, verb = match.groups()
        if verb == "%":
            return "%"
        try:
            arg = next(remaining)
        except StopIteration:
            return f"%!{verb}(MISSING)"
        text = _format_verb(arg, flags, prec, verb)
        if width and len(text) < int(width):
            size = int(width)
            if "-" in flags:
                text = text.ljust(size)
            elif "0" in flags and verb in "dfeEgxXob":
                sign = text[0] if text[:1] in "+-" else ""
                text = sign + text[len(sign):].rjust(size - len(sign), "0")
            else:
                text = text.rjust(size)
        return text

    text = _VERB.sub(replace, fmt)
    extra = list(remaining)
    if extra:
        listed = ", ".join(f"{type(a).__name__}={_go_str(a)}" for a in extra)
        text += f"%!(EXTRA {listed})"
    return text


def _iso8601(created: float) -> str:
    moment = datetime.fromtimestamp(created).astimezone()
    return moment.strftime("%Y-%m-%dT%H:%M:%S.") + f"{moment.microsecond // 1000:03d}" + moment.strftime("%z")


def _caller(record: logging.LogRecord) -> str:
    path = Path(record.pathname)
    return f"{path.parent.name}/{path.name}:{record.lineno}"


def _label(record: logging.LogRecord) -> str:
    return getattr(record, _LABEL_ATTR, record.levelname)


class _ConsoleFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        parts = [_iso8601(record.created), _label(record), _caller(record), record.getMessage()]
        fields = getattr(record, _FIELDS_ATTR, None)
        if fields:
            parts.append(json.dumps(fields, default=str, ensure_ascii=False))
        line = "\t".join(parts)
        if record.stack_info:
            line += "\n" + record.stack_info
        return line


class _JSONFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "level": _label(record),
            "ts": _iso8601(record.created),
            "caller": _caller(record),
            "msg": record.getMessage(),
        }
        entry.update(getattr(record, _FIELDS_ATTR, None) or {})
        if record.stack_info:
            entry["stacktrace"] = record.stack_info
        return json.dumps(entry, default=str, ensure_ascii=False)


# ------------------------------------------------------------------- writers

class _StdoutHandler(logging.Handler):
    """Writes to whatever sys.stdout is at the time of each record."""

    terminator = "\n"

    def emit(self, record: logging.LogRecord) -> None:
        try:
            sys.stdout.write(self.format(record) + self.terminator)
        except Exception:
            self.handleError(record)

    def flush(self) -> None:
        self.acquire()
        try:
            sys.stdout.flush()
        finally:
            self.release()


class _RotatingFileHandler(logging.handlers.RotatingFileHandler):
    """Size-rotated file keeping timestamped backups, pruned by count and age."""

    def __init__(self, cfg: FileConfig) -> None:
        path = Path(cfg.filepath)
        path.parent.mkdir(parents=True, exist_ok=True)
        max_mb = cfg.max_size or _DEFAULT_MAX_SIZE_MB
        super().__init__(path, maxBytes=max_mb * 1024 * 1024, encoding="utf-8", delay=True)
        self._cfg = cfg

    def doRollover(self) -> None:
        if self.stream:
            self.stream.close()
            self.stream = None  # type: ignore[assignment]
        base = Path(self.baseFilename)
        if base.exists():
            now = datetime.now()
            stamp = now.strftime("%Y-%m-%dT%H-%M-%S.") + f"{now.microsecond // 1000:03d}"
            backup = base.with_name(f"{base.stem}-{stamp}{base.suffix}")
            base.rename(backup)
            if self._cfg.compress:
                packed = backup.with_name(backup.name + ".gz")
                with backup.open("rb") as src, gzip.open(packed, "wb") as dst:
                    shutil.copyfileobj(src, dst)
                backup.unlink()
        self._prune(base)
        if not self.delay:
            self.stream = self._open()

    def _prune(self, base: Path) -> None:
        prefix = f"{base.stem}-"
        endings = (base.suffix, base.suffix + ".gz")
        backups = sorted(
            (
                p
                for p in base.parent.iterdir()
                if p.is_file() and p != base and p.name.startswith(prefix) and p.name.endswith(endings)
            ),
            key=lambda p: p.stat().st_mtime,
            reverse=True,
        )
        stale: list[Path] = []
        if self._cfg.max_backups > 0:
            stale.extend(backups[self._cfg.max_backups:])
            backups = backups[: self._cfg.max_backups]
        if self._cfg.max_age > 0:
            cutoff = time.time() - self._cfg.max_age * 86400
            stale.extend(p for p in backups if p.stat().st_mtime < cutoff)
        for path in stale:
            path.unlink(missing_ok=True)


def _file_handler(cfg: FileConfig) -> logging.Handler:
    if not cfg.filepath:
        fatalf("log file writer set, but log file path is empty, please check your config")
    return _RotatingFileHandler(cfg)


# -------------------------------------------------------------------- logger

def _fields_from(args: tuple[Any, ...]) -> dict[str, Any]:
    fields: dict[str, Any] = {}
    pairs = list(args)
    while len(pairs) >= 2:
        key, value, *pairs = pairs
        fields[str(key)] = value
    if pairs:
        fields["ignored"] = pairs[0]
    return fields


class Logger:
    """A leveled logger with optional structured fields."""

    def __init__(self, backend: logging.Logger, caller_skip: int = 0,
                 fields: dict[str, Any] | None = None) -> None:
        self._backend = backend
        self._caller_skip = caller_skip
        self._fields = dict(fields or {})

    def _emit(self, level: int, label: str, message: str) -> None:
        if not self._backend.isEnabledFor(level):
            return
        self._backend.log(
            level,
            message,
            stacklevel=_BASE_STACKLEVEL + self._caller_skip,
            stack_info=level >= logging.WARNING,
            extra={_FIELDS_ATTR: self._fields, _LABEL_ATTR: label},
        )

    def debug(self, *args: Any) -> None:
        self._emit(logging.DEBUG, "DEBUG", _sprint(args))

    def info(self, *args: Any) -> None:
        self._emit(logging.INFO, "INFO", _sprint(args))

    def warn(self, *args: Any) -> None:
        self._emit(logging.WARNING, "WARN", _sprint(args))

    def error(self, *args: Any) -> None:
        self._emit(logging.ERROR, "ERROR", _sprint(args))

    def fatal(self, *args: Any) -> None:
        """Log at fatal level, then exit with status 1."""
        self._emit(logging.CRITICAL, "FATAL", _sprint(args))
        self._die()

    def debugf(self, fmt: str, *args: Any) -> None:
        self._emit(logging.DEBUG, "DEBUG", _sprintf(fmt, args))

    def infof(self, fmt: str, *args: Any) -> None:
        self._emit(logging.INFO, "INFO", _sprintf(fmt, args))

    def warnf(self, fmt: str, *args: Any) -> None:
        self._emit(logging.WARNING, "WARN", _sprintf(fmt, args))

    def errorf(self, fmt: str, *args: Any) -> None:
        self._emit(logging.ERROR, "ERROR", _sprintf(fmt, args))

    def fatalf(self, fmt: str, *args: Any) -> None:
        """Log at fatal level, then exit with status 1."""
        self._emit(logging.CRITICAL, "FATAL", _sprintf(fmt, args))
        self._die()

    def panicf(self, fmt: str, *args: Any) -> None:
        """Log at panic level, then raise RuntimeError with the message."""
        message = _sprintf(fmt, args)
        self._emit(logging.CRITICAL, "PANIC", message)
        raise RuntimeError(message)

    def _die(self) -> None:
        try:
            self.sync()
        except OSError:
            pass
        raise SystemExit(1)

    def sync(self) -> None:
        """Flush every writer of this logger."""
        for handler in self._backend.handlers:
            handler.flush()

    def with_fields(self, *args: Any) -> Logger:
        """Return a logger that adds the given key/value pairs to every entry."""
        fields = dict(self._fields)
        fields.update(_fields_from(args))
        return Logger(self._backend, self._caller_skip, fields)


def new_logger(config: LogConfig) -> Logger:
    """Build a logger from a configuration."""
    backend = logging.Logger(config.log_name or DEFAULT_LOGGER_NAME, level_for(config.level))
    backend.propagate = False
    formatter: logging.Formatter = (
        _JSONFormatter() if config.format == ENCODER_TYPE_JSON else _ConsoleFormatter()
    )
    for writer in config.writers:
        if writer == OUTPUT_CONSOLE:
            handler: logging.Handler = _StdoutHandler()
        elif writer == OUTPUT_FILE:
            handler = _file_handler(config.file_config)
        else:
            continue
        handler.setFormatter(formatter)
        backend.addHandler(handler)
    if not backend.handlers:
        backend.addHandler(logging.NullHandler())
    return Logger(backend, config.caller_skip)


_default_logger: Logger = new_logger(default_config())
_loggers: dict[str, Logger] = {DEFAULT_LOGGER_NAME: _default_logger}


def register_logger(logger_name: str, config: LogConfig,
                    *args: Callable[[LogConfig], None]) -> None:
    """Create a logger from config (after applying options) under a name."""
    global _default_logger
    infof("Register Logger [%s] with config: %s", logger_name,
          json.dumps(dataclasses.asdict(config)))
    for option in args:
        option(config)
    created = new_logger(config)
    if logger_name == DEFAULT_LOGGER_NAME:
        _default_logger = created
    _loggers[logger_name] = created


def get_logger_by_name(logger_name: str) -> Logger:
    """Return the named logger, or the default logger if there is none."""
    found = _loggers.get(logger_name)
    if found is not None:
        return found
    warnf("logger %s not found, use default logger", logger_name)
    return _default_logger


def with_caller_skip(caller_skip: int) -> Callable[[LogConfig], None]:
    """Option that sets the caller skip of a configuration."""
    def apply(config: LogConfig) -> None:
        config.caller_skip = caller_skip
    return apply


def debug(*args: Any) -> None:
    _default_logger.debug(*args)


def info(*args: Any) -> None:
    _default_logger.info(*args)


def warn(*args: Any) -> None:
    _default_logger.warn(*args)


def error(*args: Any) -> None:
    _default_logger.error(*args)


def fatal(*args: Any) -> None:
    _default_logger.fatal(*args)


def debugf(fmt: str, *args: Any) -> None:
    _default_logger.debugf(fmt, *args)


def infof(fmt: str, *args: Any) -> None:
    _default_logger.infof(fmt, *args)


def warnf(fmt: str, *args: Any) -> None:
    _default_logger.warnf(fmt, *args)


def errorf(fmt: str, *args: Any) -> None:
    _default_logger.errorf(fmt, *args)


def panicf(fmt: str, *args: Any) -> None:
    _default_logger.panicf(fmt, *args)


def fatalf(fmt: str, *args: Any) -> None:
    _default_logger.fatalf(fmt, *args)


def sync() -> None:
    """Flush all registered loggers, reporting failures other than ENOTTY."""
    for logger_name, registered in list(_loggers.items()):
        try:
            registered.sync()
        except OSError as exc:
            if exc.errno != errno.ENOTTY:
                errorf("sync logger [%s] error: %v", logger_name, exc)


def with_fields(*args: Any) -> Logger:
    """Return the default logger with extra fields."""
    return _default_logger.with_fields(*args)