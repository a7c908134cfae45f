"""Command-line flags as a nested configuration source."""

from __future__ import annotations

import argparse
import json
import sys
from collections.abc import Callable, Mapping, Sequence
from typing import Any, Protocol

Callback = Callable[[str, Any], "tuple[str, Any] | None"]


class KeyChecker(Protocol):
    """Anything that can tell whether a configuration key is already set."""

    def exists(self, key: str) -> bool:
        """Return True when the key has a value."""


class ProviderError(Exception):
    """Raised when a provider is asked for something it cannot supply."""


def unflatten(mapping: Mapping[str, Any], delim: str) -> dict[str, Any]:
    """Turn {"a.b.c": 1} into {"a": {"b": {"c": 1}}}, splitting keys on delim."""
    out: dict[str, Any] = {}
    for key, value in mapping.items():
        parts = key.split(delim) if delim else [key]
        node = out
        for part in parts[:-1]:
            child = node.get(part)
            if not isinstance(child, dict):
                child = {}
                node[part] = child
            node = child
        node[parts[-1]] = value
    return out


class FlagProvider:
    """Reads the options of an argument parser as a nested configuration map.

    When ``ko`` is given, a flag left at its default value is not reported
    for a key that ``ko`` already holds, so that values from other sources
    are not overwritten by defaults. Flags set explicitly always win.

    ``callback`` receives the option's destination name and its value and
    returns the (key, value) pair to store, or None to skip the flag.
    """

    def __init__(
        self,
        parser: argparse.ArgumentParser,
        delim: str,
        ko: KeyChecker | None = None,
        callback: Callback | None = None,
        args: Sequence[str] | None = None,
    ) -> None:
        self._parser = parser
        self._delim = delim
        self._ko = ko
        self._callback = callback
        self._args = None if args is None else list(args)

    def read(self) -> dict[str, Any]:
        """Parse the command line and return the flags as a nested map."""
        argv = sys.argv[1:] if self._args is None else self._args
        namespace, _ = self._parser.parse_known_args(list(argv))
        flat: dict[str, Any] = {}
        for name, value in vars(namespace).items():
            if self._callback is not None:
                entry = self._callback(name, value)
                if entry is None:
                    continue
                key, value = entry
            else:
                key = name
            is_default = value == self._parser.get_default(name)
            if self._ko is not None and self._ko.exists(key) and is_default:
                continue
            flat[key] = value
        return unflatten(flat, self._delim)

    def read_bytes(self) -> bytes:
        """Return the nested flag map encoded as UTF-8 JSON."""
        try:
            return json.dumps(self.read(), default=str, ensure_ascii=False).encode("utf-8")
        except (TypeError, ValueError) as exc:
            raise ProviderError(f"flag values cannot be encoded: {exc}") from exc