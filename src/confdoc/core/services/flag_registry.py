from __future__ import annotations

"""
Flag Registration and Indexing Service.

Provides the FlagSet that configuration providers register their
command-line flags against. Every flag is bound to one attribute of a
live configuration object; that binding (a StorageRef) is what the
documentation tree is correlated on, never the flag name.

The same FlagSet can be exposed through argparse to parse a real command
line into the bound configuration object.
"""

import argparse
import dataclasses
import logging
import re
from datetime import timedelta
from typing import Any, Callable, Dict, Iterator, List, Optional, Sequence, Tuple

from confdoc.domain import constants as const
from confdoc.domain.config_models import FlagInfo, StorageRef
from confdoc.domain.errors import FlagRegistrationError

logger = logging.getLogger(__name__)

Parser = Callable[[str], Any]
Formatter = Callable[[Any], str]

_DURATION_UNITS: Dict[str, float] = {
    "h": 3600.0,
    "m": 60.0,
    "s": 1.0,
    "ms": 1e-3,
    "us": 1e-6,
    "µs": 1e-6,
    "ns": 1e-9,
}
_DURATION_PART_RX = re.compile(r"(\d+(?:\.\d*)?|\.\d+)(ns|us|µs|ms|h|m|s)")

# -----------------------------------------------------------------------------
# VALUE FORMATTING AND PARSING
# -----------------------------------------------------------------------------

def format_value(value: Any) -> str:
    """Render a flag value the way command-line help displays it."""
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float):
        return str(int(value)) if value.is_integer() else repr(value)
    if isinstance(value, timedelta):
        return format_duration(value)
    if isinstance(value, (list, tuple)):
        return ",".join(format_value(v) for v in value)
    return str(value)


def format_duration(value: timedelta) -> str:
    """Render a timedelta as a compact duration such as '1m30s' or '500ms'."""
    seconds = value.total_seconds()
    if seconds == 0:
        return "0s"
    sign = "-" if seconds < 0 else ""
    seconds = abs(seconds)

    if seconds < 1:
        return f"{sign}{_trim_number(seconds * 1000)}ms"

    hours, rest = divmod(seconds, 3600)
    minutes, secs = divmod(rest, 60)
    if hours:
        return f"{sign}{int(hours)}h{int(minutes)}m{_trim_number(secs)}s"
    if minutes:
        return f"{sign}{int(minutes)}m{_trim_number(secs)}s"
    return f"{sign}{_trim_number(secs)}s"


def parse_duration(text: str) -> timedelta:
    """
    Parse '1h30m', '250ms' or a bare number of seconds into a timedelta.

    Raises:
        ValueError: If the text is not a valid duration.
    """
    raw = text.strip()
    if not raw:
        raise ValueError("empty duration")
    try:
        return timedelta(seconds=float(raw))
    except ValueError:
        pass

    sign = -1.0 if raw.startswith("-") else 1.0
    body = raw.lstrip("+-")
    total = 0.0
    pos = 0
    for match in _DURATION_PART_RX.finditer(body):
        if match.start() != pos:
            break
        total += float(match.group(1)) * _DURATION_UNITS[match.group(2)]
        pos = match.end()
    if pos != len(body) or pos == 0:
        raise ValueError(f"invalid duration: {text!r}")
    return timedelta(seconds=sign * total)


def parse_bool(text: str) -> bool:
    value = str(text).strip().lower()
    if value in ("1", "t", "true", "yes", "on"):
        return True
    if value in ("0", "f", "false", "no", "off"):
        return False
    raise ValueError(f"invalid boolean value: {text!r}")


def split_csv(text: str) -> List[str]:
    """Convert a comma-separated string into a list of sanitized strings."""
    parts = [x.strip() for x in str(text).split(",")]
    return [x for x in parts if x]


def _trim_number(value: float) -> str:
    rounded = round(value, 9)
    return str(int(rounded)) if float(rounded).is_integer() else repr(rounded)

# -----------------------------------------------------------------------------
# FLAG SET
# -----------------------------------------------------------------------------

class Flag:
    """
    A registered flag bound to an attribute of a live object.
    """

    def __init__(
            self,
            name: str,
            usage: str,
            owner: Any,
            attribute: str,
            default_text: str,
            parse: Parser,
            fmt: Formatter,
            deprecated: bool = False,
    ) -> None:
        self.name = name
        self.usage = usage
        self.owner = owner
        self.attribute = attribute
        self.default_text = default_text
        self.deprecated = deprecated
        self._parse = parse
        self._format = fmt

    @property
    def storage(self) -> StorageRef:
        return StorageRef.of(self.owner, self.attribute)

    def value_text(self) -> str:
        """Render the value currently held by the bound storage."""
        return self._format(getattr(self.owner, self.attribute))

    def set(self, text: str) -> None:
        setattr(self.owner, self.attribute, self._parse(text))

    def parse(self, text: str) -> Any:
        return self._parse(text)

    def info(self) -> FlagInfo:
        return FlagInfo(
            name=self.name,
            usage=self.usage,
            default_text=self.default_text,
            storage=self.storage,
            deprecated=self.deprecated,
        )

    def __repr__(self) -> str:
        return f"Flag(name={self.name!r}, attribute={self.attribute!r})"


class _DeprecatedHolder:
    """Private storage for flags that no configuration field backs anymore."""

    def __init__(self) -> None:
        self.value = const.DEPRECATED_FLAG_VALUE


class FlagSet:
    """
    Ordered registry of command-line flags bound to configuration storage.

    Enumeration is lexicographic by flag name, so every consumer (help
    output, documentation, indexing) sees the same deterministic order.
    """

    def __init__(self, name: str = "") -> None:
        self.name = name
        self._flags: Dict[str, Flag] = {}

    # --- Registration ---

    def var(
            self,
            owner: Any,
            attribute: str,
            name: str,
            usage: str,
            default: Any,
            *,
            parse: Parser = str,
            fmt: Formatter = format_value,
            deprecated: bool = False,
    ) -> Flag:
        """
        Register a flag writing into 'owner.attribute'.

        The default is stored into the bound attribute immediately, so the
        configuration object reflects its registered defaults.

        Raises:
            FlagRegistrationError: On duplicate names or invalid bindings.
        """
        if not name or name.startswith("-"):
            raise FlagRegistrationError(f"Invalid flag name: {name!r}")
        if name in self._flags:
            raise FlagRegistrationError(f"Flag redefined: {name}")
        if isinstance(owner, type) or not hasattr(owner, attribute):
            raise FlagRegistrationError(
                f"Flag '{name}' is bound to unknown attribute '{attribute}' of {type(owner).__name__}"
            )
        try:
            setattr(owner, attribute, default)
        except (AttributeError, dataclasses.FrozenInstanceError) as e:
            raise FlagRegistrationError(f"Flag '{name}' cannot write to '{attribute}': {e}") from e

        flag = Flag(
            name=name,
            usage=usage,
            owner=owner,
            attribute=attribute,
            default_text=fmt(default),
            parse=parse,
            fmt=fmt,
            deprecated=deprecated,
        )
        self._flags[name] = flag
        return flag

    def int_var(self, owner: Any, attribute: str, name: str, default: int, usage: str) -> Flag:
        return self.var(owner, attribute, name, usage, int(default), parse=int)

    def float_var(self, owner: Any, attribute: str, name: str, default: float, usage: str) -> Flag:
        return self.var(owner, attribute, name, usage, float(default), parse=float)

    def bool_var(self, owner: Any, attribute: str, name: str, default: bool, usage: str) -> Flag:
        return self.var(owner, attribute, name, usage, bool(default), parse=parse_bool)

    def string_var(self, owner: Any, attribute: str, name: str, default: str, usage: str) -> Flag:
        return self.var(owner, attribute, name, usage, str(default), parse=str)

    def duration_var(self, owner: Any, attribute: str, name: str, default: timedelta, usage: str) -> Flag:
        return self.var(owner, attribute, name, usage, default, parse=parse_duration)

    def string_list_var(
            self, owner: Any, attribute: str, name: str, default: Sequence[str], usage: str
    ) -> Flag:
        return self.var(owner, attribute, name, usage, list(default), parse=split_csv)

    def deprecated(self, name: str, usage: str = "") -> Flag:
        """Register a flag kept only so old command lines keep parsing."""
        return self.var(_DeprecatedHolder(), "value", name, usage, const.DEPRECATED_FLAG_VALUE, deprecated=True)

    # --- Enumeration ---

    def flags(self) -> List[Flag]:
        return [self._flags[k] for k in sorted(self._flags)]

    def __iter__(self) -> Iterator[Flag]:
        return iter(self.flags())

    def __len__(self) -> int:
        return len(self._flags)

    def visit_all(self, fn: Callable[[Flag], None]) -> None:
        for flag in self.flags():
            fn(flag)

    def lookup(self, name: str) -> Optional[Flag]:
        return self._flags.get(name)

    # --- Command-line parsing ---

    def to_argparse(self, parser: Optional[argparse.ArgumentParser] = None) -> argparse.ArgumentParser:
        """
        Expose every flag as '-name' / '--name' on an argparse parser.

        Parsed values are written straight into the bound storage.
        """
        if parser is None:
            parser = argparse.ArgumentParser(prog=self.name or None)
        for flag in self.flags():
            kwargs: Dict[str, Any] = {
                "action": _BindAction,
                "flag": flag,
                "default": argparse.SUPPRESS,
                "help": flag.usage,
                "metavar": "VALUE",
            }
            if flag._parse is parse_bool:
                kwargs["nargs"] = "?"
                kwargs["const"] = "true"
            parser.add_argument(f"-{flag.name}", f"--{flag.name}", **kwargs)
        return parser

    def parse(self, argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
        return self.to_argparse().parse_args(argv)


class _BindAction(argparse.Action):
    """argparse action writing the parsed value into the flag's storage."""

    def __init__(self, option_strings: Sequence[str], dest: str, flag: Flag, **kwargs: Any) -> None:
        self.flag = flag
        super().__init__(option_strings, dest, **kwargs)

    def __call__(self, parser: argparse.ArgumentParser, namespace: argparse.Namespace,
                 values: Any, option_string: Optional[str] = None) -> None:
        try:
            self.flag.set(values)
        except ValueError as e:
            parser.error(f"invalid value {values!r} for flag -{self.flag.name}: {e}")

# -----------------------------------------------------------------------------
# INDEXING
# -----------------------------------------------------------------------------

def index_flags(flag_set: FlagSet) -> Dict[StorageRef, FlagInfo]:
    """
    Build the storage identity -> flag lookup used to annotate leaves.

    Deprecated flags are skipped. When two flags share a storage slot the
    last one in enumeration order wins.
    """
    index, _ = index_flags_with_stats(flag_set)
    return index


def index_flags_with_stats(flag_set: FlagSet) -> Tuple[Dict[StorageRef, FlagInfo], int]:
    """Same as index_flags, also returning the number of skipped flags."""
    index: Dict[StorageRef, FlagInfo] = {}
    skipped = 0

    for flag in flag_set.flags():
        if flag.deprecated or flag.value_text() == const.DEPRECATED_FLAG_VALUE:
            skipped += 1
            logger.debug(f"Skipping deprecated flag -{flag.name}")
            continue

        info = flag.info()
        previous = index.get(info.storage)
        if previous is not None:
            logger.debug(f"Flag -{info.name} overrides -{previous.name} for attribute '{info.storage.attribute}'")
        index[info.storage] = info

    logger.debug(f"Indexed {len(index)} flags ({skipped} deprecated skipped)")
    return index, skipped
