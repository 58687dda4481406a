# Copyright 2025 Ben Mensi
# SPDX-License-Identifier: Apache-2.0

"""
Date utilities for jobhistory.

Compiles date/time patterns such as "HH:mm:ss MM/dd/yyyy" into formatter
functions, with month/day names taken from a DateSymbols table so that
messages can be rendered for other locales without touching process-wide
locale settings.
"""

from dataclasses import dataclass
from datetime import date, datetime, time
from typing import Callable, List, Tuple, Union

DateLike = Union[datetime, date, time]


class DatePatternError(ValueError):
    """Raised when a date/time pattern cannot be compiled."""

    pass


@dataclass(frozen=True)
class DateSymbols:
    """Locale-dependent names used by date patterns."""

    month_names: Tuple[str, ...] = (
        "January", "February", "March", "April", "May", "June",
        "July", "August", "September", "October", "November", "December",
    )
    month_abbreviations: Tuple[str, ...] = (
        "Jan", "Feb", "Mar", "Apr", "May", "Jun",
        "Jul", "Aug", "Sep", "Oct", "Nov", "Dec",
    )
    # Monday first, matching datetime.weekday()
    day_names: Tuple[str, ...] = (
        "Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday",
    )
    day_abbreviations: Tuple[str, ...] = ("Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun")
    am_pm: Tuple[str, ...] = ("AM", "PM")

    def __post_init__(self):
        expected = {
            "month_names": 12,
            "month_abbreviations": 12,
            "day_names": 7,
            "day_abbreviations": 7,
            "am_pm": 2,
        }
        for field_name, length in expected.items():
            value = tuple(getattr(self, field_name))
            if len(value) != length:
                raise ValueError(
                    f"DateSymbols.{field_name} needs {length} entries, got {len(value)}"
                )
            object.__setattr__(self, field_name, value)

    @classmethod
    def from_dict(cls, data: dict) -> "DateSymbols":
        """Build symbols from a config mapping; missing keys keep English defaults."""
        unknown = set(data) - set(cls.__dataclass_fields__)
        if unknown:
            raise ValueError(f"Unknown date symbol keys: {', '.join(sorted(unknown))}")
        for key, value in data.items():
            if not isinstance(value, (list, tuple)) or not all(isinstance(v, str) for v in value):
                raise ValueError(f"Date symbol '{key}' must be a list of strings")
        return cls(**{key: tuple(value) for key, value in data.items()})


ENGLISH = DateSymbols()

DATE_STYLES = {
    "short": "M/d/yy",
    "medium": "MMM d, yyyy",
    "long": "MMMM d, yyyy",
    "full": "dddd, MMMM d, yyyy",
}

TIME_STYLES = {
    "short": "h:mm tt",
    "medium": "h:mm:ss tt",
    "long": "h:mm:ss tt zzz",
    "full": "h:mm:ss tt zzz",
}

# Emitter signature: (value, symbols) -> str
Emitter = Callable[[DateLike, DateSymbols], str]


def _pad(width: int) -> Callable[[int], str]:
    return lambda n: str(n).zfill(width)


def _hour12(value) -> int:
    return value.hour % 12 or 12


def _offset(value, colon: bool) -> str:
    if isinstance(value, datetime):
        aware = value if value.tzinfo else value.astimezone()
        delta = aware.utcoffset()
    elif isinstance(value, time) and value.tzinfo is not None:
        delta = value.utcoffset()
    else:
        delta = None
    if delta is None:
        return ""
    minutes = int(delta.total_seconds()) // 60
    sign = "-" if minutes < 0 else "+"
    hours, minutes = divmod(abs(minutes), 60)
    sep = ":" if colon else ""
    return f"{sign}{hours:02d}{sep}{minutes:02d}"


def _fraction(width: int) -> Emitter:
    def emit(value, symbols):
        micro = str(getattr(value, "microsecond", 0)).zfill(6)
        return (micro + "0")[:width]

    return emit


def _token_emitter(letter: str, count: int) -> Emitter:
    """Map one run of a pattern letter to an emitter."""
    if letter == "y":
        if count == 2:
            return lambda v, s: str(v.year % 100).zfill(2)
        return lambda v, s: str(v.year).zfill(count)
    if letter == "M":
        if count >= 4:
            return lambda v, s: s.month_names[v.month - 1]
        if count == 3:
            return lambda v, s: s.month_abbreviations[v.month - 1]
        return lambda v, s: _pad(count)(v.month)
    if letter == "d":
        if count >= 4:
            return lambda v, s: s.day_names[v.weekday()]
        if count == 3:
            return lambda v, s: s.day_abbreviations[v.weekday()]
        return lambda v, s: _pad(count)(v.day)
    if letter == "E":
        if count >= 4:
            return lambda v, s: s.day_names[v.weekday()]
        return lambda v, s: s.day_abbreviations[v.weekday()]
    if letter == "H" and count <= 2:
        return lambda v, s: _pad(count)(v.hour)
    if letter == "h" and count <= 2:
        return lambda v, s: _pad(count)(_hour12(v))
    if letter == "m" and count <= 2:
        return lambda v, s: _pad(count)(v.minute)
    if letter == "s" and count <= 2:
        return lambda v, s: _pad(count)(v.second)
    if letter == "f" and count <= 7:
        return _fraction(count)
    if letter == "S" and count <= 3:
        return _fraction(count)
    if letter in ("t", "a") and count <= 2:
        if letter == "t" and count == 1:
            return lambda v, s: s.am_pm[v.hour >= 12][:1]
        return lambda v, s: s.am_pm[v.hour >= 12]
    if letter == "Z":
        return lambda v, s: _offset(v, colon=False)
    if letter == "z":
        return lambda v, s: _offset(v, colon=True)
    raise DatePatternError(f"Unsupported pattern token '{letter * count}'")


# Letters that need a date part / a time part of the value
_DATE_LETTERS = frozenset("yMdE")
_TIME_LETTERS = frozenset("HhmsfSta")


@dataclass(frozen=True)
class DatePattern:
    """A compiled date/time pattern."""

    source: str
    parts: Tuple[Union[str, Emitter], ...]
    needs_date: bool
    needs_time: bool

    def format(self, value: DateLike, symbols: DateSymbols = ENGLISH) -> str:
        if self.needs_date and not isinstance(value, (datetime, date)):
            raise DatePatternError(
                f"Pattern '{self.source}' needs a date, got {type(value).__name__}"
            )
        if self.needs_time and not isinstance(value, (datetime, time)):
            raise DatePatternError(
                f"Pattern '{self.source}' needs a time of day, got {type(value).__name__}"
            )
        return "".join(
            part if isinstance(part, str) else part(value, symbols) for part in self.parts
        )


def compile_pattern(pattern: str) -> DatePattern:
    """
    Compile a date/time pattern.

    Letters are pattern tokens (runs of the same letter form one token),
    text inside single quotes is literal, '' is a literal quote, and every
    other character is copied as-is.

    Args:
        pattern: Pattern string (e.g., "HH:mm:ss MM/dd/yyyy")

    Returns:
        Compiled DatePattern

    Raises:
        DatePatternError: On unknown letters or an unterminated quote

    Example:
        >>> compile_pattern("yyyy-MM-dd").format(date(2024, 11, 3))
        '2024-11-03'
    """
    parts: List[Union[str, Emitter]] = []
    literal: List[str] = []
    needs_date = needs_time = False
    i = 0
    n = len(pattern)

    while i < n:
        ch = pattern[i]
        if ch == "'":
            if i + 1 < n and pattern[i + 1] == "'":
                literal.append("'")
                i += 2
                continue
            end = pattern.find("'", i + 1)
            while end != -1 and end + 1 < n and pattern[end + 1] == "'":
                end = pattern.find("'", end + 2)
            if end == -1:
                raise DatePatternError(f"Unterminated quote in pattern '{pattern}'")
            literal.append(pattern[i + 1:end].replace("''", "'"))
            i = end + 1
        elif ch.isascii() and ch.isalpha():
            run = i
            while run < n and pattern[run] == ch:
                run += 1
            if literal:
                parts.append("".join(literal))
                literal = []
            parts.append(_token_emitter(ch, run - i))
            needs_date = needs_date or ch in _DATE_LETTERS
            needs_time = needs_time or ch in _TIME_LETTERS
            i = run
        else:
            literal.append(ch)
            i += 1

    if literal:
        parts.append("".join(literal))

    return DatePattern(pattern, tuple(parts), needs_date, needs_time)


def resolve_style(kind: str, style: str) -> str:
    """
    Turn a placeholder style into a concrete pattern.

    Named styles (short, medium, long, full) map to the DATE_STYLES or
    TIME_STYLES tables; an empty style means medium; anything else is
    returned unchanged as a custom pattern.
    """
    table = TIME_STYLES if kind == "time" else DATE_STYLES
    key = style.strip().lower() or "medium"
    return table.get(key, style.strip())
