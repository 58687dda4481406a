"""Positional message templates with typed placeholders.

Template syntax:
- {N}                 plain substitution of argument N (str())
- {N, date[, style]}  date rendering; style is short/medium/long/full or a pattern
- {N, time[, style]}  time-of-day rendering, same styles
- {N, number[, style]} number rendering; style is integer/percent or a #,##0.00 pattern
- {{ and }}           literal braces

A None argument renders as NONE for every placeholder type.

Copyright 2025 Ben Mensi
Licensed under the Apache License, Version 2.0
"""

import re
from dataclasses import dataclass
from decimal import ROUND_HALF_EVEN, Decimal, InvalidOperation
from numbers import Number
from typing import Any, List, Optional, Sequence, Tuple, Union

from jobhistory.date_utils import (
    ENGLISH,
    DatePattern,
    DatePatternError,
    DateSymbols,
    compile_pattern,
    resolve_style,
)

# Rendered in place of an absent argument
NONE_TEXT = "NONE"

PLACEHOLDER_TYPES = ("date", "time", "number")

_NUMBER_PATTERN_RE = re.compile(r"^(?P<int>[#,]*0*)(?:\.(?P<frac>0*#*))?(?P<pct>%?)$")


class TemplateError(ValueError):
    """Raised when a template is malformed or cannot be applied to its arguments."""

    pass


@dataclass(frozen=True)
class NumberPattern:
    """A compiled #,##0.00-style number pattern."""

    source: str
    grouping: bool
    min_int: int
    min_frac: int
    max_frac: int
    percent: bool

    @classmethod
    def compile(cls, pattern: str) -> "NumberPattern":
        match = _NUMBER_PATTERN_RE.match(pattern)
        if not match or not pattern:
            raise TemplateError(f"Malformed number pattern '{pattern}'")
        int_part = match.group("int")
        frac_part = match.group("frac") or ""
        return cls(
            source=pattern,
            grouping="," in int_part,
            min_int=int_part.count("0"),
            min_frac=frac_part.count("0"),
            max_frac=len(frac_part),
            percent=bool(match.group("pct")),
        )

    def format(self, value: Any) -> str:
        if isinstance(value, bool) or not isinstance(value, (Number, Decimal)):
            raise TemplateError(f"Cannot format {type(value).__name__} as a number")
        try:
            number = Decimal(str(value))
        except InvalidOperation:
            raise TemplateError(f"Cannot format {value!r} as a number")
        if not number.is_finite():
            return str(value)
        if self.percent:
            number *= 100

        number = number.quantize(Decimal(1).scaleb(-self.max_frac), rounding=ROUND_HALF_EVEN)
        sign = "-" if number < 0 else ""
        digits = f"{abs(number):f}"
        whole, _, frac = digits.partition(".")

        frac = frac.rstrip("0")
        if len(frac) < self.min_frac:
            frac = frac.ljust(self.min_frac, "0")
        whole = whole.lstrip("0").rjust(self.min_int, "0")
        if self.grouping:
            whole = f"{int(whole or 0):,}".rjust(self.min_int, "0") if whole else ""
        if not whole and not frac:
            whole = "0"

        text = whole + ("." + frac if frac else "")
        if sign and text.strip("0.") == "":
            sign = ""
        return sign + text + ("%" if self.percent else "")


NUMBER_STYLES = {
    "": "#,##0.###",
    "integer": "#,##0",
    "percent": "#,##0%",
}


@dataclass(frozen=True)
class Placeholder:
    """Reference to one argument, with its type and compiled style."""

    index: int
    kind: str = ""
    style: str = ""
    formatter: Union[DatePattern, NumberPattern, None] = None

    def render(self, args: Sequence[Any], symbols: DateSymbols) -> str:
        if self.index >= len(args):
            raise TemplateError(
                f"Placeholder {{{self.index}}} is out of range: "
                f"{len(args)} argument(s) supplied"
            )
        value = args[self.index]
        if value is None:
            return NONE_TEXT
        if isinstance(self.formatter, DatePattern):
            try:
                return self.formatter.format(value, symbols)
            except DatePatternError as e:
                raise TemplateError(f"Placeholder {{{self.index}}}: {e}") from e
        if isinstance(self.formatter, NumberPattern):
            try:
                return self.formatter.format(value)
            except TemplateError as e:
                raise TemplateError(f"Placeholder {{{self.index}}}: {e}") from e
        return str(value)


Segment = Union[str, Placeholder]


def _parse_placeholder(body: str, position: int) -> Placeholder:
    parts = body.split(",", 2)
    index_text = parts[0].strip()
    if not (index_text.isascii() and index_text.isdigit()):
        raise TemplateError(f"Invalid argument index '{index_text}' at position {position}")
    index = int(index_text)

    if len(parts) == 1:
        return Placeholder(index)

    kind = parts[1].strip().lower()
    style = parts[2].strip() if len(parts) == 3 else ""
    if kind not in PLACEHOLDER_TYPES:
        raise TemplateError(
            f"Unknown placeholder type '{kind}' at position {position}. "
            f"Use one of: {', '.join(PLACEHOLDER_TYPES)}"
        )

    if kind == "number":
        pattern = NUMBER_STYLES.get(style.lower(), style)
        return Placeholder(index, kind, style, NumberPattern.compile(pattern))

    try:
        formatter = compile_pattern(resolve_style(kind, style))
    except DatePatternError as e:
        raise TemplateError(f"Placeholder {{{index}}} at position {position}: {e}") from e
    return Placeholder(index, kind, style, formatter)


@dataclass(frozen=True)
class MessageTemplate:
    """A template parsed into literal text and placeholder segments."""

    source: str
    segments: Tuple[Segment, ...]
    symbols: DateSymbols = ENGLISH

    @classmethod
    def parse(cls, text: str, symbols: Optional[DateSymbols] = None) -> "MessageTemplate":
        """
        Parse a template string.

        Args:
            text: Template with {N} / {N, type, style} placeholders
            symbols: Month/day names for date placeholders (English if omitted)

        Returns:
            Parsed MessageTemplate

        Raises:
            TemplateError: On unbalanced braces, bad indexes, unknown types or bad patterns
        """
        if not isinstance(text, str):
            raise TemplateError(f"Template must be a string, got {type(text).__name__}")

        segments: List[Segment] = []
        literal: List[str] = []
        i = 0
        n = len(text)

        while i < n:
            ch = text[i]
            if ch == "{":
                if text.startswith("{{", i):
                    literal.append("{")
                    i += 2
                    continue
                end = text.find("}", i + 1)
                nested = text.find("{", i + 1)
                if end == -1 or (nested != -1 and nested < end):
                    raise TemplateError(f"Unterminated placeholder at position {i}")
                if literal:
                    segments.append("".join(literal))
                    literal = []
                segments.append(_parse_placeholder(text[i + 1:end], i))
                i = end + 1
            elif ch == "}":
                if text.startswith("}}", i):
                    literal.append("}")
                    i += 2
                    continue
                raise TemplateError(f"Unmatched '}}' at position {i}")
            else:
                literal.append(ch)
                i += 1

        if literal:
            segments.append("".join(literal))

        return cls(text, tuple(segments), symbols or ENGLISH)

    @property
    def max_index(self) -> int:
        """Highest argument index referenced, or -1 if there are no placeholders."""
        return max(
            (seg.index for seg in self.segments if isinstance(seg, Placeholder)),
            default=-1,
        )

    def format(self, args: Sequence[Any]) -> str:
        return "".join(
            seg if isinstance(seg, str) else seg.render(args, self.symbols)
            for seg in self.segments
        )

    def __str__(self) -> str:
        return self.source


def render(template: Union[str, MessageTemplate], args: Sequence[Any]) -> str:
    """Render a template (string or parsed) against positional arguments.

    Example:
        >>> render("Job {1}.{0} has run {2, number, integer} times", ["j", "g", 3])
        'Job g.j has run 3 times'
    """
    if not isinstance(template, MessageTemplate):
        template = MessageTemplate.parse(template)
    return template.format(args)
