# Copyright 2025 Ben Mensi
# SPDX-License-Identifier: Apache-2.0

"""Tests for date_utils.py module."""

from datetime import date, datetime, time, timedelta, timezone

import pytest

from jobhistory.date_utils import (
    DatePatternError,
    DateSymbols,
    compile_pattern,
    resolve_style,
)

AFTERNOON = datetime(2024, 11, 10, 14, 5, 9, 123456)  # a Sunday
MIDNIGHT = datetime(2024, 1, 3, 0, 7, 0)


class TestCompilePattern:
    """Test date pattern compilation and formatting."""

    def test_default_history_pattern(self):
        """The pattern used by the built-in templates."""
        pattern = compile_pattern("HH:mm:ss MM/dd/yyyy")
        assert pattern.format(AFTERNOON) == "14:05:09 11/10/2024"

    def test_unpadded_tokens(self):
        assert compile_pattern("H:m:s M/d/y").format(MIDNIGHT) == "0:7:0 1/3/2024"

    def test_two_digit_year(self):
        assert compile_pattern("yy").format(AFTERNOON) == "24"

    def test_month_and_day_names(self):
        pattern = compile_pattern("dddd, MMMM d, yyyy")
        assert pattern.format(AFTERNOON) == "Sunday, November 10, 2024"

    def test_abbreviated_names(self):
        assert compile_pattern("ddd MMM dd").format(AFTERNOON) == "Sun Nov 10"
        assert compile_pattern("EEE").format(AFTERNOON) == "Sun"
        assert compile_pattern("EEEE").format(AFTERNOON) == "Sunday"

    def test_twelve_hour_clock(self):
        """Test 12-hour rendering, including midnight as 12."""
        assert compile_pattern("h:mm tt").format(AFTERNOON) == "2:05 PM"
        assert compile_pattern("hh:mm a").format(MIDNIGHT) == "12:07 AM"
        assert compile_pattern("t").format(AFTERNOON) == "P"

    def test_fractional_seconds(self):
        assert compile_pattern("ss.fff").format(AFTERNOON) == "09.123"
        assert compile_pattern("SSS").format(AFTERNOON) == "123"
        assert compile_pattern("f").format(AFTERNOON) == "1"

    def test_quoted_literals(self):
        """Text in single quotes is copied, '' is a quote."""
        assert compile_pattern("'at' HH").format(AFTERNOON) == "at 14"
        assert compile_pattern("h 'o''clock'").format(AFTERNOON) == "2 o'clock"
        assert compile_pattern("''HH''").format(AFTERNOON) == "'14'"

    def test_offsets_for_aware_values(self):
        aware = AFTERNOON.replace(tzinfo=timezone(timedelta(hours=2)))
        assert compile_pattern("zzz").format(aware) == "+02:00"
        assert compile_pattern("Z").format(aware) == "+0200"

    def test_negative_offset(self):
        aware = AFTERNOON.replace(tzinfo=timezone(timedelta(hours=-5, minutes=-30)))
        assert compile_pattern("zzz").format(aware) == "-05:30"

    def test_date_only_value(self):
        assert compile_pattern("yyyy-MM-dd").format(date(2024, 11, 3)) == "2024-11-03"

    def test_time_only_value(self):
        assert compile_pattern("HH:mm").format(time(9, 30)) == "09:30"

    def test_date_value_with_time_tokens(self):
        pattern = compile_pattern("HH:mm")
        with pytest.raises(DatePatternError, match="time of day"):
            pattern.format(date(2024, 11, 3))

    def test_time_value_with_date_tokens(self):
        pattern = compile_pattern("yyyy")
        with pytest.raises(DatePatternError, match="needs a date"):
            pattern.format(time(9, 30))

    def test_unknown_letter(self):
        with pytest.raises(DatePatternError, match="Unsupported pattern token 'QQ'"):
            compile_pattern("yyyy QQ")

    def test_too_many_hour_letters(self):
        with pytest.raises(DatePatternError):
            compile_pattern("HHH")

    def test_unterminated_quote(self):
        with pytest.raises(DatePatternError, match="Unterminated quote"):
            compile_pattern("HH 'oops")

    def test_non_letters_are_literal(self):
        assert compile_pattern("[HH]-<mm>").format(AFTERNOON) == "[14]-<05>"


class TestDateSymbols:
    """Test locale symbol tables."""

    FRENCH = DateSymbols(
        month_names=(
            "janvier", "février", "mars", "avril", "mai", "juin",
            "juillet", "août", "septembre", "octobre", "novembre", "décembre",
        ),
        day_names=("lundi", "mardi", "mercredi", "jeudi", "vendredi", "samedi", "dimanche"),
    )

    def test_custom_names(self):
        pattern = compile_pattern("dddd d MMMM yyyy")
        assert pattern.format(AFTERNOON, self.FRENCH) == "dimanche 10 novembre 2024"

    def test_unset_tables_keep_english(self):
        assert compile_pattern("MMM").format(AFTERNOON, self.FRENCH) == "Nov"

    def test_wrong_length_rejected(self):
        with pytest.raises(ValueError, match="month_names needs 12 entries"):
            DateSymbols(month_names=("Jan",))

    def test_from_dict(self):
        symbols = DateSymbols.from_dict({"am_pm": ["vorm.", "nachm."]})
        assert symbols.am_pm == ("vorm.", "nachm.")
        assert compile_pattern("h tt").format(AFTERNOON, symbols) == "2 nachm."

    @pytest.mark.parametrize("value", [5, "AM PM", None, ["AM", 2]])
    def test_from_dict_rejects_non_lists(self, value):
        with pytest.raises(ValueError, match="'am_pm' must be a list of strings"):
            DateSymbols.from_dict({"am_pm": value})


class TestResolveStyle:
    """Test named style lookup."""

    def test_empty_style_is_medium(self):
        assert resolve_style("date", "") == "MMM d, yyyy"
        assert resolve_style("time", "") == "h:mm:ss tt"

    def test_named_styles(self):
        assert resolve_style("date", "short") == "M/d/yy"
        assert resolve_style("date", "FULL") == "dddd, MMMM d, yyyy"
        assert resolve_style("time", "short") == "h:mm tt"

    def test_custom_pattern_passes_through(self):
        assert resolve_style("date", " HH:mm:ss MM/dd/yyyy ") == "HH:mm:ss MM/dd/yyyy"
