"""Tests for the schedule builder."""

import pytest
from datetime import datetime
import sys
from pathlib import Path

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from scheduler import Frequencies, ScheduleParseError, parse_cron_expression


HELPERS = [
    (lambda f: f.every_minute(), "* * * * *"),
    (lambda f: f.every_n_minutes(7), "*/7 * * * *"),
    (lambda f: f.every_five_minutes(), "*/5 * * * *"),
    (lambda f: f.every_ten_minutes(), "*/10 * * * *"),
    (lambda f: f.every_fifteen_minutes(), "*/15 * * * *"),
    (lambda f: f.every_thirty_minutes(), "0,30 * * * *"),
    (lambda f: f.hourly(), "0 * * * *"),
    (lambda f: f.hourly_at(17), "17 * * * *"),
    (lambda f: f.every_n_hours(3), "0 */3 * * *"),
    (lambda f: f.daily(), "0 0 * * *"),
    (lambda f: f.daily_at("22:00"), "0 22 * * *"),
    (lambda f: f.daily_at("9:05"), "5 9 * * *"),
    (lambda f: f.daily_at("14"), "0 14 * * *"),
    (lambda f: f.at("13:30"), "30 13 * * *"),
    (lambda f: f.twice_daily(), "0 1,13 * * *"),
    (lambda f: f.twice_daily(8, 20), "0 8,20 * * *"),
    (lambda f: f.weekdays(), "* * * * 1-5"),
    (lambda f: f.weekends(), "* * * * 0,6"),
    (lambda f: f.sundays(), "* * * * 0"),
    (lambda f: f.mondays(), "* * * * 1"),
    (lambda f: f.tuesdays(), "* * * * 2"),
    (lambda f: f.wednesdays(), "* * * * 3"),
    (lambda f: f.thursdays(), "* * * * 4"),
    (lambda f: f.fridays(), "* * * * 5"),
    (lambda f: f.saturdays(), "* * * * 6"),
    (lambda f: f.days(1, 3, 5), "* * * * 1,3,5"),
    (lambda f: f.weekly(), "0 0 * * 0"),
    (lambda f: f.weekly_on(1, "8:00"), "0 8 * * 1"),
    (lambda f: f.monthly(), "0 0 1 * *"),
    (lambda f: f.monthly_on(15, "14:00"), "0 14 15 * *"),
    (lambda f: f.twice_monthly(1, 15, "14:00"), "0 14 1,15 * *"),
    (lambda f: f.quarterly(), "0 0 1 1-12/3 *"),
    (lambda f: f.yearly(), "0 0 1 1 *"),
    (lambda f: f.cron("0 14 1 * *"), "0 14 1 * *"),
]


class TestFrequencies:
    """Test fluent schedule helpers."""

    @pytest.mark.parametrize("helper, expected", HELPERS)
    def test_helper_expression(self, helper, expected):
        """Test each helper produces the expected expression."""
        assert helper(Frequencies()).expression == expected

    @pytest.mark.parametrize("helper, expected", HELPERS)
    def test_helper_output_parses(self, helper, expected):
        """Test each helper's output is accepted by the parser."""
        expr = helper(Frequencies()).build()
        assert expr == parse_cron_expression(expected)

    def test_default_is_every_minute(self):
        assert Frequencies().expression == "* * * * *"

    def test_chaining_splices_positions(self):
        """Test helpers only replace the positions they own."""
        freq = Frequencies().weekdays().daily_at("09:30")
        assert freq.expression == "30 9 * * 1-5"

        freq = Frequencies().daily_at("14:00").mondays()
        assert freq.expression == "0 14 * * 1"

    def test_helpers_do_not_mutate(self):
        """Test helpers return new builders."""
        base = Frequencies()
        daily = base.daily()
        assert base.expression == "* * * * *"
        assert daily.expression == "0 0 * * *"
        assert daily is not base

    def test_same_inputs_same_output(self):
        assert Frequencies().monthly_on(1, "14:00") == Frequencies().monthly_on(1, "14:00")

    def test_quarterly_due_dates(self):
        expr = Frequencies().quarterly().build()
        assert expr.is_due(datetime(2024, 4, 1, 0, 0))
        assert not expr.is_due(datetime(2024, 5, 1, 0, 0))

    @pytest.mark.parametrize("time", ["25:00", "12:60", "noon", "1:2:3", "", "-1:00"])
    def test_invalid_time(self, time):
        with pytest.raises(ScheduleParseError):
            Frequencies().daily_at(time)

    def test_out_of_range_value_fails_at_build(self):
        """Test out-of-range arguments surface when the result is parsed."""
        freq = Frequencies().hourly_at(75)
        with pytest.raises(ScheduleParseError):
            freq.build()

    def test_splice_on_malformed_expression(self):
        with pytest.raises(ScheduleParseError):
            Frequencies("* * *").daily()
