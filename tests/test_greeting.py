"""Tests for taskpulse/greeting.py."""

import pytest

from taskpulse.greeting import greet, greeting_line


@pytest.mark.parametrize("hour", range(5, 12))
def test_morning(hour):
    assert greet(hour) == "Good morning"


@pytest.mark.parametrize("hour", range(13, 18))
def test_afternoon(hour):
    assert greet(hour) == "Good afternoon"


@pytest.mark.parametrize("hour", [0, 1, 2, 3, 4, 18, 19, 20, 21, 22, 23])
def test_evening(hour):
    assert greet(hour) == "Good evening"


def test_noon_falls_through_to_evening():
    assert greet(12) == "Good evening"


def test_every_hour_has_a_greeting():
    phrases = {greet(h) for h in range(24)}
    assert phrases == {"Good morning", "Good afternoon", "Good evening"}


@pytest.mark.parametrize("hour", [-1, 24, 100])
def test_out_of_range_hour(hour):
    with pytest.raises(ValueError, match="0-23"):
        greet(hour)


def test_greeting_line():
    assert greeting_line("Good morning", "Ada") == "Good morning, Ada"
    assert greeting_line("Good morning", "  ") == "Good morning"
    assert greeting_line("Good evening") == "Good evening"
