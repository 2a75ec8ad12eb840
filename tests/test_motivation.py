"""Tests for taskpulse/motivation.py."""

import pytest

from taskpulse.motivation import motivate


@pytest.mark.parametrize(
    "percentage,expected",
    [
        (0, "No tasks completed yet. Keep going!"),
        (100, "Congratulations! All tasks completed!"),
        (99.9, "Almost there!"),
        (75, "Almost there!"),
        (74.99, "You're halfway there! Keep it up!"),
        (50, "You're halfway there! Keep it up!"),
        (25, "You're making good progress."),
        (100 / 3, "You're making good progress."),
        (24.9, "You're just getting started."),
        (0.5, "You're just getting started."),
    ],
)
def test_ladder(percentage, expected):
    assert motivate(percentage) == expected


def test_halfway_from_two_of_four():
    assert motivate(100 * 2 / 4) == "You're halfway there! Keep it up!"
