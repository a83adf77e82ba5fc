"""Tests for half-open membership windows."""

import pytest

from src.services.membership import window_contains


class TestWindowContains:
    """A membership [5, 10) covers seq 5..9."""

    @pytest.mark.parametrize(
        "seq,expected",
        [
            (4, False),
            (5, True),
            (9, True),
            (10, False),
            (11, False),
        ],
    )
    def test_closed_window(self, seq, expected):
        assert window_contains(5, 10, seq) is expected

    def test_open_ended_window(self):
        """No end_seq means active from start_seq onward."""
        assert window_contains(5, None, 5) is True
        assert window_contains(5, None, 500) is True
        assert window_contains(5, None, 4) is False

    def test_empty_window(self):
        assert window_contains(5, 5, 5) is False
