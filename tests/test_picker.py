"""
Calendar picker tests: two-click state machine, hover preview and month navigation.
"""
import pytest

from greenarea.models import DateRange
from greenarea.picker import (EMPTY, RANGE_COMPLETE, START_PICKED, CalendarSelector, calendar_span,
                              month_grid, preview_range)

AVAILABLE = ["2024-01-05", "2024-01-08", "2024-01-10", "2024-01-15", "2024-02-01"]


@pytest.fixture
def cal():
    return CalendarSelector(AVAILABLE, 2024, 1)


class TestClicks:
    def test_concrete_swap_scenario(self, cal):
        """Empty -> click 10 -> click 5 gives 5..10"""
        assert cal.state == EMPTY

        assert cal.click_date("2024-01-10")
        assert cal.state == START_PICKED
        assert cal.value == DateRange(start="2024-01-10")

        assert cal.click_date("2024-01-05")
        assert cal.state == RANGE_COMPLETE
        assert cal.value == DateRange(start="2024-01-05", end="2024-01-10")

    def test_forward_pick(self, cal):
        cal.click(5)
        cal.click(15)
        assert cal.value == DateRange(start="2024-01-05", end="2024-01-15")

    def test_click_after_complete_restarts(self, cal):
        cal.click(5)
        cal.click(10)
        cal.click(15)

        assert cal.state == START_PICKED
        assert cal.value == DateRange(start="2024-01-15")

    def test_unavailable_day_is_inert(self, cal):
        cal.click(5)
        assert cal.click(6) is False
        assert cal.value == DateRange(start="2024-01-05")

    def test_same_day_twice_is_a_one_day_range(self, cal):
        cal.click(8)
        cal.click(8)
        assert cal.value == DateRange(start="2024-01-08", end="2024-01-08")
        assert cal.day_count() == 1

    def test_clear(self, cal):
        cal.click(5)
        cal.click(10)
        cal.clear()
        assert cal.state == EMPTY


class TestPreview:
    def test_preview_range_inclusive_either_order(self):
        assert preview_range("2024-01-10", "2024-01-08") == ["2024-01-08", "2024-01-09", "2024-01-10"]

    def test_preview_needs_start_and_hover(self):
        assert preview_range(None, "2024-01-08") == []
        assert preview_range("2024-01-08", None) == []

    def test_hover_only_while_start_picked(self, cal):
        assert cal.hover_preview("2024-01-08") == []
        cal.click(5)
        assert cal.hover_preview("2024-01-07") == ["2024-01-05", "2024-01-06", "2024-01-07"]
        cal.click(10)
        assert cal.hover_preview("2024-01-15") == []

    def test_hover_does_not_change_value(self, cal):
        cal.click(5)
        cal.hover_preview("2024-01-15")
        assert cal.value == DateRange(start="2024-01-05")

    def test_span_crosses_month_end(self):
        assert calendar_span("2024-01-31", "2024-02-01") == ["2024-01-31", "2024-02-01"]


class TestNavigation:
    def test_navigation_keeps_selection(self, cal):
        cal.click(5)
        cal.next_month()

        assert (cal.view_year, cal.view_month) == (2024, 2)
        assert cal.value == DateRange(start="2024-01-05")

        cal.click(1)  # 2024-02-01 completes the range from the other month
        assert cal.value == DateRange(start="2024-01-05", end="2024-02-01")

    def test_year_rollover(self):
        cal = CalendarSelector([], 2024, 12)
        cal.next_month()
        assert (cal.view_year, cal.view_month) == (2025, 1)
        cal.previous_month()
        cal.previous_month()
        assert (cal.view_year, cal.view_month) == (2024, 11)

    def test_show_month_validates(self, cal):
        with pytest.raises(ValueError):
            cal.show_month(2024, 13)

    def test_available_days_for_shown_month(self, cal):
        assert cal.available_days() == [5, 8, 10, 15]
        cal.show_month(2024, 2)
        assert cal.available_days() == [1]


class TestGrid:
    def test_month_grid_monday_first(self):
        # 2024-01-01 was a Monday, 2024-02-01 a Thursday
        assert month_grid(2024, 1)[:3] == [1, 2, 3]
        feb = month_grid(2024, 2)
        assert feb[:4] == [None, None, None, 1]
        assert feb[-1] == 29

    def test_selected_dates(self, cal):
        assert cal.selected_dates() == []
        cal.click(8)
        assert cal.selected_dates() == ["2024-01-08"]
        cal.click(10)
        assert cal.selected_dates() == ["2024-01-08", "2024-01-09", "2024-01-10"]
        assert cal.day_count() == 3

    def test_unnormalized_initial_value_is_normalized(self):
        cal = CalendarSelector(AVAILABLE, 2024, 1, value=DateRange(start="2024-01-10", end="2024-01-05"))
        assert cal.value == DateRange(start="2024-01-05", end="2024-01-10")
