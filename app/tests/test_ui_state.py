"""
Tests for the table view state container.
"""

from unittest.mock import MagicMock

import pytest

from app.state import UIState
from app.utils import DEFAULT_COLUMNS
from catalog.filters import FilterState


def test_defaults():
    """Test a new state has no filters and the default columns."""
    state = UIState()
    assert state.filters.is_empty()
    assert state.search == ""
    assert state.columns == list(DEFAULT_COLUMNS)


def test_subscribers_notified_on_change():
    """Test subscribers get the state after each real change."""
    state = UIState()
    callback = MagicMock()
    state.subscribe(callback)

    state.set_filters(FilterState(genres=["Drama"]))
    state.set_search("shogun")

    assert callback.call_count == 2
    callback.assert_called_with(state)


def test_equal_filters_do_not_notify():
    """Test setting equal filters in another order isn't a change."""
    state = UIState(filters=FilterState(genres=["Drama", "Action"]))
    callback = MagicMock()
    state.subscribe(callback)

    state.set_filters(FilterState(genres=["Action", "Drama"]))
    state.set_search("")

    callback.assert_not_called()


def test_unsubscribe():
    """Test an unsubscribed callback is no longer called."""
    state = UIState()
    callback = MagicMock()
    unsubscribe = state.subscribe(callback)
    unsubscribe()

    state.set_search("x")
    callback.assert_not_called()


def test_toggle_column():
    """Test toggling hides a visible column and restores it in table order."""
    state = UIState()
    state.toggle_column("medium")
    assert "medium" not in state.columns

    state.toggle_column("medium")
    assert state.columns == list(DEFAULT_COLUMNS)

    state.toggle_column("price")
    assert state.columns[-2:] == ["price", "finish_date"]


def test_toggle_title_and_unknown_column():
    """Test the title column stays and unknown columns are rejected."""
    state = UIState()
    state.toggle_column("title")
    assert "title" in state.columns

    with pytest.raises(ValueError, match="Unknown column"):
        state.toggle_column("director")


def test_set_columns_keeps_title_first():
    """Test chosen columns are ordered and always include the title."""
    state = UIState()
    state.set_columns(["status", "medium"])
    assert state.columns == ["title", "medium", "status"]


def test_params_round_trip():
    """Test the state survives encoding to and from URL parameters."""
    state = UIState(
        filters=FilterState(languages=["Korean"], date_from="2024-01-01"),
        search="parasite",
        columns=["title", "language"],
    )

    params = state.to_params()
    restored = UIState.from_params(params)

    assert params["columns"] == "title,language"
    assert restored.filters == state.filters
    assert restored.search == "parasite"
    assert restored.columns == ["title", "language"]


def test_from_params_drops_unknown_columns():
    """Test unknown columns in the URL fall back to the defaults."""
    state = UIState.from_params({"columns": "director"})
    assert state.columns == list(DEFAULT_COLUMNS)
    assert "columns" not in UIState().to_params()
