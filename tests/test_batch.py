"""Unit tests for fetching metadata for many entries."""

from unittest.mock import MagicMock, patch

import pytest

from catalog.batch import BatchSummary, fetch_metadata_for_entries
from catalog.entries import create_entry, get_entry
from catalog.errors import FetchError


@pytest.fixture(autouse=True, name="mock_sleep")
def fixture_mock_sleep():
    """Skip the pause between entries."""
    with patch("catalog.batch.time.sleep") as mock_sleep:
        yield mock_sleep


def _fetched(title):
    return {
        "title": title,
        "poster_url": f"https://example.com/{title}.jpg",
        "genre": ["Drama"],
        "language": ["Japanese"],
        "average_rating": 8.0,
        "length": None,
        "episodes": 10,
        "imdb_id": None,
    }


def test_batch_fills_only_empty_fields(store):
    """Test each entry gains only the fields it was missing."""
    entry = create_entry(
        store, {"title": "Shogun", "medium": "TV Show", "average_rating": 9.1}
    )
    fetcher = MagicMock(side_effect=lambda **kwargs: _fetched(kwargs["title"]))

    summary = fetch_metadata_for_entries(store, [entry], fetcher=fetcher)

    assert summary == BatchSummary(updated=1)
    fetcher.assert_called_once_with(title="Shogun", medium="TV Show", season=None)
    stored = get_entry(store, entry["id"])
    assert stored["average_rating"] == 9.1
    assert stored["poster_url"] == "https://example.com/Shogun.jpg"
    assert stored["episodes"] == 10
    assert stored["genre"] == ["Drama"]


def test_batch_failure_does_not_stop_others(store, mock_sleep):
    """Test a failed lookup is counted and the remaining entries still run."""
    entries = [create_entry(store, {"title": title}) for title in ("Lost", "Shogun")]

    def fetcher(**kwargs):
        if kwargs["title"] == "Lost":
            raise FetchError("Media not found")
        return _fetched(kwargs["title"])

    summary = fetch_metadata_for_entries(store, entries, fetcher=fetcher, delay_seconds=0.5)

    assert summary.updated == 1
    assert summary.failed == 1
    assert summary.message() == "Fetched metadata for 1 items, 1 failed"
    assert get_entry(store, entries[1]["id"])["poster_url"]
    mock_sleep.assert_called_once_with(0.5)


def test_batch_unchanged_and_skipped(store):
    """Test complete entries are left alone and untitled ones skipped."""
    complete = create_entry(store, {"title": "Shogun"})
    complete = {**complete, **_fetched("Shogun")}
    progress = []

    summary = fetch_metadata_for_entries(
        store,
        [complete, {"id": "x", "title": " "}],
        fetcher=lambda **kwargs: _fetched(kwargs["title"]),
        on_progress=lambda done, total: progress.append((done, total)),
    )

    assert summary == BatchSummary(unchanged=1, skipped=1)
    assert summary.message() == "No entries needed new metadata"
    assert progress == [(1, 2), (2, 2)]


def test_batch_all_failed_message():
    """Test the summary message when every lookup failed."""
    assert BatchSummary(failed=3).message() == "Failed to fetch metadata for 3 items"
