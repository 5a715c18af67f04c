"""Unit tests for creating, updating and listing catalog entries."""

import pytest

from catalog.entries import (
    create_entry,
    delete_entry,
    get_entries,
    get_entry,
    get_status_history,
    update_entry,
    validate_entry,
)
from catalog.errors import PersistenceError, ValidationError
from catalog.store import ENTRIES_TABLE


def test_validate_entry_derives_time_taken_and_status():
    """Test time taken and a finished status are derived from the dates."""
    entry = validate_entry(
        {"title": "Shogun", "start_date": "2024-01-01", "finish_date": "2024-01-03"}
    )
    assert entry["time_taken"] == "3 days"
    assert entry["status"] == "Finished"
    assert "id" not in entry


def test_validate_entry_rejects_bad_rating():
    """Test an invalid entry raises a catalog ValidationError naming the field."""
    with pytest.raises(ValidationError, match="rating"):
        validate_entry({"title": "Shogun", "rating": 12})


def test_create_entry_rejects_missing_title(store):
    """Test nothing is stored when the title is missing."""
    with pytest.raises(ValidationError, match="Title is required"):
        create_entry(store, {"title": "  "})
    assert store.select(ENTRIES_TABLE).data == []


def test_create_entry_normalizes_and_logs_status(store):
    """Test a created entry is normalized and its first status recorded."""
    created = create_entry(
        store, {"title": "Shogun", "status": "Watching", "language": "ja, en"}
    )

    assert created["language"] == ["English", "Japanese"]
    history = get_status_history(store, created["id"])
    assert len(history) == 1
    assert history[0]["old_status"] is None
    assert history[0]["new_status"] == "Watching"


def test_update_entry_records_status_change(store):
    """Test a status change is appended to the history."""
    created = create_entry(store, {"title": "Shogun", "status": "Watching"})

    updated = update_entry(store, created["id"], {"status": "Finished"})

    assert updated["status"] == "Finished"
    statuses = [change["new_status"] for change in get_status_history(store, created["id"])]
    assert sorted(statuses) == ["Finished", "Watching"]


def test_update_entry_without_status_change_adds_no_history(store):
    """Test updating other fields doesn't touch the history."""
    created = create_entry(store, {"title": "Shogun", "status": "Watching"})
    update_entry(store, created["id"], {"platform": "Hulu"})
    assert len(get_status_history(store, created["id"])) == 1


def test_update_entry_recalculates_time_taken(store):
    """Test changing a date recomputes time taken."""
    created = create_entry(
        store, {"title": "Shogun", "start_date": "2024-01-01", "finish_date": "2024-01-01"}
    )
    assert created["time_taken"] == "1 day"

    updated = update_entry(store, created["id"], {"finish_date": "2024-01-10"})
    assert updated["time_taken"] == "10 days"

    cleared = update_entry(store, created["id"], {"start_date": None})
    assert cleared["time_taken"] is None


def test_update_entry_invalid_leaves_entry_unchanged(store):
    """Test an invalid update stores nothing."""
    created = create_entry(store, {"title": "Shogun", "rating": 8})
    with pytest.raises(ValidationError):
        update_entry(store, created["id"], {"rating": 42})
    assert get_entry(store, created["id"])["rating"] == 8


def test_get_entry_missing(store):
    """Test looking up an unknown id raises a PersistenceError."""
    with pytest.raises(PersistenceError, match="not found"):
        get_entry(store, "missing")


def test_delete_entry(store):
    """Test deleting removes the entry and fails for unknown ids."""
    created = create_entry(store, {"title": "Shogun"})
    delete_entry(store, created["id"])

    assert get_entries(store) == []
    with pytest.raises(PersistenceError):
        delete_entry(store, created["id"])


def test_get_entries_filters_and_sorts(store):
    """Test listing by status, medium and title search, newest first."""
    rows = [
        {"title": "Inception", "medium": "Movie", "status": "Finished"},
        {"title": "Shogun", "medium": "TV Show", "status": "Watching"},
        {"title": "Shogun 1980", "medium": "TV Show", "status": "Finished"},
    ]
    for index, row in enumerate(rows):
        store.update(
            ENTRIES_TABLE,
            store.insert(ENTRIES_TABLE, row).data["id"],
            {"created_at": f"2024-01-0{index + 1}T00:00:00+00:00"},
        )

    assert [e["title"] for e in get_entries(store)] == ["Shogun 1980", "Shogun", "Inception"]
    assert [e["title"] for e in get_entries(store, status="Finished")] == [
        "Shogun 1980",
        "Inception",
    ]
    assert [e["title"] for e in get_entries(store, medium="Movie")] == ["Inception"]
    assert [e["title"] for e in get_entries(store, search="SHOGUN")] == [
        "Shogun 1980",
        "Shogun",
    ]
