"""
Create, update, delete and list catalog entries, keeping the status history in step.
"""

import logging
from typing import Dict, List, Optional

from pydantic import ValidationError as ModelValidationError

from catalog.errors import PersistenceError, ValidationError
from catalog.models import MediaRecord
from catalog.parsing import calculate_time_taken
from catalog.store import ENTRIES_TABLE, HISTORY_TABLE, JsonStore, now_iso

logger = logging.getLogger(__name__)

STORE_MANAGED_FIELDS = {"id", "created_at", "updated_at"}


def _format_validation_error(error: ModelValidationError) -> str:
    messages = []
    for detail in error.errors():
        field = ".".join(str(part) for part in detail.get("loc", ()))
        message = detail.get("msg", "invalid value").removeprefix("Value error, ")
        messages.append(f"{field}: {message}" if field else message)
    return "; ".join(messages)


def _derive_fields(data: Dict) -> Dict:
    """
    Fill in the fields computed from others.

    time_taken comes from the start and finish dates, and a finished entry with no
    status is marked Finished.
    """
    derived = dict(data)
    if derived.get("start_date") and derived.get("finish_date"):
        time_taken = calculate_time_taken(derived["start_date"], derived["finish_date"])
        if time_taken:
            derived["time_taken"] = time_taken
    if derived.get("finish_date") and not derived.get("status"):
        derived["status"] = "Finished"
    return derived


def validate_entry(data: Dict) -> Dict:
    """
    Validate and normalize an entry before it is persisted.

    Args:
        data: Entry fields

    Returns:
        The normalized entry fields, excluding those the store manages

    Raises:
        ValidationError: If the title is missing or a value is out of range
    """
    try:
        record = MediaRecord(**_derive_fields(data))
    except ModelValidationError as e:
        message = _format_validation_error(e)
        logger.warning("Rejected entry '%s': %s", data.get("title"), message)
        raise ValidationError(message) from e
    return record.model_dump(exclude=STORE_MANAGED_FIELDS)


def _log_status_change(
    store: JsonStore,
    entry_id: str,
    old_status: Optional[str],
    new_status: str,
    notes: Optional[str] = None,
) -> None:
    result = store.insert(
        HISTORY_TABLE,
        {
            "media_entry_id": entry_id,
            "old_status": old_status,
            "new_status": new_status,
            "changed_at": now_iso(),
            "notes": notes,
        },
    )
    if not result.success:
        logger.error(
            "Failed to record status change for %s: %s", entry_id, result.error
        )


def create_entry(store: JsonStore, data: Dict) -> Dict:
    """
    Validate and store a new entry.

    Args:
        store: The table store
        data: Entry fields from the form

    Returns:
        The stored entry, including its id

    Raises:
        ValidationError: If the entry is invalid.  Nothing is stored.
        PersistenceError: If the store operation fails.
    """
    entry = validate_entry(data)
    result = store.insert(ENTRIES_TABLE, entry)
    if not result.success:
        raise PersistenceError(result.error)

    created = result.data
    if created.get("status"):
        _log_status_change(store, created["id"], None, created["status"])
    logger.info("Created entry '%s'", created["title"])
    return created


def get_entry(store: JsonStore, entry_id: str) -> Dict:
    """
    Get a single entry by id.

    Raises:
        PersistenceError: If the lookup fails or there is no such entry.
    """
    result = store.select(ENTRIES_TABLE, id=entry_id)
    if not result.success:
        raise PersistenceError(result.error)
    if not result.data:
        raise PersistenceError(f"Entry {entry_id} not found")
    return result.data[0]


def update_entry(store: JsonStore, entry_id: str, changes: Dict) -> Dict:
    """
    Apply a partial update to an entry, recording any status change.

    Args:
        store: The table store
        entry_id: Id of the entry to update
        changes: Fields to change

    Returns:
        The updated entry

    Raises:
        ValidationError: If the merged entry is invalid.  Nothing is stored.
        PersistenceError: If the entry doesn't exist or the store operation fails.
    """
    current = get_entry(store, entry_id)
    merged = {**current, **changes}
    if "time_taken" not in changes and (
        "start_date" in changes or "finish_date" in changes
    ):
        merged["time_taken"] = None

    entry = validate_entry(merged)
    result = store.update(ENTRIES_TABLE, entry_id, entry)
    if not result.success:
        raise PersistenceError(result.error)

    updated = result.data
    if updated.get("status") and updated.get("status") != current.get("status"):
        _log_status_change(store, entry_id, current.get("status"), updated["status"])
    logger.info("Updated entry '%s'", updated["title"])
    return updated


def delete_entry(store: JsonStore, entry_id: str) -> None:
    """
    Delete an entry by id.

    Raises:
        PersistenceError: If the entry doesn't exist or the store operation fails.
    """
    result = store.delete(ENTRIES_TABLE, entry_id)
    if not result.success:
        raise PersistenceError(result.error)


def get_entries(
    store: JsonStore,
    status: Optional[str] = None,
    medium: Optional[str] = None,
    search: Optional[str] = None,
) -> List[Dict]:
    """
    List entries, newest first.

    Args:
        store: The table store
        status: Only entries with this status
        medium: Only entries of this medium
        search: Only entries whose title contains this text, ignoring case

    Returns:
        List of entry dictionaries
    """
    equals = {}
    if status:
        equals["status"] = status
    if medium:
        equals["medium"] = medium

    result = store.select(ENTRIES_TABLE, **equals)
    if not result.success:
        raise PersistenceError(result.error)

    entries = result.data
    if search:
        needle = search.strip().lower()
        entries = [entry for entry in entries if needle in entry["title"].lower()]
    return sorted(entries, key=lambda entry: entry.get("created_at") or "", reverse=True)


def get_status_history(store: JsonStore, entry_id: str) -> List[Dict]:
    """
    Get the status changes recorded for an entry, most recent first.
    """
    result = store.select(HISTORY_TABLE, media_entry_id=entry_id)
    if not result.success:
        raise PersistenceError(result.error)
    return sorted(result.data, key=lambda change: change["changed_at"], reverse=True)
