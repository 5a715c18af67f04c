"""
A small table store persisted as a single JSON file.
"""

import json
import logging
import os
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from pydantic import BaseModel

logger = logging.getLogger(__name__)

ENTRIES_TABLE = "media_entries"
HISTORY_TABLE = "media_status_history"
TABLES = (ENTRIES_TABLE, HISTORY_TABLE)


class StoreResult(BaseModel):
    """Outcome of a store operation: the data on success, or an error message."""

    success: bool
    data: Any = None
    error: Optional[str] = None


def now_iso() -> str:
    """Current UTC time as an ISO 8601 timestamp."""
    return datetime.now(timezone.utc).isoformat(timespec="seconds")


class JsonStore:
    """
    Tables of rows keyed by id, read from and written back to one JSON file.
    Every operation returns a StoreResult rather than raising.
    """

    def __init__(self, path: str):
        self.path = path

    def _load(self) -> Dict[str, List[Dict]]:
        tables = {table: [] for table in TABLES}
        if not os.path.exists(self.path):
            return tables
        with open(self.path, "r", encoding="utf-8") as f:
            tables.update(json.load(f))
        return tables

    def _save(self, tables: Dict[str, List[Dict]]) -> None:
        directory = os.path.dirname(self.path)
        if directory:
            os.makedirs(directory, exist_ok=True)
        tmp_path = f"{self.path}.tmp"
        with open(tmp_path, "w", encoding="utf-8") as f:
            json.dump(tables, f, indent=2, ensure_ascii=False)
        os.replace(tmp_path, self.path)

    def _run(self, table: str, operation) -> StoreResult:
        """Run an operation against the loaded tables, converting failures into results."""
        if table not in TABLES:
            return StoreResult(success=False, error=f"Unknown table: {table}")
        try:
            tables = self._load()
            return operation(tables)
        except (IOError, OSError, json.JSONDecodeError) as e:
            logger.error("Error accessing store %s: %s", self.path, e)
            return StoreResult(success=False, error=str(e))

    def select(self, table: str, **equals) -> StoreResult:
        """
        Select the rows of a table whose fields equal all of the given values.

        Args:
            table: Table name
            equals: Field values to match

        Returns:
            StoreResult with the list of matching rows
        """

        def _select(tables):
            rows = [
                row
                for row in tables[table]
                if all(row.get(field) == value for field, value in equals.items())
            ]
            return StoreResult(success=True, data=rows)

        return self._run(table, _select)

    def insert(self, table: str, row: Dict) -> StoreResult:
        """
        Insert a row, assigning an id and timestamps.

        Returns:
            StoreResult with the stored row
        """

        def _insert(tables):
            timestamp = now_iso()
            new_row = {
                **row,
                "id": uuid.uuid4().hex,
                "created_at": timestamp,
                "updated_at": timestamp,
            }
            tables[table].append(new_row)
            self._save(tables)
            logger.info("Inserted row %s into %s", new_row["id"], table)
            return StoreResult(success=True, data=new_row)

        return self._run(table, _insert)

    def update(self, table: str, row_id: str, changes: Dict) -> StoreResult:
        """
        Apply a partial update to the row with the given id.

        Returns:
            StoreResult with the updated row, or an error if no row has that id
        """

        def _update(tables):
            for index, row in enumerate(tables[table]):
                if row.get("id") == row_id:
                    updated = {**row, **changes, "id": row_id, "updated_at": now_iso()}
                    tables[table][index] = updated
                    self._save(tables)
                    logger.info("Updated row %s in %s", row_id, table)
                    return StoreResult(success=True, data=updated)
            return StoreResult(success=False, error=f"No row with id {row_id} in {table}")

        return self._run(table, _update)

    def delete(self, table: str, row_id: str) -> StoreResult:
        """
        Delete the row with the given id.

        Returns:
            StoreResult, an error if no row has that id
        """

        def _delete(tables):
            remaining = [row for row in tables[table] if row.get("id") != row_id]
            if len(remaining) == len(tables[table]):
                return StoreResult(
                    success=False, error=f"No row with id {row_id} in {table}"
                )
            tables[table] = remaining
            self._save(tables)
            logger.info("Deleted row %s from %s", row_id, table)
            return StoreResult(success=True)

        return self._run(table, _delete)
