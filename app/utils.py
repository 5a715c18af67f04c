"""
Helpers for presenting catalog entries in the Streamlit app.
"""

import os
from typing import Dict, List, Optional

from catalog.languages import format_language_for_display

# Column key -> header shown in the entries table
COLUMN_LABELS = {
    "title": "Title",
    "medium": "Medium",
    "type": "Type",
    "status": "Status",
    "platform": "Platform",
    "genre": "Genre",
    "language": "Language",
    "season": "Season",
    "episodes": "Episodes",
    "episodes_watched": "Watched",
    "length": "Length",
    "rating": "Rating",
    "my_rating": "My Rating",
    "average_rating": "Avg Rating",
    "price": "Price",
    "start_date": "Started",
    "finish_date": "Finished",
    "time_taken": "Time Taken",
}
DEFAULT_COLUMNS = (
    "title",
    "medium",
    "status",
    "platform",
    "genre",
    "language",
    "my_rating",
    "finish_date",
)


def format_cell(column: str, value) -> Optional[str]:
    """
    Format an entry value for display in the table.

    Args:
        column: Column key
        value: The entry's value for that column

    Returns:
        Display text, or None for an empty cell
    """
    if column == "language":
        return format_language_for_display(value)
    if isinstance(value, list):
        return ", ".join(value) if value else None
    if value is None or value == "":
        return None
    return str(value)


def entries_to_rows(entries: List[Dict], columns: List[str]) -> List[Dict]:
    """
    Convert entries to table rows holding only the visible columns.

    Returns:
        List of dictionaries keyed by column label
    """
    return [
        {COLUMN_LABELS[column]: format_cell(column, entry.get(column)) for column in columns}
        for entry in entries
    ]


def is_debug_mode() -> bool:
    """
    Check if the application is running in debug mode.

    Returns:
        True if in debug mode, False otherwise
    """
    return os.getenv("DEBUG", "false").lower() == "true"
