"""
State shared by the table view: selected filters, search text and visible columns.

Views subscribe to changes instead of listening for global events.
"""

import logging
from typing import Callable, Dict, List, Mapping, Optional

from app.utils import COLUMN_LABELS, DEFAULT_COLUMNS
from catalog.filters import (
    FilterState,
    are_filters_equal,
    filters_to_params,
    params_to_filters,
)

logger = logging.getLogger(__name__)

COLUMNS_PARAM = "columns"


class UIState:
    """
    Holds the table view's filters, search and columns, and notifies subscribers
    whenever one of them changes.
    """

    def __init__(
        self,
        filters: Optional[FilterState] = None,
        search: str = "",
        columns: Optional[List[str]] = None,
    ):
        self.filters = filters or FilterState()
        self.search = search
        self.columns = list(columns) if columns else list(DEFAULT_COLUMNS)
        self._subscribers: List[Callable[["UIState"], None]] = []

    def subscribe(self, callback: Callable[["UIState"], None]) -> Callable[[], None]:
        """
        Register a callback run with this state after every change.

        Returns:
            A function that removes the subscription
        """
        self._subscribers.append(callback)

        def _unsubscribe():
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return _unsubscribe

    def _notify(self) -> None:
        for callback in list(self._subscribers):
            callback(self)

    def set_filters(self, filters: FilterState) -> None:
        """Replace the selected filters.  Subscribers are only told of real changes."""
        if are_filters_equal(self.filters, filters):
            return
        self.filters = filters
        logger.debug("Filters changed: %s", filters)
        self._notify()

    def clear_filters(self) -> None:
        self.set_filters(FilterState())

    def set_search(self, search: str) -> None:
        search = search or ""
        if search == self.search:
            return
        self.search = search
        self._notify()

    def toggle_column(self, column: str) -> None:
        """
        Show a hidden column or hide a visible one.  The title column always stays.

        Raises:
            ValueError: If the column is unknown
        """
        if column not in COLUMN_LABELS:
            raise ValueError(f"Unknown column: {column}")
        if column == "title":
            return
        if column in self.columns:
            self.columns.remove(column)
        else:
            # Keep the table's column order stable
            self.columns.append(column)
            self.columns.sort(key=list(COLUMN_LABELS).index)
        self._notify()

    def set_columns(self, columns: List[str]) -> None:
        wanted = [column for column in COLUMN_LABELS if column in columns]
        if "title" not in wanted:
            wanted.insert(0, "title")
        if wanted == self.columns:
            return
        self.columns = wanted
        self._notify()

    def to_params(self) -> Dict[str, str]:
        """
        Encode the state as URL query parameters.
        """
        params = filters_to_params(self.filters, self.search)
        if self.columns != list(DEFAULT_COLUMNS):
            params[COLUMNS_PARAM] = ",".join(self.columns)
        return params

    @classmethod
    def from_params(cls, params: Mapping[str, str]) -> "UIState":
        """
        Build a state from URL query parameters written by to_params.
        Unknown columns are dropped.
        """
        filters, search = params_to_filters(params)
        columns = [
            column
            for column in (params.get(COLUMNS_PARAM) or "").split(",")
            if column in COLUMN_LABELS
        ]
        if columns and "title" not in columns:
            columns.insert(0, "title")
        return cls(filters=filters, search=search, columns=columns or None)
