"""
Filter, search and filter-option extraction for lists of catalog entries.
"""

import logging
from typing import Dict, Iterable, List, Mapping, Optional, Tuple

from pydantic import BaseModel, Field

from catalog.languages import normalize_genre, normalize_language

logger = logging.getLogger(__name__)

# Filter dimension -> entry field, for single valued fields matched with OR semantics
SCALAR_DIMENSIONS = {
    "mediums": "medium",
    "platforms": "platform",
    "statuses": "status",
    "types": "type",
}
LIST_DIMENSIONS = ("genres", "mediums", "languages", "platforms", "statuses", "types")
# Filter field -> query parameter name
PARAM_NAMES = {
    "date_from": "dateFrom",
    "date_to": "dateTo",
    **{dimension: dimension for dimension in LIST_DIMENSIONS},
}
SEARCH_PARAM = "search"


class FilterState(BaseModel):
    """Selected filters.  An empty value places no constraint on that dimension."""

    date_from: Optional[str] = None
    date_to: Optional[str] = None
    genres: List[str] = Field(default_factory=list)
    mediums: List[str] = Field(default_factory=list)
    languages: List[str] = Field(default_factory=list)
    platforms: List[str] = Field(default_factory=list)
    statuses: List[str] = Field(default_factory=list)
    types: List[str] = Field(default_factory=list)

    def is_empty(self) -> bool:
        """True when no dimension is constrained."""
        return not self.date_from and not self.date_to and not any(
            getattr(self, dimension) for dimension in LIST_DIMENSIONS
        )


def _entry_date(entry: Dict) -> Optional[str]:
    return entry.get("finish_date") or entry.get("start_date")


def _matches_date_range(entry: Dict, filters: FilterState) -> bool:
    if not filters.date_from and not filters.date_to:
        return True
    entry_date = _entry_date(entry)
    if not entry_date:
        return False
    # ISO dates compare correctly as strings
    if filters.date_from and entry_date < filters.date_from:
        return False
    if filters.date_to and entry_date > filters.date_to:
        return False
    return True


def _matches_genres(entry: Dict, genres: List[str]) -> bool:
    """All selected genres must be present on the entry."""
    entry_genres = {genre.lower() for genre in normalize_genre(entry.get("genre"))}
    return all(genre.strip().lower() in entry_genres for genre in genres)


def _matches_languages(entry: Dict, languages: List[str]) -> bool:
    """Any selected language present on the entry is a match."""
    selected = {language.lower() for language in normalize_language(languages)}
    return any(
        language.lower() in selected
        for language in normalize_language(entry.get("language"))
    )


def matches_filters(entry: Dict, filters: FilterState) -> bool:
    """
    Check whether a single entry passes every active filter dimension.

    Args:
        entry: Catalog entry dictionary
        filters: The selected filters

    Returns:
        True if the entry should be shown
    """
    if not _matches_date_range(entry, filters):
        return False

    for dimension, field in SCALAR_DIMENSIONS.items():
        selected = getattr(filters, dimension)
        if selected and entry.get(field) not in selected:
            return False

    if filters.languages and not _matches_languages(entry, filters.languages):
        return False

    if filters.genres and not _matches_genres(entry, filters.genres):
        return False

    return True


def apply_filters(entries: List[Dict], filters: FilterState) -> List[Dict]:
    """
    Apply filters to a list of catalog entries.

    Dimensions are combined with AND.  Within a dimension, single valued fields and
    languages match if the entry has any selected value, while genres require every
    selected genre.  The input list is not modified and order is preserved.

    Args:
        entries: List of catalog entry dictionaries
        filters: The selected filters

    Returns:
        New list with the matching entries
    """
    if filters.is_empty():
        return list(entries)
    filtered = [entry for entry in entries if matches_filters(entry, filters)]
    logger.debug("Filters kept %d of %d entries", len(filtered), len(entries))
    return filtered


def search_entries(entries: List[Dict], query: Optional[str]) -> List[Dict]:
    """
    Case-insensitive substring search over the text fields of each entry.

    Args:
        entries: List of catalog entry dictionaries
        query: Search text.  Blank returns all entries.

    Returns:
        New list with the matching entries
    """
    if not query or not query.strip():
        return list(entries)

    needle = query.strip().lower()

    def _matches(entry: Dict) -> bool:
        values = [
            entry.get(field)
            for field in ("title", "platform", "type", "medium", "status", "season")
        ]
        values.extend(normalize_genre(entry.get("genre")))
        values.extend(normalize_language(entry.get("language")))
        return any(value and needle in str(value).lower() for value in values)

    return [entry for entry in entries if _matches(entry)]


def extract_filter_options(entries: Iterable[Dict]) -> Dict[str, List[str]]:
    """
    Collect the distinct values present for each filter dimension.

    Args:
        entries: Catalog entry dictionaries

    Returns:
        Dictionary of dimension name to sorted list of values
    """
    options = {dimension: set() for dimension in LIST_DIMENSIONS}
    for entry in entries:
        for dimension, field in SCALAR_DIMENSIONS.items():
            if entry.get(field):
                options[dimension].add(entry[field])
        options["genres"].update(normalize_genre(entry.get("genre")))
        options["languages"].update(normalize_language(entry.get("language")))

    return {dimension: sorted(values) for dimension, values in options.items()}


def are_filters_equal(first: FilterState, second: FilterState) -> bool:
    """Compare two filter states, ignoring the order of selected values."""
    if first.date_from != second.date_from or first.date_to != second.date_to:
        return False
    return all(
        sorted(getattr(first, dimension)) == sorted(getattr(second, dimension))
        for dimension in LIST_DIMENSIONS
    )


def filters_to_params(
    filters: FilterState, search: Optional[str] = None
) -> Dict[str, str]:
    """
    Encode filters as query parameters, omitting empty dimensions.

    Args:
        filters: The selected filters
        search: Optional search text

    Returns:
        Dictionary of query parameter name to value, lists joined with commas
    """
    params = {}
    for field, param in PARAM_NAMES.items():
        value = getattr(filters, field)
        if isinstance(value, list):
            if value:
                params[param] = ",".join(value)
        elif value:
            params[param] = value
    if search and search.strip():
        params[SEARCH_PARAM] = search
    return params


def params_to_filters(params: Mapping[str, str]) -> Tuple[FilterState, str]:
    """
    Decode query parameters produced by filters_to_params.

    Args:
        params: Mapping of query parameter name to value

    Returns:
        Tuple of (filters, search text)
    """
    values = {}
    for field, param in PARAM_NAMES.items():
        raw = params.get(param) or ""
        if field in LIST_DIMENSIONS:
            values[field] = [item for item in raw.split(",") if item]
        else:
            values[field] = raw or None
    return FilterState(**values), params.get(SEARCH_PARAM) or ""
