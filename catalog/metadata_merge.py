"""
Decide how freshly fetched metadata is applied onto an entry being added or edited.

Three strategies are used per field:
    - fill if absent: an empty local field always takes the fetched value
    - overwrite if confirmed: a populated field is replaced only when the user
      chose to overwrite it in a FieldDecision
    - list union: genre and language lists gain any fetched values they don't
      already have (compared ignoring case) unless the user chose to overwrite them
"""

import copy
import logging
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel

from catalog.languages import normalize_genre, normalize_language

logger = logging.getLogger(__name__)

MERGE_FIELDS = (
    "title",
    "poster_url",
    "genre",
    "language",
    "average_rating",
    "length",
    "episodes",
    "imdb_id",
)
LIST_FIELD_NORMALIZERS = {
    "genre": normalize_genre,
    "language": normalize_language,
}


class Decision(str, Enum):
    """What to do with a populated local field when new metadata arrives."""

    KEEP = "keep"
    OVERWRITE = "overwrite"


class FieldDecision(BaseModel):
    """The user's choice for one field, shown alongside both candidate values."""

    field: str
    fetched_value: Any = None
    current_value: Any = None
    decision: Decision = Decision.KEEP


def is_empty(value: Any) -> bool:
    """None, blank strings and empty lists count as empty.  Zero does not."""
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    if isinstance(value, (list, tuple, set, dict)):
        return not value
    return False


def has_existing_data(existing: Dict) -> bool:
    """
    Check whether any mergeable field is already populated.

    When this is True the caller should ask the user which fields to overwrite
    instead of merging silently.
    """
    return any(not is_empty(existing.get(field)) for field in MERGE_FIELDS)


def build_override_decisions(existing: Dict, fetched: Dict) -> List[FieldDecision]:
    """
    Build the field-by-field choices to present before applying fetched metadata.

    Args:
        existing: The entry currently being edited
        fetched: Metadata returned by the lookup

    Returns:
        One FieldDecision per mergeable field with a fetched value.  A decision
        defaults to OVERWRITE only when both values are present.
    """
    decisions = []
    for field in MERGE_FIELDS:
        fetched_value = fetched.get(field)
        if is_empty(fetched_value):
            continue
        current_value = existing.get(field)
        decisions.append(
            FieldDecision(
                field=field,
                fetched_value=fetched_value,
                current_value=current_value,
                decision=(
                    Decision.KEEP if is_empty(current_value) else Decision.OVERWRITE
                ),
            )
        )
    return decisions


def _union(existing: List[str], fetched: List[str]) -> List[str]:
    """Append fetched values not already present, ignoring case, keeping order."""
    merged = list(existing)
    seen = {value.lower() for value in existing}
    for value in fetched:
        if value.lower() not in seen:
            seen.add(value.lower())
            merged.append(value)
    return merged


def apply_metadata(
    existing: Dict, fetched: Dict, decisions: Optional[List[FieldDecision]] = None
) -> Dict:
    """
    Apply fetched metadata onto an entry.

    Args:
        existing: The entry being added or edited.  Not modified.
        fetched: Metadata returned by the lookup.  Genre and language may be in any
            raw shape and are normalized first.
        decisions: The user's per-field choices.  When None, populated scalar fields
            are never overwritten, empty ones are filled and genre and language
            are unioned.  When given, only fields marked OVERWRITE change.

    Returns:
        A new entry dictionary with the metadata applied
    """
    merged = copy.deepcopy(existing)
    chosen = None
    if decisions is not None:
        chosen = {decision.field: decision.decision for decision in decisions}

    for field in MERGE_FIELDS:
        if field in LIST_FIELD_NORMALIZERS:
            continue
        fetched_value = fetched.get(field)
        if is_empty(fetched_value):
            continue
        if chosen is None:
            if is_empty(existing.get(field)):
                merged[field] = fetched_value
        elif chosen.get(field) == Decision.OVERWRITE:
            merged[field] = fetched_value

    for field, normalizer in LIST_FIELD_NORMALIZERS.items():
        current_values = normalizer(existing.get(field))
        fetched_values = normalizer(fetched.get(field))
        if chosen is None:
            final_values = _union(current_values, fetched_values)
        elif chosen.get(field) == Decision.OVERWRITE and fetched_values:
            final_values = fetched_values
        else:
            final_values = current_values
        merged[field] = final_values or None

    logger.debug("Applied metadata for '%s'", merged.get("title"))
    return merged


def metadata_updates(existing: Dict, fetched: Dict) -> Dict:
    """
    Get only the fields that fill-if-absent would populate, for partial updates.

    Args:
        existing: The stored entry
        fetched: Metadata returned by the lookup

    Returns:
        Dictionary of field to new value for fields that were empty
    """
    merged = apply_metadata(existing, fetched)
    return {
        field: merged[field]
        for field in MERGE_FIELDS
        if is_empty(existing.get(field)) and not is_empty(merged.get(field))
    }
