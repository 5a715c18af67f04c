"""
Pydantic models for catalog entries and the metadata fetched for them.
"""

from typing import Annotated, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from catalog.languages import normalize_genre, normalize_language

ISO_DATE_PATTERN = r"^\d{4}-\d{2}-\d{2}$"

MEDIUM_OPTIONS = ("Movie", "TV Show", "Book", "Theatre", "Live Theatre", "Podcast")
STATUS_OPTIONS = ("Watching", "Finished", "Dropped", "Plan to Watch", "On Hold")
TYPE_OPTIONS = (
    "Documentary",
    "Variety",
    "Reality",
    "Scripted Live Action",
    "Animation",
    "Special",
    "Audio",
)
PLATFORM_OPTIONS = (
    "Netflix",
    "Hulu",
    "Disney+",
    "Amazon Prime",
    "HBO Max",
    "Apple TV+",
    "YouTube",
    "Spotify",
    "Audible",
    "Other",
)
VISUAL_MEDIUMS = ("Movie", "TV Show", "Theatre", "Live Theatre")
TEXT_MEDIUMS = ("Book",)

Rating = Annotated[Optional[float], Field(default=None, ge=0, le=10)]
IsoDate = Annotated[Optional[str], Field(default=None, pattern=ISO_DATE_PATTERN)]


class MediaRecord(BaseModel):
    """
    A single catalog entry: a movie, TV show, book, podcast, or theatre visit.
    """

    model_config = ConfigDict(extra="ignore")

    id: Optional[str] = None
    title: str
    medium: Optional[Literal[MEDIUM_OPTIONS]] = None
    type: Optional[str] = None
    status: Optional[Literal[STATUS_OPTIONS]] = None
    platform: Optional[str] = None
    genre: Optional[List[str]] = None
    language: Optional[List[str]] = None
    episodes: Annotated[Optional[int], Field(default=None, ge=0)]
    episodes_watched: Annotated[Optional[int], Field(default=None, ge=0)]
    rating: Rating
    my_rating: Rating
    average_rating: Rating
    price: Annotated[Optional[float], Field(default=None, ge=0)]
    length: Optional[str] = None
    season: Optional[str] = None
    start_date: IsoDate
    finish_date: IsoDate
    time_taken: Optional[str] = None
    poster_url: Optional[str] = None
    imdb_id: Optional[str] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    @field_validator("title")
    @classmethod
    def _title_not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("Title is required")
        return value

    @field_validator("genre", mode="before")
    @classmethod
    def _normalize_genre(cls, value):
        return normalize_genre(value) or None

    @field_validator("language", mode="before")
    @classmethod
    def _normalize_language(cls, value):
        return normalize_language(value) or None

    @field_validator(
        "medium",
        "type",
        "status",
        "platform",
        "length",
        "season",
        "start_date",
        "finish_date",
        "time_taken",
        "poster_url",
        "imdb_id",
        mode="before",
    )
    @classmethod
    def _blank_to_none(cls, value):
        if isinstance(value, str) and not value.strip():
            return None
        return value.strip() if isinstance(value, str) else value


class StatusHistoryRecord(BaseModel):
    """One status change of a catalog entry.  Only ever appended."""

    id: Optional[str] = None
    media_entry_id: str
    old_status: Optional[str] = None
    new_status: str
    changed_at: str
    notes: Optional[str] = None


class FetchedMetadata(BaseModel):
    """Metadata returned by one of the external lookups."""

    title: Optional[str] = None
    poster_url: Optional[str] = None
    genre: Optional[List[str]] = None
    language: Optional[List[str]] = None
    average_rating: Rating
    length: Optional[str] = None
    episodes: Annotated[Optional[int], Field(default=None, ge=0)]
    imdb_id: Optional[str] = None
    season: Optional[str] = None
    year: Optional[str] = None
    plot: Optional[str] = None
    type: Optional[str] = None

    @field_validator("genre", mode="before")
    @classmethod
    def _normalize_genre(cls, value):
        return normalize_genre(value) or None

    @field_validator("language", mode="before")
    @classmethod
    def _normalize_language(cls, value):
        return normalize_language(value) or None
