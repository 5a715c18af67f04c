"""
Summary metrics over catalog entries for the analytics page.
"""

import logging
from typing import Dict, List, Optional

import pandas as pd

from catalog.languages import normalize_genre, normalize_language
from catalog.models import TEXT_MEDIUMS, VISUAL_MEDIUMS
from catalog.parsing import parse_duration_to_minutes, parse_pages, parse_price

logger = logging.getLogger(__name__)


def _entries_frame(entries: List[Dict]) -> pd.DataFrame:
    """
    Build a DataFrame with one row per entry and the derived columns the metrics need.
    """
    rows = []
    for entry in entries:
        medium = entry.get("medium")
        length = entry.get("length")
        rating = entry.get("my_rating")
        if rating is None:
            rating = entry.get("rating")
        month_date = entry.get("finish_date") or entry.get("start_date")
        rows.append(
            {
                "medium": medium,
                "platform": entry.get("platform"),
                "status": entry.get("status"),
                "type": entry.get("type"),
                "genre": normalize_genre(entry.get("genre")),
                "language": normalize_language(entry.get("language")),
                "month": month_date[:7] if month_date else None,
                "rating": rating,
                "price": parse_price(entry.get("price")),
                "minutes": (
                    parse_duration_to_minutes(length)
                    if medium in VISUAL_MEDIUMS
                    else None
                ),
                "pages": parse_pages(length) if medium in TEXT_MEDIUMS else None,
            }
        )
    return pd.DataFrame(
        rows,
        columns=[
            "medium",
            "platform",
            "status",
            "type",
            "genre",
            "language",
            "month",
            "rating",
            "price",
            "minutes",
            "pages",
        ],
    )


def _counts(series: pd.Series) -> Dict[str, int]:
    counts = series.dropna().value_counts()
    return {str(key): int(value) for key, value in counts.items()}


def _top(counts: Dict[str, int]) -> Optional[str]:
    if not counts:
        return None
    return max(counts.items(), key=lambda item: item[1])[0]


def compute_metrics(entries: List[Dict]) -> Dict:
    """
    Compute counts, totals and distributions over catalog entries.

    Args:
        entries: List of catalog entry dictionaries, usually already filtered

    Returns:
        Dictionary of metrics:
            - total_items, total_spent, total_minutes, total_hours, total_pages
            - count_by_medium, count_by_language, count_by_genre, count_by_platform,
              count_by_status, count_by_type: value -> count
            - count_by_month: list of {"month", "count"} sorted by month
            - minutes_by_month, pages_by_month: lists sorted by month
            - average_rating and rating_distribution (list of {"rating", "count"})
            - top_language, top_genre, top_platform, top_medium
    """
    df = _entries_frame(entries)
    count_by_genre = _counts(df["genre"].explode())
    count_by_language = _counts(df["language"].explode())
    count_by_medium = _counts(df["medium"])
    count_by_platform = _counts(df["platform"])

    ratings = pd.to_numeric(df["rating"], errors="coerce").dropna()
    rating_distribution = ratings.astype(int).value_counts().sort_index()
    minutes = pd.to_numeric(df["minutes"], errors="coerce")
    pages = pd.to_numeric(df["pages"], errors="coerce")
    prices = pd.to_numeric(df["price"], errors="coerce")
    total_minutes = int(minutes[minutes > 0].sum())

    dated = df.dropna(subset=["month"])
    count_by_month = dated.groupby("month").size()
    minutes_by_month = (
        dated.assign(minutes=minutes).groupby("month")["minutes"].sum(min_count=1).dropna()
    )
    pages_by_month = (
        dated.assign(pages=pages).groupby("month")["pages"].sum(min_count=1).dropna()
    )

    metrics = {
        "total_items": len(df),
        "total_spent": float(prices[prices > 0].sum()),
        "total_minutes": total_minutes,
        "total_hours": total_minutes / 60,
        "total_pages": int(pages[pages > 0].sum()),
        "count_by_medium": count_by_medium,
        "count_by_language": count_by_language,
        "count_by_genre": count_by_genre,
        "count_by_platform": count_by_platform,
        "count_by_status": _counts(df["status"]),
        "count_by_type": _counts(df["type"]),
        "count_by_month": [
            {"month": month, "count": int(count)}
            for month, count in count_by_month.sort_index().items()
        ],
        "minutes_by_month": [
            {"month": month, "minutes": int(total)}
            for month, total in minutes_by_month.sort_index().items()
        ],
        "pages_by_month": [
            {"month": month, "pages": int(total)}
            for month, total in pages_by_month.sort_index().items()
        ],
        "average_rating": float(ratings.mean()) if not ratings.empty else 0.0,
        "rating_distribution": [
            {"rating": int(rating), "count": int(count)}
            for rating, count in rating_distribution.items()
        ],
        "top_language": _top(count_by_language),
        "top_genre": _top(count_by_genre),
        "top_platform": _top(count_by_platform),
        "top_medium": _top(count_by_medium),
    }
    logger.debug("Computed metrics for %d entries", len(df))
    return metrics
