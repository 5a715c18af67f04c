"""
Helpers for parsing free-text fields and deriving values from dates.
"""

import logging
import re
from datetime import date
from typing import Optional, Union

logger = logging.getLogger(__name__)

IMDB_ID_PATTERN = re.compile(r"^tt\d{7,8}$", re.IGNORECASE)


def get_date(date_str: Optional[str]) -> Optional[date]:
    """
    Convert a %Y-%m-%d date string to a date, or None if missing or invalid.
    """
    if not date_str:
        return None
    try:
        return date.fromisoformat(str(date_str).strip()[:10])
    except ValueError:
        logger.warning("Invalid date: %s", date_str)
        return None


def calculate_time_taken(
    start_date: Optional[str], finish_date: Optional[str]
) -> Optional[str]:
    """
    Calculate how long an entry took, counting both the start and finish day.

    Args:
        start_date: ISO start date
        finish_date: ISO finish date

    Returns:
        "1 day" or "N days", or None if a date is missing or finish is before start
    """
    start = get_date(start_date)
    finish = get_date(finish_date)
    if start is None or finish is None:
        return None

    total_days = (finish - start).days + 1
    if total_days < 1:
        return None
    return "1 day" if total_days == 1 else f"{total_days} days"


def parse_duration_to_minutes(duration: Optional[str]) -> Optional[int]:
    """
    Parse a duration such as "2h 30m", "1 hr 30 min", "148 min", "2:30" or "90".

    Returns:
        Total minutes, or None if the text isn't recognized
    """
    if not duration:
        return None
    text = str(duration).strip().lower()

    time_match = re.match(r"^(\d{1,2}):(\d{2})(?::(\d{2}))?$", text)
    if time_match:
        hours, minutes, seconds = time_match.groups()
        return int(hours) * 60 + int(minutes) + round(int(seconds or 0) / 60)

    hours_match = re.search(
        r"(\d+)\s*h(?:ours?|rs?|r)?\s*(?:(\d+)\s*m(?:ins?|inutes?)?)?", text
    )
    if hours_match:
        return int(hours_match.group(1)) * 60 + int(hours_match.group(2) or 0)

    minutes_match = re.search(r"(\d+)\s*(?:mins?|minutes?)", text)
    if minutes_match:
        return int(minutes_match.group(1))

    if re.match(r"^\d+(?:\.\d+)?$", text):
        return round(float(text))
    return None


def parse_pages(pages: Optional[str]) -> Optional[int]:
    """Parse a page count such as "350 pages", "350p" or "350"."""
    if not pages:
        return None
    match = re.search(r"(\d+)", str(pages))
    return int(match.group(1)) if match else None


def parse_price(price: Union[str, float, int, None]) -> Optional[float]:
    """Parse a price such as "$19.99", "19,99" or "free"."""
    if price is None:
        return None
    if isinstance(price, (int, float)):
        return float(price)

    text = price.strip().lower()
    if text in ("", "free"):
        return 0.0
    cleaned = re.sub(r"[$€£¥₹\s]", "", text).replace(",", ".", 1)
    try:
        return float(cleaned)
    except ValueError:
        return None


def parse_rating(rating: Union[str, float, int, None]) -> Optional[float]:
    """
    Parse a rating onto the 10 point scale.

    Handles "8.5", "8,5", "4/5" and "85%".
    """
    if rating is None:
        return None
    if isinstance(rating, (int, float)):
        return float(rating)

    text = rating.strip()
    fraction_match = re.search(r"(\d+(?:\.\d+)?)\s*/\s*(\d+(?:\.\d+)?)", text)
    if fraction_match:
        denominator = float(fraction_match.group(2))
        if denominator == 0:
            return None
        return float(fraction_match.group(1)) / denominator * 10

    percent_match = re.search(r"(\d+(?:\.\d+)?)\s*%", text)
    if percent_match:
        return float(percent_match.group(1)) / 10

    try:
        return float(text.replace(",", ".", 1))
    except ValueError:
        return None


def format_duration(minutes: int) -> str:
    """Format minutes as "45m", "2h" or "2h 28m"."""
    if minutes < 60:
        return f"{minutes}m"
    hours, mins = divmod(minutes, 60)
    return f"{hours}h" if mins == 0 else f"{hours}h {mins}m"


def is_imdb_id(value: Optional[str]) -> bool:
    """Check for an IMDb id such as tt1375666."""
    return bool(value) and bool(IMDB_ID_PATTERN.match(value.strip()))


def detect_isbn(value: Optional[str]) -> Optional[str]:
    """
    Detect an ISBN-10 or ISBN-13 and strip it to digits (and a trailing X).

    Returns:
        The normalized ISBN, or None if the value isn't one
    """
    if not value:
        return None
    cleaned = re.sub(r"[^0-9X]", "", value.upper())
    if re.match(r"^(978|979)\d{10}$", cleaned):
        return cleaned
    if re.match(r"^\d{9}[\dX]$", cleaned):
        return cleaned
    return None
