"""
API client functions for fetching metadata from external media databases.
"""

import logging
import os
import re
from typing import Dict, List, Optional

import nltk
import requests
from pydantic import ValidationError as ModelValidationError

from catalog.errors import FetchError
from catalog.models import FetchedMetadata
from catalog.parsing import (
    detect_isbn,
    format_duration,
    is_imdb_id,
    parse_duration_to_minutes,
)

logger = logging.getLogger(__name__)

OMDB_BASE_URL = "https://www.omdbapi.com/"
TMDB_BASE_URL = "https://api.themoviedb.org/3"
TMDB_POSTER_URL = "https://image.tmdb.org/t/p/w600_and_h900_bestv2"
GOOGLE_BOOKS_URL = "https://www.googleapis.com/books/v1/volumes"
REQUEST_TIMEOUT = 10
SOURCES = ("omdb", "tmdb")
OMDB_TYPES = {"Movie": "movie", "TV Show": "series"}
TMDB_MODES = {"Movie": "movie", "TV Show": "tv"}


def _calculate_title_similarity(title1: str, title2: str) -> float:
    """
    Calculate similarity between two titles using edit distance.

    Args:
        title1: First title string
        title2: Second title string

    Returns:
        Float between 0.0 and 1.0 representing similarity (1.0 = identical)
    """
    return 1.0 - (
        nltk.edit_distance(title1.lower(), title2.lower())
        / max(len(title1), len(title2), 1)
    )


def _get_json(url: str, params: Dict, timeout: float, service: str) -> Dict:
    """
    GET a JSON document, converting any network or HTTP failure into a FetchError.
    """
    try:
        response = requests.get(url, params=params, timeout=timeout)
        response.raise_for_status()
        return response.json()
    except requests.RequestException as e:
        logger.error("Error querying %s API: %s", service, e)
        raise FetchError(f"Failed to reach {service}: {e}") from e
    except ValueError as e:
        logger.error("Invalid JSON from %s API: %s", service, e)
        raise FetchError(f"Invalid response from {service}") from e


def _omdb_value(data: Dict, key: str) -> Optional[str]:
    value = data.get(key)
    if not value or value == "N/A":
        return None
    return value


def _season_number(season: Optional[str]) -> Optional[int]:
    if not season:
        return None
    match = re.search(r"\d+", str(season))
    return int(match.group(0)) if match else None


def _format_omdb_entry(data: Dict) -> Dict:
    """
    Format an OMDB title response into metadata fields.

    Args:
        data: A dictionary containing the OMDB response for a single title.

    Returns:
        Dictionary with title, poster_url, genre, language, average_rating,
        length, imdb_id, year, plot and type.
    """
    rating = _omdb_value(data, "imdbRating")
    runtime_minutes = parse_duration_to_minutes(_omdb_value(data, "Runtime"))
    year = _omdb_value(data, "Year")
    omdb_type = (data.get("Type") or "").lower()

    return {
        "title": _omdb_value(data, "Title"),
        "poster_url": _omdb_value(data, "Poster"),
        "genre": _omdb_value(data, "Genre"),
        "language": _omdb_value(data, "Language"),
        "average_rating": float(rating) if rating else None,
        "length": format_duration(runtime_minutes) if runtime_minutes else None,
        "imdb_id": _omdb_value(data, "imdbID"),
        "year": year[:4] if year else None,
        "plot": _omdb_value(data, "Plot"),
        "type": "TV Show" if omdb_type in ("series", "episode") else "Movie",
    }


def _find_best_omdb_match(title: str, results: List[Dict]) -> Optional[Dict]:
    if not results:
        return None
    return max(
        results,
        key=lambda result: _calculate_title_similarity(title, result.get("Title", "")),
    )


def query_omdb(
    title: Optional[str] = None,
    imdb_id: Optional[str] = None,
    medium: Optional[str] = None,
    year: Optional[str] = None,
    season: Optional[str] = None,
    timeout: float = REQUEST_TIMEOUT,
) -> Optional[Dict]:
    """
    Query the Open Movie Database (OMDB) for a movie or TV show.

    An exact title lookup is tried first, then a search whose closest title is looked up.

    Args:
        title: The title to look up.
        imdb_id: An IMDb id, used instead of the title when given.
        medium: "Movie" or "TV Show" to narrow the lookup.
        year: Optional year of release.
        season: Optional season, used to count that season's episodes.
        timeout: Request timeout in seconds.

    Returns:
        Dictionary of metadata fields, or None if nothing matched.
    """
    api_key = os.environ.get("OMDB_API_KEY")
    if not api_key:
        logger.warning("OMDB_API_KEY not found in environment variables")
        return None

    logger.info("Querying OMDB w/ title: %s, id: %s", title, imdb_id)
    params = {"apikey": api_key, "plot": "short"}
    if imdb_id:
        params["i"] = imdb_id
    else:
        params["t"] = title
    if medium in OMDB_TYPES:
        params["type"] = OMDB_TYPES[medium]
    if year:
        params["y"] = year

    data = _get_json(OMDB_BASE_URL, params, timeout, "OMDB")
    if data.get("Response") == "False" and not imdb_id and title:
        search_params = {"apikey": api_key, "s": title}
        if medium in OMDB_TYPES:
            search_params["type"] = OMDB_TYPES[medium]
        search_data = _get_json(OMDB_BASE_URL, search_params, timeout, "OMDB")
        best_match = _find_best_omdb_match(title, search_data.get("Search") or [])
        if best_match:
            logger.info("Using closest OMDB search result: %s", best_match.get("Title"))
            data = _get_json(
                OMDB_BASE_URL,
                {**params, "t": best_match.get("Title")},
                timeout,
                "OMDB",
            )

    if data.get("Response") != "True":
        logger.info("No OMDB match for %s: %s", title or imdb_id, data.get("Error"))
        return None

    entry = _format_omdb_entry(data)
    season_number = _season_number(season)
    if season_number and entry["type"] == "TV Show":
        season_data = _get_json(
            OMDB_BASE_URL,
            {"apikey": api_key, "i": entry["imdb_id"], "Season": season_number},
            timeout,
            "OMDB",
        )
        episodes = season_data.get("Episodes") or []
        if episodes:
            entry["episodes"] = len(episodes)
            entry["season"] = str(season_number)
    return entry


def _tmdb_lookup_id(
    api_key: str,
    title: Optional[str],
    imdb_id: Optional[str],
    mode: str,
    year: Optional[str],
    timeout: float,
) -> Optional[Dict]:
    """
    Find the TMDB id of a movie or TV show by IMDb id or title search.

    Returns:
        Dictionary with mode and id, or None if nothing matched.
    """
    if imdb_id:
        data = _get_json(
            f"{TMDB_BASE_URL}/find/{imdb_id}",
            {"api_key": api_key, "external_source": "imdb_id"},
            timeout,
            "TMDB",
        )
        if data.get("movie_results"):
            return {"mode": "movie", "id": data["movie_results"][0]["id"]}
        if data.get("tv_results"):
            return {"mode": "tv", "id": data["tv_results"][0]["id"]}
        return None

    params = {"api_key": api_key, "query": title}
    if year:
        params["first_air_date_year" if mode == "tv" else "year"] = year
    data = _get_json(f"{TMDB_BASE_URL}/search/{mode}", params, timeout, "TMDB")
    results = data.get("results") or []
    if not results:
        return None
    return {"mode": mode, "id": results[0]["id"]}


def _format_tmdb_entry(entry: Dict, mode: str, season: Optional[str]) -> Dict:
    """
    Format a TMDB movie or TV details response into metadata fields.

    Args:
        entry: A dictionary containing the TMDB details response.
        mode: "movie" or "tv".
        season: Optional season, used to pick that season's episode count.

    Returns:
        Dictionary with title, poster_url, genre, language, average_rating,
        length, episodes, imdb_id, year, plot and type.
    """
    poster_path = entry.get("poster_path")
    vote_average = entry.get("vote_average")
    languages = [
        language.get("iso_639_1")
        for language in entry.get("spoken_languages") or []
        if language.get("iso_639_1")
    ]

    metadata = {
        "poster_url": f"{TMDB_POSTER_URL}{poster_path}" if poster_path else None,
        "genre": [genre.get("name") for genre in entry.get("genres") or []],
        "language": languages,
        "average_rating": round(vote_average, 1) if vote_average else None,
        "plot": entry.get("overview") or None,
    }

    if mode == "tv":
        episodes = entry.get("number_of_episodes")
        season_number = _season_number(season)
        for season_entry in entry.get("seasons") or []:
            if season_number and season_entry.get("season_number") == season_number:
                episodes = season_entry.get("episode_count")
                metadata["season"] = str(season_number)
        run_times = entry.get("episode_run_time") or []
        first_air_date = entry.get("first_air_date") or ""
        metadata.update(
            {
                "title": entry.get("name"),
                "episodes": episodes,
                "length": (
                    format_duration(episodes * run_times[0])
                    if episodes and run_times
                    else None
                ),
                "imdb_id": (entry.get("external_ids") or {}).get("imdb_id"),
                "year": first_air_date[:4] or None,
                "type": "TV Show",
            }
        )
    else:
        runtime = entry.get("runtime")
        release_date = entry.get("release_date") or ""
        metadata.update(
            {
                "title": entry.get("title"),
                "length": format_duration(runtime) if runtime else None,
                "imdb_id": entry.get("imdb_id"),
                "year": release_date[:4] or None,
                "type": "Movie",
            }
        )
    return metadata


def query_tmdb(
    title: Optional[str] = None,
    imdb_id: Optional[str] = None,
    medium: Optional[str] = None,
    year: Optional[str] = None,
    season: Optional[str] = None,
    timeout: float = REQUEST_TIMEOUT,
) -> Optional[Dict]:
    """
    Query The Movie Database (TMDB) API for a movie or TV show.

    Args:
        title: The title to search for.
        imdb_id: An IMDb id, used instead of the title when given.
        medium: "TV Show" searches TV, anything else searches movies.
        year: Optional year of release.
        season: Optional season, used to count that season's episodes.
        timeout: Request timeout in seconds.

    Returns:
        Dictionary of metadata fields, or None if nothing matched.
    """
    api_key = os.environ.get("TMDB_API_KEY")
    if not api_key:
        logger.warning("TMDB_API_KEY not found in environment variables")
        return None

    logger.info("Querying TMDB w/ title: %s, id: %s", title, imdb_id)
    mode = TMDB_MODES.get(medium, "movie")
    match = _tmdb_lookup_id(api_key, title, imdb_id, mode, year, timeout)
    if not match:
        logger.info("No TMDB match for %s", title or imdb_id)
        return None

    details = _get_json(
        f"{TMDB_BASE_URL}/{match['mode']}/{match['id']}",
        {"api_key": api_key, "append_to_response": "external_ids"},
        timeout,
        "TMDB",
    )
    return _format_tmdb_entry(details, match["mode"], season)


def _book_cover_url(image_links: Dict) -> Optional[str]:
    image_url = (
        image_links.get("large")
        or image_links.get("medium")
        or image_links.get("thumbnail")
        or image_links.get("smallThumbnail")
    )
    if not image_url:
        return None
    return image_url.replace("http:", "https:").replace("&edge=curl", "")


def _find_best_book_match(
    title: str, items: List[Dict], year: Optional[str] = None
) -> Optional[Dict]:
    """
    Pick the volume whose title is closest to the search title.

    A volume published in the requested year gets a small boost.
    """

    def _score(item: Dict) -> float:
        info = item.get("volumeInfo", {})
        score = _calculate_title_similarity(title, info.get("title", ""))
        if year and (info.get("publishedDate") or "").startswith(str(year)):
            score += 0.1
        return score

    if not items:
        return None
    return max(items, key=_score)


def _format_google_book(volume: Dict) -> Dict:
    """
    Format a Google Books volume into metadata fields.

    Args:
        volume: A dictionary containing a Google Books volume.

    Returns:
        Dictionary with title, poster_url, genre, language, average_rating,
        length, imdb_id (the ISBN), year, plot and type.
    """
    info = volume.get("volumeInfo", {})
    title = info.get("title", "")
    if info.get("subtitle"):
        title = f"{title}: {info['subtitle']}"

    identifiers = {
        identifier.get("type"): identifier.get("identifier")
        for identifier in info.get("industryIdentifiers") or []
    }
    average_rating = info.get("averageRating")
    page_count = info.get("pageCount")
    year_match = re.search(r"\d{4}", info.get("publishedDate") or "")

    return {
        "title": title or None,
        "poster_url": _book_cover_url(info.get("imageLinks") or {}),
        "genre": info.get("categories"),
        "language": info.get("language"),
        # Google Books rates out of 5
        "average_rating": (
            round(average_rating * 2, 1) if average_rating is not None else None
        ),
        "length": f"{page_count} pages" if page_count else None,
        "imdb_id": identifiers.get("ISBN_13") or identifiers.get("ISBN_10"),
        "year": year_match.group(0) if year_match else None,
        "plot": info.get("description"),
        "type": "Book",
    }


def query_google_books(
    title: Optional[str] = None,
    isbn: Optional[str] = None,
    year: Optional[str] = None,
    timeout: float = REQUEST_TIMEOUT,
) -> Dict:
    """
    Query the Google Books API by ISBN or title.

    Args:
        title: The title to search for.
        isbn: A normalized ISBN, used instead of the title when given.
        year: Optional year of publication to prefer.
        timeout: Request timeout in seconds.

    Returns:
        Dictionary of metadata fields.

    Raises:
        FetchError: If the key is missing, the request fails, or no book matched.
    """
    api_key = os.environ.get("GOOGLE_BOOK_API_KEY")
    if not api_key:
        raise FetchError("GOOGLE_BOOK_API_KEY not configured")

    logger.info("Querying Google Books w/ title: %s, isbn: %s", title, isbn)
    if isbn:
        params = {"q": f"isbn:{isbn}", "key": api_key}
    else:
        query = f"intitle:{title} {year}" if year else f"intitle:{title}"
        params = {"q": query, "key": api_key, "maxResults": 5}

    data = _get_json(GOOGLE_BOOKS_URL, params, timeout, "Google Books")
    items = data.get("items") or []
    best_match = items[0] if isbn and items else _find_best_book_match(title or "", items, year)
    if not best_match:
        raise FetchError("Book not found")
    return _format_google_book(best_match)


def _combine_results(preferred: Optional[Dict], fallback: Optional[Dict]) -> Dict:
    """Combine two sets of metadata, taking the preferred value wherever it is present."""
    combined = dict(fallback or {})
    for key, value in (preferred or {}).items():
        if value not in (None, "", []):
            combined[key] = value
    return combined


def _to_metadata(metadata: Dict) -> Dict:
    try:
        return FetchedMetadata(**metadata).model_dump()
    except ModelValidationError as e:
        logger.error("Unexpected metadata shape: %s", e)
        raise FetchError("Received invalid metadata") from e


def fetch_metadata(
    title: Optional[str] = None,
    imdb_id: Optional[str] = None,
    medium: Optional[str] = None,
    season: Optional[str] = None,
    source: Optional[str] = None,
    year: Optional[str] = None,
    timeout: float = REQUEST_TIMEOUT,
) -> Dict:
    """
    Fetch metadata for a title from the appropriate external database.

    Books (medium "Book", or an ISBN in either field) go to Google Books.  Movies and
    TV shows go to OMDB and/or TMDB depending on source, preferring OMDB values.

    Args:
        title: The title to look up.
        imdb_id: An IMDb id or ISBN.
        medium: The entry's medium, used to pick the database and narrow the search.
        season: Optional season for TV shows.
        source: "omdb", "tmdb", or None for both.
        year: Optional year of release.
        timeout: Request timeout in seconds.

    Returns:
        Dictionary with every FetchedMetadata field, absent values as None.

    Raises:
        FetchError: If the query is empty, no database is configured, a request
            fails, or nothing matched.
    """
    title = title.strip() if title else None
    imdb_id = imdb_id.strip() if imdb_id else None
    isbn = detect_isbn(imdb_id) or detect_isbn(title)
    has_imdb_id = is_imdb_id(imdb_id)

    if not title and not has_imdb_id and not isbn:
        raise FetchError("Please enter a title or IMDb ID first")
    if source is not None and source not in SOURCES:
        raise FetchError(f"Unknown metadata source: {source}")

    if medium == "Book" or isbn:
        return _to_metadata(query_google_books(title, isbn, year, timeout))

    if not os.environ.get("OMDB_API_KEY") and not os.environ.get("TMDB_API_KEY"):
        raise FetchError("OMDB_API_KEY or TMDB_API_KEY must be configured")

    lookup = {
        "title": title,
        "imdb_id": imdb_id if has_imdb_id else None,
        "medium": medium,
        "year": year,
        "season": season,
        "timeout": timeout,
    }
    omdb_result = query_omdb(**lookup) if source in (None, "omdb") else None
    tmdb_result = query_tmdb(**lookup) if source in (None, "tmdb") else None
    if not omdb_result and not tmdb_result:
        raise FetchError("Media not found")

    return _to_metadata(_combine_results(omdb_result, tmdb_result))
