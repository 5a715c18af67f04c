"""Common test fixtures"""

from unittest.mock import patch

import pytest

from catalog import languages
from catalog.store import JsonStore


@pytest.fixture(autouse=True)
def reset_language_map_cache():
    """Reset the language lookup table so each test loads its own overrides."""
    languages.LANGUAGE_MAP_CACHE.clear()
    yield
    languages.LANGUAGE_MAP_CACHE.clear()


@pytest.fixture(autouse=True, name="mock_http_requests")
def fixture_mock_http_requests():
    """
    Fail any HTTP request that a test didn't mock explicitly.
    """
    with patch(
        "requests.get", side_effect=RuntimeError("Unmocked HTTP GET request attempted")
    ) as mock_get, patch(
        "requests.post", side_effect=RuntimeError("Unmocked HTTP POST request attempted")
    ) as mock_post:
        yield mock_get, mock_post


@pytest.fixture(name="store")
def fixture_store(tmp_path):
    """A store backed by a JSON file in a temporary directory."""
    return JsonStore(str(tmp_path / "catalog.json"))


@pytest.fixture(name="sample_entries")
def fixture_sample_entries():
    """Sample catalog entries covering several mediums, genres and languages."""
    return [
        {
            "id": "1",
            "title": "Inception",
            "medium": "Movie",
            "type": "Scripted Live Action",
            "status": "Finished",
            "platform": "Netflix",
            "genre": ["Action", "Sci-Fi"],
            "language": ["English", "Japanese"],
            "length": "2h 28m",
            "my_rating": 9.0,
            "price": 3.99,
            "start_date": "2024-01-05",
            "finish_date": "2024-01-05",
        },
        {
            "id": "2",
            "title": "Shogun",
            "medium": "TV Show",
            "type": "Scripted Live Action",
            "status": "Watching",
            "platform": "Hulu",
            "genre": ["Drama", "Action"],
            "language": '["ja", "en"]',
            "length": "10h",
            "rating": 8.5,
            "start_date": "2024-02-10",
        },
        {
            "id": "3",
            "title": "The Hobbit",
            "medium": "Book",
            "status": "Finished",
            "platform": "Audible",
            "genre": ["Fantasy"],
            "language": "en",
            "length": "310 pages",
            "my_rating": 7.5,
            "price": 12.5,
            "start_date": "2024-03-01",
            "finish_date": "2024-03-20",
        },
        {
            "id": "4",
            "title": "Parasite",
            "medium": "Movie",
            "status": "Plan to Watch",
            "genre": None,
            "language": "ko",
        },
    ]
