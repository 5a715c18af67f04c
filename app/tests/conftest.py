"""
Common fixtures for testing the media catalog application
"""

from unittest.mock import patch

import pytest


@pytest.fixture(autouse=True, name="mock_http_requests")
def fixture_mock_http_requests():
    """Fail any HTTP request that a test didn't mock explicitly."""
    with patch(
        "requests.get", side_effect=RuntimeError("Unmocked HTTP GET request attempted")
    ) as mock_get:
        yield mock_get


@pytest.fixture()
def sample_entries():
    """Fixture to provide sample catalog entries."""
    return [
        {
            "id": "a1",
            "title": "Inception",
            "medium": "Movie",
            "status": "Finished",
            "platform": "Netflix",
            "genre": ["Action", "Sci-Fi"],
            "language": ["English"],
            "my_rating": 9.0,
            "length": "2h 28m",
            "finish_date": "2024-01-05",
        },
        {
            "id": "b2",
            "title": "Shogun",
            "medium": "TV Show",
            "status": "Watching",
            "platform": "Hulu",
            "genre": ["Drama"],
            "language": "ja, en",
            "rating": 8.5,
            "start_date": "2024-02-10",
        },
    ]
