"""Unit tests for language and genre normalization."""

from unittest.mock import patch

import pytest

from catalog.languages import (
    format_language_for_display,
    normalize_genre,
    normalize_language,
    normalize_language_code,
)


@pytest.mark.parametrize(
    "token, expected",
    [
        ("en", "English"),
        ("EN", "English"),
        ("ja", "Japanese"),
        ("日本語", "Japanese"),
        ("한국어", "Korean"),
        ("'English'", "English"),
        ('"ja"', "Japanese"),
        ("ENGLISH", "English"),
        ("englsh", "English"),
        ("  ko  ", "Korean"),
        ("yue", "Cantonese"),
    ],
)
def test_normalize_language_code_known_tokens(token, expected):
    """Test codes, native names, quotes and misspellings resolve to English names."""
    assert normalize_language_code(token) == expected


def test_normalize_language_code_unknown_token_is_capitalized():
    """Test an unrecognized token comes back capitalized."""
    with patch("catalog.languages._lookup_display_name", return_value=None):
        assert normalize_language_code("elvish") == "Elvish"


def test_normalize_language_code_uses_display_name_lookup():
    """Test tokens missing from the table fall back to the language tag database."""
    with patch("catalog.languages._lookup_display_name", return_value="swahili"):
        assert normalize_language_code("sw") == "Swahili"


def test_normalize_language_code_unknown_word_without_patching():
    """Test a word that isn't a language tag comes back capitalized."""
    assert normalize_language_code("Klingon") == "Klingon"
    assert normalize_language_code("klingon") == "Klingon"


@pytest.mark.parametrize(
    "token, expected",
    [("zh-Hant-TW", "Chinese"), ("pt-BR", "Portuguese"), ("sw", "Swahili")],
)
def test_normalize_language_code_tag_database(token, expected):
    """Test tags missing from the table resolve to the plain language name."""
    assert normalize_language_code(token) == expected


@pytest.mark.parametrize("value", ["zh-Hant-TW", ["sr-Latn-RS", "en"], "pt-BR, ja"])
def test_normalize_language_survives_comma_join(value):
    """Test normalized languages joined with commas normalize to the same list."""
    once = normalize_language(value)
    assert all("," not in language for language in once)
    assert normalize_language(", ".join(once)) == once
    assert normalize_language(",".join(once)) == once


def test_normalize_language_code_empty():
    """Test empty input gives an empty string."""
    assert normalize_language_code("") == ""
    assert normalize_language_code("   ") == ""
    assert normalize_language_code(None) == ""


@pytest.mark.parametrize(
    "value",
    [
        "en, ja",
        ["en", "ja"],
        '["en","ja"]',
        '["ja", "en"]',
        "ja,en,EN",
        ["'English'", "日本語"],
    ],
)
def test_normalize_language_shape_independent(value):
    """Test every raw shape of the same languages normalizes to the same list."""
    assert normalize_language(value) == ["English", "Japanese"]


@pytest.mark.parametrize("value", [None, "", [], "   ", "[]", ", ,"])
def test_normalize_language_empty_values(value):
    """Test empty values normalize to an empty list."""
    assert normalize_language(value) == []


def test_normalize_language_is_idempotent():
    """Test normalizing an already normalized list changes nothing."""
    once = normalize_language('["ko","en","日本語"]')
    assert once == ["English", "Japanese", "Korean"]
    assert normalize_language(once) == once


def test_normalize_language_malformed_json_is_one_token():
    """Test a string that looks like a list but isn't valid JSON is kept as one token."""
    with patch("catalog.languages._lookup_display_name", return_value=None):
        assert normalize_language("[en, ja]") == ["[en, ja]"]


def test_normalize_language_override_from_settings():
    """Test language overrides configured in settings are applied."""
    settings = {"language_overrides": {"klingon": "tlhIngan Hol"}}
    with patch("catalog.languages.load_settings", return_value=settings):
        assert normalize_language("Klingon") == ["tlhIngan Hol"]


def test_format_language_for_display():
    """Test languages are joined for display, with N/A when there are none."""
    assert format_language_for_display("ja,en") == "English, Japanese"
    assert format_language_for_display(None) == "N/A"
    assert format_language_for_display([]) == "N/A"


def test_normalize_genre_keeps_order_and_first_casing():
    """Test genres are deduplicated ignoring case, keeping first-seen order."""
    assert normalize_genre(["Drama", "action", "DRAMA", "Action"]) == ["Drama", "action"]


@pytest.mark.parametrize(
    "value, expected",
    [
        ("Drama, Comedy", ["Drama", "Comedy"]),
        ('["Drama", "Comedy"]', ["Drama", "Comedy"]),
        ("'Drama'", ["Drama"]),
        (None, []),
        ("", []),
    ],
)
def test_normalize_genre_shapes(value, expected):
    """Test genres are parsed from any raw shape."""
    assert normalize_genre(value) == expected
