"""
Normalize language and genre values into canonical lists.

Stored entries carry these fields in several shapes: a plain string, a comma separated
string, a JSON array serialized into a string, or a real list.  Every reader goes
through these functions so the rest of the catalog only ever sees a list.
"""

import json
import logging
from typing import Dict, List, Optional, Union

import langcodes

from catalog.config import load_settings

logger = logging.getLogger(__name__)

LanguageInput = Optional[Union[str, List[str]]]

QUOTE_CHARS = "\"'`“”‘’"
UNKNOWN_LANGUAGE_PREFIX = "unknown language"

# ISO codes, native script names, and common abbreviations
LANGUAGE_CODE_MAP = {
    # ISO codes
    "en": "English",
    "ja": "Japanese",
    "ko": "Korean",
    "zh": "Chinese",
    "zh-cn": "Mandarin",
    "zh-tw": "Mandarin",
    "es": "Spanish",
    "fr": "French",
    "de": "German",
    "it": "Italian",
    "pt": "Portuguese",
    "ru": "Russian",
    "hi": "Hindi",
    "th": "Thai",
    "vi": "Vietnamese",
    "id": "Indonesian",
    "tl": "Filipino",
    "fil": "Filipino",
    "ar": "Arabic",
    "pl": "Polish",
    "nl": "Dutch",
    "sv": "Swedish",
    "da": "Danish",
    "no": "Norwegian",
    "fi": "Finnish",
    "tr": "Turkish",
    "he": "Hebrew",
    "ms": "Malay",
    # Native script names
    "한국어": "Korean",
    "조선어": "Korean",
    "일본어": "Japanese",
    "日本語": "Japanese",
    "にほんご": "Japanese",
    "中文": "Chinese",
    "中国語": "Chinese",
    "普通话": "Mandarin",
    "國語": "Mandarin",
    "ภาษาไทย": "Thai",
    "ไทย": "Thai",
    "tiếng việt": "Vietnamese",
    "việt": "Vietnamese",
    "bahasa indonesia": "Indonesian",
    "bahasa melayu": "Malay",
    "español": "Spanish",
    "français": "French",
    "deutsch": "German",
    "italiano": "Italian",
    "português": "Portuguese",
    "русский": "Russian",
    "العربية": "Arabic",
    "עברית": "Hebrew",
    "हिन्दी": "Hindi",
    "हिंदी": "Hindi",
    "tagalog": "Filipino",
    "polski": "Polish",
    "nederlands": "Dutch",
    "svenska": "Swedish",
    "dansk": "Danish",
    "norsk": "Norwegian",
    "suomi": "Finnish",
    "türkçe": "Turkish",
    # Abbreviations and misspellings
    "eng": "English",
    "jpn": "Japanese",
    "jap": "Japanese",
    "jp": "Japanese",
    "kor": "Korean",
    "kr": "Korean",
    "chi": "Chinese",
    "chn": "Chinese",
    "cn": "Chinese",
    "spa": "Spanish",
    "esp": "Spanish",
    "fre": "French",
    "fra": "French",
    "ger": "German",
    "deu": "German",
    "ita": "Italian",
    "por": "Portuguese",
    "rus": "Russian",
    "ara": "Arabic",
    "hin": "Hindi",
    "tha": "Thai",
    "vie": "Vietnamese",
    "ind": "Indonesian",
    "englsh": "English",
    "japaneese": "Japanese",
    "korian": "Korean",
}

LANGUAGE_MAP_CACHE = {}


def _get_language_map() -> Dict[str, str]:
    """
    Get or cache the lookup table, including canonical names and configured overrides.

    Returns:
        Dictionary mapping lowercase tokens to canonical English names
    """
    if LANGUAGE_MAP_CACHE:
        return LANGUAGE_MAP_CACHE

    language_map = dict(LANGUAGE_CODE_MAP)
    # Canonical names map to themselves so "ENGLISH" and "english" resolve too
    for name in set(LANGUAGE_CODE_MAP.values()):
        language_map[name.lower()] = name

    overrides = load_settings().get("language_overrides", {})
    for token, name in overrides.items():
        language_map[str(token).strip().lower()] = str(name)

    LANGUAGE_MAP_CACHE.update(language_map)
    return LANGUAGE_MAP_CACHE


def _capitalize(value: str) -> str:
    return value[:1].upper() + value[1:]


def _clean_token(token) -> str:
    return str(token).strip().strip(QUOTE_CHARS).strip()


def _lookup_display_name(token: str) -> Optional[str]:
    """
    Look up the English name of the language for a language tag in the langcodes database.

    Args:
        token: A candidate language tag such as "pt-BR" or "yue"

    Returns:
        The display name, or None when the tag is invalid or unknown
    """
    if not langcodes.tag_is_valid(token):
        return None
    try:
        name = langcodes.Language.get(token).language_name()
    except (ValueError, LookupError) as e:
        logger.debug("No display name for language tag '%s': %s", token, e)
        return None

    if not name or name.lower().startswith(UNKNOWN_LANGUAGE_PREFIX):
        return None
    # Stored languages are comma separated
    if "," in name:
        return None
    if name.lower() == token.lower():
        return None
    return name


def normalize_language_code(token: str) -> str:
    """
    Normalize a single language token to its full English name.

    Examples: "en" -> "English", "日本語" -> "Japanese", "'English'" -> "English".
    Unknown tokens such as "Klingon" come back capitalized but otherwise unchanged.

    Args:
        token: A language code, native name, abbreviation, or free text

    Returns:
        The canonical English name, or "" for empty input
    """
    if token is None:
        return ""
    clean_token = _clean_token(token)
    if not clean_token:
        return ""

    language_map = _get_language_map()
    lower_token = clean_token.lower()
    if lower_token in language_map:
        return language_map[lower_token]

    display_name = _lookup_display_name(clean_token)
    if display_name:
        return _capitalize(display_name)

    return _capitalize(clean_token)


def _split_raw_value(value: LanguageInput) -> List[str]:
    """
    Split a raw stored value into its individual tokens.

    Args:
        value: A list, a JSON array string, a comma separated string, or a single value

    Returns:
        List of raw tokens, possibly containing blanks
    """
    if not value:
        return []
    if isinstance(value, (list, tuple, set)):
        return [str(item) for item in value if item is not None]

    trimmed = str(value).strip()
    if trimmed.startswith("[") and trimmed.endswith("]"):
        try:
            parsed = json.loads(trimmed)
        except json.JSONDecodeError:
            logger.debug("Treating unparseable list string as one token: %s", trimmed)
            return [trimmed]
        if isinstance(parsed, list):
            return [str(item) for item in parsed if item is not None]
        return [str(parsed)]

    if "," in trimmed:
        return trimmed.split(",")
    return [trimmed]


def normalize_language(value: LanguageInput) -> List[str]:
    """
    Normalize any stored language value into a sorted list of canonical names.

    e.g. "en, ja", ["en", "ja"] and '["en","ja"]' all give ["English", "Japanese"]

    Args:
        value: None, a string in any supported shape, or a list of tokens

    Returns:
        Sorted list of unique canonical language names
    """
    languages = {}
    for token in _split_raw_value(value):
        name = normalize_language_code(token)
        if name and name.lower() not in languages:
            languages[name.lower()] = name
    return sorted(languages.values())


def format_language_for_display(value: LanguageInput) -> str:
    """
    Format a language value for display, e.g. "English, Japanese" or "N/A".
    """
    languages = normalize_language(value)
    if not languages:
        return "N/A"
    return ", ".join(languages)


def normalize_genre(value: LanguageInput) -> List[str]:
    """
    Normalize any stored genre value into an ordered list of unique genres.

    Genres keep their first-seen casing and order; duplicates are detected ignoring case.

    Args:
        value: None, a string in any supported shape, or a list of genres

    Returns:
        List of trimmed, non-empty, unique genres
    """
    genres = []
    seen = set()
    for token in _split_raw_value(value):
        genre = _clean_token(token)
        if genre and genre.lower() not in seen:
            seen.add(genre.lower())
            genres.append(genre)
    return genres
