"""Supported documentation languages."""

from typing import Dict

# Native display names, keyed by the directory code used in the docs tree
SUPPORTED_LANGUAGES: Dict[str, str] = {
    "ar": "العربية",
    "zh-cn": "简体中文",
    "es": "Español",
    "pt": "Português",
    "fr": "Français",
    "de": "Deutsch",
    "hi": "हिन्दी",
    "id": "Bahasa Indonesia",
    "ja": "日本語",
    "ko": "한국어",
    "fa": "فارسی",
    "ru": "Русский",
    "tr": "Türkçe",
}

# English names, used when talking to translation backends
ENGLISH_NAMES: Dict[str, str] = {
    "en": "English",
    "ar": "Arabic",
    "zh-cn": "Simplified Chinese",
    "es": "Spanish",
    "pt": "Portuguese",
    "fr": "French",
    "de": "German",
    "hi": "Hindi",
    "id": "Indonesian",
    "ja": "Japanese",
    "ko": "Korean",
    "fa": "Persian",
    "ru": "Russian",
    "tr": "Turkish",
}

RTL_LANGUAGES = frozenset({"ar", "fa"})


def is_supported(code: str) -> bool:
    """Check whether a target language code is known."""
    return code.lower() in SUPPORTED_LANGUAGES


def language_name(code: str, english: bool = False) -> str:
    """Get a display name for a language code, falling back to the code."""
    table = ENGLISH_NAMES if english else SUPPORTED_LANGUAGES
    return table.get(code.lower(), code)
