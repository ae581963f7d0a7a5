"""
Language codes supported by the translator.

Codes are ISO 639-1 (2-letter). Display names are what the prompt template
receives for `{source_language}` / `{target_language}`, so most of them are
written in the language itself.
"""

from enum import Enum
from typing import Dict, List, Optional


class Language(Enum):
    """Fixed set of languages offered in the language pickers."""

    CHINESE = 'zh'
    ENGLISH = 'en'
    JAPANESE = 'ja'
    KOREAN = 'ko'
    FRENCH = 'fr'
    GERMAN = 'de'
    SPANISH = 'es'
    RUSSIAN = 'ru'
    ARABIC = 'ar'
    PORTUGUESE = 'pt'

    @property
    def code(self) -> str:
        return self.value

    @property
    def display_name(self) -> str:
        return DISPLAY_NAMES[self]

    @classmethod
    def from_code(cls, code: str) -> 'Language':
        """
        Resolve a language code, case-insensitively.

        Raises:
            ValueError: If the code is not one of the supported languages.
        """
        normalized = (code or '').strip().lower()
        for language in cls:
            if language.value == normalized:
                return language
        raise ValueError(f"Unsupported language code: {code!r}")


DISPLAY_NAMES: Dict[Language, str] = {
    Language.CHINESE: 'Chinese',
    Language.ENGLISH: 'English',
    Language.JAPANESE: '日本語',
    Language.KOREAN: '한국어',
    Language.FRENCH: 'Français',
    Language.GERMAN: 'Deutsch',
    Language.SPANISH: 'Español',
    Language.RUSSIAN: 'Русский',
    Language.ARABIC: 'العربية',
    Language.PORTUGUESE: 'Português',
}

DEFAULT_SOURCE_LANGUAGE = Language.ENGLISH
DEFAULT_TARGET_LANGUAGE = Language.CHINESE


def is_valid_language_code(code: str) -> bool:
    """Check if a code is one of the supported languages."""
    try:
        Language.from_code(code)
    except ValueError:
        return False
    return True


def get_language_name(code: str) -> Optional[str]:
    """
    Get the display name for a language code.

    Examples:
        >>> get_language_name('ja')
        '日本語'
        >>> get_language_name('xx')
        None
    """
    if not is_valid_language_code(code):
        return None
    return Language.from_code(code).display_name


def get_all_languages() -> List[Dict[str, str]]:
    """List supported languages as {code, name} dicts, in picker order."""
    return [{'code': lang.code, 'name': lang.display_name} for lang in Language]
