"""Natural-language detection used as a shaping hint."""

import threading
from typing import Optional, Protocol

from lingua import Language, LanguageDetectorBuilder

from .utils import get_logger

logger = get_logger(__name__)

DEFAULT_LANGUAGE = "en-us"

# Languages whose scripts need a non-default font. Latin-script text is
# left undetected and falls back to DEFAULT_LANGUAGE.
CANDIDATE_LANGUAGES = (
    Language.JAPANESE,
    Language.PERSIAN,
    Language.CHINESE,
    Language.THAI,
    Language.HEBREW,
    Language.ARABIC,
    Language.BENGALI,
    Language.KOREAN,
)


class LanguageDetector(Protocol):
    """Anything that maps text to an ISO 639-1 code, or None."""

    def detect(self, text: str) -> Optional[str]:
        ...


class LinguaLanguageDetector:
    """lingua detector restricted to CANDIDATE_LANGUAGES.

    Calls are serialized with a lock so a single instance can be shared by
    concurrent renders.
    """

    def __init__(self, languages=CANDIDATE_LANGUAGES, low_accuracy: bool = True):
        builder = LanguageDetectorBuilder.from_languages(*languages)
        if low_accuracy:
            builder = builder.with_low_accuracy_mode()
        self._detector = builder.build()
        self._lock = threading.Lock()

    def detect(self, text: str) -> Optional[str]:
        with self._lock:
            language = self._detector.detect_language_of(text)
        if language is None:
            return None
        return language.iso_code_639_1.name.lower()


def detect_language(detector: LanguageDetector, text: str) -> str:
    """Detect the language of ``text``, falling back to DEFAULT_LANGUAGE."""
    try:
        code = detector.detect(text)
    except Exception as e:
        logger.warning(f"Language detection failed: {e}")
        return DEFAULT_LANGUAGE
    return code or DEFAULT_LANGUAGE
