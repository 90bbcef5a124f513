"""Process-wide, read-only state shared by every render call."""

from dataclasses import dataclass
from typing import Optional

from .config import Settings
from .fonts import FontLoader, FontTable, load_font_table
from .language import LanguageDetector, LinguaLanguageDetector
from .scripts import ScriptRangeTable
from .utils import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class RenderContext:
    """Script table, fonts and language detector, built once at startup."""

    scripts: ScriptRangeTable
    fonts: FontTable
    detector: LanguageDetector


def build_context(
    settings: Settings,
    font_loader: Optional[FontLoader] = None,
    detector: Optional[LanguageDetector] = None,
) -> RenderContext:
    """
    Build the render context.

    Raises:
        FontLoadError: if the font table cannot be loaded
    """
    logger.info("Initializing render context...")
    fonts = load_font_table(settings, loader=font_loader)
    return RenderContext(
        scripts=ScriptRangeTable(),
        fonts=fonts,
        detector=detector or LinguaLanguageDetector(),
    )
