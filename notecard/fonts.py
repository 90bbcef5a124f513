"""Startup loading of the per-script font faces."""

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Optional

from PIL import ImageFont

from .config import Settings
from .errors import FontLoadError
from .scripts import SUPPORTED_SCRIPTS
from .utils import get_logger

logger = get_logger(__name__)

FontLoader = Callable[[str, int], Any]


@dataclass(frozen=True)
class FontTable:
    """One face per supported script, plus the emoji face."""

    faces: tuple[Any, ...]
    emoji: Any

    def __post_init__(self):
        if len(self.faces) != len(SUPPORTED_SCRIPTS):
            raise ValueError(
                f"Font table needs {len(SUPPORTED_SCRIPTS)} faces, got {len(self.faces)}"
            )

    def __getitem__(self, index: int) -> Any:
        return self.faces[index]

    def __len__(self) -> int:
        return len(self.faces)


def _truetype(path: str, size: int) -> ImageFont.FreeTypeFont:
    return ImageFont.truetype(path, size)


def load_font_table(
    settings: Settings,
    loader: Optional[FontLoader] = None,
) -> FontTable:
    """
    Load every script face and the emoji face.

    A file listed for several scripts is loaded once and shared.

    Args:
        settings: Settings holding the fonts directory, file names and size
        loader: Callable (path, size) -> face; defaults to ImageFont.truetype

    Returns:
        FontTable indexed like SUPPORTED_SCRIPTS

    Raises:
        FontLoadError: if any face fails to load
    """
    loader = loader or _truetype
    cache: dict[Path, Any] = {}

    def _load(path: Path) -> Any:
        if path in cache:
            return cache[path]
        try:
            face = loader(str(path), settings.font_size)
        except (OSError, ValueError) as e:
            logger.critical(f"Error loading font on startup: {path}: {e}")
            raise FontLoadError(f"Failed to load font {path}: {e}") from e
        cache[path] = face
        logger.debug(f"Loaded font {path}")
        return face

    faces = tuple(
        _load(settings.fonts_dir / filename) for filename in settings.script_font_files
    )
    emoji = _load(settings.emoji_font_path)
    logger.info(f"Loaded {len(cache)} font files from {settings.fonts_dir}")
    return FontTable(faces=faces, emoji=emoji)
