"""Configuration management using Pydantic Settings."""

from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Card rendering settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    # Paths
    fonts_dir: Path = Field(default=Path("fonts"), alias="FONTS_DIR")
    output_dir: Path = Field(default=Path("output"), alias="OUTPUT_DIR")

    # Font files, one per supported script (same order as SUPPORTED_SCRIPTS)
    default_font_file: str = Field(default="NotoSans.ttf", alias="DEFAULT_FONT_FILE")
    japanese_font_file: str = Field(default="NotoSansJP.ttf", alias="JAPANESE_FONT_FILE")
    hebrew_font_file: str = Field(default="NotoSansHebrew.ttf", alias="HEBREW_FONT_FILE")
    thai_font_file: str = Field(default="NotoSansThai.ttf", alias="THAI_FONT_FILE")
    arabic_font_file: str = Field(default="NotoSansArabic.ttf", alias="ARABIC_FONT_FILE")
    devanagari_font_file: str = Field(default="NotoSansDevanagari.ttf", alias="DEVANAGARI_FONT_FILE")
    bengali_font_file: str = Field(default="NotoSansBengali.ttf", alias="BENGALI_FONT_FILE")
    javanese_font_file: str = Field(default="NotoSansJavanese.ttf", alias="JAVANESE_FONT_FILE")
    chinese_font_file: str = Field(default="NotoSansSC.ttf", alias="CHINESE_FONT_FILE")
    korean_font_file: str = Field(default="NotoSansKR.ttf", alias="KOREAN_FONT_FILE")
    emoji_font_file: str = Field(default="NotoEmoji.ttf", alias="EMOJI_FONT_FILE")
    font_size: int = Field(default=26, alias="FONT_SIZE")

    # Quote expansion
    quote_timeout_seconds: float = Field(default=3.0, alias="QUOTE_TIMEOUT_SECONDS")
    quote_max_workers: int = Field(default=4, alias="QUOTE_MAX_WORKERS")
    quote_marker: str = Field(default="|", alias="QUOTE_MARKER")

    # Card layout (700x525 preview cards)
    card_width: int = Field(default=700, alias="CARD_WIDTH")
    card_height: int = Field(default=525, alias="CARD_HEIGHT")
    card_margin: int = Field(default=30, alias="CARD_MARGIN")
    avatar_size: int = Field(default=64, alias="AVATAR_SIZE")
    line_spacing: float = Field(default=1.35, alias="LINE_SPACING")
    background_color: str = Field(default="#1a1a2e", alias="BACKGROUND_COLOR")
    text_color: str = Field(default="#f0f0f0", alias="TEXT_COLOR")
    quote_color: str = Field(default="#a0a0b4", alias="QUOTE_COLOR")
    accent_color: str = Field(default="#b482ff", alias="ACCENT_COLOR")

    # Avatar download
    image_fetch_timeout_seconds: float = Field(default=10.0, alias="IMAGE_FETCH_TIMEOUT_SECONDS")
    image_fetch_attempts: int = Field(default=3, alias="IMAGE_FETCH_ATTEMPTS")

    # Logging
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    @property
    def script_font_files(self) -> tuple[str, ...]:
        """Font file names indexed like SUPPORTED_SCRIPTS.

        Hiragana and Katakana share the Japanese face.
        """
        return (
            self.default_font_file,
            self.japanese_font_file,
            self.japanese_font_file,
            self.hebrew_font_file,
            self.thai_font_file,
            self.arabic_font_file,
            self.devanagari_font_file,
            self.bengali_font_file,
            self.javanese_font_file,
            self.chinese_font_file,
            self.korean_font_file,
        )

    @property
    def emoji_font_path(self) -> Path:
        """Path to the emoji font."""
        return self.fonts_dir / self.emoji_font_file

    def ensure_directories(self) -> None:
        """Create the output directory if it doesn't exist."""
        self.output_dir.mkdir(parents=True, exist_ok=True)


# Global settings instance
settings = Settings()
