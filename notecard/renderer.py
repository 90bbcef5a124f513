"""Preview card renderer.

Draws a note as a PNG card: avatar and author header, then the note body
with inline references expanded into quoted blocks. Each paragraph is
drawn with the font of its dominant script, right-aligned when the script
is written right to left.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional

import emoji
from PIL import Image, ImageDraw, ImageFont, features

from .config import Settings, settings
from .context import RenderContext
from .events import Event, EventSource, Profile, preview_lines
from .images import prepare_avatar
from .paragraph import Direction, ResolvedStyle, resolve_paragraph
from .quotes import Block, expand_quotes
from .utils import get_logger

logger = get_logger(__name__)

ELLIPSIS = "…"
QUOTE_INDENT = 24
QUOTE_BAR_WIDTH = 4
HEADER_GAP = 16
BLOCK_GAP = 10


@dataclass
class TextRun:
    """A stretch of a line drawn with a single face."""

    text: str
    font: Any


def _supports_layout_hints(font: Any) -> bool:
    """Direction/language hints need FreeType fonts on the raqm engine."""
    return (
        isinstance(font, ImageFont.FreeTypeFont)
        and font.layout_engine == ImageFont.Layout.RAQM
        and features.check_feature("raqm")
    )


class PreviewRenderer:
    """Renders a note and its author into a preview card image."""

    def __init__(
        self,
        context: RenderContext,
        source: EventSource,
        config: Optional[Settings] = None,
    ):
        self.context = context
        self.source = source
        self.config = config or settings

    # ------------------------------------------------------------------
    # Measuring and wrapping
    # ------------------------------------------------------------------

    def _runs(self, text: str, font: Any) -> list[TextRun]:
        """Split ``text`` into emoji runs (emoji face) and text runs (``font``)."""
        runs = []
        cursor = 0
        for item in emoji.emoji_list(text):
            if item["match_start"] > cursor:
                runs.append(TextRun(text[cursor:item["match_start"]], font))
            runs.append(TextRun(item["emoji"], self.context.fonts.emoji))
            cursor = item["match_end"]
        if cursor < len(text):
            runs.append(TextRun(text[cursor:], font))
        return runs

    def _text_width(self, text: str, font: Any) -> float:
        return sum(run.font.getlength(run.text) for run in self._runs(text, font))

    def _line_height(self, font: Any) -> int:
        size = getattr(font, "size", self.config.font_size)
        return int(size * self.config.line_spacing)

    def _break_long_word(self, word: str, font: Any, max_width: float) -> list[str]:
        """Break a word wider than ``max_width`` character by character."""
        parts = []
        current = ""
        for ch in word:
            if current and self._text_width(current + ch, font) > max_width:
                parts.append(current)
                current = ch
            else:
                current += ch
        if current:
            parts.append(current)
        return parts

    def wrap(self, paragraph: str, font: Any, max_width: float) -> list[str]:
        """Word-wrap ``paragraph`` to ``max_width`` pixels."""
        lines: list[str] = []
        current = ""
        for word in paragraph.split(" "):
            test_line = f"{current} {word}" if current else word
            if self._text_width(test_line, font) <= max_width:
                current = test_line
                continue
            if current:
                lines.append(current)
            if self._text_width(word, font) <= max_width:
                current = word
            else:
                *full, current = self._break_long_word(word, font, max_width) or [""]
                lines.extend(full)
        if current:
            lines.append(current)
        return lines

    # ------------------------------------------------------------------
    # Drawing
    # ------------------------------------------------------------------

    def _draw_line(
        self,
        draw: ImageDraw.ImageDraw,
        line: str,
        x: float,
        y: float,
        width: float,
        style: ResolvedStyle,
        color: str,
    ) -> None:
        runs = self._runs(line, style.font)
        line_width = sum(run.font.getlength(run.text) for run in runs)
        if style.direction is Direction.RTL:
            x = x + width - line_width

        for run in runs:
            kwargs = {}
            if run.font is style.font and _supports_layout_hints(run.font):
                kwargs = {"direction": style.direction.value, "language": style.language}
            draw.text((x, y), run.text, font=run.font, fill=color, **kwargs)
            x += run.font.getlength(run.text)

    def _draw_paragraph(
        self,
        draw: ImageDraw.ImageDraw,
        paragraph: str,
        x: float,
        y: float,
        width: float,
        bottom: float,
        color: str,
    ) -> tuple[float, bool]:
        """Draw one paragraph; returns the next y and whether space ran out."""
        style = resolve_paragraph(self.context, paragraph)
        line_height = self._line_height(style.font)
        lines = self.wrap(paragraph, style.font, width)

        for i, line in enumerate(lines):
            if y + line_height > bottom:
                return y, True
            if y + 2 * line_height > bottom and i < len(lines) - 1:
                self._draw_line(draw, line + ELLIPSIS, x, y, width, style, color)
                return y + line_height, True
            self._draw_line(draw, line, x, y, width, style, color)
            y += line_height
        return y, False

    def _draw_block(
        self,
        draw: ImageDraw.ImageDraw,
        block: Block,
        y: float,
        bottom: float,
    ) -> tuple[float, bool]:
        cfg = self.config
        x = cfg.card_margin
        width = cfg.card_width - 2 * cfg.card_margin
        color = cfg.text_color
        if block.is_quoted:
            x += QUOTE_INDENT
            width -= QUOTE_INDENT
            color = cfg.quote_color

        top = y
        exhausted = False
        for paragraph in preview_lines(block.text):
            try:
                y, exhausted = self._draw_paragraph(draw, paragraph, x, y, width, bottom, color)
            except Exception as e:
                logger.warning(f"Skipping paragraph that failed to render: {e}")
                continue
            if exhausted:
                break

        if block.is_quoted and y > top:
            bar_x = cfg.card_margin + QUOTE_BAR_WIDTH
            draw.rectangle(
                [(bar_x, top), (bar_x + QUOTE_BAR_WIDTH - 1, y - 1)],
                fill=cfg.accent_color,
            )
        return y, exhausted

    def _draw_header(
        self,
        img: Image.Image,
        draw: ImageDraw.ImageDraw,
        event: Event,
        profile: Profile,
        avatar: Optional[Image.Image],
    ) -> float:
        cfg = self.config
        x = y = cfg.card_margin
        if avatar is not None:
            try:
                rounded = prepare_avatar(avatar, cfg.avatar_size)
                img.paste(rounded, (x, y), rounded)
            except Exception as e:
                logger.warning(f"Could not draw avatar: {e}")
        x += cfg.avatar_size + HEADER_GAP
        width = cfg.card_width - cfg.card_margin - x
        bottom = cfg.card_margin + cfg.avatar_size

        name_style = resolve_paragraph(self.context, profile.display)
        name = self.wrap(profile.display, name_style.font, width)[:1]
        if name:
            self._draw_line(draw, name[0], x, y, width, name_style, cfg.text_color)
        date_y = y + self._line_height(name_style.font)
        if event.created_at and date_y < bottom:
            try:
                date = event.created_at_str
            except (OverflowError, ValueError, OSError) as e:
                logger.warning(f"Skipping date of event {event.id}: {e}")
            else:
                date_style = resolve_paragraph(self.context, date)
                self._draw_line(draw, date, x, date_y, width, date_style, cfg.quote_color)

        return bottom + HEADER_GAP

    def render(
        self,
        event: Event,
        profile: Optional[Profile] = None,
        avatar: Optional[Image.Image] = None,
    ) -> Image.Image:
        """
        Render a preview card for ``event``.

        Args:
            event: The note to render
            profile: Author metadata (defaults to a bare profile)
            avatar: Author picture, any size

        Returns:
            RGB card image of CARD_WIDTH x CARD_HEIGHT
        """
        cfg = self.config
        profile = profile or Profile(pubkey=event.pubkey)
        img = Image.new("RGB", (cfg.card_width, cfg.card_height), cfg.background_color)
        draw = ImageDraw.Draw(img)

        y = self._draw_header(img, draw, event, profile, avatar)
        bottom = cfg.card_height - cfg.card_margin

        blocks = expand_quotes(
            preview_lines(event.body),
            self.source,
            timeout=cfg.quote_timeout_seconds,
            marker=cfg.quote_marker,
            max_workers=cfg.quote_max_workers,
        )
        logger.debug(f"Rendering {len(blocks)} blocks for event {event.id}")

        for block in blocks:
            y, exhausted = self._draw_block(draw, block, y, bottom)
            if exhausted:
                break
            y += BLOCK_GAP

        return img

    def render_to_file(
        self,
        event: Event,
        out_path: Path,
        profile: Optional[Profile] = None,
        avatar: Optional[Image.Image] = None,
    ) -> Path:
        """Render and save the card as PNG."""
        img = self.render(event, profile=profile, avatar=avatar)
        out_path.parent.mkdir(parents=True, exist_ok=True)
        img.save(out_path, "PNG")
        logger.info(f"Rendered card for {event.id}: {out_path}")
        return out_path
