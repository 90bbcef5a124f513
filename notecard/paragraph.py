"""Per-paragraph script, direction, language and font resolution."""

from dataclasses import dataclass
from enum import Enum
from typing import Any

from .context import RenderContext
from .language import detect_language
from .scripts import ARABIC_SCRIPT


class Direction(Enum):
    """Paragraph-level text direction."""

    LTR = "ltr"
    RTL = "rtl"


@dataclass(frozen=True)
class ResolvedStyle:
    """Everything the renderer needs to lay out one paragraph."""

    language: str
    script: str
    direction: Direction
    font: Any


def majority_script_index(context: RenderContext, paragraph: str) -> int:
    """
    Pick the supported-script index that dominates ``paragraph``.

    Once past the halfway point, the scan stops as soon as the script of the
    character just read holds more than half the paragraph. Otherwise the
    most frequent script wins, ties going to the lowest index. An empty
    paragraph resolves to index 0.
    """
    ranking = [0] * len(context.scripts.supported_scripts)
    threshold = len(paragraph) // 2

    for position, ch in enumerate(paragraph):
        index = context.scripts.classify(ch)
        ranking[index] += 1
        if position > threshold and ranking[index] > threshold:
            return index

    return ranking.index(max(ranking))


def resolve_paragraph(context: RenderContext, paragraph: str) -> ResolvedStyle:
    """Resolve (language, script, direction, font) for one paragraph."""
    index = majority_script_index(context, paragraph)
    script = context.scripts.supported_scripts[index]
    direction = Direction.RTL if script == ARABIC_SCRIPT else Direction.LTR
    return ResolvedStyle(
        language=detect_language(context.detector, paragraph),
        script=script,
        direction=direction,
        font=context.fonts[index],
    )
