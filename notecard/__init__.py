"""notecard - preview card rendering for Nostr notes."""

from .context import RenderContext, build_context
from .images import crop_to_square, round_image
from .paragraph import Direction, ResolvedStyle, resolve_paragraph
from .quotes import Block, BlockKind, expand_quotes
from .scripts import SUPPORTED_SCRIPTS, ScriptRangeTable

__all__ = [
    "Block",
    "BlockKind",
    "Direction",
    "RenderContext",
    "ResolvedStyle",
    "SUPPORTED_SCRIPTS",
    "ScriptRangeTable",
    "build_context",
    "crop_to_square",
    "expand_quotes",
    "resolve_paragraph",
    "round_image",
]
