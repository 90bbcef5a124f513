"""Script range table and single-character script classifier.

Ranges come from the Unicode ``Scripts.txt`` data bundled with fontTools,
filtered down to the scripts we ship fonts for.
"""

from dataclasses import dataclass
from typing import Iterable, Optional

from fontTools.unicodedata import Scripts

from .utils import get_logger

logger = get_logger(__name__)

# ISO 15924 tags. Index 0 is the default (Latin) font and catches every
# character not covered by the other ten.
SUPPORTED_SCRIPTS: tuple[str, ...] = (
    "Zzzz",  # unknown
    "Hira",  # Hiragana
    "Kana",  # Katakana
    "Hebr",  # Hebrew
    "Thai",  # Thai
    "Arab",  # Arabic
    "Deva",  # Devanagari
    "Beng",  # Bengali
    "Java",  # Javanese
    "Hani",  # Han
    "Hang",  # Hangul
)

UNKNOWN_SCRIPT_INDEX = 0
ARABIC_SCRIPT = "Arab"


@dataclass(frozen=True)
class ScriptRange:
    """A contiguous code-point interval belonging to one supported script."""

    start: int
    end: int
    script: str
    position: int


def unicode_script_ranges() -> list[tuple[int, int, str]]:
    """Return (start, end, script) for every range in the Unicode Scripts data."""
    starts = Scripts.RANGES
    ranges = []
    for i, start in enumerate(starts):
        end = starts[i + 1] - 1 if i + 1 < len(starts) else 0x10FFFF
        ranges.append((start, end, Scripts.VALUES[i]))
    return ranges


class ScriptRangeTable:
    """Sorted, disjoint script ranges with binary-search lookup."""

    def __init__(
        self,
        supported_scripts: tuple[str, ...] = SUPPORTED_SCRIPTS,
        source_ranges: Optional[Iterable[tuple[int, int, str]]] = None,
    ):
        if source_ranges is None:
            source_ranges = unicode_script_ranges()
        source_ranges = list(source_ranges)

        self.supported_scripts = supported_scripts
        entries = []
        for position, script in enumerate(supported_scripts):
            for start, end, range_script in source_ranges:
                if range_script == script:
                    entries.append(ScriptRange(start, end, script, position))

        # Entries of different scripts interleave, so the search needs one
        # global ordering by start.
        entries.sort(key=lambda entry: entry.start)
        self._entries: tuple[ScriptRange, ...] = tuple(entries)
        logger.debug(
            f"Built script range table: {len(self._entries)} ranges "
            f"for {len(supported_scripts)} scripts"
        )

    def __len__(self) -> int:
        return len(self._entries)

    @property
    def entries(self) -> tuple[ScriptRange, ...]:
        return self._entries

    def classify(self, ch: str) -> int:
        """Return the SUPPORTED_SCRIPTS index for ``ch``, or 0 when unknown."""
        codepoint = ord(ch)
        lo, hi = 0, len(self._entries)
        while lo < hi:
            mid = lo + (hi - lo) // 2
            entry = self._entries[mid]
            if codepoint < entry.start:
                hi = mid
            elif entry.end < codepoint:
                lo = mid + 1
            else:
                return entry.position
        return UNKNOWN_SCRIPT_INDEX

    def script_of(self, ch: str) -> str:
        """Return the ISO 15924 tag of the supported script ``ch`` belongs to."""
        return self.supported_scripts[self.classify(ch)]
