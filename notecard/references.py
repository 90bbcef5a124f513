"""Inline content references (``nostr:note1…`` / ``nostr:nevent1…``)."""

import re
from dataclasses import dataclass

REFERENCE_PREFIX = "nostr:"

NOTE_NEVENT_PATTERN = re.compile(r"nostr:((?:note|nevent)1[a-z0-9]+)\b")


@dataclass(frozen=True)
class ReferenceMatch:
    """A reference located in a line of text."""

    start: int
    end: int
    text: str

    @property
    def identifier(self) -> str:
        """The bech32 identifier with the ``nostr:`` prefix stripped."""
        return self.text[len(REFERENCE_PREFIX):]


def find_references(line: str) -> list[ReferenceMatch]:
    """Return the non-overlapping references in ``line``, left to right."""
    return [
        ReferenceMatch(start=m.start(), end=m.end(), text=m.group(0))
        for m in NOTE_NEVENT_PATTERN.finditer(line)
    ]
