"""Rewrites inline note references into quoted blocks.

Every referenced note is fetched under one deadline shared by the whole
call. A reference whose fetch fails (not found, error, or out of time) is
kept as literal text in the preceding block.
"""

import time
from concurrent.futures import Future, ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeoutError
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Optional

from .config import settings
from .events import EventSource
from .references import ReferenceMatch, find_references
from .utils import get_logger

logger = get_logger(__name__)


class BlockKind(Enum):
    PLAIN = "plain"
    QUOTED = "quoted"


@dataclass(frozen=True)
class Block:
    """One unit of card text: original content or a quoted note."""

    kind: BlockKind
    text: str

    @classmethod
    def plain(cls, text: str) -> "Block":
        return cls(BlockKind.PLAIN, text)

    @classmethod
    def quoted(cls, marker: str, content: str) -> "Block":
        return cls(BlockKind.QUOTED, f"{marker} {content}")

    @property
    def is_quoted(self) -> bool:
        return self.kind is BlockKind.QUOTED


class _Blocks:
    """Block accumulator; plain text merges into a trailing plain block."""

    def __init__(self):
        self.items: list[Block] = []

    def start_plain(self, text: str) -> None:
        self.items.append(Block.plain(text))

    def add_quote(self, marker: str, content: str) -> None:
        self.items.append(Block.quoted(marker, content))

    def append_literal(self, text: str) -> None:
        last = self.items[-1]
        self.items[-1] = Block(last.kind, last.text + text)

    def add_text(self, text: str) -> None:
        if self.items and not self.items[-1].is_quoted:
            last = self.items[-1]
            self.items[-1] = Block.plain(last.text + text)
        elif text.strip():
            self.items.append(Block.plain(text))


def _fetch_content(source: EventSource, identifier: str, deadline: float) -> str:
    remaining = max(0.0, deadline - time.monotonic())
    return source.get_event(identifier, timeout=remaining).event.content


def expand_quotes(
    lines: Iterable[str],
    source: EventSource,
    timeout: Optional[float] = None,
    marker: Optional[str] = None,
    max_workers: Optional[int] = None,
) -> list[Block]:
    """
    Replace ``nostr:note1…``/``nostr:nevent1…`` references with quoted blocks.

    Args:
        lines: Content lines, in order
        source: Where referenced events are fetched from
        timeout: Seconds for the whole expansion (QUOTE_TIMEOUT_SECONDS)
        marker: Prefix of quoted blocks (QUOTE_MARKER)
        max_workers: Concurrent fetches (QUOTE_MAX_WORKERS)

    Returns:
        Flat list of blocks in source line/match order
    """
    timeout = settings.quote_timeout_seconds if timeout is None else timeout
    marker = settings.quote_marker if marker is None else marker
    max_workers = max_workers or settings.quote_max_workers
    deadline = time.monotonic() + timeout

    matched: list[tuple[str, list[ReferenceMatch]]] = [
        (line, find_references(line)) for line in lines
    ]
    identifiers = list(dict.fromkeys(
        match.identifier for _, matches in matched for match in matches
    ))

    blocks = _Blocks()
    if not identifiers:
        for line, _ in matched:
            blocks.start_plain(line)
        return blocks.items

    logger.debug(f"Expanding {len(identifiers)} quoted references")
    executor = ThreadPoolExecutor(
        max_workers=min(max_workers, len(identifiers)),
        thread_name_prefix="quote-fetch",
    )
    try:
        futures: dict[str, Future] = {
            identifier: executor.submit(_fetch_content, source, identifier, deadline)
            for identifier in identifiers
        }
        contents: dict[str, Optional[str]] = {}

        def _content(identifier: str) -> Optional[str]:
            if identifier not in contents:
                remaining = max(0.0, deadline - time.monotonic())
                try:
                    contents[identifier] = futures[identifier].result(timeout=remaining)
                except FutureTimeoutError:
                    logger.warning(f"Timed out fetching quoted event {identifier}")
                    contents[identifier] = None
                except Exception as e:
                    logger.info(f"Could not fetch quoted event {identifier}: {e}")
                    contents[identifier] = None
            return contents[identifier]

        for line, matches in matched:
            if not matches:
                blocks.start_plain(line)
                continue

            blocks.start_plain(line[:matches[0].start])
            cursor = matches[0].start
            for match in matches:
                gap = line[cursor:match.start]
                content = _content(match.identifier)
                if content is None:
                    blocks.append_literal(gap + match.text)
                else:
                    blocks.add_text(gap)
                    blocks.add_quote(marker, content)
                cursor = match.end

            if cursor < len(line):
                blocks.add_text(line[cursor:])
    finally:
        executor.shutdown(wait=False, cancel_futures=True)

    return blocks.items
