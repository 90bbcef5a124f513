"""Nostr event records and the event source interface.

Fetching events from relays is left to implementations of EventSource;
this package ships a JSON-file backed source for the CLI and tests.
"""

import json
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

from .errors import EventFetchError, EventNotFoundError
from .utils import get_logger

logger = get_logger(__name__)

KIND_PROFILE_METADATA = 0


@dataclass
class Event:
    """A signed Nostr event (only the fields rendering needs)."""

    id: str
    pubkey: str
    kind: int
    content: str
    created_at: int = 0
    tags: list[list[str]] = field(default_factory=list)

    @property
    def created_at_str(self) -> str:
        """Creation time as ``YYYY-MM-DD HH:MM:SS`` (UTC)."""
        created = datetime.fromtimestamp(self.created_at, tz=timezone.utc)
        return created.strftime("%Y-%m-%d %H:%M:%S")

    def first_tag_value(self, name: str) -> Optional[str]:
        """Value of the first tag called ``name`` that carries one."""
        for tag in self.tags:
            if len(tag) >= 2 and tag[0] == name:
                return tag[1]
        return None

    @property
    def alt(self) -> Optional[str]:
        return self.first_tag_value("alt")

    @property
    def body(self) -> str:
        """Text shown on the card: the content, or the ``alt`` tag when it is blank."""
        if self.content.strip():
            return self.content
        return self.alt or ""

    @classmethod
    def from_dict(cls, data: dict) -> "Event":
        """Create from dictionary."""
        return cls(
            id=data["id"],
            pubkey=data["pubkey"],
            kind=int(data.get("kind", 1)),
            content=data.get("content", ""),
            created_at=int(data.get("created_at", 0)),
            tags=[list(tag) for tag in data.get("tags", [])],
        )


@dataclass
class FetchedEvent:
    """An event together with the relays it was seen on."""

    event: Event
    relays: list[str] = field(default_factory=list)


@dataclass
class Profile:
    """Author metadata parsed from a kind-0 event."""

    pubkey: str
    name: Optional[str] = None
    display_name: Optional[str] = None
    picture: Optional[str] = None
    about: Optional[str] = None

    @property
    def short_pubkey(self) -> str:
        return self.pubkey[:8] + "…" + self.pubkey[-4:]

    @property
    def display(self) -> str:
        """Name to show on the card, falling back to the short pubkey."""
        label = self.display_name or self.name
        if label:
            return f"{label} ({self.short_pubkey})"
        return self.short_pubkey

    @classmethod
    def from_event(cls, event: Event) -> "Profile":
        """Parse profile metadata; malformed content yields a bare profile."""
        try:
            metadata = json.loads(event.content)
        except json.JSONDecodeError:
            logger.debug(f"Profile metadata for {event.pubkey} is not JSON")
            return cls(pubkey=event.pubkey)
        if not isinstance(metadata, dict):
            return cls(pubkey=event.pubkey)

        def _str(key: str) -> Optional[str]:
            value = metadata.get(key)
            return value if isinstance(value, str) and value else None

        return cls(
            pubkey=event.pubkey,
            name=_str("name"),
            display_name=_str("display_name"),
            picture=_str("picture"),
            about=_str("about"),
        )


def preview_lines(content: str) -> list[str]:
    """Split note content into lines, dropping blank ones."""
    return [line for line in content.split("\n") if line.strip()]


class EventSource(ABC):
    """Abstract access to Nostr events.

    Implementations must be safe to call concurrently with different
    identifiers and must give up once ``timeout`` seconds have passed.
    Quote expansion stops waiting at its deadline but cannot stop a fetch
    that is already running; those run on non-daemon pool threads, which
    the interpreter joins at exit, so a fetch that ignores ``timeout``
    keeps the process alive until it returns.
    """

    @abstractmethod
    def get_event(
        self,
        identifier: str,
        relays: Optional[list[str]] = None,
        timeout: Optional[float] = None,
    ) -> FetchedEvent:
        """
        Fetch the event named by ``identifier``.

        Args:
            identifier: A note/nevent/npub code or hex id
            relays: Optional relay hints
            timeout: Seconds the caller is willing to wait

        Returns:
            The event and the relays it was found on

        Raises:
            EventNotFoundError: if no event matches
            EventFetchError: if the lookup itself failed
        """
        pass

    def get_profile(
        self,
        pubkey: str,
        relays: Optional[list[str]] = None,
        timeout: Optional[float] = None,
    ) -> Profile:
        """Fetch author metadata, degrading to a bare profile."""
        try:
            fetched = self.get_event(pubkey, relays=relays, timeout=timeout)
        except (EventNotFoundError, EventFetchError) as e:
            logger.info(f"No profile metadata for {pubkey}: {e}")
            return Profile(pubkey=pubkey)
        if fetched.event.kind != KIND_PROFILE_METADATA:
            return Profile(pubkey=pubkey)
        return Profile.from_event(fetched.event)


class JsonFileEventSource(EventSource):
    """Events loaded from a JSON object mapping identifier -> event."""

    def __init__(self, path: Path):
        self.path = path
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            raise EventFetchError(f"Cannot read events from {path}: {e}") from e
        if not isinstance(data, dict):
            raise EventFetchError(f"{path} must contain a JSON object")

        self._events: dict[str, FetchedEvent] = {}
        for identifier, raw in data.items():
            try:
                event = Event.from_dict(raw)
            except (KeyError, TypeError, ValueError) as e:
                logger.warning(f"Skipping malformed event {identifier}: {e}")
                continue
            self._events[identifier] = FetchedEvent(
                event=event, relays=list(raw.get("relays", []))
            )
        logger.info(f"Loaded {len(self._events)} events from {path}")

    def get_event(
        self,
        identifier: str,
        relays: Optional[list[str]] = None,
        timeout: Optional[float] = None,
    ) -> FetchedEvent:
        try:
            return self._events[identifier]
        except KeyError:
            raise EventNotFoundError(f"Event not found: {identifier}") from None
