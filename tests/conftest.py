"""Shared fixtures for notecard tests."""

import threading
from typing import Optional

import pytest
from PIL import ImageFont

from notecard.config import Settings
from notecard.context import RenderContext
from notecard.errors import EventNotFoundError
from notecard.events import Event, EventSource, FetchedEvent
from notecard.fonts import FontTable
from notecard.scripts import SUPPORTED_SCRIPTS, ScriptRangeTable


class FakeDetector:
    """Returns a fixed code for non-empty text."""

    def __init__(self, code: Optional[str] = None):
        self.code = code
        self.calls: list[str] = []

    def detect(self, text: str) -> Optional[str]:
        self.calls.append(text)
        return self.code if text else None


class DictEventSource(EventSource):
    """In-memory event source keyed by identifier."""

    def __init__(self, contents: Optional[dict[str, str]] = None):
        self.contents = contents or {}
        self.calls: list[tuple[str, Optional[float]]] = []
        self._lock = threading.Lock()

    def get_event(self, identifier, relays=None, timeout=None):
        with self._lock:
            self.calls.append((identifier, timeout))
        if identifier not in self.contents:
            raise EventNotFoundError(f"Event not found: {identifier}")
        event = Event(id=identifier, pubkey="ab" * 32, kind=1, content=self.contents[identifier])
        return FetchedEvent(event=event, relays=["wss://relay.example.com"])


@pytest.fixture(scope="session")
def script_table():
    return ScriptRangeTable()


@pytest.fixture
def detector():
    return FakeDetector()


@pytest.fixture
def sentinel_fonts():
    """Font table of named placeholders, one per script."""
    return FontTable(
        faces=tuple(f"face-{script}" for script in SUPPORTED_SCRIPTS),
        emoji="face-emoji",
    )


@pytest.fixture
def context(script_table, sentinel_fonts, detector):
    return RenderContext(scripts=script_table, fonts=sentinel_fonts, detector=detector)


@pytest.fixture
def default_font():
    return ImageFont.load_default()


@pytest.fixture
def drawing_context(script_table, default_font, detector):
    """Context whose faces are all Pillow's built-in font, so text can be drawn."""
    fonts = FontTable(faces=(default_font,) * len(SUPPORTED_SCRIPTS), emoji=default_font)
    return RenderContext(scripts=script_table, fonts=fonts, detector=detector)


@pytest.fixture
def card_settings(tmp_path):
    return Settings(
        fonts_dir=tmp_path / "fonts",
        output_dir=tmp_path / "out",
        card_width=400,
        card_height=300,
        card_margin=20,
        avatar_size=48,
        quote_timeout_seconds=1.0,
        quote_marker="|",
    )


@pytest.fixture
def source():
    return DictEventSource({"note1quoted": "hello from a quoted note"})


@pytest.fixture
def make_source():
    """Factory for in-memory sources: ``make_source({"note1…": "content"})``."""
    return DictEventSource


@pytest.fixture
def make_detector():
    """Factory for fixed-answer detectors: ``make_detector("ja")``."""
    return FakeDetector
