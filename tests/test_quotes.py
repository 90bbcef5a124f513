"""Tests for quote expansion."""

import threading
import time

from notecard.events import EventSource
from notecard.quotes import Block, BlockKind, expand_quotes


def _expand(lines, source, **kwargs):
    kwargs.setdefault("timeout", 2.0)
    kwargs.setdefault("marker", "|")
    return expand_quotes(lines, source, **kwargs)


def test_line_without_references_is_one_plain_block(make_source):
    source = make_source()
    assert _expand(["just some text"], source) == [Block.plain("just some text")]
    assert source.calls == []


def test_resolvable_reference_becomes_quoted_block(make_source):
    source = make_source({"note1abc": "hello"})
    blocks = _expand(["look at nostr:note1abc"], source)
    assert blocks == [
        Block(BlockKind.PLAIN, "look at "),
        Block(BlockKind.QUOTED, "| hello"),
    ]


def test_unresolvable_reference_is_folded_back(make_source):
    source = make_source()
    blocks = _expand(["look at nostr:note1missing"], source)
    assert blocks == [Block.plain("look at nostr:note1missing")]


def test_unresolvable_reference_keeps_line_intact(make_source):
    source = make_source()
    line = "see nostr:note1missing and nostr:nevent1gone too  "
    assert _expand([line], source) == [Block.plain(line)]


def test_reference_at_line_start_emits_empty_plain_block(make_source):
    source = make_source({"note1abc": "hello"})
    blocks = _expand(["nostr:note1abc"], source)
    assert blocks == [Block.plain(""), Block.quoted("|", "hello")]


def test_trailing_text_after_quote_is_new_block(make_source):
    source = make_source({"note1abc": "hello"})
    blocks = _expand(["look at nostr:note1abc what a note"], source)
    assert blocks == [
        Block.plain("look at "),
        Block.quoted("|", "hello"),
        Block.plain(" what a note"),
    ]


def test_trailing_whitespace_after_quote_is_dropped(make_source):
    source = make_source({"note1abc": "hello"})
    blocks = _expand(["look at nostr:note1abc   "], source)
    assert blocks == [Block.plain("look at "), Block.quoted("|", "hello")]


def test_failed_reference_after_quote_appends_to_quote(make_source):
    source = make_source({"note1aaa": "first"})
    blocks = _expand(["a nostr:note1aaa nostr:note1bbb"], source)
    assert blocks == [
        Block.plain("a "),
        Block(BlockKind.QUOTED, "| first nostr:note1bbb"),
    ]


def test_text_between_quotes_is_kept(make_source):
    source = make_source({"note1aaa": "first", "nevent1bbb": "second"})
    blocks = _expand(["a nostr:note1aaa then nostr:nevent1bbb"], source)
    assert blocks == [
        Block.plain("a "),
        Block.quoted("|", "first"),
        Block.plain(" then "),
        Block.quoted("|", "second"),
    ]


def test_blocks_follow_line_order(make_source):
    source = make_source({"note1aaa": "first", "note1bbb": "second"})
    lines = ["intro", "x nostr:note1bbb", "middle", "y nostr:note1aaa z"]
    blocks = _expand(lines, source)
    assert [block.text for block in blocks] == [
        "intro",
        "x ",
        "| second",
        "middle",
        "y ",
        "| first",
        " z",
    ]


def test_duplicate_references_fetched_once(make_source):
    source = make_source({"note1aaa": "first"})
    blocks = _expand(["nostr:note1aaa", "again nostr:note1aaa"], source)
    assert [b for b in blocks if b.is_quoted] == [Block.quoted("|", "first")] * 2
    assert [identifier for identifier, _ in source.calls] == ["note1aaa"]


def test_remaining_time_is_passed_to_source(make_source):
    source = make_source({"note1aaa": "first"})
    _expand(["nostr:note1aaa"], source, timeout=1.5)
    (_, timeout), = source.calls
    assert 0 <= timeout <= 1.5


def test_source_errors_degrade_to_literal_text():
    class BrokenSource(EventSource):
        def get_event(self, identifier, relays=None, timeout=None):
            raise ConnectionError("relay went away")

    blocks = _expand(["see nostr:note1abc"], BrokenSource())
    assert blocks == [Block.plain("see nostr:note1abc")]


def test_hanging_fetch_does_not_outlive_deadline():
    release = threading.Event()

    class HangingSource(EventSource):
        def get_event(self, identifier, relays=None, timeout=None):
            release.wait(10)
            raise TimeoutError("gave up")

    try:
        started = time.monotonic()
        blocks = _expand(["slow nostr:note1slow"], HangingSource(), timeout=0.2)
        elapsed = time.monotonic() - started
    finally:
        release.set()

    assert elapsed < 2.0
    assert blocks == [Block.plain("slow nostr:note1slow")]


def test_deadline_shared_across_references(make_source):
    release = threading.Event()

    class PartlyHangingSource(make_source):
        def get_event(self, identifier, relays=None, timeout=None):
            if identifier == "note1slow":
                release.wait(10)
            return super().get_event(identifier, relays, timeout)

    source = PartlyHangingSource({"note1fast": "quick", "note1slow": "late"})
    try:
        started = time.monotonic()
        blocks = _expand(
            ["nostr:note1slow", "nostr:note1fast"], source, timeout=0.3
        )
        elapsed = time.monotonic() - started
    finally:
        release.set()

    assert elapsed < 2.0
    assert blocks == [Block.plain("nostr:note1slow"), Block.plain(""), Block.quoted("|", "quick")]


def test_empty_input(make_source):
    assert _expand([], make_source()) == []


def test_sources_honoring_timeout_release_pool_threads():
    class SlowSource(EventSource):
        def get_event(self, identifier, relays=None, timeout=None):
            threading.Event().wait(timeout)
            raise TimeoutError(f"no answer within {timeout}s")

    blocks = _expand(["nostr:note1slow nostr:note1slower"], SlowSource(), timeout=0.2)
    assert blocks == [Block.plain("nostr:note1slow nostr:note1slower")]

    def pool_threads():
        return [t for t in threading.enumerate() if t.name.startswith("quote-fetch") and t.is_alive()]

    give_up = time.monotonic() + 2.0
    while pool_threads() and time.monotonic() < give_up:
        time.sleep(0.02)
    assert pool_threads() == []
