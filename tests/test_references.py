"""Tests for inline reference matching."""

from notecard.references import find_references


def test_finds_note_and_nevent_references():
    line = "gm nostr:note1abc and nostr:nevent1xyz9!"
    matches = find_references(line)
    assert [m.text for m in matches] == ["nostr:note1abc", "nostr:nevent1xyz9"]
    assert [m.identifier for m in matches] == ["note1abc", "nevent1xyz9"]
    for m in matches:
        assert line[m.start:m.end] == m.text


def test_ignores_other_entities():
    assert find_references("by nostr:npub1abc and nostr:naddr1xyz") == []


def test_requires_lowercase_bech32():
    assert find_references("nostr:NOTE1ABC") == []
    assert [m.text for m in find_references("nostr:note1abcDEF")] == []


def test_plain_text_has_no_references():
    assert find_references("note1abc without the prefix") == []
