"""notecard - render a Nostr note as a preview card PNG."""

import argparse
import re
import sys
from pathlib import Path
from typing import Optional

from PIL import Image, UnidentifiedImageError

from .config import settings
from .context import build_context
from .errors import EventFetchError, EventNotFoundError, FontLoadError, ImageFetchError
from .events import JsonFileEventSource, Profile
from .images import fetch_image_from_url
from .renderer import PreviewRenderer
from .utils import get_logger, setup_logging

logger = get_logger(__name__)


def _slugify(text: str, max_len: int = 50) -> str:
    """Convert text to a filesystem-safe slug."""
    slug = text.lower()
    slug = re.sub(r"[^a-z0-9]+", "_", slug)
    slug = slug.strip("_")
    return slug[:max_len].rstrip("_")


def parse_args(argv: Optional[list[str]] = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="notecard - Render a Nostr note as a preview card",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python -m notecard.main --events events.json --code note1abc
  python -m notecard.main --events events.json --code note1abc --avatar pic.png
  python -m notecard.main --events events.json --code note1abc --output card.png --debug

The events file is a JSON object mapping identifiers (note/nevent codes,
author pubkeys) to event objects.
        """,
    )
    parser.add_argument(
        "--events",
        type=Path,
        required=True,
        help="JSON file of events keyed by identifier",
    )
    parser.add_argument(
        "--code",
        required=True,
        help="Identifier of the note to render",
    )
    parser.add_argument(
        "--avatar",
        help="Author picture (local path or URL); defaults to the profile picture",
    )
    parser.add_argument(
        "--output",
        type=Path,
        help="Output PNG path (default: OUTPUT_DIR/card_<code>.png)",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug logging",
    )
    return parser.parse_args(argv)


def load_avatar(location: Optional[str]) -> Optional[Image.Image]:
    """Open a local avatar file or download it; None if unavailable."""
    if not location:
        return None
    try:
        if location.startswith(("http://", "https://")):
            return fetch_image_from_url(location)
        img = Image.open(location)
        img.load()
        return img
    except (ImageFetchError, OSError, UnidentifiedImageError) as e:
        logger.warning(f"Could not load avatar {location}: {e}")
        return None


def run(args: argparse.Namespace) -> int:
    """Render one card. Returns the process exit code."""
    try:
        context = build_context(settings)
    except FontLoadError as e:
        logger.critical(f"Cannot start without fonts: {e}")
        return 1

    try:
        source = JsonFileEventSource(args.events)
        fetched = source.get_event(args.code)
    except (EventNotFoundError, EventFetchError) as e:
        logger.error(f"Failed to fetch event for code {args.code}: {e}")
        return 1

    event = fetched.event
    profile: Profile = source.get_profile(event.pubkey, relays=fetched.relays)
    avatar = load_avatar(args.avatar or profile.picture)

    settings.ensure_directories()
    out_path = args.output or settings.output_dir / f"card_{_slugify(args.code)}.png"
    renderer = PreviewRenderer(context, source, settings)
    renderer.render_to_file(event, out_path, profile=profile, avatar=avatar)
    return 0


def main(argv: Optional[list[str]] = None) -> int:
    """Main entry point."""
    args = parse_args(argv)
    setup_logging("DEBUG" if args.debug else settings.log_level)
    return run(args)


if __name__ == "__main__":
    sys.exit(main())
