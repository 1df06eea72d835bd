# Path: scripts/search_clips.py
# Purpose: Simple CLI to search the clip archive and print results grouped by day.
# Layer: scripts.
# Details: Accepts date, tag, server, and query-image filters.

from __future__ import annotations

import argparse
import sys
from datetime import date
from pathlib import Path

# Ensure project root is on sys.path when running as a script.
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from PIL import Image

from config import AppSettings, configure_logging
from core.archive import ClipArchive


def main() -> None:
    """Execute a search from the command line."""

    parser = argparse.ArgumentParser(description="Search the clip archive")
    parser.add_argument("--from", dest="date_from", type=date.fromisoformat, help="Only clips after this day's midnight")
    parser.add_argument("--to", dest="date_to", type=date.fromisoformat, help="Only clips on or before this day")
    parser.add_argument("--tag", dest="tags", action="append", help="Match clips with any of these tags (repeatable)")
    parser.add_argument("--server", dest="servers", type=int, action="append", help="Match clips uploaded to these servers")
    parser.add_argument("--image", type=Path, help="Query image for perceptual matching")
    parser.add_argument("--threshold", type=int, default=None, help="Maximum Hamming distance for image matches")
    parser.add_argument("--db", type=Path, default=None, help="Override the archive database path")
    args = parser.parse_args()

    settings = AppSettings.from_env()
    if args.db is not None:
        settings.database_path = args.db
    configure_logging(settings.log_level)

    with ClipArchive.from_settings(settings) as archive:
        fields = {
            "date_from": args.date_from,
            "date_to": args.date_to,
            "tag_names": set(args.tags) if args.tags else None,
            "server_ids": set(args.servers) if args.servers else None,
        }
        if args.threshold is not None:
            fields["distance_threshold"] = args.threshold
        if args.image is not None:
            with Image.open(args.image) as img:
                img.load()
                fields["query_image"] = img.copy()
        groups = archive.pipeline.search_and_group(archive.criteria(**fields))

    for day, clips in groups:
        print(day.isoformat())
        for clip in clips:
            tags = ", ".join(sorted(clip.tags)) or "-"
            print(f"  id={clip.id} {clip.created_at:%H:%M:%S} {clip.name} [{tags}] {clip.description}")


if __name__ == "__main__":
    main()
