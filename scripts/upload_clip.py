# Path: scripts/upload_clip.py
# Purpose: CLI tool to upload one archived clip to a configured server.
# Layer: scripts.
# Details: Prints the resulting location and can put it on the clipboard for pasting.

from __future__ import annotations

import argparse
import sys
from pathlib import Path

# Ensure project root is on sys.path when running as a script.
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from config import AppSettings, configure_logging
from core.archive import ClipArchive
from core.capture.sources import ClipboardSource
from core.errors import ClipArchiveError


def main() -> None:
    """Upload a clip and report where it landed."""

    parser = argparse.ArgumentParser(description="Upload a clip to a server")
    parser.add_argument("clip_id", type=int, help="Id of the clip to upload")
    parser.add_argument("server_id", type=int, help="Id of the destination server")
    parser.add_argument("--copy", action="store_true", help="Copy the resulting URL to the clipboard")
    parser.add_argument("--db", type=Path, default=None, help="Override the archive database path")
    args = parser.parse_args()

    settings = AppSettings.from_env()
    if args.db is not None:
        settings.database_path = args.db
    configure_logging(settings.log_level)

    with ClipArchive.from_settings(settings) as archive:
        try:
            clip = archive.clips.find_by_id(args.clip_id)
            record = archive.servers.upload(clip, archive.servers.find_by_id(args.server_id))
        except ClipArchiveError as exc:
            print(f"Upload failed: {exc}", file=sys.stderr)
            sys.exit(1)

    print(record.url)
    if args.copy:
        ClipboardSource().write_text(record.url)
        print("Copied to clipboard.")


if __name__ == "__main__":
    main()
