# Path: scripts/ingest_clips.py
# Purpose: CLI tool to ingest files or the current clipboard into the clip archive.
# Layer: scripts.
# Details: Demonstrates how to wire capture sources, settings, and the clip repository together.

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import List

# Ensure project root is on sys.path when running as a script.
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from tqdm import tqdm

from config import AppSettings, configure_logging
from core.archive import ClipArchive
from core.capture.sources import ClipboardSource, FileDropSource
from core.models.domain import RawClip


def main() -> None:
    """Ingest the given files (or the clipboard) as one tagged batch."""

    parser = argparse.ArgumentParser(description="Ingest clips into the archive")
    parser.add_argument("paths", nargs="*", type=Path, help="Files to ingest")
    parser.add_argument("--clipboard", action="store_true", help="Ingest the current clipboard contents instead")
    parser.add_argument("--tag", dest="tags", action="append", default=[], help="Tag to attach (repeatable)")
    parser.add_argument("--description", default="", help="Description shared by every clip in the batch")
    parser.add_argument("--db", type=Path, default=None, help="Override the archive database path")
    args = parser.parse_args()

    settings = AppSettings.from_env()
    if args.db is not None:
        settings.database_path = args.db
    configure_logging(settings.log_level)

    raw_clips: List[RawClip] = []
    if args.clipboard:
        raw_clips = ClipboardSource().read()
    else:
        source = FileDropSource()
        for path in tqdm(args.paths, desc="Reading files", unit="file"):
            clip = source.read_path(path)
            if clip is None:
                print(f"Skipping {path}: not a readable file", file=sys.stderr)
                continue
            raw_clips.append(clip)

    if not raw_clips:
        print("Nothing to ingest.")
        return

    with ClipArchive.from_settings(settings) as archive:
        clips = archive.clips.ingest(raw_clips, args.tags, args.description)

    for clip in clips:
        print(f"id={clip.id} name={clip.name} image={clip.is_image} phash={clip.phash:016x}")
    print(f"Ingested {len(clips)} clip(s) into {settings.database_path}")


if __name__ == "__main__":
    main()
