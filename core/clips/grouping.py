# Path: core/clips/grouping.py
# Purpose: Partition an ordered clip sequence into consecutive same-day runs.
# Layer: core/clips.
# Details: Streaming partition; input must already be sorted by creation time.

from __future__ import annotations

from typing import Iterable

from core.models.domain import Clip, DatedClips


def group_by_creation_date(clips: Iterable[Clip]) -> DatedClips:
    """Split ``clips`` into ``(date, clips)`` runs, preserving input order.

    A new group starts whenever a clip's calendar date differs from the date of
    the last group. Each date appears once only when the input is sorted by
    creation time; unsorted input produces repeated, non-adjacent dates.
    Clips without ``created_at`` are not expected here.
    """

    groups: DatedClips = []
    for clip in clips:
        day = clip.created_at.date()
        if not groups or groups[-1][0] != day:
            groups.append((day, []))
        groups[-1][1].append(clip)
    return groups
