# Path: core/clips/associations.py
# Purpose: Maintain the many-to-many link set between clips and tags.
# Layer: core/clips.
# Details: The (clip_id, tag_id) primary key plus INSERT OR IGNORE keeps the link table a set.

from __future__ import annotations

from typing import Iterable, Set

from core.store.sqlite_store import ClipStore


class AssociationManager:
    """Create, drop, and read clip-tag associations."""

    def __init__(self, store: ClipStore) -> None:
        self._store = store

    def link(self, clip_id: int, tag_ids: Iterable[int]) -> None:
        """Associate ``clip_id`` with every id in ``tag_ids``.

        Repeated ids in one call, and ids already linked by an earlier call, are
        written at most once.
        """

        unique_ids = list(dict.fromkeys(int(tag_id) for tag_id in tag_ids))
        if not unique_ids:
            return

        statement = self._store.prepare(
            "INSERT OR IGNORE INTO clips_tags (clip_id, tag_id) VALUES (:clip_id, :tag_id)"
        )
        with self._store.transaction():
            for tag_id in unique_ids:
                statement.bind("clip_id", clip_id).bind("tag_id", tag_id)
                self._store.execute(statement, operation="link_tags", target=clip_id)

    def unlink_all(self, clip_id: int) -> int:
        """Drop every association of ``clip_id`` and return how many were removed."""

        result = self._store.run(
            "DELETE FROM clips_tags WHERE clip_id = :clip_id",
            {"clip_id": clip_id},
            operation="unlink_tags",
            target=clip_id,
        )
        return max(result.rowcount, 0)

    def tags_of(self, clip_id: int) -> Set[str]:
        """Return the tag names linked to ``clip_id``; callers must not rely on ordering."""

        rows = self._store.run(
            """
            SELECT tags.name
            FROM tags
            JOIN clips_tags ON tags.id = clips_tags.tag_id
            WHERE clips_tags.clip_id = :clip_id
            """,
            {"clip_id": clip_id},
            operation="tags_of",
            target=clip_id,
        ).rows
        return {str(row["name"]) for row in rows}
