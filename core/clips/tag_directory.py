# Path: core/clips/tag_directory.py
# Purpose: Resolve tag names to ids with optional create-on-miss.
# Layer: core/clips.
# Details: Tag names are unique in the tags table; blank names are ignored.

from __future__ import annotations

import logging
from typing import Iterable, List

from core.models.domain import Tag
from core.store.sqlite_store import ClipStore

logger = logging.getLogger(__name__)


class TagDirectory:
    """Name to id resolution over the tags table."""

    def __init__(self, store: ClipStore) -> None:
        self._store = store

    def resolve(self, names: Iterable[str], create_if_missing: bool = False) -> List[int]:
        """Map tag names to ids, preserving input order.

        With ``create_if_missing`` every non-blank name yields exactly one id, creating
        directory entries as needed. Without it, unknown names are skipped.
        """

        ids: List[int] = []
        with self._store.transaction():
            for raw_name in names:
                name = raw_name.strip()
                if not name:
                    continue
                rows = self._store.run(
                    "SELECT id FROM tags WHERE name = :name",
                    {"name": name},
                    operation="resolve_tag",
                    target=name,
                ).rows
                if rows:
                    ids.append(int(rows[0]["id"]))
                    continue
                if not create_if_missing:
                    continue
                result = self._store.run(
                    "INSERT INTO tags (name) VALUES (:name)",
                    {"name": name},
                    operation="create_tag",
                    target=name,
                )
                logger.debug("Created tag %r with id %d", name, result.last_insert_id)
                ids.append(result.last_insert_id)
        return ids

    def all(self) -> List[Tag]:
        rows = self._store.run("SELECT id, name FROM tags ORDER BY name", operation="list_tags").rows
        return [Tag(id=int(row["id"]), name=str(row["name"])) for row in rows]

    def all_names(self) -> List[str]:
        """Return every tag name in alphabetical order."""

        return [tag.name for tag in self.all()]
