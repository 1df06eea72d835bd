# Path: core/search/filters.py
# Purpose: Compile sparse filter criteria into one executable query against the clip store.
# Layer: core/search.
# Details: Present predicates are ANDed; absent ones add no clause and no subquery.

from __future__ import annotations

import logging
from datetime import date, datetime, time, timedelta
from typing import Dict, Iterable, List, Tuple

from core.clips.tag_directory import TagDirectory
from core.errors import InvalidFilter
from core.models.domain import FilterCriteria
from core.store.sqlite_store import Statement

logger = logging.getLogger(__name__)

BASE_SQL = "SELECT clips.* FROM clips"
ORDER_SQL = "ORDER BY clips.id DESC"
MATCH_NOTHING = "0"


def validate_criteria(criteria: FilterCriteria) -> None:
    """Raise :class:`InvalidFilter` for combinations that cannot be compiled."""

    if criteria.distance_threshold < 0:
        raise InvalidFilter(
            f"distance threshold must be >= 0, got {criteria.distance_threshold}",
            operation="compile_filter",
        )
    if criteria.date_from is not None and criteria.date_to is not None and criteria.date_from > criteria.date_to:
        raise InvalidFilter(
            f"date_from {criteria.date_from} is after date_to {criteria.date_to}",
            operation="compile_filter",
        )


class FilterCompiler:
    """Translate :class:`FilterCriteria` into a SQL statement ordered by id descending.

    Date bounds: ``date_from`` excludes everything up to and including its midnight;
    ``date_to`` includes its whole calendar day. Server and tag constraints are
    ``EXISTS`` subqueries so a clip matching several rows is returned once.
    """

    def __init__(self, tags: TagDirectory) -> None:
        self._tags = tags

    def compile(self, criteria: FilterCriteria) -> Statement:
        validate_criteria(criteria)

        where: List[str] = []
        params: Dict[str, object] = {}

        if criteria.date_from is not None:
            where.append("DATETIME(clips.created_at) > DATETIME(:date_from)")
            params["date_from"] = _midnight(criteria.date_from)

        if criteria.date_to is not None:
            where.append("DATETIME(clips.created_at) < DATETIME(:date_to)")
            params["date_to"] = _midnight(criteria.date_to + timedelta(days=1))

        if criteria.server_ids is not None:
            placeholders, bound = _in_list("server_id", sorted(criteria.server_ids))
            if placeholders:
                where.append(
                    "EXISTS (SELECT 1 FROM uploads WHERE uploads.clip_id = clips.id"
                    f" AND uploads.server_id IN ({placeholders}))"
                )
                params.update(bound)
            else:
                where.append(MATCH_NOTHING)

        if criteria.tag_names is not None:
            tag_ids = self._tags.resolve(sorted(criteria.tag_names), create_if_missing=False)
            placeholders, bound = _in_list("tag_id", tag_ids)
            if placeholders:
                where.append(
                    "EXISTS (SELECT 1 FROM clips_tags WHERE clips_tags.clip_id = clips.id"
                    f" AND clips_tags.tag_id IN ({placeholders}))"
                )
                params.update(bound)
            else:
                where.append(MATCH_NOTHING)

        sql = [BASE_SQL]
        if where:
            sql.append("WHERE " + " AND ".join(where))
        sql.append(ORDER_SQL)

        statement = Statement(" ".join(sql))
        for name, value in params.items():
            statement.bind(name, value)
        logger.debug("Compiled filter %s -> %s %s", criteria, statement.sql, statement.params)
        return statement


def _midnight(day: date) -> str:
    return datetime.combine(day, time.min).isoformat(sep=" ")


def _in_list(prefix: str, values: Iterable[int]) -> Tuple[str, Dict[str, int]]:
    """Return ``:prefix_0, :prefix_1, ...`` and the matching bindings."""

    bound = {f"{prefix}_{index}": int(value) for index, value in enumerate(dict.fromkeys(values))}
    return ", ".join(f":{name}" for name in bound), bound
