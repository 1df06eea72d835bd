"""Tests for grouping ordered clips into same-day runs."""

from datetime import date, datetime

from core.clips import group_by_creation_date
from core.models.domain import Clip


def clip_at(clip_id, *when):
    return Clip(id=clip_id, name=f"{clip_id}", created_at=datetime(*when))


def test_empty_input():
    assert group_by_creation_date([]) == []


def test_descending_input_groups_by_day():
    clips = [
        clip_at(5, 2024, 5, 3, 8, 0),
        clip_at(4, 2024, 5, 2, 23, 59, 59),
        clip_at(3, 2024, 5, 2, 0, 0, 0),
        clip_at(2, 2024, 5, 1, 12, 0),
        clip_at(1, 2024, 5, 1, 7, 0),
    ]
    groups = group_by_creation_date(clips)

    assert [day for day, _ in groups] == [date(2024, 5, 3), date(2024, 5, 2), date(2024, 5, 1)]
    assert [[c.id for c in members] for _, members in groups] == [[5], [4, 3], [2, 1]]
    assert sum(len(members) for _, members in groups) == len(clips)
    assert all(groups[i][0] != groups[i + 1][0] for i in range(len(groups) - 1))


def test_unsorted_input_repeats_dates():
    clips = [
        clip_at(1, 2024, 5, 1, 9, 0),
        clip_at(2, 2024, 5, 2, 9, 0),
        clip_at(3, 2024, 5, 1, 10, 0),
    ]
    groups = group_by_creation_date(clips)
    assert [day for day, _ in groups] == [date(2024, 5, 1), date(2024, 5, 2), date(2024, 5, 1)]


def test_accepts_any_iterable():
    clips = (clip_at(i, 2024, 1, 1, i, 0) for i in range(3))
    [(day, members)] = group_by_creation_date(clips)
    assert day == date(2024, 1, 1)
    assert [c.id for c in members] == [0, 1, 2]
