"""Habit repository behavior, run against every storage backend."""

from __future__ import annotations

from datetime import date, datetime, timedelta, timezone

import pytest

from habitkit.errors import NotFoundError, ValidationError
from habitkit.infra.repositories import StorageHabitRepository
from habitkit.models import Frequency, FrequencyType, HabitType, Reminder, TargetType


class TestCreateHabit:
    def test_create_assigns_id_and_timestamp(self, habit_factory, clock):
        habit = habit_factory(name="Exercise")

        assert len(habit.id) == 32
        assert habit.created_at == datetime(2024, 3, 1, 9, 0)
        assert habit.type is HabitType.YES_NO

    def test_created_habit_round_trips(self, habit_repo):
        created = habit_repo.create(
            name="Run",
            color="#00AA00",
            type="measurable",
            question="How far did you run?",
            unit="km",
            target=5,
            target_type="at_least",
            frequency=Frequency(FrequencyType.X_TIMES_IN_Y_DAYS, value=3, period=7),
            reminder=Reminder(enabled=True, time="06:30"),
            notes="Morning only",
        )

        stored = habit_repo.get_by_id(created.id)

        assert stored == created
        assert stored.target_type is TargetType.AT_LEAST
        assert stored.frequency.period == 7

    def test_invalid_habit_is_not_written(self, habit_repo):
        with pytest.raises(ValidationError):
            habit_repo.create(name="  ", color="#fff", type="yes_no")

        assert habit_repo.get_all() == []

    def test_aware_clock_is_stored_as_local_naive(self, backend):
        moment = datetime(2024, 3, 1, 12, 0, tzinfo=timezone.utc)
        repo = StorageHabitRepository(backend, clock=lambda: moment)

        habit = repo.create(name="Stretch", color="#fff", type="yes_no")

        assert habit.created_at.tzinfo is None
        assert habit.created_at == moment.astimezone().replace(tzinfo=None)
        assert repo.get_by_id(habit.id).created_at == habit.created_at


class TestQueryHabits:
    def test_get_all_newest_first(self, habit_factory, habit_repo):
        first = habit_factory(name="First")
        second = habit_factory(name="Second")
        third = habit_factory(name="Third")

        assert [h.id for h in habit_repo.get_all()] == [third.id, second.id, first.id]

    def test_same_timestamp_ordered_by_id(self, backend):
        repo = StorageHabitRepository(backend, clock=lambda: datetime(2024, 1, 1))
        habits = [repo.create(name=f"H{i}", color="#fff", type="yes_no") for i in range(4)]

        expected = sorted((h.id for h in habits), reverse=True)
        assert [h.id for h in repo.get_all()] == expected

    def test_get_by_id_unknown_is_none(self, habit_repo):
        assert habit_repo.get_by_id("does-not-exist") is None


class TestUpdateHabit:
    def test_partial_update_merges(self, habit_factory, habit_repo):
        habit = habit_factory(name="Read", notes="Fiction")

        updated = habit_repo.update(habit.id, name="Read more")

        assert updated.name == "Read more"
        assert updated.notes == "Fiction"
        assert updated.color == habit.color
        assert updated.created_at == habit.created_at
        assert habit_repo.get_by_id(habit.id) == updated

    def test_update_nested_values(self, habit_factory, habit_repo):
        habit = habit_factory()

        habit_repo.update(
            habit.id,
            frequency=Frequency("every_x_days", 2),
            reminder=Reminder(enabled=True, time="21:00"),
        )
        stored = habit_repo.get_by_id(habit.id)

        assert stored.frequency == Frequency(FrequencyType.EVERY_X_DAYS, 2)
        assert stored.reminder.time == "21:00"

    def test_update_unknown_habit(self, habit_repo):
        with pytest.raises(NotFoundError):
            habit_repo.update("missing", name="Nope")

    def test_not_found_is_a_lookup_error(self, habit_repo):
        with pytest.raises(LookupError):
            habit_repo.update("missing", name="Nope")

    @pytest.mark.parametrize(
        "changes",
        [
            {"id": "other"},
            {"created_at": datetime(2000, 1, 1)},
            {"type": "measurable"},
            {"colour": "#000"},
            {"name": ""},
            {"unit": "km"},
        ],
    )
    def test_rejected_changes_leave_habit_intact(self, habit_factory, habit_repo, changes):
        habit = habit_factory()

        with pytest.raises(ValidationError):
            habit_repo.update(habit.id, **changes)

        assert habit_repo.get_by_id(habit.id) == habit

    def test_restating_immutable_fields_is_allowed(self, habit_factory, habit_repo):
        habit = habit_factory()

        updated = habit_repo.update(habit.id, id=habit.id, type="yes_no", color="#123456")

        assert updated.color == "#123456"


class TestDeleteHabit:
    def test_delete_cascades_to_entries(self, habit_factory, habit_repo, entry_repo):
        keep = habit_factory(name="Keep")
        drop = habit_factory(name="Drop")
        start = date(2024, 5, 1)
        for offset in range(3):
            entry_repo.upsert(drop.id, start + timedelta(days=offset), "yes")
        entry_repo.upsert(keep.id, start, "no")

        habit_repo.delete(drop.id)

        assert habit_repo.get_by_id(drop.id) is None
        assert entry_repo.get_all_for_habit(drop.id) == []
        assert len(entry_repo.get_all_for_habit(keep.id)) == 1

    def test_delete_unknown_is_silent(self, habit_repo):
        habit_repo.delete("missing")


class TestMalformedFields:
    """Both backends reject the same malformed input before anything is written."""

    @pytest.mark.parametrize(
        "overrides",
        [
            {"color": None},
            {"color": 7},
            {"question": None},
            {"notes": 5},
            {"type": "measurable", "unit": 3},
        ],
        ids=["color-none", "color-int", "question-none", "notes-int", "unit-int"],
    )
    def test_create_rejects_non_text(self, habit_repo, overrides):
        fields = {"name": "Floss", "color": "#fff", "type": "yes_no"}
        fields.update(overrides)

        with pytest.raises(ValidationError):
            habit_repo.create(**fields)
        assert habit_repo.get_all() == []

    def test_update_rejects_non_text(self, habit_factory, habit_repo):
        habit = habit_factory()

        with pytest.raises(ValidationError):
            habit_repo.update(habit.id, color=None)

        assert habit_repo.get_by_id(habit.id) == habit
