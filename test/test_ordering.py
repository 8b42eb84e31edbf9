"""
Tests for smart ordering

Covers the effective sort key, tie-breaking, ordering mode, reorder
validation and the reschedule rule.
"""

from datetime import datetime, timedelta, timezone
from types import SimpleNamespace

import pytest

from sharehub.exceptions import ConflictError, NotFoundError, ValidationFailedError
from sharehub.services import ordering

BASE = datetime(2025, 6, 1, 9, 0, tzinfo=timezone.utc)


def item(entity_id, display_order=None, scheduled_time=None, created_at=BASE):
    return SimpleNamespace(
        id=entity_id, display_order=display_order, scheduled_time=scheduled_time, created_at=created_at
    )


class TestEffectiveSortKey:
    """Test the numeric key each entity sorts at"""

    def test_display_order_wins(self):
        entity = item(1, display_order=3, scheduled_time=BASE)
        assert ordering.effective_sort_key(entity) == 3.0

    def test_scheduled_time_as_epoch_seconds(self):
        entity = item(1, scheduled_time=BASE)
        assert ordering.effective_sort_key(entity) == BASE.timestamp()

    def test_naive_scheduled_time_is_treated_as_utc(self):
        entity = item(1, scheduled_time=BASE.replace(tzinfo=None))
        assert ordering.effective_sort_key(entity) == BASE.timestamp()

    def test_unscheduled_sorts_last(self):
        entity = item(1)
        assert ordering.effective_sort_key(entity) == ordering.UNSCHEDULED_SENTINEL


class TestSortSmart:
    """Test sorting of sibling entities"""

    def test_manual_positions_sort_before_timestamps(self):
        timed = item(1, scheduled_time=BASE)
        pinned = item(2, display_order=5)
        assert [e.id for e in ordering.sort_smart([timed, pinned])] == [2, 1]

    def test_chronological_order(self):
        later = item(1, scheduled_time=BASE + timedelta(hours=2))
        earlier = item(2, scheduled_time=BASE)
        assert [e.id for e in ordering.sort_smart([later, earlier])] == [2, 1]

    def test_unscheduled_entities_come_last(self):
        bare = item(1)
        timed = item(2, scheduled_time=BASE)
        pinned = item(3, display_order=0)
        assert [e.id for e in ordering.sort_smart([bare, timed, pinned])] == [3, 2, 1]

    def test_duplicate_positions_break_ties_by_created_at(self):
        newer = item(1, display_order=0, created_at=BASE + timedelta(seconds=5))
        older = item(2, display_order=0, created_at=BASE)
        assert [e.id for e in ordering.sort_smart([newer, older])] == [2, 1]

    def test_full_ties_break_by_id(self):
        second = item(7, display_order=1)
        first = item(4, display_order=1)
        assert [e.id for e in ordering.sort_smart([second, first])] == [4, 7]

    def test_does_not_mutate_input(self):
        entities = [item(1, display_order=2), item(2, display_order=1)]
        ordering.sort_smart(entities)
        assert [e.id for e in entities] == [1, 2]


class TestOrderingMode:
    def test_manual_when_any_sibling_pinned(self):
        assert ordering.ordering_mode([item(1, scheduled_time=BASE), item(2, display_order=0)]) == "manual"

    def test_chronological_otherwise(self):
        assert ordering.ordering_mode([item(1, scheduled_time=BASE), item(2)]) == "chronological"

    def test_empty_group_is_chronological(self):
        assert ordering.ordering_mode([]) == "chronological"


class TestNextDisplayOrder:
    def test_first_position_is_zero(self):
        assert ordering.next_display_order([]) == 0

    def test_ignores_unpinned_siblings(self):
        assert ordering.next_display_order([item(1, scheduled_time=BASE)]) == 0

    def test_appends_after_highest_position(self):
        assert ordering.next_display_order([item(1, display_order=0), item(2, display_order=4)]) == 5


class TestEnsurePositionFree:
    def test_free_position(self):
        ordering.ensure_position_free([item(1, display_order=0), item(2, scheduled_time=BASE)], 1, "Session")

    def test_taken_position(self):
        with pytest.raises(ConflictError) as exc_info:
            ordering.ensure_position_free([item(1, display_order=0), item(2, display_order=1)], 1, "Speech")
        assert exc_info.value.details["taken_by"] == 2

    def test_own_position_is_free(self):
        ordering.ensure_position_free([item(1, display_order=0), item(2, display_order=1)], 1, "Speech", exclude_id=2)

    def test_no_position_requested(self):
        ordering.ensure_position_free([item(1)], None, "Session")


class TestValidateReorder:
    """Test reorder request validation against the sibling set"""

    def test_accepts_permutation(self):
        ordering.validate_reorder([1, 2, 3], [3, 1, 2], "Session")

    def test_foreign_id_is_not_found(self):
        with pytest.raises(NotFoundError) as exc_info:
            ordering.validate_reorder([1, 2], [1, 2, 99], "Session")
        assert exc_info.value.details["resource_id"] == 99

    def test_missing_id_is_rejected(self):
        with pytest.raises(ValidationFailedError) as exc_info:
            ordering.validate_reorder([1, 2, 3], [2, 1], "Session")
        assert exc_info.value.details["missing_ids"] == [3]

    def test_duplicate_id_is_rejected(self):
        with pytest.raises(ValidationFailedError) as exc_info:
            ordering.validate_reorder([1, 2], [1, 1, 2], "Speech")
        assert exc_info.value.details["duplicate_ids"] == [1]


class TestApplyReorder:
    def test_positions_follow_request(self):
        entities = [item(1), item(2, scheduled_time=BASE), item(3, display_order=9)]
        result = ordering.apply_reorder(entities, [3, 1, 2])
        assert [e.id for e in result] == [3, 1, 2]
        assert [e.display_order for e in result] == [0, 1, 2]


class TestReschedule:
    def test_reschedule_drops_manual_position(self):
        entity = item(1, display_order=2, scheduled_time=BASE)
        ordering.reschedule(entity, BASE + timedelta(hours=1))
        assert entity.display_order is None
        assert entity.scheduled_time == BASE + timedelta(hours=1)

    def test_same_time_still_unpins(self):
        entity = item(1, display_order=0, scheduled_time=BASE)
        ordering.reschedule(entity, BASE)
        assert entity.display_order is None

    def test_clearing_time(self):
        entity = item(1, scheduled_time=BASE)
        ordering.reschedule(entity, None)
        assert entity.scheduled_time is None
        assert entity.display_order is None
