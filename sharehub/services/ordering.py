"""
Smart ordering for sibling entities (sessions in an event, speeches in a session).

An entity with a non-null ``display_order`` sorts at that number. An entity
without one sorts at the epoch-seconds value of its ``scheduled_time``; with
neither it sorts after everything else. The two kinds of key are compared
numerically in a single pass, so manual positions and timestamps interleave.

Duplicate keys (e.g. two concurrent inserts that both computed the same next
position) are tie-broken by ``created_at`` and then ``id``.
"""

from collections.abc import Iterable, Sequence
from datetime import datetime, timezone
from typing import Any

from sharehub.exceptions import ConflictError, NotFoundError, ValidationFailedError
from sharehub.utils.timeutils import as_utc

UNSCHEDULED_SENTINEL = float("inf")
_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)

MANUAL = "manual"
CHRONOLOGICAL = "chronological"


def effective_sort_key(entity: Any) -> float:
    display_order = getattr(entity, "display_order", None)
    if display_order is not None:
        return float(display_order)
    scheduled_time = getattr(entity, "scheduled_time", None)
    if scheduled_time is not None:
        return as_utc(scheduled_time).timestamp()
    return UNSCHEDULED_SENTINEL


def _tie_breaker(entity: Any) -> tuple:
    created_at = as_utc(getattr(entity, "created_at", None)) or _EPOCH
    return created_at, getattr(entity, "id", 0) or 0


def sort_smart(entities: Iterable[Any]) -> list[Any]:
    """Return a new list sorted by the effective key."""
    return sorted(entities, key=lambda e: (effective_sort_key(e), *_tie_breaker(e)))


def sort_by_display_order(entities: Iterable[Any]) -> list[Any]:
    """Plain ascending sort used for slides and photos (display_order is never null)."""
    return sorted(entities, key=lambda e: (e.display_order, *_tie_breaker(e)))


def ordering_mode(entities: Iterable[Any]) -> str:
    """'manual' when at least one sibling is pinned, otherwise 'chronological'."""
    if any(getattr(e, "display_order", None) is not None for e in entities):
        return MANUAL
    return CHRONOLOGICAL


def next_display_order(entities: Iterable[Any]) -> int:
    orders = [e.display_order for e in entities if e.display_order is not None]
    if not orders:
        return 0
    return max(orders) + 1


def ensure_position_free(
    entities: Iterable[Any], display_order: int | None, resource_type: str, exclude_id: int | None = None
) -> None:
    """Manual positions are unique among siblings; raise ConflictError when one is taken."""
    if display_order is None:
        return
    for entity in entities:
        if entity.id != exclude_id and entity.display_order == display_order:
            raise ConflictError(
                f"Position {display_order} is already taken by {resource_type.lower()} {entity.id}",
                details={"field": "display_order", "display_order": display_order, "taken_by": entity.id},
            )


def validate_reorder(sibling_ids: Iterable[int], requested_ids: Sequence[int], resource_type: str) -> None:
    """
    Check a reorder request against the full sibling set.

    The request must list every sibling exactly once. Ids that belong to a
    different parent raise NotFoundError; duplicates or omissions raise
    ValidationFailedError. Nothing is written when this raises.
    """
    siblings = set(sibling_ids)

    seen: set[int] = set()
    duplicates = []
    for requested in requested_ids:
        if requested in seen:
            duplicates.append(requested)
        seen.add(requested)
    if duplicates:
        raise ValidationFailedError(
            f"Duplicate {resource_type.lower()} ids in reorder request",
            details={"duplicate_ids": sorted(set(duplicates))},
        )

    foreign = [requested for requested in requested_ids if requested not in siblings]
    if foreign:
        raise NotFoundError(resource_type, foreign[0])

    missing = siblings - seen
    if missing:
        raise ValidationFailedError(
            f"Reorder request must include every {resource_type.lower()} in the group",
            details={"missing_ids": sorted(missing)},
        )


def apply_reorder(entities: Iterable[Any], ordered_ids: Sequence[int]) -> list[Any]:
    """Assign display_order = index following ordered_ids; returns entities in that order."""
    by_id = {e.id: e for e in entities}
    reordered = []
    for index, entity_id in enumerate(ordered_ids):
        entity = by_id[entity_id]
        entity.display_order = index
        reordered.append(entity)
    return reordered


def reschedule(entity: Any, scheduled_time: datetime | None) -> None:
    """
    Set a new scheduled_time. A pinned entity loses its manual position and
    falls back to chronological ordering, even if the time is unchanged.
    """
    entity.scheduled_time = scheduled_time
    if entity.display_order is not None:
        entity.display_order = None
