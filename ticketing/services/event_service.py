"""
Event catalog service: admin CRUD plus the snapshot lookups the booking core
joins against.

Bookings reference events by id without a foreign key. Snapshot lookups
therefore return None for a missing event, and a failing catalog read is
logged as upstream-unavailable and degraded to None so that listings,
verification and ticket issuance keep working with empty event fields.
"""

from typing import Iterable, Optional

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from ticketing.core.errors import NotFoundError, StorageError
from ticketing.core.logging import get_logger
from ticketing.models.event import Event
from ticketing.schemas.event import EventCreate, EventSnapshot, EventUpdate
from ticketing.services.cache_service import (
    get_cached_event_snapshot,
    invalidate_event_snapshot,
    set_cached_event_snapshot,
)

logger = get_logger(__name__)


async def create_event(db: AsyncSession, event_data: EventCreate) -> Event:
    event = Event(**event_data.model_dump())
    db.add(event)
    try:
        await db.flush()
        await db.commit()
    except SQLAlchemyError as exc:
        await db.rollback()
        logger.error("event_create_failed", title=event_data.title, error=str(exc))
        raise StorageError("Event could not be saved.") from exc

    logger.info("event_created", event_id=event.id, title=event.title, date=event.date)
    return event


async def get_event(db: AsyncSession, event_id: str) -> Event:
    """Get a single event by ID."""
    result = await db.execute(select(Event).where(Event.id == event_id))
    event = result.scalar_one_or_none()

    if not event:
        raise NotFoundError(f"Event {event_id} not found")
    return event


async def list_events(db: AsyncSession) -> list[Event]:
    """All events, newest first."""
    result = await db.execute(select(Event).order_by(Event.created_at.desc()))
    return list(result.scalars().all())


async def update_event(db: AsyncSession, event_id: str, event_data: EventUpdate) -> Event:
    event = await get_event(db, event_id)

    changes = event_data.model_dump(exclude_unset=True)
    for field, value in changes.items():
        setattr(event, field, value)

    try:
        await db.commit()
        await db.refresh(event)
    except SQLAlchemyError as exc:
        await db.rollback()
        logger.error("event_update_failed", event_id=event_id, fields=sorted(changes), error=str(exc))
        raise StorageError("Event could not be saved.") from exc
    await invalidate_event_snapshot(event_id)

    logger.info("event_updated", event_id=event_id, fields=sorted(changes))
    return event


async def delete_event(db: AsyncSession, event_id: str) -> None:
    """Hard delete. Bookings referencing the event keep their event_id."""
    event = await get_event(db, event_id)
    await db.delete(event)
    await db.commit()
    await invalidate_event_snapshot(event_id)

    logger.info("event_deleted", event_id=event_id)


async def get_event_snapshot(db: AsyncSession, event_id: str) -> Optional[EventSnapshot]:
    cached = await get_cached_event_snapshot(event_id)
    if cached:
        return EventSnapshot(**cached)

    try:
        result = await db.execute(select(Event).where(Event.id == event_id))
        event = result.scalar_one_or_none()
    except SQLAlchemyError as exc:
        logger.warning("event_catalog_unavailable", event_id=event_id, error=str(exc))
        return None

    if event is None:
        return None

    snapshot = EventSnapshot.model_validate(event)
    await set_cached_event_snapshot(event_id, snapshot.model_dump())
    return snapshot


async def get_event_snapshots(db: AsyncSession, event_ids: Iterable[str]) -> dict[str, EventSnapshot]:
    """Batch lookup for listings. Missing events are simply absent from the result."""
    ids = set(event_ids)
    if not ids:
        return {}

    try:
        result = await db.execute(select(Event).where(Event.id.in_(ids)))
        events = result.scalars().all()
    except SQLAlchemyError as exc:
        logger.warning("event_catalog_unavailable", event_ids=len(ids), error=str(exc))
        return {}

    return {event.id: EventSnapshot.model_validate(event) for event in events}
