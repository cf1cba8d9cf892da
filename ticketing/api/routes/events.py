"""
Event catalog endpoints. Reads are public, writes require an admin token.

Create and update take multipart form data so the event image and sponsor
logos can be uploaded alongside the text fields.
"""

from typing import Optional

import pydantic
from fastapi import APIRouter, Depends, File, Form, UploadFile, status
from fastapi.exceptions import RequestValidationError
from sqlalchemy.ext.asyncio import AsyncSession

from ticketing.api.deps import get_media_storage
from ticketing.core.errors import TicketingError, ValidationError
from ticketing.core.logging import get_logger
from ticketing.core.security import get_current_admin_id
from ticketing.db.session import get_db
from ticketing.schemas.event import EventCreate, EventDeleteResponse, EventResponse, EventUpdate
from ticketing.services.event_service import create_event, delete_event, get_event, list_events, update_event
from ticketing.services.interfaces.media_storage import MediaStorage
from ticketing.services.media_storage import EVENT_IMAGES, SPONSOR_LOGOS, read_upload

logger = get_logger(__name__)

router = APIRouter(prefix="/events", tags=["Events"])

MAX_SPONSOR_LOGOS = 10


def _build(schema, fields: dict):
    try:
        return schema(**fields)
    except pydantic.ValidationError as exc:
        raise RequestValidationError(exc.errors(include_url=False, include_context=False))


async def _store_media(
    storage: MediaStorage,
    image: Optional[UploadFile],
    sponsor_logos: Optional[list[UploadFile]],
) -> tuple[Optional[str], list[str]]:
    """Save the uploaded image and logos. On any failure nothing stays stored."""
    logos = [logo for logo in sponsor_logos or [] if logo.filename]
    if len(logos) > MAX_SPONSOR_LOGOS:
        raise ValidationError(f"At most {MAX_SPONSOR_LOGOS} sponsor logos are allowed")

    stored: list[str] = []
    try:
        image_ref = None
        if image is not None and image.filename:
            image_ref = await storage.save(
                EVENT_IMAGES, image.filename, image.content_type or "", await read_upload(image)
            )
            stored.append(image_ref)

        logo_refs = []
        for logo in logos:
            ref = await storage.save(SPONSOR_LOGOS, logo.filename, logo.content_type or "", await read_upload(logo))
            stored.append(ref)
            logo_refs.append(ref)
    except TicketingError:
        await _discard(storage, stored)
        raise

    return image_ref, logo_refs


async def _discard(storage: MediaStorage, refs) -> None:
    for ref in refs:
        if ref:
            await storage.delete(ref)


@router.post("/", response_model=EventResponse, status_code=status.HTTP_201_CREATED)
async def create_event_endpoint(
    title: str = Form(...),
    description: str = Form(...),
    date: str = Form(...),
    event_time: Optional[str] = Form(None),
    category: Optional[str] = Form(None),
    address: Optional[str] = Form(None),
    location: Optional[str] = Form(None),
    standard_price: Optional[str] = Form(None),
    vip_price: Optional[str] = Form(None),
    refreshments: Optional[str] = Form(None),
    image: Optional[UploadFile] = File(None),
    sponsor_logos: Optional[list[UploadFile]] = File(None),
    admin_id: str = Depends(get_current_admin_id),
    db: AsyncSession = Depends(get_db),
    storage: MediaStorage = Depends(get_media_storage),
):
    """Create a new event with an optional image and up to 10 sponsor logos."""
    event_data = _build(
        EventCreate,
        {
            "title": title,
            "description": description,
            "date": date,
            "event_time": event_time,
            "category": category,
            "address": address,
            "location": location,
            "standard_price": standard_price,
            "vip_price": vip_price,
            "refreshments": refreshments,
        },
    )

    image_ref, logo_refs = await _store_media(storage, image, sponsor_logos)
    event_data = event_data.model_copy(update={"image_url": image_ref, "sponsor_logos": logo_refs})
    try:
        return await create_event(db, event_data)
    except TicketingError:
        await _discard(storage, [image_ref, *logo_refs])
        raise


@router.get("/", response_model=list[EventResponse])
async def list_events_endpoint(db: AsyncSession = Depends(get_db)):
    """List events, newest first."""
    return await list_events(db)


@router.get("/{event_id}", response_model=EventResponse)
async def get_event_endpoint(event_id: str, db: AsyncSession = Depends(get_db)):
    return await get_event(db, event_id)


@router.put("/{event_id}", response_model=EventResponse)
async def update_event_endpoint(
    event_id: str,
    title: Optional[str] = Form(None),
    description: Optional[str] = Form(None),
    date: Optional[str] = Form(None),
    event_time: Optional[str] = Form(None),
    category: Optional[str] = Form(None),
    address: Optional[str] = Form(None),
    location: Optional[str] = Form(None),
    standard_price: Optional[str] = Form(None),
    vip_price: Optional[str] = Form(None),
    refreshments: Optional[str] = Form(None),
    image: Optional[UploadFile] = File(None),
    sponsor_logos: Optional[list[UploadFile]] = File(None),
    admin_id: str = Depends(get_current_admin_id),
    db: AsyncSession = Depends(get_db),
    storage: MediaStorage = Depends(get_media_storage),
):
    """
    Partial update: blank or missing fields keep their current value.

    An uploaded image replaces image_url, uploaded logos replace the whole
    sponsor_logos list. Replaced files are removed after the update commits.
    """
    fields = {
        "title": title,
        "description": description,
        "date": date,
        "event_time": event_time,
        "category": category,
        "address": address,
        "location": location,
        "standard_price": standard_price,
        "vip_price": vip_price,
        "refreshments": refreshments,
    }
    changes = {name: value for name, value in fields.items() if value is not None and value.strip()}
    _build(EventUpdate, changes)

    current = await get_event(db, event_id)
    previous_image = current.image_url
    previous_logos = list(current.sponsor_logos or [])

    image_ref, logo_refs = await _store_media(storage, image, sponsor_logos)
    if image_ref:
        changes["image_url"] = image_ref
    if logo_refs:
        changes["sponsor_logos"] = logo_refs

    try:
        event = await update_event(db, event_id, EventUpdate(**changes))
    except TicketingError:
        await _discard(storage, [image_ref, *logo_refs])
        raise

    replaced = []
    if image_ref and previous_image:
        replaced.append(previous_image)
    if logo_refs:
        replaced.extend(previous_logos)
    if replaced:
        await _discard(storage, replaced)
        logger.info("event_media_replaced", event_id=event_id, removed=len(replaced))
    return event


@router.delete("/{event_id}", response_model=EventDeleteResponse)
async def delete_event_endpoint(
    event_id: str,
    admin_id: str = Depends(get_current_admin_id),
    db: AsyncSession = Depends(get_db),
):
    """Delete an event. Existing bookings keep working with empty event details."""
    await delete_event(db, event_id)
    return EventDeleteResponse(message="Event deleted successfully", event_id=event_id)
