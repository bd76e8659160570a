from fastapi import APIRouter, HTTPException, Depends, File, Form, Query, Request, UploadFile, status
from typing import List, Optional
from datetime import datetime, timezone
from pymongo.database import Database

from api.errors import InvalidPayloadError, MediaIngestionError
from api.event_service import MAX_PAGE, get_event_service
from api.media import MediaStorage
from api.models import EventResponse, EventMessage, EventPage, EventList
from api.mongo import get_db
from api.routes import get_config, get_current_user, is_admin
from utils.logger import get_logger

logger = get_logger(__name__)

# Create router for event endpoints
event_router = APIRouter(prefix="/api/events", tags=["events"])


def get_media_storage(request: Request) -> MediaStorage:
    """Dependency returning the app's media storage."""
    return request.app.state.media


def parse_event_date(value: Optional[str]) -> Optional[datetime]:
    """
    Parse an ISO-8601 form value; blank values mean 'not provided'.

    The result is naive UTC with millisecond precision, which is exactly what
    MongoDB stores and hands back. Values without an offset are taken as UTC.
    """
    if value is None or not value.strip():
        return None
    try:
        parsed = datetime.fromisoformat(value.strip())
    except ValueError:
        raise HTTPException(status_code=400, detail=f"Invalid date: {value}")
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
    return parsed.replace(microsecond=parsed.microsecond // 1000 * 1000)


async def ingest(media: MediaStorage, photos, videos) -> dict:
    try:
        return await media.save_uploads({"photos": photos, "videos": videos})
    except MediaIngestionError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


def all_paths(stored: dict) -> List[str]:
    return stored.get("photos", []) + stored.get("videos", [])


@event_router.get("", response_model=EventPage)
async def list_events(
    page: int = Query(1, ge=1, le=MAX_PAGE),
    limit: int = Query(10, ge=1),
    current_user=Depends(get_current_user),
    db: Database = Depends(get_db),
    media: MediaStorage = Depends(get_media_storage),
):
    """Get a page of events
    - page: 1-based page number
    - limit: events per page (max 100)
    """
    try:
        service = get_event_service(db, media)
        return await service.list_events(page, limit)
    except Exception as e:
        logger.error(f"Error listing events: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Failed to fetch events: {str(e)}")


@event_router.post("", response_model=EventMessage, status_code=status.HTTP_201_CREATED)
async def create_event(
    location: Optional[str] = Form(None),
    eventName: Optional[str] = Form(None),
    date: Optional[str] = Form(None),
    userId: Optional[str] = Form(None),
    photos: Optional[List[UploadFile]] = File(None),
    videos: Optional[List[UploadFile]] = File(None),
    current_user=Depends(get_current_user),
    db: Database = Depends(get_db),
    media: MediaStorage = Depends(get_media_storage),
    config=Depends(get_config),
):
    """Create an event with optional photo and video uploads"""
    fields = {
        "location": location,
        "eventName": eventName,
        "date": parse_event_date(date),
        "userId": userId or current_user["id"],
    }
    stored = await ingest(media, photos, videos)

    try:
        service = get_event_service(db, media, config.EVENT_UPDATE_POLICY)
        event = await service.create_event(fields, stored)
        return {"message": "Event created successfully", "event": event}
    except InvalidPayloadError as e:
        media.delete(all_paths(stored))
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        media.delete(all_paths(stored))
        logger.error(f"Error creating event: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Failed to create event: {str(e)}")


@event_router.get("/user/{user_id}", response_model=EventList)
async def list_user_events(
    user_id: str,
    current_user=Depends(get_current_user),
    db: Database = Depends(get_db),
    media: MediaStorage = Depends(get_media_storage),
):
    """Get all events owned by a user"""
    try:
        service = get_event_service(db, media)
        events = await service.list_events_by_user(user_id)
        if not events:
            raise HTTPException(status_code=404, detail="No events found for this user")
        return {"events": events}
    except HTTPException:
        raise
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Failed to fetch events: {str(e)}")


@event_router.get("/{event_id}", response_model=EventResponse)
async def get_event(
    event_id: str,
    current_user=Depends(get_current_user),
    db: Database = Depends(get_db),
    media: MediaStorage = Depends(get_media_storage),
):
    """Get a specific event by ID"""
    try:
        service = get_event_service(db, media)
        event = await service.get_event(event_id)
        if not event:
            raise HTTPException(status_code=404, detail="Event not found")
        return event
    except HTTPException:
        raise
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Failed to fetch event: {str(e)}")


@event_router.put("/{event_id}", response_model=EventMessage)
async def update_event(
    event_id: str,
    location: Optional[str] = Form(None),
    eventName: Optional[str] = Form(None),
    date: Optional[str] = Form(None),
    photos: Optional[List[UploadFile]] = File(None),
    videos: Optional[List[UploadFile]] = File(None),
    current_user=Depends(get_current_user),
    db: Database = Depends(get_db),
    media: MediaStorage = Depends(get_media_storage),
    config=Depends(get_config),
):
    """Update an existing event; new media is appended or replaces the old, per EVENT_UPDATE_POLICY"""
    service = get_event_service(db, media, config.EVENT_UPDATE_POLICY)
    try:
        current = await service.get_event(event_id)
        if not current:
            raise HTTPException(status_code=404, detail="Event not found")
    except HTTPException:
        raise
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Failed to update event: {str(e)}")

    if current["userId"] != current_user["id"] and not is_admin(current_user):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="You can only update your own events",
        )

    fields = {"location": location, "eventName": eventName, "date": parse_event_date(date)}
    stored = await ingest(media, photos, videos)

    try:
        event = await service.update_event(event_id, fields, stored)
        if not event:
            media.delete(all_paths(stored))
            raise HTTPException(status_code=404, detail="Event not found")
        return {"message": "Event updated successfully", "event": event}
    except HTTPException:
        raise
    except Exception as e:
        media.delete(all_paths(stored))
        logger.error(f"Error updating event {event_id}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Failed to update event: {str(e)}")
