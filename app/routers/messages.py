from fastapi import APIRouter, BackgroundTasks, Depends, Path, Query, status
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List, Optional

from ..core.config import Config
from ..core.dependencies import get_current_admin, get_db
from ..schemas.message import BookingStatusUpdate, ContactMessageCreate, InboundMessageResponse
from ..services.email_service import email_service
from ..services.message_service import message_service


router = APIRouter()
admin_only = Depends(get_current_admin)


@router.post("/", response_model=InboundMessageResponse, status_code=status.HTTP_201_CREATED)
async def send_contact_message(
    data: ContactMessageCreate,
    background_tasks: BackgroundTasks,
    db: AsyncSession = Depends(get_db),
):
    """
    Contact form submission. Lands in the admin inbox with source `contact_form`.
    """

    message = await message_service.create_message(data, db)

    if Config.NOTIFY_ON_CONTACT:
        recipient = await email_service.resolve_recipient(db)
        if recipient:
            background_tasks.add_task(email_service.send_contact_notification, recipient, data.model_dump())

    return message


@router.get("/", dependencies=[admin_only], response_model=List[InboundMessageResponse])
async def list_messages(
    source: Optional[str] = Query(None, description="Only messages from this source, e.g. booking_popup"),
    unread_only: bool = Query(False, description="Only unread messages"),
    db: AsyncSession = Depends(get_db),
):
    """
    Admin inbox, newest first.
    """
    return await message_service.list_messages(db, source=source, unread_only=unread_only)


@router.patch("/{message_id}/read", dependencies=[admin_only], response_model=InboundMessageResponse)
async def mark_message_read(
    message_id: int = Path(..., description="ID of the message"),
    is_read: bool = Query(True),
    db: AsyncSession = Depends(get_db),
):
    return await message_service.mark_read(message_id, db, is_read=is_read)


@router.patch("/{message_id}/status", dependencies=[admin_only], response_model=InboundMessageResponse)
async def update_booking_status(
    data: BookingStatusUpdate,
    message_id: int = Path(..., description="ID of the booking request"),
    db: AsyncSession = Depends(get_db),
):
    """
    Confirm or cancel a booking request. Cancelling frees its time slot.
    """
    return await message_service.set_status(message_id, data.status, db)


@router.delete("/{message_id}", dependencies=[admin_only], status_code=status.HTTP_204_NO_CONTENT)
async def delete_message(message_id: int = Path(..., description="ID of the message"), db: AsyncSession = Depends(get_db)):
    await message_service.delete_message(message_id, db)
