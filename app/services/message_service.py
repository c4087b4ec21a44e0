import logging
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List, Optional

from ..enums import BookingStatus, MessageSource
from ..exceptions import BadRequestException, NotFoundException
from ..models import InboundMessage
from ..schemas.message import ContactMessageCreate


logger = logging.getLogger(__name__)


class MessageService:
    """
    Service class for the admin inbox: contact-form messages and booking requests.
    """

    async def create_message(self, data: ContactMessageCreate, db: AsyncSession) -> InboundMessage:
        """ Stores a contact-form submission. """

        message = InboundMessage(**data.model_dump(), source=MessageSource.CONTACT_FORM.value)

        db.add(message)
        await db.commit()
        await db.refresh(message)
        return message


    async def list_messages(self, db: AsyncSession, source: Optional[str] = None, unread_only: bool = False) -> List[InboundMessage]:
        """ Returns inbox messages, newest first, optionally filtered by source and read state. """

        stmt = select(InboundMessage)

        if source:
            stmt = stmt.where(InboundMessage.source == source)

        if unread_only:
            stmt = stmt.where(InboundMessage.is_read == False)

        result = await db.execute(stmt.order_by(InboundMessage.created_at.desc(), InboundMessage.id.desc()))
        return result.scalars().all()


    async def get_message(self, message_id: int, db: AsyncSession) -> InboundMessage:
        message = await db.get(InboundMessage, message_id)

        if not message:
            raise NotFoundException("Message not found")

        return message


    async def mark_read(self, message_id: int, db: AsyncSession, is_read: bool = True) -> InboundMessage:
        message = await self.get_message(message_id, db)
        message.is_read = is_read

        await db.commit()
        await db.refresh(message)
        return message


    async def set_status(self, message_id: int, status: BookingStatus, db: AsyncSession) -> InboundMessage:
        """ Moves a booking request to pending, confirmed or cancelled. """

        message = await self.get_message(message_id, db)

        if message.appointment_date is None:
            raise BadRequestException("Only booking requests have a status")

        message.status = BookingStatus(status).value

        await db.commit()
        await db.refresh(message)
        logger.info("Booking %s is now %s", message.id, message.status)
        return message


    async def delete_message(self, message_id: int, db: AsyncSession) -> None:
        message = await self.get_message(message_id, db)

        await db.delete(message)
        await db.commit()


message_service = MessageService()
