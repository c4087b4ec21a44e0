import logging
from fastapi_mail import MessageSchema, MessageType
from typing import Dict, Any, Optional
from datetime import datetime
from sqlalchemy.ext.asyncio import AsyncSession
import bleach

from ..core.config import Config
from ..mails.send_mail import mail
from .site_settings_service import site_settings_service


logger = logging.getLogger(__name__)


def _escape(value: Any) -> Any:
    # customer-typed text ends up in an HTML body
    if isinstance(value, str):
        return bleach.clean(value, tags=[], strip=True)
    return value


class EmailService:
    """
    Optional e-mail fan-out to the site administrators.

    Bookings and contact messages are already visible in the admin inbox; these
    mails only notify. A failed send is logged and reported as ``False``.
    """

    async def resolve_recipient(self, db: AsyncSession) -> Optional[str]:
        """
        The ``notification_email`` site setting wins over ``ADMIN_EMAIL`` from the environment.
        """

        return await site_settings_service.get("notification_email", db) or Config.ADMIN_EMAIL

    async def send_template_email(
        self,
        to_email: str,
        subject: str,
        template_name: str,
        context: Dict[str, Any]
    ) -> bool:
        """
        Sends an email using a template with provided context.

        Args:
            to_email (str): Recipient email address
            subject (str): Email subject
            template_name (str): Name of the template file (e.g., "new-booking.html")
            context (Dict[str, Any]): Context variables for the template

        Returns:
            bool: True if email was sent successfully, False otherwise
        """
        try:
            message = MessageSchema(
                subject=subject,
                recipients=[to_email],
                template_body={key: _escape(value) for key, value in context.items()},
                subtype=MessageType.html,
            )

            await mail.send_message(message, template_name=template_name)
            logger.info("Sent %s to %s", template_name, to_email)
            return True

        except Exception as e:
            logger.error("Failed to send %s to %s: %s", template_name, to_email, e)
            return False

    async def send_booking_notification(self, to_email: str, booking_data: Dict[str, Any]) -> bool:
        """
        Notifies the administrators about a new booking request.

        Args:
            to_email (str): Administrator address
            booking_data (Dict[str, Any]): Customer, service, slot and coupon details

        Returns:
            bool: True if email was sent successfully, False otherwise
        """
        subject = f"New Appointment Booking - {booking_data.get('service_name', 'Service')}"
        context = {**booking_data, "received_at": datetime.now().strftime("%Y-%m-%d %H:%M")}

        return await self.send_template_email(
            to_email=to_email,
            subject=subject,
            template_name="new-booking.html",
            context=context
        )

    async def send_contact_notification(self, to_email: str, message_data: Dict[str, Any]) -> bool:
        """Send new contact message notification"""
        subject = f"New Contact Message from {message_data.get('name', '')}"
        context = {**message_data, "received_at": datetime.now().strftime("%Y-%m-%d %H:%M")}

        return await self.send_template_email(
            to_email=to_email,
            subject=subject,
            template_name="new-contact-message.html",
            context=context
        )


email_service = EmailService()
