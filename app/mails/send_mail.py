from fastapi_mail import ConnectionConfig, FastMail
from pathlib import Path

from ..core.config import Config


TEMPLATE_FOLDER = Path(__file__).resolve().parent / 'templates'


def notifications_enabled(settings=Config) -> bool:
    return settings.NOTIFY_ON_BOOKING or settings.NOTIFY_ON_CONTACT


def build_mail_config(settings=Config) -> ConnectionConfig:
    """
    SMTP settings for the admin notifications. With every notification switched
    off nothing is handed to the SMTP server; messages are still rendered so
    ``FastMail.record_messages`` can inspect them.
    """

    return ConnectionConfig(
        MAIL_USERNAME=settings.MAIL_USERNAME,
        MAIL_PASSWORD=settings.MAIL_PASSWORD,
        MAIL_FROM=settings.MAIL_FROM,
        MAIL_FROM_NAME=settings.MAIL_FROM_NAME,
        MAIL_PORT=settings.MAIL_PORT,
        MAIL_SERVER=settings.MAIL_SERVER,
        MAIL_STARTTLS=settings.MAIL_STARTTLS,
        MAIL_SSL_TLS=settings.MAIL_SSL_TLS,
        USE_CREDENTIALS=settings.USE_CREDENTIALS,
        VALIDATE_CERTS=settings.VALIDATE_CERTS,
        SUPPRESS_SEND=0 if notifications_enabled(settings) else 1,
        TEMPLATE_FOLDER=TEMPLATE_FOLDER,
    )


mail = FastMail(build_mail_config())
