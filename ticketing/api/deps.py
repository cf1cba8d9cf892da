"""
Component wiring. Each collaborator is built from the Settings object here,
so tests can swap any of them through app.dependency_overrides.
"""

from fastapi import Depends

from ticketing.core.config import Settings, get_settings
from ticketing.services.credential_service import CredentialIssuer
from ticketing.services.interfaces.mail_transport import MailTransport
from ticketing.services.interfaces.media_storage import MediaStorage
from ticketing.services.mail_service import SendGridMailer
from ticketing.services.media_storage import LocalMediaStorage
from ticketing.services.ticket_number import TicketNumberGenerator


def get_ticket_number_generator(settings: Settings = Depends(get_settings)) -> TicketNumberGenerator:
    return TicketNumberGenerator(max_attempts=settings.TICKET_NUMBER_MAX_ATTEMPTS)


def get_media_storage(settings: Settings = Depends(get_settings)) -> MediaStorage:
    return LocalMediaStorage.from_settings(settings)


def get_mail_transport(settings: Settings = Depends(get_settings)) -> MailTransport:
    return SendGridMailer.from_settings(settings)


def get_credential_issuer(
    settings: Settings = Depends(get_settings),
    mailer: MailTransport = Depends(get_mail_transport),
) -> CredentialIssuer:
    return CredentialIssuer.from_settings(settings, mailer)
