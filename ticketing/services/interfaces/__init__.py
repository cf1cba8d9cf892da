"""
Service interfaces for dependency inversion.
Allows swapping delivery and storage backends without touching the booking core.
"""

from .mail_transport import InlineImage, MailTransport
from .media_storage import MediaStorage

__all__ = ['InlineImage', 'MailTransport', 'MediaStorage']
