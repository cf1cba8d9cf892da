"""
Media blob storage interface.
Stores uploaded images (payment receipts, event images, sponsor logos) and
hands back an opaque URL reference.
"""

from abc import ABC, abstractmethod


class MediaStorage(ABC):
    """
    Interface for image storage.

    Implementations:
    - LocalMediaStorage: files on local disk served under MEDIA_BASE_URL
    """

    @abstractmethod
    async def save(self, folder: str, filename: str, content_type: str, data: bytes) -> str:
        """
        Store an uploaded image under a folder ("receipts", "events", "sponsors").

        Returns:
            URL reference to the stored image

        Raises:
            ValidationError: empty, oversized or non-image upload
            UpstreamUnavailableError: the store could not be written
        """
        pass

    @abstractmethod
    async def delete(self, ref: str) -> None:
        """
        Remove a previously stored image by the reference save() returned.
        Unknown references are ignored.
        """
        pass
