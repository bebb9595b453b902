"""Select the gallery storage backend from configuration."""
import logging

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from affiliate_gallery.config import settings
from affiliate_gallery.database import get_db
from affiliate_gallery.repositories.file import FileGalleryRepository
from affiliate_gallery.repositories.interfaces import GalleryRepository
from affiliate_gallery.repositories.sql import SqlGalleryRepository

logger = logging.getLogger(__name__)

BACKENDS = ("sql", "file")


def build_gallery_repository(backend: str, session: AsyncSession = None) -> GalleryRepository:
    """
    Build a repository for the given backend name.

    Raises:
        ValueError: If the backend is unknown, or "sql" is requested without a session
    """
    backend = (backend or "sql").strip().lower()
    if backend == "file":
        return FileGalleryRepository(settings.GALLERY_FILE_PATH)
    if backend == "sql":
        if session is None:
            raise ValueError("The sql gallery backend needs a database session")
        return SqlGalleryRepository(session)
    raise ValueError(f"Unknown GALLERY_BACKEND '{backend}', expected one of: {', '.join(BACKENDS)}")


async def get_gallery_repository(db: AsyncSession = Depends(get_db)) -> GalleryRepository:
    """FastAPI dependency providing the configured gallery repository."""
    return build_gallery_repository(settings.GALLERY_BACKEND, db)
