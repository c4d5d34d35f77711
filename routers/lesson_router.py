import logging
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from database import get_db
from services.lesson_service import LessonService
from backend.utils.responses import error_response

logger = logging.getLogger(__name__)

lesson_router = APIRouter(prefix="/api", tags=["lessons"])


@lesson_router.get("/lessons")
async def list_lessons(db: AsyncSession = Depends(get_db)):
    """Return the lesson catalog sorted by display order."""
    try:
        return await LessonService(db).list_lessons()
    except Exception as e:
        logger.error(f"Error fetching lessons: {e}", exc_info=True)
        return error_response("Internal server error", status=500)
