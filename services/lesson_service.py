"""
Lesson Service - catalog listing and first-run seeding
"""
import logging
from typing import Any, Dict, List

from sqlalchemy.ext.asyncio import AsyncSession

from crud.lesson import LessonRepository
from database_models import Lesson

logger = logging.getLogger(__name__)

INITIAL_LESSONS = [
    {
        "title": "Введение в курс",
        "description": "Основные понятия компьютерной графики",
        "duration": "15:30",
        "video_url": "https://example.com/video1.mp4",
        "available": True,
        "order": 1,
    },
    {
        "title": "Основы CG",
        "description": "Базовые принципы работы с графикой",
        "duration": "22:15",
        "video_url": "https://example.com/video2.mp4",
        "available": True,
        "order": 2,
    },
    {
        "title": "Продвинутые техники",
        "description": "Сложные методы создания графики",
        "duration": "30:45",
        "video_url": "https://example.com/video3.mp4",
        "available": False,
        "order": 3,
    },
    {
        "title": "Практические задания",
        "description": "Реальные проекты для практики",
        "duration": "28:20",
        "video_url": "https://example.com/video4.mp4",
        "available": False,
        "order": 4,
    },
]


def serialize_lesson(lesson: Lesson) -> Dict[str, Any]:
    return {
        "id": lesson.id,
        "title": lesson.title,
        "description": lesson.description,
        "duration": lesson.duration,
        "videoUrl": lesson.video_url,
        "available": lesson.available,
        "order": lesson.order,
        "createdAt": lesson.created_at.isoformat() if lesson.created_at else None,
    }


class LessonService:
    """Service class for the lesson catalog"""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.lessons = LessonRepository(db)

    async def list_lessons(self) -> List[Dict[str, Any]]:
        """
        Get all lessons sorted ascending by display order.

        Returns:
            List of serialized lessons
        """
        return [serialize_lesson(lesson) for lesson in await self.lessons.list_ordered()]

    async def seed_lessons(self) -> int:
        """
        Insert the initial lessons if the catalog is empty.
        Guarded by the emptiness check only, so re-running is a no-op.

        Returns:
            Number of lessons inserted
        """
        if await self.lessons.count() > 0:
            return 0
        await self.lessons.insert_many([dict(lesson) for lesson in INITIAL_LESSONS])
        await self.db.commit()
        logger.info("✅ Initial lessons created")
        return len(INITIAL_LESSONS)
