from typing import List
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func
from database_models import Lesson


class LessonRepository:
    """Read access to the lesson catalog plus bulk insert for seeding."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def list_ordered(self) -> List[Lesson]:
        result = await self.db.execute(
            select(Lesson).order_by(Lesson.order.asc(), Lesson.created_at.asc())
        )
        return list(result.scalars().all())

    async def count(self) -> int:
        result = await self.db.execute(select(func.count()).select_from(Lesson))
        return result.scalar_one()

    async def insert_many(self, lessons: List[dict]) -> List[Lesson]:
        records = [Lesson(**lesson) for lesson in lessons]
        self.db.add_all(records)
        await self.db.flush()
        return records
