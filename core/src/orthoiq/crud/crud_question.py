"""CRUD operations for the question log."""

from sqlalchemy.ext.asyncio import AsyncSession

from ..models.question import Question


class CRUDQuestion:
    async def create(self, db: AsyncSession, *, identifier: str, platform: str, mode: str, question: str) -> Question:
        db_question = Question(identifier=identifier, platform=platform, mode=mode, question=question)
        db.add(db_question)
        await db.flush()
        return db_question


crud_questions = CRUDQuestion()
