from datetime import datetime
from typing import Optional, List

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select

from inochi.models.private_skill import PrivateSkill
from inochi.models.skill import LevelEnum
from inochi.repositories.skill_repository import SEARCH_FIELDS, _like_pattern


class PrivateSkillRepository:
    """Черновики скиллов. Все выборки ограничены владельцем (private_skills_by_user)."""

    def __init__(self, db: AsyncSession):
        self.db = db

    @staticmethod
    def _owned(user_id: str, level: Optional[LevelEnum], min_difficulty: Optional[int], max_difficulty: Optional[int]):
        query = select(PrivateSkill).where(PrivateSkill.user_id == user_id)
        if level is not None:
            query = query.where(PrivateSkill.level == level)
        if min_difficulty is not None:
            query = query.where(PrivateSkill.difficulty >= min_difficulty)
        if max_difficulty is not None:
            query = query.where(PrivateSkill.difficulty <= max_difficulty)
        return query

    async def get_by_id(self, private_skill_id: int) -> Optional[PrivateSkill]:
        result = await self.db.execute(select(PrivateSkill).where(PrivateSkill.id == private_skill_id))
        return result.scalar_one_or_none()

    async def list_by_user(
        self,
        user_id: str,
        level: Optional[LevelEnum] = None,
        min_difficulty: Optional[int] = None,
        max_difficulty: Optional[int] = None,
    ) -> List[PrivateSkill]:
        query = self._owned(user_id, level, min_difficulty, max_difficulty)
        result = await self.db.execute(query.order_by(PrivateSkill.id))
        return list(result.scalars().all())

    async def search(
        self,
        user_id: str,
        field: str,
        search_query: str,
        level: Optional[LevelEnum] = None,
        min_difficulty: Optional[int] = None,
        max_difficulty: Optional[int] = None,
        limit: int = 50,
    ) -> List[PrivateSkill]:
        if field not in SEARCH_FIELDS:
            raise ValueError(f"Unsupported search field: {field}")
        column = getattr(PrivateSkill, field)

        query = self._owned(user_id, level, min_difficulty, max_difficulty)
        for term in search_query.split():
            query = query.where(column.ilike(_like_pattern(term), escape="\\"))

        result = await self.db.execute(query.order_by(PrivateSkill.id).limit(limit))
        return list(result.scalars().all())

    async def create(self, private_skill: PrivateSkill) -> PrivateSkill:
        self.db.add(private_skill)
        await self.db.commit()
        await self.db.refresh(private_skill)
        return private_skill

    async def update(self, private_skill: PrivateSkill, changes: dict) -> PrivateSkill:
        for field, value in changes.items():
            setattr(private_skill, field, list(value) if isinstance(value, list) else value)
        private_skill.updated_at = datetime.utcnow()
        await self.db.commit()
        await self.db.refresh(private_skill)
        return private_skill

    async def delete(self, private_skill: PrivateSkill) -> None:
        await self.db.delete(private_skill)
        await self.db.commit()

    async def stage_delete(self, private_skill: PrivateSkill) -> None:
        """Удалить в текущей транзакции без коммита (при одобрении заявки)."""
        await self.db.delete(private_skill)
        await self.db.flush()
