from datetime import datetime
from typing import Optional, List, Iterable, Set

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select

from inochi.models.skill import Skill, LevelEnum

SEARCH_FIELDS = ("title", "description")


def _like_pattern(term: str) -> str:
    escaped = term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"


class SkillRepository:
    def __init__(self, db: AsyncSession):
        self.db = db

    @staticmethod
    def _apply_filters(
        query,
        level: Optional[LevelEnum] = None,
        min_difficulty: Optional[int] = None,
        max_difficulty: Optional[int] = None,
    ):
        if level is not None:
            query = query.where(Skill.level == level)
        if min_difficulty is not None:
            query = query.where(Skill.difficulty >= min_difficulty)
        if max_difficulty is not None:
            query = query.where(Skill.difficulty <= max_difficulty)
        return query

    async def get_by_id(self, skill_id: int) -> Optional[Skill]:
        result = await self.db.execute(select(Skill).where(Skill.id == skill_id))
        return result.scalar_one_or_none()

    async def get_by_ids(self, ids: Iterable[int]) -> List[Skill]:
        ids = list(set(ids))
        if not ids:
            return []
        result = await self.db.execute(select(Skill).where(Skill.id.in_(ids)))
        return list(result.scalars().all())

    async def existing_ids(self, ids: Iterable[int]) -> Set[int]:
        ids = list(set(ids))
        if not ids:
            return set()
        result = await self.db.execute(select(Skill.id).where(Skill.id.in_(ids)))
        return set(result.scalars().all())

    async def list_skills(
        self,
        level: Optional[LevelEnum] = None,
        min_difficulty: Optional[int] = None,
        max_difficulty: Optional[int] = None,
    ) -> List[Skill]:
        """Листинг через by_level / by_difficulty либо полный."""
        query = self._apply_filters(select(Skill), level, min_difficulty, max_difficulty)
        result = await self.db.execute(query.order_by(Skill.id))
        return list(result.scalars().all())

    async def search(
        self,
        field: str,
        search_query: str,
        level: Optional[LevelEnum] = None,
        min_difficulty: Optional[int] = None,
        max_difficulty: Optional[int] = None,
        limit: int = 50,
    ) -> List[Skill]:
        """Поиск по одному текстовому полю: все слова запроса должны встречаться в поле."""
        if field not in SEARCH_FIELDS:
            raise ValueError(f"Unsupported search field: {field}")
        column = getattr(Skill, field)

        query = select(Skill)
        for term in search_query.split():
            query = query.where(column.ilike(_like_pattern(term), escape="\\"))
        query = self._apply_filters(query, level, min_difficulty, max_difficulty)

        result = await self.db.execute(query.order_by(Skill.id).limit(limit))
        return list(result.scalars().all())

    async def list_all(self) -> List[Skill]:
        result = await self.db.execute(select(Skill).order_by(Skill.id))
        return list(result.scalars().all())

    async def create(self, skill: Skill) -> Skill:
        self.db.add(skill)
        await self.db.commit()
        await self.db.refresh(skill)
        return skill

    async def stage(self, skill: Skill) -> Skill:
        """Добавить в текущую транзакцию без коммита (id будет после flush)."""
        self.db.add(skill)
        await self.db.flush()
        return skill

    async def update(self, skill: Skill, changes: dict, commit: bool = True) -> Skill:
        for field, value in changes.items():
            # JSON-колонки отслеживаются только при присваивании нового объекта
            setattr(skill, field, list(value) if isinstance(value, list) else value)
        skill.updated_at = datetime.utcnow()
        if commit:
            await self.db.commit()
            await self.db.refresh(skill)
        return skill

    async def delete(self, skill: Skill) -> None:
        await self.db.delete(skill)
        await self.db.commit()
