from typing import Optional, List, Iterable

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func

from inochi.models.muscle import Muscle
from inochi.models.equipment import Equipment


class CatalogRepository:
    """Справочники мышц и оборудования."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def list_muscles(self) -> List[Muscle]:
        result = await self.db.execute(select(Muscle).order_by(Muscle.id))
        return list(result.scalars().all())

    async def get_muscle_by_slug(self, slug: str) -> Optional[Muscle]:
        result = await self.db.execute(select(Muscle).where(Muscle.slug == slug))
        return result.scalar_one_or_none()

    async def get_muscles_by_ids(self, ids: Iterable[int]) -> List[Muscle]:
        ids = list(set(ids))
        if not ids:
            return []
        result = await self.db.execute(select(Muscle).where(Muscle.id.in_(ids)))
        return list(result.scalars().all())

    async def list_equipment(self, category: Optional[str] = None) -> List[Equipment]:
        query = select(Equipment)
        if category:
            query = query.where(Equipment.category == category)
        result = await self.db.execute(query.order_by(Equipment.id))
        return list(result.scalars().all())

    async def get_equipment_by_slug(self, slug: str) -> Optional[Equipment]:
        result = await self.db.execute(select(Equipment).where(Equipment.slug == slug))
        return result.scalar_one_or_none()

    async def get_equipment_by_ids(self, ids: Iterable[int]) -> List[Equipment]:
        ids = list(set(ids))
        if not ids:
            return []
        result = await self.db.execute(select(Equipment).where(Equipment.id.in_(ids)))
        return list(result.scalars().all())

    async def count_muscles(self) -> int:
        result = await self.db.execute(select(func.count()).select_from(Muscle))
        return result.scalar_one()

    async def count_equipment(self) -> int:
        result = await self.db.execute(select(func.count()).select_from(Equipment))
        return result.scalar_one()

    async def create_muscle(self, muscle: Muscle) -> Muscle:
        self.db.add(muscle)
        await self.db.commit()
        await self.db.refresh(muscle)
        return muscle

    async def create_equipment(self, equipment: Equipment) -> Equipment:
        self.db.add(equipment)
        await self.db.commit()
        await self.db.refresh(equipment)
        return equipment

    async def add_all(self, records: list) -> None:
        """Массовая вставка одной транзакцией (сидирование)."""
        self.db.add_all(records)
        await self.db.commit()
