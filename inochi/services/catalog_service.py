import re
import unicodedata
from collections import OrderedDict
from typing import Dict, List, Optional

from fastapi import HTTPException

from inochi.models.muscle import Muscle
from inochi.models.equipment import Equipment
from inochi.repositories.catalog_repository import CatalogRepository
from inochi.schemas.catalog import MuscleCreate, EquipmentCreate
from inochi.services.live_queries import QueryHub, live_hub, CATALOG_TOPIC


def slugify(value: str) -> str:
    """'Pull-up Bar' -> 'pull-up-bar', 'None (Bodyweight)' -> 'none-bodyweight'"""
    value = unicodedata.normalize("NFKD", value).encode("ascii", "ignore").decode("ascii")
    value = re.sub(r"[^a-zA-Z0-9]+", "-", value).strip("-").lower()
    return value


def group_by_category(equipment: List[Equipment]) -> Dict[str, List[Equipment]]:
    groups: Dict[str, List[Equipment]] = OrderedDict()
    for item in equipment:
        groups.setdefault(item.category, []).append(item)
    return groups


class CatalogService:
    def __init__(self, catalog: CatalogRepository, hub: Optional[QueryHub] = None):
        self.catalog = catalog
        self.hub = hub or live_hub

    async def list_muscles(self) -> List[Muscle]:
        return await self.catalog.list_muscles()

    async def get_muscle(self, slug: str) -> Muscle:
        muscle = await self.catalog.get_muscle_by_slug(slug)
        if not muscle:
            raise HTTPException(status_code=404, detail="Мышца не найдена")
        return muscle

    async def list_equipment(self, category: Optional[str] = None) -> List[Equipment]:
        return await self.catalog.list_equipment(category)

    async def list_equipment_grouped(self) -> Dict[str, List[Equipment]]:
        return group_by_category(await self.catalog.list_equipment())

    async def create_muscle(self, data: MuscleCreate) -> Muscle:
        slug = data.slug or slugify(data.name)
        if not slug:
            raise HTTPException(status_code=400, detail="Не удалось построить slug из названия")
        if await self.catalog.get_muscle_by_slug(slug):
            raise HTTPException(status_code=409, detail=f"Мышца со slug '{slug}' уже существует")

        muscle = await self.catalog.create_muscle(Muscle(
            name=data.name,
            slug=slug,
            recommended_rest_hours=data.recommended_rest_hours,
            parts=[part.model_dump() for part in data.parts],
            muscle_group=data.muscle_group,
        ))
        await self.hub.publish(CATALOG_TOPIC)
        return muscle

    async def create_equipment(self, data: EquipmentCreate) -> Equipment:
        slug = data.slug or slugify(data.name)
        if not slug:
            raise HTTPException(status_code=400, detail="Не удалось построить slug из названия")
        if await self.catalog.get_equipment_by_slug(slug):
            raise HTTPException(status_code=409, detail=f"Оборудование со slug '{slug}' уже существует")

        equipment = await self.catalog.create_equipment(Equipment(
            name=data.name,
            slug=slug,
            category=data.category,
        ))
        await self.hub.publish(CATALOG_TOPIC)
        return equipment
