import logging
from datetime import datetime
from typing import Iterable, Optional

from fastapi import HTTPException

from inochi.models.skill import Skill
from inochi.repositories.catalog_repository import CatalogRepository
from inochi.repositories.skill_repository import SkillRepository
from inochi.schemas.auth import CurrentUser
from inochi.schemas.skill import SkillCreate, SkillUpdate
from inochi.services.live_queries import QueryHub, live_hub, SKILLS_TOPIC

logger = logging.getLogger(__name__)


def _first_missing(requested: Iterable[int], found: Iterable[int]) -> Optional[int]:
    found = set(found)
    for record_id in requested:
        if record_id not in found:
            return record_id
    return None


async def ensure_references_exist(
    skills: SkillRepository,
    catalog: CatalogRepository,
    changes: dict,
) -> None:
    """Проверить, что все ссылки (пререквизиты, варианты, мышцы, оборудование) существуют."""
    prerequisites = changes.get("prerequisites") or []
    variants = changes.get("variants") or []
    if prerequisites or variants:
        existing = await skills.existing_ids(list(prerequisites) + list(variants))
        missing = _first_missing(prerequisites, existing)
        if missing is not None:
            raise HTTPException(status_code=400, detail=f"Скилл-пререквизит не найден: {missing}")
        missing = _first_missing(variants, existing)
        if missing is not None:
            raise HTTPException(status_code=400, detail=f"Скилл-вариант не найден: {missing}")

    muscles = changes.get("muscles") or []
    if muscles:
        found = [m.id for m in await catalog.get_muscles_by_ids(muscles)]
        missing = _first_missing(muscles, found)
        if missing is not None:
            raise HTTPException(status_code=400, detail=f"Мышца не найдена: {missing}")

    equipment = changes.get("equipment") or []
    if equipment:
        found = [e.id for e in await catalog.get_equipment_by_ids(equipment)]
        missing = _first_missing(equipment, found)
        if missing is not None:
            raise HTTPException(status_code=400, detail=f"Оборудование не найдено: {missing}")


def ensure_no_self_reference(skill_id: int, changes: dict) -> None:
    if skill_id in (changes.get("prerequisites") or []):
        raise HTTPException(status_code=400, detail="Скилл не может быть пререквизитом самого себя")
    if skill_id in (changes.get("variants") or []):
        raise HTTPException(status_code=400, detail="Скилл не может быть вариантом самого себя")


class SkillService:
    def __init__(
        self,
        skills: SkillRepository,
        catalog: CatalogRepository,
        hub: Optional[QueryHub] = None,
    ):
        self.skills = skills
        self.catalog = catalog
        self.hub = hub or live_hub

    async def get_or_404(self, skill_id: int) -> Skill:
        skill = await self.skills.get_by_id(skill_id)
        if not skill:
            raise HTTPException(status_code=404, detail="Скилл не найден")
        return skill

    async def create_skill(self, data: SkillCreate, current_user: CurrentUser) -> Skill:
        record = data.to_record()
        await ensure_references_exist(self.skills, self.catalog, record)

        now = datetime.utcnow()
        skill = await self.skills.create(Skill(
            **record,
            created_at=now,
            updated_at=now,
            created_by=current_user.id,
        ))
        logger.info(f"Скилл {skill.id} создан пользователем {current_user.id}")
        await self.hub.publish(SKILLS_TOPIC)
        return skill

    async def update_skill(self, skill_id: int, data: SkillUpdate) -> Skill:
        skill = await self.get_or_404(skill_id)
        changes = {field: value for field, value in data.to_changes().items() if value is not None}

        ensure_no_self_reference(skill_id, changes)
        await ensure_references_exist(self.skills, self.catalog, changes)

        skill = await self.skills.update(skill, changes)
        await self.hub.publish(SKILLS_TOPIC)
        return skill

    async def delete_skill(self, skill_id: int, current_user: CurrentUser) -> None:
        skill = await self.get_or_404(skill_id)
        await self.skills.delete(skill)
        logger.info(f"Скилл {skill_id} удалён пользователем {current_user.id}")
        await self.hub.publish(SKILLS_TOPIC)
