"""
Личные черновики скиллов.

Черновик видит и меняет только владелец. Ссылки на пререквизиты и варианты
ведут в общий каталог. Отправка черновика на модерацию создаёт заявку
(см. SubmissionService.submit_private_skill), одобрение переносит его в
каталог и удаляет черновик.
"""
import logging
from typing import List, Optional

from fastapi import HTTPException

from inochi.core.config import settings
from inochi.models.private_skill import PrivateSkill
from inochi.repositories.catalog_repository import CatalogRepository
from inochi.repositories.private_skill_repository import PrivateSkillRepository
from inochi.repositories.skill_repository import SkillRepository
from inochi.schemas.auth import CurrentUser
from inochi.schemas.catalog import MuscleRead, EquipmentRead
from inochi.schemas.private_skill import PrivateSkillCreate, PrivateSkillUpdate, PrivateSkillEnriched
from inochi.schemas.skill import SkillFilters
from inochi.services.skill_search import filter_by_membership, merge_search_results, rank_by_relevance, resolve_ids
from inochi.services.skill_service import ensure_references_exist

logger = logging.getLogger(__name__)


class PrivateSkillService:
    def __init__(
        self,
        private_skills: PrivateSkillRepository,
        skills: SkillRepository,
        catalog: CatalogRepository,
        limit: Optional[int] = None,
    ):
        self.private_skills = private_skills
        self.skills = skills
        self.catalog = catalog
        self.limit = limit or settings.SEARCH_RESULT_LIMIT

    async def get_owned_or_404(self, private_skill_id: int, current_user: CurrentUser) -> PrivateSkill:
        private_skill = await self.private_skills.get_by_id(private_skill_id)
        if not private_skill:
            raise HTTPException(status_code=404, detail="Личный скилл не найден")
        if private_skill.user_id != current_user.id:
            raise HTTPException(status_code=403, detail="Доступ только к своим личным скиллам")
        return private_skill

    async def enrich(self, private_skills: List[PrivateSkill]) -> List[PrivateSkillEnriched]:
        muscle_ids = {m for s in private_skills for m in s.muscles or []}
        equipment_ids = {e for s in private_skills for e in s.equipment or []}

        muscles = {m.id: m for m in await self.catalog.get_muscles_by_ids(muscle_ids)}
        equipment = {e.id: e for e in await self.catalog.get_equipment_by_ids(equipment_ids)}

        return [
            PrivateSkillEnriched.model_validate(s).model_copy(update={
                "muscles_data": [MuscleRead.model_validate(m) for m in resolve_ids(s.muscles or [], muscles)],
                "equipment_data": [EquipmentRead.model_validate(e) for e in resolve_ids(s.equipment or [], equipment)],
            })
            for s in private_skills
        ]

    @staticmethod
    def _filter_membership(private_skills: List[PrivateSkill], filters: SkillFilters) -> List[PrivateSkill]:
        private_skills = filter_by_membership(private_skills, "muscles", filters.muscle_ids)
        return filter_by_membership(private_skills, "equipment", filters.equipment_ids)

    async def list_private_skills(self, current_user: CurrentUser, filters: SkillFilters) -> List[PrivateSkillEnriched]:
        private_skills = await self.private_skills.list_by_user(
            current_user.id,
            level=filters.level,
            min_difficulty=filters.min_difficulty,
            max_difficulty=filters.max_difficulty,
        )
        return await self.enrich(self._filter_membership(private_skills, filters))

    async def search_private_skills(
        self,
        current_user: CurrentUser,
        search_query: Optional[str],
        filters: SkillFilters,
    ) -> List[PrivateSkillEnriched]:
        if not search_query or not search_query.strip():
            return await self.list_private_skills(current_user, filters)

        search_query = search_query.strip()
        common = dict(
            level=filters.level,
            min_difficulty=filters.min_difficulty,
            max_difficulty=filters.max_difficulty,
            limit=self.limit,
        )
        title_results = await self.private_skills.search(current_user.id, "title", search_query, **common)
        description_results = await self.private_skills.search(current_user.id, "description", search_query, **common)

        private_skills = merge_search_results(title_results, description_results)
        private_skills = rank_by_relevance(self._filter_membership(private_skills, filters), search_query)
        return await self.enrich(private_skills)

    async def get_private_skill(self, private_skill_id: int, current_user: CurrentUser) -> PrivateSkillEnriched:
        private_skill = await self.get_owned_or_404(private_skill_id, current_user)
        return (await self.enrich([private_skill]))[0]

    async def create_private_skill(self, data: PrivateSkillCreate, current_user: CurrentUser) -> PrivateSkill:
        record = data.to_record()
        await ensure_references_exist(self.skills, self.catalog, record)

        private_skill = await self.private_skills.create(PrivateSkill(**record, user_id=current_user.id))
        logger.info(f"Личный скилл {private_skill.id} создан пользователем {current_user.id}")
        return private_skill

    async def update_private_skill(
        self,
        private_skill_id: int,
        data: PrivateSkillUpdate,
        current_user: CurrentUser,
    ) -> PrivateSkill:
        private_skill = await self.get_owned_or_404(private_skill_id, current_user)
        changes = {field: value for field, value in data.to_changes().items() if value is not None}
        await ensure_references_exist(self.skills, self.catalog, changes)
        return await self.private_skills.update(private_skill, changes)

    async def delete_private_skill(self, private_skill_id: int, current_user: CurrentUser) -> None:
        private_skill = await self.get_owned_or_404(private_skill_id, current_user)
        await self.private_skills.delete(private_skill)
        logger.info(f"Личный скилл {private_skill_id} удалён пользователем {current_user.id}")
