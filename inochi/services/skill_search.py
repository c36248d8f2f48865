"""
Листинг и поиск скиллов.

Уровень и диапазон сложности фильтруются в БД (by_level, by_difficulty,
search_title / search_description). Обогащение мышцами/оборудованием и
фильтр по вхождению muscle_ids / equipment_ids выполняются линейным
проходом по уже выбранным записям, поэтому рассчитаны на небольшие выборки.
"""
from typing import Dict, Iterable, List, Optional, Sequence

from fastapi import HTTPException

from inochi.core.config import settings
from inochi.models.skill import Skill
from inochi.repositories.catalog_repository import CatalogRepository
from inochi.repositories.skill_repository import SkillRepository
from inochi.schemas.catalog import MuscleRead, EquipmentRead
from inochi.schemas.skill import SkillFilters, SkillEnriched, SkillDetail, SkillSummary

TITLE_WEIGHT = 2
DESCRIPTION_WEIGHT = 1
TITLE_PREFIX_BONUS = 10


def filter_by_membership(skills: Iterable[Skill], field: str, ids: Sequence[int]) -> List[Skill]:
    """Оставить скиллы, у которых поле-список пересекается с ids. Пустой ids - без фильтра."""
    skills = list(skills)
    if not ids:
        return skills
    wanted = set(ids)
    return [skill for skill in skills if wanted.intersection(getattr(skill, field) or [])]


def merge_search_results(title_results: Iterable[Skill], description_results: Iterable[Skill]) -> List[Skill]:
    """Сначала совпадения по заголовку, затем по описанию, без дублей."""
    merged: Dict[int, Skill] = {}
    for skill in list(title_results) + list(description_results):
        merged.setdefault(skill.id, skill)
    return list(merged.values())


def relevance_score(skill: Skill, search_query: str) -> int:
    terms = search_query.lower().split()
    title = (skill.title or "").lower()
    description = (skill.description or "").lower()

    score = 0
    for term in terms:
        if term in title:
            score += TITLE_WEIGHT
        if term in description:
            score += DESCRIPTION_WEIGHT
    if title.startswith(search_query.strip().lower()):
        score += TITLE_PREFIX_BONUS
    return score


def rank_by_relevance(skills: List[Skill], search_query: str) -> List[Skill]:
    # sorted стабилен: при равном счёте сохраняется порядок слияния
    return sorted(skills, key=lambda skill: relevance_score(skill, search_query), reverse=True)


def resolve_ids(ids: Iterable[int], records_by_id: Dict[int, object]) -> list:
    """Идентификаторы -> записи в исходном порядке; удалённые пропускаются."""
    return [records_by_id[record_id] for record_id in ids if record_id in records_by_id]


class SkillSearchService:
    def __init__(
        self,
        skills: SkillRepository,
        catalog: CatalogRepository,
        limit: Optional[int] = None,
    ):
        self.skills = skills
        self.catalog = catalog
        self.limit = limit or settings.SEARCH_RESULT_LIMIT

    async def enrich(self, skills: List[Skill]) -> List[SkillEnriched]:
        muscle_ids = {muscle_id for skill in skills for muscle_id in skill.muscles or []}
        equipment_ids = {eq_id for skill in skills for eq_id in skill.equipment or []}

        muscles = {m.id: m for m in await self.catalog.get_muscles_by_ids(muscle_ids)}
        equipment = {e.id: e for e in await self.catalog.get_equipment_by_ids(equipment_ids)}

        return [
            SkillEnriched.model_validate(skill).model_copy(update={
                "muscles_data": [MuscleRead.model_validate(m) for m in resolve_ids(skill.muscles or [], muscles)],
                "equipment_data": [EquipmentRead.model_validate(e) for e in resolve_ids(skill.equipment or [], equipment)],
            })
            for skill in skills
        ]

    def _filter_membership(self, skills: List[Skill], filters: SkillFilters) -> List[Skill]:
        skills = filter_by_membership(skills, "muscles", filters.muscle_ids)
        return filter_by_membership(skills, "equipment", filters.equipment_ids)

    async def list_skills(self, filters: SkillFilters) -> List[SkillEnriched]:
        skills = await self.skills.list_skills(
            level=filters.level,
            min_difficulty=filters.min_difficulty,
            max_difficulty=filters.max_difficulty,
        )
        return await self.enrich(self._filter_membership(skills, filters))

    async def search_skills(self, search_query: Optional[str], filters: SkillFilters) -> List[SkillEnriched]:
        """Текстовый поиск; пустой запрос - обычный листинг с теми же фильтрами."""
        if not search_query or not search_query.strip():
            return await self.list_skills(filters)

        search_query = search_query.strip()
        common = dict(
            level=filters.level,
            min_difficulty=filters.min_difficulty,
            max_difficulty=filters.max_difficulty,
            limit=self.limit,
        )
        title_results = await self.skills.search("title", search_query, **common)
        description_results = await self.skills.search("description", search_query, **common)

        skills = merge_search_results(title_results, description_results)
        skills = rank_by_relevance(self._filter_membership(skills, filters), search_query)
        return await self.enrich(skills)

    async def get_skill(self, skill_id: int) -> SkillDetail:
        skill = await self.skills.get_by_id(skill_id)
        if not skill:
            raise HTTPException(status_code=404, detail="Скилл не найден")

        enriched = (await self.enrich([skill]))[0]
        related = {
            s.id: s for s in await self.skills.get_by_ids(
                list(skill.prerequisites or []) + list(skill.variants or [])
            )
        }
        return SkillDetail(
            **enriched.model_dump(),
            prerequisites_data=[SkillSummary.model_validate(s) for s in resolve_ids(skill.prerequisites or [], related)],
            variants_data=[SkillSummary.model_validate(s) for s in resolve_ids(skill.variants or [], related)],
        )
