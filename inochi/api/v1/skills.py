from fastapi import APIRouter, Depends, Query
from typing import List, Optional

from inochi.core.dependencies import get_current_user, get_skill_search_service, get_skill_service
from inochi.core.rbac import require_moderator
from inochi.models.skill import LevelEnum, MIN_DIFFICULTY, MAX_DIFFICULTY
from inochi.schemas.auth import CurrentUser
from inochi.schemas.skill import (
    SkillCreate,
    SkillUpdate,
    SkillFilters,
    SkillRead,
    SkillEnriched,
    SkillDetail,
    SkillCreated,
)
from inochi.services.skill_search import SkillSearchService
from inochi.services.skill_service import SkillService

router = APIRouter(tags=["skills"])


def get_skill_filters(
    level: Optional[LevelEnum] = Query(None),
    min_difficulty: Optional[int] = Query(None, ge=MIN_DIFFICULTY, le=MAX_DIFFICULTY),
    max_difficulty: Optional[int] = Query(None, ge=MIN_DIFFICULTY, le=MAX_DIFFICULTY),
    muscle_ids: List[int] = Query([]),
    equipment_ids: List[int] = Query([]),
) -> SkillFilters:
    return SkillFilters(
        level=level,
        min_difficulty=min_difficulty,
        max_difficulty=max_difficulty,
        muscle_ids=muscle_ids,
        equipment_ids=equipment_ids,
    )


@router.get("", response_model=List[SkillEnriched])
async def list_skills(
    filters: SkillFilters = Depends(get_skill_filters),
    current_user: CurrentUser = Depends(get_current_user),
    service: SkillSearchService = Depends(get_skill_search_service),
):
    """Список скиллов с фильтрами по уровню, сложности, мышцам и оборудованию"""
    return await service.list_skills(filters)


@router.get("/search", response_model=List[SkillEnriched])
async def search_skills(
    q: str = Query("", description="Поиск по названию и описанию"),
    filters: SkillFilters = Depends(get_skill_filters),
    current_user: CurrentUser = Depends(get_current_user),
    service: SkillSearchService = Depends(get_skill_search_service),
):
    """Полнотекстовый поиск; без запроса работает как обычный список"""
    return await service.search_skills(q, filters)


@router.get("/{skill_id}", response_model=SkillDetail)
async def get_skill(
    skill_id: int,
    current_user: CurrentUser = Depends(get_current_user),
    service: SkillSearchService = Depends(get_skill_search_service),
):
    return await service.get_skill(skill_id)


@router.post("", response_model=SkillCreated, status_code=201)
async def create_skill(
    skill_data: SkillCreate,
    current_user: CurrentUser = Depends(get_current_user),
    service: SkillService = Depends(get_skill_service),
):
    skill = await service.create_skill(skill_data, current_user)
    return SkillCreated(id=skill.id, message=f"Скилл «{skill.title}» создан")


@router.patch("/{skill_id}", response_model=SkillRead)
async def update_skill(
    skill_id: int,
    skill_data: SkillUpdate,
    current_user: CurrentUser = Depends(get_current_user),
    service: SkillService = Depends(get_skill_service),
):
    return await service.update_skill(skill_id, skill_data)


@router.delete("/{skill_id}")
async def delete_skill(
    skill_id: int,
    current_user: CurrentUser = Depends(require_moderator),
    service: SkillService = Depends(get_skill_service),
):
    await service.delete_skill(skill_id, current_user)
    return {"message": f"Скилл {skill_id} удалён"}
