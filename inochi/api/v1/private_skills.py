from fastapi import APIRouter, Depends, Query
from typing import List

from inochi.api.v1.skills import get_skill_filters
from inochi.core.dependencies import get_current_user, get_private_skill_service, get_submission_service
from inochi.schemas.auth import CurrentUser
from inochi.schemas.private_skill import (
    PrivateSkillCreate,
    PrivateSkillUpdate,
    PrivateSkillRead,
    PrivateSkillEnriched,
    PrivateSkillCreated,
)
from inochi.schemas.skill import SkillFilters
from inochi.schemas.submission import SubmissionCreated
from inochi.services.private_skills import PrivateSkillService
from inochi.services.submission_review import SubmissionService

router = APIRouter(tags=["private-skills"])


@router.get("", response_model=List[PrivateSkillEnriched])
async def list_private_skills(
    filters: SkillFilters = Depends(get_skill_filters),
    current_user: CurrentUser = Depends(get_current_user),
    service: PrivateSkillService = Depends(get_private_skill_service),
):
    """Личные скиллы текущего пользователя"""
    return await service.list_private_skills(current_user, filters)


@router.get("/search", response_model=List[PrivateSkillEnriched])
async def search_private_skills(
    q: str = Query("", description="Поиск по названию и описанию"),
    filters: SkillFilters = Depends(get_skill_filters),
    current_user: CurrentUser = Depends(get_current_user),
    service: PrivateSkillService = Depends(get_private_skill_service),
):
    return await service.search_private_skills(current_user, q, filters)


@router.get("/{private_skill_id}", response_model=PrivateSkillEnriched)
async def get_private_skill(
    private_skill_id: int,
    current_user: CurrentUser = Depends(get_current_user),
    service: PrivateSkillService = Depends(get_private_skill_service),
):
    return await service.get_private_skill(private_skill_id, current_user)


@router.post("", response_model=PrivateSkillCreated, status_code=201)
async def create_private_skill(
    skill_data: PrivateSkillCreate,
    current_user: CurrentUser = Depends(get_current_user),
    service: PrivateSkillService = Depends(get_private_skill_service),
):
    private_skill = await service.create_private_skill(skill_data, current_user)
    return PrivateSkillCreated(id=private_skill.id, message=f"Личный скилл «{private_skill.title}» создан")


@router.patch("/{private_skill_id}", response_model=PrivateSkillRead)
async def update_private_skill(
    private_skill_id: int,
    skill_data: PrivateSkillUpdate,
    current_user: CurrentUser = Depends(get_current_user),
    service: PrivateSkillService = Depends(get_private_skill_service),
):
    return await service.update_private_skill(private_skill_id, skill_data, current_user)


@router.delete("/{private_skill_id}")
async def delete_private_skill(
    private_skill_id: int,
    current_user: CurrentUser = Depends(get_current_user),
    service: PrivateSkillService = Depends(get_private_skill_service),
):
    await service.delete_private_skill(private_skill_id, current_user)
    return {"message": f"Личный скилл {private_skill_id} удалён"}


@router.post("/{private_skill_id}/submit", response_model=SubmissionCreated, status_code=201)
async def submit_private_skill(
    private_skill_id: int,
    current_user: CurrentUser = Depends(get_current_user),
    service: SubmissionService = Depends(get_submission_service),
):
    """Отправить личный скилл на модерацию; после одобрения он попадёт в общий каталог"""
    submission = await service.submit_private_skill(private_skill_id, current_user)
    return SubmissionCreated(
        id=submission.id,
        status=submission.status,
        message="Заявка отправлена на модерацию",
    )
