from fastapi import APIRouter, Depends, Query
from typing import List, Optional

from inochi.core.dependencies import get_current_user, get_submission_service
from inochi.core.rbac import require_moderator
from inochi.models.submission import SubmissionStatusEnum
from inochi.schemas.auth import CurrentUser
from inochi.schemas.submission import (
    SubmissionCreate,
    SubmissionUpdate,
    SubmissionRead,
    SubmissionEnriched,
    SubmissionCreated,
    RejectRequest,
    ReviewResponse,
)
from inochi.services.submission_review import SubmissionService

router = APIRouter(tags=["submissions"])


@router.get("", response_model=List[SubmissionEnriched])
async def list_submissions(
    status: Optional[SubmissionStatusEnum] = Query(None, description="pending|approved|rejected"),
    current_user: CurrentUser = Depends(get_current_user),
    service: SubmissionService = Depends(get_submission_service),
):
    """Модератор видит все заявки, пользователь - только свои"""
    return await service.list_submissions(current_user, status)


@router.get("/{submission_id}", response_model=SubmissionEnriched)
async def get_submission(
    submission_id: int,
    current_user: CurrentUser = Depends(get_current_user),
    service: SubmissionService = Depends(get_submission_service),
):
    return await service.get_submission(submission_id, current_user)


@router.post("", response_model=SubmissionCreated, status_code=201)
async def create_submission(
    submission_data: SubmissionCreate,
    current_user: CurrentUser = Depends(get_current_user),
    service: SubmissionService = Depends(get_submission_service),
):
    submission = await service.create_submission(submission_data, current_user)
    return SubmissionCreated(
        id=submission.id,
        status=submission.status,
        message="Заявка отправлена на модерацию",
    )


@router.patch("/{submission_id}", response_model=SubmissionRead)
async def update_submission(
    submission_id: int,
    submission_data: SubmissionUpdate,
    current_user: CurrentUser = Depends(get_current_user),
    service: SubmissionService = Depends(get_submission_service),
):
    return await service.update_submission(submission_id, submission_data, current_user)


@router.post("/{submission_id}/approve", response_model=ReviewResponse)
async def approve_submission(
    submission_id: int,
    current_user: CurrentUser = Depends(require_moderator),
    service: SubmissionService = Depends(get_submission_service),
):
    skill = await service.approve_submission(submission_id, current_user)
    return ReviewResponse(
        id=submission_id,
        status=SubmissionStatusEnum.approved,
        skill_id=skill.id,
        message="Заявка одобрена",
    )


@router.post("/{submission_id}/reject", response_model=ReviewResponse)
async def reject_submission(
    submission_id: int,
    reject_data: RejectRequest,
    current_user: CurrentUser = Depends(require_moderator),
    service: SubmissionService = Depends(get_submission_service),
):
    submission = await service.reject_submission(submission_id, current_user, reject_data.rejection_reason)
    return ReviewResponse(
        id=submission.id,
        status=submission.status,
        message="Заявка отклонена",
    )


@router.delete("/{submission_id}")
async def delete_submission(
    submission_id: int,
    current_user: CurrentUser = Depends(get_current_user),
    service: SubmissionService = Depends(get_submission_service),
):
    await service.delete_submission(submission_id, current_user)
    return {"message": f"Заявка {submission_id} удалена"}
