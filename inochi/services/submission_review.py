"""
Заявки пользователей на создание/правку скиллов и их модерация.

Машина состояний: pending -> approved, pending -> rejected.
approved и rejected - терминальные. Одобрение создаёт новый скилл
(submission_type=create) или переносит поля заявки в исходный скилл
(submission_type=edit) в той же транзакции, что и смена статуса.
Заявка из личного черновика при одобрении переносит его в каталог,
а сам черновик удаляется.

Смена статуса - условный UPDATE по status = pending: из двух
одновременных решений по одной заявке применяется только первое,
второе получает 409.
"""
import logging
from datetime import datetime
from typing import Dict, List, Optional, Set

from fastapi import HTTPException

from inochi.models.skill import Skill
from inochi.models.private_skill import PrivateSkill
from inochi.models.submission import UserSubmission, SubmissionStatusEnum, SubmissionTypeEnum
from inochi.repositories.catalog_repository import CatalogRepository
from inochi.repositories.private_skill_repository import PrivateSkillRepository
from inochi.repositories.skill_repository import SkillRepository
from inochi.repositories.submission_repository import SubmissionRepository
from inochi.schemas.auth import CurrentUser
from inochi.schemas.catalog import MuscleRead, EquipmentRead
from inochi.schemas.skill import SkillSummary
from inochi.schemas.submission import SubmissionCreate, SubmissionUpdate, SubmissionEnriched
from inochi.services.live_queries import QueryHub, live_hub, SKILLS_TOPIC, SUBMISSIONS_TOPIC
from inochi.services.skill_search import resolve_ids
from inochi.services.skill_service import ensure_references_exist

logger = logging.getLogger(__name__)

ALLOWED_TRANSITIONS: Dict[SubmissionStatusEnum, Set[SubmissionStatusEnum]] = {
    SubmissionStatusEnum.pending: {SubmissionStatusEnum.approved, SubmissionStatusEnum.rejected},
    SubmissionStatusEnum.approved: set(),
    SubmissionStatusEnum.rejected: set(),
}

# Поля, которые при одобрении переносятся из заявки в скилл
SKILL_CONTENT_FIELDS = (
    "title", "description", "level", "difficulty",
    "muscles", "equipment", "embedded_videos",
    "prerequisites", "variants", "tips",
)


def can_transition(current: SubmissionStatusEnum, target: SubmissionStatusEnum) -> bool:
    return target in ALLOWED_TRANSITIONS.get(current, set())


def ensure_transition(current: SubmissionStatusEnum, target: SubmissionStatusEnum) -> None:
    if not can_transition(current, target):
        raise HTTPException(
            status_code=409,
            detail=f"Недопустимый переход статуса: {current.value} -> {target.value}",
        )


def skill_content(submission: UserSubmission) -> dict:
    return {field: getattr(submission, field) for field in SKILL_CONTENT_FIELDS}


def check_rejection_reason(status: SubmissionStatusEnum, rejection_reason: Optional[str]) -> None:
    if status == SubmissionStatusEnum.rejected and not (rejection_reason or "").strip():
        raise HTTPException(status_code=422, detail="Укажите причину отклонения")


def mark_reviewed(
    submission: UserSubmission,
    status: SubmissionStatusEnum,
    reviewer_id: str,
    rejection_reason: Optional[str] = None,
) -> UserSubmission:
    """Перевести заявку в терминальный статус с данными ревьюера."""
    ensure_transition(submission.status, status)
    check_rejection_reason(status, rejection_reason)

    submission.status = status
    submission.reviewed_by = reviewer_id
    submission.reviewed_at = datetime.utcnow()
    if status == SubmissionStatusEnum.rejected:
        submission.rejection_reason = rejection_reason.strip()
    return submission


class SubmissionService:
    def __init__(
        self,
        submissions: SubmissionRepository,
        skills: SkillRepository,
        catalog: CatalogRepository,
        hub: Optional[QueryHub] = None,
        private_skills: Optional[PrivateSkillRepository] = None,
    ):
        self.submissions = submissions
        self.skills = skills
        self.catalog = catalog
        self.hub = hub or live_hub
        self.private_skills = private_skills

    # ------------------------------------------------------------------
    # Чтение
    # ------------------------------------------------------------------

    async def get_or_404(self, submission_id: int) -> UserSubmission:
        submission = await self.submissions.get_by_id(submission_id)
        if not submission:
            raise HTTPException(status_code=404, detail="Заявка не найдена")
        return submission

    @staticmethod
    def ensure_can_view(submission: UserSubmission, current_user: CurrentUser) -> None:
        if submission.submitted_by != current_user.id and not current_user.is_moderator:
            raise HTTPException(status_code=403, detail="Можно просматривать только свои заявки")

    async def enrich(self, submissions: List[UserSubmission]) -> List[SubmissionEnriched]:
        muscle_ids = {m for s in submissions for m in s.muscles or []}
        equipment_ids = {e for s in submissions for e in s.equipment or []}
        original_ids = {s.original_skill_id for s in submissions if s.original_skill_id}

        muscles = {m.id: m for m in await self.catalog.get_muscles_by_ids(muscle_ids)}
        equipment = {e.id: e for e in await self.catalog.get_equipment_by_ids(equipment_ids)}
        originals = {s.id: s for s in await self.skills.get_by_ids(original_ids)}

        enriched = []
        for submission in submissions:
            original = originals.get(submission.original_skill_id)
            enriched.append(SubmissionEnriched.model_validate(submission).model_copy(update={
                "muscles_data": [MuscleRead.model_validate(m) for m in resolve_ids(submission.muscles or [], muscles)],
                "equipment_data": [EquipmentRead.model_validate(e) for e in resolve_ids(submission.equipment or [], equipment)],
                "original_skill_data": SkillSummary.model_validate(original) if original else None,
            }))
        return enriched

    async def list_submissions(
        self,
        current_user: CurrentUser,
        status: Optional[SubmissionStatusEnum] = None,
    ) -> List[SubmissionEnriched]:
        """Модераторы видят все заявки, пользователи - только свои. Новые сверху."""
        if current_user.is_moderator:
            if status is not None:
                submissions = await self.submissions.list_by_status(status)
            else:
                submissions = await self.submissions.list_all()
        else:
            if status is not None:
                submissions = await self.submissions.list_by_user_and_status(current_user.id, status)
            else:
                submissions = await self.submissions.list_by_user(current_user.id)
        return await self.enrich(submissions)

    async def get_submission(self, submission_id: int, current_user: CurrentUser) -> SubmissionEnriched:
        submission = await self.get_or_404(submission_id)
        self.ensure_can_view(submission, current_user)
        return (await self.enrich([submission]))[0]

    # ------------------------------------------------------------------
    # Изменение заявок пользователем
    # ------------------------------------------------------------------

    async def create_submission(self, data: SubmissionCreate, current_user: CurrentUser) -> UserSubmission:
        record = data.to_record()

        if data.submission_type == SubmissionTypeEnum.edit:
            if not await self.skills.get_by_id(data.original_skill_id):
                raise HTTPException(status_code=400, detail=f"Исходный скилл не найден: {data.original_skill_id}")
            if await self.submissions.find_pending_edit(current_user.id, data.original_skill_id):
                raise HTTPException(status_code=409, detail="Для этого скилла уже есть правка на рассмотрении")
            if data.original_skill_id in (data.prerequisites or []) + (data.variants or []):
                raise HTTPException(status_code=400, detail="Скилл не может ссылаться на самого себя")

        await ensure_references_exist(self.skills, self.catalog, record)

        submission = await self.submissions.create(UserSubmission(
            **record,
            status=SubmissionStatusEnum.pending,
            submitted_by=current_user.id,
            submitted_at=datetime.utcnow(),
        ))
        logger.info(
            f"Заявка {submission.id} ({submission.submission_type.value}) от пользователя {current_user.id}"
        )
        await self.hub.publish(SUBMISSIONS_TOPIC)
        return submission

    async def update_submission(
        self,
        submission_id: int,
        data: SubmissionUpdate,
        current_user: CurrentUser,
    ) -> UserSubmission:
        submission = await self.get_or_404(submission_id)
        if submission.submitted_by != current_user.id:
            raise HTTPException(status_code=403, detail="Можно изменять только свои заявки")
        if submission.status != SubmissionStatusEnum.pending:
            raise HTTPException(status_code=409, detail="Изменять можно только заявки на рассмотрении")

        changes = {field: value for field, value in data.to_changes().items() if value is not None}
        if submission.original_skill_id and submission.original_skill_id in (
            (changes.get("prerequisites") or []) + (changes.get("variants") or [])
        ):
            raise HTTPException(status_code=400, detail="Скилл не может ссылаться на самого себя")
        await ensure_references_exist(self.skills, self.catalog, changes)

        for field, value in changes.items():
            setattr(submission, field, list(value) if isinstance(value, list) else value)
        submission = await self.submissions.save(submission)
        await self.hub.publish(SUBMISSIONS_TOPIC)
        return submission

    async def delete_submission(self, submission_id: int, current_user: CurrentUser) -> None:
        submission = await self.get_or_404(submission_id)
        if not current_user.is_moderator:
            if submission.submitted_by != current_user.id:
                raise HTTPException(status_code=403, detail="Можно удалять только свои заявки")
            if submission.status != SubmissionStatusEnum.pending:
                raise HTTPException(status_code=409, detail="Удалять можно только заявки на рассмотрении")

        await self.submissions.delete(submission)
        await self.hub.publish(SUBMISSIONS_TOPIC)

    # ------------------------------------------------------------------
    # Отправка личного черновика
    # ------------------------------------------------------------------

    async def submit_private_skill(self, private_skill_id: int, current_user: CurrentUser) -> UserSubmission:
        """Создать заявку на добавление в каталог из своего личного скилла."""
        private_skill = await self.private_skills.get_by_id(private_skill_id)
        if not private_skill:
            raise HTTPException(status_code=404, detail="Личный скилл не найден")
        if private_skill.user_id != current_user.id:
            raise HTTPException(status_code=403, detail="Отправлять можно только свои личные скиллы")
        if not (private_skill.description or "").strip():
            raise HTTPException(status_code=422, detail="Заполните описание перед отправкой на модерацию")
        if await self.submissions.find_pending_for_private_skill(current_user.id, private_skill_id):
            raise HTTPException(status_code=409, detail="Этот скилл уже ждёт модерации")

        record = {field: getattr(private_skill, field) for field in SKILL_CONTENT_FIELDS}
        # Ссылки могли устареть с момента сохранения черновика
        await ensure_references_exist(self.skills, self.catalog, record)

        submission = await self.submissions.create(UserSubmission(
            **{field: list(value) if isinstance(value, list) else value for field, value in record.items()},
            submission_type=SubmissionTypeEnum.create,
            status=SubmissionStatusEnum.pending,
            private_skill_id=private_skill.id,
            submitted_by=current_user.id,
            submitted_at=datetime.utcnow(),
        ))
        logger.info(f"Заявка {submission.id} из личного скилла {private_skill_id} от пользователя {current_user.id}")
        await self.hub.publish(SUBMISSIONS_TOPIC)
        return submission

    # ------------------------------------------------------------------
    # Модерация
    # ------------------------------------------------------------------

    async def claim_review(
        self,
        submission: UserSubmission,
        status: SubmissionStatusEnum,
        reviewer_id: str,
        rejection_reason: Optional[str] = None,
    ) -> None:
        """
        Занять заявку под решение в текущей транзакции, до коммита или отката.

        Проверка по загруженной записи отсекает очевидные конфликты, условный
        UPDATE в БД - одновременные решения двух модераторов.
        """
        ensure_transition(submission.status, status)
        check_rejection_reason(status, rejection_reason)

        reason = rejection_reason.strip() if rejection_reason else None
        if not await self.submissions.claim_for_review(submission.id, status, reviewer_id, reason):
            logger.warning(f"Заявка {submission.id} уже рассмотрена, решение {reviewer_id} отклонено")
            raise HTTPException(status_code=409, detail="Заявка уже рассмотрена другим модератором")

    async def _promote_private_skill(self, submission: UserSubmission) -> None:
        if not submission.private_skill_id or self.private_skills is None:
            return
        private_skill: Optional[PrivateSkill] = await self.private_skills.get_by_id(submission.private_skill_id)
        if private_skill:
            await self.private_skills.stage_delete(private_skill)

    async def approve_submission(self, submission_id: int, reviewer: CurrentUser) -> Skill:
        """Одобрить заявку и материализовать её в таблицу skills. Возвращает скилл."""
        submission = await self.get_or_404(submission_id)
        ensure_transition(submission.status, SubmissionStatusEnum.approved)

        content = skill_content(submission)
        try:
            await self.claim_review(submission, SubmissionStatusEnum.approved, reviewer.id)

            if submission.submission_type == SubmissionTypeEnum.create:
                now = datetime.utcnow()
                skill = await self.skills.stage(Skill(
                    **content,
                    created_at=now,
                    updated_at=now,
                    created_by=submission.submitted_by,
                ))
                await self._promote_private_skill(submission)
            else:
                skill = None
                if submission.original_skill_id is not None:
                    skill = await self.skills.get_by_id(submission.original_skill_id)
                if not skill:
                    raise HTTPException(status_code=409, detail="Исходный скилл заявки больше не существует")
                skill = await self.skills.update(skill, content, commit=False)

            mark_reviewed(submission, SubmissionStatusEnum.approved, reviewer.id)
            await self.submissions.save(submission)
        except Exception:
            await self.submissions.rollback()
            raise

        logger.info(f"Заявка {submission.id} одобрена модератором {reviewer.id}, скилл {skill.id}")
        await self.hub.publish(SKILLS_TOPIC)
        await self.hub.publish(SUBMISSIONS_TOPIC)
        return skill

    async def reject_submission(
        self,
        submission_id: int,
        reviewer: CurrentUser,
        rejection_reason: Optional[str],
    ) -> UserSubmission:
        submission = await self.get_or_404(submission_id)
        try:
            await self.claim_review(submission, SubmissionStatusEnum.rejected, reviewer.id, rejection_reason)
            mark_reviewed(submission, SubmissionStatusEnum.rejected, reviewer.id, rejection_reason)
            submission = await self.submissions.save(submission)
        except Exception:
            await self.submissions.rollback()
            raise

        logger.info(f"Заявка {submission.id} отклонена модератором {reviewer.id}")
        await self.hub.publish(SUBMISSIONS_TOPIC)
        return submission
