from datetime import datetime
from typing import Optional, List

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, update

from inochi.models.submission import UserSubmission, SubmissionStatusEnum, SubmissionTypeEnum


class SubmissionRepository:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def _list(self, *conditions) -> List[UserSubmission]:
        query = select(UserSubmission).where(*conditions).order_by(
            UserSubmission.submitted_at.desc(), UserSubmission.id.desc()
        )
        result = await self.db.execute(query)
        return list(result.scalars().all())

    async def get_by_id(self, submission_id: int) -> Optional[UserSubmission]:
        result = await self.db.execute(
            select(UserSubmission).where(UserSubmission.id == submission_id)
        )
        return result.scalar_one_or_none()

    async def list_all(self) -> List[UserSubmission]:
        return await self._list()

    async def list_by_status(self, status: SubmissionStatusEnum) -> List[UserSubmission]:
        return await self._list(UserSubmission.status == status)

    async def list_by_user(self, user_id: str) -> List[UserSubmission]:
        return await self._list(UserSubmission.submitted_by == user_id)

    async def list_by_user_and_status(
        self, user_id: str, status: SubmissionStatusEnum
    ) -> List[UserSubmission]:
        return await self._list(
            UserSubmission.submitted_by == user_id,
            UserSubmission.status == status,
        )

    async def find_pending_edit(self, user_id: str, original_skill_id: int) -> Optional[UserSubmission]:
        """Незакрытая правка того же скилла от того же пользователя (через by_user_and_status)."""
        result = await self.db.execute(
            select(UserSubmission).where(
                UserSubmission.submitted_by == user_id,
                UserSubmission.status == SubmissionStatusEnum.pending,
                UserSubmission.submission_type == SubmissionTypeEnum.edit,
                UserSubmission.original_skill_id == original_skill_id,
            )
        )
        return result.scalars().first()

    async def find_pending_for_private_skill(self, user_id: str, private_skill_id: int) -> Optional[UserSubmission]:
        result = await self.db.execute(
            select(UserSubmission).where(
                UserSubmission.submitted_by == user_id,
                UserSubmission.status == SubmissionStatusEnum.pending,
                UserSubmission.private_skill_id == private_skill_id,
            )
        )
        return result.scalars().first()

    async def claim_for_review(
        self,
        submission_id: int,
        status: SubmissionStatusEnum,
        reviewer_id: str,
        rejection_reason: Optional[str] = None,
    ) -> bool:
        """
        Условный UPDATE ... WHERE status = pending в текущей транзакции, без коммита.
        False - заявку уже перевёл в терминальный статус другой запрос.
        Строка остаётся заблокированной до коммита или отката.
        """
        result = await self.db.execute(
            update(UserSubmission)
            .where(
                UserSubmission.id == submission_id,
                UserSubmission.status == SubmissionStatusEnum.pending,
            )
            .values(
                status=status,
                reviewed_by=reviewer_id,
                reviewed_at=datetime.utcnow(),
                rejection_reason=rejection_reason,
            )
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1

    async def create(self, submission: UserSubmission) -> UserSubmission:
        self.db.add(submission)
        await self.db.commit()
        await self.db.refresh(submission)
        return submission

    async def save(self, submission: UserSubmission) -> UserSubmission:
        """Коммит текущей транзакции вместе с изменениями заявки."""
        await self.db.commit()
        await self.db.refresh(submission)
        return submission

    async def rollback(self) -> None:
        await self.db.rollback()

    async def delete(self, submission: UserSubmission) -> None:
        await self.db.delete(submission)
        await self.db.commit()
