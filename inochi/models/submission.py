import enum
from datetime import datetime

from sqlalchemy import (
    Column, Integer, String, Text, Enum, JSON, DateTime, ForeignKey, CheckConstraint, Index
)

from inochi.core.base import Base
from inochi.models.skill import LevelEnum, MIN_DIFFICULTY, MAX_DIFFICULTY


class SubmissionTypeEnum(str, enum.Enum):
    create = "create"
    edit = "edit"


class SubmissionStatusEnum(str, enum.Enum):
    pending = "pending"
    approved = "approved"
    rejected = "rejected"


class UserSubmission(Base):
    __tablename__ = "user_submissions"
    __table_args__ = (
        CheckConstraint(
            f"difficulty >= {MIN_DIFFICULTY} AND difficulty <= {MAX_DIFFICULTY}",
            name="ck_user_submissions_difficulty_range",
        ),
        # original_skill_id есть только у правок. После удаления исходного скилла
        # он обнуляется, заявка остаётся в истории
        CheckConstraint(
            "submission_type = 'edit' OR original_skill_id IS NULL",
            name="ck_user_submissions_original_skill",
        ),
        CheckConstraint(
            "submission_type = 'create' OR private_skill_id IS NULL",
            name="ck_user_submissions_private_skill",
        ),
        CheckConstraint(
            "status != 'rejected' OR rejection_reason IS NOT NULL",
            name="ck_user_submissions_rejection_reason",
        ),
        Index("user_submissions_by_user", "submitted_by"),
        Index("user_submissions_by_status", "status"),
        Index("user_submissions_by_user_and_status", "submitted_by", "status"),
        Index("user_submissions_by_private_skill", "private_skill_id"),
    )

    id = Column(Integer, primary_key=True)

    # Все поля скилла
    title = Column(String(200), nullable=False)
    description = Column(Text, nullable=False)
    level = Column(Enum(LevelEnum, name="skill_level"), nullable=False)
    difficulty = Column(Integer, nullable=False)
    muscles = Column(JSON, nullable=False, default=list)
    equipment = Column(JSON, nullable=False, default=list)
    embedded_videos = Column(JSON, nullable=False, default=list)
    prerequisites = Column(JSON, nullable=False, default=list)
    variants = Column(JSON, nullable=False, default=list)
    tips = Column(JSON, nullable=False, default=list)

    # Поля заявки
    submission_type = Column(Enum(SubmissionTypeEnum, name="submission_type"), nullable=False)
    status = Column(
        Enum(SubmissionStatusEnum, name="submission_status"),
        nullable=False,
        default=SubmissionStatusEnum.pending,
    )
    original_skill_id = Column(Integer, ForeignKey("skills.id", ondelete="SET NULL"), nullable=True)
    # Черновик, из которого отправлена заявка; удаляется при одобрении
    private_skill_id = Column(Integer, ForeignKey("private_skills.id", ondelete="SET NULL"), nullable=True)
    submitted_by = Column(String(255), nullable=False)
    submitted_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    reviewed_by = Column(String(255), nullable=True)
    reviewed_at = Column(DateTime, nullable=True)
    rejection_reason = Column(Text, nullable=True)

    def __repr__(self):
        return f"<UserSubmission(id={self.id}, type={self.submission_type}, status={self.status})>"
