from pydantic import BaseModel, Field, field_validator, model_validator
from typing import Optional, List
from datetime import datetime

from inochi.models.skill import LevelEnum
from inochi.models.submission import SubmissionTypeEnum, SubmissionStatusEnum
from inochi.schemas.catalog import MuscleRead, EquipmentRead
from inochi.schemas.skill import SkillContent, SkillUpdate, SkillSummary


class SubmissionCreate(SkillContent):
    submission_type: SubmissionTypeEnum = SubmissionTypeEnum.create
    original_skill_id: Optional[int] = None

    @model_validator(mode="after")
    def check_original_skill(self):
        if self.submission_type == SubmissionTypeEnum.edit and self.original_skill_id is None:
            raise ValueError("Для правки нужен original_skill_id")
        if self.submission_type == SubmissionTypeEnum.create and self.original_skill_id is not None:
            raise ValueError("original_skill_id допустим только для правки")
        return self


class SubmissionUpdate(SkillUpdate):
    pass


class RejectRequest(BaseModel):
    rejection_reason: str = Field(min_length=1, max_length=2000)

    @field_validator("rejection_reason")
    @classmethod
    def reason_not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("Укажите причину отклонения")
        return value


class SubmissionRead(BaseModel):
    id: int
    title: str
    description: str
    level: LevelEnum
    difficulty: int
    muscles: List[int]
    equipment: List[int]
    embedded_videos: List[str]
    prerequisites: List[int]
    variants: List[int]
    tips: List[str]
    submission_type: SubmissionTypeEnum
    status: SubmissionStatusEnum
    original_skill_id: Optional[int] = None
    private_skill_id: Optional[int] = None
    submitted_by: str
    submitted_at: datetime
    reviewed_by: Optional[str] = None
    reviewed_at: Optional[datetime] = None
    rejection_reason: Optional[str] = None

    class Config:
        from_attributes = True


class SubmissionEnriched(SubmissionRead):
    muscles_data: List[MuscleRead] = []
    equipment_data: List[EquipmentRead] = []
    original_skill_data: Optional[SkillSummary] = None


class SubmissionCreated(BaseModel):
    id: int
    status: SubmissionStatusEnum
    message: str


class ReviewResponse(BaseModel):
    id: int
    status: SubmissionStatusEnum
    skill_id: Optional[int] = None
    message: str
