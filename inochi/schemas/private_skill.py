from pydantic import BaseModel, Field, HttpUrl, field_validator
from typing import List
from datetime import datetime

from inochi.models.skill import LevelEnum, MIN_DIFFICULTY, MAX_DIFFICULTY
from inochi.schemas.catalog import MuscleRead, EquipmentRead
from inochi.schemas.skill import SkillUpdate, _clean_tips


class PrivateSkillCreate(BaseModel):
    """Черновик можно начать с одного названия, остальное дополняется правками."""
    title: str = Field(min_length=1, max_length=200)
    description: str = ""
    level: LevelEnum = LevelEnum.beginner
    difficulty: int = Field(MIN_DIFFICULTY, ge=MIN_DIFFICULTY, le=MAX_DIFFICULTY, strict=True)
    muscles: List[int] = []
    equipment: List[int] = []
    embedded_videos: List[HttpUrl] = []
    prerequisites: List[int] = []
    variants: List[int] = []
    tips: List[str] = []

    @field_validator("tips")
    @classmethod
    def tips_not_empty(cls, value):
        return _clean_tips(value)

    def to_record(self) -> dict:
        data = self.model_dump()
        data["embedded_videos"] = [str(url) for url in self.embedded_videos]
        return data


class PrivateSkillUpdate(SkillUpdate):
    pass


class PrivateSkillRead(BaseModel):
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
    created_at: datetime
    updated_at: datetime
    user_id: str

    class Config:
        from_attributes = True


class PrivateSkillEnriched(PrivateSkillRead):
    muscles_data: List[MuscleRead] = []
    equipment_data: List[EquipmentRead] = []


class PrivateSkillCreated(BaseModel):
    id: int
    message: str
