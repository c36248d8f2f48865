from pydantic import BaseModel, Field, HttpUrl, field_validator
from typing import Optional, List
from datetime import datetime

from inochi.models.skill import LevelEnum, MIN_DIFFICULTY, MAX_DIFFICULTY
from inochi.schemas.catalog import MuscleRead, EquipmentRead


def _clean_tips(tips: Optional[List[str]]) -> Optional[List[str]]:
    if tips is None:
        return None
    cleaned = [tip.strip() for tip in tips]
    if any(not tip for tip in cleaned):
        raise ValueError("Совет не может быть пустым")
    return cleaned


class SkillContent(BaseModel):
    """Содержимое скилла: общее для скиллов и заявок."""
    title: str = Field(min_length=1, max_length=200)
    description: str = Field(min_length=1)
    level: LevelEnum
    difficulty: int = Field(ge=MIN_DIFFICULTY, le=MAX_DIFFICULTY, strict=True)
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
        """Поля для записи в таблицу (URL приводятся к строкам)."""
        data = self.model_dump()
        data["embedded_videos"] = [str(url) for url in self.embedded_videos]
        return data


class SkillCreate(SkillContent):
    pass


class SkillUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = Field(None, min_length=1)
    level: Optional[LevelEnum] = None
    difficulty: Optional[int] = Field(None, ge=MIN_DIFFICULTY, le=MAX_DIFFICULTY, strict=True)
    muscles: Optional[List[int]] = None
    equipment: Optional[List[int]] = None
    embedded_videos: Optional[List[HttpUrl]] = None
    prerequisites: Optional[List[int]] = None
    variants: Optional[List[int]] = None
    tips: Optional[List[str]] = None

    @field_validator("tips")
    @classmethod
    def tips_not_empty(cls, value):
        return _clean_tips(value)

    def to_changes(self) -> dict:
        """Только переданные поля."""
        data = self.model_dump(exclude_unset=True)
        if data.get("embedded_videos") is not None:
            data["embedded_videos"] = [str(url) for url in self.embedded_videos]
        return data


class SkillFilters(BaseModel):
    level: Optional[LevelEnum] = None
    min_difficulty: Optional[int] = Field(None, ge=MIN_DIFFICULTY, le=MAX_DIFFICULTY)
    max_difficulty: Optional[int] = Field(None, ge=MIN_DIFFICULTY, le=MAX_DIFFICULTY)
    muscle_ids: List[int] = []
    equipment_ids: List[int] = []


class SkillSummary(BaseModel):
    id: int
    title: str
    level: LevelEnum
    difficulty: int

    class Config:
        from_attributes = True


class SkillRead(BaseModel):
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
    created_by: str

    class Config:
        from_attributes = True


class SkillEnriched(SkillRead):
    muscles_data: List[MuscleRead] = []
    equipment_data: List[EquipmentRead] = []


class SkillDetail(SkillEnriched):
    prerequisites_data: List[SkillSummary] = []
    variants_data: List[SkillSummary] = []


class SkillCreated(BaseModel):
    id: int
    message: str
