from pydantic import BaseModel, Field
from typing import Optional, List, Dict


class MusclePart(BaseModel):
    name: str
    slug: str


class MuscleCreate(BaseModel):
    name: str = Field(min_length=1, max_length=100)
    slug: Optional[str] = Field(None, max_length=100, pattern=r"^[a-z0-9]+(?:-[a-z0-9]+)*$")
    recommended_rest_hours: int = Field(48, ge=0, le=168)
    parts: List[MusclePart] = []
    muscle_group: Optional[str] = None


class MuscleRead(BaseModel):
    id: int
    name: str
    slug: str
    recommended_rest_hours: int
    parts: List[MusclePart]
    muscle_group: Optional[str] = None

    class Config:
        from_attributes = True


class EquipmentCreate(BaseModel):
    name: str = Field(min_length=1, max_length=100)
    slug: Optional[str] = Field(None, max_length=100, pattern=r"^[a-z0-9]+(?:-[a-z0-9]+)*$")
    category: str = Field(min_length=1, max_length=50)


class EquipmentRead(BaseModel):
    id: int
    name: str
    slug: str
    category: str

    class Config:
        from_attributes = True


class EquipmentGrouped(BaseModel):
    groups: Dict[str, List[EquipmentRead]]
