import enum
from datetime import datetime

from sqlalchemy import Column, Integer, String, Text, Enum, JSON, DateTime, CheckConstraint, Index

from inochi.core.base import Base

MIN_DIFFICULTY = 1
MAX_DIFFICULTY = 10


class LevelEnum(str, enum.Enum):
    beginner = "beginner"
    intermediate = "intermediate"
    advanced = "advanced"
    expert = "expert"
    elite = "elite"


class Skill(Base):
    __tablename__ = "skills"
    __table_args__ = (
        CheckConstraint(
            f"difficulty >= {MIN_DIFFICULTY} AND difficulty <= {MAX_DIFFICULTY}",
            name="ck_skills_difficulty_range",
        ),
        Index("skills_by_level", "level"),
        Index("skills_by_difficulty", "difficulty"),
        # Полнотекстовые пути доступа; фильтры level/difficulty идут через индексы выше
        Index(
            "skills_search_title", "title",
            postgresql_using="gin", postgresql_ops={"title": "gin_trgm_ops"},
        ),
        Index(
            "skills_search_description", "description",
            postgresql_using="gin", postgresql_ops={"description": "gin_trgm_ops"},
        ),
    )

    id = Column(Integer, primary_key=True)
    title = Column(String(200), nullable=False)
    description = Column(Text, nullable=False)
    level = Column(Enum(LevelEnum, name="skill_level"), nullable=False)
    difficulty = Column(Integer, nullable=False)

    # Списки идентификаторов других записей, порядок сохраняется
    muscles = Column(JSON, nullable=False, default=list)
    equipment = Column(JSON, nullable=False, default=list)
    embedded_videos = Column(JSON, nullable=False, default=list)
    prerequisites = Column(JSON, nullable=False, default=list)
    variants = Column(JSON, nullable=False, default=list)
    tips = Column(JSON, nullable=False, default=list)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    created_by = Column(String(255), nullable=False)

    def __repr__(self):
        return f"<Skill(id={self.id}, title='{self.title}')>"
