from datetime import datetime

from sqlalchemy import Column, Integer, String, Text, Enum, JSON, DateTime, CheckConstraint, Index

from inochi.core.base import Base
from inochi.models.skill import LevelEnum, MIN_DIFFICULTY, MAX_DIFFICULTY


class PrivateSkill(Base):
    """Черновик скилла, видимый только владельцу. Через заявку попадает в общий каталог."""
    __tablename__ = "private_skills"
    __table_args__ = (
        CheckConstraint(
            f"difficulty >= {MIN_DIFFICULTY} AND difficulty <= {MAX_DIFFICULTY}",
            name="ck_private_skills_difficulty_range",
        ),
        Index("private_skills_by_user", "user_id"),
        Index("private_skills_by_level", "level"),
        Index("private_skills_by_difficulty", "difficulty"),
        Index(
            "private_skills_search_title", "title",
            postgresql_using="gin", postgresql_ops={"title": "gin_trgm_ops"},
        ),
        Index(
            "private_skills_search_description", "description",
            postgresql_using="gin", postgresql_ops={"description": "gin_trgm_ops"},
        ),
    )

    id = Column(Integer, primary_key=True)
    title = Column(String(200), nullable=False)
    description = Column(Text, nullable=False, default="")
    level = Column(Enum(LevelEnum, name="skill_level"), nullable=False, default=LevelEnum.beginner)
    difficulty = Column(Integer, nullable=False, default=MIN_DIFFICULTY)

    muscles = Column(JSON, nullable=False, default=list)
    equipment = Column(JSON, nullable=False, default=list)
    embedded_videos = Column(JSON, nullable=False, default=list)
    # Ссылки только на скиллы общего каталога
    prerequisites = Column(JSON, nullable=False, default=list)
    variants = Column(JSON, nullable=False, default=list)
    tips = Column(JSON, nullable=False, default=list)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    user_id = Column(String(255), nullable=False)

    def __repr__(self):
        return f"<PrivateSkill(id={self.id}, title='{self.title}', user_id='{self.user_id}')>"
