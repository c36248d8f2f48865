from sqlalchemy import Column, Integer, String, JSON, Index

from inochi.core.base import Base


class Muscle(Base):
    __tablename__ = "muscles"
    __table_args__ = (
        Index("muscles_by_slug", "slug", unique=True),
        Index("muscles_by_muscle_group", "muscle_group"),
    )

    id = Column(Integer, primary_key=True)
    name = Column(String(100), nullable=False)
    slug = Column(String(100), nullable=False)
    recommended_rest_hours = Column(Integer, nullable=False, default=48)
    # Упорядоченный список частей мышцы: [{"name": ..., "slug": ...}]
    parts = Column(JSON, nullable=False, default=list)
    muscle_group = Column(String(50), nullable=True)  # upper_body_push, upper_body_pull, core, lower_body

    def __repr__(self):
        return f"<Muscle(id={self.id}, slug='{self.slug}')>"
