from sqlalchemy import Column, Integer, String, Index

from inochi.core.base import Base


class Equipment(Base):
    __tablename__ = "equipment"
    __table_args__ = (
        Index("equipment_by_slug", "slug", unique=True),
        Index("equipment_by_category", "category"),
    )

    id = Column(Integer, primary_key=True)
    name = Column(String(100), nullable=False)
    slug = Column(String(100), nullable=False)
    category = Column(String(50), nullable=False)  # basic | advanced | specialty

    def __repr__(self):
        return f"<Equipment(id={self.id}, slug='{self.slug}')>"
