from __future__ import annotations

from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from photocontest.db.base import Base


class Category(Base):
    __tablename__ = 'categories'

    id: Mapped[str] = mapped_column(String(40), primary_key=True)
    competition_id: Mapped[str] = mapped_column(
        ForeignKey('competitions.id', ondelete='CASCADE'), nullable=False, index=True
    )
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    max_photos_per_user: Mapped[int] = mapped_column(Integer, nullable=False, default=3)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    competition = relationship('Competition', back_populates='categories')
    photos = relationship('Photo', back_populates='category', cascade='all, delete-orphan', passive_deletes=True)
