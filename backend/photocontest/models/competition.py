from __future__ import annotations

from datetime import datetime

from sqlalchemy import DateTime, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from photocontest.db.base import Base


class Competition(Base):
    __tablename__ = 'competitions'

    id: Mapped[str] = mapped_column(String(40), primary_key=True)
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    start_date: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    end_date: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    voting_start_date: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    voting_end_date: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    status: Mapped[str] = mapped_column(String(16), nullable=False, default='draft')
    max_photos_per_user: Mapped[int] = mapped_column(Integer, nullable=False, default=5)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    categories = relationship(
        'Category',
        back_populates='competition',
        cascade='all, delete-orphan',
        passive_deletes=True,
        order_by='Category.created_at',
    )
    photos = relationship('Photo', back_populates='competition', cascade='all, delete-orphan', passive_deletes=True)

    __table_args__ = (
        Index('ix_competitions_status', 'status'),
        Index('ix_competitions_start_date', 'start_date'),
    )
