from __future__ import annotations

from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, Index, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from photocontest.db.base import Base


class Photo(Base):
    __tablename__ = 'photos'

    id: Mapped[str] = mapped_column(String(40), primary_key=True)
    user_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    competition_id: Mapped[str] = mapped_column(
        ForeignKey('competitions.id', ondelete='CASCADE'), nullable=False, index=True
    )
    category_id: Mapped[str] = mapped_column(ForeignKey('categories.id', ondelete='CASCADE'), nullable=False, index=True)
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    file_path: Mapped[str] = mapped_column(Text, nullable=False)
    file_size: Mapped[int] = mapped_column(Integer, nullable=False)
    mime_type: Mapped[str] = mapped_column(String(32), nullable=False)
    date_taken: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    location: Mapped[str] = mapped_column(String(200), nullable=False)
    camera_info: Mapped[str | None] = mapped_column(String(200), nullable=True)
    settings: Mapped[str | None] = mapped_column(String(200), nullable=True)
    status: Mapped[str] = mapped_column(String(16), nullable=False, default='pending', index=True)
    rejection_reason: Mapped[str | None] = mapped_column(Text, nullable=True)
    approved_by: Mapped[str | None] = mapped_column(String(64), nullable=True)
    approved_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    rejected_by: Mapped[str | None] = mapped_column(String(64), nullable=True)
    rejected_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    # Position within the owner's per-category quota; unique per (user, category).
    quota_slot: Mapped[int] = mapped_column(Integer, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    competition = relationship('Competition', back_populates='photos')
    category = relationship('Category', back_populates='photos')
    votes = relationship('Vote', back_populates='photo', cascade='all, delete-orphan', passive_deletes=True)
    reports = relationship('Report', back_populates='photo', cascade='all, delete-orphan', passive_deletes=True)

    __table_args__ = (
        Index('ix_photos_user_id_category_id', 'user_id', 'category_id'),
        UniqueConstraint('user_id', 'category_id', 'quota_slot', name='uq_photos_user_category_slot'),
    )
