from __future__ import annotations

from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from photocontest.db.base import Base


class Vote(Base):
    __tablename__ = 'votes'

    id: Mapped[str] = mapped_column(String(40), primary_key=True)
    user_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    photo_id: Mapped[str] = mapped_column(ForeignKey('photos.id', ondelete='CASCADE'), nullable=False, index=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    photo = relationship('Photo', back_populates='votes')

    __table_args__ = (
        UniqueConstraint('user_id', 'photo_id', name='uq_votes_user_photo'),
    )
