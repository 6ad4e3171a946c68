from __future__ import annotations

from functools import lru_cache
from typing import Generator

from fastapi import Depends, Header, HTTPException
from sqlalchemy.orm import Session

from photocontest.core.actor import Actor
from photocontest.core.config import get_settings
from photocontest.db.session import SessionLocal
from photocontest.schemas.common import UserRole
from photocontest.services.competition_service import CompetitionService
from photocontest.services.moderation_service import ModerationService
from photocontest.services.storage_service import FileStorage, LocalFileStorage
from photocontest.services.submission_service import SubmissionService
from photocontest.services.voting_service import VotingService


def get_db() -> Generator[Session, None, None]:
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_actor(
    user_id: str | None = Header(default=None, alias='X-User-Id'),
    role: str | None = Header(default=None, alias='X-User-Role'),
) -> Actor | None:
    # Identity is established upstream; the headers carry its verdict.
    if not user_id or not user_id.strip():
        return None
    return Actor(user_id=user_id.strip(), is_admin=(role or '').strip().lower() == UserRole.admin.value)


def require_actor(actor: Actor | None = Depends(get_actor)) -> Actor:
    if actor is None:
        raise HTTPException(status_code=401, detail='You must be logged in to access this resource')
    return actor


@lru_cache(maxsize=1)
def get_file_storage() -> FileStorage:
    return LocalFileStorage(settings=get_settings())


@lru_cache(maxsize=1)
def get_submission_service() -> SubmissionService:
    return SubmissionService(settings=get_settings(), storage=get_file_storage())


@lru_cache(maxsize=1)
def get_voting_service() -> VotingService:
    return VotingService()


@lru_cache(maxsize=1)
def get_moderation_service() -> ModerationService:
    return ModerationService(settings=get_settings(), storage=get_file_storage())


@lru_cache(maxsize=1)
def get_competition_service() -> CompetitionService:
    return CompetitionService(settings=get_settings(), storage=get_file_storage())
