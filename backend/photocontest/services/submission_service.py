from __future__ import annotations

import logging
from dataclasses import dataclass

from sqlalchemy import and_, delete, desc, func, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from photocontest.core.actor import Actor
from photocontest.core.config import Settings
from photocontest.core.errors import (
    CategoryNotFound,
    CompetitionNotActive,
    FileTooLarge,
    InvalidFileType,
    NotPhotoOwner,
    PhotoNotEditable,
    PhotoNotFound,
    SubmissionLimitExceeded,
)
from photocontest.models.category import Category
from photocontest.models.competition import Competition
from photocontest.models.photo import Photo
from photocontest.schemas.api import PhotoMetadataIn, PhotoUpdateIn
from photocontest.schemas.common import CompetitionStatus, PhotoStatus
from photocontest.services.storage_service import FileStorage, StoredFile
from photocontest.utils.ids import generate_photo_id
from photocontest.utils.timezone import Clock, utc_now

LOGGER = logging.getLogger(__name__)


@dataclass(slots=True)
class OwnedPhoto:
    photo: Photo
    category_name: str


@dataclass(slots=True)
class CategorySubmissionCount:
    category_id: str
    category_name: str
    count: int
    limit: int


@dataclass(slots=True)
class SubmissionCounts:
    categories: list[CategorySubmissionCount]

    @property
    def submission_counts(self) -> dict[str, int]:
        return {row.category_id: row.count for row in self.categories}

    @property
    def limits(self) -> dict[str, int]:
        return {row.category_id: row.limit for row in self.categories}


class SubmissionService:
    def __init__(self, settings: Settings, storage: FileStorage, clock: Clock = utc_now) -> None:
        self._settings = settings
        self._storage = storage
        self._clock = clock

    def upload_photo(
        self,
        session: Session,
        actor: Actor,
        *,
        category_id: str,
        metadata: PhotoMetadataIn,
        data: bytes,
        content_type: str,
    ) -> Photo:
        content_type = content_type.split(';', 1)[0].strip().lower()
        self._validate_file(data, content_type)

        category = session.get(Category, category_id)
        if category is None:
            raise CategoryNotFound()
        competition = session.get(Competition, category.competition_id, populate_existing=True)
        if competition is None or competition.status != CompetitionStatus.open.value:
            raise CompetitionNotActive()

        limit = category.max_photos_per_user
        photo_id = generate_photo_id()
        stored: StoredFile | None = None
        attempts = max(self._settings.submission_retry_attempts, 1)
        attempt = 0

        while True:
            attempt += 1
            used_slots = self._used_slots(session, actor.user_id, category_id)
            if len(used_slots) >= limit:
                self._discard(stored)
                raise SubmissionLimitExceeded(limit)
            slot = next(i for i in range(limit) if i not in used_slots)

            if stored is None:
                stored = self._storage.save(
                    folder=category.competition_id,
                    file_id=photo_id,
                    data=data,
                    content_type=content_type,
                )

            now = self._clock()
            photo = Photo(
                id=photo_id,
                user_id=actor.user_id,
                competition_id=category.competition_id,
                category_id=category_id,
                title=metadata.title,
                description=metadata.description,
                file_path=stored.path,
                file_size=stored.size,
                mime_type=stored.mime_type,
                date_taken=metadata.date_taken,
                location=metadata.location,
                camera_info=metadata.camera_info,
                settings=metadata.settings,
                status=PhotoStatus.pending.value,
                quota_slot=slot,
                created_at=now,
                updated_at=now,
            )
            session.add(photo)
            try:
                session.commit()
            except IntegrityError as exc:
                session.rollback()
                if session.get(Category, category_id, populate_existing=True) is None:
                    self._discard(stored)
                    raise CategoryNotFound() from exc
                if attempt >= attempts:
                    self._discard(stored)
                    if len(self._used_slots(session, actor.user_id, category_id)) >= limit:
                        raise SubmissionLimitExceeded(limit) from exc
                    raise
                # Another upload claimed the same quota slot first.
                LOGGER.warning(
                    'Quota slot conflict for user=%s category=%s slot=%s (attempt %s/%s)',
                    actor.user_id,
                    category_id,
                    slot,
                    attempt,
                    attempts,
                )
                continue

            LOGGER.info('Photo %s submitted by user=%s to category=%s', photo.id, actor.user_id, category_id)
            return photo

    def update_photo(self, session: Session, actor: Actor, photo_id: str, changes: PhotoUpdateIn) -> Photo:
        self._load_editable(session, actor, photo_id)

        values = changes.model_dump(exclude_unset=True, exclude_none=True)
        values['updated_at'] = self._clock()
        result = session.execute(
            update(Photo)
            .where(
                Photo.id == photo_id,
                Photo.user_id == actor.user_id,
                Photo.status == PhotoStatus.pending.value,
            )
            .values(**values)
        )
        if result.rowcount == 0:
            session.rollback()
            self._load_editable(session, actor, photo_id)
            raise PhotoNotEditable()
        session.commit()

        photo = session.get(Photo, photo_id, populate_existing=True)
        if photo is None:
            raise PhotoNotFound()
        return photo

    def delete_photo(self, session: Session, actor: Actor, photo_id: str) -> None:
        photo = self._load_editable(session, actor, photo_id)
        file_path = photo.file_path

        result = session.execute(
            delete(Photo).where(
                Photo.id == photo_id,
                Photo.user_id == actor.user_id,
                Photo.status == PhotoStatus.pending.value,
            )
        )
        if result.rowcount == 0:
            session.rollback()
            self._load_editable(session, actor, photo_id)
            raise PhotoNotEditable()
        session.commit()
        session.expunge_all()

        self._storage.remove(file_path)
        LOGGER.info('Photo %s withdrawn by owner %s', photo_id, actor.user_id)

    def get_user_photos(
        self,
        session: Session,
        actor: Actor,
        competition_id: str | None = None,
        category_id: str | None = None,
    ) -> list[OwnedPhoto]:
        query = (
            select(Photo, Category.name)
            .join(Category, Photo.category_id == Category.id)
            .where(Photo.user_id == actor.user_id)
        )
        if competition_id:
            query = query.where(Photo.competition_id == competition_id)
        if category_id:
            query = query.where(Photo.category_id == category_id)

        rows = session.execute(query.order_by(desc(Photo.created_at), desc(Photo.id))).all()
        return [OwnedPhoto(photo=photo, category_name=category_name) for photo, category_name in rows]

    def get_photo_for_owner(self, session: Session, actor: Actor, photo_id: str) -> OwnedPhoto:
        row = session.execute(
            select(Photo, Category.name)
            .join(Category, Photo.category_id == Category.id)
            .where(Photo.id == photo_id)
        ).one_or_none()
        if row is None:
            raise PhotoNotFound()
        photo, category_name = row
        if photo.user_id != actor.user_id:
            raise NotPhotoOwner('You can only view your own photos')
        return OwnedPhoto(photo=photo, category_name=category_name)

    def get_user_submission_counts(
        self,
        session: Session,
        actor: Actor,
        competition_id: str | None = None,
    ) -> SubmissionCounts:
        photo_count = func.count(Photo.id)
        if competition_id:
            # Every category of the competition is listed so empty quotas show up too.
            query = (
                select(Category.id, Category.name, Category.max_photos_per_user, photo_count)
                .select_from(Category)
                .outerjoin(Photo, and_(Photo.category_id == Category.id, Photo.user_id == actor.user_id))
                .where(Category.competition_id == competition_id)
            )
        else:
            query = (
                select(Category.id, Category.name, Category.max_photos_per_user, photo_count)
                .select_from(Photo)
                .join(Category, Photo.category_id == Category.id)
                .where(Photo.user_id == actor.user_id)
            )
        query = query.group_by(Category.id, Category.name, Category.max_photos_per_user).order_by(
            Category.name.asc(), Category.id.asc()
        )

        rows = session.execute(query).all()
        return SubmissionCounts(
            categories=[
                CategorySubmissionCount(
                    category_id=category_id,
                    category_name=name,
                    count=int(count),
                    limit=int(limit),
                )
                for category_id, name, limit, count in rows
            ]
        )

    def _validate_file(self, data: bytes, content_type: str) -> None:
        if content_type not in self._settings.allowed_mime_types:
            raise InvalidFileType()
        if len(data) > self._settings.max_upload_bytes:
            limit_mb = self._settings.max_upload_bytes // (1024 * 1024)
            raise FileTooLarge(f'File size cannot exceed {limit_mb}MB')

    def _load_editable(self, session: Session, actor: Actor, photo_id: str) -> Photo:
        photo = session.get(Photo, photo_id, populate_existing=True)
        if photo is None:
            raise PhotoNotFound()
        if photo.user_id != actor.user_id:
            raise NotPhotoOwner()
        if photo.status != PhotoStatus.pending.value:
            raise PhotoNotEditable()
        return photo

    def _discard(self, stored: StoredFile | None) -> None:
        if stored is not None:
            self._storage.remove(stored.path)

    @staticmethod
    def _used_slots(session: Session, user_id: str, category_id: str) -> set[int]:
        rows = session.execute(
            select(Photo.quota_slot).where(Photo.user_id == user_id, Photo.category_id == category_id)
        ).scalars()
        return set(rows)
