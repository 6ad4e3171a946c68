from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime

from sqlalchemy import and_, asc, desc, distinct, func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from photocontest.core.actor import Actor
from photocontest.core.errors import (
    AlreadyVoted,
    CannotVoteOwnPhoto,
    CompetitionNotFound,
    PhotoNotApproved,
    PhotoNotFound,
)
from photocontest.models.category import Category
from photocontest.models.competition import Competition
from photocontest.models.photo import Photo
from photocontest.models.vote import Vote
from photocontest.schemas.api import PhotoListFilters
from photocontest.schemas.common import PhotoSort, PhotoStatus, SortOrder
from photocontest.utils.ids import generate_vote_id
from photocontest.utils.timezone import Clock, utc_now

LOGGER = logging.getLogger(__name__)


@dataclass(slots=True)
class VoteStatus:
    vote_count: int
    user_has_voted: bool
    can_vote: bool


@dataclass(slots=True)
class RankedPhoto:
    photo: Photo
    category_name: str
    vote_count: int
    user_has_voted: bool
    can_vote: bool


@dataclass(slots=True)
class RankedPhotoPage:
    photos: list[RankedPhoto]
    total: int
    limit: int
    offset: int


@dataclass(slots=True)
class CategoryVotingStats:
    category_id: str
    category_name: str
    vote_count: int
    photo_count: int


@dataclass(slots=True)
class VotingStats:
    total_votes: int
    categories: list[CategoryVotingStats]


@dataclass(slots=True)
class VoteHistoryEntry:
    id: str
    photo_id: str
    photo_title: str
    category_name: str
    voted_at: datetime


def can_vote(
    *,
    user_id: str | None,
    photo_owner_id: str | None,
    photo_status: str | None,
    user_has_voted: bool,
) -> bool:
    """Single source of truth for whether ``user_id`` may vote on a photo.

    A missing photo is represented by ``photo_owner_id``/``photo_status`` being None.
    """
    if not user_id or photo_status is None:
        return False
    return photo_status == PhotoStatus.approved.value and photo_owner_id != user_id and not user_has_voted


class VotingService:
    def __init__(self, clock: Clock = utc_now) -> None:
        self._clock = clock

    def cast_vote(self, session: Session, actor: Actor, photo_id: str) -> int:
        photo = session.get(Photo, photo_id, populate_existing=True)
        if photo is None:
            raise PhotoNotFound()
        if photo.status != PhotoStatus.approved.value:
            raise PhotoNotApproved()
        if photo.user_id == actor.user_id:
            raise CannotVoteOwnPhoto()
        if self._has_voted(session, actor.user_id, photo_id):
            raise AlreadyVoted()

        session.add(Vote(id=generate_vote_id(), user_id=actor.user_id, photo_id=photo_id, created_at=self._clock()))
        try:
            session.commit()
        except IntegrityError as exc:
            session.rollback()
            if self._has_voted(session, actor.user_id, photo_id):
                raise AlreadyVoted() from exc
            if session.get(Photo, photo_id, populate_existing=True) is None:
                raise PhotoNotFound() from exc
            raise

        LOGGER.debug('Vote cast by user=%s on photo=%s', actor.user_id, photo_id)
        return self.get_photo_vote_count(session, photo_id)

    def get_photo_vote_count(self, session: Session, photo_id: str) -> int:
        return int(session.execute(select(func.count(Vote.id)).where(Vote.photo_id == photo_id)).scalar_one())

    def get_user_vote_status(self, session: Session, actor: Actor | None, photo_id: str) -> VoteStatus:
        vote_count = self.get_photo_vote_count(session, photo_id)
        if actor is None:
            return VoteStatus(vote_count=vote_count, user_has_voted=False, can_vote=False)

        user_has_voted = self._has_voted(session, actor.user_id, photo_id)
        photo = session.get(Photo, photo_id, populate_existing=True)
        return VoteStatus(
            vote_count=vote_count,
            user_has_voted=user_has_voted,
            can_vote=can_vote(
                user_id=actor.user_id,
                photo_owner_id=photo.user_id if photo else None,
                photo_status=photo.status if photo else None,
                user_has_voted=user_has_voted,
            ),
        )

    def get_photos_with_votes(
        self,
        session: Session,
        competition_id: str,
        filters: PhotoListFilters | None = None,
        actor: Actor | None = None,
    ) -> RankedPhotoPage:
        filters = filters or PhotoListFilters()
        self._require_competition(session, competition_id)

        conditions = [
            Photo.competition_id == competition_id,
            Photo.status == PhotoStatus.approved.value,
        ]
        if filters.category_id:
            conditions.append(Photo.category_id == filters.category_id)

        vote_count = func.count(Vote.id).label('vote_count')
        query = (
            select(Photo, Category.name, vote_count)
            .join(Category, Photo.category_id == Category.id)
            .outerjoin(Vote, Vote.photo_id == Photo.id)
            .where(*conditions)
            .group_by(Photo.id, Category.name)
            .order_by(*_ordering(filters.sort_by, filters.order, vote_count))
            .limit(filters.limit)
            .offset(filters.offset)
        )
        rows = session.execute(query).all()

        total = int(session.execute(select(func.count(Photo.id)).where(*conditions)).scalar_one())

        voted_ids: set[str] = set()
        if actor is not None and rows:
            voted_ids = set(
                session.execute(
                    select(Vote.photo_id).where(
                        Vote.user_id == actor.user_id,
                        Vote.photo_id.in_([photo.id for photo, _, _ in rows]),
                    )
                ).scalars()
            )

        photos: list[RankedPhoto] = []
        for photo, category_name, count in rows:
            user_has_voted = photo.id in voted_ids
            photos.append(
                RankedPhoto(
                    photo=photo,
                    category_name=category_name,
                    vote_count=int(count),
                    user_has_voted=user_has_voted,
                    can_vote=can_vote(
                        user_id=actor.user_id if actor else None,
                        photo_owner_id=photo.user_id,
                        photo_status=photo.status,
                        user_has_voted=user_has_voted,
                    ),
                )
            )

        return RankedPhotoPage(photos=photos, total=total, limit=filters.limit, offset=filters.offset)

    def get_top_photos(
        self,
        session: Session,
        competition_id: str,
        category_id: str | None = None,
        limit: int = 10,
        actor: Actor | None = None,
    ) -> RankedPhotoPage:
        filters = PhotoListFilters(
            category_id=category_id,
            sort_by=PhotoSort.votes,
            order=SortOrder.desc,
            limit=limit,
            offset=0,
        )
        return self.get_photos_with_votes(session, competition_id, filters, actor)

    def get_voting_stats(self, session: Session, competition_id: str) -> VotingStats:
        self._require_competition(session, competition_id)

        total_votes = session.execute(
            select(func.count(Vote.id))
            .select_from(Vote)
            .join(Photo, Vote.photo_id == Photo.id)
            .where(Photo.competition_id == competition_id)
        ).scalar_one()

        rows = session.execute(
            select(
                Category.id,
                Category.name,
                func.count(Vote.id),
                func.count(distinct(Photo.id)),
            )
            .select_from(Category)
            .outerjoin(
                Photo,
                and_(Photo.category_id == Category.id, Photo.status == PhotoStatus.approved.value),
            )
            .outerjoin(Vote, Vote.photo_id == Photo.id)
            .where(Category.competition_id == competition_id)
            .group_by(Category.id, Category.name)
            .order_by(Category.name.asc(), Category.id.asc())
        ).all()

        return VotingStats(
            total_votes=int(total_votes),
            categories=[
                CategoryVotingStats(
                    category_id=category_id,
                    category_name=name,
                    vote_count=int(votes),
                    photo_count=int(photos),
                )
                for category_id, name, votes, photos in rows
            ],
        )

    def get_user_vote_history(
        self,
        session: Session,
        actor: Actor,
        competition_id: str | None = None,
    ) -> list[VoteHistoryEntry]:
        query = (
            select(Vote.id, Vote.photo_id, Photo.title, Category.name, Vote.created_at)
            .join(Photo, Vote.photo_id == Photo.id)
            .join(Category, Photo.category_id == Category.id)
            .where(Vote.user_id == actor.user_id)
        )
        if competition_id:
            query = query.where(Photo.competition_id == competition_id)

        rows = session.execute(query.order_by(desc(Vote.created_at), desc(Vote.id))).all()
        return [
            VoteHistoryEntry(id=vote_id, photo_id=photo_id, photo_title=title, category_name=name, voted_at=voted_at)
            for vote_id, photo_id, title, name, voted_at in rows
        ]

    @staticmethod
    def _has_voted(session: Session, user_id: str, photo_id: str) -> bool:
        existing = session.execute(
            select(Vote.id).where(Vote.user_id == user_id, Vote.photo_id == photo_id)
        ).scalar_one_or_none()
        return existing is not None

    @staticmethod
    def _require_competition(session: Session, competition_id: str) -> None:
        if session.get(Competition, competition_id) is None:
            raise CompetitionNotFound()


def _ordering(sort_by: PhotoSort, order: SortOrder, vote_count):  # type: ignore[no-untyped-def]
    direction = desc if order == SortOrder.desc else asc
    if sort_by == PhotoSort.votes:
        return [direction(vote_count), direction(Photo.created_at), direction(Photo.id)]
    if sort_by == PhotoSort.date:
        return [direction(Photo.created_at), direction(Photo.id)]
    return [direction(Photo.title), direction(Photo.id)]
