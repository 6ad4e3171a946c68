from __future__ import annotations

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from photocontest.api.deps import get_actor, get_db, get_voting_service, require_actor
from photocontest.core.actor import Actor
from photocontest.schemas.api import (
    CastVoteOut,
    CategoryVotingStatsOut,
    PhotoListFilters,
    RankedPhotoOut,
    RankedPhotoPageOut,
    VoteHistoryEntryOut,
    VoteHistoryOut,
    VoteStatusOut,
    VotingStatsOut,
)
from photocontest.schemas.common import PhotoSort, SortOrder
from photocontest.services.voting_service import RankedPhotoPage, VotingService
from photocontest.utils.timezone import ensure_utc

router = APIRouter()


@router.post('/photos/{photo_id}/votes', response_model=CastVoteOut)
def cast_vote(
    photo_id: str,
    actor: Actor = Depends(require_actor),
    db: Session = Depends(get_db),
    service: VotingService = Depends(get_voting_service),
) -> CastVoteOut:
    vote_count = service.cast_vote(db, actor, photo_id)
    return CastVoteOut(vote_count=vote_count)


@router.get('/photos/{photo_id}/vote-status', response_model=VoteStatusOut)
def get_vote_status(
    photo_id: str,
    actor: Actor | None = Depends(get_actor),
    db: Session = Depends(get_db),
    service: VotingService = Depends(get_voting_service),
) -> VoteStatusOut:
    status = service.get_user_vote_status(db, actor, photo_id)
    return VoteStatusOut(vote_count=status.vote_count, user_has_voted=status.user_has_voted, can_vote=status.can_vote)


@router.get('/competitions/{competition_id}/photos', response_model=RankedPhotoPageOut)
def get_photos_with_votes(
    competition_id: str,
    category_id: str | None = Query(default=None, min_length=1),
    sort_by: PhotoSort = Query(default=PhotoSort.votes),
    order: SortOrder = Query(default=SortOrder.desc),
    limit: int = Query(default=20, ge=1, le=100),
    offset: int = Query(default=0, ge=0),
    actor: Actor | None = Depends(get_actor),
    db: Session = Depends(get_db),
    service: VotingService = Depends(get_voting_service),
) -> RankedPhotoPageOut:
    filters = PhotoListFilters(category_id=category_id, sort_by=sort_by, order=order, limit=limit, offset=offset)
    return _ranked_page_out(service.get_photos_with_votes(db, competition_id, filters, actor))


@router.get('/competitions/{competition_id}/top-photos', response_model=RankedPhotoPageOut)
def get_top_photos(
    competition_id: str,
    category_id: str | None = Query(default=None, min_length=1),
    limit: int = Query(default=10, ge=1, le=50),
    actor: Actor | None = Depends(get_actor),
    db: Session = Depends(get_db),
    service: VotingService = Depends(get_voting_service),
) -> RankedPhotoPageOut:
    return _ranked_page_out(service.get_top_photos(db, competition_id, category_id=category_id, limit=limit, actor=actor))


@router.get('/competitions/{competition_id}/voting-stats', response_model=VotingStatsOut)
def get_voting_stats(
    competition_id: str,
    db: Session = Depends(get_db),
    service: VotingService = Depends(get_voting_service),
) -> VotingStatsOut:
    stats = service.get_voting_stats(db, competition_id)
    return VotingStatsOut(
        total_votes=stats.total_votes,
        categories=[
            CategoryVotingStatsOut(
                category_id=row.category_id,
                category_name=row.category_name,
                vote_count=row.vote_count,
                photo_count=row.photo_count,
            )
            for row in stats.categories
        ],
    )


@router.get('/votes/mine', response_model=VoteHistoryOut)
def get_my_votes(
    competition_id: str | None = Query(default=None, min_length=1),
    actor: Actor = Depends(require_actor),
    db: Session = Depends(get_db),
    service: VotingService = Depends(get_voting_service),
) -> VoteHistoryOut:
    entries = service.get_user_vote_history(db, actor, competition_id=competition_id)
    return VoteHistoryOut(
        votes=[
            VoteHistoryEntryOut(
                id=entry.id,
                photo_id=entry.photo_id,
                photo_title=entry.photo_title,
                category_name=entry.category_name,
                voted_at=ensure_utc(entry.voted_at),
            )
            for entry in entries
        ],
        total_votes=len(entries),
    )


def _ranked_page_out(page: RankedPhotoPage) -> RankedPhotoPageOut:
    return RankedPhotoPageOut(
        photos=[
            RankedPhotoOut(
                id=row.photo.id,
                title=row.photo.title,
                description=row.photo.description,
                file_path=row.photo.file_path,
                date_taken=ensure_utc(row.photo.date_taken),
                location=row.photo.location,
                camera_info=row.photo.camera_info,
                settings=row.photo.settings,
                category_id=row.photo.category_id,
                category_name=row.category_name,
                photographer_id=row.photo.user_id,
                created_at=ensure_utc(row.photo.created_at),
                vote_count=row.vote_count,
                user_has_voted=row.user_has_voted,
                can_vote=row.can_vote,
            )
            for row in page.photos
        ],
        total=page.total,
        limit=page.limit,
        offset=page.offset,
    )
