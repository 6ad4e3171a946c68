from __future__ import annotations

import base64
import binascii

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from photocontest.api.deps import get_db, get_submission_service, require_actor
from photocontest.api.route_utils import photo_out
from photocontest.core.actor import Actor
from photocontest.schemas.api import (
    CategorySubmissionCountOut,
    MessageOut,
    PhotoListOut,
    PhotoOut,
    PhotoUpdateIn,
    PhotoUploadIn,
    SubmissionCountsOut,
)
from photocontest.services.submission_service import SubmissionService

router = APIRouter()


@router.post('/photos', response_model=PhotoOut, status_code=201)
def upload_photo(
    payload: PhotoUploadIn,
    actor: Actor = Depends(require_actor),
    db: Session = Depends(get_db),
    service: SubmissionService = Depends(get_submission_service),
) -> PhotoOut:
    try:
        data = base64.b64decode(payload.file_data, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise HTTPException(status_code=400, detail='file_data must be valid base64') from exc

    photo = service.upload_photo(
        db,
        actor,
        category_id=payload.category_id,
        metadata=payload,
        data=data,
        content_type=payload.mime_type,
    )
    return photo_out(photo)


@router.get('/photos/mine', response_model=PhotoListOut)
def get_my_photos(
    competition_id: str | None = Query(default=None, min_length=1),
    category_id: str | None = Query(default=None, min_length=1),
    actor: Actor = Depends(require_actor),
    db: Session = Depends(get_db),
    service: SubmissionService = Depends(get_submission_service),
) -> PhotoListOut:
    rows = service.get_user_photos(db, actor, competition_id=competition_id, category_id=category_id)
    return PhotoListOut(photos=[photo_out(row.photo, row.category_name) for row in rows])


@router.get('/photos/submission-counts', response_model=SubmissionCountsOut)
def get_submission_counts(
    competition_id: str | None = Query(default=None, min_length=1),
    actor: Actor = Depends(require_actor),
    db: Session = Depends(get_db),
    service: SubmissionService = Depends(get_submission_service),
) -> SubmissionCountsOut:
    counts = service.get_user_submission_counts(db, actor, competition_id=competition_id)
    return SubmissionCountsOut(
        categories=[
            CategorySubmissionCountOut(
                category_id=row.category_id,
                category_name=row.category_name,
                count=row.count,
                limit=row.limit,
            )
            for row in counts.categories
        ],
        submission_counts=counts.submission_counts,
        limits=counts.limits,
    )


@router.get('/photos/{photo_id}', response_model=PhotoOut)
def get_photo(
    photo_id: str,
    actor: Actor = Depends(require_actor),
    db: Session = Depends(get_db),
    service: SubmissionService = Depends(get_submission_service),
) -> PhotoOut:
    row = service.get_photo_for_owner(db, actor, photo_id)
    return photo_out(row.photo, row.category_name)


@router.patch('/photos/{photo_id}', response_model=PhotoOut)
def update_photo(
    photo_id: str,
    payload: PhotoUpdateIn,
    actor: Actor = Depends(require_actor),
    db: Session = Depends(get_db),
    service: SubmissionService = Depends(get_submission_service),
) -> PhotoOut:
    return photo_out(service.update_photo(db, actor, photo_id, payload))


@router.delete('/photos/{photo_id}', response_model=MessageOut)
def delete_photo(
    photo_id: str,
    actor: Actor = Depends(require_actor),
    db: Session = Depends(get_db),
    service: SubmissionService = Depends(get_submission_service),
) -> MessageOut:
    service.delete_photo(db, actor, photo_id)
    return MessageOut(message='Photo deleted successfully')
