from __future__ import annotations

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from photocontest.api.deps import get_db, get_moderation_service, require_actor
from photocontest.api.route_utils import photo_out, report_out
from photocontest.core.actor import Actor
from photocontest.core.errors import ReasonRequired
from photocontest.schemas.api import (
    BulkActionOut,
    BulkItemOut,
    BulkPhotoActionIn,
    MessageOut,
    ModeratePhotoIn,
    ModerationStatsOut,
    PendingPhotoPageOut,
    PhotoOut,
    ReportCreateIn,
    ReportListOut,
    ReportOut,
    ReportPageOut,
    ReportResolutionOut,
    ReportResolveIn,
)
from photocontest.schemas.common import PhotoAction, ReportStatus
from photocontest.services.moderation_service import ModerationService
from photocontest.utils.timezone import ensure_utc

router = APIRouter()


@router.get('/moderation/pending', response_model=PendingPhotoPageOut)
def get_pending_photos(
    competition_id: str | None = Query(default=None, min_length=1),
    limit: int = Query(default=20, ge=1, le=100),
    offset: int = Query(default=0, ge=0),
    actor: Actor = Depends(require_actor),
    db: Session = Depends(get_db),
    service: ModerationService = Depends(get_moderation_service),
) -> PendingPhotoPageOut:
    page = service.get_pending_photos(db, actor, competition_id=competition_id, limit=limit, offset=offset)
    return PendingPhotoPageOut(
        photos=[photo_out(row.photo, row.category_name) for row in page.photos],
        total=page.total,
        limit=page.limit,
        offset=page.offset,
    )


@router.post('/moderation/photos/{photo_id}/approve', response_model=PhotoOut)
def approve_photo(
    photo_id: str,
    actor: Actor = Depends(require_actor),
    db: Session = Depends(get_db),
    service: ModerationService = Depends(get_moderation_service),
) -> PhotoOut:
    return photo_out(service.approve_photo(db, actor, photo_id))


@router.post('/moderation/photos/{photo_id}/reject', response_model=PhotoOut)
def reject_photo(
    photo_id: str,
    payload: ModeratePhotoIn,
    actor: Actor = Depends(require_actor),
    db: Session = Depends(get_db),
    service: ModerationService = Depends(get_moderation_service),
) -> PhotoOut:
    if not payload.reason:
        raise ReasonRequired('Rejection reason is required')
    return photo_out(service.reject_photo(db, actor, photo_id, payload.reason))


@router.delete('/moderation/photos/{photo_id}', response_model=MessageOut)
def delete_photo(
    photo_id: str,
    reason: str = Query(min_length=1, max_length=500),
    actor: Actor = Depends(require_actor),
    db: Session = Depends(get_db),
    service: ModerationService = Depends(get_moderation_service),
) -> MessageOut:
    service.delete_photo(db, actor, photo_id, reason)
    return MessageOut(message='Photo deleted successfully')


@router.post('/moderation/photos/bulk', response_model=BulkActionOut)
def bulk_photo_action(
    payload: BulkPhotoActionIn,
    actor: Actor = Depends(require_actor),
    db: Session = Depends(get_db),
    service: ModerationService = Depends(get_moderation_service),
) -> BulkActionOut:
    if payload.action in (PhotoAction.reject, PhotoAction.delete) and not payload.reason:
        raise ReasonRequired(f'Reason is required for {payload.action.value} action')
    outcome = service.bulk_photo_action(db, actor, payload.photo_ids, payload.action, payload.reason)
    return BulkActionOut(
        processed=outcome.processed,
        failed=outcome.failed,
        results=[
            BulkItemOut(
                photo_id=item.photo_id,
                ok=item.ok,
                status=item.status,
                error=item.error,
                error_kind=item.error_kind,
            )
            for item in outcome.results
        ],
    )


@router.post('/reports', response_model=ReportOut, status_code=201)
def create_report(
    payload: ReportCreateIn,
    actor: Actor = Depends(require_actor),
    db: Session = Depends(get_db),
    service: ModerationService = Depends(get_moderation_service),
) -> ReportOut:
    report = service.create_report(db, actor, payload.photo_id, payload.reason, payload.description)
    return report_out(report)


@router.get('/reports/mine', response_model=ReportListOut)
def get_my_reports(
    actor: Actor = Depends(require_actor),
    db: Session = Depends(get_db),
    service: ModerationService = Depends(get_moderation_service),
) -> ReportListOut:
    rows = service.get_user_reports(db, actor)
    return ReportListOut(reports=[report_out(row.report, row.photo_title, row.photo_file_path) for row in rows])


@router.get('/moderation/reports', response_model=ReportPageOut)
def get_reports(
    status: ReportStatus | None = Query(default=None),
    competition_id: str | None = Query(default=None, min_length=1),
    limit: int = Query(default=20, ge=1, le=100),
    offset: int = Query(default=0, ge=0),
    actor: Actor = Depends(require_actor),
    db: Session = Depends(get_db),
    service: ModerationService = Depends(get_moderation_service),
) -> ReportPageOut:
    page = service.get_reports(db, actor, status=status, competition_id=competition_id, limit=limit, offset=offset)
    return ReportPageOut(
        reports=[report_out(row.report, row.photo_title, row.photo_file_path) for row in page.reports],
        total=page.total,
        limit=page.limit,
        offset=page.offset,
    )


@router.post('/moderation/reports/{report_id}/resolve', response_model=ReportResolutionOut)
def resolve_report(
    report_id: str,
    payload: ReportResolveIn,
    actor: Actor = Depends(require_actor),
    db: Session = Depends(get_db),
    service: ModerationService = Depends(get_moderation_service),
) -> ReportResolutionOut:
    result = service.resolve_report(db, actor, report_id, payload)
    return ReportResolutionOut(
        id=result.id,
        status=result.status,
        resolved_by=result.resolved_by,
        resolved_at=ensure_utc(result.resolved_at),
        photo_id=result.photo_id,
        photo_action=result.photo_action,
        photo_status=result.photo_status,
    )


@router.get('/moderation/stats', response_model=ModerationStatsOut)
def get_moderation_stats(
    actor: Actor = Depends(require_actor),
    db: Session = Depends(get_db),
    service: ModerationService = Depends(get_moderation_service),
) -> ModerationStatsOut:
    stats = service.get_moderation_stats(db, actor)
    return ModerationStatsOut(photos=stats.photos, reports=stats.reports)
