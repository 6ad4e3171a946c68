from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime

from sqlalchemy import delete, desc, func, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from photocontest.core.actor import Actor
from photocontest.core.config import Settings
from photocontest.core.errors import (
    AlreadyReported,
    ContestError,
    PhotoAlreadyModerated,
    PhotoNotFound,
    ReasonRequired,
    ReportAlreadyResolved,
    ReportNotFound,
)
from photocontest.models.category import Category
from photocontest.models.photo import Photo
from photocontest.models.report import Report
from photocontest.schemas.api import ReportResolveIn
from photocontest.schemas.common import PhotoAction, PhotoStatus, ReportReason, ReportStatus
from photocontest.services.storage_service import FileStorage
from photocontest.utils.ids import generate_report_id
from photocontest.utils.timezone import Clock, utc_now

LOGGER = logging.getLogger(__name__)

DELETED = 'deleted'


@dataclass(slots=True)
class PendingPhoto:
    photo: Photo
    category_name: str


@dataclass(slots=True)
class PendingPhotoPage:
    photos: list[PendingPhoto]
    total: int
    limit: int
    offset: int


@dataclass(slots=True)
class BulkItemResult:
    photo_id: str
    ok: bool
    status: str | None = None
    error: str | None = None
    error_kind: str | None = None


@dataclass(slots=True)
class BulkActionResult:
    processed: int = 0
    failed: int = 0
    results: list[BulkItemResult] = field(default_factory=list)


@dataclass(slots=True)
class ReportListing:
    report: Report
    photo_title: str
    photo_file_path: str


@dataclass(slots=True)
class ReportPage:
    reports: list[ReportListing]
    total: int
    limit: int
    offset: int


@dataclass(slots=True)
class ReportResolutionResult:
    id: str
    status: str
    resolved_by: str
    resolved_at: datetime
    photo_id: str
    photo_action: PhotoAction | None
    photo_status: str | None


@dataclass(slots=True)
class ModerationStats:
    photos: dict[str, int]
    reports: dict[str, int]


class ModerationService:
    """Photo moderation state machine and abuse report handling.

    Photos move ``pending -> approved`` or ``pending -> rejected`` and nowhere
    else; an admin may hard-delete a photo in any state. Every transition is
    written with the expected current status in the WHERE clause so a request
    acting on a stale read cannot overwrite a decision made in between.
    """

    def __init__(self, settings: Settings, storage: FileStorage, clock: Clock = utc_now) -> None:
        self._settings = settings
        self._storage = storage
        self._clock = clock

    def approve_photo(self, session: Session, actor: Actor, photo_id: str) -> Photo:
        actor.require_admin()
        now = self._clock()
        photo = self._transition(
            session,
            photo_id,
            status=PhotoStatus.approved.value,
            approved_by=actor.user_id,
            approved_at=now,
            updated_at=now,
        )
        LOGGER.info('Photo %s approved by %s', photo_id, actor.user_id)
        return photo

    def reject_photo(self, session: Session, actor: Actor, photo_id: str, reason: str) -> Photo:
        actor.require_admin()
        reason = (reason or '').strip()
        if not reason:
            raise ReasonRequired('Rejection reason is required')
        now = self._clock()
        photo = self._transition(
            session,
            photo_id,
            status=PhotoStatus.rejected.value,
            rejection_reason=reason,
            rejected_by=actor.user_id,
            rejected_at=now,
            updated_at=now,
        )
        LOGGER.info('Photo %s rejected by %s: %s', photo_id, actor.user_id, reason)
        return photo

    def delete_photo(self, session: Session, actor: Actor, photo_id: str, reason: str | None = None) -> None:
        actor.require_admin()
        photo = session.get(Photo, photo_id, populate_existing=True)
        if photo is None:
            raise PhotoNotFound()
        file_path = photo.file_path

        result = session.execute(delete(Photo).where(Photo.id == photo_id))
        if result.rowcount == 0:
            session.rollback()
            raise PhotoNotFound()
        session.commit()
        session.expunge_all()

        self._storage.remove(file_path)
        LOGGER.info('Photo %s deleted by %s (reason: %s)', photo_id, actor.user_id, reason or '-')

    def bulk_photo_action(
        self,
        session: Session,
        actor: Actor,
        photo_ids: list[str],
        action: PhotoAction,
        reason: str | None = None,
    ) -> BulkActionResult:
        actor.require_admin()
        outcome = BulkActionResult()

        for photo_id in photo_ids:
            try:
                if action in (PhotoAction.reject, PhotoAction.delete) and not (reason or '').strip():
                    raise ReasonRequired(f'Reason required for {action.value}')
                status = self._apply_photo_action(session, actor, photo_id, action, reason)
            except ContestError as exc:
                session.rollback()
                LOGGER.warning('Bulk %s failed for photo %s: %s', action.value, photo_id, exc.message)
                outcome.results.append(
                    BulkItemResult(photo_id=photo_id, ok=False, error=exc.message, error_kind=exc.kind)
                )
                outcome.failed += 1
                continue
            except Exception as exc:
                session.rollback()
                LOGGER.exception('Bulk %s hit an unexpected error for photo %s', action.value, photo_id)
                outcome.results.append(BulkItemResult(photo_id=photo_id, ok=False, error=str(exc), error_kind='error'))
                outcome.failed += 1
                continue

            outcome.results.append(BulkItemResult(photo_id=photo_id, ok=True, status=status))
            outcome.processed += 1

        return outcome

    def create_report(
        self,
        session: Session,
        actor: Actor,
        photo_id: str,
        reason: ReportReason,
        description: str | None = None,
    ) -> Report:
        if session.get(Photo, photo_id, populate_existing=True) is None:
            raise PhotoNotFound()
        if self._find_report(session, actor.user_id, photo_id) is not None:
            raise AlreadyReported()

        now = self._clock()
        report = Report(
            id=generate_report_id(),
            reporter_id=actor.user_id,
            photo_id=photo_id,
            reason=ReportReason(reason).value,
            description=description,
            status=ReportStatus.pending.value,
            created_at=now,
            updated_at=now,
        )
        session.add(report)
        try:
            session.commit()
        except IntegrityError as exc:
            session.rollback()
            if self._find_report(session, actor.user_id, photo_id) is not None:
                raise AlreadyReported() from exc
            if session.get(Photo, photo_id, populate_existing=True) is None:
                raise PhotoNotFound() from exc
            raise

        LOGGER.info('Report %s filed by %s against photo %s (%s)', report.id, actor.user_id, photo_id, report.reason)
        return report

    def resolve_report(
        self,
        session: Session,
        actor: Actor,
        report_id: str,
        resolution: ReportResolveIn,
    ) -> ReportResolutionResult:
        actor.require_admin()
        report = self._load_pending_report(session, report_id)
        photo_id = report.photo_id

        photo_status: str | None = None
        if resolution.photo_action is not None:
            # Runs and commits before the report is touched; a failure leaves the report pending.
            photo_status = self._apply_photo_action(
                session,
                actor,
                photo_id,
                resolution.photo_action,
                resolution.photo_action_reason or self._settings.default_moderation_reason,
            )

        now = self._clock()
        if resolution.photo_action != PhotoAction.delete:
            result = session.execute(
                update(Report)
                .where(Report.id == report_id, Report.status == ReportStatus.pending.value)
                .values(
                    status=resolution.action.value,
                    admin_notes=resolution.admin_notes,
                    resolved_by=actor.user_id,
                    resolved_at=now,
                    updated_at=now,
                )
            )
            if result.rowcount == 0:
                session.rollback()
                self._load_pending_report(session, report_id)
                raise ReportAlreadyResolved()
            session.commit()

        LOGGER.info(
            'Report %s %s by %s (photo action: %s)',
            report_id,
            resolution.action.value,
            actor.user_id,
            resolution.photo_action.value if resolution.photo_action else 'none',
        )
        return ReportResolutionResult(
            id=report_id,
            status=resolution.action.value,
            resolved_by=actor.user_id,
            resolved_at=now,
            photo_id=photo_id,
            photo_action=resolution.photo_action,
            photo_status=photo_status,
        )

    def get_pending_photos(
        self,
        session: Session,
        actor: Actor,
        competition_id: str | None = None,
        limit: int = 20,
        offset: int = 0,
    ) -> PendingPhotoPage:
        actor.require_admin()
        conditions = [Photo.status == PhotoStatus.pending.value]
        if competition_id:
            conditions.append(Photo.competition_id == competition_id)

        rows = session.execute(
            select(Photo, Category.name)
            .join(Category, Photo.category_id == Category.id)
            .where(*conditions)
            .order_by(desc(Photo.created_at), desc(Photo.id))
            .limit(limit)
            .offset(offset)
        ).all()
        total = session.execute(select(func.count(Photo.id)).where(*conditions)).scalar_one()

        return PendingPhotoPage(
            photos=[PendingPhoto(photo=photo, category_name=name) for photo, name in rows],
            total=int(total),
            limit=limit,
            offset=offset,
        )

    def get_reports(
        self,
        session: Session,
        actor: Actor,
        status: ReportStatus | None = None,
        competition_id: str | None = None,
        limit: int = 20,
        offset: int = 0,
    ) -> ReportPage:
        actor.require_admin()
        conditions = []
        if status is not None:
            conditions.append(Report.status == ReportStatus(status).value)
        if competition_id:
            conditions.append(Photo.competition_id == competition_id)

        rows = session.execute(
            select(Report, Photo.title, Photo.file_path)
            .join(Photo, Report.photo_id == Photo.id)
            .where(*conditions)
            .order_by(desc(Report.created_at), desc(Report.id))
            .limit(limit)
            .offset(offset)
        ).all()
        total = session.execute(
            select(func.count(Report.id)).select_from(Report).join(Photo, Report.photo_id == Photo.id).where(*conditions)
        ).scalar_one()

        return ReportPage(
            reports=[
                ReportListing(report=report, photo_title=title, photo_file_path=file_path)
                for report, title, file_path in rows
            ],
            total=int(total),
            limit=limit,
            offset=offset,
        )

    def get_user_reports(self, session: Session, actor: Actor) -> list[ReportListing]:
        rows = session.execute(
            select(Report, Photo.title, Photo.file_path)
            .join(Photo, Report.photo_id == Photo.id)
            .where(Report.reporter_id == actor.user_id)
            .order_by(desc(Report.created_at), desc(Report.id))
        ).all()
        return [
            ReportListing(report=report, photo_title=title, photo_file_path=file_path)
            for report, title, file_path in rows
        ]

    def get_moderation_stats(self, session: Session, actor: Actor) -> ModerationStats:
        actor.require_admin()
        photos = {status.value: 0 for status in PhotoStatus}
        for status, count in session.execute(select(Photo.status, func.count(Photo.id)).group_by(Photo.status)).all():
            photos[status] = int(count)

        reports = {status.value: 0 for status in ReportStatus}
        for status, count in session.execute(
            select(Report.status, func.count(Report.id)).group_by(Report.status)
        ).all():
            reports[status] = int(count)

        return ModerationStats(photos=photos, reports=reports)

    def _apply_photo_action(
        self,
        session: Session,
        actor: Actor,
        photo_id: str,
        action: PhotoAction,
        reason: str | None,
    ) -> str:
        if action == PhotoAction.approve:
            return self.approve_photo(session, actor, photo_id).status
        if action == PhotoAction.reject:
            return self.reject_photo(session, actor, photo_id, reason or '').status
        self.delete_photo(session, actor, photo_id, reason)
        return DELETED

    def _transition(self, session: Session, photo_id: str, **values: object) -> Photo:
        photo = session.get(Photo, photo_id, populate_existing=True)
        if photo is None:
            raise PhotoNotFound()
        if photo.status != PhotoStatus.pending.value:
            raise PhotoAlreadyModerated()

        result = session.execute(
            update(Photo)
            .where(Photo.id == photo_id, Photo.status == PhotoStatus.pending.value)
            .values(**values)
        )
        if result.rowcount == 0:
            session.rollback()
            if session.get(Photo, photo_id, populate_existing=True) is None:
                raise PhotoNotFound()
            raise PhotoAlreadyModerated()
        session.commit()

        photo = session.get(Photo, photo_id, populate_existing=True)
        if photo is None:
            raise PhotoNotFound()
        return photo

    def _load_pending_report(self, session: Session, report_id: str) -> Report:
        report = session.get(Report, report_id, populate_existing=True)
        if report is None:
            raise ReportNotFound()
        if report.status != ReportStatus.pending.value:
            raise ReportAlreadyResolved()
        return report

    @staticmethod
    def _find_report(session: Session, reporter_id: str, photo_id: str) -> str | None:
        return session.execute(
            select(Report.id).where(Report.reporter_id == reporter_id, Report.photo_id == photo_id)
        ).scalar_one_or_none()
