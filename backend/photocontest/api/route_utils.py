from __future__ import annotations

from photocontest.models.category import Category
from photocontest.models.competition import Competition
from photocontest.models.photo import Photo
from photocontest.models.report import Report
from photocontest.schemas.api import CategoryOut, CompetitionDetailOut, CompetitionOut, PhotoOut, ReportOut
from photocontest.utils.timezone import ensure_utc


def photo_out(photo: Photo, category_name: str | None = None) -> PhotoOut:
    return PhotoOut(
        id=photo.id,
        user_id=photo.user_id,
        competition_id=photo.competition_id,
        category_id=photo.category_id,
        category_name=category_name,
        title=photo.title,
        description=photo.description,
        file_path=photo.file_path,
        file_size=photo.file_size,
        mime_type=photo.mime_type,
        date_taken=ensure_utc(photo.date_taken),
        location=photo.location,
        camera_info=photo.camera_info,
        settings=photo.settings,
        status=photo.status,
        rejection_reason=photo.rejection_reason,
        approved_by=photo.approved_by,
        approved_at=ensure_utc(photo.approved_at),
        rejected_by=photo.rejected_by,
        rejected_at=ensure_utc(photo.rejected_at),
        created_at=ensure_utc(photo.created_at),
        updated_at=ensure_utc(photo.updated_at),
    )


def report_out(report: Report, photo_title: str | None = None, photo_file_path: str | None = None) -> ReportOut:
    return ReportOut(
        id=report.id,
        reporter_id=report.reporter_id,
        photo_id=report.photo_id,
        photo_title=photo_title,
        photo_file_path=photo_file_path,
        reason=report.reason,
        description=report.description,
        status=report.status,
        admin_notes=report.admin_notes,
        resolved_by=report.resolved_by,
        resolved_at=ensure_utc(report.resolved_at),
        created_at=ensure_utc(report.created_at),
    )


def category_out(category: Category) -> CategoryOut:
    return CategoryOut(
        id=category.id,
        competition_id=category.competition_id,
        name=category.name,
        description=category.description,
        max_photos_per_user=category.max_photos_per_user,
        created_at=ensure_utc(category.created_at),
        updated_at=ensure_utc(category.updated_at),
    )


def competition_out(competition: Competition) -> CompetitionOut:
    return CompetitionOut(
        id=competition.id,
        title=competition.title,
        description=competition.description,
        start_date=ensure_utc(competition.start_date),
        end_date=ensure_utc(competition.end_date),
        voting_start_date=ensure_utc(competition.voting_start_date),
        voting_end_date=ensure_utc(competition.voting_end_date),
        status=competition.status,
        max_photos_per_user=competition.max_photos_per_user,
        created_at=ensure_utc(competition.created_at),
        updated_at=ensure_utc(competition.updated_at),
    )


def competition_detail_out(competition: Competition) -> CompetitionDetailOut:
    base = competition_out(competition)
    return CompetitionDetailOut(
        **base.model_dump(),
        categories=[category_out(category) for category in competition.categories],
    )
