from __future__ import annotations

from datetime import datetime
from typing import Annotated, Literal

from pydantic import BaseModel, Field

from photocontest.schemas.common import (
    CompetitionStatus,
    PhotoAction,
    PhotoSort,
    PhotoStatus,
    ReportReason,
    ReportResolution,
    ReportStatus,
    SortOrder,
)

IdStr = Annotated[str, Field(min_length=1)]


class MessageOut(BaseModel):
    success: bool = True
    message: str


class PhotoMetadataIn(BaseModel):
    title: str = Field(min_length=1, max_length=200)
    description: str = Field(min_length=20, max_length=500)
    date_taken: datetime
    location: str = Field(min_length=1, max_length=200)
    camera_info: str | None = Field(default=None, max_length=200)
    settings: str | None = Field(default=None, max_length=200)


class PhotoUploadIn(PhotoMetadataIn):
    category_id: IdStr
    file_name: str = Field(min_length=1, max_length=255)
    mime_type: Literal['image/jpeg', 'image/png']
    file_data: str = Field(min_length=1, description='Base64 encoded image bytes')


class PhotoUpdateIn(BaseModel):
    title: str | None = Field(default=None, min_length=1, max_length=200)
    description: str | None = Field(default=None, min_length=20, max_length=500)
    date_taken: datetime | None = None
    location: str | None = Field(default=None, min_length=1, max_length=200)
    camera_info: str | None = Field(default=None, max_length=200)
    settings: str | None = Field(default=None, max_length=200)


class PhotoListFilters(BaseModel):
    category_id: IdStr | None = None
    sort_by: PhotoSort = PhotoSort.votes
    order: SortOrder = SortOrder.desc
    limit: int = Field(default=20, ge=1, le=100)
    offset: int = Field(default=0, ge=0)


class ModeratePhotoIn(BaseModel):
    reason: str | None = Field(default=None, min_length=1, max_length=500)


class BulkPhotoActionIn(BaseModel):
    action: PhotoAction
    photo_ids: list[IdStr] = Field(min_length=1, max_length=50)
    reason: str | None = Field(default=None, min_length=1, max_length=500)


class ReportCreateIn(BaseModel):
    photo_id: IdStr
    reason: ReportReason
    description: str | None = Field(default=None, min_length=1, max_length=1000)


class ReportResolveIn(BaseModel):
    action: ReportResolution
    admin_notes: str | None = Field(default=None, max_length=1000)
    photo_action: PhotoAction | None = None
    photo_action_reason: str | None = Field(default=None, max_length=500)


class CompetitionCreateIn(BaseModel):
    title: str = Field(min_length=1, max_length=200)
    description: str = Field(min_length=1, max_length=2000)
    start_date: datetime
    end_date: datetime
    voting_start_date: datetime | None = None
    voting_end_date: datetime | None = None
    max_photos_per_user: int = Field(default=5, ge=1, le=100)


class CategoryCreateIn(BaseModel):
    name: str = Field(min_length=1, max_length=200)
    description: str | None = Field(default=None, max_length=1000)
    max_photos_per_user: int | None = Field(default=None, ge=1, le=100)


class CompetitionStatusIn(BaseModel):
    status: CompetitionStatus


class CategoryOut(BaseModel):
    id: str
    competition_id: str
    name: str
    description: str | None
    max_photos_per_user: int
    created_at: datetime
    updated_at: datetime


class CompetitionOut(BaseModel):
    id: str
    title: str
    description: str
    start_date: datetime
    end_date: datetime
    voting_start_date: datetime | None
    voting_end_date: datetime | None
    status: CompetitionStatus
    max_photos_per_user: int
    created_at: datetime
    updated_at: datetime


class CompetitionDetailOut(CompetitionOut):
    categories: list[CategoryOut]


class PhotoOut(BaseModel):
    id: str
    user_id: str
    competition_id: str
    category_id: str
    category_name: str | None = None
    title: str
    description: str
    file_path: str
    file_size: int
    mime_type: str
    date_taken: datetime
    location: str
    camera_info: str | None
    settings: str | None
    status: PhotoStatus
    rejection_reason: str | None
    approved_by: str | None
    approved_at: datetime | None
    rejected_by: str | None
    rejected_at: datetime | None
    created_at: datetime
    updated_at: datetime


class PhotoListOut(BaseModel):
    photos: list[PhotoOut]


class CategorySubmissionCountOut(BaseModel):
    category_id: str
    category_name: str
    count: int
    limit: int


class SubmissionCountsOut(BaseModel):
    categories: list[CategorySubmissionCountOut]
    submission_counts: dict[str, int]
    limits: dict[str, int]


class CastVoteOut(BaseModel):
    success: bool = True
    vote_count: int
    user_has_voted: bool = True


class VoteStatusOut(BaseModel):
    vote_count: int
    user_has_voted: bool
    can_vote: bool


class RankedPhotoOut(BaseModel):
    id: str
    title: str
    description: str
    file_path: str
    date_taken: datetime
    location: str
    camera_info: str | None
    settings: str | None
    category_id: str
    category_name: str
    photographer_id: str
    created_at: datetime
    vote_count: int
    user_has_voted: bool
    can_vote: bool


class RankedPhotoPageOut(BaseModel):
    photos: list[RankedPhotoOut]
    total: int
    limit: int
    offset: int


class CategoryVotingStatsOut(BaseModel):
    category_id: str
    category_name: str
    vote_count: int
    photo_count: int


class VotingStatsOut(BaseModel):
    total_votes: int
    categories: list[CategoryVotingStatsOut]


class VoteHistoryEntryOut(BaseModel):
    id: str
    photo_id: str
    photo_title: str
    category_name: str
    voted_at: datetime


class VoteHistoryOut(BaseModel):
    votes: list[VoteHistoryEntryOut]
    total_votes: int


class PendingPhotoPageOut(BaseModel):
    photos: list[PhotoOut]
    total: int
    limit: int
    offset: int


class ReportOut(BaseModel):
    id: str
    reporter_id: str
    photo_id: str
    photo_title: str | None = None
    photo_file_path: str | None = None
    reason: ReportReason
    description: str | None
    status: ReportStatus
    admin_notes: str | None
    resolved_by: str | None
    resolved_at: datetime | None
    created_at: datetime


class ReportPageOut(BaseModel):
    reports: list[ReportOut]
    total: int
    limit: int
    offset: int


class ReportListOut(BaseModel):
    reports: list[ReportOut]


class ReportResolutionOut(BaseModel):
    id: str
    status: ReportStatus
    resolved_by: str
    resolved_at: datetime
    photo_id: str
    photo_action: PhotoAction | None
    photo_status: str | None


class BulkItemOut(BaseModel):
    photo_id: str
    ok: bool
    status: str | None = None
    error: str | None = None
    error_kind: str | None = None


class BulkActionOut(BaseModel):
    success: bool = True
    processed: int
    failed: int
    results: list[BulkItemOut]


class ModerationStatsOut(BaseModel):
    photos: dict[str, int]
    reports: dict[str, int]
