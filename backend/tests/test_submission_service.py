from __future__ import annotations

import pytest
from sqlalchemy import delete, func, select
from sqlalchemy.exc import IntegrityError

from photocontest.core.actor import Actor
from photocontest.core.config import get_settings
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
from photocontest.db.session import SessionLocal
from photocontest.models.category import Category
from photocontest.models.photo import Photo
from photocontest.schemas.api import PhotoUpdateIn
from photocontest.schemas.common import CompetitionStatus, PhotoStatus
from photocontest.services.submission_service import SubmissionService

from conftest import PNG_BYTES

ALICE = Actor(user_id='alice')
BOB = Actor(user_id='bob')


def _photo_count(user_id: str, category_id: str) -> int:
    with SessionLocal() as session:
        return int(
            session.execute(
                select(func.count(Photo.id)).where(Photo.user_id == user_id, Photo.category_id == category_id)
            ).scalar_one()
        )


def test_upload_stops_at_category_limit(make_contest, upload, storage) -> None:  # type: ignore[no-untyped-def]
    _, (category,) = make_contest(max_photos=2)

    first = upload(ALICE, category, title='First light')
    second = upload(ALICE, category, title='Second light')
    assert first.status == PhotoStatus.pending.value
    assert {first.quota_slot, second.quota_slot} == {0, 1}

    with pytest.raises(SubmissionLimitExceeded) as exc_info:
        upload(ALICE, category, title='One too many')

    assert exc_info.value.limit == 2
    assert exc_info.value.kind == 'quota_exceeded'
    assert exc_info.value.message == 'Maximum 2 photos allowed for this category'
    assert _photo_count('alice', category.id) == 2
    assert len(storage.files) == 2


def test_quota_is_tracked_per_user(make_contest, upload) -> None:  # type: ignore[no-untyped-def]
    _, (category,) = make_contest(max_photos=1)

    upload(ALICE, category)
    upload(BOB, category)

    assert _photo_count('alice', category.id) == 1
    assert _photo_count('bob', category.id) == 1


def test_upload_records_file_reference_and_metadata(make_contest, upload, storage) -> None:  # type: ignore[no-untyped-def]
    competition, (category,) = make_contest()

    photo = upload(ALICE, category, title='Harbour at dusk')

    assert photo.competition_id == competition.id
    assert photo.category_id == category.id
    assert photo.title == 'Harbour at dusk'
    assert photo.file_path in storage.files
    assert photo.file_size == len(PNG_BYTES)
    assert photo.mime_type == 'image/png'
    assert photo.approved_by is None and photo.rejected_by is None


@pytest.mark.parametrize('status', [CompetitionStatus.draft, CompetitionStatus.voting, CompetitionStatus.closed])
def test_upload_requires_open_competition(make_contest, upload, status) -> None:  # type: ignore[no-untyped-def]
    _, (category,) = make_contest(status=status)

    with pytest.raises(CompetitionNotActive):
        upload(ALICE, category)


def test_upload_unknown_category(db, submissions, photo_metadata) -> None:  # type: ignore[no-untyped-def]
    with pytest.raises(CategoryNotFound):
        submissions.upload_photo(
            db,
            ALICE,
            category_id='cat_missing',
            metadata=photo_metadata(),
            data=PNG_BYTES,
            content_type='image/png',
        )


def test_upload_rejects_unsupported_file(db, make_contest, submissions, storage, clock, photo_metadata) -> None:  # type: ignore[no-untyped-def]
    _, (category,) = make_contest()

    with pytest.raises(InvalidFileType):
        submissions.upload_photo(
            db,
            ALICE,
            category_id=category.id,
            metadata=photo_metadata(),
            data=b'GIF89a',
            content_type='image/gif',
        )

    small = SubmissionService(
        settings=get_settings().model_copy(update={'max_upload_bytes': 16}),
        storage=storage,
        clock=clock,
    )
    with pytest.raises(FileTooLarge):
        small.upload_photo(
            db,
            ALICE,
            category_id=category.id,
            metadata=photo_metadata(),
            data=PNG_BYTES,
            content_type='image/png',
        )
    assert storage.files == {}


def test_quota_slot_conflict_is_retried(make_contest, upload, submissions, storage, monkeypatch) -> None:  # type: ignore[no-untyped-def]
    _, (category,) = make_contest(max_photos=2)
    upload(ALICE, category, title='Already there')

    real_used_slots = SubmissionService._used_slots
    calls: list[str] = []

    def stale_then_real(session, user_id, category_id):  # type: ignore[no-untyped-def]
        calls.append(user_id)
        if len(calls) == 1:
            return set()
        return real_used_slots(session, user_id, category_id)

    monkeypatch.setattr(submissions, '_used_slots', stale_then_real)

    photo = upload(ALICE, category, title='Raced in')

    assert photo.quota_slot == 1
    assert len(calls) == 2
    assert _photo_count('alice', category.id) == 2
    assert len(storage.files) == 2


def test_concurrent_quota_overrun_is_refused(make_contest, upload, submissions, storage, monkeypatch) -> None:  # type: ignore[no-untyped-def]
    _, (category,) = make_contest(max_photos=1)
    upload(ALICE, category, title='The only one')

    real_used_slots = SubmissionService._used_slots
    attempts = get_settings().submission_retry_attempts
    calls: list[str] = []

    def always_stale(session, user_id, category_id):  # type: ignore[no-untyped-def]
        calls.append(user_id)
        if len(calls) <= attempts:
            return set()
        return real_used_slots(session, user_id, category_id)

    monkeypatch.setattr(submissions, '_used_slots', always_stale)

    with pytest.raises(SubmissionLimitExceeded):
        upload(ALICE, category, title='Sneaking past the count')

    assert _photo_count('alice', category.id) == 1
    assert len(storage.files) == 1
    assert len(storage.removed) == 1


def test_exhausted_retries_surface_the_store_conflict(make_contest, upload, submissions, storage, monkeypatch) -> None:  # type: ignore[no-untyped-def]
    _, (category,) = make_contest(max_photos=2)
    upload(ALICE, category, title='Holds slot zero')

    monkeypatch.setattr(submissions, '_used_slots', lambda session, user_id, category_id: set())

    with pytest.raises(IntegrityError):
        upload(ALICE, category, title='Keeps colliding')

    assert _photo_count('alice', category.id) == 1
    assert len(storage.files) == 1
    assert len(storage.removed) == 1


def test_category_removed_during_upload(db, make_contest, submissions, storage, photo_metadata, monkeypatch) -> None:  # type: ignore[no-untyped-def]
    _, (category,) = make_contest()
    category_id = category.id
    save = storage.save

    def save_then_drop_category(**kwargs):  # type: ignore[no-untyped-def]
        stored = save(**kwargs)
        with SessionLocal() as other:
            other.execute(delete(Category).where(Category.id == category_id))
            other.commit()
        return stored

    monkeypatch.setattr(storage, 'save', save_then_drop_category)

    with pytest.raises(CategoryNotFound):
        submissions.upload_photo(
            db,
            ALICE,
            category_id=category_id,
            metadata=photo_metadata(),
            data=PNG_BYTES,
            content_type='image/png',
        )

    assert _photo_count('alice', category_id) == 0
    assert storage.files == {}
    assert len(storage.removed) == 1

def test_withdrawn_photo_frees_its_slot(db, make_contest, upload, submissions, storage) -> None:  # type: ignore[no-untyped-def]
    _, (category,) = make_contest(max_photos=1)
    photo = upload(ALICE, category)

    submissions.delete_photo(db, ALICE, photo.id)

    assert storage.removed == [photo.file_path]
    replacement = upload(ALICE, category, title='Second attempt')
    assert replacement.quota_slot == 0


def test_owner_can_edit_pending_photo(db, make_contest, upload, submissions) -> None:  # type: ignore[no-untyped-def]
    _, (category,) = make_contest()
    photo = upload(ALICE, category)

    updated = submissions.update_photo(db, ALICE, photo.id, PhotoUpdateIn(title='Renamed', location='Helsinki'))

    assert updated.title == 'Renamed'
    assert updated.location == 'Helsinki'
    assert updated.description == photo.description


def test_only_owner_may_edit_or_withdraw(db, make_contest, upload, submissions) -> None:  # type: ignore[no-untyped-def]
    _, (category,) = make_contest()
    photo = upload(ALICE, category)

    with pytest.raises(NotPhotoOwner):
        submissions.update_photo(db, BOB, photo.id, PhotoUpdateIn(title='Mine now'))
    with pytest.raises(NotPhotoOwner):
        submissions.delete_photo(db, BOB, photo.id)
    with pytest.raises(PhotoNotFound):
        submissions.delete_photo(db, ALICE, 'photo_missing')


def test_moderated_photo_is_frozen_for_owner(db, make_contest, upload, submissions, moderation, admin) -> None:  # type: ignore[no-untyped-def]
    _, (category,) = make_contest()
    approved = upload(ALICE, category, title='Approved one')
    rejected = upload(ALICE, category, title='Rejected one')
    moderation.approve_photo(db, admin, approved.id)
    moderation.reject_photo(db, admin, rejected.id, 'Out of focus')

    for photo_id in (approved.id, rejected.id):
        with pytest.raises(PhotoNotEditable) as exc_info:
            submissions.update_photo(db, ALICE, photo_id, PhotoUpdateIn(title='Too late'))
        assert exc_info.value.kind == 'invalid_state'
        with pytest.raises(PhotoNotEditable):
            submissions.delete_photo(db, ALICE, photo_id)


def test_edit_rechecks_status_at_write_time(db, make_contest, upload, submissions, moderation, admin, monkeypatch) -> None:  # type: ignore[no-untyped-def]
    _, (category,) = make_contest()
    photo = upload(ALICE, category, title='Original title')

    load_editable = submissions._load_editable
    approved: list[str] = []

    def approve_in_between(session, actor, photo_id):  # type: ignore[no-untyped-def]
        loaded = load_editable(session, actor, photo_id)
        if not approved:
            approved.append(photo_id)
            with SessionLocal() as other:
                moderation.approve_photo(other, admin, photo_id)
        return loaded

    monkeypatch.setattr(submissions, '_load_editable', approve_in_between)

    with pytest.raises(PhotoNotEditable):
        submissions.update_photo(db, ALICE, photo.id, PhotoUpdateIn(title='Sneaky rename'))

    with SessionLocal() as session:
        stored = session.get(Photo, photo.id)
        assert stored is not None
        assert stored.status == PhotoStatus.approved.value
        assert stored.title == 'Original title'


def test_user_photos_and_submission_counts(db, make_contest, upload, submissions) -> None:  # type: ignore[no-untyped-def]
    competition, (landscape, portrait) = make_contest(categories=('Landscape', 'Portrait'), max_photos=4)
    other_competition, (street,) = make_contest(categories=('Street',))
    upload(ALICE, landscape, title='Fjord')
    upload(ALICE, landscape, title='Glacier')
    upload(ALICE, street, title='Crossing')
    upload(BOB, portrait, title='Not hers')

    mine = submissions.get_user_photos(db, ALICE, competition_id=competition.id)
    assert [row.photo.title for row in mine] == ['Glacier', 'Fjord']
    assert {row.category_name for row in mine} == {'Landscape'}

    counts = submissions.get_user_submission_counts(db, ALICE, competition_id=competition.id)
    assert counts.submission_counts == {landscape.id: 2, portrait.id: 0}
    assert counts.limits == {landscape.id: 4, portrait.id: 4}

    everywhere = submissions.get_user_submission_counts(db, ALICE)
    assert everywhere.submission_counts == {landscape.id: 2, street.id: 1}
    assert other_competition.id != competition.id


def test_photo_detail_is_owner_only(db, make_contest, upload, submissions) -> None:  # type: ignore[no-untyped-def]
    _, (category,) = make_contest()
    photo = upload(ALICE, category)

    row = submissions.get_photo_for_owner(db, ALICE, photo.id)
    assert row.photo.id == photo.id
    assert row.category_name == 'Landscape'

    with pytest.raises(NotPhotoOwner):
        submissions.get_photo_for_owner(db, BOB, photo.id)
    with pytest.raises(PhotoNotFound):
        submissions.get_photo_for_owner(db, ALICE, 'photo_missing')
