from __future__ import annotations

import os
from datetime import datetime, timedelta, timezone
from pathlib import Path
import shutil
import sys

import pytest

ROOT = Path(__file__).resolve().parents[2]
BACKEND = ROOT / 'backend'
sys.path.insert(0, str(BACKEND))

TEST_DB_PATH = BACKEND / 'data' / 'test_app.db'
TEST_UPLOAD_DIR = BACKEND / 'data' / 'test_uploads'
TEST_DB_PATH.parent.mkdir(parents=True, exist_ok=True)
if TEST_DB_PATH.exists():
    TEST_DB_PATH.unlink()
os.environ['DATABASE_URL'] = f"sqlite:///{TEST_DB_PATH.as_posix()}"
os.environ['UPLOAD_DIR'] = str(TEST_UPLOAD_DIR)

from photocontest.core.config import get_settings

get_settings.cache_clear()
from photocontest.db.init_db import init_db

init_db()

from photocontest.core.actor import Actor
from photocontest.db.base import Base
from photocontest.db.session import SessionLocal
from photocontest.schemas.api import CategoryCreateIn, CompetitionCreateIn, PhotoMetadataIn
from photocontest.schemas.common import CompetitionStatus
from photocontest.services.competition_service import CompetitionService
from photocontest.services.moderation_service import ModerationService
from photocontest.services.storage_service import StoredFile
from photocontest.services.submission_service import SubmissionService
from photocontest.services.voting_service import VotingService

PNG_BYTES = b'\x89PNG\r\n\x1a\n' + b'\x00' * 64
STATUS_PATH = [CompetitionStatus.open, CompetitionStatus.voting, CompetitionStatus.closed]


class MemoryStorage:
    def __init__(self) -> None:
        self.files: dict[str, bytes] = {}
        self.removed: list[str] = []

    def save(self, *, folder: str, file_id: str, data: bytes, content_type: str) -> StoredFile:
        path = f'/uploads/{folder}/{file_id}'
        self.files[path] = data
        return StoredFile(path=path, size=len(data), mime_type=content_type)

    def remove(self, path: str) -> None:
        self.removed.append(path)
        self.files.pop(path, None)


class StepClock:
    """Returns a strictly increasing UTC time on every call."""

    def __init__(self, start: datetime | None = None, step: timedelta = timedelta(seconds=1)) -> None:
        self.now = start or datetime(2026, 5, 1, 12, 0, tzinfo=timezone.utc)
        self.step = step

    def __call__(self) -> datetime:
        current = self.now
        self.now = current + self.step
        return current


@pytest.fixture(autouse=True)
def clean_tables() -> None:
    with SessionLocal() as session:
        for table in reversed(Base.metadata.sorted_tables):
            session.execute(table.delete())
        session.commit()


@pytest.fixture
def db():  # type: ignore[no-untyped-def]
    with SessionLocal() as session:
        yield session


@pytest.fixture
def storage() -> MemoryStorage:
    return MemoryStorage()


@pytest.fixture
def clock() -> StepClock:
    return StepClock()


@pytest.fixture
def admin() -> Actor:
    return Actor(user_id='admin-1', is_admin=True)


@pytest.fixture
def submissions(storage: MemoryStorage, clock: StepClock) -> SubmissionService:
    return SubmissionService(settings=get_settings(), storage=storage, clock=clock)


@pytest.fixture
def voting(clock: StepClock) -> VotingService:
    return VotingService(clock=clock)


@pytest.fixture
def moderation(storage: MemoryStorage, clock: StepClock) -> ModerationService:
    return ModerationService(settings=get_settings(), storage=storage, clock=clock)


@pytest.fixture
def competitions(storage: MemoryStorage, clock: StepClock) -> CompetitionService:
    return CompetitionService(settings=get_settings(), storage=storage, clock=clock)


@pytest.fixture
def make_contest(db, competitions: CompetitionService, admin: Actor, clock: StepClock):  # type: ignore[no-untyped-def]
    def _make(
        *,
        categories: tuple[str, ...] = ('Landscape',),
        max_photos: int = 3,
        status: CompetitionStatus = CompetitionStatus.open,
    ):
        start = clock.now
        competition = competitions.create_competition(
            db,
            admin,
            CompetitionCreateIn(
                title='Spring Light',
                description='Seasonal photo competition',
                start_date=start,
                end_date=start + timedelta(days=30),
            ),
        )
        created = [
            competitions.create_category(
                db,
                admin,
                competition.id,
                CategoryCreateIn(name=name, max_photos_per_user=max_photos),
            )
            for name in categories
        ]
        if status != CompetitionStatus.draft:
            for step in STATUS_PATH[: STATUS_PATH.index(status) + 1]:
                competitions.change_status(db, admin, competition.id, step)
        return competition, created

    return _make


@pytest.fixture
def photo_metadata():  # type: ignore[no-untyped-def]
    def _metadata(**overrides: object) -> PhotoMetadataIn:
        values: dict[str, object] = {
            'title': 'Morning fog over the lake',
            'description': 'Long exposure taken just after sunrise.',
            'date_taken': datetime(2026, 4, 20, 6, 30, tzinfo=timezone.utc),
            'location': 'Lake Saimaa',
            'camera_info': 'X-T5',
            'settings': 'f/8 1/125s ISO200',
        }
        values.update(overrides)
        return PhotoMetadataIn(**values)

    return _metadata


@pytest.fixture
def upload(db, submissions: SubmissionService, photo_metadata):  # type: ignore[no-untyped-def]
    def _upload(actor: Actor, category, *, title: str = 'Morning fog over the lake'):  # type: ignore[no-untyped-def]
        return submissions.upload_photo(
            db,
            actor,
            category_id=category.id,
            metadata=photo_metadata(title=title),
            data=PNG_BYTES,
            content_type='image/png',
        )

    return _upload


@pytest.fixture
def approved_photo(db, upload, moderation: ModerationService, admin: Actor):  # type: ignore[no-untyped-def]
    def _approved(actor: Actor, category, *, title: str = 'Morning fog over the lake'):  # type: ignore[no-untyped-def]
        photo = upload(actor, category, title=title)
        return moderation.approve_photo(db, admin, photo.id)

    return _approved


def pytest_sessionfinish(session, exitstatus):  # type: ignore[no-untyped-def]
    if TEST_DB_PATH.exists():
        try:
            TEST_DB_PATH.unlink()
        except PermissionError:
            pass
    shutil.rmtree(TEST_UPLOAD_DIR, ignore_errors=True)
