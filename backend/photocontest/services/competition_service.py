from __future__ import annotations

import logging

from sqlalchemy import delete, desc, select, update
from sqlalchemy.orm import Session, selectinload

from photocontest.core.actor import Actor
from photocontest.core.config import Settings
from photocontest.core.errors import (
    CompetitionNotFound,
    InvalidCompetitionDates,
    InvalidStateError,
    InvalidStatusTransition,
)
from photocontest.models.category import Category
from photocontest.models.competition import Competition
from photocontest.models.photo import Photo
from photocontest.schemas.api import CategoryCreateIn, CompetitionCreateIn
from photocontest.schemas.common import CompetitionStatus
from photocontest.services.storage_service import FileStorage
from photocontest.utils.ids import generate_category_id, generate_competition_id
from photocontest.utils.timezone import Clock, utc_now

LOGGER = logging.getLogger(__name__)

# Lifecycle moves forward one phase at a time; any unfinished competition may be closed early.
ALLOWED_TRANSITIONS: dict[CompetitionStatus, set[CompetitionStatus]] = {
    CompetitionStatus.draft: {CompetitionStatus.open, CompetitionStatus.closed},
    CompetitionStatus.open: {CompetitionStatus.voting, CompetitionStatus.closed},
    CompetitionStatus.voting: {CompetitionStatus.closed},
    CompetitionStatus.closed: set(),
}


class CompetitionService:
    def __init__(self, settings: Settings, storage: FileStorage, clock: Clock = utc_now) -> None:
        self._settings = settings
        self._storage = storage
        self._clock = clock

    def create_competition(self, session: Session, actor: Actor, data: CompetitionCreateIn) -> Competition:
        actor.require_admin()
        if data.end_date <= data.start_date:
            raise InvalidCompetitionDates()
        if data.voting_start_date and data.voting_end_date and data.voting_end_date <= data.voting_start_date:
            raise InvalidCompetitionDates('Voting end date must be after voting start date')

        now = self._clock()
        competition = Competition(
            id=generate_competition_id(),
            title=data.title,
            description=data.description,
            start_date=data.start_date,
            end_date=data.end_date,
            voting_start_date=data.voting_start_date,
            voting_end_date=data.voting_end_date,
            status=CompetitionStatus.draft.value,
            max_photos_per_user=data.max_photos_per_user,
            created_at=now,
            updated_at=now,
        )
        session.add(competition)
        session.commit()
        LOGGER.info('Competition %s created by %s', competition.id, actor.user_id)
        return competition

    def create_category(self, session: Session, actor: Actor, competition_id: str, data: CategoryCreateIn) -> Category:
        actor.require_admin()
        competition = self.get_competition(session, competition_id)
        if competition.status == CompetitionStatus.closed.value:
            raise InvalidStateError('Cannot add categories to a closed competition')

        now = self._clock()
        category = Category(
            id=generate_category_id(),
            competition_id=competition_id,
            name=data.name,
            description=data.description,
            max_photos_per_user=data.max_photos_per_user or competition.max_photos_per_user,
            created_at=now,
            updated_at=now,
        )
        session.add(category)
        session.commit()
        return category

    def change_status(
        self,
        session: Session,
        actor: Actor,
        competition_id: str,
        new_status: CompetitionStatus,
    ) -> Competition:
        actor.require_admin()
        competition = self.get_competition(session, competition_id)
        current = CompetitionStatus(competition.status)
        new_status = CompetitionStatus(new_status)
        if new_status not in ALLOWED_TRANSITIONS[current]:
            raise InvalidStatusTransition(current.value, new_status.value)

        result = session.execute(
            update(Competition)
            .where(Competition.id == competition_id, Competition.status == current.value)
            .values(status=new_status.value, updated_at=self._clock())
        )
        if result.rowcount == 0:
            session.rollback()
            latest = self.get_competition(session, competition_id)
            raise InvalidStatusTransition(latest.status, new_status.value)
        session.commit()

        LOGGER.info('Competition %s moved %s -> %s by %s', competition_id, current.value, new_status.value, actor.user_id)
        return self.get_competition(session, competition_id)

    def list_competitions(self, session: Session, status: CompetitionStatus | None = None) -> list[Competition]:
        query = select(Competition)
        if status is not None:
            query = query.where(Competition.status == CompetitionStatus(status).value)
        return list(session.execute(query.order_by(desc(Competition.start_date), desc(Competition.id))).scalars())

    def get_competition(self, session: Session, competition_id: str) -> Competition:
        competition = session.execute(
            select(Competition)
            .options(selectinload(Competition.categories))
            .where(Competition.id == competition_id)
            .execution_options(populate_existing=True)
        ).scalar_one_or_none()
        if competition is None:
            raise CompetitionNotFound()
        return competition

    def delete_competition(self, session: Session, actor: Actor, competition_id: str) -> None:
        actor.require_admin()
        self.get_competition(session, competition_id)
        file_paths = list(session.execute(select(Photo.file_path).where(Photo.competition_id == competition_id)).scalars())

        # Categories, photos, votes and reports go with it through ON DELETE CASCADE.
        result = session.execute(delete(Competition).where(Competition.id == competition_id))
        if result.rowcount == 0:
            session.rollback()
            raise CompetitionNotFound()
        session.commit()
        session.expunge_all()

        for path in file_paths:
            self._storage.remove(path)
        LOGGER.info('Competition %s deleted by %s (%s photos removed)', competition_id, actor.user_id, len(file_paths))
