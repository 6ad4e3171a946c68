from __future__ import annotations

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from photocontest.api.deps import get_competition_service, get_db, require_actor
from photocontest.api.route_utils import category_out, competition_detail_out, competition_out
from photocontest.core.actor import Actor
from photocontest.schemas.api import (
    CategoryCreateIn,
    CategoryOut,
    CompetitionCreateIn,
    CompetitionDetailOut,
    CompetitionOut,
    CompetitionStatusIn,
    MessageOut,
)
from photocontest.schemas.common import CompetitionStatus
from photocontest.services.competition_service import CompetitionService

router = APIRouter()


@router.get('/competitions', response_model=list[CompetitionOut])
def list_competitions(
    status: CompetitionStatus | None = Query(default=None),
    db: Session = Depends(get_db),
    service: CompetitionService = Depends(get_competition_service),
) -> list[CompetitionOut]:
    return [competition_out(row) for row in service.list_competitions(db, status=status)]


@router.post('/competitions', response_model=CompetitionOut, status_code=201)
def create_competition(
    payload: CompetitionCreateIn,
    actor: Actor = Depends(require_actor),
    db: Session = Depends(get_db),
    service: CompetitionService = Depends(get_competition_service),
) -> CompetitionOut:
    return competition_out(service.create_competition(db, actor, payload))


@router.get('/competitions/{competition_id}', response_model=CompetitionDetailOut)
def get_competition(
    competition_id: str,
    db: Session = Depends(get_db),
    service: CompetitionService = Depends(get_competition_service),
) -> CompetitionDetailOut:
    return competition_detail_out(service.get_competition(db, competition_id))


@router.post('/competitions/{competition_id}/status', response_model=CompetitionDetailOut)
def change_competition_status(
    competition_id: str,
    payload: CompetitionStatusIn,
    actor: Actor = Depends(require_actor),
    db: Session = Depends(get_db),
    service: CompetitionService = Depends(get_competition_service),
) -> CompetitionDetailOut:
    return competition_detail_out(service.change_status(db, actor, competition_id, payload.status))


@router.post('/competitions/{competition_id}/categories', response_model=CategoryOut, status_code=201)
def create_category(
    competition_id: str,
    payload: CategoryCreateIn,
    actor: Actor = Depends(require_actor),
    db: Session = Depends(get_db),
    service: CompetitionService = Depends(get_competition_service),
) -> CategoryOut:
    return category_out(service.create_category(db, actor, competition_id, payload))


@router.delete('/competitions/{competition_id}', response_model=MessageOut)
def delete_competition(
    competition_id: str,
    actor: Actor = Depends(require_actor),
    db: Session = Depends(get_db),
    service: CompetitionService = Depends(get_competition_service),
) -> MessageOut:
    service.delete_competition(db, actor, competition_id)
    return MessageOut(message='Competition deleted successfully')
