from __future__ import annotations

import argparse
from datetime import timedelta
from pathlib import Path
import sys

ROOT = Path(__file__).resolve().parents[1]
BACKEND_ROOT = ROOT / 'backend'
sys.path.insert(0, str(BACKEND_ROOT))

from photocontest.api.deps import get_competition_service
from photocontest.core.actor import Actor
from photocontest.core.logging import configure_logging
from photocontest.db.init_db import init_db
from photocontest.db.session import SessionLocal
from photocontest.schemas.api import CategoryCreateIn, CompetitionCreateIn
from photocontest.schemas.common import CompetitionStatus
from photocontest.utils.timezone import utc_now

DEFAULT_CATEGORIES = ['Landscape', 'Portrait', 'Street']


def main(title: str, categories: list[str], open_now: bool) -> None:
    configure_logging()
    init_db()
    service = get_competition_service()
    admin = Actor(user_id='seed-admin', is_admin=True)
    now = utc_now()

    with SessionLocal() as session:
        competition = service.create_competition(
            session,
            admin,
            CompetitionCreateIn(
                title=title,
                description='Demo competition created by the seed script.',
                start_date=now,
                end_date=now + timedelta(days=30),
                voting_start_date=now + timedelta(days=30),
                voting_end_date=now + timedelta(days=37),
            ),
        )
        for name in categories:
            service.create_category(session, admin, competition.id, CategoryCreateIn(name=name))
        if open_now:
            competition = service.change_status(session, admin, competition.id, CompetitionStatus.open)

        print(f'{competition.id} [{competition.status}] {competition.title}')
        for category in competition.categories:
            print(f'  {category.id} {category.name} (max {category.max_photos_per_user})')


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description='Create a demo competition with a few categories.')
    parser.add_argument('--title', default='Demo Photo Competition')
    parser.add_argument('--category', action='append', dest='categories', help='Category name; repeatable.')
    parser.add_argument('--draft', action='store_true', help='Leave the competition in draft instead of opening it.')
    return parser.parse_args()


if __name__ == '__main__':
    args = parse_args()
    main(args.title, args.categories or DEFAULT_CATEGORIES, open_now=not args.draft)
