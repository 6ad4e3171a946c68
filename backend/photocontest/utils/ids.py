from __future__ import annotations

import secrets


def generate_id(prefix: str | None = None) -> str:
    token = secrets.token_hex(12)
    return f'{prefix}_{token}' if prefix else token


def generate_competition_id() -> str:
    return generate_id('comp')


def generate_category_id() -> str:
    return generate_id('cat')


def generate_photo_id() -> str:
    return generate_id('photo')


def generate_vote_id() -> str:
    return generate_id('vote')


def generate_report_id() -> str:
    return generate_id('report')
