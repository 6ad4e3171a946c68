from __future__ import annotations

from dataclasses import dataclass

from photocontest.core.errors import AdminRequired


@dataclass(slots=True, frozen=True)
class Actor:
    """Authenticated caller as supplied by the identity provider."""

    user_id: str
    is_admin: bool = False

    def require_admin(self) -> None:
        if not self.is_admin:
            raise AdminRequired()
