from __future__ import annotations

import hashlib
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

from photocontest.core.config import Settings

LOGGER = logging.getLogger(__name__)


@dataclass(slots=True)
class StoredFile:
    path: str
    size: int
    mime_type: str


class FileStorage(Protocol):
    def save(self, *, folder: str, file_id: str, data: bytes, content_type: str) -> StoredFile:
        ...

    def remove(self, path: str) -> None:
        ...


class LocalFileStorage:
    """Writes uploads below ``settings.upload_root`` and hands out public URLs."""

    def __init__(self, settings: Settings) -> None:
        self._settings = settings

    def save(self, *, folder: str, file_id: str, data: bytes, content_type: str) -> StoredFile:
        target_dir = self._settings.upload_root / folder
        target_dir.mkdir(parents=True, exist_ok=True)

        ext = _ext_from_content_type(content_type)
        digest = hashlib.sha256(data).hexdigest()[:12]
        file_name = f'{file_id}-{digest}{ext}'
        target = target_dir / file_name
        target.write_bytes(data)

        public_base = self._settings.upload_public_base_url.rstrip('/')
        return StoredFile(path=f'{public_base}/{folder}/{file_name}', size=len(data), mime_type=content_type)

    def remove(self, path: str) -> None:
        local = self._local_path(path)
        if local is None:
            return
        try:
            local.unlink(missing_ok=True)
        except OSError as exc:
            LOGGER.warning('Failed to remove stored file %s: %s', local, exc)

    def _local_path(self, path: str) -> Path | None:
        public_base = self._settings.upload_public_base_url.rstrip('/') + '/'
        if not path.startswith(public_base):
            return None
        relative = path.removeprefix(public_base)
        root = self._settings.upload_root.resolve()
        candidate = (root / relative).resolve()
        if root not in candidate.parents:
            return None
        return candidate


def _ext_from_content_type(content_type: str) -> str:
    return {
        'image/jpeg': '.jpg',
        'image/png': '.png',
    }.get(content_type, '.img')
