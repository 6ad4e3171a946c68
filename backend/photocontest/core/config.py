from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict

REPO_ROOT = Path(__file__).resolve().parents[3]


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=str(REPO_ROOT / '.env'), env_file_encoding='utf-8', extra='ignore')

    app_name: str = 'PhotoContest'
    environment: str = 'dev'
    log_level: str = 'INFO'

    database_url: str = 'sqlite:///./backend/data/app.db'

    upload_dir: str = 'data/uploads'
    upload_public_base_url: str = '/uploads'
    max_upload_bytes: int = 10 * 1024 * 1024
    allowed_mime_types_csv: str = 'image/jpeg,image/png'

    submission_retry_attempts: int = 3
    default_moderation_reason: str = 'Content moderation'

    frontend_origin: str = 'http://localhost:3000'
    frontend_origins_csv: str = 'http://localhost:3000,http://127.0.0.1:3000'

    @property
    def repo_root(self) -> Path:
        return Path(__file__).resolve().parents[3]

    @property
    def backend_root(self) -> Path:
        return Path(__file__).resolve().parents[2]

    @property
    def resolved_database_url(self) -> str:
        if self.database_url.startswith('sqlite:///./'):
            rel_path = self.database_url.removeprefix('sqlite:///./')
            absolute_path = (self.repo_root / rel_path).resolve()
            absolute_path.parent.mkdir(parents=True, exist_ok=True)
            return f"sqlite:///{absolute_path.as_posix()}"
        return self.database_url

    @property
    def upload_root(self) -> Path:
        path = Path(self.upload_dir)
        if path.is_absolute():
            return path
        return self.repo_root / path

    @property
    def allowed_mime_types(self) -> list[str]:
        return [s.strip().lower() for s in self.allowed_mime_types_csv.split(',') if s.strip()]

    @property
    def frontend_origins(self) -> list[str]:
        raw = [s.strip() for s in self.frontend_origins_csv.split(',') if s.strip()]
        if self.frontend_origin and self.frontend_origin not in raw:
            raw.append(self.frontend_origin)
        seen: set[str] = set()
        out: list[str] = []
        for origin in raw:
            if origin in seen:
                continue
            seen.add(origin)
            out.append(origin)
        return out


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
