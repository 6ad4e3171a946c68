from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles

from photocontest.api.routes import router as api_router
from photocontest.core.config import get_settings
from photocontest.core.errors import ContestError
from photocontest.core.logging import configure_logging

settings = get_settings()
configure_logging()
LOGGER = logging.getLogger(__name__)

app = FastAPI(title=settings.app_name)
LOGGER.info('Starting %s (%s)', settings.app_name, settings.environment)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.frontend_origins,
    allow_credentials=True,
    allow_methods=['*'],
    allow_headers=['*'],
)


@app.exception_handler(ContestError)
async def contest_error_handler(request: Request, exc: ContestError) -> JSONResponse:
    LOGGER.info('%s %s rejected: %s (%s)', request.method, request.url.path, exc.message, exc.kind)
    return JSONResponse(status_code=exc.status_code, content={'detail': exc.message, 'kind': exc.kind})


app.include_router(api_router)

settings.upload_root.mkdir(parents=True, exist_ok=True)
app.mount(settings.upload_public_base_url, StaticFiles(directory=settings.upload_root), name='uploads')


@app.get('/health')
def health() -> dict[str, str]:
    return {'status': 'ok'}
