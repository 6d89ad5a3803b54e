"""
reelgrab api server - the main entry point
"""

import os
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import Depends, FastAPI, Query, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, StreamingResponse
from fastapi.staticfiles import StaticFiles

from reelgrab import __version__
from reelgrab.helper.config import get_settings
from reelgrab.helper.detector import extract_shortcode, is_instagram_url
from reelgrab.helper.downloader import content_disposition, download_filename, start_streaming
from reelgrab.helper.errors import (
    ExtractionFailed,
    InvalidInput,
    MalformedOutput,
    NotFound,
    ReelGrabError
)
from reelgrab.helper.logs import get_logger
from reelgrab.models.metadata import ErrorResponse, InfoRequest, InfoResponse
from reelgrab.services import instagram
from reelgrab.services.ports import MediaExtractor
from reelgrab.services.ytdlp import YtDlpExtractor

settings = get_settings()
logger = get_logger(__name__, settings.log_level)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info(f"reelgrab server starting up, yt-dlp runs with {settings.python_bin}")
    yield
    logger.info("reelgrab server shutting down")


app = FastAPI(
    title="reelgrab",
    description="paste an instagram link, pick a quality, get the mp4",
    version=__version__,
    lifespan=lifespan
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=False,
    allow_methods=["GET", "POST"],
    allow_headers=["*"]
)

ERROR_RESPONSES = {
    400: {"model": ErrorResponse, "description": "missing or invalid url/formatId"},
    404: {"model": ErrorResponse, "description": "no matching downloadable format"},
    500: {"model": ErrorResponse, "description": "yt-dlp failed or returned garbage"}
}


def get_extractor() -> MediaExtractor:
    cfg = get_settings()
    return YtDlpExtractor(
        python_bin=cfg.python_bin,
        chunk_size=cfg.chunk_size,
        timeout=cfg.extractor_timeout
    )


@app.exception_handler(ReelGrabError)
async def reelgrab_error_handler(request: Request, exc: ReelGrabError):
    body = ErrorResponse(error=exc.message, details=exc.details)
    return JSONResponse(status_code=exc.status_code, content=body.model_dump(exclude_none=True))


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    body = ErrorResponse(error="Invalid request.", details=str(exc.errors()))
    return JSONResponse(status_code=400, content=body.model_dump(exclude_none=True))


@app.post("/api/info", response_model=InfoResponse, responses=ERROR_RESPONSES)
async def get_info(
    request: Optional[InfoRequest] = None,
    extractor: MediaExtractor = Depends(get_extractor)
):
    url = request.url if request else None
    if not url or not is_instagram_url(url):
        raise InvalidInput("Please provide a valid Instagram reel/post URL.")

    info = await instagram.fetch_metadata(url, extractor)
    options = instagram.select_options(info.formats)

    if not options:
        raise NotFound("No downloadable formats found.")

    return InfoResponse(
        title=info.title,
        author=info.author,
        length_seconds=info.duration_seconds,
        thumbnail=info.thumbnail_url,
        options=options
    )


@app.get("/api/download", responses=ERROR_RESPONSES)
async def download(
    url: Optional[str] = None,
    format_id: Optional[str] = Query(default=None, alias="formatId"),
    extractor: MediaExtractor = Depends(get_extractor)
):
    if not url or not format_id or not is_instagram_url(url):
        raise InvalidInput()

    # format ids are not kept between requests, look them up again
    try:
        info = await instagram.fetch_metadata(url, extractor)
    except (ExtractionFailed, MalformedOutput) as e:
        raise type(e)("Download failed.", details=e.details) from e

    selected = instagram.find_format(info, format_id)
    if selected is None:
        raise NotFound()

    filename = download_filename(info.title, selected)
    label = f"{extract_shortcode(url) or url} [{format_id}]"

    stream = await instagram.fetch_media_for_download(url, format_id, extractor)
    body = await start_streaming(stream, label)

    return StreamingResponse(
        body,
        media_type="video/mp4",
        headers={"Content-Disposition": content_disposition(filename)}
    )


@app.get("/api/health")
async def health_check():
    return {"status": "ok", "version": __version__}


# the browser form, mounted last so it never shadows /api
if os.path.isdir(settings.public_dir):
    app.mount("/", StaticFiles(directory=settings.public_dir, html=True), name="public")
