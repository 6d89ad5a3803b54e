"""
reelgrab downloader - names the file and relays yt-dlp output to the client
"""

import re
import unicodedata
from typing import AsyncIterator, Optional
from urllib.parse import quote

from reelgrab.helper.errors import ExtractionFailed
from reelgrab.helper.logs import get_logger
from reelgrab.models.metadata import FormatRecord
from reelgrab.services.ports import DownloadStream

logger = get_logger(__name__)

FALLBACK_TITLE = "instagram-video"


def sanitize_filename(title: Optional[str], fallback: str = FALLBACK_TITLE) -> str:
    """
    makes a title safe to put in a content-disposition header.
    - normalizes unicode down to ascii
    - removes anything that is not a word character, whitespace, dot or dash
    - collapses runs of whitespace (newlines included) into one space
    - limits length to 150 characters
    """
    title = unicodedata.normalize('NFKD', str(title or "")).encode(
        'ascii', 'ignore').decode('ascii')
    title = re.sub(r'[^\w\s.-]', '', title)
    title = re.sub(r'\s+', ' ', title).strip()
    return title[:150].strip() or fallback


def download_filename(title: Optional[str], fmt: FormatRecord) -> str:
    quality = f"{fmt.height}p" if fmt.height else "video"
    ext = fmt.ext or "mp4"
    return f"{sanitize_filename(title)}-{quality}.{ext}"


def content_disposition(filename: str) -> str:
    return f'attachment; filename="{filename}"; filename*=UTF-8\'\'{quote(filename)}'


async def _relay(stream: DownloadStream, first_chunk: bytes, label: str) -> AsyncIterator[bytes]:
    sent = 0
    try:
        if first_chunk:
            sent += len(first_chunk)
            yield first_chunk
        while True:
            chunk = await stream.read()
            if not chunk:
                break
            sent += len(chunk)
            yield chunk

        returncode = await stream.wait()
        if returncode != 0:
            # headers are gone already, all we can do is stop and say so here
            logger.warning(
                f"download of {label} truncated after {sent} bytes, "
                f"yt-dlp exited with {returncode}: {stream.diagnostics}"
            )
        else:
            logger.info(f"download of {label} finished, {sent} bytes")
    finally:
        await stream.close()


async def start_streaming(stream: DownloadStream, label: str = "media") -> AsyncIterator[bytes]:
    """
    waits for the first chunk before anything is sent. if yt-dlp dies without
    producing output the caller still gets an ExtractionFailed it can turn into
    a json error, afterwards a failure can only truncate the body.
    """
    try:
        first_chunk = await stream.read()
        if not first_chunk:
            returncode = await stream.wait()
            if returncode != 0:
                logger.warning(f"download of {label} failed before any bytes: {stream.diagnostics}")
                raise ExtractionFailed(
                    "Download failed.",
                    details=stream.diagnostics or f"yt-dlp exited with {returncode}"
                )
    except BaseException:
        await stream.close()
        raise

    return _relay(stream, first_chunk, label)
