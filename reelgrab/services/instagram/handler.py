"""
reelgrab resolver for instagram posts, reels and tv videos.
yt-dlp does the extraction, this module decides which of its formats are
worth offering.
"""

from typing import Any, Dict, Iterable, List, Optional

from pydantic import ValidationError

from reelgrab.helper.errors import MalformedOutput
from reelgrab.helper.logs import get_logger
from reelgrab.models.metadata import FormatOption, FormatRecord, MediaInfo
from reelgrab.services.ports import DownloadStream, MediaExtractor

logger = get_logger(__name__)

# containers a browser plays without any remuxing
PLAYABLE_EXTS = {"mp4"}


def _parse_formats(raw_formats: Any) -> List[FormatRecord]:
    if not isinstance(raw_formats, list):
        return []

    formats: List[FormatRecord] = []
    for i, fmt in enumerate(raw_formats):
        if not isinstance(fmt, dict):
            logger.debug(f"skipping format #{i+1}, not a dictionary")
            continue
        try:
            formats.append(FormatRecord.model_validate(fmt))
        except ValidationError as e:
            logger.debug(f"skipping format #{i+1}, unexpected shape: {e}")
    return formats


def parse_media_info(info: Dict[str, Any]) -> MediaInfo:
    """turns the yt-dlp info dict into a MediaInfo"""
    try:
        return MediaInfo(
            title=info.get("title") or "Instagram Video",
            author=info.get("uploader") or info.get("channel") or "Unknown",
            duration_seconds=info.get("duration") or 0,
            thumbnail_url=info.get("thumbnail") or None,
            formats=_parse_formats(info.get("formats"))
        )
    except ValidationError as e:
        raise MalformedOutput(details=f"Unexpected metadata from yt-dlp: {e}") from e


def quality_label(fmt: FormatRecord) -> str:
    if fmt.height > 0:
        return f"{fmt.height}p"
    return fmt.format_note or "SD"


def _is_muxed_playable(fmt: FormatRecord) -> bool:
    return (
        bool(fmt.format_id)
        and fmt.ext in PLAYABLE_EXTS
        and fmt.has_video
        and fmt.has_audio
    )


def select_options(formats: Iterable[FormatRecord]) -> List[FormatOption]:
    """
    picks the formats worth offering:
    - only single-file streams with both audio and video in a playable container
    - one entry per quality label, the highest bitrate wins (first one on a tie)
    - best first, by height then bitrate
    """
    unique_by_quality: Dict[str, FormatOption] = {}

    for fmt in formats:
        if not _is_muxed_playable(fmt):
            continue

        option = FormatOption(
            format_id=fmt.format_id,
            quality_label=quality_label(fmt),
            fps=fmt.fps,
            height=fmt.height,
            tbr=fmt.tbr
        )
        existing = unique_by_quality.get(option.quality_label)
        if existing is None or option.tbr > existing.tbr:
            unique_by_quality[option.quality_label] = option

    return sorted(
        unique_by_quality.values(),
        key=lambda o: (o.height, o.tbr),
        reverse=True
    )


def find_format(info: MediaInfo, format_id: str) -> Optional[FormatRecord]:
    """looks the id up in every format yt-dlp reported, not just the offered ones"""
    for fmt in info.formats:
        if fmt.format_id == str(format_id):
            return fmt
    return None


async def fetch_metadata(url: str, extractor: MediaExtractor) -> MediaInfo:
    """takes in an instagram url, and returns the metadata for that single item"""
    raw = await extractor.resolve_metadata(url)
    info = parse_media_info(raw)
    logger.info(f"resolved {url}: {len(info.formats)} formats")
    return info


async def fetch_media_for_download(url: str, format_id: str, extractor: MediaExtractor) -> DownloadStream:
    """starts yt-dlp streaming the chosen format to stdout"""
    return await extractor.open_download_stream(url, format_id)
