"""
Instagram format resolver for reelgrab.
Shapes yt-dlp metadata into the options shown to the user.
"""

from .handler import (
    fetch_metadata,
    fetch_media_for_download,
    find_format,
    parse_media_info,
    quality_label,
    select_options,
)

__all__ = [
    'fetch_metadata',
    'fetch_media_for_download',
    'find_format',
    'parse_media_info',
    'quality_label',
    'select_options',
]
