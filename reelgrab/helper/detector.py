"""
reelgrab url detector
"""

import re
from typing import Optional

INSTAGRAM_URL_PATTERN = re.compile(
    r"^https?://(www\.)?instagram\.com/(reel|p|tv)/",
    re.IGNORECASE
)

SHORTCODE_PATTERN = re.compile(r"/(?:reel|p|tv)/([\w-]+)")


def is_instagram_url(url: Optional[str]) -> bool:
    """
    Checks that the URL points at an instagram post, reel or tv video.

    Args:
        url (str): The URL to be checked.

    Returns:
        bool: True when the URL has the expected shape.
    """
    if not url or not isinstance(url, str):
        return False
    return INSTAGRAM_URL_PATTERN.match(url) is not None


def extract_shortcode(url: str) -> Optional[str]:
    """pulls the post shortcode out of an instagram url, used for log lines"""
    match = SHORTCODE_PATTERN.search(url or "")
    return match.group(1) if match else None
