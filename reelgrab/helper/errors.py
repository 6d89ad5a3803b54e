"""
reelgrab error types - each one knows the http status it maps to
"""

from typing import Optional


class ReelGrabError(Exception):
    """base error, rendered to the client as {error, details}"""

    status_code = 500
    default_message = "Something went wrong."

    def __init__(self, message: Optional[str] = None, details: Optional[str] = None):
        self.message = message or self.default_message
        self.details = details
        super().__init__(self.message)


class InvalidInput(ReelGrabError):
    status_code = 400
    default_message = "Missing or invalid url/formatId."


class NotFound(ReelGrabError):
    status_code = 404
    default_message = "Requested format was not found."


class ExtractionFailed(ReelGrabError):
    """yt-dlp exited non-zero, could not be started, or timed out"""

    status_code = 500
    default_message = "Failed to fetch video information."


class MalformedOutput(ReelGrabError):
    """yt-dlp printed something that is not a json object"""

    status_code = 500
    default_message = "Failed to fetch video information."
