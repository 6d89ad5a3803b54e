"""
the narrow contract between the http layer and whatever runs yt-dlp
"""

from typing import Any, Dict, Optional, Protocol


class DownloadStream(Protocol):
    """muxed bytes coming out of a running extractor"""

    async def read(self) -> bytes:
        """next chunk, b"" once the output is exhausted"""
        ...

    async def wait(self) -> int:
        """exit code of the extractor"""
        ...

    async def close(self) -> None:
        """stop the extractor if it is still running"""
        ...

    @property
    def diagnostics(self) -> Optional[str]:
        ...


class MediaExtractor(Protocol):

    async def resolve_metadata(self, url: str) -> Dict[str, Any]:
        ...

    async def open_download_stream(self, url: str, format_id: str) -> DownloadStream:
        ...
