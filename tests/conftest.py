# tests/conftest.py
from __future__ import annotations

import asyncio
from typing import Any, Dict, List, Optional

import pytest
from fastapi.testclient import TestClient

from reelgrab.main import app, get_extractor

REEL_URL = "https://www.instagram.com/reel/C0ffeeBeans1/"


def make_info(formats: Optional[List[Dict[str, Any]]] = None, **overrides) -> Dict[str, Any]:
    """a trimmed down `yt-dlp --dump-single-json` result for an instagram reel"""
    info = {
        "id": "C0ffeeBeans1",
        "title": "Video by latte.art",
        "uploader": "latte.art",
        "channel": "latte_art_channel",
        "duration": 14.2,
        "thumbnail": "https://scontent.cdninstagram.com/thumb.jpg",
        "formats": formats if formats is not None else [
            {"format_id": "dash-v-480", "ext": "mp4", "vcodec": "avc1.4d401e", "acodec": "none",
             "height": 480, "tbr": 600},
            {"format_id": "dash-a", "ext": "m4a", "vcodec": "none", "acodec": "mp4a.40.2", "tbr": 96},
            {"format_id": "8", "ext": "mp4", "vcodec": "avc1", "acodec": "mp4a", "height": 720,
             "fps": 30, "tbr": 900},
            {"format_id": "9", "ext": "mp4", "vcodec": "avc1", "acodec": "mp4a", "height": 720,
             "fps": 30, "tbr": 500},
            {"format_id": "10", "ext": "mp4", "vcodec": "avc1", "acodec": "mp4a", "height": 1080,
             "fps": 30, "tbr": 2100},
        ],
    }
    info.update(overrides)
    return info


class FakeStream:
    """stands in for a running `yt-dlp -o -`"""

    def __init__(self, chunks: List[bytes], returncode: int = 0, diagnostics: Optional[str] = None):
        self._chunks = list(chunks)
        self.returncode = returncode
        self._diagnostics = diagnostics
        self.closed = False

    async def read(self) -> bytes:
        await asyncio.sleep(0)
        return self._chunks.pop(0) if self._chunks else b""

    async def wait(self) -> int:
        return self.returncode

    async def close(self) -> None:
        self.closed = True

    @property
    def diagnostics(self) -> Optional[str]:
        return self._diagnostics


class FakeExtractor:
    """records calls, returns canned metadata / streams"""

    def __init__(self, info: Any = None, error: Optional[Exception] = None,
                 stream: Optional[FakeStream] = None):
        self.info = info if info is not None else make_info()
        self.error = error
        self.stream = stream or FakeStream([b"\x00\x00\x00\x18ftypmp42", b"moov-and-mdat"])
        self.metadata_calls: List[str] = []
        self.download_calls: List[tuple] = []

    async def resolve_metadata(self, url: str) -> Dict[str, Any]:
        self.metadata_calls.append(url)
        if self.error is not None:
            raise self.error
        return self.info

    async def open_download_stream(self, url: str, format_id: str) -> FakeStream:
        self.download_calls.append((url, format_id))
        return self.stream


@pytest.fixture()
def extractor() -> FakeExtractor:
    return FakeExtractor()


@pytest.fixture()
def client(extractor):
    app.dependency_overrides[get_extractor] = lambda: extractor
    try:
        with TestClient(app) as c:
            yield c
    finally:
        app.dependency_overrides.clear()
