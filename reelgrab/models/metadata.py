"""
metadata models for reelgrab
"""

from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import Any, List, Optional


class FormatRecord(BaseModel):
    """one stream as reported by yt-dlp (only the keys we look at)"""
    model_config = ConfigDict(extra="ignore")

    format_id: str = ""
    ext: Optional[str] = None
    vcodec: Optional[str] = None
    acodec: Optional[str] = None
    height: int = 0  # 0 when unknown
    fps: Optional[float] = None
    tbr: float = 0  # average bitrate, 0 when unknown
    format_note: Optional[str] = None

    @field_validator("format_id", mode="before")
    @classmethod
    def _format_id_to_str(cls, v: Any) -> str:
        return "" if v is None else str(v)

    @field_validator("height", "tbr", mode="before")
    @classmethod
    def _zero_when_unknown(cls, v: Any) -> Any:
        if v is None or v == "":
            return 0
        return v

    @field_validator("fps", mode="before")
    @classmethod
    def _drop_empty_fps(cls, v: Any) -> Any:
        return v or None

    @property
    def has_video(self) -> bool:
        return bool(self.vcodec) and self.vcodec != "none"

    @property
    def has_audio(self) -> bool:
        return bool(self.acodec) and self.acodec != "none"


class MediaInfo(BaseModel):
    """what we learned about a post from one yt-dlp run"""
    title: str = "Instagram Video"
    author: str = "Unknown"
    duration_seconds: float = Field(default=0, ge=0)
    thumbnail_url: Optional[str] = None
    formats: List[FormatRecord] = []


class FormatOption(BaseModel):
    """a download choice shown to the user"""
    model_config = ConfigDict(populate_by_name=True)

    format_id: str = Field(alias="formatId")
    quality_label: str = Field(alias="qualityLabel")
    fps: Optional[float] = None
    height: int = 0
    tbr: float = 0  # ranking only


class InfoRequest(BaseModel):
    """body of POST /api/info, url is checked by the route so a missing one is a 400"""
    url: Optional[str] = None


class InfoResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    title: str
    author: str
    length_seconds: float = Field(alias="lengthSeconds")
    thumbnail: Optional[str] = None
    options: List[FormatOption] = []


class ErrorResponse(BaseModel):
    error: str
    details: Optional[str] = None
