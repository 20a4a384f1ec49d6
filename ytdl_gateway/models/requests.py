"""Pydantic request models and in-memory result models for downloads."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

from pydantic import BaseModel, Field


class MediaFormat(str, Enum):
    """Output formats a download can be requested in."""

    MP4 = "mp4"
    WEBM = "webm"
    MP3 = "mp3"  # transcoded with ffmpeg
    AUDIO = "audio"  # audio-only stream, original codec

    @property
    def is_audio(self) -> bool:
        return self in (MediaFormat.MP3, MediaFormat.AUDIO)


class VideoInfoRequest(BaseModel):
    """Request body for a metadata lookup.

    ``video_url`` is optional at the model level so a missing URL is
    reported as 400 ``Video URL is required`` instead of a 422.
    """

    video_url: str | None = Field(default=None, alias="videoUrl")

    model_config = {"populate_by_name": True}


class DownloadRequest(VideoInfoRequest):
    """Request body for a download, with output format and quality selector."""

    format: MediaFormat = MediaFormat.MP4
    quality: str = Field(default="highest", pattern=r"^(highest|lowest|\d{3,4}p)$")


@dataclass
class DownloadResult:
    """A finished download sitting in the temporary download directory."""

    video_id: str
    file_path: Path
    media_format: MediaFormat
    info: dict = field(default_factory=dict)

    @property
    def file_name(self) -> str:
        return self.file_path.name

    @property
    def container(self) -> str:
        """Extension of the file actually produced.

        Selector fallbacks may yield another container than the one requested.
        """
        return self.file_path.suffix.lstrip(".") or self.media_format.value
