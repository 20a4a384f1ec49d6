"""Response payload schemas for download and metadata endpoints.

Metadata fields are optional because the extraction library omits keys it
could not determine for a given video.
"""

from __future__ import annotations

from pydantic import BaseModel


class VideoFormat(BaseModel):
    """One stream variant offered for a video."""

    quality: str | None = None
    mime_type: str | None = None
    has_audio: bool = False
    has_video: bool = False


class VideoDetails(BaseModel):
    """Summary of a video's metadata."""

    title: str | None = None
    duration: int | None = None  # seconds
    author: str | None = None
    formats: list[VideoFormat] = []


class DownloadedFile(BaseModel):
    """A downloaded file returned inline as base64."""

    file_name: str
    file_size: int
    format: str
    download_url: str  # data: URI
    binary_data: str  # base64
