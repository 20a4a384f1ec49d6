"""Public models for the download gateway."""

from ytdl_gateway.models.requests import (
    DownloadRequest,
    DownloadResult,
    MediaFormat,
    VideoInfoRequest,
)
from ytdl_gateway.models.responses import ApiResponse, ErrorMeta
from ytdl_gateway.models.schemas import DownloadedFile, VideoDetails, VideoFormat

__all__ = [
    "ApiResponse",
    "ErrorMeta",
    "DownloadRequest",
    "DownloadResult",
    "DownloadedFile",
    "MediaFormat",
    "VideoDetails",
    "VideoFormat",
    "VideoInfoRequest",
]
