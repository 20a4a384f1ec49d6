"""Download and metadata endpoints.

- POST /youtube-download — download a video (optionally as MP3) and return it inline
- POST /video-info — return title, duration, author and available formats
"""

from __future__ import annotations

import base64
import logging
from typing import TYPE_CHECKING

from fastapi import APIRouter

from ytdl_gateway.middleware.error_handler import (
    InvalidVideoUrlError,
    MissingVideoUrlError,
)
from ytdl_gateway.models.requests import DownloadRequest, VideoInfoRequest
from ytdl_gateway.models.responses import ApiResponse
from ytdl_gateway.models.schemas import DownloadedFile
from ytdl_gateway.services.downloader import summarize_info
from ytdl_gateway.validators.video_url import is_valid_video_url

if TYPE_CHECKING:
    from ytdl_gateway.services.downloader import VideoDownloader

logger = logging.getLogger(__name__)


def _require_url(video_url: str | None) -> str:
    if not video_url or not video_url.strip():
        raise MissingVideoUrlError()
    return video_url.strip()


def create_download_router(*, downloader: VideoDownloader) -> APIRouter:
    """Factory that creates the download router with an injected downloader."""

    download_router = APIRouter(tags=["download"])

    @download_router.post("/youtube-download")
    async def youtube_download(body: DownloadRequest) -> dict:
        """Download a video and return the file as base64."""
        video_url = _require_url(body.video_url)
        if not is_valid_video_url(video_url):
            raise InvalidVideoUrlError()

        logger.info("Starting download", extra={"video_url": video_url})

        result = await downloader.download_video(video_url, body.format, body.quality)
        content = await downloader.read_and_discard(result)
        encoded = base64.b64encode(content).decode("ascii")

        logger.info(
            "Returning %s",
            result.file_name,
            extra={"video_id": result.video_id, "file_size": len(content)},
        )

        return ApiResponse(
            success=True,
            data=DownloadedFile(
                file_name=result.file_name,
                file_size=len(content),
                format=result.container,
                download_url=f"data:application/octet-stream;base64,{encoded}",
                binary_data=encoded,
            ).model_dump(),
        ).to_payload()

    @download_router.post("/video-info")
    async def video_info(body: VideoInfoRequest) -> dict:
        """Fetch metadata for a video without downloading it."""
        video_url = _require_url(body.video_url)
        if not is_valid_video_url(video_url):
            raise InvalidVideoUrlError()

        info = await downloader.get_video_info(video_url)

        return ApiResponse(
            success=True,
            data=summarize_info(info).model_dump(),
        ).to_payload()

    return download_router
