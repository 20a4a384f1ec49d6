"""Video downloader — admission gate + yt-dlp orchestration.

Coordinates a single download: derive the video ID → refuse if the admission
gate reports the ID as rate limited → fetch metadata through the next proxy
→ download (and for MP3, transcode with ffmpeg) through the next proxy →
on any failure record an attempt against the ID.

yt-dlp is blocking, so every library call runs in a worker thread under the
configured timeout.
"""

from __future__ import annotations

import asyncio
import functools
import logging
import threading
import time
import uuid
from collections.abc import Callable
from pathlib import Path
from typing import Any

import yt_dlp
from yt_dlp.utils import DownloadCancelled, YoutubeDLError

from ytdl_gateway.config.settings import GatewaySettings
from ytdl_gateway.logging_config import mask_proxy
from ytdl_gateway.middleware.error_handler import (
    DownloadFailedError,
    DownloadTimeoutError,
    GatewayError,
    RateLimitExceededError,
    VideoInfoError,
)
from ytdl_gateway.models.requests import DownloadResult, MediaFormat
from ytdl_gateway.models.schemas import VideoDetails, VideoFormat
from ytdl_gateway.resilience.admission_gate import AdmissionGate
from ytdl_gateway.validators.video_url import extract_video_id

logger = logging.getLogger(__name__)


def build_format_selector(media_format: MediaFormat, quality: str) -> str:
    """Translate a format/quality pair into a yt-dlp format selector.

    ``quality`` is ``highest``, ``lowest`` or a maximum height such as ``720p``.
    Height limits do not apply to audio-only downloads.
    """
    if media_format.is_audio:
        return "worstaudio/worst" if quality == "lowest" else "bestaudio/best"

    ext = media_format.value
    if quality == "lowest":
        return f"worst[ext={ext}]/worst"
    if quality.endswith("p") and quality[:-1].isdigit():
        height = int(quality[:-1])
        return f"best[height<={height}][ext={ext}]/best[height<={height}]/best"
    return f"best[ext={ext}]/best"


def summarize_info(info: dict[str, Any]) -> VideoDetails:
    """Reduce a yt-dlp info dict to title, duration, author and formats."""
    formats = []
    for fmt in info.get("formats") or []:
        vcodec = fmt.get("vcodec")
        acodec = fmt.get("acodec")
        has_video = vcodec not in (None, "none")
        has_audio = acodec not in (None, "none")
        height = fmt.get("height")
        ext = fmt.get("ext")
        formats.append(
            VideoFormat(
                quality=f"{height}p" if height else fmt.get("format_note"),
                mime_type=f"{'video' if has_video else 'audio'}/{ext}" if ext else None,
                has_audio=has_audio,
                has_video=has_video,
            )
        )

    duration = info.get("duration")
    return VideoDetails(
        title=info.get("title"),
        duration=int(duration) if duration is not None else None,
        author=info.get("uploader") or info.get("channel"),
        formats=formats,
    )


def _library_message(exc: Exception) -> str:
    return str(exc).removeprefix("ERROR: ").strip() or exc.__class__.__name__


def _abort_when_set(abort: threading.Event, _status: dict[str, Any]) -> None:
    """yt-dlp progress hook that stops a download abandoned by its caller."""
    if abort.is_set():
        raise DownloadCancelled("Download abandoned after timeout")


def _finish_abandoned(
    on_abandoned: Callable[[], None] | None, finished: asyncio.Future
) -> None:
    # Retrieve the outcome so a late failure is not reported as unhandled
    if not finished.cancelled() and finished.exception() is not None:
        logger.debug("Abandoned library call failed: %s", finished.exception())
    if on_abandoned is not None:
        on_abandoned()


class VideoDownloader:
    """Downloads YouTube videos through yt-dlp behind an admission gate.

    The gate is injected so its attempt history and proxy cursor are shared
    by every request the application serves.
    """

    def __init__(self, gate: AdmissionGate, settings: GatewaySettings) -> None:
        self._gate = gate
        self._settings = settings
        self._download_dir = Path(settings.download_dir)

    # ------------------------------------------------------------------
    # yt-dlp plumbing
    # ------------------------------------------------------------------

    def _base_options(self, proxy: str | None) -> dict[str, Any]:
        options: dict[str, Any] = {
            "quiet": True,
            "no_warnings": True,
            "noplaylist": True,
            "http_headers": {"User-Agent": self._settings.user_agent},
        }
        if proxy:
            options["proxy"] = proxy
        return options

    async def _run(
        self,
        func,  # noqa: ANN001
        *args: Any,
        abort: threading.Event | None = None,
        on_abandoned: Callable[[], None] | None = None,
    ) -> Any:
        """Run a blocking library call in a thread under the download timeout.

        A timed-out thread cannot be killed. ``abort`` is set so the call can
        stop at its next checkpoint, and ``on_abandoned`` runs once the thread
        has actually finished.
        """
        timeout = self._settings.download_timeout_seconds
        task = asyncio.ensure_future(asyncio.to_thread(func, *args))
        try:
            return await asyncio.wait_for(asyncio.shield(task), timeout=timeout)
        except asyncio.TimeoutError as exc:
            if abort is not None:
                abort.set()
            task.add_done_callback(functools.partial(_finish_abandoned, on_abandoned))
            raise DownloadTimeoutError(f"Download timed out after {timeout:.0f}s") from exc

    @staticmethod
    def _extract_info(url: str, options: dict[str, Any]) -> dict[str, Any]:
        with yt_dlp.YoutubeDL(options) as ydl:
            info = ydl.extract_info(url, download=False)
            return ydl.sanitize_info(info)

    @staticmethod
    def _download(url: str, options: dict[str, Any]) -> Path:
        with yt_dlp.YoutubeDL(options) as ydl:
            info = ydl.extract_info(url, download=True)
            # Post-processors (ffmpeg) report the final path here
            downloads = info.get("requested_downloads") or []
            if downloads and downloads[0].get("filepath"):
                return Path(downloads[0]["filepath"])
            return Path(ydl.prepare_filename(info))

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def get_video_info(self, url: str) -> dict[str, Any]:
        """Fetch video metadata without downloading media."""
        proxy = self._gate.get_next_proxy()
        try:
            return await self._run(self._extract_info, url, self._base_options(proxy))
        except YoutubeDLError as exc:
            raise VideoInfoError(
                f"Failed to get video info: {_library_message(exc)}"
            ) from exc

    async def download_video(
        self,
        url: str,
        media_format: MediaFormat = MediaFormat.MP4,
        quality: str = "highest",
    ) -> DownloadResult:
        """Download ``url`` into the download directory.

        Raises:
            InvalidVideoUrlError: the URL carries no recognizable video ID.
            RateLimitExceededError: too many recent failures for this video.
            VideoInfoError, DownloadFailedError: the library call failed; an
                attempt has been recorded against the video ID.
        """
        video_id = extract_video_id(url)

        if self._gate.is_rate_limited(video_id):
            logger.warning(
                "Refusing download of %s: rate limited",
                video_id,
                extra={"video_id": video_id},
            )
            raise RateLimitExceededError(retry_after_seconds=self._gate.window_seconds)

        start = time.monotonic()
        try:
            info = await self.get_video_info(url)
            file_path = await self._fetch(url, media_format, quality)
        except GatewayError as exc:
            self._record_failure(video_id, media_format, exc.message)
            raise
        except Exception as exc:
            failure = DownloadFailedError(_library_message(exc))
            self._record_failure(video_id, media_format, failure.message)
            raise failure from exc

        duration_ms = int((time.monotonic() - start) * 1000)
        logger.info(
            "Downloaded %s as %s",
            video_id,
            media_format.value,
            extra={
                "video_id": video_id,
                "media_format": media_format.value,
                "duration_ms": duration_ms,
            },
        )
        return DownloadResult(
            video_id=video_id,
            file_path=file_path,
            media_format=media_format,
            info=info,
        )

    def _record_failure(self, video_id: str, media_format: MediaFormat, reason: str) -> None:
        self._gate.record_attempt(video_id)
        logger.warning(
            "Download failed for %s",
            video_id,
            extra={
                "video_id": video_id,
                "media_format": media_format.value,
                "error_reason": reason,
            },
        )

    def _discard_outputs(self, stem: str) -> None:
        """Delete every file a download with this stem left behind (.part included)."""
        for path in self._download_dir.glob(f"{stem}.*"):
            path.unlink(missing_ok=True)

    async def _fetch(self, url: str, media_format: MediaFormat, quality: str) -> Path:
        self._download_dir.mkdir(parents=True, exist_ok=True)
        stem = uuid.uuid4().hex

        proxy = self._gate.get_next_proxy()
        options = self._base_options(proxy)
        options["format"] = build_format_selector(media_format, quality)
        options["outtmpl"] = str(self._download_dir / f"{stem}.%(ext)s")
        abort = threading.Event()
        options["progress_hooks"] = [functools.partial(_abort_when_set, abort)]
        if media_format == MediaFormat.MP3:
            options["postprocessors"] = [
                {
                    "key": "FFmpegExtractAudio",
                    "preferredcodec": "mp3",
                    "preferredquality": str(self._settings.audio_bitrate_kbps),
                }
            ]

        logger.debug(
            "Starting yt-dlp download",
            extra={"video_url": url, "proxy_used": mask_proxy(proxy)},
        )
        try:
            return await self._run(
                self._download,
                url,
                options,
                abort=abort,
                on_abandoned=functools.partial(self._discard_outputs, stem),
            )
        except DownloadTimeoutError:
            raise
        except (YoutubeDLError, OSError) as exc:
            self._discard_outputs(stem)
            raise DownloadFailedError(_library_message(exc)) from exc
        except Exception:
            self._discard_outputs(stem)
            raise

    async def read_and_discard(self, result: DownloadResult) -> bytes:
        """Return the downloaded bytes and delete the temporary file."""
        try:
            return await asyncio.to_thread(result.file_path.read_bytes)
        finally:
            result.file_path.unlink(missing_ok=True)
