"""Validators for download request inputs."""

from ytdl_gateway.validators.video_url import extract_video_id, is_valid_video_url

__all__ = ["extract_video_id", "is_valid_video_url"]
