"""YouTube download gateway — rate-limited, proxy-rotating front for yt-dlp."""
