"""Audio infrastructure - yt-dlp resolver."""

from lyrebird.infrastructure.audio.ytdlp_resolver import (
    AudioFormatInfo,
    YtDlpOpts,
    YtDlpResolver,
    YtDlpTrackInfo,
)

__all__ = [
    "AudioFormatInfo",
    "YtDlpOpts",
    "YtDlpResolver",
    "YtDlpTrackInfo",
]
