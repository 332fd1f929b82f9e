"""Infrastructure layer - external systems integration.

This layer contains implementations for:
- Persistence (restart transfer file)
- Discord (bot, cogs, adapters)
- Audio (yt-dlp, FFmpeg)
"""
