"""Infrastructure layer - external systems integration.

This layer contains implementations for:
- Audio (yt-dlp resolution, FFmpeg resources, discord.py player)
"""
