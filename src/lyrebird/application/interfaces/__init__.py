"""
Application Interfaces (Ports)

Abstract interfaces that define contracts between the application
layer and infrastructure adapters.
"""

from lyrebird.application.interfaces.audio_resolver import AudioResolver, ResolvedAudio, SearchResult
from lyrebird.application.interfaces.voice_adapter import VoiceAdapter

__all__ = [
    "AudioResolver",
    "ResolvedAudio",
    "SearchResult",
    "VoiceAdapter",
]
