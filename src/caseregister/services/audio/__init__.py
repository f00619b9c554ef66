"""
Audio module - Capture state machine and format conversion.
"""

from caseregister.services.audio.capture import AudioBlob, AudioSource, CaptureController, CaptureState, ClipSource
from caseregister.services.audio.converter import AudioConverter

__all__ = [
    "AudioBlob",
    "AudioConverter",
    "AudioSource",
    "CaptureController",
    "CaptureState",
    "ClipSource",
]
