"""
Abstract base class for speech recognition providers.

All recognizer implementations must implement this interface, enabling
provider-agnostic transcription in the service layer.
"""

from abc import ABC, abstractmethod

from caseregister.core.models import RecognitionConfig


class BaseRecognizer(ABC):
    """Interface that every speech recognition provider must implement."""

    @abstractmethod
    async def recognize(self, audio: bytes, config: RecognitionConfig) -> list[str]:
        """Recognize speech in normalized PCM audio.

        Args:
            audio: Raw mono 16 kHz 16-bit little-endian PCM bytes.
            config: Encoding, sample rate, language and model parameters.

        Returns:
            The best transcript of each recognized audio segment, in order.
            An empty list means the recognizer heard nothing usable.

        Raises:
            ConfigurationError: If provider credentials are missing.
            RecognitionError: If the provider call fails.
        """
