"""
Transcription module - Speech recognition abstraction and request pipeline.

Factory function for creating recognizer instances based on provider configuration.
"""

from .base import BaseRecognizer

__all__ = ["BaseRecognizer", "create_recognizer"]


def create_recognizer(provider: str, **kwargs) -> BaseRecognizer:
    """
    Factory function to create a recognizer instance based on provider.

    Args:
        provider: Recognizer provider name ("google")
        **kwargs: Provider-specific configuration

    Returns:
        BaseRecognizer implementation instance

    Raises:
        ValueError: If provider is unknown
    """
    if provider == "google":
        from .google import GoogleSpeechRecognizer

        return GoogleSpeechRecognizer(**kwargs)
    else:
        raise ValueError(f"Unknown STT provider: {provider}")
