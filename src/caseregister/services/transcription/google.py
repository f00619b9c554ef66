"""Google Cloud Speech-to-Text recognizer.

Sends normalized PCM audio to the synchronous ``recognize`` endpoint and
returns the top alternative of each result. The SpeechClient is created
lazily from a service-account file and cached at module level to avoid
re-reading credentials on every request.
"""

import asyncio
import logging
from pathlib import Path

from google.api_core import exceptions as google_exceptions
from google.auth import exceptions as auth_exceptions
from google.cloud import speech

from caseregister.core.config import get_settings
from caseregister.core.exceptions import ConfigurationError, RecognitionError
from caseregister.core.models import RecognitionConfig
from caseregister.services.transcription.base import BaseRecognizer

logger = logging.getLogger(__name__)

_client_cache: speech.SpeechClient | None = None


class GoogleSpeechRecognizer(BaseRecognizer):
    """Speech recognizer backed by Google Cloud Speech-to-Text v1.

    Args:
        credentials_path: Service-account JSON file. Defaults to the
            ``google_credentials_path`` setting.
        settings: Optional Settings instance (defaults to get_settings()).
    """

    def __init__(self, credentials_path: str | None = None, settings=None) -> None:
        self._settings = settings or get_settings()
        self._credentials_path = Path(
            credentials_path or self._settings.google_credentials_path
        )

    def _get_client(self) -> speech.SpeechClient:
        """Return the cached SpeechClient, creating it on first use."""
        global _client_cache  # noqa: PLW0603
        if _client_cache is None:
            if not self._credentials_path.is_file():
                raise ConfigurationError(
                    f"Google Cloud credentials not found at {self._credentials_path}. "
                    "Please check your configuration."
                )
            try:
                _client_cache = speech.SpeechClient.from_service_account_file(
                    str(self._credentials_path)
                )
            except (auth_exceptions.GoogleAuthError, ValueError) as exc:
                raise ConfigurationError(
                    f"Google Cloud credentials are invalid: {exc}"
                ) from exc
            logger.info("Created Google SpeechClient from %s", self._credentials_path)
        return _client_cache

    @staticmethod
    def _build_request(
        audio: bytes, config: RecognitionConfig
    ) -> tuple[speech.RecognitionConfig, speech.RecognitionAudio]:
        """Translate our RecognitionConfig into Speech API request objects."""
        recognition_config = speech.RecognitionConfig(
            encoding=speech.RecognitionConfig.AudioEncoding[config.encoding],
            sample_rate_hertz=config.sample_rate_hertz,
            language_code=config.language_code,
            enable_automatic_punctuation=config.enable_automatic_punctuation,
            model=config.model,
            use_enhanced=config.use_enhanced,
        )
        return recognition_config, speech.RecognitionAudio(content=audio)

    def _run_recognition(self, audio: bytes, config: RecognitionConfig) -> list[str]:
        """Run the blocking Speech API call.

        Must be called via asyncio.to_thread().
        """
        client = self._get_client()
        recognition_config, recognition_audio = self._build_request(audio, config)
        response = client.recognize(config=recognition_config, audio=recognition_audio)
        return [
            result.alternatives[0].transcript
            for result in response.results
            if result.alternatives
        ]

    async def recognize(self, audio: bytes, config: RecognitionConfig) -> list[str]:
        """Recognize speech in normalized PCM audio via Google Speech-to-Text.

        Args:
            audio: Mono 16 kHz 16-bit PCM bytes.
            config: Recognition parameters.

        Returns:
            Top transcript of each result, in the order returned.
        """
        logger.info(
            "Sending %d bytes to Google Speech-to-Text (language=%s, model=%s)",
            len(audio),
            config.language_code,
            config.model,
        )
        try:
            return await asyncio.to_thread(self._run_recognition, audio, config)
        except ConfigurationError:
            raise
        except auth_exceptions.GoogleAuthError as exc:
            raise ConfigurationError(
                f"Google Cloud credentials were rejected: {exc}"
            ) from exc
        except google_exceptions.GoogleAPIError as exc:
            raise RecognitionError(detail=f"Google Speech-to-Text request failed: {exc}") from exc
