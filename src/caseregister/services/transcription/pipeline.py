"""Upload -> convert -> recognize request pipeline.

``TranscriptionService.transcribe()`` is the whole server-side unit of
work for one ``POST /api/transcribe`` call. It runs sequentially and
owns every temporary file it creates: all of them are deleted before it
returns or raises, whichever stage failed.
"""

import logging
import re
import time
import uuid
from pathlib import Path
from typing import Protocol

from caseregister.core.config import Settings, get_settings
from caseregister.core.exceptions import (
    CaseRegisterError,
    InternalError,
    MissingUploadError,
    NoTranscriptionError,
    PayloadTooLargeError,
    UnsupportedMediaTypeError,
)
from caseregister.core.models import RecognitionConfig
from caseregister.services.audio.converter import AudioConverter
from caseregister.services.transcription.base import BaseRecognizer

logger = logging.getLogger(__name__)

_READ_CHUNK_BYTES = 1024 * 1024
_SUFFIX_RE = re.compile(r"^\.[a-z0-9]{1,8}$")


class Upload(Protocol):
    """The subset of ``fastapi.UploadFile`` the pipeline relies on."""

    filename: str | None
    content_type: str | None

    async def read(self, size: int = -1) -> bytes: ...


def recognition_config_from_settings(settings: Settings) -> RecognitionConfig:
    """Build the fixed recognizer configuration from application settings."""
    return RecognitionConfig(
        encoding="LINEAR16",
        sample_rate_hertz=settings.speech_sample_rate,
        language_code=settings.speech_language_code,
        enable_automatic_punctuation=settings.speech_enable_punctuation,
        model=settings.speech_model,
        use_enhanced=settings.speech_use_enhanced,
    )


class TranscriptionService:
    """Validates an upload, normalizes it and sends it to the recognizer.

    Args:
        recognizer: Speech recognition provider.
        converter: Audio normalizer (defaults to 16 kHz mono 16-bit).
        settings: Optional Settings instance (defaults to get_settings()).
        upload_dir: Where per-request temp files go (defaults to settings).
    """

    def __init__(
        self,
        recognizer: BaseRecognizer,
        converter: AudioConverter | None = None,
        settings: Settings | None = None,
        upload_dir: str | Path | None = None,
    ) -> None:
        self._settings = settings or get_settings()
        self._recognizer = recognizer
        self._converter = converter or AudioConverter(
            sample_rate=self._settings.speech_sample_rate
        )
        self._upload_dir = Path(upload_dir or self._settings.upload_dir)
        self._max_bytes = self._settings.max_upload_bytes
        self._config = recognition_config_from_settings(self._settings)

    # ------------------------------------------------------------------
    # Validation
    # ------------------------------------------------------------------

    @staticmethod
    def validate(upload: Upload | None) -> None:
        """Reject uploads that are missing or not declared as audio.

        Only the declared content type is checked. Payloads whose bytes
        are not really audio are caught later, during conversion.
        """
        if upload is None or not upload.filename:
            raise MissingUploadError()
        content_type = (upload.content_type or "").lower()
        if not content_type.startswith("audio/"):
            raise UnsupportedMediaTypeError(upload.content_type)

    # ------------------------------------------------------------------
    # Temp files
    # ------------------------------------------------------------------

    def _temp_path(self, filename: str) -> Path:
        """Return a unique, time-stamped path that keeps the upload's extension."""
        suffix = Path(filename).suffix.lower()
        if not _SUFFIX_RE.match(suffix):
            suffix = ""
        self._upload_dir.mkdir(parents=True, exist_ok=True)
        return self._upload_dir / f"{time.time_ns()}-{uuid.uuid4().hex[:8]}{suffix}"

    async def _persist(self, upload: Upload, path: Path) -> int:
        """Stream the upload to *path*, enforcing the byte ceiling.

        Returns:
            Number of bytes written.

        Raises:
            PayloadTooLargeError: As soon as the ceiling is exceeded.
        """
        written = 0
        with path.open("wb") as fh:
            while chunk := await upload.read(_READ_CHUNK_BYTES):
                written += len(chunk)
                if written > self._max_bytes:
                    raise PayloadTooLargeError(self._max_bytes)
                fh.write(chunk)
        return written

    @staticmethod
    def _cleanup(paths: list[Path]) -> None:
        for path in paths:
            try:
                path.unlink(missing_ok=True)
            except OSError as exc:
                logger.warning("Failed to delete temp file %s: %s", path, exc)

    # ------------------------------------------------------------------
    # Pipeline
    # ------------------------------------------------------------------

    async def transcribe(self, upload: Upload | None) -> str:
        """Run the full pipeline for one uploaded audio file.

        Args:
            upload: The multipart file (``None`` when the field was absent).

        Returns:
            Recognized segments joined with newlines; never empty.

        Raises:
            ValidationError: Missing upload, non-audio type or oversized payload.
            ConversionError: Audio could not be normalized.
            NoTranscriptionError: The recognizer returned nothing usable.
            ConfigurationError: Recognizer credentials are missing.
            RecognitionError: The recognizer call failed.
            InternalError: Anything unanticipated.
        """
        self.validate(upload)
        logger.info("Processing file: %s (%s)", upload.filename, upload.content_type)

        temp_paths: list[Path] = []
        try:
            upload_path = self._temp_path(upload.filename)
            temp_paths.append(upload_path)
            size = await self._persist(upload, upload_path)
            logger.debug("Stored %d-byte upload at %s", size, upload_path)

            pcm = await self._converter.to_linear16(upload_path)
            segments = await self._recognizer.recognize(pcm, self._config)

            if not segments or not any(text.strip() for text in segments):
                logger.warning("No transcription results for %s", upload.filename)
                raise NoTranscriptionError()

            transcription = "\n".join(segments)
            logger.info(
                "Transcription completed: %d segment(s), %d chars",
                len(segments),
                len(transcription),
            )
            return transcription
        except CaseRegisterError:
            raise
        except Exception as exc:
            logger.exception("Unexpected failure while transcribing %s", upload.filename)
            raise InternalError(detail=f"Error processing audio file: {exc}") from exc
        finally:
            self._cleanup(temp_paths)
