"""Shared pytest fixtures for the Case Register test suite.

Provides settings pointed at temporary directories, mock recognizer and
converter providers, WAV fixtures, and an in-memory stand-in for
``fastapi.UploadFile``.
"""

import io
import math
import struct
import wave
from unittest.mock import AsyncMock, MagicMock

import pytest

from caseregister.core.config import Settings

# ---------------------------------------------------------------------------
# Settings
# ---------------------------------------------------------------------------


@pytest.fixture
def upload_dir(tmp_path):
    """Directory that receives per-request temp files."""
    path = tmp_path / "uploads"
    path.mkdir()
    return path


@pytest.fixture
def settings(tmp_path, upload_dir):
    """Settings isolated from any local .env file."""
    return Settings(
        _env_file=None,
        upload_dir=str(upload_dir),
        storage_path=str(tmp_path / "local_storage.json"),
        exports_dir=str(tmp_path / "exports"),
        google_credentials_path=str(tmp_path / "missing-credentials.json"),
    )


# ---------------------------------------------------------------------------
# Provider Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def mock_recognizer():
    """Create a mock recognizer returning two transcript segments.

    Returns:
        AsyncMock: A mock implementing the BaseRecognizer interface.
    """
    from caseregister.services.transcription.base import BaseRecognizer

    recognizer = AsyncMock(spec=BaseRecognizer)
    recognizer.recognize.return_value = ["నమస్కారం", "ఇది పరీక్ష"]
    return recognizer


@pytest.fixture
def mock_converter():
    """Create a mock AudioConverter that returns 1 second of silence."""
    from caseregister.services.audio.converter import AudioConverter

    converter = MagicMock(spec=AudioConverter)
    converter.to_linear16.return_value = b"\x00\x00" * 16000
    return converter


# ---------------------------------------------------------------------------
# Audio Fixtures
# ---------------------------------------------------------------------------


def _wav_bytes(frames: bytes, sample_rate: int = 16000) -> bytes:
    buffer = io.BytesIO()
    with wave.open(buffer, "wb") as wf:
        wf.setnchannels(1)
        wf.setsampwidth(2)
        wf.setframerate(sample_rate)
        wf.writeframes(frames)
    return buffer.getvalue()


@pytest.fixture
def silent_wav_bytes():
    """Two seconds of silence as a 16 kHz mono 16-bit WAV file."""
    return _wav_bytes(b"\x00\x00" * 16000 * 2)


@pytest.fixture
def tone_wav_bytes():
    """One second of a 440 Hz tone as a 16 kHz mono 16-bit WAV file."""
    frames = b"".join(
        struct.pack("<h", int(16000 * math.sin(2 * math.pi * 440.0 * i / 16000)))
        for i in range(16000)
    )
    return _wav_bytes(frames)


# ---------------------------------------------------------------------------
# Upload Fixtures
# ---------------------------------------------------------------------------


class FakeUpload:
    """Minimal async file object matching what the pipeline reads."""

    def __init__(
        self,
        data: bytes,
        filename: str | None = "recording.webm",
        content_type: str | None = "audio/webm",
    ) -> None:
        self.filename = filename
        self.content_type = content_type
        self._buffer = io.BytesIO(data)

    async def read(self, size: int = -1) -> bytes:
        return self._buffer.read(size)


@pytest.fixture
def make_upload():
    """Factory for FakeUpload instances."""
    return FakeUpload
