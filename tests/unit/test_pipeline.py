"""Tests for TranscriptionService (upload -> convert -> recognize).

Validates upload validation, segment joining, the distinct failure
categories of each stage, and that temp files never outlive a request,
with mocked recognizer and converter, plus one run through the real
pydub converter.
"""

from unittest.mock import AsyncMock

import pytest

from caseregister.core.exceptions import (
    ConfigurationError,
    ConversionError,
    InternalError,
    MissingUploadError,
    NoTranscriptionError,
    PayloadTooLargeError,
    RecognitionError,
    UnsupportedMediaTypeError,
    ValidationError,
)
from caseregister.services.audio.converter import AudioConverter
from caseregister.services.transcription.pipeline import (
    TranscriptionService,
    recognition_config_from_settings,
)


@pytest.fixture
def service(mock_recognizer, mock_converter, settings):
    """TranscriptionService wired to mocks and a temporary upload dir."""
    return TranscriptionService(
        recognizer=mock_recognizer,
        converter=mock_converter,
        settings=settings,
    )


class TestValidation:
    """Verify uploads are rejected before any conversion or recognition."""

    async def test_missing_upload(self, service, mock_converter, mock_recognizer):
        """A request without a file raises MissingUploadError."""
        with pytest.raises(MissingUploadError):
            await service.transcribe(None)
        mock_converter.to_linear16.assert_not_called()
        mock_recognizer.recognize.assert_not_called()

    async def test_empty_filename_counts_as_missing(self, service, make_upload):
        """A file part without a filename is treated as no upload."""
        with pytest.raises(MissingUploadError):
            await service.transcribe(make_upload(b"abc", filename=""))

    @pytest.mark.parametrize("content_type", ["text/plain", "application/octet-stream", None])
    async def test_non_audio_type_rejected(
        self, service, make_upload, mock_converter, mock_recognizer, content_type
    ):
        """Anything not declared as audio/* never reaches conversion."""
        upload = make_upload(b"hello", filename="notes.txt", content_type=content_type)
        with pytest.raises(UnsupportedMediaTypeError) as exc_info:
            await service.transcribe(upload)
        assert isinstance(exc_info.value, ValidationError)
        assert exc_info.value.status_code == 415
        mock_converter.to_linear16.assert_not_called()
        mock_recognizer.recognize.assert_not_called()

    async def test_audio_type_is_case_insensitive(self, service, make_upload):
        """Declared types are compared case-insensitively."""
        result = await service.transcribe(make_upload(b"abc", content_type="Audio/WebM"))
        assert result

    async def test_payload_too_large(self, mock_recognizer, mock_converter, settings, make_upload, upload_dir):
        """Uploads above the byte ceiling are rejected and leave no temp file."""
        settings.max_upload_bytes = 10
        service = TranscriptionService(mock_recognizer, mock_converter, settings=settings)
        with pytest.raises(PayloadTooLargeError) as exc_info:
            await service.transcribe(make_upload(b"x" * 11))
        assert exc_info.value.status_code == 413
        mock_converter.to_linear16.assert_not_called()
        assert list(upload_dir.iterdir()) == []

    async def test_payload_at_limit_accepted(self, mock_recognizer, mock_converter, settings, make_upload):
        """Exactly max_upload_bytes is still accepted."""
        settings.max_upload_bytes = 10
        service = TranscriptionService(mock_recognizer, mock_converter, settings=settings)
        assert await service.transcribe(make_upload(b"x" * 10))

    @pytest.mark.parametrize(
        ("max_bytes", "shown"),
        [(10 * 1024 * 1024, "10MB"), (512 * 1024, "0.5MB"), (1536 * 1024, "1.5MB")],
    )
    def test_payload_limit_in_message(self, max_bytes, shown):
        """Limits below or between whole megabytes are not rounded down."""
        error = PayloadTooLargeError(max_bytes)
        assert error.detail == f"File size too large. Maximum size is {shown}"


class TestSuccess:
    """Verify a successful run produces the joined transcript."""

    async def test_segments_joined_with_newlines(self, service, make_upload):
        """Segments are joined with '\\n' in the order the recognizer returned them."""
        result = await service.transcribe(make_upload(b"webm-bytes"))
        assert result == "నమస్కారం\nఇది పరీక్ష"

    async def test_converted_audio_sent_with_fixed_config(
        self, service, make_upload, mock_converter, mock_recognizer
    ):
        """The recognizer gets the converter output and the configured parameters."""
        await service.transcribe(make_upload(b"webm-bytes"))
        audio, config = mock_recognizer.recognize.call_args.args
        assert audio == mock_converter.to_linear16.return_value
        assert config.encoding == "LINEAR16"
        assert config.sample_rate_hertz == 16000
        assert config.language_code == "te-IN"
        assert config.enable_automatic_punctuation is True
        assert config.model == "default"

    async def test_upload_persisted_with_original_extension(
        self, service, make_upload, mock_converter, upload_dir
    ):
        """The temp file exists during conversion, keeps the extension and holds the payload."""
        seen = {}

        async def convert(path):
            seen["path"] = path
            seen["exists"] = path.exists()
            seen["data"] = path.read_bytes()
            return b"\x00\x00"

        mock_converter.to_linear16.side_effect = convert
        await service.transcribe(make_upload(b"webm-bytes", filename="clip.WEBM"))

        assert seen["exists"] is True
        assert seen["data"] == b"webm-bytes"
        assert seen["path"].parent == upload_dir
        assert seen["path"].suffix == ".webm"

    async def test_temp_names_are_unique(self, service, make_upload, mock_converter):
        """Two requests for the same filename never share a temp path."""
        paths = []

        async def convert(path):
            paths.append(path)
            return b"\x00\x00"

        mock_converter.to_linear16.side_effect = convert
        await service.transcribe(make_upload(b"a"))
        await service.transcribe(make_upload(b"b"))
        assert len(set(paths)) == 2

    async def test_temp_file_removed_after_success(self, service, make_upload, upload_dir):
        """Nothing is left in the upload dir after a successful request."""
        await service.transcribe(make_upload(b"webm-bytes"))
        assert list(upload_dir.iterdir()) == []


class TestFailures:
    """Verify each stage maps to its own error and always cleans up."""

    async def test_no_results(self, service, make_upload, mock_recognizer, upload_dir):
        """Zero segments raise NoTranscriptionError, a RecognitionError."""
        mock_recognizer.recognize.return_value = []
        with pytest.raises(NoTranscriptionError) as exc_info:
            await service.transcribe(make_upload(b"webm-bytes"))
        assert isinstance(exc_info.value, RecognitionError)
        assert exc_info.value.code == "NO_TRANSCRIPTION"
        assert list(upload_dir.iterdir()) == []

    async def test_blank_results(self, service, make_upload, mock_recognizer):
        """Segments containing only whitespace never produce an empty success."""
        mock_recognizer.recognize.return_value = ["", "  "]
        with pytest.raises(NoTranscriptionError):
            await service.transcribe(make_upload(b"webm-bytes"))

    async def test_conversion_failure(self, service, make_upload, mock_converter, mock_recognizer, upload_dir):
        """Converter errors propagate as ConversionError without calling the recognizer."""
        mock_converter.to_linear16.side_effect = ConversionError("bad audio")
        with pytest.raises(ConversionError):
            await service.transcribe(make_upload(b"webm-bytes"))
        mock_recognizer.recognize.assert_not_called()
        assert list(upload_dir.iterdir()) == []

    async def test_missing_credentials(self, service, make_upload, mock_recognizer, upload_dir):
        """ConfigurationError from the recognizer is passed through unchanged."""
        mock_recognizer.recognize.side_effect = ConfigurationError()
        with pytest.raises(ConfigurationError):
            await service.transcribe(make_upload(b"webm-bytes"))
        assert list(upload_dir.iterdir()) == []

    async def test_recognizer_failure(self, service, make_upload, mock_recognizer, upload_dir):
        """RecognitionError from the recognizer is passed through unchanged."""
        mock_recognizer.recognize.side_effect = RecognitionError("quota exceeded")
        with pytest.raises(RecognitionError) as exc_info:
            await service.transcribe(make_upload(b"webm-bytes"))
        assert exc_info.value.code == "RECOGNITION_ERROR"
        assert list(upload_dir.iterdir()) == []

    async def test_unexpected_error_wrapped(self, service, make_upload, mock_recognizer, upload_dir):
        """Unanticipated exceptions become InternalError and still clean up."""
        mock_recognizer.recognize.side_effect = RuntimeError("boom")
        with pytest.raises(InternalError) as exc_info:
            await service.transcribe(make_upload(b"webm-bytes"))
        assert "boom" in exc_info.value.detail
        assert list(upload_dir.iterdir()) == []


class TestRealConverter:
    """Run the pipeline through the real pydub converter."""

    @pytest.fixture
    def real_service(self, mock_recognizer, settings):
        return TranscriptionService(
            recognizer=mock_recognizer,
            converter=AudioConverter(),
            settings=settings,
        )

    async def test_silent_wav_is_a_recognition_failure(
        self, real_service, make_upload, mock_recognizer, silent_wav_bytes
    ):
        """A silent WAV converts fine; the empty result is NoTranscriptionError."""
        mock_recognizer.recognize.return_value = []
        upload = make_upload(silent_wav_bytes, filename="silence.wav", content_type="audio/wav")
        with pytest.raises(NoTranscriptionError):
            await real_service.transcribe(upload)
        audio, _ = mock_recognizer.recognize.call_args.args
        assert len(audio) == 16000 * 2 * 2

    async def test_text_declared_as_audio_fails_in_conversion(
        self, real_service, make_upload, mock_recognizer, upload_dir
    ):
        """Non-audio bytes with an audio type pass validation and fail as ConversionError."""
        upload = make_upload(b"just some notes\n" * 20, filename="notes.wav", content_type="audio/wav")
        with pytest.raises(ConversionError):
            await real_service.transcribe(upload)
        mock_recognizer.recognize.assert_not_called()
        assert list(upload_dir.iterdir()) == []


def test_recognition_config_follows_settings(settings):
    """Language, model and punctuation come from settings."""
    settings.speech_language_code = "en-US"
    settings.speech_model = "latest_short"
    settings.speech_enable_punctuation = False
    config = recognition_config_from_settings(settings)
    assert config.language_code == "en-US"
    assert config.model == "latest_short"
    assert config.enable_automatic_punctuation is False


def test_service_uses_settings_upload_dir(settings, upload_dir):
    """Without an explicit upload_dir the settings value is used."""
    service = TranscriptionService(recognizer=AsyncMock(), settings=settings)
    assert service._upload_dir == upload_dir
