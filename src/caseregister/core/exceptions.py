"""
Case Register exception hierarchy.

All server-side exceptions inherit from CaseRegisterError, enabling
centralized error handling in the API middleware layer. Each subclass
carries its own ``code`` so callers can tell failure categories apart.
"""

from datetime import UTC, datetime


class CaseRegisterError(Exception):
    """Base exception for all Case Register errors."""

    def __init__(
        self,
        detail: str = "An unexpected error occurred",
        code: str = "CASE_REGISTER_ERROR",
        status_code: int = 500,
    ) -> None:
        self.detail = detail
        self.code = code
        self.status_code = status_code
        self.timestamp = datetime.now(UTC).isoformat()
        super().__init__(detail)


# ---------------------------------------------------------------------------
# Upload validation
# ---------------------------------------------------------------------------


class ValidationError(CaseRegisterError):
    """Raised when an upload is rejected before any processing happens."""

    def __init__(
        self,
        detail: str = "Invalid upload",
        code: str = "VALIDATION_ERROR",
        status_code: int = 400,
    ) -> None:
        super().__init__(detail=detail, code=code, status_code=status_code)


class MissingUploadError(ValidationError):
    """Raised when the request carries no audio file."""

    def __init__(self) -> None:
        super().__init__(
            detail="No audio file provided",
            code="MISSING_UPLOAD",
            status_code=400,
        )


class UnsupportedMediaTypeError(ValidationError):
    """Raised when the declared content type is not ``audio/*``."""

    def __init__(self, content_type: str | None) -> None:
        super().__init__(
            detail=f"Only audio files are allowed (got {content_type or 'no content type'})",
            code="UNSUPPORTED_MEDIA_TYPE",
            status_code=415,
        )


class PayloadTooLargeError(ValidationError):
    """Raised when the upload exceeds the configured byte ceiling."""

    def __init__(self, max_bytes: int) -> None:
        super().__init__(
            detail=f"File size too large. Maximum size is {max_bytes / (1024 * 1024):g}MB",
            code="PAYLOAD_TOO_LARGE",
            status_code=413,
        )


# ---------------------------------------------------------------------------
# Pipeline stages
# ---------------------------------------------------------------------------


class ConversionError(CaseRegisterError):
    """Raised when audio cannot be normalized to 16 kHz mono PCM."""

    def __init__(self, detail: str = "Audio conversion failed") -> None:
        super().__init__(detail=detail, code="CONVERSION_ERROR", status_code=422)


class RecognitionError(CaseRegisterError):
    """Raised when the speech recognizer call fails."""

    def __init__(
        self,
        detail: str = "Speech recognition failed",
        code: str = "RECOGNITION_ERROR",
        status_code: int = 502,
    ) -> None:
        super().__init__(detail=detail, code=code, status_code=status_code)


class NoTranscriptionError(RecognitionError):
    """Raised when the recognizer succeeds but returns no usable text."""

    def __init__(self) -> None:
        super().__init__(
            detail="Could not transcribe audio",
            code="NO_TRANSCRIPTION",
            status_code=422,
        )


class ConfigurationError(CaseRegisterError):
    """Raised when external-service credentials are missing or unusable."""

    def __init__(self, detail: str = "Recognizer credentials not found") -> None:
        super().__init__(detail=detail, code="CONFIGURATION_ERROR", status_code=500)


class InternalError(CaseRegisterError):
    """Raised for failures no other category describes."""

    def __init__(self, detail: str = "Internal server error") -> None:
        super().__init__(detail=detail, code="INTERNAL_ERROR", status_code=500)


# ---------------------------------------------------------------------------
# Client-side state
# ---------------------------------------------------------------------------


class RecordingAlreadyActiveError(CaseRegisterError):
    """Raised when trying to start a recording while one is already active."""

    def __init__(self) -> None:
        super().__init__(
            detail="A recording is already active",
            code="RECORDING_ALREADY_ACTIVE",
            status_code=409,
        )


class TranscriptionInFlightError(CaseRegisterError):
    """Raised when a transcription is submitted while another is pending."""

    def __init__(self) -> None:
        super().__init__(
            detail="A transcription is already in progress",
            code="TRANSCRIPTION_IN_FLIGHT",
            status_code=409,
        )


class CaseNotFoundError(CaseRegisterError):
    """Raised when a case ID does not exist in the session store."""

    def __init__(self, case_id: str) -> None:
        super().__init__(
            detail=f"Case not found: {case_id}",
            code="CASE_NOT_FOUND",
            status_code=404,
        )


class ExportError(CaseRegisterError):
    """Raised when the .docx serializer fails."""

    def __init__(self, detail: str = "Export failed") -> None:
        super().__init__(detail=detail, code="EXPORT_ERROR", status_code=500)
