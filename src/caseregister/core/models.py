"""
Pydantic v2 models shared by the API, the client and the session store.

API: HealthResponse, TranscriptionResponse, ErrorResponse
Speech: RecognitionConfig
Sessions: TranscriptSegment, CaseSession (camelCase in local storage)
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from caseregister import __version__

# ---------------------------------------------------------------------------
# Health
# ---------------------------------------------------------------------------


class HealthResponse(BaseModel):
    """GET /health response."""

    status: str = "ok"
    version: str = __version__
    timestamp: datetime


# ---------------------------------------------------------------------------
# Transcription API
# ---------------------------------------------------------------------------


class TranscriptionResponse(BaseModel):
    """POST /api/transcribe success envelope."""

    success: bool = True
    message: str = "Transcription completed successfully"
    transcription: str


class ErrorResponse(BaseModel):
    """Error envelope produced by the exception handlers."""

    success: bool = False
    error: str
    detail: str
    code: str
    timestamp: str


# ---------------------------------------------------------------------------
# Speech recognition
# ---------------------------------------------------------------------------


class RecognitionConfig(BaseModel):
    """Parameters sent to the recognizer alongside the normalized audio."""

    encoding: str = "LINEAR16"
    sample_rate_hertz: int = 16000
    language_code: str = "te-IN"
    enable_automatic_punctuation: bool = True
    model: str = "default"
    use_enhanced: bool = True


# ---------------------------------------------------------------------------
# Case sessions
# ---------------------------------------------------------------------------


class _CamelModel(BaseModel):
    """Base for records persisted with camelCase keys."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class TranscriptSegment(_CamelModel):
    """One accepted transcription appended to a case.

    Browser-written records carry a locale time string (e.g. "10:05:00 AM")
    instead of an ISO timestamp; those are kept verbatim.
    """

    text: str
    timestamp: datetime | str = Field(union_mode="left_to_right")


class CaseSession(_CamelModel):
    """A named group of recording segments and their combined transcript."""

    id: str
    title: str
    created_at: datetime
    last_updated: datetime
    transcript: str = ""
    segments: list[TranscriptSegment] = Field(default_factory=list)
