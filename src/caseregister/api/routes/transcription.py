"""
Transcription REST endpoint.

``POST /api/transcribe`` accepts one multipart audio file in the ``audio``
field. All work is delegated to ``TranscriptionService``: no business
logic here.
"""

from fastapi import APIRouter, Depends, File, UploadFile

from caseregister.core.config import get_settings
from caseregister.core.models import TranscriptionResponse
from caseregister.services.transcription import create_recognizer
from caseregister.services.transcription.pipeline import TranscriptionService

router = APIRouter(tags=["transcription"])


def get_transcription_service() -> TranscriptionService:
    """Build the pipeline for the configured recognizer provider."""
    settings = get_settings()
    recognizer = create_recognizer(settings.stt_provider)
    return TranscriptionService(recognizer=recognizer, settings=settings)


@router.post("/transcribe", response_model=TranscriptionResponse)
async def transcribe(
    audio: UploadFile | None = File(None),
    service: TranscriptionService = Depends(get_transcription_service),
):
    """Transcribe one uploaded audio file."""
    transcription = await service.transcribe(audio)
    return TranscriptionResponse(transcription=transcription)
