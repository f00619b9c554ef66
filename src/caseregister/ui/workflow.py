"""
Recording workflow: capture -> transcribe -> append to the active case.

``CaseWorkflow`` is the explicit controller the UI talks to. It owns no
Streamlit state, so the whole flow can be driven in tests with a
``ClipSource`` and a stub client instead of a live microphone.

In continuous mode the next recording is started only once the previous
transcription has returned. ``TranscriptionGate`` enforces that at most
one transcription is in flight at any time.
"""

import logging
import threading
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Protocol

from caseregister.core.exceptions import TranscriptionInFlightError
from caseregister.services.audio.capture import AudioBlob, CaptureController, CaptureState
from caseregister.services.storage.sessions import SessionStore

logger = logging.getLogger(__name__)


class Transcriber(Protocol):
    def transcribe(self, blob: AudioBlob) -> str: ...


class TranscriptionGate:
    """Depth-one in-flight flag for transcription requests."""

    def __init__(self) -> None:
        self._lock = threading.Lock()

    @property
    def in_flight(self) -> bool:
        return self._lock.locked()

    def try_acquire(self) -> bool:
        """Claim the gate. Returns False if a transcription is already running."""
        return self._lock.acquire(blocking=False)

    def release(self) -> None:
        if self._lock.locked():
            self._lock.release()

    @contextmanager
    def hold(self) -> Iterator[None]:
        """Hold the gate for the duration of the block.

        Raises:
            TranscriptionInFlightError: If the gate is already held.
        """
        if not self.try_acquire():
            raise TranscriptionInFlightError()
        try:
            yield
        finally:
            self.release()


class CaseWorkflow:
    """Ties audio capture, the transcription client and the session store together.

    Args:
        capture: Recording state machine.
        client: Anything with ``transcribe(blob) -> str`` (normally ``APIClient``).
        store: Case session store that receives the transcripts.
        gate: In-flight gate; a private one is created when omitted.
        continuous: Restart recording after each successful transcription.
    """

    def __init__(
        self,
        capture: CaptureController,
        client: Transcriber,
        store: SessionStore,
        gate: TranscriptionGate | None = None,
        continuous: bool = False,
    ) -> None:
        self.capture = capture
        self.client = client
        self.store = store
        self.gate = gate or TranscriptionGate()
        self.continuous = continuous

    @property
    def is_transcribing(self) -> bool:
        return self.gate.in_flight

    @property
    def can_start_recording(self) -> bool:
        return self.capture.state == CaptureState.idle and not self.gate.in_flight

    def start_recording(self) -> None:
        """Start a new recording.

        Raises:
            TranscriptionInFlightError: While a transcription is pending.
            RecordingAlreadyActiveError: If a recording is already active.
        """
        if self.gate.in_flight:
            raise TranscriptionInFlightError()
        self.capture.start()

    def submit(self, blob: AudioBlob) -> str:
        """Transcribe *blob* and append the result to the session store.

        The gate is released on every exit path; client errors propagate
        unchanged so the UI can show them and the user can retry.
        """
        with self.gate.hold():
            logger.info("Submitting %d-byte recording for transcription", blob.size)
            text = self.client.transcribe(blob)
            self.store.append_transcript(text)
        return text

    def pause_recording(self) -> str | None:
        """Pause and transcribe the segment recorded so far."""
        blob = self.capture.pause()
        return self.submit(blob) if blob is not None else None

    def resume_recording(self) -> None:
        self.capture.resume()

    def stop_and_transcribe(self) -> str | None:
        """Stop recording, transcribe the last segment and, in continuous
        mode, start the next recording once the transcript is in.

        Returns:
            The new transcript, or None if nothing was recorded.
        """
        blob = self.capture.stop()
        if blob is None:
            return None
        text = self.submit(blob)
        if self.continuous:
            self.capture.start()
        return text
