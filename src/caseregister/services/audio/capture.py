"""Audio capture state machine.

``CaptureController`` accumulates binary chunks from an injected
``AudioSource`` and finalizes them into one ``AudioBlob`` per recording
segment. Each segment is transcribed independently, so chunks are
discarded once a blob has been produced.

States: idle -> recording -> (paused <-> recording) -> idle
"""

import logging
from abc import ABC, abstractmethod
from collections.abc import Callable
from dataclasses import dataclass
from enum import StrEnum

from caseregister.core.exceptions import RecordingAlreadyActiveError

logger = logging.getLogger(__name__)

ChunkCallback = Callable[[bytes], None]


class CaptureState(StrEnum):
    """Possible states of a capture controller."""

    idle = "idle"
    recording = "recording"
    paused = "paused"


@dataclass(frozen=True)
class AudioBlob:
    """A finalized recording segment ready for upload."""

    data: bytes
    mime_type: str = "audio/webm"
    filename: str = "recording.webm"

    @property
    def size(self) -> int:
        return len(self.data)


class AudioSource(ABC):
    """A microphone-like producer of encoded audio chunks."""

    @abstractmethod
    def open(self, on_chunk: ChunkCallback) -> None:
        """Acquire the device and deliver chunks to *on_chunk*."""

    @abstractmethod
    def close(self) -> None:
        """Release the device. No chunks are delivered afterwards."""


class ClipSource(AudioSource):
    """Source fed with pre-recorded clips.

    Used by the Streamlit UI, where the browser widget hands over a
    whole recording at once, and by tests.
    """

    def __init__(self) -> None:
        self._on_chunk: ChunkCallback | None = None

    @property
    def is_open(self) -> bool:
        return self._on_chunk is not None

    def open(self, on_chunk: ChunkCallback) -> None:
        self._on_chunk = on_chunk

    def close(self) -> None:
        self._on_chunk = None

    def push(self, chunk: bytes) -> None:
        """Deliver *chunk* if the source is open; otherwise drop it."""
        if self._on_chunk is not None:
            self._on_chunk(chunk)


class CaptureController:
    """Drives an ``AudioSource`` through the recording state machine.

    Only one recording may be active per controller. Pausing and stopping
    both release the source and hand back the segment recorded so far.

    Args:
        source: Device that produces encoded audio chunks.
        mime_type: Content type of the produced blobs.
        filename: Upload filename of the produced blobs.
    """

    def __init__(
        self,
        source: AudioSource,
        mime_type: str = "audio/webm",
        filename: str = "recording.webm",
    ) -> None:
        self._source = source
        self._mime_type = mime_type
        self._filename = filename
        self._chunks: list[bytes] = []
        self._state = CaptureState.idle

    @property
    def state(self) -> CaptureState:
        return self._state

    @property
    def is_recording(self) -> bool:
        return self._state == CaptureState.recording

    @property
    def chunk_count(self) -> int:
        return len(self._chunks)

    def _on_chunk(self, chunk: bytes) -> None:
        if self._state != CaptureState.recording or not chunk:
            return
        self._chunks.append(chunk)

    def _acquire(self) -> None:
        self._chunks = []
        self._source.open(self._on_chunk)
        self._state = CaptureState.recording

    def _finalize(self) -> AudioBlob | None:
        """Release the source and turn the accumulated chunks into a blob."""
        self._source.close()
        chunks, self._chunks = self._chunks, []
        if not chunks:
            return None
        blob = AudioBlob(b"".join(chunks), mime_type=self._mime_type, filename=self._filename)
        logger.debug("Finalized %d chunks into %d-byte blob", len(chunks), blob.size)
        return blob

    def start(self) -> None:
        """Begin a new recording.

        Raises:
            RecordingAlreadyActiveError: If a recording is recording or paused.
        """
        if self._state != CaptureState.idle:
            raise RecordingAlreadyActiveError()
        self._acquire()
        logger.info("Recording started")

    def pause(self) -> AudioBlob | None:
        """Pause the active recording and return the segment captured so far."""
        if self._state != CaptureState.recording:
            return None
        blob = self._finalize()
        self._state = CaptureState.paused
        logger.info("Recording paused")
        return blob

    def resume(self) -> None:
        """Resume a paused recording as a new segment."""
        if self._state != CaptureState.paused:
            return
        self._acquire()
        logger.info("Recording resumed")

    def stop(self) -> AudioBlob | None:
        """Stop recording and return the final segment, if any."""
        blob = None
        if self._state == CaptureState.recording:
            blob = self._finalize()
        elif self._state == CaptureState.idle:
            return None
        self._state = CaptureState.idle
        logger.info("Recording stopped")
        return blob
