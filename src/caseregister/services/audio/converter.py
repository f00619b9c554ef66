"""Audio normalization for the recognizer.

Decodes arbitrary uploaded audio with pydub (ffmpeg for compressed
containers such as WebM/Opus) and re-encodes it as raw PCM.
"""

import asyncio
import logging
from pathlib import Path

from pydub import AudioSegment

from caseregister.core.exceptions import ConversionError

logger = logging.getLogger(__name__)


class AudioConverter:
    """Converts audio files to raw linear PCM.

    Output is headerless little-endian PCM, which is what the recognizer
    expects for the ``LINEAR16`` encoding.
    """

    def __init__(
        self,
        sample_rate: int = 16000,
        sample_width: int = 2,
        channels: int = 1,
    ) -> None:
        """Initialize the converter.

        Args:
            sample_rate: Target sample rate in Hz (default: 16 kHz).
            sample_width: Bytes per sample (2 = 16-bit signed PCM).
            channels: Number of audio channels (1 = mono).
        """
        self.sample_rate = sample_rate
        self.sample_width = sample_width
        self.channels = channels

    def _convert(self, file_path: Path) -> bytes:
        segment = AudioSegment.from_file(str(file_path))
        segment = (
            segment.set_channels(self.channels)
            .set_frame_rate(self.sample_rate)
            .set_sample_width(self.sample_width)
        )
        return segment.raw_data

    def convert_file(self, file_path: str | Path) -> bytes:
        """Decode *file_path* and return normalized PCM bytes.

        Args:
            file_path: Path to any audio file pydub/ffmpeg can decode.

        Returns:
            Raw PCM bytes at the configured rate, width and channel count.

        Raises:
            ConversionError: If the file cannot be decoded or re-encoded.
        """
        path = Path(file_path)
        try:
            pcm = self._convert(path)
        except Exception as exc:
            raise ConversionError(detail=f"Audio conversion failed: {exc}") from exc
        logger.debug("Converted %s to %d bytes of PCM", path.name, len(pcm))
        return pcm

    async def to_linear16(self, file_path: str | Path) -> bytes:
        """Async wrapper around :meth:`convert_file` (decoding is CPU-bound)."""
        return await asyncio.to_thread(self.convert_file, file_path)
