import io
import logging
from pathlib import Path
from typing import Optional, Union

import soundfile as sf

from samplerkit.core.errors import DecodeError
from samplerkit.core.sample_buffer import SampleBuffer

logger = logging.getLogger(__name__)


class AudioIO:
    @staticmethod
    def decode(data: bytes, name: Optional[str] = None) -> SampleBuffer:
        """Decodes raw file bytes (any container libsndfile reads) into a SampleBuffer."""
        if not data:
            raise DecodeError(f"{name or 'input'}: empty file")
        try:
            # always_2d gives (frames, channels)
            samples, sample_rate = sf.read(io.BytesIO(data), dtype="float32", always_2d=True)
        except (RuntimeError, sf.SoundFileError) as exc:
            raise DecodeError(f"{name or 'input'}: {exc}") from exc

        if samples.shape[1] == 0:
            raise DecodeError(f"{name or 'input'}: no audio channels")

        logger.debug("decoded %s: %d ch, %d Hz, %d frames", name, samples.shape[1], sample_rate, samples.shape[0])
        return SampleBuffer(samples.T, sample_rate, name=name)

    @staticmethod
    def load(path: Union[str, Path]) -> SampleBuffer:
        """Decodes an audio file from disk."""
        path = Path(path)
        return AudioIO.decode(path.read_bytes(), name=path.name)
