"""
AIFF writer: big-endian mono PCM from concatenated buffers, with an optional
APPL chunk for vendor metadata (the OP-1 drum patch block).

Layout:
    FORM <size> AIFF
      COMM <18>   channels, frames, bits, rate (80-bit extended)
      SSND <n>    offset, block size, PCM
      APPL <n>    signature + payload (optional)
"""
import logging
from typing import List, Optional, Sequence

from samplerkit.core.errors import EncodingError
from samplerkit.core.sample_buffer import SampleBuffer, SUPPORTED_BIT_DEPTHS
from samplerkit.core.types import ApplicationData
from samplerkit.formats.chunk import Chunk, total_size, wrapper_header
from samplerkit.formats.extended import encode_sample_rate

logger = logging.getLogger(__name__)

# FORM size is written as (inner chunk bytes - 8); devices reading these
# patches expect exactly this value.
FORM_LENGTH_ADJUSTMENT = -8


def common_chunk(num_channels: int, num_sample_frames: int, bit_depth: int, sample_rate: int) -> Chunk:
    chunk = Chunk("COMM", 18)
    chunk.set_uint16(num_channels)
    chunk.set_uint32(num_sample_frames)
    chunk.set_uint16(bit_depth)
    chunk.set_bytes(encode_sample_rate(sample_rate))
    return chunk


def sound_data_chunk(buffers: Sequence[SampleBuffer], bit_depth: int) -> Chunk:
    bytes_per_sample = bit_depth // 8
    for buffer in buffers:
        buffer.convert_to_mono()

    chunk = Chunk("SSND", 8 + sum(b.length * bytes_per_sample for b in buffers))
    chunk.set_uint32(0)  # offset
    chunk.set_uint32(0)  # block size: unblocked
    for buffer in buffers:
        dtype = ">i2" if bit_depth == 16 else "i1"
        chunk.set_bytes(buffer.quantized(bit_depth).astype(dtype).tobytes())
    return chunk


def application_chunk(application_data: ApplicationData) -> Chunk:
    signature = application_data.signature
    if len(signature) != 4:
        raise EncodingError(f"application signature must be 4 characters, got {signature!r}")
    chunk = Chunk("APPL", 4 + len(application_data.data))
    chunk.set_string(signature)
    chunk.set_bytes(bytes(application_data.data))
    return chunk


def form_header(inner_size: int) -> bytes:
    return wrapper_header("FORM", inner_size + FORM_LENGTH_ADJUSTMENT, "AIFF")


class AIFF:
    MIME_TYPE = "audio/aiff"

    def __init__(
        self,
        buffers: Sequence[SampleBuffer],
        sample_rate: int = 44100,
        bit_depth: int = 16,
        application_data: Optional[ApplicationData] = None,
    ):
        if bit_depth not in SUPPORTED_BIT_DEPTHS:
            raise EncodingError(f"unsupported AIFF bit depth {bit_depth}")
        self.buffers = list(buffers)
        self.sample_rate = int(sample_rate)
        self.bit_depth = bit_depth
        self.application_data = application_data

    def chunks(self) -> List[Chunk]:
        """Inner chunks in file order."""
        for buffer in self.buffers:
            if buffer.sample_rate != self.sample_rate:
                raise EncodingError(
                    f"{buffer.name or 'buffer'} is {buffer.sample_rate} Hz, container is {self.sample_rate} Hz; resample first"
                )

        num_frames = sum(buffer.length for buffer in self.buffers)
        inner = [
            common_chunk(1, num_frames, self.bit_depth, self.sample_rate),
            sound_data_chunk(self.buffers, self.bit_depth),
        ]
        if self.application_data is not None:
            inner.append(application_chunk(self.application_data))
        return inner

    def to_bytes(self) -> bytes:
        inner = self.chunks()
        logger.debug("AIFF: %d buffers, %d inner bytes", len(self.buffers), total_size(inner))
        return form_header(total_size(inner)) + b"".join(chunk.data for chunk in inner)
