"""
RIFF/WAVE writer: mono PCM from one or more concatenated buffers, with a cue
point at the start of every source buffer.

Layout:
    RIFF <size> WAVE
      fmt  <16>   PCM format description
      data <n>    interleaved PCM (mono here), zero pad byte when n is odd
      cue  <n>    one 24-byte cue point per source buffer (omitted for no buffers)
"""
import logging
from typing import List, Sequence, Tuple

import numpy as np

from samplerkit.core.errors import EncodingError
from samplerkit.core.sample_buffer import SampleBuffer, SUPPORTED_BIT_DEPTHS
from samplerkit.formats.chunk import Chunk, HEADER_SIZE, total_size, wrapper_header

logger = logging.getLogger(__name__)

WAVE_FORMAT_PCM = 1
CUE_POINT_SIZE = 24
CUE_HEADER_SIZE = 4  # cue point count


def format_chunk(num_channels: int, sample_rate: int, bit_depth: int) -> Chunk:
    chunk = Chunk("fmt ", 16, little_endian=True)
    bytes_per_sample = bit_depth // 8
    chunk.set_uint16(WAVE_FORMAT_PCM)
    chunk.set_uint16(num_channels)
    chunk.set_uint32(sample_rate)
    chunk.set_uint32(num_channels * sample_rate * bytes_per_sample)  # byte rate
    chunk.set_uint16(num_channels * bytes_per_sample)  # block align
    chunk.set_uint16(bit_depth)
    return chunk


def _pcm_bytes(buffer: SampleBuffer, bit_depth: int) -> bytes:
    samples = buffer.quantized(bit_depth)
    if bit_depth == 8:
        # 8-bit WAV is unsigned, centred on 128
        return (samples.astype(np.int16) + 128).astype(np.uint8).tobytes()
    return samples.astype("<i2").tobytes()


def data_chunk(buffers: Sequence[SampleBuffer], bit_depth: int) -> Tuple[Chunk, List[int]]:
    """
    Downmix and quantize every buffer into one data chunk.
    Returns the chunk and the sample-frame offset at which each buffer starts.
    """
    bytes_per_sample = bit_depth // 8
    for buffer in buffers:
        buffer.convert_to_mono()

    chunk = Chunk("data", sum(b.length * bytes_per_sample for b in buffers), little_endian=True)
    offsets: List[int] = []
    for buffer in buffers:
        # frame offsets, not byte offsets
        offsets.append((chunk.offset - HEADER_SIZE) // bytes_per_sample)
        chunk.set_bytes(_pcm_bytes(buffer, bit_depth))
    return chunk, offsets


def cue_chunk(offsets: Sequence[int]) -> Chunk:
    chunk = Chunk("cue ", CUE_HEADER_SIZE + CUE_POINT_SIZE * len(offsets), little_endian=True)
    chunk.set_uint32(len(offsets))
    for i, offset in enumerate(offsets):
        cue_id = i + 1
        chunk.set_uint32(cue_id)  # name
        chunk.set_uint32(cue_id)  # play order
        chunk.set_string("data")
        chunk.set_uint32(0)  # chunk start (no wavl list)
        chunk.set_uint32(0)  # block start (no wavl list)
        chunk.set_uint32(offset)
    return chunk


def riff_header(inner_size: int) -> bytes:
    """Declared RIFF length covers the WAVE tag plus every inner chunk."""
    return wrapper_header("RIFF", inner_size + 4, "WAVE", little_endian=True)


class WAV:
    MIME_TYPE = "audio/wav"

    def __init__(
        self,
        buffers: Sequence[SampleBuffer],
        sample_rate: int = 44100,
        bit_depth: int = 16,
        cue_points: bool = True,
    ):
        if bit_depth not in SUPPORTED_BIT_DEPTHS:
            raise EncodingError(f"unsupported WAV bit depth {bit_depth}")
        self.buffers = list(buffers)
        self.sample_rate = int(sample_rate)
        self.bit_depth = bit_depth
        self.cue_points = cue_points
        self.cue_offsets: List[int] = []

    def chunks(self) -> List[Chunk]:
        """Inner chunks in file order."""
        for buffer in self.buffers:
            if buffer.sample_rate != self.sample_rate:
                raise EncodingError(
                    f"{buffer.name or 'buffer'} is {buffer.sample_rate} Hz, container is {self.sample_rate} Hz; resample first"
                )

        inner = [format_chunk(1, self.sample_rate, self.bit_depth)]
        data, self.cue_offsets = data_chunk(self.buffers, self.bit_depth)
        inner.append(data)
        if self.cue_points and self.buffers:
            inner.append(cue_chunk(self.cue_offsets))
        return inner

    def to_bytes(self) -> bytes:
        inner = self.chunks()
        logger.debug("WAV: %d buffers, cue offsets %s", len(self.buffers), self.cue_offsets)
        return riff_header(total_size(inner, padded=True)) + b"".join(chunk.padded_data for chunk in inner)
