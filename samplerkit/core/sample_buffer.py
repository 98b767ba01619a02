"""
Decoded audio held in memory, plus the preprocessing every container needs:
downmix to mono, resample to the device rate, quantize to integer PCM.
Samples are stored as a float32 array shaped (channels, frames).
"""
import logging
from typing import Optional

import numpy as np
import torch
import torchaudio.functional as F

from samplerkit.core.errors import EncodingError

logger = logging.getLogger(__name__)

SUPPORTED_BIT_DEPTHS = (8, 16)


class SampleBuffer:
    def __init__(self, samples: np.ndarray, sample_rate: int, name: Optional[str] = None):
        """
        Args:
            samples: (channels, frames) or (frames,) float array, nominally in [-1, 1]
            sample_rate: Sample rate in Hz
            name: Source file name, if any
        """
        data = np.asarray(samples, dtype=np.float32)
        if data.ndim == 1:
            data = data[np.newaxis, :]
        if data.ndim != 2 or data.shape[0] == 0:
            raise EncodingError(f"unsupported channel layout {data.shape}")
        if int(sample_rate) <= 0:
            raise EncodingError(f"invalid sample rate {sample_rate}")
        self._data = data
        self._sample_rate = int(sample_rate)
        self.name = name

    @property
    def samples(self) -> np.ndarray:
        return self._data

    @property
    def sample_rate(self) -> int:
        return self._sample_rate

    @property
    def channels(self) -> int:
        return self._data.shape[0]

    @property
    def length(self) -> int:
        """Number of sample frames."""
        return self._data.shape[1]

    @property
    def duration(self) -> float:
        """Duration in seconds."""
        return self.length / self._sample_rate

    def channel_data(self, channel: int) -> np.ndarray:
        return self._data[channel]

    def convert_to_mono(self) -> None:
        """Average all channels into one. No-op when already mono."""
        if self.channels == 1:
            return
        self._data = self._data.mean(axis=0, dtype=np.float64).astype(np.float32)[np.newaxis, :]

    def resample(self, target_rate: int) -> None:
        """
        Resample every channel to target_rate with torchaudio's windowed-sinc
        resampler. New length is round(length * target / rate).
        """
        target_rate = int(target_rate)
        if target_rate <= 0:
            raise EncodingError(f"invalid target sample rate {target_rate}")
        if target_rate == self._sample_rate:
            return
        if self.length == 0:
            self._sample_rate = target_rate
            return

        n_target = int(round(self.length * target_rate / self._sample_rate))
        waveform = torch.from_numpy(np.ascontiguousarray(self._data))
        try:
            resampled = F.resample(waveform, self._sample_rate, target_rate)
        except RuntimeError as exc:
            raise EncodingError(f"{self.name or 'buffer'}: resample to {target_rate} Hz failed: {exc}") from exc

        # torchaudio rounds the length up; pin it to the rounded frame count
        if resampled.shape[-1] > n_target:
            resampled = resampled[..., :n_target]
        elif resampled.shape[-1] < n_target:
            resampled = torch.nn.functional.pad(resampled, (0, n_target - resampled.shape[-1]))

        logger.debug("resampled %s: %d Hz -> %d Hz (%d frames)", self.name, self._sample_rate, target_rate, n_target)
        self._data = resampled.numpy().astype(np.float32)
        self._sample_rate = target_rate

    def quantize(self, channel: int, index: int, bit_depth: int) -> int:
        """
        Convert one float sample to a signed integer of bit_depth bits.
        Negative values scale by 2^(bits-1), non-negative by 2^(bits-1) - 1.
        """
        _check_bit_depth(bit_depth)
        value = min(1.0, max(-1.0, float(self._data[channel, index])))
        full_scale = 2 ** (bit_depth - 1)
        if value < 0:
            return int(value * full_scale)
        return int(value * (full_scale - 1))

    def quantized(self, bit_depth: int, channel: int = 0) -> np.ndarray:
        """Whole-channel form of quantize(); returns int16 (16-bit) or int8 (8-bit)."""
        _check_bit_depth(bit_depth)
        data = np.clip(self._data[channel].astype(np.float64), -1.0, 1.0)
        full_scale = 2 ** (bit_depth - 1)
        scaled = np.where(data < 0, data * full_scale, data * (full_scale - 1))
        dtype = np.int16 if bit_depth == 16 else np.int8
        return np.trunc(scaled).astype(dtype)

    def copy(self) -> "SampleBuffer":
        return SampleBuffer(self._data.copy(), self._sample_rate, self.name)

    def __repr__(self) -> str:
        return f"SampleBuffer(name={self.name!r}, channels={self.channels}, frames={self.length}, rate={self._sample_rate})"


def _check_bit_depth(bit_depth: int) -> None:
    if bit_depth not in SUPPORTED_BIT_DEPTHS:
        raise EncodingError(f"unsupported bit depth {bit_depth}; expected one of {SUPPORTED_BIT_DEPTHS}")
