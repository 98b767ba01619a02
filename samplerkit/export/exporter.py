"""
Per-device export: turns slot assignments into the set of files a sampler
loads, as {relative path: bytes}. Bundling the files (zip, card image) is
left to the caller.
"""
import logging
import re
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Tuple

from samplerkit.core.errors import DecodeError, EncodingError
from samplerkit.core.io import AudioIO
from samplerkit.core.params import get_param
from samplerkit.core.sample_buffer import SampleBuffer
from samplerkit.core.types import PresetSlot
from samplerkit.formats.aiff import AIFF
from samplerkit.formats.wav import WAV
from samplerkit.params.resolve import resolve_params
from samplerkit.presets import microgranny, op1
from samplerkit.qc.qc import analyze

logger = logging.getLogger(__name__)

PRESET_NAME_PATTERN = re.compile(r"^P[0-9][1-6]\.TXT$")


@dataclass
class ExportResult:
    files: Dict[str, bytes] = field(default_factory=dict)
    errors: Dict[str, str] = field(default_factory=dict)  # path -> reason, for outputs that were dropped
    qc: Dict[str, dict] = field(default_factory=dict)


def _prepare(buffer: SampleBuffer, sample_rate: int) -> SampleBuffer:
    """Downmix then resample in place; mono first so only one channel is resampled."""
    buffer.convert_to_mono()
    buffer.resample(sample_rate)
    return buffer


def _log_qc(label: str, report: dict) -> None:
    for warning in report["warnings"]:
        logger.warning("[%s] %s", label, warning)


class Exporter:
    @staticmethod
    def decode_slots(files: Sequence[Optional[Tuple[str, bytes]]]) -> List[Optional[SampleBuffer]]:
        """
        Decode (name, bytes) per slot. Empty entries and files that fail to
        decode leave the slot empty; the rest of the bank still exports.
        """
        slots: List[Optional[SampleBuffer]] = []
        for i, entry in enumerate(files):
            if entry is None:
                slots.append(None)
                continue
            name, data = entry
            try:
                slots.append(AudioIO.decode(data, name=name))
            except DecodeError as exc:
                logger.warning("slot %d left empty: %s", i, exc)
                slots.append(None)
        return slots

    @staticmethod
    def op1_drum_patch(samples: Sequence[Optional[SampleBuffer]], params: Optional[dict] = None) -> bytes:
        """
        OP-1 drum patch: every populated key's sample, back to back, in one
        AIFF with the "op-1" parameter block. samples are in key order, None = empty key.
        """
        if not any(sample is not None for sample in samples):
            raise EncodingError("OP-1 drum patch needs at least one sample")

        config = resolve_params("op1", params)
        sample_rate = get_param(config, "op1.sample_rate", 44100)
        bit_depth = get_param(config, "op1.bit_depth", 16)
        num_keys = get_param(config, "op1.num_keys", 24)
        if len(samples) > num_keys:
            raise EncodingError(f"OP-1 drum patch has {num_keys} keys, got {len(samples)} samples")

        keys = [_prepare(s, sample_rate) if s is not None else None for s in samples]
        _log_qc("op1", analyze(keys, "op1"))

        metadata = op1.build_metadata(keys, params)
        aiff = AIFF(
            [k for k in keys if k is not None],
            sample_rate=sample_rate,
            bit_depth=bit_depth,
            application_data=metadata,
        )
        data = aiff.to_bytes()
        logger.info("op1 drum patch: %d keys, %d bytes", sum(k is not None for k in keys), len(data))
        return data

    @staticmethod
    def squid_channel(samples: Sequence[SampleBuffer], params: Optional[dict] = None) -> bytes:
        """One Squid Salmple channel: samples concatenated, a cue point at each start."""
        config = resolve_params("squid", params)
        sample_rate = get_param(config, "squid.sample_rate", 44100)
        bit_depth = get_param(config, "squid.bit_depth", 16)
        buffers = [_prepare(s, sample_rate) for s in samples]
        return WAV(buffers, sample_rate=sample_rate, bit_depth=bit_depth).to_bytes()

    @staticmethod
    def squid_bank(
        channels: Sequence[Sequence[SampleBuffer]],
        bank_number: Optional[int] = None,
        pack_name: Optional[str] = None,
        params: Optional[dict] = None,
    ) -> ExportResult:
        """
        A Squid Salmple bank folder: "Bank <n>/chan-00<i>.wav" for every
        non-empty channel plus "Bank <n>/info.txt" naming the pack.
        """
        config = resolve_params("squid", params)
        num_channels = get_param(config, "squid.num_channels", 8)
        if len(channels) > num_channels:
            raise EncodingError(f"a bank has {num_channels} channels, got {len(channels)}")

        bank_min = get_param(config, "squid.bank_min", 1)
        bank_max = get_param(config, "squid.bank_max", 99)
        if bank_number is not None and not bank_min <= bank_number <= bank_max:
            raise EncodingError(f"bank number must be {bank_min}..{bank_max}, got {bank_number}")

        folder = f"Bank {bank_number or 'XX'}"
        result = ExportResult()
        result.files[f"{folder}/info.txt"] = (pack_name or get_param(config, "squid.pack_name")).encode("utf-8")

        for i, samples in enumerate(channels):
            if not samples:
                continue
            path = f"{folder}/chan-00{i + 1}.wav"
            try:
                result.files[path] = Exporter.squid_channel(samples, params)
            except EncodingError as exc:
                logger.error("%s dropped: %s", path, exc)
                result.errors[path] = str(exc)
                continue
            result.qc[path] = analyze(samples, "squid")
            _log_qc(path, result.qc[path])

        logger.info("squid bank %s: %d files, %d errors", folder, len(result.files), len(result.errors))
        return result

    @staticmethod
    def default_microgranny_slots(params: Optional[dict] = None) -> List[PresetSlot]:
        config = resolve_params("microgranny", params)
        return [PresetSlot(name=name) for name in get_param(config, "microgranny.slot_names", [])]

    @staticmethod
    def microgranny_sample(slot: PresetSlot, params: Optional[dict] = None) -> bytes:
        """The slot's sample as "<name>.WAV" content at the Microgranny rate and the slot's bit depth."""
        if slot.sample is None:
            raise EncodingError(f"slot {slot.name} has no sample")
        config = resolve_params("microgranny", params)
        sample_rate = get_param(config, "microgranny.sample_rate", 22050)
        buffer = _prepare(slot.sample, sample_rate)
        return WAV([buffer], sample_rate=sample_rate, bit_depth=slot.bit_depth).to_bytes()

    @staticmethod
    def microgranny_bank(
        slots: Sequence[Optional[PresetSlot]],
        preset_name: Optional[str] = None,
        params: Optional[dict] = None,
    ) -> ExportResult:
        """The preset record file plus one WAV per slot that has a sample."""
        config = resolve_params("microgranny", params)
        preset_name = preset_name or get_param(config, "microgranny.preset_name", "P01.TXT")
        if not PRESET_NAME_PATTERN.match(preset_name):
            raise EncodingError(f"preset name must look like P01.TXT (P, 0-9, 1-6), got {preset_name!r}")
        num_sounds = get_param(config, "microgranny.num_sounds", 6)
        if len(slots) > num_sounds:
            raise EncodingError(f"a preset has {num_sounds} sounds, got {len(slots)}")

        result = ExportResult()
        result.files[preset_name] = microgranny.build_preset(slots)

        for slot in slots:
            if slot is None or slot.sample is None:
                continue
            try:
                result.files[slot.file_name] = Exporter.microgranny_sample(slot, params)
            except EncodingError as exc:
                logger.error("%s dropped: %s", slot.file_name, exc)
                result.errors[slot.file_name] = str(exc)

        logger.info("microgranny %s: %d files, %d errors", preset_name, len(result.files), len(result.errors))
        return result
