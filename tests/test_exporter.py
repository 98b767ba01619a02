"""
Tests for export/exporter: per-device file sets, naming, empty-slot handling.
Run from project root: python -m pytest tests/test_exporter.py -v
"""
import sys
import os
import io
import json
import struct

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

import numpy as np
import pytest
import soundfile as sf

from samplerkit.core.errors import EncodingError
from samplerkit.core.sample_buffer import SampleBuffer
from samplerkit.core.types import PresetSlot
from samplerkit.export.exporter import Exporter
from samplerkit.presets.microgranny import RECORD_BYTES, encode_slot


def _tone(seconds: float, rate: int = 48000, channels: int = 2) -> SampleBuffer:
    t = np.arange(int(seconds * rate)) / rate
    mono = 0.3 * np.sin(2 * np.pi * 220.0 * t)
    return SampleBuffer(np.tile(mono, (channels, 1)), rate, name="tone.wav")


def _wav_file(seconds: float = 0.1, rate: int = 44100) -> bytes:
    buffer = io.BytesIO()
    sf.write(buffer, np.zeros(int(seconds * rate), dtype=np.float32), rate, format="WAV")
    return buffer.getvalue()


def _aiff_chunks(data: bytes) -> dict:
    found = {}
    pos = 12
    while pos < len(data):
        tag = data[pos:pos + 4].decode("ascii")
        size = struct.unpack(">I", data[pos + 4:pos + 8])[0]
        found[tag] = data[pos + 8:pos + 8 + size]
        pos += 8 + size
    return found


# -----------------------------------------------------------------------------
# Decoding
# -----------------------------------------------------------------------------

def test_decode_slots_leaves_failures_empty():
    slots = Exporter.decode_slots([("a.wav", _wav_file()), None, ("bad.wav", b"not audio at all")])
    assert slots[0] is not None
    assert slots[0].name == "a.wav"
    assert slots[1] is None
    assert slots[2] is None


# -----------------------------------------------------------------------------
# OP-1
# -----------------------------------------------------------------------------

def test_op1_patch_resamples_and_embeds_metadata():
    keys = [_tone(0.2), None, _tone(0.1)]
    data = Exporter.op1_drum_patch(keys)
    chunks = _aiff_chunks(data)

    assert data[:4] == b"FORM"
    assert keys[0].sample_rate == 44100
    assert keys[0].channels == 1
    frames = struct.unpack(">I", chunks["COMM"][2:6])[0]
    assert frames == keys[0].length + keys[2].length

    assert chunks["APPL"][:4] == b"op-1"
    block = json.loads(chunks["APPL"][4:])
    assert block["start"][1] == block["start"][0]
    assert block["start"][2] == block["end"][1] + 4058


def test_op1_patch_requires_a_sample():
    with pytest.raises(EncodingError):
        Exporter.op1_drum_patch([None, None])


def test_op1_patch_too_many_keys_leaves_buffers_untouched():
    keys = [_tone(0.01) for _ in range(25)]
    with pytest.raises(EncodingError):
        Exporter.op1_drum_patch(keys)
    assert all(k.sample_rate == 48000 and k.channels == 2 for k in keys)


def test_op1_patch_name_override():
    data = Exporter.op1_drum_patch([_tone(0.05)], {"op1": {"metadata": {"name": "boom"}}})
    block = json.loads(_aiff_chunks(data)["APPL"][4:])
    assert block["name"] == "boom"


# -----------------------------------------------------------------------------
# Squid Salmple
# -----------------------------------------------------------------------------

def test_squid_bank_layout():
    channels = [[_tone(0.1), _tone(0.05)], [], [_tone(0.02)]] + [[]] * 5
    result = Exporter.squid_bank(channels, bank_number=12, pack_name="Drums")
    assert set(result.files) == {"Bank 12/info.txt", "Bank 12/chan-001.wav", "Bank 12/chan-003.wav"}
    assert result.files["Bank 12/info.txt"] == b"Drums"
    assert result.errors == {}

    decoded, rate = sf.read(io.BytesIO(result.files["Bank 12/chan-001.wav"]), dtype="int16")
    assert rate == 44100
    assert len(decoded) == 4410 + 2205


def test_squid_bank_with_empty_file():
    empty = Exporter.decode_slots([("empty.wav", _wav_file(seconds=0.0, rate=48000))])[0]
    assert empty.length == 0
    result = Exporter.squid_bank([[empty], [_tone(0.05)]], bank_number=3)
    assert result.errors == {}
    assert "Bank 3/chan-002.wav" in result.files

    decoded, rate = sf.read(io.BytesIO(result.files["Bank 3/chan-001.wav"]), dtype="int16")
    assert rate == 44100
    assert len(decoded) == 0


def test_squid_bank_resample_failure_drops_only_that_channel(monkeypatch):
    import samplerkit.core.sample_buffer as sample_buffer

    real_resample = sample_buffer.F.resample

    def failing_resample(waveform, orig_freq, new_freq, **kwargs):
        if orig_freq == 8000:
            raise RuntimeError("resampler failure")
        return real_resample(waveform, orig_freq, new_freq, **kwargs)

    monkeypatch.setattr(sample_buffer.F, "resample", failing_resample)
    result = Exporter.squid_bank([[_tone(0.05, rate=8000)], [_tone(0.05)]], bank_number=4)
    assert set(result.errors) == {"Bank 4/chan-001.wav"}
    assert "Bank 4/chan-002.wav" in result.files


def test_squid_bank_without_number():
    result = Exporter.squid_bank([[_tone(0.01)]])
    assert "Bank XX/chan-001.wav" in result.files
    assert result.files["Bank XX/info.txt"] == b"Sample Pack"


def test_squid_bank_number_range():
    with pytest.raises(EncodingError):
        Exporter.squid_bank([[_tone(0.01)]], bank_number=100)


def test_squid_bank_too_many_channels():
    with pytest.raises(EncodingError):
        Exporter.squid_bank([[]] * 9)


def test_squid_channel_has_cues():
    data = Exporter.squid_channel([_tone(0.1, rate=44100), _tone(0.1, rate=44100)])
    assert b"cue " in data


# -----------------------------------------------------------------------------
# Microgranny
# -----------------------------------------------------------------------------

def test_default_microgranny_slots():
    slots = Exporter.default_microgranny_slots()
    assert [s.name for s in slots] == ["00", "01", "02", "03", "04", "05"]
    assert all(s.options.tuned and s.options.sync for s in slots)


def test_microgranny_bank_files():
    slots = Exporter.default_microgranny_slots()
    slots[0].sample = _tone(0.1)
    slots[0].bit_depth = 8
    slots[3].sample = _tone(0.1)
    result = Exporter.microgranny_bank(slots, preset_name="P23.TXT")

    assert set(result.files) == {"P23.TXT", "00.WAV", "03.WAV"}
    assert len(result.files["P23.TXT"]) == 6 * RECORD_BYTES
    assert result.files["P23.TXT"][:RECORD_BYTES] == encode_slot(slots[0])

    info = sf.info(io.BytesIO(result.files["00.WAV"]))
    assert info.samplerate == 22050
    assert info.subtype == "PCM_U8"
    assert sf.info(io.BytesIO(result.files["03.WAV"])).subtype == "PCM_16"


def test_microgranny_bank_unpopulated_slots():
    result = Exporter.microgranny_bank([PresetSlot("A1"), None])
    assert set(result.files) == {"P01.TXT"}
    assert result.files["P01.TXT"][RECORD_BYTES:] == encode_slot(None)


def test_microgranny_preset_name_validated():
    with pytest.raises(EncodingError):
        Exporter.microgranny_bank([], preset_name="P07.TXT")


def test_microgranny_sample_requires_sample():
    with pytest.raises(EncodingError):
        Exporter.microgranny_sample(PresetSlot("A1"))
