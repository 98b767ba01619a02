"""
Tests for formats/aiff: FORM size, COMM fields, SSND data, APPL payload.
Run from project root: python -m pytest tests/test_aiff.py -v
"""
import sys
import os
import struct

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

import numpy as np
import pytest

from samplerkit.core.errors import EncodingError
from samplerkit.core.sample_buffer import SampleBuffer
from samplerkit.core.types import ApplicationData
from samplerkit.formats.aiff import AIFF

SR = 44100


def _chunks(data: bytes) -> dict:
    """Walk an AIFF file by chunk sizes (the FORM size is not used)."""
    found = {}
    pos = 12
    while pos < len(data):
        tag = data[pos:pos + 4].decode("ascii")
        size = struct.unpack(">I", data[pos + 4:pos + 8])[0]
        found[tag] = data[pos + 8:pos + 8 + size]
        pos += 8 + size
    return found


def _buffer(values) -> SampleBuffer:
    return SampleBuffer(np.asarray(values, dtype=np.float32), SR)


def test_form_header():
    data = AIFF([_buffer(np.zeros(10))]).to_bytes()
    assert data[:4] == b"FORM"
    assert data[8:12] == b"AIFF"


@pytest.mark.parametrize("with_appl", [False, True])
def test_form_length_is_inner_minus_eight(with_appl):
    appl = ApplicationData("op-1", b"{}") if with_appl else None
    data = AIFF([_buffer(np.zeros(10)), _buffer(np.zeros(5))], application_data=appl).to_bytes()
    inner = len(data) - 12
    assert struct.unpack(">I", data[4:8])[0] == inner - 8


def test_form_length_single_buffer():
    data = AIFF([_buffer(np.zeros(10))]).to_bytes()
    # COMM 26 + SSND (8 + 8 + 20) = 62 inner bytes
    assert len(data) == 74
    assert struct.unpack(">I", data[4:8])[0] == 54


def test_common_chunk_fields():
    comm = _chunks(AIFF([_buffer(np.zeros(10)), _buffer(np.zeros(7))]).to_bytes())["COMM"]
    assert len(comm) == 18
    channels, frames, bits = struct.unpack(">HIH", comm[:8])
    assert (channels, frames, bits) == (1, 17, 16)
    assert comm[8:] == bytes.fromhex("400eac44000000000000")


def test_sound_data_big_endian_pcm():
    ssnd = _chunks(AIFF([_buffer([1.0, -1.0]), _buffer([0.5])]).to_bytes())["SSND"]
    offset, block_size = struct.unpack(">II", ssnd[:8])
    assert (offset, block_size) == (0, 0)
    assert struct.unpack(">hhh", ssnd[8:]) == (32767, -32768, 16383)


def test_sound_data_downmixes():
    stereo = SampleBuffer(np.array([[1.0], [0.0]], dtype=np.float32), SR)
    ssnd = _chunks(AIFF([stereo]).to_bytes())["SSND"]
    assert struct.unpack(">h", ssnd[8:]) == (16383,)


def test_application_chunk():
    payload = b'{"type":"drum"}'
    chunks = _chunks(AIFF([_buffer([0.0])], application_data=ApplicationData("op-1", payload)).to_bytes())
    assert chunks["APPL"] == b"op-1" + payload


def test_no_application_chunk_by_default():
    chunks = _chunks(AIFF([_buffer([0.0])]).to_bytes())
    assert list(chunks) == ["COMM", "SSND"]


def test_bad_signature_rejected():
    with pytest.raises(EncodingError):
        AIFF([_buffer([0.0])], application_data=ApplicationData("toolong", b"")).to_bytes()


def test_rate_mismatch_rejected():
    buf = SampleBuffer(np.zeros(4, dtype=np.float32), 22050)
    with pytest.raises(EncodingError):
        AIFF([buf]).to_bytes()


def test_other_sample_rate_encoded():
    buf = SampleBuffer(np.zeros(4, dtype=np.float32), 48000)
    comm = _chunks(AIFF([buf], sample_rate=48000).to_bytes())["COMM"]
    assert comm[8:] == bytes.fromhex("400ebb80000000000000")
