"""
Tests for presets/microgranny: golden preset records and bit placement.
Run from project root: python -m pytest tests/test_microgranny.py -v
"""
import sys
import os

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

import pytest

from samplerkit.core.errors import EncodingError
from samplerkit.core.types import PresetOptions, PresetSlot
from samplerkit.presets.microgranny import (
    OPTION_BITS,
    RECORD_BITS,
    RECORD_BYTES,
    build_preset,
    encode_slot,
    get_bit,
)


def test_record_size():
    assert RECORD_BITS == 100
    assert RECORD_BYTES == 13


def test_golden_a1_default_options():
    record = encode_slot(PresetSlot("A1"))
    assert record == bytes.fromhex("6d030000002000fe2704630000")


def test_golden_unpopulated_slot():
    record = encode_slot(None)
    assert record == bytes.fromhex("6d030000002000fe0304630000")


def test_golden_numeric_name():
    record = encode_slot(PresetSlot("00"))
    assert record == bytes.fromhex("6d030000002000fe26c0600000")
    assert not get_bit(record, 87)


def test_name_type_bit_set_for_nonzero_digits_and_letters():
    for name in ("10", "9Z", "A0", "Z9"):
        assert get_bit(encode_slot(PresetSlot(name)), 87)


def test_each_option_sets_one_bit():
    off = PresetOptions(tuned=False, legato=False, repeat=False, sync=False, random_shift=False)
    base = encode_slot(PresetSlot("A1", options=off))
    for option, index in OPTION_BITS.items():
        record = encode_slot(PresetSlot("A1", options=PresetOptions(**{**vars(off), option: True})))
        diff = [i for i in range(RECORD_BITS) if get_bit(record, i) != get_bit(base, i)]
        assert diff == [index], option


def test_option_bits_are_contiguous():
    assert sorted(OPTION_BITS.values()) == [65, 66, 67, 68, 69]


def test_name_fields_and_options():
    slot = PresetSlot("K7", options=PresetOptions(tuned=False, legato=True, repeat=True, sync=False, random_shift=True))
    record = encode_slot(slot)
    first = "".join(str(int(get_bit(record, 71 + i))) for i in range(7))
    second = "".join(str(int(get_bit(record, 80 + i))) for i in range(7))
    assert (int(first, 2), int(second, 2)) == (ord("K"), ord("7"))
    assert {option: get_bit(record, index) for option, index in OPTION_BITS.items()} == vars(slot.options)


def test_preset_concatenates_records():
    slots = [PresetSlot(f"0{i}") for i in range(5)] + [None]
    preset = build_preset(slots)
    assert len(preset) == 6 * RECORD_BYTES
    assert preset[:RECORD_BYTES] == encode_slot(slots[0])
    assert preset[-RECORD_BYTES:] == encode_slot(None)


def test_slot_name_validation():
    with pytest.raises(EncodingError):
        PresetSlot("A")
    with pytest.raises(EncodingError):
        PresetSlot("a!")
    assert PresetSlot("b2").name == "B2"


def test_slot_bit_depth_validation():
    with pytest.raises(EncodingError):
        PresetSlot("A1", bit_depth=12)


def test_slot_name_must_be_string():
    with pytest.raises(EncodingError):
        PresetSlot(None)
    with pytest.raises(EncodingError):
        PresetSlot(12)
