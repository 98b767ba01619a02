"""
Microgranny preset records.

A preset file is one fixed-width record per sound. Each record starts from
a constant bit template; the sound's two-character file name and its five
option flags are written over specific bits. Bit 0 is the MSB of byte 0.

    bits 65..69   random shift, sync, repeat, legato, tuned
    bits 71..77   first name character, 7-bit ASCII
    bits 78..79   gap (template value kept)
    bits 80..86   second name character, 7-bit ASCII
    bit  87       set unless the first character is "0" or below
"""
import logging
from typing import Optional, Sequence

from samplerkit.core.types import PresetOptions, PresetSlot

logger = logging.getLogger(__name__)

RECORD_BITS = 100
RECORD_BYTES = (RECORD_BITS + 7) // 8

TEMPLATE_BITS = (
    "01101101" "00000011" "00000000" "00000000"
    "00000000" "00100000" "00000000" "11111110"
    "00000111" "00000100" "10000011" "00000000"
    "0000"
)

NAME_START_BIT = 8 * 8 + 7
NAME_CHAR_BITS = 7
NAME_GAP_BITS = 2
NAME_TYPE_BIT = 87

OPTION_BITS = {
    "tuned": 69,
    "legato": 68,
    "repeat": 67,
    "sync": 66,
    "random_shift": 65,
}

DEFAULT_SLOT_NAME = "A1"


def _template() -> bytearray:
    record = bytearray(RECORD_BYTES)
    for index, bit in enumerate(TEMPLATE_BITS):
        if bit == "1":
            record[index // 8] |= 1 << (7 - index % 8)
    return record


def set_bit(record: bytearray, index: int, value: bool) -> None:
    mask = 1 << (7 - index % 8)
    if value:
        record[index // 8] |= mask
    else:
        record[index // 8] &= ~mask & 0xFF


def get_bit(record: bytes, index: int) -> bool:
    return bool(record[index // 8] & (1 << (7 - index % 8)))


def _write_field(record: bytearray, start: int, width: int, value: int) -> None:
    for i in range(width):
        set_bit(record, start + i, bool(value & (1 << (width - 1 - i))))


def encode_slot(slot: Optional[PresetSlot]) -> bytes:
    """One record. An unpopulated slot (None) is written as "A1" with every option off."""
    record = _template()
    name = slot.name if slot is not None else DEFAULT_SLOT_NAME
    options = slot.options if slot is not None else PresetOptions(
        tuned=False, legato=False, repeat=False, sync=False, random_shift=False
    )

    first, second = ord(name[0]), ord(name[1])
    _write_field(record, NAME_START_BIT, NAME_CHAR_BITS, first)
    _write_field(record, NAME_START_BIT + NAME_CHAR_BITS + NAME_GAP_BITS, NAME_CHAR_BITS, second)
    # observed in device files; clear only for names starting with "0"
    set_bit(record, NAME_TYPE_BIT, first > ord("0"))

    for option, index in OPTION_BITS.items():
        set_bit(record, index, getattr(options, option))
    return bytes(record)


def build_preset(slots: Sequence[Optional[PresetSlot]]) -> bytes:
    """Concatenate one record per slot."""
    preset = b"".join(encode_slot(slot) for slot in slots)
    logger.debug("microgranny preset: %d slots, %d bytes", len(slots), len(preset))
    return preset
