"""
Device configuration defaults: one nested dict per supported sampler.
resolve_params(device, overrides) deep-merges caller overrides onto these.
"""
from typing import Dict, Any

OP1_NUM_KEYS = 24

# Per-key values the OP-1 drum utility writes for an untouched patch
_OP1_KEY_NEUTRAL = 8192


def _per_key(value: int) -> list:
    return [value] * OP1_NUM_KEYS


# -----------------------------------------------------------------------------
# OP-1 drum patch: AIFF at 44.1 kHz / 16 bit with an "op-1" APPL block
# -----------------------------------------------------------------------------

OP1_DEFAULTS: Dict[str, Any] = {
    "op1": {
        "num_keys": OP1_NUM_KEYS,
        "sample_rate": 44100,
        "bit_depth": 16,
        "signature": "op-1",
        # Key order of this block is the serialisation order
        "metadata": {
            "drum_version": 1,
            "type": "drum",
            "name": "user",
            "octave": 0,
            "pitch": _per_key(0),
            "playmode": _per_key(_OP1_KEY_NEUTRAL),
            "reverse": _per_key(_OP1_KEY_NEUTRAL),
            "volume": _per_key(_OP1_KEY_NEUTRAL),
            "dyna_env": [0, 8192, 0, 8192, 0, 0, 0, 0],
            "fx_active": False,
            "fx_type": "delay",
            "fx_params": [8000, 8000, 8000, 8000, 8000, 8000, 8000, 8000],
            "lfo_active": False,
            "lfo_type": "tremolo",
            "lfo_params": [16000, 16000, 16000, 16000, 0, 0, 0, 0],
        },
    },
}

# -----------------------------------------------------------------------------
# Squid Salmple: 8 channels per bank, each a concatenated WAV with cue points
# -----------------------------------------------------------------------------

SQUID_DEFAULTS: Dict[str, Any] = {
    "squid": {
        "num_channels": 8,
        "sample_rate": 44100,
        "bit_depth": 16,
        "bank_min": 1,
        "bank_max": 99,
        "pack_name": "Sample Pack",
    },
}

# -----------------------------------------------------------------------------
# Microgranny: 6 sounds per preset, 22.05 kHz WAVs, bit-packed preset record
# -----------------------------------------------------------------------------

MICROGRANNY_DEFAULTS: Dict[str, Any] = {
    "microgranny": {
        "num_sounds": 6,
        "sample_rate": 22050,
        "preset_name": "P01.TXT",
        "slot_names": ["00", "01", "02", "03", "04", "05"],
    },
}

DEVICE_DEFAULTS: Dict[str, Dict[str, Any]] = {
    "op1": OP1_DEFAULTS,
    "squid": SQUID_DEFAULTS,
    "microgranny": MICROGRANNY_DEFAULTS,
}
