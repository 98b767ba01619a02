"""
Exception types raised while decoding and encoding sampler files.
"""


class SamplerKitError(Exception):
    """Base class for user-facing failures."""


class DecodeError(SamplerKitError):
    """Input bytes could not be decoded (unsupported or corrupt container/codec)."""


class EncodingError(SamplerKitError):
    """Audio cannot be written in the requested format (depth, rate, channel layout, naming)."""


class ChunkOverflowError(AssertionError):
    """A write went past a chunk's declared length. Always a programming defect."""
