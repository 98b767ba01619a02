"""
80-bit IEEE 754 extended precision, the type AIFF uses for its sample rate.
Layout: 1 sign bit + 15-bit exponent (bias 16383), 64-bit mantissa with an
explicit integer bit. Only positive integer rates are needed here.
"""
import struct

EXPONENT_BIAS = 16383


def encode_sample_rate(rate: int) -> bytes:
    """
    Encode a positive integer sample rate as 10 big-endian bytes.
    44100 -> 40 0E AC 44 00 00 00 00 00 00
    """
    rate = int(rate)
    if rate <= 0:
        raise ValueError(f"sample rate must be positive, got {rate}")
    exponent = rate.bit_length() - 1
    mantissa = rate << (63 - exponent)
    return struct.pack(">HQ", EXPONENT_BIAS + exponent, mantissa)
