"""
Container formats built from IFF-style chunks.
"""
from samplerkit.formats.chunk import Chunk
from samplerkit.formats.wav import WAV
from samplerkit.formats.aiff import AIFF

__all__ = ["Chunk", "WAV", "AIFF"]
