from dataclasses import dataclass, field
from typing import Optional

from samplerkit.core.errors import EncodingError
from samplerkit.core.sample_buffer import SampleBuffer, SUPPORTED_BIT_DEPTHS

# Characters the Microgranny accepts in its two-character file names
SLOT_NAME_CHARS = "0123456789ABCDEFGHIJKLMNOPQRSTUVWXYZ"


@dataclass
class ApplicationData:
    """Vendor payload carried by an AIFF APPL chunk."""
    signature: str  # 4-char OSType, e.g. "op-1"
    data: bytes = b""


@dataclass
class PresetOptions:
    tuned: bool = True
    legato: bool = False
    repeat: bool = False
    sync: bool = True
    random_shift: bool = False


@dataclass
class PresetSlot:
    """
    One Microgranny sound: a two-character file name (stored on the card as
    "<name>.WAV"), its playback options, and the sample assigned to it.
    """
    name: str
    options: PresetOptions = field(default_factory=PresetOptions)
    sample: Optional[SampleBuffer] = None
    bit_depth: int = 16

    def __post_init__(self):
        if not isinstance(self.name, str):
            raise EncodingError(f"slot name must be a string, got {self.name!r}")
        self.name = self.name.upper()
        if len(self.name) != 2 or any(c not in SLOT_NAME_CHARS for c in self.name):
            raise EncodingError(f"slot name must be two characters from [0-9A-Z], got {self.name!r}")
        if self.bit_depth not in SUPPORTED_BIT_DEPTHS:
            raise EncodingError(f"unsupported bit depth {self.bit_depth}")

    @property
    def file_name(self) -> str:
        return f"{self.name}.WAV"
