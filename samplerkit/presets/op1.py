"""
OP-1 drum patch metadata.

A drum patch is an AIFF whose SSND chunk holds every key's sample back to
back; an APPL chunk signed "op-1" carries a JSON parameter block. The
block's "start"/"end" arrays locate each key's sample inside the PCM data,
in units of TIME_SCALE ticks per second.
"""
import json
import logging
import math
from typing import List, Optional, Sequence, Tuple

from samplerkit.core.errors import EncodingError
from samplerkit.core.params import get_param
from samplerkit.core.sample_buffer import SampleBuffer
from samplerkit.core.types import ApplicationData
from samplerkit.params.resolve import resolve_params

logger = logging.getLogger(__name__)

# max int32 spread over the 12 s an OP-1 drum patch can hold
TIME_SCALE = (2 ** 31 - 1) / 12
# TIME_SCALE / 44100, i.e. one sample frame at the OP-1 rate
TIME_PADDING = round(TIME_SCALE / 44100)


def key_markers(durations: Sequence[Optional[float]]) -> Tuple[List[int], List[int]]:
    """
    Start/end markers per key. None marks an empty key, which repeats the
    previous key's markers (0 for the first key).
    """
    starts: List[int] = []
    ends: List[int] = []
    for i, duration in enumerate(durations):
        if duration is not None:
            start = ends[i - 1] + TIME_PADDING if i > 0 else 0
            # pulled in by two frames to avoid a click at the end of each sample
            end = math.ceil(start + duration * TIME_SCALE) - 2 * TIME_PADDING
        else:
            start = starts[i - 1] if i > 0 else 0
            end = ends[i - 1] if i > 0 else 0
        starts.append(start)
        ends.append(end)
    return starts, ends


def build_metadata(slots: Sequence[Optional[SampleBuffer]], params: Optional[dict] = None) -> ApplicationData:
    """
    Serialise the drum parameter block for the given keys (None = empty key).
    Fewer slots than keys are padded with empty keys.
    """
    config = resolve_params("op1", params)
    num_keys = get_param(config, "op1.num_keys", 24)
    if len(slots) > num_keys:
        raise EncodingError(f"OP-1 drum patch has {num_keys} keys, got {len(slots)} samples")

    padded = list(slots) + [None] * (num_keys - len(slots))
    durations = [slot.duration if slot is not None else None for slot in padded]
    starts, ends = key_markers(durations)

    metadata = dict(get_param(config, "op1.metadata", {}))
    metadata["start"] = starts
    metadata["end"] = ends

    payload = json.dumps(metadata, separators=(",", ":")).encode("ascii")
    logger.debug("op-1 metadata: %d bytes, %d populated keys", len(payload), sum(d is not None for d in durations))
    return ApplicationData(signature=get_param(config, "op1.signature", "op-1"), data=payload)
