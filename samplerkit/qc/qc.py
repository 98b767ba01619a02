"""
Quality checks for a set of samples headed for one device file.
Flags what the hardware will not tolerate well: over-long patches/channels
and samples that will clip when quantized. Checks never block an export.
"""
from typing import Dict, Optional, Sequence

import numpy as np

from samplerkit.core.sample_buffer import SampleBuffer
from samplerkit.qc.thresholds import QC_THRESHOLDS


def _db(x: float) -> float:
    """Convert linear to dB."""
    if x <= 0:
        return -np.inf
    return 20.0 * np.log10(abs(x))


def analyze(buffers: Sequence[Optional[SampleBuffer]], device: str) -> Dict:
    """
    Analyze the samples of one output file.

    Args:
        buffers: Samples in slot order (None = empty slot)
        device: "op1", "squid" or "microgranny"

    Returns:
        Dict with metrics and pass/warn flags
    """
    populated = [b for b in buffers if b is not None]
    durations = [b.duration if b is not None else 0.0 for b in buffers]
    peak = max((float(np.max(np.abs(b.samples))) if b.length else 0.0 for b in populated), default=0.0)

    metrics = {
        "num_samples": len(populated),
        "durations_s": durations,
        "total_duration_s": float(sum(durations)),
        "peak_linear": peak,
        "peak_dbfs": _db(peak),
    }

    thresholds = QC_THRESHOLDS.get(device, {})
    warnings = []

    if not populated:
        warnings.append("No samples assigned")

    max_duration = thresholds.get("max_total_duration_s")
    if max_duration is not None and metrics["total_duration_s"] > max_duration:
        warnings.append(
            f"Max duration exceeded: {metrics['total_duration_s']:.2f} s > {max_duration:.2f} s; "
            "sample may be truncated or fail to import"
        )

    peak_max = thresholds.get("peak_max", 1.0)
    if peak > peak_max:
        warnings.append(f"Peak above full scale: {peak:.3f} > {peak_max:.3f}; samples will clip")

    status = "WARN" if warnings else "PASS"

    return {
        "device": device,
        "status": status,
        "metrics": metrics,
        "warnings": warnings,
    }
