"""
Quality checks for sample sets before export.
"""
from samplerkit.qc.qc import analyze
from samplerkit.qc.thresholds import QC_THRESHOLDS

__all__ = ["analyze", "QC_THRESHOLDS"]
