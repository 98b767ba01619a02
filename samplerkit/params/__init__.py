"""
Device configuration defaults.
Single source is schema.DEVICE_DEFAULTS; use resolve_params(device, {}) for resolved defaults.
"""
from samplerkit.params.schema import DEVICE_DEFAULTS
from samplerkit.params.resolve import resolve_params

__all__ = ["DEVICE_DEFAULTS", "resolve_params"]
