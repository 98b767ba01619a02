"""
Parameter resolution: deep-merge DEVICE_DEFAULTS with caller overrides.
Overrides win at any nesting level; neither input is mutated.
"""
import copy
from typing import Dict, Any, Optional

from samplerkit.params.schema import DEVICE_DEFAULTS


def _deep_merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """
    Deep merge two dicts. override values take precedence.
    Returns a new dict (does not mutate inputs).
    """
    result = copy.deepcopy(base)

    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = copy.deepcopy(value)

    return result


def resolve_params(device: str, params: Optional[dict] = None) -> dict:
    """
    Resolve config for a device: DEVICE_DEFAULTS[device] with params merged on top.

    Args:
        device: "op1", "squid" or "microgranny"
        params: Partial overrides in the same nested shape, e.g. {"op1": {"metadata": {"name": "kit"}}}

    Returns:
        Fully resolved config dict.
    """
    if device not in DEVICE_DEFAULTS:
        raise KeyError(f"unknown device {device!r}")
    return _deep_merge(DEVICE_DEFAULTS[device], params or {})
