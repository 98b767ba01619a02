"""
Config lookup helpers. Device config is a nested dict (see params.schema);
dotted keys address nested values.
"""
from typing import Any


def get_param(params: dict, name: str, default: Any = None) -> Any:
    """
    Read a value from params, supporting dotted keys for nested dicts.
    E.g. get_param(p, "op1.metadata.octave", 0) -> p["op1"]["metadata"]["octave"] or default.
    If any intermediate key is missing or not a dict, returns default.
    """
    if not params or not name:
        return default
    keys = name.split(".")
    current = params
    for key in keys[:-1]:
        next_val = current.get(key)
        if next_val is None or not isinstance(next_val, dict):
            return default
        current = next_val
    return current.get(keys[-1], default)
