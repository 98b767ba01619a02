"""
Default QC thresholds per device.
"""
QC_THRESHOLDS = {
    "op1": {
        "max_total_duration_s": 12.0,  # whole patch; longer patches truncate or fail to import
        "peak_max": 1.0,
    },
    "squid": {
        "max_total_duration_s": 11.0,  # per channel
        "peak_max": 1.0,
    },
    "microgranny": {
        "peak_max": 1.0,
    },
}
