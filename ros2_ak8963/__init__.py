from .ak8963 import (
    Ak8963,
    Ak8963Sample,
    DataNotReady,
    ReadSampleError,
    SampleRate,
    Sensitivity,
    parse_sample,
    read_sensitivity_adjustment,
)

__all__ = [
    "Ak8963",
    "Ak8963Sample",
    "DataNotReady",
    "ReadSampleError",
    "SampleRate",
    "Sensitivity",
    "parse_sample",
    "read_sensitivity_adjustment",
]
