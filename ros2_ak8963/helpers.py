# Full measurement range of the AK8963, microTesla
MEAS_RANGE_UT = 4912.0

# 1 uT = 1e-6 Tesla (sensor_msgs/MagneticField is in Tesla)
UT_TO_TESLA = 1e-6

def sensitivity_adjustment(raw_byte: int) -> float:
    """
    Convert one factory fuse ROM byte (ASAX/ASAY/ASAZ) to an axis multiplier.

    Per the AK8963 datasheet: Hadj = H * ((ASA - 128) * 0.5 / 128 + 1)

    Args:
        raw_byte : unsigned register value, 0..255

    Returns:
        multiplier (float), 0.5 .. ~1.496; exactly 1.0 for 128
    """
    if not 0 <= raw_byte <= 0xFF:
        raise ValueError(f"Fuse ROM byte out of range: {raw_byte}")
    return (raw_byte - 128) / 256.0 + 1.0

def ut_to_tesla(value_ut):
    return value_ut * UT_TO_TESLA

# ROS parameter values -> sensor output resolution, output bits per LSB count
_SENSITIVITY_BITS = {
    "14bit": 14,
    "16bit": 16,
}

# ROS parameter values -> continuous measurement rate, Hz
_SAMPLE_RATES_HZ = (8, 100)

def sensitivity_bits_from_param(value) -> int:
    key = str(value).strip().lower()
    if key not in _SENSITIVITY_BITS:
        raise ValueError(f"Unknown sensitivity: {value!r} (expected one of {sorted(_SENSITIVITY_BITS)})")
    return _SENSITIVITY_BITS[key]

def sample_rate_hz_from_param(value) -> int:
    try:
        hz = int(value)
    except (TypeError, ValueError):
        raise ValueError(f"Unknown sample rate: {value!r}") from None
    if hz not in _SAMPLE_RATES_HZ:
        raise ValueError(f"Unknown sample rate: {hz} Hz (expected one of {_SAMPLE_RATES_HZ})")
    return hz

def mag_field_from_sample(sample):
    """
    Map a decoded sample to sensor_msgs/MagneticField content.

    Args:
        sample : Ak8963Sample, or None when the chip reported saturation

    Returns:
        (x, y, z, cov0): field in Tesla and magnetic_field_covariance[0].
        Saturation gives a zero field with cov0 = -1 (value unknown).
    """
    if sample is None:
        return 0.0, 0.0, 0.0, -1.0
    mx, my, mz = (float(ut_to_tesla(v)) for v in sample.mag)
    return mx, my, mz, 0.0
