import sys
from pathlib import Path

import numpy as np
import pytest

# Add workspace src/ to PYTHONPATH
sys.path.append(str(Path(__file__).resolve().parents[1]))

from ros2_ak8963.ak8963 import Ak8963Sample
from ros2_ak8963.helpers import (
    mag_field_from_sample,
    sample_rate_hz_from_param,
    sensitivity_adjustment,
    sensitivity_bits_from_param,
    ut_to_tesla,
)


@pytest.mark.parametrize("raw, expected", [
    (128, 1.0),
    (0, 0.5),
    (64, 0.75),
    (192, 1.25),
])
def test_sensitivity_adjustment_exact(raw, expected):
    assert sensitivity_adjustment(raw) == expected


def test_sensitivity_adjustment_max():
    assert sensitivity_adjustment(255) == pytest.approx(1.49609375)
    assert sensitivity_adjustment(255) == pytest.approx(1.496, abs=1e-3)


@pytest.mark.parametrize("raw", [-1, 256])
def test_sensitivity_adjustment_out_of_range(raw):
    with pytest.raises(ValueError):
        sensitivity_adjustment(raw)


def test_ut_to_tesla():
    # Earth's field is about 25 to 65 uT
    assert ut_to_tesla(50.0) == pytest.approx(5.0e-5)


@pytest.mark.parametrize("value, expected", [
    ("16bit", 16),
    ("14bit", 14),
    (" 16BIT ", 16),
])
def test_sensitivity_bits_from_param(value, expected):
    assert sensitivity_bits_from_param(value) == expected


def test_sensitivity_bits_from_param_rejects_unknown():
    with pytest.raises(ValueError):
        sensitivity_bits_from_param("12bit")


@pytest.mark.parametrize("value, expected", [(8, 8), (100, 100), ("100", 100)])
def test_sample_rate_hz_from_param(value, expected):
    assert sample_rate_hz_from_param(value) == expected


@pytest.mark.parametrize("value", [50, "fast", None])
def test_sample_rate_hz_from_param_rejects_unknown(value):
    with pytest.raises(ValueError):
        sample_rate_hz_from_param(value)


def test_mag_field_from_sample_in_tesla():
    s = Ak8963Sample(mag=np.array([20.0, -5.5, -40.0]), mag_raw=np.array([133, -37, -267], dtype=np.int16))
    x, y, z, cov0 = mag_field_from_sample(s)

    assert (x, y, z) == pytest.approx((2.0e-5, -5.5e-6, -4.0e-5))
    assert all(type(v) is float for v in (x, y, z))
    assert cov0 == 0.0


def test_mag_field_from_sample_saturated():
    assert mag_field_from_sample(None) == (0.0, 0.0, 0.0, -1.0)


def test_mag_field_from_sample_overrun_still_published():
    s = Ak8963Sample(mag=np.array([1.0, 2.0, 3.0]), mag_raw=np.array([7, 13, 20], dtype=np.int16), data_overrun=True)
    x, y, z, cov0 = mag_field_from_sample(s)
    assert (x, y, z) == pytest.approx((1.0e-6, 2.0e-6, 3.0e-6))
    assert cov0 == 0.0
