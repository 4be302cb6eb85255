import os
import sys
import time
from pathlib import Path

import pytest

# Add workspace src/ to PYTHONPATH
sys.path.append(str(Path(__file__).resolve().parents[1]))

from ros2_ak8963 import Ak8963, DataNotReady, SampleRate, Sensitivity

"""
Runs against a real AK8963. Skipped unless AK8963_I2C_BUS is set, e.g.:

    AK8963_I2C_BUS=1 AK8963_I2C_ADDR=12 pytest tests/test_hardware.py
"""

pytestmark = pytest.mark.skipif(
    "AK8963_I2C_BUS" not in os.environ, reason="AK8963_I2C_BUS not set (no hardware)")


def get_i2c_bus():
    return int(os.environ.get("AK8963_I2C_BUS", "1"))


def get_i2c_addr():
    addr = os.environ.get("AK8963_I2C_ADDR")
    return int(addr, 0) if addr else None


def test_basic():
    with Ak8963(get_i2c_bus(), get_i2c_addr(), Sensitivity.OPT_16BIT, SampleRate.OPT_100HZ) as mag:
        assert mag.who_am_i() == 0x48

        # 100 Hz: a sample should be ready well within a second
        deadline = time.monotonic() + 1.0
        while True:
            try:
                mag.read_sample()
                break
            except DataNotReady:
                if time.monotonic() > deadline:
                    raise
                time.sleep(0.005)
