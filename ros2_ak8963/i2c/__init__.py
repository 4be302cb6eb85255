"""I2C transport package for the AK8963 magnetometer."""

from .linux_i2c import LinuxI2CDevice, get_i2c_bus_path

__all__ = [
    "LinuxI2CDevice",
    "get_i2c_bus_path",
]
