import logging

from smbus2 import SMBus, i2c_msg

"""
@file linux_i2c.py
@brief Thin raw-transaction wrapper over smbus2 for a single I2C device.

The AK8963 protocol is "write register address, then read N bytes", issued as two
separate transactions. smbus2's i2c_msg / i2c_rdwr gives exactly that without
going through the SMBus block-read helpers.
"""

logger = logging.getLogger(__name__)


def get_i2c_bus_path(i2c_bus):
    return f"/dev/i2c-{i2c_bus}"


class LinuxI2CDevice:
    """Owns an open bus handle bound to one device address."""

    def __init__(self, i2c_bus, address):
        self.address = address
        self.path = get_i2c_bus_path(i2c_bus)
        # raises OSError (FileNotFoundError, PermissionError...) if the bus can't be opened
        self.bus = SMBus(self.path)
        logger.debug("opened %s at address 0x%02x", self.path, address)

    def write(self, data):
        self.bus.i2c_rdwr(i2c_msg.write(self.address, list(data)))

    def read(self, n):
        msg = i2c_msg.read(self.address, n)
        self.bus.i2c_rdwr(msg)
        return bytes(list(msg))

    def write_register(self, reg, value):
        self.write([reg, value & 0xFF])

    def read_register(self, reg, n):
        self.write([reg])
        return self.read(n)

    def close(self):
        if self.bus is not None:
            self.bus.close()
            self.bus = None

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_value, traceback):
        self.close()
