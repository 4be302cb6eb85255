import enum
import logging
import struct
import time
from dataclasses import dataclass

import numpy as np

from .helpers import MEAS_RANGE_UT, sensitivity_adjustment
from .i2c import LinuxI2CDevice

"""
@file ak8963.py
@brief Driver for the AKM AK8963 3-axis magnetometer on a Linux I2C bus.

Brings the chip from power-on to continuous measurement mode (reading the
factory sensitivity adjustment from Fuse ROM on the way), then polls ST1 and
the HXL..ST2 data block for samples in microTesla.

Datasheet: https://www.akm.com/akm/en/file/datasheet/AK8963C.pdf
"""

logger = logging.getLogger(__name__)

AK_ADDR = 0x0C  # default I2C address (CAD1=CAD0=0)
AK_WIA_ID = 0x48

# ---- AK8963 regs ----
AK_WIA   = 0x00  # device ID, should be 0x48
AK_ST1   = 0x02  # status 1
AK_HXL   = 0x03  # XoutL, start of 7 byte data block (HXL..HZH, ST2)
AK_CNTL1 = 0x0A  # control 1
AK_ASAX  = 0x10  # sensitivity adjustment values, 3 bytes, Fuse ROM mode only

# ---- ST1 bits ----
ST1_DRDY = 0x01  # data ready
ST1_DOR  = 0x02  # data overrun

# ---- ST2 bits (last byte of the data block) ----
ST2_HOFL = 0x08  # magnetic sensor overflow

# ---- CNTL1 values ----
CNTL1_POWER_DOWN = 0x00
CNTL1_CONT_MEAS1 = 0x02  # 8 Hz
CNTL1_CONT_MEAS2 = 0x06  # 100 Hz
CNTL1_FUSE_ROM   = 0x0F
CNTL1_BIT_16     = 0x10  # output bit setting, 16 bit when set

DATA_BLOCK_LEN = 7

# chip settling times, seconds
MODE_CHANGE_WAIT = 0.001
POWER_DOWN_WAIT = 0.0001


class Sensitivity(enum.Enum):
    """Output bit setting. Value is the raw count for the full measurement range."""

    OPT_14BIT = 8192.0   # 0.6 uT/LSB
    OPT_16BIT = 32768.0  # 0.15 uT/LSB

    def scalar(self) -> float:
        """uT per LSB."""
        return MEAS_RANGE_UT / self.value

    @classmethod
    def from_bits(cls, bits: int) -> "Sensitivity":
        if bits == 14:
            return cls.OPT_14BIT
        if bits == 16:
            return cls.OPT_16BIT
        raise ValueError(f"Unsupported output resolution: {bits} bit")


class SampleRate(enum.Enum):
    """Continuous measurement mode. Value is the CNTL1 mode code."""

    OPT_8HZ = CNTL1_CONT_MEAS1    # continuous measurement mode 1
    OPT_100HZ = CNTL1_CONT_MEAS2  # continuous measurement mode 2

    @classmethod
    def from_hz(cls, hz: int) -> "SampleRate":
        if hz == 8:
            return cls.OPT_8HZ
        if hz == 100:
            return cls.OPT_100HZ
        raise ValueError(f"Unsupported sample rate: {hz} Hz")


@dataclass
class Ak8963Sample:
    """One decoded measurement."""

    mag: np.ndarray       # uT, float64, shape (3,)
    mag_raw: np.ndarray   # raw register counts, int16, shape (3,)
    data_overrun: bool = False  # a previous sample was overwritten before being read


class ReadSampleError(Exception):
    """Base for non-transport conditions raised by read_sample()."""


class DataNotReady(ReadSampleError):
    """ST1 DRDY is clear: no new measurement yet, poll again."""


def cntl1_mode_byte(sensitivity: Sensitivity, sample_rate: SampleRate) -> int:
    mode = 0
    if sensitivity is Sensitivity.OPT_16BIT:
        mode |= CNTL1_BIT_16
    # exactly one of the two continuous measurement codes
    mode |= SampleRate(sample_rate).value
    return mode


def parse_sample(data, sensitivity: Sensitivity, factory_adjust):
    """
    Decode the HXL..ST2 block.

    Args:
        data           : 7 bytes as read from AK_HXL
        sensitivity    : output setting the chip was configured with
        factory_adjust : per-axis Fuse ROM multipliers, length 3

    Returns:
        Ak8963Sample, or None if ST2 reports magnetic sensor overflow.
        data_overrun is always False here; only the caller has ST1.
    """
    data = bytes(data)
    if len(data) < DATA_BLOCK_LEN:
        raise ValueError(f"Expected {DATA_BLOCK_LEN} bytes, got {len(data)}")

    if data[6] & ST2_HOFL:
        # Magnetic sensor saturation
        return None

    mag_raw = np.array(struct.unpack_from("<hhh", data), dtype=np.int16)
    mag = sensitivity.scalar() * np.asarray(factory_adjust, dtype=float) * mag_raw.astype(float)

    return Ak8963Sample(mag=mag, mag_raw=mag_raw, data_overrun=False)


def read_sensitivity_adjustment(i2c_dev):
    """
    Read the factory sensitivity adjustment values from Fuse ROM.

    Leaves the chip in power-down mode. Returns a float array of length 3.
    """
    # Power down mag
    i2c_dev.write_register(AK_CNTL1, CNTL1_POWER_DOWN)
    time.sleep(MODE_CHANGE_WAIT)

    # Enter Fuse ROM access mode
    i2c_dev.write_register(AK_CNTL1, CNTL1_FUSE_ROM)
    time.sleep(MODE_CHANGE_WAIT)

    asa = i2c_dev.read_register(AK_ASAX, 3)
    factory_adjust = np.array([sensitivity_adjustment(b) for b in asa[:3]], dtype=float)
    logger.debug("ASA raw=%s adjust=%s", list(asa[:3]), factory_adjust)

    # Power down again; datasheet asks for at least 100us before the next mode
    i2c_dev.write_register(AK_CNTL1, CNTL1_POWER_DOWN)
    time.sleep(POWER_DOWN_WAIT)

    return factory_adjust


class Ak8963:
    """
    AK8963 magnetometer.

    Owns its I2C device handle. Not safe to share between threads; callers must
    serialize access.

    Note: DOR is taken from the ST1 read that precedes the data block read, so an
    overrun happening between the two transactions is not reported.
    """

    def __init__(self, i2c_bus, i2c_addr=None,
                 sensitivity=Sensitivity.OPT_16BIT,
                 sample_rate=SampleRate.OPT_100HZ,
                 i2c_dev=None):
        self.i2c_addr = AK_ADDR if i2c_addr is None else i2c_addr
        self._sensitivity = Sensitivity(sensitivity)
        sample_rate = SampleRate(sample_rate)

        owns_dev = i2c_dev is None
        if owns_dev:
            i2c_dev = LinuxI2CDevice(i2c_bus, self.i2c_addr)
        self._i2c_dev = i2c_dev

        try:
            self._factory_adjust = read_sensitivity_adjustment(i2c_dev)
            self._factory_adjust.setflags(write=False)
            self._initialize(sample_rate)
        except Exception:
            if owns_dev:
                i2c_dev.close()
            raise

        logger.info(
            "AK8963 at 0x%02x: sensitivity=%s sample_rate=%s adjust=%s",
            self.i2c_addr, self._sensitivity.name, sample_rate.name, self._factory_adjust)

    @property
    def sensitivity(self) -> Sensitivity:
        return self._sensitivity

    @property
    def factory_adjust(self) -> np.ndarray:
        return self._factory_adjust

    def _initialize(self, sample_rate):
        mode = cntl1_mode_byte(self._sensitivity, sample_rate)
        logger.debug("CNTL1 <- 0x%02x", mode)
        self._i2c_dev.write_register(AK_CNTL1, mode)
        time.sleep(POWER_DOWN_WAIT)

    def _dev(self):
        if self._i2c_dev is None:
            raise ValueError("device closed")
        return self._i2c_dev

    def who_am_i(self) -> int:
        """Value of the WIA register, 0x48 for a genuine AK8963."""
        return self._dev().read_register(AK_WIA, 1)[0]

    def read_sample(self):
        """
        Poll one measurement.

        Returns:
            Ak8963Sample, or None if the chip reports magnetic field saturation.

        Raises:
            DataNotReady : DRDY clear, nothing read past ST1
            OSError      : bus failure, propagated from the transport
        """
        i2c_dev = self._dev()
        st1 = i2c_dev.read_register(AK_ST1, 1)[0]

        # Check DRDY (data ready) bit
        if not st1 & ST1_DRDY:
            raise DataNotReady()

        data = i2c_dev.read_register(AK_HXL, DATA_BLOCK_LEN)

        sample = parse_sample(data, self._sensitivity, self._factory_adjust)

        # Check DOR (data overrun) bit
        if sample is not None and st1 & ST1_DOR:
            sample.data_overrun = True

        return sample

    def parse_sample_data(self, data):
        """Decode a captured 7 byte block with this chip's settings. No bus access."""
        return parse_sample(data, self._sensitivity, self._factory_adjust)

    def close(self):
        if self._i2c_dev is not None:
            self._i2c_dev.close()
            self._i2c_dev = None

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_value, traceback):
        self.close()
