import rclpy
import sensor_msgs.msg
from rclpy.node import Node

from .ak8963 import AK_WIA_ID, Ak8963, DataNotReady, SampleRate, Sensitivity
from .helpers import mag_field_from_sample, sample_rate_hz_from_param, sensitivity_bits_from_param

class AK8963Node(Node):
    def __init__(self):
        super().__init__("ak8963_node")

        # Logger
        self.logger = self.get_logger()

        self.logger.info("IP: AK8963 Magnetometer node has been started")

        # Parameters
        self.declare_parameter("i2c_bus", 1)
        self.i2c_bus = self.get_parameter("i2c_bus").get_parameter_value().integer_value
        self.logger.info(f"   i2c_bus: {self.i2c_bus}")

        self.declare_parameter("i2c_address", 0x0C)
        self.i2c_addr = self.get_parameter("i2c_address").get_parameter_value().integer_value
        self.logger.info(f"   i2c_addr: 0x{self.i2c_addr:X}")

        self.declare_parameter("sensitivity", "16bit")
        sensitivity_bits = sensitivity_bits_from_param(self.get_parameter("sensitivity").value)
        self.sensitivity = Sensitivity.from_bits(sensitivity_bits)
        self.logger.info(f"   sensitivity: {self.sensitivity.name} ({self.sensitivity.scalar():.6g} uT per LSB)")

        self.declare_parameter("sample_rate_hz", 100)
        sample_rate_hz = sample_rate_hz_from_param(self.get_parameter("sample_rate_hz").value)
        self.sample_rate = SampleRate.from_hz(sample_rate_hz)
        self.logger.info(f"   sample_rate: {self.sample_rate.name}")

        self.declare_parameter("frame_id", "imu_link")
        self.frame_id = self.get_parameter("frame_id").get_parameter_value().string_value
        self.logger.info(f"   frame_id: {self.frame_id}")

        self.declare_parameter("pub_rate_hz", 50)
        self.pub_rate_hz = self.get_parameter("pub_rate_hz").get_parameter_value().integer_value
        self.logger.info(f"   pub_rate_hz: {self.pub_rate_hz} Hz")

        self._shutting_down = False

        # Magnetometer instance; bus errors here are fatal for the node
        self.mag = Ak8963(self.i2c_bus, self.i2c_addr, self.sensitivity, self.sample_rate)
        adj = self.mag.factory_adjust
        self.logger.info(f"   factory adjust: [{adj[0]:.4f}, {adj[1]:.4f}, {adj[2]:.4f}]")

        who = self.mag.who_am_i()
        if who != AK_WIA_ID:
            self.logger.warning(f"Unexpected WIA 0x{who:02X} (AK8963 reports 0x{AK_WIA_ID:02X}). Check I2C address.")

        # Publishers
        self.mag_pub = self.create_publisher(sensor_msgs.msg.MagneticField, "/imu/mag_raw", 10)

        self.pub_clk = self.create_timer(1.0 / float(self.pub_rate_hz), self.publish_cback)

        self.logger.info("OK: AK8963 Node: init successful")

    #
    # callback called at pub_rate_hz:
    #
    def publish_cback(self):

        if self._shutting_down:
            return

        try:
            sample = self.mag.read_sample()
        except DataNotReady:
            # normal when pub_rate_hz is above the chip's sample rate
            return
        except OSError as e:
            if not self._shutting_down:
                self.logger.error(f"read_sample failed: {e}")
            return

        mag_msg = sensor_msgs.msg.MagneticField()
        mag_msg.header.stamp = self.get_clock().now().to_msg()
        mag_msg.header.frame_id = self.frame_id

        if sample is None:
            # field out of measurable range, value unknown
            self.logger.warning("Magnetic sensor overflow", throttle_duration_sec=5.0)
        elif sample.data_overrun:
            self.logger.debug("Data overrun: a sample was skipped")

        mx, my, mz, cov0 = mag_field_from_sample(sample)
        mag_msg.magnetic_field.x = mx
        mag_msg.magnetic_field.y = my
        mag_msg.magnetic_field.z = mz
        mag_msg.magnetic_field_covariance[0] = cov0

        self.mag_pub.publish(mag_msg)

    def destroy_node(self):
        self._shutting_down = True
        if getattr(self, "pub_clk", None) is not None:
            self.pub_clk.cancel()
        if getattr(self, "mag", None) is not None:
            self.mag.close()
        return super().destroy_node()

def main(args=None):
    rclpy.init(args=args)
    node = AK8963Node()
    try:
        rclpy.spin(node)
    except KeyboardInterrupt:
        node.get_logger().info("Ctrl-C received, shutting down...")
    finally:
        node.destroy_node()
        if rclpy.ok():
            rclpy.shutdown()

if __name__ == "__main__":
    main()
