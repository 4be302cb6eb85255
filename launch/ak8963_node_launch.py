from launch_ros.actions import Node
from launch.actions import DeclareLaunchArgument
from launch.substitutions import LaunchConfiguration
from launch import LaunchDescription

#
# Testing: ros2 launch ros2_ak8963 ak8963_node_launch.py
#

def generate_launch_description():

    pub_rate_hz = LaunchConfiguration('pub_rate_hz', default='100')

    return LaunchDescription(
        [
            DeclareLaunchArgument('pub_rate_hz', default_value='100', description='Publishing rate in Hz'),

            Node(
                package="ros2_ak8963",
                executable="ak8963_node",
                name="ak8963_node",
                parameters=[{
                    # Use "i2cdetect -y 1". On MPU-9250 boards the AK8963 is only
                    # visible at 0x0C with the MPU's I2C bypass enabled.
                    "i2c_bus": 1,
                    "i2c_address": 0x0C,
                    "sensitivity": "16bit",   # "16bit" (0.15 uT/LSB) or "14bit" (0.6 uT/LSB)
                    "sample_rate_hz": 100,    # 8 or 100
                    "frame_id": "imu_link",
                    "pub_rate_hz": pub_rate_hz,
                }]
            ),
        ]
    )
