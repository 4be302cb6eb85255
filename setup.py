import os
from glob import glob
from setuptools import setup

"""
ROS2 setup file for the ros2_ak8963 package.

The driver itself (ros2_ak8963.ak8963) only needs smbus2 and numpy and can be used
outside ROS; ak8963_node additionally needs rclpy and sensor_msgs from a sourced
ROS2 installation.

"""

package_name = "ros2_ak8963"

setup(
    name=package_name,
    version="0.0.1",
    packages=[package_name, package_name + ".i2c"],
    data_files=[
        ("share/ament_index/resource_index/packages", ["resource/" + package_name]),
        ("share/" + package_name, ["package.xml"]),
        # Include all launch files.
        (os.path.join("share", package_name), glob("launch/*launch.[pxy][yma]*")),
    ],
    install_requires=[
        "setuptools",
        "smbus2",
        "numpy",
    ],
    extras_require={
        "test": ["pytest"],
    },
    zip_safe=True,
    maintainer="Simon-Pierre Deschênes",
    maintainer_email="simon-pierre.deschenes.1@ulaval.ca",
    description="Driver for the AK8963 magnetometer",
    license="BSD-2.0",
    entry_points={
        "console_scripts": [
            "ak8963_node = ros2_ak8963.ak8963_node:main",
        ],
    },
)
