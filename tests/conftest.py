"""Shared robot descriptions and mesh files for the test suite."""

import pytest
import trimesh


# root -> a (revolute about Z) -> b (fixed, 1m along X)
CHAIN_URDF = """<?xml version="1.0"?>
<robot name="chain">
  <link name="root"/>
  <link name="a">
    <visual>
      <origin xyz="0 0 0.05" rpy="0 0 0"/>
      <geometry><box size="0.1 0.1 0.1"/></geometry>
    </visual>
  </link>
  <link name="b">
    <visual>
      <geometry><sphere radius="0.05"/></geometry>
    </visual>
  </link>
  <joint name="spin" type="revolute">
    <parent link="root"/>
    <child link="a"/>
    <origin xyz="0 0 0.5" rpy="0 0 0"/>
    <axis xyz="0 0 1"/>
    <limit lower="-3.2" upper="3.2" effort="10" velocity="1"/>
  </joint>
  <joint name="weld" type="fixed">
    <parent link="a"/>
    <child link="b"/>
    <origin xyz="1 0 0" rpy="0 0 0"/>
  </joint>
</robot>
"""

# a branching arm declared out of order, with one mesh link
ARM_URDF = """<?xml version="1.0"?>
<robot name="arm">
  <material name="blue">
    <color rgba="0 0 1 1"/>
  </material>
  <link name="gripper">
    <visual>
      <geometry><box size="0.02 0.05 0.02"/></geometry>
      <material name="blue"/>
    </visual>
  </link>
  <joint name="wrist" type="continuous">
    <parent link="forearm"/>
    <child link="gripper"/>
    <origin xyz="0 0 0.3" rpy="0 1.5707963267948966 0"/>
    <axis xyz="0 1 0"/>
  </joint>
  <link name="base_link">
    <visual>
      <geometry><mesh filename="package://arm_description/meshes/base.stl"/></geometry>
    </visual>
    <collision>
      <geometry><mesh filename="meshes/missing_collision.stl"/></geometry>
    </collision>
  </link>
  <link name="upper">
    <visual>
      <origin xyz="0 0 0.2" rpy="0 0 0"/>
      <geometry><cylinder radius="0.04" length="0.4"/></geometry>
      <material name="">
        <color rgba="1 0 0 1"/>
      </material>
    </visual>
  </link>
  <link name="forearm">
    <visual>
      <geometry><mesh filename="meshes/forearm.stl" scale="2 2 2"/></geometry>
    </visual>
  </link>
  <link name="sensor"/>
  <joint name="shoulder" type="revolute">
    <parent link="base_link"/>
    <child link="upper"/>
    <origin xyz="0 0 0.1" rpy="0 0 0.3"/>
    <axis xyz="0 1 0"/>
    <limit lower="-1.5" upper="1.5" effort="50" velocity="2"/>
  </joint>
  <joint name="elbow" type="prismatic">
    <parent link="upper"/>
    <child link="forearm"/>
    <origin xyz="0 0 0.4" rpy="0.2 0 0"/>
    <axis xyz="0 0 1"/>
    <limit lower="0" upper="0.25" effort="20" velocity="0.5"/>
  </joint>
  <joint name="mount" type="fixed">
    <parent link="base_link"/>
    <child link="sensor"/>
    <origin xyz="0.1 0 0.05" rpy="0 0 0"/>
  </joint>
</robot>
"""


def unit_box():
    return trimesh.creation.box(extents=[1.0, 1.0, 1.0])


@pytest.fixture
def chain_urdf():
    return CHAIN_URDF


@pytest.fixture
def arm_urdf():
    return ARM_URDF


@pytest.fixture
def arm_dir(tmp_path):
    """
    An `arm_description` package on disk:

        arm_description/urdf/arm.urdf
        arm_description/meshes/base.stl
        arm_description/urdf/meshes/forearm.stl
    """
    package = tmp_path / 'arm_description'
    (package / 'urdf' / 'meshes').mkdir(parents=True)
    (package / 'meshes').mkdir()
    unit_box().export(str(package / 'meshes' / 'base.stl'))
    unit_box().export(str(package / 'urdf' / 'meshes' / 'forearm.stl'))
    path = package / 'urdf' / 'arm.urdf'
    path.write_text(ARM_URDF)
    return path
