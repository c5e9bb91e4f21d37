"""
articulate
------------

Load URDF robot descriptions into a validated kinematic tree
with trimesh geometry, and keep every link's world transform
in step with the joint state.
"""
from . import exceptions
from . import config
from . import link
from . import joint
from . import chain
from . import geometry
from . import kinematics
from . import scene
from . import robot
from . import exchange

from .exchange import load_urdf, parse_urdf
from .chain import build_tree, KinematicTree
from .config import LoadConfig
from .kinematics import ForwardKinematics, JointState
from .robot import RobotModel
from .scene import SceneBinder, TrimeshRenderer

__version__ = '0.1.0'
__all__ = ['load_urdf',
           'parse_urdf',
           'build_tree',
           'KinematicTree',
           'LoadConfig',
           'ForwardKinematics',
           'JointState',
           'RobotModel',
           'SceneBinder',
           'TrimeshRenderer']
